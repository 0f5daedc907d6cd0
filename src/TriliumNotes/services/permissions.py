"""Access permission gate for tool operations."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable

from TriliumNotes.core.errors import PermissionDeniedError

READ = "READ"
WRITE = "WRITE"
KNOWN_PERMISSIONS = frozenset({READ, WRITE})


@dataclass(frozen=True, slots=True)
class PermissionChecker:
    """Checks operations against the configured permission set."""

    permissions: frozenset[str]

    @classmethod
    def from_names(cls, names: Iterable[str]) -> PermissionChecker:
        return cls(frozenset(name.strip().upper() for name in names if name.strip()))

    def has_permission(self, permission: str) -> bool:
        return permission in self.permissions

    def require(self, permission: str, action: str) -> None:
        """Raise unless `permission` is granted.

        Args:
            permission: READ or WRITE.
            action: Human-readable action used in the error, e.g. ``search notes``.

        Raises:
            PermissionDeniedError: If the permission is missing.
        """
        if not self.has_permission(permission):
            raise PermissionDeniedError(f"Permission denied: Not authorized to {action}.")
