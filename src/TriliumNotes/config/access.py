"""Access domain configuration (tool permissions)."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from TriliumNotes.config.common import expect_str_list, get_optional_value, get_section, read_env
from TriliumNotes.services.permissions import KNOWN_PERMISSIONS, READ


@dataclass(frozen=True, slots=True)
class AccessConfig:
    """Permissions granted to the tool client."""

    permissions: tuple[str, ...]


def load_access(raw: Mapping[str, Any]) -> AccessConfig:
    """Load access config; ``PERMISSIONS`` (``READ;WRITE``) overrides the file."""
    section = get_section(raw, "access", required=False)
    value: Any = read_env("PERMISSIONS") or get_optional_value(section, "permissions", [READ])
    items = expect_str_list(value, "access.permissions")
    normalized: list[str] = []
    for item in items:
        name = item.strip().upper()
        if name and name not in normalized:
            normalized.append(name)
    return AccessConfig(permissions=tuple(normalized))


def check_access(config: AccessConfig) -> None:
    unknown = set(config.permissions) - KNOWN_PERMISSIONS
    if unknown:
        raise ValueError(f"access.permissions has unknown permissions: {sorted(unknown)}")
    if not config.permissions:
        raise ValueError("access.permissions must include at least one permission")
