"""Service layer for TriliumNotes.

Provides the note, search and attribute services and a factory that wires
them to one shared ETAPI client.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from TriliumNotes.services.attributes import AttributeService
from TriliumNotes.services.notes import NoteService
from TriliumNotes.services.permissions import PermissionChecker
from TriliumNotes.services.search import SearchResult, SearchService

if TYPE_CHECKING:
    from TriliumNotes.config import AppConfig
    from TriliumNotes.etapi.client import EtapiClient


@dataclass(slots=True)
class Services:
    """All services sharing one client; closing it releases the session."""

    client: EtapiClient
    notes: NoteService
    search: SearchService
    attributes: AttributeService
    permissions: PermissionChecker

    def close(self) -> None:
        self.client.close()


def create_services(config: AppConfig, client: EtapiClient | None = None) -> Services:
    """Create services from configuration.

    Args:
        config: Application configuration.
        client: Optional pre-built client, mainly for tests.

    Returns:
        Wired services.
    """
    if client is None:
        from TriliumNotes.etapi.client import EtapiClient

        client = EtapiClient(
            config.server.url,
            config.server.token,
            timeout=config.server.timeout,
            max_attempts=config.server.max_retries,
        )
    return Services(
        client=client,
        notes=NoteService(client=client),
        search=SearchService(
            client=client,
            include_archived=config.search.include_archived,
            default_limit=config.search.default_limit if config.search.default_limit > 0 else None,
        ),
        attributes=AttributeService(client=client),
        permissions=PermissionChecker.from_names(config.access.permissions),
    )


__all__ = [
    "AttributeService",
    "NoteService",
    "PermissionChecker",
    "SearchResult",
    "SearchService",
    "Services",
    "create_services",
]
