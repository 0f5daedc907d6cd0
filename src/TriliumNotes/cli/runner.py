"""Command runner for coordinating CLI execution.

Manages logging configuration, service lifecycle and error handling for
command execution.
"""

from __future__ import annotations

from typing import Protocol

import click

from TriliumNotes.config import AppConfig, require_token
from TriliumNotes.services import Services, create_services
from TriliumNotes.tools import NoteTools, build_server
from TriliumNotes.utils.log import configure_logging, log


class Command(Protocol):
    def execute(self, services: Services) -> None: ...


class CommandRunner:
    """Runs commands against services built from the application config."""

    def __init__(self, config: AppConfig) -> None:
        """Initialize command runner.

        Args:
            config: Application configuration.
        """
        self.config = config

    def run(self, command: Command, action: str) -> None:
        """Execute one command with full resource management.

        Args:
            command: Command to execute.
            action: The CLI command name (e.g. ``search``).

        Raises:
            click.Abort: When the command fails.
        """
        self._configure_logging(action)
        try:
            services = self._create_services()
            try:
                command.execute(services)
            finally:
                services.close()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("%s failed: %s", action.capitalize(), e)
            raise click.Abort from e

    def run_server(self, action: str) -> None:
        """Serve the note tools over stdio until the client disconnects.

        Raises:
            click.Abort: When the server cannot start.
        """
        self._configure_logging(action)
        try:
            services = self._create_services()
            try:
                tools = NoteTools(services, resolve_max_results=self.config.search.resolve_max_results)
                server = build_server(tools)
                log.info("Serving tools for %s", self.config.server.url)
                server.run(transport="stdio")
            finally:
                services.close()
        except Exception as e:  # noqa: BLE001 - cli boundary
            log.error("Server failed: %s", e)
            raise click.Abort from e

    def _configure_logging(self, action: str) -> None:
        configure_logging(
            level=self.config.runtime.level,
            action=action,
            log_to_file=self.config.runtime.to_file,
            log_dir=self.config.runtime.dir,
        )

    def _create_services(self) -> Services:
        require_token(self.config.server)
        return create_services(self.config)
