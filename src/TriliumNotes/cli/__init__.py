"""CLI package for TriliumNotes command orchestration.

Separates option parsing (`ui`), command logic (`commands`) and lifecycle
management (`runner`).
"""

from __future__ import annotations

__all__ = ["CommandRunner", "main"]

from TriliumNotes.cli.runner import CommandRunner
from TriliumNotes.cli.ui import cli


def main() -> None:
    """Run TriliumNotes CLI.

    Entry point referenced by console script in pyproject.toml.
    """
    cli()
