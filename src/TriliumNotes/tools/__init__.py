"""Tool-calling surface for TriliumNotes."""

from __future__ import annotations

from TriliumNotes.tools.server import READ_TOOLS, WRITE_TOOLS, NoteTools, build_server

__all__ = ["NoteTools", "READ_TOOLS", "WRITE_TOOLS", "build_server"]
