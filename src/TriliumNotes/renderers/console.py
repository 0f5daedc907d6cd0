"""Plain-text renderers for terminal and tool output."""

from __future__ import annotations

import json
from datetime import datetime, timezone
from typing import Any, Iterable, Mapping

from TriliumNotes.core.models import Note, ResolveResult
from TriliumNotes.renderers.json import format_timestamp

_TYPE_INDICATORS = {"book": "/", "code": "*", "search": "?"}


def format_listing_date(value: datetime | None) -> str:
    """Format a creation time as ``YYYY-MM-DD HH:MM`` in UTC."""
    if value is None:
        return "unknown"
    if value.tzinfo is not None:
        value = value.astimezone(timezone.utc)
    return value.strftime("%Y-%m-%d %H:%M")


def type_indicator(note_type: str) -> str:
    return _TYPE_INDICATORS.get(note_type, "")


def render_listing(notes: Iterable[Note]) -> list[str]:
    """Render notes as ``ls -F`` style lines.

    Each line reads ``<created>  <title><indicator> (<noteId>)``, where the
    indicator marks folders (``/``), code notes (``*``) and saved searches (``?``).
    """
    lines: list[str] = []
    for note in notes:
        created = format_listing_date(note.date_created or note.utc_date_created)
        title = note.title or "Untitled"
        lines.append(f"{created}  {title}{type_indicator(note.type)} ({note.note_id or 'unknown'})")
    return lines


def render_summary(count: int) -> str:
    return f"Total: {count} note{'' if count == 1 else 's'}"


def render_search_debug(query: str, params: Mapping[str, Any]) -> str:
    """Render the compiled query and the input arguments for troubleshooting."""
    return (
        "--- Query Debug ---\n"
        f"Built Query: {query}\n"
        f"Input Params: {json.dumps(dict(params), ensure_ascii=False, indent=2, default=str)}\n"
        "--- End Debug ---\n\n"
    )


def render_resolve(result: ResolveResult, note_name: str) -> str:
    """Render a resolve outcome as a short message for the caller."""
    if result.requires_user_choice and result.top_matches:
        choices = "\n".join(
            f"{idx}. {match.title} (ID: {match.note_id}, Type: {match.type}, "
            f"Modified: {format_timestamp(match.date_modified) or 'unknown'})"
            for idx, match in enumerate(result.top_matches, start=1)
        )
        return (
            f'Found {result.matches} matches for "{note_name}". Please choose:\n\n{choices}\n\n'
            "To select: Use the note ID directly, or specify auto_select=true for automatic "
            "selection, or refine your search criteria."
        )
    if result.found and result.note_id:
        return (
            f'Resolved "{note_name}" to Note ID: {result.note_id} '
            f'(Title: "{result.title}", Matches: {result.matches})'
        )
    return f'No notes found matching "{note_name}". Try a different search term or check spelling.'
