"""ETAPI JSON parser.

Maps ETAPI note and attribute payloads into the internal models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from dateutil import parser as dt_parser

from TriliumNotes.core.models import Note, NoteAttribute


def _parse_dt(dt: Any) -> datetime | None:
    """Parse an ETAPI timestamp such as ``2024-03-01 10:20:30.123+0100``.

    Returns:
        Parsed datetime, or None when input is empty or unparsable.
    """
    if not dt or not isinstance(dt, str):
        return None
    try:
        return dt_parser.parse(dt)
    except (ValueError, OverflowError):
        return None


def _str_list(value: Any) -> tuple[str, ...]:
    if not isinstance(value, list):
        return ()
    return tuple(str(item) for item in value if item)


def parse_attribute(payload: Mapping[str, Any]) -> NoteAttribute:
    """Parse one ETAPI attribute object."""
    position = payload.get("position", 10)
    return NoteAttribute(
        type=str(payload.get("type", "")),
        name=str(payload.get("name", "")),
        value=str(payload.get("value") or ""),
        position=position if isinstance(position, int) else 10,
        is_inheritable=bool(payload.get("isInheritable", False)),
        attribute_id=payload.get("attributeId"),
        note_id=payload.get("noteId"),
    )


def parse_note(payload: Mapping[str, Any]) -> Note:
    """Parse one ETAPI note object."""
    attributes = payload.get("attributes")
    return Note(
        note_id=str(payload.get("noteId", "")),
        title=str(payload.get("title") or ""),
        type=str(payload.get("type") or ""),
        mime=str(payload.get("mime") or ""),
        is_protected=bool(payload.get("isProtected", False)),
        blob_id=payload.get("blobId"),
        date_created=_parse_dt(payload.get("dateCreated")),
        date_modified=_parse_dt(payload.get("dateModified")),
        utc_date_created=_parse_dt(payload.get("utcDateCreated")),
        utc_date_modified=_parse_dt(payload.get("utcDateModified")),
        parent_note_ids=_str_list(payload.get("parentNoteIds")),
        child_note_ids=_str_list(payload.get("childNoteIds")),
        attributes=tuple(
            parse_attribute(item) for item in attributes if isinstance(item, Mapping)
        )
        if isinstance(attributes, list)
        else (),
    )


def parse_search_results(payload: Any) -> list[Note]:
    """Parse the ``results`` array of a ``GET /notes`` response."""
    results: Sequence[Any] = payload.get("results", []) if isinstance(payload, Mapping) else []
    if not isinstance(results, list):
        return []
    return [parse_note(item) for item in results if isinstance(item, Mapping)]
