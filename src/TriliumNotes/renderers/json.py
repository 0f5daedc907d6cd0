"""JSON output renderers.

Renders notes and service results into JSON-serializable objects using the
ETAPI field names, so tool clients see the same shape ETAPI documents.
"""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Iterable

from TriliumNotes.core.models import AttributeResult, Note, NoteAttribute, NoteDetails


def format_timestamp(value: datetime | None) -> str | None:
    """Format a timestamp the way ETAPI prints it (millisecond precision)."""
    if value is None:
        return None
    return value.isoformat(sep=" ", timespec="milliseconds")


def render_attribute(attribute: NoteAttribute) -> dict[str, Any]:
    d: dict[str, Any] = {
        "type": attribute.type,
        "name": attribute.name,
        "value": attribute.value,
        "position": attribute.position,
        "isInheritable": attribute.is_inheritable,
    }
    if attribute.attribute_id:
        d["attributeId"] = attribute.attribute_id
    return d


def render_json(notes: Iterable[Note]) -> list[dict[str, Any]]:
    """Render notes trimmed to the fields useful in search results.

    Args:
        notes: Iterable of notes.

    Returns:
        A list of dicts with noteId/title/type/mime/isProtected/dates/attributes.
    """
    return [
        {
            "noteId": note.note_id,
            "title": note.title,
            "type": note.type,
            "mime": note.mime,
            "isProtected": note.is_protected,
            "dateCreated": format_timestamp(note.date_created),
            "dateModified": format_timestamp(note.date_modified),
            "attributes": [render_attribute(attr) for attr in note.attributes],
        }
        for note in notes
    ]


def render_note_details(details: NoteDetails) -> dict[str, Any]:
    """Render full note metadata, the content hash and optional content."""
    note = details.note
    d: dict[str, Any] = {
        "noteId": note.note_id,
        "title": note.title,
        "type": note.type,
        "mime": note.mime,
        "isProtected": note.is_protected,
        "blobId": note.blob_id,
        "contentHash": details.content_hash,
        "dateCreated": format_timestamp(note.date_created),
        "dateModified": format_timestamp(note.date_modified),
        "utcDateCreated": format_timestamp(note.utc_date_created),
        "utcDateModified": format_timestamp(note.utc_date_modified),
        "parentNoteIds": list(note.parent_note_ids),
        "childNoteIds": list(note.child_note_ids),
        "attributes": [render_attribute(attr) for attr in note.attributes],
    }
    if details.content is not None:
        d["content"] = details.content
    return d


def render_attribute_result(result: AttributeResult) -> dict[str, Any]:
    d: dict[str, Any] = {
        "success": result.success,
        "message": result.message,
        "attributes": [render_attribute(attr) for attr in result.attributes],
    }
    if result.errors:
        d["errors"] = list(result.errors)
    return d


def dumps(payload: Any) -> str:
    """Serialize a rendered payload as indented, non-ASCII-escaped JSON."""
    return json.dumps(payload, ensure_ascii=False, indent=2)
