from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional, Sequence


NOTE_TYPES = (
    "text",
    "code",
    "render",
    "file",
    "image",
    "search",
    "relationMap",
    "book",
    "noteMap",
    "mermaid",
    "webView",
    "shortcut",
    "doc",
    "contentWidget",
    "launcher",
)

# Types that can be created through the tools; file/image need binary upload.
CREATABLE_NOTE_TYPES = (
    "text",
    "code",
    "render",
    "search",
    "relationMap",
    "book",
    "noteMap",
    "mermaid",
    "webView",
)


@dataclass(frozen=True, slots=True)
class NoteAttribute:
    """A label or relation attached to a note.

    Attributes:
        type: ``label`` or ``relation``.
        name: Attribute name without the ``#``/``~`` sign.
        value: Label value, or target note id for relations.
        position: Ordering position among the note's attributes.
        is_inheritable: Whether child notes inherit the attribute.
        attribute_id: Server-side id; None before creation.
        note_id: Owning note id, when known.
    """

    type: str
    name: str
    value: str = ""
    position: int = 10
    is_inheritable: bool = False
    attribute_id: Optional[str] = None
    note_id: Optional[str] = None


@dataclass(frozen=True, slots=True)
class Note:
    """Note metadata as returned by ETAPI.

    `blob_id` changes whenever the content changes and doubles as the content
    hash for optimistic concurrency checks.
    """

    note_id: str
    title: str
    type: str
    mime: str = ""
    is_protected: bool = False
    blob_id: Optional[str] = None
    date_created: Optional[datetime] = None
    date_modified: Optional[datetime] = None
    utc_date_created: Optional[datetime] = None
    utc_date_modified: Optional[datetime] = None
    parent_note_ids: Sequence[str] = ()
    child_note_ids: Sequence[str] = ()
    attributes: Sequence[NoteAttribute] = ()


@dataclass(frozen=True, slots=True)
class NoteDetails:
    """Note metadata plus optional content."""

    note: Note
    content: Optional[str] = None

    @property
    def content_hash(self) -> Optional[str]:
        return self.note.blob_id


@dataclass(frozen=True, slots=True)
class CreateResult:
    """Outcome of a create request.

    When a note with the same title already exists under the parent and the
    caller did not force creation, nothing is created and `duplicate_note_id`
    is set instead of `note_id`.
    """

    note_id: Optional[str]
    message: str
    duplicate_note_id: Optional[str] = None
    attribute_errors: Sequence[str] = ()


@dataclass(frozen=True, slots=True)
class UpdateResult:
    """Outcome of an update or append request."""

    note_id: str
    message: str
    revision_created: bool = False
    conflict: bool = False


@dataclass(frozen=True, slots=True)
class ResolveMatch:
    note_id: str
    title: str
    type: str
    date_modified: Optional[datetime] = None


@dataclass(frozen=True, slots=True)
class ResolveResult:
    """Outcome of resolving a note title to an id."""

    note_id: Optional[str]
    title: Optional[str]
    found: bool
    matches: int
    requires_user_choice: bool = False
    top_matches: Sequence[ResolveMatch] = ()


@dataclass(frozen=True, slots=True)
class AttributeResult:
    """Outcome of an attribute management operation."""

    success: bool
    message: str
    attributes: Sequence[NoteAttribute] = ()
    errors: Sequence[str] = ()
