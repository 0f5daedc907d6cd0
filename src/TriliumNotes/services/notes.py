"""Note CRUD service over ETAPI."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Sequence

from TriliumNotes.core.errors import EtapiError, ValidationError
from TriliumNotes.core.models import (
    CREATABLE_NOTE_TYPES,
    CreateResult,
    NoteAttribute,
    NoteDetails,
    UpdateResult,
)
from TriliumNotes.core.query import HierarchyKind, HierarchySpec, NotePropertyCriteria, SearchRequest
from TriliumNotes.etapi.parser import parse_note, parse_search_results
from TriliumNotes.query import compile_search_query
from TriliumNotes.services.attributes import attribute_payload, validate_attribute
from TriliumNotes.utils.log import log

if TYPE_CHECKING:
    from TriliumNotes.etapi.client import EtapiClient

MAX_TITLE_LENGTH = 500


def _require_id(value: str | None, name: str) -> str:
    if not isinstance(value, str) or not value.strip():
        raise ValidationError(f"{name} cannot be empty", property_name=name, value=value)
    return value.strip()


def _require_title(title: str | None) -> str:
    cleaned = _require_id(title, "title")
    if len(cleaned) > MAX_TITLE_LENGTH:
        raise ValidationError(
            f"Title is too long. Maximum length is {MAX_TITLE_LENGTH} characters",
            property_name="title",
        )
    return cleaned


@dataclass(slots=True)
class NoteService:
    """Application service for note create/read/update/delete."""

    client: EtapiClient

    def create_note(
        self,
        *,
        parent_note_id: str,
        title: str,
        type: str,
        content: str = "",
        mime: str | None = None,
        attributes: Sequence[NoteAttribute] = (),
        force_create: bool = False,
    ) -> CreateResult:
        """Create a note under a parent, then attach attributes.

        Unless `force_create` is set, an existing child of the parent with the
        same title is reported instead of creating a duplicate.

        Raises:
            ValidationError: On missing or invalid arguments.
            EtapiError: If ETAPI rejects the note itself.
        """
        parent_note_id = _require_id(parent_note_id, "parent_note_id")
        title = _require_title(title)
        if type not in CREATABLE_NOTE_TYPES:
            raise ValidationError(
                f"Invalid note type: {type}. Must be one of: {', '.join(CREATABLE_NOTE_TYPES)}",
                property_name="type",
                value=type,
            )
        for attribute in attributes:
            errors = validate_attribute(attribute)
            if errors:
                raise ValidationError("; ".join(errors), property_name="attributes")

        if not force_create:
            duplicate_id = self._find_child_by_title(parent_note_id, title)
            if duplicate_id:
                log.info("Duplicate title under %s: %s", parent_note_id, duplicate_id)
                return CreateResult(
                    note_id=None,
                    duplicate_note_id=duplicate_id,
                    message=(
                        f"Found existing note with title '{title}' in this folder ({duplicate_id}). "
                        "Update that note, or call create_note again with force_create=true."
                    ),
                )

        payload = {"parentNoteId": parent_note_id, "title": title, "type": type, "content": content}
        if mime:
            payload["mime"] = mime
        response = self.client.create_note(payload)
        note_id = str(response.get("note", {}).get("noteId", ""))
        log.info("Created note %s under %s", note_id, parent_note_id)

        attribute_errors: list[str] = []
        for attribute in attributes:
            try:
                self.client.create_attribute(attribute_payload(note_id, attribute))
            except EtapiError as error:
                attribute_errors.append(f"Failed to create {attribute.type} '{attribute.name}': {error}")
        if attribute_errors:
            log.warning("Note %s created but %d attribute(s) failed", note_id, len(attribute_errors))

        message = f"Created note: {note_id}"
        if attribute_errors:
            message += f" (attributes failed: {'; '.join(attribute_errors)})"
        return CreateResult(note_id=note_id, message=message, attribute_errors=tuple(attribute_errors))

    def get_note(self, note_id: str, *, include_content: bool = True) -> NoteDetails:
        """Fetch note metadata and, optionally, its content."""
        note_id = _require_id(note_id, "note_id")
        note = parse_note(self.client.get_note(note_id))
        if not include_content:
            return NoteDetails(note=note)
        return NoteDetails(note=note, content=self.client.get_note_content(note_id))

    def update_note(
        self,
        *,
        note_id: str,
        expected_hash: str,
        title: str | None = None,
        content: str | None = None,
        type: str | None = None,
        mime: str | None = None,
        revision: bool = True,
    ) -> UpdateResult:
        """Update title and/or content, guarded by the content hash.

        `expected_hash` must equal the note's current ``blobId``; otherwise
        the note was modified by someone else and a conflict is reported
        without changing anything.

        Raises:
            ValidationError: On missing arguments.
            NoteNotFoundError: If the note does not exist.
        """
        note_id = _require_id(note_id, "note_id")
        if not expected_hash:
            raise ValidationError(
                "Missing required parameter 'expected_hash'. Call get_note first to retrieve the current "
                "content hash before updating.",
                property_name="expected_hash",
            )
        if title is None and content is None:
            raise ValidationError(
                "Either 'title' or 'content' (or both) must be provided for update operation",
                property_name="title",
            )
        if title is not None:
            title = _require_title(title)

        current = parse_note(self.client.get_note(note_id))
        if current.blob_id != expected_hash:
            return UpdateResult(
                note_id=note_id,
                conflict=True,
                message=(
                    f"CONFLICT: Note has been modified by another user. Current blobId: {current.blob_id}, "
                    f"expected: {expected_hash}. Please get the latest note content and retry."
                ),
            )

        revision_created = self._snapshot(note_id) if revision and content is not None else False

        changes = {key: value for key, value in (("title", title), ("type", type), ("mime", mime)) if value}
        if changes:
            self.client.patch_note(note_id, changes)
        if content is not None:
            self.client.put_note_content(note_id, content)

        revision_msg = " (revision created)" if revision_created else " (no revision)"
        return UpdateResult(
            note_id=note_id,
            message=f"Note {note_id} updated successfully{revision_msg}",
            revision_created=revision_created,
        )

    def append_note(self, *, note_id: str, content: str, revision: bool = False) -> UpdateResult:
        """Append content to the end of a note."""
        note_id = _require_id(note_id, "note_id")
        if not content:
            raise ValidationError("content is required for append operation", property_name="content")

        revision_created = self._snapshot(note_id) if revision else False
        current = self.client.get_note_content(note_id)
        self.client.put_note_content(note_id, current + content)

        revision_msg = " (revision created)" if revision_created else " (no revision)"
        return UpdateResult(
            note_id=note_id,
            message=f"Content appended to note {note_id} successfully{revision_msg}",
            revision_created=revision_created,
        )

    def delete_note(self, note_id: str) -> str:
        note_id = _require_id(note_id, "note_id")
        self.client.delete_note(note_id)
        log.info("Deleted note %s", note_id)
        return f"Deleted note: {note_id}"

    def _snapshot(self, note_id: str) -> bool:
        """Save a revision; a failed snapshot does not block the update."""
        try:
            self.client.create_revision(note_id)
        except EtapiError as error:
            log.warning("Failed to create revision for note %s: %s", note_id, error)
            return False
        return True

    def _find_child_by_title(self, parent_note_id: str, title: str) -> str | None:
        request = SearchRequest(
            criteria=(NotePropertyCriteria("title", "=", title),),
            hierarchy=HierarchySpec(HierarchyKind.CHILDREN, parent_note_id),
        )
        compiled = compile_search_query(request, logger=log)
        params = {"search": compiled.query, "fastSearch": "false", "includeArchivedNotes": "true"}
        for note in parse_search_results(self.client.search_notes(params)):
            if note.title == title:
                return note.note_id
        return None
