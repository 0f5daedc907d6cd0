"""Label and relation management for a single note."""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Mapping, Sequence

from TriliumNotes.core.errors import EtapiError, ValidationError
from TriliumNotes.core.models import AttributeResult, NoteAttribute
from TriliumNotes.etapi.parser import parse_attribute, parse_note
from TriliumNotes.utils.log import log

if TYPE_CHECKING:
    from TriliumNotes.etapi.client import EtapiClient

ATTRIBUTE_TYPES = ("label", "relation")
OPERATIONS = ("read", "create", "batch_create", "update", "delete")
WRITE_OPERATIONS = frozenset(OPERATIONS) - {"read"}

_RE_ATTRIBUTE_NAME = re.compile(r"^[^\s#~'\"]+$")


def parse_attribute_arg(raw: Mapping[str, Any]) -> NoteAttribute:
    """Build a `NoteAttribute` from a tool-argument mapping.

    Raises:
        ValidationError: If the mapping is not an object.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Each attribute must be an object", property_name="attributes")
    position = raw.get("position", 10)
    return NoteAttribute(
        type=str(raw.get("type", "")),
        name=str(raw.get("name", "")).strip(),
        value=str(raw.get("value") or ""),
        position=position if isinstance(position, int) and not isinstance(position, bool) else -1,
        is_inheritable=bool(raw.get("is_inheritable", raw.get("isInheritable", False))),
    )


def validate_attribute(attribute: NoteAttribute) -> list[str]:
    """Return validation errors for an attribute; empty when valid."""
    errors: list[str] = []
    if attribute.type not in ATTRIBUTE_TYPES:
        errors.append(f"Invalid attribute type: {attribute.type}. Must be 'label' or 'relation'")
    if not attribute.name:
        errors.append("Attribute name cannot be empty")
    elif not _RE_ATTRIBUTE_NAME.match(attribute.name):
        errors.append(f"Invalid attribute name: '{attribute.name}'")
    if attribute.position < 0:
        errors.append(f"Invalid position: {attribute.position}. Must be a non-negative number")
    if attribute.type == "relation" and not attribute.value:
        errors.append(f"Relation '{attribute.name}' requires a target note id as value")
    return errors


def attribute_payload(note_id: str, attribute: NoteAttribute) -> dict[str, Any]:
    return {
        "noteId": note_id,
        "type": attribute.type,
        "name": attribute.name,
        "value": attribute.value,
        "position": attribute.position,
        "isInheritable": attribute.is_inheritable,
    }


@dataclass(slots=True)
class AttributeService:
    """Reads and mutates the attributes owned by a note."""

    client: EtapiClient

    def manage(self, note_id: str, operation: str, attributes: Sequence[NoteAttribute] = ()) -> AttributeResult:
        """Dispatch one attribute operation.

        Args:
            note_id: Owning note id.
            operation: One of read/create/batch_create/update/delete.
            attributes: Attributes to act on; single-item operations use the first.

        Raises:
            ValidationError: On unknown operation or missing attributes.
            EtapiError: If ETAPI fails for read/single-item operations.
        """
        if not note_id or not note_id.strip():
            raise ValidationError("Note ID cannot be empty", property_name="note_id")
        note_id = note_id.strip()
        if operation not in OPERATIONS:
            raise ValidationError(
                f"Unsupported operation: {operation}. Must be one of: {', '.join(OPERATIONS)}",
                property_name="operation",
                value=operation,
            )
        if operation == "read":
            return self.read(note_id)
        if not attributes:
            raise ValidationError(f"At least one attribute is required for '{operation}'", property_name="attributes")

        match operation:
            case "create":
                return self.create(note_id, attributes[0])
            case "batch_create":
                return self.batch_create(note_id, attributes)
            case "update":
                return self.update(note_id, attributes[0])
            case _:
                return self.delete(note_id, attributes[0])

    def read(self, note_id: str) -> AttributeResult:
        note = parse_note(self.client.get_note(note_id))
        owned = tuple(attr for attr in note.attributes if not attr.note_id or attr.note_id == note_id)
        return AttributeResult(
            success=True,
            message=f"Retrieved {len(owned)} attributes for note {note_id}",
            attributes=owned,
        )

    def create(self, note_id: str, attribute: NoteAttribute) -> AttributeResult:
        errors = validate_attribute(attribute)
        if errors:
            return AttributeResult(success=False, message="Attribute validation failed", errors=tuple(errors))
        created = parse_attribute(self.client.create_attribute(attribute_payload(note_id, attribute)))
        return AttributeResult(
            success=True,
            message=f"Successfully created {attribute.type} '{attribute.name}' on note {note_id}",
            attributes=(created,),
        )

    def batch_create(self, note_id: str, attributes: Sequence[NoteAttribute]) -> AttributeResult:
        """Create several attributes; one failure does not stop the others."""
        created: list[NoteAttribute] = []
        errors: list[str] = []
        for attribute in attributes:
            problems = validate_attribute(attribute)
            if problems:
                errors.append(f"Validation failed for {attribute.type} '{attribute.name}': {', '.join(problems)}")
                continue
            try:
                created.append(parse_attribute(self.client.create_attribute(attribute_payload(note_id, attribute))))
            except EtapiError as error:
                errors.append(f"Failed to create {attribute.type} '{attribute.name}': {error}")

        if errors:
            log.warning("Batch attribute create on %s: %d error(s)", note_id, len(errors))
        if not created:
            return AttributeResult(success=False, message="All attribute creation operations failed", errors=tuple(errors))

        suffix = f" with {len(errors)} errors" if errors else ""
        return AttributeResult(
            success=True,
            message=f"Created {len(created)}/{len(attributes)} attributes successfully{suffix}",
            attributes=tuple(created),
            errors=tuple(errors),
        )

    def update(self, note_id: str, attribute: NoteAttribute) -> AttributeResult:
        """Update value/position of an owned attribute found by type and name.

        Relations cannot change their value through ETAPI; only the position
        is updated for them.
        """
        existing = self._find(note_id, attribute)
        if existing is None:
            return AttributeResult(
                success=False,
                message=f"Attribute {attribute.type} '{attribute.name}' not found on note {note_id}",
                errors=(f"No {attribute.type} named '{attribute.name}'",),
            )
        changes: dict[str, Any] = {"position": attribute.position}
        if attribute.type == "label":
            changes["value"] = attribute.value
        updated = parse_attribute(self.client.patch_attribute(existing.attribute_id or "", changes))
        return AttributeResult(
            success=True,
            message=f"Successfully updated {attribute.type} '{attribute.name}' on note {note_id}",
            attributes=(updated,),
        )

    def delete(self, note_id: str, attribute: NoteAttribute) -> AttributeResult:
        existing = self._find(note_id, attribute)
        if existing is None:
            return AttributeResult(
                success=False,
                message=f"Attribute {attribute.type} '{attribute.name}' not found on note {note_id}",
                errors=(f"No {attribute.type} named '{attribute.name}'",),
            )
        self.client.delete_attribute(existing.attribute_id or "")
        return AttributeResult(
            success=True,
            message=f"Successfully deleted {attribute.type} '{attribute.name}' from note {note_id}",
            attributes=(existing,),
        )

    def _find(self, note_id: str, attribute: NoteAttribute) -> NoteAttribute | None:
        for candidate in self.read(note_id).attributes:
            if candidate.type == attribute.type and candidate.name == attribute.name and candidate.attribute_id:
                return candidate
        return None
