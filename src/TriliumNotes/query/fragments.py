"""Criteria fragment builders.

Each builder turns one criteria item into a single token of the Trilium
search grammar, or into ``""`` when the item is malformed and must be dropped.
Only date-valued note properties can raise (see `validate_iso_date`).

Operator mapping

- exists / not_exists   -> ``#name`` / ``#!name`` (``~`` for relations)
- = != >= <= > <        -> ``<lhs> <op> '<value>'``
- contains              -> ``*=*``
- starts_with           -> ``=*``
- ends_with             -> ``*=``
- regex                 -> ``%=``
"""

from __future__ import annotations

import re
from typing import Final

from TriliumNotes.core.query import (
    EXISTS,
    NOT_EXISTS,
    FulltextCriteria,
    HierarchyKind,
    HierarchySpec,
    LabelCriteria,
    NotePropertyCriteria,
    RelationCriteria,
    SearchCriteria,
)
from TriliumNotes.query.dates import validate_iso_date


VALUE_OPERATORS: Final[dict[str, str]] = {
    "=": "=",
    "!=": "!=",
    ">=": ">=",
    "<=": "<=",
    ">": ">",
    "<": "<",
    "contains": "*=*",
    "starts_with": "=*",
    "ends_with": "*=",
    "regex": "%=",
}

# Note properties additionally accept `not_equal`.
NOTE_PROPERTY_OPERATORS: Final[dict[str, str]] = {**VALUE_OPERATORS, "not_equal": "!="}

BOOLEAN_PROPERTIES: Final[frozenset[str]] = frozenset({"isArchived", "isProtected"})
NUMERIC_PROPERTIES: Final[frozenset[str]] = frozenset(
    {
        "labelCount",
        "ownedLabelCount",
        "attributeCount",
        "ownedAttributeCount",
        "relationCount",
        "ownedRelationCount",
        "targetRelationCount",
        "parentCount",
        "childrenCount",
        "contentSize",
        "revisionCount",
    }
)
DATE_PROPERTIES: Final[frozenset[str]] = frozenset(
    {"dateCreated", "dateModified", "utcDateCreated", "utcDateModified"}
)
STRING_PROPERTIES: Final[frozenset[str]] = frozenset({"title", "content", "type", "mime", "noteId"})

_HIERARCHY_ROOTS: Final[frozenset[str]] = frozenset({"parents", "children", "ancestors"})
_RE_PATH_SEGMENT = re.compile(r"^[A-Za-z_][A-Za-z0-9_]*$")
_RE_NUMBER = re.compile(r"^-?\d+(?:\.\d+)?$")


def escape_value(value: str) -> str:
    """Escape backslashes and single quotes for use inside a quoted literal."""
    return value.replace("\\", "\\\\").replace("'", "\\'")


def quote(value: str) -> str:
    return f"'{escape_value(value)}'"


def build_fragment(criteria: SearchCriteria) -> str:
    """Compile one criteria item into a grammar token.

    Args:
        criteria: A single criteria item.

    Returns:
        The token, or an empty string when the item is dropped.

    Raises:
        ValidationError: For a date property with a non-ISO or impossible date.
    """
    match criteria:
        case LabelCriteria():
            return build_attribute_fragment("#", criteria.property, criteria.operator, criteria.value)
        case RelationCriteria():
            return build_attribute_fragment("~", criteria.property, criteria.operator, criteria.value)
        case NotePropertyCriteria():
            return build_note_property_fragment(criteria.property, criteria.operator, criteria.value)
        case FulltextCriteria():
            return build_fulltext_fragment(criteria.token)
    raise TypeError(f"Unsupported criteria type: {type(criteria).__name__}")


def build_attribute_fragment(prefix: str, name: str, operator: str, value: str | None) -> str:
    """Compile a label (``#``) or relation (``~``) condition.

    Relations cannot be compared by value directly, so a relation without a
    property path is compared through the related note's title.
    """
    name = escape_value(name.strip())
    if not name:
        return ""

    if operator == EXISTS:
        return f"{prefix}{name}"
    if operator == NOT_EXISTS:
        return f"{prefix}!{name}"

    token = VALUE_OPERATORS.get(operator)
    if token is None or not value:
        return ""

    if prefix == "~" and "." not in name:
        name = f"{name}.title"
    return f"{prefix}{name} {token} {quote(value)}"


def note_property_address(prop: str) -> str | None:
    """Map a property key to its ``note.*`` address, or None when unknown."""
    if prop in BOOLEAN_PROPERTIES or prop in NUMERIC_PROPERTIES or prop in DATE_PROPERTIES or prop in STRING_PROPERTIES:
        return f"note.{prop}"

    segments = prop.split(".")
    if len(segments) >= 2 and segments[0] in _HIERARCHY_ROOTS and all(_RE_PATH_SEGMENT.match(s) for s in segments):
        return f"note.{prop}"
    return None


def build_note_property_fragment(prop: str, operator: str, value: str | None) -> str:
    """Compile a ``note.*`` system property condition.

    Value formatting depends on the property class: booleans must be the
    literal ``true``/``false``, numbers are emitted bare, dates are validated
    and quoted, everything else is quoted and escaped.
    """
    address = note_property_address(prop)
    token = NOTE_PROPERTY_OPERATORS.get(operator)
    if address is None or token is None or not value:
        return ""

    if prop in BOOLEAN_PROPERTIES:
        if value not in ("true", "false"):
            return ""
        rendered = value
    elif prop in NUMERIC_PROPERTIES:
        if not _RE_NUMBER.match(value.strip()):
            return ""
        rendered = value.strip()
    elif prop in DATE_PROPERTIES:
        rendered = quote(validate_iso_date(value, prop))
    else:
        rendered = quote(value)
    return f"{address} {token} {rendered}"


def build_hierarchy_fragment(spec: HierarchySpec) -> str:
    """Compile a children/descendants restriction."""
    ref = quote(spec.reference_note_id)
    match spec.kind:
        case HierarchyKind.CHILDREN:
            return f"note.parents.noteId = {ref}"
        case HierarchyKind.DESCENDANTS:
            return f"note.ancestors.noteId = {ref}"
    raise TypeError(f"Unsupported hierarchy kind: {spec.kind}")


def build_fulltext_fragment(token: str) -> str:
    """Free text is passed through untouched."""
    return token
