"""Structured search request passed from the tool layer to the compiler.

The criteria list is ordered: the `logic` on item *i* is the connector between
item *i* and item *i+1*. Each criteria variant is its own frozen dataclass, so
the compiler can match on the concrete type instead of a free-form tag.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping, Sequence, Union

from TriliumNotes.core.errors import ValidationError


EXISTS = "exists"
NOT_EXISTS = "not_exists"


class Logic(str, Enum):
    """Boolean connector between one criteria item and the next."""

    AND = "AND"
    OR = "OR"


class HierarchyKind(str, Enum):
    """Which part of the tree below a reference note to match."""

    CHILDREN = "children"
    DESCENDANTS = "descendants"


@dataclass(frozen=True, slots=True)
class LabelCriteria:
    """Condition on a label (`#name`)."""

    property: str
    operator: str = EXISTS
    value: str | None = None
    logic: Logic = Logic.AND


@dataclass(frozen=True, slots=True)
class RelationCriteria:
    """Condition on a relation (`~name`), optionally through a property path."""

    property: str
    operator: str = EXISTS
    value: str | None = None
    logic: Logic = Logic.AND


@dataclass(frozen=True, slots=True)
class NotePropertyCriteria:
    """Condition on a system property such as `title` or `dateCreated`."""

    property: str
    operator: str = EXISTS
    value: str | None = None
    logic: Logic = Logic.AND


@dataclass(frozen=True, slots=True)
class FulltextCriteria:
    """Free-text token passed to the engine without operator semantics."""

    property: str
    operator: str = EXISTS
    value: str | None = None
    logic: Logic = Logic.AND

    @property
    def token(self) -> str:
        return self.value if self.value else self.property


SearchCriteria = Union[LabelCriteria, RelationCriteria, NotePropertyCriteria, FulltextCriteria]

_VARIANTS: dict[str, type] = {
    "label": LabelCriteria,
    "relation": RelationCriteria,
    "noteProperty": NotePropertyCriteria,
    "fulltext": FulltextCriteria,
}


@dataclass(frozen=True, slots=True)
class HierarchySpec:
    """Restrict matches to the children or descendants of one note."""

    kind: HierarchyKind
    reference_note_id: str


@dataclass(frozen=True, slots=True)
class SearchRequest:
    """Everything the compiler needs for one search.

    Attributes:
        text: Optional free-text token placed first in the query.
        criteria: Ordered criteria list.
        hierarchy: Optional children/descendants restriction.
        limit: Optional positive result cap.
        order_by: Optional ordering such as ``note.dateModified desc``.
    """

    text: str | None = None
    criteria: Sequence[SearchCriteria] = ()
    hierarchy: HierarchySpec | None = None
    limit: int | None = None
    order_by: str | None = None


def parse_logic(value: Any) -> Logic:
    """Parse a logic connector; an omitted connector means AND."""
    if value is None:
        return Logic.AND
    if isinstance(value, Logic):
        return value
    try:
        return Logic(str(value).strip().upper())
    except ValueError:
        raise ValidationError(
            f"Invalid logic operator: {value}. Must be 'AND' or 'OR'",
            property_name="logic",
            value=value,
        ) from None


def parse_criteria(raw: Mapping[str, Any]) -> SearchCriteria:
    """Build one criteria item from a tool-argument mapping.

    Accepts ``type`` or ``variant`` for the variant key and ``op`` or
    ``operator`` for the operator. Operators are not checked here: an unknown
    operator compiles to nothing rather than failing the whole request.

    Raises:
        ValidationError: If the mapping shape or the variant is invalid.
    """
    if not isinstance(raw, Mapping):
        raise ValidationError("Each search criteria item must be an object", property_name="searchCriteria")

    prop = raw.get("property")
    if not isinstance(prop, str) or not prop.strip():
        raise ValidationError(
            "Search criteria 'property' must be a non-empty string",
            property_name="property",
            value=prop,
        )

    variant = raw.get("type", raw.get("variant"))
    cls = _VARIANTS.get(str(variant)) if variant is not None else None
    if cls is None:
        raise ValidationError(
            f"Invalid search criteria type: {variant}. Must be one of: {', '.join(_VARIANTS)}",
            property_name="type",
            value=variant,
        )

    operator = raw.get("op", raw.get("operator"))
    value = raw.get("value")
    if value is not None and not isinstance(value, str):
        value = str(value)
    return cls(
        property=prop.strip(),
        operator=str(operator).strip() if operator is not None else EXISTS,
        value=value,
        logic=parse_logic(raw.get("logic")),
    )


def parse_hierarchy(kind: Any, reference_note_id: Any) -> HierarchySpec | None:
    """Parse optional hierarchy arguments; both or neither must be given."""
    if kind is None and reference_note_id is None:
        return None
    try:
        parsed_kind = HierarchyKind(str(kind))
    except ValueError:
        raise ValidationError(
            f"Invalid hierarchy type: {kind}. Must be 'children' or 'descendants'",
            property_name="hierarchy_type",
            value=kind,
        ) from None
    if not isinstance(reference_note_id, str) or not reference_note_id.strip():
        raise ValidationError("parent_note_id is required for hierarchy search", property_name="parent_note_id")
    return HierarchySpec(kind=parsed_kind, reference_note_id=reference_note_id.strip())


def parse_search_request(
    *,
    text: str | None = None,
    search_criteria: Sequence[Mapping[str, Any]] | None = None,
    hierarchy_type: str | None = None,
    parent_note_id: str | None = None,
    limit: int | None = None,
    order_by: str | None = None,
) -> SearchRequest:
    """Build a `SearchRequest` from loosely typed tool arguments.

    Raises:
        ValidationError: On malformed criteria, hierarchy or limit.
    """
    if limit is not None and (isinstance(limit, bool) or not isinstance(limit, int) or limit < 1):
        raise ValidationError("Limit must be at least 1", property_name="limit", value=limit)
    criteria = tuple(parse_criteria(item) for item in (search_criteria or ()))
    return SearchRequest(
        text=text.strip() if text and text.strip() else None,
        criteria=criteria,
        hierarchy=parse_hierarchy(hierarchy_type, parent_note_id),
        limit=limit,
        order_by=order_by.strip() if order_by and order_by.strip() else None,
    )
