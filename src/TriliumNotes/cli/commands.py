"""Command implementations for the TriliumNotes CLI.

Each command receives wired services and writes its result with
`click.echo`; CLI option parsing stays in `ui.py`.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

import click

from TriliumNotes.core.errors import ValidationError
from TriliumNotes.core.query import (
    EXISTS,
    NOT_EXISTS,
    LabelCriteria,
    Logic,
    NotePropertyCriteria,
    RelationCriteria,
    SearchCriteria,
    SearchRequest,
    parse_logic,
)
from TriliumNotes.renderers import dumps, render_json, render_listing, render_note_details, render_summary
from TriliumNotes.services import Services
from TriliumNotes.utils.log import log

_CRITERIA_TYPES = {
    "label": LabelCriteria,
    "relation": RelationCriteria,
    "noteProperty": NotePropertyCriteria,
}


def parse_criteria_option(variant: str, raw: str) -> SearchCriteria:
    """Parse a ``name[:op[:value[:logic]]]`` command-line criteria item.

    The value may itself contain colons (ISO timestamps); a trailing ``AND``
    or ``OR`` segment is taken as the logic connector. Existence operators
    take no value, so ``book:exists:OR`` reads the third segment as logic.

    Raises:
        ValidationError: If the name is empty or the variant is unknown.
    """
    cls = _CRITERIA_TYPES.get(variant)
    if cls is None:
        raise ValidationError(f"Unknown criteria type: {variant}", property_name="type", value=variant)

    parts = raw.split(":")
    name = parts[0].strip()
    if not name:
        raise ValidationError(f"Criteria name cannot be empty: '{raw}'", property_name="property", value=raw)
    if len(parts) == 1:
        return cls(property=name)

    logic = Logic.AND
    trailing = parts[-1].strip().upper()
    if trailing in ("AND", "OR") and (len(parts) >= 4 or (len(parts) == 3 and parts[1].strip() in (EXISTS, NOT_EXISTS))):
        logic = parse_logic(parts.pop())
    operator = parts[1].strip() or EXISTS
    value = ":".join(parts[2:]) if len(parts) > 2 else None
    return cls(property=name, operator=operator, value=value, logic=logic)


@dataclass(slots=True)
class SearchCommand:
    """Run one search and print results as a listing or JSON."""

    request: SearchRequest
    as_json: bool = False

    def execute(self, services: Services) -> None:
        result = services.search.search(self.request)
        log.info("Query: %s", result.query)
        if self.as_json:
            click.echo(dumps(render_json(result.notes)))
            return
        for line in render_listing(result.notes):
            click.echo(line)
        click.echo(render_summary(len(result.notes)))


@dataclass(slots=True)
class GetCommand:
    note_id: str
    include_content: bool = True

    def execute(self, services: Services) -> None:
        details = services.notes.get_note(self.note_id, include_content=self.include_content)
        click.echo(dumps(render_note_details(details)))


@dataclass(slots=True)
class DeleteCommand:
    note_ids: Sequence[str]

    def execute(self, services: Services) -> None:
        for note_id in self.note_ids:
            click.echo(services.notes.delete_note(note_id))


@dataclass(slots=True)
class PingCommand:
    """Check connectivity and the token by reading the server's app info."""

    def execute(self, services: Services) -> None:
        info = services.client.app_info()
        click.echo(
            f"Connected to Trilium {info.get('appVersion', 'unknown')} "
            f"(db {info.get('dbVersion', '?')}, sync {info.get('syncVersion', '?')})"
        )
