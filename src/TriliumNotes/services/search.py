"""Search, hierarchy listing and title resolution over ETAPI."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timezone
from typing import TYPE_CHECKING, Sequence

from TriliumNotes.core.errors import ValidationError
from TriliumNotes.core.models import Note, ResolveMatch, ResolveResult
from TriliumNotes.core.query import (
    HierarchyKind,
    HierarchySpec,
    Logic,
    NotePropertyCriteria,
    RelationCriteria,
    SearchCriteria,
    SearchRequest,
)
from TriliumNotes.etapi.parser import parse_search_results
from TriliumNotes.query import CompiledQuery, compile_search_query
from TriliumNotes.utils.log import log

if TYPE_CHECKING:
    from TriliumNotes.etapi.client import EtapiClient

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)

# Built-in template note titles keyed by the hint a caller may pass.
TEMPLATE_TITLES: dict[str, str] = {
    "calendar": "Calendar",
    "board": "Board",
    "text snippet": "Text Snippet",
    "grid view": "Grid View",
    "list view": "List View",
    "table": "Table",
    "geo map": "Geo Map",
}


@dataclass(frozen=True, slots=True)
class SearchResult:
    """Notes returned for one compiled query."""

    query: str
    notes: Sequence[Note]
    dropped: int = 0


@dataclass(slots=True)
class SearchService:
    """Application service that runs compiled searches against ETAPI."""

    client: EtapiClient
    include_archived: bool = True
    default_limit: int | None = None

    def search(self, request: SearchRequest) -> SearchResult:
        """Compile and run a structured search.

        Args:
            request: Structured search request.

        Returns:
            Matching notes plus the compiled query.

        Raises:
            ValidationError: If nothing searchable was supplied, or a date
                criteria value is invalid.
        """
        if request.limit is None and self.default_limit:
            request = SearchRequest(
                text=request.text,
                criteria=request.criteria,
                hierarchy=request.hierarchy,
                limit=self.default_limit,
                order_by=request.order_by,
            )

        compiled = compile_search_query(request, logger=log)
        if not compiled.query.strip():
            raise ValidationError("At least one search parameter must be provided")
        if compiled.dropped:
            log.warning("Search ignored %d malformed criteria item(s)", compiled.dropped)

        notes = self._run(compiled, fast_search=_is_text_only(request))
        log.info("Search returned %d notes", len(notes))
        return SearchResult(query=compiled.query, notes=notes, dropped=compiled.dropped)

    def list_notes(self, kind: HierarchyKind, parent_note_id: str, *, limit: int | None = None) -> SearchResult:
        """List the children or descendants of a note."""
        request = SearchRequest(hierarchy=HierarchySpec(kind=kind, reference_note_id=parent_note_id), limit=limit)
        return self.search(request)

    def resolve_note_id(
        self,
        note_name: str,
        *,
        exact_match: bool = False,
        max_results: int = 3,
        auto_select: bool = False,
        note_type: str | None = None,
        template_hint: str | None = None,
    ) -> ResolveResult:
        """Find the id of a note by its title.

        Template and type hints widen the search with OR; results are ranked
        by template match, type match, exact title, folder (``book``) type and
        most recent modification.

        Args:
            note_name: Title or title fragment.
            exact_match: Match the title exactly instead of by substring.
            max_results: Number of top matches to report.
            auto_select: Pick the best match even when several notes match.
            note_type: Optional preferred note type.
            template_hint: Optional built-in template name, e.g. ``calendar``.

        Raises:
            ValidationError: If `note_name` is empty.
        """
        name = (note_name or "").strip()
        if not name:
            raise ValidationError("Note name must be provided", property_name="note_name")

        criteria: list[SearchCriteria] = []
        template_title = TEMPLATE_TITLES.get(template_hint.lower()) if template_hint else None
        if template_title:
            criteria.append(RelationCriteria("template.title", "=", template_title, Logic.OR))
        if note_type:
            criteria.append(NotePropertyCriteria("type", "=", note_type, Logic.OR))
        criteria.append(NotePropertyCriteria("title", "=" if exact_match else "contains", name))

        compiled = compile_search_query(SearchRequest(criteria=tuple(criteria)), logger=log)
        notes = self._run(compiled, fast_search=False)
        if not notes:
            return ResolveResult(note_id=None, title=None, found=False, matches=0)

        def rank(prefer_exact: bool) -> list[Note]:
            return sorted(
                notes,
                key=lambda note: _resolve_rank(
                    note, name=name, note_type=note_type, template_hint=template_hint, prefer_exact=prefer_exact
                ),
            )

        top_matches = tuple(
            ResolveMatch(note_id=n.note_id, title=n.title, type=n.type, date_modified=n.date_modified)
            for n in rank(prefer_exact=True)[:max_results]
        )

        if len(notes) > 1 and not auto_select:
            return ResolveResult(
                note_id=None,
                title=None,
                found=True,
                matches=len(notes),
                requires_user_choice=True,
                top_matches=top_matches,
            )

        selected = rank(prefer_exact=not exact_match)[0]
        return ResolveResult(
            note_id=selected.note_id,
            title=selected.title,
            found=True,
            matches=len(notes),
            top_matches=top_matches,
        )

    def _run(self, compiled: CompiledQuery, *, fast_search: bool) -> list[Note]:
        params = {
            "search": compiled.query,
            "fastSearch": "true" if fast_search else "false",
            "includeArchivedNotes": "true" if self.include_archived else "false",
        }
        log.debug("Search params: %s", params)
        return parse_search_results(self.client.search_notes(params))


def _is_text_only(request: SearchRequest) -> bool:
    """Fast search skips content and cannot honor limit clauses."""
    return bool(request.text) and not request.criteria and request.hierarchy is None and not request.limit


def _resolve_rank(
    note: Note,
    *,
    name: str,
    note_type: str | None,
    template_hint: str | None,
    prefer_exact: bool,
) -> tuple[int, int, int, int, float]:
    """Build a sort key; lower sorts first."""
    template_miss = 0
    if template_hint:
        marker = "_template_" + template_hint.lower().replace(" ", "_")
        has_template = any(
            attr.name == "template" and marker in attr.value for attr in note.attributes
        )
        template_miss = 0 if has_template else 1
    type_miss = 0 if not note_type or note.type == note_type else 1
    exact_miss = 0 if not prefer_exact or note.title.lower() == name.lower() else 1
    book_miss = 0 if note.type == "book" else 1
    modified = note.date_modified or _EPOCH
    if modified.tzinfo is None:
        modified = modified.replace(tzinfo=timezone.utc)
    return (template_miss, type_miss, exact_miss, book_miss, -modified.timestamp())
