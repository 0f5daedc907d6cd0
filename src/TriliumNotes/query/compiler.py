"""Trilium search query compiler.

Compiles the structured `SearchRequest` into a single string in Trilium's
search grammar, suitable for the ETAPI ``search`` parameter.

Assembly order

1. free-text token (request text, then fulltext criteria)
2. grouped criteria expressions (space = implicit AND between groups)
3. hierarchy restriction
4. ``orderBy`` clause, when its field appears in the body
5. ``limit N``

A body made only of structured filters is prefixed with a base predicate,
because the engine rejects a query that has no leading body token.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Sequence

from TriliumNotes.core.query import FulltextCriteria, SearchRequest
from TriliumNotes.query.fragments import build_fragment, build_hierarchy_fragment
from TriliumNotes.query.grouping import GroupItem, group_fragments
from TriliumNotes.utils.log import null_logger


BASE_PREDICATE = "note.noteId != ''"


@dataclass(frozen=True, slots=True)
class CompiledQuery:
    """Compiler output.

    Attributes:
        query: Final query text; empty when no criteria were supplied.
        dropped: Number of criteria items that compiled to nothing.
    """

    query: str
    dropped: int = 0

    def __str__(self) -> str:
        return self.query


def assemble_query(
    fulltext: str | None,
    grouped_expressions: Sequence[str],
    hierarchy_expr: str | None = None,
    limit: int | None = None,
    order_by: str | None = None,
    *,
    logger: logging.Logger | None = None,
) -> str:
    """Join compiled parts into the final query text.

    Args:
        fulltext: Optional free-text token.
        grouped_expressions: Finalized group expressions.
        hierarchy_expr: Optional hierarchy restriction.
        limit: Optional result cap.
        order_by: Optional ``<field> [asc|desc]`` ordering.
        logger: Receives a debug record when ``order_by`` is skipped.

    Returns:
        Query text, or ``""`` when there is nothing to search for.
    """
    body = [part for part in (fulltext, *grouped_expressions, hierarchy_expr) if part]
    if not body:
        return ""
    if not fulltext:
        body.insert(0, BASE_PREDICATE)

    query = " ".join(body)

    if order_by:
        field = order_by.split()[0]
        if field in query:
            query += f" orderBy {order_by}"
        else:
            (logger or null_logger()).debug("orderBy field %s not used in query, skipping orderBy", field)

    if limit:
        query += f" limit {limit}"
    return query


def compile_search_query(request: SearchRequest, *, logger: logging.Logger | None = None) -> CompiledQuery:
    """Compile a structured search request.

    Args:
        request: Search request.
        logger: Optional logger for debug traces; defaults to a no-op logger.

    Returns:
        The compiled query and the count of dropped criteria.

    Raises:
        ValidationError: If a date-valued criteria item is not a strict ISO date.
    """
    logger = logger or null_logger()
    logger.debug("compile_search_query input: %s", request)

    tokens: list[str] = [request.text] if request.text else []
    items: list[GroupItem] = []
    dropped = 0
    for criteria in request.criteria:
        fragment = build_fragment(criteria)
        if not fragment:
            dropped += 1
            logger.debug("Dropped search criteria: %s", criteria)
            continue
        if isinstance(criteria, FulltextCriteria):
            tokens.append(fragment)
        else:
            items.append(GroupItem(fragment, criteria.logic))

    hierarchy_expr = build_hierarchy_fragment(request.hierarchy) if request.hierarchy else None
    query = assemble_query(
        " ".join(tokens) or None,
        group_fragments(items),
        hierarchy_expr,
        request.limit,
        request.order_by,
        logger=logger,
    )
    logger.debug("compile_search_query output: %r (dropped=%d)", query, dropped)
    return CompiledQuery(query=query, dropped=dropped)
