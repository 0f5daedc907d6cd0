"""Boolean grouping of compiled fragments.

Fragments are folded left to right into runs that share one connector. The
connector stated on the last non-empty fragment is ignored because nothing
follows it. A run joined by OR is parenthesized and prefixed with ``~``: the
grammar requires a separator sign before any expression starting with ``(``.
"""

from __future__ import annotations

from dataclasses import dataclass
from functools import reduce
from typing import Iterable, Sequence

from TriliumNotes.core.query import Logic


@dataclass(frozen=True, slots=True)
class GroupItem:
    """One compiled fragment and the connector to the next item."""

    fragment: str
    logic_to_next: Logic | None = None


@dataclass(frozen=True, slots=True)
class CompiledGroup:
    """A run of fragments sharing one connector."""

    fragments: tuple[str, ...] = ()
    logic: Logic = Logic.AND

    def render(self) -> str:
        if len(self.fragments) == 1:
            return self.fragments[0]
        if self.logic is Logic.OR:
            return "~(" + " OR ".join(self.fragments) + ")"
        return " ".join(self.fragments)


_State = tuple[tuple[CompiledGroup, ...], CompiledGroup]


def _step(state: _State, item: GroupItem) -> _State:
    done, current = state
    logic = item.logic_to_next
    if not current.fragments or logic is None or logic is current.logic:
        return done, CompiledGroup(current.fragments + (item.fragment,), logic or current.logic)
    return done + (current,), CompiledGroup((item.fragment,), logic)


def group_fragments(items: Iterable[GroupItem]) -> list[str]:
    """Fold fragments into finalized top-level group expressions.

    Args:
        items: Fragments in criteria order; empty fragments are skipped.

    Returns:
        Rendered groups in order. The caller joins them with spaces.
    """
    kept: Sequence[GroupItem] = [item for item in items if item.fragment]
    if not kept:
        return []

    # The trailing connector has no right-hand side.
    last = kept[-1]
    kept = [*kept[:-1], GroupItem(last.fragment, None)]

    done, current = reduce(_step, kept, ((), CompiledGroup()))
    return [group.render() for group in (*done, current)]
