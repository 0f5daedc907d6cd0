"""Search domain configuration."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from TriliumNotes.config.common import expect_bool, expect_int, get_optional_value, get_section


@dataclass(frozen=True, slots=True)
class SearchConfig:
    """Store validated search behavior.

    Attributes:
        include_archived: Send ``includeArchivedNotes=true`` with searches.
        default_limit: Limit applied when a request has none; -1 for no limit.
        resolve_max_results: Top matches reported by note resolution.
    """

    include_archived: bool
    default_limit: int
    resolve_max_results: int


def load_search(raw: Mapping[str, Any]) -> SearchConfig:
    """Load search domain config from raw mapping.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "search", required=False)
    return SearchConfig(
        include_archived=expect_bool(
            get_optional_value(section, "include_archived", True),
            "search.include_archived",
        ),
        default_limit=expect_int(get_optional_value(section, "default_limit", -1), "search.default_limit"),
        resolve_max_results=expect_int(
            get_optional_value(section, "resolve_max_results", 3),
            "search.resolve_max_results",
        ),
    )


def check_search(config: SearchConfig) -> None:
    """Validate search domain constraints.

    Raises:
        ValueError: If values violate search constraints.
    """
    if config.default_limit != -1 and config.default_limit <= 0:
        raise ValueError("search.default_limit must be -1 or positive")
    if config.resolve_max_results <= 0:
        raise ValueError("search.resolve_max_results must be positive")
