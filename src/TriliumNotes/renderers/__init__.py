"""Output renderers for notes and service results.

JSON renderers mirror the ETAPI field names; console renderers produce the
compact listing used by the CLI and the hierarchy tools.
"""

from __future__ import annotations

from TriliumNotes.renderers.console import (
    render_listing,
    render_resolve,
    render_search_debug,
    render_summary,
)
from TriliumNotes.renderers.json import (
    dumps,
    render_attribute_result,
    render_json,
    render_note_details,
)

__all__ = [
    "dumps",
    "render_attribute_result",
    "render_json",
    "render_listing",
    "render_note_details",
    "render_resolve",
    "render_search_debug",
    "render_summary",
]
