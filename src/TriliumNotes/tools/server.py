"""Tool server exposing note operations to tool-calling clients.

`NoteTools` holds one method per tool; each checks permissions, parses the
loosely typed arguments, calls a service and renders text. `build_server`
registers those methods on a FastMCP instance according to the configured
permissions.
"""

from __future__ import annotations

from functools import wraps
from typing import Any, Callable, Optional

from mcp.server.fastmcp import FastMCP
from mcp.server.fastmcp.exceptions import ToolError
from mcp.types import ToolAnnotations

from TriliumNotes.core.errors import EtapiError, PermissionDeniedError, ValidationError
from TriliumNotes.core.query import parse_search_request
from TriliumNotes.renderers import (
    dumps,
    render_attribute_result,
    render_json,
    render_listing,
    render_note_details,
    render_resolve,
    render_search_debug,
    render_summary,
)
from TriliumNotes.services import Services
from TriliumNotes.services.attributes import WRITE_OPERATIONS, parse_attribute_arg
from TriliumNotes.services.permissions import READ, WRITE
from TriliumNotes.utils.log import log

SERVER_NAME = "trilium-notes"

_TOOL_ERRORS = (ValidationError, PermissionDeniedError, EtapiError)


def _tool_errors(func: Callable[..., str]) -> Callable[..., str]:
    """Re-raise domain errors as tool errors carrying the same message."""

    @wraps(func)
    def wrapper(*args: Any, **kwargs: Any) -> str:
        try:
            return func(*args, **kwargs)
        except _TOOL_ERRORS as error:
            log.info("Tool %s failed: %s", func.__name__, error)
            raise ToolError(str(error)) from error

    return wrapper


class NoteTools:
    """Tool facade over the note, search and attribute services."""

    def __init__(self, services: Services, *, resolve_max_results: int = 3) -> None:
        self.services = services
        self.resolve_max_results = resolve_max_results

    @_tool_errors
    def create_note(
        self,
        parent_note_id: str,
        title: str,
        type: str,
        content: str = "",
        mime: Optional[str] = None,
        attributes: Optional[list[dict[str, Any]]] = None,
        force_create: bool = False,
    ) -> str:
        """Create a note under a parent note.

        If a child with the same title already exists under the parent, its id
        is reported and nothing is created unless force_create is true.
        Attributes are objects with type (label/relation), name, value,
        position and is_inheritable.
        """
        self.services.permissions.require(WRITE, "create notes")
        result = self.services.notes.create_note(
            parent_note_id=parent_note_id,
            title=title,
            type=type,
            content=content,
            mime=mime,
            attributes=tuple(parse_attribute_arg(item) for item in attributes or ()),
            force_create=force_create,
        )
        return result.message

    @_tool_errors
    def get_note(self, note_id: str, include_content: bool = True) -> str:
        """Get note metadata, its content hash (blobId) and optionally its content."""
        self.services.permissions.require(READ, "get notes")
        details = self.services.notes.get_note(note_id, include_content=include_content)
        return dumps(render_note_details(details))

    @_tool_errors
    def update_note(
        self,
        note_id: str,
        expected_hash: str,
        title: Optional[str] = None,
        content: Optional[str] = None,
        type: Optional[str] = None,
        mime: Optional[str] = None,
        revision: bool = True,
    ) -> str:
        """Replace the title and/or content of a note.

        expected_hash is the blobId returned by get_note; the update is refused
        when the note changed since then. A revision is saved first unless
        revision is false.
        """
        self.services.permissions.require(WRITE, "update notes")
        result = self.services.notes.update_note(
            note_id=note_id,
            expected_hash=expected_hash,
            title=title,
            content=content,
            type=type,
            mime=mime,
            revision=revision,
        )
        return result.message

    @_tool_errors
    def append_note(self, note_id: str, content: str, revision: bool = False) -> str:
        """Append content to the end of a note."""
        self.services.permissions.require(WRITE, "update notes")
        return self.services.notes.append_note(note_id=note_id, content=content, revision=revision).message

    @_tool_errors
    def delete_note(self, note_id: str) -> str:
        """Delete a note permanently."""
        self.services.permissions.require(WRITE, "delete notes")
        return self.services.notes.delete_note(note_id)

    @_tool_errors
    def search_notes(
        self,
        text: Optional[str] = None,
        search_criteria: Optional[list[dict[str, Any]]] = None,
        limit: Optional[int] = None,
        order_by: Optional[str] = None,
    ) -> str:
        """Search notes by full text and structured criteria.

        Each criteria item has property, type (label, relation, noteProperty
        or fulltext), op, value and logic (AND/OR, joining it to the next
        item). Operators: exists, not_exists, =, !=, >=, <=, >, <, contains,
        starts_with, ends_with, regex. Date values must be ISO
        (YYYY-MM-DD or YYYY-MM-DDTHH:mm:ss.sssZ).
        """
        self.services.permissions.require(READ, "search notes")
        request = parse_search_request(
            text=text,
            search_criteria=search_criteria,
            limit=limit,
            order_by=order_by,
        )
        result = self.services.search.search(request)
        log.debug(
            "%s",
            render_search_debug(
                result.query,
                {"text": text, "search_criteria": search_criteria, "limit": limit, "order_by": order_by},
            ),
        )
        return dumps(render_json(result.notes))

    @_tool_errors
    def list_notes(self, parent_note_id: str, hierarchy_type: str = "children", limit: Optional[int] = None) -> str:
        """List the children or descendants of a note, one line per note.

        Use parent_note_id "root" for the top of the tree.
        """
        self.services.permissions.require(READ, "list notes")
        request = parse_search_request(
            hierarchy_type=hierarchy_type,
            parent_note_id=parent_note_id,
            limit=limit,
        )
        hierarchy = request.hierarchy
        if hierarchy is None:
            raise ValidationError("parent_note_id is required", property_name="parent_note_id")
        result = self.services.search.list_notes(hierarchy.kind, hierarchy.reference_note_id, limit=request.limit)
        lines = render_listing(result.notes)
        lines.append("")
        lines.append(render_summary(len(result.notes)))
        return "\n".join(lines)

    @_tool_errors
    def resolve_note_id(
        self,
        note_name: str,
        exact_match: bool = False,
        max_results: Optional[int] = None,
        auto_select: bool = False,
        note_type: Optional[str] = None,
        template_hint: Optional[str] = None,
    ) -> str:
        """Find a note id from its title.

        With several matches and auto_select false, the top matches are listed
        for the caller to choose from. note_type and template_hint (calendar,
        board, text snippet, ...) prefer matching notes.
        """
        self.services.permissions.require(READ, "resolve note ids")
        result = self.services.search.resolve_note_id(
            note_name,
            exact_match=exact_match,
            max_results=max_results or self.resolve_max_results,
            auto_select=auto_select,
            note_type=note_type,
            template_hint=template_hint,
        )
        return render_resolve(result, note_name.strip())

    @_tool_errors
    def manage_attributes(
        self,
        note_id: str,
        operation: str,
        attributes: Optional[list[dict[str, Any]]] = None,
    ) -> str:
        """Read, create, batch_create, update or delete labels and relations of a note."""
        if operation in WRITE_OPERATIONS:
            self.services.permissions.require(WRITE, "modify attributes")
        else:
            self.services.permissions.require(READ, "read attributes")
        parsed = tuple(parse_attribute_arg(item) for item in attributes or ())
        result = self.services.attributes.manage(note_id, operation, parsed)
        return dumps(render_attribute_result(result))


_READ_ONLY = ToolAnnotations(readOnlyHint=True, destructiveHint=False, idempotentHint=True, openWorldHint=False)
_WRITE = ToolAnnotations(readOnlyHint=False, destructiveHint=False, idempotentHint=False, openWorldHint=False)
_DESTRUCTIVE = ToolAnnotations(readOnlyHint=False, destructiveHint=True, idempotentHint=True, openWorldHint=False)

READ_TOOLS = ("get_note", "search_notes", "list_notes", "resolve_note_id")
WRITE_TOOLS = ("create_note", "update_note", "append_note", "delete_note")


def build_server(tools: NoteTools, *, name: str = SERVER_NAME) -> FastMCP:
    """Register the tools the configured permissions allow.

    Args:
        tools: Tool facade bound to live services.
        name: Server name announced to clients.

    Returns:
        FastMCP server ready for ``run()``.
    """
    server = FastMCP(name)
    permissions = tools.services.permissions
    registered: list[str] = []

    if permissions.has_permission(READ):
        for tool_name in READ_TOOLS:
            server.add_tool(getattr(tools, tool_name), name=tool_name, annotations=_READ_ONLY)
            registered.append(tool_name)
    if permissions.has_permission(WRITE):
        for tool_name in WRITE_TOOLS:
            annotations = _DESTRUCTIVE if tool_name == "delete_note" else _WRITE
            server.add_tool(getattr(tools, tool_name), name=tool_name, annotations=annotations)
            registered.append(tool_name)
    if permissions.has_permission(READ) or permissions.has_permission(WRITE):
        server.add_tool(tools.manage_attributes, name="manage_attributes", annotations=_WRITE)
        registered.append("manage_attributes")

    log.info("Registered tools: %s", ", ".join(registered))
    return server
