"""Tests for the tool facade and server registration."""

import asyncio
import json
import os
import sys
import unittest
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from fakes import FakeEtapiClient, note_payload
from mcp.server.fastmcp.exceptions import ToolError

from TriliumNotes.config import parse_config_dict
from TriliumNotes.services import create_services
from TriliumNotes.tools import READ_TOOLS, WRITE_TOOLS, NoteTools, build_server


def _tools(permissions: list[str], client: FakeEtapiClient) -> NoteTools:
    with patch.dict(os.environ, {"TRILIUM_API_TOKEN": "tok"}, clear=True):
        config = parse_config_dict({"access": {"permissions": permissions}})
    return NoteTools(create_services(config, client=client), resolve_max_results=config.search.resolve_max_results)


class TestNoteTools(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeEtapiClient({"n1": note_payload("n1", "Journal")})
        self.client.contents["n1"] = "<p>a</p>"
        self.tools = _tools(["READ", "WRITE"], self.client)

    def test_search_notes_returns_trimmed_json(self) -> None:
        self.client.search_results = [note_payload("n1", "Journal")]

        text = self.tools.search_notes(
            search_criteria=[{"property": "book", "type": "label", "logic": "OR"}, {"property": "todo", "type": "label"}],
            limit=5,
        )

        self.assertEqual(json.loads(text)[0]["noteId"], "n1")
        self.assertEqual(self.client.search_calls[0]["search"], "note.noteId != '' ~(#book OR #todo) limit 5")

    def test_validation_errors_become_tool_errors_verbatim(self) -> None:
        with self.assertRaises(ToolError) as ctx:
            self.tools.search_notes(
                search_criteria=[{"property": "dateCreated", "type": "noteProperty", "op": ">=", "value": "TODAY-7"}]
            )
        self.assertIn("dateCreated", str(ctx.exception))
        self.assertIn("TODAY-7", str(ctx.exception))

        with self.assertRaisesRegex(ToolError, "At least one search parameter must be provided"):
            self.tools.search_notes()

    def test_etapi_errors_become_tool_errors(self) -> None:
        with self.assertRaisesRegex(ToolError, "Note 'missing' not found"):
            self.tools.get_note("missing")

    def test_get_note_includes_hash(self) -> None:
        payload = json.loads(self.tools.get_note("n1"))

        self.assertEqual(payload["contentHash"], "blob-n1")
        self.assertEqual(payload["content"], "<p>a</p>")

    def test_create_update_append_delete(self) -> None:
        self.assertEqual(
            self.tools.create_note(parent_note_id="n1", title="Child", type="text", attributes=[{"type": "label", "name": "x"}]),
            "Created note: new1",
        )
        self.assertIn(
            "updated successfully",
            self.tools.update_note(note_id="n1", expected_hash="blob-n1", content="<p>b</p>"),
        )
        self.assertIn("appended", self.tools.append_note(note_id="n1", content="<p>c</p>"))
        self.assertEqual(self.client.contents["n1"], "<p>b</p><p>c</p>")
        self.assertEqual(self.tools.delete_note("new1"), "Deleted note: new1")

    def test_list_notes_renders_listing(self) -> None:
        self.client.search_results = [note_payload("n1", "Journal", type="book")]

        text = self.tools.list_notes(parent_note_id="root")

        self.assertIn("Journal/ (n1)", text)
        self.assertTrue(text.endswith("Total: 1 note"))
        self.assertEqual(self.client.search_calls[0]["search"], "note.noteId != '' note.parents.noteId = 'root'")

    def test_resolve_note_id(self) -> None:
        self.client.search_results = [note_payload("n1", "Journal")]

        self.assertIn("Note ID: n1", self.tools.resolve_note_id("Journal"))

    def test_manage_attributes(self) -> None:
        payload = json.loads(self.tools.manage_attributes("n1", "create", [{"type": "label", "name": "todo"}]))

        self.assertTrue(payload["success"])
        self.assertEqual(payload["attributes"][0]["name"], "todo")


class TestPermissions(unittest.TestCase):
    def test_read_only_blocks_writes(self) -> None:
        client = FakeEtapiClient({"n1": note_payload("n1", "Journal")})
        tools = _tools(["READ"], client)

        with self.assertRaisesRegex(ToolError, "Permission denied: Not authorized to delete notes."):
            tools.delete_note("n1")
        with self.assertRaisesRegex(ToolError, "Permission denied"):
            tools.manage_attributes("n1", "delete", [{"type": "label", "name": "x"}])
        self.assertIn("n1", client.notes)
        self.assertTrue(json.loads(tools.manage_attributes("n1", "read"))["success"])

    def test_write_only_blocks_reads(self) -> None:
        tools = _tools(["WRITE"], FakeEtapiClient())

        with self.assertRaisesRegex(ToolError, "Not authorized to search notes"):
            tools.search_notes(text="x")


class TestBuildServer(unittest.TestCase):
    def _names(self, permissions: list[str]) -> set[str]:
        server = build_server(_tools(permissions, FakeEtapiClient()))
        return {tool.name for tool in asyncio.run(server.list_tools())}

    def test_registers_tools_by_permission(self) -> None:
        self.assertEqual(self._names(["READ"]), {*READ_TOOLS, "manage_attributes"})
        self.assertEqual(self._names(["WRITE"]), {*WRITE_TOOLS, "manage_attributes"})
        self.assertEqual(self._names(["READ", "WRITE"]), {*READ_TOOLS, *WRITE_TOOLS, "manage_attributes"})

    def test_tool_schema_uses_method_parameters(self) -> None:
        server = build_server(_tools(["READ"], FakeEtapiClient()))
        tools = {tool.name: tool for tool in asyncio.run(server.list_tools())}

        schema = tools["get_note"].inputSchema
        self.assertEqual(schema["required"], ["note_id"])
        self.assertIn("include_content", schema["properties"])
        self.assertNotIn("self", schema["properties"])
        self.assertTrue(tools["get_note"].annotations.readOnlyHint)


if __name__ == "__main__":
    unittest.main()
