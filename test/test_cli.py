"""Tests for CLI criteria parsing and command wiring."""

import json
import logging
import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

from click.testing import CliRunner

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from fakes import FakeEtapiClient, note_payload

from TriliumNotes.cli.commands import parse_criteria_option
from TriliumNotes.cli.ui import cli
from TriliumNotes.core.errors import ValidationError
from TriliumNotes.core.query import EXISTS, LabelCriteria, Logic, NotePropertyCriteria, RelationCriteria
from TriliumNotes.services import create_services


class TestParseCriteriaOption(unittest.TestCase):
    def test_forms(self) -> None:
        self.assertEqual(parse_criteria_option("label", "book"), LabelCriteria("book", EXISTS))
        self.assertEqual(parse_criteria_option("label", "book:not_exists"), LabelCriteria("book", "not_exists"))
        self.assertEqual(
            parse_criteria_option("relation", "author:contains:Tolkien:OR"),
            RelationCriteria("author", "contains", "Tolkien", Logic.OR),
        )

    def test_value_may_contain_colons(self) -> None:
        self.assertEqual(
            parse_criteria_option("noteProperty", "dateCreated:>=:2024-01-01T10:00:00.000Z"),
            NotePropertyCriteria("dateCreated", ">=", "2024-01-01T10:00:00.000Z"),
        )

    def test_invalid(self) -> None:
        with self.assertRaises(ValidationError):
            parse_criteria_option("label", ":=:x")
        with self.assertRaises(ValidationError):
            parse_criteria_option("tag", "x")


class TestCliCommands(unittest.TestCase):
    def setUp(self) -> None:
        self.client = FakeEtapiClient({"n1": note_payload("n1", "Journal", type="book")})
        self.client.search_results = [note_payload("n1", "Journal", type="book")]
        self.tmp = tempfile.TemporaryDirectory()
        self.config_path = Path(self.tmp.name) / "config.yml"
        self.config_path.write_text(
            "log:\n  level: WARNING\naccess:\n  permissions: [READ, WRITE]\n",
            encoding="utf-8",
        )
        self.env = patch.dict(os.environ, {"TRILIUM_API_TOKEN": "tok"}, clear=True)
        self.env.start()
        self.services = patch(
            "TriliumNotes.cli.runner.create_services",
            side_effect=lambda config: create_services(config, client=self.client),
        )
        self.services.start()

    def tearDown(self) -> None:
        logging.getLogger("TriliumNotes").handlers.clear()
        self.services.stop()
        self.env.stop()
        self.tmp.cleanup()

    def _invoke(self, *args: str):
        return CliRunner().invoke(cli, ["--config", str(self.config_path), *args])

    def test_search_listing(self) -> None:
        result = self._invoke("search", "journal", "--label", "book:exists:OR", "--prop", "type:=:book", "--limit", "3")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Journal/ (n1)", result.output)
        self.assertIn("Total: 1 note", result.output)
        self.assertEqual(self.client.search_calls[0]["search"], "journal ~(#book OR note.type = 'book') limit 3")
        self.assertTrue(self.client.closed)

    def test_search_json_with_hierarchy(self) -> None:
        result = self._invoke("search", "--children", "root", "--json")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output)[0]["noteId"], "n1")
        self.assertEqual(self.client.search_calls[0]["search"], "note.noteId != '' note.parents.noteId = 'root'")

    def test_conflicting_hierarchy_options(self) -> None:
        result = self._invoke("search", "--children", "a", "--descendants", "b")

        self.assertEqual(result.exit_code, 2)

    def test_search_failure_aborts(self) -> None:
        result = self._invoke("search", "--prop", "dateCreated:>=:TODAY-7")

        self.assertEqual(result.exit_code, 1)
        self.assertEqual(self.client.search_calls, [])

    def test_get_and_ping(self) -> None:
        result = self._invoke("get", "n1", "--no-content")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertEqual(json.loads(result.output)["noteId"], "n1")

        result = self._invoke("ping")
        self.assertEqual(result.exit_code, 0, result.output)
        self.assertIn("Trilium 0.90.0", result.output)

    def test_delete_requires_confirmation(self) -> None:
        result = self._invoke("delete", "n1", "--yes")

        self.assertEqual(result.exit_code, 0, result.output)
        self.assertNotIn("n1", self.client.notes)

    def test_missing_token_aborts(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            result = self._invoke("ping")

        self.assertEqual(result.exit_code, 1)


if __name__ == "__main__":
    unittest.main()
