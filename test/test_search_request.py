"""Tests for parsing tool arguments into search requests."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TriliumNotes.core.errors import ValidationError
from TriliumNotes.core.query import (
    EXISTS,
    FulltextCriteria,
    HierarchyKind,
    LabelCriteria,
    Logic,
    NotePropertyCriteria,
    RelationCriteria,
    parse_criteria,
    parse_search_request,
)


class TestParseCriteria(unittest.TestCase):
    def test_variant_and_operator_keys(self) -> None:
        self.assertEqual(
            parse_criteria({"property": "book", "type": "label"}),
            LabelCriteria("book", EXISTS, None, Logic.AND),
        )
        self.assertEqual(
            parse_criteria({"property": "author", "variant": "relation", "operator": "=", "value": "x"}),
            RelationCriteria("author", "=", "x"),
        )
        self.assertEqual(
            parse_criteria({"property": "labelCount", "type": "noteProperty", "op": ">", "value": 5, "logic": "or"}),
            NotePropertyCriteria("labelCount", ">", "5", Logic.OR),
        )
        self.assertIsInstance(parse_criteria({"property": "towers", "type": "fulltext"}), FulltextCriteria)

    def test_unknown_operator_is_kept_for_the_compiler(self) -> None:
        self.assertEqual(parse_criteria({"property": "x", "type": "label", "op": "like"}).operator, "like")

    def test_invalid_items_raise(self) -> None:
        for raw in (
            "book",
            {"type": "label"},
            {"property": "", "type": "label"},
            {"property": "book"},
            {"property": "book", "type": "tag"},
            {"property": "book", "type": "label", "logic": "XOR"},
        ):
            with self.subTest(raw=raw):
                with self.assertRaises(ValidationError):
                    parse_criteria(raw)


class TestParseSearchRequest(unittest.TestCase):
    def test_full_request(self) -> None:
        request = parse_search_request(
            text="  towers ",
            search_criteria=[{"property": "book", "type": "label"}],
            hierarchy_type="descendants",
            parent_note_id="root",
            limit=5,
            order_by=" note.title ",
        )
        self.assertEqual(request.text, "towers")
        self.assertEqual(len(request.criteria), 1)
        self.assertIsNotNone(request.hierarchy)
        self.assertEqual(request.hierarchy.kind, HierarchyKind.DESCENDANTS)
        self.assertEqual(request.hierarchy.reference_note_id, "root")
        self.assertEqual(request.limit, 5)
        self.assertEqual(request.order_by, "note.title")

    def test_blank_text_becomes_none(self) -> None:
        self.assertIsNone(parse_search_request(text="   ").text)

    def test_invalid_limit(self) -> None:
        for limit in (0, -1, True, "5"):
            with self.subTest(limit=limit):
                with self.assertRaises(ValidationError):
                    parse_search_request(text="x", limit=limit)

    def test_invalid_hierarchy(self) -> None:
        with self.assertRaises(ValidationError):
            parse_search_request(hierarchy_type="siblings", parent_note_id="root")
        with self.assertRaises(ValidationError):
            parse_search_request(hierarchy_type="children")


if __name__ == "__main__":
    unittest.main()
