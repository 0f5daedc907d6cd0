"""Tests for boolean grouping of fragments."""

import sys
import unittest
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TriliumNotes.core.query import Logic
from TriliumNotes.query.grouping import GroupItem, group_fragments

AND = Logic.AND
OR = Logic.OR


class TestGroupFragments(unittest.TestCase):
    def test_empty_input(self) -> None:
        self.assertEqual(group_fragments([]), [])
        self.assertEqual(group_fragments([GroupItem(""), GroupItem("", OR)]), [])

    def test_single_item_is_unchanged(self) -> None:
        self.assertEqual(group_fragments([GroupItem("#book", OR)]), ["#book"])

    def test_or_pair_is_wrapped(self) -> None:
        self.assertEqual(group_fragments([GroupItem("A", OR), GroupItem("B")]), ["~(A OR B)"])

    def test_and_pair_is_space_joined(self) -> None:
        self.assertEqual(group_fragments([GroupItem("A", AND), GroupItem("B")]), ["A B"])
        self.assertEqual(group_fragments([GroupItem("A"), GroupItem("B")]), ["A B"])

    def test_trailing_logic_is_ignored(self) -> None:
        base = [GroupItem("A", OR), GroupItem("B", OR)]
        for last in (None, AND, OR):
            with self.subTest(last=last):
                self.assertEqual(group_fragments([*base, GroupItem("C", last)]), ["~(A OR B OR C)"])

    def test_trailing_logic_before_dropped_items_is_ignored(self) -> None:
        items = [GroupItem("A", OR), GroupItem("B", AND), GroupItem("", OR)]
        self.assertEqual(group_fragments(items), ["~(A OR B)"])

    def test_connector_changes_start_new_groups(self) -> None:
        items = [GroupItem("A", OR), GroupItem("B", AND), GroupItem("C")]
        self.assertEqual(group_fragments(items), ["A", "B C"])

    def test_alternating_connectors(self) -> None:
        items = [
            GroupItem("A", AND),
            GroupItem("B", OR),
            GroupItem("C", OR),
            GroupItem("D", AND),
            GroupItem("E"),
        ]
        self.assertEqual(group_fragments(items), ["A", "~(B OR C)", "D E"])

    def test_dropped_items_are_skipped(self) -> None:
        items = [GroupItem("A", OR), GroupItem("", AND), GroupItem("B")]
        self.assertEqual(group_fragments(items), ["~(A OR B)"])


if __name__ == "__main__":
    unittest.main()
