"""Structured criteria to Trilium search-grammar compiler."""

from __future__ import annotations

from TriliumNotes.query.compiler import BASE_PREDICATE, CompiledQuery, assemble_query, compile_search_query
from TriliumNotes.query.dates import validate_iso_date
from TriliumNotes.query.fragments import build_fragment, build_hierarchy_fragment
from TriliumNotes.query.grouping import GroupItem, group_fragments

__all__ = [
    "BASE_PREDICATE",
    "CompiledQuery",
    "GroupItem",
    "assemble_query",
    "build_fragment",
    "build_hierarchy_fragment",
    "compile_search_query",
    "group_fragments",
    "validate_iso_date",
]
