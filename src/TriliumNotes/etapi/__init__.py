"""Trilium ETAPI access: HTTP client and payload parsing."""

from __future__ import annotations

from TriliumNotes.etapi.client import EtapiClient
from TriliumNotes.etapi.parser import parse_attribute, parse_note, parse_search_results

__all__ = ["EtapiClient", "parse_attribute", "parse_note", "parse_search_results"]
