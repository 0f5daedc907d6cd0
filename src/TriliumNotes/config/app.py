from __future__ import annotations

"""Application config orchestration and YAML loading entrypoints."""

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Mapping

import yaml

from TriliumNotes.config.access import AccessConfig, check_access, load_access
from TriliumNotes.config.runtime import RuntimeConfig, check_runtime, load_runtime
from TriliumNotes.config.search import SearchConfig, check_search, load_search
from TriliumNotes.config.server import ServerConfig, check_server, load_server

DEFAULT_CONFIG_PATH = Path("config/default.yml")


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application root configuration."""

    runtime: RuntimeConfig
    server: ServerConfig
    access: AccessConfig
    search: SearchConfig


def parse_config_dict(raw: Mapping[str, Any]) -> AppConfig:
    """Parse normalized mapping into AppConfig."""
    runtime = load_runtime(raw)
    server = load_server(raw)
    access = load_access(raw)
    search = load_search(raw)

    check_runtime(runtime)
    check_server(server)
    check_access(access)
    check_search(search)

    return AppConfig(runtime=runtime, server=server, access=access, search=search)


def load_config(path: Path) -> AppConfig:
    """Load YAML config file without default merge."""
    return parse_config_dict(parse_yaml(path.read_text(encoding="utf-8")))


def load_config_with_defaults(config_path: Path, default_path: Path = DEFAULT_CONFIG_PATH) -> AppConfig:
    """Load config by merging defaults and an optional override file.

    A missing defaults file counts as empty, so the override (or the
    environment alone) must then supply everything.
    """
    base = parse_yaml(default_path.read_text(encoding="utf-8")) if default_path.is_file() else {}
    if config_path == default_path:
        return parse_config_dict(base)
    override = parse_yaml(config_path.read_text(encoding="utf-8"))
    return parse_config_dict(merge_config_dicts(base, override))


def parse_yaml(text: str) -> dict[str, Any]:
    """Parse raw YAML text into a mapping."""
    data = yaml.safe_load(text) or {}
    if not isinstance(data, Mapping):
        raise ValueError("Config root must be a mapping/object")
    return dict(data)


def merge_config_dicts(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """Deep-merge two config mappings."""
    merged: dict[str, Any] = dict(base)
    for key, value in override.items():
        if key in merged and isinstance(merged[key], Mapping) and isinstance(value, Mapping):
            merged[key] = merge_config_dicts(merged[key], value)
        else:
            merged[key] = value
    return merged
