from __future__ import annotations

"""Public configuration API for TriliumNotes."""

from TriliumNotes.config.access import AccessConfig
from TriliumNotes.config.app import (
    DEFAULT_CONFIG_PATH,
    AppConfig,
    load_config,
    load_config_with_defaults,
    parse_config_dict,
)
from TriliumNotes.config.runtime import RuntimeConfig
from TriliumNotes.config.search import SearchConfig
from TriliumNotes.config.server import ServerConfig, require_token

__all__ = [
    "DEFAULT_CONFIG_PATH",
    "AccessConfig",
    "AppConfig",
    "RuntimeConfig",
    "SearchConfig",
    "ServerConfig",
    "load_config",
    "load_config_with_defaults",
    "parse_config_dict",
    "require_token",
]
