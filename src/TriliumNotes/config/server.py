"""Server domain configuration: where ETAPI lives and how to authenticate."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from TriliumNotes.config.common import (
    expect_float,
    expect_int,
    expect_str,
    get_optional_value,
    get_section,
    read_env,
)

DEFAULT_URL = "http://localhost:8080/etapi"
DEFAULT_TOKEN_ENV = "TRILIUM_API_TOKEN"


@dataclass(frozen=True, slots=True)
class ServerConfig:
    """Store validated ETAPI connection settings.

    `url` may be overridden by the ``TRILIUM_API_URL`` environment variable;
    `token` is always read from the variable named by `token_env`.
    """

    url: str
    token_env: str
    token: str
    timeout: float
    max_retries: int


def load_server(raw: Mapping[str, Any]) -> ServerConfig:
    """Load server domain config from raw mapping.

    Raises:
        TypeError: If config types are invalid.
    """
    section = get_section(raw, "server", required=False)
    token_env = expect_str(get_optional_value(section, "token_env", DEFAULT_TOKEN_ENV), "server.token_env")
    url = expect_str(get_optional_value(section, "url", DEFAULT_URL), "server.url")
    return ServerConfig(
        url=read_env("TRILIUM_API_URL", url),
        token_env=token_env,
        token=read_env(token_env),
        timeout=expect_float(get_optional_value(section, "timeout", 30), "server.timeout"),
        max_retries=expect_int(get_optional_value(section, "max_retries", 4), "server.max_retries"),
    )


def check_server(config: ServerConfig) -> None:
    """Validate server domain constraints.

    A missing token is not an error here: commands that never reach ETAPI
    must still load the config. `require_token` is called before connecting.
    """
    if not config.url.startswith(("http://", "https://")):
        raise ValueError("server.url must start with http:// or https://")
    if not config.token_env.strip():
        raise ValueError("server.token_env must not be empty")
    if config.timeout <= 0:
        raise ValueError("server.timeout must be positive")
    if config.max_retries <= 0:
        raise ValueError("server.max_retries must be positive")


def require_token(config: ServerConfig) -> str:
    """Return the ETAPI token or fail with the variable name to set."""
    if not config.token:
        raise ValueError(f"{config.token_env} environment variable is required")
    return config.token
