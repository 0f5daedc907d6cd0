"""Tests for layered config parsing and validation."""

import os
import sys
import tempfile
import unittest
from pathlib import Path
from unittest.mock import patch

REPO_ROOT = Path(__file__).resolve().parents[1]
sys.path.insert(0, str(REPO_ROOT / "src"))

from TriliumNotes.config import load_config_with_defaults, parse_config_dict, require_token
from TriliumNotes.config.app import merge_config_dicts

_CLEAN_ENV = {"TRILIUM_API_TOKEN": "secret-token"}


def _base_raw_config() -> dict:
    return {
        "log": {"level": "info", "to_file": False, "dir": "log"},
        "server": {
            "url": "http://notes.local:8080/etapi",
            "token_env": "TRILIUM_API_TOKEN",
            "timeout": 10,
            "max_retries": 2,
        },
        "access": {"permissions": ["READ"]},
        "search": {"include_archived": False, "default_limit": 50, "resolve_max_results": 5},
    }


@patch.dict(os.environ, _CLEAN_ENV, clear=True)
class TestConfigParsing(unittest.TestCase):
    def test_parses_all_domains(self) -> None:
        cfg = parse_config_dict(_base_raw_config())

        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertFalse(cfg.runtime.to_file)
        self.assertEqual(cfg.server.url, "http://notes.local:8080/etapi")
        self.assertEqual(cfg.server.token, "secret-token")
        self.assertEqual(cfg.server.timeout, 10.0)
        self.assertEqual(cfg.server.max_retries, 2)
        self.assertEqual(cfg.access.permissions, ("READ",))
        self.assertFalse(cfg.search.include_archived)
        self.assertEqual(cfg.search.default_limit, 50)
        self.assertEqual(cfg.search.resolve_max_results, 5)

    def test_defaults_when_sections_missing(self) -> None:
        cfg = parse_config_dict({})

        self.assertEqual(cfg.runtime.level, "INFO")
        self.assertEqual(cfg.server.url, "http://localhost:8080/etapi")
        self.assertEqual(cfg.server.token_env, "TRILIUM_API_TOKEN")
        self.assertEqual(cfg.access.permissions, ("READ",))
        self.assertTrue(cfg.search.include_archived)
        self.assertEqual(cfg.search.default_limit, -1)

    def test_environment_overrides(self) -> None:
        env = {**_CLEAN_ENV, "TRILIUM_API_URL": "https://remote/etapi", "PERMISSIONS": "read;write"}
        with patch.dict(os.environ, env, clear=True):
            cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.server.url, "https://remote/etapi")
        self.assertEqual(cfg.access.permissions, ("READ", "WRITE"))

    def test_missing_token_only_fails_on_require(self) -> None:
        with patch.dict(os.environ, {}, clear=True):
            cfg = parse_config_dict(_base_raw_config())
        self.assertEqual(cfg.server.token, "")
        with self.assertRaisesRegex(ValueError, "TRILIUM_API_TOKEN"):
            require_token(cfg.server)

    def test_type_errors_name_the_key(self) -> None:
        raw = _base_raw_config()
        raw["search"]["include_archived"] = "yes"
        with self.assertRaisesRegex(TypeError, "search.include_archived"):
            parse_config_dict(raw)

        raw = _base_raw_config()
        raw["server"]["max_retries"] = True
        with self.assertRaisesRegex(TypeError, "server.max_retries"):
            parse_config_dict(raw)

    def test_value_errors(self) -> None:
        cases = [
            ("log", "level", "LOUD", "log.level"),
            ("server", "url", "ftp://x", "server.url"),
            ("server", "timeout", 0, "server.timeout"),
            ("access", "permissions", ["ADMIN"], "access.permissions"),
            ("access", "permissions", [], "access.permissions"),
            ("search", "default_limit", 0, "search.default_limit"),
            ("search", "resolve_max_results", 0, "search.resolve_max_results"),
        ]
        for section, key, value, message in cases:
            with self.subTest(key=f"{section}.{key}"):
                raw = _base_raw_config()
                raw[section][key] = value
                with self.assertRaisesRegex(ValueError, message):
                    parse_config_dict(raw)

    def test_section_must_be_mapping(self) -> None:
        with self.assertRaisesRegex(TypeError, "server must be an object"):
            parse_config_dict({"server": ["x"]})


@patch.dict(os.environ, _CLEAN_ENV, clear=True)
class TestConfigLayering(unittest.TestCase):
    def test_merge_is_deep(self) -> None:
        merged = merge_config_dicts(
            {"server": {"url": "http://a", "timeout": 5}, "log": {"level": "INFO"}},
            {"server": {"timeout": 9}},
        )
        self.assertEqual(merged, {"server": {"url": "http://a", "timeout": 9}, "log": {"level": "INFO"}})

    def test_repo_default_file_loads(self) -> None:
        default_path = REPO_ROOT / "config" / "default.yml"
        cfg = load_config_with_defaults(default_path, default_path=default_path)
        self.assertEqual(cfg.access.permissions, ("READ", "WRITE"))
        self.assertEqual(cfg.server.token, "secret-token")

    def test_override_file_is_merged(self) -> None:
        default_path = REPO_ROOT / "config" / "default.yml"
        with tempfile.TemporaryDirectory() as tmp:
            override = Path(tmp) / "override.yml"
            override.write_text("search:\n  default_limit: 20\naccess:\n  permissions: [READ]\n", encoding="utf-8")
            cfg = load_config_with_defaults(override, default_path=default_path)
        self.assertEqual(cfg.search.default_limit, 20)
        self.assertEqual(cfg.access.permissions, ("READ",))
        self.assertEqual(cfg.server.url, "http://localhost:8080/etapi")

    def test_missing_default_file_counts_as_empty(self) -> None:
        with tempfile.TemporaryDirectory() as tmp:
            override = Path(tmp) / "only.yml"
            override.write_text("server:\n  url: https://x/etapi\n", encoding="utf-8")
            cfg = load_config_with_defaults(override, default_path=Path(tmp) / "missing.yml")
        self.assertEqual(cfg.server.url, "https://x/etapi")


if __name__ == "__main__":
    unittest.main()
