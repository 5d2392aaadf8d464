"""Tests for configuration loading and key conversion."""

import json
from pathlib import Path

from approval_buttons.config.loader import (
    camel_to_snake,
    convert_keys,
    convert_to_camel,
    load_config,
    save_config,
    snake_to_camel,
)
from approval_buttons.config.schema import Config


# ── Key conversion ──────────────────────────────────────────────────


class TestCamelToSnake:
    def test_simple(self):
        assert camel_to_snake("chatId") == "chat_id"

    def test_multiple_words(self):
        assert camel_to_snake("staleMinsValue") == "stale_mins_value"

    def test_single_word(self):
        assert camel_to_snake("enabled") == "enabled"

    def test_already_snake(self):
        assert camel_to_snake("allow_from") == "allow_from"

    def test_empty(self):
        assert camel_to_snake("") == ""


class TestSnakeToCamel:
    def test_simple(self):
        assert snake_to_camel("chat_id") == "chatId"

    def test_single_word(self):
        assert snake_to_camel("enabled") == "enabled"

    def test_empty(self):
        assert snake_to_camel("") == ""


class TestConvertKeys:
    def test_nested_dict(self):
        data = {"telegram": {"chatId": "42", "allowFrom": ["42"]}}
        assert convert_keys(data) == {"telegram": {"chat_id": "42", "allow_from": ["42"]}}

    def test_list_of_dicts(self):
        assert convert_keys([{"staleMins": 5}]) == [{"stale_mins": 5}]

    def test_non_dict(self):
        assert convert_keys("hello") == "hello"
        assert convert_keys(42) == 42
        assert convert_keys(None) is None


class TestConvertToCamel:
    def test_nested_dict(self):
        data = {"approvals": {"stale_mins": 5}}
        assert convert_to_camel(data) == {"approvals": {"staleMins": 5}}

    def test_roundtrip(self):
        """camelCase → snake_case → camelCase should preserve keys."""
        original = {"chatId": "42", "allowFrom": [], "staleMins": 3}
        assert convert_to_camel(convert_keys(original)) == original


# ── Config load/save ────────────────────────────────────────────────


class TestLoadConfig:
    def test_default_when_no_file(self, tmp_path: Path):
        config = load_config(tmp_path / "nonexistent.json")
        assert isinstance(config, Config)
        assert config.gateway.port == 18791
        assert config.approvals.stale_mins == 10

    def test_load_camel_case_json(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({
            "telegram": {"token": "123:abc", "chatId": "-100987", "allowFrom": [42]},
            "slack": {"enabled": False},
            "approvals": {"staleMins": 3, "verbose": True},
        }))
        config = load_config(config_file)
        assert config.telegram.token == "123:abc"
        assert config.telegram.chat_id == "-100987"
        assert config.telegram.allow_from == [42]
        assert config.slack.enabled is False
        assert config.approvals.stale_mins == 3
        assert config.approvals.verbose is True

    def test_invalid_json_returns_default(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text("not json{{{")
        config = load_config(config_file)
        assert config.gateway.port == 18791

    def test_invalid_values_return_default(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text(json.dumps({"approvals": {"staleMins": "soon"}}))
        assert load_config(config_file).approvals.stale_mins == 10

    def test_top_level_list_returns_default(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text("[]")
        assert isinstance(load_config(config_file), Config)

    def test_empty_file_returns_default(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        config_file.write_text("")
        assert isinstance(load_config(config_file), Config)


class TestSaveConfig:
    def test_save_creates_file(self, tmp_path: Path):
        config_file = tmp_path / "subdir" / "config.json"
        save_config(Config(), config_file)
        assert config_file.exists()

    def test_save_uses_camel_case(self, tmp_path: Path):
        config_file = tmp_path / "config.json"
        save_config(Config(), config_file)

        data = json.loads(config_file.read_text())
        assert "chatId" in data["telegram"]
        assert "allowFrom" in data["telegram"]
        assert "staleMins" in data["approvals"]

    def test_roundtrip(self, tmp_path: Path):
        """Save and reload should produce equivalent config."""
        original = Config()
        original.gateway.port = 12345
        original.slack.token = "xoxb-roundtrip"

        config_file = tmp_path / "config.json"
        save_config(original, config_file)
        loaded = load_config(config_file)

        assert loaded.gateway.port == 12345
        assert loaded.slack.token == "xoxb-roundtrip"
