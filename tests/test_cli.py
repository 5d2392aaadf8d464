"""Tests for the approval-buttons CLI."""

import json

from typer.testing import CliRunner

from approval_buttons import __version__
from approval_buttons.cli.commands import app

runner = CliRunner()

REQUEST = "Exec approval required\nID: abc-123\nCommand: make test\nAgent: ci\n"


class TestVersion:
    def test_version_flag(self):
        result = runner.invoke(app, ["--version"])
        assert result.exit_code == 0
        assert __version__ in result.output


class TestParseCommand:
    def test_parse_stdin(self):
        result = runner.invoke(app, ["parse"], input=REQUEST)
        assert result.exit_code == 0
        assert "abc-123" in result.output
        assert "make test" in result.output
        assert "ci" in result.output

    def test_parse_file(self, tmp_path):
        path = tmp_path / "msg.txt"
        path.write_text(REQUEST, encoding="utf-8")
        result = runner.invoke(app, ["parse", str(path)])
        assert result.exit_code == 0
        assert "abc-123" in result.output

    def test_not_an_approval(self):
        result = runner.invoke(app, ["parse"], input="hello world")
        assert result.exit_code == 1
        assert "Not an exec approval request" in result.output

    def test_missing_file(self, tmp_path):
        result = runner.invoke(app, ["parse", str(tmp_path / "missing.txt")])
        assert result.exit_code == 1


class TestInitCommand:
    def test_writes_default_config(self, tmp_path):
        path = tmp_path / "config.json"
        result = runner.invoke(app, ["init", "--config", str(path)])
        assert result.exit_code == 0
        data = json.loads(path.read_text())
        assert data["approvals"]["staleMins"] == 10

    def test_refuses_to_overwrite(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")
        result = runner.invoke(app, ["init", "--config", str(path)])
        assert result.exit_code == 1
        assert path.read_text() == "{}"

    def test_force_overwrites(self, tmp_path):
        path = tmp_path / "config.json"
        path.write_text("{}")
        result = runner.invoke(app, ["init", "--config", str(path), "--force"])
        assert result.exit_code == 0
        assert "telegram" in json.loads(path.read_text())


class TestGatewayCommand:
    def test_exits_without_channels(self, tmp_path, monkeypatch):
        for var in ("TELEGRAM_BOT_TOKEN", "TELEGRAM_CHAT_ID", "SLACK_BOT_TOKEN", "SLACK_CHANNEL_ID"):
            monkeypatch.delenv(var, raising=False)
        result = runner.invoke(app, ["gateway", "--config", str(tmp_path / "none.json")])
        assert result.exit_code == 1
        assert "No channel configured" in result.output
