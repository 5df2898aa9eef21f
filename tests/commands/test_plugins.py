"""Tests for the plugins command."""

from __future__ import annotations

import json
from pathlib import Path

import pytest
from click.testing import CliRunner

from zonekit.cli import cli

pytestmark = pytest.mark.usefixtures("restore_logging")


class TestPluginsCommand:
    def test_lists_discovered(self, cli_runner: CliRunner, project: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(project), "plugins"])
        assert result.exit_code == 0, result.output
        for plugin_id in ("clock", "broken", "notes"):
            assert plugin_id in result.output

    def test_json_rows(self, cli_runner: CliRunner, project: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(project), "--json", "plugins"])
        assert result.exit_code == 0, result.output
        rows = {row["id"]: row for row in json.loads(result.stdout)}
        assert rows["clock"]["section"] == "header"
        assert rows["clock"]["order"] == 1
        assert rows["notes"]["enabled"] is False

    def test_section_filter(self, cli_runner: CliRunner, project: Path) -> None:
        result = cli_runner.invoke(
            cli, ["-c", str(project), "--json", "plugins", "--section", "header"]
        )
        assert result.exit_code == 0, result.output
        assert [row["id"] for row in json.loads(result.stdout)] == ["clock", "broken"]

    def test_empty_project(self, cli_runner: CliRunner, tmp_path: Path) -> None:
        config = tmp_path / "zonekit.toml"
        config.write_text("[loader]\nentry_points = false\n", encoding="utf-8")
        result = cli_runner.invoke(cli, ["-c", str(config), "plugins"])
        assert result.exit_code == 0
        assert "No plugins found." in result.output

    def test_rejects_unknown_section(self, cli_runner: CliRunner, project: Path) -> None:
        result = cli_runner.invoke(cli, ["-c", str(project), "plugins", "--section", "attic"])
        assert result.exit_code != 0
