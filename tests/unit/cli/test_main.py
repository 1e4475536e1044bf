"""Tests for the root ``weaver`` command group."""

from __future__ import annotations

from pathlib import Path

from click.testing import CliRunner

from weaver import __version__
from weaver.main import cli


class TestRootGroup:
    def test_version(self, cli_runner: CliRunner, isolated_home: Path) -> None:
        result = cli_runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert f"weaver, version {__version__}" in result.output

    def test_help_without_subcommand(self, cli_runner: CliRunner, isolated_home: Path) -> None:
        result = cli_runner.invoke(cli, [])

        assert result.exit_code == 0
        assert "templates" in result.output
        assert "generate" in result.output

    def test_invalid_config_exits_1(
        self, cli_runner: CliRunner, isolated_home: Path, temp_dir: Path
    ) -> None:
        (temp_dir / "weaver.yaml").write_text("verbosity: loud\n")

        result = cli_runner.invoke(cli, ["templates", "list"])

        assert result.exit_code == 1
        assert "Error: Invalid configuration" in result.output
        assert "Field: verbosity" in result.output

    def test_explicit_config_file(
        self, cli_runner: CliRunner, isolated_home: Path, temp_dir: Path
    ) -> None:
        broken = temp_dir / "broken.yaml"
        broken.write_text("verbosity: [\n")

        result = cli_runner.invoke(cli, ["-c", str(broken), "templates", "list"])

        assert result.exit_code == 1
        assert "Invalid YAML" in result.output
