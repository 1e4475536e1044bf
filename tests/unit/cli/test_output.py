"""Tests for weaver.cli.output."""

from __future__ import annotations

import json
from pathlib import Path

from weaver.cli.output import (
    format_error,
    format_json,
    format_success,
    format_table,
    format_warning,
    format_yaml,
)


class TestMessages:
    def test_error_with_details_and_suggestion(self) -> None:
        text = format_error(
            "Template nope not found",
            details=["Path: /tmp/x"],
            suggestion="Run 'weaver templates list'",
        )

        assert text == (
            "Error: Template nope not found\n"
            "  Path: /tmp/x\n"
            "Suggestion: Run 'weaver templates list'"
        )

    def test_plain_error(self) -> None:
        assert format_error("boom") == "Error: boom"

    def test_success_and_warning(self) -> None:
        assert format_success("done") == "Success: done"
        assert format_warning("careful") == "Warning: careful"


class TestStructured:
    def test_json_renders_paths(self) -> None:
        data = json.loads(format_json({"path": Path("/tmp/ci.yml")}))
        assert data == {"path": "/tmp/ci.yml"}

    def test_yaml_keeps_key_order(self) -> None:
        assert format_yaml({"b": 1, "a": 2}) == "b: 1\na: 2\n"


class TestTable:
    def test_columns_padded(self) -> None:
        table = format_table(["ID", "Type"], [["ci-basic", "ci"], ["x", "release"]])

        assert table.splitlines() == [
            "ID       | Type",
            "ci-basic | ci",
            "x        | release",
        ]

    def test_no_headers(self) -> None:
        assert format_table([], [["a"]]) == ""
