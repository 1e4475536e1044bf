"""Tests for weaver.templates.locator."""

from __future__ import annotations

from pathlib import Path

from weaver.templates import TemplateLocator
from weaver.templates.locator import CUSTOMIZATIONS_FILENAME


class TestTemplateLocator:
    def test_lists_json_records_sorted(self, temp_dir: Path) -> None:
        for name in ("b.json", "a.json", "notes.txt", CUSTOMIZATIONS_FILENAME):
            (temp_dir / name).write_text("{}")
        (temp_dir / "nested").mkdir()
        (temp_dir / "nested" / "c.json").write_text("{}")

        found = TemplateLocator().scan(temp_dir)

        assert [p.name for p in found] == ["a.json", "b.json"]

    def test_missing_directory_yields_nothing(self, temp_dir: Path) -> None:
        assert TemplateLocator().scan(temp_dir / "absent") == []

    def test_file_instead_of_directory_yields_nothing(self, temp_dir: Path) -> None:
        path = temp_dir / "file.json"
        path.write_text("{}")
        assert TemplateLocator().scan(path) == []
