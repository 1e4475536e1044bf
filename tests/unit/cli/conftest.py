"""Fixtures for CLI tests."""

from __future__ import annotations

from pathlib import Path

import pytest
import yaml

from tests.fixtures.templates import TemplateDirs


@pytest.fixture
def project(isolated_home: Path, seeded_dirs: TemplateDirs, temp_dir: Path) -> TemplateDirs:
    """A working directory whose ``weaver.yaml`` points at ``seeded_dirs``."""
    config = {
        "templates": {
            "builtin_dir": str(seeded_dirs.builtin),
            "custom_dir": str(seeded_dirs.custom),
            "organization_dir": str(seeded_dirs.organization),
        },
        "generation": {"output_directory": str(temp_dir / "workflows")},
    }
    (temp_dir / "weaver.yaml").write_text(yaml.safe_dump(config))
    return seeded_dirs
