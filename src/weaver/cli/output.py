"""Output formatting helpers for Weaver CLI commands."""

from __future__ import annotations

import json
from collections.abc import Sequence
from typing import Any

import yaml

__all__ = [
    "format_error",
    "format_json",
    "format_success",
    "format_table",
    "format_warning",
    "format_yaml",
]


def format_error(
    message: str,
    details: Sequence[str] | None = None,
    suggestion: str | None = None,
) -> str:
    """Format an error for stderr.

    Example:
        >>> print(format_error("Template ci-basic not found",
        ...                    suggestion="Run 'weaver templates list'"))
        Error: Template ci-basic not found
        Suggestion: Run 'weaver templates list'
    """
    lines = [f"Error: {message}"]
    lines.extend(f"  {detail}" for detail in details or ())
    if suggestion:
        lines.append(f"Suggestion: {suggestion}")
    return "\n".join(lines)


def format_success(message: str) -> str:
    return f"Success: {message}"


def format_warning(message: str) -> str:
    return f"Warning: {message}"


def format_json(data: Any) -> str:
    """Indented JSON; dates and paths are rendered with ``str``."""
    return json.dumps(data, indent=2, default=str)


def format_yaml(data: Any) -> str:
    return yaml.safe_dump(data, default_flow_style=False, sort_keys=False)


def format_table(headers: Sequence[str], rows: Sequence[Sequence[str]]) -> str:
    """Render a plain pipe-separated table, columns padded to fit.

    Example:
        >>> print(format_table(["ID", "Type"], [["ci-basic", "ci"]]))
        ID       | Type
        ci-basic | ci
    """
    if not headers:
        return ""

    widths = [len(h) for h in headers]
    for row in rows:
        for i, cell in enumerate(row[: len(widths)]):
            widths[i] = max(widths[i], len(cell))

    def render(cells: Sequence[str]) -> str:
        padded = [
            cell.ljust(widths[i]) if i < len(widths) else cell
            for i, cell in enumerate(cells)
        ]
        return " | ".join(padded).rstrip()

    return "\n".join([render(headers), *(render(row) for row in rows)])
