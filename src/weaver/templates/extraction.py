"""Helpers that derive template fields from a name or a workflow body."""

from __future__ import annotations

import re

from weaver.templates.models import TemplateVariable

__all__ = [
    "PLACEHOLDER_PATTERN",
    "extract_dependencies",
    "extract_variables",
    "slugify",
]

# ``{{name}}``; GitHub expressions such as ``${{ secrets.TOKEN }}`` do not match.
PLACEHOLDER_PATTERN = re.compile(r"\{\{(\w+)\}\}")

_ACTION_PATTERN = re.compile(r"uses:\s*([^\s@]+)@")
_NON_ALNUM = re.compile(r"[^a-z0-9]+")


def slugify(name: str) -> str:
    """Derive a template id from a display name.

    Example:
        >>> slugify("Node.js CI (fast)")
        'node-js-ci-fast'
    """
    return _NON_ALNUM.sub("-", name.lower()).strip("-")


def extract_variables(content: str) -> list[TemplateVariable]:
    """One required string variable per distinct placeholder, in order."""
    names = dict.fromkeys(PLACEHOLDER_PATTERN.findall(content))
    return [
        TemplateVariable(
            name=name,
            description=f"Template variable: {name}",
            type="string",
            required=True,
        )
        for name in names
    ]


def extract_dependencies(content: str) -> list[str]:
    """Action references (``uses: owner/action@ref``) without the ref."""
    return list(dict.fromkeys(_ACTION_PATTERN.findall(content)))
