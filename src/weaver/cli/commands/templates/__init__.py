"""Template catalog commands."""

from __future__ import annotations

# isort: off
# Import the group first so subcommand modules can attach to it.
from weaver.cli.commands.templates._group import templates

from weaver.cli.commands.templates import create as _create  # noqa: F401
from weaver.cli.commands.templates import delete as _delete  # noqa: F401
from weaver.cli.commands.templates import export as _export  # noqa: F401
from weaver.cli.commands.templates import import_cmd as _import_cmd  # noqa: F401
from weaver.cli.commands.templates import list_cmd as _list_cmd  # noqa: F401
from weaver.cli.commands.templates import show as _show  # noqa: F401
from weaver.cli.commands.templates import validate as _validate  # noqa: F401

# isort: on

__all__ = ["templates"]
