"""``weaver templates validate``."""

from __future__ import annotations

from pathlib import Path

import click

from weaver.cli.common import cli_error_handler, read_structured_file
from weaver.cli.context import ExitCode
from weaver.cli.output import format_error, format_success, format_warning
from weaver.templates import validate_template

from ._group import templates


@templates.command("validate")
@click.argument("record_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
def templates_validate(record_file: Path) -> None:
    """Check a template record (JSON or YAML) without importing it.

    Exits with 1 when the record has errors; warnings alone do not fail.
    """
    with cli_error_handler():
        record = read_structured_file(record_file)
        if not isinstance(record, dict):
            click.echo(format_error(f"{record_file} must contain a template mapping"), err=True)
            raise SystemExit(ExitCode.FAILURE)

        result = validate_template(record)
        for warning in result.warnings:
            click.echo(format_warning(warning))

        if not result.is_valid:
            click.echo(
                format_error(f"{record_file} is not a valid template", details=result.errors),
                err=True,
            )
            raise SystemExit(ExitCode.FAILURE)

        click.echo(format_success(f"{record_file} is a valid template"))
