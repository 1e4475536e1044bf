"""``weaver templates export``."""

from __future__ import annotations

from pathlib import Path

import click

from weaver.cli.common import cli_error_handler, get_store
from weaver.cli.context import ExitCode
from weaver.cli.output import format_success, format_warning

from ._group import templates


@templates.command("export")
@click.argument("template_ids", nargs=-1, required=True)
@click.option(
    "--output",
    "-o",
    "destination",
    type=click.Path(dir_okay=False, path_type=Path),
    required=True,
    help="Bundle file to write.",
)
@click.pass_context
def templates_export(
    ctx: click.Context, template_ids: tuple[str, ...], destination: Path
) -> None:
    """Write a shareable bundle of organization and custom templates.

    Exits with 2 when some of the requested templates could not be exported.
    """
    with cli_error_handler():
        result = get_store(ctx).export_templates(template_ids, destination)
        for error in result.errors:
            click.echo(format_warning(f"{error.template_id}: {error.error}"), err=True)
        click.echo(
            format_success(f"Exported {len(result.exported)} template(s) to {destination}")
        )
        if result.errors:
            raise SystemExit(ExitCode.PARTIAL)
