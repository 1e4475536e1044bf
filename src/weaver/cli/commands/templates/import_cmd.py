"""``weaver templates import``."""

from __future__ import annotations

from pathlib import Path

import click

from weaver.cli.common import cli_error_handler, get_store
from weaver.cli.context import ExitCode
from weaver.cli.output import format_json, format_success, format_warning

from ._group import templates


@templates.command("import")
@click.argument("bundle", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option("--json", "as_json", is_flag=True, default=False, help="Print the result as JSON.")
@click.pass_context
def templates_import(ctx: click.Context, bundle: Path, as_json: bool) -> None:
    """Import a bundle as organization templates.

    Templates whose id is already in the catalog are skipped. Requires
    ``templates.organization_dir`` to be configured.
    """
    with cli_error_handler():
        result = get_store(ctx).import_file(bundle)

        if as_json:
            click.echo(format_json(result.to_dict()))
        else:
            for skipped in result.skipped:
                click.echo(format_warning(f"{skipped.template_id}: {skipped.error}"))
            for error in result.errors:
                click.echo(f"Error: {error.template_id}: {error.error}", err=True)
            click.echo(format_success(f"Imported {len(result.imported)} template(s)"))

        if result.errors:
            raise SystemExit(ExitCode.PARTIAL if result.imported else ExitCode.FAILURE)
