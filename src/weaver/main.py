"""CLI entry point for Weaver."""

from __future__ import annotations

import logging
from pathlib import Path

import click

from weaver import __version__
from weaver.cli.commands.generate import generate
from weaver.cli.commands.templates import templates
from weaver.cli.context import CLIContext
from weaver.cli.output import format_error
from weaver.config import load_config
from weaver.exceptions import ConfigError
from weaver.logging import configure_logging

_VERBOSITY_LEVELS = {
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def _log_level(verbose: int, quiet: bool, configured: str) -> int:
    # quiet > -v flags > config file
    if quiet:
        return logging.ERROR
    if verbose:
        return logging.INFO if verbose == 1 else logging.DEBUG
    return _VERBOSITY_LEVELS.get(configured, logging.WARNING)


@click.group(invoke_without_command=True)
@click.version_option(version=__version__, prog_name="weaver")
@click.option(
    "-c",
    "--config",
    "config_file",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Project config file to use instead of ./weaver.yaml.",
)
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Increase verbosity (-v for INFO, -vv for DEBUG).",
)
@click.option(
    "-q",
    "--quiet",
    is_flag=True,
    default=False,
    help="Only log errors and hide catalog load warnings.",
)
@click.pass_context
def cli(ctx: click.Context, config_file: Path | None, verbose: int, quiet: bool) -> None:
    """Weaver - coordinated CI/CD workflow generation from templates."""
    ctx.ensure_object(dict)

    try:
        config = load_config(config_file)
    except ConfigError as e:
        details = []
        if e.field:
            details.append(f"Field: {e.field}")
        if e.value is not None:
            details.append(f"Value: {e.value}")
        click.echo(format_error(e.message, details=details), err=True)
        ctx.exit(1)

    ctx.obj["cli_ctx"] = CLIContext(
        config=config,
        config_path=config_file,
        verbosity=verbose,
        quiet=quiet,
    )
    configure_logging(level=_log_level(verbose, quiet, config.verbosity))

    if ctx.invoked_subcommand is None:
        click.echo(ctx.get_help())


cli.add_command(templates)
cli.add_command(generate)

if __name__ == "__main__":
    cli()
