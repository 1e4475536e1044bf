"""``weaver generate``: multi-workflow generation from a plan file."""

from __future__ import annotations

from pathlib import Path
from typing import Any

import click
from pydantic import ValidationError
from rich.table import Table

from weaver.cli.common import cli_error_handler, get_store, read_structured_file
from weaver.cli.console import console
from weaver.cli.context import CLIContext, ExitCode
from weaver.cli.output import format_error, format_json, format_warning
from weaver.coordination import (
    Coordinator,
    MultiWorkflowConfiguration,
    MultiWorkflowResult,
    derive_dependencies,
    shared_secrets,
    write_workflow_files,
)
from weaver.logging import get_logger

__all__ = ["generate", "load_plan"]

logger = get_logger(__name__)


def load_plan(path: Path) -> MultiWorkflowConfiguration:
    """Read a plan file and fill in the coordination block it leaves out.

    Dependencies are derived from the requested workflow types when the plan
    declares none; shared secrets are computed the same way.

    Raises:
        click.BadParameter: The file is not a valid plan.
    """
    data = read_structured_file(path)
    if not isinstance(data, dict):
        raise click.BadParameter(f"{path} must contain a mapping", param_hint="PLAN")
    try:
        plan = MultiWorkflowConfiguration.model_validate(data)
    except ValidationError as e:
        problems = "; ".join(
            f"{'.'.join(str(p) for p in err['loc'])}: {err['msg']}" for err in e.errors()
        )
        raise click.BadParameter(
            f"{path} is not a valid plan: {problems}", param_hint="PLAN"
        ) from e

    coordination = plan.coordination
    updates: dict[str, Any] = {}
    if not coordination.dependencies:
        updates["dependencies"] = derive_dependencies(plan.workflows)
    if not coordination.shared_secrets:
        updates["shared_secrets"] = shared_secrets(plan.workflows)
    if updates:
        plan = plan.model_copy(update={"coordination": coordination.model_copy(update=updates)})
    return plan


def _confirm_replace(path: Path) -> bool:
    return click.confirm(f"Replace existing {path}?", default=False, err=True)


def _print_summary(result: MultiWorkflowResult, written: list[Path], dry_run: bool) -> None:
    if result.workflows:
        table = Table(title="Generated workflows")
        table.add_column("Workflow")
        table.add_column("Template")
        table.add_column("File")
        table.add_column("Depends on")
        for workflow in result.workflows:
            table.add_row(
                workflow.workflow or "-",
                workflow.template_id,
                workflow.filename,
                ", ".join(workflow.dependencies) or "-",
            )
        console.print(table)

    if result.coordination.execution_order:
        click.echo(f"Execution order: {' -> '.join(result.coordination.execution_order)}")
    for warning in result.warnings:
        click.echo(format_warning(warning), err=True)
    for error in result.errors:
        click.echo(format_error(error), err=True)

    if dry_run:
        click.echo(f"Dry run: {len(result.workflows)} workflow(s) not written")
    else:
        for path in written:
            click.echo(f"Wrote {path}")


@click.command("generate")
@click.argument(
    "plan_file",
    metavar="PLAN",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "--output-dir",
    type=click.Path(file_okay=False, path_type=Path),
    default=None,
    help="Directory for workflow files (default from config).",
)
@click.option(
    "--input",
    "input_path",
    type=click.Path(path_type=Path),
    default=None,
    help="Project description the workflows are generated for.",
)
@click.option("--dry-run", is_flag=True, default=False, help="Generate without writing files.")
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["text", "json"]),
    default="text",
    help="Output format.",
)
@click.pass_context
def generate(
    ctx: click.Context,
    plan_file: Path,
    output_dir: Path | None,
    input_path: Path | None,
    dry_run: bool,
    fmt: str,
) -> None:
    """Generate a set of coordinated workflows from PLAN.

    PLAN is a YAML or JSON file with ``workflows`` and optional
    ``coordination``, ``templates`` and ``customizations``.

    Exit code is 0 when every workflow was generated, 2 when only some were
    and 1 when none were.

    Examples:
        weaver generate plan.yaml
        weaver generate plan.yaml --dry-run --format json
        weaver generate plan.yaml --output-dir build/workflows
    """
    cli_ctx: CLIContext = ctx.obj["cli_ctx"]
    generation = cli_ctx.config.generation
    output_directory = output_dir or generation.output_directory
    source = input_path or generation.input_path

    with cli_error_handler():
        plan = load_plan(plan_file)
        store = get_store(ctx)
        logger.debug("plan_loaded", path=str(plan_file), workflows=len(plan.workflows))

        result = Coordinator(store).generate_multi_workflow(plan, source, output_directory)
        written = (
            []
            if dry_run
            else write_workflow_files(
                result.workflows,
                output_directory,
                conflict_resolution=plan.coordination.conflict_resolution,
                confirm=_confirm_replace,
            )
        )

        if fmt == "json":
            payload = result.to_dict()
            payload["written"] = [str(p) for p in written]
            click.echo(format_json(payload))
        else:
            _print_summary(result, written, dry_run)

    if not result.success:
        raise SystemExit(ExitCode.PARTIAL if result.partial else ExitCode.FAILURE)
