"""CLI output formatting helpers."""

from typing import Any

import click
import yaml
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .build.results import BuildResult, StepReport

RESULT_STYLES = {
    BuildResult.SUCCESS: "green",
    BuildResult.UNSTABLE: "yellow",
    BuildResult.FAILURE: "red",
    BuildResult.NOT_BUILT: "dim",
    BuildResult.ABORTED: "dim",
}


def print_config_yaml(data: dict[str, Any], sources: dict[str, str] | None = None) -> None:
    """Print tool config as YAML, with the source of each value as a comment.

    Args:
        data: Configuration values
        sources: Optional key -> source ("default", "config file", "environment")
    """
    for line in yaml.dump(data, default_flow_style=False, sort_keys=False).splitlines():
        key = line.split(":", 1)[0]
        if sources and key in sources:
            click.echo(f"{line}  # {sources[key]}")
        else:
            click.echo(line)


def print_validation_result(file: str, errors: list[str], warnings: list[str]) -> None:
    """Print validation results.

    Args:
        file: File being validated
        errors: List of error messages
        warnings: List of warning messages
    """
    click.echo(f"Validating: {file}\n")

    if errors:
        click.echo("ERRORS:")
        for e in errors:
            click.echo(f"  ✗ {e}")

    if warnings:
        click.echo("WARNINGS:")
        for w in warnings:
            click.echo(f"  ⚠ {w}")

    if not errors and not warnings:
        click.echo("✓ Validation passed")
    elif errors:
        click.echo(f"\nValidation failed with {len(errors)} errors and {len(warnings)} warnings")


def print_step_report(report: StepReport, console: Console | None = None) -> None:
    """Print one row per QF-Test invocation and the combined build result.

    Args:
        report: Outcomes of a build step
        console: Rich console (default: stdout)
    """
    console = console or Console()

    table = Table(title="QF-Test invocations")
    table.add_column("Suite")
    table.add_column("Exit code", justify="right")
    table.add_column("Result")
    table.add_column("Details", overflow="fold")

    for outcome in report.outcomes:
        style = RESULT_STYLES.get(outcome.result, "")
        table.add_row(
            escape(outcome.name),
            "-" if outcome.exit_code is None else str(outcome.exit_code),
            f"[{style}]{outcome.result.value.upper()}[/{style}]" if style else outcome.result.value,
            escape(outcome.error or ""),
        )

    console.print(table)
    style = RESULT_STYLES.get(report.result, "")
    console.print(f"Build result: [{style}]{report.result.value.upper()}[/{style}]")
