"""CLI main entry point."""

import json
import os
import sys
from importlib.metadata import PackageNotFoundError, version
from pathlib import Path

import click

from . import config as config_module
from .build import BuildContext, DocStep, TestRunStep, load_job_config
from .build.steps import BuildStep
from .config import load_config, save_config, unset_config, validate_config_value
from .errors import JobConfigError
from .formatters import print_config_yaml, print_step_report, print_validation_result
from .shared.logging import configure_logging


def _get_version() -> str:
    try:
        return version("qftest-runner")
    except PackageNotFoundError:
        return "0.0.0.dev0"


@click.group()
@click.option("-v", "--verbose", count=True, help="Increase verbosity")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
@click.option(
    "--log-file",
    type=click.Path(dir_okay=False),
    help="Write JSON log events to this file instead of stderr",
)
@click.pass_context
def cli(ctx: click.Context, verbose: int, json_output: bool, log_file: str | None) -> None:
    """Run QF-Test suites from a CI build."""
    ctx.ensure_object(dict)
    tool_config = load_config()

    level = tool_config.log_level
    if verbose == 1:
        level = "info"
    elif verbose > 1:
        level = "debug"
    configure_logging(level, log_file=log_file, json_output=log_file is not None)

    ctx.obj["verbose"] = verbose
    ctx.obj["json_output"] = json_output
    ctx.obj["tool_config"] = tool_config


def build_options(func):
    """Options shared by the build step commands."""
    options = [
        click.argument("job_file", type=click.Path(exists=True, dir_okay=False)),
        click.option(
            "-w",
            "--workspace",
            type=click.Path(file_okay=False),
            envvar="WORKSPACE",
            default=".",
            show_default=True,
            help="Workspace the suite names are relative to (env: WORKSPACE)",
        ),
        click.option(
            "--job-name",
            envvar="JOB_NAME",
            default="job",
            show_default=True,
            help="Job name used for the report directory (env: JOB_NAME)",
        ),
        click.option(
            "--build-number",
            envvar="BUILD_NUMBER",
            default="0",
            show_default=True,
            help="Build number used for the report directory (env: BUILD_NUMBER)",
        ),
        click.option(
            "--windows/--unix",
            default=os.name == "nt",
            help="Platform of the agent (default: current platform)",
        ),
        click.option("--dry-run", is_flag=True, help="Print command lines without running QF-Test"),
    ]
    for option in reversed(options):
        func = option(func)
    return func


def _perform_step(
    ctx: click.Context,
    step_class: type[BuildStep],
    job_file: str,
    workspace: str,
    job_name: str,
    build_number: str,
    windows: bool,
    dry_run: bool,
) -> None:
    json_output = ctx.obj["json_output"]

    try:
        job = load_job_config(job_file)
    except JobConfigError as e:
        click.echo(f"Error: {e.message}", err=True)
        sys.exit(2)

    context = BuildContext(
        workspace=str(Path(workspace).resolve()),
        job_name=job_name,
        build_number=str(build_number),
        windows=windows,
    )

    # Keep stdout clean for the JSON document
    echo = (lambda line: click.echo(line, err=True)) if json_output else None
    step = step_class(job, ctx.obj["tool_config"], context, dry_run=dry_run, echo=echo)
    report = step.perform()

    if json_output:
        click.echo(json.dumps(report.to_dict(), indent=2))
    else:
        print_step_report(report)

    sys.exit(report.result.exit_status)


@cli.command()
@build_options
@click.pass_context
def run(
    ctx: click.Context,
    job_file: str,
    workspace: str,
    job_name: str,
    build_number: str,
    windows: bool,
    dry_run: bool,
) -> None:
    """Run the job's test-suites and generate HTML/JUnit reports.

    Exit status: 0 SUCCESS, 1 UNSTABLE, 2 FAILURE.
    """
    _perform_step(ctx, TestRunStep, job_file, workspace, job_name, build_number, windows, dry_run)


@cli.command()
@build_options
@click.pass_context
def docs(
    ctx: click.Context,
    job_file: str,
    workspace: str,
    job_name: str,
    build_number: str,
    windows: bool,
    dry_run: bool,
) -> None:
    """Generate test documentation for the job's test-suites."""
    _perform_step(ctx, DocStep, job_file, workspace, job_name, build_number, windows, dry_run)


@cli.command()
@click.argument("file", type=click.Path(exists=True, dir_okay=False))
@click.option("--strict", is_flag=True, help="Treat warnings as errors")
@click.pass_context
def validate(ctx: click.Context, file: str, strict: bool) -> None:
    """Validate a job file."""
    try:
        job = load_job_config(file)
    except JobConfigError as e:
        errors, warnings = [e.message], []
    else:
        errors, warnings = job.validate()

    if ctx.obj["json_output"]:
        click.echo(
            json.dumps(
                {
                    "file": file,
                    "valid": not errors and not (strict and warnings),
                    "errors": errors,
                    "warnings": warnings,
                },
                indent=2,
            )
        )
    else:
        print_validation_result(file, errors, warnings)

    if errors or (strict and warnings):
        sys.exit(1)


@cli.command("version")
def version_cmd() -> None:
    """Show version."""
    click.echo(f"qftest-runner {_get_version()}")


@cli.group()
def config() -> None:
    """Manage the QF-Test tool configuration."""
    pass


@config.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the tool configuration and where each value comes from."""
    tool_config = ctx.obj["tool_config"]
    config_path = config_module.get_config_path()

    if ctx.obj["json_output"]:
        click.echo(
            json.dumps(
                {
                    "path": str(config_path),
                    "values": tool_config.to_dict(),
                    "sources": {key: tool_config.get_source(key) for key in tool_config.to_dict()},
                },
                indent=2,
            )
        )
        return

    click.echo(f"qftest-runner configuration ({config_path}):\n")
    print_config_yaml(
        tool_config.to_dict(),
        {key: tool_config.get_source(key) for key in tool_config.to_dict()},
    )


@config.command("set")
@click.argument("key")
@click.argument("value")
def config_set(key: str, value: str) -> None:
    """Set a configuration value (qf_path, qf_path_unix, log_level)."""
    try:
        value = validate_config_value(key, value)
        save_config(key, value)
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    click.echo(f"Set {key} = {value}")


@config.command("unset")
@click.argument("key")
def config_unset(key: str) -> None:
    """Remove a configuration value from the config file."""
    try:
        removed = unset_config(key)
    except (OSError, ValueError) as e:
        click.echo(f"Error: {e}", err=True)
        sys.exit(1)

    if removed:
        click.echo(f"Unset {key}")
    else:
        click.echo(f"{key} is not set in {config_module.get_config_path()}")


def main() -> None:
    """Main entry point."""
    cli(obj={})


if __name__ == "__main__":
    main()
