"""Build steps: run test-suites and generate reports, or generate docs.

A step validates the job, locates QF-Test, then launches one process per
suite declaration (sequentially, each with its own command line) and
collects the outcomes into a StepReport.
"""

from __future__ import annotations

from collections.abc import Callable

import click

from ..commandline import CommandLineAssembler, PresetType, RunMode
from ..config import ToolConfig
from ..errors import (
    INVALID_JOB_CONFIG,
    BinaryNotFoundError,
    LaunchError,
    NoSuitesResolvedError,
)
from ..shared.logging import build_log_context, get_logger
from .artifacts import ReportDirectory
from .environment import BuildContext, EnvironmentExpander
from .job import JobConfig
from .launcher import DryRunLauncher, ProcessLauncher
from .results import BuildResult, StepOutcome, StepReport
from .suites import RUNLOG_SEARCH_PATTERN, SuiteDeclaration, SuiteResolver

logger = get_logger(__name__)

LOG_PREFIX = "[qftest plugin]"

# Always set for batch runs
BATCH_FLAGS = ("-batch", "-nomessagewindow")
RUN_FLAGS = ("-batch", "-exitcodeignoreexception", "-nomessagewindow")

# Report options that take a value; reports are only built by -genreport
REPORT_PARAMS = ("-report", "-report.html", "-report.junit", "-report.xml", "-report.name")

# Run options that make no sense for report generation
RUN_ONLY_PARAMS = ("-runlog", "-runlogdir", "-runid", "-suitesfile")

RUNLOG_NAME = "log_+b"
RUNID_TEMPLATE = "${JOB_NAME}-${BUILD_NUMBER}-+y+M+d+h+m+s"


class BuildStep:
    """Common setup and invocation logic of the build steps."""

    name = "step"

    def __init__(
        self,
        job: JobConfig,
        tool_config: ToolConfig,
        context: BuildContext,
        launcher: ProcessLauncher | None = None,
        dry_run: bool = False,
        echo: Callable[[str], None] | None = None,
    ):
        """Initialize build step.

        Args:
            job: Job configuration
            tool_config: QF-Test installation paths
            context: Workspace and build identity
            launcher: Process launcher (default depends on dry_run)
            dry_run: Only print the command lines
            echo: Writer for build log lines (default: click.echo)
        """
        self.job = job
        self.tool_config = tool_config
        self.context = context
        self.dry_run = dry_run
        if launcher is None:
            launcher = DryRunLauncher() if dry_run else ProcessLauncher(timeout=job.timeout)
        self.launcher = launcher
        self._echo = echo or click.echo
        self.env = context.environment()
        self.reports = ReportDirectory(
            context.workspace,
            context.job_name,
            context.build_number,
            job.reports_directory,
        )

    def log(self, message: str) -> None:
        self._echo(f"{LOG_PREFIX} {message}")

    def perform(self) -> StepReport:
        """Run the step.

        Never raises for build problems; they end up as FAILURE outcomes.
        Log events emitted meanwhile carry the job, build and step names.
        """
        with build_log_context(self.context.job_name, self.context.build_number, self.name):
            return self._perform()

    def _perform(self) -> StepReport:
        report = StepReport()

        errors, warnings = self.job.validate()
        for warning in warnings:
            self.log(f"WARNING: {warning}")
        if errors:
            for error in errors:
                self.log(f"ERROR: {error}")
            report.add(
                StepOutcome(
                    name="configuration",
                    result=BuildResult.FAILURE,
                    error="; ".join(errors),
                    error_code=INVALID_JOB_CONFIG,
                )
            )
            return report

        self.log("Setting path for QF-Test...")
        try:
            binary = self.tool_config.resolve_binary(self.job.custom_path, self.context.windows)
        except BinaryNotFoundError as e:
            self.log(f"ERROR: {e.message}")
            report.add(
                StepOutcome(name="qftest", result=BuildResult.FAILURE, error=e.message, error_code=e.code)
            )
            return report

        self.log("Setting directories...")
        try:
            self.prepare_directories()
        except OSError as e:
            self.log(f"ERROR: Can't prepare report directory {self.reports.root}: {e}")
            report.add(StepOutcome(name="reports", result=BuildResult.FAILURE, error=str(e)))
            return report

        self.run(binary, report)
        self.log(f"Done, result: {report.result.value.upper()}")
        return report

    def prepare_directories(self) -> None:
        self.reports.prepare()

    def run(self, binary: str, report: StepReport) -> None:
        raise NotImplementedError

    def map_exit_code(self, exit_code: int) -> BuildResult:
        return self.job.results.for_exit_code(exit_code)

    def invoke_suite(
        self,
        args: CommandLineAssembler,
        suite: SuiteDeclaration,
        report: StepReport,
    ) -> StepOutcome:
        """Add ``suite`` to ``args`` and launch it."""
        try:
            count = args.add_suite_config(self.context.workspace, suite, self.env)
        except (OSError, ValueError) as e:
            # ValueError: glob pattern pathlib rejects (e.g. "**.qft")
            self.log(f"ERROR: Can't resolve test-suites for `{suite.suitename}': {e}")
            return report.add(
                StepOutcome(name=suite.suitename, result=BuildResult.FAILURE, error=str(e))
            )

        if count == 0:
            error = NoSuitesResolvedError(
                message=f"No test-suites found for `{suite.suitename}'",
                data={"suitename": suite.suitename},
            )
            self.log(f"ERROR: {error.message}")
            return report.add(
                StepOutcome(
                    name=suite.suitename,
                    result=self.job.results.on_not_found,
                    command=args.to_list(),
                    error=error.message,
                    error_code=error.code,
                )
            )

        return self.launch(suite.suitename, args, report)

    def launch(
        self,
        name: str,
        args: CommandLineAssembler,
        report: StepReport,
        map_exit_code: Callable[[int], BuildResult] | None = None,
    ) -> StepOutcome:
        """Launch the finished command line and record the outcome."""
        command = args.to_list()
        self.log(str(args))
        try:
            exit_code = self.launcher.launch(command, cwd=self.context.workspace, env=self.env)
        except LaunchError as e:
            self.log(f"ERROR: {e.message}")
            logger.error("launch failed", command=command, error=e.message, code=e.code)
            return report.add(
                StepOutcome(
                    name=name,
                    result=BuildResult.FAILURE,
                    command=command,
                    error=e.message,
                    error_code=e.code,
                )
            )

        result = (map_exit_code or self.map_exit_code)(exit_code)
        logger.info("invocation finished", name=name, exit_code=exit_code, result=result.value)
        return report.add(
            StepOutcome(name=name, result=result, exit_code=exit_code, command=command)
        )


class TestRunStep(BuildStep):
    """Runs every suite declaration, then generates HTML and JUnit reports."""

    __test__ = False  # not a pytest class

    name = "run"

    def run(self, binary: str, report: StepReport) -> None:
        for suite in self.job.suites:
            suite = suite.consider_suitesfile()
            self.log(f"Running {suite}")
            self.invoke_suite(self.run_command_line(binary), suite, report)

        self.log("Generating reports...")
        self.generate_reports(binary, report)

        try:
            self.reports.mark_done()
        except OSError as e:
            logger.warning("cannot mark report directory", path=str(self.reports.root), error=str(e))

    def run_command_line(self, binary: str) -> CommandLineAssembler:
        """Command line for running suites, before any suite is added."""
        args = CommandLineAssembler(binary, RunMode.RUN)
        for flag in RUN_FLAGS:
            args.preset(PresetType.ENFORCE, flag)

        daemon = self.job.daemon
        if daemon.enabled:
            args.preset(PresetType.ENFORCE, "-calldaemon")
            args.preset(PresetType.ENFORCE, "-daemonhost", daemon.host)
            args.preset(PresetType.ENFORCE, "-daemonport", daemon.port)

        args.preset(PresetType.DEFAULT, "-runlog", str(self.reports.logs / RUNLOG_NAME))
        args.preset(
            PresetType.DEFAULT, "-runid", EnvironmentExpander(self.env).expand(RUNID_TEMPLATE)
        )
        args.preset(PresetType.DROP, "-runlogdir", "")
        for param in REPORT_PARAMS:
            args.preset(PresetType.DROP, param, "")
        return args

    def report_command_line(self, binary: str) -> CommandLineAssembler:
        """Command line for report generation, before run logs are added."""
        args = CommandLineAssembler(
            binary, RunMode.GENREPORT, resolver=SuiteResolver(RUNLOG_SEARCH_PATTERN)
        )
        for flag in BATCH_FLAGS:
            args.preset(PresetType.ENFORCE, flag)
        for param in RUN_ONLY_PARAMS:
            args.preset(PresetType.DROP, param, "")
        args.preset(PresetType.DEFAULT, "-report.html", str(self.reports.html))
        args.preset(PresetType.DEFAULT, "-report.junit", str(self.reports.junit))
        return args

    def generate_reports(self, binary: str, report: StepReport) -> StepOutcome:
        args = self.report_command_line(binary)
        for suite in self.job.suites:
            args.add_custom_params(suite.custom_param, self.env)

        runlogs = SuiteDeclaration(suitename=str(self.reports.logs))
        try:
            count = args.add_suite_config(self.context.workspace, runlogs, self.env)
        except (OSError, ValueError) as e:
            self.log(f"ERROR: Can't read run logs in {self.reports.logs}: {e}")
            return report.add(StepOutcome(name="genreport", result=BuildResult.FAILURE, error=str(e)))

        if count == 0:
            if not self.dry_run:
                error = NoSuitesResolvedError(
                    message=f"No run logs found in {self.reports.logs}, no reports generated",
                    data={"directory": str(self.reports.logs)},
                )
                self.log(f"ERROR: {error.message}")
                return report.add(
                    StepOutcome(
                        name="genreport",
                        result=BuildResult.FAILURE,
                        command=args.to_list(),
                        error=error.message,
                        error_code=error.code,
                    )
                )
            # Nothing has run yet; show where the logs would be read from
            args.append_literal(str(self.reports.logs))

        return self.launch("genreport", args, report, map_exit_code=_zero_is_success)


class DocStep(BuildStep):
    """Generates test documentation (-gendoc) for every suite declaration."""

    name = "docs"

    def prepare_directories(self) -> None:
        super().prepare_directories()
        self.reports.doc.mkdir(parents=True, exist_ok=True)

    def run(self, binary: str, report: StepReport) -> None:
        for suite in self.job.suites:
            suite = suite.consider_suitesfile()
            self.log(f"Generating documentation for {suite}")
            self.invoke_suite(self.doc_command_line(binary), suite, report)

    def map_exit_code(self, exit_code: int) -> BuildResult:
        # Documentation has no warning levels
        return _zero_is_success(exit_code)

    def doc_command_line(self, binary: str) -> CommandLineAssembler:
        args = CommandLineAssembler(binary, RunMode.GENDOC)
        for flag in BATCH_FLAGS:
            args.preset(PresetType.ENFORCE, flag)
        args.preset(PresetType.DEFAULT, "-testdoc", str(self.reports.doc))
        return args


def _zero_is_success(exit_code: int) -> BuildResult:
    return BuildResult.SUCCESS if exit_code == 0 else BuildResult.FAILURE
