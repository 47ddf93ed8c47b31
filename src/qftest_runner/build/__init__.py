"""Build step package.

This package runs QF-Test from a CI job:
1. Loads and validates the job configuration
2. Resolves suite declarations to suite files
3. Launches one QF-Test process per suite declaration
4. Generates HTML/JUnit reports (or test documentation)
5. Aggregates exit codes into a build result
"""

from .artifacts import ReportDirectory
from .environment import BuildContext, EnvironmentExpander
from .job import DaemonConfig, JobConfig, load_job_config, parse_job_config
from .launcher import DryRunLauncher, ProcessLauncher
from .results import BuildResult, ResultPolicy, StepOutcome, StepReport, worst
from .steps import BuildStep, DocStep, TestRunStep
from .suites import SuiteDeclaration, SuiteResolver

__all__ = [
    # Suites
    "SuiteDeclaration",
    "SuiteResolver",
    # Environment
    "BuildContext",
    "EnvironmentExpander",
    # Job configuration
    "DaemonConfig",
    "JobConfig",
    "load_job_config",
    "parse_job_config",
    # Processes
    "ProcessLauncher",
    "DryRunLauncher",
    # Results
    "BuildResult",
    "ResultPolicy",
    "StepOutcome",
    "StepReport",
    "worst",
    # Artifacts
    "ReportDirectory",
    # Steps
    "BuildStep",
    "TestRunStep",
    "DocStep",
]
