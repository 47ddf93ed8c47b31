"""Job configuration: which suites to run and how.

A job file is YAML::

    suites:
      - suitename: suites/
        custom_param: -variable target=$JOB_NAME
    custom_path: /opt/qftest/qftest-8.0.0
    reports_directory: qftestJenkinsReports
    daemon:
      host: testhost
      port: 3543
    timeout: 3600
    results:
      on_warning: unstable
      on_error: failure
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import yaml

from ..commandline.arguments import tokenize
from ..errors import JobConfigError
from .results import BuildResult, ResultPolicy
from .suites import SuiteDeclaration

ILLEGAL_REPORT_DIR_CHARS = (":", "*", "?", "<", ">", "|")

# Parameters the run step manages itself
CONTRADICTING_PARAMS = ("-runlogdir",)

RESULT_KEYS = ("on_warning", "on_error", "on_exception", "on_not_found")


@dataclass
class DaemonConfig:
    """Run suites on a QF-Test daemon instead of locally."""

    host: str = ""
    port: str = ""

    @property
    def enabled(self) -> bool:
        return bool(self.host and self.port)


@dataclass
class JobConfig:
    """Configuration of one build step."""

    suites: list[SuiteDeclaration] = field(default_factory=list)
    custom_path: str = ""
    reports_directory: str = ""
    daemon: DaemonConfig = field(default_factory=DaemonConfig)
    timeout: float | None = None
    results: ResultPolicy = field(default_factory=ResultPolicy)

    # Problems found while reading the raw file (unknown result names etc.)
    _load_errors: list[str] = field(default_factory=list)

    def validate(self) -> tuple[list[str], list[str]]:
        """Check the configuration before a build.

        Returns:
            Tuple of (errors, warnings)
        """
        errors: list[str] = list(self._load_errors)
        warnings: list[str] = []

        if not self.suites:
            errors.append("No suites were added to be run")
        for i, suite in enumerate(self.suites, 1):
            if not suite.suitename.strip() and not suite.has_suitesfile:
                errors.append(f"Suite #{i}: the suite name is empty")
            params = tokenize(suite.custom_param)
            for param in CONTRADICTING_PARAMS:
                if param in params:
                    warnings.append(
                        f"Suite #{i}: setting a custom `{param}` parameter contradicts "
                        "the plugin behavior and will be dropped"
                    )

        if any(c in self.reports_directory for c in ILLEGAL_REPORT_DIR_CHARS):
            errors.append(
                "The name set for the temporary reports contains one or more of these "
                "illegal characters: * ? < > | :"
            )

        if bool(self.daemon.host) != bool(self.daemon.port):
            errors.append("Daemon mode needs both a host and a port")

        if self.timeout is not None and self.timeout <= 0:
            errors.append("timeout must be a positive number of seconds")

        return errors, warnings


def _parse_suites(raw: Any) -> list[SuiteDeclaration]:
    if raw is None:
        return []
    if not isinstance(raw, list):
        raise JobConfigError(message="'suites' must be a list")

    suites = []
    for i, entry in enumerate(raw, 1):
        if isinstance(entry, str):
            suites.append(SuiteDeclaration(suitename=entry))
        elif isinstance(entry, dict):
            suites.append(
                SuiteDeclaration(
                    suitename=str(entry.get("suitename") or ""),
                    custom_param=str(entry.get("custom_param") or ""),
                )
            )
        else:
            raise JobConfigError(message=f"Suite #{i} must be a mapping or a string")
    return suites


def parse_job_config(data: dict[str, Any]) -> JobConfig:
    """Build a JobConfig from a parsed YAML mapping.

    Raises:
        JobConfigError: Structurally invalid data
    """
    if not isinstance(data, dict):
        raise JobConfigError(message="Job file must contain a mapping")

    config = JobConfig(
        suites=_parse_suites(data.get("suites")),
        custom_path=str(data.get("custom_path") or ""),
        reports_directory=str(data.get("reports_directory") or ""),
    )

    daemon = data.get("daemon") or {}
    if not isinstance(daemon, dict):
        raise JobConfigError(message="'daemon' must be a mapping with host and port")
    config.daemon = DaemonConfig(
        host=str(daemon.get("host") or ""),
        port=str(daemon.get("port") or ""),
    )

    if data.get("timeout") is not None:
        try:
            config.timeout = float(data["timeout"])
        except (TypeError, ValueError):
            raise JobConfigError(message="timeout must be a number of seconds") from None

    results = data.get("results") or {}
    if not isinstance(results, dict):
        raise JobConfigError(message="'results' must be a mapping")
    for key, value in results.items():
        if key not in RESULT_KEYS:
            config._load_errors.append(
                f"Unknown results key '{key}'. Valid keys: {', '.join(RESULT_KEYS)}"
            )
            continue
        try:
            setattr(config.results, key, BuildResult.parse(str(value)))
        except ValueError as e:
            config._load_errors.append(f"results.{key}: {e}")

    return config


def load_job_config(path: str | Path) -> JobConfig:
    """Load a job file.

    Raises:
        JobConfigError: File unreadable, not YAML, or structurally invalid
    """
    path = Path(path)
    try:
        with path.open() as f:
            data = yaml.safe_load(f) or {}
    except OSError as e:
        raise JobConfigError(
            message=f"Cannot read job file {path}: {e}", data={"path": str(path)}
        ) from e
    except yaml.YAMLError as e:
        raise JobConfigError(
            message=f"Job file {path} is not valid YAML: {e}", data={"path": str(path)}
        ) from e

    return parse_job_config(data)
