"""Error types for qftest-runner.

Every error carries a stable string code, a human readable message and an
optional data dict for structured logging.
"""

import subprocess
from dataclasses import dataclass, field
from typing import Any

# Error codes
INVALID_PRESET = "INVALID_PRESET"
NO_SUITES_RESOLVED = "NO_SUITES_RESOLVED"
LAUNCH_FAILED = "LAUNCH_FAILED"
LAUNCH_TIMEOUT = "LAUNCH_TIMEOUT"
BINARY_NOT_FOUND = "BINARY_NOT_FOUND"
INVALID_JOB_CONFIG = "INVALID_JOB_CONFIG"


@dataclass
class QFTestRunnerError(Exception):
    """Base error class for qftest-runner errors."""

    code: str
    message: str
    data: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dict (for JSON output)."""
        error: dict[str, Any] = {"code": self.code, "message": self.message}
        if self.data:
            error["data"] = self.data
        return error


@dataclass
class InvalidPresetError(QFTestRunnerError):
    """A preset kind that needs a value was registered without one."""

    code: str = INVALID_PRESET
    message: str = "This preset type requires a value argument"


@dataclass
class NoSuitesResolvedError(QFTestRunnerError):
    """A suite declaration matched no files in the workspace."""

    code: str = NO_SUITES_RESOLVED
    message: str = "No matching suite files found"


@dataclass
class LaunchError(QFTestRunnerError):
    """The external process could not be started or did not finish in time."""

    code: str = LAUNCH_FAILED
    message: str = "Process could not be launched"


@dataclass
class BinaryNotFoundError(QFTestRunnerError):
    """No QF-Test executable in the configured installation directory."""

    code: str = BINARY_NOT_FOUND
    message: str = "Couldn't find QF-Test"


@dataclass
class JobConfigError(QFTestRunnerError):
    """Job file could not be read or is structurally invalid."""

    code: str = INVALID_JOB_CONFIG
    message: str = "Invalid job configuration"


def map_launch_error(error: Exception, command: list[str]) -> LaunchError:
    """Map an exception raised while running a process to LaunchError.

    Args:
        error: Exception from subprocess
        command: Token sequence that was being executed

    Returns:
        LaunchError with code LAUNCH_TIMEOUT or LAUNCH_FAILED
    """
    executable = command[0] if command else "<empty command>"
    if isinstance(error, subprocess.TimeoutExpired):
        return LaunchError(
            code=LAUNCH_TIMEOUT,
            message=f"{executable} did not finish within {error.timeout} seconds",
            data={"command": command, "timeout": error.timeout},
        )
    if isinstance(error, FileNotFoundError):
        return LaunchError(
            message=f"Executable not found: {executable}",
            data={"command": command, "original_error": str(error)},
        )
    return LaunchError(
        message=f"Cannot start {executable}: {error}",
        data={"command": command, "original_error": str(error)},
    )
