"""Build results and QF-Test exit code mapping."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from functools import reduce

# QF-Test exit codes of a finished run
EXIT_OK = 0
EXIT_WARNINGS = 1
EXIT_ERRORS = 2
EXIT_EXCEPTIONS = 3


class BuildResult(Enum):
    """CI build result, ordered from best to worst."""

    SUCCESS = "success"
    UNSTABLE = "unstable"
    FAILURE = "failure"
    NOT_BUILT = "not_built"
    ABORTED = "aborted"

    @property
    def ordinal(self) -> int:
        return list(BuildResult).index(self)

    def is_worse_than(self, other: BuildResult) -> bool:
        return self.ordinal > other.ordinal

    def combine(self, other: BuildResult) -> BuildResult:
        """Return the worse of both results."""
        return other if other.is_worse_than(self) else self

    @property
    def exit_status(self) -> int:
        """Process exit status for the CLI (0 success, 1 unstable, 2 worse)."""
        if self == BuildResult.SUCCESS:
            return 0
        if self == BuildResult.UNSTABLE:
            return 1
        return 2

    @classmethod
    def parse(cls, name: str) -> BuildResult:
        """Parse a result name case-insensitively (e.g. "UNSTABLE").

        Raises:
            ValueError: Unknown result name
        """
        try:
            return cls(name.strip().lower())
        except ValueError:
            valid = ", ".join(r.value for r in cls)
            raise ValueError(f"Unknown build result '{name}'. Valid results: {valid}") from None


def worst(results: list[BuildResult]) -> BuildResult:
    """Combine results; an empty list is a SUCCESS."""
    return reduce(BuildResult.combine, results, BuildResult.SUCCESS)


@dataclass
class ResultPolicy:
    """Maps QF-Test outcomes to build results."""

    on_warning: BuildResult = BuildResult.UNSTABLE
    on_error: BuildResult = BuildResult.FAILURE
    on_exception: BuildResult = BuildResult.FAILURE
    on_not_found: BuildResult = BuildResult.FAILURE

    def for_exit_code(self, exit_code: int) -> BuildResult:
        if exit_code == EXIT_OK:
            return BuildResult.SUCCESS
        if exit_code == EXIT_WARNINGS:
            return self.on_warning
        if exit_code == EXIT_ERRORS:
            return self.on_error
        if exit_code == EXIT_EXCEPTIONS:
            return self.on_exception
        # Negative codes: QF-Test could not run the suite at all
        return BuildResult.FAILURE


@dataclass
class StepOutcome:
    """Outcome of one QF-Test invocation (or of a skipped one)."""

    name: str
    result: BuildResult
    exit_code: int | None = None
    command: list[str] = field(default_factory=list)
    error: str | None = None
    error_code: str | None = None

    def to_dict(self) -> dict:
        return {
            "name": self.name,
            "result": self.result.value,
            "exit_code": self.exit_code,
            "command": self.command,
            "error": self.error,
            "error_code": self.error_code,
        }


@dataclass
class StepReport:
    """All outcomes of a build step and their combined result."""

    outcomes: list[StepOutcome] = field(default_factory=list)

    def add(self, outcome: StepOutcome) -> StepOutcome:
        self.outcomes.append(outcome)
        return outcome

    @property
    def result(self) -> BuildResult:
        return worst([o.result for o in self.outcomes])

    def to_dict(self) -> dict:
        return {
            "result": self.result.value,
            "outcomes": [o.to_dict() for o in self.outcomes],
        }
