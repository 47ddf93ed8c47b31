"""QF-Test command line assembly for one run mode."""

from __future__ import annotations

from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

from ..shared.logging import get_logger
from .arguments import ArgumentList, PresetType

if TYPE_CHECKING:
    from ..build.suites import SuiteDeclaration, SuiteResolver

logger = get_logger(__name__)


class RunMode(Enum):
    """QF-Test run modes and their marker flags."""

    RUN = "-run"
    GENREPORT = "-genreport"
    GENDOC = "-gendoc"

    def __str__(self) -> str:
        return self.value


class CommandLineAssembler(ArgumentList):
    """Argument list bound to a QF-Test binary and exactly one run mode.

    The binary is token 0. The target mode's marker is enforced right after
    it, and the markers of all other modes are dropped, so user supplied
    parameters can never switch the mode.
    """

    def __init__(
        self,
        binary: str | Path,
        mode: RunMode = RunMode.RUN,
        resolver: SuiteResolver | None = None,
    ) -> None:
        """Initialize assembler.

        Args:
            binary: Path to the qftest executable
            mode: Run mode whose marker gets enforced
            resolver: Suite resolver for add_suite_config (default: *.qft files)
        """
        super().__init__()
        self.mode = mode
        self._resolver = resolver
        self.append_literal(str(binary))
        for run_mode in RunMode:
            if run_mode == mode:
                self.preset(PresetType.ENFORCE, run_mode.value)
            else:
                self.preset(PresetType.DROP, run_mode.value)

    @property
    def resolver(self) -> SuiteResolver:
        if self._resolver is None:
            from ..build.suites import SuiteResolver

            self._resolver = SuiteResolver()
        return self._resolver

    def add_custom_params(
        self, custom_param: str | None, env: Mapping[str, str] | None = None
    ) -> ArgumentList:
        """Expand placeholders in ``custom_param``, tokenize and append it.

        A trailing key without its value does not reach into whatever is
        appended next.
        """
        from ..build.environment import EnvironmentExpander

        expanded = EnvironmentExpander(env or {}).expand(custom_param or "")
        return self.append_tokenized(expanded).reset_state()

    def add_suite_config(
        self,
        workspace: str | Path,
        suite: SuiteDeclaration,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Append a suite's custom parameters and its resolved suite files.

        Args:
            workspace: Directory the suite name is relative to
            suite: Suite declaration
            env: Build environment used to expand $NAME placeholders

        Returns:
            Number of resolved suite files; 0 means nothing matched
        """
        self.add_custom_params(suite.custom_param, env)
        paths = [str(path) for path in self.resolver.resolve(Path(workspace), suite)]
        for path in paths:
            self.append_literal(path)
        logger.debug("suite resolved", suite=suite.suitename, matches=len(paths))
        return len(paths)
