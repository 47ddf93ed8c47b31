"""Process launching for QF-Test invocations."""

from __future__ import annotations

import shlex
import subprocess
from collections.abc import Mapping, Sequence
from pathlib import Path

from ..errors import map_launch_error
from ..shared.logging import get_logger

logger = get_logger(__name__)


class ProcessLauncher:
    """Runs a command line and waits for it to exit.

    The child inherits stdout/stderr, so QF-Test output lands in the build
    log directly.
    """

    def __init__(self, timeout: float | None = None):
        """Initialize launcher.

        Args:
            timeout: Seconds to wait for each process (None = no limit)
        """
        self.timeout = timeout

    def launch(
        self,
        command: Sequence[str],
        cwd: str | Path,
        env: Mapping[str, str] | None = None,
    ) -> int:
        """Run ``command`` (token 0 is the executable).

        Args:
            command: Finished token sequence
            cwd: Working directory
            env: Full environment for the child (None = inherit)

        Returns:
            Exit code of the process

        Raises:
            LaunchError: Process could not be started or timed out
        """
        argv = list(command)
        logger.info("launching process", command=shlex.join(argv), cwd=str(cwd))
        try:
            result = subprocess.run(
                argv,
                cwd=str(cwd),
                env=dict(env) if env is not None else None,
                timeout=self.timeout,
            )
        except (OSError, subprocess.TimeoutExpired) as e:
            raise map_launch_error(e, argv) from e

        logger.info("process finished", executable=argv[0], exit_code=result.returncode)
        return result.returncode


class DryRunLauncher(ProcessLauncher):
    """Records command lines instead of running them; always returns 0."""

    def __init__(self) -> None:
        super().__init__()
        self.commands: list[list[str]] = []

    def launch(
        self,
        command: Sequence[str],
        cwd: str | Path,
        env: Mapping[str, str] | None = None,
    ) -> int:
        argv = list(command)
        self.commands.append(argv)
        logger.info("dry run, not launching", command=shlex.join(argv), cwd=str(cwd))
        return 0
