"""Shared test fixtures for qftest-runner tests.

This module provides:
- workspace: a temporary workspace with a few .qft suites
- qftest_install: a fake QF-Test installation directory
- RecordingLauncher: launcher double that records command lines and writes
  run logs the way QF-Test would
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from pathlib import Path

import pytest

from qftest_runner.build import BuildContext, JobConfig, SuiteDeclaration
from qftest_runner.build.launcher import ProcessLauncher
from qftest_runner.config import ToolConfig

# =============================================================================
# Workspace and installation
# =============================================================================


@pytest.fixture
def workspace(tmp_path: Path) -> Path:
    """Workspace layout::

    suites/a.qft
    suites/b.qft
    suites/nested/c.qft
    suites/notes.txt
    smoke.qft
    """
    ws = tmp_path / "workspace"
    (ws / "suites" / "nested").mkdir(parents=True)
    for name in ("suites/a.qft", "suites/b.qft", "suites/nested/c.qft", "smoke.qft"):
        (ws / name).write_text("<RootStep/>")
    (ws / "suites" / "notes.txt").write_text("not a suite")
    return ws


@pytest.fixture
def qftest_install(tmp_path: Path) -> Path:
    """Fake QF-Test installation with the executable in bin/."""
    install = tmp_path / "qftest-8.0.0"
    (install / "bin").mkdir(parents=True)
    (install / "bin" / "qftest").write_text("#!/bin/sh\nexit 0\n")
    (install / "bin" / "qftestc.exe").write_text("")
    return install


@pytest.fixture
def tool_config(qftest_install: Path) -> ToolConfig:
    return ToolConfig(qf_path=str(qftest_install), qf_path_unix=str(qftest_install))


@pytest.fixture
def context(workspace: Path) -> BuildContext:
    return BuildContext(workspace=str(workspace), job_name="nightly", build_number="42")


@pytest.fixture
def job() -> JobConfig:
    return JobConfig(
        suites=[
            SuiteDeclaration("suites", "-variable target=$JOB_NAME"),
            SuiteDeclaration("smoke.qft"),
        ]
    )


# =============================================================================
# Launcher double
# =============================================================================


@dataclass
class RecordingLauncher(ProcessLauncher):
    """Records each command line and answers with scripted exit codes.

    For -run invocations it writes one .qrz run log per suite into the
    -runlog directory, like QF-Test does.
    """

    exit_codes: list[int] = field(default_factory=list)
    default_exit_code: int = 0
    write_runlogs: bool = True
    commands: list[list[str]] = field(default_factory=list)
    envs: list[dict[str, str]] = field(default_factory=list)

    def launch(
        self,
        command: Sequence[str],
        cwd: str | Path,
        env: Mapping[str, str] | None = None,
    ) -> int:
        argv = list(command)
        self.commands.append(argv)
        self.envs.append(dict(env or {}))

        if self.write_runlogs and "-run" in argv and "-runlog" in argv:
            runlog = Path(argv[argv.index("-runlog") + 1])
            runlog.parent.mkdir(parents=True, exist_ok=True)
            for token in argv:
                if token.endswith(".qft"):
                    name = runlog.name.replace("+b", Path(token).stem)
                    (runlog.parent / f"{name}.qrz").write_text("runlog")

        if self.exit_codes:
            return self.exit_codes.pop(0)
        return self.default_exit_code


@pytest.fixture
def launcher() -> RecordingLauncher:
    return RecordingLauncher()


@pytest.fixture
def echo_lines() -> list[str]:
    """Collects build log lines written by a step."""
    return []
