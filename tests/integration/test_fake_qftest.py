"""Integration tests running a fake qftest executable.

The fake is a shell script that records its arguments, writes a run log
into the -runlog directory and an HTML report into -report.html, like
QF-Test would. Exit codes are taken from FAKE_QFTEST_EXIT (runs only).
"""

import json
import stat
import sys
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from qftest_runner.build import BuildContext, BuildResult, JobConfig, SuiteDeclaration, TestRunStep
from qftest_runner.config import ToolConfig
from qftest_runner.main import cli

pytestmark = [
    pytest.mark.integration,
    pytest.mark.skipif(sys.platform == "win32", reason="fake qftest is a shell script"),
]

FAKE_QFTEST = """#!/bin/sh
echo "$@" >> "$FAKE_QFTEST_CALLS"
prev=""
runlog=""
html=""
for arg in "$@"; do
    case "$prev" in
        -runlog) runlog="$arg" ;;
        -report.html) html="$arg" ;;
    esac
    prev="$arg"
done
if [ -n "$runlog" ]; then
    dir=$(dirname "$runlog")
    mkdir -p "$dir"
    : > "$dir/log_$$.qrz"
fi
if [ -n "$html" ]; then
    mkdir -p "$html"
    : > "$html/report.html"
fi
if [ "$1" = "-run" ]; then
    exit "${FAKE_QFTEST_EXIT:-0}"
fi
exit 0
"""


@pytest.fixture
def fake_install(tmp_path, monkeypatch):
    install = tmp_path / "fake-qftest"
    (install / "bin").mkdir(parents=True)
    script = install / "bin" / "qftest"
    script.write_text(FAKE_QFTEST)
    script.chmod(script.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)

    calls = tmp_path / "calls.txt"
    monkeypatch.setenv("FAKE_QFTEST_CALLS", str(calls))
    monkeypatch.delenv("FAKE_QFTEST_EXIT", raising=False)
    return install


@pytest.fixture
def calls(tmp_path):
    def read():
        return (tmp_path / "calls.txt").read_text().splitlines()

    return read


class TestFakeQFTest:
    def test_run_and_reports(self, fake_install, calls, workspace, echo_lines):
        job = JobConfig(suites=[SuiteDeclaration("suites"), SuiteDeclaration("smoke.qft")])
        context = BuildContext(workspace=str(workspace), job_name="nightly", build_number="1")
        step = TestRunStep(
            job, ToolConfig(qf_path_unix=str(fake_install)), context, echo=echo_lines.append
        )

        report = step.perform()

        assert report.result == BuildResult.SUCCESS
        lines = calls()
        assert len(lines) == 3
        assert lines[0].startswith("-run -batch")
        assert lines[2].startswith("-genreport -batch")
        assert (step.reports.html / "report.html").exists()
        assert (step.reports.root / "deleteMark").exists()

    def test_warnings_make_build_unstable(
        self, fake_install, calls, workspace, echo_lines, monkeypatch
    ):
        monkeypatch.setenv("FAKE_QFTEST_EXIT", "1")
        job = JobConfig(suites=[SuiteDeclaration("smoke.qft")])
        context = BuildContext(workspace=str(workspace), job_name="nightly", build_number="2")
        step = TestRunStep(
            job, ToolConfig(qf_path_unix=str(fake_install)), context, echo=echo_lines.append
        )

        report = step.perform()

        assert [o.exit_code for o in report.outcomes] == [1, 0]
        assert report.result == BuildResult.UNSTABLE

    def test_cli_exit_status(self, fake_install, workspace, tmp_path, monkeypatch):
        monkeypatch.setenv("FAKE_QFTEST_EXIT", "2")
        for var in ("QFTEST_PATH", "QFTEST_RUNNER_LOG_LEVEL"):
            monkeypatch.delenv(var, raising=False)
        monkeypatch.setenv("QFTEST_PATH_UNIX", str(fake_install))
        job_file = tmp_path / "job.yaml"
        job_file.write_text("suites:\n  - smoke.qft\n")

        args = [
            "--json",
            "run",
            str(job_file),
            "--workspace",
            str(workspace),
            "--job-name",
            "nightly",
            "--build-number",
            "3",
            "--unix",
        ]
        with patch("qftest_runner.config.get_config_path", return_value=tmp_path / "none.yaml"):
            result = CliRunner().invoke(cli, args)

        assert result.exit_code == 2
        data = json.loads(result.stdout)
        assert data["result"] == "failure"
        assert data["outcomes"][0]["exit_code"] == 2
        assert data["outcomes"][1]["name"] == "genreport"
        assert data["outcomes"][1]["result"] == "success"
