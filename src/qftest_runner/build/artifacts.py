"""Report directory of one build inside the workspace.

Layout: <workspace>/<reports>/<JOB_NAME>/<BUILD_NUMBER>/{logs,html,junit,doc}
"""

from __future__ import annotations

import shutil
from pathlib import Path

from ..shared.logging import get_logger
from ..shared.paths import (
    DEFAULT_REPORTS_DIR,
    DELETE_MARK,
    DOC_SUBDIR,
    HTML_SUBDIR,
    JUNIT_SUBDIR,
    LOGS_SUBDIR,
)

logger = get_logger(__name__)


class ReportDirectory:
    """Run logs and generated reports of one build."""

    def __init__(
        self,
        workspace: str | Path,
        job_name: str,
        build_number: str,
        reports_directory: str | None = None,
    ):
        self.workspace = Path(workspace)
        self.job_dir = self.workspace / (reports_directory or DEFAULT_REPORTS_DIR) / job_name
        self.root = self.job_dir / str(build_number)

    @property
    def logs(self) -> Path:
        return self.root / LOGS_SUBDIR

    @property
    def html(self) -> Path:
        return self.root / HTML_SUBDIR

    @property
    def junit(self) -> Path:
        return self.root / JUNIT_SUBDIR

    @property
    def doc(self) -> Path:
        return self.root / DOC_SUBDIR

    def prepare(self) -> None:
        """Purge marked directories of earlier builds and create this one."""
        self.purge_marked()
        self.logs.mkdir(parents=True, exist_ok=True)

    def purge_marked(self) -> list[Path]:
        """Delete earlier build directories of this job carrying a delete mark.

        Returns:
            Directories that were removed
        """
        removed: list[Path] = []
        if not self.job_dir.is_dir():
            return removed
        for candidate in sorted(self.job_dir.iterdir()):
            if candidate == self.root or not candidate.is_dir():
                continue
            if (candidate / DELETE_MARK).exists():
                shutil.rmtree(candidate)
                removed.append(candidate)
                logger.info("removed old report directory", path=str(candidate))
        return removed

    def mark_done(self) -> None:
        """Mark this build's directory so the next build may purge it."""
        self.root.mkdir(parents=True, exist_ok=True)
        (self.root / DELETE_MARK).touch()
