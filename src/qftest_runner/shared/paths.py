"""Path management for qftest-runner.

Manages the ~/.qftest-runner/ directory and the per-workspace report layout
names.
"""

from pathlib import Path

# Base directory for the persisted tool configuration
RUNNER_DIR = Path.home() / ".qftest-runner"

# Default name of the report directory inside the workspace
DEFAULT_REPORTS_DIR = "qftestJenkinsReports"

# Marker file telling the next build that a report directory may be purged
DELETE_MARK = "deleteMark"

# Subdirectories of one build's report directory
LOGS_SUBDIR = "logs"
HTML_SUBDIR = "html"
JUNIT_SUBDIR = "junit"
DOC_SUBDIR = "doc"


def get_config_file() -> Path:
    """Get path to the tool configuration file.

    Returns:
        Path to ~/.qftest-runner/config.yaml
    """
    return RUNNER_DIR / "config.yaml"
