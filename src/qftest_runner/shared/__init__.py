"""Shared modules for qftest-runner.

This module provides functionality used by all commands:
- Logging setup (structlog)
- Paths of the tool configuration and report layout
"""

from .logging import build_log_context, configure_logging, get_logger
from .paths import (
    DEFAULT_REPORTS_DIR,
    DELETE_MARK,
    RUNNER_DIR,
    get_config_file,
)

__all__ = [
    # Paths
    "RUNNER_DIR",
    "DEFAULT_REPORTS_DIR",
    "DELETE_MARK",
    "get_config_file",
    # Logging
    "configure_logging",
    "get_logger",
    "build_log_context",
]
