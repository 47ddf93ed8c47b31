"""Logging configuration for qftest-runner.

Configures structlog with human-readable output on stderr by default and
JSON output for log collection on CI agents. Events logged while a build
step runs carry the job name, build number and step (see
build_log_context), so one log file can hold several builds.
"""

import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from pathlib import Path

import structlog

DEFAULT_LOGGER_NAME = "qftest_runner"


def configure_logging(
    level: str = "warning",
    log_file: str | Path | None = None,
    json_output: bool = False,
) -> None:
    """Configure logging for the application.

    Called once on startup. Configures both standard logging and structlog.

    Args:
        level: Log level (debug, info, warning, error, critical)
        log_file: Optional path to a log file instead of stderr
        json_output: If True, render events as JSON lines

    Usage:
        Interactive: configure_logging(level) (stderr, human-readable)
        CI log collection: configure_logging(level, log_file=path, json_output=True)
    """
    log_level = getattr(logging, level.upper(), logging.WARNING)

    handlers: list[logging.Handler] = []

    if log_file:
        file_handler = logging.FileHandler(str(log_file))
        file_handler.setLevel(log_level)
        handlers.append(file_handler)
    else:
        stream_handler = logging.StreamHandler(sys.stderr)
        stream_handler.setLevel(log_level)
        handlers.append(stream_handler)

    logging.basicConfig(
        level=log_level,
        handlers=handlers,
        format="%(message)s",
        force=True,
    )

    processors: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
    ]

    if json_output:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=False))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structlog logger instance.

    Args:
        name: Logger name (typically __name__, default: qftest_runner)

    Returns:
        Configured structlog logger
    """
    return structlog.get_logger(name or DEFAULT_LOGGER_NAME)


@contextmanager
def build_log_context(job_name: str, build_number: str, step: str) -> Iterator[None]:
    """Bind job, build and step to every event logged inside the block."""
    with structlog.contextvars.bound_contextvars(job=job_name, build=build_number, step=step):
        yield
