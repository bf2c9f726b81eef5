"""Logging configuration for repowiki."""

import logging
import time
from collections.abc import Generator
from contextlib import contextmanager
from datetime import UTC, datetime
from enum import IntEnum
from pathlib import Path
from typing import TextIO

from rich.console import Console
from rich.logging import RichHandler

RUN_LOGGER = "repowiki.run"
RUN_LOG_FORMAT = "[%(asctime)s] %(message)s"
RUN_LOG_DATEFMT = "%Y-%m-%dT%H:%M:%SZ"


class LogLevel(IntEnum):
    """Log level enumeration."""

    QUIET = logging.WARNING
    NORMAL = logging.INFO
    VERBOSE = logging.DEBUG
    SILENT = logging.CRITICAL


def configure_logging(
    verbosity: int = 0,
    quiet: bool = False,
    no_color: bool = False,
    stream: TextIO | None = None,
    debug: bool = False,
    json_mode: bool = False,
) -> Console:
    """Configure console logging based on CLI options.

    Args:
        verbosity: Number of -v flags (0=normal, 1+=verbose)
        quiet: Suppress non-error output (takes precedence over debug/verbosity)
        no_color: Disable colored output
        stream: Output stream for logs (defaults to stderr)
        debug: Enable debug logging with timestamps and paths
        json_mode: Keep the console quiet; errors travel in the JSON output

    Returns:
        Configured Rich console for output
    """
    if json_mode:
        level = LogLevel.SILENT
    elif quiet:
        level = LogLevel.QUIET
    elif debug or verbosity >= 1:
        level = LogLevel.VERBOSE
    else:
        level = LogLevel.NORMAL

    console = Console(
        file=stream,
        stderr=True,
        force_terminal=not no_color,
        no_color=no_color,
    )

    handler = RichHandler(
        console=console,
        show_time=debug or verbosity >= 2,
        show_path=debug or verbosity >= 2,
    )
    # Run-log records propagate here at INFO even when the root is quieter
    handler.setLevel(level)

    logging.basicConfig(
        level=level,
        format="%(message)s",
        handlers=[handler],
        force=True,
    )

    return console


def run_log_path(log_dir: Path, now: datetime | None = None) -> Path:
    """Daily log file for the given (UTC) moment."""
    now = now or datetime.now(UTC)
    return log_dir / f"{now:%Y-%m-%d}.log"


@contextmanager
def run_log(log_dir: Path) -> Generator[logging.Logger, None, None]:
    """Append run events to today's log file for the duration of a run.

    Records go to ``.repowiki/logs/YYYY-MM-DD.log`` and still propagate to
    the console handlers configured by :func:`configure_logging`.

    Args:
        log_dir: Directory holding the daily log files

    Yields:
        Logger whose records are appended to the run log
    """
    log_dir.mkdir(parents=True, exist_ok=True)
    handler = logging.FileHandler(run_log_path(log_dir), mode="a", encoding="utf-8")
    formatter = logging.Formatter(RUN_LOG_FORMAT, datefmt=RUN_LOG_DATEFMT)
    formatter.converter = time.gmtime
    handler.setFormatter(formatter)
    handler.setLevel(logging.INFO)

    logger = logging.getLogger(RUN_LOGGER)
    logger.setLevel(logging.INFO)
    logger.addHandler(handler)
    try:
        yield logger
    finally:
        logger.removeHandler(handler)
        handler.close()


def latest_run_log(log_dir: Path) -> Path | None:
    """Return the newest daily log file, if any."""
    if not log_dir.is_dir():
        return None
    logs = sorted(log_dir.glob("*.log"), reverse=True)
    return logs[0] if logs else None
