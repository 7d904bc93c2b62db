"""Logging configuration for the playlist tagger."""

import logging
import logging.handlers
import sys
import warnings
from pathlib import Path
from typing import Any, Optional

CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(location)-28s %(message)s"
FILE_FORMAT = "%(asctime)s - %(levelname)-8s - %(name)s (%(location)s) - %(message)s"

# Libraries that log request and SQL chatter at INFO/DEBUG
THIRD_PARTY_LOGGERS = (
    "sqlalchemy",
    "sqlalchemy.engine",
    "sqlalchemy.pool",
    "urllib3",
    "requests",
    "asyncio",
    "tidalapi",
)

LEVEL_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
RESET = "\033[0m"


class TaggerFormatter(logging.Formatter):
    """Formatter adding a ``file:line`` location field, optionally in color."""

    def __init__(self, fmt: str, datefmt: str, colored: bool = False) -> None:
        """Initialize formatter.

        Args:
            fmt: Format string, may use ``%(location)s``
            datefmt: Date format string
            colored: Wrap the padded level name in ANSI colors
        """
        super().__init__(fmt=fmt, datefmt=datefmt)
        self.colored = colored

    def format(self, record: Any) -> str:
        """Format log record with location and level padding."""
        record.location = f"{record.filename}:{record.lineno}"
        if not self.colored:
            return super().format(record)

        levelname = record.levelname
        color = LEVEL_COLORS.get(levelname, RESET)
        record.levelname = f"{color}{levelname:<8}{RESET}"
        try:
            return super().format(record)
        finally:
            record.levelname = levelname


def _console_handler(level: int) -> logging.Handler:
    # stderr keeps command output on stdout clean
    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)
    handler.setFormatter(
        TaggerFormatter(CONSOLE_FORMAT, "%H:%M:%S", colored=sys.stderr.isatty())
    )
    return handler


def _file_handler(
    log_file: Path, level: int, max_bytes: int, backup_count: int
) -> logging.Handler:
    log_file.parent.mkdir(parents=True, exist_ok=True)
    handler = logging.handlers.RotatingFileHandler(
        log_file, maxBytes=max_bytes, backupCount=backup_count, encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(TaggerFormatter(FILE_FORMAT, "%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(
    log_level: str = "INFO",
    log_file: Optional[Path] = None,
    console_output: bool = True,
    max_file_size: int = 5 * 1024 * 1024,
    backup_count: int = 3,
) -> None:
    """Configure the root logger for a CLI run.

    Existing root handlers are replaced, so calling this twice does not
    duplicate output.

    Args:
        log_level: Level name, case-insensitive (unknown names mean INFO)
        log_file: Also write to this file, rotated by size
        console_output: Log to stderr
        max_file_size: Rotation threshold in bytes
        backup_count: Rotated files to keep
    """
    warnings.filterwarnings("ignore", category=DeprecationWarning, module="tidalapi")

    level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)

    if console_output:
        root_logger.addHandler(_console_handler(level))
    if log_file:
        root_logger.addHandler(
            _file_handler(log_file, level, max_file_size, backup_count)
        )

    logger = logging.getLogger(__name__)
    logger.debug("Logging configured at %s", logging.getLevelName(level))
    if log_file:
        logger.info("Writing log file %s", log_file)


def configure_third_party_loggers(level: int = logging.WARNING) -> None:
    """Raise the level of chatty library loggers.

    Args:
        level: Minimum level let through for those libraries
    """
    for name in THIRD_PARTY_LOGGERS:
        logging.getLogger(name).setLevel(level)
