"""
Logging configuration for dev_inventory.

Console output goes to stderr so that ``--json`` output on stdout stays
machine-readable; an optional log file always receives DEBUG records.
"""

import logging
import os
import sys
from pathlib import Path
from typing import Optional

LOGGER_NAME = "dev_inventory"

CONSOLE_FORMAT = "%(levelname_colored)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"

_LEVEL_COLORS = {
    logging.DEBUG: "\033[36m",
    logging.INFO: "\033[32m",
    logging.WARNING: "\033[33m",
    logging.ERROR: "\033[31m",
    logging.CRITICAL: "\033[1;31m",
}
_RESET = "\033[0m"

_configured: Optional[logging.Logger] = None


def _resolve_level(level: Optional[str], verbose: bool, quiet: bool) -> int:
    if verbose:
        return logging.DEBUG
    if quiet:
        return logging.WARNING
    name = (level or os.environ.get("DEV_INVENTORY_LOG_LEVEL") or "INFO").upper()
    value = logging.getLevelName(name)
    if not isinstance(value, int):
        raise ValueError(f"Invalid log level: {name}")
    return value


def setup_logging(
    level: Optional[str] = None,
    log_file: Optional[str] = None,
    verbose: bool = False,
    quiet: bool = False,
    propagate: bool = False,
) -> logging.Logger:
    """
    Configure the ``dev_inventory`` logger. Calling it again replaces the handlers.

    Args:
        level: Log level name; defaults to DEV_INVENTORY_LOG_LEVEL or INFO
        log_file: Also write DEBUG and above to this file
        verbose: DEBUG on the console (wins over level)
        quiet: WARNING and above, and no console handler at all
        propagate: Pass records on to the root logger (pytest caplog)

    Returns:
        The package logger

    Raises:
        ValueError: If level is not a logging level name
    """
    global _configured

    threshold = _resolve_level(level, verbose, quiet)

    logger = logging.getLogger(LOGGER_NAME)
    for old in list(logger.handlers):
        logger.removeHandler(old)
        old.close()
    logger.setLevel(threshold)
    logger.propagate = propagate

    if not quiet:
        console = logging.StreamHandler(sys.stderr)
        console.setLevel(threshold)
        console.setFormatter(ColoredFormatter(CONSOLE_FORMAT, use_colors=sys.stderr.isatty()))
        logger.addHandler(console)

    if log_file:
        Path(log_file).parent.mkdir(parents=True, exist_ok=True)
        to_file = logging.FileHandler(log_file, encoding="utf-8")
        to_file.setLevel(logging.DEBUG)
        to_file.setFormatter(logging.Formatter(FILE_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        logger.addHandler(to_file)
        # The file wants DEBUG even when the console does not
        logger.setLevel(min(threshold, logging.DEBUG))

    _configured = logger
    return logger


def get_logger() -> logging.Logger:
    """The package logger, set up with defaults on first use."""
    if _configured is None:
        return setup_logging()
    return _configured


class ColoredFormatter(logging.Formatter):
    """Exposes ``levelname_colored``: the level name wrapped in its ANSI color."""

    def __init__(self, fmt: str, use_colors: bool = True):
        super().__init__(fmt)
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        tag = record.levelname
        if self.use_colors:
            tag = f"{_LEVEL_COLORS.get(record.levelno, '')}{tag}{_RESET}"
        record.levelname_colored = tag
        return super().format(record)
