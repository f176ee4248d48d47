"""Logging setup for the fireconvert package and CLI."""

import logging
import sys
from typing import Optional, TextIO

LOGGER_NAME = "fireconvert"

# Markdown goes to stdout, so diagnostics stay short and go to stderr
CONSOLE_FORMAT = "%(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


def _parse_level(level: str) -> int:
    numeric_level = getattr(logging, level.upper(), None)
    if not isinstance(numeric_level, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return numeric_level


def setup_logging(
    level: str = "WARNING",
    log_file: Optional[str] = None,
    format_string: Optional[str] = None,
    force: bool = False,
    stream: Optional[TextIO] = None,
) -> logging.Logger:
    """
    Configure the ``fireconvert`` logger.

    Args:
        level: Logging level name (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_file: Also write timestamped records to this file
        format_string: Format for every handler instead of the defaults
        force: Replace handlers installed by an earlier call
        stream: Console stream (defaults to the current ``sys.stderr``)

    Returns:
        The package logger

    Raises:
        ValueError: If ``level`` is not a logging level name
    """
    numeric_level = _parse_level(level)
    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(numeric_level)

    if force or not logger.handlers:
        for handler in list(logger.handlers):
            logger.removeHandler(handler)
            handler.close()

        console_handler = logging.StreamHandler(stream or sys.stderr)
        console_handler.setFormatter(logging.Formatter(format_string or CONSOLE_FORMAT))
        logger.addHandler(console_handler)

        if log_file:
            file_handler = logging.FileHandler(log_file, encoding="utf-8")
            file_handler.setFormatter(logging.Formatter(format_string or FILE_FORMAT))
            logger.addHandler(file_handler)
    else:
        logger.debug("Logging already configured; only the level was updated")

    logger.propagate = False
    return logger
