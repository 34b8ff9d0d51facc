"""
Logging for the character companion.

Library modules only ask for loggers under the ``companion`` namespace; the
CLI is the one place that attaches a handler via ``setup_logging``.
"""

from __future__ import annotations

import logging
import sys
from typing import IO, Any, Literal, Mapping

ROOT_LOGGER_NAME = "companion"

LevelName = Literal["DEBUG", "INFO", "WARNING", "ERROR"]


class CompanionFormatter(logging.Formatter):
    """One-line records: time, level, short logger name, message.

    Level names are coloured when ``use_colors`` is set.
    """

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = False):
        super().__init__(datefmt="%H:%M:%S")
        self.use_colors = use_colors

    def format(self, record: logging.LogRecord) -> str:
        level = f"{record.levelname:8}"
        if self.use_colors and record.levelno in self.LEVEL_COLORS:
            level = f"{self.LEVEL_COLORS[record.levelno]}{level}{self.RESET}"

        # "companion.core.event_bus" -> "core.event_bus"
        name = record.name.removeprefix(f"{ROOT_LOGGER_NAME}.")
        line = f"{self.formatTime(record, self.datefmt)} {level} [{name}] {record.getMessage()}"

        if record.exc_info:
            line = f"{line}\n{self.formatException(record.exc_info)}"
        return line


def setup_logging(level: LevelName = "INFO", stream: IO[str] | None = None) -> logging.Handler:
    """Send ``companion`` records at ``level`` and above to ``stream``.

    Calling it again replaces the previous handler.

    Args:
        level: Minimum level to emit
        stream: Destination, stderr when omitted

    Returns:
        The installed handler
    """
    stream = stream if stream is not None else sys.stderr
    handler = logging.StreamHandler(stream)
    isatty = getattr(stream, "isatty", None)
    handler.setFormatter(CompanionFormatter(use_colors=bool(isatty and isatty())))

    root = logging.getLogger(ROOT_LOGGER_NAME)
    for old in list(root.handlers):
        root.removeHandler(old)
    root.addHandler(handler)
    root.setLevel(level)
    root.propagate = False
    return handler


def get_logger(name: str) -> logging.Logger:
    """Logger for ``name`` inside the ``companion`` namespace.

    ``get_logger("event_bus")`` and ``get_logger("companion.event_bus")``
    return the same logger.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(f"{ROOT_LOGGER_NAME}."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def _pairs(values: Mapping[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in values.items())


def log_operation(
    logger: logging.Logger,
    operation: str,
    details: Mapping[str, Any] | None = None,
) -> None:
    """Info record for a completed operation, e.g. ``Updated character: id=c1``."""
    if details:
        logger.info("%s: %s", operation, _pairs(details))
    else:
        logger.info("%s", operation)


def log_error(
    logger: logging.Logger,
    operation: str,
    error: BaseException,
    context: Mapping[str, Any] | None = None,
) -> None:
    """Error record with the exception's traceback and the failing context."""
    message = f"FAILED {operation}: {type(error).__name__}: {error}"
    if context:
        message = f"{message} | Context: {_pairs(context)}"
    logger.error("%s", message, exc_info=error)
