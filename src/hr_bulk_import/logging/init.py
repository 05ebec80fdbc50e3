from __future__ import annotations

import logging
import sys
from typing import TextIO

"""Operator-facing log output for bulk import runs.

Every stdout line starts with DEBUG|INFO|WARN|ERROR|SUMMARY so scripts that
wrap the CLI can grep the outcome. Modules log through
``logging.getLogger(__name__)``; their records propagate to the
``hr_bulk_import`` logger configured here, which does not propagate further.
"""

__all__ = [
    "LOGGER_NAME",
    "SUMMARY_LEVEL",
    "LabeledFormatter",
    "setup_logging",
    "enable_debug",
    "get_logger",
    "log_summary",
    "reset_logging",
]

LOGGER_NAME = "hr_bulk_import"

# between INFO (20) and WARNING (30)
SUMMARY_LEVEL = 25

_configured: logging.Logger | None = None


class LabeledFormatter(logging.Formatter):
    """``<LABEL> <message>``; WARNING is shortened to WARN."""

    _LABELS = {
        logging.WARNING: "WARN",
        SUMMARY_LEVEL: "SUMMARY",
    }

    def format(self, record: logging.LogRecord) -> str:
        label = self._LABELS.get(record.levelno, record.levelname)
        return f"{label} {record.getMessage()}"


def _console_handler(stream: TextIO, level: int) -> logging.Handler:
    handler = logging.StreamHandler(stream)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    return handler


def setup_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach the labeled stdout handler to the package logger once.

    Later calls return the same logger untouched until reset_logging().
    """
    global _configured
    if _configured is not None:
        return _configured

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")
    pkg_logger = logging.getLogger(LOGGER_NAME)
    pkg_logger.handlers.clear()
    pkg_logger.addHandler(_console_handler(sys.stdout, level))
    pkg_logger.setLevel(level)
    pkg_logger.propagate = False

    _configured = pkg_logger
    return pkg_logger


def enable_debug() -> None:
    """Lower the package logger and its handlers to DEBUG (``--debug``)."""
    pkg_logger = get_logger()
    pkg_logger.setLevel(logging.DEBUG)
    for handler in pkg_logger.handlers:
        handler.setLevel(logging.DEBUG)


def get_logger() -> logging.Logger:
    return _configured if _configured is not None else setup_logging()


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Forget the configured logger (tests call this between runs)."""
    global _configured
    _configured = None
