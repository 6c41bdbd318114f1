from __future__ import annotations

import logging
import sys

"""Logging initialization with labeled prefixes.

Library modules log through ``logging.getLogger(__name__)`` under the
``tablecodec`` namespace and never configure handlers themselves. The CLI
calls setup_logging() once, which attaches a single stdout handler to the
``tablecodec`` logger and formats each line as ``LABEL message`` with labels
INFO|WARN|ERROR|SUMMARY.
"""

__all__ = [
    "setup_logging",
    "get_logger",
    "log_summary",
    "set_level",
    "reset_logging",
    "LabeledFormatter",
    "SUMMARY_LEVEL",
]

LOGGER_NAME = "tablecodec"

# Custom SUMMARY level (between INFO=20 and WARNING=30)
SUMMARY_LEVEL = 25

_logger: logging.Logger | None = None


_LABELS = {
    logging.WARNING: "WARN",
    SUMMARY_LEVEL: "SUMMARY",
}


class LabeledFormatter(logging.Formatter):
    """Formats records as ``LABEL message``; tracebacks follow on their own lines."""

    def format(self, record: logging.LogRecord) -> str:
        label = _LABELS.get(record.levelno, record.levelname)
        text = f"{label} {record.getMessage()}"
        if record.exc_info:
            text = f"{text}\n{self.formatException(record.exc_info)}"
        return text


def setup_logging(level: int | str = logging.INFO) -> logging.Logger:
    """Configure the ``tablecodec`` logger (idempotent).

    Returns:
        The configured package logger
    """
    global _logger

    if _logger is not None:
        return _logger

    logging.addLevelName(SUMMARY_LEVEL, "SUMMARY")

    logger = logging.getLogger(LOGGER_NAME)
    logger.setLevel(level)

    # Clear any existing handlers to avoid duplication
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(level)
    handler.setFormatter(LabeledFormatter())
    logger.addHandler(handler)

    # Prevent propagation to root logger to avoid duplicate output
    logger.propagate = False

    _logger = logger
    return logger


def get_logger() -> logging.Logger:
    if _logger is None:
        return setup_logging()
    return _logger


def set_level(level: int | str) -> None:
    """Change the level of the configured logger and its handlers."""
    logger = get_logger()
    logger.setLevel(level)
    for h in logger.handlers:
        h.setLevel(level)


def log_summary(message: str) -> None:
    get_logger().log(SUMMARY_LEVEL, message)


def reset_logging() -> None:
    """Reset the global logger state. Mainly for testing purposes."""
    global _logger
    if _logger is not None:
        for handler in _logger.handlers[:]:
            _logger.removeHandler(handler)
        _logger.setLevel(logging.NOTSET)
        _logger.propagate = True
    _logger = None
