"""
Structured logging helpers for auditstore.

Modules obtain loggers with ``get_logger(__name__)`` and pass context through
``extra={...}``. The formatter appends any such context to the message so it
shows up in plain-text output without a JSON log pipeline.
"""

from __future__ import annotations

import logging
import sys
from typing import Optional, Union

ROOT_LOGGER_NAME = "auditstore"

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class ContextFormatter(logging.Formatter):
    """Formatter that renders ``extra`` fields as ``key=value`` pairs."""

    def format(self, record: logging.LogRecord) -> str:
        base = super().format(record)
        context = {
            key: value
            for key, value in vars(record).items()
            if key not in _RESERVED_ATTRS and not key.startswith("_")
        }
        if not context:
            return base
        rendered = " ".join(f"{key}={value}" for key, value in sorted(context.items()))
        return f"{base} | {rendered}"


def get_logger(name: Optional[str] = None) -> logging.Logger:
    """
    Get a logger under the ``auditstore`` namespace.

    Args:
        name: Module name, usually ``__name__``

    Returns:
        Logger instance
    """
    if not name or name == ROOT_LOGGER_NAME:
        return logging.getLogger(ROOT_LOGGER_NAME)
    if not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def configure_logging(
    level: Union[int, str] = logging.INFO,
    stream=None,
) -> logging.Logger:
    """
    Configure the ``auditstore`` logger.

    Should be called once at startup. Calling it again replaces the handler
    instead of stacking a second one.

    Args:
        level: Log level name or number
        stream: Output stream (defaults to stdout)

    Returns:
        The configured root ``auditstore`` logger
    """
    logger = logging.getLogger(ROOT_LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logger.setLevel(level)

    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(
        ContextFormatter("%(asctime)s - %(name)s - [%(levelname)s] - %(message)s")
    )
    logger.addHandler(handler)
    logger.propagate = False

    # Silence noisy libraries
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)
    return logger


def set_level(level: Union[int, str]) -> None:
    """Change the ``auditstore`` log level at runtime."""
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
    logging.getLogger(ROOT_LOGGER_NAME).setLevel(level)
