"""Structured logging configuration.

This module initializes structlog with a stable JSON event format.
Log lines go to stderr so command output on stdout stays parseable.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import Any

import structlog

_LEVEL_ENV_VAR = "ROSTER_LOG_LEVEL"
_DEFAULT_LEVEL = "WARNING"
_configured = False


def configure_logging(level: str | None = None) -> None:
    """Configure structlog processors and the minimum level.

    Args:
        level: Level name such as ``"INFO"``. Defaults to ``ROSTER_LOG_LEVEL``
            or ``WARNING`` when unset.
    """
    global _configured
    level_name = (level or os.getenv(_LEVEL_ENV_VAR) or _DEFAULT_LEVEL).upper()
    level_value = logging.getLevelName(level_name)
    if not isinstance(level_value, int):
        level_value = logging.WARNING
    structlog.configure(
        processors=[
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.processors.add_log_level,
            structlog.processors.JSONRenderer(sort_keys=True),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level_value),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: str) -> Any:
    """Return a module logger instance.

    Args:
        name: Logger name, usually __name__.

    Returns:
        A structlog bound logger that accepts keyword event fields.
    """
    if not _configured:
        configure_logging()
    return structlog.get_logger(name)


def _stderr_logger(*args: Any) -> Any:
    """Build a print logger bound to the current ``sys.stderr``."""
    return structlog.PrintLogger(file=sys.stderr)
