"""Structured logging setup.

Modules obtain a logger with :func:`get_logger` and log event names with
key/value context, e.g. ``logger.info("tag_created", tag="v1.2.0")``.
"""

from __future__ import annotations

import logging
import sys
from typing import Any

import structlog


def _stderr_logger(*args: Any) -> structlog.PrintLogger:
    # sys.stderr is read whenever a logger is built, not once at configure time
    return structlog.PrintLogger(file=sys.stderr)


def configure_logging(*, verbose: bool = False, json_logs: bool = False) -> None:
    """Configure structlog for CLI use.

    Args:
        verbose: Emit debug events
        json_logs: Render events as JSON lines instead of console text
    """
    level = logging.DEBUG if verbose else logging.INFO
    renderer: Any = (
        structlog.processors.JSONRenderer()
        if json_logs
        else structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    )
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso"),
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        logger_factory=_stderr_logger,
        cache_logger_on_first_use=False,
    )


def get_logger(name: str) -> Any:
    """Return a bound logger for the given module name."""
    return structlog.get_logger(name)
