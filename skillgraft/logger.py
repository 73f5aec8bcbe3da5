"""Structured logging setup using structlog."""

from __future__ import annotations

import logging
import sys

import structlog

from .config import LOG_LEVEL


def setup_logging(level: str = LOG_LEVEL) -> structlog.typing.FilteringBoundLogger:
    """Configure structlog with console output on stderr."""
    numeric_level = getattr(logging, level, logging.INFO)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.StackInfoRenderer(),
            structlog.dev.set_exc_info,
            structlog.processors.TimeStamper(fmt="iso"),
            structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
        cache_logger_on_first_use=False,
    )

    return structlog.get_logger("skillgraft")


logger: structlog.typing.FilteringBoundLogger = setup_logging()
