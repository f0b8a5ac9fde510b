"""structlog configuration shared by the CLI and the HTTP service."""

import logging
import os
import sys

import structlog

LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
LOG_FORMAT = os.getenv("LOG_FORMAT", "json").lower()


def _level() -> int:
    level = logging.getLevelName(LOG_LEVEL)
    # getLevelName hands back a "Level X" string for unknown names
    return level if isinstance(level, int) else logging.INFO


def _renderer():
    if LOG_FORMAT == "console":
        return structlog.dev.ConsoleRenderer()
    return structlog.processors.JSONRenderer()


structlog.configure(
    processors=[
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _renderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(_level()),
    logger_factory=structlog.PrintLoggerFactory(file=sys.stderr),
    cache_logger_on_first_use=True,
)

logger = structlog.get_logger()
