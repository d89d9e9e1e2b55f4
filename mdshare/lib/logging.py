"""Structured logging setup shared by the server, services and CLI."""

import logging
import sys
from typing import Optional

import structlog

from .config import LOG_FILE, LOG_JSON, LOG_LEVEL

_configured = False


def configure_logging(
    level: str = LOG_LEVEL,
    json_output: bool = LOG_JSON,
    log_file: Optional[str] = LOG_FILE,
) -> None:
    """
    Configure structlog for mdshare.

    Args:
        level: Minimum log level name (e.g. "INFO", "DEBUG")
        json_output: Render events as JSON lines instead of console output
        log_file: Optional path to append log lines to (operator log);
            stderr is used when not set
    """
    global _configured

    numeric_level = logging.getLevelName(level.upper())
    if not isinstance(numeric_level, int):
        numeric_level = logging.INFO

    if json_output:
        renderers = [structlog.processors.dict_tracebacks, structlog.processors.JSONRenderer()]
    else:
        renderers = [structlog.dev.ConsoleRenderer(colors=False)]

    if log_file:
        logger_factory = structlog.WriteLoggerFactory(file=open(log_file, "a", encoding="utf-8"))
    else:
        logger_factory = structlog.PrintLoggerFactory(file=sys.stderr)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            *renderers,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        logger_factory=logger_factory,
        cache_logger_on_first_use=False,
    )
    _configured = True


def get_logger(name: Optional[str] = None):
    """
    Get a structured logger.

    Args:
        name: Logger name, usually __name__

    Returns:
        structlog bound logger
    """
    if not _configured:
        configure_logging()
    if name:
        return structlog.get_logger(logger_name=name)
    return structlog.get_logger()
