# WORKFLOW: Logging setup shared by the API and the CLI.
# Used by: api/main.py (app startup), scripts/prices_cli.py
# Functions:
# 1. configure_logging() - Configure structlog processors and stdlib logging level
#
# Module loggers use logging.getLogger(__name__); the request middleware uses structlog.
# Both end up on the same stream handler.

import logging
import sys
from typing import Any, TextIO

import structlog


def configure_logging(level: str = "INFO", json_logs: bool = False, stream: TextIO = sys.stdout) -> None:
    """Configure structured logging for the application."""

    shared_processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if json_logs:
        processors = shared_processors + [structlog.processors.JSONRenderer()]
    else:
        processors = shared_processors + [structlog.dev.ConsoleRenderer()]

    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[logging.StreamHandler(stream)],
        level=getattr(logging, level.upper(), logging.INFO),
    )
