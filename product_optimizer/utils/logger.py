"""
Structured logging configuration.

Every module logs through structlog; request-scoped fields such as the
identifier and marketplace are bound with LogContext so each fallback or
failure line can be traced back to its request.
"""

import logging
import sys
from typing import Optional

import structlog
from structlog.types import Processor

# Chatty third-party loggers kept at WARNING
_NOISY_LOGGERS = ("httpx", "httpcore", "anthropic")


def _stderr_logger_factory(*args) -> structlog.PrintLogger:
    # Looked up per logger so a redirected sys.stderr is honoured
    return structlog.PrintLogger(sys.stderr)


def setup_logging(
    level: str = "INFO",
    json_format: bool = True,
    log_file: Optional[str] = None,
) -> None:
    """
    Configure application-wide structured logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR).
        json_format: Whether to output logs in JSON format.
        log_file: Optional file path for logging output.
    """
    numeric_level = getattr(logging, level.upper())

    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty()))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(numeric_level),
        context_class=dict,
        logger_factory=_stderr_logger_factory,
        cache_logger_on_first_use=False,
    )

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stderr,
        level=numeric_level,
    )
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setLevel(numeric_level)
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.BoundLogger:
    """
    Get a structured logger for the given module name.

    Args:
        name: Logger name, typically __name__.

    Returns:
        Configured structlog logger instance.
    """
    return structlog.get_logger(name)


class LogContext:
    """Context manager binding request-scoped fields to every log line."""

    def __init__(self, **kwargs):
        self.context = kwargs
        self._tokens = None

    def __enter__(self):
        self._tokens = structlog.contextvars.bind_contextvars(**self.context)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if self._tokens is not None:
            structlog.contextvars.reset_contextvars(**self._tokens)
            self._tokens = None
