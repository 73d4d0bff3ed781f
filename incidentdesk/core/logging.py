"""
IncidentDesk - Logging Infrastructure

This module provides structured logging with support for:
- JSON formatted logs for production
- Console formatted logs for development
- Request ID binding for request tracing
"""

from __future__ import annotations

import logging
import sys
import time
from contextvars import ContextVar, Token
from functools import wraps
from typing import Any, Callable, Dict, Optional, TypeVar, ParamSpec

import structlog
from structlog.types import Processor

from incidentdesk.core.config import get_settings

# Context variable for request tracing
request_id_context: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

P = ParamSpec("P")
R = TypeVar("R")


def add_context_variables(
    logger: logging.Logger,
    method_name: str,
    event_dict: Dict[str, Any]
) -> Dict[str, Any]:
    """
    Add context variables to log entries.

    Attaches the current request_id (if any) to every log entry.
    """
    request_id = request_id_context.get()
    if request_id:
        event_dict["request_id"] = request_id
    return event_dict


def get_log_level(settings: Any) -> int:
    """Convert string log level to logging constant."""
    level_map = {
        "DEBUG": logging.DEBUG,
        "INFO": logging.INFO,
        "WARNING": logging.WARNING,
        "ERROR": logging.ERROR,
        "CRITICAL": logging.CRITICAL,
    }
    return level_map.get(settings.LOG_LEVEL.upper(), logging.INFO)


def get_processors(settings: Any) -> list[Processor]:
    """Get structlog processors based on settings."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        add_context_variables,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    if settings.LOG_FORMAT == "json":
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty()))

    return processors


def configure_logging() -> None:
    """
    Configure structured logging for the application.

    This should be called once at application startup.
    """
    settings = get_settings()

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=get_log_level(settings),
    )

    structlog.configure(
        processors=get_processors(settings),
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: Optional[str] = None) -> structlog.stdlib.BoundLogger:
    """
    Get a configured logger instance.

    Args:
        name: Logger name. If None, uses the calling module's name.

    Returns:
        A structlog BoundLogger instance.

    Example:
        >>> log = get_logger(__name__)
        >>> log.info("incident_created", incident_id="123", severity="SEV1")
    """
    return structlog.get_logger(name)


class LogContext:
    """
    Context manager for binding a request id outside of HTTP handling.

    Example:
        >>> with LogContext(request_id="seed-run"):
        ...     log.info("seeding_started")
    """

    def __init__(self, request_id: Optional[str] = None):
        self.request_id = request_id
        self._token: Optional[Token] = None

    def __enter__(self) -> "LogContext":
        if self.request_id:
            self._token = request_id_context.set(self.request_id)
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        if self._token is not None:
            request_id_context.reset(self._token)
            self._token = None


def log_execution_time(
    log: structlog.stdlib.BoundLogger,
    operation: str,
    **extra_fields: Any
) -> Callable[[Callable[P, R]], Callable[P, R]]:
    """
    Decorator to log execution time of a function.

    Args:
        log: Logger instance
        operation: Name of the operation being timed
        **extra_fields: Additional fields to include in the log

    Example:
        >>> @log_execution_time(log, "seed_incidents")
        ... def seed(count: int) -> int:
        ...     ...
    """
    def decorator(func: Callable[P, R]) -> Callable[P, R]:
        @wraps(func)
        def wrapper(*args: P.args, **kwargs: P.kwargs) -> R:
            start_time = time.perf_counter()
            try:
                result = func(*args, **kwargs)
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.info(
                    f"{operation}_completed",
                    duration_ms=round(duration_ms, 2),
                    success=True,
                    **extra_fields
                )
                return result
            except Exception as e:
                duration_ms = (time.perf_counter() - start_time) * 1000
                log.error(
                    f"{operation}_failed",
                    duration_ms=round(duration_ms, 2),
                    success=False,
                    error=str(e),
                    error_type=type(e).__name__,
                    **extra_fields
                )
                raise
        return wrapper
    return decorator
