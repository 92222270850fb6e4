"""
Core Logging Module

Centralized logging configuration with trace_id injection for request tracing.
The trace_id lives in a contextvar so it follows each request through
async handlers and the backend client.

Usage:
    # At application startup:
    from app.core.logging import setup_logging
    setup_logging()

    # In middleware:
    from app.core.logging import set_trace_id
    set_trace_id(request.headers.get("x-request-id") or new_trace_id())
"""

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import Optional


# ==================== Context Variables ====================

TRACE_ID: ContextVar[str] = ContextVar("trace_id", default="-")


def set_trace_id(trace_id: str) -> None:
    """Set the trace_id for the current async context."""
    TRACE_ID.set(trace_id)


def get_trace_id() -> str:
    """
    Get the trace_id for the current async context.

    Returns:
        Current trace_id or "-" if not set
    """
    return TRACE_ID.get()


def new_trace_id() -> str:
    """Generate a fresh trace_id."""
    return str(uuid.uuid4())


# ==================== Log Filters ====================

class TraceIdFilter(logging.Filter):
    """
    Logging filter that injects trace_id into log records.

    Reads trace_id from the contextvar and adds it to the record,
    making it available to formatters.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        record.trace_id = get_trace_id()
        return True


# ==================== Logging Setup ====================

_logging_setup_done = False


def setup_logging(log_level: Optional[str] = None, force: bool = False) -> None:
    """
    Configure application-wide logging with trace_id support.

    Sets up:
    - Root logger level from settings or parameter
    - Console handler with structured formatting
    - TraceIdFilter for automatic trace_id injection

    Idempotent unless force=True.

    Args:
        log_level: Optional log level override (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        force: If True, reconfigure even if already set up
    """
    global _logging_setup_done

    if _logging_setup_done and not force:
        return

    if log_level is None:
        from app.core.config import settings
        log_level = settings.LOG_LEVEL

    numeric_level = getattr(logging, log_level.upper(), logging.INFO)

    root_logger = logging.getLogger()
    root_logger.setLevel(numeric_level)

    if force:
        root_logger.handlers.clear()

    if not root_logger.handlers:
        console_handler = logging.StreamHandler(sys.stdout)
        console_handler.setLevel(numeric_level)

        formatter = logging.Formatter(
            fmt="%(asctime)s [%(levelname)s] [%(trace_id)s] %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S"
        )
        console_handler.setFormatter(formatter)
        console_handler.addFilter(TraceIdFilter())

        root_logger.addHandler(console_handler)

    _logging_setup_done = True

    logger = logging.getLogger(__name__)
    logger.info(f"Logging configured with level: {log_level.upper()}")


def reset_logging() -> None:
    """
    Reset logging setup state.

    Does not remove handlers - call setup_logging(force=True) after this.
    """
    global _logging_setup_done
    _logging_setup_done = False


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger instance, making sure logging is configured first.

    Args:
        name: Logger name (usually __name__)
    """
    if not _logging_setup_done:
        setup_logging()

    return logging.getLogger(name)
