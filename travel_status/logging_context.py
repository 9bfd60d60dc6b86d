"""Correlation ID logging context for tracing a live call across modules.

Provides a call_id-aware logger that attaches the external call identifier
to every log record, so a single call's start, transcript updates, and end
can be followed through the webhook handlers and the session tracker.

Usage:
    from travel_status.logging_context import get_call_logger, set_call_id

    set_call_id("call_abc123")
    logger = get_call_logger(__name__)
    logger.info("Transcript forwarded")  # → [call_abc123] Transcript forwarded
"""

import logging
from contextvars import ContextVar

_call_id: ContextVar[str] = ContextVar("call_id", default="-")


def set_call_id(call_id: str) -> None:
    """Set the correlation ID for the current async context."""
    _call_id.set(call_id)


def get_call_id() -> str:
    """Retrieve the current correlation ID."""
    return _call_id.get()


class CallIdFilter(logging.Filter):
    """Injects call_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "call_id"):
            record.call_id = _call_id.get()  # type: ignore[attr-defined]
        return True


def get_call_logger(name: str) -> logging.Logger:
    """Return a logger with the CallIdFilter attached.

    The filter adds ``call_id`` to each record so formatters can
    include ``%(call_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, CallIdFilter) for f in logger.filters):
        logger.addFilter(CallIdFilter())
    return logger
