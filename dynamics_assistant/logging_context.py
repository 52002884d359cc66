"""Session ID logging context for tracing assistant conversations.

Provides a session-aware logger that attaches the current query-assistant
session ID to every log record, so all log lines of one multi-turn
conversation can be grepped together. ``load_config`` installs the filter
on the root handlers and renders the ID through ``LOG_FORMAT``.

Usage:
    from dynamics_assistant.logging_context import get_session_logger, set_session_id

    set_session_id("query-1700000000000-ab12cd3")
    logger = get_session_logger(__name__)
    logger.info("Processing input")  # ... [query-1700000000000-ab12cd3] INFO: Processing input
"""

import logging
from contextvars import ContextVar

LOG_FORMAT = "%(asctime)s [%(name)s] [%(session_id)s] %(levelname)s: %(message)s"

_session_id: ContextVar[str] = ContextVar("session_id", default="NO_SESSION")


def set_session_id(session_id: str) -> None:
    """Set the session ID for the current context."""
    _session_id.set(session_id)


def get_session_id() -> str:
    """Retrieve the current session ID."""
    return _session_id.get()


class SessionIdFilter(logging.Filter):
    """Injects session_id into every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def attach_session_filter(handler: logging.Handler) -> None:
    """Add a SessionIdFilter to ``handler`` unless it already has one.

    Handler filters run for records propagated from any logger, so every
    line a ``LOG_FORMAT`` handler emits has ``session_id`` set.
    """
    if not any(isinstance(f, SessionIdFilter) for f in handler.filters):
        handler.addFilter(SessionIdFilter())


def get_session_logger(name: str) -> logging.Logger:
    """Return a logger with the SessionIdFilter attached.

    The filter adds ``session_id`` to each record so formatters can
    include ``%(session_id)s`` in their format string.
    """
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
