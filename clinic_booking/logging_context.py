"""Per-conversation logging context.

While the workflow engine handles a message, every record logged from any
module carries that conversation's session id, so one patient's chat can be
followed through the log even when many sessions interleave.

Usage:
    from clinic_booking.logging_context import get_session_logger, session_context

    logger = get_session_logger(__name__)
    with session_context("web-42"):
        logger.info("Processing message")  # -> [web-42] Processing message
"""

import logging
from contextlib import contextmanager
from contextvars import ContextVar
from typing import Iterator

NO_SESSION = "-"

_session_id: ContextVar[str] = ContextVar("session_id", default=NO_SESSION)


def get_session_id() -> str:
    return _session_id.get()


@contextmanager
def session_context(session_id: str) -> Iterator[None]:
    """Tag log records with ``session_id`` for the duration of the block.

    The previous value is restored on exit, so nested or sequential turns
    running in the same task never leak ids into each other.
    """
    token = _session_id.set(session_id)
    try:
        yield
    finally:
        _session_id.reset(token)


class SessionIdFilter(logging.Filter):
    """Stamps ``record.session_id`` so formats may use ``%(session_id)s``."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "session_id"):
            record.session_id = _session_id.get()  # type: ignore[attr-defined]
        return True


def get_session_logger(name: str) -> logging.Logger:
    """``logging.getLogger`` with a SessionIdFilter attached once."""
    logger = logging.getLogger(name)
    if not any(isinstance(f, SessionIdFilter) for f in logger.filters):
        logger.addFilter(SessionIdFilter())
    return logger
