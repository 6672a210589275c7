"""
Session storage for in-progress booking conversations.

The store is constructed explicitly and handed to the workflow engine,
so tests get an isolated instance and a persistent backend can replace
the in-memory one without touching the engine.
"""

import uuid
from abc import ABC, abstractmethod
from dataclasses import replace
from datetime import datetime, timedelta, timezone
from typing import Collection, Optional

from clinic_booking.logging_context import get_session_logger
from clinic_booking.schemas.session_schema import Session

logger = get_session_logger(__name__)


class SessionStore(ABC):
    """create / get / update contract shared by all session backends."""

    @abstractmethod
    def create(self, session_id: Optional[str] = None) -> Session:
        """Allocate a new INIT session, generating an id when none is given."""

    @abstractmethod
    def get(self, session_id: str) -> Optional[Session]:
        """Pure lookup; returns None for unknown ids."""

    @abstractmethod
    def update(self, session_id: str, **changes) -> None:
        """Merge top-level fields and refresh last_active. No-op for unknown ids."""

    @abstractmethod
    def sweep(self, max_idle: timedelta, keep: Collection[str] = ()) -> list[str]:
        """Evict sessions idle longer than ``max_idle``, except ids in ``keep``.

        Returns the evicted ids.
        """


class InMemorySessionStore(SessionStore):
    """Process-lifetime session map. Records are immutable and swapped whole."""

    def __init__(self) -> None:
        self._sessions: dict[str, Session] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        return session_id in self._sessions

    def create(self, session_id: Optional[str] = None) -> Session:
        if session_id is None:
            session_id = uuid.uuid4().hex
            while session_id in self._sessions:
                session_id = uuid.uuid4().hex
        elif session_id in self._sessions:
            raise ValueError(f"Session {session_id!r} already exists")

        session = Session(id=session_id)
        self._sessions[session_id] = session
        logger.info("Session created: %s", session_id)
        return session

    def get(self, session_id: str) -> Optional[Session]:
        return self._sessions.get(session_id)

    def update(self, session_id: str, **changes) -> None:
        session = self._sessions.get(session_id)
        if session is None:
            return
        changes.pop("id", None)
        changes["last_active"] = datetime.now(timezone.utc)
        self._sessions[session_id] = replace(session, **changes)

    def sweep(self, max_idle: timedelta, keep: Collection[str] = ()) -> list[str]:
        cutoff = datetime.now(timezone.utc) - max_idle
        expired = [
            sid for sid, s in self._sessions.items()
            if s.last_active < cutoff and sid not in keep
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.info("Evicted %d idle session(s)", len(expired))
        return expired
