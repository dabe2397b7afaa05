from __future__ import annotations

import secrets
import time
from collections.abc import Callable
from dataclasses import dataclass

from reunion_session.core.logging import get_logger

logger = get_logger(__name__)


@dataclass
class ServerSession:
    session_id: str
    username: str
    last_accessed: float


class SessionStore:
    """Server-side idle sessions: each access pushes expiry ``ttl_seconds`` further out."""

    def __init__(self, ttl_seconds: int, clock: Callable[[], float] = time.monotonic) -> None:
        self._ttl = ttl_seconds
        self._clock = clock
        self._sessions: dict[str, ServerSession] = {}

    @property
    def ttl_seconds(self) -> int:
        return self._ttl

    def create(self, username: str) -> ServerSession:
        session = ServerSession(
            session_id=secrets.token_urlsafe(32),
            username=username,
            last_accessed=self._clock(),
        )
        self._sessions[session.session_id] = session
        logger.info("session_created", username=username)
        return session

    def get(self, session_id: str | None) -> ServerSession | None:
        """Return the live session, dropping it if it has been idle too long."""
        if not session_id:
            return None
        session = self._sessions.get(session_id)
        if session is None:
            return None
        elapsed = self._clock() - session.last_accessed
        if elapsed > self._ttl:
            logger.info("session_expired", username=session.username, elapsed_seconds=elapsed)
            del self._sessions[session_id]
            return None
        return session

    def active_count(self) -> int:
        """Live sessions, pruning the ones that went idle past the TTL."""
        return sum(1 for session_id in list(self._sessions) if self.get(session_id) is not None)

    def touch(self, session_id: str | None) -> ServerSession | None:
        session = self.get(session_id)
        if session is not None:
            session.last_accessed = self._clock()
        return session

    def invalidate(self, session_id: str | None) -> None:
        if session_id and self._sessions.pop(session_id, None) is not None:
            logger.info("session_invalidated")
