"""In-memory session registry with TTL cleanup.

WHY: The web API serves several browser tabs at once. Each tab owns one
TranscriptSession; the registry maps session IDs to those objects and
forgets sessions nobody has touched for a while, since uploaded audio is
held in memory.

HOW: SessionStore is a dict keyed by session ID, guarded by a
threading.Lock. Idle sessions are expired by cleanup_expired(), which
the app calls periodically.

RULES:
- All store mutations acquire self._lock
- get_session() returns None for unknown IDs (no exceptions)
- A full store evicts its stalest IDLE session before refusing a new one
- create_session() raises SessionLimitError only when no IDLE session can go
- TTL is measured from the session's last update
- Sessions that are PROCESSING are never expired
"""

from __future__ import annotations

import logging
import threading
import time
from typing import Dict, List, Optional

from gemini_transcriber.config import MAX_SESSIONS, SESSION_TTL_SECONDS
from gemini_transcriber.core.session import SessionStatus, TranscriptSession

logger = logging.getLogger(__name__)


class SessionLimitError(ValueError):
    """Raised when the store is full and no IDLE session can be evicted."""


class SessionStore:
    """Thread-safe in-memory store for transcript sessions."""

    def __init__(
        self,
        ttl_seconds: int = SESSION_TTL_SECONDS,
        max_sessions: int = MAX_SESSIONS,
    ) -> None:
        self._sessions: Dict[str, TranscriptSession] = {}
        self._lock = threading.Lock()
        self._ttl_seconds = ttl_seconds
        self.max_sessions = max_sessions

    def create_session(self) -> TranscriptSession:
        """Create and register a new IDLE session.

        When the store is full, the least recently touched IDLE session
        (no file selected) is evicted to make room. Only when every
        session holds a file is SessionLimitError raised.
        """
        with self._lock:
            evicted = None
            if len(self._sessions) >= self.max_sessions:
                evicted = self._pop_oldest_idle()
                if evicted is None:
                    raise SessionLimitError(
                        "Maximum number of sessions ({}) reached".format(self.max_sessions)
                    )
            session = TranscriptSession()
            self._sessions[session.id] = session

        if evicted is not None:
            logger.info("Evicted idle session %s to make room", evicted.id)
        logger.info("Created session %s", session.id)
        return session

    def get_session(self, session_id: str) -> Optional[TranscriptSession]:
        """Return the live session object, or None if not found."""
        with self._lock:
            return self._sessions.get(session_id)

    def delete_session(self, session_id: str) -> bool:
        """Remove a session. Returns True if it existed."""
        with self._lock:
            session = self._sessions.pop(session_id, None)

        if session is None:
            return False
        logger.info("Deleted session %s", session_id)
        return True

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def cleanup_expired(self) -> int:
        """Remove idle sessions past their TTL; returns how many were removed."""
        now = time.time()
        expired: List[TranscriptSession] = []

        with self._lock:
            for session_id, session in list(self._sessions.items()):
                if session.is_processing:
                    continue
                if now - session.updated_at > self._ttl_seconds:
                    expired.append(self._sessions.pop(session_id))

        for session in expired:
            logger.info(
                "Expired session %s (idle %.0fs)", session.id, now - session.updated_at
            )
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def _pop_oldest_idle(self) -> Optional[TranscriptSession]:
        """Remove and return the stalest IDLE session. Caller holds the lock."""
        idle = [s for s in self._sessions.values() if s.status == SessionStatus.IDLE]
        if not idle:
            return None
        oldest = min(idle, key=lambda s: s.updated_at)
        return self._sessions.pop(oldest.id)
