"""Thread-safe registry keeping in-flight streaming sessions alive."""

import logging
import threading
from collections.abc import Callable

from .session import StreamingSession

log: logging.Logger = logging.getLogger(__name__)


class StreamingSessionRegistry:
    """Holds strong references to running sessions until they complete.

    Sessions are keyed by ``session_id``, so removal is by identity and two
    sessions are never conflated. Every read-modify-write happens under one
    lock; sessions are appended from the calling thread and removed from
    whichever thread delivers their completion.
    """

    def __init__(self) -> None:
        self._sessions: dict[int, StreamingSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session: object) -> bool:
        if not isinstance(session, StreamingSession):
            return False
        with self._lock:
            return self._sessions.get(session.session_id) is session

    def append(self, session: StreamingSession) -> None:
        with self._lock:
            if session.session_id in self._sessions:
                raise ValueError(f"{session!r} is already registered")
            self._sessions[session.session_id] = session
        log.debug("Registered streaming session %d", session.session_id)

    def get(self, session_id: int) -> StreamingSession | None:
        with self._lock:
            return self._sessions.get(session_id)

    def remove(self, session_id: int) -> StreamingSession | None:
        """Remove a session by id. Returns it, or None if it was not present."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session is not None:
            log.debug("Released streaming session %d", session_id)
        return session

    def remove_all(
        self, predicate: Callable[[StreamingSession], bool]
    ) -> list[StreamingSession]:
        """Remove every session matching ``predicate`` and return them."""
        with self._lock:
            matched = [s for s in self._sessions.values() if predicate(s)]
            for session in matched:
                del self._sessions[session.session_id]
        return matched

    def sessions(self) -> list[StreamingSession]:
        """Snapshot of the registered sessions."""
        with self._lock:
            return list(self._sessions.values())
