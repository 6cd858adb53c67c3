"""In-memory registry of live poll sessions.

The store only looks sessions up and creates them. All mutation happens through
the membership, poll and chat services operating on the returned ``Session``.
One store is created per running server and cleared when it stops.
"""
import logging
from collections import deque
from typing import Dict, List, Optional, Any

from .errors import SessionNotFoundError
from .models import Session

logger = logging.getLogger(__name__)


class SessionStore:
    def __init__(self, chat_capacity: Optional[int] = None):
        """
        Args:
            chat_capacity: Maximum chat messages kept per session. ``None`` keeps all of them.
        """
        self._sessions: Dict[str, Session] = {}
        self._chat_capacity = chat_capacity

    def get_or_create(self, session_key: str) -> Session:
        """Return the session for ``session_key``, creating an empty one if unseen."""
        session = self._sessions.get(session_key)
        if session is None:
            session = Session(key=session_key, chat_messages=deque(maxlen=self._chat_capacity))
            self._sessions[session_key] = session
            logger.info(f"Created session {session_key}")
        return session

    def get(self, session_key: str) -> Optional[Session]:
        return self._sessions.get(session_key)

    def require(self, session_key: str) -> Session:
        session = self._sessions.get(session_key)
        if session is None:
            raise SessionNotFoundError(f"Session not found: {session_key}")
        return session

    def sessions_for(self, connection_id: str) -> List[Session]:
        """Return every session in which ``connection_id`` is a current participant."""
        return [s for s in self._sessions.values() if s.find_participant(connection_id)]

    def summaries(self) -> List[Dict[str, Any]]:
        return [session.summary() for session in self._sessions.values()]

    def clear(self) -> None:
        logger.info(f"Clearing {len(self._sessions)} session(s)")
        self._sessions.clear()

    def __contains__(self, session_key: str) -> bool:
        return session_key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)
