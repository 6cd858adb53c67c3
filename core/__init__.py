"""Session core for the LivePoll server.

This package holds the server-side authority over session state. It performs no
I/O; the Socket.IO gateway in ``poll_server`` drives it.

Components:
- SessionStore: lookup and lazy creation of sessions
- MembershipManager: join, leave and kick with unique display names
- PollEngine: poll lifecycle and vote tallying
- ChatLog: ordered chat history
"""

from .chat_log import ChatLog
from .membership import MembershipManager
from .models import ChatMessage, Participant, Poll, Role, Session
from .poll_engine import PollEngine
from .session_store import SessionStore

__all__ = [
    'ChatLog',
    'ChatMessage',
    'MembershipManager',
    'Participant',
    'Poll',
    'PollEngine',
    'Role',
    'Session',
    'SessionStore',
]
