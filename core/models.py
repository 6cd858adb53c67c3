"""Domain models for live poll sessions.

Everything here is plain in-memory data. The invariants (unique names, a single
active poll, one vote per connection) are enforced by the services in
``membership``, ``poll_engine`` and ``chat_log`` that operate on these objects.
"""
import enum
import time
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Deque, Dict, List, Optional, Set


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _isoformat(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


def tally_to_dict(tally: Dict[int, int]) -> Dict[str, int]:
    """Serialize a tally with string keys, the way JSON objects carry them."""
    return {str(index): count for index, count in sorted(tally.items())}


class Role(enum.Enum):
    """Self-declared capability of a participant. Only students may answer polls."""
    TEACHER = "teacher"
    STUDENT = "student"


@dataclass
class Participant:
    """One live connection's membership in a session."""
    connection_id: str
    display_name: str
    role: Role
    joined_at: datetime = field(default_factory=utc_now)

    @property
    def name_key(self) -> str:
        return self.display_name.casefold()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "connectionId": self.connection_id,
            "displayName": self.display_name,
            "role": self.role.value,
            "joinedAt": _isoformat(self.joined_at),
        }


@dataclass
class Poll:
    """A multiple-choice poll. Active while ``ended_at`` is unset."""
    id: int
    question: str
    options: List[str]
    time_limit_seconds: int
    created_at: datetime = field(default_factory=utc_now)
    ended_at: Optional[datetime] = None
    results: Optional[Dict[int, int]] = None

    @property
    def is_active(self) -> bool:
        return self.ended_at is None

    def has_option(self, index: int) -> bool:
        return 0 <= index < len(self.options)

    def to_dict(self) -> Dict[str, Any]:
        data = {
            "id": self.id,
            "question": self.question,
            "options": list(self.options),
            "timeLimitSeconds": self.time_limit_seconds,
            "createdAt": _isoformat(self.created_at),
            "endedAt": _isoformat(self.ended_at),
        }
        # Active polls go out without their tally; it travels separately.
        if self.results is not None:
            data["results"] = tally_to_dict(self.results)
        return data


@dataclass(frozen=True)
class ChatMessage:
    id: int
    author: str
    text: str
    sent_at: datetime = field(default_factory=utc_now)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "author": self.author,
            "text": self.text,
            "sentAt": _isoformat(self.sent_at),
        }


@dataclass
class Session:
    """All state of one poll/chat room, keyed by its session key."""
    key: str
    participants: List[Participant] = field(default_factory=list)
    active_poll: Optional[Poll] = None
    tally: Dict[int, int] = field(default_factory=dict)
    voters: Set[str] = field(default_factory=set)
    poll_history: List[Poll] = field(default_factory=list)
    chat_messages: Deque[ChatMessage] = field(default_factory=deque)
    created_at: datetime = field(default_factory=utc_now)
    _last_id: int = field(default=0, init=False, repr=False)

    def next_id(self) -> int:
        """Return a millisecond timestamp id, strictly greater than the last one issued."""
        self._last_id = max(int(time.time() * 1000), self._last_id + 1)
        return self._last_id

    def find_participant(self, connection_id: str) -> Optional[Participant]:
        for participant in self.participants:
            if participant.connection_id == connection_id:
                return participant
        return None

    def has_active_poll(self) -> bool:
        return self.active_poll is not None

    def snapshot(self) -> Dict[str, Any]:
        """Full current state as sent to a joining client."""
        return {
            "sessionKey": self.key,
            "participants": [p.to_dict() for p in self.participants],
            "activePoll": self.active_poll.to_dict() if self.active_poll else None,
            "tally": tally_to_dict(self.tally),
            "pollHistory": [poll.to_dict() for poll in self.poll_history],
            "chatMessages": [message.to_dict() for message in self.chat_messages],
        }

    def summary(self) -> Dict[str, Any]:
        return {
            "id": self.key,
            "participantCount": len(self.participants),
            "hasActivePoll": self.has_active_poll(),
        }
