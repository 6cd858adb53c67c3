"""Poll lifecycle engine.

Each session moves ``Idle -> Active -> Idle``. Ending a poll freezes the live
tally onto it as ``results`` and appends it to the session's poll history.

Key Features:
- At most one active poll per session
- Only current student participants vote, at most once per poll
- Redundant or stale ``end_poll`` calls are rejected, never fatal

The engine runs no clock. Time limits are enforced by the caller scheduling
``end_poll`` (see ``poll_server.timers``).
"""
import logging
from typing import Dict, List, Optional

from .errors import (
    AlreadyAnsweredError,
    InvalidOptionError,
    NoActivePollError,
    ParticipantNotFoundError,
    PollAlreadyActiveError,
    StudentOnlyError,
)
from .models import Poll, Role, Session, utc_now

logger = logging.getLogger(__name__)


class PollEngine:

    def create_poll(self, session: Session, question: str, options: List[str], time_limit_seconds: int) -> Poll:
        """Start a new poll and reset the live tally.

        Question and options are expected to be validated already.

        Raises:
            PollAlreadyActiveError: another poll has not ended yet.
        """
        if session.active_poll is not None:
            raise PollAlreadyActiveError()

        poll = Poll(
            id=session.next_id(),
            question=question,
            options=list(options),
            time_limit_seconds=time_limit_seconds,
        )
        session.active_poll = poll
        session.tally = {}
        session.voters = set()
        logger.info(f"Poll {poll.id} created in session {session.key}: {question}")
        return poll

    def submit_answer(self, session: Session, connection_id: str, option_index: int) -> Dict[int, int]:
        """Count one vote and return a copy of the updated tally.

        Raises:
            NoActivePollError: nothing to answer.
            ParticipantNotFoundError: the connection is not in the session.
            StudentOnlyError: the participant is not a student.
            InvalidOptionError: ``option_index`` is outside the poll's options.
            AlreadyAnsweredError: this connection already voted on the active poll.
        """
        poll = session.active_poll
        if poll is None:
            raise NoActivePollError()
        participant = session.find_participant(connection_id)
        if participant is None:
            raise ParticipantNotFoundError()
        if participant.role is not Role.STUDENT:
            raise StudentOnlyError()
        if not poll.has_option(option_index):
            raise InvalidOptionError(f"Option {option_index} does not exist; valid range is 0-{len(poll.options) - 1}.")
        if connection_id in session.voters:
            raise AlreadyAnsweredError()

        session.voters.add(connection_id)
        session.tally[option_index] = session.tally.get(option_index, 0) + 1
        logger.info(f"Answer submitted in session {session.key}: option {option_index}")
        return dict(session.tally)

    def end_poll(self, session: Session, poll_id: Optional[int] = None) -> Poll:
        """End the active poll and append it to the history.

        Args:
            poll_id: If given, only end the poll with this id. A timer firing for a
                poll that was already ended gets rejected instead of ending a newer one.

        Raises:
            NoActivePollError: no poll is active, or the active one is not ``poll_id``.
        """
        poll = session.active_poll
        if poll is None or (poll_id is not None and poll.id != poll_id):
            raise NoActivePollError()

        poll.results = dict(session.tally)
        poll.ended_at = utc_now()
        session.poll_history.append(poll)
        session.active_poll = None
        session.tally = {}
        session.voters = set()
        logger.info(f"Poll {poll.id} ended in session {session.key} with results {poll.results}")
        return poll
