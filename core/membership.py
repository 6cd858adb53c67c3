"""Service for adding and removing session participants."""
import logging
from typing import Optional

from .errors import AlreadyJoinedError, DuplicateNameError, ParticipantNotFoundError
from .models import Participant, Role, Session

logger = logging.getLogger(__name__)


class MembershipManager:
    """Manages who is connected to a session.

    Display names are unique per session ignoring case, checked against the
    participants connected right now only. Any number of teachers may join.
    """

    def join(self, session: Session, connection_id: str, display_name: str, role: Role) -> Participant:
        """Add a participant to the session.

        Raises:
            AlreadyJoinedError: the connection is already a participant.
            DuplicateNameError: a connected participant already uses this name (any casing).
        """
        if session.find_participant(connection_id):
            raise AlreadyJoinedError()

        participant = Participant(connection_id=connection_id, display_name=display_name, role=role)
        if any(p.name_key == participant.name_key for p in session.participants):
            raise DuplicateNameError(f"The name '{display_name}' is already taken in this session.")

        session.participants.append(participant)
        logger.info(f"{role.value.capitalize()} '{display_name}' ({connection_id}) joined session {session.key}")
        return participant

    def leave(self, session: Session, connection_id: str) -> Optional[Participant]:
        """Remove the participant for ``connection_id``. Returns None if it was never a member."""
        participant = self._remove(session, connection_id)
        if participant:
            logger.info(f"'{participant.display_name}' ({connection_id}) left session {session.key}")
        return participant

    def kick(self, session: Session, target_connection_id: str) -> Participant:
        """Remove a participant on behalf of a teacher.

        Raises:
            ParticipantNotFoundError: the target is not in the session. Nothing is changed.
        """
        participant = self._remove(session, target_connection_id)
        if participant is None:
            raise ParticipantNotFoundError(f"No participant {target_connection_id} in session {session.key}.")
        logger.info(f"'{participant.display_name}' ({target_connection_id}) was removed from session {session.key}")
        return participant

    def _remove(self, session: Session, connection_id: str) -> Optional[Participant]:
        for index, participant in enumerate(session.participants):
            if participant.connection_id == connection_id:
                return session.participants.pop(index)
        return None
