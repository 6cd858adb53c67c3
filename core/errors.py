"""Rejection types raised by the session core.

Every error here is recoverable and scoped to the single request that caused it.
The gateway catches ``SessionError`` and turns it into a ``request-rejected``
event for the originating connection only.
"""
from typing import Optional


class SessionError(Exception):
    """Base class for all request rejections."""

    code = "SessionError"
    default_message = "Request rejected."

    def __init__(self, message: Optional[str] = None):
        super().__init__(message or self.default_message)
        self.message = message or self.default_message


class InvalidPayloadError(SessionError):
    code = "InvalidPayload"
    default_message = "Malformed request payload."


class DuplicateNameError(SessionError):
    code = "DuplicateName"
    default_message = "That display name is already taken in this session."


class AlreadyJoinedError(SessionError):
    code = "AlreadyJoined"
    default_message = "This connection has already joined the session."


class PollAlreadyActiveError(SessionError):
    code = "PollAlreadyActive"
    default_message = "A poll is already active in this session."


class NoActivePollError(SessionError):
    code = "NoActivePoll"
    default_message = "There is no active poll in this session."


class InvalidOptionError(SessionError):
    code = "InvalidOption"
    default_message = "The selected option does not exist."


class AlreadyAnsweredError(SessionError):
    code = "AlreadyAnswered"
    default_message = "You have already answered this poll."


class NotFoundError(SessionError):
    code = "NotFound"
    default_message = "Not found."


class SessionNotFoundError(NotFoundError):
    default_message = "Session not found."


class ParticipantNotFoundError(NotFoundError):
    default_message = "Participant not found in this session."


class StudentOnlyError(SessionError):
    code = "StudentOnly"
    default_message = "Only students can answer polls."
