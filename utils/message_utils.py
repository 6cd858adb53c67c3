"""Utilities for creating and handling standardized Socket.IO messages."""

import enum
from typing import Dict, Any, Union, Optional
from datetime import datetime, timezone

SERVER_SENDER = "pollServer"


class MessageType(enum.Enum):
    """
    Enumerates the requests clients send to the server, plus the levels of the
    generic ``message`` envelope the server sends back.
    """
    # General Purpose (Server -> Client)
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    # Client -> Server
    JOIN_SESSION = "join-session"
    CREATE_POLL = "create-poll"
    SUBMIT_ANSWER = "submit-answer"
    END_POLL = "end-poll"
    SEND_MESSAGE = "send-message"
    KICK_STUDENT = "kick-student"
    GET_SESSION_SNAPSHOT = "get-session-snapshot"


def create_socket_message(
    message_type: MessageType,
    value: Union[str, Dict[str, Any]],
    sender: str = SERVER_SENDER,
    timestamp: bool = True,
    target_sid: Optional[str] = None
) -> Dict[str, Any]:
    """
    Creates a standardized dictionary object for Socket.IO messages.

    Args:
        message_type: The type of the message (from MessageType enum).
        value: The payload of the message (string or dictionary).
        sender: The source of the message.
        timestamp: Whether to include an ISO 8601 timestamp.
        target_sid: Optional SID this message is intended for (for logging/context).

    Returns:
        A dictionary representing the structured message.
    """
    message = {
        "messageType": message_type.value,
        "value": value,
        "from": sender,
    }
    if timestamp:
        message["timestamp"] = datetime.now(timezone.utc).isoformat()
    if target_sid:
        message["target_sid"] = target_sid

    return message


def create_welcome_message(sid: str) -> Dict[str, Any]:
    """Creates the welcome message telling a new client its connection id."""
    return create_socket_message(
        MessageType.INFO,
        {"text": f"Welcome! You are connected with SID: {sid}", "connectionId": sid},
        target_sid=sid
    )


def create_rejection_message(
    sid: str,
    event: str,
    code: str,
    reason: str,
    session_key: Optional[str] = None
) -> Dict[str, Any]:
    """Creates the error envelope sent back to a client whose request was rejected."""
    return create_socket_message(
        MessageType.ERROR,
        {
            "code": code,
            "event": event,
            "message": reason,
            "sessionKey": session_key,
        },
        target_sid=sid
    )
