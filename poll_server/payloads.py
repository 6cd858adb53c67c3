"""Validation of inbound Socket.IO payloads.

Clients emit ``event(sessionKey, data)``. The parsers here check shapes and
types and normalize whitespace before anything reaches the session core, raising
``InvalidPayloadError`` for anything malformed. Range checks that depend on
session state (option index, duplicate names) stay in the core.

Field aliases used by older web clients (``name``, ``timeLimit``,
``message``) are accepted alongside the documented names. Chat authorship comes
from the sender's participant record, so any name in a chat payload is ignored.
"""
from typing import Any, Dict, List, NamedTuple, Optional, Sequence

from core.errors import InvalidPayloadError
from core.models import Role

MAX_SESSION_KEY_LENGTH = 128
MAX_DISPLAY_NAME_LENGTH = 50


class JoinRequest(NamedTuple):
    session_key: str
    display_name: str
    role: Role


class CreatePollRequest(NamedTuple):
    session_key: str
    question: str
    options: List[str]
    time_limit_seconds: int


class AnswerRequest(NamedTuple):
    session_key: str
    option_index: int


class ChatRequest(NamedTuple):
    session_key: str
    text: str


class KickRequest(NamedTuple):
    session_key: str
    target_connection_id: str


def _text(value: Any, field: str, max_length: Optional[int] = None) -> str:
    if not isinstance(value, str) or not value.strip():
        raise InvalidPayloadError(f"'{field}' must be a non-empty string.")
    value = value.strip()
    if max_length is not None and len(value) > max_length:
        raise InvalidPayloadError(f"'{field}' must be at most {max_length} characters.")
    return value


def _integer(value: Any, field: str) -> int:
    # bool is a subclass of int; True is not an option index
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidPayloadError(f"'{field}' must be an integer.")
    return value


def _first(data: Dict[str, Any], *names: str) -> Any:
    for name in names:
        if name in data:
            return data[name]
    return None


def _data(args: Sequence[Any]) -> Dict[str, Any]:
    if len(args) < 2 or not isinstance(args[1], dict):
        raise InvalidPayloadError("Expected an object payload after the session key.")
    return args[1]


def parse_session_key(args: Sequence[Any]) -> str:
    if not args:
        raise InvalidPayloadError("Missing session key.")
    return _text(args[0], "sessionKey", MAX_SESSION_KEY_LENGTH)


def parse_join(args: Sequence[Any]) -> JoinRequest:
    session_key = parse_session_key(args)
    data = _data(args)
    display_name = _text(_first(data, "displayName", "name"), "displayName", MAX_DISPLAY_NAME_LENGTH)
    try:
        role = Role(data.get("role"))
    except ValueError:
        raise InvalidPayloadError("'role' must be 'teacher' or 'student'.") from None
    return JoinRequest(session_key, display_name, role)


def parse_create_poll(args: Sequence[Any], default_time_limit: int, max_time_limit: int) -> CreatePollRequest:
    session_key = parse_session_key(args)
    data = _data(args)
    question = _text(data.get("question"), "question")

    options = data.get("options")
    if not isinstance(options, list) or len(options) < 2:
        raise InvalidPayloadError("'options' must be a list of at least two strings.")
    options = [_text(option, "options") for option in options]

    time_limit = _first(data, "timeLimitSeconds", "timeLimit")
    if time_limit is None:
        time_limit = default_time_limit
    time_limit = _integer(time_limit, "timeLimitSeconds")
    if not 0 < time_limit <= max_time_limit:
        raise InvalidPayloadError(f"'timeLimitSeconds' must be between 1 and {max_time_limit}.")

    return CreatePollRequest(session_key, question, options, time_limit)


def parse_answer(args: Sequence[Any]) -> AnswerRequest:
    session_key = parse_session_key(args)
    data = _data(args)
    return AnswerRequest(session_key, _integer(data.get("optionIndex"), "optionIndex"))


def parse_chat(args: Sequence[Any], max_length: int) -> ChatRequest:
    session_key = parse_session_key(args)
    data = _data(args)
    text = _text(_first(data, "text", "message"), "text", max_length)
    return ChatRequest(session_key, text)


def parse_kick(args: Sequence[Any]) -> KickRequest:
    session_key = parse_session_key(args)
    if len(args) < 2:
        raise InvalidPayloadError("Missing target connection id.")
    target = args[1]
    if isinstance(target, dict):
        target = target.get("targetConnectionId")
    return KickRequest(session_key, _text(target, "targetConnectionId"))
