"""Socket.IO broadcast gateway for LivePoll sessions.

Each inbound client event maps to exactly one core operation followed by a
fan-out to the right audience: the requesting connection only, everyone in the
session room, or everyone in the room except the requester.

Key Features:
- Session rooms: every participant's socket is entered into a room named after the session key
- Per-session asyncio locks so one session's mutations and emits never interleave
- Sessions are looked up before locking; only join-session creates state for a new key
- Poll time limits enforced through PollTimer, sharing the explicit end-poll path
- Rejections go back to the originating connection only as ``request-rejected``
"""
import asyncio
import logging
from typing import Any, Awaitable, Callable, Dict, Optional

import socketio

from core.chat_log import ChatLog
from core.errors import ParticipantNotFoundError, SessionError
from core.membership import MembershipManager
from core.models import Session, tally_to_dict
from core.poll_engine import PollEngine
from core.session_store import SessionStore
from utils.config_loader import ConfigManager
from utils.event_utils import EventType
from utils.message_utils import MessageType, create_rejection_message, create_welcome_message

from .payloads import (
    parse_answer,
    parse_chat,
    parse_create_poll,
    parse_join,
    parse_kick,
    parse_session_key,
)
from .timers import PollTimer

logger = logging.getLogger(__name__)

Handler = Callable[..., Awaitable[None]]


class PollGateway:
    """Bridges Socket.IO events to the session core."""

    def __init__(
        self,
        sio: socketio.AsyncServer,
        store: SessionStore,
        config_manager: ConfigManager,
        timers: Optional[PollTimer] = None,
    ):
        self.sio = sio
        self.store = store
        self.membership = MembershipManager()
        self.polls = PollEngine()
        self.chat = ChatLog()
        self.timers = timers or PollTimer()
        self._locks: Dict[str, asyncio.Lock] = {}

        self.default_time_limit = config_manager.get('polls', 'default_time_limit', default=60)
        self.max_time_limit = config_manager.get('polls', 'max_time_limit', default=3600)
        self.max_message_length = config_manager.get('chat', 'max_message_length', default=1000)

    def register(self) -> None:
        """Attach every handler to the Socket.IO server."""
        self.sio.on('connect', self.on_connect)
        self.sio.on('disconnect', self.on_disconnect)
        handlers = {
            MessageType.JOIN_SESSION: self.on_join_session,
            MessageType.CREATE_POLL: self.on_create_poll,
            MessageType.SUBMIT_ANSWER: self.on_submit_answer,
            MessageType.END_POLL: self.on_end_poll,
            MessageType.SEND_MESSAGE: self.on_send_message,
            MessageType.KICK_STUDENT: self.on_kick_student,
            MessageType.GET_SESSION_SNAPSHOT: self.on_get_session_snapshot,
        }
        for message_type, handler in handlers.items():
            self.sio.on(message_type.value, self._guarded(message_type.value, handler))

    def _guarded(self, event: str, handler: Handler) -> Handler:
        """Wrap a handler so rejections reach only the requester and failures stay contained."""
        async def wrapper(sid: str, *args: Any) -> None:
            session_key = args[0] if args and isinstance(args[0], str) else None
            try:
                await handler(sid, *args)
            except SessionError as e:
                await self._reject(sid, event, e, session_key)
            except Exception as e:
                logger.error(f"Unhandled error processing '{event}' from {sid}: {e}", exc_info=True)
        return wrapper

    def _lock(self, session_key: str) -> asyncio.Lock:
        # Only called for keys present in the store.
        lock = self._locks.get(session_key)
        if lock is None:
            lock = self._locks[session_key] = asyncio.Lock()
        return lock

    async def _reject(self, sid: str, event: str, error: SessionError, session_key: Optional[str]) -> None:
        logger.warning(f"Rejected '{event}' from {sid} in session {session_key}: {error.code} - {error.message}")
        rejection = create_rejection_message(sid, event, error.code, error.message, session_key)
        await self.sio.emit(EventType.REQUEST_REJECTED.value, rejection, room=sid)

    # --- Connection lifecycle ---

    async def on_connect(self, sid: str, environ: Dict, auth: Optional[Dict] = None) -> None:
        """Handle new client connections."""
        client_ip = environ.get('REMOTE_ADDR', 'Unknown IP')
        logger.info(f"Client connected: {sid} ({client_ip})")
        await self.sio.send(create_welcome_message(sid), room=sid)

    async def on_disconnect(self, sid: str, reason: Any = None) -> None:
        """Remove a disconnected client from every session it had joined."""
        logger.info(f"Client disconnected: {sid}")
        for session in self.store.sessions_for(sid):
            async with self._lock(session.key):
                participant = self.membership.leave(session, sid)
                if participant:
                    await self.sio.emit(
                        EventType.PARTICIPANT_LEFT.value, participant.to_dict(),
                        room=session.key, skip_sid=sid
                    )

    # --- Membership ---

    async def on_join_session(self, sid: str, *args: Any) -> None:
        request = parse_join(args)
        async with self._lock(request.session_key):
            session = self.store.get_or_create(request.session_key)
            participant = self.membership.join(session, sid, request.display_name, request.role)
            await self.sio.enter_room(sid, session.key)
            await self.sio.emit(EventType.SESSION_SNAPSHOT.value, session.snapshot(), room=sid)
            await self.sio.emit(
                EventType.PARTICIPANT_JOINED.value, participant.to_dict(),
                room=session.key, skip_sid=sid
            )

    async def on_kick_student(self, sid: str, *args: Any) -> None:
        request = parse_kick(args)
        session = self.store.require(request.session_key)
        async with self._lock(session.key):
            participant = self.membership.kick(session, request.target_connection_id)
            target = participant.connection_id
            await self.sio.emit(
                EventType.YOU_WERE_REMOVED.value,
                {"sessionKey": session.key, "displayName": participant.display_name},
                room=target
            )
            await self.sio.leave_room(target, session.key)
            await self.sio.emit(EventType.PARTICIPANT_REMOVED.value, participant.to_dict(), room=session.key)
            logger.info(f"{sid} kicked '{participant.display_name}' from session {session.key}")

    async def on_get_session_snapshot(self, sid: str, *args: Any) -> None:
        session = self.store.require(parse_session_key(args))
        await self.sio.emit(EventType.SESSION_SNAPSHOT.value, session.snapshot(), room=sid)

    # --- Polls ---

    async def on_create_poll(self, sid: str, *args: Any) -> None:
        request = parse_create_poll(args, self.default_time_limit, self.max_time_limit)
        session = self.store.require(request.session_key)
        async with self._lock(session.key):
            poll = self.polls.create_poll(session, request.question, request.options, request.time_limit_seconds)
            await self.sio.emit(EventType.POLL_STARTED.value, poll.to_dict(), room=session.key)
            self.timers.schedule(session.key, poll.time_limit_seconds, self._expire_poll, session.key, poll.id)

    async def on_submit_answer(self, sid: str, *args: Any) -> None:
        request = parse_answer(args)
        session = self.store.require(request.session_key)
        async with self._lock(session.key):
            tally = self.polls.submit_answer(session, sid, request.option_index)
            await self.sio.emit(
                EventType.TALLY_UPDATED.value,
                {"pollId": session.active_poll.id, "tally": tally_to_dict(tally)},
                room=session.key
            )

    async def on_end_poll(self, sid: str, *args: Any) -> None:
        session = self.store.require(parse_session_key(args))
        async with self._lock(session.key):
            await self._end_poll(session)

    async def _expire_poll(self, session_key: str, poll_id: int) -> None:
        """Timer callback: end ``poll_id`` if it is still the active poll."""
        try:
            session = self.store.require(session_key)
            async with self._lock(session.key):
                await self._end_poll(session, poll_id)
        except SessionError as e:
            logger.debug(f"Ignoring expiry of poll {poll_id} in session {session_key}: {e.code}")

    async def _end_poll(self, session: Session, poll_id: Optional[int] = None) -> None:
        # Caller holds the session lock.
        self.polls.end_poll(session, poll_id)
        self.timers.cancel(session.key)
        history = [poll.to_dict() for poll in session.poll_history]
        await self.sio.emit(EventType.POLL_HISTORY_UPDATED.value, history, room=session.key)

    # --- Chat ---

    async def on_send_message(self, sid: str, *args: Any) -> None:
        request = parse_chat(args, self.max_message_length)
        session = self.store.require(request.session_key)
        async with self._lock(session.key):
            participant = session.find_participant(sid)
            if participant is None:
                raise ParticipantNotFoundError("Join the session before sending messages.")
            message = self.chat.append(session, participant.display_name, request.text)
            await self.sio.emit(EventType.CHAT_MESSAGE.value, message.to_dict(), room=session.key)

    # --- Lifecycle ---

    async def shutdown(self) -> None:
        """Cancel poll timers and drop all session state."""
        await self.timers.shutdown()
        self.store.clear()
        self._locks.clear()
