"""Append-only chat history per session."""
import logging

from .models import ChatMessage, Session

logger = logging.getLogger(__name__)


class ChatLog:

    def append(self, session: Session, author: str, text: str) -> ChatMessage:
        """Append a message to the session's history and return it.

        When the session was created with a chat capacity the oldest message
        falls off once the capacity is reached.
        """
        message = ChatMessage(id=session.next_id(), author=author, text=text)
        session.chat_messages.append(message)
        logger.info(f"Message sent in session {session.key} by {author}: {text[:100]}")
        return message
