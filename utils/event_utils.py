import enum


class EventType(enum.Enum):
    """
    Enumerates the events emitted by the LivePoll server.
    Events signify that something *has happened*. Payloads provide context.
    """
    # Membership
    SESSION_SNAPSHOT = "session-snapshot" # Payload: Session.snapshot()
    PARTICIPANT_JOINED = "participant-joined" # Payload: Participant
    PARTICIPANT_LEFT = "participant-left" # Payload: Participant
    PARTICIPANT_REMOVED = "participant-removed" # Payload: Participant (to everyone but the target)
    YOU_WERE_REMOVED = "you-were-removed" # Payload: {"sessionKey": str} (target only)

    # Polls
    POLL_STARTED = "poll-started" # Payload: Poll without results
    TALLY_UPDATED = "tally-updated" # Payload: {"pollId": int, "tally": {"0": int, ...}}
    POLL_HISTORY_UPDATED = "poll-history-updated" # Payload: [Poll with results and endedAt, ...]

    # Chat
    CHAT_MESSAGE = "chat-message" # Payload: ChatMessage

    # Errors (originating connection only)
    REQUEST_REJECTED = "request-rejected" # Payload: error envelope from create_rejection_message
