"""Socket.IO server package for LivePoll.

This package connects the session core to clients over Socket.IO and serves a
small read-only HTTP API.

Components:
- server: application factory, logging setup and command-line entry point
- gateway: inbound event handlers and outbound fan-out
- payloads: validation of inbound event payloads
- timers: poll time-limit expiry
- http_api: health check and session listing endpoints
"""

from .server import create_app

__all__ = [
    'create_app'
]
