"""Read-only HTTP endpoints served next to the Socket.IO server."""
import logging
from datetime import datetime, timezone

from aiohttp import web

from core.session_store import SessionStore
from utils.config_loader import ConfigManager

logger = logging.getLogger(__name__)

STORE_KEY = web.AppKey("store", SessionStore)
CONFIG_KEY = web.AppKey("config", ConfigManager)

routes = web.RouteTableDef()


@routes.get('/health')
async def health(request: web.Request) -> web.Response:
    """Liveness probe with the number of active sessions."""
    return web.json_response({
        "status": "ok",
        "activeSessions": len(request.app[STORE_KEY]),
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "environment": request.app[CONFIG_KEY].get('server', 'environment', default='development'),
    })


@routes.get('/api/sessions')
async def list_sessions(request: web.Request) -> web.Response:
    return web.json_response(request.app[STORE_KEY].summaries())


@routes.get('/api/sessions/{session_key}')
async def get_session(request: web.Request) -> web.Response:
    session_key = request.match_info['session_key']
    session = request.app[STORE_KEY].get(session_key)
    if session is None:
        logger.debug(f"HTTP lookup for unknown session {session_key}")
        return web.json_response({"error": "Session not found"}, status=404)
    return web.json_response(session.snapshot())
