"""Tests for the read-only HTTP endpoints."""
import aiohttp
import pytest

from core.models import Role
from poll_server.http_api import STORE_KEY

pytestmark = pytest.mark.asyncio


async def _get_json(url):
    async with aiohttp.ClientSession() as http:
        async with http.get(url) as response:
            return response.status, await response.json()


async def test_health(server_app):
    app, server_url = server_app
    app[STORE_KEY].get_or_create("room-1")

    status, body = await _get_json(f"{server_url}/health")

    assert status == 200
    assert body["status"] == "ok"
    assert body["activeSessions"] == 1
    assert body["environment"] == "test"
    assert body["timestamp"]


async def test_list_sessions(server_app, membership, polls):
    app, server_url = server_app
    session = app[STORE_KEY].get_or_create("room-1")
    membership.join(session, "c1", "Alice", Role.STUDENT)
    polls.create_poll(session, "Q", ["a", "b"], 30)

    status, body = await _get_json(f"{server_url}/api/sessions")

    assert status == 200
    assert body == [{"id": "room-1", "participantCount": 1, "hasActivePoll": True}]


async def test_get_session_snapshot(server_app, connect_client):
    app, server_url = server_app
    client = await connect_client()
    await client.join("room-1", "Alice")

    status, body = await _get_json(f"{server_url}/api/sessions/room-1")

    assert status == 200
    assert body["sessionKey"] == "room-1"
    assert body["participants"][0]["connectionId"] == client.sid


async def test_get_unknown_session(server_app):
    app, server_url = server_app

    status, body = await _get_json(f"{server_url}/api/sessions/missing")

    assert status == 404
    assert body == {"error": "Session not found"}
