import logging

import pytest
import socketio

from core.session_store import SessionStore
from poll_server import server
from poll_server.http_api import STORE_KEY
from poll_server.server import GATEWAY_KEY, create_app, parse_args


@pytest.mark.asyncio
async def test_server_app_fixture(server_app):
    """Test the server_app fixture to ensure the test server starts correctly."""
    app, server_url = server_app

    assert server_url.startswith("http://"), "Server URL must start with http://"
    assert isinstance(app[STORE_KEY], SessionStore)

    client = socketio.AsyncClient(logger=False, engineio_logger=False)
    try:
        await client.connect(server_url, transports=["polling"], wait_timeout=5)
        assert client.connected, "Client should successfully connect to the server"

        await client.disconnect()
        assert not client.connected, "Client should successfully disconnect from the server"
    finally:
        if client.connected:
            await client.disconnect()


@pytest.mark.asyncio
async def test_shutdown_clears_sessions_and_timers(test_config):
    app = create_app(test_config)
    gateway = app[GATEWAY_KEY]
    session = app[STORE_KEY].get_or_create("room-1")
    poll = gateway.polls.create_poll(session, "Q", ["a", "b"], 30)
    gateway.timers.schedule("room-1", 30, gateway._expire_poll, "room-1", poll.id)

    await gateway.shutdown()

    assert len(app[STORE_KEY]) == 0
    assert not gateway.timers.is_pending("room-1")


def test_parse_args_overrides():
    args = parse_args(['--host', '127.0.0.1', '--port', '4001', '--log-level', 'DEBUG'])
    assert (args.host, args.port, args.log_level) == ('127.0.0.1', 4001, 'DEBUG')


def test_setup_logging_returns_named_logger(monkeypatch):
    calls = {}
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.update(kwargs))

    logger = server.setup_logging("debug", log_to_file=False)

    assert logger.name == "livepoll"
    assert calls["level"] == logging.DEBUG
    assert len(calls["handlers"]) == 1
