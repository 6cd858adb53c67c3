"""Test configuration and fixtures for LivePoll tests.

Vote policy under test: only current student participants vote, and a
connection may vote at most once per poll. A second vote from the same
connection is rejected with AlreadyAnswered and the tally is unchanged.
"""
import asyncio
from collections import defaultdict
from typing import Any

import pytest
import pytest_asyncio
import socketio
from aiohttp import web
from aiohttp.test_utils import unused_port

from core import ChatLog, MembershipManager, PollEngine, SessionStore
from poll_server.server import create_app
from utils.config_loader import ConfigManager
from utils.event_utils import EventType

SOCKET_TIMEOUT = 2.0


@pytest.fixture
def store():
    return SessionStore()


@pytest.fixture
def session(store):
    return store.get_or_create("room-1")


@pytest.fixture
def membership():
    return MembershipManager()


@pytest.fixture
def polls():
    return PollEngine()


@pytest.fixture
def chat():
    return ChatLog()


@pytest.fixture
def test_config(tmp_path):
    """Provide test configuration, isolated from config files and the environment."""
    manager = ConfigManager(config_dir=str(tmp_path), environ={})
    manager.set('server', 'host', '127.0.0.1')
    manager.set('server', 'port', unused_port())
    manager.set('server', 'environment', 'test')
    manager.set('health_check', 'enabled', False)
    return manager


@pytest_asyncio.fixture
async def server_app(test_config):
    """Provide a running test server application and its URL."""
    app = create_app(test_config)
    host = test_config.get('server', 'host')
    port = test_config.get('server', 'port')

    runner = web.AppRunner(app)
    await runner.setup()
    site = web.TCPSite(runner, host, port)
    await site.start()
    try:
        yield app, f"http://{host}:{port}"
    finally:
        await runner.cleanup()


class ClientHarness:
    """A Socket.IO test client that records every server event it receives."""

    def __init__(self, client: socketio.AsyncClient):
        self.client = client
        self.events = defaultdict(list)
        self._arrived = asyncio.Event()
        for event_type in EventType:
            client.on(event_type.value, self._recorder(event_type.value))
        client.on('message', self._recorder('message'))

    def _recorder(self, name: str):
        async def handler(*args):
            self.events[name].append(args[0] if args else None)
            self._arrived.set()
        return handler

    @property
    def sid(self) -> str:
        return self.client.get_sid()

    async def emit(self, event: str, *args: Any) -> None:
        await self.client.emit(event, args)

    async def wait_for(self, name: str, count: int = 1, timeout: float = SOCKET_TIMEOUT):
        """Wait until ``count`` events called ``name`` arrived and return the last of them."""
        async def _wait():
            while len(self.events[name]) < count:
                self._arrived.clear()
                await self._arrived.wait()

        try:
            await asyncio.wait_for(_wait(), timeout=timeout)
        except asyncio.TimeoutError:
            pytest.fail(f"Timed out waiting for '{name}' (received so far: {dict(self.events)})")
        return self.events[name][count - 1]

    async def join(self, session_key: str, display_name: str, role: str = "student"):
        """Join a session and return the snapshot the server sends back."""
        expected = len(self.events[EventType.SESSION_SNAPSHOT.value]) + 1
        await self.emit('join-session', session_key, {"displayName": display_name, "role": role})
        return await self.wait_for(EventType.SESSION_SNAPSHOT.value, count=expected)


@pytest_asyncio.fixture
async def connect_client(server_app):
    """Provide a factory for connected test clients, disconnected on teardown."""
    app, server_url = server_app
    clients = []

    async def _connect() -> ClientHarness:
        client = socketio.AsyncClient(logger=False, engineio_logger=False)
        harness = ClientHarness(client)
        await client.connect(server_url, wait_timeout=5)
        clients.append(client)
        return harness

    yield _connect

    for client in clients:
        if client.connected:
            await client.disconnect()
