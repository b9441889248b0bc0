"""Tests for SocketIOTransport with a fake Socket.IO client."""

from unittest.mock import AsyncMock

import pytest
from socketio.exceptions import ConnectionError as SocketIOConnectionError

from coinfeed.market.errors import ConnectionFailure
from coinfeed.market.socketio_client import SNAPSHOT_EVENT, SocketIOTransport


class FakeSocketClient:
    """Stands in for socketio.AsyncClient: records handlers, fires events on demand."""

    def __init__(self, connect_error: Exception | None = None):
        self.handlers: dict = {}
        self.connect = AsyncMock(side_effect=connect_error)
        self.disconnect = AsyncMock()

    def on(self, event, handler):
        self.handlers[event] = handler

    def fire(self, event, *args):
        self.handlers[event](*args)


@pytest.mark.asyncio
class TestSocketIOTransport:
    """Unit tests for the Socket.IO push transport."""

    async def test_connect_sends_token_as_auth(self):
        client = FakeSocketClient()
        transport = SocketIOTransport("http://coins.test", client_factory=lambda: client)

        await transport.connect("token-1", lambda coins: None, lambda error: None)

        client.connect.assert_awaited_once_with("http://coins.test", auth={"token": "token-1"})

    async def test_snapshot_event_forwarded(self):
        client = FakeSocketClient()
        received: list = []
        transport = SocketIOTransport("http://coins.test", client_factory=lambda: client)
        await transport.connect("token-1", received.append, lambda error: None)

        client.fire(SNAPSHOT_EVENT, [{"symbol": "BTC", "currentPrice": 1}])

        assert received == [[{"symbol": "BTC", "currentPrice": 1}]]

    async def test_non_list_snapshot_ignored(self):
        client = FakeSocketClient()
        received: list = []
        transport = SocketIOTransport("http://coins.test", client_factory=lambda: client)
        await transport.connect("token-1", received.append, lambda error: None)

        client.fire(SNAPSHOT_EVENT, {"symbol": "BTC"})
        assert received == []

    async def test_handshake_failure_raises_connection_failure(self):
        client = FakeSocketClient(connect_error=SocketIOConnectionError("401"))
        errors: list = []
        transport = SocketIOTransport("http://coins.test", client_factory=lambda: client)

        with pytest.raises(ConnectionFailure, match="handshake"):
            await transport.connect("bad", lambda coins: None, errors.append)

        # Reported once, through the exception only
        client.fire("connect_error", {"message": "401"})
        assert errors == []

    async def test_server_disconnect_reported(self):
        client = FakeSocketClient()
        errors: list = []
        transport = SocketIOTransport("http://coins.test", client_factory=lambda: client)
        await transport.connect("token-1", lambda coins: None, errors.append)

        client.fire("disconnect")

        assert len(errors) == 1
        assert isinstance(errors[0], ConnectionFailure)

    async def test_own_disconnect_not_reported(self):
        client = FakeSocketClient()
        errors: list = []
        received: list = []
        transport = SocketIOTransport("http://coins.test", client_factory=lambda: client)
        await transport.connect("token-1", received.append, errors.append)

        await transport.disconnect()
        client.fire("disconnect")
        client.fire(SNAPSHOT_EVENT, [])

        client.disconnect.assert_awaited_once()
        assert errors == []
        assert received == []

    async def test_disconnect_is_idempotent(self):
        client = FakeSocketClient()
        transport = SocketIOTransport("http://coins.test", client_factory=lambda: client)
        await transport.connect("token-1", lambda coins: None, lambda error: None)

        await transport.disconnect()
        await transport.disconnect()
        client.disconnect.assert_awaited_once()

    async def test_disconnect_before_connect(self):
        transport = SocketIOTransport("http://coins.test", client_factory=FakeSocketClient)
        await transport.disconnect()
