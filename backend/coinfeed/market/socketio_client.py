"""Socket.IO push channel for live coin snapshots."""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import Any

from .errors import ConnectionFailure
from .interface import ErrorCallback, PushTransport, SnapshotCallback

logger = logging.getLogger(__name__)

SNAPSHOT_EVENT = "prices-updated"


class SocketIOTransport(PushTransport):
    """PushTransport backed by a python-socketio AsyncClient.

    The server authenticates the handshake with `auth={"token": ...}` and
    emits `prices-updated` with the full coin list whenever prices move.
    Automatic reconnection is disabled; reconnect policy belongs to the
    owner of the ConnectionManager.
    """

    def __init__(
        self,
        url: str,
        client_factory: Callable[[], Any] | None = None,
    ) -> None:
        self._url = url
        self._client_factory = client_factory or _default_client_factory
        self._client: Any = None
        self._connected = False
        self._closing = False

    async def connect(
        self,
        credential: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> None:
        # Lazy import: the simulator path never needs socketio installed.
        from socketio.exceptions import ConnectionError as SocketIOConnectionError

        client = self._client_factory()
        self._connected = False
        self._closing = False

        def handle_snapshot(data: Any) -> None:
            if self._closing:
                return
            if not isinstance(data, list):
                logger.warning("Ignoring %s payload of type %s", SNAPSHOT_EVENT, type(data).__name__)
                return
            on_snapshot(data)

        def handle_connect_error(data: Any) -> None:
            # Handshake failures surface from client.connect() instead
            if self._connected and not self._closing:
                on_error(ConnectionFailure(f"connect_error: {data}"))

        def handle_disconnect(*args: Any) -> None:
            if self._connected and not self._closing:
                self._connected = False
                on_error(ConnectionFailure("push channel disconnected by server"))

        client.on(SNAPSHOT_EVENT, handle_snapshot)
        client.on("connect_error", handle_connect_error)
        client.on("disconnect", handle_disconnect)

        try:
            await client.connect(self._url, auth={"token": credential})
        except SocketIOConnectionError as e:
            raise ConnectionFailure(f"handshake with {self._url} failed: {e}") from e

        self._client = client
        self._connected = True
        logger.info("Socket.IO connected to %s", self._url)

    async def disconnect(self) -> None:
        self._closing = True
        client, self._client = self._client, None
        self._connected = False
        if client is not None:
            await client.disconnect()
            logger.info("Socket.IO disconnected from %s", self._url)


def _default_client_factory() -> Any:
    import socketio

    return socketio.AsyncClient(reconnection=False)
