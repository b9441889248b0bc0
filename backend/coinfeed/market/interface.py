"""Abstract interfaces for the push channel and the REST market API."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable
from typing import Any

from .models import HistoryPoint, Instrument, Timeframe

SnapshotCallback = Callable[[list[dict[str, Any]]], None]
ErrorCallback = Callable[[Exception], None]


class PushTransport(ABC):
    """Contract for push channels that deliver full instrument snapshots.

    A transport only moves payloads. It calls `on_snapshot` with the raw
    instrument list of every snapshot event, in arrival order, and `on_error`
    for transport failures after the handshake. Ordering, generations and
    the store belong to ConnectionManager.

    Lifecycle:
        transport = SocketIOTransport(url)
        await transport.connect(token, on_snapshot, on_error)
        # ... snapshots arrive ...
        await transport.disconnect()
    """

    @abstractmethod
    async def connect(
        self,
        credential: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> None:
        """Open the channel authenticated with `credential`.

        Returns once the handshake succeeded. Raises ConnectionFailure if it
        did not. Must not deliver any snapshot before returning.
        """

    @abstractmethod
    async def disconnect(self) -> None:
        """Close the channel. Safe to call multiple times.

        After disconnect(), the callbacks are never invoked again.
        """


class MarketApi(ABC):
    """Contract for the REST listing and history endpoints."""

    @abstractmethod
    async def list_instruments(self) -> list[Instrument]:
        """Full current instrument list."""

    @abstractmethod
    async def initialize_instruments(self) -> None:
        """Ask the server to create its first-run instrument set."""

    @abstractmethod
    async def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[HistoryPoint]:
        """History series for one instrument, ordered by timestamp."""

    async def aclose(self) -> None:
        """Release network resources. Default: nothing to release."""
