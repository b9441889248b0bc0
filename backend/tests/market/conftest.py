"""Fixtures for market data tests.

Provides an in-memory push transport that records its lifecycle and lets a
test push snapshots by hand, plus a builder for server-shaped coin payloads.
"""

import pytest

from coinfeed.market.interface import PushTransport


def _coin(symbol: str, price: float, **fields) -> dict:
    coin = {
        "symbol": symbol,
        "name": fields.pop("name", symbol.title()),
        "currentPrice": price,
        "priceChange24h": 0.0,
        "marketCap": 0.0,
        "volume24h": 0.0,
        "circulatingSupply": 0.0,
        "description": "",
    }
    coin.update(fields)
    return coin


class FakeTransport(PushTransport):
    """PushTransport that never touches the network."""

    def __init__(self) -> None:
        self.credentials: list[str] = []
        self.disconnects = 0
        self.active = 0  # Sessions currently connected
        self.max_active = 0
        self.fail_with: Exception | None = None
        self.on_snapshot = None
        self.on_error = None

    async def connect(self, credential, on_snapshot, on_error):
        self.credentials.append(credential)
        if self.fail_with is not None:
            raise self.fail_with
        self.on_snapshot = on_snapshot
        self.on_error = on_error
        self.active += 1
        self.max_active = max(self.max_active, self.active)

    async def disconnect(self):
        self.disconnects += 1
        if self.on_snapshot is not None:
            self.active -= 1
        self.on_snapshot = None
        self.on_error = None

    def push(self, coins: list[dict]) -> None:
        self.on_snapshot(coins)


@pytest.fixture
def make_coin():
    """Builder for server-shaped coin dicts: make_coin("BTC", 50000.0, marketCap=...)."""
    return _coin


@pytest.fixture
def transport():
    return FakeTransport()
