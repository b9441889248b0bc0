"""Data models for market data."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class Timeframe(str, Enum):
    """History window selectable from the detail view."""

    ONE_MINUTE = "1m"
    THREE_MINUTES = "3m"
    FIVE_MINUTES = "5m"
    TEN_MINUTES = "10m"

    @property
    def minutes(self) -> int:
        return int(self.value[:-1])

    @classmethod
    def parse(cls, value: str | Timeframe) -> Timeframe:
        """Accept either a Timeframe or its wire token ('1m', '3m', ...)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"unknown timeframe: {value!r}") from None


def _number(raw: dict[str, Any], key: str, default: float | None = None) -> float:
    value = raw.get(key, default)
    if value is None:
        raise ValueError(f"missing {key}")
    try:
        return float(value)
    except (TypeError, ValueError) as exc:
        raise ValueError(f"invalid numeric value for {key}: {value!r}") from exc


@dataclass(frozen=True, slots=True)
class Instrument:
    """Immutable state of one coin as last pushed by the server."""

    symbol: str
    name: str
    price: float
    previous_price: float | None = None
    change_24h: float = 0.0  # Percent, signed
    market_cap: float = 0.0
    volume_24h: float = 0.0
    circulating_supply: float = 0.0
    description: str = ""

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> Instrument:
        """Build from the server's JSON shape (camelCase keys).

        Raises ValueError when the symbol or current price is missing or the
        price is negative.
        """
        if not isinstance(raw, dict):
            raise ValueError("instrument payload must be an object")
        symbol = raw.get("symbol")
        if not symbol:
            raise ValueError("missing symbol")
        price = _number(raw, "currentPrice")
        if price < 0:
            raise ValueError(f"negative price for {symbol}: {price}")
        previous = raw.get("previousPrice")
        return cls(
            symbol=str(symbol),
            name=str(raw.get("name") or symbol),
            price=price,
            previous_price=None if previous is None else _number(raw, "previousPrice"),
            change_24h=_number(raw, "priceChange24h", 0.0),
            market_cap=_number(raw, "marketCap", 0.0),
            volume_24h=_number(raw, "volume24h", 0.0),
            circulating_supply=_number(raw, "circulatingSupply", 0.0),
            description=str(raw.get("description") or ""),
        )

    def to_dict(self) -> dict:
        """Serialize back to the server's JSON shape."""
        return {
            "symbol": self.symbol,
            "name": self.name,
            "currentPrice": self.price,
            "previousPrice": self.previous_price,
            "priceChange24h": self.change_24h,
            "marketCap": self.market_cap,
            "volume24h": self.volume_24h,
            "circulatingSupply": self.circulating_supply,
            "description": self.description,
        }


@dataclass(frozen=True, slots=True)
class HistoryPoint:
    """One sample of a history series."""

    timestamp: int  # Unix milliseconds
    price: float
    volume: float = 0.0

    @classmethod
    def from_dict(cls, raw: dict[str, Any]) -> HistoryPoint:
        if not isinstance(raw, dict):
            raise ValueError("history point must be an object")
        return cls(
            timestamp=int(_number(raw, "timestamp")),
            price=_number(raw, "price"),
            volume=_number(raw, "volume", 0.0),
        )

    def to_dict(self) -> dict:
        return {"timestamp": self.timestamp, "price": self.price, "volume": self.volume}


def parse_snapshot(payload: list[dict[str, Any]]) -> dict[str, Instrument]:
    """Parse a full instrument list into a symbol-keyed snapshot.

    The whole payload is rejected if any item is malformed, since a snapshot
    is only meaningful as a complete replacement.
    """
    if not isinstance(payload, list):
        raise ValueError("snapshot payload must be a list")
    snapshot: dict[str, Instrument] = {}
    for item in payload:
        instrument = Instrument.from_dict(item)
        snapshot[instrument.symbol] = instrument
    return snapshot
