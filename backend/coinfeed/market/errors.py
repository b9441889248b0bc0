"""Exceptions raised by the market data layer."""

from __future__ import annotations


class MarketDataError(Exception):
    """Base class for market data failures."""


class ConnectionFailure(MarketDataError):
    """Push channel handshake or transport failure."""


class ApiError(MarketDataError):
    """REST request failed or returned an unusable body."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class HistoryIntegrityError(MarketDataError):
    """History series is malformed or not ordered by timestamp."""
