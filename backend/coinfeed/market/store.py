"""Authoritative in-memory snapshot of all instruments."""

from __future__ import annotations

import dataclasses
import logging
from collections.abc import Mapping, ValuesView
from threading import Lock
from types import MappingProxyType

from .models import Instrument

logger = logging.getLogger(__name__)


class MarketSnapshotStore:
    """Symbol -> Instrument mapping, replaced wholesale on every push.

    Writers: ConnectionManager (snapshot events) and the REST bootstrap.
    Readers: list view, detail view, SSE stream.

    Each replace() swaps in a new read-only mapping, so a reader holding the
    result of all() keeps seeing one complete snapshot.
    """

    def __init__(self) -> None:
        self._snapshot: Mapping[str, Instrument] = MappingProxyType({})
        self._lock = Lock()
        self._version: int = 0  # Monotonically increasing; bumped on every replace

    def replace(self, snapshot: Mapping[str, Instrument]) -> None:
        """Make `snapshot` the current state. Symbols missing from it are dropped.

        When an incoming instrument carries no previous price, the price it
        had in the outgoing snapshot is used, so the trend reflects the last
        observed change.
        """
        with self._lock:
            old = self._snapshot
            fresh: dict[str, Instrument] = {}
            for symbol, instrument in snapshot.items():
                prev = old.get(symbol)
                if instrument.previous_price is None and prev is not None:
                    instrument = dataclasses.replace(instrument, previous_price=prev.price)
                fresh[symbol] = instrument
            self._snapshot = MappingProxyType(fresh)
            self._version += 1
            dropped = old.keys() - fresh.keys()
        if dropped:
            logger.debug("Snapshot dropped %d instruments: %s", len(dropped), sorted(dropped))

    def get(self, symbol: str) -> Instrument | None:
        """Current state of one instrument, or None if it is not in the snapshot."""
        return self._snapshot.get(symbol)

    def all(self) -> ValuesView[Instrument]:
        """Read-only view over every instrument in the current snapshot."""
        return self._snapshot.values()

    def snapshot(self) -> Mapping[str, Instrument]:
        """The current read-only mapping itself."""
        return self._snapshot

    @property
    def version(self) -> int:
        """Current version counter. Useful for SSE change detection."""
        return self._version

    def __len__(self) -> int:
        return len(self._snapshot)

    def __contains__(self, symbol: str) -> bool:
        return symbol in self._snapshot

