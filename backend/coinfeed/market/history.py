"""Recurring history poll for the instrument shown in a detail view."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Awaitable, Callable, Sequence
from enum import Enum

from .errors import HistoryIntegrityError
from .models import HistoryPoint, Timeframe

logger = logging.getLogger(__name__)

HistoryFetcher = Callable[[str, Timeframe], Awaitable[list[HistoryPoint]]]

DEFAULT_POLL_INTERVAL = 1.0  # seconds


class PollStatus(str, Enum):
    IDLE = "idle"
    LOADING = "loading"  # Started, no series received yet
    READY = "ready"
    INTEGRITY_ERROR = "integrity_error"


def validate_series(series: Sequence[HistoryPoint]) -> None:
    """Raise HistoryIntegrityError unless timestamps never go backwards."""
    previous: int | None = None
    for index, point in enumerate(series):
        if not isinstance(point, HistoryPoint):
            raise HistoryIntegrityError(f"item {index} is not a history point: {point!r}")
        if previous is not None and point.timestamp < previous:
            raise HistoryIntegrityError(
                f"timestamp {point.timestamp} at index {index} precedes {previous}"
            )
        previous = point.timestamp


class HistoryPoller:
    """Polls the history endpoint for one (symbol, timeframe) at a time.

    Every start() and stop() bumps a generation counter. A fetch result is
    applied only if the generation it was started under is still current,
    so a slow response for an old timeframe can never overwrite the series
    of the new one.

    Failed ticks are logged and the loop carries on at the next interval;
    the last good series stays in place.
    """

    def __init__(
        self,
        fetch: HistoryFetcher,
        poll_interval: float = DEFAULT_POLL_INTERVAL,
        on_update: Callable[[HistoryPoller], None] | None = None,
    ) -> None:
        self._fetch = fetch
        self._interval = poll_interval
        self._on_update = on_update
        self._generation = 0
        self._task: asyncio.Task | None = None
        self._symbol: str | None = None
        self._timeframe: Timeframe | None = None
        self._series: tuple[HistoryPoint, ...] = ()
        self._status = PollStatus.IDLE
        self.last_error: Exception | None = None
        self.last_updated: float | None = None
        self.failures = 0
        self.stale_dropped = 0

    @property
    def series(self) -> tuple[HistoryPoint, ...]:
        """Last good series for the current pair, oldest first."""
        return self._series

    @property
    def status(self) -> PollStatus:
        return self._status

    @property
    def symbol(self) -> str | None:
        return self._symbol

    @property
    def timeframe(self) -> Timeframe | None:
        return self._timeframe

    @property
    def interval(self) -> float:
        return self._interval

    @property
    def is_running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def start(
        self,
        symbol: str,
        timeframe: Timeframe | str,
        interval: float | None = None,
    ) -> None:
        """Stop any current loop, then poll (symbol, timeframe) every `interval` seconds.

        The first fetch happens immediately. Switching to a different pair
        discards the series held for the old one.
        """
        timeframe = Timeframe.parse(timeframe)
        await self.stop()

        if (symbol, timeframe) != (self._symbol, self._timeframe):
            self._series = ()
            self.last_updated = None
        if interval is not None:
            self._interval = interval

        self._generation += 1
        self._symbol = symbol
        self._timeframe = timeframe
        self._status = PollStatus.READY if self._series else PollStatus.LOADING
        self.last_error = None
        self._task = asyncio.create_task(
            self._poll_loop(self._generation, symbol, timeframe), name="history-poller"
        )
        logger.info(
            "History poller started: %s/%s, %.1fs interval",
            symbol,
            timeframe.value,
            self._interval,
        )

    async def stop(self) -> None:
        """Stop polling. No result from before this call is applied afterwards."""
        self._generation += 1
        if self._task and not self._task.done():
            self._task.cancel()
            # Called from within the loop (fetch or on_update): it ends at its next await
            if self._task is not asyncio.current_task():
                try:
                    await self._task
                except asyncio.CancelledError:
                    pass
            logger.info("History poller stopped: %s/%s", self._symbol, self._timeframe_value)
        self._task = None

    # --- Internal ---

    @property
    def _timeframe_value(self) -> str | None:
        return self._timeframe.value if self._timeframe else None

    async def _poll_loop(self, generation: int, symbol: str, timeframe: Timeframe) -> None:
        while True:
            await self._poll_once(generation, symbol, timeframe)
            await asyncio.sleep(self._interval)

    async def _poll_once(self, generation: int, symbol: str, timeframe: Timeframe) -> None:
        """Execute one tick: fetch, check it is still wanted, validate, apply."""
        try:
            series = await self._fetch(symbol, timeframe)
            if generation != self._generation:
                self.stale_dropped += 1
                logger.debug("Dropping stale history for %s/%s", symbol, timeframe.value)
                return
            validate_series(series)
        except HistoryIntegrityError as e:
            if generation != self._generation:
                return
            logger.error("Discarding history for %s/%s: %s", symbol, timeframe.value, e)
            self.last_error = e
            self._status = PollStatus.INTEGRITY_ERROR
            self._notify()
            return
        except Exception as e:
            if generation != self._generation:
                return
            # Transient; the loop retries on the next interval
            self.failures += 1
            self.last_error = e
            logger.error("History poll failed for %s/%s: %s", symbol, timeframe.value, e)
            return

        self._series = tuple(series)
        self._status = PollStatus.READY
        self.last_error = None
        self.last_updated = time.time()
        logger.debug("History %s/%s: %d points", symbol, timeframe.value, len(series))
        self._notify()

    def _notify(self) -> None:
        if self._on_update is None:
            return
        try:
            self._on_update(self)
        except Exception:
            logger.exception("History update handler failed")
