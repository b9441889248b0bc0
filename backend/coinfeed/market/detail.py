"""Detail view consumer: one instrument, one timeframe, one poller."""

from __future__ import annotations

from .history import HistoryFetcher, HistoryPoller, PollStatus
from .models import Timeframe
from .store import MarketSnapshotStore
from .views import detail_payload, integrity_error_payload, not_found_payload


class DetailView:
    """State behind the per-coin detail screen.

    Instrument fields come from the shared store; the chart series comes
    from this view's own HistoryPoller, so closing the view stops its polling.
    """

    def __init__(
        self,
        store: MarketSnapshotStore,
        fetch: HistoryFetcher,
        poll_interval: float = 1.0,
    ) -> None:
        self._store = store
        self.poller = HistoryPoller(fetch, poll_interval=poll_interval)
        self.symbol: str | None = None
        self.timeframe = Timeframe.ONE_MINUTE

    async def select(self, symbol: str, timeframe: Timeframe | str = Timeframe.ONE_MINUTE) -> None:
        """Show `symbol` at `timeframe`, replacing whatever was selected before."""
        self.symbol = symbol
        self.timeframe = Timeframe.parse(timeframe)
        await self.poller.start(symbol, self.timeframe)

    async def set_timeframe(self, timeframe: Timeframe | str) -> None:
        if self.symbol is None:
            raise ValueError("no instrument selected")
        await self.select(self.symbol, timeframe)

    async def close(self) -> None:
        await self.poller.stop()

    async def resume(self) -> None:
        """Restart polling for the current selection, if any."""
        if self.symbol is not None:
            await self.poller.start(self.symbol, self.timeframe)

    def render(self) -> dict:
        """Payload for the current state: detail, not-found, or integrity error."""
        instrument = self._store.get(self.symbol) if self.symbol else None
        if instrument is None:
            return not_found_payload(self.symbol)
        if self.poller.status is PollStatus.INTEGRITY_ERROR:
            return integrity_error_payload(instrument.symbol, self.poller.last_error)
        return detail_payload(
            instrument,
            self.poller.series,
            timeframe=self.timeframe,
            loading=self.poller.status is PollStatus.LOADING,
        )
