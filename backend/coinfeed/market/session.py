"""Market session: keeps the push channel in step with the credential."""

from __future__ import annotations

import asyncio
import logging

from .auth import CredentialProvider
from .connection import ConnectionManager
from .detail import DetailView
from .errors import ApiError
from .interface import MarketApi, PushTransport
from .store import MarketSnapshotStore

logger = logging.getLogger(__name__)


async def bootstrap_store(api: MarketApi, store: MarketSnapshotStore) -> int:
    """Load the initial coin list into the store. Returns the number of coins.

    On a fresh server the listing is empty: ask it to initialize, then fetch
    again.
    """
    instruments = await api.list_instruments()
    if not instruments:
        logger.info("Coin listing empty, requesting first-run initialization")
        await api.initialize_instruments()
        instruments = await api.list_instruments()
    store.replace({instrument.symbol: instrument for instrument in instruments})
    logger.info("Bootstrapped store with %d coins", len(instruments))
    return len(instruments)


class MarketSession:
    """Owner of the store, the connection and the detail views of one user session.

    Subscribes to the credential provider. A new or changed token (re)opens
    the push channel; a cleared token closes it and stops every detail view's
    poller. Detail pollers are also stopped before a reopen, so no fetch
    issued under the old token is applied, and restarted for their selection
    once the new token is in place. Changes are applied in order by a lock,
    each step reading the latest token, so rapid changes converge on the
    final credential.

    The first successful sync also bulk-loads the store from the listing
    endpoint. Connection errors are recorded, never retried automatically;
    call reconnect() to try again.

    Lifecycle:
        session = MarketSession(credentials, transport, api)
        await session.start()
        detail = session.open_detail()
        await detail.select("BTC", "1m")
        # ... credentials.set_token(...) / credentials.clear() ...
        await session.close()
    """

    def __init__(
        self,
        credentials: CredentialProvider,
        transport: PushTransport,
        api: MarketApi,
        store: MarketSnapshotStore | None = None,
        poll_interval: float = 1.0,
    ) -> None:
        self._credentials = credentials
        self.api = api
        self.store = store if store is not None else MarketSnapshotStore()
        self.connection = ConnectionManager(transport, self.store, on_error=self._on_connection_error)
        self._poll_interval = poll_interval
        self._lock = asyncio.Lock()
        self._pending: set[asyncio.Task] = set()
        self._details: list[DetailView] = []
        self._unsubscribe = None
        self._bootstrapped = False
        self.last_error: Exception | None = None

    @property
    def bootstrapped(self) -> bool:
        return self._bootstrapped

    async def start(self) -> None:
        """Subscribe to credential changes and sync with the current token."""
        if self._unsubscribe is None:
            self._unsubscribe = self._credentials.subscribe(self._on_credential_change)
        await self._sync()

    async def reconnect(self) -> bool:
        """Reopen the channel with the current token. Returns True if it is open."""
        await self._sync(force=True)
        return self.connection.is_open

    async def wait_synced(self) -> None:
        """Wait for every scheduled credential change to be applied."""
        while self._pending:
            await asyncio.gather(*list(self._pending), return_exceptions=True)

    def open_detail(self) -> DetailView:
        """Create a detail view whose poller this session stops on logout and close."""
        view = DetailView(self.store, self.api.fetch_history, poll_interval=self._poll_interval)
        self._details.append(view)
        return view

    async def close_detail(self, view: DetailView) -> None:
        await view.close()
        if view in self._details:
            self._details.remove(view)

    async def close(self) -> None:
        """Stop listening for credentials and release the channel and all pollers."""
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        for task in list(self._pending):
            task.cancel()
        await asyncio.gather(*list(self._pending), return_exceptions=True)
        async with self._lock:
            await self._release()
        self._details.clear()
        logger.info("Market session closed")

    # --- Internal ---

    def _on_credential_change(self, token: str | None) -> None:
        # A handshake for the superseded token would only delay the next sync
        self.connection.abort_handshake()
        task = asyncio.get_running_loop().create_task(self._sync(), name="credential-sync")
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)

    async def _sync(self, force: bool = False) -> None:
        async with self._lock:
            token = self._credentials.token
            if token is None:
                await self._release()
                return
            if not force and self.connection.is_open and self.connection.credential == token:
                return

            await self._suspend_details()

            if not self._bootstrapped:
                try:
                    await bootstrap_store(self.api, self.store)
                    self._bootstrapped = True
                except ApiError as e:
                    logger.error("Initial coin load failed: %s", e)
                    self.last_error = e

            await self.connection.open(token)
            await self._resume_details()

    async def _release(self) -> None:
        await self._suspend_details()
        await self.connection.close()

    async def _suspend_details(self) -> None:
        for view in self._details:
            await view.close()

    async def _resume_details(self) -> None:
        for view in self._details:
            await view.resume()

    def _on_connection_error(self, error: Exception) -> None:
        self.last_error = error
        logger.warning("Market session connection error: %s", error)
