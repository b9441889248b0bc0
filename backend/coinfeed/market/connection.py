"""Push channel lifecycle: one session per credential, snapshots applied in order."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from enum import Enum
from functools import partial
from typing import Any

from .errors import ConnectionFailure
from .interface import PushTransport
from .models import parse_snapshot
from .store import MarketSnapshotStore

logger = logging.getLogger(__name__)


class ConnectionState(str, Enum):
    CLOSED = "closed"
    CONNECTING = "connecting"
    OPEN = "open"


class ConnectionManager:
    """Owns at most one open push session and feeds its snapshots to the store.

    Every session gets a new generation number. Snapshot events are tagged
    with the generation that was current when the session opened and queued;
    a single consumer task applies them to the store in arrival order and
    drops anything tagged with an older generation.

    Transport errors are reported through `on_error` and `last_error`. The
    manager never reconnects on its own; that is the owner's call.
    """

    def __init__(
        self,
        transport: PushTransport,
        store: MarketSnapshotStore,
        on_error: Callable[[Exception], None] | None = None,
    ) -> None:
        self._transport = transport
        self._store = store
        self._on_error = on_error
        self._state = ConnectionState.CLOSED
        self._generation = 0
        self._credential: str | None = None
        self._queue: asyncio.Queue | None = None
        self._task: asyncio.Task | None = None
        self._connect_task: asyncio.Task | None = None
        self._lock = asyncio.Lock()
        self.last_error: Exception | None = None
        self.snapshots_applied = 0

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def is_open(self) -> bool:
        return self._state is ConnectionState.OPEN

    @property
    def credential(self) -> str | None:
        """Credential of the current session, None when closed."""
        return self._credential

    @property
    def generation(self) -> int:
        return self._generation

    async def open(self, credential: str) -> bool:
        """Open a session for `credential`, closing any existing one first.

        Returns True once the handshake succeeded. A failed handshake is
        reported through on_error and returns False; it never raises. A
        handshake interrupted by close() or abort_handshake() also returns
        False, without a report.
        """
        async with self._lock:
            await self._teardown()

            self._generation += 1
            generation = self._generation
            self._credential = credential
            self._state = ConnectionState.CONNECTING
            self._queue = asyncio.Queue()
            logger.info("Opening push channel (generation %d)", generation)

            self._connect_task = asyncio.create_task(
                self._transport.connect(
                    credential,
                    partial(self._enqueue, generation),
                    partial(self._transport_error, generation),
                ),
                name="push-handshake",
            )
            try:
                await self._connect_task
            except asyncio.CancelledError:
                aborted = generation != self._generation
                await self._teardown()
                if aborted:
                    logger.info("Push channel handshake aborted (generation %d)", generation)
                    return False
                raise
            except Exception as e:
                await self._teardown()
                failure = e if isinstance(e, ConnectionFailure) else ConnectionFailure(str(e))
                logger.error("Push channel handshake failed: %s", failure)
                self._report(failure)
                return False
            finally:
                self._connect_task = None

            self._state = ConnectionState.OPEN
            self._task = asyncio.create_task(
                self._consume(generation, self._queue), name="snapshot-consumer"
            )
            logger.info("Push channel open (generation %d)", generation)
            return True

    async def close(self) -> None:
        """Tear down the current session. Safe to call multiple times.

        A handshake still in progress is cancelled rather than waited for.
        """
        self.abort_handshake()
        async with self._lock:
            await self._teardown()

    def abort_handshake(self) -> None:
        """Cancel a handshake in progress; the pending open() returns False."""
        if self._connect_task is not None and not self._connect_task.done():
            self._generation += 1
            self._connect_task.cancel()

    async def wait_idle(self) -> None:
        """Wait until every snapshot queued so far has been applied or dropped."""
        queue = self._queue
        if queue is not None:
            await queue.join()

    # --- Internal ---

    async def _teardown(self) -> None:
        if self._state is ConnectionState.CLOSED and self._task is None:
            return

        # Anything still in flight for the old session is now stale
        self._generation += 1

        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
        self._task = None
        self._queue = None

        try:
            await self._transport.disconnect()
        except Exception as e:
            logger.warning("Push channel disconnect failed: %s", e)

        self._state = ConnectionState.CLOSED
        self._credential = None
        logger.info("Push channel closed")

    def _enqueue(self, generation: int, payload: list[dict[str, Any]]) -> None:
        """Transport callback: queue a snapshot for the consumer task."""
        if generation != self._generation or self._queue is None:
            logger.debug("Dropping snapshot from stale generation %d", generation)
            return
        self._queue.put_nowait((generation, payload))

    def _transport_error(self, generation: int, error: Exception) -> None:
        if generation != self._generation:
            return
        logger.error("Push channel error: %s", error)
        self._report(error if isinstance(error, ConnectionFailure) else ConnectionFailure(str(error)))

    def _report(self, error: Exception) -> None:
        self.last_error = error
        if self._on_error is not None:
            try:
                self._on_error(error)
            except Exception:
                logger.exception("Connection error handler failed")

    async def _consume(self, generation: int, queue: asyncio.Queue) -> None:
        """Apply queued snapshots to the store, strictly in arrival order."""
        while True:
            tagged_generation, payload = await queue.get()
            try:
                if tagged_generation != generation or generation != self._generation:
                    continue
                try:
                    snapshot = parse_snapshot(payload)
                except ValueError as e:
                    logger.warning("Discarding malformed snapshot: %s", e)
                    continue
                self._store.replace(snapshot)
                self.snapshots_applied += 1
                logger.debug("Applied snapshot with %d instruments", len(snapshot))
            finally:
                queue.task_done()
