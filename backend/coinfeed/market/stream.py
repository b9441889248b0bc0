"""HTTP and SSE endpoints exposing the snapshot store to a UI."""

from __future__ import annotations

import asyncio
import json
import logging
from collections.abc import AsyncGenerator

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse

from .store import MarketSnapshotStore
from .views import list_rows, not_found_payload

logger = logging.getLogger(__name__)


def create_stream_router(store: MarketSnapshotStore, interval: float = 0.5) -> APIRouter:
    """Create the market router with a reference to the snapshot store.

    This factory pattern lets us inject the store without globals.
    """
    router = APIRouter(prefix="/api/market", tags=["market"])

    @router.get("/coins")
    async def get_coins() -> list[dict]:
        """Formatted rows for the coin table."""
        return list_rows(store.all())

    @router.get("/coins/{symbol}")
    async def get_coin(symbol: str):
        """Raw state of one coin. Unknown symbols get a 404 not-found payload."""
        instrument = store.get(symbol)
        if instrument is None:
            return JSONResponse(status_code=404, content=not_found_payload(symbol))
        return instrument.to_dict()

    @router.get("/stream")
    async def stream_coins(request: Request) -> StreamingResponse:
        """SSE endpoint for live coin table updates.

        Sends the full set of rows whenever the store's version changes:

            data: [{"symbol": "BTC", "price": "$50,000.00", ...}, ...]
        """
        return StreamingResponse(
            _generate_events(store, request, interval),
            media_type="text/event-stream",
            headers={
                "Cache-Control": "no-cache",
                "Connection": "keep-alive",
                "X-Accel-Buffering": "no",  # Disable nginx buffering if proxied
            },
        )

    return router


async def _generate_events(
    store: MarketSnapshotStore,
    request: Request,
    interval: float = 0.5,
) -> AsyncGenerator[str, None]:
    """Async generator that yields SSE-formatted snapshot events.

    Checks the store every `interval` seconds and sends rows only when a new
    snapshot has been applied. Stops when the client disconnects.
    """
    yield "retry: 1000\n\n"

    last_version = -1
    client_ip = request.client.host if request.client else "unknown"
    logger.info("SSE client connected: %s", client_ip)

    try:
        while True:
            if await request.is_disconnected():
                logger.info("SSE client disconnected: %s", client_ip)
                break

            current_version = store.version
            if current_version != last_version:
                last_version = current_version
                rows = list_rows(store.all())
                if rows:
                    yield f"data: {json.dumps(rows)}\n\n"

            await asyncio.sleep(interval)
    except asyncio.CancelledError:
        logger.info("SSE stream cancelled for: %s", client_ip)
