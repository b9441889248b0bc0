"""REST client for the coin listing and price history endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from .auth import CredentialProvider
from .errors import ApiError, HistoryIntegrityError
from .interface import MarketApi
from .models import HistoryPoint, Instrument, Timeframe, parse_snapshot

logger = logging.getLogger(__name__)


class HttpMarketApi(MarketApi):
    """MarketApi backed by the server's REST endpoints.

        GET  /api/coins                             -> [coin, ...]
        POST /api/coins/init                        -> first-run seeding
        GET  /api/price-history/{symbol}/{tf}       -> [{timestamp, price, volume}, ...]

    Every request carries `Authorization: Bearer <token>` from the
    credential provider.
    """

    def __init__(
        self,
        base_url: str,
        credentials: CredentialProvider,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._base_url = base_url.rstrip("/")
        self._credentials = credentials
        self._client = httpx.AsyncClient(
            base_url=self._base_url,
            timeout=httpx.Timeout(timeout),
            transport=transport,
        )

    async def list_instruments(self) -> list[Instrument]:
        body = await self._request("GET", "/api/coins")
        if not isinstance(body, list):
            raise ApiError("coin listing must be a JSON array")
        # All or nothing, like a pushed snapshot
        try:
            return list(parse_snapshot(body).values())
        except ValueError as e:
            raise ApiError(f"malformed coin listing: {e}") from e

    async def initialize_instruments(self) -> None:
        await self._request("POST", "/api/coins/init", json={})
        logger.info("Requested first-run coin initialization")

    async def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[HistoryPoint]:
        timeframe = Timeframe.parse(timeframe)
        body = await self._request("GET", f"/api/price-history/{symbol}/{timeframe.value}")
        if not isinstance(body, list):
            raise HistoryIntegrityError("price history must be a JSON array")
        try:
            return [HistoryPoint.from_dict(item) for item in body]
        except (ValueError, TypeError) as e:
            raise HistoryIntegrityError(f"malformed history point: {e}") from e

    async def aclose(self) -> None:
        await self._client.aclose()

    # --- Internal ---

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        headers = {}
        token = self._credentials.token
        if token:
            headers["Authorization"] = f"Bearer {token}"
        try:
            response = await self._client.request(method, path, headers=headers, **kwargs)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise ApiError(
                f"{method} {path} returned {e.response.status_code}",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise ApiError(f"{method} {path} failed: {e}") from e
        if not response.content:
            return None
        try:
            return response.json()
        except ValueError as e:
            raise ApiError(f"{method} {path} returned invalid JSON") from e

