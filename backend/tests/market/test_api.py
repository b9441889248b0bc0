"""Tests for HttpMarketApi against httpx.MockTransport."""

import json

import httpx
import pytest

from coinfeed.market.api import HttpMarketApi
from coinfeed.market.auth import CredentialProvider
from coinfeed.market.errors import ApiError, HistoryIntegrityError
from coinfeed.market.models import HistoryPoint, Timeframe


def _api(handler, token: str | None = "token-1") -> HttpMarketApi:
    return HttpMarketApi(
        "http://coins.test/",
        CredentialProvider(token),
        transport=httpx.MockTransport(handler),
    )


@pytest.mark.asyncio
class TestHttpMarketApi:
    """Unit tests for the REST client."""

    async def test_list_instruments(self, make_coin):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(200, json=[make_coin("BTC", 50000.0), make_coin("ETH", 3000.0)])

        api = _api(handler)
        coins = await api.list_instruments()

        assert [coin.symbol for coin in coins] == ["BTC", "ETH"]
        assert seen[0].method == "GET"
        assert seen[0].url.path == "/api/coins"
        assert seen[0].headers["Authorization"] == "Bearer token-1"
        await api.aclose()

    async def test_token_read_at_request_time(self):
        """Test that a changed credential is used by the next request."""
        tokens: list[str | None] = []

        def handler(request):
            tokens.append(request.headers.get("Authorization"))
            return httpx.Response(200, json=[])

        credentials = CredentialProvider("old")
        api = HttpMarketApi("http://coins.test", credentials, transport=httpx.MockTransport(handler))
        await api.list_instruments()
        credentials.set_token("new")
        await api.list_instruments()
        credentials.clear()
        await api.list_instruments()

        assert tokens == ["Bearer old", "Bearer new", None]
        await api.aclose()

    async def test_bad_listing_item_rejects_whole_listing(self, make_coin):
        """Test that one malformed coin fails the listing instead of loading a partial set."""

        def handler(request):
            return httpx.Response(200, json=[make_coin("BTC", 1.0), {"name": "broken"}])

        api = _api(handler)
        with pytest.raises(ApiError, match="malformed coin listing"):
            await api.list_instruments()
        await api.aclose()

    async def test_listing_must_be_array(self):
        api = _api(lambda request: httpx.Response(200, json={"coins": []}))
        with pytest.raises(ApiError, match="array"):
            await api.list_instruments()
        await api.aclose()

    async def test_http_error_status(self):
        api = _api(lambda request: httpx.Response(401, json={"error": "unauthorized"}))
        with pytest.raises(ApiError) as excinfo:
            await api.list_instruments()
        assert excinfo.value.status_code == 401
        await api.aclose()

    async def test_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)

        api = _api(handler)
        with pytest.raises(ApiError, match="failed"):
            await api.list_instruments()
        await api.aclose()

    async def test_initialize_posts(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(201, json={"message": "initialized"})

        api = _api(handler)
        await api.initialize_instruments()

        assert seen[0].method == "POST"
        assert seen[0].url.path == "/api/coins/init"
        assert json.loads(seen[0].content) == {}
        await api.aclose()

    async def test_fetch_history(self):
        seen: list[httpx.Request] = []

        def handler(request):
            seen.append(request)
            return httpx.Response(
                200,
                json=[
                    {"timestamp": 1000, "price": 1.5, "volume": 10},
                    {"timestamp": 2000, "price": 1.6, "volume": 12},
                ],
            )

        api = _api(handler)
        series = await api.fetch_history("BTC", Timeframe.FIVE_MINUTES)

        assert seen[0].url.path == "/api/price-history/BTC/5m"
        assert series == [
            HistoryPoint(timestamp=1000, price=1.5, volume=10.0),
            HistoryPoint(timestamp=2000, price=1.6, volume=12.0),
        ]
        await api.aclose()

    async def test_fetch_history_accepts_token(self):
        seen: list[str] = []

        def handler(request):
            seen.append(request.url.path)
            return httpx.Response(200, json=[])

        api = _api(handler)
        await api.fetch_history("ETH", "10m")
        assert seen == ["/api/price-history/ETH/10m"]
        await api.aclose()

    async def test_malformed_history_is_integrity_error(self):
        api = _api(lambda request: httpx.Response(200, json=[{"price": 1.0}]))
        with pytest.raises(HistoryIntegrityError):
            await api.fetch_history("BTC", Timeframe.ONE_MINUTE)
        await api.aclose()

    async def test_non_array_history_is_integrity_error(self):
        api = _api(lambda request: httpx.Response(200, json={"points": []}))
        with pytest.raises(HistoryIntegrityError):
            await api.fetch_history("BTC", Timeframe.ONE_MINUTE)
        await api.aclose()

    async def test_invalid_json(self):
        api = _api(lambda request: httpx.Response(200, content=b"<html>"))
        with pytest.raises(ApiError, match="invalid JSON"):
            await api.list_instruments()
        await api.aclose()
