"""Tests for market backend factory."""

import os
from unittest.mock import patch

import pytest

from coinfeed.market.api import HttpMarketApi
from coinfeed.market.auth import CredentialProvider
from coinfeed.market.config import MarketSettings
from coinfeed.market.factory import create_market_backend
from coinfeed.market.simulator import SimulatedMarketApi, SimulatedTransport
from coinfeed.market.socketio_client import SocketIOTransport


class TestFactory:
    """Tests for create_market_backend."""

    def test_creates_simulator_when_no_api_url(self):
        """Test that the simulator is used when COINFEED_API_URL is not set."""
        with patch.dict(os.environ, {}, clear=True):
            transport, api = create_market_backend(CredentialProvider())

        assert isinstance(transport, SimulatedTransport)
        assert isinstance(api, SimulatedMarketApi)

    def test_creates_simulator_when_api_url_whitespace(self):
        with patch.dict(os.environ, {"COINFEED_API_URL": "   "}, clear=True):
            transport, _ = create_market_backend(CredentialProvider())

        assert isinstance(transport, SimulatedTransport)

    def test_simulator_pair_shares_state(self):
        """Test that the transport and API read the same simulated market."""
        with patch.dict(os.environ, {}, clear=True):
            transport, api = create_market_backend(CredentialProvider())

        assert transport._sim is api._sim

    @pytest.mark.asyncio
    async def test_creates_remote_backend_when_api_url_set(self):
        with patch.dict(os.environ, {"COINFEED_API_URL": "http://coins.test"}, clear=True):
            transport, api = create_market_backend(CredentialProvider("token-1"))

        assert isinstance(transport, SocketIOTransport)
        assert isinstance(api, HttpMarketApi)
        assert transport._url == "http://coins.test"
        await api.aclose()

    @pytest.mark.asyncio
    async def test_explicit_settings_override_environment(self):
        credentials = CredentialProvider("token-1")
        settings = MarketSettings(api_url="http://other.test", http_timeout=2.0)

        with patch.dict(os.environ, {}, clear=True):
            transport, api = create_market_backend(credentials, settings)

        assert isinstance(transport, SocketIOTransport)
        assert api._credentials is credentials
        await api.aclose()
