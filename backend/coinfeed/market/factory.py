"""Factory for creating the push transport and REST API pair."""

from __future__ import annotations

import logging

from .auth import CredentialProvider
from .config import MarketSettings
from .interface import MarketApi, PushTransport

logger = logging.getLogger(__name__)


def create_market_backend(
    credentials: CredentialProvider,
    settings: MarketSettings | None = None,
) -> tuple[PushTransport, MarketApi]:
    """Create the transport and API based on settings (read from the environment by default).

    - COINFEED_API_URL set and non-empty → Socket.IO transport + HTTP API
    - Otherwise → simulated transport + API sharing one CoinSimulator

    Returns an unconnected transport. MarketSession drives connect/disconnect.
    """
    settings = settings or MarketSettings.from_env()

    if not settings.use_simulator:
        from .api import HttpMarketApi
        from .socketio_client import SocketIOTransport

        logger.info("Market data backend: %s", settings.api_url)
        transport = SocketIOTransport(settings.api_url)
        api = HttpMarketApi(settings.api_url, credentials, timeout=settings.http_timeout)
        return transport, api
    else:
        from .simulator import CoinSimulator, SimulatedMarketApi, SimulatedTransport

        logger.info("Market data backend: GBM Simulator")
        simulator = CoinSimulator(step_seconds=settings.sim_interval)
        return (
            SimulatedTransport(simulator, update_interval=settings.sim_interval),
            SimulatedMarketApi(simulator),
        )
