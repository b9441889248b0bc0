"""Environment-driven settings for the market data layer."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass

logger = logging.getLogger(__name__)


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    try:
        value = float(raw)
    except ValueError:
        logger.warning("Ignoring %s=%r: not a number, using %s", name, raw, default)
        return default
    if value <= 0:
        logger.warning("Ignoring %s=%r: must be positive, using %s", name, raw, default)
        return default
    return value


@dataclass(frozen=True)
class MarketSettings:
    """Settings read from COINFEED_* environment variables.

    - COINFEED_API_URL: server base URL; empty selects the simulator
    - COINFEED_POLL_INTERVAL: history poll interval in seconds (default 1.0)
    - COINFEED_HTTP_TIMEOUT: REST timeout in seconds (default 10.0)
    - COINFEED_SIM_INTERVAL: simulator push interval in seconds (default 1.0)
    """

    api_url: str = ""
    poll_interval: float = 1.0
    http_timeout: float = 10.0
    sim_interval: float = 1.0

    @property
    def use_simulator(self) -> bool:
        return not self.api_url

    @classmethod
    def from_env(cls) -> MarketSettings:
        return cls(
            api_url=os.environ.get("COINFEED_API_URL", "").strip().rstrip("/"),
            poll_interval=_env_float("COINFEED_POLL_INTERVAL", 1.0),
            http_timeout=_env_float("COINFEED_HTTP_TIMEOUT", 10.0),
            sim_interval=_env_float("COINFEED_SIM_INTERVAL", 1.0),
        )
