"""GBM-based coin market simulator for running without a server."""

from __future__ import annotations

import asyncio
import logging
import math
import random
import time
from collections import deque

import numpy as np

from .errors import ConnectionFailure
from .interface import ErrorCallback, MarketApi, PushTransport, SnapshotCallback
from .models import HistoryPoint, Instrument, Timeframe
from .seed_coins import (
    COIN_PARAMS,
    CORRELATION_GROUPS,
    CROSS_GROUP_CORR,
    DEFAULT_PARAMS,
    DOGE_CORR,
    INTRA_ALTS_CORR,
    INTRA_MAJORS_CORR,
    SEED_COINS,
)

logger = logging.getLogger(__name__)

# Enough history for the widest timeframe
HISTORY_WINDOW_MS = max(tf.minutes for tf in Timeframe) * 60 * 1000


class CoinSimulator:
    """Geometric Brownian Motion simulator for correlated coin prices.

    Math:
        S(t+dt) = S(t) * exp((mu - sigma^2/2) * dt + sigma * sqrt(dt) * Z)

    Where dt is the step length as a fraction of a year. Coins trade around
    the clock, so a year is 365 * 24h rather than a trading calendar.

    Starts empty, like a fresh server; seed() creates the coin set and
    backfills enough history for the widest timeframe.
    """

    SECONDS_PER_YEAR = 365 * 24 * 3600

    def __init__(
        self,
        step_seconds: float = 1.0,
        event_probability: float = 0.001,
    ) -> None:
        self._step_seconds = step_seconds
        self._dt = step_seconds / self.SECONDS_PER_YEAR
        self._event_prob = event_probability

        # Per-coin state
        self._symbols: list[str] = []
        self._coins: dict[str, dict] = {}
        self._prices: dict[str, float] = {}
        self._previous: dict[str, float | None] = {}
        self._open: dict[str, float] = {}  # Reference price for the 24h change
        self._params: dict[str, dict[str, float]] = {}
        self._history: dict[str, deque[HistoryPoint]] = {}

        self._cholesky: np.ndarray | None = None
        self._last_ts: int | None = None

    # --- Public API ---

    @property
    def symbols(self) -> list[str]:
        return list(self._symbols)

    def seed(self, now_ms: int | None = None) -> None:
        """Create the seed coins and backfill history up to `now_ms`. No-op if seeded."""
        if self._symbols:
            return
        for symbol, coin in SEED_COINS.items():
            self._add_coin_internal(symbol, coin)
        self._rebuild_cholesky()

        now_ms = now_ms if now_ms is not None else int(time.time() * 1000)
        step_ms = int(self._step_seconds * 1000)
        steps = HISTORY_WINDOW_MS // step_ms
        for i in range(steps, 0, -1):
            self.step(now_ms - i * step_ms)
        logger.info("Simulator seeded %d coins", len(self._symbols))

    def step(self, now_ms: int | None = None) -> list[dict]:
        """Advance every coin by one step. Returns the full coin list.

        Each call also appends one history point per coin.
        """
        n = len(self._symbols)
        if n == 0:
            return []

        ts = now_ms if now_ms is not None else int(time.time() * 1000)
        # Keep history timestamps strictly increasing even if the clock stalls
        if self._last_ts is not None and ts <= self._last_ts:
            ts = self._last_ts + 1
        self._last_ts = ts

        z_independent = np.random.standard_normal(n)
        if self._cholesky is not None:
            z_correlated = self._cholesky @ z_independent
        else:
            z_correlated = z_independent

        for i, symbol in enumerate(self._symbols):
            params = self._params[symbol]
            mu = params["mu"]
            sigma = params["sigma"]

            drift = (mu - 0.5 * sigma**2) * self._dt
            diffusion = sigma * math.sqrt(self._dt) * z_correlated[i]
            self._previous[symbol] = self._prices[symbol]
            self._prices[symbol] *= math.exp(drift + diffusion)

            if random.random() < self._event_prob:
                shock_magnitude = random.uniform(0.02, 0.05)
                shock_sign = random.choice([-1, 1])
                self._prices[symbol] *= 1 + shock_magnitude * shock_sign
                logger.debug(
                    "Random event on %s: %.1f%% %s",
                    symbol,
                    shock_magnitude * 100,
                    "up" if shock_sign > 0 else "down",
                )

            per_step = self._coins[symbol]["volume_24h"] * self._step_seconds / 86400
            volume = per_step * float(np.random.lognormal(0.0, 0.5))
            self._history[symbol].append(
                HistoryPoint(timestamp=ts, price=self._round(self._prices[symbol]), volume=round(volume, 2))
            )
            self._trim_history(symbol, ts)

        return self.snapshot()

    def snapshot(self) -> list[dict]:
        """Current coin list in the server's wire format."""
        return [self.instrument(symbol).to_dict() for symbol in self._symbols]

    def instrument(self, symbol: str) -> Instrument:
        coin = self._coins[symbol]
        price = self._round(self._prices[symbol])
        previous = self._previous[symbol]
        opened = self._open[symbol]
        return Instrument(
            symbol=symbol,
            name=coin["name"],
            price=price,
            previous_price=None if previous is None else self._round(previous),
            change_24h=round((self._prices[symbol] - opened) / opened * 100, 2),
            market_cap=round(self._prices[symbol] * coin["circulating_supply"], 2),
            volume_24h=float(coin["volume_24h"]),
            circulating_supply=float(coin["circulating_supply"]),
            description=coin["description"],
        )

    def history(self, symbol: str, timeframe: Timeframe, now_ms: int | None = None) -> list[HistoryPoint]:
        """Points within the last `timeframe` minutes, oldest first."""
        points = self._history.get(symbol)
        if not points:
            return []
        end = now_ms if now_ms is not None else points[-1].timestamp
        start = end - timeframe.minutes * 60 * 1000
        return [p for p in points if start <= p.timestamp <= end]

    # --- Internals ---

    @staticmethod
    def _round(price: float) -> float:
        # Sub-dollar coins need more than cents
        return round(price, 2) if price >= 1 else round(price, 6)

    def _add_coin_internal(self, symbol: str, coin: dict) -> None:
        self._symbols.append(symbol)
        self._coins[symbol] = coin
        self._prices[symbol] = float(coin["price"])
        self._previous[symbol] = None
        self._open[symbol] = float(coin["price"])
        self._params[symbol] = COIN_PARAMS.get(symbol, dict(DEFAULT_PARAMS))
        self._history[symbol] = deque()

    def _trim_history(self, symbol: str, now_ms: int) -> None:
        points = self._history[symbol]
        cutoff = now_ms - HISTORY_WINDOW_MS
        while points and points[0].timestamp < cutoff:
            points.popleft()

    def _rebuild_cholesky(self) -> None:
        """Rebuild the Cholesky decomposition of the coin correlation matrix."""
        n = len(self._symbols)
        if n <= 1:
            self._cholesky = None
            return

        corr = np.eye(n)
        for i in range(n):
            for j in range(i + 1, n):
                rho = self._pairwise_correlation(self._symbols[i], self._symbols[j])
                corr[i, j] = rho
                corr[j, i] = rho

        self._cholesky = np.linalg.cholesky(corr)

    @staticmethod
    def _pairwise_correlation(s1: str, s2: str) -> float:
        """Correlation between two coins based on grouping.

          - BTC/ETH:            0.8
          - Within the alts:    0.6
          - DOGE with anything: 0.3
          - Otherwise:          0.5
        """
        if s1 == "DOGE" or s2 == "DOGE":
            return DOGE_CORR

        majors = CORRELATION_GROUPS["majors"]
        alts = CORRELATION_GROUPS["alts"]
        if s1 in majors and s2 in majors:
            return INTRA_MAJORS_CORR
        if s1 in alts and s2 in alts:
            return INTRA_ALTS_CORR
        return CROSS_GROUP_CORR


class SimulatedTransport(PushTransport):
    """PushTransport backed by the simulator.

    Runs a background asyncio task that steps the simulator every
    `update_interval` seconds and pushes the full coin list.
    """

    def __init__(self, simulator: CoinSimulator, update_interval: float = 1.0) -> None:
        self._sim = simulator
        self._interval = update_interval
        self._task: asyncio.Task | None = None

    async def connect(
        self,
        credential: str,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback,
    ) -> None:
        if not credential:
            raise ConnectionFailure("authentication token required")
        await self.disconnect()
        self._task = asyncio.create_task(
            self._run_loop(on_snapshot, on_error), name="simulator-loop"
        )
        logger.info("Simulated push channel connected")

    async def disconnect(self) -> None:
        if self._task and not self._task.done():
            self._task.cancel()
            try:
                await self._task
            except asyncio.CancelledError:
                pass
            logger.info("Simulated push channel disconnected")
        self._task = None

    async def _run_loop(self, on_snapshot: SnapshotCallback, on_error: ErrorCallback) -> None:
        """Core loop: sleep, step the simulation, push the snapshot."""
        while True:
            await asyncio.sleep(self._interval)
            try:
                coins = self._sim.step()
                if coins:
                    on_snapshot(coins)
            except Exception as e:
                logger.exception("Simulator step failed")
                on_error(e)


class SimulatedMarketApi(MarketApi):
    """MarketApi served from the simulator's state."""

    def __init__(self, simulator: CoinSimulator) -> None:
        self._sim = simulator

    async def list_instruments(self) -> list[Instrument]:
        return [self._sim.instrument(symbol) for symbol in self._sim.symbols]

    async def initialize_instruments(self) -> None:
        self._sim.seed()

    async def fetch_history(self, symbol: str, timeframe: Timeframe) -> list[HistoryPoint]:
        return self._sim.history(symbol, Timeframe.parse(timeframe))
