"""PriceService: cached current price and history with in-flight de-duplication."""

import asyncio
import logging
import time
from typing import Any

from walletcore.infra.price.coingecko import CoinGeckoProvider

logger = logging.getLogger(__name__)

MAX_HISTORY_DAYS = 365
MAX_HISTORY_KEYS = 32


def clamp_days(days: Any) -> int:
    """Coerce a ``days`` query value into 1..365."""
    try:
        n = float(days)
    except (TypeError, ValueError):
        return 1
    if n != n or n <= 0:  # NaN or non-positive
        return 1
    if n >= MAX_HISTORY_DAYS:
        return MAX_HISTORY_DAYS
    return max(1, int(n))


class PriceService:
    """Price orchestrator: fresh cache → shared in-flight fetch → stale fallback.

    On upstream failure the last known value is returned (0 / [] if none).
    """

    def __init__(
        self,
        provider: CoinGeckoProvider,
        price_ttl: float = 60.0,
        history_ttl: float = 300.0,
    ) -> None:
        self._provider = provider
        self._price_ttl = price_ttl
        self._history_ttl = history_ttl
        self._price: float = 0.0
        self._price_ts = 0.0
        self._price_wall_ts = 0.0
        self._price_inflight: asyncio.Task | None = None
        self._history: dict[int, tuple[float, list[dict]]] = {}
        self._history_inflight: dict[int, asyncio.Task] = {}

    @property
    def last_update(self) -> float:
        """Wall-clock seconds of the last successful price fetch (0 if never)."""
        return self._price_wall_ts if self._price > 0 else 0.0

    async def get_price_usd(self) -> float:
        if self._price > 0 and time.monotonic() - self._price_ts < self._price_ttl:
            return self._price

        if self._price_inflight is None:
            self._price_inflight = asyncio.create_task(self._refresh_price())
        task = self._price_inflight
        try:
            return await asyncio.shield(task)
        except Exception as e:
            logger.error("CoinGecko price failed: %s", e)
            return self._price
        finally:
            if task.done() and self._price_inflight is task:
                self._price_inflight = None

    async def _refresh_price(self) -> float:
        price = await self._provider.get_price_usd()
        self._price = price
        self._price_ts = time.monotonic()
        self._price_wall_ts = time.time()
        return price

    async def get_history(self, days: Any = 1) -> list[dict]:
        days_int = clamp_days(days)

        cached = self._history.get(days_int)
        if cached is not None and time.monotonic() - cached[0] < self._history_ttl:
            return cached[1]

        task = self._history_inflight.get(days_int)
        if task is None:
            task = asyncio.create_task(self._refresh_history(days_int))
            self._history_inflight[days_int] = task
        try:
            return await asyncio.shield(task)
        except Exception as e:
            logger.error("CoinGecko history failed: %s", e)
            stale = self._history.get(days_int)
            return stale[1] if stale is not None else []
        finally:
            if task.done() and self._history_inflight.get(days_int) is task:
                del self._history_inflight[days_int]

    async def _refresh_history(self, days: int) -> list[dict]:
        data = await self._provider.get_market_chart(days)
        if len(self._history) >= MAX_HISTORY_KEYS and days not in self._history:
            self._history.clear()
        self._history[days] = (time.monotonic(), data)
        return data
