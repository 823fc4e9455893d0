"""Tests for PriceService: TTL caching, shared in-flight fetch, stale fallback."""

import asyncio
from unittest.mock import AsyncMock, MagicMock

import pytest

from walletcore.exceptions import ExternalServiceError
from walletcore.infra.price.service import MAX_HISTORY_KEYS, PriceService, clamp_days

HISTORY = [{"time": 1700000000000, "price": 0.01}]


def _provider(price=0.02, history=None) -> MagicMock:
    provider = MagicMock()
    provider.get_price_usd = AsyncMock(return_value=price)
    provider.get_market_chart = AsyncMock(return_value=history if history is not None else HISTORY)
    return provider


class TestClampDays:
    @pytest.mark.parametrize(
        "raw, expected",
        [("7", 7), (30, 30), ("0", 1), ("-3", 1), ("abc", 1), (None, 1), ("nan", 1), ("1000", 365), ("inf", 365), ("2.9", 2)],
    )
    def test_clamp(self, raw, expected):
        assert clamp_days(raw) == expected


class TestPrice:
    async def test_cached_within_ttl(self):
        provider = _provider()
        service = PriceService(provider, price_ttl=60)

        assert await service.get_price_usd() == 0.02
        assert await service.get_price_usd() == 0.02
        assert provider.get_price_usd.await_count == 1
        assert service.last_update > 0

    async def test_refetch_after_ttl(self):
        provider = _provider()
        service = PriceService(provider, price_ttl=0)

        await service.get_price_usd()
        await service.get_price_usd()

        assert provider.get_price_usd.await_count == 2

    async def test_concurrent_callers_share_one_fetch(self):
        release = asyncio.Event()

        async def slow_price():
            await release.wait()
            return 0.05

        provider = _provider()
        provider.get_price_usd = AsyncMock(side_effect=slow_price)
        service = PriceService(provider)

        callers = [asyncio.create_task(service.get_price_usd()) for _ in range(5)]
        await asyncio.sleep(0)
        release.set()
        results = await asyncio.gather(*callers)

        assert results == [0.05] * 5
        assert provider.get_price_usd.await_count == 1

    async def test_stale_price_on_failure(self):
        provider = _provider(price=0.03)
        service = PriceService(provider, price_ttl=0)
        await service.get_price_usd()

        provider.get_price_usd = AsyncMock(side_effect=ExternalServiceError("CoinGecko price HTTP 429"))

        assert await service.get_price_usd() == 0.03

    async def test_zero_when_never_fetched(self):
        provider = _provider()
        provider.get_price_usd = AsyncMock(side_effect=ExternalServiceError("down"))
        service = PriceService(provider)

        assert await service.get_price_usd() == 0
        assert service.last_update == 0


class TestHistory:
    async def test_cached_per_days(self):
        provider = _provider()
        service = PriceService(provider)

        assert await service.get_history("7") == HISTORY
        assert await service.get_history(7) == HISTORY
        await service.get_history(30)

        assert provider.get_market_chart.await_count == 2
        provider.get_market_chart.assert_any_await(7)
        provider.get_market_chart.assert_any_await(30)

    async def test_days_clamped(self):
        provider = _provider()
        service = PriceService(provider)

        await service.get_history("9999")

        provider.get_market_chart.assert_awaited_once_with(365)

    async def test_stale_history_on_failure(self):
        provider = _provider()
        service = PriceService(provider, history_ttl=0)
        await service.get_history(1)

        provider.get_market_chart = AsyncMock(side_effect=ExternalServiceError("down"))

        assert await service.get_history(1) == HISTORY

    async def test_empty_when_never_fetched(self):
        provider = _provider()
        provider.get_market_chart = AsyncMock(side_effect=ExternalServiceError("down"))

        assert await PriceService(provider).get_history(1) == []

    async def test_history_keys_bounded(self):
        provider = _provider()
        service = PriceService(provider)

        for days in range(1, MAX_HISTORY_KEYS + 2):
            await service.get_history(days)

        assert len(service._history) <= MAX_HISTORY_KEYS
