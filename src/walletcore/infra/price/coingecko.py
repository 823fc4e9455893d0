"""CoinGecko price provider for the Scash coin."""

import logging

from walletcore.exceptions import ExternalServiceError
from walletcore.infra.http.rate_limited_client import RateLimitedClient

logger = logging.getLogger(__name__)

BASE_URL = "https://api.coingecko.com/api/v3"


class CoinGeckoProvider:
    """Fetch the current USD price and USD price history of one coin."""

    def __init__(self, http_client: RateLimitedClient, coin_id: str, api_key: str = "") -> None:
        self._http = http_client
        self._coin_id = coin_id
        self._api_key = api_key

    def _params(self, **params: str | int) -> dict:
        if self._api_key:
            params["x_cg_demo_api_key"] = self._api_key
        return params

    async def get_price_usd(self) -> float:
        response = await self._http.get(
            f"{BASE_URL}/simple/price",
            params=self._params(ids=self._coin_id, vs_currencies="usd"),
        )
        if not response.is_success:
            raise ExternalServiceError(f"CoinGecko price HTTP {response.status_code}")

        price = (response.json().get(self._coin_id) or {}).get("usd")
        if isinstance(price, bool) or not isinstance(price, (int, float)) or price <= 0:
            raise ExternalServiceError("CoinGecko price invalid")
        return float(price)

    async def get_market_chart(self, days: int) -> list[dict]:
        """Return ``[{time, price}]`` points (time in ms) for the last ``days`` days."""
        response = await self._http.get(
            f"{BASE_URL}/coins/{self._coin_id}/market_chart",
            params=self._params(vs_currency="usd", days=days),
        )
        if not response.is_success:
            raise ExternalServiceError(f"CoinGecko history HTTP {response.status_code}")

        prices = response.json().get("prices")
        if not isinstance(prices, list):
            raise ExternalServiceError("CoinGecko history invalid: missing prices[]")
        return [{"time": point[0], "price": point[1]} for point in prices]
