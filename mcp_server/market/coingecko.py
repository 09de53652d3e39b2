"""CoinGecko market-data context.

Proxies the public (or pro, when an API key is configured) CoinGecko API.
Responses are cached for five minutes, prices for one minute. Without an
API key every upstream call is preceded by a fixed delay to stay under
the free tier's request rate.
"""

from __future__ import annotations

import asyncio
from typing import Any

import httpx

from mcp_server.contexts.models import ContextDefinition, ContextType
from mcp_server.market.base import MarketContext, MarketDataError
from mcp_server.market.cache import TTLCache

PUBLIC_API_URL = "https://api.coingecko.com/api/v3"
PRO_API_URL = "https://pro-api.coingecko.com/api/v3"

DEFAULT_TTL = 300.0
PRICE_TTL = 60.0
FREE_TIER_DELAY = 0.35  # ~3 requests per second


class CoinGeckoContext(MarketContext):
    """Cached proxy for CoinGecko endpoints."""

    source = "CoinGecko"

    def __init__(
        self,
        api_key: str | None = None,
        http_client: httpx.AsyncClient | None = None,
        rate_limit_delay: float = FREE_TIER_DELAY,
    ) -> None:
        self.api_key = api_key or ""
        super().__init__(PRO_API_URL if self.is_pro else PUBLIC_API_URL, http_client)
        self.rate_limit_delay = rate_limit_delay
        self.cache = TTLCache(DEFAULT_TTL)

    @property
    def is_pro(self) -> bool:
        return bool(self.api_key)

    @staticmethod
    def context_definition() -> ContextDefinition:
        return ContextDefinition(
            id="coingecko-market-data",
            name="CoinGecko Market Data",
            description="Cryptocurrency market data provided by CoinGecko API",
            type=ContextType.ORACLE,
            capabilities=[
                "coin_list",
                "coin_price",
                "historical_data",
                "market_data",
                "global_metrics",
            ],
            endpoint=PUBLIC_API_URL,
            auth_required=False,
            schema={
                "coinPrice": {"id": "string", "vs_currency": "string"},
                "marketData": {"id": "string", "vs_currency": "string", "days": "number"},
                "coinList": {"per_page": "number", "page": "number"},
            },
        )

    async def _request(self, path: str, params: dict[str, Any] | None = None) -> Any:
        params = dict(params or {})
        if self.is_pro:
            params["x_cg_pro_api_key"] = self.api_key
        elif self.rate_limit_delay > 0:
            await asyncio.sleep(self.rate_limit_delay)
        return await self._get_json(path, params)

    async def _cached(self, key: str, path: str, params: dict[str, Any] | None = None, ttl: float | None = None) -> Any:
        return await self.cache.get_or_fetch(key, lambda: self._request(path, params), ttl)

    # ------------------------------------------------------------------
    # Endpoints
    # ------------------------------------------------------------------

    async def get_coin_list(self, per_page: int = 100, page: int = 1) -> list[dict[str, Any]]:
        """Coins ordered by market cap, with USD market data."""
        return await self._cached(
            f"coin_list_{per_page}_{page}",
            "/coins/markets",
            {
                "vs_currency": "usd",
                "order": "market_cap_desc",
                "per_page": per_page,
                "page": page,
                "sparkline": "false",
            },
        )

    async def get_coin_price(self, coin_id: str, vs_currency: str = "usd") -> float:
        """Current price of *coin_id* in *vs_currency*."""

        async def fetch() -> float:
            data = await self._request("/simple/price", {"ids": coin_id, "vs_currencies": vs_currency})
            try:
                return data[coin_id][vs_currency]
            except (KeyError, TypeError) as exc:
                raise MarketDataError(
                    f"No {vs_currency} price for '{coin_id}'", status_code=404
                ) from exc

        return await self.cache.get_or_fetch(f"coin_price_{coin_id}_{vs_currency}", fetch, PRICE_TTL)

    async def get_coin_details(self, coin_id: str) -> dict[str, Any]:
        return await self._cached(
            f"coin_details_{coin_id}",
            f"/coins/{coin_id}",
            {
                "localization": "false",
                "tickers": "false",
                "market_data": "true",
                "community_data": "false",
                "developer_data": "false",
            },
        )

    async def get_market_chart(self, coin_id: str, vs_currency: str = "usd", days: int = 30) -> dict[str, Any]:
        """Historical prices, market caps and volumes."""
        return await self._cached(
            f"market_chart_{coin_id}_{vs_currency}_{days}",
            f"/coins/{coin_id}/market_chart",
            {"vs_currency": vs_currency, "days": days},
        )

    async def get_ohlc(self, coin_id: str, vs_currency: str = "usd", days: int = 14) -> list[list[float]]:
        """Candles as ``[timestamp, open, high, low, close]`` rows."""
        return await self._cached(
            f"ohlc_{coin_id}_{vs_currency}_{days}",
            f"/coins/{coin_id}/ohlc",
            {"vs_currency": vs_currency, "days": days},
        )

    async def get_global_data(self) -> dict[str, Any]:
        return await self._cached("global_data", "/global")

    async def search(self, query: str) -> dict[str, Any]:
        return await self._cached(f"search_{query}", "/search", {"query": query})
