"""Market-data contexts proxying third-party price APIs."""

from mcp_server.market.base import MarketDataError, RateLimitError
from mcp_server.market.binance import BinanceContext
from mcp_server.market.cache import TTLCache
from mcp_server.market.coingecko import CoinGeckoContext

__all__ = [
    "BinanceContext",
    "CoinGeckoContext",
    "MarketDataError",
    "RateLimitError",
    "TTLCache",
]
