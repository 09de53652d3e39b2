"""Binance market-data context.

REST lookups go through a short-lived cache. Push data comes from the
Binance WebSocket streams: each ``<symbol>@<stream>`` key runs one
background task that fans messages out to its subscribers, keeps the
latest ticker / depth snapshot, and reconnects after a fixed delay when
the connection drops.
"""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
import time
from typing import Any, Callable

import httpx
import websockets
from websockets.exceptions import WebSocketException

from mcp_server.contexts.models import ContextDefinition, ContextType
from mcp_server.market.base import MarketContext, MarketDataError
from mcp_server.market.cache import TTLCache

logger = logging.getLogger(__name__)

REST_API_URL = "https://api.binance.com"
STREAM_URL = "wss://stream.binance.com:9443/ws"

REST_TTL = 5.0
RECONNECT_DELAY = 5.0

STREAMS = ("ticker", "depth")

KLINE_FIELDS = (
    "openTime",
    "open",
    "high",
    "low",
    "close",
    "volume",
    "closeTime",
    "quoteAssetVolume",
    "trades",
    "takerBuyBaseAssetVolume",
    "takerBuyQuoteAssetVolume",
)

StreamCallback = Callable[[dict[str, Any]], Any]


def stream_key(symbol: str, stream: str) -> str:
    return f"{symbol.lower()}@{stream}"


def format_kline(row: list[Any]) -> dict[str, Any]:
    """Name the positional fields of a raw kline row."""
    return dict(zip(KLINE_FIELDS, row))


class BinanceContext(MarketContext):
    """Binance REST proxy and stream multiplexer."""

    source = "Binance"

    def __init__(
        self,
        http_client: httpx.AsyncClient | None = None,
        reconnect_delay: float = RECONNECT_DELAY,
        stream_url: str = STREAM_URL,
    ) -> None:
        super().__init__(REST_API_URL, http_client)
        self.reconnect_delay = reconnect_delay
        self.stream_url = stream_url.rstrip("/")
        self.cache = TTLCache(REST_TTL)
        self._tickers: dict[str, dict[str, Any]] = {}
        self._order_books: dict[str, dict[str, Any]] = {}
        self._callbacks: dict[str, list[StreamCallback]] = {}
        self._tasks: dict[str, asyncio.Task] = {}

    @staticmethod
    def context_definition() -> ContextDefinition:
        return ContextDefinition(
            id="binance-exchange",
            name="Binance Exchange",
            description="Real-time market data and trading API for Binance cryptocurrency exchange",
            type=ContextType.DEX,
            capabilities=["market_data", "order_book", "price_streams", "trading"],
            endpoint=REST_API_URL,
            auth_required=True,
            schema={
                "marketData": {"symbol": "string", "timeframe": "string"},
                "orderBookData": {"symbol": "string", "depth": "number"},
                "placeOrder": {
                    "symbol": "string",
                    "side": "string",
                    "type": "string",
                    "quantity": "string",
                    "price": "string",
                },
            },
        )

    # ------------------------------------------------------------------
    # REST
    # ------------------------------------------------------------------

    async def get_price(self, symbol: str) -> str:
        """Latest price, from the live ticker when subscribed."""
        symbol = symbol.upper()
        if symbol in self._tickers:
            return self._tickers[symbol]["price"]

        async def fetch() -> str:
            data = await self._get_json("/api/v3/ticker/price", {"symbol": symbol})
            try:
                return data["price"]
            except (KeyError, TypeError) as exc:
                raise MarketDataError(f"Binance API returned no price for {symbol}") from exc

        return await self.cache.get_or_fetch(f"price_{symbol}", fetch)

    async def get_order_book(self, symbol: str, depth: int = 20) -> dict[str, Any]:
        """Bids and asks, from the live depth stream when subscribed."""
        symbol = symbol.upper()
        if symbol in self._order_books:
            return self._order_books[symbol]

        async def fetch() -> dict[str, Any]:
            data = await self._get_json("/api/v3/depth", {"symbol": symbol, "limit": depth})
            return {
                "symbol": symbol,
                "bids": data.get("bids", []),
                "asks": data.get("asks", []),
                "time": int(time.time() * 1000),
            }

        return await self.cache.get_or_fetch(f"depth_{symbol}_{depth}", fetch)

    async def get_klines(self, symbol: str, interval: str = "1h", limit: int = 100) -> list[dict[str, Any]]:
        """Candlesticks with named fields."""
        symbol = symbol.upper()
        rows = await self.cache.get_or_fetch(
            f"klines_{symbol}_{interval}_{limit}",
            lambda: self._get_json(
                "/api/v3/klines", {"symbol": symbol, "interval": interval, "limit": limit}
            ),
        )
        return [format_kline(row) for row in rows]

    # ------------------------------------------------------------------
    # Streams
    # ------------------------------------------------------------------

    def subscribe(self, symbol: str, stream: str, callback: StreamCallback) -> str:
        """Deliver every *stream* message for *symbol* to *callback*.

        *callback* may be a plain function or a coroutine function. The
        upstream connection is opened on the first subscriber of a key.
        Must be called from a running event loop.
        """
        if stream not in STREAMS:
            raise ValueError(f"Unsupported stream '{stream}', expected one of {STREAMS}")

        key = stream_key(symbol, stream)
        callbacks = self._callbacks.setdefault(key, [])
        if callback not in callbacks:
            callbacks.append(callback)

        task = self._tasks.get(key)
        if task is None or task.done():
            self._tasks[key] = asyncio.get_running_loop().create_task(
                self._run_stream(key, stream)
            )
        return key

    def unsubscribe(self, symbol: str, stream: str, callback: StreamCallback | None = None) -> None:
        """Remove *callback* (or every callback) from a stream.

        The upstream connection closes once no subscriber is left.
        """
        key = stream_key(symbol, stream)
        callbacks = self._callbacks.get(key, [])
        if callback is not None and callback in callbacks:
            callbacks.remove(callback)
        elif callback is None:
            callbacks.clear()

        if not callbacks:
            self._callbacks.pop(key, None)
            snapshots = self._tickers if stream == "ticker" else self._order_books
            snapshots.pop(symbol.upper(), None)
            task = self._tasks.pop(key, None)
            if task is not None:
                task.cancel()

    def subscriptions(self) -> list[str]:
        return sorted(self._callbacks)

    async def _run_stream(self, key: str, stream: str) -> None:
        url = f"{self.stream_url}/{key}"
        while key in self._callbacks:
            logger.info("Connecting to Binance WebSocket: %s", url)
            try:
                async with websockets.connect(url) as ws:
                    logger.info("Connected to Binance stream %s", key)
                    async for raw in ws:
                        await self._dispatch(key, stream, raw)
                logger.info("WebSocket connection closed for %s", key)
            except (OSError, WebSocketException) as exc:
                logger.warning("WebSocket error for %s: %s", key, exc)

            if key not in self._callbacks:
                break
            logger.info("Attempting to reconnect to %s in %.1fs", key, self.reconnect_delay)
            await asyncio.sleep(self.reconnect_delay)

    async def _dispatch(self, key: str, stream: str, raw: str | bytes) -> None:
        try:
            message = json.loads(raw)
        except ValueError:
            logger.warning("Dropping malformed message on %s", key)
            return
        if not isinstance(message, dict):
            logger.warning("Dropping non-object message on %s", key)
            return

        self.handle_message(stream, message)

        for callback in list(self._callbacks.get(key, [])):
            try:
                result = callback(message)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Stream callback failed for %s", key)

    def handle_message(self, stream: str, message: dict[str, Any]) -> None:
        """Update the latest ticker or depth snapshot from a stream message."""
        symbol = message.get("s")
        if not symbol:
            return
        if stream == "ticker":
            self._tickers[symbol] = {
                "symbol": symbol,
                "price": message.get("c"),
                "time": message.get("E"),
            }
        elif stream == "depth":
            self._order_books[symbol] = {
                "symbol": symbol,
                "bids": message.get("b", []),
                "asks": message.get("a", []),
                "time": message.get("E"),
            }

    async def close(self) -> None:
        """Stop every stream and release the HTTP client."""
        self._callbacks.clear()
        tasks = list(self._tasks.values())
        self._tasks.clear()
        for task in tasks:
            task.cancel()
        if tasks:
            await asyncio.gather(*tasks, return_exceptions=True)
        await self.aclose()
