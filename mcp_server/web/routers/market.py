"""Market router -- cached proxies for CoinGecko and Binance market data."""

from __future__ import annotations

from datetime import datetime, timezone

from fastapi import APIRouter, Depends, HTTPException, Query

from mcp_server.market.base import MarketDataError, RateLimitError
from mcp_server.market.binance import BinanceContext
from mcp_server.market.coingecko import CoinGeckoContext
from mcp_server.web.dependencies import get_binance, get_coingecko
from mcp_server.web.models.api import ContextResponse

router = APIRouter(prefix="/api/market", tags=["market"])


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _upstream_error(exc: MarketDataError) -> HTTPException:
    if isinstance(exc, RateLimitError):
        return HTTPException(status_code=429, detail=str(exc))
    if exc.status_code in (400, 404):
        return HTTPException(status_code=exc.status_code, detail=str(exc))
    return HTTPException(status_code=502, detail=str(exc))


# ---------------------------------------------------------------------------
# CoinGecko
# ---------------------------------------------------------------------------


@router.get("/coingecko/context", response_model=ContextResponse, summary="CoinGecko context definition")
async def coingecko_context():
    return ContextResponse.from_definition(CoinGeckoContext.context_definition())


@router.get("/coingecko/price/{coin_id}", summary="Current coin price")
async def coingecko_price(
    coin_id: str,
    vs_currency: str = Query("usd"),
    coingecko: CoinGeckoContext = Depends(get_coingecko),
):
    try:
        price = await coingecko.get_coin_price(coin_id, vs_currency)
    except MarketDataError as exc:
        raise _upstream_error(exc)
    return {"id": coin_id, "vs_currency": vs_currency, "price": price, "timestamp": _now()}


@router.get("/coingecko/coins", summary="Coins by market cap")
async def coingecko_coins(
    per_page: int = Query(100, ge=1, le=250),
    page: int = Query(1, ge=1),
    coingecko: CoinGeckoContext = Depends(get_coingecko),
):
    try:
        return await coingecko.get_coin_list(per_page, page)
    except MarketDataError as exc:
        raise _upstream_error(exc)


@router.get("/coingecko/coins/{coin_id}", summary="Coin details")
async def coingecko_coin(coin_id: str, coingecko: CoinGeckoContext = Depends(get_coingecko)):
    try:
        return await coingecko.get_coin_details(coin_id)
    except MarketDataError as exc:
        raise _upstream_error(exc)


@router.get("/coingecko/coins/{coin_id}/chart", summary="Historical market chart")
async def coingecko_chart(
    coin_id: str,
    vs_currency: str = Query("usd"),
    days: int = Query(30, ge=1),
    coingecko: CoinGeckoContext = Depends(get_coingecko),
):
    try:
        return await coingecko.get_market_chart(coin_id, vs_currency, days)
    except MarketDataError as exc:
        raise _upstream_error(exc)


@router.get("/coingecko/coins/{coin_id}/ohlc", summary="OHLC candles")
async def coingecko_ohlc(
    coin_id: str,
    vs_currency: str = Query("usd"),
    days: int = Query(14, ge=1),
    coingecko: CoinGeckoContext = Depends(get_coingecko),
):
    try:
        return await coingecko.get_ohlc(coin_id, vs_currency, days)
    except MarketDataError as exc:
        raise _upstream_error(exc)


@router.get("/coingecko/global", summary="Global market metrics")
async def coingecko_global(coingecko: CoinGeckoContext = Depends(get_coingecko)):
    try:
        return await coingecko.get_global_data()
    except MarketDataError as exc:
        raise _upstream_error(exc)


@router.get("/coingecko/search", summary="Search coins, categories and markets")
async def coingecko_search(
    query: str = Query(..., min_length=1),
    coingecko: CoinGeckoContext = Depends(get_coingecko),
):
    try:
        return await coingecko.search(query)
    except MarketDataError as exc:
        raise _upstream_error(exc)


# ---------------------------------------------------------------------------
# Binance
# ---------------------------------------------------------------------------


@router.get("/binance/context", response_model=ContextResponse, summary="Binance context definition")
async def binance_context():
    return ContextResponse.from_definition(BinanceContext.context_definition())


@router.get("/binance/price/{symbol}", summary="Latest symbol price")
async def binance_price(symbol: str, binance: BinanceContext = Depends(get_binance)):
    try:
        price = await binance.get_price(symbol)
    except MarketDataError as exc:
        raise _upstream_error(exc)
    return {"symbol": symbol.upper(), "price": price, "timestamp": _now()}


@router.get("/binance/orderbook/{symbol}", summary="Order book")
async def binance_order_book(
    symbol: str,
    depth: int = Query(20, ge=1, le=5000),
    binance: BinanceContext = Depends(get_binance),
):
    try:
        order_book = await binance.get_order_book(symbol, depth)
    except MarketDataError as exc:
        raise _upstream_error(exc)
    return {"symbol": symbol.upper(), "orderBook": order_book, "timestamp": _now()}


@router.get("/binance/klines/{symbol}", summary="Candlesticks")
async def binance_klines(
    symbol: str,
    interval: str = Query("1h"),
    limit: int = Query(100, ge=1, le=1000),
    binance: BinanceContext = Depends(get_binance),
):
    try:
        klines = await binance.get_klines(symbol, interval, limit)
    except MarketDataError as exc:
        raise _upstream_error(exc)
    return {"symbol": symbol.upper(), "interval": interval, "klines": klines, "timestamp": _now()}
