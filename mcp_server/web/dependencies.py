"""FastAPI dependencies resolving the services stored on ``app.state``."""

from __future__ import annotations

from fastapi import HTTPException, Request, status
from solders.pubkey import Pubkey

from mcp_server.agents.manager import AgentManager
from mcp_server.contexts.registry import ContextRegistry
from mcp_server.market.binance import BinanceContext
from mcp_server.market.coingecko import CoinGeckoContext
from mcp_server.wallets import WalletManager


def get_registry(request: Request) -> ContextRegistry:
    return request.app.state.registry


def get_agent_manager(request: Request) -> AgentManager:
    return request.app.state.agents


def get_wallet_manager(request: Request) -> WalletManager:
    return request.app.state.wallets


def get_coingecko(request: Request) -> CoinGeckoContext:
    return request.app.state.coingecko


def get_binance(request: Request) -> BinanceContext:
    return request.app.state.binance


def parse_public_key(value: str, field: str = "public key") -> Pubkey:
    """Parse a base58 address or raise ``HTTPException(400)``."""
    try:
        return Pubkey.from_string(value)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=f"Invalid {field}: {value!r}",
        )
