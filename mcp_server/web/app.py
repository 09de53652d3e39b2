"""FastAPI application for the MCP server.

Provides REST and WebSocket endpoints for:
- Context registry lookup, filtering and registration
- Agent registration and instruction processing
- Local development wallets
- CoinGecko and Binance market-data proxies
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from mcp_server import __version__
from mcp_server.agents.manager import AgentManager
from mcp_server.config import ServerConfig
from mcp_server.contexts.registry import ContextRegistry
from mcp_server.market.binance import BinanceContext
from mcp_server.market.coingecko import CoinGeckoContext
from mcp_server.wallets import WalletManager
from mcp_server.web.routers import agents, contexts, market, meta, stream, wallets

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: ServerConfig = app.state.config
    logger.info("MCP Server running on %s:%s", config.host, config.port)
    logger.info("Solana connection: %s", config.rpc_url)
    logger.info("Environment: %s", config.env)
    yield
    logger.info("Shutting down, closing upstream connections")
    await app.state.binance.close()
    await app.state.coingecko.aclose()


def create_app(
    config: ServerConfig | None = None,
    registry: ContextRegistry | None = None,
    coingecko: CoinGeckoContext | None = None,
    binance: BinanceContext | None = None,
) -> FastAPI:
    """Build the application and the services it owns.

    Services not passed in are created from *config* (or the environment
    when *config* is None). Usable as a uvicorn factory:
    ``uvicorn mcp_server.web.app:create_app --factory``.
    """
    config = config or ServerConfig.from_env()
    if registry is None:
        registry = ContextRegistry(config.context_path)

    app = FastAPI(
        title="MCP Server API",
        description=(
            "Reference server for the Machine-Centric Protocol on Solana. "
            "Provides context registry lookups, agent instruction processing "
            "and market-data proxies."
        ),
        version=__version__,
        lifespan=lifespan,
    )

    app.state.config = config
    app.state.registry = registry
    app.state.agents = AgentManager(registry)
    app.state.wallets = WalletManager()
    app.state.coingecko = coingecko or CoinGeckoContext(api_key=config.coingecko_api_key or None)
    app.state.binance = binance or BinanceContext()

    # -----------------------------------------------------------------------
    # Middleware
    # -----------------------------------------------------------------------
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST", "PUT", "DELETE"],
        allow_headers=["Content-Type", "Authorization"],
    )

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        logger.info("API Request: %s %s", request.method, request.url.path)
        return await call_next(request)

    # -----------------------------------------------------------------------
    # Routers
    # -----------------------------------------------------------------------
    app.include_router(meta.router)
    app.include_router(contexts.router)
    app.include_router(agents.router)
    app.include_router(wallets.router)
    app.include_router(market.router)
    app.include_router(stream.router)

    @app.get("/", tags=["meta"])
    async def root():
        """Return basic API information."""
        return {
            "name": "MCP Server API",
            "version": __version__,
            "contexts": len(registry),
            "docs": "/docs",
            "openapi": "/openapi.json",
        }

    return app
