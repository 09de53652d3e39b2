"""Server configuration read from environment variables."""

from __future__ import annotations

import os
from dataclasses import dataclass

# Public RPC endpoints per Solana cluster
CLUSTER_URLS = {
    "devnet": "https://api.devnet.solana.com",
    "testnet": "https://api.testnet.solana.com",
    "mainnet-beta": "https://api.mainnet-beta.solana.com",
}


@dataclass
class ServerConfig:
    """Runtime settings for the MCP server."""

    env: str = "development"
    host: str = "localhost"
    port: int = 3000

    solana_rpc_url: str = ""
    solana_cluster: str = "devnet"
    solana_commitment: str = "confirmed"

    context_path: str = "./contexts"

    log_level: str = "info"
    log_format: str = "json"  # json | text

    coingecko_api_key: str = ""

    @classmethod
    def from_env(cls) -> ServerConfig:
        """Build a config from the process environment."""
        return cls(
            env=os.environ.get("MCP_ENV", "development"),
            host=os.environ.get("HOST", "localhost"),
            port=int(os.environ.get("PORT", "3000")),
            solana_rpc_url=os.environ.get("SOLANA_RPC_URL", ""),
            solana_cluster=os.environ.get("SOLANA_CLUSTER", "devnet"),
            solana_commitment=os.environ.get("SOLANA_COMMITMENT", "confirmed"),
            context_path=os.environ.get("CONTEXT_PATH", "./contexts"),
            log_level=os.environ.get("LOG_LEVEL", "info"),
            log_format=os.environ.get("LOG_FORMAT", "json"),
            coingecko_api_key=os.environ.get("COINGECKO_API_KEY", ""),
        )

    @property
    def rpc_url(self) -> str:
        if self.solana_rpc_url:
            return self.solana_rpc_url
        return CLUSTER_URLS.get(self.solana_cluster, CLUSTER_URLS["devnet"])

    @property
    def is_production(self) -> bool:
        return self.env == "production"
