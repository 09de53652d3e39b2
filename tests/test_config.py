"""Tests for configuration and logging setup."""

import json
import logging

from mcp_server.config import CLUSTER_URLS, ServerConfig
from mcp_server.logging_config import JsonFormatter, configure_logging


def test_defaults(monkeypatch):
    for name in ("MCP_ENV", "HOST", "PORT", "SOLANA_RPC_URL", "SOLANA_CLUSTER", "CONTEXT_PATH"):
        monkeypatch.delenv(name, raising=False)

    config = ServerConfig.from_env()

    assert config.port == 3000
    assert config.host == "localhost"
    assert config.context_path == "./contexts"
    assert config.rpc_url == CLUSTER_URLS["devnet"]
    assert not config.is_production


def test_from_env(monkeypatch):
    monkeypatch.setenv("MCP_ENV", "production")
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("SOLANA_CLUSTER", "mainnet-beta")
    monkeypatch.setenv("CONTEXT_PATH", "/srv/contexts")
    monkeypatch.setenv("COINGECKO_API_KEY", "key")
    monkeypatch.delenv("SOLANA_RPC_URL", raising=False)

    config = ServerConfig.from_env()

    assert config.is_production
    assert config.port == 8080
    assert config.context_path == "/srv/contexts"
    assert config.rpc_url == CLUSTER_URLS["mainnet-beta"]
    assert config.coingecko_api_key == "key"


def test_explicit_rpc_url_wins():
    config = ServerConfig(solana_rpc_url="http://localhost:8899", solana_cluster="testnet")
    assert config.rpc_url == "http://localhost:8899"


def test_json_formatter():
    record = logging.LogRecord("mcp_server.test", logging.WARNING, __file__, 1, "hello %s", ("world",), None)
    payload = json.loads(JsonFormatter().format(record))

    assert payload["level"] == "warning"
    assert payload["message"] == "hello world"
    assert payload["logger"] == "mcp_server.test"
    assert payload["service"] == "mcp-server"
    assert "stack" not in payload


def test_configure_logging(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    root = logging.getLogger()
    saved_handlers, saved_level = list(root.handlers), root.level

    try:
        configure_logging("debug", "text", "development")
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1

        configure_logging("warning", "json", "production")
        assert root.level == logging.WARNING
        assert len(root.handlers) == 3
        assert all(isinstance(h.formatter, JsonFormatter) for h in root.handlers)
        assert (tmp_path / "error.log").exists()
    finally:
        for handler in list(root.handlers):
            root.removeHandler(handler)
            handler.close()
        for handler in saved_handlers:
            root.addHandler(handler)
        root.setLevel(saved_level)
