"""MCP Server — context registry, agent gateway and market-data proxies."""

__version__ = "0.1.0"
