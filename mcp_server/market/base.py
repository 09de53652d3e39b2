"""Shared plumbing for market-data contexts: errors and the HTTP client."""

from __future__ import annotations

import logging
from typing import Any

import httpx

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT = 15.0


class MarketDataError(Exception):
    """An upstream market-data call failed."""

    def __init__(self, message: str, status_code: int | None = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(MarketDataError):
    """The upstream API rejected the call with HTTP 429."""


class MarketContext:
    """Base for contexts that proxy an upstream HTTP API.

    Parameters
    ----------
    base_url : str
        Prefix for every request path.
    http_client : httpx.AsyncClient | None
        Client to use. When None, one is created on first use and closed
        by :meth:`aclose`.
    """

    source = "upstream"

    def __init__(self, base_url: str, http_client: httpx.AsyncClient | None = None) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = http_client
        self._owns_client = http_client is None

    @property
    def client(self) -> httpx.AsyncClient:
        if self._client is None:
            self._client = httpx.AsyncClient(timeout=DEFAULT_TIMEOUT)
        return self._client

    async def _get_json(self, path: str, params: dict[str, Any] | None = None) -> Any:
        url = f"{self.base_url}{path}"
        try:
            resp = await self.client.get(url, params=params)
            resp.raise_for_status()
            return resp.json()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            logger.error("%s API error (%s) for %s: %s", self.source, status, path, exc.response.text[:200])
            if status == 429:
                raise RateLimitError(
                    f"{self.source} API rate limit exceeded. Please try again later.",
                    status_code=status,
                ) from exc
            raise MarketDataError(f"{self.source} API error: {status}", status_code=status) from exc
        except httpx.RequestError as exc:
            raise MarketDataError(f"Failed to reach {self.source} API: {exc}") from exc
        except ValueError as exc:
            raise MarketDataError(f"{self.source} API returned invalid JSON") from exc

    async def aclose(self) -> None:
        if self._owns_client and self._client is not None:
            await self._client.aclose()
            self._client = None
