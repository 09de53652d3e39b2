"""Time-based cache with request coalescing for upstream lookups."""

from __future__ import annotations

import asyncio
import time
from typing import Any, Awaitable, Callable, Hashable

_MISSING = object()


class TTLCache:
    """A mapping whose entries expire after a fixed time.

    :meth:`get_or_fetch` additionally coalesces concurrent misses: while a
    fetch for a key is in flight, further callers for the same key await
    that fetch instead of starting their own. Failed fetches are not
    cached.

    Expired entries are dropped on lookup, and all of them are swept from
    :meth:`set` at most once every *check_period* seconds.
    """

    def __init__(
        self,
        default_ttl: float,
        clock: Callable[[], float] = time.monotonic,
        check_period: float = 60.0,
    ) -> None:
        self.default_ttl = default_ttl
        self.check_period = check_period
        self._clock = clock
        self._next_purge = clock() + check_period
        self._entries: dict[Hashable, tuple[float, Any]] = {}
        self._inflight: dict[Hashable, asyncio.Future] = {}

    def _lookup(self, key: Hashable) -> Any:
        entry = self._entries.get(key)
        if entry is None:
            return _MISSING
        expires_at, value = entry
        if self._clock() >= expires_at:
            del self._entries[key]
            return _MISSING
        return value

    def get(self, key: Hashable, default: Any = None) -> Any:
        value = self._lookup(key)
        return default if value is _MISSING else value

    def set(self, key: Hashable, value: Any, ttl: float | None = None) -> None:
        ttl = self.default_ttl if ttl is None else ttl
        now = self._clock()
        if now >= self._next_purge:
            self.purge_expired()
        self._entries[key] = (now + ttl, value)

    def purge_expired(self) -> int:
        """Drop every expired entry and return how many were removed."""
        now = self._clock()
        expired = [key for key, (expires_at, _) in self._entries.items() if now >= expires_at]
        for key in expired:
            del self._entries[key]
        self._next_purge = now + self.check_period
        return len(expired)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: Hashable) -> bool:
        return self._lookup(key) is not _MISSING

    def clear(self) -> None:
        self._entries.clear()

    async def get_or_fetch(
        self,
        key: Hashable,
        fetch: Callable[[], Awaitable[Any]],
        ttl: float | None = None,
    ) -> Any:
        """Return the cached value for *key*, fetching it on a miss."""
        value = self._lookup(key)
        if value is not _MISSING:
            return value

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        future = asyncio.get_running_loop().create_future()
        self._inflight[key] = future
        try:
            value = await fetch()
        except Exception as exc:
            future.set_exception(exc)
            future.exception()  # mark retrieved when nobody else is waiting
            raise
        except BaseException:
            future.cancel()
            raise
        else:
            self.set(key, value, ttl)
            future.set_result(value)
            return value
        finally:
            self._inflight.pop(key, None)
