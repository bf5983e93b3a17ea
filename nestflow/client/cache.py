"""Request-keyed query cache.

Keys are tuples such as ("children",) or ("activities", child_id). Concurrent
reads of the same key share one fetch. Mutations invalidate by key prefix and
the next read refetches; cached entries are never patched in place.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Awaitable, Callable, Hashable

logger = logging.getLogger(__name__)

CacheKey = tuple[Hashable, ...]


class QueryCache:
    """Async cache with in-flight request deduplication."""

    def __init__(self):
        self._data: dict[CacheKey, Any] = {}
        self._inflight: dict[CacheKey, asyncio.Future] = {}
        # Bumped by invalidate() so a fetch started earlier does not store stale data
        self._generation: dict[CacheKey, int] = {}

    def __contains__(self, key: CacheKey) -> bool:
        return key in self._data

    def peek(self, key: CacheKey) -> Any:
        """Cached value or None, without fetching."""
        return self._data.get(key)

    def keys(self) -> list[CacheKey]:
        return list(self._data)

    async def get(self, key: CacheKey, fetch: Callable[[], Awaitable[Any]]) -> Any:
        """Return the cached value, fetching it once if absent."""
        if key in self._data:
            return self._data[key]

        pending = self._inflight.get(key)
        if pending is not None:
            return await asyncio.shield(pending)

        loop = asyncio.get_running_loop()
        future: asyncio.Future = loop.create_future()
        self._inflight[key] = future
        generation = self._generation.get(key, 0)
        try:
            value = await fetch()
        except asyncio.CancelledError:
            future.cancel()
            raise
        except Exception as exc:
            future.set_exception(exc)
            # Mark retrieved so an unawaited failure is not reported as unhandled
            future.exception()
            raise
        else:
            if self._generation.get(key, 0) == generation:
                self._data[key] = value
            future.set_result(value)
            return value
        finally:
            self._inflight.pop(key, None)

    def invalidate(self, *prefix: Hashable) -> int:
        """
        Drop every key starting with prefix. No prefix clears everything.

        Returns the number of entries dropped.
        """
        matched = [key for key in self._data if key[: len(prefix)] == prefix]
        for key in matched:
            del self._data[key]
        for key in list(self._inflight):
            if key[: len(prefix)] == prefix:
                self._generation[key] = self._generation.get(key, 0) + 1
        if matched:
            logger.debug("Invalidated %d cache entries for %s", len(matched), prefix)
        return len(matched)

    def clear(self) -> None:
        self.invalidate()
