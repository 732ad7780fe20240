"""Time-boxed memoization of validation results."""

import asyncio
import re
import time
from collections.abc import Awaitable, Callable, Iterable
from typing import Any, TypeVar

from common.constants import DEFAULT_CACHE_MAX_SIZE, DEFAULT_CACHE_TTL
from common.logger import get_logger

from .models import CacheEntry

logger = get_logger(__name__)

T = TypeVar("T")


class ResultCache:
    """TTL cache with a size bound.

    Entries expire ``ttl`` seconds after creation. When an insert pushes the
    cache over ``max_size`` the entry with the oldest creation time is evicted,
    regardless of how recently it was read.

    Consistency is relaxed: two concurrent misses on the same key may both run
    their compute function, and the last one to finish wins. Every mutation
    happens between awaits, so no caller sees a half-updated map.
    """

    def __init__(
        self,
        max_size: int = DEFAULT_CACHE_MAX_SIZE,
        default_ttl: float = DEFAULT_CACHE_TTL,
        clock: Callable[[], float] = time.monotonic,
    ):
        """Initialize the cache.

        Args:
            max_size: Maximum number of entries kept
            default_ttl: TTL in seconds used when get/set are not given one
            clock: Time source in seconds (injectable for tests)
        """
        self.max_size = max_size
        self.default_ttl = default_ttl
        self.clock = clock
        self._entries: dict[str, CacheEntry[Any]] = {}

    async def get(
        self, key: str, compute: Callable[[], Awaitable[T]], ttl: float | None = None
    ) -> T:
        """Return the cached value for key, computing it on a miss.

        Args:
            key: Cache key
            compute: Zero-argument coroutine function producing the value
            ttl: Lifetime in seconds of a freshly computed entry

        Returns:
            Cached or freshly computed value

        Raises:
            Whatever compute raises; failures are never cached
        """
        entry = self._entries.get(key)
        if entry is not None:
            if entry.expires_at > self.clock():
                return entry.value
            del self._entries[key]

        value = await compute()
        self.set(key, value, ttl)
        return value

    def set(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value with a fresh timestamp, evicting the oldest entry if full."""
        now = self.clock()
        lifetime = self.default_ttl if ttl is None else ttl
        # Re-inserting moves the key to the end of creation order
        self._entries.pop(key, None)
        self._entries[key] = CacheEntry(value=value, timestamp=now, expires_at=now + lifetime)

        if len(self._entries) > self.max_size:
            oldest_key = min(self._entries, key=lambda k: self._entries[k].timestamp)
            del self._entries[oldest_key]
            logger.debug(f"Evicted cache entry {oldest_key[:60]!r}")

    def invalidate(self, key: str) -> None:
        self._entries.pop(key, None)

    def invalidate_pattern(self, pattern: str | re.Pattern[str]) -> int:
        """Remove every entry whose key matches a regular expression.

        Returns:
            Number of entries removed
        """
        regex = re.compile(pattern) if isinstance(pattern, str) else pattern
        doomed = [key for key in self._entries if regex.search(key)]
        for key in doomed:
            del self._entries[key]
        return len(doomed)

    def clear(self) -> None:
        self._entries.clear()

    def keys(self) -> list[str]:
        return list(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.expires_at > self.clock()

    async def warmup(
        self,
        keys: Iterable[str],
        fetch: Callable[[str], Awaitable[Any]],
        ttl: float | None = None,
    ) -> None:
        """Populate several keys concurrently."""
        await asyncio.gather(*(self.get(key, lambda k=key: fetch(k), ttl) for key in keys))
