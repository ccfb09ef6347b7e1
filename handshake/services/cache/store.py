"""Key/value stores with per-key expiry.

Values are opaque strings; serialization lives in ``CacheManager``. Both stores have an
explicit ``close()`` so the application can tear them down on shutdown.
"""
from __future__ import annotations

import heapq
import logging
import time
from typing import Callable, Dict, List, Optional, Protocol, Sequence, Tuple

import redis.asyncio as redis

logger = logging.getLogger(__name__)


class CacheStore(Protocol):
    async def get(self, key: str) -> Optional[str]: ...

    async def get_many(self, keys: Sequence[str]) -> List[Optional[str]]: ...

    async def set(self, key: str, value: str, ttl_seconds: int) -> None: ...

    async def delete(self, key: str) -> bool: ...

    async def ttl(self, key: str) -> int: ...

    async def ping(self) -> bool: ...

    async def close(self) -> None: ...


class InMemoryCacheStore:
    """Process-local store used when no Redis URL is configured, and in tests."""

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._entries: Dict[str, Tuple[str, Optional[float]]] = {}
        # (expires_at, key) in expiry order; entries for rewritten keys go stale
        self._expiry_heap: List[Tuple[float, str]] = []

    def _live(self, key: str) -> Optional[Tuple[str, Optional[float]]]:
        entry = self._entries.get(key)
        if entry is None:
            return None
        _, expires_at = entry
        if expires_at is not None and self._clock() >= expires_at:
            del self._entries[key]
            return None
        return entry

    async def get(self, key: str) -> Optional[str]:
        entry = self._live(key)
        return entry[0] if entry else None

    async def get_many(self, keys: Sequence[str]) -> List[Optional[str]]:
        return [await self.get(key) for key in keys]

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        now = self._clock()
        self._evict_expired(now)
        expires_at = now + ttl_seconds
        self._entries[key] = (value, expires_at)
        heapq.heappush(self._expiry_heap, (expires_at, key))

    def _evict_expired(self, now: float) -> None:
        """Drop every entry whose expiry has passed, whether or not it was read again."""
        while self._expiry_heap and self._expiry_heap[0][0] <= now:
            expires_at, key = heapq.heappop(self._expiry_heap)
            entry = self._entries.get(key)
            if entry is not None and entry[1] == expires_at:
                del self._entries[key]

    async def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    async def ttl(self, key: str) -> int:
        """Seconds left for ``key``; -2 when missing, -1 when it never expires."""
        entry = self._live(key)
        if entry is None:
            return -2
        if entry[1] is None:
            return -1
        return max(0, int(entry[1] - self._clock()))

    async def ping(self) -> bool:
        return True

    async def close(self) -> None:
        self._entries.clear()
        self._expiry_heap.clear()

    def __len__(self) -> int:
        return len(self._entries)


class RedisCacheStore:
    """Store backed by a shared Redis instance."""

    def __init__(self, client: redis.Redis) -> None:
        self._client = client

    @classmethod
    def from_url(cls, url: str) -> RedisCacheStore:
        logger.info("Connecting cache store to Redis")
        return cls(redis.from_url(url, decode_responses=True))

    async def get(self, key: str) -> Optional[str]:
        return await self._client.get(key)

    async def get_many(self, keys: Sequence[str]) -> List[Optional[str]]:
        if not keys:
            return []
        return await self._client.mget(list(keys))

    async def set(self, key: str, value: str, ttl_seconds: int) -> None:
        await self._client.setex(key, ttl_seconds, value)

    async def delete(self, key: str) -> bool:
        return bool(await self._client.delete(key))

    async def ttl(self, key: str) -> int:
        return int(await self._client.ttl(key))

    async def ping(self) -> bool:
        return bool(await self._client.ping())

    async def close(self) -> None:
        await self._client.aclose()
