from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional, Sequence

from .cache_policy import CachePolicy
from .store import CacheStore

logger = logging.getLogger(__name__)


@dataclass
class CacheStats:
    hits: int = 0
    misses: int = 0
    writes: int = 0
    errors: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {"hits": self.hits, "misses": self.misses, "writes": self.writes, "errors": self.errors}


class CacheManager:
    """JSON view over a cache store that never lets a store failure escape.

    A read that fails behaves like a miss and a write that fails is dropped; callers
    only lose performance, never correctness.
    """

    def __init__(self, store: CacheStore, policy: CachePolicy | None = None) -> None:
        self._store = store
        self.policy = policy or CachePolicy()
        self.stats = CacheStats()

    @property
    def store(self) -> CacheStore:
        return self._store

    async def get_json(self, key: str) -> Optional[Dict[str, Any]]:
        try:
            raw = await self._store.get(key)
        except Exception as e:
            self.stats.errors += 1
            logger.warning(f"Cache read failed for {key}, continuing without cache: {e}")
            return None
        return self._decode(key, raw)

    async def get_many_json(self, keys: Sequence[str]) -> List[Optional[Dict[str, Any]]]:
        try:
            raws = await self._store.get_many(keys)
        except Exception as e:
            self.stats.errors += 1
            logger.warning(f"Batch cache read failed for {len(keys)} keys, continuing without cache: {e}")
            return [None] * len(keys)
        return [self._decode(key, raw) for key, raw in zip(keys, raws)]

    async def set_json(self, key: str, value: Dict[str, Any], ttl_seconds: int) -> bool:
        try:
            payload = json.dumps(value)
            await self._store.set(key, payload, ttl_seconds)
        except Exception as e:
            self.stats.errors += 1
            logger.warning(f"Cache write failed for {key}, continuing without cache: {e}")
            return False
        self.stats.writes += 1
        return True

    async def delete(self, key: str) -> bool:
        try:
            return await self._store.delete(key)
        except Exception as e:
            self.stats.errors += 1
            logger.warning(f"Cache delete failed for {key}: {e}")
            return False

    async def ping(self) -> bool:
        try:
            return await self._store.ping()
        except Exception as e:
            logger.warning(f"Cache ping failed: {e}")
            return False

    def get_cache_stats(self) -> Dict[str, int]:
        return self.stats.as_dict()

    def _decode(self, key: str, raw: Optional[str]) -> Optional[Dict[str, Any]]:
        if raw is None:
            self.stats.misses += 1
            return None
        try:
            value = json.loads(raw)
        except ValueError:
            self.stats.errors += 1
            logger.warning(f"Discarding unreadable cache entry {key}")
            return None
        self.stats.hits += 1
        logger.debug(f"Cache hit: {key}")
        return value
