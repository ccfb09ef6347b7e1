"""Cache service component package."""
from .cache_manager import CacheManager, CacheStats
from .cache_policy import CachePolicy
from .store import CacheStore, InMemoryCacheStore, RedisCacheStore

__all__ = [
    "CacheManager",
    "CacheStats",
    "CachePolicy",
    "CacheStore",
    "InMemoryCacheStore",
    "RedisCacheStore",
]
