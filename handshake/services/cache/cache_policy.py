from __future__ import annotations

from dataclasses import dataclass

from handshake.config import Settings


@dataclass(frozen=True)
class CachePolicy:
    """Encapsulate cache key shapes and how long each kind of entry stays fresh.

    Private friend-list markers outlive public friend lists: visibility changes far
    less often than friendships do.
    """

    result_ttl: int = 86400
    profile_ttl: int = 3600
    neighbors_ttl: int = 86400
    private_neighbors_ttl: int = 604800

    @classmethod
    def from_settings(cls, settings: Settings) -> CachePolicy:
        return cls(
            result_ttl=settings.RESULT_TTL,
            profile_ttl=settings.PROFILE_TTL,
            neighbors_ttl=settings.NEIGHBORS_TTL,
            private_neighbors_ttl=settings.PRIVATE_NEIGHBORS_TTL,
        )

    @staticmethod
    def result_key(source_id: str, target_id: str) -> str:
        return f"result:{source_id}:{target_id}"

    @staticmethod
    def profile_key(steamid: str) -> str:
        return f"profile:{steamid}"

    @staticmethod
    def neighbors_key(steamid: str) -> str:
        return f"neighbors:{steamid}"

    def neighbors_ttl_for(self, is_private: bool) -> int:
        return self.private_neighbors_ttl if is_private else self.neighbors_ttl
