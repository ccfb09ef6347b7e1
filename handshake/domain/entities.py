"""Internal domain entities.

Profiles, neighbor sets and search results are immutable value objects; they are
serialized to plain dicts for the cache store and rebuilt from them on a hit.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, field, replace
from typing import Any, Dict, List, Literal, Optional, Tuple

from handshake.domain.errors import ErrorKind

Direction = Literal["forward", "backward"]


@dataclass(frozen=True)
class Profile:
    steamid: str
    personaname: str = ""
    avatar: str = ""
    avatarmedium: str = ""
    avatarfull: str = ""
    profileurl: str = ""
    communityvisibilitystate: Optional[int] = None
    personastate: Optional[int] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> Profile:
        """Build a profile from a Steam player record, ignoring unknown fields."""
        return cls(
            steamid=str(data["steamid"]),
            personaname=data.get("personaname", ""),
            avatar=data.get("avatar", ""),
            avatarmedium=data.get("avatarmedium", ""),
            avatarfull=data.get("avatarfull", ""),
            profileurl=data.get("profileurl", ""),
            communityvisibilitystate=data.get("communityvisibilitystate"),
            personastate=data.get("personastate"),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class NeighborSet:
    """Friend list of one user.

    A private set has no friends, and that means "unknown", not "nobody".
    """
    steamid: str
    friends: Tuple[str, ...] = ()
    timestamp: float = 0.0
    is_private: bool = False

    @classmethod
    def private(cls, steamid: str, timestamp: float) -> NeighborSet:
        return cls(steamid=steamid, friends=(), timestamp=timestamp, is_private=True)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> NeighborSet:
        return cls(
            steamid=str(data["steamid"]),
            friends=tuple(data.get("friends", ())),
            timestamp=float(data.get("timestamp", 0.0)),
            is_private=bool(data.get("is_private", False)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "steamid": self.steamid,
            "friends": list(self.friends),
            "timestamp": self.timestamp,
            "is_private": self.is_private,
        }


@dataclass
class FrontierNode:
    steamid: str
    distance: int
    direction: Direction
    parent: Optional[str] = None


@dataclass(frozen=True)
class SearchStats:
    search_time_ms: int = 0
    nodes_explored: int = 0
    cache_hits: int = 0
    dropped_ids: int = 0

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SearchStats:
        return cls(
            search_time_ms=int(data.get("search_time_ms", 0)),
            nodes_explored=int(data.get("nodes_explored", 0)),
            cache_hits=int(data.get("cache_hits", 0)),
            dropped_ids=int(data.get("dropped_ids", 0)),
        )

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SearchResult:
    success: bool
    degree: Optional[int] = None
    path: Tuple[Profile, ...] = ()
    error_message: Optional[ErrorKind] = None
    error_detail: Optional[str] = None
    stats: Optional[SearchStats] = field(default=None, compare=False)

    @classmethod
    def found(cls, path: List[Profile], stats: Optional[SearchStats] = None) -> SearchResult:
        return cls(success=True, degree=len(path) - 1, path=tuple(path), stats=stats)

    @classmethod
    def failed(
        cls, kind: ErrorKind, detail: str, stats: Optional[SearchStats] = None
    ) -> SearchResult:
        return cls(success=False, error_message=kind, error_detail=detail, stats=stats)

    @property
    def path_ids(self) -> List[str]:
        return [profile.steamid for profile in self.path]

    def with_stats(self, stats: SearchStats) -> SearchResult:
        return replace(self, stats=stats)

    def reversed(self) -> SearchResult:
        """Return the same connection seen from the other endpoint."""
        kind = self.error_message.swapped() if self.error_message else None
        detail = self.error_detail
        if kind is not self.error_message and detail:
            detail = _swap_side(detail)
        return replace(self, path=tuple(reversed(self.path)), error_message=kind, error_detail=detail)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> SearchResult:
        error = data.get("error_message")
        stats = data.get("stats")
        return cls(
            success=bool(data["success"]),
            degree=data.get("degree"),
            path=tuple(Profile.from_dict(item) for item in data.get("path", [])),
            error_message=ErrorKind(error) if error else None,
            error_detail=data.get("error_detail"),
            stats=SearchStats.from_dict(stats) if stats else None,
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            "success": self.success,
            "degree": self.degree,
            "path": [profile.to_dict() for profile in self.path],
            "error_message": self.error_message.value if self.error_message else None,
            "error_detail": self.error_detail,
            "stats": self.stats.to_dict() if self.stats else None,
        }


def _swap_side(detail: str) -> str:
    if detail.startswith("Source"):
        return "Target" + detail[len("Source"):]
    if detail.startswith("Target"):
        return "Source" + detail[len("Target"):]
    return detail
