"""Ports the application layer depends on."""
from __future__ import annotations

from typing import Iterable, List, Optional, Protocol

from handshake.domain.entities import NeighborSet, Profile


class DirectoryPort(Protocol):
    """Read access to the friendship directory."""

    async def resolve_handle(self, handle: str) -> Optional[str]: ...

    async def get_profile(self, steamid: str) -> Optional[Profile]: ...

    async def get_profiles(self, steamids: Iterable[str]) -> List[Profile]: ...

    async def get_neighbors(self, steamid: str) -> NeighborSet: ...

    def upstream_failure_count(self) -> int:
        """Remote calls that exhausted their retries so far."""
        ...

