from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Optional

from handshake.application.path_engine import PathEngine
from handshake.application.search_history import SearchHistoryRecorder
from handshake.domain.entities import Profile, SearchResult
from handshake.domain.errors import ValidationError
from handshake.domain.events import DomainEventPublisher, SearchCompleted, event_publisher
from handshake.domain.identifiers import is_steam_id64, normalize_identifier
from handshake.domain.ports import DirectoryPort

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class HandshakeOutcome:
    search_id: str
    source_id: str
    target_id: str
    result: SearchResult
    requester_user: Optional[Profile]
    target_user: Optional[Profile]


class HandshakeSearchService:
    """Application service turning two raw user inputs into a handshake result.

    Inputs may be SteamID64s, legacy ids, profile URLs or vanity handles. History is
    recorded after the search and can never fail it.
    """

    def __init__(
        self,
        directory: DirectoryPort,
        engine: PathEngine,
        history: SearchHistoryRecorder | None = None,
        publisher: DomainEventPublisher = event_publisher,
    ) -> None:
        self._directory = directory
        self._engine = engine
        self._history = history
        self._publisher = publisher

    async def resolve_identifier(self, raw: str, role: str = "source") -> str:
        candidate = normalize_identifier(raw or "")
        if is_steam_id64(candidate):
            return candidate
        if not candidate:
            raise ValidationError(f"Invalid {role} Steam ID or vanity URL")

        resolved = await self._directory.resolve_handle(candidate)
        if not resolved or not is_steam_id64(resolved):
            raise ValidationError(f"Invalid {role} Steam ID or vanity URL")
        logger.debug(f"Resolved {role} handle {candidate} to {resolved}")
        return resolved

    async def search(self, source: str, target: str) -> HandshakeOutcome:
        source_id = await self.resolve_identifier(source, "source")
        target_id = await self.resolve_identifier(target, "target")

        result = await self._engine.find_shortest_path(source_id, target_id)

        requester_user, target_user = await asyncio.gather(
            self._directory.get_profile(source_id),
            self._directory.get_profile(target_id),
        )

        if self._history is not None:
            await asyncio.to_thread(
                self._history.record, source_id, target_id, result, requester_user, target_user
            )

        stats = result.stats
        self._publisher.publish(SearchCompleted(
            event_id="",
            timestamp=None,
            aggregate_id=f"{source_id}:{target_id}",
            source_id=source_id,
            target_id=target_id,
            success=result.success,
            degree=result.degree,
            error_kind=result.error_message.value if result.error_message else None,
            nodes_explored=stats.nodes_explored if stats else 0,
            cache_hit=bool(stats and stats.cache_hits),
            dropped_ids=stats.dropped_ids if stats else 0,
        ))

        return HandshakeOutcome(
            search_id=f"{source_id}_{target_id}_{int(time.time() * 1000)}",
            source_id=source_id,
            target_id=target_id,
            result=result,
            requester_user=requester_user,
            target_user=target_user,
        )
