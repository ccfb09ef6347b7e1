"""Shortest friendship chain between two Steam users.

The search runs as a fixed sequence of steps:

1. cached result lookup, exact key first and then the reversed pair
2. same user shortcut
3. both endpoint profiles, fetched concurrently
4. both endpoint friend lists, fetched concurrently; private lists end the search,
   and a direct friendship ends it with degree 1
5. bidirectional BFS, one whole level forward then one whole level backward, each
   side expanding nodes up to ``max_depth // 2`` hops from its root
6. path reconstruction through both parent maps and one batched profile fetch
7. the result, successful or not, is cached under the forward key

``find_shortest_path`` never raises. All BFS state is local to one call.
"""
from __future__ import annotations

import asyncio
import logging
import time
from collections import deque
from dataclasses import dataclass
from typing import Callable, Deque, Dict, List, Optional, Tuple

from handshake.domain.entities import Direction, FrontierNode, Profile, SearchResult, SearchStats
from handshake.domain.errors import ErrorKind
from handshake.domain.ports import DirectoryPort
from handshake.services.cache import CacheManager

logger = logging.getLogger(__name__)

MAX_DEPTH = 4
MAX_NODES_PER_LEVEL = 300

Visited = Dict[str, FrontierNode]


@dataclass
class _RunCounters:
    nodes_explored: int = 0
    dropped_ids: int = 0


class PathEngine:
    """Bidirectional BFS over the Steam friend graph with result caching."""

    def __init__(
        self,
        directory: DirectoryPort,
        cache: CacheManager,
        max_depth: int = MAX_DEPTH,
        max_neighbors: int = MAX_NODES_PER_LEVEL,
        clock: Callable[[], float] = time.perf_counter,
    ) -> None:
        self._directory = directory
        self._cache = cache
        self.max_depth = max_depth
        self.max_neighbors = max_neighbors
        self._clock = clock

    async def find_shortest_path(self, source_id: str, target_id: str) -> SearchResult:
        started = self._clock()
        counters = _RunCounters()

        try:
            cached = await self.get_cached_result(source_id, target_id)
            if cached is not None:
                logger.info(f"Serving cached result for {source_id} -> {target_id}")
                return cached.with_stats(SearchStats(
                    search_time_ms=self._elapsed_ms(started), nodes_explored=0, cache_hits=1
                ))
            result = await self._search(source_id, target_id, counters)
        except Exception:
            logger.exception(f"Unexpected error while searching {source_id} -> {target_id}")
            result = SearchResult.failed(ErrorKind.INTERNAL_ERROR, "An error occurred during the search")

        result = result.with_stats(SearchStats(
            search_time_ms=self._elapsed_ms(started),
            nodes_explored=counters.nodes_explored,
            cache_hits=0,
            dropped_ids=counters.dropped_ids,
        ))
        await self._store_result(source_id, target_id, result)

        if result.success:
            logger.info(f"Found degree {result.degree} between {source_id} and {target_id}")
        else:
            logger.info(f"No handshake between {source_id} and {target_id}: {result.error_message.value}")
        return result

    # --------------- Result cache ---------------
    async def get_cached_result(self, source_id: str, target_id: str) -> Optional[SearchResult]:
        """Look up ``source -> target``, falling back to ``target -> source`` reversed."""
        policy = self._cache.policy

        data = await self._cache.get_json(policy.result_key(source_id, target_id))
        if data:
            return self._decode_result(data)

        data = await self._cache.get_json(policy.result_key(target_id, source_id))
        if data:
            result = self._decode_result(data)
            return result.reversed() if result else None
        return None

    @staticmethod
    def _decode_result(data: dict) -> Optional[SearchResult]:
        try:
            return SearchResult.from_dict(data)
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning("Ignoring malformed cached search result")
            return None

    async def _store_result(self, source_id: str, target_id: str, result: SearchResult) -> None:
        try:
            payload = result.to_dict()
        except Exception as e:
            logger.warning(f"Could not serialize result for {source_id} -> {target_id}: {e}")
            return
        await self._cache.set_json(
            self._cache.policy.result_key(source_id, target_id), payload, self._cache.policy.result_ttl
        )

    # --------------- Search steps ---------------
    async def _search(self, source_id: str, target_id: str, counters: _RunCounters) -> SearchResult:
        failures_before = self._directory.upstream_failure_count()

        if source_id == target_id:
            user = await self._directory.get_profile(source_id)
            if user is None:
                return self._missing_profile("User not found", failures_before)
            return SearchResult.found([user])

        source_user, target_user = await asyncio.gather(
            self._directory.get_profile(source_id),
            self._directory.get_profile(target_id),
        )
        if source_user is None:
            return self._missing_profile("Source user not found", failures_before)
        if target_user is None:
            return self._missing_profile("Target user not found", failures_before)

        failures_before = self._directory.upstream_failure_count()
        source_friends, target_friends = await asyncio.gather(
            self._directory.get_neighbors(source_id),
            self._directory.get_neighbors(target_id),
        )
        if source_friends.is_private:
            return SearchResult.failed(ErrorKind.PRIVATE_SOURCE, "Source profile is private")
        if target_friends.is_private:
            return SearchResult.failed(ErrorKind.PRIVATE_TARGET, "Target profile is private")
        if self._directory.upstream_failure_count() > failures_before:
            return SearchResult.failed(ErrorKind.UPSTREAM_UNAVAILABLE, "Friend lists are unavailable right now")

        if target_id in source_friends.friends:
            return SearchResult.found([source_user, target_user])

        failures_before = self._directory.upstream_failure_count()
        meeting = await self._bidirectional_search(source_id, target_id, counters)
        if meeting is None:
            if self._directory.upstream_failure_count() > failures_before:
                return SearchResult.failed(
                    ErrorKind.UPSTREAM_UNAVAILABLE, "Some friend lists were unavailable during the search"
                )
            return SearchResult.failed(
                ErrorKind.NO_PATH, f"No connection found within {self.max_depth} degrees"
            )

        meeting_id, forward_visited, backward_visited = meeting
        path_ids = self.reconstruct_path_ids(meeting_id, forward_visited, backward_visited)
        path = await self._resolve_path(path_ids, source_user, target_user, counters)
        return SearchResult.found(path)

    def _missing_profile(self, detail: str, failures_before: int) -> SearchResult:
        if self._directory.upstream_failure_count() > failures_before:
            return SearchResult.failed(ErrorKind.UPSTREAM_UNAVAILABLE, detail)
        return SearchResult.failed(ErrorKind.NOT_FOUND, detail)

    async def _bidirectional_search(
        self, source_id: str, target_id: str, counters: _RunCounters
    ) -> Optional[Tuple[str, Visited, Visited]]:
        forward_root = FrontierNode(steamid=source_id, distance=0, direction="forward")
        backward_root = FrontierNode(steamid=target_id, distance=0, direction="backward")

        forward_queue: Deque[FrontierNode] = deque([forward_root])
        backward_queue: Deque[FrontierNode] = deque([backward_root])
        forward_visited: Visited = {source_id: forward_root}
        backward_visited: Visited = {target_id: backward_root}

        while forward_queue or backward_queue:
            if forward_queue:
                meeting_id = await self._expand_level(
                    forward_queue, forward_visited, backward_visited, "forward", counters
                )
                if meeting_id:
                    return meeting_id, forward_visited, backward_visited

            if backward_queue:
                meeting_id = await self._expand_level(
                    backward_queue, backward_visited, forward_visited, "backward", counters
                )
                if meeting_id:
                    return meeting_id, forward_visited, backward_visited

        logger.debug(
            f"Frontiers exhausted after exploring {counters.nodes_explored} nodes "
            f"({len(forward_visited)} forward, {len(backward_visited)} backward)"
        )
        return None

    async def _expand_level(
        self,
        queue: Deque[FrontierNode],
        own_visited: Visited,
        other_visited: Visited,
        direction: Direction,
        counters: _RunCounters,
    ) -> Optional[str]:
        """Expand every node currently queued; return the meeting point if one is found.

        Nodes enqueued while expanding belong to the next level. A meeting point is
        recorded in ``own_visited`` with the expanding node as its parent so both parent
        maps reach it.
        """
        max_distance = self.max_depth // 2

        for _ in range(len(queue)):
            current = queue.popleft()
            if current.distance >= max_distance:
                continue

            neighbors = await self._directory.get_neighbors(current.steamid)
            counters.nodes_explored += 1
            if neighbors.is_private:
                continue

            for friend_id in neighbors.friends[:self.max_neighbors]:
                if friend_id in other_visited:
                    own_visited.setdefault(friend_id, FrontierNode(
                        steamid=friend_id,
                        distance=current.distance + 1,
                        direction=direction,
                        parent=current.steamid,
                    ))
                    logger.debug(f"Frontiers met at {friend_id} while expanding {direction}")
                    return friend_id

                if friend_id in own_visited:
                    continue

                node = FrontierNode(
                    steamid=friend_id,
                    distance=current.distance + 1,
                    direction=direction,
                    parent=current.steamid,
                )
                own_visited[friend_id] = node
                queue.append(node)

        return None

    # --------------- Path reconstruction ---------------
    @staticmethod
    def reconstruct_path_ids(meeting_id: str, forward_visited: Visited, backward_visited: Visited) -> List[str]:
        """Ids from source to target through ``meeting_id``, each at most once."""
        forward_path: List[str] = []
        node = forward_visited.get(meeting_id)
        while node is not None:
            forward_path.insert(0, node.steamid)
            node = forward_visited.get(node.parent) if node.parent else None

        backward_path: List[str] = []
        node = backward_visited.get(meeting_id)
        node = backward_visited.get(node.parent) if node is not None and node.parent else None
        while node is not None:
            backward_path.append(node.steamid)
            node = backward_visited.get(node.parent) if node.parent else None

        return list(dict.fromkeys(forward_path + backward_path))

    async def _resolve_path(
        self, path_ids: List[str], source_user: Profile, target_user: Profile, counters: _RunCounters
    ) -> List[Profile]:
        profiles = {profile.steamid: profile for profile in await self._directory.get_profiles(path_ids)}
        profiles.setdefault(source_user.steamid, source_user)
        profiles.setdefault(target_user.steamid, target_user)

        path = [profiles[steamid] for steamid in path_ids if steamid in profiles]
        dropped = len(path_ids) - len(path)
        if dropped:
            # The chain is kept; stats.dropped_ids tells callers it has gaps.
            counters.dropped_ids = dropped
            missing = [steamid for steamid in path_ids if steamid not in profiles]
            logger.warning(f"Dropped {dropped} path members without a profile: {', '.join(missing)}")
        return path

    def _elapsed_ms(self, started: float) -> int:
        return int((self._clock() - started) * 1000)
