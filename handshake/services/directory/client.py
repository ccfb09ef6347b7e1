"""Steam Web API client used as the friendship directory.

Nothing in here raises to the caller: transport failures, rate limiting and malformed
responses all end up as ``None``, an empty list or an empty NeighborSet once the retry
policy gives up. Every lookup goes through the cache first.
"""
from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Collection, Dict, Iterable, List, Optional, TypeVar

import httpx

from handshake.domain.entities import NeighborSet, Profile
from handshake.services.cache import CacheManager

from .retry import RetryPolicy

logger = logging.getLogger(__name__)

RESOLVE_VANITY_PATH = "/ISteamUser/ResolveVanityURL/v0001/"
PLAYER_SUMMARIES_PATH = "/ISteamUser/GetPlayerSummaries/v0002/"
FRIEND_LIST_PATH = "/ISteamUser/GetFriendList/v0001/"

PRIVATE_STATUSES = frozenset({401, 403})

T = TypeVar("T")


@dataclass
class DirectoryStats:
    remote_calls: int = 0
    rate_limited: int = 0
    upstream_failures: int = 0

    def as_dict(self) -> Dict[str, int]:
        return {
            "remote_calls": self.remote_calls,
            "rate_limited": self.rate_limited,
            "upstream_failures": self.upstream_failures,
        }


class SteamDirectoryClient:
    """Resolve handles and fetch profiles and friend lists from Steam."""

    def __init__(
        self,
        http: httpx.AsyncClient,
        cache: CacheManager,
        api_key: str,
        user_agent: str = "SteamHandshake/1.0",
        retry_policy: RetryPolicy | None = None,
        max_neighbors: int = 300,
        batch_limit: int = 100,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._http = http
        self._cache = cache
        self._api_key = api_key
        self._user_agent = user_agent
        self._retry = retry_policy or RetryPolicy()
        self.max_neighbors = max_neighbors
        self.batch_limit = batch_limit
        self._sleep = sleep
        self._clock = clock
        self.stats = DirectoryStats()

    def upstream_failure_count(self) -> int:
        return self.stats.upstream_failures

    # --------------- Transport ---------------
    async def _request(
        self, path: str, params: Dict[str, str], passthrough: Collection[int] = ()
    ) -> Optional[httpx.Response]:
        """GET ``path`` under the retry policy.

        Returns the first successful response, or a response whose status is in
        ``passthrough``; ``None`` once every attempt has failed.
        """
        if not self._api_key:
            logger.error("Steam API key is not configured, skipping remote call")
            self.stats.upstream_failures += 1
            return None

        query = {"key": self._api_key, **params}
        headers = {"User-Agent": self._user_agent}
        attempt = 0
        while True:
            attempt += 1
            self.stats.remote_calls += 1
            status: Optional[int] = None
            try:
                response = await self._http.get(path, params=query, headers=headers)
                status = response.status_code
                if response.is_success or status in passthrough:
                    return response
                if status == 429:
                    self.stats.rate_limited += 1
                    logger.warning(f"Rate limited by Steam on {path} (attempt {attempt})")
                else:
                    logger.warning(f"Steam returned HTTP {status} for {path} (attempt {attempt})")
            except httpx.HTTPError as e:
                logger.warning(f"Transport error calling {path} (attempt {attempt}): {e}")

            if not self._retry.should_retry(attempt):
                break
            await self._sleep(self._retry.delay_for(attempt, self._retry.classify(status)))

        self.stats.upstream_failures += 1
        logger.error(f"upstream-unavailable: giving up on {path} after {attempt} attempts")
        return None

    @staticmethod
    def _decode_cached(key: str, cached: Any, decode: Callable[[Dict[str, Any]], T]) -> Optional[T]:
        """Decode a cache entry; a malformed one is logged and treated as a miss."""
        try:
            return decode(cached)
        except (AttributeError, KeyError, TypeError, ValueError):
            logger.warning(f"Ignoring malformed cache entry {key}")
            return None

    async def _get_json(self, path: str, params: Dict[str, str]) -> Optional[Dict[str, Any]]:
        response = await self._request(path, params)
        if response is None:
            return None
        try:
            data = response.json()
        except ValueError:
            logger.error(f"Steam returned a non-JSON body for {path}")
            return None
        return data if isinstance(data, dict) else None

    # --------------- Handles ---------------
    async def resolve_handle(self, handle: str) -> Optional[str]:
        """Resolve a vanity handle to a SteamID64, or ``None``."""
        logger.debug(f"Resolving vanity URL: {handle}")
        data = await self._get_json(RESOLVE_VANITY_PATH, {"vanityurl": handle})
        if not data:
            return None
        body = data.get("response")
        if isinstance(body, dict) and body.get("success") == 1 and body.get("steamid"):
            return str(body["steamid"])
        logger.info(f"Vanity URL {handle} did not resolve")
        return None

    # --------------- Profiles ---------------
    async def get_profile(self, steamid: str) -> Optional[Profile]:
        key = self._cache.policy.profile_key(steamid)
        cached = await self._cache.get_json(key)
        if cached:
            profile = self._decode_cached(key, cached, Profile.from_dict)
            if profile is not None:
                return profile

        profiles = await self._fetch_profiles([steamid])
        for profile in profiles:
            if profile.steamid == steamid:
                return profile
        return None

    async def get_profiles(self, steamids: Iterable[str]) -> List[Profile]:
        """Profiles for ``steamids`` in no particular order; unknown ids are dropped."""
        ids = list(dict.fromkeys(steamids))
        if not ids:
            return []

        keys = [self._cache.policy.profile_key(steamid) for steamid in ids]
        cached = await self._cache.get_many_json(keys)

        results: List[Profile] = []
        uncached: List[str] = []
        for steamid, key, item in zip(ids, keys, cached):
            profile = self._decode_cached(key, item, Profile.from_dict) if item else None
            if profile is not None:
                results.append(profile)
            else:
                uncached.append(steamid)

        for start in range(0, len(uncached), self.batch_limit):
            results.extend(await self._fetch_profiles(uncached[start:start + self.batch_limit]))
        return results

    async def _fetch_profiles(self, steamids: List[str]) -> List[Profile]:
        data = await self._get_json(PLAYER_SUMMARIES_PATH, {"steamids": ",".join(steamids)})
        if not data:
            return []
        body = data.get("response")
        players = body.get("players") if isinstance(body, dict) else None
        if not isinstance(players, list):
            logger.warning("Steam returned a player summary without a players list")
            return []

        profiles = []
        for player in players:
            try:
                profile = Profile.from_dict(player)
            except (KeyError, TypeError):
                logger.warning("Skipping malformed player record from Steam")
                continue
            profiles.append(profile)
            await self._cache.set_json(
                self._cache.policy.profile_key(profile.steamid), profile.to_dict(), self._cache.policy.profile_ttl
            )
        logger.debug(f"Fetched {len(profiles)} of {len(steamids)} profiles from Steam")
        return profiles

    # --------------- Friend lists ---------------
    async def get_neighbors(self, steamid: str) -> NeighborSet:
        key = self._cache.policy.neighbors_key(steamid)
        cached = await self._cache.get_json(key)
        if cached:
            neighbors = self._decode_cached(key, cached, NeighborSet.from_dict)
            if neighbors is not None:
                return neighbors

        response = await self._request(
            FRIEND_LIST_PATH, {"steamid": steamid, "relationship": "friend"}, passthrough=PRIVATE_STATUSES
        )
        if response is None:
            return NeighborSet(steamid=steamid, timestamp=self._clock())

        if response.status_code in PRIVATE_STATUSES:
            neighbors = NeighborSet.private(steamid, self._clock())
        else:
            try:
                data = response.json()
            except ValueError:
                logger.error(f"Steam returned a non-JSON friend list for {steamid}")
                return NeighborSet(steamid=steamid, timestamp=self._clock())
            friendslist = (data.get("friendslist") or {}) if isinstance(data, dict) else None
            entries = friendslist.get("friends", []) if isinstance(friendslist, dict) else None
            if not isinstance(entries, list):
                logger.error(f"Steam returned a malformed friend list for {steamid}")
                return NeighborSet(steamid=steamid, timestamp=self._clock())
            friends = [
                str(friend["steamid"])
                for friend in entries
                if isinstance(friend, dict) and friend.get("steamid")
            ]
            if len(friends) > self.max_neighbors:
                logger.info(f"Truncating friend list of {steamid} from {len(friends)} to {self.max_neighbors}")
            neighbors = NeighborSet(
                steamid=steamid, friends=tuple(friends[:self.max_neighbors]), timestamp=self._clock()
            )

        await self._cache.set_json(
            key, neighbors.to_dict(), self._cache.policy.neighbors_ttl_for(neighbors.is_private)
        )
        return neighbors
