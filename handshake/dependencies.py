from __future__ import annotations

import httpx
from fastapi import Depends, Request

from handshake.config import settings
from handshake.services.cache import CacheManager, CachePolicy, CacheStore, InMemoryCacheStore, RedisCacheStore
from handshake.services.directory import RetryPolicy, SteamDirectoryClient
from handshake.application.path_engine import PathEngine
from handshake.application.search_history import SearchHistoryRecorder
from handshake.application.search_service import HandshakeSearchService
from handshake.application.maintenance_service import MaintenanceService
from handshake.domain.errors import NotFoundError
from handshake.db.database import get_db


# --------------- Builders used by the startup hook ---------------
def build_cache_store() -> CacheStore:
    if settings.REDIS_URL:
        return RedisCacheStore.from_url(settings.REDIS_URL)
    return InMemoryCacheStore()


def build_cache_manager(store: CacheStore) -> CacheManager:
    return CacheManager(store, CachePolicy.from_settings(settings))


def build_http_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=settings.STEAM_API_BASE_URL,
        headers={"User-Agent": settings.STEAM_USER_AGENT},
        timeout=settings.STEAM_TIMEOUT_SECONDS,
    )


def build_directory_client(http: httpx.AsyncClient, cache: CacheManager) -> SteamDirectoryClient:
    return SteamDirectoryClient(
        http=http,
        cache=cache,
        api_key=settings.STEAM_API_KEY,
        user_agent=settings.STEAM_USER_AGENT,
        retry_policy=RetryPolicy(
            max_attempts=settings.RETRY_MAX_ATTEMPTS,
            rate_limit_backoff=settings.RETRY_RATE_LIMIT_BACKOFF,
            failure_backoff=settings.RETRY_FAILURE_BACKOFF,
        ),
        max_neighbors=settings.MAX_NEIGHBORS,
        batch_limit=settings.PROFILE_BATCH_LIMIT,
    )


# --------------- Request dependencies ---------------
def get_cache_manager(request: Request) -> CacheManager:
    return request.app.state.cache_manager


def get_directory_client(request: Request) -> SteamDirectoryClient:
    return request.app.state.directory


def get_history_recorder(request: Request) -> SearchHistoryRecorder | None:
    return getattr(request.app.state, "history", None)


def get_maintenance_service(request: Request) -> MaintenanceService:
    maintenance = getattr(request.app.state, "maintenance", None)
    if maintenance is None:
        raise NotFoundError("Search history is not enabled")
    return maintenance


def get_path_engine(
    directory: SteamDirectoryClient = Depends(get_directory_client),
    cache: CacheManager = Depends(get_cache_manager),
) -> PathEngine:
    return PathEngine(
        directory=directory,
        cache=cache,
        max_depth=settings.MAX_DEPTH,
        max_neighbors=settings.MAX_NEIGHBORS,
    )


def get_search_service(
    directory: SteamDirectoryClient = Depends(get_directory_client),
    engine: PathEngine = Depends(get_path_engine),
    history: SearchHistoryRecorder | None = Depends(get_history_recorder),
) -> HandshakeSearchService:
    return HandshakeSearchService(directory=directory, engine=engine, history=history)


def get_history_db(request: Request):
    if getattr(request.app.state, "history", None) is None:
        raise NotFoundError("Search history is not enabled")
    yield from get_db()
