"""
Health check endpoints for the API.
"""
from fastapi import APIRouter, Depends
from typing import Dict, Any
from datetime import datetime

from handshake.config import settings
from handshake.dependencies import get_cache_manager, get_directory_client
from handshake.services.cache import CacheManager, RedisCacheStore
from handshake.services.directory import SteamDirectoryClient

router = APIRouter()

@router.get("/health")
async def health_check() -> Dict[str, Any]:
    """
    Basic health check endpoint.
    Returns API status and version information.
    """
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "version": settings.VERSION,
        "environment": settings.ENVIRONMENT
    }

@router.get("/health/cache")
async def cache_health(
    cache: CacheManager = Depends(get_cache_manager)
) -> Dict[str, Any]:
    """
    Check cache health.
    Pings the backing store and returns hit/miss statistics.
    """
    reachable = await cache.ping()
    return {
        "status": "healthy" if reachable else "unhealthy",
        "timestamp": datetime.now().isoformat(),
        "backend": "redis" if isinstance(cache.store, RedisCacheStore) else "memory",
        "cache_stats": cache.get_cache_stats(),
    }

@router.get("/health/directory")
async def directory_health(
    directory: SteamDirectoryClient = Depends(get_directory_client)
) -> Dict[str, Any]:
    """
    Report Steam Web API usage.
    A missing API key makes every lookup fail, so it is reported as unhealthy.
    """
    return {
        "status": "healthy" if settings.STEAM_API_KEY else "unhealthy",
        "timestamp": datetime.now().isoformat(),
        "api_key_configured": bool(settings.STEAM_API_KEY),
        "directory_stats": directory.stats.as_dict(),
    }

@router.get("/health/detailed")
async def detailed_health(
    cache: CacheManager = Depends(get_cache_manager),
    directory: SteamDirectoryClient = Depends(get_directory_client)
) -> Dict[str, Any]:
    """
    Detailed health check of all system components.
    """
    cache_health_check = await cache_health(cache)
    directory_health_check = await directory_health(directory)
    basic_health = await health_check()

    overall_status = "healthy"
    if (cache_health_check.get("status") == "unhealthy" or
        directory_health_check.get("status") == "unhealthy"):
        overall_status = "unhealthy"

    return {
        "status": overall_status,
        "timestamp": datetime.now().isoformat(),
        "api": basic_health,
        "cache": cache_health_check,
        "directory": directory_health_check,
        "config": {
            "max_depth": settings.MAX_DEPTH,
            "max_neighbors": settings.MAX_NEIGHBORS,
            "history_enabled": settings.HISTORY_ENABLED,
            "environment": settings.ENVIRONMENT,
            "debug": settings.DEBUG
        }
    }
