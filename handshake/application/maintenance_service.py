"""Retention rules for the search history."""
from __future__ import annotations

import logging
from datetime import datetime, timedelta
from typing import Any, Callable, Dict

from sqlalchemy.orm import Session

from handshake.db.models import utcnow
from handshake.db.repositories import SearchRepository

logger = logging.getLogger(__name__)

FAILED_SEARCH_RETENTION = timedelta(days=30)
SEARCH_RETENTION = timedelta(days=90)


class MaintenanceService:
    """Deletes failed searches after 30 days and every search after 90."""

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def cleanup(self, now: datetime | None = None) -> Dict[str, Any]:
        now = now or utcnow()
        db = self._session_factory()
        try:
            searches = SearchRepository(db)
            deleted_failed = searches.delete_older_than(now - FAILED_SEARCH_RETENTION, failed_only=True)
            deleted_old = searches.delete_older_than(now - SEARCH_RETENTION)
        finally:
            db.close()

        logger.info(f"Cleanup removed {deleted_failed} failed and {deleted_old} expired searches")
        return {
            "deleted_searches": deleted_failed,
            "deleted_old_searches": deleted_old,
            "timestamp": now.isoformat(),
        }
