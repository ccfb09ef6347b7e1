"""Best-effort durable record of searches."""
from __future__ import annotations

import logging
from typing import Callable, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from handshake.db.repositories import CounterRepository, SearchRepository, UserRepository
from handshake.domain.entities import Profile, SearchResult

logger = logging.getLogger(__name__)


class SearchHistoryRecorder:
    """Writes the search record, both users and the target's counter in one session.

    A database failure is logged and rolled back; the search response never depends
    on it.
    """

    def __init__(self, session_factory: Callable[[], Session]) -> None:
        self._session_factory = session_factory

    def record(
        self,
        source_id: str,
        target_id: str,
        result: SearchResult,
        source_user: Optional[Profile] = None,
        target_user: Optional[Profile] = None,
    ) -> bool:
        db = self._session_factory()
        try:
            SearchRepository(db).create_search(
                requester_id=source_id,
                target_id=target_id,
                success=result.success,
                degree=result.degree,
                path=result.path_ids,
                error_message=result.error_message.value if result.error_message else None,
                commit=False,
            )
            users = UserRepository(db)
            seen = {user.steamid: user for user in (source_user, target_user) if user is not None}
            for user in seen.values():
                users.upsert_user(user.steamid, user.personaname, user.avatar, commit=False)
            CounterRepository(db).increment(target_id, commit=False)
            db.commit()
            return True
        except SQLAlchemyError as e:
            db.rollback()
            logger.warning(f"Could not record search {source_id} -> {target_id}, continuing: {e}")
            return False
        finally:
            db.close()
