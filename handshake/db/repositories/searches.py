from sqlalchemy.orm import Session
from handshake.db.models import Search
from typing import List, Optional
import datetime

class SearchRepository:
    """Repository for search history records."""

    def __init__(self, db: Session):
        self.db = db

    def create_search(self, requester_id: str, target_id: str, success: bool,
                      degree: Optional[int] = None, path: Optional[List[str]] = None,
                      error_message: Optional[str] = None, commit: bool = True) -> Search:
        """
        Record one search attempt.

        Args:
            requester_id: SteamID64 the search started from
            target_id: SteamID64 the search was looking for
            success: Whether a chain was found
            degree: Number of hops, None when unsuccessful
            path: Ordered SteamID64s from requester to target
            error_message: Failure classification, if any
            commit: Commit immediately; pass False to batch with other writes

        Returns:
            Created search record
        """
        search = Search(
            requester_id=requester_id,
            target_id=target_id,
            success=success,
            degree=degree,
            path=path or [],
            error_message=error_message,
        )
        self.db.add(search)
        if commit:
            self.db.commit()
            self.db.refresh(search)
        return search

    def get_search(self, search_id: str) -> Optional[Search]:
        return self.db.query(Search).filter(Search.id == search_id).first()

    def recent_searches(self, requester_id: Optional[str] = None, limit: int = 20) -> List[Search]:
        """
        Most recent searches, newest first.

        Args:
            requester_id: Only searches started by this user (optional)
            limit: Maximum number of records

        Returns:
            List of search records
        """
        query = self.db.query(Search)
        if requester_id:
            query = query.filter(Search.requester_id == requester_id)
        return query.order_by(Search.created_at.desc()).limit(limit).all()

    def delete_older_than(self, cutoff: datetime.datetime, failed_only: bool = False) -> int:
        """
        Delete searches created before a cutoff.

        Args:
            cutoff: Records strictly older than this are deleted
            failed_only: Only delete unsuccessful searches

        Returns:
            Number of deleted records
        """
        query = self.db.query(Search).filter(Search.created_at < cutoff)
        if failed_only:
            query = query.filter(Search.success.is_(False))
        deleted = query.delete(synchronize_session=False)
        self.db.commit()
        return deleted
