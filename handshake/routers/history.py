import hmac
from typing import Optional

from fastapi import APIRouter, Depends, Header, Query
from sqlalchemy.orm import Session

from handshake.config import settings
from handshake.schemas.api_schemas import (
    CleanupResponse, RecentSearchesResponse, SearchRecord, TopTarget, TopTargetsResponse
)
from handshake.dependencies import get_history_db, get_maintenance_service
from handshake.application.maintenance_service import MaintenanceService
from handshake.db.repositories import CounterRepository, SearchRepository
from handshake.domain.errors import AuthorizationError, NotFoundError

router = APIRouter()

@router.get("/stats/top-targets", response_model=TopTargetsResponse)
def get_top_targets(
    limit: int = Query(10, ge=1, le=100),
    db: Session = Depends(get_history_db),
):
    """
    Most searched-for users, from the search counters.
    """
    counters = CounterRepository(db).top_targets(limit)
    return TopTargetsResponse(
        targets=[TopTarget(steamid=c.entity_id64, search_count=c.search_count) for c in counters]
    )

@router.get("/stats/targets/{steamid}", response_model=TopTarget)
def get_target_count(steamid: str, db: Session = Depends(get_history_db)):
    return TopTarget(steamid=steamid, search_count=CounterRepository(db).get(steamid))

@router.get("/searches/recent", response_model=RecentSearchesResponse)
def get_recent_searches(
    requester: Optional[str] = Query(None, description="Only searches started by this SteamID64"),
    limit: int = Query(20, ge=1, le=100),
    db: Session = Depends(get_history_db),
):
    searches = SearchRepository(db).recent_searches(requester_id=requester, limit=limit)
    return RecentSearchesResponse(searches=[SearchRecord.model_validate(s) for s in searches])

@router.get("/searches/{search_id}", response_model=SearchRecord)
def get_search(search_id: str, db: Session = Depends(get_history_db)):
    """
    A single stored search, by the record ID.
    """
    search = SearchRepository(db).get_search(search_id)
    if search is None:
        raise NotFoundError(f"Search {search_id} not found")
    return SearchRecord.model_validate(search)

@router.get("/cron/cleanup", response_model=CleanupResponse)
def cleanup_history(
    authorization: str = Header(""),
    maintenance: MaintenanceService = Depends(get_maintenance_service),
):
    """
    Apply the search history retention rules.
    Requires `Authorization: Bearer <CRON_SECRET>`.
    """
    expected = f"Bearer {settings.CRON_SECRET}"
    if not settings.CRON_SECRET or not hmac.compare_digest(authorization, expected):
        raise AuthorizationError("Unauthorized")

    summary = maintenance.cleanup()
    return CleanupResponse(success=True, **summary)
