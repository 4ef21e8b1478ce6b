"""
Leaderboard API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Optional
import logging

from quizboard.api.dependencies import get_record_store
from quizboard.config import settings
from quizboard.exceptions import LeaderboardUnavailableError
from quizboard.schemas.leaderboard import LeaderboardEntryView, LeaderboardResponse
from quizboard.services.leaderboard_service import leaderboard_service
from quizboard.stores.record_store import RecordStore

router = APIRouter(prefix="/api", tags=["leaderboard"])
logger = logging.getLogger(__name__)


@router.get("/leaderboard", response_model=LeaderboardResponse)
async def get_leaderboard(
    limit: Optional[int] = Query(None, ge=1),
    store: RecordStore = Depends(get_record_store)
):
    """
    Rank learners by their quiz attempts
    
    Order:
    - Current bonus points (highest first)
    - Average score per attempt
    - Number of attempts, then user id for exact ties
    """
    
    limit = min(limit or settings.LEADERBOARD_MAX_ENTRIES, settings.LEADERBOARD_MAX_ENTRIES)
    
    try:
        entries = leaderboard_service.get_leaderboard(store, limit=limit)
    except LeaderboardUnavailableError as e:
        raise HTTPException(status_code=503, detail=str(e))
    
    return LeaderboardResponse(
        entries=[
            LeaderboardEntryView(rank=position, **vars(entry))
            for position, entry in enumerate(entries, start=1)
        ],
        total_users=len(entries)
    )
