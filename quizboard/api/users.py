"""
Current-user history and reward summary API endpoints
"""
from fastapi import APIRouter, Depends, HTTPException
import logging

from quizboard.api.dependencies import get_record_store, require_user
from quizboard.exceptions import RecordStoreError
from quizboard.schemas.history import AttemptHistoryResponse, ProfileSummary
from quizboard.services.history_service import history_service
from quizboard.stores.identity import CurrentUser
from quizboard.stores.record_store import RecordStore

router = APIRouter(prefix="/api/users", tags=["users"])
logger = logging.getLogger(__name__)


@router.get("/me/history", response_model=AttemptHistoryResponse)
async def get_my_history(
    user: CurrentUser = Depends(require_user),
    store: RecordStore = Depends(get_record_store)
):
    """Quiz attempts of the signed-in user, newest first"""
    
    try:
        attempts = history_service.get_attempt_history(store, user.id)
    except RecordStoreError as e:
        logger.error(f"Failed to load history for user {user.id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to load activity history")
    
    return AttemptHistoryResponse(user_id=user.id, attempts=attempts)


@router.get("/me/summary", response_model=ProfileSummary)
async def get_my_summary(
    user: CurrentUser = Depends(require_user),
    store: RecordStore = Depends(get_record_store)
):
    """Bonus points and achievement tier of the signed-in user"""
    
    try:
        summary = history_service.get_profile_summary(store, user.id)
    except RecordStoreError as e:
        logger.error(f"Failed to load summary for user {user.id}: {str(e)}")
        raise HTTPException(status_code=502, detail="Failed to load profile summary")
    
    if summary is None:
        raise HTTPException(status_code=404, detail="Profile not found")
    
    return ProfileSummary(**summary)
