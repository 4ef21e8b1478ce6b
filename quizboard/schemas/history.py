"""
Pydantic schemas for a learner's history and reward summary
"""
from pydantic import BaseModel
from typing import List, Optional
from datetime import datetime


class AttemptHistoryItem(BaseModel):
    """One recorded quiz attempt"""
    attempt_id: str
    quiz_id: str
    quiz_title: str
    score_obtained: int
    is_passed: bool
    attempted_at: Optional[datetime] = None


class AttemptHistoryResponse(BaseModel):
    """Attempts, newest first"""
    user_id: str
    attempts: List[AttemptHistoryItem]


class Achievement(BaseModel):
    """Achievement tier reached with the current bonus points"""
    title: str
    description: str
    icon: str
    min_points: int


class ProfileSummary(BaseModel):
    """Bonus points and achievement standing"""
    user_id: str
    username: Optional[str] = None
    bonus_points: int
    total_attempts: int
    achievement: Achievement
