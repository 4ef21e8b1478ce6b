"""
Pydantic schemas for the leaderboard
"""
from pydantic import BaseModel
from typing import List, Optional


class LeaderboardEntryView(BaseModel):
    """One ranked learner"""
    rank: int
    user_id: str
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    total_score: int
    total_attempts: int
    total_passed_quizzes: int
    average_score: float
    current_bonus_points: int
    
    class Config:
        from_attributes = True


class LeaderboardResponse(BaseModel):
    """Ranked learners, rank 1 first"""
    entries: List[LeaderboardEntryView]
    total_users: int
