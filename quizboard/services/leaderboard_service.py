"""
Leaderboard service - ranks learners from their quiz attempts
"""
import logging
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional

from quizboard.exceptions import LeaderboardUnavailableError, RecordStoreError
from quizboard.stores.record_store import RecordStore

logger = logging.getLogger(__name__)

DEFAULT_DISPLAY_NAME = "User"


@dataclass
class LeaderboardEntry:
    user_id: str
    username: str
    full_name: Optional[str] = None
    avatar_url: Optional[str] = None
    total_score: int = 0
    total_attempts: int = 0
    total_passed_quizzes: int = 0
    average_score: float = 0.0
    current_bonus_points: int = 0


def aggregate(attempts: Iterable[Mapping[str, Any]]) -> List[LeaderboardEntry]:
    """
    Fold attempt records (joined with their profile) into ranked entries
    
    Attempts without a profile are skipped. Bonus points are read from the
    profile, not summed, so the fold order does not change any total.
    
    Args:
        attempts: Records with user_id, score_obtained, is_passed, profile
        
    Returns:
        Entries in rank order, rank 1 first
    """
    aggregated: Dict[str, LeaderboardEntry] = {}
    
    for attempt in attempts:
        profile = attempt.get("profile")
        if not profile:
            continue
        
        user_id = attempt["user_id"]
        entry = aggregated.get(user_id)
        if entry is None:
            entry = LeaderboardEntry(
                user_id=user_id,
                username=profile.get("username") or profile.get("full_name") or DEFAULT_DISPLAY_NAME,
                full_name=profile.get("full_name"),
                avatar_url=profile.get("avatar_url"),
            )
            aggregated[user_id] = entry
        
        entry.total_score += attempt.get("score_obtained") or 0
        entry.total_attempts += 1
        if attempt.get("is_passed"):
            entry.total_passed_quizzes += 1
        entry.current_bonus_points = profile.get("bonus_point") or 0
    
    for entry in aggregated.values():
        entry.average_score = (
            round(entry.total_score / entry.total_attempts, 2) if entry.total_attempts else 0.0
        )
    
    return rank(aggregated.values())


def rank(entries: Iterable[LeaderboardEntry]) -> List[LeaderboardEntry]:
    """Bonus points desc, average score desc, attempts desc, then user id"""
    return sorted(
        entries,
        key=lambda e: (-e.current_bonus_points, -e.average_score, -e.total_attempts, e.user_id)
    )


class LeaderboardService:
    """Service for building the leaderboard from stored attempts"""
    
    def get_leaderboard(self, store: RecordStore, limit: Optional[int] = None) -> List[LeaderboardEntry]:
        """
        Recompute the leaderboard from every stored attempt
        
        Raises:
            LeaderboardUnavailableError: attempts could not be fetched
        """
        try:
            result = store.fetch("user_quiz_attempts", embed=("profile",))
        except RecordStoreError as e:
            logger.error(f"Error fetching leaderboard data: {str(e)}")
            raise LeaderboardUnavailableError("Failed to load leaderboard") from e
        
        entries = aggregate(result.records)
        logger.info(f"Leaderboard built: {len(entries)} users from {len(result.records)} attempts")
        
        return entries[:limit] if limit is not None else entries


# Global instance
leaderboard_service = LeaderboardService()
