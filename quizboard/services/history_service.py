"""
History service - a learner's own attempts and reward standing
"""
import logging
from typing import Any, Dict, List, Optional

from quizboard.services.rewards_service import achievement_tier
from quizboard.stores.record_store import RecordStore

logger = logging.getLogger(__name__)

UNKNOWN_QUIZ_TITLE = "Unknown Quiz"


class HistoryService:
    """Service for per-user history"""
    
    def get_attempt_history(self, store: RecordStore, user_id: str) -> List[Dict[str, Any]]:
        """Quiz attempts of one user, newest first"""
        
        result = store.fetch(
            "user_quiz_attempts",
            filters={"user_id": user_id},
            order_by=[("attempted_at", False)],
            embed=("quiz",)
        )
        
        return [
            {
                "attempt_id": attempt["id"],
                "quiz_id": attempt["quiz_id"],
                "quiz_title": (attempt.get("quiz") or {}).get("title") or UNKNOWN_QUIZ_TITLE,
                "score_obtained": attempt["score_obtained"],
                "is_passed": attempt["is_passed"],
                "attempted_at": attempt["attempted_at"],
            }
            for attempt in result.records
        ]
    
    def get_profile_summary(self, store: RecordStore, user_id: str) -> Optional[Dict[str, Any]]:
        """Bonus points and achievement tier, or None for an unknown user"""
        
        profile = store.fetch_one("profiles", {"id": user_id})
        if profile is None:
            return None
        
        attempts = store.fetch(
            "user_quiz_attempts",
            filters={"user_id": user_id},
            range_=(0, 0),
            count=True
        )
        
        bonus_points = profile.get("bonus_point") or 0
        tier = achievement_tier(bonus_points)
        
        return {
            "user_id": profile["id"],
            "username": profile.get("username") or profile.get("full_name"),
            "bonus_points": bonus_points,
            "total_attempts": attempts.count,
            "achievement": {
                "title": tier.title,
                "description": tier.description,
                "icon": tier.icon,
                "min_points": tier.min_points,
            }
        }


# Global instance
history_service = HistoryService()
