"""
Rewards service - bonus points, daily activity and achievement tiers
"""
import logging
from dataclasses import dataclass
from datetime import date
from typing import Optional

from quizboard.exceptions import RecordStoreError
from quizboard.stores.record_store import RecordStore

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AchievementTier:
    min_points: int
    title: str
    description: str
    icon: str


ACHIEVEMENT_TIERS = (
    AchievementTier(0, "Novice Learner", "Just starting out on your learning journey. Keep going!", "🌱"),
    AchievementTier(10, "Apprentice Scholar", "You're building a solid foundation. Great work!", "📚"),
    AchievementTier(50, "Knowledge Seeker", "A true quest for knowledge. The path is clear!", "✨"),
    AchievementTier(100, "Master Mind", "Unlocking advanced insights. Your expertise shines!", "🧠"),
    AchievementTier(250, "Grand Sage", "A pillar of wisdom and inspiration. Truly remarkable!", "🦉"),
    AchievementTier(500, "Tech Luminary", "You are a beacon in the world of technology. Outstanding!", "💡"),
)

# activity type -> counter column it bumps
ACTIVITY_COLUMNS = {
    "lesson_completed": "lessons_completed_count",
    "quiz_attempted": "quizzes_attempted_count",
    "login": "duration_minutes",
}


def achievement_tier(bonus_points: Optional[int]) -> AchievementTier:
    """Highest tier whose threshold the balance reaches"""
    points = bonus_points or 0
    reached = [tier for tier in ACHIEVEMENT_TIERS if points >= tier.min_points]
    return reached[-1] if reached else ACHIEVEMENT_TIERS[0]


class RewardsService:
    """Service for bonus points and learning activity counters"""
    
    def award_bonus_points(self, store: RecordStore, user_id: str, points: int) -> bool:
        """
        Add points to a user's bonus balance in one atomic update
        
        Returns:
            True when a profile was updated
        """
        updated = store.increment("profiles", {"id": user_id}, "bonus_point", points)
        
        if not updated:
            logger.warning(f"No profile found to award {points} bonus points: {user_id}")
            return False
        
        logger.info(f"User {user_id} awarded {points} bonus points")
        return True
    
    def record_daily_activity(
        self,
        store: RecordStore,
        user_id: str,
        activity_type: str = "login",
        count: int = 1,
        duration: int = 0,
        today: Optional[date] = None
    ) -> None:
        """
        Bump today's activity counter for a user
        
        Args:
            store: Record store
            user_id: Acting user
            activity_type: lesson_completed, quiz_attempted or login
            count: Amount for lesson/quiz counters
            duration: Minutes for login, at least one minute is recorded
            today: Activity date, defaults to the current date
        """
        if not user_id:
            raise ValueError("User ID is required")
        if activity_type not in ACTIVITY_COLUMNS:
            raise ValueError(f"Unknown activity type: {activity_type}")
        
        activity_date = today or date.today()
        column = ACTIVITY_COLUMNS[activity_type]
        amount = (duration if duration > 0 else 1) if activity_type == "login" else count
        filters = {"user_id": user_id, "activity_date": activity_date}
        
        existing = store.fetch_one("user_daily_activity", filters)
        if existing is None:
            record = {
                **filters,
                "lessons_completed_count": 0,
                "quizzes_attempted_count": 0,
                "duration_minutes": 0,
            }
            record[column] = amount
            try:
                store.insert("user_daily_activity", record)
                logger.info(f"Daily activity created: user={user_id}, {activity_type}, date={activity_date}")
                return
            except RecordStoreError:
                # Another request created today's row first
                logger.info(f"Daily activity row appeared concurrently for {user_id}, updating instead")
        
        store.increment("user_daily_activity", filters, column, amount)
        logger.info(f"Daily activity updated: user={user_id}, {activity_type}, date={activity_date}")


# Global instance
rewards_service = RewardsService()
