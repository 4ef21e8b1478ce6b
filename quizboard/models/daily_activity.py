"""
UserDailyActivity model - per-day learning activity counters
"""
from sqlalchemy import Column, String, Integer, Date, TIMESTAMP, UniqueConstraint, func
from quizboard.database import Base
import uuid


class UserDailyActivity(Base):
    """
    Daily activity table - one row per user per day
    """
    __tablename__ = "user_daily_activity"
    __table_args__ = (
        UniqueConstraint("user_id", "activity_date", name="uq_daily_activity_user_date"),
    )
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), nullable=False, index=True)
    activity_date = Column(Date, nullable=False)
    lessons_completed_count = Column(Integer, nullable=False, default=0)
    quizzes_attempted_count = Column(Integer, nullable=False, default=0)
    duration_minutes = Column(Integer, nullable=False, default=0)
    created_at = Column(TIMESTAMP, server_default=func.now())
    updated_at = Column(TIMESTAMP, server_default=func.now(), onupdate=func.now())
    
    def __repr__(self):
        return f"<UserDailyActivity(user_id={self.user_id}, date={self.activity_date})>"
