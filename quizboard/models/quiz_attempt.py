"""
UserQuizAttempt model - one row per completed quiz attempt
"""
from sqlalchemy import Column, String, Integer, Boolean, TIMESTAMP, ForeignKey, func
from sqlalchemy.orm import relationship
from quizboard.database import Base
import uuid


class UserQuizAttempt(Base):
    """
    Quiz attempts table - insert-only, retakes add new rows
    """
    __tablename__ = "user_quiz_attempts"
    
    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False, index=True)
    quiz_id = Column(String(36), ForeignKey("quizzes.id"), nullable=False, index=True)
    score_obtained = Column(Integer, nullable=False, default=0)
    is_passed = Column(Boolean, nullable=False, default=False)
    attempted_at = Column(TIMESTAMP, server_default=func.now())
    
    profile = relationship("Profile")
    quiz = relationship("Quiz")
    
    def __repr__(self):
        return f"<UserQuizAttempt(user_id={self.user_id}, quiz_id={self.quiz_id}, score={self.score_obtained})>"
