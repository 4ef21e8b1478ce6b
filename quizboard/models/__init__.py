"""
Database models package
"""
from quizboard.models.quiz import Quiz, QuizQuestion
from quizboard.models.quiz_attempt import UserQuizAttempt
from quizboard.models.profile import Profile
from quizboard.models.daily_activity import UserDailyActivity

__all__ = ["Quiz", "QuizQuestion", "UserQuizAttempt", "Profile", "UserDailyActivity"]
