"""
Configuration management using Pydantic Settings
"""
from pydantic import field_validator
from pydantic_settings import BaseSettings
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables or .env"""

    # Record store (Postgres in production, SQLite for local runs)
    DATABASE_URL: str = "sqlite:///./quizboard.db"

    # Redis holds cached quizzes and in-progress quiz sessions
    REDIS_URL: str = "redis://redis:6379/0"

    APP_NAME: str = "Quizboard"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    ALLOWED_ORIGINS: List[str] = ["http://localhost:3000", "http://localhost:5173"]

    # Per learner, or per IP for anonymous callers
    RATE_LIMIT_PER_MINUTE: int = 60
    RATE_LIMIT_PER_HOUR: int = 1000

    QUIZ_CACHE_TTL: int = 3600  # seconds
    SESSION_TTL: int = 7200  # seconds; an idle session expires after this
    PASS_BONUS_POINTS: int = 10
    LEADERBOARD_MAX_ENTRIES: int = 100

    LOG_LEVEL: str = "INFO"

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {value}")
        return level

    @field_validator("PASS_BONUS_POINTS", "QUIZ_CACHE_TTL", "SESSION_TTL", "LEADERBOARD_MAX_ENTRIES")
    @classmethod
    def non_negative(cls, value: int) -> int:
        if value < 0:
            raise ValueError("must not be negative")
        return value

    class Config:
        env_file = ".env"
        case_sensitive = True


settings = Settings()
