"""
Configuration settings for the Leaderboard API.
Uses pydantic-settings for type-safe environment variable management.
"""
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import List


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
    )

    # Database
    DATABASE_URL: str = "postgresql://leaderboard_user:changeme@db:5432/leaderboard"

    # Redis (Celery broker and result backend)
    REDIS_URL: str = "redis://redis:6379/0"

    # Logging
    LOG_LEVEL: str = "INFO"

    # CORS
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://localhost:8000",
    ]

    # Leaderboard
    LEADERBOARD_SIZE: int = 50
    LEADERBOARD_TIER_BAND: int = 10
    LEADERBOARD_PERIOD_DAYS: int = 7
    # Upper bound on ranking staleness when refresh is batched
    LEADERBOARD_REFRESH_SECONDS: int = 60
    LEADERBOARD_REFRESH_ON_WRITE: bool = False
    LEADERBOARD_PERIOD_CREATE_ATTEMPTS: int = 3
    LEADERBOARD_REWARDS_HISTORY_LIMIT: int = 25


# Global settings instance
settings = Settings()
