from pydantic_settings import BaseSettings
from typing import List
from pathlib import Path


class Settings(BaseSettings):
    # Database - SQLite for local development, override with Postgres in production
    DATABASE_URL: str = "sqlite:///./waitlist.db"
    DATABASE_POOL_SIZE: int = 5
    DATABASE_MAX_OVERFLOW: int = 10

    # App Settings
    APP_NAME: str = "OneEaze Waitlist API"
    APP_VERSION: str = "1.0.0"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"
    CORS_ORIGINS: List[str] = [
        "http://localhost:3000",
        "http://127.0.0.1:3000",
        "http://localhost:5500",
    ]

    # Admin listing is protected by a static bearer token (empty = always denied)
    ADMIN_TOKEN: str = ""

    # Redis (for rate limiting)
    REDIS_URL: str = "redis://localhost:6379"
    RATE_LIMIT_ENABLED: bool = True
    RATE_LIMIT_MAX_REQUESTS: int = 10
    RATE_LIMIT_READ_MAX_REQUESTS: int = 300
    RATE_LIMIT_WINDOW_SECONDS: int = 15 * 60

    # Waitlist rules
    EARLY_ACCESS_LIMIT: int = 1000
    REFERRAL_REWARD_THRESHOLD: int = 5
    REFERRAL_CODE_MAX_ATTEMPTS: int = 10
    REGISTRATION_MAX_ATTEMPTS: int = 25

    # Admin listing pagination
    DEFAULT_PAGE_SIZE: int = 50
    MAX_PAGE_SIZE: int = 100

    class Config:
        env_file = Path(__file__).parent.parent.parent / ".env"
        env_file_encoding = 'utf-8'
        extra = "ignore"


settings = Settings()
