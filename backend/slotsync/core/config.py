"""
Application configuration using pydantic-settings.
All config is loaded from environment variables with sensible defaults.
"""

from pydantic_settings import BaseSettings
from functools import lru_cache


class Settings(BaseSettings):
    # Application
    APP_NAME: str = "Slot Sync"
    APP_VERSION: str = "1.0.0"
    ENVIRONMENT: str = "development"
    DEBUG: bool = False
    LOG_LEVEL: str = "INFO"

    # Remote store
    REMOTE_BACKEND: str = "memory"  # rest, memory
    REMOTE_URL: str = "http://localhost:54321"
    REMOTE_API_KEY: str = ""
    REMOTE_TIMEOUT: float = 10.0
    CUSTOMERS_TABLE: str = "customers"
    BOOKINGS_TABLE: str = "bookings"

    # Redis
    REDIS_URL: str = "redis://localhost:6379/0"
    REDIS_ENABLED: bool = True

    # Local cache
    CACHE_BACKEND: str = "redis"  # redis, memory
    CACHE_KEY_PREFIX: str = "cache_"
    CACHE_TTL: int = 0  # 0 keeps snapshots until overwritten

    # Realtime change feed (Redis pub/sub)
    CHANGE_FEED_PREFIX: str = "changes"

    model_config = {
        "env_file": ".env",
        "case_sensitive": True,
    }


@lru_cache()
def get_settings() -> Settings:
    return Settings()
