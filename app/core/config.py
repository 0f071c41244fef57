# app/core/config.py

import os
from functools import lru_cache
from typing import List, Optional
from pydantic import ConfigDict
from pydantic_settings import BaseSettings

from app.core.exceptions import ConfigurationError


class Settings(BaseSettings):
    """
    Application settings.
    Loads values from environment variables (.env file)
    """
    # Database settings
    DATABASE_URL: str = ""

    # Loyverse API
    LOYVERSE_API_TOKEN: str = ""
    LOYVERSE_BASE_URL: str = "https://api.loyverse.com/v1.0"
    LOYVERSE_PAGE_SIZE: int = 250
    LOYVERSE_TIMEOUT_SECONDS: float = 30.0

    # Sync scheduling
    SYNC_INTERVAL_MINUTES: int = 60
    SYNC_SCHEDULER_ENABLED: bool = False

    # Response cache
    CACHE_DIR: str = ".cache"
    CACHE_MAX_AGE_MINUTES: Optional[float] = 60

    # Logging
    LOG_LEVEL: str = "INFO"

    # Environment
    ENVIRONMENT: str = "development"
    RUN_MIGRATIONS: bool = False

    model_config = ConfigDict(
        env_file=os.environ.get('ENV_FILE', '.env') if os.path.exists('.env') else None,
        case_sensitive=True,
        extra="ignore",
    )


@lru_cache()
def get_settings():
    """Cached settings to avoid loading .env file for every request"""
    return Settings()

def clear_settings_cache():
    """Clear the settings cache - useful when switching between environments"""
    get_settings.cache_clear()

def validate_config(settings: Optional[Settings] = None) -> None:
    """
    Fail fast when required credentials are missing.

    Collects every problem before raising so the operator sees them all at once.
    """
    settings = settings or get_settings()
    errors: List[str] = []

    if not settings.LOYVERSE_API_TOKEN:
        errors.append("LOYVERSE_API_TOKEN is required")

    if not settings.DATABASE_URL and not os.environ.get("DATABASE_URL"):
        errors.append("DATABASE_URL is required")

    if errors:
        raise ConfigurationError("Configuration errors:\n" + "\n".join(errors))
