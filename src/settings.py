"""Centralized settings for tradealerts.

Uses pydantic-settings to load from environment variables (prefixed
TRADEALERTS_) with defaults suitable for local development.
"""

from functools import lru_cache

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Settings loaded from environment variables."""

    # --- Database ---
    database_url: str = "sqlite+aiosqlite:///tradealerts.db"

    # --- App / device ---
    app_version: str = "1.0.0"
    device_platform: str = "ios"  # ios, android, web

    # --- Notifications ---
    persist_remote_notifications: bool = True

    # --- Logging ---
    log_level: str = "INFO"
    log_format: str = "json"  # json, console
    slow_operation_ms: float = 1000.0

    model_config = {
        "env_prefix": "TRADEALERTS_",
        "env_file": ".env",
        "extra": "ignore",
    }


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()
