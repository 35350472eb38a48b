"""
CheckIn Configuration
=====================
All environment variables in one place. Pydantic Settings validates
types at startup so a bad base URL or a negative batch size fails on
boot, not halfway through a sync.
"""

from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Loaded from environment variables or a .env file."""

    # --- Remote services ---
    api_base_url: str = "https://django-api-test-rubo.onrender.com"
    emotion_snapshot_base_url: str = "https://emotion-snapshot.onrender.com"
    celebrity_base_url: str = "https://user-login-register-d6yw.onrender.com"
    request_timeout_seconds: float = Field(default=30.0, gt=0)

    # --- Local persisted state (pinned contacts, last sync, cached blobs) ---
    # Empty string keeps everything in memory, which is what tests want.
    state_file: str = ".checkin/state.json"

    # --- Following list ---
    max_pinned_contacts: int = Field(default=12, ge=1)
    following_sync_cooldown_hours: float = Field(default=1.0, ge=0)

    # --- Behaviour tracking ---
    activity_batch_size: int = Field(default=100, ge=1)
    activity_flush_interval_seconds: float = Field(default=120.0, gt=0)
    guest_email: str = "guest@guest.com"

    # --- Cached AI analysis ---
    user_analysis_cache_ttl_minutes: int = Field(default=60, ge=0)

    # --- App settings ---
    environment: str = "development"  # development | staging | production
    log_level: str = "INFO"
    cors_origins: list[str] = ["http://localhost:8081", "http://localhost:19006"]

    model_config = {"env_file": ".env", "env_file_encoding": "utf-8"}


@lru_cache
def get_settings() -> Settings:
    return Settings()
