"""Application configuration using Pydantic settings."""

import logging
from datetime import tzinfo
from functools import lru_cache
from zoneinfo import ZoneInfo, ZoneInfoNotFoundError

from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
    )

    # Supabase (PostgREST)
    supabase_url: str = "http://localhost:54321"
    supabase_key: str | None = None  # anon or service-role key
    reports_table: str = "reports"
    comments_table: str = "comments"
    points_table: str = "points"

    # Loading
    recent_reports_limit: int = 10
    fetch_batch_size: int = 1000
    max_records: int = 50000
    refresh_interval_minutes: int = 0  # 0 disables periodic reloads

    # Local calendar used for day/month/weekday/hour buckets
    dashboard_timezone: str = "America/Lima"

    # API settings
    api_v1_prefix: str = "/api/v1"
    cors_origins: list[str] = ["*"]  # Restrict in production
    rate_limit_per_minute: int = 60

    # Environment
    debug: bool = False


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


@lru_cache
def get_dashboard_tz() -> tzinfo | None:
    """Local timezone for calendar buckets, None to keep reported wall clocks."""
    name = get_settings().dashboard_timezone
    if not name:
        return None
    try:
        return ZoneInfo(name)
    except (ZoneInfoNotFoundError, ValueError):
        logger.warning(f"Unknown dashboard timezone {name!r}, using reported wall clocks")
        return None
