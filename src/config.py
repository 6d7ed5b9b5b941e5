"""
Engine configuration using pydantic-settings.
Loads from environment variables with .env file support.
"""

from datetime import datetime, timedelta, timezone
from functools import lru_cache
from typing import FrozenSet

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Audit engine settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        frozen=True,
    )

    # Application
    debug: bool = False
    environment: str = "development"
    log_level: str = "INFO"  # DEBUG, INFO, WARNING, ERROR
    project_name: str = "ADMS Audit Engine"
    version: str = "1.0.0"

    # Temporal bounds
    min_allowed_date: datetime = datetime(1980, 1, 1, tzinfo=timezone.utc)
    future_tolerance_minutes: int = 5      # clock skew allowance
    max_backdate_hours: int = 24           # recency of entry for new records
    max_reasonable_age_years: int = 10
    max_date_span_days: int = 3650

    # Anomaly heuristics
    burst_window_minutes: int = 5
    burst_max_count: int = 10              # per user inside the burst window
    max_daily_activity_count: int = 200    # per user per UTC day

    # Revision numbering
    min_revision_number: int = 1
    max_revision_number: int = 999_999

    # Activity names
    activity_min_length: int = 2
    activity_max_length: int = 50
    max_activity_suggestions: int = 5
    reserved_activity_names: FrozenSet[str] = frozenset({
        "SYSTEM", "ADMIN", "AUTO", "BATCH", "ROOT", "CONFIG",
        "MIGRATION", "IMPORT", "EXPORT", "PURGE",
        "CORRUPT", "ERROR", "FAILED",
        "NULL", "NONE", "UNDEFINED",
    })

    @property
    def future_tolerance(self) -> timedelta:
        return timedelta(minutes=self.future_tolerance_minutes)

    @property
    def max_backdate(self) -> timedelta:
        return timedelta(hours=self.max_backdate_hours)

    @property
    def burst_window(self) -> timedelta:
        return timedelta(minutes=self.burst_window_minutes)

    @property
    def max_date_span(self) -> timedelta:
        return timedelta(days=self.max_date_span_days)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
