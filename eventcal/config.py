"""Settings management using pydantic-settings.

Values come from ``EVENTCAL_*`` environment variables or a ``.env`` file.
"""

from __future__ import annotations

from datetime import timedelta
from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="EVENTCAL_",
        env_file=".env",
        extra="ignore",
    )

    log_level: str = Field(default="INFO", description="Root logging level")
    recurrence_horizon_days: int = Field(
        default=365,
        gt=0,
        description="How far past its first date a series without an end date runs",
    )
    max_occurrences: int = Field(
        default=500, gt=0, description="Hard cap on instances per series"
    )
    seed_events: bool = Field(default=False, description="Load sample events at startup")
    holidays: dict[str, str] = Field(
        default_factory=dict,
        description="YYYY-MM-DD -> holiday name, shown in the month view",
    )

    @property
    def recurrence_horizon(self) -> timedelta:
        return timedelta(days=self.recurrence_horizon_days)


@lru_cache
def get_settings() -> Settings:
    return Settings()
