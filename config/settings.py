"""Application settings and configuration management."""
from __future__ import annotations

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Settings loaded from environment variables or defaults."""

    APP_CONFIG_PATH: str = Field(default="app_config.json")

    DEFAULT_DURATION_MINUTES: int = Field(default=30, ge=1)
    DEFAULT_INTERVIEW_TYPE: str = "technical"
    DEFAULT_LEVEL: str = "mid-level"
    MAX_HISTORY_ENTRIES: int = Field(default=10, ge=2)
    COMPLETENESS_THRESHOLD: float = Field(default=0.7, ge=0.0, le=1.0)

    RETRY_ATTEMPTS: int = Field(default=3, ge=1)
    RETRY_BASE_DELAY_S: float = Field(default=1.0, ge=0.0)

    IDLE_THRESHOLD_MINUTES: int = Field(default=30, ge=1)
    SWEEP_INTERVAL_MINUTES: int = Field(default=30, ge=1)

    model_config = SettingsConfigDict(env_file=".env", validate_assignment=True, extra="ignore")


settings = Settings()
