"""Application configuration settings."""

from __future__ import annotations

from functools import lru_cache

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

ENV_FILE = ".env"
ENV_FILE_ENCODING = "utf-8"


class Settings(BaseSettings):
    """Application configuration values loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE, env_file_encoding=ENV_FILE_ENCODING, extra="ignore"
    )

    database_url: str = Field(
        description="Database connection URL used by SQLAlchemy to connect to the DB",
        min_length=1,
    )
    secret_key: str = Field(
        description="Secret key used to verify the identity provider's JWT tokens",
        min_length=1,
    )
    app_timezone: str = Field(
        default="UTC",
        description="IANA timezone name (or UTC±HH:MM offset) used for timestamps",
    )
    log_level: str = Field(default="INFO", description="Root logging level")
    cors_origins: list[str] = Field(
        default_factory=lambda: ["http://localhost:3000"],
        description="Origins allowed to open the notification stream from a browser",
    )
    stream_poll_interval_seconds: float = Field(
        default=5.0,
        description="Seconds between two store polls of a live notification stream",
        gt=0,
    )
    stream_backlog_window_seconds: float = Field(
        default=60.0,
        description="Lookback applied to the cursor of a freshly opened stream",
        ge=0,
    )
    stream_batch_limit: int = Field(
        default=10,
        description="Maximum number of notifications delivered per poll tick",
        gt=0,
    )
    stream_store_failure_alert_ticks: int = Field(
        default=6,
        description="Consecutive failed ticks after which a stream logs an error",
        gt=0,
    )
    snapshot_limit: int = Field(
        default=50,
        description="Number of recent notifications returned by the snapshot endpoint",
        gt=0,
    )

    @model_validator(mode="after")
    def _validate_log_level(self) -> "Settings":
        normalized = self.log_level.strip().upper()
        if normalized not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError("LOG_LEVEL must be a standard logging level name")
        self.log_level = normalized
        return self


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings instance."""

    return Settings()


def reset_settings_cache() -> None:
    """Clear the settings cache to force reloading from the environment."""

    get_settings.cache_clear()


__all__ = ["Settings", "get_settings", "reset_settings_cache"]
