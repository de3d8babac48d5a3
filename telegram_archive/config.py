"""
Archive configuration loaded from environment variables (and .env).

ArchiveSettings is frozen: it is built once at startup and passed to the
pipeline, sweeper and stores instead of being read as module state.
"""

from datetime import timedelta
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RETENTION_DAYS = 7


class ArchiveSettings(BaseSettings):
    """Settings for the archiver process."""

    model_config = SettingsConfigDict(env_file=".env", extra="ignore", frozen=True)

    # Retention
    retention_days: int = DEFAULT_RETENTION_DAYS
    sweep_interval_hours: float = Field(default=24.0, gt=0)
    sweep_batch_size: int = Field(default=500, ge=1)

    # Ingestion
    max_concurrent_ingestions: int = Field(default=16, ge=1)

    # Storage
    media_dir: Path = Path("./media")
    database_url: str = "sqlite+aiosqlite:///telegram_archive.db"
    attachment_backend: Literal["local", "s3"] = "local"
    s3_bucket: str | None = None
    s3_endpoint_url: str | None = None  # e.g. http://localhost:9000 for MinIO
    s3_region: str = "us-east-1"
    s3_access_key: str | None = None
    s3_secret_key: str | None = None

    # Telegram
    api_id: int | None = None
    api_hash: str | None = None
    session: str = ""
    connection_retries: int = 5

    log_level: str = "INFO"

    @field_validator("retention_days", mode="before")
    @classmethod
    def _retention_or_default(cls, value):
        """Empty, non-numeric and non-positive values fall back to the default window."""
        try:
            days = int(value)
        except (TypeError, ValueError):
            return DEFAULT_RETENTION_DAYS
        return days if days > 0 else DEFAULT_RETENTION_DAYS

    @property
    def retention_window(self) -> timedelta:
        return timedelta(days=self.retention_days)

    @property
    def sweep_interval(self) -> timedelta:
        return timedelta(hours=self.sweep_interval_hours)
