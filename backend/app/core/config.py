from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from backend.db import DEFAULT_DATABASE_URL, normalize_database_url


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        populate_by_name=True,
    )

    database_url: str = Field(
        default=DEFAULT_DATABASE_URL,
        alias="DATABASE_URL",
    )
    log_file: Path = Field(default=Path("logs/kokoro.log"))

    # Analytics snapshot configuration
    analytics_cache_ttl_sec: int = Field(default=1800, alias="ANALYTICS_CACHE_TTL_SEC")
    analytics_cache_max_entries: int = Field(
        default=1024,
        ge=1,
        alias="ANALYTICS_CACHE_MAX_ENTRIES",
    )
    analytics_fetch_timeout_sec: float = Field(
        default=10.0,
        alias="ANALYTICS_FETCH_TIMEOUT_SEC",
    )

    version: str = Field(default_factory=lambda: Settings._load_version())

    @staticmethod
    def _load_version() -> str:
        version_env = os.getenv("VERSION")
        if version_env:
            return version_env
        version_file = Path("VERSION")
        if version_file.exists():
            return version_file.read_text(encoding="utf-8").strip()
        return "0.0.0"

    @field_validator("log_file", mode="before")
    @classmethod
    def _validate_log_file(cls, value: Path | str) -> Path:
        path = Path(value)
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
        return path

    @field_validator("analytics_cache_ttl_sec", mode="before")
    @classmethod
    def _validate_cache_ttl(cls, value: int | str | None) -> int:
        if value is None:
            return 1800
        ttl = int(value)
        return max(ttl, 60)

    @field_validator("analytics_fetch_timeout_sec", mode="before")
    @classmethod
    def _validate_fetch_timeout(cls, value: float | str | None) -> float:
        if value is None:
            return 10.0
        timeout = float(value)
        if timeout <= 0:
            return 10.0
        return timeout

    @field_validator("database_url", mode="before")
    @classmethod
    def _validate_database_url(cls, value: str | None) -> str:
        return normalize_database_url(value)


@lru_cache
def get_settings() -> Settings:
    """Cached settings accessor."""

    return Settings()
