"""Application configuration settings."""
from __future__ import annotations

import os
from datetime import datetime
from functools import lru_cache

from pydantic import AliasChoices, BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# --- Runtime toggles -----------------------------------------------------
# Execution environment: "dev" | "test" | "staging" | "prod"
ENV = os.getenv("BUILDATHON_ENV", "dev").lower()

ADMIN_COOKIE_NAME = "admin_session"


class Settings(BaseSettings):
    """Environment configuration for the buildathon backend."""

    app_env: str = ENV
    database_url: str = "sqlite:///buildathon.db"
    LOG_LEVEL: str = "INFO"

    # --- Admin dashboard -------------------------------------------------
    ADMIN_USERNAME: str | None = None
    ADMIN_PASSWORD: str | None = None
    ADMIN_SESSION_SECRET: str | None = None
    ADMIN_SESSION_MAX_AGE_SECONDS: int = 7 * 24 * 60 * 60

    # --- Registration ----------------------------------------------------
    # Keep in sync with the timeline shown on the landing page.
    BUILDATHON_START_AT: datetime = datetime.fromisoformat("2026-01-19T00:00:00+00:00")
    GITHUB_TOKEN: str | None = Field(
        default=None,
        validation_alias=AliasChoices("GITHUB_TOKEN", "GH_TOKEN"),
    )
    GITHUB_API_URL: str = "https://api.github.com"
    GITHUB_TIMEOUT_SECONDS: float = 10.0

    CORS_ALLOW_ORIGINS: list[str] = [
        "http://localhost:3000",
    ]
    SENTRY_DSN: str | None = None
    PROMETHEUS_ENABLED: bool = True
    ALLOW_DB_CREATE_ALL: bool = False

    model_config = SettingsConfigDict(
        env_file=".env", env_prefix="", env_file_encoding="utf-8", extra="ignore"
    )

    @field_validator("ADMIN_USERNAME", "ADMIN_PASSWORD", "ADMIN_SESSION_SECRET", "GITHUB_TOKEN")
    @classmethod
    def _strip_empty_secret(cls, value: str | None) -> str | None:
        """Normalise empty secrets to ``None`` for easier validation."""

        if value is None:
            return None
        cleaned = value.strip()
        return cleaned or None


class AppInfo(BaseModel):
    name: str = "buildathon-backend"
    version: str = "0.1.0"


settings = Settings()


@lru_cache
def get_settings() -> Settings:
    """Return cached application settings."""

    return settings


__all__ = [
    "ENV",
    "ADMIN_COOKIE_NAME",
    "Settings",
    "AppInfo",
    "settings",
    "get_settings",
]
