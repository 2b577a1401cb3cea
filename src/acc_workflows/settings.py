"""Application settings using pydantic-settings.

Loads configuration from ``ACC_WORKFLOWS_``-prefixed environment variables with
.env file support.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, SecretStr
from pydantic_settings import BaseSettings, SettingsConfigDict

__all__ = ["Settings", "get_settings"]


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="ACC_WORKFLOWS_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    debug: bool = False
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"

    # Database
    database_url: str = Field(
        default="sqlite+aiosqlite:///acc_workflows.sqlite3",
        description="SQLAlchemy async connection URL",
    )
    database_create_all: bool = Field(
        default=False,
        description="Create missing tables on startup instead of relying on migrations",
    )

    # Google OAuth client used to refresh connector tokens
    google_client_id: str = Field(default="", description="OAuth client ID")
    google_client_secret: SecretStr = Field(default=SecretStr(""), description="OAuth client secret")
    google_token_url: str = "https://oauth2.googleapis.com/token"
    gmail_api_url: str = "https://gmail.googleapis.com/gmail/v1"
    calendar_api_url: str = "https://www.googleapis.com/calendar/v3"
    http_timeout: float = Field(default=30.0, gt=0)
    token_refresh_buffer_seconds: int = Field(
        default=300,
        ge=0,
        description="Refresh access tokens expiring within this many seconds",
    )

    # REST layer
    owner_header: str = Field(default="X-Owner-Id", description="Header carrying the authenticated owner id")
    api_path_prefix: str = ""


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
