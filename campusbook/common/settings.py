"""Application settings for the CampusBook document store and services."""

from __future__ import annotations

from functools import lru_cache
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings, loaded from ``CAMPUSBOOK_*`` environment variables."""

    model_config = SettingsConfigDict(
        env_prefix="CAMPUSBOOK_",
        env_file=None,
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Core application settings
    app_env: Literal["development", "test", "staging", "production"] = "development"
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    log_format: Literal["json", "console"] = "json"

    # Storage medium
    storage_backend: Literal["memory", "file", "redis"] = "file"
    storage_path: str = Field(default=".campusbook", description="Directory holding file-backed scopes.")
    storage_scope: str = Field(default="default", min_length=1)
    redis_url: str | None = None

    # Storage key layout
    collection_key_prefix: str = "mock_"
    credentials_key: str = "mockUsers"
    current_user_key: str = "mockCurrentUser"
    seed_marker_key: str = "sampleTeachersAdded"

    # Demo data
    admin_seed_password: str = Field(default="admin123", min_length=6)

    @field_validator("storage_scope")
    @classmethod
    def validate_storage_scope(cls, v: str) -> str:
        """Scopes become file names and key prefixes, so keep them path-free."""
        if "/" in v or "\\" in v or v in {".", ".."}:
            raise ValueError("Storage scope must not contain path separators")
        return v

    @property
    def is_development(self) -> bool:
        """Check if running in development mode."""
        return self.app_env == "development"

    @property
    def is_production(self) -> bool:
        """Check if running in production mode."""
        return self.app_env == "production"


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
