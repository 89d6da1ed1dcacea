"""
Configuration Management for the Finance Tracker

Uses pydantic-settings for type-safe configuration from environment variables.

DESIGN DECISION: All configuration is centralized here.
This makes it easy to see what the service depends on (where data lives,
how callers are identified) and ensures configuration is validated at startup.
"""

from functools import lru_cache
from pathlib import Path
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class StorageSettings(BaseSettings):
    """Per-user JSON file storage configuration."""

    model_config = SettingsConfigDict(
        env_prefix="STORAGE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    data_dir: Path = Field(
        default=Path("data") / "users",
        description="Directory holding one <user_id>.json file per user"
    )
    json_indent: int = Field(
        default=2,
        ge=0,
        le=8,
        description="Indentation used when pretty-printing collections"
    )
    write_retries: int = Field(
        default=3,
        ge=1,
        le=10,
        description="Attempts made when writing a collection fails"
    )
    audit_log_path: Optional[Path] = Field(
        default=None,
        description="JSON-lines file for audit events (disabled when unset)"
    )


class AuthSettings(BaseSettings):
    """
    Caller identity configuration.

    Authentication itself happens upstream (session/auth proxy).
    We only read the identity it hands us.
    """

    model_config = SettingsConfigDict(
        env_prefix="AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    user_header: str = Field(
        default="X-User-Id",
        min_length=1,
        description="Trusted header carrying the authenticated user id"
    )


class AppSettings(BaseSettings):
    """
    Main application settings.

    Loads configuration from environment variables and .env file.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Environment
    app_environment: str = Field(
        default="development",
        description="Application environment"
    )
    debug_mode: bool = Field(
        default=False,
        description="Enable debug mode"
    )

    # Logging
    log_level: str = Field(
        default="INFO",
        description="Root log level"
    )
    log_json: bool = Field(
        default=True,
        description="Render logs as JSON (console renderer otherwise)"
    )

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Only accept the standard logging level names."""
        level = v.strip().upper()
        if level not in {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}:
            raise ValueError(f"Unknown log level: {v}")
        return level

    @property
    def is_production(self) -> bool:
        return self.app_environment.lower() == "production"


class Settings(BaseSettings):
    """
    Root settings container.

    Aggregates all sub-settings for easy access.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Sub-settings are built on access so a broken section
    # doesn't prevent the rest from loading

    @property
    def storage(self) -> StorageSettings:
        return StorageSettings()

    @property
    def auth(self) -> AuthSettings:
        return AuthSettings()

    @property
    def app(self) -> AppSettings:
        return AppSettings()


@lru_cache()
def get_settings() -> Settings:
    """
    Get application settings (cached).

    Uses LRU cache to ensure settings are only loaded once.
    Call get_settings.cache_clear() to reload if needed.
    """
    return Settings()


def validate_all_settings(settings: Optional[Settings] = None) -> dict[str, bool]:
    """
    Validate all settings are properly configured.

    Returns a dict of {setting_name: is_valid}.
    Useful for startup checks.
    """
    results = {}

    settings = settings or get_settings()

    try:
        _ = settings.storage
        results["storage"] = True
    except Exception as e:
        results["storage"] = False
        results["storage_error"] = str(e)

    try:
        _ = settings.auth
        results["auth"] = True
    except Exception as e:
        results["auth"] = False
        results["auth_error"] = str(e)

    try:
        _ = settings.app
        results["app"] = True
    except Exception as e:
        results["app"] = False
        results["app_error"] = str(e)

    return results
