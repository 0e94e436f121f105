"""Base configuration with pydantic-settings.

This module provides a base Settings class that the API service and the
client inherit from. Each side defines its own Settings with the fields
specific to it.

Usage:
    from shared.config import BaseSettings
    from pydantic import Field

    class Settings(BaseSettings):
        database_url: str = database_url_field()

    settings = Settings()
"""

from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict

DEFAULT_DATABASE_URL = "sqlite+aiosqlite:///./onboarding.db"
DEFAULT_SHARE_BASE_URL = "http://localhost:3000"


class BaseSettings(PydanticBaseSettings):
    """Base application settings.

    All fields here are optional with sensible defaults.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Logging configuration
    service_name: str = Field(
        default="onboarding",
        description="Service name for structured logging",
    )
    log_format: Literal["json", "console"] = Field(
        default="console",
        description="Log output format",
    )
    log_level: str = Field(
        default="INFO",
        description="Log level (DEBUG, INFO, WARNING, ERROR)",
    )

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        upper_v = v.upper()
        if upper_v not in valid_levels:
            raise ValueError(f"Invalid log level: {v}. Must be one of {valid_levels}")
        return upper_v


# === Field definitions for reuse in service configs ===


def database_url_field():
    """Database URL field definition."""
    return Field(
        default=DEFAULT_DATABASE_URL,
        description="SQLAlchemy async connection URL (defaults to a local SQLite file)",
        examples=[DEFAULT_DATABASE_URL],
    )


def api_url_field():
    """Onboarding API URL field definition (without the /api prefix)."""
    return Field(
        default="http://localhost:8000",
        description="Onboarding API base URL (must not include /api)",
        examples=["http://localhost:8000"],
    )


def share_base_url_field():
    """Origin used when building shareable project links."""
    return Field(
        default=DEFAULT_SHARE_BASE_URL,
        description="Origin of the onboarding wizard, used in shareable links",
    )
