"""API service configuration.

Optional: DATABASE_URL (defaults to a local SQLite file), SHARE_BASE_URL,
CORS_ORIGINS, HOST, PORT.
"""

from functools import lru_cache

from pydantic import Field

from shared.config import BaseSettings, database_url_field, share_base_url_field


class Settings(BaseSettings):
    """API service settings."""

    service_name: str = "onboarding-api"

    database_url: str = database_url_field()
    share_base_url: str = share_base_url_field()

    # Browser wizard is served from another origin
    cors_origins: list[str] = Field(default=["*"], description="Allowed CORS origins")

    host: str = "0.0.0.0"  # noqa: S104
    port: int = Field(default=8000, ge=1, le=65535)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
