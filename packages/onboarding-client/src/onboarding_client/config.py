from pathlib import Path

from pydantic import Field, field_validator
from pydantic_settings import SettingsConfigDict

from shared.config import BaseSettings, api_url_field, share_base_url_field


class Config(BaseSettings):
    """Onboarding client configuration (ONBOARDING_* environment variables)."""

    model_config = SettingsConfigDict(env_prefix="ONBOARDING_")

    service_name: str = "onboarding-client"
    log_level: str = "WARNING"

    api_url: str = api_url_field()
    request_timeout: float = Field(
        default=10.0, gt=0, description="Seconds before a remote call counts as unreachable"
    )

    state_dir: Path = Field(
        default=Path.home() / ".onboarding",
        description="Directory for the local project store and current project id",
    )
    local_store_url: str | None = Field(
        default=None,
        description="redis:// URL for the local store; files under state_dir when unset",
    )
    share_base_url: str = share_base_url_field()

    project_id: str | None = Field(default=None, description="Project to open")

    @field_validator("api_url")
    @classmethod
    def reject_api_suffix(cls, v: str) -> str:
        v = v.rstrip("/")
        if v.endswith("/api"):
            raise ValueError("ONBOARDING_API_URL must not include /api")
        return v
