"""Process-wide configuration with Pydantic Settings.

Concourse exposes build metadata through fixed environment variable names
(``ATC_EXTERNAL_URL``, ``BUILD_TEAM_NAME``, ...). Those are read through
aliases; the resource's own knobs use the ``WEBHOOK_RESOURCE_`` prefix.
"""

from __future__ import annotations

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

from webhook_resource.errors import InputError

DEFAULT_GITHUB_API_URL = "https://api.github.com"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="WEBHOOK_RESOURCE_",
        case_sensitive=False,
        populate_by_name=True,
        frozen=True,
    )

    # Concourse build metadata
    external_url: str | None = Field(default=None, validation_alias="ATC_EXTERNAL_URL")
    team_name: str | None = Field(default=None, validation_alias="BUILD_TEAM_NAME")
    pipeline_name: str | None = Field(default=None, validation_alias="BUILD_PIPELINE_NAME")
    # Raw JSON object text; parsed by the URL builder
    pipeline_instance_vars: str | None = Field(
        default=None, validation_alias="BUILD_PIPELINE_INSTANCE_VARS"
    )

    github_api_url: str = DEFAULT_GITHUB_API_URL
    timeout: float = 30.0
    log_level: str = "INFO"
    log_json: bool = False


def load_settings() -> Settings:
    """Read settings from the environment."""
    try:
        return Settings()
    except ValidationError as e:
        raise InputError(f"invalid environment: {e}") from e
