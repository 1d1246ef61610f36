"""Input schema for the resource request read from stdin."""

from __future__ import annotations

import json
from typing import Annotated, Any

from pydantic import BaseModel, Field, ValidationError, field_validator

from webhook_resource.config import Settings
from webhook_resource.errors import InputError
from webhook_resource.models import Operation, WebhookSpec

NonEmptyStr = Annotated[str, Field(min_length=1)]


class Source(BaseModel):
    github_token: NonEmptyStr


class Params(BaseModel):
    operation: Operation
    org: NonEmptyStr
    repo: NonEmptyStr
    resource_name: NonEmptyStr
    webhook_token: NonEmptyStr
    events: list[str] = Field(default_factory=lambda: ["push"])
    payload_content_type: str = "json"
    payload_base_url: str | None = None
    pipeline: str | None = None
    # Shape is checked when the callback URL is built
    pipeline_instance_vars: Any = None

    @field_validator("events", mode="before")
    @classmethod
    def _default_events(cls, value: Any) -> Any:
        if not value:
            return ["push"]
        return value

    @field_validator("events")
    @classmethod
    def _dedupe_events(cls, value: list[str]) -> list[str]:
        return list(dict.fromkeys(value))

    @field_validator("payload_content_type", mode="before")
    @classmethod
    def _default_content_type(cls, value: Any) -> Any:
        return value or "json"


class ResourceRequest(BaseModel):
    source: Source
    params: Params


class VersionRequest(BaseModel):
    """Request shape for ``check`` and ``in``."""

    source: dict[str, Any] = Field(default_factory=dict)
    version: dict[str, Any] | None = None


def parse_request(raw: str) -> ResourceRequest:
    """Parse and validate the ``out`` request document."""
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as e:
        raise InputError(f"stdin is not valid JSON: {e}") from e
    try:
        return ResourceRequest.model_validate(data)
    except ValidationError as e:
        raise InputError(f"invalid resource configuration: {e}") from e


def parse_version_request(raw: str) -> VersionRequest:
    try:
        return VersionRequest.model_validate_json(raw.strip() or "{}")
    except ValidationError as e:
        raise InputError(f"invalid version request: {e}") from e


def validate_environment(settings: Settings, params: Params) -> None:
    """Fail closed when Concourse build metadata the URL needs is missing."""
    missing: list[str] = []
    if not settings.team_name:
        missing.append("BUILD_TEAM_NAME")
    if not params.payload_base_url and not settings.external_url:
        missing.append("ATC_EXTERNAL_URL")
    if not params.pipeline and not settings.pipeline_name:
        missing.append("BUILD_PIPELINE_NAME")
    if missing:
        raise InputError(f"missing environment variables: {', '.join(missing)}")


def build_spec(request: ResourceRequest, settings: Settings) -> WebhookSpec:
    """Validate the environment and turn a parsed request into a WebhookSpec."""
    params = request.params
    validate_environment(settings, params)
    return WebhookSpec(
        org=params.org,
        repo=params.repo,
        operation=params.operation,
        resource_name=params.resource_name,
        webhook_token=params.webhook_token,
        github_token=request.source.github_token,
        events=frozenset(params.events),
        content_type=params.payload_content_type,
        payload_base_url=params.payload_base_url or None,
        pipeline=params.pipeline or None,
        instance_vars=params.pipeline_instance_vars,
    )
