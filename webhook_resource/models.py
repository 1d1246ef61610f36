"""Webhook data types."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Mapping


class Operation(str, Enum):
    CREATE = "create"
    DELETE = "delete"


class OutcomeKind(str, Enum):
    CREATED = "created"
    UPDATED = "updated"
    UNCHANGED = "unchanged"
    DELETED = "deleted"  # also covers "nothing to delete"


@dataclass(frozen=True)
class WebhookSpec:
    """Validated description of the webhook a build wants to exist (or not)."""

    org: str
    repo: str
    operation: Operation
    resource_name: str
    webhook_token: str
    github_token: str = field(repr=False)
    events: frozenset[str] = frozenset({"push"})
    content_type: str = "json"
    payload_base_url: str | None = None
    pipeline: str | None = None
    instance_vars: Any = None  # a mapping of scalars once the URL builder accepts it


@dataclass(frozen=True)
class RemoteHook:
    id: str
    url: str | None
    events: frozenset[str] = frozenset()
    active: bool = True

    @classmethod
    def from_api(cls, data: Mapping[str, Any]) -> RemoteHook:
        """Build from a GitHub hook record (GET /repos/{owner}/{repo}/hooks)."""
        config = data.get("config") or {}
        return cls(
            id=str(data["id"]),
            url=config.get("url"),
            events=frozenset(data.get("events") or ()),
            active=bool(data.get("active", True)),
        )


@dataclass(frozen=True)
class VersionToken:
    id: str

    def to_dict(self) -> dict[str, str]:
        return {"id": self.id}


@dataclass(frozen=True)
class Outcome:
    kind: OutcomeKind
    hook_id: str

    def to_version(self) -> VersionToken:
        return VersionToken(id=self.hook_id)
