"""Webhook reconciliation: match the desired hook and create, update or delete it."""

from __future__ import annotations

import time
from typing import Any, Callable, Iterable, Protocol

from webhook_resource.config import Settings
from webhook_resource.models import Operation, Outcome, OutcomeKind, RemoteHook, WebhookSpec
from webhook_resource.url_builder import build_url
from webhook_resource.utils.logging import get_logger

log = get_logger(__name__)

Clock = Callable[[], float]


class HooksAPI(Protocol):
    async def list_hooks(self, owner: str, repo: str) -> list[RemoteHook]: ...

    async def create_hook(self, owner: str, repo: str, body: dict[str, Any]) -> RemoteHook: ...

    async def update_hook(
        self, owner: str, repo: str, hook_id: str, body: dict[str, Any]
    ) -> RemoteHook: ...

    async def delete_hook(self, owner: str, repo: str, hook_id: str) -> None: ...


def find_existing(url: str, hooks: Iterable[RemoteHook]) -> RemoteHook | None:
    """Return the first hook whose configured URL equals ``url``.

    ``url`` must already be canonical; nothing is re-encoded here.
    """
    return next((hook for hook in hooks if hook.url == url), None)


def hook_body(spec: WebhookSpec, url: str) -> dict[str, Any]:
    """Request body for creating or updating a hook."""
    return {
        "name": "web",
        "active": True,
        "events": sorted(spec.events),
        "config": {
            "url": url,
            "content_type": spec.content_type,
            "insecure_ssl": 0,
        },
    }


def synthetic_id(clock: Clock = time.time) -> str:
    """Millisecond timestamp used as the version of a deleted (or absent) hook."""
    return str(int(clock() * 1000))


async def reconcile(
    spec: WebhookSpec,
    settings: Settings,
    client: HooksAPI,
    clock: Clock = time.time,
) -> Outcome:
    """Bring the remote hook list in line with ``spec``.

    Makes at most one list call and at most one mutating call.
    """
    # Built before any remote call so configuration errors abort early
    url = build_url(spec, settings)
    log.info(
        "webhook_location",
        endpoint=f"/repos/{spec.org}/{spec.repo}/hooks",
        target=url,
    )

    hooks = await client.list_hooks(spec.org, spec.repo)
    existing = find_existing(url, hooks)

    if spec.operation is Operation.CREATE:
        return await _reconcile_create(spec, url, existing, client)
    return await _reconcile_delete(spec, existing, client, clock)


async def _reconcile_create(
    spec: WebhookSpec,
    url: str,
    existing: RemoteHook | None,
    client: HooksAPI,
) -> Outcome:
    body = hook_body(spec, url)

    if existing is None:
        created = await client.create_hook(spec.org, spec.repo, body)
        log.info("webhook_created", hook_id=created.id, events=body["events"])
        return Outcome(OutcomeKind.CREATED, created.id)

    if existing.events != spec.events:
        updated = await client.update_hook(spec.org, spec.repo, existing.id, body)
        log.info(
            "webhook_updated",
            hook_id=updated.id,
            old_events=sorted(existing.events),
            events=body["events"],
        )
        return Outcome(OutcomeKind.UPDATED, updated.id)

    log.info("webhook_already_exists", hook_id=existing.id)
    return Outcome(OutcomeKind.UNCHANGED, existing.id)


async def _reconcile_delete(
    spec: WebhookSpec,
    existing: RemoteHook | None,
    client: HooksAPI,
    clock: Clock,
) -> Outcome:
    if existing is None:
        log.info("webhook_does_not_exist")
        return Outcome(OutcomeKind.DELETED, synthetic_id(clock))

    await client.delete_hook(spec.org, spec.repo, existing.id)
    log.info("webhook_deleted", hook_id=existing.id)
    return Outcome(OutcomeKind.DELETED, synthetic_id(clock))
