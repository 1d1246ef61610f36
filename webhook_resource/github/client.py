"""Async client for the GitHub repository hooks API."""

from __future__ import annotations

from typing import Any

import httpx

from webhook_resource.config import DEFAULT_GITHUB_API_URL
from webhook_resource.errors import RemoteError
from webhook_resource.models import RemoteHook
from webhook_resource.utils.logging import get_logger

log = get_logger(__name__)

GITHUB_API_VERSION = "2022-11-28"


class GitHubClient:
    """Thin wrapper over ``/repos/{owner}/{repo}/hooks``.

    Every failure (transport error, non-2xx status, unexpected body) is
    raised as :class:`RemoteError`. Nothing is retried.
    """

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_GITHUB_API_URL,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(
            base_url=base_url.rstrip("/"),
            timeout=timeout,
            transport=transport,
            headers={
                "Accept": "application/vnd.github+json",
                "X-GitHub-Api-Version": GITHUB_API_VERSION,
                "Authorization": f"Bearer {token}",
            },
        )

    async def __aenter__(self) -> GitHubClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def list_hooks(self, owner: str, repo: str) -> list[RemoteHook]:
        path = _hooks_path(owner, repo)
        data = await self._request("GET", path, params={"per_page": 100})
        if not isinstance(data, list):
            raise RemoteError(f"expected a list of hooks from GET {path}", "GET", path)
        return [self._to_hook(item, "GET", path) for item in data]

    async def create_hook(self, owner: str, repo: str, body: dict[str, Any]) -> RemoteHook:
        path = _hooks_path(owner, repo)
        data = await self._request("POST", path, json=body)
        return self._to_hook(data, "POST", path)

    async def update_hook(
        self, owner: str, repo: str, hook_id: str, body: dict[str, Any]
    ) -> RemoteHook:
        path = f"{_hooks_path(owner, repo)}/{hook_id}"
        data = await self._request("PATCH", path, json=body)
        return self._to_hook(data, "PATCH", path)

    async def delete_hook(self, owner: str, repo: str, hook_id: str) -> None:
        path = f"{_hooks_path(owner, repo)}/{hook_id}"
        await self._request("DELETE", path)

    async def _request(self, method: str, path: str, **kwargs: Any) -> Any:
        try:
            resp = await self._client.request(method, path, **kwargs)
            resp.raise_for_status()
        except httpx.HTTPStatusError as e:
            status = e.response.status_code
            log.error("github_request_failed", method=method, path=path, status=status)
            raise RemoteError(
                f"{method} {path} failed with HTTP {status}: {e.response.text[:200]}",
                method,
                path,
                status,
            ) from e
        except httpx.HTTPError as e:
            log.error("github_request_error", method=method, path=path, error=str(e))
            raise RemoteError(f"{method} {path} failed: {e}", method, path) from e

        log.debug("github_request", method=method, path=path, status=resp.status_code)
        if resp.status_code == 204 or not resp.content:
            return None
        try:
            return resp.json()
        except ValueError as e:
            raise RemoteError(
                f"{method} {path} returned a non-JSON body", method, path, resp.status_code
            ) from e

    @staticmethod
    def _to_hook(data: Any, method: str, path: str) -> RemoteHook:
        try:
            return RemoteHook.from_api(data)
        except (KeyError, TypeError, AttributeError) as e:
            raise RemoteError(f"unexpected hook record from {method} {path}", method, path) from e


def _hooks_path(owner: str, repo: str) -> str:
    return f"/repos/{owner}/{repo}/hooks"
