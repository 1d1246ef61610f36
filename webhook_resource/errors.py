"""Error types raised while reconciling a webhook."""

from __future__ import annotations


class WebhookResourceError(Exception):
    """Base class for every failure that aborts an invocation."""


class InputError(WebhookResourceError):
    """The stdin document or the build environment is invalid."""


class ConfigurationError(WebhookResourceError):
    """Instance variables could not be turned into a callback URL."""


class RemoteError(WebhookResourceError):
    """A GitHub API call failed."""

    def __init__(
        self,
        message: str,
        method: str = "",
        path: str = "",
        status_code: int | None = None,
    ) -> None:
        super().__init__(message)
        self.method = method
        self.path = path
        self.status_code = status_code
