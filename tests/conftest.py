"""Shared fixtures."""

import logging

import pytest

from webhook_resource.config import Settings
from webhook_resource.models import Operation, WebhookSpec
from webhook_resource.utils.logging import setup_logging

CONCOURSE_ENV = (
    "ATC_EXTERNAL_URL",
    "BUILD_TEAM_NAME",
    "BUILD_PIPELINE_NAME",
    "BUILD_PIPELINE_INSTANCE_VARS",
)


@pytest.fixture(scope="session", autouse=True)
def _logging():
    setup_logging("DEBUG")


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch):
    for name in CONCOURSE_ENV:
        monkeypatch.delenv(name, raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


@pytest.fixture
def settings():
    return Settings(
        external_url="https://ci.example.com",
        team_name="main",
        pipeline_name="deploy",
    )


@pytest.fixture
def make_spec():
    def _make(**overrides) -> WebhookSpec:
        fields = {
            "org": "o",
            "repo": "r",
            "operation": Operation.CREATE,
            "resource_name": "res",
            "webhook_token": "wt",
            "github_token": "t",
            "events": frozenset({"push"}),
        }
        fields.update(overrides)
        return WebhookSpec(**fields)

    return _make
