"""webhook-resource entry point: the Concourse ``check``, ``in`` and ``out`` scripts."""

from __future__ import annotations

import asyncio
import json
import sys
from typing import Any, NoReturn

import click

from webhook_resource.config import Settings, load_settings
from webhook_resource.errors import InputError, WebhookResourceError
from webhook_resource.github import GitHubClient
from webhook_resource.models import VersionToken, WebhookSpec
from webhook_resource.reconciler import reconcile
from webhook_resource.utils.logging import get_logger, setup_logging
from webhook_resource.validation import build_spec, parse_request, parse_version_request

log = get_logger(__name__)


def _read_stdin() -> str:
    return click.get_text_stream("stdin").read()


def _emit(document: Any) -> None:
    """Write the one JSON document Concourse reads from stdout."""
    click.echo(json.dumps(document, indent=2))


def _fail(error: WebhookResourceError) -> NoReturn:
    log.error("resource_failed", error_type=type(error).__name__, error=str(error))
    sys.exit(1)


async def run_out(spec: WebhookSpec, settings: Settings) -> VersionToken:
    async with GitHubClient(
        spec.github_token,
        base_url=settings.github_api_url,
        timeout=settings.timeout,
    ) as client:
        outcome = await reconcile(spec, settings, client)
    log.info("reconciled", outcome=outcome.kind.value, hook_id=outcome.hook_id)
    return outcome.to_version()


@click.group()
@click.option("--log-level", default=None, help="Log level (DEBUG, INFO, WARNING, ERROR)")
@click.pass_context
def cli(ctx: click.Context, log_level: str | None) -> None:
    """Keep a GitHub repository webhook pointed at a Concourse resource."""
    try:
        settings = load_settings()
    except InputError as e:
        setup_logging(level=log_level or "INFO")
        _fail(e)
    setup_logging(level=log_level or settings.log_level, json_output=settings.log_json)
    ctx.obj = settings


@cli.command("out")
@click.argument("source_dir", required=False)
@click.pass_obj
def out_command(settings: Settings, source_dir: str | None) -> None:
    """Create, update or delete the webhook described on stdin."""
    raw = _read_stdin()
    if not raw.strip():
        log.info("empty_input", message="STDIN ended with empty input. Exiting.")
        return

    try:
        spec = build_spec(parse_request(raw), settings)
        version = asyncio.run(run_out(spec, settings))
    except WebhookResourceError as e:
        _fail(e)

    _emit({"version": version.to_dict()})


@cli.command("check")
def check_command() -> None:
    """Report the current version; webhooks have no history to check."""
    try:
        request = parse_version_request(_read_stdin())
    except WebhookResourceError as e:
        _fail(e)
    _emit([request.version] if request.version else [])


@cli.command("in")
@click.argument("dest_dir")
def in_command(dest_dir: str) -> None:
    """Echo the requested version back; there is nothing to fetch."""
    try:
        request = parse_version_request(_read_stdin())
        if not request.version:
            raise InputError("in requires a version")
    except WebhookResourceError as e:
        _fail(e)
    _emit({"version": request.version, "metadata": []})


if __name__ == "__main__":
    cli()
