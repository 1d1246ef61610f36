"""Callback URL construction.

The URL doubles as the webhook's identity: an existing GitHub hook is the
"same" webhook iff its configured URL equals the one built here.
"""

from __future__ import annotations

import json
import math
from typing import Any, Mapping
from urllib.parse import quote

from webhook_resource.config import Settings
from webhook_resource.errors import ConfigurationError
from webhook_resource.models import WebhookSpec

# encodeURI leaves the URI reserved set and these marks untouched
_URI_SAFE = ";,/?:@&=+$#-_.!~*'()"

_SCALARS = (str, int, float, bool, type(None))


def encode_uri(value: str) -> str:
    return quote(value, safe=_URI_SAFE)


def _render_number(value: float) -> str:
    """Render a float as JavaScript's ``String(number)`` does."""
    if math.isnan(value):
        return "NaN"
    if math.isinf(value):
        return "Infinity" if value > 0 else "-Infinity"
    if value.is_integer() and abs(value) < 1e21:
        return str(int(value))
    text = repr(value)
    if "e" not in text:
        return text
    mantissa, _, exp_text = text.partition("e")
    exponent = int(exp_text)
    if -7 < exponent < 0:
        sign = "-" if mantissa.startswith("-") else ""
        digits = mantissa.lstrip("-").replace(".", "")
        return f"{sign}0.{'0' * (-exponent - 1)}{digits}"
    return f"{mantissa}e{'+' if exponent > 0 else '-'}{abs(exponent)}"


def _render_scalar(value: Any) -> str:
    """Render a JSON scalar the way it reads in JSON text."""
    if isinstance(value, str):
        return value
    if isinstance(value, float):
        return _render_number(value)
    return json.dumps(value)


def _var_fragments(variables: Mapping[str, Any], origin: str) -> str:
    fragments = []
    for key, value in variables.items():
        if not isinstance(value, _SCALARS):
            raise ConfigurationError(
                f"{origin} instance variable {key!r} must be a scalar, got {type(value).__name__}"
            )
        fragments.append(f'&vars.{key}="{_render_scalar(value)}"')
    return "".join(fragments)


def _reject_constant(name: str) -> Any:
    raise ValueError(f"{name} is not valid JSON")


def _parse_process_vars(raw: str) -> Mapping[str, Any]:
    try:
        parsed = json.loads(raw, parse_constant=_reject_constant)
    except ValueError as e:
        raise ConfigurationError(f"BUILD_PIPELINE_INSTANCE_VARS is not valid JSON: {e}") from e
    if not isinstance(parsed, dict):
        raise ConfigurationError("BUILD_PIPELINE_INSTANCE_VARS must be a JSON object")
    return parsed


def build_instance_variables(spec: WebhookSpec, settings: Settings) -> str:
    """Build the ``&vars.<key>="<value>"`` query fragments.

    Process-wide variables come first, then the per-call ones; within each
    group the mapping's own key order is kept. For the process-wide JSON
    that is document order, so integer-like keys are not hoisted to the front
    the way JavaScript's ``Object.entries`` would.
    """
    fragments = ""
    if settings.pipeline_instance_vars:
        fragments += _var_fragments(_parse_process_vars(settings.pipeline_instance_vars), "pipeline")
    if spec.instance_vars is not None:
        if not isinstance(spec.instance_vars, Mapping):
            raise ConfigurationError("pipeline_instance_vars must be a mapping")
        fragments += _var_fragments(spec.instance_vars, "per-call")
    return fragments


def build_url(spec: WebhookSpec, settings: Settings) -> str:
    """Build the canonical, URI-encoded Concourse webhook callback URL."""
    instance_vars = build_instance_variables(spec, settings)
    base_url = spec.payload_base_url or settings.external_url
    pipeline = spec.pipeline or settings.pipeline_name

    url = (
        f"{base_url}/api/v1/teams/{settings.team_name}/pipelines/{pipeline}"
        f"/resources/{spec.resource_name}/check/webhook"
        f"?webhook_token={spec.webhook_token}{instance_vars}"
    )
    return encode_uri(url)
