"""Tests for callback URL construction."""

import pytest

from webhook_resource.errors import ConfigurationError
from webhook_resource.url_builder import build_instance_variables, build_url, encode_uri

BASE = "https://ci.example.com/api/v1/teams/main/pipelines/deploy/resources/res/check/webhook"


class TestBuildUrl:
    def test_defaults_from_settings(self, settings, make_spec):
        assert build_url(make_spec(), settings) == f"{BASE}?webhook_token=wt"

    def test_payload_base_url_override(self, settings, make_spec):
        url = build_url(make_spec(payload_base_url="https://hooks.example.org"), settings)
        assert url.startswith("https://hooks.example.org/api/v1/teams/main/pipelines/deploy/")

    def test_pipeline_override(self, settings, make_spec):
        url = build_url(make_spec(pipeline="release"), settings)
        assert "/pipelines/release/resources/res/" in url

    def test_deterministic(self, settings, make_spec):
        spec = make_spec(instance_vars={"env": "prod"})
        assert build_url(spec, settings) == build_url(spec, settings)

    def test_reserved_characters_kept(self, settings, make_spec):
        url = build_url(make_spec(webhook_token="a+b"), settings)
        assert url.endswith("?webhook_token=a+b")

    def test_unsafe_characters_encoded(self, settings, make_spec):
        url = build_url(make_spec(resource_name="my repo", webhook_token="100%"), settings)
        assert "/resources/my%20repo/" in url
        assert url.endswith("webhook_token=100%25")

    def test_process_vars_before_call_vars(self, settings, make_spec):
        settings = settings.model_copy(
            update={"pipeline_instance_vars": '{\n  "branch": "feature/x",\n  "n": 1\n}'}
        )
        url = build_url(make_spec(instance_vars={"env": "prod"}), settings)
        assert url == (
            f"{BASE}?webhook_token=wt"
            "&vars.branch=%22feature/x%22"
            "&vars.n=%221%22"
            "&vars.env=%22prod%22"
        )

    def test_malformed_process_vars(self, settings, make_spec):
        settings = settings.model_copy(update={"pipeline_instance_vars": "{bad"})
        with pytest.raises(ConfigurationError):
            build_url(make_spec(), settings)

    def test_process_vars_not_an_object(self, settings, make_spec):
        settings = settings.model_copy(update={"pipeline_instance_vars": "[1, 2]"})
        with pytest.raises(ConfigurationError):
            build_url(make_spec(), settings)

    def test_non_scalar_call_var(self, settings, make_spec):
        with pytest.raises(ConfigurationError):
            build_url(make_spec(instance_vars={"nested": {"a": 1}}), settings)

    @pytest.mark.parametrize("constant", ["NaN", "Infinity", "-Infinity"])
    def test_non_json_constants_in_process_vars(self, settings, make_spec, constant):
        settings = settings.model_copy(update={"pipeline_instance_vars": f'{{"a": {constant}}}'})
        with pytest.raises(ConfigurationError):
            build_url(make_spec(), settings)

    @pytest.mark.parametrize("instance_vars", ["{bad", ["a"], 3])
    def test_call_vars_not_a_mapping(self, settings, make_spec, instance_vars):
        with pytest.raises(ConfigurationError):
            build_url(make_spec(instance_vars=instance_vars), settings)


class TestInjective:
    @pytest.mark.parametrize(
        "spec_change, settings_change",
        [
            ({"payload_base_url": "https://other.example.com"}, {}),
            ({"pipeline": "other"}, {}),
            ({"resource_name": "other"}, {}),
            ({"webhook_token": "other"}, {}),
            ({}, {"team_name": "other"}),
            ({}, {"external_url": "https://other.example.com"}),
            ({"instance_vars": {"env": "staging"}}, {}),
            ({}, {"pipeline_instance_vars": '{"env": "staging"}'}),
        ],
    )
    def test_changing_any_input_changes_url(
        self, settings, make_spec, spec_change, settings_change
    ):
        baseline = build_url(
            make_spec(instance_vars={"env": "prod"}),
            settings.model_copy(update={"pipeline_instance_vars": '{"env": "prod"}'}),
        )
        spec = make_spec(**{"instance_vars": {"env": "prod"}, **spec_change})
        changed_settings = settings.model_copy(
            update={"pipeline_instance_vars": '{"env": "prod"}', **settings_change}
        )
        assert build_url(spec, changed_settings) != baseline


class TestInstanceVariables:
    def test_none(self, settings, make_spec):
        assert build_instance_variables(make_spec(), settings) == ""

    def test_scalars_render_as_json_text(self, settings, make_spec):
        spec = make_spec(instance_vars={"a": True, "b": None, "c": 2.0, "d": 1.5})
        assert build_instance_variables(spec, settings) == (
            '&vars.a="true"&vars.b="null"&vars.c="2"&vars.d="1.5"'
        )

    @pytest.mark.parametrize(
        "value, rendered",
        [
            (1e-07, "1e-7"),
            (1e-05, "0.00001"),
            (1.5e-06, "0.0000015"),
            (-2.5e-08, "-2.5e-8"),
            (1e21, "1e+21"),
            (1e20, "100000000000000000000"),
            (0.1, "0.1"),
        ],
    )
    def test_floats_render_like_javascript(self, settings, make_spec, value, rendered):
        spec = make_spec(instance_vars={"x": value})
        assert build_instance_variables(spec, settings) == f'&vars.x="{rendered}"'

    def test_empty_process_setting_ignored(self, settings, make_spec):
        settings = settings.model_copy(update={"pipeline_instance_vars": ""})
        assert build_instance_variables(make_spec(), settings) == ""


def test_encode_uri_matches_encode_uri_semantics():
    assert encode_uri('a b"c') == "a%20b%22c"
    assert encode_uri("https://h/p?q=1&r=2#f") == "https://h/p?q=1&r=2#f"
    assert encode_uri("é") == "%C3%A9"
