"""
Unit tests for configuration resolution.

Covers required keys, domain mode exclusivity, URL list parsing and the
per-environment YAML layer.
"""

import pytest

from helper.config import Config, StackConfig, resolve_stack_config
from stacks.common.exceptions import (
    ConfigurationConflict,
    MissingConfiguration,
    StackConfigurationError,
    ValidationError
)


REQUIRED_KEYS = [
    "APP_NAME",
    "REGION_AWS",
    "VERIFICATION_SUBJECT",
    "VERIFICATION_BODY",
    "CALLBACK_URLS",
    "LOGOUT_URLS",
]


class TestResolveStackConfig:
    """Test resolution of raw environment values."""

    def test_managed_domain_resolves(self, managed_environ):
        config = resolve_stack_config(managed_environ)

        assert isinstance(config, StackConfig)
        assert config.app_name == "Shop"
        assert config.region == "us-east-1"
        assert config.domain_prefix == "shop-login"
        assert config.custom_domain is None
        assert config.certificate_arn is None
        assert config.uses_custom_domain is False
        assert config.callback_urls == ("https://a/cb",)
        assert config.logout_urls == ("https://a/out",)

    def test_custom_domain_resolves(self, custom_google_environ):
        config = resolve_stack_config(custom_google_environ)

        assert config.uses_custom_domain is True
        assert config.custom_domain == "login.shop.example"
        assert config.certificate_arn == custom_google_environ["ARN_COGNITO_CERTIFICATE"]
        assert config.domain_prefix is None
        assert config.google_client_id == "google-id"
        assert config.facebook_client_id is None

    def test_resolution_is_pure(self, custom_google_environ):
        """Identical input gives identical output and the input is untouched."""
        snapshot = dict(custom_google_environ)

        first = resolve_stack_config(custom_google_environ)
        second = resolve_stack_config(custom_google_environ)

        assert first == second
        assert custom_google_environ == snapshot

    @pytest.mark.parametrize("key", REQUIRED_KEYS)
    def test_missing_key_is_named(self, managed_environ, key):
        del managed_environ[key]

        with pytest.raises(MissingConfiguration) as exc_info:
            resolve_stack_config(managed_environ)

        assert exc_info.value.config_key == key
        assert key in str(exc_info.value)

    @pytest.mark.parametrize("key", REQUIRED_KEYS)
    def test_empty_value_counts_as_missing(self, managed_environ, key):
        managed_environ[key] = ""

        with pytest.raises(MissingConfiguration) as exc_info:
            resolve_stack_config(managed_environ)

        assert exc_info.value.config_key == key

    def test_first_missing_key_in_order_is_reported(self, managed_environ):
        del managed_environ["LOGOUT_URLS"]
        del managed_environ["REGION_AWS"]

        with pytest.raises(MissingConfiguration) as exc_info:
            resolve_stack_config(managed_environ)

        assert exc_info.value.config_key == "REGION_AWS"

    def test_url_lists_are_split_without_trimming(self, managed_environ):
        managed_environ["CALLBACK_URLS"] = "https://a/cb, https://b/cb"
        managed_environ["LOGOUT_URLS"] = "https://a/out,https://a/out"

        config = resolve_stack_config(managed_environ)

        assert config.callback_urls == ("https://a/cb", " https://b/cb")
        assert config.logout_urls == ("https://a/out", "https://a/out")

    def test_both_domain_modes_conflict(self, custom_google_environ):
        custom_google_environ["COGNITO_DOMAIN"] = "shop-login"

        with pytest.raises(ConfigurationConflict):
            resolve_stack_config(custom_google_environ)

    def test_no_domain_mode_conflicts(self, managed_environ):
        del managed_environ["COGNITO_DOMAIN"]

        with pytest.raises(ConfigurationConflict) as exc_info:
            resolve_stack_config(managed_environ)

        assert isinstance(exc_info.value, StackConfigurationError)

    def test_custom_domain_requires_certificate(self, custom_google_environ):
        del custom_google_environ["ARN_COGNITO_CERTIFICATE"]

        with pytest.raises(MissingConfiguration) as exc_info:
            resolve_stack_config(custom_google_environ)

        assert exc_info.value.config_key == "ARN_COGNITO_CERTIFICATE"

    def test_certificate_without_domain_is_missing_domain(self, custom_google_environ):
        del custom_google_environ["COGNITO_CUSTOM_DOMAIN"]

        with pytest.raises(MissingConfiguration) as exc_info:
            resolve_stack_config(custom_google_environ)

        assert exc_info.value.config_key == "COGNITO_CUSTOM_DOMAIN"

    def test_certificate_arn_must_be_acm(self, custom_google_environ):
        custom_google_environ["ARN_COGNITO_CERTIFICATE"] = (
            "arn:aws:iam::123456789012:server-certificate/login"
        )

        with pytest.raises(ValidationError) as exc_info:
            resolve_stack_config(custom_google_environ)

        assert exc_info.value.parameter_name == "arn"

    def test_invalid_app_name_rejected(self, managed_environ):
        managed_environ["APP_NAME"] = "my shop!"

        with pytest.raises(ValidationError):
            resolve_stack_config(managed_environ)

    def test_oidc_defaults(self, managed_environ):
        config = resolve_stack_config(managed_environ)

        assert config.oidc_provider_name == "Microsoft"
        assert config.oidc_issuer_url == "https://login.microsoftonline.com/common/v2.0"

    def test_oidc_issuer_must_be_https(self, managed_environ):
        managed_environ["OIDC_ISSUER_URL"] = "http://idp.example"

        with pytest.raises(ValidationError) as exc_info:
            resolve_stack_config(managed_environ)

        assert exc_info.value.parameter_name == "OIDC_ISSUER_URL"


class TestConfig:
    """Test the Config wrapper around the environment and YAML layer."""

    def test_missing_yaml_file_gives_empty_layer(self, make_config, managed_environ):
        config = make_config(managed_environ)

        assert config.data == {}
        assert config.get_branding_settings() == {}
        assert config.get_branding_asset_entries() is None

    def test_yaml_branding_layer_is_loaded(self, make_config, managed_environ):
        config = make_config(managed_environ, yaml_text=(
            "Branding:\n"
            "  Settings:\n"
            "    categories:\n"
            "      global:\n"
            "        colorSchemeMode: DARK\n"
        ))

        assert config.get_branding_settings() == {
            "categories": {"global": {"colorSchemeMode": "DARK"}}
        }
        assert config.get("Branding")["Settings"]["categories"]["global"]["colorSchemeMode"] == "DARK"

    def test_non_mapping_yaml_rejected(self, make_config, managed_environ):
        with pytest.raises(ValidationError):
            make_config(managed_environ, yaml_text="- just\n- a list\n")

    def test_assets_must_be_a_list(self, make_config, managed_environ):
        config = make_config(managed_environ, yaml_text=(
            "Branding:\n"
            "  Assets:\n"
            "    Category: FORM_LOGO\n"
        ))

        with pytest.raises(ValidationError):
            config.get_branding_asset_entries()

    def test_environment_is_snapshotted(self, tmp_path, managed_environ):
        config = Config("test", environ=managed_environ, config_dir=str(tmp_path))
        managed_environ["APP_NAME"] = "Changed"

        assert config.stack_config().app_name == "Shop"

    def test_config_path_uses_environment_name(self, tmp_path, managed_environ):
        config = Config("staging", environ=managed_environ, config_dir=str(tmp_path / "config"))

        assert config.environment == "staging"
        assert config.config_path == tmp_path / "config" / "staging.yaml"
        assert config.base_dir == tmp_path
