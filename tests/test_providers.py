"""Unit tests for identity provider selection."""

import logging

import pytest

from helper.config import resolve_stack_config
from stacks.common.exceptions import ValidationError
from stacks.federated_identity.providers import (
    FACEBOOK_ATTRIBUTE_MAPPING,
    GOOGLE_ATTRIBUTE_MAPPING,
    NATIVE_DIRECTORY,
    ProviderKind,
    ProviderSelector,
    ProviderSpec
)


class TestProviderSelector:
    """Test which providers are enabled for a configuration."""

    def test_no_credentials_selects_nothing(self, managed_config):
        assert ProviderSelector(managed_config).select() == []

    def test_catalog_order_is_fixed(self, managed_config):
        catalog = ProviderSelector(managed_config).catalog()

        assert [p.kind for p in catalog] == [
            ProviderKind.GOOGLE,
            ProviderKind.FACEBOOK,
            ProviderKind.OIDC,
        ]
        assert not any(p.enabled for p in catalog)

    def test_inactive_providers_carry_no_credentials(self, managed_config):
        for provider in ProviderSelector(managed_config).catalog():
            assert provider.client_id is None
            assert provider.client_secret is None

    def test_google_only(self, custom_google_config):
        selected = ProviderSelector(custom_google_config).select()

        assert len(selected) == 1
        google = selected[0]
        assert google.kind == ProviderKind.GOOGLE
        assert google.provider_name == "Google"
        assert google.client_id == "google-id"
        assert google.client_secret == "google-secret"
        assert google.scopes == ("email", "profile")
        assert google.attribute_mapping == GOOGLE_ATTRIBUTE_MAPPING

    def test_all_providers_in_catalog_order(self, managed_environ):
        managed_environ.update({
            "GOOGLE_CLIENT_ID": "g", "GOOGLE_CLIENT_SECRET": "gs",
            "FACEBOOK_CLIENT_ID": "f", "FACEBOOK_CLIENT_SECRET": "fs",
            "OIDC_CLIENT_ID": "o", "OIDC_CLIENT_SECRET": "os",
        })

        selected = ProviderSelector(resolve_stack_config(managed_environ)).select()

        assert [p.provider_name for p in selected] == ["Google", "Facebook", "Microsoft"]

    def test_facebook_maps_first_and_last_name(self, managed_environ):
        managed_environ.update({"FACEBOOK_CLIENT_ID": "f", "FACEBOOK_CLIENT_SECRET": "fs"})

        facebook, = ProviderSelector(resolve_stack_config(managed_environ)).select()

        assert facebook.scopes == ("public_profile", "email")
        assert facebook.attribute_mapping == FACEBOOK_ATTRIBUTE_MAPPING
        assert facebook.attribute_mapping["first_name"] == "given_name"
        assert facebook.attribute_mapping["last_name"] == "family_name"

    def test_oidc_uses_configured_name_and_issuer(self, managed_environ):
        managed_environ.update({
            "OIDC_CLIENT_ID": "o",
            "OIDC_CLIENT_SECRET": "os",
            "OIDC_PROVIDER_NAME": "Okta",
            "OIDC_ISSUER_URL": "https://example.okta.com",
        })

        oidc, = ProviderSelector(resolve_stack_config(managed_environ)).select()

        assert oidc.kind == ProviderKind.OIDC
        assert oidc.provider_name == "Okta"
        assert oidc.issuer_url == "https://example.okta.com"
        assert oidc.to_dict()["issuer_url"] == "https://example.okta.com"

    def test_partial_credentials_leave_provider_inactive(self, managed_environ, caplog):
        managed_environ["GOOGLE_CLIENT_ID"] = "g"

        with caplog.at_level(logging.WARNING):
            selected = ProviderSelector(resolve_stack_config(managed_environ)).select()

        assert selected == []
        assert "GOOGLE_CLIENT_SECRET" in caplog.text


class TestProviderSpec:
    """Test provider spec invariants."""

    def test_native_directory_is_not_external(self):
        assert NATIVE_DIRECTORY.kind == ProviderKind.COGNITO
        assert NATIVE_DIRECTORY.provider_name == "COGNITO"
        assert NATIVE_DIRECTORY.is_external is False

    def test_mapping_to_undeclared_attribute_rejected(self):
        with pytest.raises(ValidationError) as exc_info:
            ProviderSpec(
                kind=ProviderKind.GOOGLE,
                provider_name="Google",
                attribute_mapping={"picture": "picture"}
            )

        assert exc_info.value.parameter_name == "attribute_mapping"

    def test_to_dict_omits_issuer_for_social_providers(self, custom_google_config):
        google, = ProviderSelector(custom_google_config).select()

        data = google.to_dict()

        assert data["kind"] == "GOOGLE"
        assert data["scopes"] == ["email", "profile"]
        assert "issuer_url" not in data
