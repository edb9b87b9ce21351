"""Shared fixtures for the federated identity tests."""

import pytest

from helper.config import Config, resolve_stack_config


CERTIFICATE_ARN = (
    "arn:aws:acm:us-east-1:123456789012:certificate/"
    "0f1e2d3c-4b5a-6978-8a9b-0c1d2e3f4a5b"
)


@pytest.fixture
def managed_environ():
    """Minimal environment: managed domain prefix and no social providers."""
    return {
        "APP_NAME": "Shop",
        "REGION_AWS": "us-east-1",
        "VERIFICATION_SUBJECT": "Verify your account",
        "VERIFICATION_BODY": "Your code is {####}",
        "COGNITO_DOMAIN": "shop-login",
        "CALLBACK_URLS": "https://a/cb",
        "LOGOUT_URLS": "https://a/out",
    }


@pytest.fixture
def custom_google_environ():
    """Custom domain with an ACM certificate and Google credentials only."""
    return {
        "APP_NAME": "Shop",
        "REGION_AWS": "us-east-1",
        "VERIFICATION_SUBJECT": "Verify your account",
        "VERIFICATION_BODY": "Your code is {####}",
        "COGNITO_CUSTOM_DOMAIN": "login.shop.example",
        "ARN_COGNITO_CERTIFICATE": CERTIFICATE_ARN,
        "GOOGLE_CLIENT_ID": "google-id",
        "GOOGLE_CLIENT_SECRET": "google-secret",
        "CALLBACK_URLS": "https://shop.example/cb,https://localhost/cb",
        "LOGOUT_URLS": "https://shop.example/out",
    }


@pytest.fixture
def managed_config(managed_environ):
    return resolve_stack_config(managed_environ)


@pytest.fixture
def custom_google_config(custom_google_environ):
    return resolve_stack_config(custom_google_environ)


@pytest.fixture
def make_config(tmp_path):
    """Build a Config reading its YAML layer from an isolated directory."""
    config_dir = tmp_path / "config"

    def _make(environ, yaml_text=None, environment="test"):
        if yaml_text is not None:
            config_dir.mkdir(exist_ok=True)
            (config_dir / f"{environment}.yaml").write_text(yaml_text, encoding="utf-8")
        return Config(environment, environ=environ, config_dir=str(config_dir))

    return _make
