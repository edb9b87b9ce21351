import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional, Tuple

import yaml
from yaml.loader import SafeLoader

from stacks.common.constants import (
    DEFAULT_OIDC_ISSUER_URL,
    DEFAULT_OIDC_PROVIDER_NAME,
    ENV_APP_NAME,
    ENV_CALLBACK_URLS,
    ENV_CERTIFICATE_ARN,
    ENV_CUSTOM_DOMAIN,
    ENV_DOMAIN_PREFIX,
    ENV_FACEBOOK_CLIENT_ID,
    ENV_FACEBOOK_CLIENT_SECRET,
    ENV_GOOGLE_CLIENT_ID,
    ENV_GOOGLE_CLIENT_SECRET,
    ENV_LOGOUT_URLS,
    ENV_OIDC_CLIENT_ID,
    ENV_OIDC_CLIENT_SECRET,
    ENV_OIDC_ISSUER_URL,
    ENV_OIDC_PROVIDER_NAME,
    ENV_REGION,
    ENV_VERIFICATION_BODY,
    ENV_VERIFICATION_SUBJECT,
    URL_LIST_SEPARATOR,
)
from stacks.common.exceptions import ConfigurationConflict, ValidationError
from stacks.common.validators import AWSResourceValidator, ConfigValidator

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StackConfig:
    """
    Validated, immutable record of every externally supplied value.

    Optional fields are None when the corresponding feature is not
    configured. URL lists keep the exact order and spelling of the input.
    """
    app_name: str
    region: str
    verification_subject: str
    verification_body: str
    callback_urls: Tuple[str, ...]
    logout_urls: Tuple[str, ...]

    # Domain: custom domain + certificate, or a managed prefix
    custom_domain: Optional[str] = None
    certificate_arn: Optional[str] = None
    domain_prefix: Optional[str] = None

    # Federated identity providers
    google_client_id: Optional[str] = None
    google_client_secret: Optional[str] = None
    facebook_client_id: Optional[str] = None
    facebook_client_secret: Optional[str] = None
    oidc_client_id: Optional[str] = None
    oidc_client_secret: Optional[str] = None
    oidc_issuer_url: str = DEFAULT_OIDC_ISSUER_URL
    oidc_provider_name: str = DEFAULT_OIDC_PROVIDER_NAME

    @property
    def uses_custom_domain(self) -> bool:
        return self.custom_domain is not None


def _optional(environ: Mapping[str, str], key: str) -> Optional[str]:
    value = environ.get(key)
    return value if ConfigValidator.is_present(value) else None


def _split_urls(raw: str) -> Tuple[str, ...]:
    # No trimming or deduplication: callers supply well-formed lists
    return tuple(raw.split(URL_LIST_SEPARATOR))


def resolve_stack_config(environ: Mapping[str, str]) -> StackConfig:
    """
    Resolve raw environment values into a StackConfig.

    Required keys are checked in a fixed order and resolution stops at the
    first one that is absent or empty.

    Args:
        environ: Mapping from environment variable name to raw string

    Returns:
        The validated StackConfig

    Raises:
        MissingConfiguration: If a required key is absent
        ConfigurationConflict: If both or neither domain modes are configured
        ValidationError: If a present value has an invalid format
    """
    ConfigValidator.validate_required_config(environ, [
        ENV_APP_NAME,
        ENV_REGION,
        ENV_VERIFICATION_SUBJECT,
        ENV_VERIFICATION_BODY,
    ])

    custom_domain = _optional(environ, ENV_CUSTOM_DOMAIN)
    certificate_arn = _optional(environ, ENV_CERTIFICATE_ARN)
    domain_prefix = _optional(environ, ENV_DOMAIN_PREFIX)
    wants_custom_domain = custom_domain is not None or certificate_arn is not None

    if wants_custom_domain and domain_prefix is not None:
        raise ConfigurationConflict(
            f"Custom domain ({ENV_CUSTOM_DOMAIN}, {ENV_CERTIFICATE_ARN}) and managed "
            f"domain ({ENV_DOMAIN_PREFIX}) are mutually exclusive; configure only one",
            config_key=ENV_DOMAIN_PREFIX
        )
    if not wants_custom_domain and domain_prefix is None:
        raise ConfigurationConflict(
            f"No hosted domain configured: set {ENV_CUSTOM_DOMAIN} and "
            f"{ENV_CERTIFICATE_ARN}, or {ENV_DOMAIN_PREFIX}",
            config_key=ENV_CUSTOM_DOMAIN
        )
    if wants_custom_domain:
        ConfigValidator.validate_required_config(environ, [ENV_CUSTOM_DOMAIN, ENV_CERTIFICATE_ARN])

    ConfigValidator.validate_required_config(environ, [ENV_CALLBACK_URLS, ENV_LOGOUT_URLS])

    app_name = environ[ENV_APP_NAME]
    ConfigValidator.validate_resource_name(app_name)
    if certificate_arn is not None:
        AWSResourceValidator.validate_arn(certificate_arn, service="acm")

    oidc_issuer_url = _optional(environ, ENV_OIDC_ISSUER_URL) or DEFAULT_OIDC_ISSUER_URL
    ConfigValidator.validate_https_url(oidc_issuer_url, parameter_name=ENV_OIDC_ISSUER_URL)

    return StackConfig(
        app_name=app_name,
        region=environ[ENV_REGION],
        verification_subject=environ[ENV_VERIFICATION_SUBJECT],
        verification_body=environ[ENV_VERIFICATION_BODY],
        callback_urls=_split_urls(environ[ENV_CALLBACK_URLS]),
        logout_urls=_split_urls(environ[ENV_LOGOUT_URLS]),
        custom_domain=custom_domain,
        certificate_arn=certificate_arn,
        domain_prefix=domain_prefix,
        google_client_id=_optional(environ, ENV_GOOGLE_CLIENT_ID),
        google_client_secret=_optional(environ, ENV_GOOGLE_CLIENT_SECRET),
        facebook_client_id=_optional(environ, ENV_FACEBOOK_CLIENT_ID),
        facebook_client_secret=_optional(environ, ENV_FACEBOOK_CLIENT_SECRET),
        oidc_client_id=_optional(environ, ENV_OIDC_CLIENT_ID),
        oidc_client_secret=_optional(environ, ENV_OIDC_CLIENT_SECRET),
        oidc_issuer_url=oidc_issuer_url,
        oidc_provider_name=_optional(environ, ENV_OIDC_PROVIDER_NAME) or DEFAULT_OIDC_PROVIDER_NAME,
    )


class Config:

    _environment = 'development'
    data: Dict[str, Any] = {}

    def __init__(self,
                 environment: str,
                 environ: Optional[Mapping[str, str]] = None,
                 config_dir: str = 'config') -> None:
        self._environment = environment
        # Snapshot so later changes to os.environ cannot leak into this build
        self._environ = dict(os.environ if environ is None else environ)
        self._config_dir = Path(config_dir)
        self.load()

    @property
    def environment(self) -> str:
        return self._environment

    @property
    def config_path(self) -> Path:
        return self._config_dir / f'{self._environment}.yaml'

    @property
    def base_dir(self) -> Path:
        """Directory that relative paths in the YAML file are resolved against."""
        return self._config_dir.parent

    def load(self) -> dict:
        path = self.config_path
        if not path.exists():
            logger.info(f"No configuration file at {path}; using built-in branding defaults")
            self.data = {}
            return self.data

        with open(path, encoding='utf-8') as f:
            data = yaml.load(f, Loader=SafeLoader) or {}

        if not isinstance(data, dict):
            raise ValidationError(
                f"Configuration file {path} must contain a mapping at the top level",
                parameter_name="config_file",
                provided_value=str(path)
            )
        self.data = data
        return self.data

    def get(self, key):
        return self.data[key]

    def stack_config(self) -> StackConfig:
        """Resolve the environment snapshot into a StackConfig."""
        return resolve_stack_config(self._environ)

    def get_branding_config(self) -> Dict[str, Any]:
        """Get branding configuration section."""
        return self.data.get('Branding') or {}

    def get_branding_settings(self) -> Dict[str, Any]:
        """Get the per-deployment branding settings layer (may be empty)."""
        settings = self.get_branding_config().get('Settings') or {}
        if not isinstance(settings, dict):
            raise ValidationError(
                "Branding.Settings must be a mapping",
                parameter_name="Branding.Settings",
                provided_value=str(type(settings))
            )
        return settings

    def get_branding_asset_entries(self) -> Optional[List[Dict[str, Any]]]:
        """
        Get the branding asset entries, or None when the bundled defaults apply.

        Assets are supplied wholesale: a configured list replaces the defaults.
        """
        entries = self.get_branding_config().get('Assets')
        if entries is None:
            return None
        if not isinstance(entries, list):
            raise ValidationError(
                "Branding.Assets must be a list",
                parameter_name="Branding.Assets",
                provided_value=str(type(entries))
            )
        return entries
