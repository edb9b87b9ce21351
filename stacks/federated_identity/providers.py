"""
Federated identity provider selection.

Each supported provider kind carries a fixed scope list and attribute
mapping. A provider is enabled only when all of its credentials are
configured; providers without credentials stay in the catalog as inactive
entries so enabling one is a configuration change.
"""

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

from helper.config import StackConfig
from ..common.constants import (
    COGNITO_PROVIDER_NAME,
    DIRECTORY_STANDARD_ATTRIBUTES,
    ENV_FACEBOOK_CLIENT_ID,
    ENV_FACEBOOK_CLIENT_SECRET,
    ENV_GOOGLE_CLIENT_ID,
    ENV_GOOGLE_CLIENT_SECRET,
    ENV_OIDC_CLIENT_ID,
    ENV_OIDC_CLIENT_SECRET,
)
from ..common.exceptions import ValidationError

logger = logging.getLogger(__name__)


class ProviderKind(str, Enum):
    """Supported sign-in source kinds."""
    COGNITO = "COGNITO"
    GOOGLE = "GOOGLE"
    FACEBOOK = "FACEBOOK"
    OIDC = "OIDC"


# External claim name -> directory standard attribute
GOOGLE_ATTRIBUTE_MAPPING = {
    "email": "email",
    "given_name": "given_name",
    "family_name": "family_name",
    "email_verified": "email_verified",
}
FACEBOOK_ATTRIBUTE_MAPPING = {
    "email": "email",
    "first_name": "given_name",
    "last_name": "family_name",
}
OIDC_ATTRIBUTE_MAPPING = {
    "email": "email",
    "given_name": "given_name",
    "family_name": "family_name",
}

GOOGLE_SCOPES = ("email", "profile")
FACEBOOK_SCOPES = ("public_profile", "email")
OIDC_SCOPES = ("openid", "email", "profile")


@dataclass(frozen=True)
class ProviderSpec:
    """
    A sign-in source for the app client.

    The kind tag decides which credential fields are meaningful: GOOGLE and
    FACEBOOK use client_id/client_secret, OIDC additionally uses issuer_url,
    and COGNITO (the native directory) uses none.
    """
    kind: ProviderKind
    provider_name: str
    client_id: Optional[str] = None
    client_secret: Optional[str] = None
    scopes: Tuple[str, ...] = ()
    attribute_mapping: Dict[str, str] = field(default_factory=dict)
    issuer_url: Optional[str] = None
    enabled: bool = True

    def __post_init__(self):
        unknown = sorted(
            set(self.attribute_mapping.values()) - set(DIRECTORY_STANDARD_ATTRIBUTES)
        )
        if unknown:
            raise ValidationError(
                f"Attribute mapping for {self.provider_name} targets undeclared "
                f"standard attributes: {', '.join(unknown)}",
                parameter_name="attribute_mapping",
                provided_value=str(self.attribute_mapping)
            )

    @property
    def is_external(self) -> bool:
        return self.kind != ProviderKind.COGNITO

    def to_dict(self) -> Dict[str, object]:
        """Render the spec as plain data for the resource graph."""
        data = {
            "kind": self.kind.value,
            "provider_name": self.provider_name,
            "client_id": self.client_id,
            "client_secret": self.client_secret,
            "scopes": list(self.scopes),
            "attribute_mapping": dict(self.attribute_mapping),
        }
        if self.kind == ProviderKind.OIDC:
            data["issuer_url"] = self.issuer_url
        return data


NATIVE_DIRECTORY = ProviderSpec(kind=ProviderKind.COGNITO, provider_name=COGNITO_PROVIDER_NAME)


class ProviderSelector:
    """Decides which external identity providers are enabled for a stack."""

    def __init__(self, config: StackConfig) -> None:
        self.config = config

    def catalog(self) -> List[ProviderSpec]:
        """
        Return every known external provider in a fixed order.

        The order (Google, Facebook, OIDC) is the order in which the app
        client declares its sign-in sources, so it must never depend on
        configuration.
        """
        config = self.config
        return [
            self._provider(
                kind=ProviderKind.GOOGLE,
                provider_name="Google",
                credentials={
                    ENV_GOOGLE_CLIENT_ID: config.google_client_id,
                    ENV_GOOGLE_CLIENT_SECRET: config.google_client_secret,
                },
                scopes=GOOGLE_SCOPES,
                attribute_mapping=GOOGLE_ATTRIBUTE_MAPPING,
            ),
            self._provider(
                kind=ProviderKind.FACEBOOK,
                provider_name="Facebook",
                credentials={
                    ENV_FACEBOOK_CLIENT_ID: config.facebook_client_id,
                    ENV_FACEBOOK_CLIENT_SECRET: config.facebook_client_secret,
                },
                scopes=FACEBOOK_SCOPES,
                attribute_mapping=FACEBOOK_ATTRIBUTE_MAPPING,
            ),
            self._provider(
                kind=ProviderKind.OIDC,
                provider_name=config.oidc_provider_name,
                credentials={
                    ENV_OIDC_CLIENT_ID: config.oidc_client_id,
                    ENV_OIDC_CLIENT_SECRET: config.oidc_client_secret,
                },
                scopes=OIDC_SCOPES,
                attribute_mapping=OIDC_ATTRIBUTE_MAPPING,
                issuer_url=config.oidc_issuer_url,
            ),
        ]

    def select(self) -> List[ProviderSpec]:
        """Return the enabled external providers, in catalog order."""
        selected = [provider for provider in self.catalog() if provider.enabled]
        logger.info(
            f"Enabled identity providers: "
            f"{', '.join(p.provider_name for p in selected) or 'none (native directory only)'}"
        )
        return selected

    def _provider(self,
                  kind: ProviderKind,
                  provider_name: str,
                  credentials: Dict[str, Optional[str]],
                  scopes: Tuple[str, ...],
                  attribute_mapping: Dict[str, str],
                  issuer_url: Optional[str] = None) -> ProviderSpec:
        present = [key for key, value in credentials.items() if value]
        enabled = len(present) == len(credentials)

        if present and not enabled:
            missing = [key for key in credentials if key not in present]
            logger.warning(
                f"{provider_name} identity provider is partially configured "
                f"(missing {', '.join(missing)}); it will not be enabled"
            )

        client_id, client_secret = credentials.values()
        return ProviderSpec(
            kind=kind,
            provider_name=provider_name,
            client_id=client_id if enabled else None,
            client_secret=client_secret if enabled else None,
            scopes=scopes,
            attribute_mapping=dict(attribute_mapping),
            issuer_url=issuer_url,
            enabled=enabled,
        )
