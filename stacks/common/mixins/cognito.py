"""
Cognito materialization mixin for CDK stacks.

This module turns resource graph nodes into Cognito constructs:
- User pool creation and configuration
- Hosted domain (custom domain with ACM certificate, or managed prefix)
- Google, Facebook and generic OIDC identity providers
- User pool client with OAuth configuration
- Managed login branding
"""

import copy
from typing import Any, Dict, List, Mapping

from aws_cdk import (
    aws_certificatemanager as acm,
    aws_cognito as cognito,
    SecretValue
)
from constructs import Construct

from ..exceptions import ResourceCreationError


def _get_mfa_from_string(mfa_str: str) -> cognito.Mfa:
    """Convert string to Mfa enum."""
    mfa_mapping = {
        'OFF': cognito.Mfa.OFF,
        'OPTIONAL': cognito.Mfa.OPTIONAL,
        'REQUIRED': cognito.Mfa.REQUIRED
    }
    return mfa_mapping.get(mfa_str.upper(), cognito.Mfa.OPTIONAL)


def _get_account_recovery_from_string(recovery_str: str) -> cognito.AccountRecovery:
    """Convert string to AccountRecovery enum."""
    recovery_mapping = {
        'EMAIL_ONLY': cognito.AccountRecovery.EMAIL_ONLY,
        'EMAIL_AND_PHONE_WITHOUT_MFA': cognito.AccountRecovery.EMAIL_AND_PHONE_WITHOUT_MFA,
        'NONE': cognito.AccountRecovery.NONE
    }
    return recovery_mapping.get(recovery_str.upper(), cognito.AccountRecovery.EMAIL_ONLY)


def _get_email_style_from_string(style_str: str) -> cognito.VerificationEmailStyle:
    """Convert string to VerificationEmailStyle enum."""
    style_mapping = {
        'CODE': cognito.VerificationEmailStyle.CODE,
        'LINK': cognito.VerificationEmailStyle.LINK
    }
    return style_mapping.get(style_str.upper(), cognito.VerificationEmailStyle.CODE)


def _get_managed_login_version_from_string(version_str: str) -> cognito.ManagedLoginVersion:
    """Convert string to ManagedLoginVersion enum."""
    version_mapping = {
        'CLASSIC_HOSTED_UI': cognito.ManagedLoginVersion.CLASSIC_HOSTED_UI,
        'NEWER_MANAGED_LOGIN': cognito.ManagedLoginVersion.NEWER_MANAGED_LOGIN
    }
    return version_mapping.get(version_str.upper(), cognito.ManagedLoginVersion.NEWER_MANAGED_LOGIN)


def _attribute_mapping(claims: Mapping[str, str]) -> cognito.AttributeMapping:
    """Build an AttributeMapping from an external claim -> standard attribute table."""
    return cognito.AttributeMapping(**{
        standard_attribute: cognito.ProviderAttribute.other(claim)
        for claim, standard_attribute in claims.items()
    })


class CognitoMixin:
    """
    Mixin class providing Cognito resource creation from graph nodes.

    Every method takes the node's logical id as the construct id so the
    synthesized template mirrors the resource graph.
    """

    def create_user_pool(self, scope: Construct, node) -> cognito.UserPool:
        """Create and configure the Cognito User Pool."""
        props = node.properties
        try:
            verification = props["user_verification"]
            password_policy = props["password_policy"]

            return cognito.UserPool(
                scope,
                node.logical_id,
                user_pool_name=props["user_pool_name"],
                self_sign_up_enabled=props["self_sign_up_enabled"],
                sign_in_case_sensitive=props["sign_in_case_sensitive"],
                user_verification=cognito.UserVerificationConfig(
                    email_subject=verification["email_subject"],
                    email_body=verification["email_body"],
                    email_style=_get_email_style_from_string(verification["email_style"])
                ),
                sign_in_aliases=cognito.SignInAliases(**props["sign_in_aliases"]),
                auto_verify=cognito.AutoVerifiedAttrs(**props["auto_verify"]),
                keep_original=cognito.KeepOriginalAttrs(**props["keep_original"]),
                mfa=_get_mfa_from_string(props["mfa"]),
                mfa_second_factor=cognito.MfaSecondFactor(**props["mfa_second_factor"]),
                account_recovery=_get_account_recovery_from_string(props["account_recovery"]),
                standard_attributes=cognito.StandardAttributes(**{
                    name: cognito.StandardAttribute(**settings)
                    for name, settings in props["standard_attributes"].items()
                }),
                password_policy=cognito.PasswordPolicy(**password_policy)
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create User Pool: {str(e)}",
                resource_type="UserPool"
            ) from e

    def create_user_pool_domain(
        self,
        scope: Construct,
        node,
        user_pool: cognito.IUserPool,
        certificate_id: str
    ) -> cognito.UserPoolDomain:
        """
        Create the hosted login domain.

        A custom domain imports the existing ACM certificate by ARN; a managed
        domain only needs the prefix.
        """
        props = node.properties
        try:
            domain_options: Dict[str, Any] = {}
            if props["mode"] == "CUSTOM":
                certificate = acm.Certificate.from_certificate_arn(
                    scope, certificate_id, props["certificate_arn"]
                )
                domain_options["custom_domain"] = cognito.CustomDomainOptions(
                    domain_name=props["domain_name"],
                    certificate=certificate
                )
            else:
                domain_options["cognito_domain"] = cognito.CognitoDomainOptions(
                    domain_prefix=props["domain_prefix"]
                )

            return cognito.UserPoolDomain(
                scope,
                node.logical_id,
                user_pool=user_pool,
                managed_login_version=_get_managed_login_version_from_string(
                    props["managed_login_version"]
                ),
                **domain_options
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create User Pool Domain: {str(e)}",
                resource_type="UserPoolDomain"
            ) from e

    def create_identity_provider(
        self,
        scope: Construct,
        node,
        user_pool: cognito.IUserPool
    ) -> cognito.IUserPoolIdentityProvider:
        """Create a federated identity provider for the node's provider kind."""
        props = node.properties
        kind = props["kind"]
        try:
            common = {
                "user_pool": user_pool,
                "client_id": props["client_id"],
                "scopes": list(props["scopes"]),
                "attribute_mapping": _attribute_mapping(props["attribute_mapping"])
            }

            if kind == "GOOGLE":
                return cognito.UserPoolIdentityProviderGoogle(
                    scope,
                    node.logical_id,
                    client_secret_value=SecretValue.unsafe_plain_text(props["client_secret"]),
                    **common
                )
            if kind == "FACEBOOK":
                return cognito.UserPoolIdentityProviderFacebook(
                    scope,
                    node.logical_id,
                    client_secret=props["client_secret"],
                    **common
                )
            if kind == "OIDC":
                return cognito.UserPoolIdentityProviderOidc(
                    scope,
                    node.logical_id,
                    name=props["provider_name"],
                    client_secret=props["client_secret"],
                    issuer_url=props["issuer_url"],
                    attribute_request_method=cognito.OidcAttributeRequestMethod.GET,
                    **common
                )

            raise ValueError(f"Unsupported identity provider kind: {kind}")

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create {kind} identity provider: {str(e)}",
                resource_type="UserPoolIdentityProvider"
            ) from e

    def create_user_pool_client(
        self,
        scope: Construct,
        node,
        user_pool: cognito.IUserPool,
        identity_providers: Mapping[str, cognito.IUserPoolIdentityProvider]
    ) -> cognito.UserPoolClient:
        """Create the Cognito User Pool Client with its supported sign-in sources."""
        props = node.properties
        try:
            oauth = props["oauth"]
            supported = self._supported_identity_providers(
                props["supported_identity_providers"], identity_providers
            )

            return cognito.UserPoolClient(
                scope,
                node.logical_id,
                user_pool=user_pool,
                user_pool_client_name=props["user_pool_client_name"],
                generate_secret=props["generate_secret"],
                prevent_user_existence_errors=props["prevent_user_existence_errors"],
                auth_flows=cognito.AuthFlow(**props["auth_flows"]),
                supported_identity_providers=supported,
                o_auth=cognito.OAuthSettings(
                    callback_urls=list(oauth["callback_urls"]),
                    logout_urls=list(oauth["logout_urls"]),
                    flows=cognito.OAuthFlows(**oauth["flows"]),
                    scopes=[self._oauth_scope(scope_name) for scope_name in oauth["scopes"]]
                )
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create User Pool Client: {str(e)}",
                resource_type="UserPoolClient"
            ) from e

    def create_managed_login_branding(
        self,
        scope: Construct,
        node,
        user_pool: cognito.IUserPool,
        user_pool_client: cognito.IUserPoolClient
    ) -> cognito.CfnManagedLoginBranding:
        """Create the managed login branding with merged settings and assets."""
        props = node.properties
        try:
            assets = [
                cognito.CfnManagedLoginBranding.AssetTypeProperty(
                    category=asset["category"],
                    color_mode=asset["color_mode"],
                    extension=asset["extension"],
                    bytes=asset["bytes"]
                )
                for asset in props["assets"]
            ]

            return cognito.CfnManagedLoginBranding(
                scope,
                node.logical_id,
                user_pool_id=user_pool.user_pool_id,
                client_id=user_pool_client.user_pool_client_id,
                return_merged_resources=props["return_merged_resources"],
                settings=copy.deepcopy(props["settings"]),
                assets=assets
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create Managed Login Branding: {str(e)}",
                resource_type="ManagedLoginBranding"
            ) from e

    @staticmethod
    def _oauth_scope(scope_name: str) -> cognito.OAuthScope:
        scope_mapping = {
            'openid': cognito.OAuthScope.OPENID,
            'email': cognito.OAuthScope.EMAIL,
            'profile': cognito.OAuthScope.PROFILE,
            'phone': cognito.OAuthScope.PHONE
        }
        if scope_name in scope_mapping:
            return scope_mapping[scope_name]
        return cognito.OAuthScope.custom(scope_name)

    @staticmethod
    def _supported_identity_providers(
        sources: List[Mapping[str, Any]],
        identity_providers: Mapping[str, cognito.IUserPoolIdentityProvider]
    ) -> List[cognito.UserPoolClientIdentityProvider]:
        supported = []
        for source in sources:
            kind = source["kind"]
            if kind == "COGNITO":
                supported.append(cognito.UserPoolClientIdentityProvider.COGNITO)
            elif kind == "GOOGLE":
                supported.append(cognito.UserPoolClientIdentityProvider.GOOGLE)
            elif kind == "FACEBOOK":
                supported.append(cognito.UserPoolClientIdentityProvider.FACEBOOK)
            else:
                if source["logical_id"] not in identity_providers:
                    raise ValueError(
                        f"Identity provider {source['logical_id']} has not been created"
                    )
                # Plain name; ordering comes from the explicit graph edges
                supported.append(
                    cognito.UserPoolClientIdentityProvider.custom(source["provider_name"])
                )
        return supported
