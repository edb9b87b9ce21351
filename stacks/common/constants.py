"""
Constants used across the federated identity stack.
"""

# Environment Variables
ENV_APP_NAME = "APP_NAME"
ENV_REGION = "REGION_AWS"
ENV_VERIFICATION_SUBJECT = "VERIFICATION_SUBJECT"
ENV_VERIFICATION_BODY = "VERIFICATION_BODY"
ENV_CUSTOM_DOMAIN = "COGNITO_CUSTOM_DOMAIN"
ENV_CERTIFICATE_ARN = "ARN_COGNITO_CERTIFICATE"
ENV_DOMAIN_PREFIX = "COGNITO_DOMAIN"
ENV_GOOGLE_CLIENT_ID = "GOOGLE_CLIENT_ID"
ENV_GOOGLE_CLIENT_SECRET = "GOOGLE_CLIENT_SECRET"
ENV_FACEBOOK_CLIENT_ID = "FACEBOOK_CLIENT_ID"
ENV_FACEBOOK_CLIENT_SECRET = "FACEBOOK_CLIENT_SECRET"
ENV_OIDC_CLIENT_ID = "OIDC_CLIENT_ID"
ENV_OIDC_CLIENT_SECRET = "OIDC_CLIENT_SECRET"
ENV_OIDC_ISSUER_URL = "OIDC_ISSUER_URL"
ENV_OIDC_PROVIDER_NAME = "OIDC_PROVIDER_NAME"
ENV_CALLBACK_URLS = "CALLBACK_URLS"
ENV_LOGOUT_URLS = "LOGOUT_URLS"

URL_LIST_SEPARATOR = ","

# Generic OIDC provider defaults (Microsoft identity platform, multi-tenant)
DEFAULT_OIDC_ISSUER_URL = "https://login.microsoftonline.com/common/v2.0"
DEFAULT_OIDC_PROVIDER_NAME = "Microsoft"

# Logical Id Suffixes ({app_name}{suffix})
USER_POOL_SUFFIX = "UserPool"
DOMAIN_SUFFIX = "CognitoDomain"
CERTIFICATE_SUFFIX = "CognitoCertificate"
IDENTITY_PROVIDER_SUFFIX = "IdentityProvider"
USER_POOL_CLIENT_SUFFIX = "UserPoolClient"
MANAGED_LOGIN_BRANDING_SUFFIX = "ManagedLoginBranding"
STRING_PARAMETER_SUFFIX = "StringParameterCognito"

# Native directory sign-in source name
COGNITO_PROVIDER_NAME = "COGNITO"

# User Pool Configuration
# Declared standard attributes; identity provider mappings may only target these
DIRECTORY_STANDARD_ATTRIBUTES = ("email", "email_verified", "given_name", "family_name")
REQUIRED_STANDARD_ATTRIBUTES = ("email", "given_name", "family_name")
DEFAULT_COGNITO_PASSWORD_MIN_LENGTH = 8
DEFAULT_REQUIRE_LOWERCASE = True
DEFAULT_REQUIRE_UPPERCASE = True
DEFAULT_REQUIRE_DIGITS = True
DEFAULT_REQUIRE_SYMBOLS = False
DEFAULT_VERIFICATION_EMAIL_STYLE = "CODE"
DEFAULT_MFA_MODE = "OPTIONAL"
DEFAULT_ACCOUNT_RECOVERY = "EMAIL_ONLY"

# Hosted Domain Configuration
MANAGED_DOMAIN_TEMPLATE = "https://{prefix}.auth.{region}.amazoncognito.com"
OAUTH2_TOKEN_PATH = "/oauth2/token"
DEFAULT_MANAGED_LOGIN_VERSION = "NEWER_MANAGED_LOGIN"

# App Client Configuration
DEFAULT_OAUTH_SCOPES = ("openid", "email", "profile")

# Parameter Store Configuration
PARAMETER_NAMESPACE_TEMPLATE = "/{app_name}/Cognito/{logical_name}"
DEFAULT_PARAMETER_TIER = "STANDARD"

# Branding asset defaults
DEFAULT_ASSET_COLOR_MODE = "LIGHT"

# Stack description
STACK_DESCRIPTION = (
    "Cognito user pool with hosted login domain, federated identity providers "
    "and managed login branding"
)
