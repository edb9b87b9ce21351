"""Validation utilities for the federated identity stack."""

import re
from typing import List, Mapping, Optional

from .exceptions import MissingConfiguration, ValidationError


class ConfigValidator:
    """Utility class for validating configuration parameters."""

    @staticmethod
    def is_present(value: Optional[str]) -> bool:
        """Return True when a raw configuration value is set and non-empty."""
        return value is not None and value != ""

    @staticmethod
    def validate_required_config(config: Mapping[str, Optional[str]],
                                 required_keys: List[str]) -> None:
        """
        Validate that all required configuration keys are present.

        Keys are checked in order and the first absent one is reported, so
        callers always see the same error for the same input.

        Args:
            config: Configuration mapping to validate
            required_keys: Ordered list of required configuration keys

        Raises:
            MissingConfiguration: If any required key is missing or empty
        """
        for key in required_keys:
            if not ConfigValidator.is_present(config.get(key)):
                raise MissingConfiguration(key)

    @staticmethod
    def validate_resource_name(name: str, max_length: int = 63) -> None:
        """
        Validate AWS resource name format.

        Args:
            name: Resource name to validate
            max_length: Maximum allowed length

        Raises:
            ValidationError: If name format is invalid
        """
        if not name:
            raise ValidationError(
                "Resource name cannot be empty",
                parameter_name="name",
                provided_value=name
            )

        if len(name) > max_length:
            raise ValidationError(
                f"Resource name too long (max {max_length}): {name}",
                parameter_name="name",
                provided_value=name
            )

        # Cognito pool and client names allow alphanumerics, hyphens and underscores
        if not re.match(r'^[a-zA-Z0-9_-]+$', name):
            raise ValidationError(
                f"Invalid resource name format: {name}. "
                f"Only alphanumeric characters, hyphens, and underscores allowed",
                parameter_name="name",
                provided_value=name
            )

    @staticmethod
    def validate_https_url(url: str, parameter_name: str = "url") -> None:
        """
        Validate that a URL uses the https scheme and names a host.

        Raises:
            ValidationError: If the URL is not an https URL
        """
        if not re.match(r'^https://[^/\s]+', url or ""):
            raise ValidationError(
                f"Expected an https URL, got: {url}",
                parameter_name=parameter_name,
                provided_value=url
            )


class AWSResourceValidator:
    """Utility class for validating AWS resource parameters."""

    @staticmethod
    def validate_arn(arn: str, service: Optional[str] = None) -> None:
        """
        Validate AWS ARN format.

        Args:
            arn: ARN to validate
            service: Expected AWS service (optional)

        Raises:
            ValidationError: If ARN format is invalid
        """
        arn_pattern = re.compile(
            r'^arn:aws[a-zA-Z0-9-]*:[a-zA-Z0-9-]+:'
            r'[a-zA-Z0-9-]*:[0-9]*:[a-zA-Z0-9-/._]+$'
        )

        if not arn_pattern.match(arn):
            raise ValidationError(
                f"Invalid ARN format: {arn}",
                parameter_name="arn",
                provided_value=arn
            )

        if service and arn.split(':')[2] != service:
            actual_service = arn.split(':')[2]
            raise ValidationError(
                f"Expected {service} service ARN, got {actual_service}",
                parameter_name="arn",
                provided_value=arn
            )
