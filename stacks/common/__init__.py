"""
Common CDK stack components and utilities.

Base classes and mixins import the CDK libraries and are imported from their
own modules; this package only re-exports the lightweight pieces.
"""

# Import exceptions
from .exceptions import (
    StackConfigurationError,
    MissingConfiguration,
    ConfigurationConflict,
    ResourceCreationError,
    DanglingReference,
    ValidationError
)

# Import validators
from .validators import (
    ConfigValidator,
    AWSResourceValidator
)

__all__ = [
    # Exceptions
    "StackConfigurationError",
    "MissingConfiguration",
    "ConfigurationConflict",
    "ResourceCreationError",
    "DanglingReference",
    "ValidationError",

    # Validators
    "ConfigValidator",
    "AWSResourceValidator",
]
