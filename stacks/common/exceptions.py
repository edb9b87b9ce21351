"""Custom exceptions for the federated identity stack."""

from typing import Optional


class StackConfigurationError(Exception):
    """
    Exception raised when stack configuration is invalid.

    Attributes:
        message: Human-readable error description
        config_key: The configuration key that caused the error
    """

    def __init__(self, message: str, config_key: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            config_key: The configuration key that caused the error
        """
        self.message = message
        self.config_key = config_key
        super().__init__(self.message)


class MissingConfiguration(StackConfigurationError):
    """Raised when a required configuration value is absent or empty."""

    def __init__(self, config_key: str, message: Optional[str] = None) -> None:
        super().__init__(
            message or f"Required configuration key '{config_key}' is missing",
            config_key=config_key
        )


class ConfigurationConflict(StackConfigurationError):
    """
    Raised when configuration values contradict each other.

    Examples are two branding assets for the same category and color mode,
    or both (or neither) of the domain modes being configured.
    """
    pass


class ResourceCreationError(Exception):
    """
    Exception raised when AWS resource creation fails.

    Attributes:
        message: Human-readable error description
        resource_type: The AWS resource type that failed to create
    """

    def __init__(self, message: str, resource_type: Optional[str] = None) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            resource_type: The AWS resource type that failed to create
        """
        self.message = message
        self.resource_type = resource_type
        super().__init__(self.message)


class DanglingReference(ResourceCreationError):
    """
    Raised when a resource node depends on a logical id absent from the graph.

    Attributes:
        logical_id: The node holding the reference
        missing_id: The logical id that could not be resolved
    """

    def __init__(self, logical_id: str, missing_id: str) -> None:
        self.logical_id = logical_id
        self.missing_id = missing_id
        super().__init__(
            f"Resource '{logical_id}' depends on '{missing_id}', "
            f"which is not defined in the resource graph",
            resource_type="ResourceGraph"
        )


class ValidationError(Exception):
    """
    Exception raised when parameter validation fails.

    Attributes:
        message: Human-readable error description
        parameter_name: The parameter that failed validation
        provided_value: The value that was provided
    """

    def __init__(
        self,
        message: str,
        parameter_name: Optional[str] = None,
        provided_value: Optional[str] = None
    ) -> None:
        """
        Initialize the exception.

        Args:
            message: Human-readable error description
            parameter_name: The parameter that failed validation
            provided_value: The value that was provided
        """
        self.message = message
        self.parameter_name = parameter_name
        self.provided_value = provided_value
        super().__init__(self.message)
