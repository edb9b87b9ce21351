"""
Base classes and common patterns for CDK stacks.
"""

from typing import Any, Dict, Optional

import aws_cdk as cdk
from aws_cdk import Stack
from constructs import Construct

from helper.config import Config
from .exceptions import StackConfigurationError


class BaseStack(Stack):
    """
    Base stack class with common functionality and validation.

    This class provides:
    - Configuration validation
    - Common tagging
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        """
        Initialize the base stack.

        Args:
            scope: CDK scope
            construct_id: Unique identifier for this construct
            config: Configuration object
            **kwargs: Additional keyword arguments for Stack

        Raises:
            StackConfigurationError: If configuration is invalid
        """
        super().__init__(scope, construct_id, **kwargs)
        self.config = config
        self._validate_config()

    def _validate_config(self) -> None:
        """
        Validate configuration parameters.

        Raises:
            StackConfigurationError: If configuration is invalid
        """
        if not isinstance(self.config, Config):
            raise StackConfigurationError(
                "Configuration must be a Config instance",
                config_key="config"
            )

    def add_common_tags(self,
                        resource: Any,
                        project_name: str,
                        additional_tags: Optional[Dict[str, str]] = None) -> None:
        """
        Add common tags to a resource.

        Args:
            resource: The resource to tag
            project_name: Application name used for the Project tag
            additional_tags: Additional tags to add
        """
        common_tags = {
            "Environment": self.config.environment,
            "Project": project_name,
            "ManagedBy": "CDK"
        }

        if additional_tags:
            common_tags.update(additional_tags)

        for key, value in common_tags.items():
            cdk.Tags.of(resource).add(key, value)
