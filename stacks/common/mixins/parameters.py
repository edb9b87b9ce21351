"""SSM Parameter Store mixin for CDK stacks."""

from aws_cdk import aws_ssm as ssm
from constructs import Construct

from ..constants import DEFAULT_PARAMETER_TIER
from ..exceptions import ResourceCreationError


def _get_parameter_tier_from_string(tier_str: str) -> ssm.ParameterTier:
    """Convert string to ParameterTier enum."""
    tier_mapping = {
        'STANDARD': ssm.ParameterTier.STANDARD,
        'ADVANCED': ssm.ParameterTier.ADVANCED,
        'INTELLIGENT_TIERING': ssm.ParameterTier.INTELLIGENT_TIERING
    }
    return tier_mapping.get(tier_str.upper(), ssm.ParameterTier.STANDARD)


class ParameterStoreMixin:
    """Mixin class publishing string values to SSM Parameter Store."""

    def create_string_parameter(
        self,
        scope: Construct,
        construct_id: str,
        parameter_name: str,
        string_value: str,
        description: str,
        tier: str = DEFAULT_PARAMETER_TIER
    ) -> ssm.StringParameter:
        """
        Create a string parameter.

        The parameter name is the identity of the value in SSM, so deploying
        again with the same name updates the existing parameter in place.
        """
        try:
            return ssm.StringParameter(
                scope,
                construct_id,
                parameter_name=parameter_name,
                description=description,
                string_value=string_value,
                tier=_get_parameter_tier_from_string(tier)
            )

        except Exception as e:
            raise ResourceCreationError(
                f"Failed to create SSM parameter '{parameter_name}': {str(e)}",
                resource_type="StringParameter"
            ) from e
