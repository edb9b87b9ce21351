"""
Federated Identity Stack - Cognito user pool with hosted login, social
identity providers, managed login branding and exported SSM parameters.

The stack builds the provisioning plan first; configuration errors abort
construction before any resource is defined. Each graph node then becomes
one construct, and every graph edge becomes an explicit construct
dependency.
"""

import logging
from typing import Callable, Dict

from aws_cdk import CfnOutput
from constructs import Construct

from helper.config import Config
from ..common.base import BaseStack
from ..common.constants import CERTIFICATE_SUFFIX, STACK_DESCRIPTION
from ..common.exceptions import ResourceCreationError
from ..common.mixins import CognitoMixin, ParameterStoreMixin
from .graph import ResourceGraph, ResourceKind, ResourceNode
from .parameters import AttributeReference, ExportedParameter
from .plan import ProvisioningPlan, build_plan

logger = logging.getLogger(__name__)


class FederatedIdentityStack(BaseStack, CognitoMixin, ParameterStoreMixin):
    """
    Cognito federated identity infrastructure driven by a resource graph.

    Attributes:
        plan: The provisioning plan this stack was built from
        resources: Constructs keyed by graph logical id
        parameters: SSM parameters keyed by parameter name
    """

    def __init__(self,
                 scope: Construct,
                 construct_id: str,
                 config: Config,
                 **kwargs) -> None:
        kwargs.setdefault('description', STACK_DESCRIPTION)
        super().__init__(scope, construct_id, config, **kwargs)

        self.plan: ProvisioningPlan = build_plan(config)
        self.resources: Dict[str, Construct] = {}

        app_name = self.plan.config.app_name
        self._create_resources(self.plan.graph)
        self._apply_dependencies(self.plan.graph)
        self.parameters = self._create_parameters(self.plan.parameters)

        self.add_common_tags(self, app_name)
        self._create_outputs(app_name)

    @property
    def user_pool(self):
        return self._resource_of_kind(ResourceKind.DIRECTORY)

    @property
    def user_pool_client(self):
        return self._resource_of_kind(ResourceKind.CLIENT)

    @property
    def user_pool_domain(self):
        return self._resource_of_kind(ResourceKind.DOMAIN)

    def _resource_of_kind(self, kind: ResourceKind) -> Construct:
        node = self.plan.graph.nodes_of_kind(kind)[0]
        return self.resources[node.logical_id]

    def _create_resources(self, graph: ResourceGraph) -> None:
        """Create one construct per node, in dependency order."""
        for node in graph.ordered_nodes():
            self.resources[node.logical_id] = self._create_resource(node)
            logger.debug(f"Created {node.kind.value} resource {node.logical_id}")

    def _create_resource(self, node: ResourceNode) -> Construct:
        props = node.properties

        if node.kind == ResourceKind.DIRECTORY:
            return self.create_user_pool(self, node)

        if node.kind == ResourceKind.DOMAIN:
            return self.create_user_pool_domain(
                self,
                node,
                self.resources[props["user_pool"]],
                certificate_id=f"{self.plan.config.app_name}{CERTIFICATE_SUFFIX}"
            )

        if node.kind == ResourceKind.PROVIDER:
            return self.create_identity_provider(self, node, self.resources[props["user_pool"]])

        if node.kind == ResourceKind.CLIENT:
            identity_providers = {
                source["logical_id"]: self.resources[source["logical_id"]]
                for source in props["supported_identity_providers"]
                if source["logical_id"] is not None
            }
            return self.create_user_pool_client(
                self, node, self.resources[props["user_pool"]], identity_providers
            )

        if node.kind == ResourceKind.BRANDING:
            return self.create_managed_login_branding(
                self,
                node,
                self.resources[props["user_pool"]],
                self.resources[props["client"]]
            )

        raise ResourceCreationError(
            f"No construct available for resource kind {node.kind.value}",
            resource_type=node.kind.value
        )

    def _apply_dependencies(self, graph: ResourceGraph) -> None:
        """
        Apply every graph edge as an explicit construct dependency.

        CloudFormation infers ordering from references only; a client that
        merely names a provider as a supported sign-in source is not ordered
        after it without these edges.
        """
        for node in graph.ordered_nodes():
            construct = self.resources[node.logical_id]
            for dependency in node.depends_on:
                construct.node.add_dependency(self.resources[dependency])

    def _create_parameters(self, parameters) -> Dict[str, Construct]:
        created = {}
        for parameter in parameters:
            created[parameter.name] = self.create_string_parameter(
                self,
                parameter.logical_id,
                parameter_name=parameter.name,
                string_value=self._resolve_value(parameter),
                description=parameter.description
            )
        return created

    def _resolve_value(self, parameter: ExportedParameter) -> str:
        """Replace an attribute reference with the construct's CDK token."""
        value = parameter.value
        if not isinstance(value, AttributeReference):
            return value

        resolvers: Dict[str, Callable[[Construct], str]] = {
            "UserPoolId": lambda construct: construct.user_pool_id,
            "UserPoolClientId": lambda construct: construct.user_pool_client_id,
        }
        if value.attribute not in resolvers or value.logical_id not in self.resources:
            raise ResourceCreationError(
                f"Cannot resolve {value} for parameter {parameter.name}",
                resource_type="StringParameter"
            )
        return resolvers[value.attribute](self.resources[value.logical_id])

    def _create_outputs(self, app_name: str) -> None:
        domain_node = self.plan.graph.nodes_of_kind(ResourceKind.DOMAIN)[0]

        CfnOutput(
            self,
            "CognitoUserPoolId",
            value=self.user_pool.user_pool_id,
            description="Cognito User Pool ID",
            export_name=f"{app_name}-CognitoUserPoolId"
        )

        CfnOutput(
            self,
            "CognitoUserPoolClientId",
            value=self.user_pool_client.user_pool_client_id,
            description="Cognito App Client ID",
            export_name=f"{app_name}-CognitoUserPoolClientId"
        )

        CfnOutput(
            self,
            "CognitoBaseUrl",
            value=domain_node.properties["base_url"],
            description="Hosted login base URL",
            export_name=f"{app_name}-CognitoBaseUrl"
        )
