"""Derive the exported SSM parameters from a finalized resource graph."""

import logging
from dataclasses import dataclass
from typing import List, Optional, Union

from helper.config import StackConfig
from ..common.constants import (
    PARAMETER_NAMESPACE_TEMPLATE,
    STRING_PARAMETER_SUFFIX,
    URL_LIST_SEPARATOR,
)
from ..common.exceptions import ResourceCreationError
from .graph import DomainMode, ResourceGraph, ResourceKind

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AttributeReference:
    """A value known only once the referenced resource is provisioned."""
    logical_id: str
    attribute: str

    def __str__(self) -> str:
        return f"${{{self.logical_id}.{self.attribute}}}"


ParameterValue = Union[str, AttributeReference]


@dataclass(frozen=True)
class ExportedParameter:
    name: str
    value: ParameterValue
    description: str
    logical_id: str
    source: Optional[str] = None

    @property
    def rendered_value(self) -> str:
        return str(self.value)


class ParameterExporter:
    """
    Walks a finalized graph and emits one parameter per externally relevant
    value, all under ``/{app_name}/Cognito/``.

    Names depend only on the application name, so a redeploy overwrites the
    existing parameters instead of creating new ones.
    """

    def __init__(self, graph: ResourceGraph, config: StackConfig) -> None:
        self.graph = graph
        self.config = config

    def export(self) -> List[ExportedParameter]:
        """
        Raises:
            ResourceCreationError: If the graph is not finalized or lacks a
                directory, client or domain node
        """
        if not self.graph.is_finalized:
            raise ResourceCreationError(
                "Parameters can only be exported from a finalized resource graph",
                resource_type="ResourceGraph"
            )

        app_name = self.config.app_name
        directory = self._single(ResourceKind.DIRECTORY)
        client = self._single(ResourceKind.CLIENT)
        domain = self._single(ResourceKind.DOMAIN)

        parameters = [
            self._parameter(
                "UserPoolId",
                AttributeReference(directory.logical_id, "UserPoolId"),
                f"Cognito UserPoolId for application {app_name}",
                source=directory.logical_id,
            ),
            self._parameter(
                "UserPoolClientId",
                AttributeReference(client.logical_id, "UserPoolClientId"),
                f"User Pool Client ID for application {app_name}",
                source=client.logical_id,
            ),
            self._parameter(
                "Region",
                self.config.region,
                f"Cognito Region for application {app_name}",
            ),
            self._parameter(
                "Callbacks",
                URL_LIST_SEPARATOR.join(client.properties["oauth"]["callback_urls"]),
                f"Cognito callback URLs for application {app_name}",
                source=client.logical_id,
            ),
            self._parameter(
                "Logouts",
                URL_LIST_SEPARATOR.join(client.properties["oauth"]["logout_urls"]),
                f"Cognito logout URLs for application {app_name}",
                source=client.logical_id,
            ),
        ]

        base_url = domain.properties["base_url"]
        if domain.properties["mode"] == DomainMode.CUSTOM.value:
            parameters.append(self._parameter(
                "BaseUrl",
                base_url,
                f"Cognito base URL for application {app_name}",
                source=domain.logical_id,
            ))
        else:
            parameters.append(self._parameter(
                "OAuth2TokenUrl",
                domain.properties["token_url"],
                f"Cognito OAuth2 token endpoint for application {app_name}",
                source=domain.logical_id,
            ))

        logger.info(f"Exporting {len(parameters)} parameters under /{app_name}/Cognito")
        return parameters

    def _single(self, kind: ResourceKind):
        nodes = self.graph.nodes_of_kind(kind)
        if len(nodes) != 1:
            raise ResourceCreationError(
                f"Expected exactly one {kind.value} resource, found {len(nodes)}",
                resource_type=kind.value
            )
        return nodes[0]

    def _parameter(self,
                   logical_name: str,
                   value: ParameterValue,
                   description: str,
                   source: Optional[str] = None) -> ExportedParameter:
        app_name = self.config.app_name
        return ExportedParameter(
            name=PARAMETER_NAMESPACE_TEMPLATE.format(app_name=app_name, logical_name=logical_name),
            value=value,
            description=description,
            logical_id=f"{app_name}{STRING_PARAMETER_SUFFIX}{logical_name}",
            source=source,
        )
