"""
Resource graph for the federated identity stack.

The builder defines every resource as a ResourceNode in an arena indexed by
logical id. Nodes refer to each other by logical id only, so dependency
edges can be attached after both ends exist (the app client, for example,
must be ordered after every identity provider it supports). The graph is
then linked, which validates every edge, and finalized before it is handed
to the parameter exporter and the CDK stack.
"""

import copy
import json
import logging
import re
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Sequence

from helper.config import StackConfig
from ..common.constants import (
    DEFAULT_ACCOUNT_RECOVERY,
    DEFAULT_COGNITO_PASSWORD_MIN_LENGTH,
    DEFAULT_MANAGED_LOGIN_VERSION,
    DEFAULT_MFA_MODE,
    DEFAULT_OAUTH_SCOPES,
    DEFAULT_REQUIRE_DIGITS,
    DEFAULT_REQUIRE_LOWERCASE,
    DEFAULT_REQUIRE_SYMBOLS,
    DEFAULT_REQUIRE_UPPERCASE,
    DEFAULT_VERIFICATION_EMAIL_STYLE,
    DOMAIN_SUFFIX,
    ENV_CUSTOM_DOMAIN,
    ENV_DOMAIN_PREFIX,
    IDENTITY_PROVIDER_SUFFIX,
    MANAGED_DOMAIN_TEMPLATE,
    MANAGED_LOGIN_BRANDING_SUFFIX,
    OAUTH2_TOKEN_PATH,
    REQUIRED_STANDARD_ATTRIBUTES,
    USER_POOL_CLIENT_SUFFIX,
    USER_POOL_SUFFIX,
)
from ..common.exceptions import (
    ConfigurationConflict,
    DanglingReference,
    ResourceCreationError,
)
from .branding import BrandingConfiguration
from .providers import NATIVE_DIRECTORY, ProviderSpec

logger = logging.getLogger(__name__)


class ResourceKind(str, Enum):
    DIRECTORY = "DIRECTORY"
    DOMAIN = "DOMAIN"
    PROVIDER = "PROVIDER"
    CLIENT = "CLIENT"
    BRANDING = "BRANDING"
    PARAMETER = "PARAMETER"


class NodeState(str, Enum):
    """Lifecycle of a node. Transitions only move forward."""
    DEFINED = "DEFINED"
    LINKED = "LINKED"
    FINALIZED = "FINALIZED"


class DomainMode(str, Enum):
    CUSTOM = "CUSTOM"
    MANAGED = "MANAGED"


@dataclass(frozen=True)
class DomainSpec:
    """
    Hosted login domain, either a custom hostname backed by an ACM
    certificate or a managed Cognito prefix.
    """
    mode: DomainMode
    region: str
    domain_name: Optional[str] = None
    certificate_arn: Optional[str] = None
    domain_prefix: Optional[str] = None

    @classmethod
    def from_config(cls, config: StackConfig) -> "DomainSpec":
        """
        Pick the domain mode from the configured fields.

        Raises:
            ConfigurationConflict: If both or neither modes are configured
        """
        wants_custom = config.custom_domain is not None or config.certificate_arn is not None
        wants_managed = config.domain_prefix is not None

        if wants_custom == wants_managed:
            raise ConfigurationConflict(
                "Exactly one hosted domain mode must be configured "
                f"({ENV_CUSTOM_DOMAIN} with certificate, or {ENV_DOMAIN_PREFIX})",
                config_key=ENV_DOMAIN_PREFIX if wants_managed else ENV_CUSTOM_DOMAIN
            )

        if wants_custom:
            return cls(
                mode=DomainMode.CUSTOM,
                region=config.region,
                domain_name=config.custom_domain,
                certificate_arn=config.certificate_arn,
            )
        return cls(mode=DomainMode.MANAGED, region=config.region, domain_prefix=config.domain_prefix)

    @property
    def base_url(self) -> str:
        if self.mode == DomainMode.CUSTOM:
            return f"https://{self.domain_name}"
        return MANAGED_DOMAIN_TEMPLATE.format(prefix=self.domain_prefix, region=self.region)

    @property
    def token_url(self) -> str:
        return f"{self.base_url}{OAUTH2_TOKEN_PATH}"

    def to_dict(self) -> Dict[str, Any]:
        data = {"mode": self.mode.value, "base_url": self.base_url, "token_url": self.token_url}
        if self.mode == DomainMode.CUSTOM:
            data["domain_name"] = self.domain_name
            data["certificate_arn"] = self.certificate_arn
        else:
            data["domain_prefix"] = self.domain_prefix
        return data


class ResourceNode:
    """
    A provisioned entity identified by a stable logical id.

    Properties are fixed at creation. Dependency edges may be added while the
    node is DEFINED; linking and finalizing freeze them.
    """

    def __init__(self,
                 logical_id: str,
                 kind: ResourceKind,
                 properties: Mapping[str, Any],
                 depends_on: Iterable[str] = ()) -> None:
        self.logical_id = logical_id
        self.kind = kind
        self.properties = MappingProxyType(copy.deepcopy(dict(properties)))
        self._depends_on: List[str] = []
        self.state = NodeState.DEFINED
        for dependency in depends_on:
            self.add_dependency(dependency)

    @property
    def depends_on(self) -> tuple:
        return tuple(self._depends_on)

    def add_dependency(self, logical_id: str) -> None:
        if self.state != NodeState.DEFINED:
            raise ResourceCreationError(
                f"Cannot add dependency '{logical_id}' to '{self.logical_id}' "
                f"in state {self.state.value}",
                resource_type=self.kind.value
            )
        if logical_id not in self._depends_on:
            self._depends_on.append(logical_id)

    def advance(self, state: NodeState) -> None:
        order = list(NodeState)
        if order.index(state) != order.index(self.state) + 1:
            raise ResourceCreationError(
                f"Invalid state transition for '{self.logical_id}': "
                f"{self.state.value} -> {state.value}",
                resource_type=self.kind.value
            )
        self.state = state

    def to_dict(self) -> Dict[str, Any]:
        return {
            "logical_id": self.logical_id,
            "kind": self.kind.value,
            "depends_on": list(self._depends_on),
            "properties": copy.deepcopy(dict(self.properties)),
        }

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceNode):
            return NotImplemented
        return self.to_dict() == other.to_dict() and self.state == other.state

    def __repr__(self) -> str:
        return (f"ResourceNode(logical_id={self.logical_id!r}, kind={self.kind.value}, "
                f"depends_on={self._depends_on!r}, state={self.state.value})")


class ResourceGraph:
    """Arena of resource nodes indexed by logical id, in definition order."""

    def __init__(self) -> None:
        self._nodes: Dict[str, ResourceNode] = {}
        self._state = NodeState.DEFINED

    @property
    def state(self) -> NodeState:
        return self._state

    @property
    def is_finalized(self) -> bool:
        return self._state == NodeState.FINALIZED

    def __contains__(self, logical_id: object) -> bool:
        return logical_id in self._nodes

    def __iter__(self) -> Iterator[ResourceNode]:
        return iter(self._nodes.values())

    def __len__(self) -> int:
        return len(self._nodes)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ResourceGraph):
            return NotImplemented
        return self._state == other._state and self.to_dict() == other.to_dict()

    def get(self, logical_id: str) -> ResourceNode:
        return self._nodes[logical_id]

    def add_node(self,
                 logical_id: str,
                 kind: ResourceKind,
                 properties: Mapping[str, Any],
                 depends_on: Sequence[str] = ()) -> ResourceNode:
        """
        Define a new node.

        Raises:
            ConfigurationConflict: If the logical id is already taken
            ResourceCreationError: If the graph has already been linked
        """
        if self._state != NodeState.DEFINED:
            raise ResourceCreationError(
                f"Cannot add '{logical_id}' to a graph in state {self._state.value}",
                resource_type=kind.value
            )
        if logical_id in self._nodes:
            raise ConfigurationConflict(
                f"Duplicate resource logical id '{logical_id}'",
                config_key=logical_id
            )
        node = ResourceNode(logical_id, kind, properties, depends_on)
        self._nodes[logical_id] = node
        return node

    def add_dependency(self, logical_id: str, depends_on: str) -> None:
        """Attach an ordering edge; the target is checked when the graph is linked."""
        self.get(logical_id).add_dependency(depends_on)

    def nodes_of_kind(self, kind: ResourceKind) -> List[ResourceNode]:
        return [node for node in self._nodes.values() if node.kind == kind]

    def link(self) -> None:
        """
        Validate every dependency edge and move all nodes to LINKED.

        Raises:
            DanglingReference: If an edge targets a logical id not in the graph
            ResourceCreationError: If the edges form a cycle
        """
        for node in self._nodes.values():
            for dependency in node.depends_on:
                if dependency not in self._nodes:
                    raise DanglingReference(node.logical_id, dependency)

        # Raises on cycles before any state changes
        self._topological_order()

        for node in self._nodes.values():
            node.advance(NodeState.LINKED)
        self._state = NodeState.LINKED

    def finalize(self) -> None:
        if self._state != NodeState.LINKED:
            raise ResourceCreationError(
                f"Graph must be linked before finalizing (state {self._state.value})",
                resource_type="ResourceGraph"
            )
        for node in self._nodes.values():
            node.advance(NodeState.FINALIZED)
        self._state = NodeState.FINALIZED

    def ordered_nodes(self) -> List[ResourceNode]:
        """Nodes in dependency order; ties keep definition order."""
        return self._topological_order()

    def _topological_order(self) -> List[ResourceNode]:
        remaining = list(self._nodes.values())
        emitted: Dict[str, ResourceNode] = {}
        while remaining:
            ready = next(
                (node for node in remaining
                 if all(dep in emitted or dep not in self._nodes for dep in node.depends_on)),
                None
            )
            if ready is None:
                raise ResourceCreationError(
                    "Dependency cycle between resources: "
                    f"{', '.join(node.logical_id for node in remaining)}",
                    resource_type="ResourceGraph"
                )
            emitted[ready.logical_id] = ready
            remaining.remove(ready)
        return list(emitted.values())

    def to_dict(self) -> Dict[str, Any]:
        return {"nodes": [node.to_dict() for node in self.ordered_nodes()]}

    def to_json(self) -> str:
        """Canonical JSON rendering; identical graphs give identical text."""
        return json.dumps(self.to_dict(), sort_keys=True, indent=2)


def _id_component(name: str) -> str:
    return re.sub(r'[^A-Za-z0-9]', '', name)


class IdentityGraphBuilder:
    """
    Composes the directory, domain, providers, app client and branding
    resources of one stack into a finalized ResourceGraph.

    Logical ids are the application name followed by a fixed per-kind
    suffix, so identical configuration always yields an identical graph.
    """

    def __init__(self,
                 config: StackConfig,
                 providers: Sequence[ProviderSpec],
                 branding: BrandingConfiguration) -> None:
        self.config = config
        self.providers = list(providers)
        self.branding = branding

    def logical_id(self, suffix: str) -> str:
        return f"{self.config.app_name}{suffix}"

    def provider_logical_id(self, provider: ProviderSpec) -> str:
        return self.logical_id(f"{IDENTITY_PROVIDER_SUFFIX}{_id_component(provider.provider_name)}")

    def build(self) -> ResourceGraph:
        """
        Build, link and finalize the resource graph.

        Raises:
            ConfigurationConflict: If the domain mode is ambiguous
            DanglingReference: If an edge targets an undefined resource
        """
        graph = self.define()
        graph.link()
        graph.finalize()
        logger.info(
            f"Resource graph for {self.config.app_name} finalized with {len(graph)} resources"
        )
        return graph

    def define(self) -> ResourceGraph:
        """Define every node and edge without linking."""
        graph = ResourceGraph()

        user_pool_id = self._add_directory(graph)
        self._add_domain(graph, user_pool_id)
        provider_ids = [
            self._add_provider(graph, user_pool_id, provider)
            for provider in self.providers
            if provider.enabled and provider.is_external
        ]
        client_id = self._add_client(graph, user_pool_id, provider_ids)

        # Supporting a provider does not order the client after it, so the
        # edges are added explicitly once every provider node exists.
        for provider_id in provider_ids:
            graph.add_dependency(client_id, provider_id)

        self._add_branding(graph, user_pool_id, client_id)
        return graph

    def _add_directory(self, graph: ResourceGraph) -> str:
        logical_id = self.logical_id(USER_POOL_SUFFIX)
        graph.add_node(logical_id, ResourceKind.DIRECTORY, {
            "user_pool_name": logical_id,
            "self_sign_up_enabled": True,
            "sign_in_case_sensitive": False,
            "user_verification": {
                "email_subject": self.config.verification_subject,
                "email_body": self.config.verification_body,
                "email_style": DEFAULT_VERIFICATION_EMAIL_STYLE,
            },
            "sign_in_aliases": {"username": False, "email": True},
            "auto_verify": {"email": True},
            "keep_original": {"email": True},
            "mfa": DEFAULT_MFA_MODE,
            "mfa_second_factor": {"otp": True, "sms": False},
            "account_recovery": DEFAULT_ACCOUNT_RECOVERY,
            "standard_attributes": {
                name: {"required": True, "mutable": True}
                for name in REQUIRED_STANDARD_ATTRIBUTES
            },
            "password_policy": {
                "min_length": DEFAULT_COGNITO_PASSWORD_MIN_LENGTH,
                "require_lowercase": DEFAULT_REQUIRE_LOWERCASE,
                "require_uppercase": DEFAULT_REQUIRE_UPPERCASE,
                "require_digits": DEFAULT_REQUIRE_DIGITS,
                "require_symbols": DEFAULT_REQUIRE_SYMBOLS,
            },
        })
        return logical_id

    def _add_domain(self, graph: ResourceGraph, user_pool_id: str) -> str:
        logical_id = self.logical_id(DOMAIN_SUFFIX)
        domain = DomainSpec.from_config(self.config)
        properties = domain.to_dict()
        properties.update({
            "user_pool": user_pool_id,
            "managed_login_version": DEFAULT_MANAGED_LOGIN_VERSION,
        })
        graph.add_node(logical_id, ResourceKind.DOMAIN, properties, depends_on=[user_pool_id])
        return logical_id

    def _add_provider(self, graph: ResourceGraph, user_pool_id: str, provider: ProviderSpec) -> str:
        logical_id = self.provider_logical_id(provider)
        properties = provider.to_dict()
        properties["user_pool"] = user_pool_id
        graph.add_node(logical_id, ResourceKind.PROVIDER, properties, depends_on=[user_pool_id])
        return logical_id

    def _add_client(self, graph: ResourceGraph, user_pool_id: str, provider_ids: List[str]) -> str:
        logical_id = self.logical_id(USER_POOL_CLIENT_SUFFIX)

        supported = [{
            "kind": NATIVE_DIRECTORY.kind.value,
            "provider_name": NATIVE_DIRECTORY.provider_name,
            "logical_id": None,
        }]
        for provider_id in provider_ids:
            provider = graph.get(provider_id).properties
            supported.append({
                "kind": provider["kind"],
                "provider_name": provider["provider_name"],
                "logical_id": provider_id,
            })

        graph.add_node(logical_id, ResourceKind.CLIENT, {
            "user_pool_client_name": logical_id,
            "user_pool": user_pool_id,
            "generate_secret": False,
            "prevent_user_existence_errors": True,
            "auth_flows": {"user_srp": True},
            "supported_identity_providers": supported,
            "oauth": {
                "callback_urls": list(self.config.callback_urls),
                "logout_urls": list(self.config.logout_urls),
                "flows": {"authorization_code_grant": True},
                "scopes": list(DEFAULT_OAUTH_SCOPES),
            },
        }, depends_on=[user_pool_id])
        return logical_id

    def _add_branding(self, graph: ResourceGraph, user_pool_id: str, client_id: str) -> str:
        logical_id = self.logical_id(MANAGED_LOGIN_BRANDING_SUFFIX)
        graph.add_node(logical_id, ResourceKind.BRANDING, {
            "user_pool": user_pool_id,
            "client": client_id,
            "return_merged_resources": True,
            "settings": self.branding.settings,
            "assets": [asset.to_dict() for asset in self.branding.assets],
        }, depends_on=[user_pool_id, client_id])
        return logical_id
