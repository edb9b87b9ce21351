"""
Federated Identity Stack Module

Resource graph construction for a Cognito federated identity subsystem and
the CDK stack that provisions it.
"""

from .providers import NATIVE_DIRECTORY, ProviderKind, ProviderSelector, ProviderSpec
from .branding import (
    DEFAULT_BRANDING_SETTINGS,
    AssetDeclaration,
    BrandingConfiguration,
    load_asset_declarations,
    merge_branding,
    merge_settings,
)
from .graph import (
    DomainMode,
    DomainSpec,
    IdentityGraphBuilder,
    NodeState,
    ResourceGraph,
    ResourceKind,
    ResourceNode,
)
from .parameters import AttributeReference, ExportedParameter, ParameterExporter
from .plan import ProvisioningPlan, build_plan
from .stack import FederatedIdentityStack

__all__ = [
    "NATIVE_DIRECTORY",
    "ProviderKind",
    "ProviderSelector",
    "ProviderSpec",
    "DEFAULT_BRANDING_SETTINGS",
    "AssetDeclaration",
    "BrandingConfiguration",
    "load_asset_declarations",
    "merge_branding",
    "merge_settings",
    "DomainMode",
    "DomainSpec",
    "IdentityGraphBuilder",
    "NodeState",
    "ResourceGraph",
    "ResourceKind",
    "ResourceNode",
    "AttributeReference",
    "ExportedParameter",
    "ParameterExporter",
    "ProvisioningPlan",
    "build_plan",
    "FederatedIdentityStack",
]
