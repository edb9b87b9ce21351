"""
Provisioning plan: the config, finalized resource graph and exported
parameters of one build, produced in a single synchronous pass.

Nothing here talks to AWS. Two deployments of the same plan against the
same account and region at once are not coordinated; CloudFormation's stack
lock is the only protection.
"""

import logging
from dataclasses import dataclass
from typing import List

from helper.config import Config, StackConfig
from .branding import BrandingConfiguration, load_asset_declarations, merge_branding
from .graph import IdentityGraphBuilder, ResourceGraph
from .parameters import ExportedParameter, ParameterExporter
from .providers import ProviderSelector, ProviderSpec

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ProvisioningPlan:
    config: StackConfig
    providers: List[ProviderSpec]
    branding: BrandingConfiguration
    graph: ResourceGraph
    parameters: List[ExportedParameter]


def build_plan(config: Config) -> ProvisioningPlan:
    """
    Run configuration resolution, provider selection, branding merge, graph
    construction and parameter export in order.

    Any configuration error aborts the build before a plan exists.
    """
    stack_config = config.stack_config()
    logger.info(f"Resolved configuration for application {stack_config.app_name}")

    providers = ProviderSelector(stack_config).select()

    asset_entries = config.get_branding_asset_entries()
    assets = None
    if asset_entries is not None:
        assets = load_asset_declarations(asset_entries, base_dir=config.base_dir)
    branding = merge_branding(config.get_branding_settings(), assets)

    graph = IdentityGraphBuilder(stack_config, providers, branding).build()
    parameters = ParameterExporter(graph, stack_config).export()

    return ProvisioningPlan(
        config=stack_config,
        providers=providers,
        branding=branding,
        graph=graph,
        parameters=parameters,
    )
