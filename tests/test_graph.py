"""
Unit tests for the resource graph and the identity graph builder.

These validate node lifecycle, edge validation, ordering and the shape of
the graph built for different provider and domain configurations.
"""

import json

import pytest

from helper.config import resolve_stack_config
from stacks.common.exceptions import (
    ConfigurationConflict,
    DanglingReference,
    ResourceCreationError
)
from stacks.federated_identity.branding import merge_branding
from stacks.federated_identity.graph import (
    DomainMode,
    DomainSpec,
    IdentityGraphBuilder,
    NodeState,
    ResourceGraph,
    ResourceKind
)
from stacks.federated_identity.providers import ProviderSelector


def build_graph(config):
    providers = ProviderSelector(config).select()
    return IdentityGraphBuilder(config, providers, merge_branding()).build()


@pytest.fixture
def all_providers_config(managed_environ):
    managed_environ.update({
        "GOOGLE_CLIENT_ID": "g", "GOOGLE_CLIENT_SECRET": "gs",
        "FACEBOOK_CLIENT_ID": "f", "FACEBOOK_CLIENT_SECRET": "fs",
        "OIDC_CLIENT_ID": "o", "OIDC_CLIENT_SECRET": "os",
    })
    return resolve_stack_config(managed_environ)


class TestResourceGraph:
    """Test graph lifecycle and edge validation."""

    def test_link_and_finalize_advance_every_node(self):
        graph = ResourceGraph()
        graph.add_node("Pool", ResourceKind.DIRECTORY, {})
        graph.add_node("Client", ResourceKind.CLIENT, {}, depends_on=["Pool"])

        assert graph.state == NodeState.DEFINED
        graph.link()
        assert all(node.state == NodeState.LINKED for node in graph)
        graph.finalize()

        assert graph.is_finalized
        assert all(node.state == NodeState.FINALIZED for node in graph)

    def test_dangling_edge_rejected(self):
        graph = ResourceGraph()
        graph.add_node("Client", ResourceKind.CLIENT, {})
        graph.add_dependency("Client", "GhostProvider")

        with pytest.raises(DanglingReference) as exc_info:
            graph.link()

        assert exc_info.value.logical_id == "Client"
        assert exc_info.value.missing_id == "GhostProvider"
        assert graph.state == NodeState.DEFINED

    def test_duplicate_logical_id_conflicts(self):
        graph = ResourceGraph()
        graph.add_node("Pool", ResourceKind.DIRECTORY, {})

        with pytest.raises(ConfigurationConflict):
            graph.add_node("Pool", ResourceKind.DIRECTORY, {})

    def test_edges_rejected_after_link(self):
        graph = ResourceGraph()
        graph.add_node("Pool", ResourceKind.DIRECTORY, {})
        graph.add_node("Client", ResourceKind.CLIENT, {})
        graph.link()

        with pytest.raises(ResourceCreationError):
            graph.add_dependency("Client", "Pool")
        with pytest.raises(ResourceCreationError):
            graph.add_node("Branding", ResourceKind.BRANDING, {})

    def test_finalize_requires_link(self):
        graph = ResourceGraph()
        graph.add_node("Pool", ResourceKind.DIRECTORY, {})

        with pytest.raises(ResourceCreationError):
            graph.finalize()

    def test_cycle_rejected(self):
        graph = ResourceGraph()
        graph.add_node("A", ResourceKind.PROVIDER, {}, depends_on=["B"])
        graph.add_node("B", ResourceKind.PROVIDER, {}, depends_on=["A"])

        with pytest.raises(ResourceCreationError):
            graph.link()

    def test_ordered_nodes_respects_edges(self):
        graph = ResourceGraph()
        graph.add_node("Client", ResourceKind.CLIENT, {}, depends_on=["Pool", "Provider"])
        graph.add_node("Provider", ResourceKind.PROVIDER, {}, depends_on=["Pool"])
        graph.add_node("Pool", ResourceKind.DIRECTORY, {})
        graph.link()

        order = [node.logical_id for node in graph.ordered_nodes()]

        assert order == ["Pool", "Provider", "Client"]

    def test_node_properties_are_read_only(self):
        graph = ResourceGraph()
        properties = {"name": "pool"}
        node = graph.add_node("Pool", ResourceKind.DIRECTORY, properties)
        properties["name"] = "changed"

        assert node.properties["name"] == "pool"
        with pytest.raises(TypeError):
            node.properties["name"] = "other"


class TestDomainSpec:
    """Test hosted domain selection."""

    def test_managed_domain_urls(self, managed_config):
        domain = DomainSpec.from_config(managed_config)

        assert domain.mode == DomainMode.MANAGED
        assert domain.base_url == "https://shop-login.auth.us-east-1.amazoncognito.com"
        assert domain.token_url == "https://shop-login.auth.us-east-1.amazoncognito.com/oauth2/token"

    def test_custom_domain_urls(self, custom_google_config):
        domain = DomainSpec.from_config(custom_google_config)

        assert domain.mode == DomainMode.CUSTOM
        assert domain.base_url == "https://login.shop.example"
        assert domain.to_dict()["certificate_arn"] == custom_google_config.certificate_arn


class TestIdentityGraphBuilder:
    """Test the graph built for a stack configuration."""

    def test_native_only_client(self, managed_config):
        graph = build_graph(managed_config)

        assert graph.is_finalized
        assert graph.nodes_of_kind(ResourceKind.PROVIDER) == []

        client, = graph.nodes_of_kind(ResourceKind.CLIENT)
        sources = client.properties["supported_identity_providers"]
        assert [source["provider_name"] for source in sources] == ["COGNITO"]
        assert client.depends_on == ("ShopUserPool",)

    def test_logical_ids_derive_from_app_name(self, managed_config):
        graph = build_graph(managed_config)

        assert [node.logical_id for node in graph] == [
            "ShopUserPool",
            "ShopCognitoDomain",
            "ShopUserPoolClient",
            "ShopManagedLoginBranding",
        ]

    def test_each_provider_gets_a_node_and_client_edge(self, all_providers_config):
        graph = build_graph(all_providers_config)

        providers = graph.nodes_of_kind(ResourceKind.PROVIDER)
        provider_ids = [node.logical_id for node in providers]
        assert provider_ids == [
            "ShopIdentityProviderGoogle",
            "ShopIdentityProviderFacebook",
            "ShopIdentityProviderMicrosoft",
        ]

        client = graph.get("ShopUserPoolClient")
        for provider_id in provider_ids:
            assert provider_id in client.depends_on

        sources = client.properties["supported_identity_providers"]
        assert [source["kind"] for source in sources] == ["COGNITO", "GOOGLE", "FACEBOOK", "OIDC"]

    def test_client_ordered_after_every_provider(self, all_providers_config):
        graph = build_graph(all_providers_config)
        order = [node.logical_id for node in graph.ordered_nodes()]

        client_position = order.index("ShopUserPoolClient")
        for node in graph.nodes_of_kind(ResourceKind.PROVIDER):
            assert order.index(node.logical_id) < client_position

    def test_branding_depends_on_pool_and_client(self, managed_config):
        graph = build_graph(managed_config)

        branding, = graph.nodes_of_kind(ResourceKind.BRANDING)

        assert branding.depends_on == ("ShopUserPool", "ShopUserPoolClient")
        assert branding.properties["return_merged_resources"] is True
        assert len(branding.properties["assets"]) == 2

    def test_oauth_settings(self, custom_google_config):
        graph = build_graph(custom_google_config)

        oauth = graph.get("ShopUserPoolClient").properties["oauth"]

        assert oauth["callback_urls"] == ["https://shop.example/cb", "https://localhost/cb"]
        assert oauth["logout_urls"] == ["https://shop.example/out"]
        assert oauth["flows"] == {"authorization_code_grant": True}
        assert oauth["scopes"] == ["openid", "email", "profile"]

    def test_directory_settings(self, managed_config):
        graph = build_graph(managed_config)

        pool = graph.get("ShopUserPool").properties

        assert pool["self_sign_up_enabled"] is True
        assert pool["sign_in_aliases"] == {"username": False, "email": True}
        assert pool["mfa"] == "OPTIONAL"
        assert pool["account_recovery"] == "EMAIL_ONLY"
        assert pool["password_policy"]["min_length"] == 8
        assert pool["password_policy"]["require_symbols"] is False
        assert set(pool["standard_attributes"]) == {"email", "given_name", "family_name"}

    def test_build_is_deterministic(self, all_providers_config):
        first = build_graph(all_providers_config)
        second = build_graph(all_providers_config)

        assert first == second
        assert first.to_json() == second.to_json()
        assert json.loads(first.to_json())["nodes"][0]["logical_id"] == "ShopUserPool"

    def test_zero_providers_is_legal(self, managed_config):
        graph = IdentityGraphBuilder(managed_config, [], merge_branding()).build()

        assert len(graph) == 4
