"""
CDK Stack modules for the Cognito federated identity application.

Stack classes live in their own subpackages and are imported from there,
e.g. ``from stacks.federated_identity import FederatedIdentityStack``.
"""
