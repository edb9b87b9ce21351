"""Mixin classes for CDK stacks."""

from .cognito import CognitoMixin
from .parameters import ParameterStoreMixin

__all__ = [
    "CognitoMixin",
    "ParameterStoreMixin"
]
