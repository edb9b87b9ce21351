#!/usr/bin/env python3

import logging
import os
import sys

import aws_cdk as cdk
from cdk_nag import AwsSolutionsChecks, NagSuppressions

from helper import config
from stacks.common.exceptions import (
    ResourceCreationError,
    StackConfigurationError,
    ValidationError
)
from stacks.federated_identity import FederatedIdentityStack

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

app = cdk.App()

conf = config.Config(app.node.try_get_context('environment') or 'development')

try:
    stack_config = conf.stack_config()

    identity_stack = FederatedIdentityStack(app, f"{stack_config.app_name}CognitoStack",
                                            config=conf,
                                            env={
                                                "region": stack_config.region,
                                                "account": os.environ.get('CDK_DEFAULT_ACCOUNT')
                                            },
                                            termination_protection=True  # Protect the user directory
                                            )
except (StackConfigurationError, ResourceCreationError, ValidationError) as e:
    logger.error(f"Cannot synthesize the identity stack: {e}")
    sys.exit(1)

# Apply CDK Nag AwsSolutions checks when requested: cdk synth -c nag=true
if app.node.try_get_context('nag'):
    cdk.Aspects.of(app).add(AwsSolutionsChecks())

NagSuppressions.add_stack_suppressions(identity_stack, [
    {"id": "AwsSolutions-COG1", "reason": "Password policy does not require symbols to keep social and native sign-up consistent"},
    {"id": "AwsSolutions-COG2", "reason": "MFA is optional (TOTP) so federated users are not forced to enroll"},
    {"id": "AwsSolutions-COG3", "reason": "Advanced security mode requires the Plus feature plan, which is not enabled"}
])

app.synth()
