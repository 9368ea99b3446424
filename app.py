#!/usr/bin/env python3
"""AWS CDK entrypoint for provisioning the Loubie Designs infrastructure.

The deployment environment is read from CDK context, for example
``cdk deploy -c environment=prod``; without it the stack deploys as ``dev``.
Account and region come from the CDK CLI defaults, with the region falling
back to us-west-2.
"""
import os

import aws_cdk as cdk
from aws_cdk import Environment

import common.constants as constants
from loubie_designs.loubie_designs_stack import LoubieDesignsInfrastructureStack

app = cdk.App()

env = Environment(
    account=os.getenv("CDK_DEFAULT_ACCOUNT"),
    region=os.getenv("CDK_DEFAULT_REGION") or constants.DEFAULT_REGION,
)

LoubieDesignsInfrastructureStack(
    app,
    constants.STACK_ID,
    env=env,
    description=constants.STACK_DESCRIPTION,
)

app.synth()
