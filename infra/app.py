#!/usr/bin/env python3
import os
import sys

import aws_cdk as cdk

sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "shared"))

from stack.contract_billing_stack import ContractBillingStack


app = cdk.App()

account = app.node.try_get_context("account") or os.getenv("CDK_DEFAULT_ACCOUNT")
region  = app.node.try_get_context("region")  or os.getenv("CDK_DEFAULT_REGION")

if not account or not region:
    raise ValueError(
        "Provide AWS account and region via CDK context "
        "(-c account=... -c region=...) or set CDK_DEFAULT_ACCOUNT / CDK_DEFAULT_REGION."
    )

env = cdk.Environment(account=account, region=region)

ContractBillingStack(app, "ContractBillingStack", env=env)

app.synth()
