#!/usr/bin/env python3
import os

import aws_cdk as cdk

from requests_api.config import configure_logging
from requests_api.requests_api_stack import RequestsApiStack

configure_logging()

app = cdk.App()
RequestsApiStack(app, "ApiLambdaCrudDynamoDBExample",
    env=cdk.Environment(
        account=os.getenv("CDK_DEFAULT_ACCOUNT"),
        region=os.getenv("CDK_DEFAULT_REGION"),
    ),
)

app.synth()
