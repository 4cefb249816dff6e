#!/usr/bin/env python3
"""cdk app: a multi node OpenSearch or Elasticsearch cluster on EC2.

    cdk deploy "*" -c distVersion=2.11.0 -c securityDisabled=false \
        -c minDistribution=false -c cpuArch=x64 \
        -c distributionUrl=https://artifacts.opensearch.org/...tar.gz
"""
import logging
import os

import aws_cdk as cdk

from architecture.aws.cdk.entrypoint import OsClusterEntrypoint

logging.basicConfig(
    level=os.getenv("LOG_LEVEL", "INFO"),
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = cdk.App()

OsClusterEntrypoint(
    app,
    env=cdk.Environment(
        account=os.getenv("CDK_DEFAULT_ACCOUNT"),
        region=os.getenv("CDK_DEFAULT_REGION"),
    ),
)

app.synth()
