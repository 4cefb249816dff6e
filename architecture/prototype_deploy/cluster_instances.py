"""Look at a deployed cluster: which instances run in which role, and where
the load balancer answers.

    python -m architecture.prototype_deploy.cluster_instances opensearch-infra-stack
"""
import argparse
import logging
from typing import Dict, List, Optional

import boto3
import botocore.exceptions

from common.helpers import group_by

logger = logging.getLogger(__name__)

LOADBALANCER_OUTPUT_KEY = 'loadbalancerurl'

"""
describe_instances gives one dict per instance, the keys used here:
'InstanceId', 'PrivateIpAddress', 'State', 'Tags'.
The cdk puts the construct path in the Name tag, e.g.
[{'Key': 'Name', 'Value': 'opensearch-infra-stack/seedNodeAsg'},
 {'Key': 'role', 'Value': 'manager'}, ...]
"""

def get_tag(instance_dict: dict, key: str) -> Optional[str]:
    for tag in instance_dict.get('Tags', []):
        if tag['Key'] == key:
            return tag['Value']
    return None

def get_running_instances_of_stack(stack_name: str, ec2_client=None) -> List[dict]:
    """
    :raises ValueError: If nothing of the stack is running.
    """
    ec2_client = ec2_client or boto3.client('ec2')
    paginator = ec2_client.get_paginator('describe_instances')
    instances = []
    for page in paginator.paginate(
        Filters=[{
            'Name': 'instance-state-name',
            'Values': ['running']
        },{
            'Name': 'tag:aws:cloudformation:stack-name',
            'Values': [stack_name]
        }]
    ):
        for reservation in page['Reservations']:
            instances.extend(reservation['Instances'])
    if not instances:
        raise ValueError(f"No running instances found for stack {stack_name}")
    return instances

def get_instances_by_role(stack_name: str, ec2_client=None) -> Dict[str, List[dict]]:
    instances = get_running_instances_of_stack(stack_name, ec2_client)
    return group_by(instances, lambda instance: get_tag(instance, 'role') or 'untagged')

def get_loadbalancer_url(stack_name: str, cloudformation_client=None) -> str:
    """
    :raises ValueError: If the stack has no load balancer output, e.g. it is
    still being created.
    """
    cloudformation_client = cloudformation_client or boto3.client('cloudformation')
    stacks = cloudformation_client.describe_stacks(StackName=stack_name)['Stacks']
    for output in stacks[0].get('Outputs', []):
        if output['OutputKey'] == LOADBALANCER_OUTPUT_KEY:
            return output['OutputValue']
    raise ValueError(f"Stack {stack_name} has no {LOADBALANCER_OUTPUT_KEY} output")

def main(argv=None):
    parser = argparse.ArgumentParser(description="Show the nodes of a deployed search cluster.")
    parser.add_argument('stack_name', help="Name of the infra stack, e.g. opensearch-infra-stack")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    try:
        logger.info("Load balancer: %s", get_loadbalancer_url(args.stack_name))
        for role, instances in sorted(get_instances_by_role(args.stack_name).items()):
            for instance in instances:
                logger.info("%-8s %s %s", role, instance['InstanceId'], instance.get('PrivateIpAddress', '-'))
    except (ValueError, botocore.exceptions.ClientError) as e:
        logger.error(str(e))
        return 1
    return 0

if __name__ == '__main__':
    raise SystemExit(main())
