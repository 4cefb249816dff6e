from typing import List

from aws_cdk import Stack
from constructs import Construct

from architecture.aws.cdk.context import DeploymentContext
from architecture.aws.cdk.infra_stack import InfraStack
from architecture.aws.cdk.network_stack import NetworkStack

class OsClusterEntrypoint:
    """Reads the deployment context off the app and creates the network
    stack and the infra stack depending on it.
    """

    def __init__(self, scope: Construct, **stack_props):
        self.context = DeploymentContext.from_lookup(scope.node.try_get_context)
        self.stacks: List[Stack] = []

        network = NetworkStack(
            scope, self.context.network_stack_name,
            max_azs=self.context.topology.zone_count,
            cidr_block=self.context.cidr,
            vpc_id=self.context.vpc_id,
            security_group_id=self.context.security_group_id,
            server_access_type=self.context.server_access_type,
            restrict_server_access_to=self.context.restrict_server_access_to,
            **stack_props
        )
        self.vpc = network.vpc
        self.security_group = network.os_security_group
        self.stacks.append(network)

        infra = InfraStack(
            scope, self.context.infra_stack_name,
            vpc=self.vpc,
            security_group=self.security_group,
            context=self.context,
            **stack_props
        )
        infra.add_dependency(network)
        self.stacks.append(infra)
