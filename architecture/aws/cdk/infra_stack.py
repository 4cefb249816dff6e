import logging
from typing import Dict, Optional

from aws_cdk import (
    CfnOutput,
    RemovalPolicy,
    Stack,
    Tags,
    aws_autoscaling as autoscaling,
    aws_ec2 as ec2,
    aws_elasticloadbalancingv2 as elbv2,
    aws_iam as iam,
    aws_logs as logs,
)
from constructs import Construct

from architecture.aws.cdk.cfn_init import to_cloudformation_init
from architecture.aws.cdk.context import DeploymentContext
from architecture.aws.iam.primitives import INSTANCE_ROLE_POLICIES
from architecture.generic.machine import (
    CpuArchitecture,
    RootDevice,
    StorageDevice,
    default_instance_type,
)
from architecture.generic_elasticsearch.provisioning import (
    ProvisioningOptions,
    build_provisioning_steps,
)
from architecture.generic_elasticsearch.topology import NodeGroup, StorageProfile

logger = logging.getLogger(__name__)

LOG_GROUP_NAME = 'opensearchLogGroup/opensearch.log'
OPENSEARCH_TARGET_PORT = 9200
DASHBOARDS_TARGET_PORT = 5601
DASHBOARDS_LISTENER_PORT = 8443

def _cpu_type(arch: CpuArchitecture) -> ec2.AmazonLinuxCpuType:
    if arch == CpuArchitecture.X64:
        return ec2.AmazonLinuxCpuType.X86_64
    return ec2.AmazonLinuxCpuType.ARM_64

def _block_device(device: StorageDevice) -> autoscaling.BlockDevice:
    return autoscaling.BlockDevice(
        device_name=device.device_name,
        volume=autoscaling.BlockDeviceVolume.ebs(
            device.size_GB,
            delete_on_termination=True,
            volume_type=autoscaling.EbsDeviceVolumeType[device.volume_type.name.upper()],
        )
    )

def opensearch_listener_port(context: DeploymentContext) -> int:
    """The bundle distribution with security on serves https."""
    if not context.security_disabled and not context.min_distribution:
        return 443
    return 80

class InfraStack(Stack):
    """One auto scaling group per node role, a network load balancer in front
    of the client facing group, and the log group the nodes ship logs to.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        vpc: ec2.IVpc,
        security_group: ec2.ISecurityGroup,
        context: DeploymentContext,
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)
        self.context = context

        self.cluster_log_group = logs.LogGroup(
            self, 'opensearchLogGroup',
            log_group_name=LOG_GROUP_NAME,
            retention=logs.RetentionDays.ONE_MONTH,
            removal_policy=RemovalPolicy.DESTROY,
        )

        if context.custom_role_arn:
            self.instance_role = iam.Role.from_role_arn(self, 'customRole', context.custom_role_arn)
        else:
            self.instance_role = iam.Role(
                self, 'instanceRole',
                managed_policies=[
                    iam.ManagedPolicy.from_aws_managed_policy_name(str(policy))
                    for policy in INSTANCE_ROLE_POLICIES
                ],
                assumed_by=iam.ServicePrincipal('ec2.amazonaws.com'),
            )

        self.provisioning_options = ProvisioningOptions(
            distribution_url=context.distribution_url,
            dist_version=context.dist_version,
            cpu_arch=context.cpu_arch,
            cluster_name=f"{self.stack_name}-{self.account}-{self.region}",
            stack_name=self.stack_name,
            log_group_name=LOG_GROUP_NAME,
            manager_node_count=context.topology.manager_count,
            single_node=context.topology.single_node,
            security_disabled=context.security_disabled,
            min_distribution=context.min_distribution,
            dashboards_url=context.dashboards_url,
            jvm_sys_props=context.jvm_sys_props,
            additional_config=context.additional_config,
            additional_dashboards_config=context.additional_osd_config,
            use_50_percent_heap=context.use_50_percent_heap,
        )

        self.node_groups: Dict[str, autoscaling.AutoScalingGroup] = {}
        client_node_asg: Optional[autoscaling.AutoScalingGroup] = None
        for group in context.topology.node_groups():
            asg = self.add_node_group(vpc, security_group, group)
            if group.client_facing:
                client_node_asg = asg

        self.nlb = elbv2.NetworkLoadBalancer(
            self, 'publicNlb',
            vpc=vpc,
            internet_facing=not context.is_internal,
        )
        opensearch_listener = self.nlb.add_listener(
            'opensearch',
            port=opensearch_listener_port(context),
            protocol=elbv2.Protocol.TCP,
        )
        dashboards_listener = self.nlb.add_listener(
            'dashboards',
            port=DASHBOARDS_LISTENER_PORT,
            protocol=elbv2.Protocol.TCP,
        )
        opensearch_listener.add_targets(
            'opensearchTarget',
            port=OPENSEARCH_TARGET_PORT,
            targets=[client_node_asg],
        )
        dashboards_listener.add_targets(
            'dashboardsTarget',
            port=DASHBOARDS_TARGET_PORT,
            targets=[client_node_asg],
        )

        CfnOutput(
            self, 'loadbalancer-url',
            value=self.nlb.load_balancer_dns_name,
            export_name='Loadbalancer-URL',
        )

    def storage_for(self, group: NodeGroup) -> StorageDevice:
        if group.storage_profile == StorageProfile.Data:
            return StorageDevice(self.context.data_node_storage, self.context.storage_volume_type)
        if group.storage_profile == StorageProfile.ML:
            return StorageDevice(self.context.ml_node_storage, self.context.storage_volume_type)
        return RootDevice()

    def instance_type_for(self, group: NodeGroup) -> str:
        if group.storage_profile == StorageProfile.Data:
            return self.context.data_instance_type
        if group.storage_profile == StorageProfile.ML:
            return self.context.ml_instance_type
        return default_instance_type(self.context.cpu_arch)

    def add_node_group(
        self,
        vpc: ec2.IVpc,
        security_group: ec2.ISecurityGroup,
        group: NodeGroup
    ) -> autoscaling.AutoScalingGroup:
        logger.info("Adding %s", group)
        steps = build_provisioning_steps(self.provisioning_options, group.node_role)
        asg = autoscaling.AutoScalingGroup(
            self, group.construct_id,
            vpc=vpc,
            instance_type=ec2.InstanceType(self.instance_type_for(group)),
            machine_image=ec2.MachineImage.latest_amazon_linux2(
                cpu_type=_cpu_type(self.context.cpu_arch),
            ),
            role=self.instance_role,
            max_capacity=group.capacity,
            min_capacity=group.capacity,
            desired_capacity=group.capacity,
            vpc_subnets=ec2.SubnetSelection(subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS),
            security_group=security_group,
            block_devices=[_block_device(self.storage_for(group))],
            init=to_cloudformation_init(steps),
            init_options=autoscaling.ApplyCloudFormationInitOptions(ignore_failures=False),
            signals=autoscaling.Signals.wait_for_all(),
        )
        Tags.of(asg).add('role', group.role_tag)
        self.node_groups[group.construct_id] = asg
        return asg
