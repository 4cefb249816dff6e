from typing import Optional

from aws_cdk import Stack
from aws_cdk import aws_ec2 as ec2
from constructs import Construct

from architecture.aws.cdk.context import ServerAccessType

# Load balancer listener ports, plus the node ports the network load
# balancer forwards to with the client's source address.
SERVER_ACCESS_PORTS = [80, 443, 8443, 9200, 5601]

def server_access_peer(access_type: ServerAccessType, restrict_to: str) -> ec2.IPeer:
    if access_type == ServerAccessType.IPv4:
        return ec2.Peer.ipv4(restrict_to)
    if access_type == ServerAccessType.IPv6:
        return ec2.Peer.ipv6(restrict_to)
    if access_type == ServerAccessType.PrefixList:
        return ec2.Peer.prefix_list(restrict_to)
    if access_type == ServerAccessType.SecurityGroupId:
        return ec2.Peer.security_group_id(restrict_to)
    raise ValueError(f"Did not implement case {access_type}")

class NetworkStack(Stack):
    """The VPC and the security group every search node shares.
    Both are created unless existing ids are given.
    """

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        max_azs: int = 3,
        cidr_block: Optional[str] = None,
        vpc_id: Optional[str] = None,
        security_group_id: Optional[str] = None,
        server_access_type: Optional[ServerAccessType] = None,
        restrict_server_access_to: Optional[str] = None,
        **kwargs
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        if vpc_id:
            self.vpc = ec2.Vpc.from_lookup(self, 'opensearchVpc', vpc_id=vpc_id)
        else:
            self.vpc = ec2.Vpc(
                self, 'opensearchVpc',
                ip_addresses=ec2.IpAddresses.cidr(cidr_block) if cidr_block else None,
                max_azs=max_azs,
                subnet_configuration=[
                    ec2.SubnetConfiguration(name='public-subnet', subnet_type=ec2.SubnetType.PUBLIC, cidr_mask=24),
                    ec2.SubnetConfiguration(name='private-subnet', subnet_type=ec2.SubnetType.PRIVATE_WITH_EGRESS, cidr_mask=24),
                ]
            )

        if security_group_id:
            self.os_security_group = ec2.SecurityGroup.from_security_group_id(
                self, 'osSecurityGroup', security_group_id=security_group_id
            )
        else:
            self.os_security_group = ec2.SecurityGroup(
                self, 'osSecurityGroup', vpc=self.vpc, allow_all_outbound=True
            )
            self.os_security_group.add_ingress_rule(self.os_security_group, ec2.Port.all_traffic())

        if server_access_type and restrict_server_access_to:
            peer = server_access_peer(server_access_type, restrict_server_access_to)
            for port in SERVER_ACCESS_PORTS:
                self.os_security_group.add_ingress_rule(peer, ec2.Port.tcp(port))
