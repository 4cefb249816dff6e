from enum import Enum
from typing import Optional

class AWSServiceType(Enum):
    IAM = 'iam'

    def __str__(self):
        return self.value

class AWSManagedPolicy(Enum):
    """Managed policies attached to every search node's instance role."""
    EC2ReadOnly = 'AmazonEC2ReadOnlyAccess'
    CloudWatchAgentServer = 'CloudWatchAgentServerPolicy'
    SSMManagedInstanceCore = 'AmazonSSMManagedInstanceCore'

    def __str__(self):
        return self.value

# ec2 discovery describes instances, the agent ships logs/metrics,
# ssm gives a shell without a bastion.
INSTANCE_ROLE_POLICIES = [
    AWSManagedPolicy.EC2ReadOnly,
    AWSManagedPolicy.CloudWatchAgentServer,
    AWSManagedPolicy.SSMManagedInstanceCore,
]

class ARN:
    """
arn:partition:service:region:account-id:resource-id
arn:partition:service:region:account-id:resource-type/resource-id
arn:partition:service:region:account-id:resource-type:resource-id
    """

    def __init__(
        self,
        service: str,
        region: str,
        account_id: str,
        resource_id: str,
        resource_type: Optional[str] = None,
        partition: str = 'aws',
        separator: str = '/'
    ):
        self.service = service
        self.region = region
        self.account_id = account_id
        self.resource_id = resource_id
        self.resource_type = resource_type
        self.partition = partition
        self.separator = separator

    def __str__(self):
        resource = self.resource_id
        if self.resource_type:
            resource = f"{self.resource_type}{self.separator}{self.resource_id}"
        return f"arn:{self.partition}:{self.service}:{self.region}:{self.account_id}:{resource}"

    def __eq__(self, other):
        if not isinstance(other, ARN):
            return False
        return str(self) == str(other)

    @classmethod
    def from_string(cls, arn: str) -> 'ARN':
        """
        :raises ValueError: If arn does not have the six colon separated parts.
        """
        parts = arn.split(':', 5)
        if len(parts) != 6 or parts[0] != 'arn' or not parts[5]:
            raise ValueError(f"{arn} is not a valid ARN")
        _, partition, service, region, account_id, resource = parts
        resource_type = None
        separator = '/'
        if '/' in resource:
            resource_type, resource = resource.split('/', 1)
        elif ':' in resource:
            resource_type, resource = resource.split(':', 1)
            separator = ':'
        return cls(service, region, account_id, resource, resource_type, partition, separator)

def validate_role_arn(arn: str) -> ARN:
    """An IAM role, e.g. arn:aws:iam::123456789012:role/search-node."""
    parsed = ARN.from_string(arn)
    if parsed.service != str(AWSServiceType.IAM) or parsed.resource_type != 'role':
        raise ValueError(f"{arn} is not an IAM role ARN")
    return parsed
