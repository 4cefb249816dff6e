"""How many machines of which kind a cluster is made of.

A multi node cluster always has exactly one seed node, which bootstraps
cluster formation. The seed is taken out of the manager count when there are
managers at all, and out of the data count otherwise.
"""
import logging
from enum import Enum
from typing import List, Optional

from architecture.generic.exceptions import (
    InvalidClusterConfiguration,
    InvalidClusterConfigurationException,
)
from architecture.generic.metrics import validate_nonnegative_integer
from architecture.generic_elasticsearch.backbone import (
    MANAGER_GROUP_ID,
    SEED_GROUP_ID,
    NodeRole,
)

logger = logging.getLogger(__name__)

def validate_node_count(value: int, name: str):
    try:
        validate_nonnegative_integer(value, name)
    except ValueError as e:
        raise InvalidClusterConfigurationException(
            InvalidClusterConfiguration.InvalidNodeCount, str(e)
        ) from e

class StorageProfile(Enum):
    Root = 1
    Data = 2
    ML = 3

class NodeGroup:
    """One auto scaling group worth of identical nodes.

    :param construct_id: Also the suffix of the instances' Name tag,
    which ec2 discovery filters on.
    :param node_role: Role overlay rendered into the node's config,
    None for a single node cluster.
    :param role_tag: Value of the "role" tag on the group.
    """

    def __init__(
        self,
        construct_id: str,
        capacity: int,
        node_role: Optional[NodeRole],
        role_tag: str,
        storage_profile: StorageProfile = StorageProfile.Root,
        client_facing: bool = False
    ):
        validate_node_count(capacity, f"{construct_id} capacity")
        self.construct_id = construct_id
        self.capacity = capacity
        self.node_role = node_role
        self.role_tag = role_tag
        self.storage_profile = storage_profile
        self.client_facing = client_facing

    def __repr__(self):
        return (
            f"NodeGroup({self.construct_id!r}, capacity={self.capacity}, "
            f"role={self.node_role}, tag={self.role_tag!r})"
        )

DATA_GROUP_ID = 'dataNodeAsg'
CLIENT_GROUP_ID = 'clientNodeAsg'
ML_GROUP_ID = 'mlNodeAsg'

class ClusterTopology:

    def __init__(
        self,
        single_node: bool = False,
        manager_count: int = 3,
        data_count: int = 2,
        client_count: int = 0,
        ingest_count: int = 0,
        ml_count: int = 0,
        zone_count: int = 3
    ):
        validate_node_count(manager_count, "managerNodeCount")
        validate_node_count(data_count, "dataNodeCount")
        validate_node_count(client_count, "clientNodeCount")
        validate_node_count(ingest_count, "ingestNodeCount")
        validate_node_count(ml_count, "mlNodeCount")
        validate_node_count(zone_count, "networkAvailabilityZones")
        if zone_count == 0:
            raise InvalidClusterConfigurationException(
                InvalidClusterConfiguration.InvalidNodeCount,
                "At least one availability zone is needed"
            )
        if not single_node and manager_count == 0 and data_count == 0:
            raise InvalidClusterConfigurationException(
                InvalidClusterConfiguration.NoSeedCandidate,
                "A multi node cluster needs at least one manager or data node to act as seed"
            )
        self.single_node = single_node
        self.manager_count = manager_count
        self.data_count = data_count
        self.client_count = client_count
        self.ingest_count = ingest_count
        self.ml_count = ml_count
        self.zone_count = zone_count

    @property
    def seed_role(self) -> Optional[NodeRole]:
        if self.single_node:
            return None
        if self.manager_count > 0:
            return NodeRole.SeedManager
        return NodeRole.SeedData

    @property
    def manager_group_capacity(self) -> int:
        if self.seed_role == NodeRole.SeedManager:
            return self.manager_count - 1
        return self.manager_count

    @property
    def data_group_capacity(self) -> int:
        if self.seed_role == NodeRole.SeedData:
            return self.data_count - 1
        return self.data_count

    def node_groups(self) -> List[NodeGroup]:
        """The auto scaling groups to create, in creation order.
        Exactly one of them is client facing.
        """
        if self.single_node:
            logger.info("Single node value is true, creating single node configurations")
            return [NodeGroup(DATA_GROUP_ID, 1, None, 'client', client_facing=True)]

        if self.ingest_count:
            logger.info("Ingest is served by data nodes, ignoring ingestNodeCount=%d", self.ingest_count)

        groups = []
        if self.manager_group_capacity > 0:
            groups.append(NodeGroup(MANAGER_GROUP_ID, self.manager_group_capacity, NodeRole.Manager, 'manager'))
        groups.append(NodeGroup(SEED_GROUP_ID, 1, self.seed_role, 'manager'))

        data_is_client = self.client_count == 0
        groups.append(NodeGroup(
            DATA_GROUP_ID,
            self.data_group_capacity,
            NodeRole.Data,
            'client' if data_is_client else 'data',
            StorageProfile.Data,
            client_facing=data_is_client
        ))
        if data_is_client and self.data_group_capacity == 0:
            logger.warning("The client facing data group has no instances, the load balancer will have no targets")
        if not data_is_client:
            groups.append(NodeGroup(CLIENT_GROUP_ID, self.client_count, NodeRole.Client, 'client', client_facing=True))
        if self.ml_count > 0:
            groups.append(NodeGroup(ML_GROUP_ID, self.ml_count, NodeRole.ML, 'ml-node', StorageProfile.ML))
        return groups

    def client_facing_group(self) -> NodeGroup:
        return next(group for group in self.node_groups() if group.client_facing)
