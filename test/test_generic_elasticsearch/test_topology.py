import pytest

from architecture.generic.exceptions import (
    InvalidClusterConfiguration,
    InvalidClusterConfigurationException,
)
from architecture.generic_elasticsearch.backbone import NodeRole
from architecture.generic_elasticsearch.topology import *

def groups_by_id(topology):
    return {group.construct_id: group for group in topology.node_groups()}

def test_single_node():
    groups = ClusterTopology(single_node=True).node_groups()
    assert len(groups) == 1
    assert groups[0].construct_id == 'dataNodeAsg'
    assert groups[0].capacity == 1
    assert groups[0].node_role is None
    assert groups[0].role_tag == 'client'
    assert groups[0].client_facing

def test_seed_folded_out_of_managers():
    topology = ClusterTopology(manager_count=3, data_count=2)
    assert topology.seed_role == NodeRole.SeedManager
    groups = groups_by_id(topology)
    assert groups['managerNodeAsg'].capacity == 2
    assert groups['seedNodeAsg'].capacity == 1
    assert groups['seedNodeAsg'].node_role == NodeRole.SeedManager
    assert groups['dataNodeAsg'].capacity == 2
    assert 'clientNodeAsg' not in groups
    assert 'mlNodeAsg' not in groups

def test_seed_folded_out_of_data_without_managers():
    topology = ClusterTopology(manager_count=0, data_count=3)
    assert topology.seed_role == NodeRole.SeedData
    groups = groups_by_id(topology)
    assert 'managerNodeAsg' not in groups
    assert groups['seedNodeAsg'].node_role == NodeRole.SeedData
    assert groups['dataNodeAsg'].capacity == 2

def test_single_manager_is_only_the_seed():
    groups = groups_by_id(ClusterTopology(manager_count=1, data_count=2))
    assert 'managerNodeAsg' not in groups
    assert groups['seedNodeAsg'].node_role == NodeRole.SeedManager

def test_exactly_one_seed_and_counts_add_up():
    for managers in range(0, 5):
        for data in range(1, 4):
            topology = ClusterTopology(manager_count=managers, data_count=data)
            groups = topology.node_groups()
            seeds = [g for g in groups if g.node_role in (NodeRole.SeedManager, NodeRole.SeedData)]
            assert len(seeds) == 1
            assert sum(g.capacity for g in groups) == managers + data

def test_data_nodes_are_client_facing_without_clients():
    groups = groups_by_id(ClusterTopology(client_count=0))
    assert groups['dataNodeAsg'].client_facing
    assert groups['dataNodeAsg'].role_tag == 'client'

def test_client_and_ml_groups():
    topology = ClusterTopology(client_count=2, ml_count=1)
    groups = groups_by_id(topology)
    assert not groups['dataNodeAsg'].client_facing
    assert groups['dataNodeAsg'].role_tag == 'data'
    assert groups['clientNodeAsg'].client_facing
    assert groups['clientNodeAsg'].capacity == 2
    assert groups['mlNodeAsg'].node_role == NodeRole.ML
    assert groups['mlNodeAsg'].role_tag == 'ml-node'
    assert groups['mlNodeAsg'].storage_profile == StorageProfile.ML
    assert topology.client_facing_group().construct_id == 'clientNodeAsg'

def test_no_seed_candidate():
    with pytest.raises(InvalidClusterConfigurationException) as e:
        ClusterTopology(manager_count=0, data_count=0)
    assert e.value.exception_type == InvalidClusterConfiguration.NoSeedCandidate

def test_negative_counts_rejected():
    with pytest.raises(InvalidClusterConfigurationException):
        ClusterTopology(data_count=-1)
    with pytest.raises(InvalidClusterConfigurationException):
        ClusterTopology(zone_count=0)
