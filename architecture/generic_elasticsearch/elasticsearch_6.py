"""Zen discovery: a node may only be elected master once it sees
discovery.zen.minimum_master_nodes master eligible nodes.
"""
import logging
from typing import Any, Dict

from architecture.generic.managed_packages import install_java_8_command
from architecture.generic.vm_os import OperatingSystem
from architecture.generic_elasticsearch.backbone import (
    SEED_NODE_NAME,
    ClusterConfig,
    NodeRole,
    RoleSettings,
    discovery_tag_filter,
    validate_role_settings,
)

logger = logging.getLogger(__name__)

NODE_ROLE_SETTINGS: RoleSettings = validate_role_settings({
    NodeRole.Manager: {
        'node.master': True,
        'node.data': False,
        'node.ingest': False,
    },
    NodeRole.Data: {
        'node.master': False,
        'node.data': True,
        'node.ingest': True,
    },
    NodeRole.SeedManager: {
        'node.name': SEED_NODE_NAME,
        'node.master': True,
        'node.data': False,
        'node.ingest': False,
    },
    NodeRole.SeedData: {
        'node.name': SEED_NODE_NAME,
        'node.master': False,
        'node.data': True,
        'node.ingest': True,
    },
    NodeRole.Client: {
        'node.name': 'client-node',
        'node.master': False,
        'node.data': False,
        'node.ingest': False,
    },
    NodeRole.ML: {
        'node.name': 'ml-node',
        'node.master': False,
        'node.data': False,
        'node.ingest': False,
        'node.ml': True,
    },
}, "Elasticsearch 6 node role settings")

def minimum_master_nodes(manager_node_count: int) -> int:
    """floor(n/2)+1. Only a majority for odd n: with n=4 this gives 3 of 4,
    with n=2 it gives 2 of 2, so an even count does not tolerate losing
    the extra node.
    """
    return manager_node_count // 2 + 1

class Elasticsearch6Config(ClusterConfig):
    version = "ES_6"
    role_settings = NODE_ROLE_SETTINGS

    def get_multi_node_base_config(
        self,
        cluster_name: str,
        stack_name: str,
        manager_node_count: int
    ) -> Dict[str, Any]:
        # https://www.elastic.co/guide/en/elasticsearch/reference/6.8/modules-node.html#split-brain
        if manager_node_count % 2 == 0:
            logger.warning(
                "Even manager node count %d, minimum_master_nodes=%d is not a majority",
                manager_node_count, minimum_master_nodes(manager_node_count)
            )
        return {
            'cluster.name': cluster_name,
            'network.host': 0,
            'discovery.zen.hosts_provider': 'ec2',
            'discovery.zen.minimum_master_nodes': minimum_master_nodes(manager_node_count),
            'discovery.ec2.tag.Name': discovery_tag_filter(stack_name),
        }

    def java_install_command(self):
        return install_java_8_command(OperatingSystem.AWSLinux)
