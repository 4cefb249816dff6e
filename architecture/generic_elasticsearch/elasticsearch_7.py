"""Voting based discovery, used by Elasticsearch 7 and every OpenSearch
release: the cluster bootstraps from the nodes named in
cluster.initial_master_nodes, which is just the seed.
"""
from typing import Any, Dict

from architecture.generic_elasticsearch.backbone import (
    SEED_NODE_NAME,
    ClusterConfig,
    NodeRole,
    RoleSettings,
    discovery_tag_filter,
    validate_role_settings,
)

NODE_ROLE_SETTINGS: RoleSettings = validate_role_settings({
    NodeRole.Manager: {
        'node.roles': ['master'],
    },
    NodeRole.Data: {
        'node.roles': ['data', 'ingest'],
    },
    NodeRole.SeedManager: {
        'node.name': SEED_NODE_NAME,
        'node.roles': ['master'],
    },
    NodeRole.SeedData: {
        'node.name': SEED_NODE_NAME,
        'node.roles': ['master', 'data'],
    },
    NodeRole.Client: {
        'node.name': 'client-node',
        'node.roles': [],
    },
    NodeRole.ML: {
        'node.name': 'ml-node',
        'node.roles': ['ml'],
    },
}, "Elasticsearch 7 node role settings")

class Elasticsearch7Config(ClusterConfig):
    version = "ES_7"
    role_settings = NODE_ROLE_SETTINGS

    def get_multi_node_base_config(
        self,
        cluster_name: str,
        stack_name: str,
        manager_node_count: int
    ) -> Dict[str, Any]:
        return {
            'cluster.name': cluster_name,
            'cluster.initial_master_nodes': [SEED_NODE_NAME],
            'discovery.seed_providers': 'ec2',
            'network.host': 0,
            'discovery.ec2.tag.Name': discovery_tag_filter(stack_name),
        }
