"""
Data nodes:
    stores data and executes data-related operations
    such as search and aggregation
Master (manager) nodes:
    in charge of cluster-wide management and configuration actions
    such as adding and removing nodes
Seed nodes:
    the one master eligible (or data) node every other node discovers
    first, and the only name in the initial voting configuration
Client nodes:
    forwards cluster requests to the master node and data-related
    requests to data nodes
ML nodes:
    run machine learning tasks and nothing else
"""
import logging
from enum import Enum
from typing import Any, Dict, Optional, Union

import yaml

from architecture.generic.exceptions import (
    InvalidClusterConfiguration,
    InvalidClusterConfigurationException,
)
from architecture.generic.metrics import validate_nonnegative_integer
from common.helpers import merge_settings

logger = logging.getLogger(__name__)

# Auto scaling group ids the ec2 discovery plugin filters on.
SEED_GROUP_ID = 'seedNodeAsg'
MANAGER_GROUP_ID = 'managerNodeAsg'

HTTP_PORT = 9200
SEED_NODE_NAME = 'seed'

class NodeRole(Enum):
    Manager = 'manager'
    Data = 'data'
    SeedManager = 'seedManager'
    SeedData = 'seedData'
    Client = 'client'
    ML = 'ml'

    def __str__(self):
        return self.value

    @classmethod
    def from_string(cls, value: str, engine_name: str = "elasticsearch") -> 'NodeRole':
        for role in cls:
            if role.value == value:
                return role
        raise InvalidClusterConfigurationException(
            InvalidClusterConfiguration.UnknownNodeRole,
            f"Unknown node type provided when retrieving {engine_name} config: {value}"
        )

RoleSettings = Dict[NodeRole, Dict[str, Any]]

def validate_role_settings(role_settings: RoleSettings, table_name: str) -> RoleSettings:
    """Every NodeRole needs an overlay. Called when a settings table is
    defined, so a missing entry fails at import rather than at render time.
    """
    missing = set(NodeRole) - set(role_settings.keys())
    if missing:
        raise ValueError(f"{table_name} has no settings for {sorted(str(role) for role in missing)}")
    return role_settings

def discovery_tag_filter(stack_name: str) -> str:
    """Value for discovery.ec2.tag.Name: instances are tagged with the path
    of their auto scaling group.
    """
    return f"{stack_name}/{SEED_GROUP_ID},{stack_name}/{MANAGER_GROUP_ID}"

def dump_settings(settings: Dict[str, Any]) -> str:
    return yaml.safe_dump(settings, default_flow_style=False, sort_keys=False)

class ClusterConfig:
    """Renders the engine's yml config for one node.
    Subclasses provide the multi node base settings and the role table.
    """
    version: str = ""
    role_settings: RoleSettings = {}

    def get_single_node_base_config(self, cluster_name: str) -> Dict[str, Any]:
        return {
            'cluster.name': cluster_name,
            'network.host': 0,
            'http.port': HTTP_PORT,
            'discovery.type': 'single-node',
        }

    def get_multi_node_base_config(
        self,
        cluster_name: str,
        stack_name: str,
        manager_node_count: int
    ) -> Dict[str, Any]:
        raise NotImplementedError()

    def get_role_config(self, node_type: Union[NodeRole, str]) -> Dict[str, Any]:
        if not isinstance(node_type, NodeRole):
            node_type = NodeRole.from_string(node_type)
        return dict(self.role_settings[node_type])

    def get_config(
        self,
        cluster_name: str,
        is_single_node: bool,
        stack_name: str,
        manager_node_count: int,
        node_type: Optional[Union[NodeRole, str]] = None,
        additional_config: Optional[str] = None
    ) -> str:
        """Base settings, the node_type overlay on top, then additional_config.

        :param manager_node_count: Total count of master eligible nodes, seed included.
        :param node_type: A NodeRole or its name, e.g. "seedManager".
        :param additional_config: yml text appended verbatim after the
        generated document. It is not parsed, so it may repeat keys.
        :raises InvalidClusterConfigurationException: For an unknown node_type
        or a manager_node_count that is not a nonnegative integer.
        :rtype: str
        """
        try:
            validate_nonnegative_integer(manager_node_count, "managerNodeCount")
        except ValueError as e:
            raise InvalidClusterConfigurationException(
                InvalidClusterConfiguration.InvalidNodeCount, str(e)
            ) from e

        if is_single_node:
            config = self.get_single_node_base_config(cluster_name)
        else:
            config = self.get_multi_node_base_config(cluster_name, stack_name, manager_node_count)
        if node_type:
            config = merge_settings(config, self.get_role_config(node_type))

        config_string = dump_settings(config)
        if additional_config:
            config_string = f"{config_string}\n{additional_config}"
        return config_string

    def java_install_command(self):
        """Engines that bundle a JDK need nothing installed."""
        return None
