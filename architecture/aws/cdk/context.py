"""Deployment parameters, read from cdk context (-c key=value) or from one
block of a JSON file selected with -c contextFile=... -c contextId=...

Everything is validated here, before any construct is created. Nothing in
this module imports aws_cdk, the lookup function is handed in.
"""
import json
import logging
from enum import Enum
from typing import Any, Callable, Dict, Optional

import yaml

from architecture.aws.iam.primitives import validate_role_arn
from architecture.generic.machine import (
    CpuArchitecture,
    EbsVolumeType,
    get_instance_type,
)
from architecture.generic_elasticsearch.topology import ClusterTopology
from common.exceptions import InvalidContext, InvalidContextException
from common.helpers import parse_boolean_string

logger = logging.getLogger(__name__)

ContextLookup = Callable[[str], Any]

DEFAULT_MANAGER_NODE_COUNT = 3
DEFAULT_DATA_NODE_COUNT = 2
DEFAULT_NODE_STORAGE_GB = 100
DEFAULT_ZONE_COUNT = 3
DEFAULT_VOLUME_TYPE = EbsVolumeType.GP2

NETWORK_STACK_NAME = 'opensearch-network-stack'
INFRA_STACK_NAME = 'opensearch-infra-stack'

class ServerAccessType(Enum):
    IPv4 = 'ipv4'
    IPv6 = 'ipv6'
    PrefixList = 'prefixList'
    SecurityGroupId = 'securityGroupId'

    def __str__(self):
        return self.value

def get_context_json_from_file(
    context_file: Optional[str],
    context_id: Optional[str]
) -> Optional[Dict[str, Any]]:
    """
    :raises InvalidContextException: If only one of the pair is given, or
    the file has no block for context_id, or the file or block is not a JSON object.
    """
    if bool(context_file) != bool(context_id):
        raise InvalidContextException(
            InvalidContext.IncompleteContextFilePair,
            "The following context parameters are all required when in use: [contextFile, contextId]"
        )
    if not context_file:
        return None
    with open(context_file, 'r', encoding='utf-8') as f:
        try:
            file_json = json.load(f)
        except json.JSONDecodeError as e:
            raise InvalidContextException(
                InvalidContext.MalformedJson,
                f"Could not parse context file {context_file}: {e}"
            ) from e
    if not isinstance(file_json, dict):
        raise InvalidContextException(
            InvalidContext.MalformedJson,
            f"Context file {context_file} must hold a JSON object keyed by contextId"
        )
    context_block = file_json.get(context_id)
    if not context_block:
        raise InvalidContextException(
            InvalidContext.UnknownContextId,
            f"No CDK context block found for contextId '{context_id}' in file {context_file}"
        )
    if not isinstance(context_block, dict):
        raise InvalidContextException(
            InvalidContext.MalformedJson,
            f"CDK context block '{context_id}' in file {context_file} must be a JSON object"
        )
    return context_block

def make_context_lookup(try_get_context: ContextLookup) -> ContextLookup:
    """The JSON file block, when one is selected, replaces the cdk context
    entirely for every other key.
    """
    context_block = get_context_json_from_file(
        try_get_context('contextFile'),
        try_get_context('contextId')
    )
    if context_block is None:
        return try_get_context
    return context_block.get

def _as_string(value: Any) -> Optional[str]:
    """cdk passes -c values as strings, JSON files may carry real types."""
    if value is None:
        return None
    if isinstance(value, bool):
        return 'true' if value else 'false'
    return str(value)

def json_to_yaml(value: Any, name: str) -> Optional[str]:
    """additionalConfig style parameters: a non empty JSON object, rendered as
    yml. The result is appended to a yml mapping, so anything else is rejected.
    """
    if value is None:
        return None
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except json.JSONDecodeError as e:
            raise InvalidContextException(
                InvalidContext.MalformedJson,
                f"Encountered following error while parsing {name} json parameter: {e}"
            ) from e
    if not isinstance(value, dict) or not value:
        raise InvalidContextException(
            InvalidContext.MalformedJson,
            f"{name} json parameter must be a non empty JSON object, got {value!r}"
        )
    return yaml.safe_dump(value, default_flow_style=False, sort_keys=False)

class DeploymentContext:
    """Parsed deployment parameters. Build with from_lookup."""

    def __init__(self, **kwargs):
        self.dist_version: str = kwargs['dist_version']
        self.distribution_url: str = kwargs['distribution_url']
        self.security_disabled: bool = kwargs['security_disabled']
        self.min_distribution: bool = kwargs['min_distribution']
        self.cpu_arch: CpuArchitecture = kwargs['cpu_arch']
        self.dashboards_url: Optional[str] = kwargs.get('dashboards_url')
        self.topology: ClusterTopology = kwargs['topology']
        self.data_instance_type: str = kwargs['data_instance_type']
        self.ml_instance_type: str = kwargs['ml_instance_type']
        self.data_node_storage: int = kwargs.get('data_node_storage', DEFAULT_NODE_STORAGE_GB)
        self.ml_node_storage: int = kwargs.get('ml_node_storage', DEFAULT_NODE_STORAGE_GB)
        self.storage_volume_type: EbsVolumeType = kwargs.get('storage_volume_type', DEFAULT_VOLUME_TYPE)
        self.jvm_sys_props: Optional[str] = kwargs.get('jvm_sys_props')
        self.additional_config: Optional[str] = kwargs.get('additional_config')
        self.additional_osd_config: Optional[str] = kwargs.get('additional_osd_config')
        self.use_50_percent_heap: bool = kwargs.get('use_50_percent_heap', False)
        self.is_internal: bool = kwargs.get('is_internal', False)
        self.custom_role_arn: Optional[str] = kwargs.get('custom_role_arn')
        self.vpc_id: Optional[str] = kwargs.get('vpc_id')
        self.security_group_id: Optional[str] = kwargs.get('security_group_id')
        self.cidr: Optional[str] = kwargs.get('cidr')
        self.server_access_type: Optional[ServerAccessType] = kwargs.get('server_access_type')
        self.restrict_server_access_to: Optional[str] = kwargs.get('restrict_server_access_to')
        self.suffix: Optional[str] = kwargs.get('suffix')
        self.network_stack_suffix: Optional[str] = kwargs.get('network_stack_suffix')

    @property
    def network_stack_name(self) -> str:
        if self.network_stack_suffix:
            return f"{NETWORK_STACK_NAME}-{self.network_stack_suffix}"
        return NETWORK_STACK_NAME

    @property
    def infra_stack_name(self) -> str:
        if self.suffix:
            return f"{INFRA_STACK_NAME}-{self.suffix}"
        return INFRA_STACK_NAME

    @classmethod
    def from_lookup(cls, try_get_context: ContextLookup) -> 'DeploymentContext':
        """
        :param try_get_context: Usually app.node.try_get_context.
        :raises InvalidContextException: For missing or malformed parameters.
        :raises InvalidClusterConfigurationException: For impossible node counts
        or unknown instance types.
        :raises InvalidStorageConfigurationException: For unknown volume types.
        """
        lookup = make_context_lookup(try_get_context)

        def get(name: str) -> Optional[str]:
            return _as_string(lookup(name))

        def required(name: str, message: str) -> str:
            value = get(name)
            if value is None:
                raise InvalidContextException(InvalidContext.MissingRequiredParameter, message)
            return value

        def required_boolean(name: str) -> bool:
            try:
                return parse_boolean_string(get(name), name)
            except ValueError as e:
                raise InvalidContextException(InvalidContext.InvalidBoolean, str(e)) from e

        def flag(name: str) -> bool:
            return get(name) == 'true'

        def integer(name: str, default: int) -> int:
            value = get(name)
            if value is None:
                return default
            try:
                return int(value)
            except ValueError as e:
                raise InvalidContextException(
                    InvalidContext.InvalidInteger,
                    f"{name} must be an integer, got {value}"
                ) from e

        dist_version = required('distVersion', 'Please provide the OS distribution version')
        security_disabled = required_boolean('securityDisabled')
        min_distribution = required_boolean('minDistribution')
        distribution_url = required(
            'distributionUrl',
            'distributionUrl parameter is required. Please provide the artifact url to download'
        )
        cpu_arch_value = required(
            'cpuArch',
            'cpuArch parameter is required. The provided value should be either x64 or arm64, any other value is invalid'
        )
        try:
            cpu_arch = CpuArchitecture.from_string(cpu_arch_value)
        except ValueError as e:
            raise InvalidContextException(InvalidContext.InvalidCpuArchitecture, str(e)) from e

        topology = ClusterTopology(
            single_node=flag('singleNodeCluster'),
            manager_count=integer('managerNodeCount', DEFAULT_MANAGER_NODE_COUNT),
            data_count=integer('dataNodeCount', DEFAULT_DATA_NODE_COUNT),
            client_count=integer('clientNodeCount', 0),
            ingest_count=integer('ingestNodeCount', 0),
            ml_count=integer('mlNodeCount', 0),
            zone_count=integer('networkAvailabilityZones', DEFAULT_ZONE_COUNT),
        )

        volume_type_value = get('storageVolumeType')
        storage_volume_type = DEFAULT_VOLUME_TYPE if volume_type_value is None \
            else EbsVolumeType.from_string(volume_type_value)

        server_access_type_value = get('serverAccessType')
        restrict_server_access_to = get('restrictServerAccessTo')
        if bool(server_access_type_value) != bool(restrict_server_access_to):
            raise InvalidContextException(
                InvalidContext.InvalidServerAccess,
                "serverAccessType and restrictServerAccessTo must be provided together"
            )
        server_access_type = None
        if server_access_type_value:
            try:
                server_access_type = ServerAccessType(server_access_type_value)
            except ValueError as e:
                raise InvalidContextException(
                    InvalidContext.InvalidServerAccess,
                    f"serverAccessType must be one of "
                    f"{', '.join(str(t) for t in ServerAccessType)}, got {server_access_type_value}"
                ) from e

        custom_role_arn = get('customRoleArn')
        if custom_role_arn:
            try:
                validate_role_arn(custom_role_arn)
            except ValueError as e:
                raise InvalidContextException(InvalidContext.InvalidRoleArn, str(e)) from e

        context = cls(
            dist_version=dist_version,
            distribution_url=distribution_url,
            security_disabled=security_disabled,
            min_distribution=min_distribution,
            cpu_arch=cpu_arch,
            dashboards_url=get('dashboardsUrl'),
            topology=topology,
            data_instance_type=get_instance_type(get('dataInstanceType'), cpu_arch),
            ml_instance_type=get_instance_type(get('mlInstanceType'), cpu_arch),
            data_node_storage=integer('dataNodeStorage', DEFAULT_NODE_STORAGE_GB),
            ml_node_storage=integer('mlNodeStorage', DEFAULT_NODE_STORAGE_GB),
            storage_volume_type=storage_volume_type,
            jvm_sys_props=get('jvmSysProps'),
            additional_config=json_to_yaml(lookup('additionalConfig'), 'additionalConfig'),
            additional_osd_config=json_to_yaml(lookup('additionalOsdConfig'), 'additionalOsdConfig'),
            use_50_percent_heap=flag('use50PercentHeap'),
            is_internal=flag('isInternal'),
            custom_role_arn=custom_role_arn,
            vpc_id=get('vpcId'),
            security_group_id=get('securityGroupId'),
            cidr=get('cidr'),
            server_access_type=server_access_type,
            restrict_server_access_to=restrict_server_access_to,
            suffix=get('suffix'),
            network_stack_suffix=get('networkStackSuffix'),
        )
        logger.info(
            "Deploying %s %s on %s: managers=%d data=%d client=%d ml=%d single_node=%s",
            distribution_url, dist_version, cpu_arch,
            topology.manager_count, topology.data_count, topology.client_count,
            topology.ml_count, topology.single_node
        )
        return context
