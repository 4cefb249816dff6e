import json

import pytest
import yaml

from architecture.aws.cdk.context import *
from architecture.generic.exceptions import (
    InvalidClusterConfigurationException,
    InvalidStorageConfigurationException,
)
from architecture.generic.machine import CpuArchitecture, EbsVolumeType
from architecture.generic_elasticsearch.elasticsearch_7 import Elasticsearch7Config
from common.exceptions import InvalidContext, InvalidContextException

def from_dict(values):
    return DeploymentContext.from_lookup(values.get)

def with_keys(context, **extra):
    merged = dict(context)
    merged.update(extra)
    return merged

def assert_invalid(values, exception_type):
    with pytest.raises(InvalidContextException) as e:
        from_dict(values)
    assert e.value.exception_type == exception_type
    return e.value

def test_defaults(minimal_context):
    context = from_dict(minimal_context)
    assert context.dist_version == '2.11.0'
    assert context.cpu_arch == CpuArchitecture.X64
    assert context.security_disabled is False
    assert context.min_distribution is False
    assert context.topology.single_node is False
    assert context.topology.manager_count == 3
    assert context.topology.data_count == 2
    assert context.topology.zone_count == 3
    assert context.data_node_storage == 100
    assert context.storage_volume_type == EbsVolumeType.GP2
    assert context.data_instance_type == 'r5.xlarge'
    assert context.dashboards_url is None
    assert context.additional_config is None
    assert context.is_internal is False
    assert context.network_stack_name == 'opensearch-network-stack'
    assert context.infra_stack_name == 'opensearch-infra-stack'

@pytest.mark.parametrize("missing", ['distVersion', 'distributionUrl', 'cpuArch'])
def test_missing_required(minimal_context, missing):
    del minimal_context[missing]
    assert_invalid(minimal_context, InvalidContext.MissingRequiredParameter)

@pytest.mark.parametrize("key", ['securityDisabled', 'minDistribution'])
@pytest.mark.parametrize("value", [None, 'True', 'yes', '1'])
def test_strict_booleans(minimal_context, key, value):
    minimal_context[key] = value
    assert_invalid(minimal_context, InvalidContext.InvalidBoolean)

def test_json_booleans_are_accepted(minimal_context):
    context = from_dict(with_keys(minimal_context, securityDisabled=True, minDistribution=False))
    assert context.security_disabled is True

def test_cpu_arch(minimal_context):
    assert from_dict(with_keys(minimal_context, cpuArch='arm64')).data_instance_type == 'r6g.xlarge'
    error = assert_invalid(with_keys(minimal_context, cpuArch='x86'), InvalidContext.InvalidCpuArchitecture)
    assert 'x64 or arm64' in error.message

def test_loose_flags(minimal_context):
    for value in ['True', 'yes', 'on']:
        assert from_dict(with_keys(minimal_context, singleNodeCluster=value)).topology.single_node is False
    assert from_dict(with_keys(minimal_context, singleNodeCluster='true')).topology.single_node is True
    assert from_dict(with_keys(minimal_context, isInternal='true')).is_internal is True
    assert from_dict(with_keys(minimal_context, use50PercentHeap='true')).use_50_percent_heap is True

def test_node_counts(minimal_context):
    context = from_dict(with_keys(
        minimal_context, managerNodeCount='5', dataNodeCount='4', clientNodeCount='2', mlNodeCount='1'
    ))
    assert context.topology.manager_count == 5
    assert context.topology.client_count == 2
    assert context.topology.ml_count == 1
    assert_invalid(with_keys(minimal_context, dataNodeCount='two'), InvalidContext.InvalidInteger)
    with pytest.raises(InvalidClusterConfigurationException):
        from_dict(with_keys(minimal_context, managerNodeCount='-1'))
    with pytest.raises(InvalidClusterConfigurationException):
        from_dict(with_keys(minimal_context, managerNodeCount='0', dataNodeCount='0'))

def test_instance_types(minimal_context):
    context = from_dict(with_keys(minimal_context, dataInstanceType='r5.2xlarge', mlInstanceType='g5.xlarge'))
    assert context.data_instance_type == 'r5.2xlarge'
    assert context.ml_instance_type == 'g5.xlarge'
    with pytest.raises(InvalidClusterConfigurationException):
        from_dict(with_keys(minimal_context, dataInstanceType='r6g.xlarge'))

def test_storage_volume_type(minimal_context):
    context = from_dict(with_keys(
        minimal_context, storageVolumeType='gp3', serverAccessType='ipv4', restrictServerAccessTo='10.0.0.0/8'
    ))
    assert context.storage_volume_type == EbsVolumeType.GP3
    with pytest.raises(InvalidStorageConfigurationException):
        from_dict(with_keys(minimal_context, storageVolumeType='magnetic'))

def test_server_access(minimal_context):
    context = from_dict(with_keys(minimal_context, serverAccessType='prefixList', restrictServerAccessTo='pl-12345'))
    assert context.server_access_type == ServerAccessType.PrefixList
    assert context.restrict_server_access_to == 'pl-12345'
    assert_invalid(with_keys(minimal_context, serverAccessType='ipv4'), InvalidContext.InvalidServerAccess)
    assert_invalid(
        with_keys(minimal_context, serverAccessType='cidr', restrictServerAccessTo='10.0.0.0/8'),
        InvalidContext.InvalidServerAccess
    )

def test_custom_role_arn(minimal_context):
    arn = 'arn:aws:iam::123456789012:role/search-node'
    assert from_dict(with_keys(minimal_context, customRoleArn=arn)).custom_role_arn == arn
    assert_invalid(
        with_keys(minimal_context, customRoleArn='arn:aws:s3:::my-bucket'),
        InvalidContext.InvalidRoleArn
    )

def test_stack_suffixes(minimal_context):
    context = from_dict(with_keys(minimal_context, suffix='dev', networkStackSuffix='shared'))
    assert context.infra_stack_name == 'opensearch-infra-stack-dev'
    assert context.network_stack_name == 'opensearch-network-stack-shared'

def test_additional_config_becomes_yaml(minimal_context):
    context = from_dict(with_keys(
        minimal_context,
        additionalConfig='{"search.max_buckets": 20000, "node.attr.zone": "rack1"}',
    ))
    assert context.additional_config == 'search.max_buckets: 20000\nnode.attr.zone: rack1\n'

def test_additional_config_from_json_object(minimal_context):
    context = from_dict(with_keys(minimal_context, additionalOsdConfig={'server.maxPayloadBytes': 1048576}))
    assert context.additional_osd_config == 'server.maxPayloadBytes: 1048576\n'

def test_malformed_additional_config(minimal_context):
    error = assert_invalid(with_keys(minimal_context, additionalConfig='{not json'), InvalidContext.MalformedJson)
    assert error.message.startswith("Encountered following error while parsing additionalConfig json parameter")

def test_context_file(minimal_context, tmp_path):
    context_file = tmp_path / "context.json"
    context_file.write_text(json.dumps({
        'dev': with_keys(minimal_context, managerNodeCount=1, securityDisabled=True),
    }))
    cli = {'contextFile': str(context_file), 'contextId': 'dev', 'managerNodeCount': '5'}
    context = from_dict(cli)
    # the file block replaces the cli context
    assert context.topology.manager_count == 1
    assert context.security_disabled is True

def test_context_file_errors(minimal_context, tmp_path):
    context_file = tmp_path / "context.json"
    context_file.write_text(json.dumps({'dev': minimal_context}))
    assert_invalid({'contextFile': str(context_file)}, InvalidContext.IncompleteContextFilePair)
    assert_invalid({'contextId': 'dev'}, InvalidContext.IncompleteContextFilePair)
    assert_invalid({'contextFile': str(context_file), 'contextId': 'prod'}, InvalidContext.UnknownContextId)
    broken = tmp_path / "broken.json"
    broken.write_text("{")
    assert_invalid({'contextFile': str(broken), 'contextId': 'dev'}, InvalidContext.MalformedJson)

@pytest.mark.parametrize("value", ['"plugins.x: abc"', '{}', '[1, 2]', '42', {}, ['a']])
def test_additional_config_must_be_a_mapping(minimal_context, value):
    assert_invalid(with_keys(minimal_context, additionalConfig=value), InvalidContext.MalformedJson)
    assert_invalid(with_keys(minimal_context, additionalOsdConfig=value), InvalidContext.MalformedJson)

def test_additional_config_keeps_the_node_config_parseable(minimal_context):
    context = from_dict(with_keys(minimal_context, additionalConfig='{"plugins.x": "abc"}'))
    rendered = Elasticsearch7Config().get_config("demo", True, "s", 1, None, context.additional_config)
    assert yaml.safe_load(rendered)['plugins.x'] == 'abc'

@pytest.mark.parametrize("content", [[{'dev': {}}], {'dev': ['distVersion']}, {'dev': 'distVersion=2.11.0'}])
def test_context_file_must_hold_objects(tmp_path, content):
    context_file = tmp_path / "context.json"
    context_file.write_text(json.dumps(content))
    assert_invalid({'contextFile': str(context_file), 'contextId': 'dev'}, InvalidContext.MalformedJson)
