import pytest

from architecture.generic.exceptions import InvalidClusterConfigurationException
from architecture.generic.machine import CpuArchitecture
from architecture.generic.managed_packages import ManagedPackage, PackageInstallation
from architecture.generic.vm_os import BootFile, TerminalCommand
from architecture.generic_elasticsearch.backbone import NodeRole
from architecture.generic_elasticsearch.engine import EngineFamily
from architecture.generic_elasticsearch.provisioning import *
from conftest import DASHBOARDS_URL, OPENSEARCH_URL

ES6_URL = "https://artifacts.elastic.co/downloads/elasticsearch/elasticsearch-6.8.23.tar.gz"
CI_URL = (
    "https://ci.opensearch.org/ci/dbc/distribution-build-opensearch/2.11.0/latest/linux/x64"
    "/tar/dist/opensearch/opensearch-2.11.0-linux-x64.tar.gz"
)

def make_options(**overrides):
    settings = dict(
        distribution_url=OPENSEARCH_URL,
        dist_version="2.11.0",
        cpu_arch=CpuArchitecture.X64,
        cluster_name="infra-123456789012-us-east-1",
        stack_name="infra",
        log_group_name="opensearchLogGroup/opensearch.log",
    )
    settings.update(overrides)
    return ProvisioningOptions(**settings)

def commands(steps):
    return [str(step) for step in steps if isinstance(step, TerminalCommand)]

def index_of(steps, fragment):
    for i, step in enumerate(steps):
        if isinstance(step, TerminalCommand) and fragment in str(step):
            return i
    raise AssertionError(f"No step containing {fragment!r}")

def has_step(steps, fragment):
    return any(fragment in command for command in commands(steps))

def test_cloudwatch_agent_first():
    steps = build_provisioning_steps(make_options(), NodeRole.Data)
    assert steps[0] == PackageInstallation(ManagedPackage.CloudWatchAgent)
    assert isinstance(steps[1], BootFile)
    assert "/home/ec2-user/opensearch/logs/infra-123456789012-us-east-1.log" in steps[1].content
    assert "-a stop" in str(steps[2])
    assert "fetch-config" in str(steps[3])

def test_step_order_multi_node_with_dashboards():
    steps = build_provisioning_steps(
        make_options(dashboards_url=DASHBOARDS_URL, security_disabled=True, jvm_sys_props="a=1,b=2",
                     use_50_percent_heap=True),
        NodeRole.Manager
    )
    ordered = [
        "vm.max_map_count=262144",
        "opensearch.tar.gz",
        "opensearch-dashboards.tar.gz",
        "sleep 15",
        "server.host: 0.0.0.0",
        "> config/opensearch.yml",
        "plugin install discovery-ec2",
        "plugins.security.disabled: true",
        "remove securityDashboards",
        "jvmSysPropsList",
        "MemTotal",
        "opensearch-tar-install.sh",
        "dashboard_install.log",
    ]
    positions = [index_of(steps, fragment) for fragment in ordered]
    assert positions == sorted(positions)
    assert positions[-1] == len(steps) - 1

def test_config_is_written_before_anything_appends():
    steps = build_provisioning_steps(make_options(security_disabled=True), NodeRole.Data)
    write = index_of(steps, "> config/opensearch.yml")
    append = index_of(steps, ">> config/opensearch.yml")
    assert write < append

def test_single_node_has_no_discovery_plugin():
    steps = build_provisioning_steps(make_options(single_node=True))
    assert not has_step(steps, "plugin install")
    assert has_step(steps, "discovery.type: single-node")

def test_single_node_ignores_role():
    steps = build_provisioning_steps(make_options(single_node=True), NodeRole.Manager)
    assert not has_step(steps, "node.roles")

def test_role_overlay_in_config():
    steps = build_provisioning_steps(make_options(), NodeRole.SeedManager)
    config_write = str(steps[index_of(steps, "> config/opensearch.yml")])
    assert "node.name: seed" in config_write
    assert "cluster.initial_master_nodes" in config_write

def test_additional_config_is_in_the_config_write():
    steps = build_provisioning_steps(make_options(additional_config="foo.bar: baz\n"), NodeRole.Data)
    assert "foo.bar: baz" in str(steps[index_of(steps, "> config/opensearch.yml")])

def test_no_dashboards_steps_without_url():
    steps = build_provisioning_steps(make_options(security_disabled=True), NodeRole.Data)
    assert not has_step(steps, "dashboards")
    assert has_step(steps, "sleep 15")

def test_security_enabled_keeps_plugin():
    steps = build_provisioning_steps(make_options(dashboards_url=DASHBOARDS_URL), NodeRole.Data)
    assert not has_step(steps, "plugins.security.disabled")
    assert not has_step(steps, "securityDashboards")

def test_min_distribution():
    options = make_options(min_distribution=True, security_disabled=True)
    steps = build_provisioning_steps(options, NodeRole.Data)
    assert not has_step(steps, "plugins.security.disabled")
    assert has_step(steps, "nohup ./bin/opensearch >> install.log")
    assert discovery_plugin_source(options, EngineFamily.OpenSearch).endswith(
        "/2.11.0/latest/linux/x64/tar/builds/opensearch/core-plugins/discovery-ec2-2.11.0.zip"
    )

def test_ci_distribution_uses_ci_plugin():
    options = make_options(distribution_url=CI_URL, cpu_arch=CpuArchitecture.ARM64)
    source = discovery_plugin_source(options, EngineFamily.OpenSearch)
    assert source.startswith("https://ci.opensearch.org/")
    assert "/linux/arm64/" in source

def test_elasticsearch_6():
    steps = build_provisioning_steps(
        make_options(distribution_url=ES6_URL, dist_version="6.8.23", security_disabled=True),
        NodeRole.Data
    )
    java = index_of(steps, "corretto8")
    assert java < index_of(steps, "elasticsearch.tar.gz")
    assert has_step(steps, "bin/elasticsearch-plugin install discovery-ec2")
    assert has_step(steps, "discovery.zen.minimum_master_nodes: 2")
    assert has_step(steps, "nohup ./bin/elasticsearch >> install.log")
    assert not has_step(steps, "plugins.security.disabled")

def test_opensearch_has_no_java_step():
    steps = build_provisioning_steps(make_options(), NodeRole.Data)
    assert not has_step(steps, "corretto8")

def test_commands_run_in_home_directory():
    steps = build_provisioning_steps(make_options(), NodeRole.Data)
    fetch = steps[index_of(steps, "opensearch.tar.gz")]
    assert fetch.cwd == "/home/ec2-user"
    assert str(fetch) == (
        f"mkdir opensearch; curl -L {OPENSEARCH_URL} -o opensearch.tar.gz; "
        "tar zxf opensearch.tar.gz -C opensearch --strip-components=1; "
        "chown -R ec2-user:ec2-user opensearch"
    )

def test_unknown_distribution():
    with pytest.raises(InvalidClusterConfigurationException):
        build_provisioning_steps(make_options(distribution_url="https://example.com/x.tar.gz"))
