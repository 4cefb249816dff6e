"""Boot steps for a freshly launched search node, in the order they must run.

The order encodes real dependencies: kernel settings before the engine
starts, the config file before anything appends to it, jvm options before
the process reads them. Nothing here retries or branches back.
"""
import json
import logging
import shlex
from typing import List, Optional, Union

from architecture.generic.machine import CpuArchitecture
from architecture.generic.managed_packages import ManagedPackage, PackageInstallation
from architecture.generic.metrics import (
    CLOUDWATCH_AGENT_CONFIG_PATH,
    CLOUDWATCH_AGENT_CTL,
    cloudwatch_agent_config,
)
from architecture.generic.vm_os import (
    BootFile,
    StandardCommandLineOperations,
    TerminalCommand,
    append_line,
    chain,
    change_directory,
    download,
    sleep,
)
from architecture.generic_elasticsearch.backbone import NodeRole
from architecture.generic_elasticsearch.engine import (
    EngineFamily,
    detect_engine_family,
    get_cluster_config,
)

logger = logging.getLogger(__name__)

BootStep = Union[PackageInstallation, BootFile, TerminalCommand]

EC2_USER = 'ec2-user'
EC2_USER_HOME = '/home/ec2-user'
MAX_MAP_COUNT = 262144
SETTLE_SECONDS = 15
OPENSEARCH_CI_URL = 'https://ci.opensearch.org/ci/dbc/distribution-build-opensearch'

class ProvisioningOptions:
    """Everything the boot steps depend on that is shared by all node roles.

    :param cluster_name: Also names the engine's log file.
    :param stack_name: Prefix of the auto scaling group tags discovery filters on.
    :param dashboards_url: Dashboards (or Kibana) tarball, None to skip dashboards.
    :param additional_config: yml appended to the engine config, unparsed.
    :param additional_dashboards_config: yml appended to the dashboards config, unparsed.
    :param jvm_sys_props: Comma separated key=value pairs, each becomes a -D option.
    """

    def __init__(
        self,
        distribution_url: str,
        dist_version: str,
        cpu_arch: CpuArchitecture,
        cluster_name: str,
        stack_name: str,
        log_group_name: str,
        manager_node_count: int = 3,
        single_node: bool = False,
        security_disabled: bool = False,
        min_distribution: bool = False,
        dashboards_url: Optional[str] = None,
        jvm_sys_props: Optional[str] = None,
        additional_config: Optional[str] = None,
        additional_dashboards_config: Optional[str] = None,
        use_50_percent_heap: bool = False
    ):
        self.distribution_url = distribution_url
        self.dist_version = dist_version
        self.cpu_arch = cpu_arch
        self.cluster_name = cluster_name
        self.stack_name = stack_name
        self.log_group_name = log_group_name
        self.manager_node_count = manager_node_count
        self.single_node = single_node
        self.security_disabled = security_disabled
        self.min_distribution = min_distribution
        self.dashboards_url = dashboards_url
        self.jvm_sys_props = jvm_sys_props
        self.additional_config = additional_config
        self.additional_dashboards_config = additional_dashboards_config
        self.use_50_percent_heap = use_50_percent_heap

def _in_home(*commands: Union[TerminalCommand, str]) -> TerminalCommand:
    return chain(list(commands), cwd=EC2_USER_HOME)

def _fetch_and_unpack(url: str, directory: str) -> TerminalCommand:
    tarball = f"{directory}.tar.gz"
    return _in_home(
        TerminalCommand(StandardCommandLineOperations.MakeDirectory, [directory]),
        download(url, tarball),
        TerminalCommand(
            StandardCommandLineOperations.Untar,
            [tarball, "-C", directory, "--strip-components=1"]
        ),
        TerminalCommand(StandardCommandLineOperations.ChangeOwner, [f"{EC2_USER}:{EC2_USER}", directory]),
    )

def _start_in_background(directory: str, executable: str, log_file: str, append: bool = True) -> TerminalCommand:
    redirect = ">>" if append else ">"
    return _in_home(
        change_directory(directory),
        f"sudo -u {EC2_USER} nohup {executable} {redirect} {log_file} 2>&1 &",
    )

def cloudwatch_agent_steps(options: ProvisioningOptions, engine: EngineFamily) -> List[BootStep]:
    log_file = f"{EC2_USER_HOME}/{engine.home}/logs/{options.cluster_name}.log"
    agent_config = cloudwatch_agent_config([log_file], options.log_group_name)
    return [
        PackageInstallation(ManagedPackage.CloudWatchAgent),
        BootFile(CLOUDWATCH_AGENT_CONFIG_PATH, json.dumps(agent_config, indent=2)),
        TerminalCommand("", [], provided_string_rep=f"{CLOUDWATCH_AGENT_CTL} -a stop"),
        TerminalCommand(
            "", [],
            provided_string_rep=f"{CLOUDWATCH_AGENT_CTL} -a fetch-config -m ec2 -c file:{CLOUDWATCH_AGENT_CONFIG_PATH} -s"
        ),
    ]

def kernel_tuning_step() -> TerminalCommand:
    return chain([
        append_line(f"vm.max_map_count={MAX_MAP_COUNT}", "/etc/sysctl.conf", use_sudo=True),
        TerminalCommand(
            StandardCommandLineOperations.Sudo,
            [str(StandardCommandLineOperations.ReloadKernelParameters)]
        ),
    ])

def discovery_plugin_source(options: ProvisioningOptions, engine: EngineFamily) -> str:
    """CI and minimal OpenSearch builds do not resolve plugins by name,
    the plugin zip has to come from the matching CI build.
    """
    if engine == EngineFamily.OpenSearch and (
        'ci.opensearch.org' in options.distribution_url or options.min_distribution
    ):
        return (
            f"{OPENSEARCH_CI_URL}/{options.dist_version}/latest/linux/{options.cpu_arch}"
            f"/tar/builds/opensearch/core-plugins/discovery-ec2-{options.dist_version}.zip"
        )
    return 'discovery-ec2'

def jvm_sys_props_step(engine: EngineFamily, jvm_sys_props: str) -> TerminalCommand:
    return _in_home(
        change_directory(engine.home),
        f"jvmSysPropsList=$(echo \"{jvm_sys_props}\" | tr ',' '\\n')",
        "for sysProp in $jvmSysPropsList;do echo \"-D$sysProp\" >> config/jvm.options;done",
    )

def half_memory_heap_step(engine: EngineFamily) -> TerminalCommand:
    """Rewrite -Xms/-Xmx in jvm.options to half of the host's memory."""
    return _in_home(
        change_directory(engine.home),
        "heap=$(awk '/MemTotal/ {printf \"%dm\", $2/2048}' /proc/meminfo)",
        "sed -i -e \"s/^-Xms[0-9]*[kmgKMG]\\?$/-Xms$heap/\" "
        "-e \"s/^-Xmx[0-9]*[kmgKMG]\\?$/-Xmx$heap/\" config/jvm.options",
    )

def build_provisioning_steps(
    options: ProvisioningOptions,
    node_type: Optional[NodeRole] = None
) -> List[BootStep]:
    """All boot steps for one node role.

    :param options: Shared settings of the cluster.
    :param node_type: Role overlay for the node config, None for a single node cluster.
    :raises InvalidClusterConfigurationException: For an unknown distribution
    url or an unsupported engine version.
    :rtype: List[BootStep]
    """
    engine = detect_engine_family(options.distribution_url)
    cluster_config = get_cluster_config(engine, options.dist_version)

    steps: List[BootStep] = []
    steps.extend(cloudwatch_agent_steps(options, engine))
    steps.append(kernel_tuning_step())

    java = cluster_config.java_install_command()
    if java is not None:
        steps.append(java)

    steps.append(_fetch_and_unpack(options.distribution_url, engine.home))

    if options.dashboards_url:
        steps.append(_fetch_and_unpack(options.dashboards_url, engine.dashboards_home))
    steps.append(sleep(SETTLE_SECONDS))
    if options.dashboards_url:
        steps.append(_in_home(
            change_directory(engine.dashboards_home),
            append_line("server.host: 0.0.0.0", engine.dashboards_config_file),
        ))
        if options.additional_dashboards_config:
            steps.append(_in_home(
                change_directory(engine.dashboards_home),
                f"echo {shlex.quote(options.additional_dashboards_config)} >> {engine.dashboards_config_file}",
            ))

    node_config = cluster_config.get_config(
        options.cluster_name,
        options.single_node,
        options.stack_name,
        options.manager_node_count,
        None if options.single_node else node_type,
        options.additional_config
    )
    if options.single_node:
        logger.info("Single node %s config:\n%s", engine, node_config)
    steps.append(_in_home(
        change_directory(engine.home),
        f"echo {shlex.quote(node_config)} > {engine.config_file}",
    ))

    if not options.single_node:
        steps.append(_in_home(
            change_directory(engine.home),
            f"echo \"y\"|sudo -u {EC2_USER} {engine.plugin_cli} install {discovery_plugin_source(options, engine)}",
        ))

    if engine == EngineFamily.OpenSearch and options.security_disabled and not options.min_distribution:
        steps.append(_in_home(
            change_directory(engine.home),
            append_line("plugins.security.disabled: true", engine.config_file),
        ))
        if options.dashboards_url:
            steps.append(_in_home(
                change_directory(engine.dashboards_home),
                "./bin/opensearch-dashboards-plugin remove securityDashboards --allow-root",
                f"sed -i /^opensearch_security/d {engine.dashboards_config_file}",
                f"sed -i 's/https/http/' {engine.dashboards_config_file}",
            ))

    if options.jvm_sys_props:
        steps.append(jvm_sys_props_step(engine, options.jvm_sys_props))
    if options.use_50_percent_heap:
        steps.append(half_memory_heap_step(engine))

    steps.append(_start_in_background(engine.home, engine_start_executable(options, engine), "install.log"))
    if options.dashboards_url:
        steps.append(_start_in_background(
            engine.dashboards_home,
            f"./bin/{engine.dashboards_home}",
            "dashboard_install.log",
            append=False
        ))
    return steps

def engine_start_executable(options: ProvisioningOptions, engine: EngineFamily) -> str:
    """Bundle OpenSearch ships a wrapper that also sets up the security demo config."""
    if engine == EngineFamily.Elasticsearch:
        return "./bin/elasticsearch"
    if options.min_distribution:
        return "./bin/opensearch"
    return "./opensearch-tar-install.sh"
