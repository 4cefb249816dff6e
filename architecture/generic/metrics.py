"""Host metrics and logs shipped by the CloudWatch agent, plus the small
numeric validators the rest of the cluster description leans on.
"""
from typing import Dict, List, Any

CLOUDWATCH_AGENT_HOME = "/opt/aws/amazon-cloudwatch-agent"
CLOUDWATCH_AGENT_CONFIG_PATH = f"{CLOUDWATCH_AGENT_HOME}/etc/amazon-cloudwatch-agent.json"
CLOUDWATCH_AGENT_CTL = f"{CLOUDWATCH_AGENT_HOME}/bin/amazon-cloudwatch-agent-ctl"

# Validation helpers

def validate_nonnegative(value: float, name: str = "value"):
    """Counts, sizes and costs have to be nonnegative.
    This is intended to be called early in the constructor of classes that
    have such a property, or in functions that take one as an argument.

    :param value: The value to check
    :type value: float
    :param name: The name of the parameter to check, defaults to "value"
    :type name: str, optional
    :raises ValueError: Raises a ValueError if the value is negative.

    :returns: void
    """
    if value < 0:
        raise ValueError(f"Negative value provided for {name}: {value}")

def validate_nonnegative_integer(value: int, name: str = "count"):
    """Same as validate_nonnegative, but also rejects floats and bools.
    bool is a subclass of int in Python, so it gets an explicit check.

    :raises ValueError: If value is not an int, or is negative.
    """
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"{name} must be an integer, got {value!r}")
    validate_nonnegative(value, name)

# CloudWatch agent

CPU_MEASUREMENTS = [
    'usage_active', 'usage_guest', 'usage_guest_nice', 'usage_idle',
    'usage_iowait', 'usage_irq', 'usage_nice', 'usage_softirq',
    'usage_steal', 'usage_system', 'usage_user',
    'time_active', 'time_iowait', 'time_system', 'time_user',
]
DISK_MEASUREMENTS = [
    'free', 'total', 'used', 'used_percent',
    'inodes_free', 'inodes_used', 'inodes_total',
]
DISKIO_MEASUREMENTS = [
    'reads', 'writes', 'read_bytes', 'write_bytes',
    'read_time', 'write_time', 'io_time',
]
MEM_MEASUREMENTS = [
    'active', 'available', 'available_percent', 'buffered', 'cached',
    'free', 'inactive', 'total', 'used', 'used_percent',
]
NET_MEASUREMENTS = [
    'bytes_sent', 'bytes_recv', 'drop_in', 'drop_out',
    'err_in', 'err_out', 'packets_sent', 'packets_recv',
]

def cloudwatch_agent_config(
    log_file_paths: List[str],
    log_group_name: str,
    collection_interval: int = 60,
    force_flush_interval: int = 5
) -> Dict[str, Any]:
    """The amazon-cloudwatch-agent.json document for a search node.

    :param log_file_paths: Files tailed into the log group, one stream per instance.
    :type log_file_paths: List[str]
    :param log_group_name: Name of an existing CloudWatch log group.
    :type log_group_name: str
    :param collection_interval: Seconds between metric samples, defaults to 60
    :type collection_interval: int, optional
    :param force_flush_interval: Seconds between log flushes, defaults to 5
    :type force_flush_interval: int, optional
    :rtype: Dict[str, Any], ready for json.dumps
    """
    validate_nonnegative(collection_interval, "collection_interval")
    validate_nonnegative(force_flush_interval, "force_flush_interval")
    return {
        'agent': {
            'metrics_collection_interval': collection_interval,
            'logfile': f"{CLOUDWATCH_AGENT_HOME}/logs/amazon-cloudwatch-agent.log",
            'omit_hostname': True,
            'debug': False,
        },
        'metrics': {
            'metrics_collected': {
                'cpu': {'measurement': list(CPU_MEASUREMENTS)},
                'disk': {'measurement': list(DISK_MEASUREMENTS)},
                'diskio': {'measurement': list(DISKIO_MEASUREMENTS)},
                'mem': {'measurement': list(MEM_MEASUREMENTS)},
                'net': {'measurement': list(NET_MEASUREMENTS)},
            },
        },
        'logs': {
            'logs_collected': {
                'files': {
                    'collect_list': [
                        {
                            'file_path': path,
                            'log_group_name': log_group_name,
                            'log_stream_name': '{instance_id}',
                            'auto_removal': True,
                        }
                        for path in log_file_paths
                    ],
                },
            },
            'force_flush_interval': force_flush_interval,
        },
    }
