from enum import Enum
from typing import Dict, List, Optional

from architecture.generic.exceptions import (
    InvalidClusterConfiguration,
    InvalidClusterConfigurationException,
    InvalidStorageConfiguration,
    InvalidStorageConfigurationException,
)
from architecture.generic.metrics import validate_nonnegative_integer

class CpuArchitecture(Enum):
    X64 = 'x64'
    ARM64 = 'arm64'

    def __str__(self):
        return self.value

    @classmethod
    def from_string(cls, value: str) -> 'CpuArchitecture':
        for arch in cls:
            if arch.value == value:
                return arch
        raise ValueError(
            "Please provide a valid cpu architecture. "
            f"The valid value can be either x64 or arm64, got {value}"
        )

_GENERAL_SIZES = ['large', 'xlarge', '2xlarge', '4xlarge', '8xlarge', '12xlarge', '16xlarge', '24xlarge']
_COMPUTE_SIZES = ['large', 'xlarge', '2xlarge', '4xlarge', '9xlarge', '12xlarge', '18xlarge', '24xlarge']
_GRAVITON_SIZES = ['medium', 'large', 'xlarge', '2xlarge', '4xlarge', '8xlarge', '12xlarge', '16xlarge']

X64_INSTANCE_FAMILIES: Dict[str, List[str]] = {
    'm5': _GENERAL_SIZES,
    'r5': _GENERAL_SIZES,
    'c5': _COMPUTE_SIZES,
    'i3': ['large', 'xlarge', '2xlarge', '4xlarge', '8xlarge', '16xlarge'],
    'inf1': ['xlarge', '2xlarge', '6xlarge', '24xlarge'],
    'g5': ['xlarge', '2xlarge', '4xlarge', '8xlarge', '12xlarge', '16xlarge', '24xlarge', '48xlarge'],
}

ARM64_INSTANCE_FAMILIES: Dict[str, List[str]] = {
    'm6g': _GRAVITON_SIZES,
    'r6g': _GRAVITON_SIZES,
    'r6gd': _GRAVITON_SIZES,
    'c6g': _GRAVITON_SIZES,
    'g5g': ['xlarge', '2xlarge', '4xlarge', '8xlarge', '16xlarge'],
}

def supported_instance_types(arch: CpuArchitecture) -> List[str]:
    families = X64_INSTANCE_FAMILIES if arch == CpuArchitecture.X64 else ARM64_INSTANCE_FAMILIES
    return [
        f"{family}.{size}"
        for family, sizes in families.items()
        for size in sizes
    ]

def default_storage_instance_type(arch: CpuArchitecture) -> str:
    """Data and ml nodes are memory hungry."""
    return 'r5.xlarge' if arch == CpuArchitecture.X64 else 'r6g.xlarge'

def default_instance_type(arch: CpuArchitecture) -> str:
    """Everything that is not a data or ml node."""
    return 'c5.xlarge' if arch == CpuArchitecture.X64 else 'c6g.xlarge'

def get_instance_type(instance_type: Optional[str], arch: CpuArchitecture) -> str:
    """Validate a user supplied instance type against the cpu architecture.

    :param instance_type: e.g. "r5.2xlarge". None picks the storage default.
    :raises InvalidClusterConfigurationException: If the type is unknown for the architecture.
    """
    if instance_type is None:
        return default_storage_instance_type(arch)
    if instance_type not in supported_instance_types(arch):
        raise InvalidClusterConfigurationException(
            InvalidClusterConfiguration.UnknownInstanceType,
            f"Invalid instance type {instance_type} provided for cpu architecture {arch}"
        )
    return instance_type

class EbsVolumeType(Enum):
    Standard = 'standard'
    GP2 = 'gp2'
    GP3 = 'gp3'
    IO1 = 'io1'
    IO2 = 'io2'
    SC1 = 'sc1'
    ST1 = 'st1'

    def __str__(self):
        return self.value

    @classmethod
    def from_string(cls, value: str) -> 'EbsVolumeType':
        for volume_type in cls:
            if volume_type.value == value:
                return volume_type
        raise InvalidStorageConfigurationException(
            InvalidStorageConfiguration.UnknownVolumeType,
            f"Invalid storage volume type {value}, valid values are "
            + ", ".join(str(v) for v in cls)
        )

class StorageDevice:
    """An EBS volume attached at device_name."""

    def __init__(
        self,
        size_GB: int,
        volume_type: EbsVolumeType = EbsVolumeType.GP2,
        device_name: str = '/dev/xvda'
    ):
        validate_nonnegative_integer(size_GB, "size_GB")
        if size_GB == 0:
            raise InvalidStorageConfigurationException(
                InvalidStorageConfiguration.TooSmallForApplication,
                f"A {device_name} volume of 0 GB can not hold a search node"
            )
        self.size_GB = size_GB
        self.volume_type = volume_type
        self.device_name = device_name

    def __eq__(self, other):
        if not isinstance(other, StorageDevice):
            return False
        return (
            self.size_GB == other.size_GB and
            self.volume_type == other.volume_type and
            self.device_name == other.device_name
        )

    def __repr__(self):
        return f"StorageDevice({self.size_GB}, {self.volume_type}, {self.device_name!r})"

class RootDevice(StorageDevice):
    """Root devices are important enough to get their own class.
    Nodes without dedicated storage settings get 50GB of gp2.
    """
    def __init__(
        self,
        size_GB: int = 50,
        volume_type: EbsVolumeType = EbsVolumeType.GP2
    ):
        super().__init__(size_GB, volume_type, '/dev/xvda')
