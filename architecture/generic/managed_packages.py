from enum import Enum
from typing import Union

from architecture.generic.vm_os import (
    OperatingSystem,
    StandardCommandLineOperations,
    TerminalCommand,
)

class ManagedPackage(Enum):
    CloudWatchAgent = 1
    OpenJDK8 = 2
    Corretto8 = 3

def get_package_name_for_OS(package:ManagedPackage,opsys: OperatingSystem):
    """ Lookup the specific name you need to yum install.

    :type package: ManagedPackage
    :type opsys: OperatingSystem
    :raises NotImplementedError: For the package/OS pairs nobody needed yet.
    :rtype: A string, the name of the package repo.
    """
    if package == ManagedPackage.CloudWatchAgent:
        return "amazon-cloudwatch-agent"
    if package == ManagedPackage.OpenJDK8:
        return "java-1.8.0-openjdk"
    if package == ManagedPackage.Corretto8:
        if opsys == OperatingSystem.AWSLinux:
            return "corretto8"
    raise NotImplementedError(f"No package name for {package} on {opsys}")

class PackageInstallation:
    """A package installed through yum.
    Kept apart from plain TerminalCommands so that provisioning backends
    with native package support (cfn-init) can use it.
    """

    def __init__(
        self,
        package: ManagedPackage,
        opsys: OperatingSystem = OperatingSystem.AWSLinux
    ):
        self.package = package
        self.opsys = opsys
        self.name = get_package_name_for_OS(package, opsys)

    def __str__(self):
        return f"{StandardCommandLineOperations.ManagedPackageInstall} {self.name}"

    def __repr__(self):
        return f"PackageInstallation({self.name!r})"

    def __eq__(self, other):
        if not isinstance(other, PackageInstallation):
            return False
        return self.package == other.package and self.opsys == other.opsys

def install_java_8_command(
    os_type: OperatingSystem,
) -> Union[TerminalCommand, PackageInstallation]:
    """Amazon Linux 2 ships Corretto through amazon-linux-extras rather than yum.
    """
    if os_type == OperatingSystem.AWSLinux:
        package_name = get_package_name_for_OS(ManagedPackage.Corretto8, os_type)
        return TerminalCommand(
            "",
            [],
            provided_string_rep=f"sudo amazon-linux-extras install {package_name} -y"
        )
    return PackageInstallation(ManagedPackage.OpenJDK8, os_type)
