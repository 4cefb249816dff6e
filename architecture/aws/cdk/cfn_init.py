"""Translate provisioning steps into cfn-init elements.

cfn-init runs packages, then files, then commands; commands keep the order
they were added in.
"""
from typing import List

from aws_cdk import aws_ec2 as ec2

from architecture.generic.managed_packages import PackageInstallation
from architecture.generic.vm_os import BootFile, TerminalCommand
from architecture.generic_elasticsearch.provisioning import BootStep

def to_init_element(step: BootStep) -> ec2.InitElement:
    if isinstance(step, PackageInstallation):
        return ec2.InitPackage.yum(step.name)
    if isinstance(step, BootFile):
        return ec2.InitFile.from_string(step.path, step.content)
    if isinstance(step, TerminalCommand):
        if step.cwd is None:
            return ec2.InitCommand.shell_command(step.strict(), ignore_errors=step.ignore_errors)
        return ec2.InitCommand.shell_command(
            step.strict(),
            cwd=step.cwd,
            ignore_errors=step.ignore_errors
        )
    raise NotImplementedError(f"Type {type(step)} not implemented.")

def to_cloudformation_init(steps: List[BootStep]) -> ec2.CloudFormationInit:
    return ec2.CloudFormationInit.from_elements(*[to_init_element(step) for step in steps])
