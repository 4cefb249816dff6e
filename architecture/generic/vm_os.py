from enum import Enum
from typing import Union, List, Dict, Optional

class OperatingSystem(Enum):
    CentOS = 1
    AWSLinux = 2
    RHEL = 3

class StandardCommandLineOperations(Enum):
    Sudo = 1
    ChangeDirectory = 2
    MakeDirectory = 3
    Download = 4
    Untar = 5
    ChangeOwner = 6
    Echo = 7
    Sleep = 8
    ManagedPackageInstall = 9
    ReloadKernelParameters = 10

    def __str__(self):
        if self == StandardCommandLineOperations.Sudo:
            return 'sudo'
        if self == StandardCommandLineOperations.ChangeDirectory:
            return 'cd'
        if self == StandardCommandLineOperations.MakeDirectory:
            return 'mkdir'
        if self == StandardCommandLineOperations.Download:
            return 'curl -L'
        if self == StandardCommandLineOperations.Untar:
            return 'tar zxf'
        if self == StandardCommandLineOperations.ChangeOwner:
            return 'chown -R'
        if self == StandardCommandLineOperations.Echo:
            return 'echo'
        if self == StandardCommandLineOperations.Sleep:
            return 'sleep'
        if self == StandardCommandLineOperations.ManagedPackageInstall:
            return 'yum install -y'
        if self == StandardCommandLineOperations.ReloadKernelParameters:
            return 'sysctl -p'
        raise ValueError(f"Did not implement case {self}")

class TerminalCommand:
    """One shell command line. Either built from an operation, its targets
    and options, or taken verbatim from provided_string_rep.

    :param cwd: Directory the command runs in, None for the caller's default.
    :param ignore_errors: Whether a nonzero exit status may be ignored by the
    thing running the command.
    """

    def __init__(
        self,
        operation: Union[StandardCommandLineOperations, str],
        targets: List[str],
        options: Optional[Dict[str,str]] = None,
        provided_string_rep: str = "",
        cwd: Optional[str] = None,
        ignore_errors: bool = False
    ):
        self.operation = operation
        self.targets = targets
        self.options = options or {}
        self.provided_string_rep = provided_string_rep
        self.cwd = cwd
        self.ignore_errors = ignore_errors

    def __str__(self):

        if self.provided_string_rep:
            return self.provided_string_rep

        parts = [str(self.operation)]

        parts.extend(self.targets)

        for option,value in self.options.items():
            parts.append(option)
            parts.append(value)

        return " ".join(parts)

    def __repr__(self):
        return f"TerminalCommand({str(self)!r}, cwd={self.cwd!r})"

    def __eq__(self, other):
        if not isinstance(other, TerminalCommand):
            return False
        return (
            str(self) == str(other) and
            self.cwd == other.cwd and
            self.ignore_errors == other.ignore_errors
        )

    def strict(self) -> str:
        """The command as it is handed to a boot script: stops at the first
        failing statement and echoes everything it runs.
        """
        return f"set -ex;{self}"

def chain(
    commands: List[Union[TerminalCommand, str]],
    cwd: Optional[str] = None,
    ignore_errors: bool = False
) -> TerminalCommand:
    """Join several commands into one line, run in sequence by the same shell.
    """
    return TerminalCommand(
        "",
        [],
        provided_string_rep="; ".join(str(command) for command in commands),
        cwd=cwd,
        ignore_errors=ignore_errors
    )

def change_directory(path: str) -> TerminalCommand:
    return TerminalCommand(StandardCommandLineOperations.ChangeDirectory, [path])

def download(url: str, output_file: str) -> TerminalCommand:
    return TerminalCommand(
        StandardCommandLineOperations.Download,
        [url],
        {'-o': output_file}
    )

def append_line(line: str, path: str, use_sudo: bool = False) -> TerminalCommand:
    """echo a line onto the end of a file."""
    targets = [f'"{line}"', ">>", path]
    if use_sudo:
        return TerminalCommand(
            StandardCommandLineOperations.Sudo,
            [str(StandardCommandLineOperations.Echo)] + targets
        )
    return TerminalCommand(StandardCommandLineOperations.Echo, targets)

def sleep(seconds: int) -> TerminalCommand:
    return TerminalCommand(StandardCommandLineOperations.Sleep, [str(seconds)])

class BootFile:
    """A file laid down on the instance before any command reads it."""

    def __init__(
        self,
        path: str,
        content: str
    ):
        self.path = path
        self.content = content

    def __repr__(self):
        return f"BootFile({self.path!r})"

    def __eq__(self, other):
        if not isinstance(other, BootFile):
            return False
        return self.path == other.path and self.content == other.content
