from enum import Enum


class InvalidContext(Enum):
    MissingRequiredParameter = 1
    InvalidBoolean = 2
    InvalidInteger = 3
    InvalidCpuArchitecture = 4
    MalformedJson = 5
    IncompleteContextFilePair = 6
    UnknownContextId = 7
    InvalidServerAccess = 8
    InvalidRoleArn = 9


class InvalidContextException(ValueError):
    """Raised while reading deployment parameters. Synthesis is aborted,
    there is nothing to recover.

    :param exception_type: What was wrong with the context.
    :type exception_type: InvalidContext
    :param message: Human readable description, shown by the cdk CLI.
    :type message: str
    """

    def __init__(
        self,
        exception_type: InvalidContext,
        message: str
    ):
        super().__init__(message)
        self.exception_type = exception_type
        self.message = message
