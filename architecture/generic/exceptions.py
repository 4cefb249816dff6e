"""A grab-bag of Exceptions and Enums/record types describing them.

In some way this modules describes a lot of the rules of valid configurations :)
"""

from enum import Enum


class InvalidStorageConfiguration(Enum):
    TooSmallForApplication = 1
    UnknownVolumeType = 2


class InvalidStorageConfigurationException(ValueError):

    def __init__(
        self,
        exception_type: InvalidStorageConfiguration,
        message: str = ""
    ):
        super().__init__(message or str(exception_type))
        self.exception_type = exception_type
        self.message = message


class InvalidClusterConfiguration(Enum):
    UnknownNodeRole = 1
    UnknownDistribution = 2
    UnsupportedEngineVersion = 3
    InvalidNodeCount = 4
    NoSeedCandidate = 5
    UnknownInstanceType = 6


class InvalidClusterConfigurationException(ValueError):
    """Anything that makes the cluster impossible to render.
    Raised before any output is produced.
    """

    def __init__(
        self,
        exception_type: InvalidClusterConfiguration,
        message: str
    ):
        super().__init__(message)
        self.exception_type = exception_type
        self.message = message
