from enum import Enum

from architecture.generic.exceptions import (
    InvalidClusterConfiguration,
    InvalidClusterConfigurationException,
)
from architecture.generic_elasticsearch.backbone import ClusterConfig
from architecture.generic_elasticsearch.elasticsearch_6 import Elasticsearch6Config
from architecture.generic_elasticsearch.elasticsearch_7 import Elasticsearch7Config

class EngineFamily(Enum):
    OpenSearch = 1
    Elasticsearch = 2

    def __str__(self):
        if self == EngineFamily.OpenSearch:
            return "opensearch"
        elif self == EngineFamily.Elasticsearch:
            return "elasticsearch"
        else:
            raise ValueError(f"str implementation not provided for {self}")

    @property
    def home(self) -> str:
        """Directory the tarball is unpacked into, relative to the user's home."""
        return str(self)

    @property
    def config_file(self) -> str:
        return f"config/{self}.yml"

    @property
    def plugin_cli(self) -> str:
        return f"bin/{self}-plugin"

    @property
    def dashboards_home(self) -> str:
        if self == EngineFamily.OpenSearch:
            return "opensearch-dashboards"
        return "kibana"

    @property
    def dashboards_config_file(self) -> str:
        if self == EngineFamily.OpenSearch:
            return "config/opensearch_dashboards.yml"
        return "config/kibana.yml"

def detect_engine_family(distribution_url: str) -> EngineFamily:
    """Guess the engine from the tarball url. opensearch is checked first,
    CI built opensearch artifacts can live under paths mentioning elasticsearch.

    :raises InvalidClusterConfigurationException: If neither name is in the url.
    """
    if 'opensearch' in distribution_url:
        return EngineFamily.OpenSearch
    if 'elasticsearch' in distribution_url:
        return EngineFamily.Elasticsearch
    raise InvalidClusterConfigurationException(
        InvalidClusterConfiguration.UnknownDistribution,
        f"Provided distributionUrl: {distribution_url} was not detected to be an OS or ES OSS distribution"
    )

def get_major_version(dist_version: str) -> int:
    try:
        return int(str(dist_version).split('.')[0])
    except ValueError as e:
        raise InvalidClusterConfigurationException(
            InvalidClusterConfiguration.UnsupportedEngineVersion,
            f"Could not read a major version from distVersion {dist_version}"
        ) from e

def get_cluster_config(engine: EngineFamily, dist_version: str) -> ClusterConfig:
    """Pick the config generator for an engine release.
    Elasticsearch 6 uses zen discovery, Elasticsearch 7 and all of
    OpenSearch use voting based discovery.
    """
    if engine == EngineFamily.OpenSearch:
        return Elasticsearch7Config()
    major = get_major_version(dist_version)
    if major == 6:
        return Elasticsearch6Config()
    if major == 7:
        return Elasticsearch7Config()
    raise InvalidClusterConfigurationException(
        InvalidClusterConfiguration.UnsupportedEngineVersion,
        f"Elasticsearch {dist_version} is not supported, only 6.x and 7.x are"
    )
