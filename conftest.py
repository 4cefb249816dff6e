import pytest

OPENSEARCH_URL = "https://artifacts.opensearch.org/releases/bundle/opensearch/2.11.0/opensearch-2.11.0-linux-x64.tar.gz"
DASHBOARDS_URL = "https://artifacts.opensearch.org/releases/bundle/opensearch-dashboards/2.11.0/opensearch-dashboards-2.11.0-linux-x64.tar.gz"

@pytest.fixture
def minimal_context():
    """The required cdk context keys, as the cdk CLI passes them."""
    return {
        'distVersion': '2.11.0',
        'distributionUrl': OPENSEARCH_URL,
        'securityDisabled': 'false',
        'minDistribution': 'false',
        'cpuArch': 'x64',
    }
