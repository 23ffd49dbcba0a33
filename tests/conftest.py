import pytest
from prometheus_client import CollectorRegistry


@pytest.fixture()
def registry() -> "CollectorRegistry":
    """
    fresh Prometheus registry per test, gauges and counters
    would otherwise collide on the global REGISTRY.
    """
    return CollectorRegistry()
