"""Pytest configuration for all tests."""

import pytest
from prometheus_client import CollectorRegistry

from prbuild.metrics import BuildMetrics


@pytest.fixture
def metrics():
    """Metrics bound to a private registry so tests do not share counters."""
    return BuildMetrics(registry=CollectorRegistry())
