"""Shared test fixtures for all test modules."""

import pytest

from cloudmetrics.adapters.ingestion.in_memory import InMemoryIngestionClient
from cloudmetrics.adapters.registry.in_memory import InMemoryMetricRegistry
from cloudmetrics.core.config import ReporterConfig
from cloudmetrics.core.models import Snapshot
from tests.fakes import FIXED_TIMESTAMP


@pytest.fixture
def fixed_clock():
    """Clock that always returns FIXED_TIMESTAMP (epoch millis)."""
    return lambda: FIXED_TIMESTAMP


@pytest.fixture
def config(fixed_clock) -> ReporterConfig:
    """Default reporter config with a fixed clock."""
    return ReporterConfig(clock=fixed_clock)


@pytest.fixture
def ingestion_client() -> InMemoryIngestionClient:
    """Fixture providing an empty in-memory ingestion client."""
    return InMemoryIngestionClient()


@pytest.fixture
def registry() -> InMemoryMetricRegistry:
    """Fixture providing an empty metric registry."""
    return InMemoryMetricRegistry()


@pytest.fixture
def sample_snapshot() -> Snapshot:
    """Snapshot with distinct values in every field."""
    return Snapshot(
        max=2.0,
        min=3.0,
        mean=4.0,
        stddev=5.0,
        median=6.0,
        p75=7.0,
        p95=8.0,
        p98=9.0,
        p99=10.0,
        p999=11.0,
    )
