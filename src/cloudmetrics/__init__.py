"""cloudmetrics - batch export of in-process metrics to a time-series API."""

from cloudmetrics.adapters.ingestion import (
    HttpIngestionClient,
    InMemoryIngestionClient,
    IngestionError,
)
from cloudmetrics.adapters.registry import InMemoryMetricRegistry
from cloudmetrics.adapters.scheduler import PeriodicReporter
from cloudmetrics.core.config import ReporterConfig
from cloudmetrics.core.models import (
    Datum,
    Dimension,
    MetricKind,
    RegistrySnapshot,
    Snapshot,
    StandardUnit,
    TimeUnit,
)
from cloudmetrics.core.partition import MAX_BATCH_SIZE, partition
from cloudmetrics.core.processors import (
    ChainedDuplicatingProcessor,
    ChainedProcessor,
    renaming,
    without_dimensions,
)
from cloudmetrics.core.reporter import MetricsReporter, ReporterBuilder, TickResult

__all__ = [
    "MAX_BATCH_SIZE",
    "ChainedDuplicatingProcessor",
    "ChainedProcessor",
    "Datum",
    "Dimension",
    "HttpIngestionClient",
    "InMemoryIngestionClient",
    "InMemoryMetricRegistry",
    "IngestionError",
    "MetricKind",
    "MetricsReporter",
    "PeriodicReporter",
    "RegistrySnapshot",
    "ReporterBuilder",
    "ReporterConfig",
    "Snapshot",
    "StandardUnit",
    "TickResult",
    "TimeUnit",
    "partition",
    "renaming",
    "without_dimensions",
]
