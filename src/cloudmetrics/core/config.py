"""Immutable reporter configuration."""

import time
from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any

from cloudmetrics.core.models import Dimension, TimeUnit
from cloudmetrics.core.ports import MetricFilter
from cloudmetrics.core.processors import (
    DatumFilter,
    DatumProcessor,
    DuplicatingProcessor,
    accept_all,
    tags_to_dimensions,
)

Clock = Callable[[], int]


def wall_clock_millis() -> int:
    """Current Unix time in milliseconds."""
    return int(time.time() * 1000)


def accept_all_metrics(name: str, metric: Any) -> bool:
    """Default registry filter that reports every metric."""
    return True


@dataclass(frozen=True)
class ReporterConfig:
    """Settings fixed when a reporter is built.

    Attributes:
        clock: Returns the tick timestamp in epoch milliseconds.
        prefix: Prepended, dot-separated, to every metric name.
        rate_unit: Unit rates are converted to (events per unit).
        duration_unit: Unit timer durations are converted to.
        metric_filter: Registry-level filter applied before snapshotting.
        datum_filter: Drops datums before processing.
        processors: Sequential Datum -> Datum transforms.
        duplicating_processors: Datum -> set[Datum] fan-out transforms.
        tags: Dimensions attached to every datum.
        decorate_counters: Suffix counter names with ".count".
        decorate_gauges: Suffix gauge names with ".value".
        enabled: When False, nothing is sent to the ingestion API.
    """

    clock: Clock = wall_clock_millis
    prefix: str = ""
    rate_unit: TimeUnit = TimeUnit.SECONDS
    duration_unit: TimeUnit = TimeUnit.MILLISECONDS
    metric_filter: MetricFilter = accept_all_metrics
    datum_filter: DatumFilter = accept_all
    processors: tuple[DatumProcessor, ...] = ()
    duplicating_processors: tuple[DuplicatingProcessor, ...] = ()
    tags: frozenset[Dimension] = field(default_factory=frozenset)
    decorate_counters: bool = True
    decorate_gauges: bool = True
    enabled: bool = True

    def __post_init__(self) -> None:
        # Accept lists and plain tag dicts from callers.
        object.__setattr__(self, "processors", tuple(self.processors))
        object.__setattr__(
            self, "duplicating_processors", tuple(self.duplicating_processors)
        )
        if isinstance(self.tags, Mapping):
            object.__setattr__(self, "tags", tags_to_dimensions(self.tags))
        else:
            object.__setattr__(self, "tags", frozenset(self.tags))
