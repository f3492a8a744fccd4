"""Core domain models for metric export."""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any


class StandardUnit(Enum):
    """Units understood by the ingestion API.

    Member values are the strings sent on the wire.
    """

    SECONDS = "Seconds"
    MICROSECONDS = "Microseconds"
    MILLISECONDS = "Milliseconds"
    BYTES = "Bytes"
    KILOBYTES = "Kilobytes"
    MEGABYTES = "Megabytes"
    GIGABYTES = "Gigabytes"
    TERABYTES = "Terabytes"
    BITS = "Bits"
    KILOBITS = "Kilobits"
    MEGABITS = "Megabits"
    GIGABITS = "Gigabits"
    TERABITS = "Terabits"
    PERCENT = "Percent"
    COUNT = "Count"
    BYTES_SECOND = "Bytes/Second"
    KILOBYTES_SECOND = "Kilobytes/Second"
    MEGABYTES_SECOND = "Megabytes/Second"
    GIGABYTES_SECOND = "Gigabytes/Second"
    TERABYTES_SECOND = "Terabytes/Second"
    BITS_SECOND = "Bits/Second"
    KILOBITS_SECOND = "Kilobits/Second"
    MEGABITS_SECOND = "Megabits/Second"
    GIGABITS_SECOND = "Gigabits/Second"
    TERABITS_SECOND = "Terabits/Second"
    COUNT_SECOND = "Count/Second"
    NONE = "None"


class TimeUnit(Enum):
    """Time units used for rate and duration conversion.

    Each member's value is its length in nanoseconds.
    """

    NANOSECONDS = 1
    MICROSECONDS = 1_000
    MILLISECONDS = 1_000_000
    SECONDS = 1_000_000_000
    MINUTES = 60 * 1_000_000_000
    HOURS = 60 * 60 * 1_000_000_000
    DAYS = 24 * 60 * 60 * 1_000_000_000

    @property
    def nanos(self) -> int:
        return self.value


class MetricKind(Enum):
    """The five kinds of metric a registry can hold."""

    GAUGE = "gauge"
    COUNTER = "counter"
    HISTOGRAM = "histogram"
    METER = "meter"
    TIMER = "timer"


@dataclass(frozen=True)
class Dimension:
    """A single name/value tag attached to a datum.

    Attributes:
        name: Dimension name (e.g., "host").
        value: Dimension value (e.g., "web-1").
    """

    name: str
    value: str


@dataclass(frozen=True)
class Datum:
    """One named, timestamped measurement destined for export.

    Equality and hashing cover every field, so sets of datums collapse
    identical measurements produced by independent pipeline stages.

    Attributes:
        name: Metric name (e.g., "requests.count").
        value: The measured value.
        timestamp_millis: Unix timestamp in milliseconds.
        unit: Unit of the value, or None when no unit applies.
        dimensions: Tags identifying the series.
    """

    name: str
    value: float
    timestamp_millis: int
    unit: StandardUnit | None = None
    dimensions: frozenset[Dimension] = field(default_factory=frozenset)

    @property
    def tags(self) -> dict[str, str]:
        """Dimensions as a plain dict."""
        return {d.name: d.value for d in self.dimensions}

    def with_name(self, name: str) -> "Datum":
        """Return a copy of this datum under a different name."""
        return replace(self, name=name)

    def with_dimensions(self, dimensions: Iterable[Dimension]) -> "Datum":
        """Return a copy of this datum carrying the given dimensions."""
        return replace(self, dimensions=frozenset(dimensions))


@dataclass(frozen=True)
class Snapshot:
    """Statistical summary of a sampling metric at one point in time.

    Timer snapshots hold durations in nanoseconds.
    """

    max: float = 0.0
    min: float = 0.0
    mean: float = 0.0
    stddev: float = 0.0
    median: float = 0.0
    p75: float = 0.0
    p95: float = 0.0
    p98: float = 0.0
    p99: float = 0.0
    p999: float = 0.0


@dataclass(frozen=True)
class RegistrySnapshot:
    """Name-sorted view of every metric in a registry for one tick.

    Attributes:
        gauges: Gauge metrics by name.
        counters: Counter metrics by name.
        histograms: Histogram metrics by name.
        meters: Meter metrics by name.
        timers: Timer metrics by name.
    """

    gauges: Mapping[str, Any] = field(default_factory=dict)
    counters: Mapping[str, Any] = field(default_factory=dict)
    histograms: Mapping[str, Any] = field(default_factory=dict)
    meters: Mapping[str, Any] = field(default_factory=dict)
    timers: Mapping[str, Any] = field(default_factory=dict)

    def by_kind(self) -> list[tuple[MetricKind, Mapping[str, Any]]]:
        """Return each mapping paired with the kind of metric it holds."""
        return [
            (MetricKind.GAUGE, self.gauges),
            (MetricKind.COUNTER, self.counters),
            (MetricKind.HISTOGRAM, self.histograms),
            (MetricKind.METER, self.meters),
            (MetricKind.TIMER, self.timers),
        ]

    def __len__(self) -> int:
        return sum(len(metrics) for _, metrics in self.by_kind())
