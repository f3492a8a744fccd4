"""Conversion of registry metrics into datums."""

import math
from collections.abc import Callable, Iterable
from typing import Any

from cloudmetrics.core.config import ReporterConfig
from cloudmetrics.core.models import (
    Datum,
    Dimension,
    MetricKind,
    RegistrySnapshot,
    StandardUnit,
)
from cloudmetrics.core.tracker import CounterDeltaTracker
from cloudmetrics.core.units import (
    duration_factor,
    duration_label,
    rate_factor,
    rate_label,
    resolve_unit,
)

# Snapshot fields in export order, paired with their datum suffix.
SNAPSHOT_FIELDS = (
    "max",
    "min",
    "mean",
    "stddev",
    "median",
    "p75",
    "p95",
    "p98",
    "p99",
    "p999",
)

_NO_UNIT = object()


def metric_name(*parts: str) -> str:
    """Join non-empty name parts with dots."""
    return ".".join(part for part in parts if part)


def parse_gauge_value(value: Any) -> float | None:
    """Return a gauge value as a finite float, or None if it is not numeric."""
    try:
        number = float(str(value))
    except (TypeError, ValueError):
        return None
    if not math.isfinite(number):
        return None
    return number


class DatumCollector:
    """Accumulates the datums produced for a single metric.

    Example:
        ```python
        datums = (
            DatumCollector("api.latency", dimensions, timestamp)
            .add("count", 3)
            .add("max", 0.25, "milliseconds")
            .build()
        )
        ```
    """

    def __init__(
        self,
        prefix: str,
        dimensions: frozenset[Dimension],
        timestamp_millis: int,
    ) -> None:
        self._prefix = prefix
        self._dimensions = dimensions
        self._timestamp_millis = timestamp_millis
        self._datums: set[Datum] = set()

    def add(self, suffix: str, value: float, unit: Any = _NO_UNIT) -> "DatumCollector":
        """Add a datum named ``<prefix>.<suffix>``.

        Args:
            suffix: Final name component (e.g., "p99").
            value: Measured value.
            unit: Optional unit label. Labels that do not resolve produce
                StandardUnit.NONE; omitting the label leaves the unit unset.
        """
        resolved: StandardUnit | None = None
        if unit is not _NO_UNIT:
            resolved = resolve_unit(unit) or StandardUnit.NONE
        self._datums.add(
            Datum(
                name=metric_name(self._prefix, suffix),
                value=float(value),
                timestamp_millis=self._timestamp_millis,
                unit=resolved,
                dimensions=self._dimensions,
            )
        )
        return self

    def build(self) -> set[Datum]:
        return self._datums


class DatumBuilder:
    """Builds datums from registry metrics, one conversion per metric kind."""

    def __init__(self, config: ReporterConfig, tracker: CounterDeltaTracker) -> None:
        self._config = config
        self._tracker = tracker
        self._rate_factor = rate_factor(config.rate_unit)
        self._rate_label = rate_label(config.rate_unit)
        self._duration_factor = duration_factor(config.duration_unit)
        self._duration_label = duration_label(config.duration_unit)
        self._builders: dict[
            MetricKind, Callable[[str, Any, int], Iterable[Datum]]
        ] = {
            MetricKind.GAUGE: self.build_gauge,
            MetricKind.COUNTER: self.build_counter,
            MetricKind.HISTOGRAM: self.build_histogram,
            MetricKind.METER: self.build_meter,
            MetricKind.TIMER: self.build_timer,
        }

    def build(
        self, kind: MetricKind, name: str, metric: Any, timestamp_millis: int
    ) -> Iterable[Datum]:
        """Convert one metric of the given kind into datums."""
        return self._builders[kind](name, metric, timestamp_millis)

    def build_all(self, snapshot: RegistrySnapshot, timestamp_millis: int) -> set[Datum]:
        """Convert every metric in a registry snapshot into a set of datums."""
        datums: set[Datum] = set()
        for kind, metrics in snapshot.by_kind():
            for name, metric in metrics.items():
                datums.update(self.build(kind, name, metric, timestamp_millis))
        return datums

    def build_gauge(self, name: str, gauge: Any, timestamp_millis: int) -> list[Datum]:
        value = parse_gauge_value(gauge.value)
        if value is None:
            return []
        suffix = "value" if self._config.decorate_gauges else ""
        return [self._single(metric_name(self._prefixed(name), suffix), value, timestamp_millis)]

    def build_counter(self, name: str, counter: Any, timestamp_millis: int) -> list[Datum]:
        suffix = "count" if self._config.decorate_counters else ""
        value = self._tracker.delta(counter, counter.count)
        return [self._single(metric_name(self._prefixed(name), suffix), value, timestamp_millis)]

    def build_histogram(
        self, name: str, histogram: Any, timestamp_millis: int
    ) -> set[Datum]:
        collector = self._collector(name, timestamp_millis)
        collector.add("count", self._tracker.delta(histogram, histogram.count))
        snapshot = histogram.snapshot()
        for field_name in SNAPSHOT_FIELDS:
            collector.add(field_name, getattr(snapshot, field_name))
        return collector.build()

    def build_meter(self, name: str, meter: Any, timestamp_millis: int) -> set[Datum]:
        collector = self._collector(name, timestamp_millis)
        collector.add("count", self._tracker.delta(meter, meter.count))
        for suffix, rate in self._rates(meter):
            collector.add(suffix, rate * self._rate_factor)
        return collector.build()

    def build_timer(self, name: str, timer: Any, timestamp_millis: int) -> set[Datum]:
        collector = self._collector(name, timestamp_millis)
        collector.add("count", self._tracker.delta(timer, timer.count))
        for suffix, rate in self._rates(timer):
            collector.add(suffix, rate * self._rate_factor, self._rate_label)
        snapshot = timer.snapshot()
        for field_name in SNAPSHOT_FIELDS:
            duration = getattr(snapshot, field_name) / self._duration_factor
            collector.add(field_name, duration, self._duration_label)
        return collector.build()

    @staticmethod
    def _rates(metered: Any) -> list[tuple[str, float]]:
        return [
            ("mean_rate", metered.mean_rate),
            ("m1", metered.one_minute_rate),
            ("m5", metered.five_minute_rate),
            ("m15", metered.fifteen_minute_rate),
        ]

    def _prefixed(self, name: str) -> str:
        return metric_name(self._config.prefix, name)

    def _collector(self, name: str, timestamp_millis: int) -> DatumCollector:
        return DatumCollector(self._prefixed(name), self._config.tags, timestamp_millis)

    def _single(self, name: str, value: float, timestamp_millis: int) -> Datum:
        return Datum(
            name=name,
            value=float(value),
            timestamp_millis=timestamp_millis,
            dimensions=self._config.tags,
        )
