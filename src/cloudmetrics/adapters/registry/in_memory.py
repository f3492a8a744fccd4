"""In-memory metric registry and metric types.

Provides the five metric kinds the reporter understands, each satisfying
its port protocol. Histograms keep a bounded sliding window of recent
values; meters track exponentially weighted 1/5/15-minute rates.
"""

import math
import threading
import time
from collections import deque
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import Any

from cloudmetrics.core.models import MetricKind, RegistrySnapshot, Snapshot
from cloudmetrics.core.ports import MetricFilter

DEFAULT_RESERVOIR_SIZE = 1028

# Meters fold marks into their moving averages every 5 seconds.
TICK_INTERVAL_SECONDS = 5.0


class Counter:
    """A cumulative count that can be incremented and decremented."""

    def __init__(self) -> None:
        self._count = 0
        self._lock = threading.Lock()

    def inc(self, n: int = 1) -> None:
        with self._lock:
            self._count += n

    def dec(self, n: int = 1) -> None:
        with self._lock:
            self._count -= n

    @property
    def count(self) -> int:
        return self._count


class Gauge:
    """Reports whatever its callable returns at read time."""

    def __init__(self, fn: Callable[[], Any]) -> None:
        if not callable(fn):
            raise TypeError("gauge function must be callable")
        self._fn = fn

    @property
    def value(self) -> Any:
        return self._fn()


def _quantile(values: list[float], q: float) -> float:
    """Quantile of sorted values by linear interpolation between ranks."""
    if not values:
        return 0.0
    pos = q * (len(values) + 1)
    if pos < 1:
        return values[0]
    if pos >= len(values):
        return values[-1]
    lower = values[int(pos) - 1]
    upper = values[int(pos)]
    return lower + (pos - math.floor(pos)) * (upper - lower)


def snapshot_of(values: list[float]) -> Snapshot:
    """Summarize a list of values. Empty input gives an all-zero snapshot."""
    if not values:
        return Snapshot()
    ordered = sorted(values)
    n = len(ordered)
    mean = sum(ordered) / n
    if n > 1:
        variance = sum((v - mean) ** 2 for v in ordered) / (n - 1)
        stddev = math.sqrt(variance)
    else:
        stddev = 0.0
    return Snapshot(
        max=ordered[-1],
        min=ordered[0],
        mean=mean,
        stddev=stddev,
        median=_quantile(ordered, 0.5),
        p75=_quantile(ordered, 0.75),
        p95=_quantile(ordered, 0.95),
        p98=_quantile(ordered, 0.98),
        p99=_quantile(ordered, 0.99),
        p999=_quantile(ordered, 0.999),
    )


class Histogram:
    """Counts updates and summarizes the most recent values.

    Args:
        reservoir_size: Number of recent values kept for the snapshot.
    """

    def __init__(self, reservoir_size: int = DEFAULT_RESERVOIR_SIZE) -> None:
        self._values: deque[float] = deque(maxlen=reservoir_size)
        self._count = 0
        self._lock = threading.Lock()

    def update(self, value: float) -> None:
        with self._lock:
            self._count += 1
            self._values.append(value)

    @property
    def count(self) -> int:
        return self._count

    def snapshot(self) -> Snapshot:
        with self._lock:
            values = list(self._values)
        return snapshot_of(values)


class EWMA:
    """Exponentially weighted moving average of events per second."""

    def __init__(self, minutes: float, interval: float = TICK_INTERVAL_SECONDS) -> None:
        self._alpha = 1 - math.exp(-interval / 60.0 / minutes)
        self._interval = interval
        self._uncounted = 0
        self._rate = 0.0
        self._initialized = False

    def update(self, n: int) -> None:
        self._uncounted += n

    def tick(self) -> None:
        instant_rate = self._uncounted / self._interval
        self._uncounted = 0
        if self._initialized:
            self._rate += self._alpha * (instant_rate - self._rate)
        else:
            self._rate = instant_rate
            self._initialized = True

    @property
    def rate(self) -> float:
        return self._rate


class Meter:
    """Measures the rate of events: mean and 1/5/15-minute moving averages.

    Args:
        clock: Monotonic clock in seconds.
    """

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._count = 0
        self._start = clock()
        self._last_tick = self._start
        self._m1 = EWMA(1)
        self._m5 = EWMA(5)
        self._m15 = EWMA(15)
        self._lock = threading.Lock()

    def mark(self, n: int = 1) -> None:
        with self._lock:
            self._tick_if_necessary()
            self._count += n
            for ewma in (self._m1, self._m5, self._m15):
                ewma.update(n)

    def _tick_if_necessary(self) -> None:
        now = self._clock()
        age = now - self._last_tick
        if age <= TICK_INTERVAL_SECONDS:
            return
        self._last_tick = now - age % TICK_INTERVAL_SECONDS
        for _ in range(int(age // TICK_INTERVAL_SECONDS)):
            for ewma in (self._m1, self._m5, self._m15):
                ewma.tick()

    def _ticked_rate(self, ewma: EWMA) -> float:
        with self._lock:
            self._tick_if_necessary()
            return ewma.rate

    @property
    def count(self) -> int:
        return self._count

    @property
    def mean_rate(self) -> float:
        if self._count == 0:
            return 0.0
        elapsed = self._clock() - self._start
        if elapsed <= 0:
            return 0.0
        return self._count / elapsed

    @property
    def one_minute_rate(self) -> float:
        return self._ticked_rate(self._m1)

    @property
    def five_minute_rate(self) -> float:
        return self._ticked_rate(self._m5)

    @property
    def fifteen_minute_rate(self) -> float:
        return self._ticked_rate(self._m15)


class Timer:
    """A meter of calls plus a histogram of their durations in nanoseconds."""

    def __init__(
        self,
        clock: Callable[[], float] = time.monotonic,
        reservoir_size: int = DEFAULT_RESERVOIR_SIZE,
    ) -> None:
        self._meter = Meter(clock)
        self._histogram = Histogram(reservoir_size)

    def update(self, duration_nanos: int) -> None:
        """Record one call; negative durations are ignored."""
        if duration_nanos < 0:
            return
        self._histogram.update(duration_nanos)
        self._meter.mark()

    @contextmanager
    def time(self) -> Iterator[None]:
        """Time the enclosed block and record it."""
        start = time.perf_counter_ns()
        try:
            yield
        finally:
            self.update(time.perf_counter_ns() - start)

    @property
    def count(self) -> int:
        return self._histogram.count

    @property
    def mean_rate(self) -> float:
        return self._meter.mean_rate

    @property
    def one_minute_rate(self) -> float:
        return self._meter.one_minute_rate

    @property
    def five_minute_rate(self) -> float:
        return self._meter.five_minute_rate

    @property
    def fifteen_minute_rate(self) -> float:
        return self._meter.fifteen_minute_rate

    def snapshot(self) -> Snapshot:
        return self._histogram.snapshot()


_KIND_BY_TYPE: dict[type, MetricKind] = {
    Gauge: MetricKind.GAUGE,
    Counter: MetricKind.COUNTER,
    Histogram: MetricKind.HISTOGRAM,
    Meter: MetricKind.METER,
    Timer: MetricKind.TIMER,
}


class InMemoryMetricRegistry:
    """In-memory implementation of MetricRegistryPort.

    Metrics are registered under unique names. The ``counter``, ``meter``,
    ``histogram`` and ``timer`` accessors return the existing metric of that
    name or create one.
    """

    def __init__(self) -> None:
        self._metrics: dict[str, tuple[MetricKind, Any]] = {}
        self._lock = threading.Lock()

    def register(self, name: str, metric: Any, kind: MetricKind | None = None) -> Any:
        """Register a metric under a new name.

        Args:
            name: Unique metric name.
            metric: The metric object.
            kind: Its kind. Inferred for the metric types in this module.

        Raises:
            ValueError: If the name is taken or the kind cannot be inferred.
        """
        if kind is None:
            kind = _KIND_BY_TYPE.get(type(metric))
            if kind is None:
                raise ValueError(f"cannot infer metric kind for {type(metric).__name__}")
        with self._lock:
            if name in self._metrics:
                raise ValueError(f"a metric named {name!r} already exists")
            self._metrics[name] = (kind, metric)
        return metric

    def _get_or_add(self, name: str, kind: MetricKind, factory: Callable[[], Any]) -> Any:
        with self._lock:
            existing = self._metrics.get(name)
            if existing is None:
                metric = factory()
                self._metrics[name] = (kind, metric)
                return metric
        existing_kind, metric = existing
        if existing_kind is not kind:
            raise ValueError(
                f"{name!r} is already registered as a {existing_kind.value}"
            )
        return metric

    def counter(self, name: str) -> Counter:
        return self._get_or_add(name, MetricKind.COUNTER, Counter)

    def histogram(self, name: str) -> Histogram:
        return self._get_or_add(name, MetricKind.HISTOGRAM, Histogram)

    def meter(self, name: str) -> Meter:
        return self._get_or_add(name, MetricKind.METER, Meter)

    def timer(self, name: str) -> Timer:
        return self._get_or_add(name, MetricKind.TIMER, Timer)

    def gauge(self, name: str, fn: Callable[[], Any]) -> Gauge:
        return self.register(name, Gauge(fn))

    def remove(self, name: str) -> bool:
        """Remove a metric. Returns True if it existed."""
        with self._lock:
            return self._metrics.pop(name, None) is not None

    def names(self) -> list[str]:
        with self._lock:
            return sorted(self._metrics)

    def snapshot(self, metric_filter: MetricFilter | None = None) -> RegistrySnapshot:
        """Return every accepted metric, grouped by kind and sorted by name."""
        with self._lock:
            entries = sorted(self._metrics.items())
        grouped: dict[MetricKind, dict[str, Any]] = {kind: {} for kind in MetricKind}
        for name, (kind, metric) in entries:
            if metric_filter is None or metric_filter(name, metric):
                grouped[kind][name] = metric
        return RegistrySnapshot(
            gauges=grouped[MetricKind.GAUGE],
            counters=grouped[MetricKind.COUNTER],
            histograms=grouped[MetricKind.HISTOGRAM],
            meters=grouped[MetricKind.METER],
            timers=grouped[MetricKind.TIMER],
        )
