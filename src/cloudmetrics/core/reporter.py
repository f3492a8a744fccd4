"""Export coordinator that runs the metric pipeline once per tick.

The reporter is driven by a fixed-rate scheduler. An exception escaping a
tick would stop that scheduler for good, so ``report()`` logs every failure
and always returns normally.
"""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field, replace
from typing import Any

from cloudmetrics.core.collector import DatumBuilder
from cloudmetrics.core.config import Clock, ReporterConfig
from cloudmetrics.core.models import Datum, RegistrySnapshot, TimeUnit
from cloudmetrics.core.partition import MAX_BATCH_SIZE, partition
from cloudmetrics.core.ports import IngestionClientPort, MetricFilter
from cloudmetrics.core.processors import (
    ChainedDuplicatingProcessor,
    ChainedProcessor,
    DatumFilter,
    DatumProcessor,
    DuplicatingProcessor,
    run_pipeline,
    tags_to_dimensions,
)
from cloudmetrics.core.tracker import CounterDeltaTracker

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TickResult:
    """Outcome of one reporting tick.

    Attributes:
        datums: The final export set.
        batches: Number of batches the export set was split into.
        failed: Number of batches whose submission failed.
        submitted: Whether batches were sent to the ingestion API.
    """

    datums: frozenset[Datum] = field(default_factory=frozenset)
    batches: int = 0
    failed: int = 0
    submitted: bool = False

    @property
    def succeeded(self) -> int:
        """Number of batches the ingestion API accepted."""
        return self.batches - self.failed if self.submitted else 0


class MetricsReporter:
    """Exports registry snapshots to an ingestion API in batches.

    Example:
        ```python
        reporter = MetricsReporter(client, "MyService")
        result = await reporter.report(
            registry.snapshot(reporter.config.metric_filter)
        )
        ```
    """

    def __init__(
        self,
        client: IngestionClientPort,
        namespace: str,
        config: ReporterConfig | None = None,
    ) -> None:
        """Initialize the reporter.

        Args:
            client: Ingestion client receiving each batch.
            namespace: Namespace every batch is submitted under.
            config: Reporter settings. Defaults to ReporterConfig().
        """
        self.client = client
        self.namespace = namespace
        self.config = config or ReporterConfig()
        self.tracker = CounterDeltaTracker()
        self._builder = DatumBuilder(self.config, self.tracker)
        self._processor = ChainedProcessor(self.config.processors)
        self._duplicator = ChainedDuplicatingProcessor(
            self.config.duplicating_processors
        )

    @property
    def enabled(self) -> bool:
        return self.config.enabled

    def collect(self, snapshot: RegistrySnapshot, timestamp_millis: int) -> set[Datum]:
        """Build, filter and process the export set for one tick."""
        datums = self._builder.build_all(snapshot, timestamp_millis)
        return run_pipeline(
            datums, self.config.datum_filter, self._processor, self._duplicator
        )

    async def report(self, snapshot: RegistrySnapshot) -> TickResult:
        """Run one reporting tick.

        Never raises: construction failures produce an empty result and
        submission failures are counted per batch.
        """
        try:
            timestamp = self.config.clock()
            exported = self.collect(snapshot, timestamp)
            batches = partition(exported, MAX_BATCH_SIZE)
        except Exception:
            logger.exception("Error marshalling metrics for namespace %s", self.namespace)
            return TickResult()

        result = TickResult(datums=frozenset(exported), batches=len(batches))
        try:
            if self.enabled:
                outcomes = await asyncio.gather(
                    *(self._submit(batch) for batch in batches)
                )
                result = replace(
                    result, failed=outcomes.count(False), submitted=True
                )
            logger.debug(
                "Sent %d metric data. namespace: %s", len(exported), self.namespace
            )
            if not self.enabled:
                logger.warning(
                    "Metric API calls are currently DISABLED for this application instance."
                )
            for datum in exported:
                logger.debug("Metric datum: %s", datum)
        except Exception:
            logger.exception("Unexpected error reporting metrics for %s", self.namespace)
        return result

    def report_sync(self, snapshot: RegistrySnapshot) -> TickResult:
        """Run one tick on a fresh event loop, for thread-based schedulers."""
        return asyncio.run(self.report(snapshot))

    async def _submit(self, batch: Sequence[Datum]) -> bool:
        try:
            await self.client.put_metric_data(self.namespace, batch)
        except asyncio.CancelledError as exc:
            task = asyncio.current_task()
            if task is not None and task.cancelling():
                # The tick itself is being cancelled.
                raise
            self._log_failure(batch, exc)
            return False
        except Exception as exc:
            self._log_failure(batch, exc)
            return False
        return True

    def _log_failure(self, batch: Sequence[Datum], exc: BaseException) -> None:
        logger.error(
            "Metric submission failed. The %d datums in this request did not "
            "reach namespace %s and were discarded.",
            len(batch),
            self.namespace,
            exc_info=exc,
        )


class ReporterBuilder:
    """Fluent builder for MetricsReporter.

    Defaults to no prefix, the wall clock, rates per second, durations in
    milliseconds, no filtering, counter/gauge name decorations on and
    submission enabled.

    Example:
        ```python
        reporter = (
            ReporterBuilder()
            .prefixed_with("checkout")
            .convert_durations_to(TimeUnit.MICROSECONDS)
            .with_tags({"env": "prod"})
            .build(client, "Shop")
        )
        ```
    """

    def __init__(self) -> None:
        self._config = ReporterConfig()

    def _set(self, **changes: Any) -> "ReporterBuilder":
        self._config = replace(self._config, **changes)
        return self

    def with_clock(self, clock: Clock) -> "ReporterBuilder":
        """Use a clock returning epoch milliseconds for tick timestamps."""
        return self._set(clock=clock)

    def prefixed_with(self, prefix: str) -> "ReporterBuilder":
        """Prefix all metric names with the given string."""
        return self._set(prefix=prefix)

    def convert_rates_to(self, rate_unit: TimeUnit) -> "ReporterBuilder":
        """Report rates as events per ``rate_unit``."""
        return self._set(rate_unit=rate_unit)

    def convert_durations_to(self, duration_unit: TimeUnit) -> "ReporterBuilder":
        """Report timer durations in ``duration_unit``."""
        return self._set(duration_unit=duration_unit)

    def filter(self, metric_filter: MetricFilter) -> "ReporterBuilder":
        """Only report registry metrics accepted by the filter.

        The filter is applied when the registry is snapshotted, which
        PeriodicReporter does on every tick. Callers snapshotting the
        registry themselves should pass ``reporter.config.metric_filter``.
        """
        return self._set(metric_filter=metric_filter)

    def datum_filter(self, datum_filter: DatumFilter) -> "ReporterBuilder":
        """Only export datums accepted by the filter.

        Used to drop individual values, such as a timer's mean, while
        keeping the rest of the metric.
        """
        return self._set(datum_filter=datum_filter)

    def processors(self, processors: Sequence[DatumProcessor]) -> "ReporterBuilder":
        """Transform datums in order before export (e.g., renaming)."""
        return self._set(processors=tuple(processors))

    def duplicating_processors(
        self, processors: Sequence[DuplicatingProcessor]
    ) -> "ReporterBuilder":
        """Export extra copies of each datum alongside the original."""
        return self._set(duplicating_processors=tuple(processors))

    def with_tags(self, tags: Mapping[str, str]) -> "ReporterBuilder":
        """Attach these tags as dimensions to every datum."""
        return self._set(tags=tags_to_dimensions(tags))

    def set_enabled(self, enabled: bool) -> "ReporterBuilder":
        """Enable or disable all calls to the ingestion API."""
        return self._set(enabled=enabled)

    def with_counter_gauge_decorations(self, decorate: bool) -> "ReporterBuilder":
        """Toggle the ".count" counter suffix and ".value" gauge suffix."""
        return self._set(decorate_counters=decorate, decorate_gauges=decorate)

    def build_config(self) -> ReporterConfig:
        return self._config

    def build(self, client: IngestionClientPort, namespace: str) -> MetricsReporter:
        """Build a reporter sending to ``client`` under ``namespace``."""
        return MetricsReporter(client, namespace, self._config)
