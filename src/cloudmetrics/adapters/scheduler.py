"""Fixed-rate asyncio scheduler that drives a reporter."""

import asyncio
import logging

from cloudmetrics.core.ports import MetricFilter, MetricRegistryPort
from cloudmetrics.core.reporter import MetricsReporter, TickResult

logger = logging.getLogger(__name__)


class PeriodicReporter:
    """Runs reporter ticks against a registry at a fixed interval.

    Ticks never overlap: each one is awaited before the next is scheduled.
    A tick that raises is logged and the loop keeps running.

    Example:
        ```python
        periodic = PeriodicReporter(reporter, registry, interval_seconds=60)
        periodic.start()
        ...
        await periodic.stop()
        ```
    """

    def __init__(
        self,
        reporter: MetricsReporter,
        registry: MetricRegistryPort,
        interval_seconds: float,
        metric_filter: MetricFilter | None = None,
    ) -> None:
        """Initialize the scheduler.

        Args:
            reporter: Reporter that exports each snapshot.
            registry: Source of metrics.
            interval_seconds: Time between tick starts.
            metric_filter: Registry-level filter. Defaults to the reporter's.

        Raises:
            ValueError: If interval_seconds is not positive.
        """
        if interval_seconds <= 0:
            raise ValueError("interval_seconds must be positive")
        self.reporter = reporter
        self.registry = registry
        self.interval_seconds = interval_seconds
        self.metric_filter = metric_filter or reporter.config.metric_filter
        self._task: asyncio.Task[None] | None = None
        self.ticks = 0

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    async def run_once(self) -> TickResult | None:
        """Snapshot the registry and run one tick. Returns None on failure."""
        self.ticks += 1
        try:
            snapshot = self.registry.snapshot(self.metric_filter)
            return await self.reporter.report(snapshot)
        except Exception:
            logger.exception("Reporting tick %d failed", self.ticks)
            return None

    async def _run(self) -> None:
        loop = asyncio.get_running_loop()
        next_tick = loop.time()
        while True:
            await self.run_once()
            next_tick += self.interval_seconds
            await asyncio.sleep(max(0.0, next_tick - loop.time()))

    def start(self) -> None:
        """Start ticking on the running event loop."""
        if self.running:
            raise RuntimeError("periodic reporter is already running")
        self._task = asyncio.get_running_loop().create_task(self._run())

    async def stop(self, report_final: bool = False) -> None:
        """Stop ticking, optionally running one last tick to flush metrics."""
        task, self._task = self._task, None
        if task is not None:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
        if report_final:
            await self.run_once()
