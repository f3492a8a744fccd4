"""Port interfaces for metric sources and ingestion clients.

These protocols define the contracts the export pipeline relies on.
The core depends only on these interfaces, never on concrete registries
or network clients.
"""

from collections.abc import Awaitable, Callable, Sequence
from typing import Any, Protocol, runtime_checkable

from cloudmetrics.core.models import Datum, RegistrySnapshot, Snapshot

MetricFilter = Callable[[str, Any], bool]


@runtime_checkable
class GaugePort(Protocol):
    """A metric exposing an instantaneous value of any type."""

    @property
    def value(self) -> Any: ...


@runtime_checkable
class CountingPort(Protocol):
    """A metric exposing a cumulative count."""

    @property
    def count(self) -> int: ...


@runtime_checkable
class SamplingPort(Protocol):
    """A metric exposing a distribution snapshot."""

    def snapshot(self) -> Snapshot: ...


@runtime_checkable
class MeteredPort(Protocol):
    """A metric exposing a cumulative count and per-second rates."""

    @property
    def count(self) -> int: ...

    @property
    def mean_rate(self) -> float: ...

    @property
    def one_minute_rate(self) -> float: ...

    @property
    def five_minute_rate(self) -> float: ...

    @property
    def fifteen_minute_rate(self) -> float: ...


@runtime_checkable
class HistogramPort(CountingPort, SamplingPort, Protocol):
    """A counting metric with a distribution snapshot."""


@runtime_checkable
class TimerPort(MeteredPort, SamplingPort, Protocol):
    """A metered metric whose snapshot holds durations in nanoseconds."""


@runtime_checkable
class IngestionClientPort(Protocol):
    """Port for the remote time-series ingestion API.

    Adapters implementing this protocol submit one batch of datums per call.
    Examples: InMemoryIngestionClient, HttpIngestionClient.
    """

    def put_metric_data(
        self, namespace: str, batch: Sequence[Datum]
    ) -> Awaitable[Any]:
        """Submit a batch of at most 20 datums under the given namespace.

        Returns:
            Awaitable that resolves when the API accepted the batch and
            raises when the submission failed.
        """
        ...


@runtime_checkable
class MetricRegistryPort(Protocol):
    """Port for the registry that supplies metrics on each tick."""

    def snapshot(self, metric_filter: MetricFilter | None = None) -> RegistrySnapshot:
        """Return name-sorted metrics, restricted to those the filter accepts."""
        ...
