"""In-memory ingestion client."""

from collections.abc import Sequence
from dataclasses import dataclass

from cloudmetrics.core.models import Datum


@dataclass(frozen=True)
class IngestionRequest:
    """One recorded put_metric_data call."""

    namespace: str
    batch: tuple[Datum, ...]


class InMemoryIngestionClient:
    """In-memory implementation of IngestionClientPort.

    Records every request instead of sending it. Suitable for testing
    and for dry runs where nothing should leave the process.
    """

    def __init__(self) -> None:
        self._requests: list[IngestionRequest] = []

    async def put_metric_data(self, namespace: str, batch: Sequence[Datum]) -> None:
        """Record a batch of datums."""
        self._requests.append(IngestionRequest(namespace, tuple(batch)))

    @property
    def requests(self) -> list[IngestionRequest]:
        return list(self._requests)

    def datums(self) -> list[Datum]:
        """All datums received, across every request."""
        return [datum for request in self._requests for datum in request.batch]

    def clear(self) -> None:
        self._requests.clear()
