"""HTTP ingestion client built on httpx."""

import logging
from collections.abc import Mapping, Sequence
from types import TracebackType

import httpx

from cloudmetrics.core.encoding.json_batch import encode_batch
from cloudmetrics.core.models import Datum
from cloudmetrics.core.partition import MAX_BATCH_SIZE

logger = logging.getLogger(__name__)


class IngestionError(Exception):
    """Raised when the ingestion API rejects or cannot receive a batch."""

    def __init__(
        self, message: str, namespace: str, status_code: int | None = None
    ) -> None:
        super().__init__(message)
        self.namespace = namespace
        self.status_code = status_code


class HttpIngestionClient:
    """Submits batches to an HTTP ingestion endpoint as JSON.

    Each call POSTs one request body produced by ``encode_batch``. The
    client owns the request timeout; the reporter imposes none.

    Example:
        ```python
        async with HttpIngestionClient("https://metrics.example.com") as client:
            reporter = MetricsReporter(client, "MyService")
            await reporter.report(registry.snapshot(reporter.config.metric_filter))
        ```
    """

    def __init__(
        self,
        base_url: str,
        path: str = "/metrics",
        headers: Mapping[str, str] | None = None,
        timeout: float = 10.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            base_url: Root URL of the ingestion API.
            path: Path that accepts metric data.
            headers: Extra headers sent with every request (e.g., auth).
            timeout: Request timeout in seconds.
            client: Pre-configured httpx.AsyncClient. When given, base_url,
                headers and timeout are ignored and the caller owns its
                lifecycle.
        """
        self._path = path
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=base_url, headers=dict(headers or {}), timeout=timeout
        )

    async def put_metric_data(self, namespace: str, batch: Sequence[Datum]) -> None:
        """POST one batch of datums.

        Raises:
            ValueError: If the batch exceeds the API's size limit.
            IngestionError: If the request fails or returns a non-2xx status.
        """
        if len(batch) > MAX_BATCH_SIZE:
            raise ValueError(
                f"batch of {len(batch)} datums exceeds the limit of {MAX_BATCH_SIZE}"
            )
        body = encode_batch(namespace, batch)
        try:
            response = await self._client.post(self._path, json=body)
        except httpx.HTTPError as exc:
            raise IngestionError(
                f"request to ingestion API failed: {exc}", namespace
            ) from exc
        if response.is_error:
            raise IngestionError(
                f"ingestion API returned {response.status_code}",
                namespace,
                status_code=response.status_code,
            )
        logger.debug("Submitted %d datums to namespace %s", len(batch), namespace)

    async def aclose(self) -> None:
        """Close the underlying httpx client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> "HttpIngestionClient":
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
