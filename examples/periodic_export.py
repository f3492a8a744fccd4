"""Periodic export example.

Records simulated checkout traffic into an in-memory registry and exports
it every few seconds. Without INGEST_URL the batches are kept in memory and
printed; with it they are POSTed to that ingestion endpoint.

Run with:
    python examples/periodic_export.py
    INGEST_URL=https://metrics.example.com python examples/periodic_export.py
"""

import asyncio
import logging
import os
import random

from cloudmetrics import (
    HttpIngestionClient,
    InMemoryIngestionClient,
    InMemoryMetricRegistry,
    PeriodicReporter,
    ReporterBuilder,
    TimeUnit,
    without_dimensions,
)

logger = logging.getLogger(__name__)


async def simulate_traffic(registry: InMemoryMetricRegistry) -> None:
    """Record a fake checkout every 100ms."""
    orders = registry.counter("orders")
    latency = registry.timer("checkout")
    cart = registry.histogram("cart.items")
    while True:
        with latency.time():
            await asyncio.sleep(random.uniform(0.01, 0.05))
        orders.inc()
        cart.update(random.randint(1, 8))
        await asyncio.sleep(0.1)


async def main() -> None:
    logging.basicConfig(level=logging.DEBUG)

    registry = InMemoryMetricRegistry()
    queue: list[int] = []
    registry.gauge("queue.depth", lambda: len(queue))

    url = os.environ.get("INGEST_URL")
    client = HttpIngestionClient(url) if url else InMemoryIngestionClient()

    reporter = (
        ReporterBuilder()
        .prefixed_with("shop")
        .convert_durations_to(TimeUnit.MILLISECONDS)
        .with_tags({"env": "dev", "host": os.uname().nodename})
        .duplicating_processors([without_dimensions("host")])
        .build(client, "ShopService")
    )
    periodic = PeriodicReporter(reporter, registry, interval_seconds=5)

    traffic = asyncio.create_task(simulate_traffic(registry))
    periodic.start()
    try:
        await asyncio.sleep(16)
    finally:
        traffic.cancel()
        await periodic.stop(report_final=True)
        if isinstance(client, HttpIngestionClient):
            await client.aclose()

    if isinstance(client, InMemoryIngestionClient):
        for request in client.requests:
            logger.info("%s: %d datums", request.namespace, len(request.batch))


if __name__ == "__main__":
    asyncio.run(main())
