"""Ingestion clients implementing IngestionClientPort."""

from cloudmetrics.adapters.ingestion.http import HttpIngestionClient, IngestionError
from cloudmetrics.adapters.ingestion.in_memory import (
    IngestionRequest,
    InMemoryIngestionClient,
)

__all__ = [
    "HttpIngestionClient",
    "InMemoryIngestionClient",
    "IngestionError",
    "IngestionRequest",
]
