"""Batching of datums to respect the ingestion API's request limit."""

from collections.abc import Iterable
from itertools import islice

from cloudmetrics.core.models import Datum

# Each ingestion request may contain at most 20 datums.
MAX_BATCH_SIZE = 20


def partition(datums: Iterable[Datum], size: int = MAX_BATCH_SIZE) -> list[list[Datum]]:
    """Split datums into consecutive batches of at most ``size`` entries.

    Args:
        datums: Datums to split; iteration order decides batch membership.
        size: Maximum batch size.

    Returns:
        List of non-empty batches. Empty if there are no datums.

    Raises:
        ValueError: If size is less than 1.
    """
    if size < 1:
        raise ValueError(f"batch size must be at least 1, got {size}")
    iterator = iter(datums)
    batches: list[list[Datum]] = []
    while batch := list(islice(iterator, size)):
        batches.append(batch)
    return batches
