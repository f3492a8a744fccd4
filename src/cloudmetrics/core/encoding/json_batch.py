"""JSON encoder for ingestion requests."""

from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from cloudmetrics.core.models import Datum


def encode_datum(datum: Datum) -> dict[str, Any]:
    """Encode one datum as a JSON-ready dict.

    The timestamp is rendered as ISO-8601 UTC and dimensions are sorted
    by name so equal datums always encode identically.
    """
    obj: dict[str, Any] = {
        "MetricName": datum.name,
        "Value": datum.value,
        "Timestamp": datetime.fromtimestamp(
            datum.timestamp_millis / 1000, tz=UTC
        ).isoformat(timespec="milliseconds"),
        "Dimensions": [
            {"Name": d.name, "Value": d.value}
            for d in sorted(datum.dimensions, key=lambda d: (d.name, d.value))
        ],
    }
    if datum.unit is not None:
        obj["Unit"] = datum.unit.value
    return obj


def encode_batch(namespace: str, batch: Iterable[Datum]) -> dict[str, Any]:
    """Encode a batch of datums as one ingestion request body.

    Args:
        namespace: Namespace the datums are submitted under.
        batch: The datums in this request.

    Returns:
        Dict with "Namespace" and "MetricData" keys.
    """
    return {
        "Namespace": namespace,
        "MetricData": [encode_datum(datum) for datum in batch],
    }
