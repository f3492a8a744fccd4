"""Wire encoders for ingestion requests."""

from cloudmetrics.core.encoding.json_batch import encode_batch, encode_datum

__all__ = ["encode_batch", "encode_datum"]
