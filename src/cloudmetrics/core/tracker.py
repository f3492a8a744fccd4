"""Tracking of cumulative counts between reporting ticks."""

import threading
from typing import Any


class CounterDeltaTracker:
    """Remembers the last cumulative count seen for each countable metric.

    Only the difference since the previous tick is exported, so the
    metrics themselves never need resetting. Metrics are keyed by
    identity, not value. A reference to each metric is retained so its
    id cannot be reused by another object while the entry exists.

    Deltas are not clamped: a counter that went backwards yields a
    negative delta.
    """

    def __init__(self) -> None:
        self._last: dict[int, tuple[Any, int]] = {}
        self._lock = threading.Lock()

    def delta(self, metric: Any, current_count: int) -> int:
        """Record the current count and return the change since the last call.

        Args:
            metric: The counting metric, used only as an identity key.
            current_count: Its cumulative count right now.

        Returns:
            current_count minus the previously recorded count (0 if none).
        """
        key = id(metric)
        with self._lock:
            previous = self._last.get(key)
            self._last[key] = (metric, current_count)
        last_count = previous[1] if previous is not None else 0
        return current_count - last_count

    def last_count(self, metric: Any) -> int | None:
        """Return the last recorded count for a metric, or None if unseen."""
        with self._lock:
            entry = self._last.get(id(metric))
        return entry[1] if entry is not None else None

    def __len__(self) -> int:
        with self._lock:
            return len(self._last)
