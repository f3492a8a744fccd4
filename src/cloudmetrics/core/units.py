"""Unit resolution and time-unit conversion helpers."""

from cloudmetrics.core.models import StandardUnit, TimeUnit

# Rate label used by reporters that count calls rather than events.
CALLS_PER_SECOND = "calls/second"

_UNITS_BY_NAME = {
    unit.name.replace("_", "").lower(): unit for unit in StandardUnit
}


def resolve_unit(name: str) -> StandardUnit | None:
    """Map a unit label to a StandardUnit.

    Matching is case-insensitive against the member names without
    underscores, so "microseconds" and "CountSecond" both resolve.

    Args:
        name: Unit label such as "milliseconds" or "calls/second".

    Returns:
        The matching StandardUnit, or None if nothing matches.
    """
    if name == CALLS_PER_SECOND:
        return StandardUnit.COUNT_SECOND
    return _UNITS_BY_NAME.get(name.lower())


def rate_factor(unit: TimeUnit) -> float:
    """Seconds per unit; multiplying a per-second rate gives a per-unit rate."""
    return unit.nanos / TimeUnit.SECONDS.nanos


def duration_factor(unit: TimeUnit) -> float:
    """Nanoseconds per unit; dividing a nanosecond duration converts it."""
    return float(unit.nanos)


def rate_label(unit: TimeUnit) -> str:
    """Singular lowercase label for a rate unit (e.g., "second")."""
    return unit.name.lower()[:-1]


def duration_label(unit: TimeUnit) -> str:
    """Plural lowercase label for a duration unit (e.g., "milliseconds")."""
    return unit.name.lower()
