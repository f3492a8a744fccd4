"""Tests for core domain models."""

import dataclasses

import pytest

from cloudmetrics.core.models import (
    Datum,
    Dimension,
    MetricKind,
    RegistrySnapshot,
    Snapshot,
    StandardUnit,
    TimeUnit,
)


class TestDatum:
    """Tests for the Datum value type."""

    @pytest.mark.core
    def test_datums_with_equal_fields_are_equal(self) -> None:
        """Equality covers every field, not identity."""
        a = Datum("x", 1.0, 1000, StandardUnit.COUNT, frozenset({Dimension("k", "v")}))
        b = Datum("x", 1.0, 1000, StandardUnit.COUNT, frozenset({Dimension("k", "v")}))
        assert a == b
        assert hash(a) == hash(b)

    @pytest.mark.core
    @pytest.mark.parametrize(
        "change",
        [
            {"name": "y"},
            {"value": 2.0},
            {"timestamp_millis": 2000},
            {"unit": StandardUnit.SECONDS},
            {"dimensions": frozenset({Dimension("k", "other")})},
        ],
    )
    def test_datums_differing_in_any_field_are_distinct(self, change) -> None:
        """A difference in any single field makes datums unequal."""
        base = Datum("x", 1.0, 1000, StandardUnit.COUNT, frozenset({Dimension("k", "v")}))
        assert dataclasses.replace(base, **change) != base

    @pytest.mark.core
    def test_set_collapses_identical_datums(self) -> None:
        """Independently built identical datums collapse to one set entry."""
        datums = {Datum("x", 1.0, 1000), Datum("x", 1.0, 1000)}
        assert len(datums) == 1

    @pytest.mark.core
    def test_datum_is_immutable(self) -> None:
        """Datums cannot be mutated after construction."""
        datum = Datum("x", 1.0, 1000)
        with pytest.raises(dataclasses.FrozenInstanceError):
            datum.value = 2.0  # type: ignore[misc]

    @pytest.mark.core
    def test_defaults_to_no_unit_and_no_dimensions(self) -> None:
        datum = Datum("x", 1.0, 1000)
        assert datum.unit is None
        assert datum.dimensions == frozenset()

    @pytest.mark.core
    def test_with_name_returns_renamed_copy(self) -> None:
        datum = Datum("x", 1.0, 1000)
        renamed = datum.with_name("y")
        assert renamed.name == "y"
        assert datum.name == "x"

    @pytest.mark.core
    def test_with_dimensions_replaces_dimensions(self) -> None:
        datum = Datum("x", 1.0, 1000, dimensions=frozenset({Dimension("a", "1")}))
        updated = datum.with_dimensions([Dimension("b", "2")])
        assert updated.dimensions == frozenset({Dimension("b", "2")})

    @pytest.mark.core
    def test_tags_exposes_dimensions_as_dict(self) -> None:
        datum = Datum(
            "x", 1.0, 1000, dimensions=frozenset({Dimension("host", "web-1")})
        )
        assert datum.tags == {"host": "web-1"}


class TestTimeUnit:
    """Tests for TimeUnit nanosecond factors."""

    @pytest.mark.core
    @pytest.mark.parametrize(
        ("unit", "nanos"),
        [
            (TimeUnit.NANOSECONDS, 1),
            (TimeUnit.MICROSECONDS, 1_000),
            (TimeUnit.MILLISECONDS, 1_000_000),
            (TimeUnit.SECONDS, 1_000_000_000),
            (TimeUnit.MINUTES, 60_000_000_000),
        ],
    )
    def test_nanos(self, unit: TimeUnit, nanos: int) -> None:
        assert unit.nanos == nanos


class TestRegistrySnapshot:
    """Tests for RegistrySnapshot."""

    @pytest.mark.core
    def test_defaults_to_empty(self) -> None:
        snapshot = RegistrySnapshot()
        assert len(snapshot) == 0

    @pytest.mark.core
    def test_by_kind_pairs_each_mapping_with_its_kind(self) -> None:
        snapshot = RegistrySnapshot(counters={"c": object()}, timers={"t": object()})
        kinds = {kind: dict(metrics) for kind, metrics in snapshot.by_kind()}
        assert list(kinds) == [
            MetricKind.GAUGE,
            MetricKind.COUNTER,
            MetricKind.HISTOGRAM,
            MetricKind.METER,
            MetricKind.TIMER,
        ]
        assert list(kinds[MetricKind.COUNTER]) == ["c"]
        assert list(kinds[MetricKind.TIMER]) == ["t"]
        assert len(snapshot) == 2


class TestSnapshot:
    @pytest.mark.core
    def test_defaults_to_zeros(self) -> None:
        snapshot = Snapshot()
        assert snapshot.max == 0.0
        assert snapshot.p999 == 0.0
