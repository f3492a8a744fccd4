"""Datum filter and processor chains applied before export.

A tick's datums pass through three stages in order:

1. a filter predicate that drops unwanted datums;
2. a sequential chain of Datum -> Datum transforms (e.g., renaming);
3. a duplicating chain of Datum -> set[Datum] transforms whose results are
   exported alongside the original. The ingestion API cannot query across
   wildcard dimensions, so the same measurement is often sent under several
   dimension combinations.
"""

from collections.abc import Callable, Iterable, Mapping, Sequence

from cloudmetrics.core.models import Datum, Dimension

DatumFilter = Callable[[Datum], bool]
DatumProcessor = Callable[[Datum], Datum]
DuplicatingProcessor = Callable[[Datum], Iterable[Datum] | None]


def accept_all(datum: Datum) -> bool:
    """Default filter that keeps every datum."""
    return True


def tag_to_dimension(tag: tuple[str, str]) -> Dimension:
    """Convert a (key, value) tag pair to a Dimension."""
    key, value = tag
    return Dimension(name=key, value=value)


def tags_to_dimensions(tags: Mapping[str, str]) -> frozenset[Dimension]:
    """Convert a tag mapping to a set of dimensions."""
    return frozenset(map(tag_to_dimension, tags.items()))


class ChainedProcessor:
    """Applies a sequence of processors, each to the previous one's output."""

    def __init__(self, processors: Sequence[DatumProcessor]) -> None:
        self._processors = tuple(processors)

    def __call__(self, datum: Datum) -> Datum:
        result = datum
        for processor in self._processors:
            result = processor(result)
        return result


class ChainedDuplicatingProcessor:
    """Applies duplicating processors and unions their output with the input.

    Every processor receives the same input datum. The input is always part
    of the result; a processor returning None or an empty iterable adds
    nothing.
    """

    def __init__(self, processors: Sequence[DuplicatingProcessor]) -> None:
        self._processors = tuple(processors)

    def __call__(self, datum: Datum) -> set[Datum]:
        result = {datum}
        for processor in self._processors:
            result.update(processor(datum) or ())
        return result


def renaming(names: Mapping[str, str]) -> DatumProcessor:
    """Build a processor that renames datums found in the mapping.

    Args:
        names: Old datum name to new datum name.
    """

    def _rename(datum: Datum) -> Datum:
        new_name = names.get(datum.name)
        if new_name is None:
            return datum
        return datum.with_name(new_name)

    return _rename


def without_dimensions(*names: str) -> DuplicatingProcessor:
    """Build a duplicating processor that drops the named dimensions.

    The copy lets a series be queried without knowing those dimension
    values. Datums carrying none of the names produce no copy.
    """
    dropped = frozenset(names)

    def _strip(datum: Datum) -> set[Datum]:
        kept = {d for d in datum.dimensions if d.name not in dropped}
        if len(kept) == len(datum.dimensions):
            return set()
        return {datum.with_dimensions(kept)}

    return _strip


def run_pipeline(
    datums: Iterable[Datum],
    datum_filter: DatumFilter,
    processor: DatumProcessor,
    duplicator: Callable[[Datum], set[Datum]],
) -> set[Datum]:
    """Filter, process and fan out datums into the final export set."""
    exported: set[Datum] = set()
    for datum in datums:
        if not datum_filter(datum):
            continue
        exported.update(duplicator(processor(datum)))
    return exported
