from __future__ import annotations

from collections.abc import Iterable, Sequence


def _freeze(value: object) -> object:
    # Type-tagged: True must not equal 1, nor a dict the list of its item pairs.
    if isinstance(value, bool):
        return ("bool", value)
    if isinstance(value, (list, tuple)):
        return ("seq", tuple(_freeze(v) for v in value))
    if isinstance(value, dict):
        return ("dict", frozenset((_freeze(k), _freeze(v)) for k, v in value.items()))
    return value


def distinct_count(
    rows: Iterable[Sequence[object]],
    *,
    multiplicity_index: int | None = None,
) -> list[tuple[tuple, int]]:
    """
    Group identical rows and count them.

    Drains `rows` completely before returning. Rows compare by value (nested
    lists included). With `multiplicity_index`, that column holds a count that is
    dropped from the row and summed instead of counting occurrences.
    Output keeps the order in which each distinct row was first seen.
    """
    counts: dict[object, list] = {}
    for row in rows:
        values = tuple(row)
        weight = 1
        if multiplicity_index is not None:
            weight = int(values[multiplicity_index])
            idx = multiplicity_index % len(values)
            values = values[:idx] + values[idx + 1 :]
        key = _freeze(values)
        entry = counts.get(key)
        if entry is None:
            counts[key] = [values, weight]
        else:
            entry[1] += weight
    return [(values, count) for values, count in counts.values()]


def dataset_rows(pairs: Iterable[tuple[tuple, int]]) -> list[list[object]]:
    """Flatten (row, count) pairs into rows with the count appended."""
    return [[*row, count] for row, count in pairs]
