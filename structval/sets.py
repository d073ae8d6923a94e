"""
structval.sets — Set operations on sequences, by shape.

Every operation compares elements with ``digest`` instead of identity or
``==``, so two distinct dicts with the same content count as one element
and unhashable values (lists, dicts) work as set members:

    unique([{"a": 1}, {"a": 1}, [2]])   → [{"a": 1}, [2]]

Inputs are never mutated, results are new lists, and when elements are
deduplicated the FIRST occurrence is the one kept.
"""

from typing import Any

from .core import OMITTED, UNDEFINED, Kind, digest, expect
from .errors import MissingArgumentError, ShapeError


def _check(operation: str, params: tuple, **arguments: Any) -> None:
    for name, value in arguments.items():
        expect(operation, params, name, value, Kind.SEQUENCE)


def _digest_set(seq) -> set:
    return {digest(v) for v in seq}


def unique(seq) -> list:
    """Elements of ``seq`` with later structural duplicates dropped."""
    _check("unique", ("seq",), seq=seq)

    seen: set = set()
    result = []
    for v in seq:
        key = digest(v)
        if key not in seen:
            seen.add(key)
            result.append(v)
    return result


def duplicates(seq) -> list:
    """
    One representative per value that occurs more than once.

    Representatives are the first occurrences, ordered by where each
    value was first seen:

        duplicates([1, 1, 2, 3, 3, 3])  → [1, 3]
    """
    _check("duplicates", ("seq",), seq=seq)

    counts: dict[str, int] = {}
    originals: dict[str, Any] = {}
    for v in seq:
        key = digest(v)
        if key not in counts:
            originals[key] = v
            counts[key] = 1
        else:
            counts[key] += 1

    return [originals[key] for key, c in counts.items() if c > 1]


def count(seq, value=OMITTED):
    """
    Occurrence counts by shape.

    With ``value``: how many elements of ``seq`` are structurally equal to
    it.  Without it (or with UNDEFINED): a dict mapping each distinct
    element's digest to its count, in first-seen order.

        count([1, 1, 2], 1)  → 2
        count([1, 1, 2])     → {"number:1": 2, "number:2": 1}
    """
    _check("count", ("seq", "value"), seq=seq)

    if value is not OMITTED and value is not UNDEFINED:
        key = digest(value)
        return sum(1 for v in seq if digest(v) == key)

    result: dict[str, int] = {}
    for v in seq:
        key = digest(v)
        result[key] = result.get(key, 0) + 1
    return result


def contains_all(seq, other) -> bool:
    """True iff every element of ``other`` occurs in ``seq``.  Multiplicity is ignored."""
    _check("contains_all", ("seq", "other"), seq=seq, other=other)

    present = _digest_set(seq)
    return all(digest(v) in present for v in other)


def intersection(seq, other, *, unique: bool = False) -> list:
    """
    Elements of ``seq`` that also occur in ``other``.

    Repeats in ``seq`` are all kept unless ``unique`` is set, in which case
    only the first occurrence of each value survives:

        intersection([1, 1, 2], [1, 2])               → [1, 1, 2]
        intersection([1, 1, 2], [1, 2], unique=True)  → [1, 2]
    """
    params = ("seq", "other", "unique")
    _check("intersection", params, seq=seq, other=other)
    if not isinstance(unique, bool):
        raise ShapeError("intersection", params, "unique",
                         expected="bool", received=type(unique).__name__)

    wanted = _digest_set(other)
    seen: set = set()
    result = []
    for v in seq:
        key = digest(v)
        if key not in wanted:
            continue
        if unique:
            if key in seen:
                continue
            seen.add(key)
        result.append(v)
    return result


def union(seq, other) -> list:
    """``seq`` followed by ``other``, deduplicated; shared values keep their ``seq`` position."""
    _check("union", ("seq", "other"), seq=seq, other=other)

    seen: set = set()
    result = []
    for v in [*seq, *other]:
        key = digest(v)
        if key not in seen:
            seen.add(key)
            result.append(v)
    return result


def remove(seq, value=OMITTED) -> list:
    """
    ``seq`` without the elements structurally equal to ``value``.

    ``value`` is required; None and UNDEFINED are legitimate values to
    remove, so only an omitted argument is rejected.
    """
    params = ("seq", "value")
    _check("remove", params, seq=seq)
    if value is OMITTED:
        raise MissingArgumentError("remove", params, "value")

    key = digest(value)
    return [v for v in seq if digest(v) != key]
