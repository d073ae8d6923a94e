"""
structval.merge — Right-biased recursive merge.

Given a target and a source, produce a NEW value in which the source wins
every conflict except when both sides hold containers at the same key, in
which case the two are merged recursively:

    merge({"a": 1, "b": {"x": 1}}, {"b": {"y": 2}, "c": 3})
        → {"a": 1, "b": {"x": 1, "y": 2}, "c": 3}

ALGORITHM (per node):
    1. source primitive                 → source
    2. source not mergeable, or target
       not a container                  → clone(source)
    3. (target, source) already visited → the result built for that pair
    4. allocate a result shaped like SOURCE and register the pair
    5. copy target's entries into it unchanged
    6. for each source entry: containers recurse, everything else
       overwrites

The result kind in step 4 follows the source alone.  Merging a list into
a dict therefore yields a list carrying the dict's integer-keyed entries,
and a dict into a list yields a dict keyed 0..n-1.  This is deliberate and
kept as-is.

Neither argument is ever mutated.  Entries of the target that the source
does not touch are shared with the result, not copied.
"""

import logging
from typing import Any

from .clone import _clone, _empty_like
from .core import (
    CONTAINER_KINDS, MAX_DEPTH, OMITTED, PRIMITIVE_KINDS, UNDEFINED,
    Kind, classify, fields, set_field,
)
from .errors import DepthLimitError, MissingArgumentError

logger = logging.getLogger(__name__)


def merge(target: Any, source: Any = OMITTED) -> Any:
    """
    Merge ``source`` into ``target``, returning a new value.

    ``target`` may be UNDEFINED or None, in which case the result is a
    deep copy of ``source``.  ``source`` is required.
    """
    if source is OMITTED:
        raise MissingArgumentError("merge", ("target", "source"), "source")
    return _merge(target, source, {}, 0)


def merge_all(*values: Any) -> Any:
    """
    Left fold of ``merge`` starting from an empty dict.

    One visited map is shared by the whole fold, so a (target, source)
    pair met in an earlier step is not merged a second time.

        merge_all(a, b, c)  ≡  merge(merge(merge({}, a), b), c)
        merge_all()         →  {}
    """
    seen: dict = {}
    result: Any = {}
    for value in values:
        result = _merge(result, value, seen, 0)
    return result


# ═══════════════════════════════════════════════════════════════════
#  ENTRY ACCESS
#  A list's entries are (index, element), a dict's are its items, an
#  object's are its filled slots and instance attributes.
# ═══════════════════════════════════════════════════════════════════

def _entries(container, kind: Kind):
    if kind is Kind.SEQUENCE:
        return list(enumerate(container))
    if kind is Kind.MAPPING:
        return list(container.items())
    return list(fields(container).items())


def _lookup(result, kind: Kind, key) -> Any:
    if kind is Kind.SEQUENCE:
        if isinstance(key, int) and 0 <= key < len(result):
            return result[key]
        return UNDEFINED
    if kind is Kind.MAPPING:
        return result.get(key, UNDEFINED)
    return fields(result).get(key, UNDEFINED)


def _store(result, kind: Kind, key, value) -> None:
    if kind is Kind.SEQUENCE:
        # only index keys have a place in a list
        if not isinstance(key, int) or isinstance(key, bool) or key < 0:
            logger.debug("dropping key %r merged into a list", key)
            return
        while len(result) <= key:
            result.append(UNDEFINED)
        result[key] = value
    elif kind is Kind.MAPPING:
        result[key] = value
    elif not set_field(result, key, value):
        logger.debug("dropping key %r with no slot on %s", key, type(result).__name__)


def _allocate(source, kind: Kind):
    if kind is Kind.SEQUENCE:
        return []
    if kind is Kind.MAPPING:
        return _empty_like(source)
    cls = type(source)
    return cls.__new__(cls)


# ═══════════════════════════════════════════════════════════════════
#  RECURSION
# ═══════════════════════════════════════════════════════════════════

def _merge(target: Any, source: Any, seen: dict, depth: int) -> Any:
    source_kind = classify(source)
    if source_kind in PRIMITIVE_KINDS:
        return source

    target_kind = classify(target)
    if source_kind not in CONTAINER_KINDS or target_kind not in CONTAINER_KINDS:
        # clone picks up at this depth
        return _clone(source, {}, depth)

    # seen: id(target) → (target, {id(source): (source, result)})
    # Holding target and source keeps their ids valid across a whole fold.
    pairs = seen.get(id(target))
    if pairs is not None:
        hit = pairs[1].get(id(source))
        if hit is not None:
            logger.debug("reusing merge of %s into %s",
                         type(source).__name__, type(target).__name__)
            return hit[1]

    if depth >= MAX_DEPTH:
        raise DepthLimitError("merge", MAX_DEPTH)

    result = _allocate(source, source_kind)
    if pairs is None:
        pairs = seen[id(target)] = (target, {})
    pairs[1][id(source)] = (source, result)

    for key, value in _entries(target, target_kind):
        _store(result, source_kind, key, value)

    for key, value in _entries(source, source_kind):
        if classify(value) in PRIMITIVE_KINDS:
            _store(result, source_kind, key, value)
        else:
            current = _lookup(result, source_kind, key)
            _store(result, source_kind, key,
                   _merge(current, value, seen, depth + 1))

    return result
