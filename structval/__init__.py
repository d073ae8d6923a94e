"""
Structural Value Engine
=======================

Compare, deduplicate, copy and merge plain Python data by SHAPE rather
than by identity.

    digest({"a": 1, "b": 2}) == digest({"b": 2, "a": 1})   → True
    unique([{"a": 1}, {"a": 1}, [2]])                      → [{"a": 1}, [2]]
    merge({"a": {"x": 1}}, {"a": {"y": 2}})                → {"a": {"x": 1, "y": 2}}

Everything rests on one canonical digest:
  • equals(a, b) is digest(a) == digest(b)
  • the set operations (unique, duplicates, count, intersection, union,
    contains_all, remove) key on digests, so unhashable values work
  • clone and merge are cycle-safe and preserve shared references

All operations are pure: inputs are never mutated and no state survives
a call.
"""

import logging

from structval.core import (
    # Classification
    Kind,
    UNDEFINED,
    classify,
    is_container,
    is_primitive,
    # Digest
    CYCLE_TOKEN,
    MAX_DEPTH,
    digest,
    equals,
)
from structval.sets import (
    unique, duplicates, count, contains_all, intersection, union, remove,
)
from structval.clone import clone
from structval.merge import merge, merge_all
from structval.mappings import pick, omit, is_empty
from structval.errors import (
    StructvalError, ShapeError, MissingArgumentError, DepthLimitError,
)

logging.getLogger(__name__).addHandler(logging.NullHandler())

__version__ = "0.1.0"
__all__ = [
    "Kind", "UNDEFINED", "classify", "is_container", "is_primitive",
    "CYCLE_TOKEN", "MAX_DEPTH", "digest", "equals",
    "unique", "duplicates", "count", "contains_all", "intersection",
    "union", "remove",
    "clone", "merge", "merge_all",
    "pick", "omit", "is_empty",
    "StructvalError", "ShapeError", "MissingArgumentError", "DepthLimitError",
]
