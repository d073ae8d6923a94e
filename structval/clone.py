"""
structval.clone — Cycle-safe deep copy.

``clone`` rebuilds a value graph node by node.  A per-call memo maps the
identity of every original container to its copy, which gives two
guarantees:

    • Each original is copied at most once, so a sub-object reachable
      twice in the input is ONE object in the output:

          shared = {"x": 1}
          out = clone({"a": shared, "b": shared})
          out["a"] is out["b"]          # True
          out["a"] is shared            # False

    • Mutable containers are registered in the memo BEFORE their children
      are copied, so a cycle closes onto the copy under construction
      instead of recursing forever.

Immutable containers (tuple, frozenset) cannot be registered empty; they
are built from their copied children and a revisit through a cycle
resolves to whichever copy finished first, as ``copy.deepcopy`` does.

Properties and other descriptors live on the class, which the copy shares,
so they keep computing from whatever they close over.  Only instance
attributes and filled slots are copied, and subclasses of list, dict and
set get their extra instance attributes copied alongside their contents.
"""

import copy
import logging
import re
import types
from collections import UserDict
from collections.abc import MutableSequence
from typing import Any

from .core import MAX_DEPTH, PRIMITIVE_KINDS, Kind, classify, fields, set_field
from .errors import DepthLimitError

logger = logging.getLogger(__name__)


def clone(value: Any) -> Any:
    """Deep copy of ``value`` preserving shared-reference topology."""
    return _clone(value, {}, 0)


# Builtins whose contents live outside the instance __dict__.
_BUILTIN_CONTAINERS = (list, dict, set)


def _empty_like(container):
    """Empty instance of ``container``'s type, keeping subclass state."""
    if type(container) in _BUILTIN_CONTAINERS:
        return type(container)()
    result = copy.copy(container)
    if hasattr(result, "clear"):
        result.clear()
    else:
        del result[:]
    return result


def _clone_attributes(value, result, memo: dict, depth: int) -> None:
    """Deep-copy the instance attributes of a list/dict/set subclass."""
    if type(value) in _BUILTIN_CONTAINERS or not isinstance(value, _BUILTIN_CONTAINERS):
        return
    instance = getattr(value, "__dict__", None)
    if instance:
        target = vars(result)
        for k, v in instance.items():
            target[k] = _clone(v, memo, depth)


def _clone(value: Any, memo: dict, depth: int) -> Any:
    kind = classify(value)
    if kind in PRIMITIVE_KINDS:
        return value

    oid = id(value)
    hit = memo.get(oid)
    if hit is not None:
        return hit[1]

    if depth >= MAX_DEPTH:
        raise DepthLimitError("clone", MAX_DEPTH)
    depth += 1

    # memo entries pin the original so its id cannot be recycled mid-call
    def register(result):
        memo[oid] = (value, result)
        return result

    if kind is Kind.DATE_STAMP:
        return register(copy.copy(value))

    if kind is Kind.PATTERN:
        return register(re.compile(value.pattern, value.flags))

    if kind is Kind.SEQUENCE:
        if isinstance(value, MutableSequence):
            result = register(_empty_like(value))
            _clone_attributes(value, result, memo, depth)
            for v in value:
                result.append(_clone(v, memo, depth))
            return result

        if isinstance(value, range):
            return register(value)

        items = [_clone(v, memo, depth) for v in value]
        hit = memo.get(oid)
        if hit is not None:
            return hit[1]
        if hasattr(value, "_make"):  # namedtuple
            return register(value._make(items))
        return register(type(value)(items))

    if kind is Kind.KEYED_SET:
        if isinstance(value, set):
            result = register(_empty_like(value))
            _clone_attributes(value, result, memo, depth)
            for v in value:
                result.add(_clone(v, memo, depth))
            return result

        members = [_clone(v, memo, depth) for v in value]
        hit = memo.get(oid)
        if hit is not None:
            return hit[1]
        return register(type(value)(members))

    if kind is Kind.KEYED_MAP:
        if isinstance(value, types.MappingProxyType):
            target: dict = {}
            register(types.MappingProxyType(target))
        elif isinstance(value, UserDict):
            target = register(_empty_like(value))
        else:
            logger.debug("rebuilding %s as dict", type(value).__name__)
            target = register({})
        for k, v in value.items():
            target[_clone(k, memo, depth)] = _clone(v, memo, depth)
        return memo[oid][1]

    if kind is Kind.MAPPING:
        result = register(_empty_like(value))
        _clone_attributes(value, result, memo, depth)
        for k, v in value.items():
            result[_clone(k, memo, depth)] = _clone(v, memo, depth)
        return result

    # OBJECT: bypass __init__ and __setattr__, the way unpickling does
    cls = type(value)
    result = register(cls.__new__(cls))
    for k, v in fields(value).items():
        set_field(result, k, _clone(v, memo, depth))
    return result
