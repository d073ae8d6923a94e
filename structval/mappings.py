"""
structval.mappings — Small helpers over keyed mappings.

``pick`` and ``omit`` project a mapping (a dict, a plain object's
attributes, or another Mapping) onto a subset of its keys.  ``pick`` is
shallow; ``omit`` deep-copies first so the result never aliases the input.
"""

from collections.abc import Hashable
from typing import Any

from .clone import clone
from .core import Kind, delete_field, expect, fields
from .errors import ShapeError


def _fields(obj, kind: Kind):
    return fields(obj) if kind is Kind.OBJECT else obj


def _check_keys(operation: str, params: tuple, keys) -> None:
    expect(operation, params, "keys", keys, Kind.SEQUENCE)
    for key in keys:
        if not isinstance(key, Hashable):
            raise ShapeError(operation, params, "keys",
                             expected="hashable keys",
                             received=type(key).__name__)


def pick(mapping, keys) -> dict:
    """New dict with the listed keys that ``mapping`` actually has."""
    params = ("mapping", "keys")
    kind = expect("pick", params, "mapping", mapping,
                  Kind.MAPPING, Kind.OBJECT, Kind.KEYED_MAP)
    _check_keys("pick", params, keys)

    present = _fields(mapping, kind)
    return {key: present[key] for key in keys if key in present}


def omit(mapping, keys) -> Any:
    """Deep copy of ``mapping`` without the listed keys."""
    params = ("mapping", "keys")
    kind = expect("omit", params, "mapping", mapping, Kind.MAPPING, Kind.OBJECT)
    _check_keys("omit", params, keys)

    result = clone(mapping)
    for key in keys:
        if kind is Kind.OBJECT:
            delete_field(result, key)
        else:
            result.pop(key, None)
    return result


def is_empty(collection) -> bool:
    kind = expect("is_empty", ("collection",), "collection", collection,
                  Kind.SEQUENCE, Kind.MAPPING, Kind.OBJECT, Kind.KEYED_MAP)
    return len(_fields(collection, kind)) == 0
