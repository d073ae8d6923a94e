"""
structval.core — Value classification and canonical digests
=============================================================

§1  THE PROBLEM
───────────────

Python's ``==`` compares containers by value, but it cannot be used as a
key: two equal dicts do not hash, a list of dicts cannot go through a
``set``, and a cyclic structure makes ``==`` recurse until the interpreter
gives up.  What we want is a single text fingerprint per value such that

    digest(a) == digest(b)   ⇔   a and b have the same shape and content

independent of mapping key insertion order, and computable for anything a
program is likely to hold: primitives, sequences, mappings, plain objects,
dates, compiled patterns, sets.

Once that exists, structural equality and every set operation in
``structval.sets`` reduce to string comparison and dict lookups.


§2  THE CLOSED SET OF KINDS
───────────────────────────

Every value is classified into exactly one ``Kind``:

    ABSENT       the UNDEFINED sentinel (no value at all)
    NULL         None
    BOOL         True / False
    NUMBER       int, float, Decimal, Fraction, ...   (never bool)
    TEXT         str
    SEQUENCE     list, tuple, deque, range, ...       (order matters)
    MAPPING      dict and subclasses                  (order ignored)
    OBJECT       plain instances: __dict__ and/or __slots__
    DATE_STAMP   datetime, date, time
    PATTERN      compiled re.Pattern
    KEYED_SET    set, frozenset
    KEYED_MAP    non-dict Mapping implementations
    OPAQUE       everything else

Every other module dispatches over this enum rather than over ad-hoc
``isinstance`` chains.


§3  THE DIGEST
──────────────

    ABSENT      →  undefined
    NULL        →  null
    BOOL        →  boolean:true | boolean:false
    NUMBER      →  number:<n>          integral values render as ints,
                                       so digest(1) == digest(1.0)
    TEXT        →  string:<s>
    SEQUENCE    →  array:[d₁,d₂,...]
    MAPPING     →  object:{k₁:d₁,...}  keys sorted by text form, then by key
                                       digest when two texts collide
    OBJECT      →  object:{...}        over instance attributes and filled slots
    DATE_STAMP  →  date:<iso>          aware datetimes normalised to UTC
    PATTERN     →  regexp:/<source>/<flags>
    KEYED_SET   →  set:{...}           member digests sorted
    KEYED_MAP   →  map:{kd=>vd,...}    entries sorted
    OPAQUE      →  <type name>:<str(value)>

The digest concatenates child digests with separators; it is a canonical
form, not a cryptographic hash, and crafted strings can collide.

A container met again on the current descent path digests as CYCLE_TOKEN
instead of recursing.  Shared but acyclic references are digested in full
each time they appear, so acyclic values are unaffected by the guard.
"""

import datetime
import enum
import functools
import logging
import numbers
import os
import re
import types
from collections.abc import Mapping, Sequence
from decimal import Decimal
from typing import Any

from .errors import DepthLimitError, ShapeError

logger = logging.getLogger(__name__)

# Emitted in place of a container that is already being digested.
CYCLE_TOKEN = "<cycle>"

# Nesting limit shared by digest, clone and merge.
MAX_DEPTH = 256


# ═══════════════════════════════════════════════════════════════════
#  SENTINELS
# ═══════════════════════════════════════════════════════════════════

class _Undefined:
    """The "no value" sentinel, distinct from None."""
    __slots__ = ()
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self):
        return (_Undefined, ())

    def __copy__(self):
        return self

    def __deepcopy__(self, memo):
        return self


UNDEFINED = _Undefined()

# Default for parameters that must be passed explicitly.  Unlike UNDEFINED
# it never appears inside values.
OMITTED = object()


# ═══════════════════════════════════════════════════════════════════
#  CLASSIFIER
# ═══════════════════════════════════════════════════════════════════

class Kind(enum.Enum):
    """Semantic kind of a value."""
    ABSENT = "absent"
    NULL = "null"
    BOOL = "bool"
    NUMBER = "number"
    TEXT = "text"
    SEQUENCE = "sequence"
    MAPPING = "mapping"
    OBJECT = "object"
    DATE_STAMP = "date"
    PATTERN = "pattern"
    KEYED_SET = "set"
    KEYED_MAP = "map"
    OPAQUE = "opaque"


# Kinds with no identity worth preserving: returned as-is by clone and
# always winning in merge.
PRIMITIVE_KINDS = frozenset({
    Kind.ABSENT, Kind.NULL, Kind.BOOL, Kind.NUMBER, Kind.TEXT, Kind.OPAQUE,
})

# Kinds merge recurses into.
CONTAINER_KINDS = frozenset({Kind.SEQUENCE, Kind.MAPPING, Kind.OBJECT})

# Objects with a __dict__ or slots that are still not plain keyed records.
_NOT_OBJECTS = (
    type,
    types.FunctionType,
    types.BuiltinFunctionType,
    types.MethodType,
    types.ModuleType,
    functools.partial,
    enum.Enum,
    BaseException,
    os.PathLike,
)

# Sequences whose items are raw bytes rather than values.
_BYTE_SEQUENCES = (bytes, bytearray, memoryview)


def classify(value: Any) -> Kind:
    """
    Return the Kind of ``value``.

    Order matters: bool is tested before NUMBER (bool subclasses int),
    sequences before any mapping test, and datetime before the generic
    object fallback.  Never raises.
    """
    if value is None:
        return Kind.NULL
    if value is UNDEFINED:
        return Kind.ABSENT
    if isinstance(value, bool):
        return Kind.BOOL
    if isinstance(value, (numbers.Real, Decimal)):
        return Kind.NUMBER
    if isinstance(value, str):
        return Kind.TEXT
    if isinstance(value, Sequence) and not isinstance(value, _BYTE_SEQUENCES):
        return Kind.SEQUENCE
    if isinstance(value, (datetime.date, datetime.time)):
        return Kind.DATE_STAMP
    if isinstance(value, re.Pattern):
        return Kind.PATTERN
    if isinstance(value, dict):
        return Kind.MAPPING
    if isinstance(value, (set, frozenset)):
        return Kind.KEYED_SET
    if isinstance(value, Mapping):
        return Kind.KEYED_MAP
    if _has_fields(value) and not isinstance(value, _NOT_OBJECTS):
        return Kind.OBJECT
    return Kind.OPAQUE


def is_primitive(value: Any) -> bool:
    return classify(value) in PRIMITIVE_KINDS


def is_container(value: Any) -> bool:
    return classify(value) in CONTAINER_KINDS


def expect(operation: str, params: Sequence[str], parameter: str,
           value: Any, *kinds: Kind) -> Kind:
    """
    Raise ShapeError unless ``value`` is one of ``kinds``.

    Returns the value's kind so callers can dispatch on it.
    """
    kind = classify(value)
    if kind not in kinds:
        raise ShapeError(operation, params, parameter,
                         expected="|".join(k.value for k in kinds),
                         received=kind.value)
    return kind


# ═══════════════════════════════════════════════════════════════════
#  INSTANCE FIELDS
#  An OBJECT's fields are its filled slots plus its instance __dict__.
# ═══════════════════════════════════════════════════════════════════

@functools.lru_cache(maxsize=None)
def _slot_names(cls: type) -> tuple:
    names = []
    for klass in cls.__mro__:
        slots = klass.__dict__.get("__slots__", ())
        if isinstance(slots, str):
            slots = (slots,)
        for name in slots:
            if name in ("__dict__", "__weakref__"):
                continue
            if name.startswith("__") and not name.endswith("__"):
                name = "_" + klass.__name__.lstrip("_") + name
            if name not in names:
                names.append(name)
    return tuple(names)


def _has_fields(value: Any) -> bool:
    return hasattr(value, "__dict__") or bool(_slot_names(type(value)))


def fields(obj: Any) -> dict:
    """
    Snapshot of an object's attributes: filled slots, then ``__dict__``.

    Unfilled slots are left out.  The dict is a copy; write through
    ``set_field``.
    """
    result = {}
    for name in _slot_names(type(obj)):
        try:
            result[name] = object.__getattribute__(obj, name)
        except AttributeError:
            pass
    instance = getattr(obj, "__dict__", None)
    if instance:
        result.update(instance)
    return result


def set_field(obj: Any, name: Any, value: Any) -> bool:
    """
    Store ``value`` as attribute ``name`` of ``obj`` without calling its
    ``__setattr__``.  Returns False when ``obj`` has no room for it (a
    slotted object without that slot).
    """
    if name in _slot_names(type(obj)):
        object.__setattr__(obj, name, value)
        return True
    instance = getattr(obj, "__dict__", None)
    if instance is None:
        return False
    instance[name] = value
    return True


def delete_field(obj: Any, name: Any) -> None:
    if name in _slot_names(type(obj)):
        try:
            object.__delattr__(obj, name)
        except AttributeError:
            pass
    else:
        instance = getattr(obj, "__dict__", None)
        if instance is not None:
            instance.pop(name, None)


# ═══════════════════════════════════════════════════════════════════
#  DIGEST
# ═══════════════════════════════════════════════════════════════════

def _number_text(n: Any) -> str:
    """Decimal rendering; integral values lose their fractional part."""
    try:
        if n == int(n):
            return str(int(n))
    except (OverflowError, ValueError):
        pass  # inf / nan
    return repr(n) if isinstance(n, float) else str(n)


def _date_text(d: Any) -> str:
    if isinstance(d, datetime.datetime) and d.utcoffset() is not None:
        d = d.astimezone(datetime.timezone.utc)
    return d.isoformat()


def digest(value: Any) -> str:
    """
    Canonical text fingerprint of ``value``.

    Deterministic across calls and across key-order permutations of the
    same mapping.  Sequence order is significant.

        digest({"a": 1, "b": [2]}) == digest({"b": [2], "a": 1})
        digest([1, 2]) != digest([2, 1])
    """
    return _digest(value, set(), 0)


def _digest(value: Any, path: set, depth: int) -> str:
    kind = classify(value)

    if kind is Kind.ABSENT:
        return "undefined"
    if kind is Kind.NULL:
        return "null"
    if kind is Kind.BOOL:
        return "boolean:true" if value else "boolean:false"
    if kind is Kind.NUMBER:
        return "number:" + _number_text(value)
    if kind is Kind.TEXT:
        return "string:" + value
    if kind is Kind.DATE_STAMP:
        return "date:" + _date_text(value)
    if kind is Kind.PATTERN:
        return f"regexp:/{value.pattern}/{value.flags}"
    if kind is Kind.OPAQUE:
        return f"{type(value).__name__}:{value}"

    if depth >= MAX_DEPTH:
        raise DepthLimitError("digest", MAX_DEPTH)

    oid = id(value)
    if oid in path:
        logger.debug("cycle through %s at depth %d", type(value).__name__, depth)
        return CYCLE_TOKEN
    path.add(oid)
    try:
        depth += 1
        if kind is Kind.SEQUENCE:
            return "array:[" + ",".join(_digest(v, path, depth) for v in value) + "]"

        if kind is Kind.KEYED_SET:
            members = sorted(_digest(v, path, depth) for v in value)
            return "set:{" + ",".join(members) + "}"

        if kind is Kind.KEYED_MAP:
            entries = sorted(
                f"{_digest(k, path, depth)}=>{_digest(v, path, depth)}"
                for k, v in value.items()
            )
            return "map:{" + ",".join(entries) + "}"

        # MAPPING / OBJECT
        items = value.items() if kind is Kind.MAPPING else fields(value).items()
        # 1 and "1" share a text form; the key digest breaks the tie
        ranked = sorted(
            (str(k), _digest(k, path, depth), _digest(v, path, depth))
            for k, v in items
        )
        entries = [f"{text}:{d}" for text, _, d in ranked]
        return "object:{" + ",".join(entries) + "}"
    finally:
        path.discard(oid)


def equals(a: Any, b: Any) -> bool:
    """Structural equality: ``digest(a) == digest(b)``."""
    return digest(a) == digest(b)
