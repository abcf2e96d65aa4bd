"""Value classification: maps any Python value to exactly one Category.

``classify`` is a pure, total function. The four container categories
(RECORD, SEQUENCE, ASSOCIATIVE, DISTINCT) are the only shapes the flattener
descends into and the mutator edits; every other category is a leaf.

The dispatch order in ``classify`` is critical:
- Enum members are checked first: IntEnum/StrEnum members subclass int/str.
- bool MUST be checked before int (``isinstance(True, int)`` is True).
- str MUST be checked before Sequence (a str is a Sequence of str).
- Exceptions, patterns and dates are checked before the attribute-record
  fallback because most of them carry a ``__dict__``.
- Callable objects other than dataclass instances are FUNCTION even when
  they carry a ``__dict__`` (``functools.partial``, callable instances).
- dict is checked before Mapping: plain keyed containers are RECORD, any
  other Mapping implementation is ASSOCIATIVE.

The container protocol (``child_count``, ``iter_children``) has exactly one
branch per container category. Adding a container kind means adding a
Category member and a branch in each function.
"""

from __future__ import annotations

import dataclasses
import datetime
import decimal
import enum
import fractions
import inspect
import itertools
import re
from collections.abc import Hashable, Iterator, Mapping, Sequence, Set
from enum import StrEnum, auto
from typing import Any

import numpy as np

__all__ = [
    "CONTAINER_CATEGORIES",
    "MAX_SAFE_INTEGER",
    "UNDEFINED",
    "Category",
    "child_count",
    "classify",
    "is_container",
    "iter_children",
    "record_keys",
]

# Largest integer a double represents exactly; larger magnitudes are BIGINT.
MAX_SAFE_INTEGER = 2**53 - 1

_NUMBER_TYPES = (float, complex, decimal.Decimal, fractions.Fraction, np.number)
_BYTES_TYPES = (bytes, bytearray, memoryview)
_DATE_TYPES = (datetime.date, datetime.time, np.datetime64)


def _get_undefined_singleton() -> _UndefinedType:
    """Return the UNDEFINED singleton. Called by pickle to reconstruct."""
    return UNDEFINED


class _UndefinedType:
    """Sentinel type for "no value here" (distinct from ``None``)."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "UNDEFINED"

    def __bool__(self) -> bool:
        return False

    def __reduce__(self) -> tuple[Any, tuple[()]]:
        return (_get_undefined_singleton, ())


UNDEFINED = _UndefinedType()


class Category(StrEnum):
    """Structural category of an inspected value.

    Leaf categories:
    - NULL, UNDEFINED, BOOLEAN, NUMBER, BIGINT, STRING, SYMBOL, FUNCTION,
      DATE, ERROR, PATTERN, PRIMITIVE (fallback)

    Container categories:
    - RECORD      -> "record"      : keyed container (dict, dataclass, attribute object)
    - SEQUENCE    -> "sequence"    : indexed sequence (list, tuple, deque, ndarray)
    - ASSOCIATIVE -> "associative" : any other Mapping (ordered key -> value pairs)
    - DISTINCT    -> "distinct"    : distinct-element collection (set, frozenset)

    CIRCULAR is never returned by ``classify``; the flattener assigns it to
    the sentinel node emitted in place of a repeated container.
    """

    NULL = auto()
    UNDEFINED = auto()
    BOOLEAN = auto()
    NUMBER = auto()
    BIGINT = auto()
    STRING = auto()
    SYMBOL = auto()
    FUNCTION = auto()
    DATE = auto()
    ERROR = auto()
    PATTERN = auto()
    RECORD = auto()
    SEQUENCE = auto()
    ASSOCIATIVE = auto()
    DISTINCT = auto()
    PRIMITIVE = auto()
    CIRCULAR = auto()


CONTAINER_CATEGORIES: frozenset[Category] = frozenset(
    {Category.RECORD, Category.SEQUENCE, Category.ASSOCIATIVE, Category.DISTINCT}
)


def is_container(category: Category) -> bool:
    """Return True if the flattener may descend into values of ``category``."""
    return category in CONTAINER_CATEGORIES


def classify(value: Any) -> Category:
    """Return the Category of ``value``.

    Never raises. Values that match none of the known shapes are FUNCTION
    when callable (dataclass instances excepted), RECORD when they expose
    instance attributes, otherwise PRIMITIVE.
    """
    if value is None:
        return Category.NULL
    if value is UNDEFINED:
        return Category.UNDEFINED
    if isinstance(value, enum.Enum):
        return Category.SYMBOL
    # CRITICAL: bool MUST be checked before int; bool subclasses int
    if isinstance(value, (bool, np.bool_)):
        return Category.BOOLEAN
    if isinstance(value, int):
        return Category.BIGINT if abs(value) > MAX_SAFE_INTEGER else Category.NUMBER
    if isinstance(value, str):
        return Category.STRING
    if isinstance(value, np.ndarray):
        return Category.SEQUENCE if value.ndim > 0 else Category.NUMBER
    if isinstance(value, _NUMBER_TYPES):
        return Category.NUMBER
    if isinstance(value, _BYTES_TYPES):
        return Category.PRIMITIVE
    if isinstance(value, _DATE_TYPES):
        return Category.DATE
    if isinstance(value, BaseException):
        return Category.ERROR
    if isinstance(value, re.Pattern):
        return Category.PATTERN
    if isinstance(value, dict):
        return Category.RECORD
    if isinstance(value, Mapping):
        return Category.ASSOCIATIVE
    if isinstance(value, Set):
        return Category.DISTINCT
    if isinstance(value, Sequence):
        return Category.SEQUENCE
    if inspect.isroutine(value) or inspect.isclass(value):
        return Category.FUNCTION
    if dataclasses.is_dataclass(value):
        return Category.RECORD
    if callable(value):
        return Category.FUNCTION
    if hasattr(value, "__dict__"):
        return Category.RECORD
    return Category.PRIMITIVE


def record_keys(value: Any) -> list[str]:
    """Return the enumerable keys of a RECORD value in declaration order."""
    if isinstance(value, dict):
        return list(value)
    if dataclasses.is_dataclass(value):
        return [f.name for f in dataclasses.fields(value) if hasattr(value, f.name)]
    return list(vars(value))


def _record_items(value: Any) -> Iterator[tuple[Hashable, Any]]:
    if isinstance(value, dict):
        return iter(value.items())
    if dataclasses.is_dataclass(value):
        return ((name, getattr(value, name)) for name in record_keys(value))
    return iter(vars(value).items())


def child_count(value: Any, category: Category) -> int:
    """Return the number of direct children of a container value (uncapped)."""
    if category is Category.RECORD:
        if isinstance(value, dict):
            return len(value)
        return len(record_keys(value))
    if category in (Category.SEQUENCE, Category.ASSOCIATIVE, Category.DISTINCT):
        return len(value)
    return 0


def iter_children(
    value: Any, category: Category, limit: int | None = None
) -> Iterator[tuple[Hashable, Any]]:
    """Yield ``(key, child)`` pairs of a container value in container order.

    Args:
        value:    The container value.
        category: Its Category (as returned by ``classify``).
        limit:    Stop after this many children. Enumeration is lazy, so the
                  work done is bounded by ``limit`` rather than the size of
                  the container.

    Ordering:
        SEQUENCE    -> position order, keys are int indices
        RECORD      -> declaration / insertion order, keys are field names
        ASSOCIATIVE -> insertion order, keys are the mapping keys
        DISTINCT    -> iteration order, keys are the members themselves
        leaf        -> nothing
    """
    items: Iterator[tuple[Hashable, Any]]
    if category is Category.SEQUENCE:
        items = enumerate(value)
    elif category is Category.RECORD:
        items = _record_items(value)
    elif category is Category.ASSOCIATIVE:
        items = iter(value.items())
    elif category is Category.DISTINCT:
        items = ((member, member) for member in value)
    else:
        return iter(())
    if limit is None:
        return items
    return itertools.islice(items, limit)
