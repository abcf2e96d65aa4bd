"""Path-addressed, copy-on-write edits of a live value.

``set_at_path`` and ``delete_at_path`` never modify their input. They walk the
path from the root, make a shallow copy of every container on the way, splice
the rewritten child back into the copy at the same position, and return the
new root. Everything off the path is shared by reference with the input.

Per container kind (one branch per Category):

- SEQUENCE:    list/deque/MutableSequence copied; tuple rebuilt (namedtuples
               keep their type while the arity is unchanged); ndarray copied
               and widened when the new value does not fit its dtype,
               deletion via ``numpy.delete``; other sequences become lists.
               Setting index ``len(seq)`` appends, except on a full bounded
               deque; deleting shifts later elements down (no holes).
- RECORD:      dict copied (subclass preserved); attribute objects copied and
               written with ``object.__setattr__`` / ``object.__delattr__``.
               Setting a missing final key adds it.
- ASSOCIATIVE: MutableMapping copied; read-only mappings rebuilt.
- DISTINCT:    rebuilt without the addressed member (plus the replacement
               when setting). Members are addressed by their own value, so
               setting an absent member adds it.

An empty path addresses the root itself. A path that does not resolve raises
``PathNotFoundError``; the API and session layers turn it into a returned
``PathNotFound`` condition. Values are written exactly as given: no type
inference happens here.
"""

from __future__ import annotations

import copy
import logging
from collections import deque
from collections.abc import Hashable, Iterable, MutableMapping, MutableSequence
from enum import Enum, auto
from types import MappingProxyType
from typing import Any

import numpy as np

from live_inspector.errors import PathNotFound, PathNotFoundError
from live_inspector.tree.classifier import (
    UNDEFINED,
    Category,
    classify,
    is_container,
    record_keys,
)
from live_inspector.tree.path import Path

__all__ = ["delete_at_path", "get_at_path", "set_at_path"]

logger = logging.getLogger(__name__)

_NUMERIC_KINDS = "biufc"


class _Op(Enum):
    SET = auto()
    DELETE = auto()


def get_at_path(root: Any, path: Path | Iterable[Hashable]) -> Any:
    """Return the value addressed by ``path``.

    Raises:
        PathNotFoundError: If any segment does not resolve.
    """
    path = Path.of(path)
    node = root
    for index, key in enumerate(path.segments):
        node = _get_child(node, classify(node), key, path, index)
    return node


def set_at_path(root: Any, path: Path | Iterable[Hashable], new_value: Any) -> Any:
    """Return a copy of ``root`` with the node at ``path`` replaced by ``new_value``.

    An empty path returns ``new_value`` itself.

    Raises:
        PathNotFoundError: If an intermediate segment does not resolve, or the
            final segment is out of range for a sequence, or the container
            cannot hold the new value.
    """
    path = Path.of(path)
    if path.is_root:
        return new_value
    return _rewrite(root, path, 0, _Op.SET, new_value)


def delete_at_path(root: Any, path: Path | Iterable[Hashable]) -> Any:
    """Return a copy of ``root`` with the node at ``path`` removed.

    Deleting from a sequence removes the element and shifts later indices.
    An empty path returns ``UNDEFINED``.

    Raises:
        PathNotFoundError: If any segment does not resolve.
    """
    path = Path.of(path)
    if path.is_root:
        return UNDEFINED
    return _rewrite(root, path, 0, _Op.DELETE, UNDEFINED)


# ---------------------------------------------------------------------------
# Recursive rewrite
# ---------------------------------------------------------------------------


def _rewrite(node: Any, path: Path, index: int, op: _Op, new_value: Any) -> Any:
    category = classify(node)
    if not is_container(category):
        raise _miss(path, index, f"reached a {category} value, not a container")
    key = path.segments[index]

    if index == len(path) - 1:
        if op is _Op.SET:
            return _with_child(node, category, key, new_value, path, index)
        return _without_child(node, category, key, path, index)

    child = _get_child(node, category, key, path, index)
    new_child = _rewrite(child, path, index + 1, op, new_value)
    return _with_child(node, category, key, new_child, path, index)


def _miss(path: Path, index: int, reason: str) -> PathNotFoundError:
    condition = PathNotFound(path=path, index=index, reason=reason)
    logger.debug("Path miss: %s", condition.describe())
    return PathNotFoundError(condition)


def _position(
    node: Any, key: Hashable, path: Path, index: int, *, allow_end: bool = False
) -> int:
    """Validate an integer position into a SEQUENCE value."""
    if isinstance(key, (bool, np.bool_)) or not isinstance(key, (int, np.integer)):
        reason = f"expected an integer index, got {type(key).__name__}"
        raise _miss(path, index, reason)
    position = int(key)
    upper = len(node) if allow_end else len(node) - 1
    if not 0 <= position <= upper:
        reason = f"index {position} out of range for length {len(node)}"
        raise _miss(path, index, reason)
    return position


def _get_child(
    node: Any, category: Category, key: Hashable, path: Path, index: int
) -> Any:
    if category is Category.SEQUENCE:
        return node[_position(node, key, path, index)]
    if category is Category.RECORD:
        if isinstance(node, dict):
            if key not in node:
                raise _miss(path, index, "missing key")
            return node[key]
        if not isinstance(key, str) or key not in record_keys(node):
            raise _miss(path, index, "missing attribute")
        return getattr(node, key)
    if category is Category.ASSOCIATIVE:
        if key not in node:
            raise _miss(path, index, "missing key")
        return node[key]
    if category is Category.DISTINCT:
        return _member(node, key, path, index)
    raise _miss(path, index, f"reached a {category} value, not a container")


def _member(node: Any, key: Hashable, path: Path, index: int) -> Any:
    """Return the stored member of a DISTINCT value equal to ``key``."""
    try:
        present = key in node
    except TypeError:
        present = False
    if not present:
        raise _miss(path, index, "missing member")
    return next(member for member in node if member == key)


# ---------------------------------------------------------------------------
# Container copies
# ---------------------------------------------------------------------------


def _copy_sequence(original: Any) -> Any:
    if isinstance(original, (MutableSequence, deque)):
        return copy.copy(original)
    return list(original)


def _copy_record(original: Any, path: Path, index: int) -> Any:
    try:
        return copy.copy(original)
    except (TypeError, copy.Error) as exc:
        reason = f"cannot copy {type(original).__name__}: {exc}"
        raise _miss(path, index, reason) from exc


def _fits(value: Any, dtype: np.dtype) -> bool:
    """Return True if ``value`` can be stored in ``dtype`` without loss."""
    if dtype == object:
        return True
    if _is_integer(value) and dtype.kind in "iu":
        info = np.iinfo(dtype)
        return bool(info.min <= value <= info.max)
    return np.can_cast(_value_dtype(value), dtype, casting="safe")


def _is_integer(value: Any) -> bool:
    return isinstance(value, (int, np.integer)) and not isinstance(value, bool)


def _value_dtype(value: Any) -> np.dtype:
    if _is_integer(value):
        # sized by value, not by the platform int
        return np.min_scalar_type(value)
    try:
        return np.asarray(value).dtype
    except (TypeError, ValueError):
        return np.dtype(object)


def _widened(dtype: np.dtype, value: Any) -> np.dtype:
    incoming = _value_dtype(value)
    if (dtype.kind in _NUMERIC_KINDS and incoming.kind in _NUMERIC_KINDS) or (
        dtype.kind == incoming.kind
    ):
        try:
            return np.result_type(dtype, incoming)
        except TypeError:
            pass
    return np.dtype(object)


def _array_with(
    array: np.ndarray, position: int, value: Any, path: Path, index: int
) -> np.ndarray:
    """Copy ``array`` with ``value`` at ``position``, widening the dtype if needed."""
    if _fits(value, array.dtype):
        result = array.copy()
    else:
        dtype = _widened(array.dtype, value)
        logger.debug("Widening %s array to %s for %s", array.dtype, dtype, path)
        result = array.astype(dtype)
    try:
        result[position] = value
    except (TypeError, ValueError) as exc:
        raise _miss(path, index, f"cannot store value in array: {exc}") from exc
    return result


def _rebuild_tuple(original: tuple[Any, ...], items: list[Any]) -> tuple[Any, ...]:
    cls = type(original)
    if cls is tuple:
        return tuple(items)
    if hasattr(cls, "_make"):
        # namedtuple: keep the type only while the arity is unchanged
        if len(items) == len(original):
            return cls._make(items)
        return tuple(items)
    return cls(items)


def _rebuild_distinct(
    original: Any, members: list[Any], path: Path, index: int
) -> Any:
    cls = type(original) if isinstance(original, (set, frozenset)) else frozenset
    try:
        return cls(members)
    except TypeError as exc:
        raise _miss(path, index, f"cannot rebuild {cls.__name__}: {exc}") from exc


def _rebuild_mapping(original: Any, entries: dict[Hashable, Any]) -> Any:
    if isinstance(original, MappingProxyType):
        return MappingProxyType(entries)
    try:
        return type(original)(entries)
    except TypeError:
        logger.debug(
            "Cannot rebuild %s from a dict; returning a plain dict",
            type(original).__name__,
        )
        return entries


def _with_child(
    node: Any, category: Category, key: Hashable, value: Any, path: Path, index: int
) -> Any:
    """Return a shallow copy of ``node`` with child ``key`` set to ``value``."""
    if category is Category.SEQUENCE:
        if isinstance(node, np.ndarray):
            position = _position(node, key, path, index)
            return _array_with(node, position, value, path, index)
        position = _position(node, key, path, index, allow_end=True)
        if isinstance(node, deque) and position == node.maxlen:
            raise _miss(path, index, f"deque is full (maxlen {node.maxlen})")
        if isinstance(node, tuple):
            items = list(node)
            if position == len(items):
                items.append(value)
            else:
                items[position] = value
            return _rebuild_tuple(node, items)
        seq = _copy_sequence(node)
        if position == len(seq):
            seq.append(value)
        else:
            seq[position] = value
        return seq

    if category is Category.RECORD:
        if isinstance(node, dict):
            record = copy.copy(node)
            record[key] = value
            return record
        if not isinstance(key, str):
            raise _miss(path, index, "attribute names must be strings")
        record = _copy_record(node, path, index)
        try:
            object.__setattr__(record, key, value)
        except AttributeError as exc:
            raise _miss(path, index, f"cannot set attribute: {exc}") from exc
        return record

    if category is Category.ASSOCIATIVE:
        if isinstance(node, MutableMapping):
            mapping = copy.copy(node)
            mapping[key] = value
            return mapping
        entries = dict(node)
        entries[key] = value
        return _rebuild_mapping(node, entries)

    if category is Category.DISTINCT:
        members = [member for member in node if member != key]
        members.append(value)
        return _rebuild_distinct(node, members, path, index)

    raise _miss(path, index, f"reached a {category} value, not a container")


def _without_child(
    node: Any, category: Category, key: Hashable, path: Path, index: int
) -> Any:
    """Return a shallow copy of ``node`` with child ``key`` removed."""
    if category is Category.SEQUENCE:
        position = _position(node, key, path, index)
        if isinstance(node, np.ndarray):
            return np.delete(node, position, axis=0)
        if isinstance(node, tuple):
            items = list(node)
            del items[position]
            return _rebuild_tuple(node, items)
        seq = _copy_sequence(node)
        del seq[position]
        return seq

    if category is Category.RECORD:
        if isinstance(node, dict):
            if key not in node:
                raise _miss(path, index, "missing key")
            record = copy.copy(node)
            del record[key]
            return record
        if not isinstance(key, str) or key not in record_keys(node):
            raise _miss(path, index, "missing attribute")
        record = _copy_record(node, path, index)
        try:
            object.__delattr__(record, key)
        except AttributeError as exc:
            raise _miss(path, index, f"cannot delete attribute: {exc}") from exc
        return record

    if category is Category.ASSOCIATIVE:
        if key not in node:
            raise _miss(path, index, "missing key")
        if isinstance(node, MutableMapping):
            mapping = copy.copy(node)
            try:
                del mapping[key]
            except KeyError:
                # e.g. a ChainMap key that only lives in a parent map
                reason = "key is not deletable from this mapping"
                raise _miss(path, index, reason) from None
            return mapping
        entries = {k: v for k, v in node.items() if k != key}
        return _rebuild_mapping(node, entries)

    if category is Category.DISTINCT:
        member = _member(node, key, path, index)
        members = [m for m in node if m is not member]
        return _rebuild_distinct(node, members, path, index)

    raise _miss(path, index, f"reached a {category} value, not a container")
