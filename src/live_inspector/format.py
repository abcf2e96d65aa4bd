"""Display helpers: single-line summaries, size labels and a JSON export that
never fails.

``format_value`` and ``describe_size`` produce the text a row shows next to
its key. ``safe_stringify`` exports a whole value (copy-to-clipboard): cycles
become ``"[Circular]"``, containers past the depth or edge limits become
``"[...]"``, and values JSON cannot represent are turned into strings or
tagged shapes.
"""

from __future__ import annotations

import datetime
import json
import logging
import math
import numbers
import re
from typing import Any

import numpy as np

from live_inspector.tree.classifier import (
    Category,
    child_count,
    classify,
    is_container,
    iter_children,
)
from live_inspector.tree.guard import CircularGuard

__all__ = [
    "CIRCULAR_PLACEHOLDER",
    "DEFAULT_MAX_DISPLAY_LENGTH",
    "LIMIT_PLACEHOLDER",
    "MAX_EXPORT_DEPTH",
    "describe_size",
    "format_value",
    "safe_stringify",
]

CIRCULAR_PLACEHOLDER = "[Circular]"
LIMIT_PLACEHOLDER = "[...]"
DEFAULT_MAX_DISPLAY_LENGTH = 120
# Kept well under the interpreter recursion limit; export recurses per level.
MAX_EXPORT_DEPTH = 100

logger = logging.getLogger(__name__)

_PATTERN_FLAGS = (
    (re.IGNORECASE, "i"),
    (re.MULTILINE, "m"),
    (re.DOTALL, "s"),
    (re.VERBOSE, "x"),
)


# ---------------------------------------------------------------------------
# Scalar text
# ---------------------------------------------------------------------------


def _number_text(value: Any) -> str:
    if isinstance(value, np.ndarray):
        value = value.item()
    if isinstance(value, (float, np.floating)):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
    return str(value)


def _function_text(value: Any) -> str:
    name = getattr(value, "__qualname__", None) or getattr(value, "__name__", None)
    if not name:
        # callable instances such as functools.partial
        name = type(value).__qualname__
    return f"[Function: {name}]"


def _pattern_text(value: re.Pattern[Any]) -> str:
    source = value.pattern
    if isinstance(source, bytes):
        source = source.decode("latin-1")
    flags = "".join(letter for flag, letter in _PATTERN_FLAGS if value.flags & flag)
    return f"/{source}/{flags}"


def _date_text(value: Any) -> str:
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    return str(value)


def _error_text(value: BaseException) -> str:
    message = str(value)
    name = type(value).__name__
    return f"{name}: {message}" if message else name


def _plural(count: int, singular: str, plural: str) -> str:
    return f"1 {singular}" if count == 1 else f"{count} {plural}"


def _truncate(text: str, max_length: int) -> str:
    if len(text) <= max_length:
        return text
    return text[: max_length - 3] + "..."


def format_value(
    value: Any,
    category: Category | None = None,
    max_length: int = DEFAULT_MAX_DISPLAY_LENGTH,
) -> str:
    """Return a one-line summary of ``value``.

    Args:
        value:      Any value.
        category:   Precomputed category; pass ``Category.CIRCULAR`` for the
                    sentinel node. Classified on the fly when None.
        max_length: Longer summaries are cut and end in ``"..."``.

    Example::

        format_value("hi")              # '"hi"'
        format_value({"a": 1, "b": 2})  # 'record (2 items)'
        format_value(2**60)             # '1152921504606846976n'
    """
    if category is None:
        category = classify(value)

    match category:
        case Category.CIRCULAR:
            text = CIRCULAR_PLACEHOLDER
        case Category.NULL:
            text = "null"
        case Category.UNDEFINED:
            text = "undefined"
        case Category.BOOLEAN:
            text = "true" if value else "false"
        case Category.NUMBER:
            text = _number_text(value)
        case Category.BIGINT:
            text = f"{value}n"
        case Category.STRING:
            text = f'"{value}"'
        case Category.SYMBOL:
            text = str(value)
        case Category.FUNCTION:
            text = _function_text(value)
        case Category.DATE:
            text = _date_text(value)
        case Category.ERROR:
            text = _error_text(value)
        case Category.PATTERN:
            text = _pattern_text(value)
        case _ if is_container(category):
            count = child_count(value, category)
            text = f"{category} ({_plural(count, 'item', 'items')})"
        case _:
            text = repr(value)
    return _truncate(text, max_length)


def describe_size(value: Any) -> str:
    """Return a size label such as ``"3 items"``, ``"1 key"`` or ``""``."""
    category = classify(value)
    if category is Category.SEQUENCE:
        count = len(value)
        return "empty array" if count == 0 else _plural(count, "item", "items")
    if category is Category.DISTINCT:
        count = len(value)
        return "empty set" if count == 0 else _plural(count, "item", "items")
    if category in (Category.RECORD, Category.ASSOCIATIVE):
        count = child_count(value, category)
        return "empty object" if count == 0 else _plural(count, "key", "keys")
    if category is Category.STRING:
        count = len(value)
        if count == 0:
            return "empty string"
        return _plural(count, "character", "characters")
    return ""


# ---------------------------------------------------------------------------
# JSON export
# ---------------------------------------------------------------------------


def safe_stringify(
    value: Any,
    indent: int | None = None,
    depth_limit: int | None = None,
    edges_limit: int | None = None,
) -> str:
    """Serialize ``value`` to JSON without ever raising.

    Args:
        value:       Any value, including self-referencing ones.
        indent:      Passed through to ``json.dumps``.
        depth_limit: Containers nested deeper than this (the root is depth 1)
                     are replaced by ``"[...]"``. Defaults to, and is capped
                     at, ``MAX_EXPORT_DEPTH``.
        edges_limit: Within each container, child containers at position
                     ``edges_limit`` or later are replaced by ``"[...]"``.

    Special values:
        non-dict mappings -> ``{"__type": "Map", "entries": [[key, value], ...]}``
        sets              -> ``{"__type": "Set", "values": [...]}``
        exceptions        -> ``{"name": ..., "message": ..., **attributes}``
        NaN / +-inf       -> ``"NaN"`` / ``"Infinity"`` / ``"-Infinity"``
        big integers      -> ``"<digits>n"``
    """
    if depth_limit is None or depth_limit > MAX_EXPORT_DEPTH:
        depth_limit = MAX_EXPORT_DEPTH
    exporter = _Exporter(
        depth_limit=depth_limit,
        edges_limit=edges_limit if edges_limit is not None else math.inf,
    )
    try:
        prepared = exporter.prepare(value, depth=1, edge_index=0, is_root=True)
        return json.dumps(prepared, indent=indent, ensure_ascii=False)
    except RecursionError:
        # the caller was already deep in the stack
        logger.warning("Export of %s ran out of stack", type(value).__name__)
        return json.dumps(LIMIT_PLACEHOLDER)


class _Exporter:
    """Converts a value into plain JSON-compatible data, tracking the stack."""

    def __init__(self, depth_limit: float, edges_limit: float) -> None:
        self._depth_limit = depth_limit
        self._edges_limit = edges_limit
        self._guard = CircularGuard()

    def prepare(
        self, value: Any, *, depth: int, edge_index: int, is_root: bool = False
    ) -> Any:
        category = classify(value)
        if not is_container(category):
            return self._leaf(value, category, depth)

        if value in self._guard:
            return CIRCULAR_PLACEHOLDER
        if not is_root and (
            depth > self._depth_limit or edge_index + 1 > self._edges_limit
        ):
            return LIMIT_PLACEHOLDER

        self._guard.enter(value)
        try:
            children = [
                (key, self.prepare(child, depth=depth + 1, edge_index=position))
                for position, (key, child) in enumerate(iter_children(value, category))
            ]
        finally:
            self._guard.exit(value)

        if category is Category.SEQUENCE:
            return [child for _, child in children]
        if category is Category.DISTINCT:
            return {"__type": "Set", "values": [child for _, child in children]}
        if category is Category.ASSOCIATIVE:
            return {
                "__type": "Map",
                "entries": [[_json_key(key), child] for key, child in children],
            }
        return {_json_key(key): child for key, child in children}

    def _leaf(self, value: Any, category: Category, depth: int) -> Any:
        match category:
            case Category.NULL:
                return None
            case Category.UNDEFINED:
                return "undefined"
            case Category.BOOLEAN:
                return bool(value)
            case Category.NUMBER:
                return _json_number(value)
            case Category.BIGINT:
                return f"{value}n"
            case Category.STRING:
                return value
            case Category.FUNCTION:
                return _function_text(value)
            case Category.DATE:
                return _date_text(value)
            case Category.PATTERN:
                return _pattern_text(value)
            case Category.ERROR:
                return self._error(value, depth)
            case _:
                return str(value)

    def _error(self, value: BaseException, depth: int) -> Any:
        if value in self._guard:
            return CIRCULAR_PLACEHOLDER
        shape: dict[str, Any] = {"name": type(value).__name__, "message": str(value)}
        self._guard.enter(value)
        try:
            for position, (key, attribute) in enumerate(vars(value).items()):
                if key not in shape:
                    shape[key] = self.prepare(
                        attribute, depth=depth + 1, edge_index=position
                    )
        finally:
            self._guard.exit(value)
        return shape


def _json_key(key: Any) -> str:
    return key if isinstance(key, str) else str(key)


def _json_number(value: Any) -> Any:
    if isinstance(value, np.ndarray):
        value = value.item()
    elif isinstance(value, np.generic):
        value = value.item()
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        return value
    if isinstance(value, numbers.Real):
        number = float(value)
        if math.isfinite(number):
            return number
        return _number_text(number)
    return str(value)
