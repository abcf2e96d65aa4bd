"""Text-entry coercion: turn a raw edit string into a typed replacement value.

The mutation engine writes values exactly as given. Text typed into an
inspector row arrives as a string, so the caller coerces it to the category
of the value being replaced before calling ``set_at_path``.
"""

from __future__ import annotations

import datetime
import decimal
import json
import math
from typing import Any

import numpy as np

from live_inspector.errors import EditCoercionError
from live_inspector.tree.classifier import Category, classify

__all__ = ["coerce_text_edit"]

_TRUE_TEXT = frozenset({"true", "1", "yes"})
_FALSE_TEXT = frozenset({"false", "0", "no"})


def coerce_text_edit(raw: str, previous_value: Any) -> Any:
    """Coerce ``raw`` to the category of ``previous_value``.

    Rules by the category of the value being replaced:
    - NUMBER:  int when the previous value is an integer and ``raw`` is
               integral, else float. NaN and infinities are rejected. numpy
               scalars keep their dtype.
    - BIGINT:  int, an optional trailing ``n`` is accepted.
    - BOOLEAN: ``true``/``false`` (also ``1``/``0``, ``yes``/``no``).
    - DATE:    ISO-8601 text for the same date/datetime/time type.
    - NULL / UNDEFINED: parsed as a JSON literal when possible, else kept as
               the raw string.
    - STRING and everything else editable as text: ``raw`` unchanged.

    Raises:
        EditCoercionError: If ``raw`` does not parse for the target category,
            or the previous value is a container or other non-text value.
    """
    category = classify(previous_value)
    text = raw.strip()

    if category is Category.STRING:
        return raw
    if category is Category.NUMBER:
        return _coerce_number(text, previous_value)
    if category is Category.BIGINT:
        try:
            return int(text.removesuffix("n"))
        except ValueError:
            msg = f"{raw!r} is not an integer"
            raise EditCoercionError(msg) from None
    if category is Category.BOOLEAN:
        lowered = text.lower()
        if lowered in _TRUE_TEXT:
            return True
        if lowered in _FALSE_TEXT:
            return False
        msg = f"{raw!r} is not a boolean"
        raise EditCoercionError(msg)
    if category is Category.DATE:
        return _coerce_date(text, previous_value)
    if category in (Category.NULL, Category.UNDEFINED):
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            return raw

    msg = f"a {category} value cannot be edited as text"
    raise EditCoercionError(msg)


def _coerce_number(text: str, previous_value: Any) -> Any:
    if isinstance(previous_value, decimal.Decimal):
        try:
            number: Any = decimal.Decimal(text)
        except decimal.InvalidOperation:
            msg = f"{text!r} is not a number"
            raise EditCoercionError(msg) from None
        if not number.is_finite():
            msg = f"{text!r} is not a finite number"
            raise EditCoercionError(msg)
        return number

    try:
        number = int(text)
    except ValueError:
        try:
            number = float(text)
        except ValueError:
            msg = f"{text!r} is not a number"
            raise EditCoercionError(msg) from None
        if not math.isfinite(number):
            msg = f"{text!r} is not a finite number"
            raise EditCoercionError(msg) from None
    if isinstance(previous_value, (float, np.floating)):
        number = float(number)
    if isinstance(previous_value, np.generic):
        return type(previous_value)(number)
    return number


def _coerce_date(text: str, previous_value: Any) -> Any:
    try:
        if isinstance(previous_value, datetime.datetime):
            return datetime.datetime.fromisoformat(text)
        if isinstance(previous_value, datetime.date):
            return datetime.date.fromisoformat(text)
        if isinstance(previous_value, datetime.time):
            return datetime.time.fromisoformat(text)
        return np.datetime64(text)
    except ValueError:
        msg = f"{text!r} is not an ISO-8601 date"
        raise EditCoercionError(msg) from None
