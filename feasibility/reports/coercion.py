"""Loose value coercion used by report filters, sorting and grouping.

Field accessors return whatever the underlying record holds: numbers,
strings, booleans, enum members or ``None``. Saved report configurations
store filter values as strings. These helpers give both sides one
predictable conversion to a number or to text.
"""

import math
import re
from enum import Enum
from typing import Any

_DECIMAL = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")
_RADIX = re.compile(r"0([xXoObB])([0-9a-fA-F]+)")
_RADIX_BASES = {"x": 16, "o": 8, "b": 2}


def to_number(value: Any) -> float:
    """Convert a field value to a float.

    ``None``, ``''`` and whitespace-only strings are 0; booleans are 1/0;
    numeric strings (decimal, exponent, ``0x``/``0o``/``0b`` prefixes and
    ``Infinity``) are parsed; anything else is NaN.

    Example:
        >>> to_number("1.5e3"), to_number(None), to_number("abc")
        (1500.0, 0.0, nan)
    """
    if value is None:
        return 0.0
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return 1.0 if value else 0.0
    if isinstance(value, (int, float)):
        return float(value)
    if not isinstance(value, str):
        return math.nan

    text = value.strip()
    if not text:
        return 0.0
    if _DECIMAL.fullmatch(text):
        return float(text)
    if text in ("Infinity", "+Infinity"):
        return math.inf
    if text == "-Infinity":
        return -math.inf
    match = _RADIX.fullmatch(text)
    if match:
        try:
            return float(int(match.group(2), _RADIX_BASES[match.group(1).lower()]))
        except ValueError:
            return math.nan
    return math.nan


def to_text(value: Any) -> str:
    """Convert a field value to the string used for matching and grouping.

    Integral floats drop the trailing ``.0`` (``5.0`` -> ``"5"``) so a value
    groups and filters the same way whether it was stored as int or float.
    """
    if value is None:
        return "null"
    if isinstance(value, Enum):
        value = value.value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float):
        if math.isnan(value):
            return "NaN"
        if math.isinf(value):
            return "Infinity" if value > 0 else "-Infinity"
        if value.is_integer() and abs(value) < 1e21:
            return str(int(value))
        return repr(value)
    return str(value)


def is_missing(value: Any) -> bool:
    """``None`` or the empty string."""
    return value is None or value == ""
