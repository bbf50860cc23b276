"""Coalesce-to-zero and guarded division helpers.

Every derived metric goes through these two functions so that missing inputs
and zero denominators produce ``0.0`` rather than ``None``, ``NaN``, ``inf``
or an exception.
"""

import math
from typing import Any


def as_number(value: Any) -> float:
    """Coerce an input to a float, treating missing or non-numeric as zero.

    Args:
        value: Raw input (number, numeric string, ``None``, ...).

    Returns:
        The float value, or 0.0 for ``None``, ``NaN``, infinities and
        unparseable values.

    Example:
        >>> as_number(None)
        0.0
        >>> as_number("2.5")
        2.5
    """
    if value is None:
        return 0.0
    try:
        number = float(value)
    except (TypeError, ValueError):
        return 0.0
    return number if math.isfinite(number) else 0.0


def safe_divide(numerator: Any, denominator: Any) -> float:
    """Divide, returning 0.0 when the denominator is zero or absent.

    Non-finite results (from infinite inputs) also collapse to 0.0.
    """
    den = as_number(denominator)
    if den == 0:
        return 0.0
    result = as_number(numerator) / den
    return result if math.isfinite(result) else 0.0
