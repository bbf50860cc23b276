"""Display formatting for report cells and totals."""

import math
from datetime import date, datetime
from typing import Any, Optional, Union

from dateutil.parser import isoparse

from .coercion import is_missing, to_number, to_text

PLACEHOLDER = "—"

DateLike = Union[str, date, datetime]


def _signed(body: str, value: float) -> str:
    return f"-{body}" if value < 0 and body.strip("$0.,") else body


def format_currency(value: float, decimals: int = 0) -> str:
    """Format as US dollars, e.g. ``$1,234`` or ``-$1,234``."""
    if math.isnan(value):
        return "$NaN"
    return _signed(f"${abs(value):,.{decimals}f}", value)


def format_percent(value: float, decimals: int = 2) -> str:
    """Format a fraction as a percentage: ``0.1234`` -> ``12.34%``."""
    return f"{value * 100:.{decimals}f}%"


def format_number(value: float, decimals: int = 0) -> str:
    """Format with thousands separators: ``1234.5`` -> ``1,235``."""
    if math.isnan(value):
        return "NaN"
    return _signed(f"{abs(value):,.{decimals}f}", value)


def format_currency_compact(value: float) -> str:
    """Abbreviate large dollar amounts: ``$1.5M``, ``$250K``, else ``$999``."""
    if abs(value) >= 1_000_000:
        return _signed(f"${abs(value) / 1_000_000:.1f}M", value)
    if abs(value) >= 1_000:
        return _signed(f"${abs(value) / 1_000:.0f}K", value)
    return format_currency(value)


def parse_date(value: DateLike) -> Optional[date]:
    """Parse an ISO date or timestamp; ``None`` when it cannot be parsed."""
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value

    # Timestamps keep the calendar day of their own offset
    try:
        return isoparse(str(value).strip()).date()
    except (ValueError, OverflowError):
        return None


def format_date(value: DateLike) -> str:
    """Format as ``Jan 5, 2026``; unparseable input is returned as text."""
    parsed = parse_date(value)
    if parsed is None:
        return str(value)
    return f"{parsed:%b} {parsed.day}, {parsed.year}"


# =============================================================================
# Null-aware cell formatters (used by the field registry)
# =============================================================================

def fmt_currency(value: Any) -> str:
    if is_missing(value):
        return PLACEHOLDER
    return format_currency(to_number(value))


def fmt_number(value: Any, decimals: int = 0) -> str:
    if is_missing(value):
        return PLACEHOLDER
    return format_number(to_number(value), decimals)


def fmt_percent(value: Any) -> str:
    if is_missing(value):
        return PLACEHOLDER
    return format_percent(to_number(value))


def fmt_text(value: Any) -> str:
    if is_missing(value):
        return PLACEHOLDER
    return to_text(value)


def fmt_date(value: Any) -> str:
    if is_missing(value):
        return PLACEHOLDER
    return format_date(value)
