"""Defensive numeric coercion for loosely-typed row inputs.

Rows arrive from form fields and database columns, so any numeric field may
be None, an empty string, a numeric string or junk. These helpers turn such
values into safe numbers instead of raising.
"""

import math
from typing import Any, Optional

from ..models.lookups import CASHFLOW_MONTHS


def to_number(value: Any) -> float:
    """Coerce a value to a finite float, defaulting to 0.

    Args:
        value: Raw input (number, numeric string, None, "", junk).

    Returns:
        The parsed float, or 0.0 when the value is missing or not finite.

    Example:
        >>> to_number("1200")
        1200.0
        >>> to_number("abc")
        0.0
    """
    if value is None or value == "":
        return 0.0
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return 0.0
    return parsed if math.isfinite(parsed) else 0.0


def to_optional_number(value: Any) -> Optional[float]:
    """Like to_number, but return None for missing or unparseable values."""
    if value is None or value == "":
        return None
    try:
        parsed = float(value)
    except (TypeError, ValueError):
        return None
    return parsed if math.isfinite(parsed) else None


def clamp_percentage(value: Any, fallback: float = 95.0) -> float:
    """Clamp a percentage to [0, 100], using fallback when it cannot be parsed."""
    parsed = to_optional_number(value)
    if parsed is None:
        return fallback
    return max(0.0, min(100.0, parsed))


def clamp_cashflow_month(value: Any, months: int = CASHFLOW_MONTHS) -> int:
    """Truncate a month offset and clamp it into [0, months - 1].

    Missing or unparseable offsets map to month 0.
    """
    parsed = to_optional_number(value)
    if parsed is None:
        return 0
    return max(0, min(months - 1, math.trunc(parsed)))
