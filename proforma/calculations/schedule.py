"""Cash-flow calendar and monthly value series.

Months are 0-indexed offsets from the first day of the closing month. All
series have exactly `months` entries (60 by default).
"""

from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, List, Optional, Tuple

from dateutil import parser as date_parser
from dateutil.relativedelta import relativedelta

from ..models.lookups import CASHFLOW_MONTHS, DEFAULT_STABILIZATION_MONTHS
from .coercion import clamp_cashflow_month, to_number, to_optional_number


@dataclass(frozen=True)
class CashflowMonth:
    """One column of the projection."""

    index: int  # 0-based offset from closing
    label: str  # "M1", "M2", ...
    calendar_label: str  # "Jan 2026"
    year: int


def parse_date(value: Any) -> Optional[date]:
    """Parse a date, datetime or ISO string; None when missing or invalid."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    try:
        return date_parser.isoparse(str(value)).date()
    except (ValueError, OverflowError):
        return None


def get_base_date(closing_date: Any, today: Optional[date] = None) -> date:
    """First day of the closing month, or of the current month without a closing date."""
    parsed = parse_date(closing_date) or today or date.today()
    return parsed.replace(day=1)


def build_cashflow_months(
    closing_date: Any,
    months: int = CASHFLOW_MONTHS,
    today: Optional[date] = None,
) -> List[CashflowMonth]:
    """Build the month headers for the projection.

    Args:
        closing_date: Project closing date (date or ISO string).
        months: Projection length.
        today: Reference date used when closing_date is missing.

    Returns:
        List of CashflowMonth, one per projection month.

    Example:
        >>> build_cashflow_months("2026-03-15", months=2)[1].calendar_label
        'Apr 2026'
    """
    base = get_base_date(closing_date, today)
    result = []
    for index in range(months):
        month_date = base + relativedelta(months=index)
        result.append(CashflowMonth(
            index=index,
            label=f"M{index + 1}",
            calendar_label=month_date.strftime("%b %Y"),
            year=month_date.year,
        ))
    return result


def month_offset_from_date(value: Any, base_date: date) -> Optional[int]:
    """Whole-month difference between a date and the base month."""
    target = parse_date(value)
    if target is None:
        return None
    return (target.year - base_date.year) * 12 + (target.month - base_date.month)


def resolve_leasing_offsets(
    closing_date: Any,
    start_leasing_date: Any,
    stabilized_date: Any,
    today: Optional[date] = None,
) -> Tuple[Optional[int], Optional[int]]:
    """Convert leasing and stabilization dates into projection offsets.

    Both offsets are floored at 0. A missing stabilization date, or one that
    falls before leasing starts, is replaced by leasing start + 12 months.

    Args:
        closing_date: Project closing date; offsets are counted from its month.
        start_leasing_date: Date leasing begins.
        stabilized_date: Date the property is expected to be stabilized.
        today: Reference date used when closing_date is missing.

    Returns:
        Tuple of (leasing_start_offset, stabilized_offset); either may be None.
    """
    base = get_base_date(closing_date, today)

    leasing_start = month_offset_from_date(start_leasing_date, base)
    if leasing_start is not None:
        leasing_start = max(0, leasing_start)

    stabilized = month_offset_from_date(stabilized_date, base)
    if stabilized is not None:
        stabilized = max(0, stabilized)

    if leasing_start is not None:
        if stabilized is None or stabilized < leasing_start:
            stabilized = leasing_start + DEFAULT_STABILIZATION_MONTHS

    return leasing_start, stabilized


def build_recurring_line_values(
    net_amount: float,
    start_month: Any,
    months: int = CASHFLOW_MONTHS,
) -> List[float]:
    """Flat series: 0 before start_month, net_amount from start_month onward."""
    start_index = clamp_cashflow_month(start_month, months)
    amount = to_number(net_amount)
    return [amount if idx >= start_index else 0.0 for idx in range(months)]


def build_ramped_revenue_values(
    net_amount: float,
    row_start_month: Any = 0,
    leasing_start: Optional[int] = None,
    stabilized: Optional[int] = None,
    months: int = CASHFLOW_MONTHS,
) -> List[float]:
    """Spread stabilized monthly revenue over the projection with a lease-up ramp.

    - Before max(row_start_month, leasing_start): 0
    - Leasing start to stabilization: linear ramp from 0 to net_amount
    - At and after stabilization: net_amount

    Without both a leasing start and a later stabilization offset the series
    is flat at net_amount from row_start_month.

    Args:
        net_amount: Stabilized monthly revenue.
        row_start_month: Month the row starts earning.
        leasing_start: Project leasing start offset, or None.
        stabilized: Project stabilization offset, or None.
        months: Projection length.

    Returns:
        List of monthly revenue values.

    Example:
        >>> build_ramped_revenue_values(1000, 0, 2, 6, months=8)
        [0.0, 0.0, 0.0, 250.0, 500.0, 750.0, 1000.0, 1000.0]
    """
    net_amount = to_number(net_amount)
    if not net_amount:
        return build_recurring_line_values(0.0, row_start_month, months)

    leasing = to_optional_number(leasing_start)
    stabilized_offset = to_optional_number(stabilized)
    if leasing is None or stabilized_offset is None or stabilized_offset <= leasing:
        return build_recurring_line_values(net_amount, row_start_month, months)

    row_start = to_optional_number(row_start_month) or 0
    ramp_start = clamp_cashflow_month(max(row_start, leasing), months)
    ramp_end = clamp_cashflow_month(max(stabilized_offset, ramp_start), months)
    if ramp_end <= ramp_start:
        return build_recurring_line_values(net_amount, ramp_start, months)

    duration = ramp_end - ramp_start
    values = [0.0] * months
    for idx in range(ramp_start, months):
        if idx <= ramp_end:
            progress = (idx - ramp_start) / duration
            values[idx] = net_amount * max(0.0, min(1.0, progress))
        else:
            values[idx] = net_amount
    return values


def build_contribution_values(
    amount: Any,
    month_index: Any,
    months: int = CASHFLOW_MONTHS,
) -> List[float]:
    """Single-month series holding a partner contribution."""
    values = [0.0] * months
    values[clamp_cashflow_month(month_index, months)] = to_number(amount)
    return values
