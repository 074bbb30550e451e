"""60-month cash-flow projection.

Builds the revenue, soft cost, hard cost and carrying cost series, the total
and running balance rows, and the column groupings (monthly, annual,
tax-year) used to display them.
"""

from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

import numpy as np
import pandas as pd

from ..models.lookups import (
    CASHFLOW_MONTHS,
    DEFAULT_CARRYING_TITLES,
    CarryingType,
)
from ..models.rows import CarryingCostRow, CostRow, GpContributionRow, ProjectDetail
from ..models.scenario_config import ScenarioOverrides
from .costs import build_cost_allocations, build_interval_expense_values, build_turnover_rows
from .debt import build_loan_values
from .revenue import compute_revenue_line
from .schedule import (
    CashflowMonth,
    build_cashflow_months,
    build_contribution_values,
    build_ramped_revenue_values,
    resolve_leasing_offsets,
)

# Values at or below this magnitude are treated as empty lines
MAGNITUDE_EPSILON = 0.0001


class CashflowView(str, Enum):
    """Column grouping for display."""

    MONTHLY = "monthly"
    ANNUAL = "annual"  # 12-month blocks from closing
    TAX_YEAR = "tax"  # Calendar years


@dataclass
class CashflowLine:
    """One line item inside a series."""

    id: str
    label: str
    values: List[float]


@dataclass
class CashflowSeries:
    """A group of line items and their per-month total."""

    label: str
    type: str  # "revenue" or "expense"
    base_values: List[float]
    line_items: List[CashflowLine] = field(default_factory=list)


@dataclass
class CashflowRow:
    """A top-level row of the cash-flow table."""

    id: str
    label: str
    type: str  # "revenue", "expense" or "total"
    values: List[float]
    sub_rows: List[CashflowLine] = field(default_factory=list)


@dataclass
class CashflowColumn:
    """A display column covering one or more months."""

    id: str
    label: str
    calendar_label: str
    indices: List[int]


@dataclass
class ProjectCashflow:
    """Complete cash-flow projection for a project."""

    months: List[CashflowMonth]
    leasing_start: Optional[int]
    stabilized_offset: Optional[int]
    revenue: CashflowSeries
    soft_costs: CashflowSeries
    hard_costs: CashflowSeries
    carrying_costs: CashflowSeries
    rows: List[CashflowRow]

    def row(self, row_id: str) -> CashflowRow:
        """Get a top-level row by id ("revenues", "total", "balance", ...)."""
        for candidate in self.rows:
            if candidate.id == row_id:
                return candidate
        raise KeyError(row_id)

    @property
    def total(self) -> List[float]:
        return self.row("total").values

    @property
    def balance(self) -> List[float]:
        return self.row("balance").values


def has_magnitude(values: Sequence[float]) -> bool:
    """True if any value is meaningfully non-zero."""
    return any(abs(value) > MAGNITUDE_EPSILON for value in values)


def _sum_lines(lines: Iterable[CashflowLine], months: int) -> List[float]:
    stacked = [line.values for line in lines]
    if not stacked:
        return [0.0] * months
    return np.sum(np.array(stacked, dtype=float), axis=0).tolist()


def build_revenue_series(
    project: ProjectDetail,
    overrides: Optional[ScenarioOverrides] = None,
    leasing_start: Optional[int] = None,
    stabilized: Optional[int] = None,
    months: int = CASHFLOW_MONTHS,
) -> CashflowSeries:
    """Ramped revenue per revenue row plus partner contributions.

    Each row's stabilized monthly figure is the scenario-selected revenue
    line, ramped from leasing start to stabilization. Partner contributions
    appear as cash in at their contribution month.

    Args:
        project: Project rows.
        overrides: Scenario overrides; rows without one use their base case.
        leasing_start: Leasing start offset.
        stabilized: Stabilization offset.
        months: Projection length.

    Returns:
        CashflowSeries labelled "Revenues".
    """
    overrides = overrides or ScenarioOverrides()
    line_items = []

    families = (
        ("apt", "Apartment", "Unit type", project.revenue),
        ("retail", "Retail", "Retail", project.retail_revenue),
        ("park", "Parking", "Parking", project.parking_revenue),
    )
    for prefix, title, fallback, rows in families:
        for index, row in enumerate(rows):
            line = compute_revenue_line(row, overrides.for_row(row))
            line_items.append(CashflowLine(
                id=row.id or f"{prefix}-{index}",
                label=f"{title} • {row.type_label or fallback}",
                values=build_ramped_revenue_values(
                    line.monthly, row.start_month, leasing_start, stabilized, months
                ),
            ))

    for index, row in enumerate(project.gp_contributions):
        line_items.append(_contribution_line(row, index, months))

    return CashflowSeries(
        label="Revenues",
        type="revenue",
        base_values=_sum_lines(line_items, months),
        line_items=line_items,
    )


def _contribution_line(row: GpContributionRow, index: int, months: int) -> CashflowLine:
    return CashflowLine(
        id=row.id or f"gp-{index}",
        label=f"GP • {row.partner or 'GP'}",
        values=build_contribution_values(row.amount_usd, row.contribution_month, months),
    )


def build_expense_series(
    rows: Iterable[CostRow],
    label: str,
    months: int = CASHFLOW_MONTHS,
) -> CashflowSeries:
    """Negative monthly allocations for a list of hard or soft cost rows."""
    line_items = []
    for index, row in enumerate(rows):
        allocations = build_cost_allocations(row, months)
        line_items.append(CashflowLine(
            id=row.id or f"{label}-{index}",
            label=row.cost_name or f"{label} {index + 1}",
            values=[-value for value in allocations],
        ))

    return CashflowSeries(
        label=label,
        type="expense",
        base_values=_sum_lines(line_items, months),
        line_items=line_items,
    )


def build_carrying_series(
    rows: Iterable[CarryingCostRow],
    months: int = CASHFLOW_MONTHS,
) -> CashflowSeries:
    """Carrying cost lines: loan funding/interest/principal and recurring charges.

    Lines that are empty over the whole projection are dropped.
    """
    line_items = []
    for index, row in enumerate(rows):
        if row.carrying_type == CarryingType.LOAN:
            schedule = build_loan_values(row, months)
            base_id = row.id or f"loan-{index}"
            name = row.cost_name or DEFAULT_CARRYING_TITLES[CarryingType.LOAN]
            candidates = [
                CashflowLine(f"{base_id}-funding", f"{name} • Funding", schedule.funding),
                CashflowLine(f"{base_id}-interest", f"{name} • Interest", schedule.interest),
                CashflowLine(f"{base_id}-principal", f"{name} • Principal", schedule.principal),
            ]
            line_items.extend(line for line in candidates if has_magnitude(line.values))
            continue

        values = build_interval_expense_values(row, months)
        if not has_magnitude(values):
            continue
        line_items.append(CashflowLine(
            id=row.id or f"carrying-{index}",
            label=row.cost_name or "Carrying Cost",
            values=values,
        ))

    return CashflowSeries(
        label="Carrying Costs",
        type="expense",
        base_values=_sum_lines(line_items, months),
        line_items=line_items,
    )


def build_cashflow_rows(
    revenue: CashflowSeries,
    soft_costs: CashflowSeries,
    hard_costs: CashflowSeries,
    carrying_costs: CashflowSeries,
) -> List[CashflowRow]:
    """Top-level rows: the four series, their monthly total and running balance."""
    total = (
        np.asarray(revenue.base_values, dtype=float)
        + np.asarray(soft_costs.base_values, dtype=float)
        + np.asarray(hard_costs.base_values, dtype=float)
        + np.asarray(carrying_costs.base_values, dtype=float)
    )
    balance = np.cumsum(total)

    rows = [
        CashflowRow(row_id, series.label, series.type, series.base_values, series.line_items)
        for row_id, series in (
            ("revenues", revenue),
            ("soft", soft_costs),
            ("hard", hard_costs),
            ("carrying", carrying_costs),
        )
    ]
    rows.append(CashflowRow("total", "Total", "total", total.tolist()))
    rows.append(CashflowRow("balance", "Balance", "total", balance.tolist()))
    return rows


def build_project_cashflow(
    project: ProjectDetail,
    overrides: Optional[ScenarioOverrides] = None,
    months: int = CASHFLOW_MONTHS,
    today: Optional[date] = None,
) -> ProjectCashflow:
    """Assemble the full cash-flow projection for a project.

    Automatic turnover management rows are appended to the carrying costs,
    starting at the leasing start offset.

    Args:
        project: Project rows.
        overrides: Scenario overrides applied to revenue lines.
        months: Projection length.
        today: Reference date used when the project has no closing date.

    Returns:
        ProjectCashflow.
    """
    general = project.general
    leasing_start, stabilized = resolve_leasing_offsets(
        general.closing_date, general.start_leasing_date, general.stabilized_date, today
    )

    turnover_rows = build_turnover_rows(
        project.revenue,
        project.retail_revenue,
        project.apartment_turnover,
        project.retail_turnover,
        leasing_start=leasing_start,
        target_units=general.target_units,
    )

    revenue = build_revenue_series(project, overrides, leasing_start, stabilized, months)
    soft = build_expense_series(project.soft_costs, "Soft Costs", months)
    hard = build_expense_series(project.hard_costs, "Hard Costs", months)
    carrying = build_carrying_series([*project.carrying_costs, *turnover_rows], months)

    return ProjectCashflow(
        months=build_cashflow_months(general.closing_date, months, today),
        leasing_start=leasing_start,
        stabilized_offset=stabilized,
        revenue=revenue,
        soft_costs=soft,
        hard_costs=hard,
        carrying_costs=carrying,
        rows=build_cashflow_rows(revenue, soft, hard, carrying),
    )


def _year_span(first: CashflowMonth, last: CashflowMonth) -> str:
    if first.year == last.year:
        return str(first.year)
    return f"{first.year}-{last.year}"


def build_cashflow_columns(
    months: Sequence[CashflowMonth],
    view: CashflowView = CashflowView.MONTHLY,
) -> List[CashflowColumn]:
    """Group projection months into display columns.

    - monthly: one column per month
    - annual: 12-month blocks from closing, labelled by the calendar year span
    - tax: one column per calendar year

    Args:
        months: Projection months.
        view: Column grouping.

    Returns:
        List of CashflowColumn in chronological order.
    """
    view = CashflowView(view)

    if view == CashflowView.MONTHLY:
        return [
            CashflowColumn(f"m-{m.index}", m.label, m.calendar_label, [m.index])
            for m in months
        ]

    if view == CashflowView.ANNUAL:
        columns = []
        for start in range(0, len(months), 12):
            block = list(months[start:start + 12])
            year_number = start // 12 + 1
            columns.append(CashflowColumn(
                id=f"y-{year_number}",
                label=_year_span(block[0], block[-1]),
                calendar_label=f"{block[0].calendar_label} - {block[-1].calendar_label}",
                indices=[m.index for m in block],
            ))
        return columns

    by_year: Dict[int, List[CashflowMonth]] = {}
    for month in months:
        by_year.setdefault(month.year, []).append(month)
    return [
        CashflowColumn(
            id=f"tax-{year}",
            label=str(year),
            calendar_label=f"{block[0].calendar_label} - {block[-1].calendar_label}",
            indices=[m.index for m in block],
        )
        for year, block in sorted(by_year.items())
    ]


def sum_values_for_indices(values: Sequence[float], indices: Iterable[int]) -> float:
    """Sum the values at the given month indices; missing indices count as 0."""
    return sum(values[idx] if 0 <= idx < len(values) else 0.0 for idx in indices)


def cashflow_to_dataframe(
    cashflow: ProjectCashflow,
    view: CashflowView = CashflowView.MONTHLY,
    include_sub_rows: bool = True,
) -> pd.DataFrame:
    """Render the projection as a DataFrame, one row per table line.

    Args:
        cashflow: Projection from build_project_cashflow.
        view: Column grouping.
        include_sub_rows: Include line items under each top-level row.

    Returns:
        DataFrame indexed by row label, one column per display column.
    """
    columns = build_cashflow_columns(cashflow.months, view)
    records = []
    labels = []

    for row in cashflow.rows:
        labels.append(row.label)
        records.append([sum_values_for_indices(row.values, c.indices) for c in columns])
        if include_sub_rows:
            for sub_row in row.sub_rows:
                labels.append(f"  {sub_row.label}")
                records.append(
                    [sum_values_for_indices(sub_row.values, c.indices) for c in columns]
                )

    return pd.DataFrame(records, index=labels, columns=[c.label for c in columns])
