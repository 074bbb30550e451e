"""Development and carrying cost calculations.

Covers hard/soft cost allocation over the projection, interval-based carrying
costs (property tax and management), scenario selection for line-item
overrides and the automatic turnover management rows.
"""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..models.lookups import (
    CASHFLOW_MONTHS,
    INTERVAL_STEPS,
    CarryingType,
    IntervalUnit,
    PaymentMode,
    PropertyTaxPhase,
    Scenario,
)
from ..models.rows import (
    ApartmentRevenueRow,
    CarryingCostRow,
    CostRow,
    RetailRevenueRow,
    TurnoverSettings,
)
from ..models.scenario_config import ScenarioOverride
from .coercion import clamp_cashflow_month, to_number, to_optional_number


@dataclass
class CarryingSummary:
    """Carrying costs reduced to the figures the metrics and loan sizing use."""

    construction_tax_monthly: float
    stabilized_tax_monthly: float
    management_monthly: float
    construction_period_months: int
    construction_tax_for_loan: float  # Construction tax accrued over the build
    stabilized_tax_annual: float  # Base (before override)
    management_annual: float  # Base (before override)
    selected_stabilized_tax_annual: float
    selected_management_annual: float

    @property
    def selected_annual_expenses(self) -> float:
        return self.selected_stabilized_tax_annual + self.selected_management_annual


@dataclass
class DevelopmentCostSummary:
    """Hard and soft cost totals with the build-cost-per-sqft override applied."""

    hard_costs_total: float
    soft_costs_total: float
    buildable_sqft: float
    build_cost_per_sqft_default: float
    selected_build_cost_per_sqft: float
    selected_development_costs: float  # Used for loan sizing

    @property
    def hard_soft_total(self) -> float:
        return self.hard_costs_total + self.soft_costs_total


def _interval_unit(row: CarryingCostRow) -> IntervalUnit:
    try:
        return IntervalUnit(row.interval_unit)
    except ValueError:
        return IntervalUnit.MONTHLY


def to_monthly_amount(row: CarryingCostRow) -> float:
    """Monthly equivalent of a recurring carrying cost.

    monthly -> amount, quarterly -> amount / 3, yearly -> amount / 12.
    Missing or unrecognised intervals are treated as monthly.

    Example:
        >>> to_monthly_amount(CarryingCostRow(id="t", amount_usd=12000, interval_unit="yearly"))
        1000.0
    """
    amount = to_number(row.amount_usd)
    return amount / INTERVAL_STEPS[_interval_unit(row)]


def get_property_tax_phase(row: CarryingCostRow) -> PropertyTaxPhase:
    """Classify a property tax row as construction or stabilized.

    An explicit property_tax_phase wins. Otherwise a cost_group mentioning
    "construction" marks the construction phase; anything else is stabilized.
    """
    if row.property_tax_phase:
        try:
            return PropertyTaxPhase(row.property_tax_phase)
        except ValueError:
            pass
    if row.cost_group and "construction" in str(row.cost_group).lower():
        return PropertyTaxPhase.CONSTRUCTION
    return PropertyTaxPhase.STABILIZED


def select_scenario_value(override: Optional[ScenarioOverride], base: float) -> float:
    """Pick the WC or BC value of a line-item override, falling back to base.

    A blank or zero WC/BC value counts as unset.
    """
    if override is None:
        return base
    if override.scenario == Scenario.WORST_CASE:
        return to_number(override.wc) or base
    if override.scenario == Scenario.BEST_CASE:
        return to_number(override.bc) or base
    return base


def _carrying_type(row: CarryingCostRow) -> Optional[CarryingType]:
    try:
        return CarryingType(row.carrying_type)
    except ValueError:
        return None


def summarize_carrying_costs(
    rows: Iterable[CarryingCostRow],
    construction_period_months=24,
    management_override: Optional[ScenarioOverride] = None,
    stabilized_tax_override: Optional[ScenarioOverride] = None,
) -> CarryingSummary:
    """Reduce carrying cost rows to monthly, annual and loan-sizing figures.

    Args:
        rows: Carrying cost rows. Loan rows are ignored here.
        construction_period_months: Length of the build; truncated, floored at 0.
        management_override: WC/BC override on annual management.
        stabilized_tax_override: WC/BC override on annual stabilized tax.

    Returns:
        CarryingSummary with base and scenario-selected figures.
    """
    period = max(0, int(to_number(construction_period_months)))

    construction_tax = 0.0
    stabilized_tax = 0.0
    management = 0.0
    for row in rows:
        carrying_type = _carrying_type(row)
        if carrying_type == CarryingType.PROPERTY_TAX:
            if get_property_tax_phase(row) == PropertyTaxPhase.CONSTRUCTION:
                construction_tax += to_monthly_amount(row)
            else:
                stabilized_tax += to_monthly_amount(row)
        elif carrying_type == CarryingType.MANAGEMENT:
            management += to_monthly_amount(row)

    stabilized_tax_annual = stabilized_tax * 12
    management_annual = management * 12

    return CarryingSummary(
        construction_tax_monthly=construction_tax,
        stabilized_tax_monthly=stabilized_tax,
        management_monthly=management,
        construction_period_months=period,
        construction_tax_for_loan=construction_tax * period,
        stabilized_tax_annual=stabilized_tax_annual,
        management_annual=management_annual,
        selected_stabilized_tax_annual=select_scenario_value(
            stabilized_tax_override, stabilized_tax_annual
        ),
        selected_management_annual=select_scenario_value(
            management_override, management_annual
        ),
    )


def summarize_development_costs(
    hard_costs: Iterable[CostRow],
    soft_costs: Iterable[CostRow],
    buildable_sqft=None,
    build_cost_override: Optional[ScenarioOverride] = None,
) -> DevelopmentCostSummary:
    """Total hard and soft costs and apply the build-cost-per-sqft override.

    With no buildable square footage the "per sqft" figure is the raw total
    and the selected development cost is the unadjusted total.

    Args:
        hard_costs: Hard cost rows.
        soft_costs: Soft cost rows.
        buildable_sqft: Project buildable square feet.
        build_cost_override: WC/BC override on cost per sqft.

    Returns:
        DevelopmentCostSummary.
    """
    hard_total = sum(to_number(row.amount_usd) for row in hard_costs)
    soft_total = sum(to_number(row.amount_usd) for row in soft_costs)
    total = hard_total + soft_total
    sqft = to_number(buildable_sqft)

    per_sqft_default = total / sqft if sqft > 0 else total
    selected_per_sqft = select_scenario_value(build_cost_override, per_sqft_default)
    selected_total = selected_per_sqft * sqft if sqft > 0 else total

    return DevelopmentCostSummary(
        hard_costs_total=hard_total,
        soft_costs_total=soft_total,
        buildable_sqft=sqft,
        build_cost_per_sqft_default=per_sqft_default,
        selected_build_cost_per_sqft=selected_per_sqft,
        selected_development_costs=selected_total,
    )


def build_cost_allocations(row: CostRow, months: int = CASHFLOW_MONTHS) -> List[float]:
    """Spread a hard or soft cost over the projection (positive amounts).

    - single: whole amount in payment_month (0 if absent)
    - range: evenly across start_month..end_month inclusive; reversed bounds swap
    - multi: month_list weighted by month_percentages when there is one finite
      percentage per month, otherwise an even split; an empty list falls back
      to payment_month, then to month 0

    Args:
        row: Cost row.
        months: Projection length.

    Returns:
        List of monthly allocations summing to the amount (or to the
        percentage-weighted amount in multi mode).
    """
    allocations = [0.0] * months
    amount = to_number(row.amount_usd)
    if not amount:
        return allocations

    def add_share(month, share: float) -> None:
        allocations[clamp_cashflow_month(month, months)] += share

    try:
        mode = PaymentMode(row.payment_mode or PaymentMode.SINGLE)
    except ValueError:
        mode = PaymentMode.SINGLE

    if mode == PaymentMode.RANGE:
        start_raw = row.start_month if row.start_month is not None else row.payment_month
        start = clamp_cashflow_month(start_raw, months)
        end_raw = row.end_month if row.end_month is not None else row.start_month
        end = clamp_cashflow_month(end_raw, months) if end_raw is not None else start
        if end < start:
            start, end = end, start
        share = amount / (end - start + 1)
        for month in range(start, end + 1):
            add_share(month, share)
        return allocations

    if mode == PaymentMode.MULTI:
        month_list = list(row.month_list or ())
        if not month_list and row.payment_month is not None:
            month_list = [row.payment_month]
        if not month_list:
            add_share(0, amount)
            return allocations

        percentages = [to_optional_number(pct) for pct in row.month_percentages or ()]
        if len(percentages) == len(month_list) and all(p is not None for p in percentages):
            for month, pct in zip(month_list, percentages):
                add_share(month, amount * pct / 100)
        else:
            even_share = amount / len(month_list)
            for month in month_list:
                add_share(month, even_share)
        return allocations

    add_share(row.payment_month, amount)
    return allocations


def build_interval_expense_values(
    row: CarryingCostRow, months: int = CASHFLOW_MONTHS
) -> List[float]:
    """Place a recurring carrying cost every 1, 3 or 12 months (negative values).

    Charges start at start_month and repeat by the interval step through
    end_month inclusive. A missing end_month runs to the end of the projection.
    """
    values = [0.0] * months
    amount = to_number(row.amount_usd)
    if not amount:
        return values

    start = clamp_cashflow_month(row.start_month, months)
    if row.end_month is None or row.end_month == "":
        end = months - 1
    else:
        end = clamp_cashflow_month(row.end_month, months)
    if end < start:
        return values

    step = INTERVAL_STEPS[_interval_unit(row)]
    for month in range(start, end + 1, step):
        values[month] -= amount
    return values


def count_apartment_units(
    rows: Iterable[ApartmentRevenueRow], target_units=None
) -> float:
    """Apartment units for turnover: sum of unit counts, else the project target."""
    total = sum(to_number(row.unit_count) for row in rows)
    return total if total else to_number(target_units)


def count_retail_units(rows: Iterable[RetailRevenueRow]) -> float:
    """Retail units for turnover: each row counts its units, or 1 when it has none."""
    total = 0.0
    for row in rows:
        units = to_number(row.unit_count)
        total += units if units > 0 else 1
    return total


def turnover_annual_cost(settings: TurnoverSettings, units: float) -> float:
    """Annual turnover cost = turnover% x units x cost per turn."""
    pct = to_number(settings.turnover_pct)
    cost = to_number(settings.turnover_cost_usd)
    if not pct or not cost or not units:
        return 0.0
    return pct / 100 * units * cost


def build_turnover_rows(
    apartment_rows: Iterable[ApartmentRevenueRow],
    retail_rows: Iterable[RetailRevenueRow],
    apartment_turnover: TurnoverSettings,
    retail_turnover: TurnoverSettings,
    leasing_start: Optional[int] = None,
    target_units=None,
) -> List[CarryingCostRow]:
    """Derive monthly management rows from the turnover settings.

    Rows start at the leasing start offset (month 0 when unknown) and run to
    the end of the projection. A family with zero cost yields no row.

    Args:
        apartment_rows: Apartment revenue rows.
        retail_rows: Retail revenue rows.
        apartment_turnover: Apartment turnover settings.
        retail_turnover: Retail turnover settings.
        leasing_start: Leasing start offset.
        target_units: Project target units, used when apartment rows have none.

    Returns:
        List of management CarryingCostRow, apartments first.
    """
    start_month = leasing_start if leasing_start is not None else 0
    families = [
        (
            "turnover-apartments",
            "Apartment Turnover (auto)",
            turnover_annual_cost(
                apartment_turnover, count_apartment_units(apartment_rows, target_units)
            ),
        ),
        (
            "turnover-retail",
            "Retail Turnover (auto)",
            turnover_annual_cost(retail_turnover, count_retail_units(retail_rows)),
        ),
    ]

    rows = []
    for row_id, label, annual_cost in families:
        monthly = annual_cost / 12
        if not monthly:
            continue
        rows.append(CarryingCostRow(
            id=row_id,
            carrying_type=CarryingType.MANAGEMENT.value,
            cost_name=label,
            amount_usd=monthly,
            interval_unit=IntervalUnit.MONTHLY.value,
            start_month=start_month,
            end_month=None,
        ))
    return rows
