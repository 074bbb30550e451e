"""Revenue calculations for apartment, retail and parking rows."""

from dataclasses import dataclass, field
from typing import Iterable, List, Mapping, Optional

from ..models.lookups import DEFAULT_VACANCY_PCT, Scenario
from ..models.rows import RevenueLineRow
from ..models.scenario_config import RevenueOverride, ScenarioOverrides
from .coercion import clamp_percentage, to_number, to_optional_number


@dataclass(frozen=True)
class RevenueLine:
    """Stabilized monthly revenue for one row under its selected scenario."""

    row_id: str
    type_label: str
    units: float
    rent_default: float  # Base rent from the row
    rent_wc: float  # Worst-case rent (falls back to base)
    rent_bc: float  # Best-case rent (falls back to base)
    occupancy: float  # Percent, 0-100
    scenario: Scenario
    monthly: float  # units x rent x occupancy

    @property
    def rent(self) -> float:
        """Rent selected by the scenario."""
        if self.scenario == Scenario.WORST_CASE:
            return self.rent_wc
        if self.scenario == Scenario.BEST_CASE:
            return self.rent_bc
        return self.rent_default

    @property
    def annual(self) -> float:
        return self.monthly * 12


@dataclass
class RevenueSummary:
    """Revenue lines for one family of rows plus totals."""

    lines: List[RevenueLine] = field(default_factory=list)

    @property
    def monthly_total(self) -> float:
        return sum(line.monthly for line in self.lines)

    @property
    def annual_total(self) -> float:
        return self.monthly_total * 12


def _vacancy_pct(row: RevenueLineRow) -> float:
    vacancy = to_optional_number(row.vacancy_pct)
    return DEFAULT_VACANCY_PCT if vacancy is None else vacancy


def default_occupancy(vacancy_pct) -> float:
    """Occupancy implied by a row's vacancy (100 - vacancy), clamped to [0, 100].

    Args:
        vacancy_pct: Vacancy percent; None means the 5% default.

    Returns:
        Occupancy percent.
    """
    vacancy = to_optional_number(vacancy_pct)
    if vacancy is None:
        vacancy = DEFAULT_VACANCY_PCT
    return clamp_percentage(100 - vacancy)


def create_default_override(row: RevenueLineRow) -> RevenueOverride:
    """Override a row gets before the user touches it."""
    return RevenueOverride(
        monthly_rent_wc=None,
        monthly_rent_bc=None,
        occupancy=default_occupancy(row.vacancy_pct),
        scenario=Scenario.BASE,
    )


def compute_revenue_line(
    row: RevenueLineRow,
    override: Optional[RevenueOverride] = None,
) -> RevenueLine:
    """Calculate stabilized monthly revenue for a row under its scenario override.

    A zero or blank WC/BC rent is treated as "not entered" and falls back to
    the base rent, so an empty form field never produces a zero-revenue case.

    monthly = units x rent x occupancy / 100

    Args:
        row: Apartment, retail or parking row.
        override: Scenario override for the row. Defaults to the row's base case.

    Returns:
        RevenueLine with all rent alternatives and the selected monthly figure.

    Example:
        >>> row = ApartmentRevenueRow(id="a", unit_count=10, rent_budget=1000, vacancy_pct=5)
        >>> compute_revenue_line(row).monthly
        9500.0
    """
    if override is None:
        override = create_default_override(row)

    rent_default = to_number(row.base_rent)
    rent_wc = to_number(override.monthly_rent_wc) or rent_default
    rent_bc = to_number(override.monthly_rent_bc) or rent_default

    fallback_occupancy = default_occupancy(row.vacancy_pct)
    if override.occupancy is None:
        occupancy = fallback_occupancy
    else:
        occupancy = clamp_percentage(override.occupancy, fallback_occupancy)

    scenario = override.scenario
    if scenario == Scenario.WORST_CASE:
        rent = rent_wc
    elif scenario == Scenario.BEST_CASE:
        rent = rent_bc
    else:
        rent = rent_default

    units = to_number(row.units)
    monthly = units * rent * (occupancy / 100)

    return RevenueLine(
        row_id=row.id,
        type_label=row.type_label or "",
        units=units,
        rent_default=rent_default,
        rent_wc=rent_wc,
        rent_bc=rent_bc,
        occupancy=occupancy,
        scenario=scenario,
        monthly=monthly,
    )


def calculate_net_revenue(row: RevenueLineRow) -> float:
    """Monthly base-case revenue after vacancy, ignoring any override.

    net = base_rent x units x (1 - vacancy / 100)

    Args:
        row: Apartment, retail or parking row.

    Returns:
        Monthly net revenue.
    """
    rent = to_number(row.base_rent)
    units = to_number(row.units)
    return rent * units * (1 - _vacancy_pct(row) / 100)


def summarize_revenue(
    rows: Iterable[RevenueLineRow],
    overrides: Optional[Mapping[str, RevenueOverride]] = None,
) -> RevenueSummary:
    """Compute revenue lines for a family of rows.

    Args:
        rows: Rows of a single family (apartments, retail or parking).
        overrides: Overrides keyed by row id. Missing rows use their base case.

    Returns:
        RevenueSummary with one line per row.
    """
    overrides = overrides or {}
    return RevenueSummary(
        lines=[compute_revenue_line(row, overrides.get(row.id)) for row in rows]
    )


def summarize_project_revenue(
    apartments: Iterable[RevenueLineRow],
    retail: Iterable[RevenueLineRow],
    parking: Iterable[RevenueLineRow],
    overrides: Optional[ScenarioOverrides] = None,
) -> dict:
    """Summaries for all three revenue families, keyed by family name."""
    overrides = overrides or ScenarioOverrides()
    return {
        "apartments": summarize_revenue(apartments, overrides.apartments),
        "retail": summarize_revenue(retail, overrides.retail),
        "parking": summarize_revenue(parking, overrides.parking),
    }
