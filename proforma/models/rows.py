"""Row-level project inputs as supplied by the application shell.

Rows are frozen snapshots of persisted project data. Numeric fields are kept
exactly as received (they may be None, strings or garbage); the calculation
modules coerce them when they are read.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Any, Dict, List, Optional, Tuple, Union

from .lookups import LP_PARTNER, PartnerClass, RevenueKind


Number = Union[int, float, str, None]
DateLike = Union[date, str, None]


def _pick(data: Dict[str, Any], *keys: str, default: Any = None) -> Any:
    """Return the first present key, accepting camelCase or snake_case names."""
    for key in keys:
        if key in data and data[key] is not None:
            return data[key]
    return default


@dataclass(frozen=True)
class ApartmentRevenueRow:
    """Baseline economics for one apartment unit type."""

    id: str
    type_label: str = ""
    unit_count: Number = 0
    rent_budget: Number = None  # Monthly rent per unit
    vacancy_pct: Number = None  # None = engine default (5%)
    start_month: Number = 0  # Cash-flow offset from closing
    unit_sqft: Number = None

    kind = RevenueKind.APARTMENT

    @property
    def units(self) -> Number:
        return self.unit_count

    @property
    def base_rent(self) -> Number:
        return self.rent_budget

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ApartmentRevenueRow":
        return cls(
            id=str(_pick(data, "id", default="")),
            type_label=_pick(data, "typeLabel", "type_label", default=""),
            unit_count=_pick(data, "unitCount", "unit_count", default=0),
            rent_budget=_pick(data, "rentBudget", "rent_budget"),
            vacancy_pct=_pick(data, "vacancyPct", "vacancy_pct"),
            start_month=_pick(data, "startMonth", "start_month", default=0),
            unit_sqft=_pick(data, "unitSqft", "unit_sqft"),
        )


@dataclass(frozen=True)
class RetailRevenueRow(ApartmentRevenueRow):
    """Baseline economics for one retail space type."""

    kind = RevenueKind.RETAIL


@dataclass(frozen=True)
class ParkingRevenueRow:
    """Baseline economics for one parking space type."""

    id: str
    type_label: str = ""
    space_count: Number = 0
    monthly_rent_usd: Number = None
    vacancy_pct: Number = None
    start_month: Number = 0

    kind = RevenueKind.PARKING

    @property
    def units(self) -> Number:
        return self.space_count

    @property
    def base_rent(self) -> Number:
        return self.monthly_rent_usd

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ParkingRevenueRow":
        return cls(
            id=str(_pick(data, "id", default="")),
            type_label=_pick(data, "typeLabel", "type_label", default=""),
            space_count=_pick(data, "spaceCount", "space_count", default=0),
            monthly_rent_usd=_pick(data, "monthlyRentUsd", "monthly_rent_usd"),
            vacancy_pct=_pick(data, "vacancyPct", "vacancy_pct"),
            start_month=_pick(data, "startMonth", "start_month", default=0),
        )


RevenueLineRow = Union[ApartmentRevenueRow, RetailRevenueRow, ParkingRevenueRow]


@dataclass(frozen=True)
class CostRow:
    """A hard or soft cost and its payment schedule."""

    id: str
    cost_name: str = ""
    cost_group: Optional[str] = None
    amount_usd: Number = None
    payment_mode: Optional[str] = None  # "single", "range" or "multi"
    payment_month: Number = None
    start_month: Number = None
    end_month: Number = None
    month_list: Tuple[Number, ...] = ()
    month_percentages: Tuple[Number, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CostRow":
        return cls(
            id=str(_pick(data, "id", default="")),
            cost_name=_pick(data, "costName", "cost_name", default=""),
            cost_group=_pick(data, "costGroup", "cost_group"),
            amount_usd=_pick(data, "amountUsd", "amount_usd"),
            payment_mode=_pick(data, "paymentMode", "payment_mode"),
            payment_month=_pick(data, "paymentMonth", "payment_month"),
            start_month=_pick(data, "startMonth", "start_month", "rangeStartMonth"),
            end_month=_pick(data, "endMonth", "end_month", "rangeEndMonth"),
            month_list=tuple(_pick(data, "monthList", "month_list", default=())),
            month_percentages=tuple(
                _pick(data, "monthPercentages", "month_percentages", default=())
            ),
        )


@dataclass(frozen=True)
class CarryingCostRow:
    """A carrying cost: recurring tax/management charge or a loan."""

    id: str
    carrying_type: str = ""  # "loan", "property_tax" or "management"
    cost_name: str = ""
    cost_group: Optional[str] = None
    amount_usd: Number = None
    interval_unit: Optional[str] = None  # "monthly", "quarterly", "yearly"
    property_tax_phase: Optional[str] = None  # "construction" or "stabilized"
    start_month: Number = None
    end_month: Number = None

    # Loan rows only
    loan_mode: Optional[str] = None  # "interest_only" or "amortizing"
    loan_amount_usd: Number = None
    interest_rate_pct: Number = None
    loan_term_months: Number = None
    funding_month: Number = None
    repayment_start_month: Number = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "CarryingCostRow":
        return cls(
            id=str(_pick(data, "id", default="")),
            carrying_type=_pick(data, "carryingType", "carrying_type", default=""),
            cost_name=_pick(data, "costName", "cost_name", default=""),
            cost_group=_pick(data, "costGroup", "cost_group"),
            amount_usd=_pick(data, "amountUsd", "amount_usd"),
            interval_unit=_pick(data, "intervalUnit", "interval_unit"),
            property_tax_phase=_pick(data, "propertyTaxPhase", "property_tax_phase"),
            start_month=_pick(data, "startMonth", "start_month"),
            end_month=_pick(data, "endMonth", "end_month"),
            loan_mode=_pick(data, "loanMode", "loan_mode"),
            loan_amount_usd=_pick(data, "loanAmountUsd", "loan_amount_usd"),
            interest_rate_pct=_pick(data, "interestRatePct", "interest_rate_pct"),
            loan_term_months=_pick(data, "loanTermMonths", "loan_term_months"),
            funding_month=_pick(data, "fundingMonth", "funding_month"),
            repayment_start_month=_pick(
                data, "repaymentStartMonth", "repayment_start_month"
            ),
        )


@dataclass(frozen=True)
class GpContributionRow:
    """Capital contributed by one partner."""

    id: str
    partner: str = ""  # "LP" for limited partners, anything else is a GP
    amount_usd: Number = 0
    holding_pct: Number = 0
    contribution_month: Number = 0

    @property
    def partner_class(self) -> PartnerClass:
        return PartnerClass.LP if self.partner == LP_PARTNER else PartnerClass.GP

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "GpContributionRow":
        return cls(
            id=str(_pick(data, "id", default="")),
            partner=_pick(data, "partner", default=""),
            amount_usd=_pick(data, "amountUsd", "amount_usd", default=0),
            holding_pct=_pick(data, "holdingPct", "holding_pct", default=0),
            contribution_month=_pick(
                data, "contributionMonth", "contribution_month", default=0
            ),
        )


@dataclass(frozen=True)
class TurnoverSettings:
    """Annual unit turnover assumption used to derive management costs."""

    turnover_pct: Number = None
    turnover_cost_usd: Number = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "TurnoverSettings":
        data = data or {}
        return cls(
            turnover_pct=_pick(data, "turnoverPct", "turnover_pct"),
            turnover_cost_usd=_pick(data, "turnoverCostUsd", "turnover_cost_usd"),
        )


@dataclass(frozen=True)
class ProjectGeneral:
    """Project-level facts used by the engine."""

    purchase_price_usd: Number = None
    target_sqft: Number = None  # Buildable square feet
    target_units: Number = None
    closing_date: DateLike = None
    start_leasing_date: DateLike = None
    stabilized_date: DateLike = None

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "ProjectGeneral":
        data = data or {}
        return cls(
            purchase_price_usd=_pick(data, "purchasePriceUsd", "purchase_price_usd"),
            target_sqft=_pick(data, "targetSqft", "target_sqft"),
            target_units=_pick(data, "targetUnits", "target_units"),
            closing_date=_pick(data, "closingDate", "closing_date"),
            start_leasing_date=_pick(data, "startLeasingDate", "start_leasing_date"),
            stabilized_date=_pick(data, "stabilizedDate", "stabilized_date"),
        )


@dataclass(frozen=True)
class ProjectDetail:
    """Everything the engine reads about one development project."""

    general: ProjectGeneral = field(default_factory=ProjectGeneral)
    revenue: Tuple[ApartmentRevenueRow, ...] = ()
    retail_revenue: Tuple[RetailRevenueRow, ...] = ()
    parking_revenue: Tuple[ParkingRevenueRow, ...] = ()
    hard_costs: Tuple[CostRow, ...] = ()
    soft_costs: Tuple[CostRow, ...] = ()
    carrying_costs: Tuple[CarryingCostRow, ...] = ()
    gp_contributions: Tuple[GpContributionRow, ...] = ()
    apartment_turnover: TurnoverSettings = field(default_factory=TurnoverSettings)
    retail_turnover: TurnoverSettings = field(default_factory=TurnoverSettings)

    @property
    def revenue_rows(self) -> List[RevenueLineRow]:
        """All revenue rows, apartments first, then retail, then parking."""
        return [*self.revenue, *self.retail_revenue, *self.parking_revenue]

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ProjectDetail":
        """Build a project from the shell's camelCase project payload.

        Args:
            data: Mapping shaped like the application's project detail.

        Returns:
            ProjectDetail with every row converted to its dataclass.
        """

        def rows(*keys: str) -> List[Dict[str, Any]]:
            return list(_pick(data, *keys, default=[]) or [])

        return cls(
            general=ProjectGeneral.from_dict(_pick(data, "general")),
            revenue=tuple(ApartmentRevenueRow.from_dict(r) for r in rows("revenue")),
            retail_revenue=tuple(
                RetailRevenueRow.from_dict(r) for r in rows("retailRevenue", "retail_revenue")
            ),
            parking_revenue=tuple(
                ParkingRevenueRow.from_dict(r) for r in rows("parkingRevenue", "parking_revenue")
            ),
            hard_costs=tuple(CostRow.from_dict(r) for r in rows("hardCosts", "hard_costs")),
            soft_costs=tuple(CostRow.from_dict(r) for r in rows("softCosts", "soft_costs")),
            carrying_costs=tuple(
                CarryingCostRow.from_dict(r) for r in rows("carryingCosts", "carrying_costs")
            ),
            gp_contributions=tuple(
                GpContributionRow.from_dict(r)
                for r in rows("gpContributions", "gp_contributions")
            ),
            apartment_turnover=TurnoverSettings.from_dict(
                _pick(data, "apartmentTurnover", "apartment_turnover")
            ),
            retail_turnover=TurnoverSettings.from_dict(
                _pick(data, "retailTurnover", "retail_turnover")
            ),
        )
