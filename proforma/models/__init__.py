"""Data models for the development pro forma engine."""

from .lookups import (
    CASHFLOW_MONTHS,
    DEFAULT_VACANCY_PCT,
    EXIT_CAP_RATES,
    LTC_WARNING_THRESHOLD,
    CarryingType,
    IntervalUnit,
    LoanMode,
    PartnerClass,
    PaymentMode,
    PropertyTaxPhase,
    RevenueKind,
    Scenario,
)
from .rows import (
    ApartmentRevenueRow,
    RetailRevenueRow,
    ParkingRevenueRow,
    RevenueLineRow,
    CostRow,
    CarryingCostRow,
    GpContributionRow,
    TurnoverSettings,
    ProjectGeneral,
    ProjectDetail,
)
from .scenario_config import (
    RevenueOverride,
    ScenarioOverride,
    ScenarioOverrides,
    FinancingAssumptions,
)

__all__ = [
    "CASHFLOW_MONTHS",
    "DEFAULT_VACANCY_PCT",
    "EXIT_CAP_RATES",
    "LTC_WARNING_THRESHOLD",
    "CarryingType",
    "IntervalUnit",
    "LoanMode",
    "PartnerClass",
    "PaymentMode",
    "PropertyTaxPhase",
    "RevenueKind",
    "Scenario",
    "ApartmentRevenueRow",
    "RetailRevenueRow",
    "ParkingRevenueRow",
    "RevenueLineRow",
    "CostRow",
    "CarryingCostRow",
    "GpContributionRow",
    "TurnoverSettings",
    "ProjectGeneral",
    "ProjectDetail",
    "RevenueOverride",
    "ScenarioOverride",
    "ScenarioOverrides",
    "FinancingAssumptions",
]
