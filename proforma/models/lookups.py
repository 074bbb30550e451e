"""Lookup tables and enumerations shared by the pro forma engine."""

from enum import Enum
from typing import Dict, Tuple


# Length of the projection horizon, indexed from the closing month
CASHFLOW_MONTHS = 60

# Vacancy assumed when a revenue row leaves it blank
DEFAULT_VACANCY_PCT = 5.0

# Months from leasing start to stabilization when no usable date is given
DEFAULT_STABILIZATION_MONTHS = 12

# Loan-to-cost above this ratio is flagged, not rejected
LTC_WARNING_THRESHOLD = 0.75

# Candidate exit cap rates (percent) for the sale sensitivity table
EXIT_CAP_RATES: Tuple[float, ...] = (7.5, 7.0, 6.5, 6.0, 5.5, 5.0)

LP_PARTNER = "LP"


class Scenario(str, Enum):
    """Rent / cost assumption selected for a line item."""

    WORST_CASE = "wc"
    BASE = "default"
    BEST_CASE = "bc"

    @property
    def label(self) -> str:
        return SCENARIO_LABELS[self]


SCENARIO_LABELS: Dict[Scenario, str] = {
    Scenario.WORST_CASE: "WC",
    Scenario.BASE: "Base",
    Scenario.BEST_CASE: "BC",
}


class RevenueKind(str, Enum):
    """Revenue row family."""

    APARTMENT = "apartment"
    RETAIL = "retail"
    PARKING = "parking"


class IntervalUnit(str, Enum):
    """Billing interval of a recurring carrying cost."""

    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"


# Months between charges, and divisor to get a monthly equivalent
INTERVAL_STEPS: Dict[IntervalUnit, int] = {
    IntervalUnit.MONTHLY: 1,
    IntervalUnit.QUARTERLY: 3,
    IntervalUnit.YEARLY: 12,
}


class PropertyTaxPhase(str, Enum):
    """Which part of the project life a property tax row belongs to."""

    CONSTRUCTION = "construction"
    STABILIZED = "stabilized"


class CarryingType(str, Enum):
    """Kind of carrying cost row."""

    LOAN = "loan"
    PROPERTY_TAX = "property_tax"
    MANAGEMENT = "management"


class LoanMode(str, Enum):
    """Repayment style of a carrying-cost loan."""

    INTEREST_ONLY = "interest_only"
    AMORTIZING = "amortizing"


class PaymentMode(str, Enum):
    """How a hard or soft cost is spread over the projection."""

    SINGLE = "single"  # Whole amount in one month
    RANGE = "range"  # Evenly across an inclusive month range
    MULTI = "multi"  # Listed months, optionally with percentages


class PartnerClass(str, Enum):
    """Capital contributor class."""

    GP = "GP"
    LP = "LP"


DEFAULT_CARRYING_TITLES: Dict[CarryingType, str] = {
    CarryingType.LOAN: "Loan",
    CarryingType.PROPERTY_TAX: "Property Tax",
    CarryingType.MANAGEMENT: "Management Fee",
}
