"""Sample project inputs shared across the test suite."""

from datetime import date

from proforma.models import (
    FinancingAssumptions,
    ProjectDetail,
    RevenueOverride,
    Scenario,
    ScenarioOverride,
    ScenarioOverrides,
)


REFERENCE_TODAY = date(2026, 1, 10)


def get_sample_payload() -> dict:
    """Get a camelCase project payload as the application shell sends it.

    Hand-checked figures (base case):
    - Monthly revenue: 9,500 apt + 3,600 retail + 2,000 parking = 15,100
    - Development costs: 300,000 hard + 200,000 soft = 500,000
    - Construction tax: 1,000/month x 24 months = 24,000
    - Stabilized tax 24,000/yr + management 18,000/yr = 42,000 expenses
    - Partner equity: 300,000
    - Loan base 1,224,000; interest 146,880; loan 1,370,880
    - NOI: 181,200 - 42,000 = 139,200

    Returns:
        Dict shaped like the shell's project detail.
    """
    return {
        "general": {
            "purchasePriceUsd": 1_000_000,
            "targetSqft": 0,
            "targetUnits": 10,
            "closingDate": "2026-01-15",
            "startLeasingDate": "2027-01-01",  # offset 12
            "stabilizedDate": "2027-07-01",  # offset 18
        },
        "revenue": [
            {"id": "apt-1", "typeLabel": "1BR", "unitCount": 10, "rentBudget": 1000,
             "vacancyPct": 5, "startMonth": 0},
        ],
        "retailRevenue": [
            {"id": "ret-1", "typeLabel": "Cafe", "unitCount": 2, "rentBudget": 2000,
             "vacancyPct": 10, "startMonth": 0},
        ],
        "parkingRevenue": [
            {"id": "park-1", "typeLabel": "Garage", "spaceCount": 20, "monthlyRentUsd": 100,
             "vacancyPct": 0, "startMonth": 0},
        ],
        "hardCosts": [
            {"id": "hard-1", "costName": "Structure", "amountUsd": 300_000,
             "paymentMode": "single", "paymentMonth": 2},
        ],
        "softCosts": [
            {"id": "soft-1", "costName": "Architecture", "amountUsd": 200_000,
             "paymentMode": "range", "startMonth": 0, "endMonth": 3},
        ],
        "carryingCosts": [
            {"id": "tax-c", "carryingType": "property_tax", "costName": "Construction Tax",
             "amountUsd": 12_000, "intervalUnit": "yearly", "propertyTaxPhase": "construction",
             "startMonth": 0, "endMonth": 11},
            {"id": "tax-s", "carryingType": "property_tax", "costName": "Stabilized Tax",
             "amountUsd": 6_000, "intervalUnit": "quarterly", "propertyTaxPhase": "stabilized",
             "startMonth": 24},
            {"id": "mgmt", "carryingType": "management", "costName": "Management",
             "amountUsd": 1_500, "intervalUnit": "monthly", "startMonth": 12},
            {"id": "bridge", "carryingType": "loan", "costName": "Bridge Loan",
             "loanMode": "interest_only", "loanAmountUsd": 100_000, "interestRatePct": 12,
             "loanTermMonths": 12, "fundingMonth": 0},
        ],
        "gpContributions": [
            {"id": "gp-a", "partner": "alice", "amountUsd": 150_000, "holdingPct": 40,
             "contributionMonth": 0},
            {"id": "gp-b", "partner": "bob", "amountUsd": 100_000, "holdingPct": 40,
             "contributionMonth": 1},
            {"id": "lp-1", "partner": "LP", "amountUsd": 50_000, "holdingPct": 20,
             "contributionMonth": 0},
        ],
        "apartmentTurnover": {"turnoverPct": 50, "turnoverCostUsd": 1200},
        "retailTurnover": {"turnoverPct": 0, "turnoverCostUsd": 0},
    }


def get_sample_project() -> ProjectDetail:
    """Get the sample project as a ProjectDetail."""
    return ProjectDetail.from_dict(get_sample_payload())


def get_sample_assumptions() -> FinancingAssumptions:
    """Get financing assumptions matching the hand-checked figures."""
    return FinancingAssumptions(
        construction_period_months=24,
        interest_rate_pct=6,
        stabilized_rate_pct=6,
        amortization_years=30,
        refinance_amount=100_000,
        sales_cost_pct=5,
    )


def get_sample_overrides() -> ScenarioOverrides:
    """Get overrides with WC/BC values entered but base case selected."""
    return ScenarioOverrides(
        apartments={
            "apt-1": RevenueOverride(monthly_rent_wc=900, monthly_rent_bc=1100, occupancy=95),
        },
        retail={
            "ret-1": RevenueOverride(monthly_rent_wc=1500, monthly_rent_bc=2500, occupancy=90),
        },
        management=ScenarioOverride(wc=24_000, bc=12_000),
        stabilized_tax=ScenarioOverride(wc=30_000, bc=20_000),
        build_cost=ScenarioOverride(wc=600_000, bc=450_000, scenario=Scenario.BASE),
    )
