#!/usr/bin/env python3
"""Example script to run the pro forma on a sample mixed-use project."""

import sys
import warnings
from datetime import date
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent))

from proforma.models import (
    FinancingAssumptions,
    ProjectDetail,
    RevenueOverride,
    Scenario,
    ScenarioOverride,
    ScenarioOverrides,
)
from proforma.calculations import (
    CashflowView,
    LoanToCostWarning,
    calculate_proforma,
    cashflow_to_dataframe,
)
from proforma.scenarios import run_scenario_matrix


def get_example_project() -> ProjectDetail:
    """A 24-unit building with ground-floor retail and a small garage."""
    return ProjectDetail.from_dict({
        "general": {
            "purchasePriceUsd": 2_400_000,
            "targetSqft": 28_000,
            "targetUnits": 24,
            "closingDate": "2026-03-01",
            "startLeasingDate": "2027-09-01",
            "stabilizedDate": "2028-06-01",
        },
        "revenue": [
            {"id": "1br", "typeLabel": "1BR", "unitCount": 16, "rentBudget": 1850,
             "vacancyPct": 5},
            {"id": "2br", "typeLabel": "2BR", "unitCount": 8, "rentBudget": 2600,
             "vacancyPct": 5},
        ],
        "retailRevenue": [
            {"id": "shop", "typeLabel": "Corner shop", "unitCount": 2, "rentBudget": 4200,
             "vacancyPct": 10},
        ],
        "parkingRevenue": [
            {"id": "garage", "typeLabel": "Garage", "spaceCount": 18, "monthlyRentUsd": 150,
             "vacancyPct": 5},
        ],
        "hardCosts": [
            {"id": "shell", "costName": "Shell & Core", "amountUsd": 4_200_000,
             "paymentMode": "range", "startMonth": 3, "endMonth": 17},
            {"id": "fitout", "costName": "Fit-out", "amountUsd": 900_000,
             "paymentMode": "multi", "monthList": [15, 16, 17], "monthPercentages": [30, 30, 40]},
        ],
        "softCosts": [
            {"id": "design", "costName": "Architecture", "amountUsd": 380_000,
             "paymentMode": "range", "startMonth": 0, "endMonth": 5},
            {"id": "permits", "costName": "Permits", "amountUsd": 120_000,
             "paymentMode": "single", "paymentMonth": 2},
        ],
        "carryingCosts": [
            {"id": "tax-build", "carryingType": "property_tax", "costName": "Property Tax (build)",
             "amountUsd": 36_000, "intervalUnit": "yearly", "propertyTaxPhase": "construction",
             "startMonth": 0, "endMonth": 17},
            {"id": "tax-stab", "carryingType": "property_tax", "costName": "Property Tax",
             "amountUsd": 14_500, "intervalUnit": "quarterly", "propertyTaxPhase": "stabilized",
             "startMonth": 18},
            {"id": "mgmt", "carryingType": "management", "costName": "Management",
             "amountUsd": 2_800, "intervalUnit": "monthly", "startMonth": 18},
            {"id": "bridge", "carryingType": "loan", "costName": "Land Bridge",
             "loanMode": "interest_only", "loanAmountUsd": 600_000, "interestRatePct": 9,
             "loanTermMonths": 18, "fundingMonth": 0},
        ],
        "gpContributions": [
            {"id": "gp-1", "partner": "Harbor Dev", "amountUsd": 900_000, "holdingPct": 35,
             "contributionMonth": 0},
            {"id": "gp-2", "partner": "Westline", "amountUsd": 500_000, "holdingPct": 35,
             "contributionMonth": 2},
            {"id": "lp-1", "partner": "LP", "amountUsd": 600_000, "holdingPct": 30,
             "contributionMonth": 0},
        ],
        "apartmentTurnover": {"turnoverPct": 35, "turnoverCostUsd": 1500},
        "retailTurnover": {"turnoverPct": 10, "turnoverCostUsd": 5000},
    })


def get_example_overrides() -> ScenarioOverrides:
    """WC/BC alternatives entered for the headline line items."""
    return ScenarioOverrides(
        apartments={
            "1br": RevenueOverride(monthly_rent_wc=1700, monthly_rent_bc=1950, occupancy=95),
            "2br": RevenueOverride(monthly_rent_wc=2400, monthly_rent_bc=2750, occupancy=95),
        },
        retail={
            "shop": RevenueOverride(monthly_rent_wc=3500, monthly_rent_bc=4800, occupancy=90),
        },
        build_cost=ScenarioOverride(wc=215, bc=185),
        management=ScenarioOverride(wc=40_000, bc=30_000),
        stabilized_tax=ScenarioOverride(wc=65_000, bc=52_000),
    )


def get_example_assumptions() -> FinancingAssumptions:
    return FinancingAssumptions(
        construction_period_months=18,
        interest_rate_pct=7.0,
        stabilized_rate_pct=6.25,
        amortization_years=30,
        refinance_amount=500_000,
        sales_cost_pct=5.0,
    )


def run_single(today: date):
    """Run the pro forma with the saved (base case) overrides."""
    print("\n" + "=" * 60)
    print("DEVELOPMENT PRO FORMA")
    print("Selected Scenario")
    print("=" * 60 + "\n")

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always", LoanToCostWarning)
        result = calculate_proforma(
            get_example_project(),
            get_example_overrides(),
            get_example_assumptions(),
            today=today,
        )
    for warning in caught:
        print(f"WARNING: {warning.message}")

    loan = result.construction_loan
    debt = result.debt_service
    print(f"{'Revenue (Monthly)':<28} ${result.monthly_revenue:>14,.0f}")
    print(f"{'NOI':<28} ${result.noi:>14,.0f}")
    print(f"{'Construction Loan':<28} ${loan.loan_amount:>14,.0f}")
    print(f"{'Loan-to-Cost':<28} {loan.loan_to_cost:>15.1%}")
    dcr = "n/a" if debt.dcr is None else f"{debt.dcr:.2f}x"
    print(f"{'DCR':<28} {dcr:>15}")
    print(f"{'Cash After Refi':<28} ${debt.available_cash_after:>14,.0f}")

    print("\nExit sensitivity:")
    for row in result.exit_sensitivity:
        print(f"  {row.cap_rate_pct:>4.1f}%  sale ${row.sale_price:>13,.0f}  "
              f"in hand ${row.money_in_hand:>13,.0f}")

    print("\nRefinance waterfall:")
    for d in result.waterfall.distributions:
        print(f"  {d.partner:<12} {d.partner_class.value}  ${d.refinance_share:>11,.0f}  "
              f"CoC {d.coc_before:.1%} -> {d.coc_after:.1%}")

    print("\nCash flow by year:")
    frame = cashflow_to_dataframe(result.cashflow, CashflowView.ANNUAL, include_sub_rows=False)
    print(frame.round(0).to_string())

    print("\n" + result.trace_context.summary())
    return result


def run_matrix(today: date):
    """Run every line item at WC, Base and BC and compare."""
    with warnings.catch_warnings():
        warnings.simplefilter("ignore", LoanToCostWarning)
        matrix = run_scenario_matrix(
            get_example_project(),
            get_example_overrides(),
            get_example_assumptions(),
            today=today,
        )
    print("\n" + matrix.format_table())
    return matrix


def main():
    """Main entry point."""
    import argparse

    parser = argparse.ArgumentParser(description="Development pro forma")
    parser.add_argument(
        "--matrix",
        action="store_true",
        help="Also run the WC / Base / BC scenario matrix",
    )
    parser.add_argument(
        "--audit",
        metavar="PATH",
        help="Write an Excel audit report to PATH",
    )
    args = parser.parse_args()

    today = date.today()
    result = run_single(today)

    if args.matrix:
        run_matrix(today)

    if args.audit:
        from proforma.export import AuditReportConfig, generate_audit_excel

        config = AuditReportConfig(project_name="Example Project",
                                   scenario_name=Scenario.BASE.label)
        Path(args.audit).write_bytes(generate_audit_excel(result, config))
        print(f"\nAudit report written to {args.audit}")

    print("\nDone.")


if __name__ == "__main__":
    main()
