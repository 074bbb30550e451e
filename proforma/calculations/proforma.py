"""Unified pro forma entry point.

calculate_proforma() runs every stage for one project and one set of
scenario overrides. It is the single source of truth for the figures the
metrics, scenario matrix and audit export report.
"""

from dataclasses import dataclass, field
from datetime import date
from typing import Dict, List, Optional

from ..models.lookups import EXIT_CAP_RATES
from ..models.rows import ProjectDetail
from ..models.scenario_config import FinancingAssumptions, ScenarioOverrides
from .cashflow import ProjectCashflow, build_project_cashflow
from .coercion import to_number
from .costs import (
    CarryingSummary,
    DevelopmentCostSummary,
    summarize_carrying_costs,
    summarize_development_costs,
)
from .debt import (
    ConstructionLoan,
    StabilizedDebtService,
    calculate_stabilized_debt_service,
    size_construction_loan,
)
from .metrics import ExitScenario, ScenarioMetrics, build_exit_sensitivity, calculate_metrics
from .revenue import RevenueSummary, summarize_project_revenue
from .trace import TraceContext, trace
from .waterfall import RefinanceWaterfall, distribute_refinance


@dataclass
class ProformaResult:
    """Everything computed for one project under one set of overrides."""

    project: ProjectDetail
    overrides: ScenarioOverrides
    assumptions: FinancingAssumptions

    # Stabilized revenue per family ("apartments", "retail", "parking")
    revenue: Dict[str, RevenueSummary]
    monthly_revenue: float
    annual_revenue: float

    # Costs
    development: DevelopmentCostSummary
    carrying: CarryingSummary
    gp_equity: float

    # Financing
    construction_loan: ConstructionLoan
    debt_service: StabilizedDebtService

    # Outputs
    metrics: ScenarioMetrics
    exit_sensitivity: List[ExitScenario]
    waterfall: RefinanceWaterfall
    cashflow: ProjectCashflow

    trace_context: Optional[TraceContext] = field(default=None, repr=False)

    @property
    def noi(self) -> float:
        return self.metrics.noi


def calculate_proforma(
    project: ProjectDetail,
    overrides: Optional[ScenarioOverrides] = None,
    assumptions: Optional[FinancingAssumptions] = None,
    label: str = "Selected",
    today: Optional[date] = None,
) -> ProformaResult:
    """Run the full pro forma for a project.

    Stages, in order:
        1. Stabilized revenue per row under its scenario override
        2. Development costs with the build-cost override
        3. Carrying cost summary (construction tax, stabilized tax, management)
        4. Construction loan sizing
        5. Stabilized debt service before and after the cash-out refinance
        6. Exit cap-rate sensitivity
        7. Refinance waterfall across partners
        8. 60-month cash-flow projection

    Args:
        project: Project rows from the application shell.
        overrides: Scenario overrides. Defaults to base case everywhere.
        assumptions: Financing assumptions. Defaults to FinancingAssumptions().
        label: Name for the run in scenario comparisons.
        today: Reference date for projects without a closing date.

    Returns:
        ProformaResult with every stage output and the trace context.
    """
    overrides = overrides or ScenarioOverrides()
    assumptions = assumptions or FinancingAssumptions()
    general = project.general

    with TraceContext() as ctx:
        purchase_price = trace("inputs.purchase_price", to_number(general.purchase_price_usd), {})
        buildable_sqft = trace("inputs.buildable_sqft", to_number(general.target_sqft), {})
        construction_months = trace(
            "inputs.construction_period_months",
            max(0, int(to_number(assumptions.construction_period_months))),
            {},
        )
        interest_rate = trace(
            "inputs.interest_rate_pct", to_number(assumptions.interest_rate_pct), {}
        )
        stabilized_rate = trace(
            "inputs.stabilized_rate_pct", to_number(assumptions.stabilized_rate_pct), {}
        )
        amortization_years = trace(
            "inputs.amortization_years", to_number(assumptions.amortization_years), {}
        )
        refinance_amount = trace(
            "inputs.refinance_amount", to_number(assumptions.refinance_amount), {}
        )
        sales_cost_pct = trace("inputs.sales_cost_pct", to_number(assumptions.sales_cost_pct), {})

        # === Revenue ===
        revenue = summarize_project_revenue(
            project.revenue, project.retail_revenue, project.parking_revenue, overrides
        )
        family_totals = {
            family: trace(f"revenue.{family}_monthly", summary.monthly_total, {})
            for family, summary in revenue.items()
        }
        monthly_revenue = trace(
            "revenue.monthly_total",
            sum(family_totals.values()),
            {f"revenue.{family}_monthly": total for family, total in family_totals.items()},
        )
        annual_revenue = trace(
            "revenue.annual_total", monthly_revenue * 12, {"revenue.monthly_total": monthly_revenue}
        )

        # === Costs ===
        development = summarize_development_costs(
            project.hard_costs, project.soft_costs, buildable_sqft, overrides.build_cost
        )
        trace("costs.hard_soft_total", development.hard_soft_total, {})
        trace("costs.build_cost_per_sqft", development.selected_build_cost_per_sqft, {
            "costs.hard_soft_total": development.hard_soft_total,
            "inputs.buildable_sqft": buildable_sqft,
        })
        trace("costs.development_costs", development.selected_development_costs, {
            "costs.build_cost_per_sqft": development.selected_build_cost_per_sqft,
            "inputs.buildable_sqft": buildable_sqft,
        })

        carrying = summarize_carrying_costs(
            project.carrying_costs,
            construction_months,
            management_override=overrides.management,
            stabilized_tax_override=overrides.stabilized_tax,
        )
        trace("costs.construction_tax_for_loan", carrying.construction_tax_for_loan, {
            "inputs.construction_period_months": construction_months,
        })
        annual_expenses = trace("costs.annual_expenses", carrying.selected_annual_expenses, {})

        gp_equity = trace(
            "costs.gp_equity",
            sum(to_number(row.amount_usd) for row in project.gp_contributions),
            {},
        )

        # === Construction loan ===
        loan = size_construction_loan(
            purchase_price=purchase_price,
            development_costs=development.selected_development_costs,
            gp_equity=gp_equity,
            construction_period_tax=carrying.construction_tax_for_loan,
            interest_rate_pct=interest_rate,
            construction_months=construction_months,
        )
        trace("financing.loan_base", loan.loan_base, {
            "inputs.purchase_price": purchase_price,
            "costs.development_costs": development.selected_development_costs,
            "costs.gp_equity": gp_equity,
            "costs.construction_tax_for_loan": carrying.construction_tax_for_loan,
        })
        trace("financing.interest_accrued", loan.interest_accrued, {
            "financing.loan_base": loan.loan_base,
            "inputs.interest_rate_pct": interest_rate,
            "inputs.construction_period_months": construction_months,
        })
        trace("financing.construction_loan", loan.loan_amount, {
            "financing.loan_base": loan.loan_base,
            "financing.interest_accrued": loan.interest_accrued,
        })
        trace("financing.loan_to_cost", loan.loan_to_cost, {
            "financing.construction_loan": loan.loan_amount,
            "costs.gp_equity": gp_equity,
        })

        # === Stabilized debt service ===
        debt_service = calculate_stabilized_debt_service(
            construction_loan_amount=loan.loan_amount,
            refinance_amount=refinance_amount,
            interest_rate_pct=stabilized_rate,
            amortization_years=amortization_years,
            annual_revenue=annual_revenue,
            annual_expenses=annual_expenses,
        )
        trace("financing.monthly_payment", debt_service.monthly_payment_after, {
            "financing.construction_loan": loan.loan_amount,
            "inputs.refinance_amount": refinance_amount,
            "inputs.stabilized_rate_pct": stabilized_rate,
            "inputs.amortization_years": amortization_years,
        })
        trace("financing.annual_debt_service", debt_service.annual_debt_service_after, {
            "financing.monthly_payment": debt_service.monthly_payment_after,
        })

        metrics = calculate_metrics(
            label=label,
            monthly_revenue=monthly_revenue,
            annual_expenses=annual_expenses,
            development_costs=development.selected_development_costs,
            gp_equity=gp_equity,
            loan=loan,
            debt_service=debt_service,
        )
        trace("operations.noi", metrics.noi, {
            "revenue.annual_total": annual_revenue,
            "costs.annual_expenses": annual_expenses,
        })
        trace("operations.cap_rate_on_cost", metrics.cap_rate_on_cost, {
            "operations.noi": metrics.noi,
            "financing.construction_loan": loan.loan_amount,
            "costs.gp_equity": gp_equity,
        })
        trace("operations.dcr", debt_service.dcr, {
            "operations.noi": metrics.noi,
            "financing.annual_debt_service": debt_service.annual_debt_service_after,
        })
        trace("operations.available_cash_before", debt_service.available_cash_before, {
            "operations.noi": metrics.noi,
            "financing.construction_loan": loan.loan_amount,
        })
        trace("operations.available_cash_after", debt_service.available_cash_after, {
            "operations.noi": metrics.noi,
            "financing.annual_debt_service": debt_service.annual_debt_service_after,
        })

        # === Exit ===
        exit_sensitivity = build_exit_sensitivity(
            metrics.noi, loan.loan_amount, gp_equity, sales_cost_pct, EXIT_CAP_RATES
        )
        for position, row in enumerate(exit_sensitivity):
            trace("exit.sale_price", row.sale_price, {"operations.noi": metrics.noi},
                  period=position, notes=f"Cap rate {row.cap_rate_pct}%")
            trace("exit.money_in_hand", row.money_in_hand, {
                "exit.sale_price": row.sale_price,
                "inputs.sales_cost_pct": sales_cost_pct,
                "financing.construction_loan": loan.loan_amount,
                "costs.gp_equity": gp_equity,
            }, period=position)

        # === Refinance waterfall ===
        waterfall = distribute_refinance(
            project.gp_contributions,
            refinance_amount,
            debt_service.available_cash_before,
            debt_service.available_cash_after,
        )
        trace("distribution.lp_pool", waterfall.lp_pool,
              {"inputs.refinance_amount": refinance_amount})
        trace("distribution.gp_pool", waterfall.gp_pool,
              {"inputs.refinance_amount": refinance_amount})

        # === Cash flow ===
        cashflow = build_project_cashflow(
            project, overrides, months=assumptions.cashflow_months, today=today
        )
        for month, (total, balance) in enumerate(zip(cashflow.total, cashflow.balance)):
            trace("cashflow.total", total, {}, period=month)
            trace("cashflow.balance", balance, {"cashflow.total": total}, period=month)

    return ProformaResult(
        project=project,
        overrides=overrides,
        assumptions=assumptions,
        revenue=revenue,
        monthly_revenue=monthly_revenue,
        annual_revenue=annual_revenue,
        development=development,
        carrying=carrying,
        gp_equity=gp_equity,
        construction_loan=loan,
        debt_service=debt_service,
        metrics=metrics,
        exit_sensitivity=exit_sensitivity,
        waterfall=waterfall,
        cashflow=cashflow,
        trace_context=ctx,
    )
