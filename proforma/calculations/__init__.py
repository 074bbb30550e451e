"""Calculation modules for the development pro forma."""

from .coercion import to_number, to_optional_number, clamp_percentage, clamp_cashflow_month
from .revenue import (
    RevenueLine,
    RevenueSummary,
    compute_revenue_line,
    calculate_net_revenue,
    create_default_override,
    default_occupancy,
    summarize_revenue,
    summarize_project_revenue,
)
from .schedule import (
    CashflowMonth,
    build_cashflow_months,
    build_contribution_values,
    build_ramped_revenue_values,
    build_recurring_line_values,
    resolve_leasing_offsets,
)
from .costs import (
    CarryingSummary,
    DevelopmentCostSummary,
    build_cost_allocations,
    build_interval_expense_values,
    build_turnover_rows,
    get_property_tax_phase,
    select_scenario_value,
    summarize_carrying_costs,
    summarize_development_costs,
    to_monthly_amount,
)
from .debt import (
    ConstructionLoan,
    LoanPreview,
    LoanSchedule,
    LoanToCostWarning,
    StabilizedDebtService,
    build_loan_values,
    calculate_loan_preview,
    calculate_monthly_payment,
    calculate_stabilized_debt_service,
    size_construction_loan,
)
from .metrics import (
    ExitScenario,
    ScenarioMetrics,
    ScenarioComparison,
    build_exit_sensitivity,
    calculate_cap_rate_on_cost,
    calculate_metrics,
    calculate_noi,
    compare_scenarios,
    format_comparison_table,
)
from .waterfall import (
    PartnerDistribution,
    RefinanceWaterfall,
    distribute_refinance,
    equalize_gp_payouts,
)
from .cashflow import (
    CashflowColumn,
    CashflowLine,
    CashflowRow,
    CashflowSeries,
    CashflowView,
    ProjectCashflow,
    build_carrying_series,
    build_cashflow_columns,
    build_cashflow_rows,
    build_expense_series,
    build_project_cashflow,
    build_revenue_series,
    cashflow_to_dataframe,
    sum_values_for_indices,
)

# Unified entry point
from .proforma import ProformaResult, calculate_proforma

__all__ = [
    # Coercion
    "to_number",
    "to_optional_number",
    "clamp_percentage",
    "clamp_cashflow_month",
    # Revenue
    "RevenueLine",
    "RevenueSummary",
    "compute_revenue_line",
    "calculate_net_revenue",
    "create_default_override",
    "default_occupancy",
    "summarize_revenue",
    "summarize_project_revenue",
    # Schedule
    "CashflowMonth",
    "build_cashflow_months",
    "build_contribution_values",
    "build_ramped_revenue_values",
    "build_recurring_line_values",
    "resolve_leasing_offsets",
    # Costs
    "CarryingSummary",
    "DevelopmentCostSummary",
    "build_cost_allocations",
    "build_interval_expense_values",
    "build_turnover_rows",
    "get_property_tax_phase",
    "select_scenario_value",
    "summarize_carrying_costs",
    "summarize_development_costs",
    "to_monthly_amount",
    # Debt
    "ConstructionLoan",
    "LoanPreview",
    "LoanSchedule",
    "LoanToCostWarning",
    "StabilizedDebtService",
    "build_loan_values",
    "calculate_loan_preview",
    "calculate_monthly_payment",
    "calculate_stabilized_debt_service",
    "size_construction_loan",
    # Metrics
    "ExitScenario",
    "ScenarioMetrics",
    "ScenarioComparison",
    "build_exit_sensitivity",
    "calculate_cap_rate_on_cost",
    "calculate_metrics",
    "calculate_noi",
    "compare_scenarios",
    "format_comparison_table",
    # Waterfall
    "PartnerDistribution",
    "RefinanceWaterfall",
    "distribute_refinance",
    "equalize_gp_payouts",
    # Cash flow
    "CashflowColumn",
    "CashflowLine",
    "CashflowRow",
    "CashflowSeries",
    "CashflowView",
    "ProjectCashflow",
    "build_carrying_series",
    "build_cashflow_columns",
    "build_cashflow_rows",
    "build_expense_series",
    "build_project_cashflow",
    "build_revenue_series",
    "cashflow_to_dataframe",
    "sum_values_for_indices",
    # Entry point
    "ProformaResult",
    "calculate_proforma",
]
