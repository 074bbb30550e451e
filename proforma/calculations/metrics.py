"""Investment metrics, exit sensitivity and scenario comparison."""

from dataclasses import dataclass
from typing import Iterable, List, Optional

from ..models.lookups import EXIT_CAP_RATES
from .coercion import to_number
from .debt import ConstructionLoan, StabilizedDebtService


@dataclass
class ExitScenario:
    """One row of the exit cap-rate sensitivity table."""

    cap_rate_pct: float
    sale_price: float  # NOI / cap rate
    net_proceeds: float  # After sales costs
    money_in_hand: float  # Net proceeds less loan and GP equity


@dataclass
class ScenarioMetrics:
    """Headline metrics for one pro forma run."""

    label: str

    # Revenue and operations
    monthly_revenue: float
    annual_revenue: float
    annual_expenses: float  # Selected stabilized tax + management
    noi: float

    # Capital
    development_costs: float
    gp_equity: float
    construction_loan: float
    loan_to_cost: float
    cap_rate_on_cost: float

    # Stabilized debt
    annual_debt_service: float
    dcr: Optional[float]
    available_cash_before: float
    available_cash_after: float


@dataclass
class ScenarioComparison:
    """Worst-case / base / best-case metrics side by side."""

    worst_case: ScenarioMetrics
    base: ScenarioMetrics
    best_case: ScenarioMetrics

    noi_spread: float  # Best-case NOI - worst-case NOI
    noi_downside: float  # Base NOI - worst-case NOI
    noi_upside: float  # Best-case NOI - base NOI
    available_cash_spread: float  # Best - worst, after refinance
    worst_case_cash_negative: bool


def calculate_noi(annual_revenue: float, annual_expenses: float) -> float:
    """Net operating income = annual revenue - annual operating expenses."""
    return to_number(annual_revenue) - to_number(annual_expenses)


def calculate_cap_rate_on_cost(
    noi: float,
    construction_loan_amount: float,
    gp_equity: float,
) -> float:
    """NOI over total capital (construction loan + GP equity); 0 without capital."""
    capital = to_number(construction_loan_amount) + to_number(gp_equity)
    return to_number(noi) / capital if capital else 0.0


def build_exit_sensitivity(
    noi: float,
    construction_loan_amount: float,
    gp_equity: float,
    sales_cost_pct: float = 5.0,
    cap_rates: Iterable[float] = EXIT_CAP_RATES,
) -> List[ExitScenario]:
    """Sale price and partner proceeds across candidate exit cap rates.

    sale_price = NOI / (cap / 100)
    net_proceeds = sale_price x (1 - sales_cost / 100)
    money_in_hand = net_proceeds - (loan + gp_equity)

    Args:
        noi: Stabilized annual NOI.
        construction_loan_amount: Loan repaid at sale.
        gp_equity: Partner capital returned at sale.
        sales_cost_pct: Broker and closing costs in percent of sale price.
        cap_rates: Exit cap rates in percent.

    Returns:
        One ExitScenario per cap rate, in the given order.

    Example:
        >>> build_exit_sensitivity(600_000, 0, 0, 0, cap_rates=(6,))[0].sale_price
        10000000.0
    """
    noi = to_number(noi)
    capital = to_number(construction_loan_amount) + to_number(gp_equity)
    sales_cost = to_number(sales_cost_pct)

    rows = []
    for cap_rate in cap_rates:
        cap = to_number(cap_rate)
        sale_price = noi / (cap / 100) if cap else 0.0
        net_proceeds = sale_price * (1 - sales_cost / 100)
        rows.append(ExitScenario(
            cap_rate_pct=cap,
            sale_price=sale_price,
            net_proceeds=net_proceeds,
            money_in_hand=net_proceeds - capital,
        ))
    return rows


def calculate_metrics(
    label: str,
    monthly_revenue: float,
    annual_expenses: float,
    development_costs: float,
    gp_equity: float,
    loan: ConstructionLoan,
    debt_service: StabilizedDebtService,
) -> ScenarioMetrics:
    """Collect headline metrics from the stage outputs of one run.

    Args:
        label: Scenario name shown in comparisons.
        monthly_revenue: Scenario-selected stabilized monthly revenue.
        annual_expenses: Selected annual operating expenses.
        development_costs: Selected development costs used for sizing.
        gp_equity: Total partner contributions.
        loan: Construction loan sizing result.
        debt_service: Stabilized debt service result.

    Returns:
        ScenarioMetrics.
    """
    annual_revenue = monthly_revenue * 12
    noi = calculate_noi(annual_revenue, annual_expenses)

    return ScenarioMetrics(
        label=label,
        monthly_revenue=monthly_revenue,
        annual_revenue=annual_revenue,
        annual_expenses=annual_expenses,
        noi=noi,
        development_costs=development_costs,
        gp_equity=gp_equity,
        construction_loan=loan.loan_amount,
        loan_to_cost=loan.loan_to_cost,
        cap_rate_on_cost=calculate_cap_rate_on_cost(noi, loan.loan_amount, gp_equity),
        annual_debt_service=debt_service.annual_debt_service_after,
        dcr=debt_service.dcr,
        available_cash_before=debt_service.available_cash_before,
        available_cash_after=debt_service.available_cash_after,
    )


def compare_scenarios(
    worst_case: ScenarioMetrics,
    base: ScenarioMetrics,
    best_case: ScenarioMetrics,
) -> ScenarioComparison:
    """Compare worst-case, base and best-case runs.

    Args:
        worst_case: Metrics with every override forced to WC.
        base: Metrics with every override forced to Base.
        best_case: Metrics with every override forced to BC.

    Returns:
        ScenarioComparison with NOI and cash spreads.
    """
    return ScenarioComparison(
        worst_case=worst_case,
        base=base,
        best_case=best_case,
        noi_spread=best_case.noi - worst_case.noi,
        noi_downside=base.noi - worst_case.noi,
        noi_upside=best_case.noi - base.noi,
        available_cash_spread=best_case.available_cash_after - worst_case.available_cash_after,
        worst_case_cash_negative=worst_case.available_cash_after < 0,
    )


def _format_ratio(value: Optional[float]) -> str:
    return "n/a" if value is None else f"{value:.2f}x"


def format_comparison_table(comparison: ScenarioComparison) -> str:
    """Format comparison as a text table.

    Args:
        comparison: Scenario comparison result.

    Returns:
        Formatted string table.
    """
    wc = comparison.worst_case
    base = comparison.base
    bc = comparison.best_case

    def money(label: str, attr: str) -> str:
        values = [getattr(m, attr) for m in (wc, base, bc)]
        return f"{label:<24} " + " ".join(f"${v:>13,.0f}" for v in values)

    lines = [
        "=" * 72,
        "SCENARIO COMPARISON",
        "=" * 72,
        "",
        f"{'Metric':<24} {'WC':>14} {'Base':>14} {'BC':>14}",
        "-" * 72,
        money("Revenue (Annual)", "annual_revenue"),
        money("Expenses (Annual)", "annual_expenses"),
        money("NOI", "noi"),
        "",
        money("Construction Loan", "construction_loan"),
        f"{'Loan-to-Cost':<24} "
        + " ".join(f"{m.loan_to_cost:>14.2%}" for m in (wc, base, bc)),
        f"{'Cap Rate on Cost':<24} "
        + " ".join(f"{m.cap_rate_on_cost:>14.2%}" for m in (wc, base, bc)),
        "",
        money("Debt Service (Annual)", "annual_debt_service"),
        f"{'DCR':<24} " + " ".join(f"{_format_ratio(m.dcr):>14}" for m in (wc, base, bc)),
        money("Cash Before Refi", "available_cash_before"),
        money("Cash After Refi", "available_cash_after"),
        "",
        "-" * 72,
        f"{'NOI Spread':<24} ${comparison.noi_spread:>13,.0f}",
        f"{'Cash Spread':<24} ${comparison.available_cash_spread:>13,.0f}",
        f"{'WC Cash Negative':<24} {'YES' if comparison.worst_case_cash_negative else 'NO':>14}",
        "=" * 72,
    ]

    return "\n".join(lines)
