"""Debt calculations: construction loan sizing, stabilized debt service and carrying loans."""

import warnings
from dataclasses import dataclass, field
from typing import List, Optional

import numpy_financial as npf

from ..models.lookups import CASHFLOW_MONTHS, LTC_WARNING_THRESHOLD, LoanMode
from ..models.rows import CarryingCostRow
from .coercion import clamp_cashflow_month, to_number


class LoanToCostWarning(UserWarning):
    """Construction loan-to-cost above the comfort threshold."""


@dataclass
class ConstructionLoan:
    """Construction loan sizing details."""

    loan_base: float  # Purchase + development - GP equity + construction tax
    interest_accrued: float  # Simple interest over the construction window
    loan_amount: float
    loan_to_cost: float
    interest_rate_pct: float
    construction_months: int

    @property
    def exceeds_ltc_threshold(self) -> bool:
        return self.loan_to_cost > LTC_WARNING_THRESHOLD


@dataclass
class StabilizedDebtService:
    """Post-construction debt service before and after a cash-out refinance."""

    principal_before: float  # Construction loan rolled into permanent debt
    principal_after: float  # Plus cash-out refinance
    interest_rate_pct: float
    amortization_months: int
    monthly_payment_before: float
    monthly_payment_after: float
    annual_debt_service_before: float
    annual_debt_service_after: float
    noi: float
    dcr: Optional[float]  # None when there is no debt service
    dcr_before: Optional[float]
    available_cash_before: float  # NOI - debt service without the refinance
    available_cash_after: float  # NOI - debt service with the refinance


@dataclass
class LoanPreview:
    """Headline payment figures for a carrying-cost loan row."""

    monthly_payment: float
    monthly_interest: Optional[float]  # None for amortizing loans (varies monthly)
    monthly_principal: Optional[float]


@dataclass
class LoanSchedule:
    """Monthly cash movements of a carrying-cost loan.

    Funding is positive (cash in); interest and principal are negative.
    """

    funding: List[float] = field(default_factory=list)
    interest: List[float] = field(default_factory=list)
    principal: List[float] = field(default_factory=list)


def size_construction_loan(
    purchase_price: float,
    development_costs: float,
    gp_equity: float,
    construction_period_tax: float = 0.0,
    interest_rate_pct: float = 6.25,
    construction_months: int = 24,
) -> ConstructionLoan:
    """Size the construction loan from project costs net of GP equity.

    loan_base = purchase_price + development_costs - gp_equity + construction_period_tax
    interest_accrued = loan_base x rate / 100 x months / 12
    loan_amount = max(0, loan_base + interest_accrued)
    loan_to_cost = loan_amount / (loan_amount + gp_equity)

    Interest is simple, not compounded over a draw schedule. A loan-to-cost
    above 75% emits LoanToCostWarning but still returns the sized loan.

    Args:
        purchase_price: Land / building purchase price.
        development_costs: Selected hard + soft development costs.
        gp_equity: Total partner contributions.
        construction_period_tax: Construction-phase property tax accrued over the build.
        interest_rate_pct: Annual construction rate in percent (e.g., 6.0).
        construction_months: Construction duration in months.

    Returns:
        ConstructionLoan with base, accrued interest, amount and LTC.

    Example:
        >>> loan = size_construction_loan(1_000_000, 500_000, 300_000, 0, 6, 24)
        >>> loan.loan_amount
        1344000.0
    """
    purchase_price = to_number(purchase_price)
    development_costs = to_number(development_costs)
    gp_equity = to_number(gp_equity)
    construction_period_tax = to_number(construction_period_tax)
    rate = to_number(interest_rate_pct)
    months = max(0, int(to_number(construction_months)))

    loan_base = purchase_price + development_costs - gp_equity + construction_period_tax
    interest_accrued = loan_base * (rate / 100) * (months / 12)
    loan_amount = max(0.0, loan_base + interest_accrued)

    denominator = loan_amount + gp_equity
    loan_to_cost = loan_amount / denominator if denominator else 0.0

    if loan_to_cost > LTC_WARNING_THRESHOLD:
        warnings.warn(
            f"Loan-to-cost {loan_to_cost:.1%} exceeds {LTC_WARNING_THRESHOLD:.0%}",
            LoanToCostWarning,
            stacklevel=2,
        )

    return ConstructionLoan(
        loan_base=loan_base,
        interest_accrued=interest_accrued,
        loan_amount=loan_amount,
        loan_to_cost=loan_to_cost,
        interest_rate_pct=rate,
        construction_months=months,
    )


def calculate_monthly_payment(
    principal: float,
    annual_rate_pct: float,
    term_months: int,
) -> float:
    """Level monthly payment for a fixed-rate fully amortizing loan.

    With a 0% rate the payment is straight-line principal / term.

    Args:
        principal: Loan amount.
        annual_rate_pct: Annual rate in percent (e.g., 6.25).
        term_months: Amortization term in months.

    Returns:
        Monthly payment; 0 when principal or term is not positive.

    Example:
        >>> calculate_monthly_payment(100_000, 0, 120)
        833.3333333333334
    """
    principal = to_number(principal)
    term_months = int(to_number(term_months))
    if term_months <= 0 or not principal:
        return 0.0

    monthly_rate = to_number(annual_rate_pct) / 100 / 12
    if monthly_rate == 0:
        return principal / term_months

    return float(-npf.pmt(monthly_rate, term_months, principal))


def calculate_stabilized_debt_service(
    construction_loan_amount: float,
    refinance_amount: float,
    interest_rate_pct: float,
    amortization_years: float,
    annual_revenue: float,
    annual_expenses: float,
) -> StabilizedDebtService:
    """Debt service, DCR and available cash once the project is stabilized.

    The construction loan is taken out by a permanent loan; a cash-out
    refinance adds refinance_amount on top. Both the refinanced and the
    pre-refinance principal are amortized so the two cash positions can be
    compared.

    Args:
        construction_loan_amount: Sized construction loan.
        refinance_amount: Cash-out on top of the construction loan.
        interest_rate_pct: Stabilized annual rate in percent.
        amortization_years: Amortization term in years.
        annual_revenue: Stabilized annual revenue.
        annual_expenses: Selected annual operating expenses (tax + management).

    Returns:
        StabilizedDebtService.
    """
    principal_before = to_number(construction_loan_amount)
    principal_after = principal_before + to_number(refinance_amount)
    rate = to_number(interest_rate_pct)
    amortization_months = int(to_number(amortization_years) * 12)

    payment_before = calculate_monthly_payment(principal_before, rate, amortization_months)
    payment_after = calculate_monthly_payment(principal_after, rate, amortization_months)
    annual_before = payment_before * 12
    annual_after = payment_after * 12

    noi = to_number(annual_revenue) - to_number(annual_expenses)

    return StabilizedDebtService(
        principal_before=principal_before,
        principal_after=principal_after,
        interest_rate_pct=rate,
        amortization_months=amortization_months,
        monthly_payment_before=payment_before,
        monthly_payment_after=payment_after,
        annual_debt_service_before=annual_before,
        annual_debt_service_after=annual_after,
        noi=noi,
        dcr=noi / annual_after if annual_after else None,
        dcr_before=noi / annual_before if annual_before else None,
        available_cash_before=noi - annual_before,
        available_cash_after=noi - annual_after,
    )


def _loan_amount(row: CarryingCostRow) -> float:
    return to_number(row.loan_amount_usd) or to_number(row.amount_usd)


def calculate_loan_preview(row: CarryingCostRow) -> LoanPreview:
    """Monthly payment preview for a carrying-cost loan row."""
    amount = _loan_amount(row)
    term = int(to_number(row.loan_term_months))
    monthly_rate = to_number(row.interest_rate_pct) / 100 / 12
    if not amount or not term:
        return LoanPreview(monthly_payment=0.0, monthly_interest=0.0, monthly_principal=None)

    if row.loan_mode == LoanMode.INTEREST_ONLY:
        interest = amount * monthly_rate
        return LoanPreview(monthly_payment=interest, monthly_interest=interest, monthly_principal=0.0)

    payment = calculate_monthly_payment(amount, to_number(row.interest_rate_pct), term)
    return LoanPreview(monthly_payment=payment, monthly_interest=None, monthly_principal=None)


def build_loan_values(row: CarryingCostRow, months: int = CASHFLOW_MONTHS) -> LoanSchedule:
    """Project the funding, interest and principal flows of a carrying-cost loan.

    - Funding: the loan amount in the funding month.
    - Interest-only: interest every month of the term from the repayment
      start, with the whole principal repaid in the last term month.
    - Amortizing: level payment split into interest and principal; the final
      term month clears any remaining balance.

    Flows past the end of the projection are dropped.

    Args:
        row: Carrying cost row with carrying_type "loan".
        months: Projection length.

    Returns:
        LoanSchedule with one list per flow.
    """
    schedule = LoanSchedule(
        funding=[0.0] * months,
        interest=[0.0] * months,
        principal=[0.0] * months,
    )

    amount = _loan_amount(row)
    term = int(to_number(row.loan_term_months))
    rate = to_number(row.interest_rate_pct) / 100 / 12
    funding_month = clamp_cashflow_month(row.funding_month, months)
    if row.repayment_start_month is None or row.repayment_start_month == "":
        repayment_start = funding_month
    else:
        repayment_start = clamp_cashflow_month(row.repayment_start_month, months)

    if not amount or term <= 0:
        return schedule

    schedule.funding[funding_month] += amount

    if row.loan_mode == LoanMode.INTEREST_ONLY:
        interest_payment = amount * rate
        for month in range(repayment_start, min(repayment_start + term, months)):
            schedule.interest[month] -= interest_payment
        payoff_month = repayment_start + term - 1
        if payoff_month < months:
            schedule.principal[payoff_month] -= amount
        return schedule

    payment = calculate_monthly_payment(amount, to_number(row.interest_rate_pct), term)
    remaining = amount
    for i in range(term):
        month = repayment_start + i
        if month >= months:
            break
        interest_portion = remaining * rate
        principal_portion = payment - interest_portion
        if principal_portion > remaining or i == term - 1:
            principal_portion = remaining
        remaining -= principal_portion
        schedule.interest[month] -= interest_portion
        schedule.principal[month] -= principal_portion
        if remaining <= 0:
            break
    return schedule
