"""Tests for construction loan sizing, debt service and carrying-cost loans."""

import warnings

import pytest

from proforma.calculations.debt import (
    LoanToCostWarning,
    build_loan_values,
    calculate_loan_preview,
    calculate_monthly_payment,
    calculate_stabilized_debt_service,
    size_construction_loan,
)
from proforma.models import CarryingCostRow


class TestSizeConstructionLoan:
    """Tests for size_construction_loan."""

    def test_simple_interest_over_construction(self):
        """$1.2M base at 6% for 24 months accrues $144K: loan = $1.344M."""
        with pytest.warns(LoanToCostWarning):
            loan = size_construction_loan(1_000_000, 500_000, 300_000, 0, 6, 24)

        assert loan.loan_base == pytest.approx(1_200_000)
        assert loan.interest_accrued == pytest.approx(144_000)
        assert loan.loan_amount == pytest.approx(1_344_000)
        assert loan.loan_to_cost == pytest.approx(1_344_000 / 1_644_000)
        assert loan.exceeds_ltc_threshold

    def test_construction_tax_is_added_to_base(self):
        """The sample project sizes a $1,370,880 loan."""
        with pytest.warns(LoanToCostWarning):
            loan = size_construction_loan(1_000_000, 500_000, 300_000, 24_000, 6, 24)

        assert loan.loan_base == pytest.approx(1_224_000)
        assert loan.interest_accrued == pytest.approx(146_880)
        assert loan.loan_amount == pytest.approx(1_370_880)

    def test_loan_never_negative(self):
        """Equity exceeding costs gives a zero loan and zero LTC."""
        loan = size_construction_loan(100_000, 50_000, 500_000, 0, 6, 24)

        assert loan.loan_base < 0
        assert loan.loan_amount == 0
        assert loan.loan_to_cost == 0
        assert not loan.exceeds_ltc_threshold

    def test_no_warning_below_threshold(self):
        """LTC at or under 75% stays quiet."""
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            loan = size_construction_loan(400_000, 200_000, 300_000, 0, 0, 24)

        assert loan.loan_to_cost == pytest.approx(0.5)

    def test_everything_zero(self):
        loan = size_construction_loan(0, 0, 0)

        assert loan.loan_amount == 0
        assert loan.loan_to_cost == 0

    def test_string_inputs_are_coerced(self):
        with pytest.warns(LoanToCostWarning):
            loan = size_construction_loan("100000", "", None, None, "0", "12")

        assert loan.loan_amount == pytest.approx(100_000)
        assert loan.construction_months == 12


class TestMonthlyPayment:
    """Tests for calculate_monthly_payment."""

    def test_standard_mortgage(self):
        """$200K at 6% over 30 years is about $1,199.10 a month."""
        assert calculate_monthly_payment(200_000, 6, 360) == pytest.approx(1199.10, abs=0.01)

    def test_zero_rate_is_straight_line(self):
        assert calculate_monthly_payment(100_000, 0, 120) == pytest.approx(100_000 / 120)

    @pytest.mark.parametrize("principal,term", [(0, 360), (100_000, 0), (100_000, -12)])
    def test_degenerate_inputs_return_zero(self, principal, term):
        assert calculate_monthly_payment(principal, 6, term) == 0


class TestStabilizedDebtService:
    """Tests for calculate_stabilized_debt_service."""

    def test_refinance_adds_to_principal(self):
        result = calculate_stabilized_debt_service(1_000_000, 200_000, 6, 30, 300_000, 50_000)

        assert result.principal_before == 1_000_000
        assert result.principal_after == 1_200_000
        assert result.amortization_months == 360
        assert result.noi == pytest.approx(250_000)
        assert result.monthly_payment_after > result.monthly_payment_before
        assert result.annual_debt_service_after == pytest.approx(result.monthly_payment_after * 12)
        assert result.available_cash_after == pytest.approx(
            250_000 - result.annual_debt_service_after
        )
        assert result.dcr == pytest.approx(250_000 / result.annual_debt_service_after)

    def test_no_debt_gives_no_dcr(self):
        result = calculate_stabilized_debt_service(0, 0, 6, 30, 120_000, 20_000)

        assert result.dcr is None
        assert result.dcr_before is None
        assert result.available_cash_before == pytest.approx(100_000)
        assert result.available_cash_after == pytest.approx(100_000)


class TestCarryingLoans:
    """Tests for carrying-cost loan rows."""

    def test_interest_only_schedule(self, sample_project):
        """Bridge loan: $100K at 12% pays $1,000/month and a balloon in month 11."""
        bridge = next(r for r in sample_project.carrying_costs if r.id == "bridge")

        schedule = build_loan_values(bridge)

        assert schedule.funding[0] == pytest.approx(100_000)
        assert sum(schedule.funding) == pytest.approx(100_000)
        assert schedule.interest[:12] == pytest.approx([-1000] * 12)
        assert sum(schedule.interest[12:]) == 0
        assert schedule.principal[11] == pytest.approx(-100_000)
        assert sum(schedule.principal) == pytest.approx(-100_000)

    def test_amortizing_repays_principal(self):
        row = CarryingCostRow(id="l", carrying_type="loan", loan_mode="amortizing",
                              loan_amount_usd=120_000, interest_rate_pct=6, loan_term_months=24,
                              funding_month=2, repayment_start_month=3)

        schedule = build_loan_values(row)

        assert schedule.funding[2] == pytest.approx(120_000)
        assert sum(schedule.principal) == pytest.approx(-120_000)
        assert schedule.principal[:3] == [0, 0, 0]
        assert sum(1 for v in schedule.principal if v) == 24
        payment = calculate_monthly_payment(120_000, 6, 24)
        assert schedule.interest[3] + schedule.principal[3] == pytest.approx(-payment)

    def test_flows_past_projection_are_dropped(self):
        row = CarryingCostRow(id="l", carrying_type="loan", loan_mode="interest_only",
                              loan_amount_usd=10_000, interest_rate_pct=12,
                              loan_term_months=24, funding_month=50)

        schedule = build_loan_values(row)

        assert sum(1 for v in schedule.interest if v) == 10
        assert sum(schedule.principal) == 0

    def test_zero_term_has_no_flows(self):
        row = CarryingCostRow(id="l", carrying_type="loan", loan_amount_usd=10_000)

        schedule = build_loan_values(row, months=6)

        assert schedule.funding == [0] * 6

    def test_preview(self, sample_project):
        bridge = next(r for r in sample_project.carrying_costs if r.id == "bridge")

        preview = calculate_loan_preview(bridge)

        assert preview.monthly_payment == pytest.approx(1000)
        assert preview.monthly_interest == pytest.approx(1000)
        assert preview.monthly_principal == 0
