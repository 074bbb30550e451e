"""Tests for metrics, exit sensitivity and scenario comparison."""

import pytest

from proforma.calculations.debt import ConstructionLoan, calculate_stabilized_debt_service
from proforma.calculations.metrics import (
    build_exit_sensitivity,
    calculate_cap_rate_on_cost,
    calculate_metrics,
    calculate_noi,
    compare_scenarios,
    format_comparison_table,
)
from proforma.models import EXIT_CAP_RATES


def _metrics(label, monthly_revenue, annual_expenses=0.0):
    loan = ConstructionLoan(
        loan_base=900_000, interest_accrued=100_000, loan_amount=1_000_000,
        loan_to_cost=0.8, interest_rate_pct=6, construction_months=24,
    )
    debt = calculate_stabilized_debt_service(
        1_000_000, 0, 6, 30, monthly_revenue * 12, annual_expenses
    )
    return calculate_metrics(label, monthly_revenue, annual_expenses, 900_000, 250_000,
                             loan, debt)


class TestExitSensitivity:
    """Tests for build_exit_sensitivity."""

    def test_six_percent_cap(self):
        """$600K NOI at a 6% cap sells for $10M."""
        rows = build_exit_sensitivity(600_000, 4_000_000, 1_000_000, 5, cap_rates=(6,))

        assert rows[0].sale_price == pytest.approx(10_000_000)
        assert rows[0].net_proceeds == pytest.approx(9_500_000)
        assert rows[0].money_in_hand == pytest.approx(4_500_000)

    def test_default_cap_rates_in_order(self):
        rows = build_exit_sensitivity(100_000, 0, 0)

        assert [r.cap_rate_pct for r in rows] == list(EXIT_CAP_RATES)
        prices = [r.sale_price for r in rows]
        assert prices == sorted(prices)

    def test_zero_cap_rate_gives_zero_price(self):
        rows = build_exit_sensitivity(100_000, 50_000, 0, cap_rates=(0,))

        assert rows[0].sale_price == 0
        assert rows[0].money_in_hand == pytest.approx(-50_000)


class TestMetrics:
    """Tests for headline metrics."""

    def test_noi(self):
        assert calculate_noi(181_200, 42_000) == pytest.approx(139_200)

    def test_cap_rate_on_cost(self):
        assert calculate_cap_rate_on_cost(100_000, 750_000, 250_000) == pytest.approx(0.1)
        assert calculate_cap_rate_on_cost(100_000, 0, 0) == 0

    def test_calculate_metrics(self):
        metrics = _metrics("Base", 20_000, 40_000)

        assert metrics.annual_revenue == pytest.approx(240_000)
        assert metrics.noi == pytest.approx(200_000)
        assert metrics.construction_loan == 1_000_000
        assert metrics.cap_rate_on_cost == pytest.approx(200_000 / 1_250_000)
        assert metrics.dcr == pytest.approx(200_000 / metrics.annual_debt_service)


class TestCompareScenarios:
    """Tests for compare_scenarios."""

    def test_spreads(self):
        wc = _metrics("WC", 5_000)
        base = _metrics("Base", 10_000)
        bc = _metrics("BC", 15_000)

        comparison = compare_scenarios(wc, base, bc)

        assert comparison.noi_spread == pytest.approx(120_000)
        assert comparison.noi_downside == pytest.approx(60_000)
        assert comparison.noi_upside == pytest.approx(60_000)
        assert comparison.available_cash_spread == pytest.approx(120_000)
        assert comparison.worst_case_cash_negative

    def test_table_mentions_every_scenario(self):
        comparison = compare_scenarios(_metrics("WC", 5_000), _metrics("Base", 10_000),
                                       _metrics("BC", 15_000))

        table = format_comparison_table(comparison)

        assert "SCENARIO COMPARISON" in table
        for heading in ("WC", "Base", "BC", "NOI", "DCR", "WC Cash Negative"):
            assert heading in table
        assert "YES" in table
