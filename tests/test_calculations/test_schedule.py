"""Tests for the cash-flow calendar and monthly series builders."""

from datetime import date

import pytest

from proforma.calculations.coercion import clamp_cashflow_month
from proforma.calculations.schedule import (
    build_cashflow_months,
    build_contribution_values,
    build_ramped_revenue_values,
    build_recurring_line_values,
    month_offset_from_date,
    parse_date,
    resolve_leasing_offsets,
)


class TestRampedRevenue:
    """Tests for build_ramped_revenue_values."""

    def test_linear_ramp_between_leasing_and_stabilization(self):
        """Ramp grows linearly from 0 at leasing start to full at stabilization."""
        values = build_ramped_revenue_values(1000, 0, 2, 6, months=8)

        assert values == pytest.approx([0, 0, 0, 250, 500, 750, 1000, 1000])

    @pytest.mark.parametrize("leasing,stabilized", [(0, 12), (5, 6), (10, 40), (30, 59)])
    def test_constant_at_and_after_stabilization(self, leasing, stabilized):
        """Every month from stabilization on equals the stabilized figure."""
        values = build_ramped_revenue_values(4200, 0, leasing, stabilized)

        assert len(values) == 60
        assert all(v == pytest.approx(4200) for v in values[stabilized:])
        assert all(v < 4200 for v in values[leasing:stabilized])

    def test_zero_before_row_start(self):
        """A row starting after leasing begins earns nothing before its start."""
        values = build_ramped_revenue_values(1000, 4, 2, 8, months=10)

        assert values[:4] == [0, 0, 0, 0]
        assert values[8] == pytest.approx(1000)

    def test_flat_when_offsets_unknown(self):
        """Without leasing or stabilization offsets the series is flat from start."""
        values = build_ramped_revenue_values(500, 3, None, None, months=6)

        assert values == [0, 0, 0, 500, 500, 500]

    def test_flat_when_stabilized_not_after_leasing(self):
        values = build_ramped_revenue_values(500, 0, 4, 4, months=6)

        assert values == [500] * 6

    def test_zero_amount(self):
        assert build_ramped_revenue_values(0, 0, 1, 5, months=4) == [0, 0, 0, 0]


class TestRecurringAndContribution:
    """Tests for flat and single-month series."""

    def test_recurring_starts_at_month(self):
        assert build_recurring_line_values(100, 2, months=4) == [0, 0, 100, 100]

    def test_recurring_start_is_clamped(self):
        assert build_recurring_line_values(100, -5, months=3) == [100, 100, 100]
        assert build_recurring_line_values(100, 99, months=3) == [0, 0, 100]

    def test_contribution_single_month(self):
        values = build_contribution_values(50_000, 3, months=5)

        assert values == [0, 0, 0, 50_000, 0]

    def test_contribution_month_truncated(self):
        assert build_contribution_values("10", 1.9, months=3) == [0, 10, 0]

    @pytest.mark.parametrize("value,expected", [
        (None, 0), ("", 0), ("junk", 0), (-3, 0), (2.7, 2), (75, 59), ("12", 12),
    ])
    def test_clamp_cashflow_month(self, value, expected):
        assert clamp_cashflow_month(value, 60) == expected


class TestCashflowMonths:
    """Tests for build_cashflow_months."""

    def test_labels_from_closing_month(self):
        months = build_cashflow_months("2026-11-20")

        assert len(months) == 60
        assert months[0].label == "M1"
        assert months[0].calendar_label == "Nov 2026"
        assert months[2].calendar_label == "Jan 2027"
        assert months[2].year == 2027
        assert months[59].label == "M60"

    def test_accepts_date_objects(self):
        months = build_cashflow_months(date(2025, 3, 31), months=2)

        assert [m.calendar_label for m in months] == ["Mar 2025", "Apr 2025"]

    @pytest.mark.parametrize("closing", [None, "", "not a date"])
    def test_missing_or_invalid_closing_uses_today(self, closing):
        months = build_cashflow_months(closing, months=1, today=date(2024, 7, 4))

        assert months[0].calendar_label == "Jul 2024"

    def test_parse_date(self):
        assert parse_date("2026-02-03") == date(2026, 2, 3)
        assert parse_date("2026-02-03T10:00:00Z") == date(2026, 2, 3)
        assert parse_date("garbage") is None
        assert parse_date(None) is None


class TestLeasingOffsets:
    """Tests for resolve_leasing_offsets."""

    def test_offsets_from_closing_month(self):
        leasing, stabilized = resolve_leasing_offsets("2026-01-15", "2027-01-01", "2027-07-01")

        assert leasing == 12
        assert stabilized == 18

    def test_missing_stabilized_is_leasing_plus_twelve(self):
        leasing, stabilized = resolve_leasing_offsets("2026-01-01", "2026-06-01", None)

        assert leasing == 5
        assert stabilized == 17

    def test_stabilized_before_leasing_is_clamped(self):
        """A stabilization date before leasing start becomes leasing + 12."""
        leasing, stabilized = resolve_leasing_offsets("2026-01-01", "2026-10-01", "2026-04-01")

        assert leasing == 9
        assert stabilized == 21

    def test_offsets_floored_at_zero(self):
        leasing, stabilized = resolve_leasing_offsets("2026-06-01", "2025-01-01", "2025-12-01")

        assert leasing == 0
        assert stabilized == 0

    def test_no_leasing_date(self):
        leasing, stabilized = resolve_leasing_offsets("2026-01-01", None, "2027-01-01")

        assert leasing is None
        assert stabilized == 12

    def test_month_offset(self):
        assert month_offset_from_date("2027-03-31", date(2026, 1, 1)) == 14
        assert month_offset_from_date(None, date(2026, 1, 1)) is None
