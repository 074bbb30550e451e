"""Tests for the input models and their payload conversions."""

from datetime import date

import pytest

from proforma.models import (
    FinancingAssumptions,
    PartnerClass,
    ProjectDetail,
    RevenueKind,
    RevenueOverride,
    Scenario,
    ScenarioOverride,
    ScenarioOverrides,
)


class TestProjectDetail:
    """Tests for ProjectDetail.from_dict."""

    def test_camel_case_payload(self, sample_payload):
        project = ProjectDetail.from_dict(sample_payload)

        assert project.general.purchase_price_usd == 1_000_000
        assert project.general.closing_date == "2026-01-15"
        assert project.revenue[0].rent_budget == 1000
        assert project.parking_revenue[0].space_count == 20
        assert project.soft_costs[0].payment_mode == "range"
        assert project.carrying_costs[3].loan_mode == "interest_only"
        assert project.apartment_turnover.turnover_pct == 50

    def test_snake_case_keys_are_accepted(self):
        project = ProjectDetail.from_dict({
            "general": {"purchase_price_usd": 5, "closing_date": date(2026, 1, 1)},
            "hard_costs": [{"id": "h", "amount_usd": 10, "month_list": [1, 2]}],
        })

        assert project.general.purchase_price_usd == 5
        assert project.hard_costs[0].month_list == (1, 2)

    def test_revenue_rows_in_family_order(self, sample_project):
        kinds = [row.kind for row in sample_project.revenue_rows]

        assert kinds == [RevenueKind.APARTMENT, RevenueKind.RETAIL, RevenueKind.PARKING]

    def test_partner_class(self, sample_project):
        classes = [row.partner_class for row in sample_project.gp_contributions]

        assert classes == [PartnerClass.GP, PartnerClass.GP, PartnerClass.LP]

    def test_rows_are_frozen(self, sample_project):
        with pytest.raises(AttributeError):
            sample_project.revenue[0].rent_budget = 5

    def test_empty_payload(self):
        project = ProjectDetail.from_dict({})

        assert project.revenue == ()
        assert project.general.closing_date is None


class TestScenarioOverrides:
    """Tests for scenario override serialization and lookup."""

    def test_round_trip(self, sample_overrides):
        restored = ScenarioOverrides.from_dict(sample_overrides.to_dict())

        assert restored == sample_overrides

    def test_saved_preferences_shape(self):
        data = {
            "apartments": {"apt-1": {"monthlyRentWC": 900, "occupancy": 92, "scenario": "wc"}},
            "managementOverride": {"wc": 24_000, "bc": None, "scenario": "default"},
        }

        overrides = ScenarioOverrides.from_dict(data)

        assert overrides.apartments["apt-1"].monthly_rent_wc == 900
        assert overrides.apartments["apt-1"].scenario == Scenario.WORST_CASE
        assert overrides.management == ScenarioOverride(wc=24_000)
        assert overrides.build_cost == ScenarioOverride()

    @pytest.mark.parametrize("saved", ["median", "", None, 3])
    def test_unrecognized_saved_scenario_is_base(self, saved):
        override = RevenueOverride.from_dict({"monthlyRentWC": 900, "scenario": saved})

        assert override.scenario == Scenario.BASE
        assert ScenarioOverride.from_dict({"wc": 5, "scenario": saved}).scenario == Scenario.BASE

    def test_for_row_and_replace(self, sample_project, sample_overrides):
        parking = sample_project.parking_revenue[0]

        assert sample_overrides.for_row(parking) is None
        updated = sample_overrides.with_revenue_override(parking, RevenueOverride(occupancy=80))

        assert updated.for_row(parking).occupancy == 80
        assert sample_overrides.for_row(parking) is None

    def test_scenario_labels(self):
        assert [s.label for s in Scenario] == ["WC", "Base", "BC"]


class TestFinancingAssumptions:
    """Tests for FinancingAssumptions."""

    def test_defaults(self):
        assumptions = FinancingAssumptions()

        assert assumptions.construction_period_months == 24
        assert assumptions.interest_rate_pct == 6.25
        assert assumptions.amortization_years == 30
        assert assumptions.cashflow_months == 60

    def test_from_dict_keeps_defaults_for_gaps(self):
        assumptions = FinancingAssumptions.from_dict(
            {"interestRatePct": 7.5, "refinance_amount": 250_000}
        )

        assert assumptions.interest_rate_pct == 7.5
        assert assumptions.refinance_amount == 250_000
        assert assumptions.stabilized_rate_pct == 6.25
