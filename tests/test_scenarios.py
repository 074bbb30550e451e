"""Tests for the WC / Base / BC scenario matrix."""

import pytest

from proforma.models import Scenario, ScenarioOverrides
from proforma.scenarios import apply_uniform_scenario, run_scenario_matrix

pytestmark = pytest.mark.filterwarnings(
    "ignore::proforma.calculations.debt.LoanToCostWarning"
)


class TestApplyUniformScenario:
    """Tests for apply_uniform_scenario."""

    def test_every_line_item_switched(self, sample_project, sample_overrides):
        updated = apply_uniform_scenario(sample_project, sample_overrides, Scenario.WORST_CASE)

        assert updated.apartments["apt-1"].scenario == Scenario.WORST_CASE
        assert updated.apartments["apt-1"].monthly_rent_wc == 900
        assert updated.retail["ret-1"].scenario == Scenario.WORST_CASE
        assert updated.management.scenario == Scenario.WORST_CASE
        assert updated.stabilized_tax.scenario == Scenario.WORST_CASE
        assert updated.build_cost.scenario == Scenario.WORST_CASE

    def test_untouched_rows_get_default_override(self, sample_project, sample_overrides):
        updated = apply_uniform_scenario(sample_project, sample_overrides, "bc")

        parking = updated.parking["park-1"]
        assert parking.scenario == Scenario.BEST_CASE
        assert parking.occupancy == 100
        assert parking.monthly_rent_bc is None

    def test_input_is_not_modified(self, sample_project, sample_overrides):
        before = sample_overrides.to_dict()

        apply_uniform_scenario(sample_project, sample_overrides, Scenario.BEST_CASE)

        assert sample_overrides.to_dict() == before
        assert "park-1" not in sample_overrides.parking

    def test_none_overrides(self, sample_project):
        updated = apply_uniform_scenario(sample_project, None, Scenario.WORST_CASE)

        assert isinstance(updated, ScenarioOverrides)
        assert updated.apartments["apt-1"].scenario == Scenario.WORST_CASE

    def test_unknown_scenario_raises(self, sample_project):
        with pytest.raises(ValueError):
            apply_uniform_scenario(sample_project, None, "worst")


class TestScenarioMatrix:
    """Tests for run_scenario_matrix."""

    @pytest.fixture
    def matrix(self, sample_project, sample_overrides, sample_assumptions, today):
        return run_scenario_matrix(sample_project, sample_overrides, sample_assumptions, today)

    def test_runs_every_scenario(self, matrix):
        assert set(matrix.results) == set(Scenario)
        assert matrix[Scenario.BASE].metrics.label == "Base"
        assert matrix["wc"].metrics.label == "WC"

    def test_worst_case_figures(self, matrix):
        """WC rents 900 / 1,500 and WC expenses 24,000 + 30,000."""
        wc = matrix[Scenario.WORST_CASE]

        assert wc.monthly_revenue == pytest.approx(8550 + 2700 + 2000)
        assert wc.metrics.annual_expenses == pytest.approx(54_000)
        assert wc.noi == pytest.approx(13_250 * 12 - 54_000)

    def test_best_case_figures(self, matrix):
        bc = matrix[Scenario.BEST_CASE]

        assert bc.monthly_revenue == pytest.approx(10_450 + 4_500 + 2_000)
        assert bc.noi == pytest.approx(16_950 * 12 - 32_000)

    def test_base_matches_sample(self, matrix):
        assert matrix[Scenario.BASE].noi == pytest.approx(139_200)

    def test_comparison(self, matrix):
        comparison = matrix.comparison

        assert comparison.noi_spread == pytest.approx(171_400 - 105_000)
        assert comparison.noi_downside == pytest.approx(139_200 - 105_000)
        assert comparison.noi_upside == pytest.approx(171_400 - 139_200)
        assert comparison.worst_case.noi < comparison.base.noi < comparison.best_case.noi

    def test_format_table(self, matrix):
        assert "SCENARIO COMPARISON" in matrix.format_table()
