"""Scenario matrix runner for comparing WC / Base / BC assumptions.

Uses the unified entry point (calculate_proforma) for consistency.
"""

from dataclasses import dataclass, replace
from datetime import date
from typing import Dict, Optional

from .models.lookups import Scenario
from .models.rows import ProjectDetail
from .models.scenario_config import FinancingAssumptions, ScenarioOverrides
from .calculations.proforma import ProformaResult, calculate_proforma  # SINGLE SOURCE OF TRUTH
from .calculations.revenue import create_default_override
from .calculations.metrics import (
    ScenarioComparison,
    compare_scenarios,
    format_comparison_table,
)


@dataclass
class ScenarioMatrixResult:
    """Pro forma results with every override forced to each scenario."""

    results: Dict[Scenario, ProformaResult]
    comparison: ScenarioComparison

    def __getitem__(self, scenario: Scenario) -> ProformaResult:
        return self.results[Scenario(scenario)]

    def format_table(self) -> str:
        return format_comparison_table(self.comparison)


def apply_uniform_scenario(
    project: ProjectDetail,
    overrides: Optional[ScenarioOverrides],
    scenario: Scenario,
) -> ScenarioOverrides:
    """Copy of the overrides with every line item switched to one scenario.

    Rows the user never touched get their default override first, so their
    WC/BC rents fall back to the base rent.

    Args:
        project: Project whose revenue rows should be covered.
        overrides: Current overrides (None = defaults).
        scenario: Scenario to select everywhere.

    Returns:
        New ScenarioOverrides; the input is not modified.
    """
    scenario = Scenario(scenario)
    overrides = overrides or ScenarioOverrides()

    updated = overrides
    for row in project.revenue_rows:
        current = overrides.for_row(row) or create_default_override(row)
        updated = updated.with_revenue_override(row, replace(current, scenario=scenario))

    return replace(
        updated,
        build_cost=replace(overrides.build_cost, scenario=scenario),
        management=replace(overrides.management, scenario=scenario),
        stabilized_tax=replace(overrides.stabilized_tax, scenario=scenario),
    )


def run_scenario_matrix(
    project: ProjectDetail,
    overrides: Optional[ScenarioOverrides] = None,
    assumptions: Optional[FinancingAssumptions] = None,
    today: Optional[date] = None,
) -> ScenarioMatrixResult:
    """Run the pro forma once per scenario and compare the results.

    Args:
        project: Project rows.
        overrides: Saved overrides supplying the WC/BC values.
        assumptions: Financing assumptions shared by every run.
        today: Reference date for projects without a closing date.

    Returns:
        ScenarioMatrixResult keyed by scenario.
    """
    results = {}
    for scenario in Scenario:
        results[scenario] = calculate_proforma(
            project,
            apply_uniform_scenario(project, overrides, scenario),
            assumptions,
            label=scenario.label,
            today=today,
        )

    comparison = compare_scenarios(
        results[Scenario.WORST_CASE].metrics,
        results[Scenario.BASE].metrics,
        results[Scenario.BEST_CASE].metrics,
    )

    return ScenarioMatrixResult(results=results, comparison=comparison)
