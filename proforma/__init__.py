"""Development pro forma engine.

Turns a project's revenue, cost, carrying cost and partner rows into a
60-month cash flow, investment metrics, loan sizing, exit sensitivity and a
refinance waterfall.
"""

from .models import (
    FinancingAssumptions,
    ProjectDetail,
    Scenario,
    ScenarioOverrides,
)
from .calculations import ProformaResult, calculate_proforma
from .scenarios import ScenarioMatrixResult, apply_uniform_scenario, run_scenario_matrix

__version__ = "0.1.0"

__all__ = [
    "FinancingAssumptions",
    "ProjectDetail",
    "Scenario",
    "ScenarioOverrides",
    "ProformaResult",
    "calculate_proforma",
    "ScenarioMatrixResult",
    "apply_uniform_scenario",
    "run_scenario_matrix",
]
