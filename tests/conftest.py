"""Pytest configuration and shared fixtures."""

import pytest
import sys
from pathlib import Path

# Add project root to path for imports
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from proforma.calculations.formula_registry import FormulaRegistry
from tests.fixtures.test_inputs import (
    REFERENCE_TODAY,
    get_sample_assumptions,
    get_sample_overrides,
    get_sample_payload,
    get_sample_project,
)


@pytest.fixture
def sample_payload():
    """Get the sample project as a camelCase payload."""
    return get_sample_payload()


@pytest.fixture
def sample_project():
    """Get the sample project."""
    return get_sample_project()


@pytest.fixture
def sample_assumptions():
    """Get the sample financing assumptions."""
    return get_sample_assumptions()


@pytest.fixture
def sample_overrides():
    """Get sample overrides with WC/BC values and base case selected."""
    return get_sample_overrides()


@pytest.fixture
def today():
    """Reference date for projects without a closing date."""
    return REFERENCE_TODAY


@pytest.fixture
def fresh_registry():
    """Reset the formula registry before and after a test."""
    FormulaRegistry.reset()
    yield FormulaRegistry
    FormulaRegistry.reset()
