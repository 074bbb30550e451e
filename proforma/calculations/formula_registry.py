"""Formula Registry for transparent calculation auditing.

This module provides a central registry of the pro forma formulas,
so every reported figure can be explained in terms of its inputs.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional, Set


class FormulaCategory(str, Enum):
    """Categories for organizing formulas."""
    INPUT = "Input"
    REVENUE = "Revenue"
    COSTS = "Costs"
    FINANCING = "Financing"
    OPERATIONS = "Operations"
    EXIT = "Exit"
    DISTRIBUTION = "Distribution"
    CASHFLOW = "Cash Flow"


@dataclass
class FormulaDefinition:
    """Definition of a single calculation formula.

    Attributes:
        field_path: Dot-notation path to the field (e.g., "financing.loan_base")
        name: Human-readable name (e.g., "Construction Loan Base")
        formula: Symbolic formula (e.g., "purchase_price + development_costs - gp_equity")
        inputs: List of input field paths that feed into this formula
        category: Category for grouping formulas
        unit: Display unit (e.g., "$", "%", "ratio", "x")
        notes: Optional explanation or caveats
    """
    field_path: str
    name: str
    formula: str
    inputs: List[str]
    category: FormulaCategory
    unit: str = "$"
    notes: str = ""


class FormulaRegistry:
    """Central registry of all calculation formulas.

    Maintains a class-level mapping of field paths to their formula
    definitions, enabling formula lookup and dependency analysis.
    """
    _formulas: Dict[str, FormulaDefinition] = {}
    _initialized: bool = False

    @classmethod
    def register(cls, definition: FormulaDefinition) -> None:
        """Register a formula definition."""
        cls._formulas[definition.field_path] = definition

    @classmethod
    def get(cls, field_path: str) -> Optional[FormulaDefinition]:
        """Get formula definition by field path."""
        cls._ensure_initialized()
        return cls._formulas.get(field_path)

    @classmethod
    def get_all(cls) -> Dict[str, FormulaDefinition]:
        """Get all registered formulas."""
        cls._ensure_initialized()
        return cls._formulas.copy()

    @classmethod
    def get_by_category(cls, category: FormulaCategory) -> List[FormulaDefinition]:
        """Get all formulas in a category."""
        cls._ensure_initialized()
        return [f for f in cls._formulas.values() if f.category == category]

    @classmethod
    def get_inputs(cls, field_path: str) -> List[str]:
        """Get the input field paths for a formula."""
        formula = cls.get(field_path)
        return formula.inputs if formula else []

    @classmethod
    def get_dependents(cls, field_path: str) -> List[str]:
        """Get all formulas that use this field as an input."""
        cls._ensure_initialized()
        return [
            path for path, formula in cls._formulas.items()
            if field_path in formula.inputs
        ]

    @classmethod
    def get_all_ancestors(cls, field_path: str) -> Set[str]:
        """Get all upstream dependencies recursively."""
        cls._ensure_initialized()
        ancestors = set()
        to_process = list(cls.get_inputs(field_path))

        while to_process:
            current = to_process.pop()
            if current not in ancestors:
                ancestors.add(current)
                to_process.extend(cls.get_inputs(current))

        return ancestors

    @classmethod
    def get_all_descendants(cls, field_path: str) -> Set[str]:
        """Get all downstream dependencies recursively."""
        cls._ensure_initialized()
        descendants = set()
        to_process = list(cls.get_dependents(field_path))

        while to_process:
            current = to_process.pop()
            if current not in descendants:
                descendants.add(current)
                to_process.extend(cls.get_dependents(current))

        return descendants

    @classmethod
    def build_dependency_graph(cls):
        """Build a networkx DiGraph of formula dependencies.

        Requires the optional "graph" extra.

        Returns:
            nx.DiGraph with a node per formula and an edge from each input
            to the formula that uses it.
        """
        try:
            import networkx as nx
        except ImportError:
            raise ImportError(
                "networkx is required for dependency graphs. "
                "Install with: pip install 'dev-proforma[graph]'"
            )

        cls._ensure_initialized()
        graph = nx.DiGraph()

        for path, formula in cls._formulas.items():
            graph.add_node(path, name=formula.name, category=formula.category.value,
                           formula=formula.formula)

        for path, formula in cls._formulas.items():
            for input_path in formula.inputs:
                graph.add_edge(input_path, path)

        return graph

    @classmethod
    def _ensure_initialized(cls) -> None:
        """Ensure the registry is populated with formulas."""
        if not cls._initialized:
            _populate_registry()
            cls._initialized = True

    @classmethod
    def reset(cls) -> None:
        """Reset the registry (mainly for testing)."""
        cls._formulas = {}
        cls._initialized = False


def _input(field_path: str, name: str, unit: str = "$", notes: str = "") -> FormulaDefinition:
    return FormulaDefinition(
        field_path=field_path,
        name=name,
        formula="User input",
        inputs=[],
        category=FormulaCategory.INPUT,
        unit=unit,
        notes=notes,
    )


def _populate_registry() -> None:
    """Populate the registry with all calculation formulas."""

    # =========================================================================
    # INPUTS (ProjectDetail.general and FinancingAssumptions)
    # =========================================================================
    inputs = [
        _input("inputs.purchase_price", "Purchase Price"),
        _input("inputs.buildable_sqft", "Buildable Sq Ft", unit="sqft"),
        _input("inputs.construction_period_months", "Construction Period", unit="months"),
        _input("inputs.interest_rate_pct", "Construction Interest Rate", unit="%",
               notes="Simple interest over the construction period"),
        _input("inputs.stabilized_rate_pct", "Stabilized Interest Rate", unit="%"),
        _input("inputs.amortization_years", "Amortization", unit="years"),
        _input("inputs.refinance_amount", "Cash-Out Refinance"),
        _input("inputs.sales_cost_pct", "Sales Cost", unit="%"),
    ]

    # =========================================================================
    # REVENUE
    # =========================================================================
    revenue = [
        FormulaDefinition(
            field_path="revenue.apartments_monthly",
            name="Apartment Revenue (Monthly)",
            formula="sum(units * rent * occupancy / 100)",
            inputs=[],
            category=FormulaCategory.REVENUE,
            notes="Rent selected per row by its WC / Base / BC scenario",
        ),
        FormulaDefinition(
            field_path="revenue.retail_monthly",
            name="Retail Revenue (Monthly)",
            formula="sum(units * rent * occupancy / 100)",
            inputs=[],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="revenue.parking_monthly",
            name="Parking Revenue (Monthly)",
            formula="sum(spaces * rent * occupancy / 100)",
            inputs=[],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="revenue.monthly_total",
            name="Total Revenue (Monthly)",
            formula="apartments_monthly + retail_monthly + parking_monthly",
            inputs=["revenue.apartments_monthly", "revenue.retail_monthly",
                    "revenue.parking_monthly"],
            category=FormulaCategory.REVENUE,
        ),
        FormulaDefinition(
            field_path="revenue.annual_total",
            name="Total Revenue (Annual)",
            formula="monthly_total * 12",
            inputs=["revenue.monthly_total"],
            category=FormulaCategory.REVENUE,
        ),
    ]

    # =========================================================================
    # COSTS
    # =========================================================================
    costs = [
        FormulaDefinition(
            field_path="costs.hard_soft_total",
            name="Hard + Soft Costs",
            formula="sum(hard_costs) + sum(soft_costs)",
            inputs=[],
            category=FormulaCategory.COSTS,
        ),
        FormulaDefinition(
            field_path="costs.build_cost_per_sqft",
            name="Build Cost per Sq Ft",
            formula="hard_soft_total / buildable_sqft",
            inputs=["costs.hard_soft_total", "inputs.buildable_sqft"],
            category=FormulaCategory.COSTS,
            notes="Raw total when buildable sqft is 0; WC/BC override replaces it",
        ),
        FormulaDefinition(
            field_path="costs.development_costs",
            name="Selected Development Costs",
            formula="build_cost_per_sqft * buildable_sqft",
            inputs=["costs.build_cost_per_sqft", "inputs.buildable_sqft"],
            category=FormulaCategory.COSTS,
        ),
        FormulaDefinition(
            field_path="costs.gp_equity",
            name="Partner Equity",
            formula="sum(contributions)",
            inputs=[],
            category=FormulaCategory.COSTS,
        ),
        FormulaDefinition(
            field_path="costs.construction_tax_for_loan",
            name="Construction Period Property Tax",
            formula="construction_tax_monthly * construction_period_months",
            inputs=["inputs.construction_period_months"],
            category=FormulaCategory.COSTS,
        ),
        FormulaDefinition(
            field_path="costs.annual_expenses",
            name="Operating Expenses (Annual)",
            formula="stabilized_tax_annual + management_annual",
            inputs=[],
            category=FormulaCategory.COSTS,
            notes="Each term uses its WC/BC override when selected",
        ),
    ]

    # =========================================================================
    # FINANCING
    # =========================================================================
    financing = [
        FormulaDefinition(
            field_path="financing.loan_base",
            name="Construction Loan Base",
            formula="purchase_price + development_costs - gp_equity + construction_tax",
            inputs=["inputs.purchase_price", "costs.development_costs",
                    "costs.gp_equity", "costs.construction_tax_for_loan"],
            category=FormulaCategory.FINANCING,
        ),
        FormulaDefinition(
            field_path="financing.interest_accrued",
            name="Construction Interest",
            formula="loan_base * rate / 100 * months / 12",
            inputs=["financing.loan_base", "inputs.interest_rate_pct",
                    "inputs.construction_period_months"],
            category=FormulaCategory.FINANCING,
        ),
        FormulaDefinition(
            field_path="financing.construction_loan",
            name="Construction Loan",
            formula="max(0, loan_base + interest_accrued)",
            inputs=["financing.loan_base", "financing.interest_accrued"],
            category=FormulaCategory.FINANCING,
        ),
        FormulaDefinition(
            field_path="financing.loan_to_cost",
            name="Loan-to-Cost",
            formula="construction_loan / (construction_loan + gp_equity)",
            inputs=["financing.construction_loan", "costs.gp_equity"],
            category=FormulaCategory.FINANCING,
            unit="ratio",
            notes="Flagged above 75%",
        ),
        FormulaDefinition(
            field_path="financing.monthly_payment",
            name="Stabilized Monthly Payment",
            formula="pmt(rate / 12, years * 12, construction_loan + refinance)",
            inputs=["financing.construction_loan", "inputs.refinance_amount",
                    "inputs.stabilized_rate_pct", "inputs.amortization_years"],
            category=FormulaCategory.FINANCING,
        ),
        FormulaDefinition(
            field_path="financing.annual_debt_service",
            name="Annual Debt Service",
            formula="monthly_payment * 12",
            inputs=["financing.monthly_payment"],
            category=FormulaCategory.FINANCING,
        ),
    ]

    # =========================================================================
    # OPERATIONS
    # =========================================================================
    operations = [
        FormulaDefinition(
            field_path="operations.noi",
            name="Net Operating Income",
            formula="annual_revenue - annual_expenses",
            inputs=["revenue.annual_total", "costs.annual_expenses"],
            category=FormulaCategory.OPERATIONS,
        ),
        FormulaDefinition(
            field_path="operations.cap_rate_on_cost",
            name="Cap Rate on Cost",
            formula="noi / (construction_loan + gp_equity)",
            inputs=["operations.noi", "financing.construction_loan", "costs.gp_equity"],
            category=FormulaCategory.OPERATIONS,
            unit="ratio",
        ),
        FormulaDefinition(
            field_path="operations.dcr",
            name="Debt Coverage Ratio",
            formula="noi / annual_debt_service",
            inputs=["operations.noi", "financing.annual_debt_service"],
            category=FormulaCategory.OPERATIONS,
            unit="x",
            notes="Undefined when there is no debt service",
        ),
        FormulaDefinition(
            field_path="operations.available_cash_before",
            name="Available Cash (Before Refinance)",
            formula="noi - annual_debt_service(construction_loan)",
            inputs=["operations.noi", "financing.construction_loan"],
            category=FormulaCategory.OPERATIONS,
        ),
        FormulaDefinition(
            field_path="operations.available_cash_after",
            name="Available Cash (After Refinance)",
            formula="noi - annual_debt_service",
            inputs=["operations.noi", "financing.annual_debt_service"],
            category=FormulaCategory.OPERATIONS,
        ),
    ]

    # =========================================================================
    # EXIT (period = position in the cap rate table)
    # =========================================================================
    exit_formulas = [
        FormulaDefinition(
            field_path="exit.sale_price",
            name="Sale Price",
            formula="noi / (cap_rate / 100)",
            inputs=["operations.noi"],
            category=FormulaCategory.EXIT,
        ),
        FormulaDefinition(
            field_path="exit.money_in_hand",
            name="Money in Hand",
            formula="sale_price * (1 - sales_cost / 100) - (construction_loan + gp_equity)",
            inputs=["exit.sale_price", "inputs.sales_cost_pct",
                    "financing.construction_loan", "costs.gp_equity"],
            category=FormulaCategory.EXIT,
        ),
    ]

    # =========================================================================
    # DISTRIBUTION
    # =========================================================================
    distribution = [
        FormulaDefinition(
            field_path="distribution.lp_pool",
            name="LP Refinance Pool",
            formula="refinance * sum(lp_holding) / 100",
            inputs=["inputs.refinance_amount"],
            category=FormulaCategory.DISTRIBUTION,
        ),
        FormulaDefinition(
            field_path="distribution.gp_pool",
            name="GP Refinance Pool",
            formula="refinance * sum(gp_holding) / 100",
            inputs=["inputs.refinance_amount"],
            category=FormulaCategory.DISTRIBUTION,
            notes="Split to equalize residual cash-in per point of holding",
        ),
    ]

    # =========================================================================
    # CASH FLOW (period = month index)
    # =========================================================================
    cashflow = [
        FormulaDefinition(
            field_path="cashflow.total",
            name="Net Cash Flow",
            formula="revenues + soft_costs + hard_costs + carrying_costs",
            inputs=[],
            category=FormulaCategory.CASHFLOW,
        ),
        FormulaDefinition(
            field_path="cashflow.balance",
            name="Cumulative Balance",
            formula="previous_balance + total",
            inputs=["cashflow.total"],
            category=FormulaCategory.CASHFLOW,
        ),
    ]

    for definition in (inputs + revenue + costs + financing + operations
                       + exit_formulas + distribution + cashflow):
        FormulaRegistry.register(definition)
