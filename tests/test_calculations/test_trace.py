"""Tests for the formula registry and calculation tracing."""

import pytest

from proforma.calculations.formula_registry import FormulaCategory, FormulaRegistry
from proforma.calculations.proforma import calculate_proforma
from proforma.calculations.trace import TraceContext, format_value, trace

pytestmark = pytest.mark.filterwarnings(
    "ignore::proforma.calculations.debt.LoanToCostWarning"
)


class TestFormulaRegistry:
    """Test the formula registry."""

    def test_formulas_are_registered(self):
        """Every traced figure has a definition."""
        all_formulas = FormulaRegistry.get_all()

        assert len(all_formulas) >= 30

    def test_can_get_formula_by_path(self):
        formula = FormulaRegistry.get("financing.loan_base")

        assert formula is not None
        assert formula.name == "Construction Loan Base"
        assert "gp_equity" in formula.formula

    def test_can_get_by_category(self):
        financing = FormulaRegistry.get_by_category(FormulaCategory.FINANCING)

        assert len(financing) > 0
        assert all(f.category == FormulaCategory.FINANCING for f in financing)

    def test_inputs_are_registered_paths(self):
        """Formula inputs only reference registered formulas."""
        all_formulas = FormulaRegistry.get_all()

        for formula in all_formulas.values():
            for input_path in formula.inputs:
                assert input_path in all_formulas, f"{formula.field_path} -> {input_path}"

    def test_dependents_and_ancestors(self):
        dependents = FormulaRegistry.get_dependents("financing.construction_loan")
        ancestors = FormulaRegistry.get_all_ancestors("operations.dcr")

        assert "financing.loan_to_cost" in dependents
        assert "inputs.purchase_price" in ancestors
        assert "revenue.monthly_total" in ancestors

    def test_descendants(self):
        descendants = FormulaRegistry.get_all_descendants("inputs.purchase_price")

        assert "exit.money_in_hand" in descendants

    def test_reset_repopulates_on_next_access(self, fresh_registry):
        assert fresh_registry._formulas == {}
        assert fresh_registry.get("operations.noi") is not None

    def test_dependency_graph(self):
        nx = pytest.importorskip("networkx")

        graph = FormulaRegistry.build_dependency_graph()

        assert isinstance(graph, nx.DiGraph)
        assert graph.has_edge("financing.loan_base", "financing.interest_accrued")
        assert nx.is_directed_acyclic_graph(graph)


class TestFormatValue:
    """Tests for unit-aware formatting."""

    @pytest.mark.parametrize("value,unit,expected", [
        (None, "$", "n/a"),
        (1_370_880, "$", "$1.37M"),
        (42_000, "$", "$42.0K"),
        (950, "$", "$950"),
        (6, "%", "6.00%"),
        (0.8205, "ratio", "82.05%"),
        (1.25, "x", "1.25x"),
        (24, "months", "24 months"),
    ])
    def test_units(self, value, unit, expected):
        assert format_value(value, unit) == expected


class TestTraceContext:
    """Test the trace context manager."""

    def test_trace_context_captures_traces(self):
        with TraceContext() as ctx:
            trace("operations.noi", 100.0, {"revenue.annual_total": 150.0})

        traced = ctx.traces["operations.noi"]
        assert traced.value == 100.0
        assert traced.input_values["revenue.annual_total"] == 150.0
        assert traced.formula_def.name == "Net Operating Income"

    def test_trace_context_can_be_disabled(self):
        with TraceContext(enabled=False) as ctx:
            trace("operations.noi", 100.0, {})

        assert ctx.traces == {}

    def test_trace_with_period(self):
        with TraceContext() as ctx:
            trace("cashflow.total", 10.0, {}, period=0)
            trace("cashflow.total", 20.0, {}, period=1)

        assert ctx.get_trace("cashflow.total", 1).value == 20.0
        assert len(ctx.get_traces_for_period(0)) == 1

    def test_trace_returns_value(self):
        assert trace("operations.noi", 42.0, {}) == 42.0

    def test_trace_outside_context_is_noop(self):
        assert TraceContext.current() is None
        trace("operations.noi", 1.0, {})
        assert TraceContext.current() is None

    def test_nested_context_restores_outer(self):
        """Leaving an inner context reactivates the outer one."""
        with TraceContext() as outer:
            with TraceContext() as inner:
                trace("operations.noi", 1.0, {})
            trace("operations.dcr", 1.5, {})

        assert TraceContext.current() is None
        assert "operations.noi" in inner.traces
        assert "operations.dcr" in outer.traces
        assert "operations.noi" not in outer.traces

    def test_computed_formula_uses_units(self):
        with TraceContext() as ctx:
            trace("operations.dcr", 1.25, {"operations.noi": 125_000})

        computed = ctx.get_trace("operations.dcr").computed_formula
        assert "1.25x" in computed
        assert "$125.0K" in computed

    def test_format_inputs_uses_input_units(self):
        with TraceContext() as ctx:
            trace("operations.dcr", 1.25, {
                "operations.noi": 125_000,
                "financing.annual_debt_service": 100_000,
            })

        inputs = ctx.get_trace("operations.dcr").format_inputs()
        assert inputs == "noi=$125.0K, annual_debt_service=$100.0K"

    def test_traces_by_category(self):
        with TraceContext() as ctx:
            trace("operations.noi", 100.0, {})
            trace("financing.loan_base", 50.0, {})
            trace("not.registered", 1.0, {})

        operations = ctx.get_traces_by_category(FormulaCategory.OPERATIONS.value)

        assert list(operations) == ["operations.noi"]
        assert ctx.get_traces_by_category(FormulaCategory.EXIT.value) == {}


class TestTraceIntegration:
    """Test tracing through the full pro forma."""

    def test_calculate_proforma_captures_traces(self, sample_project, sample_assumptions, today):
        result = calculate_proforma(sample_project, None, sample_assumptions, today=today)

        assert result.trace_context is not None
        assert len(result.trace_context.traces) > 100

    def test_key_formulas_are_traced(self, sample_project, sample_assumptions, today):
        ctx = calculate_proforma(sample_project, None, sample_assumptions,
                                 today=today).trace_context

        for path in (
            "revenue.monthly_total",
            "costs.development_costs",
            "financing.loan_base",
            "financing.construction_loan",
            "financing.loan_to_cost",
            "operations.noi",
            "operations.dcr",
            "distribution.gp_pool",
        ):
            assert ctx.get_trace(path) is not None, f"{path} not traced"
        assert ctx.get_trace("exit.sale_price", 0) is not None
        assert ctx.get_trace("cashflow.balance", 59) is not None

    def test_traced_values_match_results(self, sample_project, sample_assumptions, today):
        result = calculate_proforma(sample_project, None, sample_assumptions, today=today)
        ctx = result.trace_context

        assert ctx.get_trace("financing.construction_loan").value == pytest.approx(
            result.construction_loan.loan_amount
        )
        assert ctx.get_trace("operations.noi").value == pytest.approx(result.noi)
        assert ctx.get_trace("cashflow.balance", 59).value == pytest.approx(
            result.cashflow.balance[-1]
        )

    def test_calculation_chain_reaches_inputs(self, sample_project, sample_assumptions, today):
        ctx = calculate_proforma(sample_project, None, sample_assumptions,
                                 today=today).trace_context

        chain = [t.field_path for t in ctx.get_calculation_chain("financing.construction_loan")]

        assert chain[-1] == "financing.construction_loan"
        assert "inputs.purchase_price" in chain
        assert chain.index("financing.loan_base") < chain.index("financing.construction_loan")

    def test_summary_groups_by_category(self, sample_project, sample_assumptions, today):
        ctx = calculate_proforma(sample_project, None, sample_assumptions,
                                 today=today).trace_context

        summary = ctx.summary()

        assert "=== Financing" in summary
        assert "=== Cash Flow" in summary
