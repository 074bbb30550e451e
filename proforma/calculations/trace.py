"""Calculation tracing for transparent audit trails.

Records the values actually used in each formula during a pro forma run so a
reported figure can be followed back to its inputs.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional

from .formula_registry import FormulaDefinition, FormulaRegistry


def format_value(value: Any, unit: str = "$") -> str:
    """Format a traced value for display in the unit of its formula."""
    if value is None:
        return "n/a"
    if not isinstance(value, (int, float)):
        return str(value)
    if unit == "%":
        return f"{value:,.2f}%"
    if unit == "ratio":
        return f"{value:.2%}"
    if unit == "x":
        return f"{value:.2f}x"
    if unit != "$":
        return f"{value:,.0f} {unit}"
    if abs(value) >= 1_000_000:
        return f"${value / 1_000_000:,.2f}M"
    if abs(value) >= 1_000:
        return f"${value / 1_000:,.1f}K"
    return f"${value:,.0f}"


@dataclass
class TracedValue:
    """A single traced calculation."""
    field_path: str
    value: Optional[float]
    formula_def: Optional[FormulaDefinition]
    input_values: Dict[str, Any]
    computed_formula: str  # Formula with values substituted
    timestamp: datetime = field(default_factory=datetime.now)
    period: Optional[int] = None
    notes: str = ""

    @property
    def unit(self) -> str:
        return self.formula_def.unit if self.formula_def else "$"

    def format_inputs(self) -> str:
        """Format input values as "name=value" pairs."""
        parts = []
        for name, val in self.input_values.items():
            input_def = FormulaRegistry.get(name)
            unit = input_def.unit if input_def else "$"
            parts.append(f"{name.split('.')[-1]}={format_value(val, unit)}")
        return ", ".join(parts)


class TraceContext:
    """Context manager for capturing calculation traces.

    Usage:
        with TraceContext() as ctx:
            result = calculate_proforma(project)
            # ctx.traces now holds every traced figure

    The active context lives in a class variable so trace() calls anywhere
    in the call stack can reach it.
    """
    _current: Optional['TraceContext'] = None

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self.traces: Dict[str, TracedValue] = {}
        self._previous: Optional['TraceContext'] = None
        self._start_time = datetime.now()

    def __enter__(self) -> 'TraceContext':
        self._previous = TraceContext._current
        TraceContext._current = self
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        TraceContext._current = self._previous
        self._previous = None

    @staticmethod
    def _key(field_path: str, period: Optional[int]) -> str:
        return f"{field_path}:{period}" if period is not None else field_path

    def trace(
        self,
        field_path: str,
        value: Optional[float],
        input_values: Dict[str, Any],
        period: Optional[int] = None,
        notes: str = "",
    ) -> None:
        """Record a traced calculation.

        Args:
            field_path: Registered formula path (e.g., "financing.loan_base")
            value: The calculated result
            input_values: Input field path -> value used in the calculation
            period: Month index or table position for repeated figures
            notes: Optional notes about this specific calculation
        """
        if not self.enabled:
            return

        formula_def = FormulaRegistry.get(field_path)
        unit = formula_def.unit if formula_def else "$"
        formula = formula_def.formula if formula_def else field_path
        if input_values:
            values = ", ".join(
                format_value(v, getattr(FormulaRegistry.get(k), "unit", "$"))
                for k, v in input_values.items()
            )
            computed = f"{formula} = f({values}) = {format_value(value, unit)}"
        else:
            computed = f"{formula} = {format_value(value, unit)}"

        self.traces[self._key(field_path, period)] = TracedValue(
            field_path=field_path,
            value=value,
            formula_def=formula_def,
            input_values=dict(input_values),
            computed_formula=computed,
            period=period,
            notes=notes,
        )

    def get_trace(self, field_path: str, period: Optional[int] = None) -> Optional[TracedValue]:
        """Get a specific trace by field path and optional period."""
        return self.traces.get(self._key(field_path, period))

    def get_traces_for_period(self, period: int) -> Dict[str, TracedValue]:
        """Get all traces for a specific period."""
        return {k: v for k, v in self.traces.items() if v.period == period}

    def get_traces_by_category(self, category: str) -> Dict[str, TracedValue]:
        """Get all traces whose formula is in the given category."""
        return {
            k: v for k, v in self.traces.items()
            if v.formula_def and v.formula_def.category.value == category
        }

    def get_calculation_chain(self, field_path: str) -> List[TracedValue]:
        """Traces feeding a value, ordered from raw inputs to the value itself."""
        chain: List[TracedValue] = []
        visited = set()

        def collect(path: str) -> None:
            if path in visited:
                return
            visited.add(path)
            traced = self.get_trace(path)
            if traced is None:
                return
            for input_path in traced.input_values:
                collect(input_path)
            chain.append(traced)

        collect(field_path)
        return chain

    def summary(self) -> str:
        """Text summary of the traces grouped by category."""
        lines = [
            f"Trace Summary ({len(self.traces)} calculations traced)",
            f"Duration: {datetime.now() - self._start_time}",
            "",
        ]

        by_category: Dict[str, List[TracedValue]] = {}
        for traced in self.traces.values():
            category = traced.formula_def.category.value if traced.formula_def else "Unknown"
            by_category.setdefault(category, []).append(traced)

        for category, traces in sorted(by_category.items()):
            lines.append(f"=== {category} ({len(traces)} traces) ===")
            for traced in traces[:5]:
                lines.append(f"  {traced.field_path}: {traced.computed_formula}")
            if len(traces) > 5:
                lines.append(f"  ... and {len(traces) - 5} more")
            lines.append("")

        return "\n".join(lines)

    @staticmethod
    def current() -> Optional['TraceContext']:
        """Get the active trace context, if any."""
        return TraceContext._current


def trace(
    field_path: str,
    value,
    input_values: Dict[str, Any],
    period: Optional[int] = None,
    notes: str = "",
):
    """Trace a calculation in the active context and return the value unchanged.

    Usable inline:
        noi = trace("operations.noi", revenue - expenses, {...})
    """
    ctx = TraceContext.current()
    if ctx:
        ctx.trace(field_path, value, input_values, period, notes)
    return value
