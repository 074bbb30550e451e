"""Scenario overrides and financing assumptions passed into the engine.

The engine holds no state of its own. Everything a user can tweak on top of
the persisted project rows (WC/BC rents, occupancy, selected scenario,
financing terms) is carried in the immutable values defined here.
"""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Mapping, Optional

from .lookups import CASHFLOW_MONTHS, RevenueKind, Scenario
from .rows import Number, RevenueLineRow


def _parse_scenario(value: Any) -> Scenario:
    """Read a saved scenario code; anything unrecognized selects the base case."""
    if isinstance(value, Scenario):
        return value
    try:
        return Scenario(value)
    except ValueError:
        return Scenario.BASE


@dataclass(frozen=True)
class RevenueOverride:
    """User-entered WC/BC rents, occupancy and scenario for one revenue row."""

    monthly_rent_wc: Number = None  # Blank or zero = use base rent
    monthly_rent_bc: Number = None
    occupancy: Number = None  # Percent; None = 100 - vacancy
    scenario: Scenario = Scenario.BASE

    def to_dict(self) -> Dict[str, Any]:
        return {
            "monthlyRentWC": self.monthly_rent_wc,
            "monthlyRentBC": self.monthly_rent_bc,
            "occupancy": self.occupancy,
            "scenario": self.scenario.value,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "RevenueOverride":
        return cls(
            monthly_rent_wc=data.get("monthlyRentWC", data.get("monthly_rent_wc")),
            monthly_rent_bc=data.get("monthlyRentBC", data.get("monthly_rent_bc")),
            occupancy=data.get("occupancy"),
            scenario=_parse_scenario(data.get("scenario")),
        )


@dataclass(frozen=True)
class ScenarioOverride:
    """WC/BC alternatives for an aggregated line item (tax, management, build cost)."""

    wc: Number = None
    bc: Number = None
    scenario: Scenario = Scenario.BASE

    def to_dict(self) -> Dict[str, Any]:
        return {"wc": self.wc, "bc": self.bc, "scenario": self.scenario.value}

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ScenarioOverride":
        data = data or {}
        return cls(
            wc=data.get("wc"),
            bc=data.get("bc"),
            scenario=_parse_scenario(data.get("scenario")),
        )


@dataclass(frozen=True)
class ScenarioOverrides:
    """All scenario state for one project, keyed by row id per revenue family."""

    apartments: Dict[str, RevenueOverride] = field(default_factory=dict)
    retail: Dict[str, RevenueOverride] = field(default_factory=dict)
    parking: Dict[str, RevenueOverride] = field(default_factory=dict)
    build_cost: ScenarioOverride = field(default_factory=ScenarioOverride)  # $/sqft
    management: ScenarioOverride = field(default_factory=ScenarioOverride)  # Annual $
    stabilized_tax: ScenarioOverride = field(default_factory=ScenarioOverride)  # Annual $

    def for_kind(self, kind: RevenueKind) -> Dict[str, RevenueOverride]:
        """Get the override map for a revenue family."""
        return {
            RevenueKind.APARTMENT: self.apartments,
            RevenueKind.RETAIL: self.retail,
            RevenueKind.PARKING: self.parking,
        }[kind]

    def for_row(self, row: RevenueLineRow) -> Optional[RevenueOverride]:
        """Get the override stored for a row, or None if the user never set one."""
        return self.for_kind(row.kind).get(row.id)

    def with_revenue_override(
        self, row: RevenueLineRow, override: RevenueOverride
    ) -> "ScenarioOverrides":
        """Return a copy with one revenue override replaced."""
        updated = dict(self.for_kind(row.kind))
        updated[row.id] = override
        key = {
            RevenueKind.APARTMENT: "apartments",
            RevenueKind.RETAIL: "retail",
            RevenueKind.PARKING: "parking",
        }[row.kind]
        return replace(self, **{key: updated})

    def to_dict(self) -> Dict[str, Any]:
        """Serialize to the saved-preferences shape used by the application."""
        return {
            "apartments": {k: v.to_dict() for k, v in self.apartments.items()},
            "retail": {k: v.to_dict() for k, v in self.retail.items()},
            "parking": {k: v.to_dict() for k, v in self.parking.items()},
            "buildCostOverride": self.build_cost.to_dict(),
            "managementOverride": self.management.to_dict(),
            "stabilizedTaxOverride": self.stabilized_tax.to_dict(),
        }

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "ScenarioOverrides":
        data = data or {}

        def revenue_map(key: str) -> Dict[str, RevenueOverride]:
            return {
                str(row_id): RevenueOverride.from_dict(value)
                for row_id, value in (data.get(key) or {}).items()
            }

        return cls(
            apartments=revenue_map("apartments"),
            retail=revenue_map("retail"),
            parking=revenue_map("parking"),
            build_cost=ScenarioOverride.from_dict(data.get("buildCostOverride")),
            management=ScenarioOverride.from_dict(data.get("managementOverride")),
            stabilized_tax=ScenarioOverride.from_dict(data.get("stabilizedTaxOverride")),
        )


@dataclass(frozen=True)
class FinancingAssumptions:
    """Global financing terms applied to the whole project."""

    # === Construction ===
    construction_period_months: Number = 24
    interest_rate_pct: Number = 6.25  # Construction loan, simple interest

    # === Stabilized / refinance ===
    stabilized_rate_pct: Number = 6.25
    amortization_years: Number = 30
    refinance_amount: Number = 0.0  # Cash-out on top of the construction loan

    # === Exit ===
    sales_cost_pct: Number = 5.0

    # === Projection ===
    cashflow_months: int = CASHFLOW_MONTHS

    @classmethod
    def from_dict(cls, data: Optional[Mapping[str, Any]]) -> "FinancingAssumptions":
        """Read assumptions from camelCase preferences, keeping defaults for gaps."""
        data = data or {}
        defaults = cls()
        keys = {
            "construction_period_months": "constructionPeriodMonths",
            "interest_rate_pct": "interestRatePct",
            "stabilized_rate_pct": "stabilizedRatePct",
            "amortization_years": "amortizationYears",
            "refinance_amount": "refinanceAmount",
            "sales_cost_pct": "salesCostPct",
        }
        values = {}
        for attr, camel in keys.items():
            value = data.get(camel, data.get(attr))
            values[attr] = getattr(defaults, attr) if value is None else value
        return cls(**values)
