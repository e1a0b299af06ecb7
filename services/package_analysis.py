"""Package-level aggregation and the cross-technology comparison table."""
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any, Dict, List, Mapping, Sequence

import pandas as pd

from services.calculator_core import (
    SPACE_HEATING,
    WATER_HEATING,
    ParameterSet,
    TechnologyResult,
    calculate_results,
)
from utils.economics import _ensure_finite, safe_divide

VIEW_MODES = ("consumer", "program")
DEFAULT_BUNDLE_DISCOUNT_PCT = 10.0


@dataclass(frozen=True)
class CombinedResult:
    """Totals for installing both heat pumps together.

    The bundle discount is treated as extra incentive dollars in
    ``total_incentive`` and as a cost reduction in ``combined_additional_cost``.
    """

    bundle_discount_amount: float
    total_incentive: float
    net_emissions_reduction: float
    lifetime_emissions_reduction: float
    cost_per_mtco2e: float
    lifetime_cost_per_mtco2e: float
    combined_additional_cost: float
    combined_annual_savings: float
    payback_period: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class ComparisonRow:
    """One technology in the benchmark table.

    Units:
    - ``annual_reduction`` / ``lifetime_reduction``: MTCO2e.
    - ``incentive_cost``: USD.
    - ``cost_per_ton`` / ``lifetime_cost_per_ton``: USD per MTCO2e.
    - ``payback``: years.
    """

    name: str
    annual_reduction: float
    lifetime_reduction: float
    incentive_cost: float
    cost_per_ton: float
    lifetime_cost_per_ton: float
    payback: float
    is_reference: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


# Benchmarks from the city's existing incentive programs; not derived.
EV_REFERENCE_ROW = ComparisonRow(
    name="EV (Reference)",
    annual_reduction=2.72,
    lifetime_reduction=32.64,
    incentive_cost=1000.0,
    cost_per_ton=367.5,
    lifetime_cost_per_ton=30.63,
    payback=3.5,
    is_reference=True,
)
EBIKE_REFERENCE_ROW = ComparisonRow(
    name="E-Bike (Reference)",
    annual_reduction=0.567,
    lifetime_reduction=5.67,
    incentive_cost=300.0,
    cost_per_ton=529.1,
    lifetime_cost_per_ton=52.91,
    payback=2.5,
    is_reference=True,
)
REFERENCE_ROWS = (EV_REFERENCE_ROW, EBIKE_REFERENCE_ROW)


def combine_results(
    space_heating: TechnologyResult,
    water_heating: TechnologyResult,
    space_incentive: float,
    water_incentive: float,
    bundle_discount_percent: float,
) -> CombinedResult:
    """Merge two technology results into package totals."""

    _ensure_finite(float(bundle_discount_percent), "bundle_discount_percent")

    bundle_discount_amount = (space_incentive + water_incentive) * (bundle_discount_percent / 100)
    total_incentive = space_incentive + water_incentive + bundle_discount_amount

    net_emissions_reduction = (
        space_heating.net_emissions_reduction + water_heating.net_emissions_reduction
    )
    lifetime_emissions_reduction = (
        space_heating.lifetime_emissions_reduction + water_heating.lifetime_emissions_reduction
    )

    combined_additional_cost = (
        space_heating.additional_cost + water_heating.additional_cost
    ) - bundle_discount_amount
    combined_annual_savings = space_heating.annual_savings + water_heating.annual_savings

    return CombinedResult(
        bundle_discount_amount=bundle_discount_amount,
        total_incentive=total_incentive,
        net_emissions_reduction=net_emissions_reduction,
        lifetime_emissions_reduction=lifetime_emissions_reduction,
        cost_per_mtco2e=safe_divide(total_incentive, net_emissions_reduction),
        lifetime_cost_per_mtco2e=safe_divide(total_incentive, lifetime_emissions_reduction),
        combined_additional_cost=combined_additional_cost,
        combined_annual_savings=combined_annual_savings,
        payback_period=safe_divide(combined_additional_cost, combined_annual_savings),
    )


def _technology_row(name: str, result: TechnologyResult, incentive: float) -> ComparisonRow:
    return ComparisonRow(
        name=name,
        annual_reduction=result.net_emissions_reduction,
        lifetime_reduction=result.lifetime_emissions_reduction,
        incentive_cost=incentive,
        cost_per_ton=safe_divide(incentive, result.net_emissions_reduction),
        lifetime_cost_per_ton=safe_divide(incentive, result.lifetime_emissions_reduction),
        payback=result.simple_payback_with_incentive,
    )


def build_comparison_rows(
    space_heating: TechnologyResult,
    water_heating: TechnologyResult,
    space_incentive: float,
    water_incentive: float,
) -> List[ComparisonRow]:
    """Return the two heat-pump rows followed by the EV and e-bike benchmarks."""

    return [
        _technology_row("Space Heating HP", space_heating, space_incentive),
        _technology_row("Water Heating HP", water_heating, water_incentive),
        *REFERENCE_ROWS,
    ]


def comparison_frame(rows: Sequence[ComparisonRow]) -> pd.DataFrame:
    """Tabulate comparison rows with one column per metric."""

    columns = [
        "name",
        "annual_reduction",
        "lifetime_reduction",
        "incentive_cost",
        "cost_per_ton",
        "lifetime_cost_per_ton",
        "payback",
        "is_reference",
    ]
    if not rows:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([row.to_dict() for row in rows], columns=columns)


def incentive_distribution(rows: Sequence[ComparisonRow]) -> pd.DataFrame:
    """Return each row's share of total incentive dollars for pie charts."""

    df = pd.DataFrame(
        {
            "name": [row.name for row in rows],
            "incentive_cost": [float(row.incentive_cost) for row in rows],
        }
    )
    total = float(df["incentive_cost"].sum()) if not df.empty else 0.0
    df["share"] = df["incentive_cost"].map(lambda value: safe_divide(value, total))
    return df


@dataclass(frozen=True)
class CalculatorInputs:
    """Everything the calculator needs for one recompute (the persisted blob)."""

    space_heating: ParameterSet
    water_heating: ParameterSet
    bundle_discount_percent: float = DEFAULT_BUNDLE_DISCOUNT_PCT
    view_mode: str = "consumer"

    def __post_init__(self) -> None:
        if self.view_mode not in VIEW_MODES:
            raise ValueError(f"view_mode must be one of {VIEW_MODES}")

    def for_technology(self, technology: str) -> ParameterSet:
        if technology == SPACE_HEATING:
            return self.space_heating
        if technology == WATER_HEATING:
            return self.water_heating
        raise ValueError(f"Unsupported technology: {technology}")

    def to_dict(self) -> Dict[str, Any]:
        return {
            SPACE_HEATING: self.space_heating.to_dict(),
            WATER_HEATING: self.water_heating.to_dict(),
            "bundle_discount_percent": float(self.bundle_discount_percent),
            "view_mode": self.view_mode,
        }

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "CalculatorInputs":
        """Parse persisted inputs; camelCase keys from older blobs are accepted."""

        if not isinstance(payload, Mapping):
            raise ValueError("Inputs must be an object with space_heating and water_heating sections")
        space = payload.get(SPACE_HEATING, payload.get("spaceHeating"))
        water = payload.get(WATER_HEATING, payload.get("waterHeating"))
        if space is None or water is None:
            raise ValueError("Inputs must include space_heating and water_heating parameters")
        bundle = payload.get(
            "bundle_discount_percent", payload.get("bundleDiscount", DEFAULT_BUNDLE_DISCOUNT_PCT)
        )
        return cls(
            space_heating=ParameterSet.from_dict(space),
            water_heating=ParameterSet.from_dict(water),
            bundle_discount_percent=float(bundle),
            view_mode=str(payload.get("view_mode", payload.get("viewMode", "consumer"))),
        )


@dataclass(frozen=True)
class CalculatorResults:
    space_heating: TechnologyResult
    water_heating: TechnologyResult
    combined: CombinedResult
    comparison: List[ComparisonRow] = field(default_factory=list)

    def for_technology(self, technology: str) -> TechnologyResult:
        return self.space_heating if technology == SPACE_HEATING else self.water_heating

    def to_dict(self) -> Dict[str, Any]:
        return {
            SPACE_HEATING: self.space_heating.to_dict(),
            WATER_HEATING: self.water_heating.to_dict(),
            "combined": self.combined.to_dict(),
            "comparison": [row.to_dict() for row in self.comparison],
        }


def run_calculator(inputs: CalculatorInputs) -> CalculatorResults:
    """Recompute every derived metric from one set of inputs."""

    space = calculate_results(SPACE_HEATING, inputs.space_heating)
    water = calculate_results(WATER_HEATING, inputs.water_heating)
    space_incentive = inputs.space_heating.current_incentive
    water_incentive = inputs.water_heating.current_incentive

    return CalculatorResults(
        space_heating=space,
        water_heating=water,
        combined=combine_results(
            space, water, space_incentive, water_incentive, inputs.bundle_discount_percent
        ),
        comparison=build_comparison_rows(space, water, space_incentive, water_incentive),
    )


__all__ = [
    "VIEW_MODES",
    "DEFAULT_BUNDLE_DISCOUNT_PCT",
    "CombinedResult",
    "ComparisonRow",
    "EV_REFERENCE_ROW",
    "EBIKE_REFERENCE_ROW",
    "REFERENCE_ROWS",
    "CalculatorInputs",
    "CalculatorResults",
    "combine_results",
    "build_comparison_rows",
    "comparison_frame",
    "incentive_distribution",
    "run_calculator",
]
