"""Emissions and cost engine comparing gas equipment with heat-pump alternatives.

Everything here is pure and free of Streamlit/UI dependencies so it can be
reused from the API, notebooks or tests. One :class:`ParameterSet` describes a
single end use (space heating or water heating); :func:`calculate_results`
turns it into a :class:`TechnologyResult`.
"""
from __future__ import annotations

import logging
import math
from dataclasses import asdict, dataclass, fields, replace
from typing import Any, Dict, Mapping, Tuple

from utils.economics import (
    UNDEFINED,
    _ensure_finite,
    _ensure_non_negative_finite,
    compute_escalated_npv,
    escalation_multiplier,
    safe_divide,
)

ELECTRICITY_EMISSIONS_FACTOR = 0.000015742  # MTCO2e per kWh
GAS_EMISSIONS_FACTOR = 0.005  # MTCO2e per therm
THERM_TO_KWH = 29.3
INCENTIVE_RATES_PER_MT: Tuple[float, float, float] = (367.5, 551.25, 735.0)
INCENTIVE_LABELS: Tuple[str, str, str] = ("1-year value", "Mid-range value", "Lifecycle value")

SPACE_HEATING = "space_heating"
WATER_HEATING = "water_heating"
TECHNOLOGIES: Tuple[str, str] = (SPACE_HEATING, WATER_HEATING)
TECHNOLOGY_LABELS: Dict[str, str] = {
    SPACE_HEATING: "Space Heating",
    WATER_HEATING: "Water Heating",
}
_TECHNOLOGY_ALIASES = {
    "spaceHeating": SPACE_HEATING,
    "waterHeating": WATER_HEATING,
}


class InvalidParameterError(ValueError):
    """Raised when a parameter set cannot produce meaningful results."""


@dataclass(frozen=True)
class ParameterSet:
    """Cost, efficiency and rate assumptions for one end use.

    Monetary values are USD. ``usage_percentage``, ``discount_rate`` and
    ``future_utility_rate_increase`` are percents (e.g., 53 = 53%).
    ``gas_equipment_efficiency`` is informational and does not enter the
    emissions math.
    """

    gas_equipment_cost: float
    gas_installation_cost: float
    heat_pump_equipment_cost: float
    heat_pump_installation_cost: float
    current_incentive: float
    federal_tax_credit: float
    annual_gas_usage: float  # therms/yr
    usage_percentage: float
    gas_equipment_efficiency: float
    heat_pump_efficiency_factor: float  # COP or energy factor
    electricity_rate: float  # USD/kWh
    gas_rate: float  # USD/therm
    equipment_lifespan: int  # years
    discount_rate: float
    annual_maintenance_gas: float
    annual_maintenance_hp: float
    future_utility_rate_increase: float

    @classmethod
    def from_dict(cls, payload: Mapping[str, Any]) -> "ParameterSet":
        """Build a parameter set from snake_case or camelCase keys.

        Unknown keys are ignored so persisted blobs from older layouts still load.
        """

        if not isinstance(payload, Mapping):
            raise InvalidParameterError("Parameters must be an object of name/value pairs")
        values: Dict[str, Any] = {}
        for key, raw in payload.items():
            name = resolve_parameter_name(key, strict=False)
            if name is None:
                continue
            values[name] = raw

        missing = [f.name for f in fields(cls) if f.name not in values]
        if missing:
            raise InvalidParameterError(f"Missing parameters: {', '.join(missing)}")

        lifespan = values.pop("equipment_lifespan")
        try:
            numeric = {name: float(value) for name, value in values.items()}
            lifespan_value = float(lifespan)
        except (TypeError, ValueError) as exc:
            raise InvalidParameterError(f"Parameters must be numeric: {exc}") from exc
        if not lifespan_value.is_integer():
            raise InvalidParameterError("equipment_lifespan must be a whole number of years")
        return cls(equipment_lifespan=int(lifespan_value), **numeric)

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    def replace(self, **changes: Any) -> "ParameterSet":
        return replace(self, **changes)


PARAMETER_NAMES: Tuple[str, ...] = tuple(f.name for f in fields(ParameterSet))


def _to_camel(name: str) -> str:
    head, *rest = name.split("_")
    return head + "".join(part.capitalize() for part in rest)


# camelCase spellings plus the per-technology names used by earlier versions
# of the calculator (e.g., heatPumpCOP vs heatPumpWaterHeaterEF).
PARAMETER_ALIASES: Dict[str, str] = {_to_camel(name): name for name in PARAMETER_NAMES}
PARAMETER_ALIASES.update(
    {
        "annualMaintenanceHP": "annual_maintenance_hp",
        "gasHeaterCost": "gas_equipment_cost",
        "gasWaterHeaterCost": "gas_equipment_cost",
        "heatPumpCost": "heat_pump_equipment_cost",
        "heatPumpWaterHeaterCost": "heat_pump_equipment_cost",
        "heatingPercentage": "usage_percentage",
        "waterHeatingPercentage": "usage_percentage",
        "gasFurnaceEfficiency": "gas_equipment_efficiency",
        "gasWaterHeaterEfficiency": "gas_equipment_efficiency",
        "heatPumpCOP": "heat_pump_efficiency_factor",
        "heatPumpWaterHeaterEF": "heat_pump_efficiency_factor",
    }
)


def resolve_parameter_name(name: str, strict: bool = True) -> str | None:
    """Map a snake_case or alias parameter name onto a :class:`ParameterSet` field."""

    if name in PARAMETER_NAMES:
        return name
    if name in PARAMETER_ALIASES:
        return PARAMETER_ALIASES[name]
    if strict:
        raise ValueError(f"Unknown parameter: {name}")
    return None


def normalize_technology(category: str) -> str:
    """Return the canonical technology key, accepting camelCase spellings."""

    key = _TECHNOLOGY_ALIASES.get(category, category)
    if key not in TECHNOLOGIES:
        raise ValueError(f"Unsupported technology: {category}")
    return key


@dataclass(frozen=True)
class YearSnapshot:
    """Cumulative costs and emissions at the end of ``year`` (year 0 = install)."""

    year: int
    cumulative_cost_gas: float
    cumulative_cost_hp: float
    savings: float
    annual_savings: float
    cumulative_emissions_gas: float
    cumulative_emissions_hp: float
    cumulative_emissions_savings: float


@dataclass(frozen=True)
class TechnologyResult:
    """Derived metrics for one technology.

    Payback fields hold :data:`utils.economics.UNDEFINED` (NaN) when annual
    savings are zero. Negative reductions, paybacks and NPVs are valid outcomes.
    """

    therms: float
    kwh_equivalent: float
    annual_emissions_gas: float
    annual_emissions_hp: float
    net_emissions_reduction: float
    lifetime_emissions_reduction: float
    annual_cost_gas: float
    annual_cost_hp: float
    annual_savings: float
    simple_payback_years: float
    simple_payback_no_incentive: float
    net_present_value: float
    optimal_incentives: Tuple[float, float, float]
    year_by_year: Tuple[YearSnapshot, ...]
    initial_cost_gas: float
    initial_cost_hp: float
    additional_cost: float

    @property
    def simple_payback_with_incentive(self) -> float:
        return self.simple_payback_years

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["optimal_incentives"] = list(self.optimal_incentives)
        data["year_by_year"] = [asdict(snapshot) for snapshot in self.year_by_year]
        return data


def validate_parameters(params: ParameterSet) -> None:
    """Raise :class:`InvalidParameterError` for inputs that would yield nonsense."""

    lifespan = params.equipment_lifespan
    if isinstance(lifespan, bool) or not isinstance(lifespan, int):
        raise InvalidParameterError("equipment_lifespan must be an integer number of years")
    if lifespan < 1:
        raise InvalidParameterError("equipment_lifespan must be at least 1 year")

    try:
        for name in PARAMETER_NAMES:
            value = getattr(params, name)
            if isinstance(value, bool) or not isinstance(value, (int, float)):
                raise InvalidParameterError(f"{name} must be numeric")
            _ensure_finite(float(value), name)
        _ensure_non_negative_finite(params.annual_gas_usage, "annual_gas_usage")
        _ensure_non_negative_finite(params.usage_percentage, "usage_percentage")
    except InvalidParameterError:
        raise
    except ValueError as exc:
        raise InvalidParameterError(str(exc)) from exc

    if params.heat_pump_efficiency_factor <= 0:
        raise InvalidParameterError("heat_pump_efficiency_factor must be positive")
    if params.discount_rate <= -100:
        raise InvalidParameterError("discount_rate must be greater than -100%")


def _build_year_by_year(
    params: ParameterSet,
    therms: float,
    kwh_equivalent: float,
    initial_cost_gas: float,
    initial_cost_hp: float,
    annual_savings: float,
    annual_emissions_gas: float,
    annual_emissions_hp: float,
    net_emissions_reduction: float,
) -> Tuple[YearSnapshot, ...]:
    """Accumulate escalated operating costs and linear emissions for years 0..lifespan."""

    snapshots = []
    cumulative_cost_gas = initial_cost_gas
    cumulative_cost_hp = initial_cost_hp
    current_savings = annual_savings

    for year in range(0, params.equipment_lifespan + 1):
        year_savings = 0.0
        if year > 0:
            # Year 1 keeps the base savings; escalation compounds from year 2.
            if year > 1:
                current_savings *= 1 + params.future_utility_rate_increase / 100
            year_savings = current_savings
            multiplier = escalation_multiplier(params.future_utility_rate_increase, year)
            cumulative_cost_gas += therms * params.gas_rate * multiplier + params.annual_maintenance_gas
            cumulative_cost_hp += (
                kwh_equivalent * params.electricity_rate * multiplier + params.annual_maintenance_hp
            )

        snapshots.append(
            YearSnapshot(
                year=year,
                cumulative_cost_gas=cumulative_cost_gas,
                cumulative_cost_hp=cumulative_cost_hp,
                savings=cumulative_cost_gas - cumulative_cost_hp,
                annual_savings=year_savings,
                cumulative_emissions_gas=year * annual_emissions_gas,
                cumulative_emissions_hp=year * annual_emissions_hp,
                cumulative_emissions_savings=year * net_emissions_reduction,
            )
        )

    return tuple(snapshots)


def calculate_results(category: str, params: ParameterSet) -> TechnologyResult:
    """Compute emissions, costs, payback, NPV and incentives for one technology.

    Parameters
    ----------
    category
        ``"space_heating"`` or ``"water_heating"`` (camelCase accepted). The
        category selects labels only; the math is identical for both.
    params
        Validated assumptions; see :func:`validate_parameters`.
    """

    normalize_technology(category)
    validate_parameters(params)

    therms = params.annual_gas_usage * (params.usage_percentage / 100)
    annual_emissions_gas = therms * GAS_EMISSIONS_FACTOR

    kwh_equivalent = (therms * THERM_TO_KWH) / params.heat_pump_efficiency_factor
    annual_emissions_hp = kwh_equivalent * ELECTRICITY_EMISSIONS_FACTOR

    net_emissions_reduction = annual_emissions_gas - annual_emissions_hp
    lifetime_emissions_reduction = net_emissions_reduction * params.equipment_lifespan

    annual_cost_gas = therms * params.gas_rate + params.annual_maintenance_gas
    annual_cost_hp = kwh_equivalent * params.electricity_rate + params.annual_maintenance_hp
    annual_savings = annual_cost_gas - annual_cost_hp

    initial_cost_gas = params.gas_equipment_cost + params.gas_installation_cost
    # Incentives and credits only reduce the heat pump side.
    initial_cost_hp = (
        params.heat_pump_equipment_cost
        + params.heat_pump_installation_cost
        - params.current_incentive
        - params.federal_tax_credit
    )
    additional_cost = initial_cost_hp - initial_cost_gas
    additional_cost_no_incentive = (
        params.heat_pump_equipment_cost + params.heat_pump_installation_cost
    ) - initial_cost_gas

    simple_payback_years = safe_divide(additional_cost, annual_savings)
    simple_payback_no_incentive = safe_divide(additional_cost_no_incentive, annual_savings)
    if math.isnan(simple_payback_years):
        logging.getLogger(__name__).debug(
            "%s: annual savings are zero; payback is undefined", category
        )

    net_present_value = compute_escalated_npv(
        additional_cost,
        annual_savings,
        params.equipment_lifespan,
        params.discount_rate,
        params.future_utility_rate_increase,
    )

    optimal_incentives = tuple(
        round(net_emissions_reduction * rate, 2) for rate in INCENTIVE_RATES_PER_MT
    )

    year_by_year = _build_year_by_year(
        params,
        therms,
        kwh_equivalent,
        initial_cost_gas,
        initial_cost_hp,
        annual_savings,
        annual_emissions_gas,
        annual_emissions_hp,
        net_emissions_reduction,
    )

    return TechnologyResult(
        therms=therms,
        kwh_equivalent=kwh_equivalent,
        annual_emissions_gas=annual_emissions_gas,
        annual_emissions_hp=annual_emissions_hp,
        net_emissions_reduction=net_emissions_reduction,
        lifetime_emissions_reduction=lifetime_emissions_reduction,
        annual_cost_gas=annual_cost_gas,
        annual_cost_hp=annual_cost_hp,
        annual_savings=annual_savings,
        simple_payback_years=simple_payback_years,
        simple_payback_no_incentive=simple_payback_no_incentive,
        net_present_value=net_present_value,
        optimal_incentives=optimal_incentives,
        year_by_year=year_by_year,
        initial_cost_gas=initial_cost_gas,
        initial_cost_hp=initial_cost_hp,
        additional_cost=additional_cost,
    )


__all__ = [
    "ELECTRICITY_EMISSIONS_FACTOR",
    "GAS_EMISSIONS_FACTOR",
    "THERM_TO_KWH",
    "INCENTIVE_RATES_PER_MT",
    "INCENTIVE_LABELS",
    "SPACE_HEATING",
    "WATER_HEATING",
    "TECHNOLOGIES",
    "TECHNOLOGY_LABELS",
    "PARAMETER_NAMES",
    "PARAMETER_ALIASES",
    "InvalidParameterError",
    "ParameterSet",
    "TechnologyResult",
    "YearSnapshot",
    "UNDEFINED",
    "calculate_results",
    "normalize_technology",
    "resolve_parameter_name",
    "validate_parameters",
]
