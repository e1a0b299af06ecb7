"""Default assumptions and input metadata for the calculator forms."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Tuple

from services.calculator_core import SPACE_HEATING, WATER_HEATING, ParameterSet
from services.package_analysis import DEFAULT_BUNDLE_DISCOUNT_PCT, CalculatorInputs

DEFAULT_SPACE_HEATING = ParameterSet(
    gas_equipment_cost=3000.0,
    gas_installation_cost=1000.0,
    heat_pump_equipment_cost=7000.0,
    heat_pump_installation_cost=1500.0,
    current_incentive=700.0,
    federal_tax_credit=2000.0,
    annual_gas_usage=567.0,
    usage_percentage=53.0,
    gas_equipment_efficiency=0.85,
    heat_pump_efficiency_factor=3.0,
    electricity_rate=0.11,
    gas_rate=1.50,
    equipment_lifespan=15,
    discount_rate=3.0,
    annual_maintenance_gas=150.0,
    annual_maintenance_hp=100.0,
    future_utility_rate_increase=2.0,
)

DEFAULT_WATER_HEATING = ParameterSet(
    gas_equipment_cost=1200.0,
    gas_installation_cost=600.0,
    heat_pump_equipment_cost=2000.0,
    heat_pump_installation_cost=500.0,
    current_incentive=300.0,
    federal_tax_credit=600.0,
    annual_gas_usage=567.0,
    usage_percentage=20.0,
    gas_equipment_efficiency=0.65,
    heat_pump_efficiency_factor=3.5,
    electricity_rate=0.11,
    gas_rate=1.50,
    equipment_lifespan=12,
    discount_rate=3.0,
    annual_maintenance_gas=50.0,
    annual_maintenance_hp=25.0,
    future_utility_rate_increase=2.0,
)


def default_inputs() -> CalculatorInputs:
    return CalculatorInputs(
        space_heating=DEFAULT_SPACE_HEATING,
        water_heating=DEFAULT_WATER_HEATING,
        bundle_discount_percent=DEFAULT_BUNDLE_DISCOUNT_PCT,
        view_mode="consumer",
    )


@dataclass(frozen=True)
class FieldSpec:
    """Form metadata for one parameter: label, slider bounds and unit."""

    name: str
    label: str
    min_value: float
    max_value: float
    step: float
    unit: str = ""


def _equipment_fields(technology: str) -> Tuple[FieldSpec, ...]:
    is_space = technology == SPACE_HEATING
    return (
        FieldSpec(
            "gas_equipment_cost",
            "Gas Furnace Cost" if is_space else "Gas Water Heater Cost",
            1000.0 if is_space else 500.0,
            8000.0 if is_space else 3000.0,
            100.0,
            "$",
        ),
        FieldSpec("gas_installation_cost", "Gas Installation Cost", 200.0, 3000.0, 100.0, "$"),
        FieldSpec(
            "heat_pump_equipment_cost",
            "Heat Pump Cost" if is_space else "Heat Pump Water Heater Cost",
            3000.0 if is_space else 1000.0,
            15000.0 if is_space else 5000.0,
            100.0,
            "$",
        ),
        FieldSpec("heat_pump_installation_cost", "Heat Pump Installation Cost", 200.0, 3000.0, 100.0, "$"),
        FieldSpec("current_incentive", "Current Incentive", 0.0, 5000.0, 50.0, "$"),
        FieldSpec("federal_tax_credit", "Federal Tax Credit", 0.0, 5000.0, 50.0, "$"),
    )


def _usage_fields(technology: str) -> Tuple[FieldSpec, ...]:
    is_space = technology == SPACE_HEATING
    return (
        FieldSpec("annual_gas_usage", "Annual Gas Usage", 100.0, 1500.0, 10.0, "therms"),
        FieldSpec(
            "usage_percentage",
            "Heating Percentage" if is_space else "Water Heating Percentage",
            5.0,
            95.0,
            1.0,
            "%",
        ),
        FieldSpec(
            "gas_equipment_efficiency",
            "Gas Furnace Efficiency" if is_space else "Gas Water Heater Efficiency",
            0.5,
            0.99,
            0.01,
        ),
        FieldSpec(
            "heat_pump_efficiency_factor",
            "Heat Pump COP" if is_space else "Heat Pump Efficiency Factor",
            1.5 if is_space else 2.0,
            5.0 if is_space else 4.0,
            0.1,
        ),
    )


_ECONOMIC_FIELDS: Tuple[FieldSpec, ...] = (
    FieldSpec("electricity_rate", "Electricity Rate", 0.05, 0.30, 0.01, "$/kWh"),
    FieldSpec("gas_rate", "Gas Rate", 0.5, 3.0, 0.1, "$/therm"),
    FieldSpec("equipment_lifespan", "Equipment Lifespan", 8, 25, 1, "years"),
    FieldSpec("discount_rate", "Discount Rate", 1.0, 10.0, 0.5, "%"),
    FieldSpec("annual_maintenance_gas", "Annual Maintenance (Gas)", 0.0, 1000.0, 5.0, "$"),
    FieldSpec("annual_maintenance_hp", "Annual Maintenance (Heat Pump)", 0.0, 1000.0, 5.0, "$"),
    FieldSpec("future_utility_rate_increase", "Annual Utility Rate Increase", 0.0, 10.0, 0.5, "%"),
)


def field_groups(technology: str) -> Dict[str, Tuple[FieldSpec, ...]]:
    """Return form sections for one technology, in display order."""

    if technology not in (SPACE_HEATING, WATER_HEATING):
        raise ValueError(f"Unsupported technology: {technology}")
    return {
        "Equipment Costs": _equipment_fields(technology),
        "Usage & Efficiency": _usage_fields(technology),
        "Economic Factors": _ECONOMIC_FIELDS,
    }


__all__ = [
    "DEFAULT_SPACE_HEATING",
    "DEFAULT_WATER_HEATING",
    "FieldSpec",
    "default_inputs",
    "field_groups",
]
