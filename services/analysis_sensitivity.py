"""One-at-a-time sensitivity sweeps over a single technology's parameters."""
from __future__ import annotations

import math
from dataclasses import asdict, dataclass
from typing import Any, Dict, List, Sequence

import pandas as pd

from services.calculator_core import (
    ParameterSet,
    calculate_results,
    normalize_technology,
    resolve_parameter_name,
)

SENSITIVITY_STEPS_PER_SIDE = 4

SENSITIVITY_PARAMETERS: Dict[str, str] = {
    "gas_rate": "Gas Rate ($/therm)",
    "electricity_rate": "Electricity Rate ($/kWh)",
    "heat_pump_efficiency_factor": "Heat Pump COP / Efficiency Factor",
    "gas_equipment_cost": "Gas Equipment Cost",
    "heat_pump_equipment_cost": "Heat Pump Cost",
    "current_incentive": "Incentive Amount",
}

# Lifespan drives the length of the year-by-year series and must stay integral.
_NON_SWEEPABLE = {"equipment_lifespan"}


def parameter_label(parameter: str) -> str:
    """Return a user-facing label, falling back to the raw parameter name."""

    name = resolve_parameter_name(parameter, strict=False)
    if name is None:
        return parameter
    return SENSITIVITY_PARAMETERS.get(name, parameter)


@dataclass(frozen=True)
class SensitivityPoint:
    """Outcome of one perturbed calculation.

    Units:
    - ``change_percent``: % change applied to the swept parameter.
    - ``parameter_value``: swept parameter after scaling (parameter units).
    - ``payback_years``: years (NaN when savings are zero).
    - ``net_emissions_reduction``: MTCO2e/yr.
    - ``net_present_value``: USD.
    """

    change_percent: float
    parameter_value: float
    payback_years: float
    net_emissions_reduction: float
    net_present_value: float

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class SensitivityRequest:
    """Request payload for a sensitivity sweep.

    ``range_percent`` is the +/- span in percent (e.g., 50 sweeps -50%..+50%).
    """

    technology: str
    parameter: str
    range_percent: float
    params: ParameterSet

    @classmethod
    def from_dict(cls, payload: Dict[str, Any]) -> "SensitivityRequest":
        """Parse and validate dictionary input for API/UI payloads."""

        return cls(
            technology=normalize_technology(str(payload["technology"])),
            parameter=resolve_parameter_name(str(payload["parameter"])),
            range_percent=float(payload.get("range_percent", 50.0)),
            params=ParameterSet.from_dict(payload["params"]),
        )


def generate_change_percents(range_percent: float) -> List[float]:
    """Return nine evenly spaced percent changes spanning ``[-range, +range]``."""

    if not math.isfinite(range_percent) or range_percent < 0:
        raise ValueError("range_percent must be a finite, non-negative number")

    step = range_percent / SENSITIVITY_STEPS_PER_SIDE
    return [
        -range_percent + step * k for k in range(2 * SENSITIVITY_STEPS_PER_SIDE + 1)
    ]


def sweep_parameter(
    base_params: ParameterSet,
    parameter: str,
    technology: str,
    range_percent: float,
) -> List[SensitivityPoint]:
    """Rerun the calculator with one parameter scaled across the sweep range.

    ``base_params`` is never modified; each point works on a copy with only the
    swept field replaced.
    """

    technology = normalize_technology(technology)
    name = resolve_parameter_name(parameter)
    if name in _NON_SWEEPABLE:
        raise ValueError(f"{name} cannot be swept")

    base_value = getattr(base_params, name)
    points: List[SensitivityPoint] = []
    for change_percent in generate_change_percents(range_percent):
        new_value = base_value * (1 + change_percent / 100)
        result = calculate_results(technology, base_params.replace(**{name: new_value}))
        points.append(
            SensitivityPoint(
                change_percent=change_percent,
                parameter_value=new_value,
                payback_years=result.simple_payback_years,
                net_emissions_reduction=result.net_emissions_reduction,
                net_present_value=result.net_present_value,
            )
        )
    return points


def run_sensitivity(request: SensitivityRequest) -> List[SensitivityPoint]:
    return sweep_parameter(
        request.params, request.parameter, request.technology, request.range_percent
    )


def sensitivity_frame(points: Sequence[SensitivityPoint]) -> pd.DataFrame:
    """Tabulate sweep points for charting and export."""

    columns = [
        "change_percent",
        "parameter_value",
        "payback_years",
        "net_emissions_reduction",
        "net_present_value",
    ]
    if not points:
        return pd.DataFrame(columns=columns)
    return pd.DataFrame([point.to_dict() for point in points], columns=columns)


__all__ = [
    "SENSITIVITY_PARAMETERS",
    "SensitivityPoint",
    "SensitivityRequest",
    "generate_change_percents",
    "parameter_label",
    "run_sensitivity",
    "sensitivity_frame",
    "sweep_parameter",
]
