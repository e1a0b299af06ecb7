"""Export and import helpers for calculator inputs and results."""

from __future__ import annotations

import json
import math
from typing import Any

import pandas as pd

from services.calculator_core import TECHNOLOGIES, TECHNOLOGY_LABELS
from services.package_analysis import CalculatorInputs, CalculatorResults

RESULTS_CSV_FILENAME = "carbon_reduction_results.csv"
RESULTS_JSON_FILENAME = "carbon_calculator_data.json"


def to_json_safe(value: Any) -> Any:
    """Recursively replace NaN/inf with ``None`` so payloads are strict JSON."""

    if isinstance(value, float):
        return value if math.isfinite(value) else None
    if isinstance(value, dict):
        return {key: to_json_safe(item) for key, item in value.items()}
    if isinstance(value, (list, tuple)):
        return [to_json_safe(item) for item in value]
    return value


def build_results_frame(results: CalculatorResults) -> pd.DataFrame:
    """Return the headline results as ``Category, Parameter, Value`` rows."""

    rows = []
    for technology in TECHNOLOGIES:
        result = results.for_technology(technology)
        label = TECHNOLOGY_LABELS[technology]
        rows.extend(
            [
                (label, "Annual Emissions Reduction", result.net_emissions_reduction),
                (label, "Lifecycle Emissions Reduction", result.lifetime_emissions_reduction),
                (label, "Annual Savings", result.annual_savings),
                (label, "Payback Period", result.simple_payback_years),
            ]
        )

    combined = results.combined
    rows.extend(
        [
            ("Combined", "Annual Emissions Reduction", combined.net_emissions_reduction),
            ("Combined", "Lifecycle Emissions Reduction", combined.lifetime_emissions_reduction),
            ("Combined", "Total Incentive", combined.total_incentive),
            ("Combined", "Payback Period", combined.payback_period),
        ]
    )
    return pd.DataFrame(rows, columns=["Category", "Parameter", "Value"])


def build_results_csv(results: CalculatorResults) -> str:
    """Serialize the headline results to CSV; undefined values become empty cells."""

    return build_results_frame(results).to_csv(index=False)


def build_results_json(inputs: CalculatorInputs, results: CalculatorResults) -> str:
    """Serialize inputs and full results; non-finite numbers are written as ``null``."""

    payload = {"inputs": inputs.to_dict(), "results": results.to_dict()}
    return json.dumps(to_json_safe(payload), indent=2, allow_nan=False)


def load_inputs_json(text: str) -> CalculatorInputs:
    """Parse calculator inputs from a JSON export or a bare inputs document."""

    try:
        payload = json.loads(text)
    except json.JSONDecodeError as exc:
        raise ValueError(f"Inputs file is not valid JSON: {exc}") from exc
    if not isinstance(payload, dict):
        raise ValueError("Inputs file must contain a JSON object")
    return CalculatorInputs.from_dict(payload.get("inputs", payload))


__all__ = [
    "RESULTS_CSV_FILENAME",
    "RESULTS_JSON_FILENAME",
    "build_results_csv",
    "build_results_frame",
    "build_results_json",
    "load_inputs_json",
    "to_json_safe",
]
