import io
import json
import math

import pandas as pd
import pytest

from services.package_analysis import CalculatorInputs, run_calculator
from utils.defaults import DEFAULT_SPACE_HEATING, default_inputs
from utils.io import (
    build_results_csv,
    build_results_frame,
    build_results_json,
    load_inputs_json,
    to_json_safe,
)


def _zero_savings_inputs() -> CalculatorInputs:
    base = default_inputs()
    return CalculatorInputs(
        space_heating=DEFAULT_SPACE_HEATING.replace(
            annual_gas_usage=0.0, annual_maintenance_gas=100.0, annual_maintenance_hp=100.0
        ),
        water_heating=base.water_heating,
        bundle_discount_percent=base.bundle_discount_percent,
        view_mode=base.view_mode,
    )


def test_results_csv_has_twelve_rows():
    results = run_calculator(default_inputs())
    csv_text = build_results_csv(results)
    df = pd.read_csv(io.StringIO(csv_text))

    assert list(df.columns) == ["Category", "Parameter", "Value"]
    assert len(df) == 12
    assert set(df["Category"]) == {"Space Heating", "Water Heating", "Combined"}
    total = df[(df["Category"] == "Combined") & (df["Parameter"] == "Total Incentive")]["Value"]
    assert total.iloc[0] == pytest.approx(results.combined.total_incentive)


def test_undefined_payback_written_as_blank_csv_cell():
    results = run_calculator(_zero_savings_inputs())
    frame = build_results_frame(results)
    payback = frame[(frame["Category"] == "Space Heating") & (frame["Parameter"] == "Payback Period")]

    assert math.isnan(payback["Value"].iloc[0])
    assert "Space Heating,Payback Period,\n" in build_results_csv(results).replace("\r\n", "\n")


def test_results_json_uses_null_for_undefined_values():
    inputs = _zero_savings_inputs()
    text = build_results_json(inputs, run_calculator(inputs))
    payload = json.loads(text)

    assert payload["results"]["space_heating"]["simple_payback_years"] is None
    assert payload["inputs"]["space_heating"]["annual_gas_usage"] == 0.0
    assert "NaN" not in text


def test_json_export_round_trips_inputs():
    inputs = default_inputs()
    text = build_results_json(inputs, run_calculator(inputs))

    assert load_inputs_json(text) == inputs
    assert load_inputs_json(json.dumps(inputs.to_dict())) == inputs


@pytest.mark.parametrize(
    "text",
    [
        "not json",
        "[1, 2]",
        json.dumps({"space_heating": {}}),
        json.dumps({"inputs": [1]}),
        json.dumps({"space_heating": [], "water_heating": []}),
    ],
)
def test_invalid_import_raises_value_error(text):
    with pytest.raises(ValueError):
        load_inputs_json(text)


def test_to_json_safe_handles_nested_values():
    value = {"a": [1.0, float("nan")], "b": (float("inf"), "x"), "c": None}

    assert to_json_safe(value) == {"a": [1.0, None], "b": [None, "x"], "c": None}
