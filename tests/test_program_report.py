import math

import pytest

from services.calculator_core import INCENTIVE_RATES_PER_MT
from services.package_analysis import CalculatorInputs, run_calculator
from services.program_report import (
    PROGRAM_RECOMMENDATIONS,
    PROGRAM_SUMMARY_COLUMNS,
    RECOMMENDED_RATE_INDEX,
    build_key_findings,
    build_program_summary,
)
from utils.defaults import DEFAULT_SPACE_HEATING, DEFAULT_WATER_HEATING, default_inputs


def test_program_summary_rows_and_recommendations():
    results = run_calculator(default_inputs())
    summary = build_program_summary(results)

    assert list(summary.columns) == PROGRAM_SUMMARY_COLUMNS
    assert list(summary["Technology"]) == [
        "Space Heating HP",
        "Water Heating HP",
        "EV (Reference)",
        "E-Bike (Reference)",
        "Combined Package",
    ]
    assert summary.loc[0, "Recommended Incentive"] == results.space_heating.optimal_incentives[
        RECOMMENDED_RATE_INDEX
    ]
    assert summary.loc[1, "Recommended Incentive"] == results.water_heating.optimal_incentives[
        RECOMMENDED_RATE_INDEX
    ]
    assert summary.loc[2, "Recommended Incentive"] is None or math.isnan(
        summary.loc[2, "Recommended Incentive"]
    )
    assert summary.loc[4, "Current Incentive"] == pytest.approx(results.combined.total_incentive)
    assert summary.loc[4, "Annual MTCO2e"] == results.combined.net_emissions_reduction


def test_key_findings_follow_results():
    inputs = default_inputs()
    findings = build_key_findings(run_calculator(inputs), inputs)

    assert findings[0].startswith("Heat pump space heating")
    assert "10%" in findings[2]
    assert findings[3].endswith("MTCO2e")


def test_key_findings_when_water_heating_dominates():
    inputs = CalculatorInputs(
        space_heating=DEFAULT_SPACE_HEATING.replace(annual_gas_usage=100.0),
        water_heating=DEFAULT_WATER_HEATING.replace(usage_percentage=80.0),
        bundle_discount_percent=5.0,
        view_mode="program",
    )
    findings = build_key_findings(run_calculator(inputs), inputs)

    assert findings[0].startswith("Heat pump water heating")
    assert "5%" in findings[2]


def test_recommendations_reference_mid_range_rate():
    assert str(INCENTIVE_RATES_PER_MT[RECOMMENDED_RATE_INDEX]) in PROGRAM_RECOMMENDATIONS[0]
