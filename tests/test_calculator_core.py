import math
import unittest

import pytest

from services.calculator_core import (
    ELECTRICITY_EMISSIONS_FACTOR,
    GAS_EMISSIONS_FACTOR,
    INCENTIVE_RATES_PER_MT,
    SPACE_HEATING,
    THERM_TO_KWH,
    WATER_HEATING,
    InvalidParameterError,
    ParameterSet,
    calculate_results,
    normalize_technology,
    resolve_parameter_name,
)
from utils.defaults import DEFAULT_SPACE_HEATING, DEFAULT_WATER_HEATING


class SpaceHeatingDefaultsTests(unittest.TestCase):
    def setUp(self) -> None:
        self.result = calculate_results(SPACE_HEATING, DEFAULT_SPACE_HEATING)

    def test_energy_and_emissions(self) -> None:
        self.assertAlmostEqual(self.result.therms, 300.51, places=9)
        self.assertAlmostEqual(self.result.annual_emissions_gas, 1.50255, places=9)
        self.assertAlmostEqual(self.result.kwh_equivalent, 2934.981, places=6)
        self.assertAlmostEqual(self.result.annual_emissions_hp, 0.0462, places=4)
        self.assertAlmostEqual(self.result.net_emissions_reduction, 1.4564, places=3)
        self.assertEqual(
            self.result.annual_emissions_hp,
            self.result.kwh_equivalent * ELECTRICITY_EMISSIONS_FACTOR,
        )

    def test_upfront_costs(self) -> None:
        self.assertEqual(self.result.initial_cost_gas, 4000)
        self.assertEqual(self.result.initial_cost_hp, 5800)
        self.assertEqual(self.result.additional_cost, 1800)

    def test_operating_costs_and_payback(self) -> None:
        self.assertAlmostEqual(self.result.annual_cost_gas, 600.765, places=6)
        self.assertAlmostEqual(self.result.annual_cost_hp, 422.84791, places=5)
        self.assertAlmostEqual(self.result.annual_savings, 177.91709, places=5)
        self.assertAlmostEqual(self.result.simple_payback_years, 1800 / self.result.annual_savings)
        self.assertAlmostEqual(
            self.result.simple_payback_no_incentive, 4500 / self.result.annual_savings
        )
        self.assertEqual(self.result.simple_payback_with_incentive, self.result.simple_payback_years)

    def test_npv_discounts_escalated_savings(self) -> None:
        expected = -1800.0
        savings = self.result.annual_savings
        for year in range(1, 16):
            savings *= 1.02
            expected += savings / 1.03**year
        self.assertAlmostEqual(self.result.net_present_value, expected, places=6)

    def test_lifetime_reduction_is_exact_product(self) -> None:
        self.assertEqual(
            self.result.lifetime_emissions_reduction,
            self.result.net_emissions_reduction * DEFAULT_SPACE_HEATING.equipment_lifespan,
        )

    def test_optimal_incentives_rounded_to_cents(self) -> None:
        for value, rate in zip(self.result.optimal_incentives, INCENTIVE_RATES_PER_MT):
            self.assertEqual(value, round(self.result.net_emissions_reduction * rate, 2))


def test_year_by_year_series_shape():
    result = calculate_results(SPACE_HEATING, DEFAULT_SPACE_HEATING)

    assert len(result.year_by_year) == DEFAULT_SPACE_HEATING.equipment_lifespan + 1
    first = result.year_by_year[0]
    assert first.year == 0
    assert first.cumulative_emissions_gas == 0
    assert first.cumulative_emissions_hp == 0
    assert first.cumulative_emissions_savings == 0
    assert first.cumulative_cost_gas == result.initial_cost_gas
    assert first.cumulative_cost_hp == result.initial_cost_hp
    assert first.savings == result.initial_cost_gas - result.initial_cost_hp


def test_year_by_year_escalates_operating_costs():
    params = DEFAULT_SPACE_HEATING
    result = calculate_results(SPACE_HEATING, params)
    year1, year2 = result.year_by_year[1], result.year_by_year[2]

    gas_year1 = result.therms * params.gas_rate + params.annual_maintenance_gas
    assert year1.cumulative_cost_gas == pytest.approx(result.initial_cost_gas + gas_year1)
    gas_year2 = result.therms * params.gas_rate * 1.02 + params.annual_maintenance_gas
    assert year2.cumulative_cost_gas - year1.cumulative_cost_gas == pytest.approx(gas_year2)
    assert year1.annual_savings == result.annual_savings
    assert year2.annual_savings == pytest.approx(result.annual_savings * 1.02)
    assert year2.cumulative_emissions_savings == pytest.approx(2 * result.net_emissions_reduction)


def test_water_heating_defaults_allow_negative_payback():
    result = calculate_results(WATER_HEATING, DEFAULT_WATER_HEATING)

    assert result.therms == pytest.approx(113.4)
    assert result.kwh_equivalent == pytest.approx(113.4 * THERM_TO_KWH / 3.5)
    assert result.annual_emissions_gas == pytest.approx(113.4 * GAS_EMISSIONS_FACTOR)
    assert result.initial_cost_gas == 1800
    assert result.initial_cost_hp == 1600
    assert result.additional_cost == -200
    assert result.simple_payback_years < 0
    assert len(result.year_by_year) == 13


def test_emissions_non_negative_for_valid_inputs():
    params = DEFAULT_SPACE_HEATING.replace(annual_gas_usage=0.0)
    result = calculate_results(SPACE_HEATING, params)

    assert result.annual_emissions_gas == 0
    assert result.kwh_equivalent == 0
    assert result.annual_emissions_hp == 0


def test_zero_savings_makes_payback_undefined():
    params = DEFAULT_SPACE_HEATING.replace(
        annual_gas_usage=0.0, annual_maintenance_gas=100.0, annual_maintenance_hp=100.0
    )
    result = calculate_results(SPACE_HEATING, params)

    assert result.annual_savings == 0
    assert math.isnan(result.simple_payback_years)
    assert math.isnan(result.simple_payback_no_incentive)
    assert math.isfinite(result.net_present_value)


def test_calculation_is_deterministic():
    first = calculate_results(SPACE_HEATING, DEFAULT_SPACE_HEATING)
    second = calculate_results(SPACE_HEATING, DEFAULT_SPACE_HEATING)

    assert first == second


@pytest.mark.parametrize(
    "changes",
    [
        {"heat_pump_efficiency_factor": 0.0},
        {"heat_pump_efficiency_factor": -1.0},
        {"annual_gas_usage": -5.0},
        {"usage_percentage": -1.0},
        {"equipment_lifespan": 0},
        {"discount_rate": -100.0},
        {"gas_rate": float("nan")},
        {"electricity_rate": float("inf")},
    ],
)
def test_invalid_parameters_are_rejected(changes):
    params = DEFAULT_SPACE_HEATING.replace(**changes)

    with pytest.raises(InvalidParameterError):
        calculate_results(SPACE_HEATING, params)


def test_unknown_technology_rejected():
    with pytest.raises(ValueError):
        calculate_results("pool_heating", DEFAULT_SPACE_HEATING)


def test_camel_case_technology_and_parameter_names():
    assert normalize_technology("spaceHeating") == SPACE_HEATING
    assert normalize_technology("waterHeating") == WATER_HEATING
    assert resolve_parameter_name("gasRate") == "gas_rate"
    assert resolve_parameter_name("heatPumpCOP") == "heat_pump_efficiency_factor"
    assert resolve_parameter_name("annualMaintenanceHP") == "annual_maintenance_hp"
    assert resolve_parameter_name("bogus", strict=False) is None
    with pytest.raises(ValueError):
        resolve_parameter_name("bogus")


def test_parameter_set_from_dict_accepts_legacy_keys():
    payload = {
        "gasHeaterCost": 3000,
        "gasInstallationCost": 1000,
        "heatPumpCost": 7000,
        "heatPumpInstallationCost": 1500,
        "currentIncentive": 700,
        "federalTaxCredit": 2000,
        "annualGasUsage": 567,
        "heatingPercentage": 53,
        "gasFurnaceEfficiency": 0.85,
        "heatPumpCOP": 3.0,
        "electricityRate": 0.11,
        "gasRate": 1.5,
        "equipmentLifespan": 15,
        "discountRate": 3,
        "annualMaintenanceGas": 150,
        "annualMaintenanceHP": 100,
        "futureUtilityRateIncrease": 2,
        "notAParameter": "ignored",
    }

    params = ParameterSet.from_dict(payload)

    assert params == DEFAULT_SPACE_HEATING
    assert isinstance(params.equipment_lifespan, int)


def test_parameter_set_from_dict_reports_missing_and_fractional_lifespan():
    data = DEFAULT_SPACE_HEATING.to_dict()
    data.pop("gas_rate")
    with pytest.raises(InvalidParameterError, match="gas_rate"):
        ParameterSet.from_dict(data)

    data = DEFAULT_SPACE_HEATING.to_dict()
    data["equipment_lifespan"] = 12.5
    with pytest.raises(InvalidParameterError):
        ParameterSet.from_dict(data)


if __name__ == "__main__":
    unittest.main()
