from __future__ import annotations

import pytest
from fastapi import HTTPException
from pydantic import ValidationError

from api import server
from api.server import (
    CalculateRequest,
    PackageRequest,
    ScenarioPayload,
    SensitivityPayload,
    calculate,
    create_scenario,
    delete_scenario,
    health,
    list_scenarios,
    package,
    sensitivity,
    toggle_compare,
)
from utils.scenario_store import InMemoryStore, ScenarioRepository


@pytest.fixture(autouse=True)
def fresh_scenarios(monkeypatch):
    monkeypatch.setattr(server, "scenarios", ScenarioRepository(InMemoryStore()))


def test_health() -> None:
    assert health() == {"status": "ok"}


def test_calculate_with_defaults_and_overrides() -> None:
    response = calculate(CalculateRequest(technology="spaceHeating", params={"gasRate": 1.5}))

    result = response["result"]
    assert response["technology"] == "space_heating"
    assert result["additional_cost"] == 1800
    assert result["therms"] == pytest.approx(300.51)
    assert len(result["year_by_year"]) == 16
    assert len(result["optimal_incentives"]) == 3


def test_calculate_rejects_invalid_parameters() -> None:
    with pytest.raises(HTTPException) as excinfo:
        calculate(CalculateRequest(technology="water_heating", params={"heat_pump_efficiency_factor": 0}))
    assert excinfo.value.status_code == 400


def test_unknown_technology_fails_validation() -> None:
    with pytest.raises(ValidationError):
        CalculateRequest(technology="pool_heating")


def test_undefined_payback_serialized_as_null() -> None:
    response = calculate(
        CalculateRequest(
            technology="space_heating",
            params={"annual_gas_usage": 0, "annual_maintenance_gas": 0, "annual_maintenance_hp": 0},
        )
    )
    assert response["result"]["simple_payback_years"] is None


def test_package_consumer_and_program_views() -> None:
    consumer = package(PackageRequest())
    assert len(consumer["results"]["comparison"]) == 4
    assert consumer["results"]["combined"]["total_incentive"] == pytest.approx(1100.0)
    assert "program_summary" not in consumer

    program = package(PackageRequest(view_mode="program", bundle_discount_percent=0))
    assert program["results"]["combined"]["total_incentive"] == pytest.approx(1000.0)
    assert [row["Technology"] for row in program["program_summary"]][-1] == "Combined Package"
    assert program["program_summary"][2]["Recommended Incentive"] is None
    assert program["key_findings"]


def test_package_rejects_invalid_inputs() -> None:
    with pytest.raises(HTTPException) as excinfo:
        package(PackageRequest(water_heating={"equipment_lifespan": 0}))
    assert excinfo.value.status_code == 400


def test_sensitivity_returns_nine_points() -> None:
    response = sensitivity(SensitivityPayload(technology="space_heating", parameter="gasRate"))

    assert response["parameter"] == "gas_rate"
    assert [p["change_percent"] for p in response["points"]] == [-50, -37.5, -25, -12.5, 0, 12.5, 25, 37.5, 50]


def test_sensitivity_rejects_lifespan_and_negative_range() -> None:
    with pytest.raises(HTTPException) as excinfo:
        sensitivity(SensitivityPayload(technology="space_heating", parameter="equipment_lifespan"))
    assert excinfo.value.status_code == 400

    with pytest.raises(ValidationError):
        SensitivityPayload(technology="space_heating", parameter="gas_rate", range_percent=-5)


def test_scenario_lifecycle() -> None:
    created = create_scenario(ScenarioPayload(name="Baseline"))
    listing = list_scenarios()
    assert [s["id"] for s in listing["scenarios"]] == [created["id"]]

    assert toggle_compare(created["id"]) == {"compare_ids": [created["id"]]}
    assert delete_scenario(created["id"]) == {"deleted": created["id"]}
    assert list_scenarios() == {"scenarios": [], "compare_ids": []}

    with pytest.raises(HTTPException) as excinfo:
        delete_scenario(created["id"])
    assert excinfo.value.status_code == 404


def test_scenario_name_required() -> None:
    with pytest.raises(ValidationError):
        ScenarioPayload(name="   ")


@pytest.mark.parametrize("range_percent", [100, 150])
def test_sensitivity_range_must_stay_below_one_hundred(range_percent) -> None:
    with pytest.raises(ValidationError):
        SensitivityPayload(
            technology="space_heating", parameter="heat_pump_efficiency_factor", range_percent=range_percent
        )
