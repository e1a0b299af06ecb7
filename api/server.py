from __future__ import annotations

import logging
from typing import Any, Dict, List, Literal

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field, field_validator

from services.analysis_sensitivity import SensitivityRequest, run_sensitivity
from services.calculator_core import (
    SPACE_HEATING,
    WATER_HEATING,
    ParameterSet,
    calculate_results,
    normalize_technology,
    resolve_parameter_name,
)
from services.package_analysis import (
    DEFAULT_BUNDLE_DISCOUNT_PCT,
    CalculatorInputs,
    run_calculator,
)
from services.program_report import build_key_findings, build_program_summary
from utils.defaults import DEFAULT_SPACE_HEATING, DEFAULT_WATER_HEATING, default_inputs
from utils.io import to_json_safe
from utils.scenario_store import (
    InMemoryStore,
    JsonFileStore,
    KeyValueStore,
    ScenarioNotFoundError,
    ScenarioRepository,
)
from utils.settings import configure_logging, get_cors_origins, get_setting

logger = logging.getLogger(__name__)

_DEFAULT_PARAMS = {SPACE_HEATING: DEFAULT_SPACE_HEATING, WATER_HEATING: DEFAULT_WATER_HEATING}


def _merge_params(technology: str, overrides: Dict[str, Any]) -> ParameterSet:
    """Overlay request values (snake_case or camelCase) onto the technology defaults."""

    return ParameterSet.from_dict({**_DEFAULT_PARAMS[technology].to_dict(), **overrides})


class CalculateRequest(BaseModel):
    technology: str
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("technology")
    @classmethod
    def _validate_technology(cls, value: str) -> str:
        return normalize_technology(value)

    def build(self) -> ParameterSet:
        return _merge_params(self.technology, self.params)


class PackageRequest(BaseModel):
    """Inputs for both technologies; omitted parameters fall back to defaults."""

    space_heating: Dict[str, Any] = Field(default_factory=dict)
    water_heating: Dict[str, Any] = Field(default_factory=dict)
    bundle_discount_percent: float = DEFAULT_BUNDLE_DISCOUNT_PCT
    view_mode: Literal["consumer", "program"] = "consumer"

    def build(self) -> CalculatorInputs:
        return CalculatorInputs(
            space_heating=_merge_params(SPACE_HEATING, self.space_heating),
            water_heating=_merge_params(WATER_HEATING, self.water_heating),
            bundle_discount_percent=self.bundle_discount_percent,
            view_mode=self.view_mode,
        )


class SensitivityPayload(BaseModel):
    technology: str
    parameter: str
    range_percent: float = 50.0
    params: Dict[str, Any] = Field(default_factory=dict)

    @field_validator("technology")
    @classmethod
    def _validate_technology(cls, value: str) -> str:
        return normalize_technology(value)

    @field_validator("parameter")
    @classmethod
    def _validate_parameter(cls, value: str) -> str:
        return resolve_parameter_name(value)

    @field_validator("range_percent")
    @classmethod
    def _validate_range(cls, value: float) -> float:
        if not 0 <= value < 100:
            raise ValueError("range_percent must be at least 0 and below 100")
        return value

    def build(self) -> SensitivityRequest:
        return SensitivityRequest(
            technology=self.technology,
            parameter=self.parameter,
            range_percent=self.range_percent,
            params=_merge_params(self.technology, self.params),
        )


class ScenarioPayload(BaseModel):
    name: str
    inputs: PackageRequest = Field(default_factory=PackageRequest)

    @field_validator("name")
    @classmethod
    def _require_name(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("Please enter a name for this scenario")
        return value.strip()


def _build_store() -> KeyValueStore:
    path = get_setting("scenario_path")
    if path:
        logger.info("Persisting scenarios to %s", path)
        return JsonFileStore(path)
    return InMemoryStore()


scenarios = ScenarioRepository(_build_store())

app = FastAPI(title="Carbon Incentive Lab API", version="0.1.0")

# Allow browser-based clients (e.g., Vite dev server) to call the API.
app.add_middleware(
    CORSMiddleware,
    allow_origins=get_cors_origins(),
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.get("/health")
def health() -> Dict[str, str]:
    """Simple liveness probe for container orchestrators."""

    return {"status": "ok"}


@app.get("/defaults")
def defaults() -> Dict[str, Any]:
    """Return the default inputs used to seed forms."""

    return default_inputs().to_dict()


@app.post("/calculate")
def calculate(request: CalculateRequest) -> Dict[str, Any]:
    """Compute derived metrics for one technology."""

    try:
        result = calculate_results(request.technology, request.build())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {"technology": request.technology, "result": to_json_safe(result.to_dict())}


@app.post("/package")
def package(request: PackageRequest) -> Dict[str, Any]:
    """Run both technologies plus the combined package and comparison table."""

    try:
        inputs = request.build()
        results = run_calculator(inputs)
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    response: Dict[str, Any] = {"inputs": inputs.to_dict(), "results": to_json_safe(results.to_dict())}
    if inputs.view_mode == "program":
        response["program_summary"] = to_json_safe(
            build_program_summary(results).astype(object).to_dict(orient="records")
        )
        response["key_findings"] = build_key_findings(results, inputs)
    return response


@app.post("/sensitivity")
def sensitivity(request: SensitivityPayload) -> Dict[str, Any]:
    """Sweep one parameter around the supplied inputs."""

    try:
        points = run_sensitivity(request.build())
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return {
        "technology": request.technology,
        "parameter": request.parameter,
        "points": to_json_safe([point.to_dict() for point in points]),
    }


@app.get("/scenarios")
def list_scenarios() -> Dict[str, Any]:
    return {"scenarios": scenarios.list(), "compare_ids": scenarios.compare_ids()}


@app.post("/scenarios")
def create_scenario(payload: ScenarioPayload) -> Dict[str, Any]:
    """Save inputs under a name together with the results they produce."""

    try:
        inputs = payload.inputs.build()
        return scenarios.save(payload.name, inputs, run_calculator(inputs))
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.delete("/scenarios/{scenario_id}")
def delete_scenario(scenario_id: str) -> Dict[str, str]:
    try:
        scenarios.delete(scenario_id)
    except ScenarioNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Scenario '{scenario_id}' not found.") from exc
    return {"deleted": scenario_id}


@app.post("/scenarios/{scenario_id}/compare")
def toggle_compare(scenario_id: str) -> Dict[str, List[str]]:
    try:
        return {"compare_ids": scenarios.toggle_compare(scenario_id)}
    except ScenarioNotFoundError as exc:
        raise HTTPException(status_code=404, detail=f"Scenario '{scenario_id}' not found.") from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


if __name__ == "__main__":
    import uvicorn

    configure_logging()
    uvicorn.run("api.server:app", host="0.0.0.0", port=8000, reload=False)
