"""Key/value persistence for calculator inputs and named scenarios.

The calculator only needs ``get``/``set``/``delete`` on opaque string blobs, so
any backend satisfying :class:`KeyValueStore` can be swapped in (in-memory for
tests and the API, a JSON file for local runs, Streamlit session state in the
app via :mod:`utils.ui_state`).
"""
from __future__ import annotations

import json
import logging
import uuid
from pathlib import Path
from threading import Lock
from typing import Any, Dict, List, Optional, Protocol

from services.package_analysis import CalculatorInputs, CalculatorResults
from utils.defaults import default_inputs
from utils.io import to_json_safe

INPUTS_KEY = "calculator_inputs"
SCENARIOS_KEY = "calculator_scenarios"
COMPARE_KEY = "calculator_compare_ids"
MAX_COMPARE_SCENARIOS = 3


class KeyValueStore(Protocol):
    def get(self, key: str) -> Optional[str]: ...

    def set(self, key: str, blob: str) -> None: ...

    def delete(self, key: str) -> None: ...


class ScenarioNotFoundError(KeyError):
    """Raised when a scenario id is not present in the store."""


class ScenarioLimitError(ValueError):
    """Raised when more than :data:`MAX_COMPARE_SCENARIOS` are selected for comparison."""


class InMemoryStore:
    """Thread-safe dictionary-backed store."""

    def __init__(self) -> None:
        self._data: Dict[str, str] = {}
        self._lock = Lock()

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._data.get(key)

    def set(self, key: str, blob: str) -> None:
        with self._lock:
            self._data[key] = blob

    def delete(self, key: str) -> None:
        with self._lock:
            self._data.pop(key, None)


class JsonFileStore:
    """Store every key in a single JSON document on disk."""

    def __init__(self, path: Path | str) -> None:
        self.path = Path(path)
        self._lock = Lock()

    def _read(self) -> Dict[str, str]:
        if not self.path.exists():
            return {}
        try:
            data = json.loads(self.path.read_text(encoding="utf-8"))
        except json.JSONDecodeError:
            corrupt = self.path.with_name(self.path.name + ".corrupt")
            self.path.replace(corrupt)
            logging.getLogger(__name__).warning(
                "Store file %s is not valid JSON; moved it to %s and starting empty.", self.path, corrupt
            )
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, str]) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(data, indent=2), encoding="utf-8")

    def get(self, key: str) -> Optional[str]:
        with self._lock:
            return self._read().get(key)

    def set(self, key: str, blob: str) -> None:
        with self._lock:
            data = self._read()
            data[key] = blob
            self._write(data)

    def delete(self, key: str) -> None:
        with self._lock:
            data = self._read()
            if key in data:
                del data[key]
                self._write(data)


class InputRepository:
    """Persist the active calculator inputs between sessions."""

    def __init__(self, store: KeyValueStore, key: str = INPUTS_KEY) -> None:
        self.store = store
        self.key = key

    def load(self) -> CalculatorInputs:
        """Return saved inputs, or defaults when nothing usable is stored."""

        blob = self.store.get(self.key)
        if blob is None:
            return default_inputs()
        try:
            return CalculatorInputs.from_dict(json.loads(blob))
        except (ValueError, TypeError, KeyError) as exc:
            logging.getLogger(__name__).warning("Error loading saved inputs: %s", exc)
            return default_inputs()

    def save(self, inputs: CalculatorInputs) -> None:
        self.store.set(self.key, json.dumps(inputs.to_dict()))

    def reset(self) -> CalculatorInputs:
        self.store.delete(self.key)
        return default_inputs()


class ScenarioRepository:
    """Named snapshots of inputs and results plus a bounded comparison selection."""

    def __init__(self, store: KeyValueStore) -> None:
        self.store = store
        self._lock = Lock()

    def _load_blob(self, key: str, default: Any) -> Any:
        blob = self.store.get(key)
        if blob is None:
            return default
        try:
            return json.loads(blob)
        except json.JSONDecodeError as exc:
            logging.getLogger(__name__).warning("Error loading saved scenarios: %s", exc)
            return default

    def list(self) -> List[Dict[str, Any]]:
        scenarios = self._load_blob(SCENARIOS_KEY, [])
        return scenarios if isinstance(scenarios, list) else []

    def get(self, scenario_id: str) -> Dict[str, Any]:
        for scenario in self.list():
            if scenario.get("id") == scenario_id:
                return scenario
        raise ScenarioNotFoundError(scenario_id)

    def save(
        self, name: str, inputs: CalculatorInputs, results: CalculatorResults
    ) -> Dict[str, Any]:
        """Snapshot inputs and results under ``name`` and return the new scenario."""

        name = name.strip()
        if not name:
            raise ValueError("Please enter a name for this scenario")

        scenario = {
            "id": uuid.uuid4().hex,
            "name": name,
            "inputs": inputs.to_dict(),
            "results": to_json_safe(results.to_dict()),
        }
        with self._lock:
            scenarios = self.list()
            scenarios.append(scenario)
            self.store.set(SCENARIOS_KEY, json.dumps(scenarios))
        return scenario

    def load_inputs(self, scenario_id: str) -> CalculatorInputs:
        return CalculatorInputs.from_dict(self.get(scenario_id)["inputs"])

    def delete(self, scenario_id: str) -> None:
        with self._lock:
            scenarios = self.list()
            remaining = [s for s in scenarios if s.get("id") != scenario_id]
            if len(remaining) == len(scenarios):
                raise ScenarioNotFoundError(scenario_id)
            self.store.set(SCENARIOS_KEY, json.dumps(remaining))
            compare_ids = [cid for cid in self.compare_ids() if cid != scenario_id]
            self.store.set(COMPARE_KEY, json.dumps(compare_ids))

    def compare_ids(self) -> List[str]:
        ids = self._load_blob(COMPARE_KEY, [])
        return ids if isinstance(ids, list) else []

    def toggle_compare(self, scenario_id: str) -> List[str]:
        """Add or remove a scenario from the comparison selection."""

        with self._lock:
            self.get(scenario_id)
            ids = self.compare_ids()
            if scenario_id in ids:
                ids.remove(scenario_id)
            elif len(ids) >= MAX_COMPARE_SCENARIOS:
                raise ScenarioLimitError(
                    f"You can compare up to {MAX_COMPARE_SCENARIOS} scenarios at a time"
                )
            else:
                ids.append(scenario_id)
            self.store.set(COMPARE_KEY, json.dumps(ids))
        return ids

    def compared(self) -> List[Dict[str, Any]]:
        selected = set(self.compare_ids())
        return [s for s in self.list() if s.get("id") in selected]


__all__ = [
    "COMPARE_KEY",
    "INPUTS_KEY",
    "MAX_COMPARE_SCENARIOS",
    "SCENARIOS_KEY",
    "InMemoryStore",
    "InputRepository",
    "JsonFileStore",
    "KeyValueStore",
    "ScenarioLimitError",
    "ScenarioNotFoundError",
    "ScenarioRepository",
]
