from utils.defaults import default_inputs
from utils.scenario_store import InputRepository
from utils.ui_state import SessionStateStore


def test_session_state_store_wraps_mapping():
    state = {"other": 3}
    store = SessionStateStore(state)

    assert store.get("missing") is None
    assert store.get("other") is None
    store.set("k", "blob")
    assert state["k"] == "blob"
    store.delete("k")
    store.delete("k")
    assert "k" not in state


def test_input_repository_over_session_state():
    state = {}
    repo = InputRepository(SessionStateStore(state))
    repo.save(default_inputs())

    assert repo.load() == default_inputs()
    assert "calculator_inputs" in state
