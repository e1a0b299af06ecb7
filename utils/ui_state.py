"""Shared UI helpers for session-scoped calculator state."""

from __future__ import annotations

import logging
from typing import Any, MutableMapping, Optional

import streamlit as st
from streamlit.errors import StreamlitSecretNotFoundError

from utils.scenario_store import InputRepository, JsonFileStore, KeyValueStore, ScenarioRepository
from utils.settings import get_setting


class SessionStateStore:
    """Key/value store backed by ``st.session_state`` (or any mutable mapping)."""

    def __init__(self, state: Optional[MutableMapping[str, Any]] = None) -> None:
        self._state = state if state is not None else st.session_state

    def get(self, key: str) -> Optional[str]:
        value = self._state.get(key)
        return value if isinstance(value, str) else None

    def set(self, key: str, blob: str) -> None:
        self._state[key] = blob

    def delete(self, key: str) -> None:
        if key in self._state:
            del self._state[key]


@st.cache_resource
def _shared_file_store(path: str) -> JsonFileStore:
    """One file-backed store per path for every browser session."""

    return JsonFileStore(path)


def get_store() -> KeyValueStore:
    """Return the file store when ``CARBONLAB_SCENARIO_PATH`` is set, else session state."""

    try:
        path = get_setting("scenario_path", secrets=st.secrets)
    except StreamlitSecretNotFoundError:
        path = get_setting("scenario_path")
    if path:
        logging.getLogger(__name__).debug("Persisting calculator state to %s", path)
        return _shared_file_store(path)
    return SessionStateStore()


def get_input_repository() -> InputRepository:
    return InputRepository(get_store())


def get_scenario_repository() -> ScenarioRepository:
    return ScenarioRepository(get_store())

