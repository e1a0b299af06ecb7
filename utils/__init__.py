"""Utility helpers shared across the Streamlit app, API and tests.

Only dependency-free helpers are re-exported here; modules that build on
:mod:`services` (defaults, io, scenario_store) are imported directly so the
engine can import :mod:`utils.economics` without a cycle.
"""

from utils.economics import UNDEFINED, is_undefined, safe_divide
from utils.settings import configure_logging, get_setting

__all__ = [
    "UNDEFINED",
    "is_undefined",
    "safe_divide",
    "configure_logging",
    "get_setting",
]
