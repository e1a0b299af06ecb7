"""Streamlit form rendering for calculator inputs.

Centralizing the widgets keeps `app.run_app` focused on orchestration and
lets every technology tab build its parameter set the same way.
"""

from typing import Dict, Optional

import streamlit as st

from services.analysis_sensitivity import SENSITIVITY_PARAMETERS
from services.calculator_core import TECHNOLOGY_LABELS, ParameterSet
from services.package_analysis import CalculatorInputs, VIEW_MODES
from utils.defaults import FieldSpec, field_groups

VIEW_MODE_LABELS = {"consumer": "Consumer View", "program": "Program Administrator View"}


def _field_label(spec: FieldSpec) -> str:
    return f"{spec.label} ({spec.unit})" if spec.unit else spec.label


def _number_input(spec: FieldSpec, value: float, key: str) -> float:
    if spec.name == "equipment_lifespan":
        return int(
            st.number_input(
                _field_label(spec),
                min_value=int(spec.min_value),
                max_value=int(spec.max_value),
                value=int(value),
                step=int(spec.step),
                key=key,
            )
        )
    return float(
        st.number_input(
            _field_label(spec),
            min_value=float(spec.min_value),
            max_value=float(spec.max_value),
            value=min(max(float(value), float(spec.min_value)), float(spec.max_value)),
            step=float(spec.step),
            key=key,
        )
    )


def render_parameter_form(technology: str, params: ParameterSet) -> ParameterSet:
    """Render grouped number inputs for one technology and return the edited set."""

    updates: Dict[str, float] = {}
    sections = field_groups(technology)
    columns = st.columns(len(sections))
    for col, (section, specs) in zip(columns, sections.items()):
        with col:
            st.markdown(f"**{section}**")
            for spec in specs:
                updates[spec.name] = _number_input(
                    spec, getattr(params, spec.name), key=f"{technology}_{spec.name}"
                )
    return params.replace(**updates)


def render_view_controls(inputs: CalculatorInputs) -> CalculatorInputs:
    """Sidebar controls shared by every tab: view mode and bundle discount."""

    with st.sidebar:
        st.header("Calculator settings")
        view_mode = st.radio(
            "View",
            options=list(VIEW_MODES),
            index=VIEW_MODES.index(inputs.view_mode),
            format_func=lambda mode: VIEW_MODE_LABELS[mode],
            key="view_mode",
        )
        bundle = st.slider(
            "Bundle discount (%)",
            min_value=0.0,
            max_value=30.0,
            value=float(inputs.bundle_discount_percent),
            step=1.0,
            help="Applied when both heat pump systems are installed together.",
            key="bundle_discount_percent",
        )
    return CalculatorInputs(
        space_heating=inputs.space_heating,
        water_heating=inputs.water_heating,
        bundle_discount_percent=bundle,
        view_mode=view_mode,
    )


def render_sensitivity_controls() -> Optional[Dict[str, object]]:
    """Return the technology/parameter/range chosen for a sweep, or None before submit."""

    with st.form("sensitivity_form"):
        cols = st.columns(3)
        technology = cols[0].selectbox(
            "Technology",
            options=list(TECHNOLOGY_LABELS),
            format_func=lambda tech: TECHNOLOGY_LABELS[tech],
        )
        parameter = cols[1].selectbox(
            "Parameter",
            options=list(SENSITIVITY_PARAMETERS),
            format_func=lambda name: SENSITIVITY_PARAMETERS[name],
        )
        range_percent = cols[2].slider("Range (+/- %)", min_value=10, max_value=90, value=50, step=10)
        submitted = st.form_submit_button("Run sensitivity analysis")
    if not submitted:
        return None
    return {"technology": technology, "parameter": parameter, "range_percent": float(range_percent)}
