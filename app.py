# app.py - Carbon Incentive Lab (heat pump vs gas space and water heating)
# - Per-technology payback, NPV and emissions with $/MTCO2e incentive tiers
# - Combined package with bundle discount, EV / e-bike comparison, sensitivity sweeps
# - Saved scenarios, CSV / JSON / PDF downloads

import logging
from typing import List

import streamlit as st

from frontend.ui.charts import (
    build_comparison_chart,
    build_cost_chart,
    build_emissions_chart,
    build_incentive_pie,
    build_sensitivity_chart,
)
from frontend.ui.forms import render_parameter_form, render_sensitivity_controls, render_view_controls
from frontend.ui.metrics import (
    combined_metric_specs,
    fmt_currency,
    incentive_metric_specs,
    technology_metric_specs,
)
from frontend.ui.pdf import REPORT_FILENAME, build_program_report_pdf
from frontend.ui.rendering import (
    render_bullets,
    render_comparison_table,
    render_metrics,
    render_program_summary,
    render_scenario_comparison,
)
from services.analysis_sensitivity import SensitivityRequest, parameter_label, run_sensitivity
from services.calculator_core import TECHNOLOGY_LABELS, TECHNOLOGIES
from services.package_analysis import CalculatorInputs, CalculatorResults, comparison_frame, run_calculator
from services.program_report import PROGRAM_RECOMMENDATIONS, build_key_findings, build_program_summary
from utils.io import (
    RESULTS_CSV_FILENAME,
    RESULTS_JSON_FILENAME,
    build_results_csv,
    build_results_json,
    load_inputs_json,
)
from utils.scenario_store import ScenarioLimitError, ScenarioNotFoundError
from utils.settings import configure_logging
from utils.ui_state import get_input_repository, get_scenario_repository


def _clear_widget_state() -> None:
    for key in list(st.session_state.keys()):
        if str(key).startswith(TECHNOLOGIES):
            del st.session_state[key]


def _saved_value(value) -> float:
    return float("nan") if value is None else float(value)


def _render_technology_inputs(technology: str, inputs: CalculatorInputs) -> CalculatorInputs:
    label = TECHNOLOGY_LABELS[technology]
    with st.expander(f"{label} inputs", expanded=True):
        edited = render_parameter_form(technology, inputs.for_technology(technology))
    if technology == TECHNOLOGIES[0]:
        return CalculatorInputs(edited, inputs.water_heating, inputs.bundle_discount_percent, inputs.view_mode)
    return CalculatorInputs(inputs.space_heating, edited, inputs.bundle_discount_percent, inputs.view_mode)


def _render_technology_results(technology: str, inputs: CalculatorInputs, results: CalculatorResults) -> None:
    label = TECHNOLOGY_LABELS[technology]
    result = results.for_technology(technology)

    st.subheader(f"{label} results")
    render_metrics(technology_metric_specs(result))

    if inputs.view_mode == "program":
        st.markdown("**Optimal incentive by $/MTCO2e rate**")
        render_metrics(incentive_metric_specs(result))

    chart_cols = st.columns(2)
    with chart_cols[0]:
        st.markdown("**Cumulative cost**")
        st.altair_chart(build_cost_chart(result), use_container_width=True)
    with chart_cols[1]:
        st.markdown("**Cumulative emissions**")
        st.altair_chart(build_emissions_chart(result), use_container_width=True)


def _render_combined_tab(inputs: CalculatorInputs, results: CalculatorResults) -> None:
    st.subheader("Combined package")
    render_metrics(combined_metric_specs(results.combined, inputs.bundle_discount_percent))
    combined = results.combined
    st.caption(
        f"Additional cost after incentives and bundle discount: {fmt_currency(combined.combined_additional_cost)}"
        f"  |  Combined annual savings: {fmt_currency(combined.combined_annual_savings)}"
    )


def _render_comparison_tab(results: CalculatorResults) -> None:
    st.subheader("Cost-effectiveness comparison")
    render_comparison_table(comparison_frame(results.comparison))
    chart_cols = st.columns(2)
    with chart_cols[0]:
        st.altair_chart(
            build_comparison_chart(results.comparison, "cost_per_ton", "$ per MTCO2e (annual)"),
            use_container_width=True,
        )
    with chart_cols[1]:
        st.altair_chart(build_incentive_pie(results.comparison), use_container_width=True)


def _render_sensitivity_tab(inputs: CalculatorInputs) -> None:
    st.subheader("Sensitivity analysis")
    st.caption("Vary one parameter at a time around the current inputs.")
    selection = render_sensitivity_controls()
    if selection is None:
        return
    try:
        request = SensitivityRequest(
            technology=str(selection["technology"]),
            parameter=str(selection["parameter"]),
            range_percent=float(selection["range_percent"]),
            params=inputs.for_technology(str(selection["technology"])),
        )
        points = run_sensitivity(request)
    except ValueError as exc:
        st.error(str(exc))
        return

    label = parameter_label(request.parameter)
    cols = st.columns(3)
    charts = [
        ("payback_years", "Payback (years)"),
        ("net_emissions_reduction", "Emissions reduction (MTCO2e/yr)"),
        ("net_present_value", "Net present value ($)"),
    ]
    for col, (metric, title) in zip(cols, charts):
        with col:
            st.altair_chart(build_sensitivity_chart(points, metric, title, label), use_container_width=True)


def _render_scenarios_tab(inputs: CalculatorInputs, results: CalculatorResults) -> None:
    repo = get_scenario_repository()
    st.subheader("Saved scenarios")
    with st.form("save_scenario"):
        name = st.text_input("Scenario name")
        if st.form_submit_button("Save current scenario"):
            try:
                repo.save(name, inputs, results)
                st.success(f"Saved scenario '{name.strip()}'")
            except ValueError as exc:
                st.error(str(exc))

    scenarios = repo.list()
    if not scenarios:
        st.info("No saved scenarios yet.")
        return

    compare_ids = repo.compare_ids()
    for scenario in scenarios:
        cols = st.columns([4, 1, 1, 1])
        cols[0].markdown(f"**{scenario['name']}**")
        try:
            if cols[1].button("Load", key=f"load_{scenario['id']}"):
                get_input_repository().save(repo.load_inputs(scenario["id"]))
                _clear_widget_state()
                st.rerun()
            compare_label = "Uncompare" if scenario["id"] in compare_ids else "Compare"
            if cols[2].button(compare_label, key=f"compare_{scenario['id']}"):
                repo.toggle_compare(scenario["id"])
                st.rerun()
            if cols[3].button("Delete", key=f"delete_{scenario['id']}"):
                repo.delete(scenario["id"])
                st.rerun()
        except (ScenarioLimitError, ScenarioNotFoundError, ValueError) as exc:
            st.warning(str(exc))

    rows: List[dict] = []
    for scenario in repo.compared():
        saved = scenario["results"]
        rows.append(
            {
                "Scenario": scenario["name"],
                "Space heating payback": _saved_value(saved["space_heating"]["simple_payback_years"]),
                "Water heating payback": _saved_value(saved["water_heating"]["simple_payback_years"]),
                "Package MTCO2e/yr": _saved_value(saved["combined"]["net_emissions_reduction"]),
                "Total incentive": _saved_value(saved["combined"]["total_incentive"]),
            }
        )
    render_scenario_comparison(rows)


def _render_program_tab(inputs: CalculatorInputs, results: CalculatorResults) -> None:
    st.subheader("Program administrator report")
    render_program_summary(build_program_summary(results))
    cols = st.columns(2)
    render_bullets("Key findings", build_key_findings(results, inputs), cols[0])
    render_bullets("Recommendations", PROGRAM_RECOMMENDATIONS, cols[1])

    st.download_button(
        "Download program report (PDF)",
        build_program_report_pdf(results, inputs),
        file_name=REPORT_FILENAME,
        mime="application/pdf",
    )


def _render_data_controls(inputs: CalculatorInputs, results: CalculatorResults) -> None:
    with st.sidebar:
        st.header("Data")
        st.download_button(
            "Download results (CSV)",
            build_results_csv(results).encode("utf-8"),
            file_name=RESULTS_CSV_FILENAME,
            mime="text/csv",
        )
        st.download_button(
            "Export inputs & results (JSON)",
            build_results_json(inputs, results).encode("utf-8"),
            file_name=RESULTS_JSON_FILENAME,
            mime="application/json",
        )
        uploaded = st.file_uploader("Import inputs (JSON)", type=["json"])
        if uploaded is not None and st.button("Apply imported inputs"):
            try:
                get_input_repository().save(load_inputs_json(uploaded.getvalue().decode("utf-8")))
                _clear_widget_state()
                st.rerun()
            except (ValueError, UnicodeDecodeError) as exc:
                logging.getLogger(__name__).warning("Rejected imported inputs: %s", exc)
                st.error(f"Could not import inputs: {exc}")
        if st.button("Reset to defaults"):
            get_input_repository().reset()
            _clear_widget_state()
            st.rerun()


def run_app():
    configure_logging()
    st.set_page_config(page_title="Carbon Incentive Lab", layout="wide")
    st.title("Heat Pump Carbon Reduction Calculator")
    st.caption("Compare heat pump and gas systems and size carbon-based incentives.")

    input_repo = get_input_repository()
    inputs = render_view_controls(input_repo.load())

    tab_names = [TECHNOLOGY_LABELS[t] for t in TECHNOLOGIES] + ["Combined Package", "Comparison", "Sensitivity", "Scenarios"]
    if inputs.view_mode == "program":
        tab_names.append("Program Report")
    tabs = st.tabs(tab_names)

    for idx, technology in enumerate(TECHNOLOGIES):
        with tabs[idx]:
            inputs = _render_technology_inputs(technology, inputs)
    try:
        results = run_calculator(inputs)
    except ValueError as exc:
        st.error(f"Invalid inputs: {exc}")
        st.stop()
    input_repo.save(inputs)

    for idx, technology in enumerate(TECHNOLOGIES):
        with tabs[idx]:
            _render_technology_results(technology, inputs, results)
    with tabs[2]:
        _render_combined_tab(inputs, results)
    with tabs[3]:
        _render_comparison_tab(results)
    with tabs[4]:
        _render_sensitivity_tab(inputs)
    with tabs[5]:
        _render_scenarios_tab(inputs, results)
    if inputs.view_mode == "program":
        with tabs[6]:
            _render_program_tab(inputs, results)

    _render_data_controls(inputs, results)


if __name__ == "__main__":
    run_app()
