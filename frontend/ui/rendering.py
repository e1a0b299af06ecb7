"""Shared rendering helpers for the calculator tabs."""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence

import pandas as pd
import streamlit as st
from streamlit.delta_generator import DeltaGenerator

NOT_AVAILABLE = "N/A"

COMPARISON_LABELS = {
    "name": "Technology",
    "annual_reduction": "Annual MTCO2e",
    "lifetime_reduction": "Lifecycle MTCO2e",
    "incentive_cost": "Incentive",
    "cost_per_ton": "$/MTCO2e (Annual)",
    "lifetime_cost_per_ton": "$/MTCO2e (Lifecycle)",
    "payback": "Payback (years)",
}

_TONS = "{:,.2f}"
_DOLLARS = "${:,.0f}"


@dataclass(frozen=True)
class MetricSpec:
    """One metric card: preformatted value plus optional tooltip and caption."""

    label: str
    value: str
    help: Optional[str] = None
    caption: Optional[str] = None


def render_metrics(specs: Sequence[MetricSpec], columns: Optional[Sequence[DeltaGenerator]] = None) -> None:
    """Render cards side by side, one column per spec unless columns are supplied."""

    columns = columns if columns is not None else st.columns(len(specs))
    for col, spec in zip(columns, specs):
        col.metric(spec.label, spec.value, help=spec.help)
        if spec.caption:
            col.caption(spec.caption)


def _styled(df: pd.DataFrame, formatters: Mapping[str, str]) -> Any:
    present = {col: fmt for col, fmt in formatters.items() if col in df.columns}
    return df.style.format(present, na_rep=NOT_AVAILABLE)


def render_comparison_table(comparison: pd.DataFrame) -> None:
    """Show the comparison frame with reference rows italicized."""

    display = comparison.rename(columns=COMPARISON_LABELS)
    reference_mask = comparison["is_reference"].tolist() if "is_reference" in comparison else []
    display = display.drop(columns=["is_reference"], errors="ignore")
    formatters: Dict[str, str] = {
        "Annual MTCO2e": _TONS,
        "Lifecycle MTCO2e": _TONS,
        "Incentive": _DOLLARS,
        "$/MTCO2e (Annual)": _DOLLARS,
        "$/MTCO2e (Lifecycle)": _DOLLARS,
        "Payback (years)": "{:,.1f}",
    }

    def _reference_style(row: pd.Series) -> List[str]:
        is_reference = bool(reference_mask[row.name]) if reference_mask else False
        return ["font-style: italic; color: #666666" if is_reference else ""] * len(row)

    st.dataframe(
        _styled(display, formatters).apply(_reference_style, axis=1),
        use_container_width=True,
        hide_index=True,
    )


def render_program_summary(summary: pd.DataFrame) -> None:
    formatters = {
        "Annual MTCO2e": _TONS,
        "Lifecycle MTCO2e": _TONS,
        "Current Incentive": _DOLLARS,
        "$/MTCO2e (Annual)": _DOLLARS,
        "$/MTCO2e (Lifecycle)": _DOLLARS,
        "Recommended Incentive": _DOLLARS,
    }
    st.dataframe(_styled(summary, formatters), use_container_width=True, hide_index=True)


def render_bullets(title: str, lines: Iterable[str], container: Optional[DeltaGenerator] = None) -> None:
    target = container if container is not None else st
    target.markdown(f"**{title}**")
    target.markdown("\n".join(f"- {line}" for line in lines))


def render_scenario_comparison(rows: Sequence[Mapping[str, Any]]) -> None:
    """Side-by-side table of saved scenarios selected for comparison."""

    if not rows:
        return
    st.markdown("**Scenario comparison**")
    st.dataframe(
        _styled(
            pd.DataFrame(rows),
            {
                "Space heating payback": "{:,.1f}",
                "Water heating payback": "{:,.1f}",
                "Package MTCO2e/yr": _TONS,
                "Total incentive": _DOLLARS,
            },
        ),
        use_container_width=True,
        hide_index=True,
    )
