"""Chart and data prep helpers for Streamlit visualizations."""

from typing import Sequence

import altair as alt
import pandas as pd

from services.analysis_sensitivity import SensitivityPoint, sensitivity_frame
from services.calculator_core import TechnologyResult
from services.package_analysis import ComparisonRow, comparison_frame, incentive_distribution

GAS_COLOR = "#F97316"
HEAT_PUMP_COLOR = "#2563EB"
SAVINGS_COLOR = "#10B981"
COMPARISON_COLORS = ["#0088FE", "#00C49F", "#FFBB28", "#FF8042", "#8884d8"]


def prepare_cost_timeline(result: TechnologyResult) -> pd.DataFrame:
    """Return cumulative gas vs heat pump costs in long format (year, system, cost)."""

    df = pd.DataFrame(
        {
            "year": [s.year for s in result.year_by_year],
            "Gas System": [s.cumulative_cost_gas for s in result.year_by_year],
            "Heat Pump": [s.cumulative_cost_hp for s in result.year_by_year],
        }
    )
    return df.melt(id_vars="year", var_name="system", value_name="cumulative_cost_usd")


def prepare_emissions_timeline(result: TechnologyResult) -> pd.DataFrame:
    """Return cumulative emissions for gas, heat pump and the avoided difference."""

    df = pd.DataFrame(
        {
            "year": [s.year for s in result.year_by_year],
            "Gas System": [s.cumulative_emissions_gas for s in result.year_by_year],
            "Heat Pump": [s.cumulative_emissions_hp for s in result.year_by_year],
            "Emissions Savings": [s.cumulative_emissions_savings for s in result.year_by_year],
        }
    )
    return df.melt(id_vars="year", var_name="series", value_name="cumulative_mtco2e")


def build_cost_chart(result: TechnologyResult) -> alt.Chart:
    source = prepare_cost_timeline(result)
    return (
        alt.Chart(source)
        .mark_line(point=True)
        .encode(
            x=alt.X("year:Q", title="Years"),
            y=alt.Y("cumulative_cost_usd:Q", title="Cumulative Cost ($)"),
            color=alt.Color(
                "system:N",
                scale=alt.Scale(domain=["Gas System", "Heat Pump"], range=[GAS_COLOR, HEAT_PUMP_COLOR]),
                title=None,
            ),
            tooltip=[
                alt.Tooltip("year:Q", title="Year"),
                alt.Tooltip("system:N"),
                alt.Tooltip("cumulative_cost_usd:Q", format="$,.0f", title="Cumulative cost"),
            ],
        )
        .properties(height=280)
    )


def build_emissions_chart(result: TechnologyResult) -> alt.Chart:
    source = prepare_emissions_timeline(result)
    return (
        alt.Chart(source)
        .mark_line()
        .encode(
            x=alt.X("year:Q", title="Years"),
            y=alt.Y("cumulative_mtco2e:Q", title="Cumulative Emissions (MTCO2e)"),
            color=alt.Color(
                "series:N",
                scale=alt.Scale(
                    domain=["Gas System", "Heat Pump", "Emissions Savings"],
                    range=[GAS_COLOR, HEAT_PUMP_COLOR, SAVINGS_COLOR],
                ),
                title=None,
            ),
            tooltip=[
                alt.Tooltip("year:Q", title="Year"),
                alt.Tooltip("series:N"),
                alt.Tooltip("cumulative_mtco2e:Q", format=".2f", title="MTCO2e"),
            ],
        )
        .properties(height=280)
    )


def build_comparison_chart(rows: Sequence[ComparisonRow], metric: str, title: str) -> alt.Chart:
    """Bar chart of one comparison metric across technologies and references."""

    source = comparison_frame(rows).dropna(subset=[metric])
    return (
        alt.Chart(source)
        .mark_bar()
        .encode(
            x=alt.X("name:N", sort=None, title=None, axis=alt.Axis(labelAngle=-45)),
            y=alt.Y(f"{metric}:Q", title=title),
            color=alt.Color(
                "name:N", sort=None, scale=alt.Scale(range=COMPARISON_COLORS), legend=None
            ),
            tooltip=[alt.Tooltip("name:N"), alt.Tooltip(f"{metric}:Q", format=",.2f")],
        )
        .properties(height=280)
    )


def build_incentive_pie(rows: Sequence[ComparisonRow]) -> alt.Chart:
    source = incentive_distribution(rows)
    return (
        alt.Chart(source)
        .mark_arc(outerRadius=110)
        .encode(
            theta=alt.Theta("incentive_cost:Q"),
            color=alt.Color("name:N", sort=None, scale=alt.Scale(range=COMPARISON_COLORS), title=None),
            tooltip=[
                alt.Tooltip("name:N"),
                alt.Tooltip("incentive_cost:Q", format="$,.0f"),
                alt.Tooltip("share:Q", format=".0%"),
            ],
        )
        .properties(height=280)
    )


def build_sensitivity_chart(
    points: Sequence[SensitivityPoint], metric: str, y_title: str, parameter_label: str
) -> alt.Chart:
    """Line chart of one sweep output against the percent change applied."""

    source = sensitivity_frame(points).dropna(subset=[metric])
    line = (
        alt.Chart(source)
        .mark_line(point=True, color=HEAT_PUMP_COLOR)
        .encode(
            x=alt.X("change_percent:Q", title=f"% Change in {parameter_label}"),
            y=alt.Y(f"{metric}:Q", title=y_title),
            tooltip=[
                alt.Tooltip("change_percent:Q", title="% change"),
                alt.Tooltip("parameter_value:Q", format=",.3f", title=parameter_label),
                alt.Tooltip(f"{metric}:Q", format=",.2f", title=y_title),
            ],
        )
    )
    zero_rule = (
        alt.Chart(pd.DataFrame({"change_percent": [0.0]}))
        .mark_rule(color="#666666", strokeDash=[3, 3])
        .encode(x="change_percent:Q")
    )
    return (line + zero_rule).properties(height=260)
