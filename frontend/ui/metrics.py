"""Formatting and KPI card helpers for Streamlit pages."""

from typing import List

from frontend.ui.rendering import NOT_AVAILABLE, MetricSpec
from services.calculator_core import INCENTIVE_LABELS, INCENTIVE_RATES_PER_MT, TechnologyResult
from services.package_analysis import CombinedResult
from utils.economics import is_undefined


def fmt_currency(value: float) -> str:
    if is_undefined(value):
        return NOT_AVAILABLE
    sign = "-" if value < 0 else ""
    return f"{sign}${abs(value):,.0f}"


def fmt_number(value: float, decimals: int = 2) -> str:
    if is_undefined(value):
        return NOT_AVAILABLE
    return f"{value:,.{decimals}f}"


def fmt_years(value: float) -> str:
    if is_undefined(value):
        return NOT_AVAILABLE
    return f"{value:,.1f} years"


def technology_metric_specs(result: TechnologyResult) -> List[MetricSpec]:
    """Headline cards for one technology tab."""

    return [
        MetricSpec(
            "Annual emissions reduction",
            f"{fmt_number(result.net_emissions_reduction)} MTCO2e",
            help="Gas emissions minus heat pump emissions for the same delivered heat.",
            caption=f"Lifecycle: {fmt_number(result.lifetime_emissions_reduction)} MTCO2e",
        ),
        MetricSpec(
            "Annual savings",
            fmt_currency(result.annual_savings),
            help="Gas operating cost minus heat pump operating cost, maintenance included.",
            caption=f"Gas {fmt_currency(result.annual_cost_gas)} vs HP {fmt_currency(result.annual_cost_hp)}",
        ),
        MetricSpec(
            "Payback (with incentives)",
            fmt_years(result.simple_payback_years),
            help="Additional upfront cost divided by annual savings.",
            caption=f"Without incentives: {fmt_years(result.simple_payback_no_incentive)}",
        ),
        MetricSpec(
            "Net present value",
            fmt_currency(result.net_present_value),
            help="Escalated savings discounted over the equipment lifespan, minus the additional cost.",
            caption=f"Additional cost: {fmt_currency(result.additional_cost)}",
        ),
    ]


def incentive_metric_specs(result: TechnologyResult) -> List[MetricSpec]:
    return [
        MetricSpec(
            label,
            fmt_currency(value),
            help=f"${rate:,.2f} per MTCO2e of annual reduction.",
        )
        for label, rate, value in zip(INCENTIVE_LABELS, INCENTIVE_RATES_PER_MT, result.optimal_incentives)
    ]


def combined_metric_specs(combined: CombinedResult, bundle_discount_percent: float) -> List[MetricSpec]:
    return [
        MetricSpec(
            "Package emissions reduction",
            f"{fmt_number(combined.net_emissions_reduction)} MTCO2e/yr",
            caption=f"Lifecycle: {fmt_number(combined.lifetime_emissions_reduction)} MTCO2e",
        ),
        MetricSpec(
            "Bundle discount",
            fmt_currency(combined.bundle_discount_amount),
            caption=f"{bundle_discount_percent:g}% when installing both systems together",
        ),
        MetricSpec("Total incentive", fmt_currency(combined.total_incentive)),
        MetricSpec(
            "Package payback",
            fmt_years(combined.payback_period),
            caption=(
                f"${fmt_number(combined.cost_per_mtco2e)}/MTCO2e annual, "
                f"${fmt_number(combined.lifetime_cost_per_mtco2e)}/MTCO2e lifecycle"
            ),
        ),
    ]
