"""Program administrator summary built on top of the calculator results."""
from __future__ import annotations

from typing import List

import pandas as pd

from services.calculator_core import INCENTIVE_RATES_PER_MT
from services.package_analysis import CalculatorInputs, CalculatorResults

# Index of the mid-range $/MTCO2e rate used for program recommendations.
RECOMMENDED_RATE_INDEX = 1

PROGRAM_SUMMARY_COLUMNS = [
    "Technology",
    "Annual MTCO2e",
    "Lifecycle MTCO2e",
    "Current Incentive",
    "$/MTCO2e (Annual)",
    "$/MTCO2e (Lifecycle)",
    "Recommended Incentive",
]

PROGRAM_RECOMMENDATIONS = [
    f"Standardize on ${INCENTIVE_RATES_PER_MT[RECOMMENDED_RATE_INDEX]}/MTCO2e for program design",
    "Implement bundle incentives to maximize adoption",
    "Focus marketing on combined financial and environmental benefits",
    "Track actual performance to validate emission reduction estimates",
    "Consider targeted higher incentives for low-income households",
]


def build_program_summary(results: CalculatorResults) -> pd.DataFrame:
    """Return the comparison table plus recommended incentives and a package row.

    Reference rows carry no recommendation (``None``). The combined package
    recommends its total incentive, bundle discount included.
    """

    recommended = [
        results.space_heating.optimal_incentives[RECOMMENDED_RATE_INDEX],
        results.water_heating.optimal_incentives[RECOMMENDED_RATE_INDEX],
    ]
    rows = []
    for idx, row in enumerate(results.comparison):
        rows.append(
            {
                "Technology": row.name,
                "Annual MTCO2e": row.annual_reduction,
                "Lifecycle MTCO2e": row.lifetime_reduction,
                "Current Incentive": row.incentive_cost,
                "$/MTCO2e (Annual)": row.cost_per_ton,
                "$/MTCO2e (Lifecycle)": row.lifetime_cost_per_ton,
                "Recommended Incentive": recommended[idx] if idx < len(recommended) else None,
            }
        )

    combined = results.combined
    rows.append(
        {
            "Technology": "Combined Package",
            "Annual MTCO2e": combined.net_emissions_reduction,
            "Lifecycle MTCO2e": combined.lifetime_emissions_reduction,
            "Current Incentive": combined.total_incentive,
            "$/MTCO2e (Annual)": combined.cost_per_mtco2e,
            "$/MTCO2e (Lifecycle)": combined.lifetime_cost_per_mtco2e,
            "Recommended Incentive": combined.total_incentive,
        }
    )
    return pd.DataFrame(rows, columns=PROGRAM_SUMMARY_COLUMNS)


def build_key_findings(results: CalculatorResults, inputs: CalculatorInputs) -> List[str]:
    """Translate the package results into short findings for administrators."""

    space = results.space_heating
    water = results.water_heating
    findings: List[str] = []

    if space.net_emissions_reduction >= water.net_emissions_reduction:
        findings.append("Heat pump space heating provides the largest carbon reduction per unit")
    else:
        findings.append("Heat pump water heating provides the largest carbon reduction per unit")

    if results.combined.net_emissions_reduction > 0:
        findings.append("Combined package offers the best overall value for climate impact")
    else:
        findings.append(
            "Combined package does not reduce emissions under the current assumptions"
        )

    findings.append(
        f"Bundle discount of {inputs.bundle_discount_percent:g}% increases adoption potential"
    )
    findings.append(
        "Annual emissions reduction from package: "
        f"{results.combined.net_emissions_reduction:,.2f} MTCO2e"
    )
    return findings


__all__ = [
    "PROGRAM_RECOMMENDATIONS",
    "PROGRAM_SUMMARY_COLUMNS",
    "RECOMMENDED_RATE_INDEX",
    "build_key_findings",
    "build_program_summary",
]
