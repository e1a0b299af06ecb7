"""Finance helpers shared by the calculator engine, app and API entrypoints."""
from __future__ import annotations

import math

# Sentinel for ratios whose denominator is zero (e.g., payback with no savings).
# Consumers render it as "N/A"; it is never replaced by a fallback number.
UNDEFINED = float("nan")


def is_undefined(value: float | None) -> bool:
    """Return True when ``value`` is missing or not a finite number."""

    return value is None or not math.isfinite(value)


def safe_divide(numerator: float, denominator: float) -> float:
    """Divide, returning :data:`UNDEFINED` instead of raising on a zero denominator."""

    if denominator == 0:
        return UNDEFINED
    return numerator / denominator


def _ensure_finite(value: float, name: str) -> None:
    """Raise ValueError when a numeric value is non-finite."""

    if not math.isfinite(value):
        raise ValueError(f"{name} must be a finite number")


def _ensure_non_negative_finite(value: float, name: str) -> None:
    """Raise ValueError when a numeric value is negative or non-finite."""

    _ensure_finite(value, name)
    if value < 0:
        raise ValueError(f"{name} must be non-negative")


def compute_escalated_npv(
    upfront_cost: float,
    annual_savings: float,
    years: int,
    discount_rate_pct: float,
    escalation_rate_pct: float,
) -> float:
    """Return the NPV of an upfront cost recovered by escalating annual savings.

    Savings are escalated *before* discounting in every year, including year 1,
    so the first-year cash flow is ``annual_savings * (1 + escalation)``.
    """

    npv = -upfront_cost
    current_savings = annual_savings
    for year in range(1, years + 1):
        current_savings *= 1 + escalation_rate_pct / 100
        npv += current_savings / (1 + discount_rate_pct / 100) ** year
    return npv


def escalation_multiplier(escalation_rate_pct: float, year: int) -> float:
    """Return the compounded price multiplier applied in ``year`` (year 1 = 1.0)."""

    return (1 + escalation_rate_pct / 100) ** (year - 1)


__all__ = [
    "UNDEFINED",
    "is_undefined",
    "safe_divide",
    "compute_escalated_npv",
    "escalation_multiplier",
    "_ensure_finite",
    "_ensure_non_negative_finite",
]
