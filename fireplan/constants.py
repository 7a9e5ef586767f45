"""
Global constants for fireplan.

Purpose
-------
Centralizes default values and magic numbers used throughout the fireplan
codebase. Using constants instead of hardcoded values keeps the engine,
optimizer and Monte Carlo modules consistent with each other.

Usage
-----
>>> from fireplan.constants import FALLBACK_EXCHANGE_RATE, MC_PERCENTILES
>>> amount_jpy = 1_000 * FALLBACK_EXCHANGE_RATE

Categories
----------
- Currency: reporting currency, fallback exchange rate
- Returns: default expected return, months per year
- FIRE search: ceiling age, 4% rule multiplier, solvency threshold
- Monte Carlo: trial bounds, volatility bounds, percentiles, heuristics
"""

from typing import Tuple

__all__ = [
    # Currency
    "REPORTING_CURRENCY",
    "FALLBACK_EXCHANGE_RATE",
    "MANYEN",
    # Returns / time
    "DEFAULT_EXPECTED_RETURN",
    "DEFAULT_INTEREST_RATE",
    "MONTHS_PER_YEAR",
    # FIRE search
    "MAX_FIRE_SEARCH_AGE",
    "SAFE_WITHDRAWAL_MULTIPLIER",
    "MIN_FINAL_ASSETS",
    "DEFAULT_MAX_EVALUATIONS",
    # Monte Carlo
    "DEFAULT_SIMULATIONS",
    "MIN_SIMULATIONS",
    "MAX_SIMULATIONS",
    "DEFAULT_RETURN_VOLATILITY",
    "MAX_RETURN_VOLATILITY",
    "DEFAULT_INFLATION_VOLATILITY",
    "MAX_INFLATION_VOLATILITY",
    "MC_PERCENTILES",
    "SUCCESS_LOOKAHEAD_YEARS",
    "NEAREST_MATCH_TOLERANCE",
    "TRIALS_PER_CHUNK",
    "DEFAULT_SEED",
    "DEFAULT_RETIREMENT_AGES",
]


# =============================================================================
# Currency
# =============================================================================

REPORTING_CURRENCY: str = "JPY"
"""Currency every amount is converted into before it enters the engine."""

FALLBACK_EXCHANGE_RATE: float = 150.0
"""USD/JPY rate used when the caller does not supply one (degraded mode)."""

MANYEN: int = 10_000
"""Yen per 万円 (man-yen), the display unit of the original planner."""


# =============================================================================
# Returns / Time
# =============================================================================

DEFAULT_EXPECTED_RETURN: float = 5.0
"""Expected annual return (percent) for holdings that do not declare one."""

DEFAULT_INTEREST_RATE: float = 0.0
"""Annual interest rate (percent) for loans that do not declare one."""

MONTHS_PER_YEAR: int = 12
"""Months amortized per simulated year."""


# =============================================================================
# FIRE Search
# =============================================================================

MAX_FIRE_SEARCH_AGE: int = 60
"""Latest retirement age the optimizer will consider."""

SAFE_WITHDRAWAL_MULTIPLIER: float = 25.0
"""4% rule: required assets = annual expenses / 0.04."""

MIN_FINAL_ASSETS: float = 1.0
"""Final-year total assets needed for a retirement age to count as sustainable."""

DEFAULT_MAX_EVALUATIONS: int = 200
"""Ceiling on full engine re-runs during one retirement-age search."""


# =============================================================================
# Monte Carlo
# =============================================================================

DEFAULT_SIMULATIONS: int = 1_000
"""Default number of Monte Carlo trials."""

MIN_SIMULATIONS: int = 100
MAX_SIMULATIONS: int = 10_000

DEFAULT_RETURN_VOLATILITY: float = 15.0
"""Annual return standard deviation (percent)."""

MAX_RETURN_VOLATILITY: float = 50.0

DEFAULT_INFLATION_VOLATILITY: float = 1.0
"""Annual inflation standard deviation (percent)."""

MAX_INFLATION_VOLATILITY: float = 10.0

MC_PERCENTILES: Tuple[int, ...] = (10, 25, 50, 75, 90)
"""Percentile bands extracted from the trial matrix."""

SUCCESS_LOOKAHEAD_YEARS: int = 10
"""Years after retirement a trial must stay solvent to count as a success."""

NEAREST_MATCH_TOLERANCE: float = 0.10
"""Relative distance within which a trial is borrowed as a percentile's reference."""

TRIALS_PER_CHUNK: int = 250
"""Trials per independently-seeded work unit (keeps results worker-count independent)."""

DEFAULT_SEED: int = 42
"""Default random seed for reproducibility."""

DEFAULT_RETIREMENT_AGES: Tuple[int, ...] = (50, 55, 60, 65)
"""Candidate retirement ages for the early-retirement risk analysis."""
