"""
What-if analyses for fireplan.

Purpose
-------
Thin wrappers that re-run :func:`fireplan.optimizer.calculate_fire` on
modified copies of an input, plus two closed-form helpers used by the
dashboard summary.

Key components
--------------
- compare_scenarios : one result per input
- analyze_savings_rate_impact : scale every salary plan by ``1 + change/100``
- analyze_return_impact : shift every holding's expected return by ``change`` points
- fire_progress : current assets as a percentage of the FIRE target (capped at 100)
- future_value : monthly-compounded future value of a balance plus contributions
- impact_to_frame : one row per change with the headline result fields

Example
-------
>>> results = analyze_savings_rate_impact(data, [-10, 0, 10])
>>> [r.fire_age for r in results]
"""

from __future__ import annotations

from typing import List, Optional, Sequence

import pandas as pd

from .config import OptimizerConfig
from .constants import MONTHS_PER_YEAR
from .models import FireCalculationInput
from .optimizer import FireCalculationResult, calculate_fire
from .utils import monthly_rate, pct_to_rate

__all__ = [
    "compare_scenarios",
    "analyze_savings_rate_impact",
    "analyze_return_impact",
    "fire_progress",
    "future_value",
    "impact_to_frame",
]


# ---------------------------------------------------------------------------
# Re-run analyses
# ---------------------------------------------------------------------------

def compare_scenarios(
    scenarios: Sequence[FireCalculationInput],
    config: Optional[OptimizerConfig] = None,
) -> List[FireCalculationResult]:
    """Run :func:`calculate_fire` on each input, preserving order."""
    return [calculate_fire(s, config) for s in scenarios]


def analyze_savings_rate_impact(
    data: FireCalculationInput,
    changes_pct: Sequence[float],
    config: Optional[OptimizerConfig] = None,
) -> List[FireCalculationResult]:
    """
    Re-run with every salary plan's annual amount scaled by ``1 + change/100``.

    A plan without an amount stays at 0.
    """
    results = []
    for change in changes_pct:
        factor = 1.0 + pct_to_rate(change)
        plans = [
            p.model_copy(update={"annual_amount": p.amount * factor})
            for p in data.salary_plans
        ]
        results.append(calculate_fire(data.model_copy(update={"salary_plans": plans}), config))
    return results


def analyze_return_impact(
    data: FireCalculationInput,
    changes_pct: Sequence[float],
    config: Optional[OptimizerConfig] = None,
) -> List[FireCalculationResult]:
    """
    Re-run with every holding's expected return shifted by ``change`` points.

    Holdings without an expected return start from the 5% default.
    """
    results = []
    for change in changes_pct:
        holdings = [
            h.model_copy(update={"expected_return": h.return_pct + change})
            for h in data.asset_holdings
        ]
        results.append(calculate_fire(data.model_copy(update={"asset_holdings": holdings}), config))
    return results


def impact_to_frame(changes_pct: Sequence[float], results: Sequence[FireCalculationResult]) -> pd.DataFrame:
    """Headline fields of an impact analysis, indexed by change."""
    frame = pd.DataFrame(
        [
            {
                "fire_age": r.fire_age,
                "years_to_fire": r.years_to_fire,
                "required_assets": r.required_assets,
                "projected_assets": r.projected_assets,
                "monthly_shortfall": r.monthly_shortfall,
            }
            for r in results
        ],
        index=pd.Index(list(changes_pct), name="change_pct"),
    )
    return frame


# ---------------------------------------------------------------------------
# Closed-form helpers
# ---------------------------------------------------------------------------

def fire_progress(current_assets: float, required_assets: float) -> float:
    """
    Progress toward the FIRE target in percent, capped at 100.

    >>> fire_progress(15_000_000, 60_000_000)
    25.0
    >>> fire_progress(1, 0)
    0.0
    """
    if required_assets <= 0:
        return 0.0
    return min(current_assets / required_assets * 100.0, 100.0)


def future_value(
    present_value: float,
    monthly_contribution: float,
    annual_rate_pct: float,
    years: float,
) -> float:
    """
    Future value with monthly compounding and monthly contributions.

    Parameters
    ----------
    present_value : float
    monthly_contribution : float
    annual_rate_pct : float
        Nominal annual rate in percent; monthly rate is ``rate / 12``.
    years : float

    Returns
    -------
    float
        ``PV (1+r)^n + C ((1+r)^n - 1) / r``; linear accumulation at 0%.

    Examples
    --------
    >>> future_value(1_000_000, 50_000, 0.0, 10)
    7000000.0
    """
    r = monthly_rate(annual_rate_pct)
    n = years * MONTHS_PER_YEAR
    if r == 0:
        return float(present_value + monthly_contribution * n)
    growth = (1.0 + r) ** n
    return float(present_value * growth + monthly_contribution * (growth - 1.0) / r)
