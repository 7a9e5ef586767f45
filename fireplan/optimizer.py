"""
Retirement-age optimizer for fireplan.

Purpose
-------
Finds the minimal sustainable retirement age (``fire_age``) and the
FIRE target (``required_assets``) by re-running the yearly simulation
engine with the end age of the highest-income salary plan moved.

Search
------
A candidate age succeeds when the final-year total assets of a run with
that plan ending at the candidate age reach ``min_final_assets`` (1 yen).

1. No salary plans: 4% rule on the current living expense
   (``annual × 25``), ``years_to_fire = 0``.
2. Otherwise ``check_age = min(plan.end_age, max_search_age)``.
3. check_age fails: scan forward ``check_age + 1 … max_search_age``; the
   first success is fire_age. No success means FIRE is unattainable and
   is reported as ``years_to_fire = -1`` (not an exception).
4. check_age succeeds: walk backward while earlier ages keep succeeding,
   down to ``max(plan.start_age, current_age)``.
5. ``required_assets`` is the total assets at the fire_age year of a
   final run with the plan ending at fire_age.

Both scans assume solvency is monotonic in retirement age. Pensions
starting mid-range, one-off expenses or loan payoffs can break that, in
which case the result is a local (not global) minimum.

Example
-------
>>> from fireplan.optimizer import calculate_fire
>>> result = calculate_fire(data)
>>> result.fire_age, result.required_assets
>>> result.is_fire_achievable
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import List, Optional

import pandas as pd

from .config import OptimizerConfig
from .constants import MONTHS_PER_YEAR, SAFE_WITHDRAWAL_MULTIPLIER
from .currency import to_reporting, total_assets
from .engine import YearlyDetail, simulate_years
from .exceptions import SimulationError
from .models import FireCalculationInput, SalaryPlan

__all__ = [
    "YearlyProjection",
    "FireCalculationResult",
    "SearchResult",
    "RetirementAgeOptimizer",
    "calculate_fire",
    "build_projections",
    "projections_to_frame",
    "four_percent_target",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Result Containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YearlyProjection:
    """
    One row of the FIRE projection chart.

    Attributes
    ----------
    year : int
        Index from 0 (current age).
    age : int
    total_assets : float
        Floored total assets of the baseline run.
    expenses : float
        Display expenses: un-inflated living expense + loan payments +
        special expenses (positive).
    real_expenses : float
        Inflation-adjusted total expenses (positive).
    fire_achieved : bool
        ``required_assets > 0 and total_assets >= required_assets``.
    """
    year: int
    age: int
    total_assets: float
    expenses: float
    real_expenses: float
    fire_achieved: bool


@dataclass(frozen=True)
class FireCalculationResult:
    """
    Outcome of :func:`calculate_fire`.

    Attributes
    ----------
    years_to_fire : int
        ``fire_age - current_age``; -1 when FIRE is unattainable.
    fire_age : int
        Minimal sustainable retirement age; -1 when unattainable.
    required_assets : float
        FIRE target. Falls back to the 4% rule when unattainable.
    projected_assets : float
        Final-year total assets of the baseline run.
    is_fire_achievable : bool
    monthly_shortfall : float
        Extra monthly saving to close the gap between current and
        required assets by fire_age; 0 when years_to_fire <= 0.
    projections : list of YearlyProjection
    details : list of YearlyDetail
        Baseline run (input as given).
    search_evaluations : int
        Engine re-runs spent by the search.
    """
    years_to_fire: int
    fire_age: int
    required_assets: float
    projected_assets: float
    is_fire_achievable: bool
    monthly_shortfall: float
    projections: List[YearlyProjection] = field(repr=False)
    details: List[YearlyDetail] = field(repr=False)
    search_evaluations: int = 0

    def summary(self) -> str:
        """Human-readable one-paragraph summary."""
        if not self.is_fire_achievable:
            status = "FIRE unattainable within the searched age range"
        else:
            status = f"FIRE at age {self.fire_age} ({self.years_to_fire} years)"
        return (
            f"FireCalculationResult({status}\n"
            f"  required_assets={self.required_assets:,.0f}\n"
            f"  projected_assets={self.projected_assets:,.0f}\n"
            f"  monthly_shortfall={self.monthly_shortfall:,.0f}\n"
            f"  evaluations={self.search_evaluations})"
        )


@dataclass(frozen=True)
class SearchResult:
    """Raw outcome of :meth:`RetirementAgeOptimizer.search`."""
    fire_age: Optional[int]
    required_assets: float
    evaluations: int
    plan_id: Optional[str] = None

    @property
    def attainable(self) -> bool:
        return self.fire_age is not None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def four_percent_target(data: FireCalculationInput) -> float:
    """Static FIRE target: annual living expense at current age × 25."""
    annual = data.monthly_expenses_for_age(data.current_age) * MONTHS_PER_YEAR
    return annual * SAFE_WITHDRAWAL_MULTIPLIER


def _highest_income_plan(data: FireCalculationInput) -> SalaryPlan:
    # max() keeps the first of equal maxima
    return max(
        data.salary_plans,
        key=lambda p: to_reporting(p.amount, p.currency, data.exchange_rate),
    )


# ---------------------------------------------------------------------------
# Optimizer
# ---------------------------------------------------------------------------

class RetirementAgeOptimizer:
    """
    Greedy search for the minimal sustainable retirement age.

    Parameters
    ----------
    data : FireCalculationInput
        Household input. Never mutated; every candidate runs on a copy.
    config : OptimizerConfig, optional
        Search ceiling age, solvency threshold, evaluation ceiling and
        verbosity.

    Examples
    --------
    >>> optimizer = RetirementAgeOptimizer(data, OptimizerConfig(verbose=True))
    >>> found = optimizer.search()
    >>> found.fire_age, found.evaluations
    """

    def __init__(self, data: FireCalculationInput, config: Optional[OptimizerConfig] = None):
        self.data = data
        self.config = config or OptimizerConfig()
        self.verbose = self.config.verbose
        self.evaluations = 0

    # -------------------- Engine re-runs --------------------
    def _run(self, plan: SalaryPlan, end_age: int) -> List[YearlyDetail]:
        limit = self.config.max_evaluations
        if limit is not None and self.evaluations >= limit:
            raise SimulationError(
                f"Retirement-age search exceeded max_evaluations={limit}. "
                f"Raise the ceiling or lower max_search_age."
            )
        self.evaluations += 1
        return simulate_years(self.data.with_salary_end_age(plan.id, end_age))

    def can_achieve_fire(self, plan: SalaryPlan, age: int) -> bool:
        """True if ending *plan* at *age* keeps final assets above the threshold."""
        if self.verbose:
            print(f"[Iter {self.evaluations + 1}] Testing retirement age={age}...")

        final = self._run(plan, age)[-1].total_assets
        ok = final >= self.config.min_final_assets
        logger.debug("can_achieve_fire(age=%d): final=%.0f ok=%s", age, final, ok)

        if self.verbose:
            status = "✓ Sustainable" if ok else "✗ Depleted"
            print(f"    {status}, final assets={final:,.0f}")
        return ok

    # -------------------- Search --------------------
    def search(self) -> SearchResult:
        """
        Run the greedy retirement-age search.

        Returns
        -------
        SearchResult
            ``fire_age`` is None when no age up to ``max_search_age``
            succeeds; ``required_assets`` then holds the 4% rule target.

        Raises
        ------
        SimulationError
            If ``max_evaluations`` engine re-runs are exhausted.
        """
        self.evaluations = 0
        data = self.data

        if not data.salary_plans:
            target = four_percent_target(data)
            if self.verbose:
                print(f"\n=== No salary plans: 4% rule target {target:,.0f} ===\n")
            return SearchResult(fire_age=data.current_age, required_assets=target, evaluations=0)

        plan = _highest_income_plan(data)
        max_age = self.config.max_search_age
        check_age = min(plan.end_age, max_age)

        if self.verbose:
            print(f"\n=== RetirementAgeOptimizer: plan '{plan.name}', "
                  f"check age {check_age}, ceiling {max_age} ===")

        fire_age: Optional[int] = None
        if not self.can_achieve_fire(plan, check_age):
            for age in range(check_age + 1, max_age + 1):
                if self.can_achieve_fire(plan, age):
                    fire_age = age
                    break
        else:
            fire_age = check_age
            lower = max(plan.start_age, data.current_age)
            for age in range(check_age - 1, lower - 1, -1):
                if not self.can_achieve_fire(plan, age):
                    break
                fire_age = age

        if fire_age is None:
            target = four_percent_target(data)
            if self.verbose:
                print(f"=== Unattainable by age {max_age}: 4% rule target {target:,.0f} ===\n")
            logger.debug("search: unattainable after %d evaluations", self.evaluations)
            return SearchResult(
                fire_age=None,
                required_assets=target,
                evaluations=self.evaluations,
                plan_id=plan.id,
            )

        fire_age = max(fire_age, data.current_age)
        details = self._run(plan, fire_age)
        idx = min(fire_age - data.current_age, len(details) - 1)
        required = details[idx].total_assets

        if self.verbose:
            print(f"=== Optimal: fire_age={fire_age}, required assets={required:,.0f} ===\n")
        logger.debug(
            "search: fire_age=%d required=%.0f evaluations=%d",
            fire_age, required, self.evaluations,
        )
        return SearchResult(
            fire_age=fire_age,
            required_assets=required,
            evaluations=self.evaluations,
            plan_id=plan.id,
        )


# ---------------------------------------------------------------------------
# Projections
# ---------------------------------------------------------------------------

def build_projections(
    details: List[YearlyDetail],
    data: FireCalculationInput,
    required_assets: float,
) -> List[YearlyProjection]:
    """Turn engine snapshots into chart rows against a FIRE target."""
    rows = []
    for d in details:
        display_living = data.monthly_expenses_for_age(d.age) * MONTHS_PER_YEAR
        other = -(d.loan_payments + sum(d.special_expenses.values()))
        rows.append(
            YearlyProjection(
                year=d.year,
                age=d.age,
                total_assets=d.total_assets,
                expenses=display_living + other,
                real_expenses=-d.total_expenses,
                fire_achieved=bool(required_assets > 0 and d.total_assets >= required_assets),
            )
        )
    return rows


def projections_to_frame(projections: List[YearlyProjection]) -> pd.DataFrame:
    """Projection rows as a DataFrame indexed by age."""
    frame = pd.DataFrame(
        [
            {
                "year": p.year,
                "total_assets": p.total_assets,
                "expenses": p.expenses,
                "real_expenses": p.real_expenses,
                "fire_achieved": p.fire_achieved,
            }
            for p in projections
        ],
        index=pd.Index([p.age for p in projections], name="age"),
        columns=["year", "total_assets", "expenses", "real_expenses", "fire_achieved"],
    )
    return frame


# ---------------------------------------------------------------------------
# Top-level entry point
# ---------------------------------------------------------------------------

def calculate_fire(
    data: FireCalculationInput,
    config: Optional[OptimizerConfig] = None,
) -> FireCalculationResult:
    """
    Full deterministic FIRE calculation.

    Parameters
    ----------
    data : FireCalculationInput
    config : OptimizerConfig, optional

    Returns
    -------
    FireCalculationResult
        Always fully populated; check ``is_fire_achievable`` (or
        ``years_to_fire == -1``) for the unattainable case.

    Examples
    --------
    >>> result = calculate_fire(data)
    >>> print(result.summary())
    """
    details = simulate_years(data)
    found = RetirementAgeOptimizer(data, config).search()

    if found.attainable:
        fire_age = found.fire_age
        years_to_fire = fire_age - data.current_age
    else:
        fire_age = -1
        years_to_fire = -1

    required = found.required_assets
    current = total_assets(data.asset_holdings, data.exchange_rate)
    if years_to_fire > 0:
        shortfall = max(0.0, (required - current) / (years_to_fire * MONTHS_PER_YEAR))
    else:
        shortfall = 0.0

    return FireCalculationResult(
        years_to_fire=years_to_fire,
        fire_age=fire_age,
        required_assets=required,
        projected_assets=details[-1].total_assets,
        is_fire_achievable=years_to_fire >= 0,
        monthly_shortfall=shortfall,
        projections=build_projections(details, data, required),
        details=details,
        search_evaluations=found.evaluations,
    )
