"""
Monte Carlo engine for fireplan.

Purpose
-------
Characterizes outcome uncertainty with a simplified single-asset model of
the household: every year the aggregate portfolio earns a random return,
and either receives the annual savings (before retirement) or pays the
inflation-adjusted living expense (from retirement on). Return and
inflation are drawn independently from normal distributions via a
Box-Muller transform.

Model per trial
---------------
    adj_expenses(y) = annual_expenses × (1 + inflation_y) ** y
    assets(y)       = assets(y-1) × (1 + return_y) + annual_savings   (age < retirement_age)
                    = assets(y-1) × (1 + return_y) - adj_expenses(y)  (otherwise)
    required(y)     = adj_expenses(y) × (life_expectancy - max(age, retirement_age) + 1)
    fire_achieved   = assets(y) >= required(y)

A trial records the year its assets first reach 0 (floored) and stops.

Aggregation
-----------
- Percentile bands: for each year, the recorded positive balances are
  sorted and the value at ``floor(p/100 × (n-1))`` is taken. The other
  fields of that year are borrowed from the first trial within 10% of
  the percentile value (nearest-trial approximation, not interpolation);
  a year with no such trial is skipped, and aggregation stops at the
  first year where no trial has a positive balance.
- Success probability: fraction of trials that are ``fire_achieved`` at
  the retirement year and still hold a positive balance 10 years later
  (or at the last simulated year when the horizon is shorter).

Parallelism
-----------
Trials are split into fixed-size chunks, each seeded from
``SeedSequence(seed).spawn(n_chunks)``, so results depend only on the
seed. Chunks run on a process pool bounded by ``n_workers`` and write
into a pre-sized NaN-initialized result matrix.

Example
-------
>>> from fireplan.config import MonteCarloConfig
>>> from fireplan.monte_carlo import run_monte_carlo
>>> summary = run_monte_carlo(data, MonteCarloConfig(simulations=1_000, seed=42))
>>> summary.success_probability
>>> summary.to_frame().head()
"""

from __future__ import annotations

import logging
import math
import multiprocessing as mp
from concurrent.futures import ProcessPoolExecutor
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np
import pandas as pd

from .config import MonteCarloConfig, ScenarioAdjustment
from .constants import (
    DEFAULT_EXPECTED_RETURN,
    DEFAULT_RETIREMENT_AGES,
    MONTHS_PER_YEAR,
    NEAREST_MATCH_TOLERANCE,
    SUCCESS_LOOKAHEAD_YEARS,
    TRIALS_PER_CHUNK,
)
from .currency import holding_value, to_reporting
from .exceptions import ConfigurationError
from .models import FireCalculationInput

__all__ = [
    "MonteCarloInputs",
    "TrialYear",
    "TrialMatrix",
    "MonteCarloResult",
    "MonteCarloSummary",
    "ScenarioOutcome",
    "DEFAULT_SCENARIOS",
    "derive_inputs",
    "box_muller",
    "simulate_trials",
    "extract_percentile",
    "success_probability",
    "project_single_asset",
    "run_monte_carlo",
    "run_scenario_analysis",
    "analyze_early_retirement_risk",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Containers
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class MonteCarloInputs:
    """
    Simplified single-asset model of a household.

    Attributes
    ----------
    current_age, life_expectancy : int
        First and last simulated age (inclusive).
    current_assets : float
        Starting portfolio value (JPY).
    annual_expenses : float
        Living expense at current age, before inflation.
    annual_savings : float
        Added every year before retirement (may be negative).
    mean_return, mean_inflation : float
        Annual means in percent.
    retirement_age : int
        First age paying expenses instead of receiving savings.
    """
    current_age: int
    life_expectancy: int
    current_assets: float
    annual_expenses: float
    annual_savings: float
    mean_return: float
    mean_inflation: float
    retirement_age: int

    @property
    def n_years(self) -> int:
        return self.life_expectancy - self.current_age + 1


@dataclass(frozen=True)
class TrialYear:
    """One year of a percentile band or deterministic projection."""
    year: int
    age: int
    assets: float
    expenses: float
    required_assets: float
    fire_achieved: bool


@dataclass(frozen=True)
class TrialMatrix:
    """
    Raw per-trial trajectories, shape ``(simulations, n_years)``.

    Entries after a trial's depletion year are NaN in ``assets``,
    ``expenses`` and ``required`` and False in ``fire_achieved``.
    """
    assets: np.ndarray
    expenses: np.ndarray
    required: np.ndarray
    fire_achieved: np.ndarray

    @property
    def simulations(self) -> int:
        return self.assets.shape[0]


@dataclass(frozen=True)
class MonteCarloResult:
    percentile: int
    projections: List[TrialYear]
    success_probability: float


@dataclass(frozen=True)
class MonteCarloSummary:
    """
    Output of :func:`run_monte_carlo`.

    Attributes
    ----------
    results : list of MonteCarloResult
        One per requested percentile, in request order.
    trials : TrialMatrix
    inputs : MonteCarloInputs
    success_probability : float
        Fraction in [0, 1]; identical for every percentile.
    """
    results: List[MonteCarloResult]
    trials: TrialMatrix = field(repr=False)
    inputs: MonteCarloInputs
    success_probability: float

    @property
    def simulations(self) -> int:
        return self.trials.simulations

    def percentile(self, p: int) -> MonteCarloResult:
        for result in self.results:
            if result.percentile == p:
                return result
        raise KeyError(f"percentile {p} was not extracted")

    def to_frame(self) -> pd.DataFrame:
        """Percentile bands as columns ``p10``, ``p25`` ... indexed by age."""
        bands = {
            f"p{r.percentile}": pd.Series(
                {row.age: row.assets for row in r.projections}, dtype=float
            )
            for r in self.results
        }
        frame = pd.DataFrame(bands)
        frame.index.name = "age"
        return frame.sort_index()


@dataclass(frozen=True)
class ScenarioOutcome:
    """One named scenario of :func:`run_scenario_analysis`."""
    scenario: ScenarioAdjustment
    summary: MonteCarloSummary

    @property
    def name(self) -> str:
        return self.scenario.name


DEFAULT_SCENARIOS: Tuple[ScenarioAdjustment, ...] = (
    ScenarioAdjustment(name="楽観的", return_adjustment=2.0, volatility_multiplier=0.8),
    ScenarioAdjustment(name="基本", return_adjustment=0.0, volatility_multiplier=1.0),
    ScenarioAdjustment(name="悲観的", return_adjustment=-2.0, volatility_multiplier=1.2),
    ScenarioAdjustment(name="不況", return_adjustment=-4.0, volatility_multiplier=1.5),
)
"""Optimistic / base / pessimistic / recession market conditions."""


# ---------------------------------------------------------------------------
# Input derivation
# ---------------------------------------------------------------------------

def _mean_expected_return(data: FireCalculationInput) -> float:
    holdings = data.asset_holdings
    if not holdings:
        return DEFAULT_EXPECTED_RETURN
    values = np.array([holding_value(h, data.exchange_rate) for h in holdings])
    returns = np.array([h.return_pct for h in holdings])
    total = values.sum()
    if total <= 0:
        return float(returns.mean())
    return float((values * returns).sum() / total)


def derive_inputs(
    data: FireCalculationInput,
    config: Optional[MonteCarloConfig] = None,
) -> MonteCarloInputs:
    """
    Collapse a household into the simplified single-asset model.

    - current assets: resolved portfolio total
    - annual expenses: ``monthly_expenses`` override, else the segment
      covering current age, × 12
    - annual savings: salaries active at current age - annual expenses
    - mean return: value-weighted expected return of the holdings
      (``config.expected_return`` overrides)
    - retirement age: the age after the highest-income salary plan ends,
      or current age without salary plans (``config.retirement_age``
      overrides)
    """
    config = config or MonteCarloConfig()
    rate = data.exchange_rate

    if data.monthly_expenses is not None:
        monthly = float(data.monthly_expenses)
    else:
        monthly = data.monthly_expenses_for_age(data.current_age)
    annual_expenses = monthly * MONTHS_PER_YEAR

    salary = sum(
        to_reporting(p.amount, p.currency, rate)
        for p in data.salary_plans
        if p.is_active(data.current_age)
    )

    if config.retirement_age is not None:
        retirement_age = config.retirement_age
    elif data.salary_plans:
        top = max(data.salary_plans, key=lambda p: to_reporting(p.amount, p.currency, rate))
        retirement_age = top.end_age + 1
    else:
        retirement_age = data.current_age

    if config.expected_return is not None:
        mean_return = config.expected_return
    else:
        mean_return = _mean_expected_return(data)

    current_assets = sum(holding_value(h, rate) for h in data.asset_holdings)

    return MonteCarloInputs(
        current_age=data.current_age,
        life_expectancy=data.life_expectancy,
        current_assets=float(current_assets),
        annual_expenses=annual_expenses,
        annual_savings=salary - annual_expenses,
        mean_return=mean_return,
        mean_inflation=data.inflation_rate,
        retirement_age=retirement_age,
    )


# ---------------------------------------------------------------------------
# Sampling
# ---------------------------------------------------------------------------

def _open_uniform(rng: np.random.Generator, shape: Tuple[int, ...]) -> np.ndarray:
    """Uniform draws on (0, 1); exact zeros are redrawn."""
    u = rng.random(shape)
    zeros = u == 0.0
    while zeros.any():
        u[zeros] = rng.random(int(zeros.sum()))
        zeros = u == 0.0
    return u


def box_muller(
    rng: np.random.Generator,
    shape: Tuple[int, ...],
    mean: float = 0.0,
    std: float = 1.0,
) -> np.ndarray:
    """
    Normal draws via the Box-Muller transform.

    ``z = sqrt(-2 ln u) · cos(2πv)`` with independent uniforms ``u, v``.

    Examples
    --------
    >>> rng = np.random.default_rng(0)
    >>> box_muller(rng, (3,), mean=0.05, std=0.0)
    array([0.05, 0.05, 0.05])
    """
    u = _open_uniform(rng, shape)
    v = _open_uniform(rng, shape)
    z = np.sqrt(-2.0 * np.log(u)) * np.cos(2.0 * np.pi * v)
    return mean + std * z


# ---------------------------------------------------------------------------
# Trial kernel
# ---------------------------------------------------------------------------

def _simulate_paths(
    inputs: MonteCarloInputs,
    returns: np.ndarray,
    inflation: np.ndarray,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    """Run trials given fractional return/inflation draws of shape (n, years)."""
    n, n_years = returns.shape
    assets_out = np.full((n, n_years), np.nan)
    expenses_out = np.full((n, n_years), np.nan)
    required_out = np.full((n, n_years), np.nan)
    fire_out = np.zeros((n, n_years), dtype=bool)

    assets = np.full(n, inputs.current_assets, dtype=float)
    alive = np.ones(n, dtype=bool)

    for y in range(n_years):
        if not alive.any():
            break
        age = inputs.current_age + y
        adj_expenses = inputs.annual_expenses * (1.0 + inflation[:, y]) ** y
        grown = assets * (1.0 + returns[:, y])
        if age < inputs.retirement_age:
            new = grown + inputs.annual_savings
        else:
            new = grown - adj_expenses
        remaining_years = inputs.life_expectancy - max(age, inputs.retirement_age) + 1
        required = adj_expenses * remaining_years
        recorded = np.maximum(new, 0.0)

        assets_out[alive, y] = recorded[alive]
        expenses_out[alive, y] = adj_expenses[alive]
        required_out[alive, y] = required[alive]
        fire_out[alive, y] = recorded[alive] >= required[alive]

        assets = np.where(alive, new, assets)
        alive &= new > 0

    return assets_out, expenses_out, required_out, fire_out


def _run_chunk(
    inputs: MonteCarloInputs,
    config: MonteCarloConfig,
    seed_seq: np.random.SeedSequence,
    n: int,
) -> Tuple[np.ndarray, np.ndarray, np.ndarray, np.ndarray]:
    rng = np.random.default_rng(seed_seq)
    shape = (n, inputs.n_years)
    returns = box_muller(rng, shape, inputs.mean_return / 100.0, config.return_volatility / 100.0)
    inflation = box_muller(
        rng, shape, inputs.mean_inflation / 100.0, config.inflation_volatility / 100.0
    )
    if not config.sequence_of_returns_risk:
        returns = -np.sort(-returns, axis=1)
    return _simulate_paths(inputs, returns, inflation)


def _resolve_workers(config: MonteCarloConfig) -> int:
    if config.n_workers is not None:
        return config.n_workers
    return max(1, mp.cpu_count() - 1)


def simulate_trials(inputs: MonteCarloInputs, config: MonteCarloConfig) -> TrialMatrix:
    """
    Run ``config.simulations`` independent trials.

    Returns
    -------
    TrialMatrix
        Identical for a given seed whatever the worker count.
    """
    total = config.simulations
    n_chunks = math.ceil(total / TRIALS_PER_CHUNK)
    children = np.random.SeedSequence(config.seed).spawn(n_chunks)
    sizes = [min(TRIALS_PER_CHUNK, total - i * TRIALS_PER_CHUNK) for i in range(n_chunks)]
    starts = [i * TRIALS_PER_CHUNK for i in range(n_chunks)]

    shape = (total, inputs.n_years)
    assets = np.full(shape, np.nan)
    expenses = np.full(shape, np.nan)
    required = np.full(shape, np.nan)
    fire = np.zeros(shape, dtype=bool)

    n_workers = min(_resolve_workers(config), n_chunks)
    logger.debug(
        "simulate_trials: %d trials x %d years in %d chunks on %d worker(s)",
        total, inputs.n_years, n_chunks, n_workers,
    )

    if n_workers <= 1:
        outputs = [
            _run_chunk(inputs, config, seq, n) for seq, n in zip(children, sizes)
        ]
    else:
        with ProcessPoolExecutor(max_workers=n_workers) as executor:
            outputs = list(
                executor.map(
                    _run_chunk,
                    [inputs] * n_chunks,
                    [config] * n_chunks,
                    children,
                    sizes,
                )
            )

    for start, n, (a, e, r, f) in zip(starts, sizes, outputs):
        assets[start:start + n] = a
        expenses[start:start + n] = e
        required[start:start + n] = r
        fire[start:start + n] = f

    return TrialMatrix(assets=assets, expenses=expenses, required=required, fire_achieved=fire)


# ---------------------------------------------------------------------------
# Aggregation
# ---------------------------------------------------------------------------

def extract_percentile(
    trials: TrialMatrix,
    inputs: MonteCarloInputs,
    percentile: int,
) -> List[TrialYear]:
    """
    Percentile band over positive recorded balances, year by year.

    Non-asset fields come from the first trial whose balance lies within
    10% of the percentile value.
    """
    rows: List[TrialYear] = []
    recorded_mask = ~np.isnan(trials.assets)
    for y in range(trials.assets.shape[1]):
        column = trials.assets[:, y]
        positive = recorded_mask[:, y] & (np.nan_to_num(column) > 0)
        if not positive.any():
            break
        values = np.sort(column[positive])
        value = float(values[int(math.floor(percentile / 100.0 * (values.size - 1)))])

        near = recorded_mask[:, y] & (
            np.abs(np.nan_to_num(column) - value) < value * NEAREST_MATCH_TOLERANCE
        )
        matches = np.flatnonzero(near)
        if matches.size == 0:
            continue
        ref = matches[0]
        rows.append(
            TrialYear(
                year=y,
                age=inputs.current_age + y,
                assets=value,
                expenses=float(trials.expenses[ref, y]),
                required_assets=float(trials.required[ref, y]),
                fire_achieved=bool(trials.fire_achieved[ref, y]),
            )
        )
    return rows


def success_probability(trials: TrialMatrix, inputs: MonteCarloInputs) -> float:
    """
    Fraction of trials FIRE-achieved at retirement and solvent 10 years on.

    The retirement index is clamped into the simulated horizon; the check
    index is capped at the last simulated year.
    """
    horizon = trials.assets.shape[1] - 1
    ret_idx = min(max(inputs.retirement_age - inputs.current_age, 0), horizon)
    check_idx = min(ret_idx + SUCCESS_LOOKAHEAD_YEARS, horizon)
    later = trials.assets[:, check_idx]
    solvent = ~np.isnan(later) & (np.nan_to_num(later) > 0)
    ok = trials.fire_achieved[:, ret_idx] & solvent
    return float(ok.mean())


# ---------------------------------------------------------------------------
# Deterministic counterpart
# ---------------------------------------------------------------------------

def project_single_asset(inputs: MonteCarloInputs) -> List[TrialYear]:
    """
    The simplified model with mean return and mean inflation, no noise.

    With zero volatility every Monte Carlo trial collapses to this path.
    Rows stop at the first non-positive balance, as percentile bands do.
    """
    shape = (1, inputs.n_years)
    returns = np.full(shape, inputs.mean_return / 100.0)
    inflation = np.full(shape, inputs.mean_inflation / 100.0)
    assets, expenses, required, fire = _simulate_paths(inputs, returns, inflation)
    rows = []
    for y in range(inputs.n_years):
        if np.isnan(assets[0, y]) or assets[0, y] <= 0:
            break
        rows.append(
            TrialYear(
                year=y,
                age=inputs.current_age + y,
                assets=float(assets[0, y]),
                expenses=float(expenses[0, y]),
                required_assets=float(required[0, y]),
                fire_achieved=bool(fire[0, y]),
            )
        )
    return rows


# ---------------------------------------------------------------------------
# Entry points
# ---------------------------------------------------------------------------

def run_monte_carlo(
    data: FireCalculationInput,
    config: Optional[MonteCarloConfig] = None,
) -> MonteCarloSummary:
    """
    Run the Monte Carlo engine for one household.

    Parameters
    ----------
    data : FireCalculationInput
    config : MonteCarloConfig, optional

    Returns
    -------
    MonteCarloSummary

    Raises
    ------
    ConfigurationError
        If a retirement age override is after life expectancy.
    """
    config = config or MonteCarloConfig()
    inputs = derive_inputs(data, config)
    if config.retirement_age is not None and config.retirement_age > data.life_expectancy:
        raise ConfigurationError(
            f"retirement_age {config.retirement_age} is after "
            f"life_expectancy {data.life_expectancy}."
        )

    trials = simulate_trials(inputs, config)
    probability = success_probability(trials, inputs)
    results = [
        MonteCarloResult(
            percentile=p,
            projections=extract_percentile(trials, inputs, p),
            success_probability=probability,
        )
        for p in config.percentiles
    ]
    return MonteCarloSummary(
        results=results,
        trials=trials,
        inputs=inputs,
        success_probability=probability,
    )


def run_scenario_analysis(
    data: FireCalculationInput,
    scenarios: Optional[Sequence[ScenarioAdjustment]] = None,
    base_config: Optional[MonteCarloConfig] = None,
) -> List[ScenarioOutcome]:
    """
    Compare market conditions by shifting the mean return and scaling volatility.

    Each scenario runs with ``mean + return_adjustment`` (percentage
    points) and ``return_volatility × volatility_multiplier``; the base
    configuration defaults to 1,000 trials, 15% return and 1% inflation
    volatility.

    Examples
    --------
    >>> outcomes = run_scenario_analysis(data)
    >>> {o.name: o.summary.success_probability for o in outcomes}
    """
    scenarios = DEFAULT_SCENARIOS if scenarios is None else scenarios
    base = base_config or MonteCarloConfig()
    base_return = derive_inputs(data, base).mean_return

    outcomes = []
    for scenario in scenarios:
        # Unvalidated copy: scaled volatility may exceed the 50% input bound
        config = base.model_copy(
            update={
                "expected_return": base_return + scenario.return_adjustment,
                "return_volatility": base.return_volatility * scenario.volatility_multiplier,
            }
        )
        outcomes.append(ScenarioOutcome(scenario=scenario, summary=run_monte_carlo(data, config)))
    return outcomes


def analyze_early_retirement_risk(
    data: FireCalculationInput,
    retirement_ages: Sequence[int] = DEFAULT_RETIREMENT_AGES,
    config: Optional[MonteCarloConfig] = None,
) -> Dict[int, float]:
    """
    Success probability per candidate retirement age.

    Ages after life expectancy are skipped.

    Examples
    --------
    >>> analyze_early_retirement_risk(data, (50, 55, 60))
    {50: 0.41, 55: 0.63, 60: 0.8}
    """
    config = config or MonteCarloConfig()
    out: Dict[int, float] = {}
    for age in retirement_ages:
        if age > data.life_expectancy:
            continue
        summary = run_monte_carlo(data, config.model_copy(update={"retirement_age": age}))
        out[age] = summary.success_probability
    return out
