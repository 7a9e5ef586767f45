"""
fireplan — Household FIRE Planner

Projects a household's net worth year by year, finds the earliest
sustainable retirement age and measures market uncertainty with Monte
Carlo trials.

Modules
-------
- models       : Household input (holdings, loans, plans, segments)
- currency     : JPY/USD resolution and portfolio totals
- loans        : Monthly loan amortization
- ledger       : Per-run asset balances and rebalancing policy
- engine       : Deterministic yearly simulation
- optimizer    : Retirement-age search and FIRE result
- monte_carlo  : Stochastic trials, percentile bands, scenarios
- analysis     : What-if re-runs and closed-form helpers
- education    : Children's education costs as special expenses
- serialization: JSON persistence
- utils        : Shared utilities (validation, rates, reporting)

"""

__version__ = "0.1.0"

from .models import (
    AssetHolding,
    ExpenseSegment,
    FireCalculationInput,
    Loan,
    PensionPlan,
    SalaryPlan,
    SpecialExpense,
    SpecialIncome,
)
from .config import MonteCarloConfig, OptimizerConfig, ScenarioAdjustment
from .engine import YearlyDetail, simulate_years
from .optimizer import FireCalculationResult, calculate_fire
from .monte_carlo import MonteCarloSummary, run_monte_carlo
from .exceptions import FirePlanError
from . import utils
