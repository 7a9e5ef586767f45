"""
Pytest configuration and fixtures for the fireplan test suite.

This module provides reusable household fixtures. Amounts are chosen so
that expected results can be worked out by hand (zero inflation, cash
only households, round figures).
"""

from typing import List

import pytest

from fireplan.config import MonteCarloConfig
from fireplan.models import (
    AssetHolding,
    ExpenseSegment,
    FireCalculationInput,
    PensionPlan,
    SalaryPlan,
)


# ---------------------------------------------------------------------------
# Holding Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def bonds() -> AssetHolding:
    """Low-return holding: 1,000,000 JPY at 2%."""
    return AssetHolding(
        id="a1", name="bonds", quantity=1, price_per_unit=1_000_000, expected_return=2
    )


@pytest.fixture
def stocks() -> AssetHolding:
    """High-return holding: 3,000,000 JPY at 8%."""
    return AssetHolding(
        id="a2", name="stocks", quantity=1, price_per_unit=3_000_000, expected_return=8
    )


@pytest.fixture
def two_holdings(bonds, stocks) -> List[AssetHolding]:
    """Bonds and stocks in a 1:3 value ratio."""
    return [bonds, stocks]


# ---------------------------------------------------------------------------
# Household Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def no_asset_input() -> FireCalculationInput:
    """
    Household with no assets, income, or loans.

    Age 30 → 90, 200,000 JPY/month, no inflation.
    4% rule target: 200,000 × 12 × 25 = 60,000,000.
    """
    return FireCalculationInput(
        current_age=30,
        life_expectancy=90,
        inflation_rate=0,
        expense_segments=[
            ExpenseSegment(id="e1", start_age=30, end_age=90, monthly_expenses=200_000),
        ],
    )


@pytest.fixture
def saver_input() -> FireCalculationInput:
    """
    Cash-only saver with a hand-computable retirement age.

    Age 35 → 90, salary 9,000,000/year until 60, expenses 3,000,000/year,
    no holdings, no inflation. Final cash when the salary ends at R is
    ``9M × (R - 34) - 168M``, so the minimal sustainable age is 53.
    """
    return FireCalculationInput(
        current_age=35,
        life_expectancy=90,
        inflation_rate=0,
        salary_plans=[
            SalaryPlan(id="s1", name="給与", annual_amount=9_000_000, start_age=35, end_age=60),
        ],
        expense_segments=[
            ExpenseSegment(id="e1", start_age=35, end_age=90, monthly_expenses=250_000),
        ],
    )


@pytest.fixture
def household_input() -> FireCalculationInput:
    """
    Realistic household with holdings, salary, and pension.

    Age 35 → 90, 10M in equities at 5% and 2M cash at 0.1%,
    salary 6M until 60, pension 1.8M from 65, 1% inflation.
    """
    return FireCalculationInput.model_validate({
        "currentAge": 35,
        "lifeExpectancy": 90,
        "inflationRate": 1.0,
        "exchangeRate": 150.0,
        "assetHoldings": [
            {"id": "a1", "name": "全世界株式", "quantity": 1,
             "pricePerUnit": 10_000_000, "currency": "JPY", "expectedReturn": 5},
            {"id": "a2", "name": "普通預金", "quantity": 1,
             "pricePerUnit": 2_000_000, "currency": "JPY", "expectedReturn": 0.1},
        ],
        "salaryPlans": [
            {"id": "s1", "name": "給与", "annualAmount": 6_000_000,
             "currency": "JPY", "startAge": 35, "endAge": 60},
        ],
        "pensionPlans": [
            {"id": "p1", "name": "厚生年金", "annualAmount": 1_800_000,
             "currency": "JPY", "startAge": 65, "endAge": 90},
        ],
        "expenseSegments": [
            {"id": "e1", "startAge": 35, "endAge": 90, "monthlyExpenses": 250_000},
        ],
    })


# ---------------------------------------------------------------------------
# Monte Carlo Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture
def small_mc_config() -> MonteCarloConfig:
    """Smallest allowed trial count, in-process."""
    return MonteCarloConfig(simulations=100, seed=7, n_workers=1)


@pytest.fixture
def zero_vol_config() -> MonteCarloConfig:
    """Volatility switched off: every trial follows the mean path."""
    return MonteCarloConfig(
        simulations=100,
        return_volatility=0.0,
        inflation_volatility=0.0,
        seed=1,
        n_workers=1,
    )
