"""
Input data model for fireplan.

Purpose
-------
Type-safe, immutable description of a household: asset holdings, loans,
salary and pension plans, one-off incomes and expenses, and age-banded
living expenses. Every model accepts both the camelCase wire names used
by the calculation input document (``pricePerUnit``, ``expectedReturn``,
``lifeExpectancy`` ...) and the snake_case Python names.

Design Principles
-----------------
- Immutable: frozen models, so optimizer re-runs derive modified copies
  (``with_salary_end_age``) instead of mutating the caller's input.
- Lenient defaults: a missing expected return, interest rate, amount or
  target age falls back to a documented default instead of failing.
- Strict shape: unknown fields are rejected.

Example
-------
>>> from fireplan.models import FireCalculationInput, ExpenseSegment
>>> data = FireCalculationInput.model_validate({
...     "currentAge": 30,
...     "lifeExpectancy": 90,
...     "inflationRate": 0,
...     "expenseSegments": [
...         {"id": "s1", "startAge": 30, "endAge": 90, "monthlyExpenses": 200_000},
...     ],
... })
>>> data.monthly_expenses_for_age(45)
200000.0
"""

from __future__ import annotations

from typing import List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel

from .constants import DEFAULT_EXPECTED_RETURN, DEFAULT_INTEREST_RATE
from .exceptions import HorizonError

__all__ = [
    "Currency",
    "AssetHolding",
    "Loan",
    "SalaryPlan",
    "PensionPlan",
    "SpecialExpense",
    "SpecialIncome",
    "ExpenseSegment",
    "FireCalculationInput",
]


Currency = Literal["JPY", "USD"]


class _InputModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )


# ---------------------------------------------------------------------------
# Holdings and debts
# ---------------------------------------------------------------------------

class AssetHolding(_InputModel):
    """
    A position in one security or cash account.

    Attributes
    ----------
    quantity, price_per_unit : float
        Value is ``quantity * price_per_unit`` in the holding's currency.
    currency : {"JPY", "USD"}
        Converted to JPY by the currency resolver.
    expected_return : float, optional
        Expected annual return in percent. Defaults to 5% when absent.
    """

    id: str
    name: str
    symbol: Optional[str] = None
    quantity: float = Field(ge=0)
    price_per_unit: float = Field(ge=0)
    currency: Currency = "JPY"
    expected_return: Optional[float] = Field(
        default=None,
        ge=-100,
        description="Expected annual return (percent)",
    )

    @property
    def return_pct(self) -> float:
        """Expected return in percent with the 5% default applied."""
        if self.expected_return is None:
            return DEFAULT_EXPECTED_RETURN
        return self.expected_return

    @property
    def native_value(self) -> float:
        """Value in the holding's own currency."""
        return self.quantity * self.price_per_unit


class Loan(_InputModel):
    """An amortizing debt paid monthly."""

    id: str
    name: str
    balance: float = Field(ge=0)
    interest_rate: Optional[float] = Field(
        default=None,
        ge=0,
        description="Annual interest rate (percent)",
    )
    monthly_payment: float = Field(ge=0)

    @property
    def rate_pct(self) -> float:
        if self.interest_rate is None:
            return DEFAULT_INTEREST_RATE
        return self.interest_rate


# ---------------------------------------------------------------------------
# Income plans
# ---------------------------------------------------------------------------

class _AgeRangePlan(_InputModel):
    id: str
    name: str
    annual_amount: Optional[float] = Field(default=None, ge=0)
    currency: Currency = "JPY"
    start_age: int
    end_age: int

    @property
    def amount(self) -> float:
        return self.annual_amount or 0.0

    def is_active(self, age: int) -> bool:
        """True for ages in ``[start_age, end_age]`` inclusive."""
        return self.start_age <= age <= self.end_age


class SalaryPlan(_AgeRangePlan):
    """Employment income paid every year from start_age to end_age."""


class PensionPlan(_AgeRangePlan):
    """Pension income paid every year from start_age to end_age."""


# ---------------------------------------------------------------------------
# One-off events
# ---------------------------------------------------------------------------

class _OneOffItem(_InputModel):
    id: str
    name: str
    amount: float = Field(ge=0, description="Amount in present value")
    target_age: Optional[int] = None

    def fires_at(self, age: int) -> bool:
        return self.target_age is not None and self.target_age == age


class SpecialExpense(_OneOffItem):
    """A single-year expense (wedding, car, university entrance fee ...)."""


class SpecialIncome(_OneOffItem):
    """A single-year income (inheritance, retirement bonus ...)."""


class ExpenseSegment(_InputModel):
    """Monthly living expenses for an inclusive age band."""

    id: str
    start_age: int
    end_age: int
    monthly_expenses: float = Field(ge=0)

    def covers(self, age: int) -> bool:
        return self.start_age <= age <= self.end_age


# ---------------------------------------------------------------------------
# Calculation input
# ---------------------------------------------------------------------------

class FireCalculationInput(_InputModel):
    """
    Complete description of one household for a FIRE calculation.

    Attributes
    ----------
    current_age : int
        First simulated age.
    life_expectancy : int
        Last simulated age (inclusive). Must be >= current_age.
    inflation_rate : float
        Annual inflation in percent (2 = 2%).
    exchange_rate : float, optional
        USD/JPY rate. When absent the fallback rate (150) is used.
    monthly_expenses : float, optional
        Override for the Monte Carlo simplified model's monthly spending.
        The deterministic engine always reads expense_segments.

    Raises
    ------
    HorizonError
        If life_expectancy < current_age.
    """

    current_age: int = Field(ge=0, le=150)
    asset_holdings: List[AssetHolding] = Field(default_factory=list)
    loans: List[Loan] = Field(default_factory=list)
    pension_plans: List[PensionPlan] = Field(default_factory=list)
    salary_plans: List[SalaryPlan] = Field(default_factory=list)
    special_expenses: List[SpecialExpense] = Field(default_factory=list)
    special_incomes: List[SpecialIncome] = Field(default_factory=list)
    expense_segments: List[ExpenseSegment] = Field(default_factory=list)
    inflation_rate: float = Field(default=0.0, ge=-100, le=100)
    life_expectancy: int = Field(ge=0, le=150)
    exchange_rate: Optional[float] = Field(default=None, gt=0)
    monthly_expenses: Optional[float] = Field(default=None, ge=0)

    @model_validator(mode="after")
    def _check_horizon(self) -> "FireCalculationInput":
        if self.life_expectancy < self.current_age:
            raise HorizonError(
                f"life_expectancy ({self.life_expectancy}) must be >= "
                f"current_age ({self.current_age}). "
                f"The projection needs at least one simulated year."
            )
        return self

    @property
    def horizon_years(self) -> int:
        """Number of simulated years (both end ages included)."""
        return self.life_expectancy - self.current_age + 1

    def monthly_expenses_for_age(self, age: int) -> float:
        """Living expenses of the first segment covering *age*; 0 in a gap."""
        for segment in self.expense_segments:
            if segment.covers(age):
                return float(segment.monthly_expenses)
        return 0.0

    def expense_gaps(self) -> List[int]:
        """Simulated ages no expense segment covers (treated as 0 expense)."""
        return [
            age
            for age in range(self.current_age, self.life_expectancy + 1)
            if not any(s.covers(age) for s in self.expense_segments)
        ]

    def with_salary_end_age(self, plan_id: str, end_age: int) -> "FireCalculationInput":
        """Copy of this input with one salary plan's end_age replaced."""
        plans = [
            plan.model_copy(update={"end_age": end_age}) if plan.id == plan_id else plan
            for plan in self.salary_plans
        ]
        return self.model_copy(update={"salary_plans": plans})
