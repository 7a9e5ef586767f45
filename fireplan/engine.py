"""Yearly simulation engine for fireplan

Runs the deterministic household projection from ``current_age`` to
``life_expectancy`` (both inclusive), one snapshot per age.

Per simulated year
------------------
1. Income: active salary and pension plans, special incomes firing at
   this age. All amounts are currency-resolved and inflation-compounded
   from year 0.
2. Expenses (negative): living expense of the covering segment × 12,
   inflation-compounded; loan payments from the amortizer; special
   expenses firing at this age, inflation-compounded.
3. ``net_cash_flow = income + expenses`` is added to the running cash.
4. Every holding grows by its expected return.
5. Rebalancing: a deficit is covered from the lowest-return holdings
   (the amount withdrawn goes back to cash); a surplus is invested by the
   initial allocation and removed from cash. With no initial portfolio
   the surplus stays as cash.
6. ``total_assets = max(0, Σ holdings + cash)``.

Cash is carried across years without reset, so an uncovered deficit stays
on the cash line until later surpluses repay it. Only the reported total
is floored; the run never terminates early.

Typical usage
-------------
>>> details = simulate_years(data)
>>> details[-1].total_assets
>>> details_to_frame(details, unit="manyen").head()
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Dict, FrozenSet, Iterable, List, Literal, Mapping, Optional

import pandas as pd

from .constants import MANYEN, MONTHS_PER_YEAR
from .currency import to_reporting
from .ledger import AssetLedger
from .loans import amortize_year
from .models import FireCalculationInput
from .utils import inflation_factor

__all__ = [
    "YearlyDetail",
    "simulate_years",
    "details_to_frame",
]

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Snapshot
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class YearlyDetail:
    """One simulated year. Expense fields are negative; mappings are read-only."""
    year: int
    age: int
    salaries: Mapping[str, float]
    pensions: Mapping[str, float]
    special_incomes: Mapping[str, float]
    living_expenses: float
    loan_payments: float
    special_expenses: Mapping[str, float]
    net_cash_flow: float
    loan_balances: Mapping[str, float]
    cash: float
    assets: Mapping[str, float]
    withdrawn_assets: FrozenSet[str] = field(default_factory=frozenset)
    invested_assets: FrozenSet[str] = field(default_factory=frozenset)
    total_assets: float = 0.0

    @property
    def total_income(self) -> float:
        return (
            sum(self.salaries.values())
            + sum(self.pensions.values())
            + sum(self.special_incomes.values())
        )

    @property
    def total_expenses(self) -> float:
        """Sum of all expense streams (negative or zero)."""
        return self.living_expenses + self.loan_payments + sum(self.special_expenses.values())

    @property
    def asset_balance(self) -> float:
        """Sum of holding balances, excluding cash."""
        return sum(self.assets.values())


# ---------------------------------------------------------------------------
# Stream helpers
# ---------------------------------------------------------------------------

def _add(totals: Dict[str, float], name: str, amount: float) -> None:
    totals[name] = totals.get(name, 0.0) + amount


def _plan_income(plans: Iterable, age: int, factor: float, exchange_rate: Optional[float]) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for plan in plans:
        if plan.is_active(age):
            _add(out, plan.name, to_reporting(plan.amount, plan.currency, exchange_rate) * factor)
    return out


def _one_off(items: Iterable, age: int, factor: float, sign: float = 1.0) -> Dict[str, float]:
    out: Dict[str, float] = {}
    for item in items:
        if item.fires_at(age):
            _add(out, item.name, sign * item.amount * factor)
    return out


# ---------------------------------------------------------------------------
# Engine
# ---------------------------------------------------------------------------

def simulate_years(data: FireCalculationInput) -> List[YearlyDetail]:
    """
    Run the deterministic projection for *data*.

    Parameters
    ----------
    data : FireCalculationInput

    Returns
    -------
    list of YearlyDetail
        One snapshot per age from ``current_age`` to ``life_expectancy``.
    """
    rate = data.exchange_rate
    ledger = AssetLedger.from_holdings(data.asset_holdings, rate)
    loan_balances = [float(loan.balance) for loan in data.loans]
    cash = 0.0

    logger.debug(
        "simulate_years: ages %d..%d, %d holdings, %d loans",
        data.current_age, data.life_expectancy, len(ledger), len(loan_balances),
    )

    details: List[YearlyDetail] = []
    for year, age in enumerate(range(data.current_age, data.life_expectancy + 1)):
        factor = inflation_factor(data.inflation_rate, year)

        # Income
        salaries = _plan_income(data.salary_plans, age, factor, rate)
        pensions = _plan_income(data.pension_plans, age, factor, rate)
        special_incomes = _one_off(data.special_incomes, age, factor)

        # Expenses
        living = -data.monthly_expenses_for_age(age) * MONTHS_PER_YEAR * factor
        paid_total = 0.0
        remaining: Dict[str, float] = {}
        for i, loan in enumerate(data.loans):
            paid, loan_balances[i] = amortize_year(
                loan_balances[i], loan.monthly_payment, loan.rate_pct
            )
            paid_total += paid
            _add(remaining, loan.name, loan_balances[i])
        special_expenses = _one_off(data.special_expenses, age, factor, sign=-1.0)

        income = sum(salaries.values()) + sum(pensions.values()) + sum(special_incomes.values())
        expenses = living - paid_total + sum(special_expenses.values())
        net = income + expenses
        cash += net

        # Assets
        ledger.grow()
        withdrawn: List[str] = []
        invested: List[str] = []
        if net < 0:
            taken, withdrawn = ledger.withdraw(-net)
            cash += taken
        elif net > 0 and ledger.can_invest:
            invested = ledger.invest(net)
            cash -= net

        details.append(
            YearlyDetail(
                year=year,
                age=age,
                salaries=MappingProxyType(salaries),
                pensions=MappingProxyType(pensions),
                special_incomes=MappingProxyType(special_incomes),
                living_expenses=living,
                loan_payments=-paid_total,
                special_expenses=MappingProxyType(special_expenses),
                net_cash_flow=net,
                loan_balances=MappingProxyType(remaining),
                cash=cash,
                assets=MappingProxyType(ledger.snapshot()),
                withdrawn_assets=frozenset(withdrawn),
                invested_assets=frozenset(invested),
                total_assets=max(0.0, ledger.total + cash),
            )
        )

    return details


# ---------------------------------------------------------------------------
# Tabular export
# ---------------------------------------------------------------------------

_MONEY_COLUMNS = [
    "salary",
    "pension",
    "special_income",
    "living_expenses",
    "loan_payments",
    "special_expenses",
    "net_cash_flow",
    "loan_balance",
    "cash",
    "total_assets",
]


def details_to_frame(
    details: List[YearlyDetail],
    unit: Literal["yen", "manyen"] = "yen",
) -> pd.DataFrame:
    """
    Flatten a run into a DataFrame indexed by age.

    Stream maps are summed into one column each; holding balances become
    one ``asset_<name>`` column per holding.

    Parameters
    ----------
    details : list of YearlyDetail
    unit : {"yen", "manyen"}
        ``"manyen"`` divides every monetary column by 10,000.
    """
    rows = []
    for d in details:
        row = {
            "year": d.year,
            "salary": sum(d.salaries.values()),
            "pension": sum(d.pensions.values()),
            "special_income": sum(d.special_incomes.values()),
            "living_expenses": d.living_expenses,
            "loan_payments": d.loan_payments,
            "special_expenses": sum(d.special_expenses.values()),
            "net_cash_flow": d.net_cash_flow,
            "loan_balance": sum(d.loan_balances.values()),
            "cash": d.cash,
            "total_assets": d.total_assets,
        }
        row.update({f"asset_{name}": balance for name, balance in d.assets.items()})
        rows.append(row)

    frame = pd.DataFrame(rows, index=pd.Index([d.age for d in details], name="age"))
    if unit == "manyen":
        asset_columns = [c for c in frame.columns if c.startswith("asset_")]
        money = _MONEY_COLUMNS + asset_columns
        frame[money] = frame[money] / MANYEN
    elif unit != "yen":
        raise ValueError(f"unit must be 'yen' or 'manyen', got {unit!r}")
    return frame
