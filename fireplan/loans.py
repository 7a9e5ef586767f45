"""
Loan amortization for fireplan.

Purpose
-------
Simulates one year of a fixed-payment loan month by month: the remaining
balance accrues interest at the nominal monthly rate, then the payment
(capped at the remaining balance) is subtracted. Once the balance reaches
zero the remaining months pay nothing. The schedule is simulated, not
solved analytically, so a payment smaller than the monthly interest
simply lets the balance grow.

Key components
--------------
- amortize_year : one simulated year -> (yearly payment, new balance)
- payment_schedule : the same recurrence over several years as a DataFrame

Example
-------
>>> from fireplan.models import Loan
>>> loan = Loan(id="l1", name="car", balance=1_200_000, monthly_payment=100_000)
>>> amortize_year(loan.balance, loan.monthly_payment, loan.rate_pct)
(1200000.0, 0.0)
"""

from __future__ import annotations

from typing import Tuple

import pandas as pd

from .constants import MONTHS_PER_YEAR
from .models import Loan
from .utils import check_non_negative, monthly_rate

__all__ = [
    "amortize_year",
    "payment_schedule",
]


def amortize_year(
    balance: float,
    monthly_payment: float,
    annual_rate_pct: float = 0.0,
    months: int = MONTHS_PER_YEAR,
) -> Tuple[float, float]:
    """
    Simulate *months* monthly payments on a loan.

    Parameters
    ----------
    balance : float
        Remaining balance at the start of the year.
    monthly_payment : float
        Fixed payment per month.
    annual_rate_pct : float, default 0.0
        Nominal annual interest rate in percent.
    months : int, default 12

    Returns
    -------
    tuple of (float, float)
        ``(total paid this year, remaining balance)``.

    Notes
    -----
    A zero rate leaves the balance unchanged before each payment, so the
    loan is repaid linearly.
    """
    check_non_negative("balance", balance)
    check_non_negative("monthly_payment", monthly_payment)

    rate = monthly_rate(annual_rate_pct)
    remaining = float(balance)
    paid = 0.0
    for _ in range(months):
        if remaining <= 0:
            break
        remaining *= 1.0 + rate
        payment = min(float(monthly_payment), remaining)
        remaining -= payment
        paid += payment
    return paid, max(remaining, 0.0)


def payment_schedule(loan: Loan, years: int) -> pd.DataFrame:
    """
    Multi-year amortization schedule for *loan*.

    Parameters
    ----------
    loan : Loan
    years : int
        Number of simulated years (rows).

    Returns
    -------
    pd.DataFrame
        Indexed by year (0-based) with columns ``payment`` and ``balance``
        (balance at the end of each year).

    Examples
    --------
    >>> loan = Loan(id="l1", name="car", balance=1_500_000, monthly_payment=100_000)
    >>> payment_schedule(loan, 3)["payment"].tolist()
    [1200000.0, 300000.0, 0.0]
    """
    if years < 0:
        raise ValueError(f"years must be non-negative, got {years}")

    rows = []
    balance = float(loan.balance)
    for _ in range(years):
        paid, balance = amortize_year(balance, loan.monthly_payment, loan.rate_pct)
        rows.append({"payment": paid, "balance": balance})
    frame = pd.DataFrame(rows, columns=["payment", "balance"])
    frame.index.name = "year"
    return frame
