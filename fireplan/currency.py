"""Currency resolution for fireplan

Every amount entering the engine is converted to the reporting currency
(JPY). A USD amount is multiplied by the caller-supplied USD/JPY rate, or
by the fallback rate when the caller has none; a missing rate is a
degraded-mode default, never an error.

>>> to_reporting(1_000, "USD", 140.0)
140000.0
>>> to_reporting(1_000, "USD")
150000.0
>>> to_reporting(1_000, "JPY", 140.0)
1000.0
"""
from __future__ import annotations

from typing import Iterable, Literal, Optional

from .constants import FALLBACK_EXCHANGE_RATE, MANYEN, REPORTING_CURRENCY
from .models import AssetHolding

__all__ = [
    "effective_rate",
    "to_reporting",
    "holding_value",
    "total_assets",
]


def effective_rate(exchange_rate: Optional[float] = None) -> float:
    """USD/JPY rate actually applied: the supplied rate or the fallback."""
    if exchange_rate is None:
        return FALLBACK_EXCHANGE_RATE
    return float(exchange_rate)


def to_reporting(
    amount: float,
    currency: str,
    exchange_rate: Optional[float] = None,
) -> float:
    """Convert *amount* tagged with *currency* into JPY."""
    if currency == REPORTING_CURRENCY:
        return float(amount)
    return float(amount) * effective_rate(exchange_rate)


def holding_value(holding: AssetHolding, exchange_rate: Optional[float] = None) -> float:
    """Value of one holding (quantity × price) in JPY."""
    return to_reporting(holding.native_value, holding.currency, exchange_rate)


def total_assets(
    holdings: Iterable[AssetHolding],
    exchange_rate: Optional[float] = None,
    unit: Literal["yen", "manyen"] = "yen",
) -> float:
    """
    Portfolio value of *holdings* in JPY.

    Parameters
    ----------
    holdings : iterable of AssetHolding
    exchange_rate : float, optional
        USD/JPY rate; the fallback rate is used when absent.
    unit : {"yen", "manyen"}
        ``"manyen"`` returns the total in 万円 (units of 10,000 yen).

    Returns
    -------
    float
    """
    total = sum(holding_value(h, exchange_rate) for h in holdings)
    if unit == "manyen":
        return total / MANYEN
    if unit != "yen":
        raise ValueError(f"unit must be 'yen' or 'manyen', got {unit!r}")
    return float(total)
