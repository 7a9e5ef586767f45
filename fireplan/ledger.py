"""
Asset ledger for fireplan.

Purpose
-------
Holds the working balance of every asset holding during one engine run,
together with the immutable initial allocation (each holding's share of
the starting portfolio value). The ledger is rebuilt for every run and
never shared, so optimizer re-runs and Monte Carlo trials cannot see
each other's state.

Per simulated year the engine calls, in order:

1. ``grow()``: every balance is multiplied by ``1 + expected_return``.
2. ``withdraw(deficit)`` or ``invest(surplus)``: the rebalancing policy.

Rebalancing policy
------------------
- Deficit: holdings are drained in ascending order of expected return
  (input order among equal returns), each capped at its balance, until
  the deficit is covered or every holding is empty.
- Surplus: credited to holdings in proportion to their *initial* ratios,
  whatever the current mix has drifted to. With no initial value at all
  the surplus is left to the caller (it stays as cash).

Example
-------
>>> from fireplan.models import AssetHolding
>>> holdings = [
...     AssetHolding(id="a", name="bonds", quantity=1, price_per_unit=1_000_000,
...                  expected_return=2),
...     AssetHolding(id="b", name="stocks", quantity=1, price_per_unit=1_000_000,
...                  expected_return=8),
... ]
>>> ledger = AssetLedger.from_holdings(holdings)
>>> ledger.grow()
>>> withdrawn, touched = ledger.withdraw(500_000)
>>> withdrawn, touched
(500000.0, ['bonds'])
"""

from __future__ import annotations

from typing import Dict, List, Optional, Sequence, Tuple

import numpy as np

from .currency import holding_value
from .models import AssetHolding

__all__ = ["AssetLedger"]


class AssetLedger:
    """
    Mutable per-run balances of a fixed list of holdings.

    Parameters
    ----------
    names : sequence of str
        Holding names (used as keys of the yearly balance map).
    balances : array-like, shape (M,)
        Starting balances in JPY.
    returns_pct : array-like, shape (M,)
        Expected annual return per holding, in percent.

    Attributes
    ----------
    initial_ratios : np.ndarray, shape (M,)
        ``balance[i] / sum(balance)`` at construction; all zeros when the
        starting portfolio is empty. Read-only.
    """

    def __init__(
        self,
        names: Sequence[str],
        balances: Sequence[float],
        returns_pct: Sequence[float],
    ):
        self.names: List[str] = list(names)
        self.balances = np.asarray(balances, dtype=float).copy()
        self.returns = np.asarray(returns_pct, dtype=float) / 100.0

        if not (len(self.names) == self.balances.size == self.returns.size):
            raise ValueError(
                f"names, balances and returns_pct must have equal length, got "
                f"{len(self.names)}, {self.balances.size}, {self.returns.size}"
            )
        if np.any(self.balances < 0):
            raise ValueError("balances must be non-negative")

        total = float(self.balances.sum())
        if total > 0:
            ratios = self.balances / total
        else:
            ratios = np.zeros_like(self.balances)
        ratios.setflags(write=False)
        self.initial_ratios = ratios

        # Stable sort: equal returns keep input order
        self._withdrawal_order = np.argsort(self.returns, kind="stable")

    @classmethod
    def from_holdings(
        cls,
        holdings: Sequence[AssetHolding],
        exchange_rate: Optional[float] = None,
    ) -> "AssetLedger":
        """Build a ledger from input holdings, converting values to JPY."""
        return cls(
            names=[h.name for h in holdings],
            balances=[holding_value(h, exchange_rate) for h in holdings],
            returns_pct=[h.return_pct for h in holdings],
        )

    # -------------------- Yearly steps --------------------
    def grow(self) -> None:
        """Apply one year of expected return to every balance."""
        self.balances *= 1.0 + self.returns

    def withdraw(self, amount: float) -> Tuple[float, List[str]]:
        """
        Cover a deficit of *amount* from the lowest-return holdings first.

        Returns
        -------
        tuple of (float, list of str)
            Total withdrawn (at most *amount*) and the names of the
            holdings drawn from, in withdrawal order.
        """
        remaining = float(amount)
        withdrawn = 0.0
        touched: List[str] = []
        for idx in self._withdrawal_order:
            if remaining <= 0:
                break
            available = float(self.balances[idx])
            if available <= 0:
                continue
            take = min(available, remaining)
            self.balances[idx] = available - take
            remaining -= take
            withdrawn += take
            touched.append(self.names[idx])
        return withdrawn, touched

    def invest(self, amount: float) -> List[str]:
        """
        Credit a surplus of *amount* by the initial allocation.

        Returns the names of the credited holdings; an empty list (and no
        change) when the initial portfolio held nothing.
        """
        if not self.can_invest:
            return []
        credit = float(amount) * self.initial_ratios
        self.balances += credit
        return [name for name, c in zip(self.names, credit) if c > 0]

    # -------------------- Views --------------------
    @property
    def can_invest(self) -> bool:
        """True when the initial ratios sum to a nonzero value."""
        return float(self.initial_ratios.sum()) > 0

    @property
    def total(self) -> float:
        return float(self.balances.sum())

    def snapshot(self) -> Dict[str, float]:
        """Current balances keyed by name (same-named holdings summed)."""
        out: Dict[str, float] = {}
        for name, balance in zip(self.names, self.balances):
            out[name] = out.get(name, 0.0) + float(balance)
        return out

    def __len__(self) -> int:
        return len(self.names)

    def __repr__(self) -> str:
        return f"AssetLedger(n={len(self)}, total={self.total:,.0f})"
