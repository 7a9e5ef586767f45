"""
Type definitions for fireplan.

Purpose
-------
Provides TypedDict definitions for the serialized (JSON) shapes produced
by :mod:`fireplan.serialization`. Keys use the camelCase names of the
calculation API so the documents can be consumed by the same clients
that send ``FireCalculationInput``.

Usage
-----
>>> from fireplan.types import FireResultDict
>>> from fireplan.serialization import result_to_dict
>>> payload: FireResultDict = result_to_dict(result)
>>> payload["yearsToFire"]

Type Definitions
----------------
YearlyProjectionDict
    One chart row: {"year", "age", "totalAssets", "expenses", ...}

FireResultDict
    Deterministic result: {"yearsToFire", "fireAge", "requiredAssets", ...}

TrialYearDict
    One Monte Carlo percentile row

MonteCarloResultDict
    One percentile band: {"percentile", "projections", "successProbability"}

MonteCarloDocumentDict
    Full Monte Carlo output with trial count and config
"""

from typing import Any, Dict, List

from typing_extensions import NotRequired, TypedDict

__all__ = [
    "YearlyProjectionDict",
    "FireResultDict",
    "TrialYearDict",
    "MonteCarloResultDict",
    "MonteCarloDocumentDict",
]


class YearlyProjectionDict(TypedDict):
    """
    One row of the deterministic projection.

    Attributes
    ----------
    year : int
        Index from 0.
    age : int
    totalAssets : float
        Floored at 0.
    expenses : float
        Display expenses (living expense before inflation).
    realExpenses : float
        Inflation-adjusted expenses.
    fireAchieved : bool
    """

    year: int
    age: int
    totalAssets: float
    expenses: float
    realExpenses: float
    fireAchieved: bool


class FireResultDict(TypedDict):
    """
    Serialized FireCalculationResult.

    ``yearsToFire`` and ``fireAge`` are -1 when FIRE is unattainable.
    """

    schema_version: NotRequired[str]
    yearsToFire: int
    fireAge: int
    requiredAssets: float
    projectedAssets: float
    isFireAchievable: bool
    monthlyShortfall: float
    searchEvaluations: int
    projections: List[YearlyProjectionDict]


class TrialYearDict(TypedDict):
    year: int
    age: int
    assets: float
    expenses: float
    requiredAssets: float
    fireAchieved: bool


class MonteCarloResultDict(TypedDict):
    """
    One percentile band.

    Attributes
    ----------
    percentile : int
    projections : list of TrialYearDict
    successProbability : float
        Fraction in [0, 1].
    """

    percentile: int
    projections: List[TrialYearDict]
    successProbability: float


class MonteCarloDocumentDict(TypedDict):
    schema_version: str
    simulations: int
    successProbability: float
    config: NotRequired[Dict[str, Any]]
    results: List[MonteCarloResultDict]
