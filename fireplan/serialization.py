"""
Serialization module for fireplan.

Purpose
-------
JSON persistence for calculation inputs and results, so a household can
be edited by hand, versioned, and re-run from the CLI.

Supports:
- FireCalculationInput (bare API document or wrapped with schema_version)
- FireCalculationResult (headline fields + projections)
- Monte Carlo summaries (percentile bands + success probability)

Design Principles
-----------------
- Type-safe: inputs are validated through the pydantic models
- Human-readable: indented JSON with camelCase API keys
- Backward compatible: schema versions are checked with a warning

Example
-------
>>> from pathlib import Path
>>> from fireplan.serialization import save_input, load_input
>>> save_input(data, Path("household.json"))
>>> loaded = load_input(Path("household.json"))
>>> loaded == data
True
"""

from __future__ import annotations

import json
import warnings
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple, Union

from .config import MonteCarloConfig
from .models import FireCalculationInput
from .monte_carlo import MonteCarloSummary, TrialYear
from .optimizer import FireCalculationResult, YearlyProjection
from .types import (
    FireResultDict,
    MonteCarloDocumentDict,
    MonteCarloResultDict,
    TrialYearDict,
    YearlyProjectionDict,
)

__all__ = [
    "SCHEMA_VERSION",
    "input_to_dict",
    "input_from_dict",
    "save_input",
    "load_input",
    "load_document",
    "result_to_dict",
    "save_result",
    "monte_carlo_to_dict",
    "save_monte_carlo",
]


# ---------------------------------------------------------------------------
# Schema Version
# ---------------------------------------------------------------------------

SCHEMA_VERSION = "0.1.0"


def _check_schema_version(document: Dict[str, Any]) -> None:
    schema_version = document.get("schema_version", "0.0.0")
    if schema_version != SCHEMA_VERSION:
        warnings.warn(
            f"Config schema version {schema_version} differs from current "
            f"version {SCHEMA_VERSION}. May encounter compatibility issues.",
            UserWarning,
        )


def _write_json(payload: Dict[str, Any], path: Path) -> None:
    # Encode first so an unserializable payload leaves no partial file
    text = json.dumps(payload, indent=2, ensure_ascii=False)
    path.parent.mkdir(parents=True, exist_ok=True)
    with open(path, "w", encoding="utf-8") as f:
        f.write(text)


# ---------------------------------------------------------------------------
# Input Serialization
# ---------------------------------------------------------------------------

def input_to_dict(data: FireCalculationInput) -> Dict[str, Any]:
    """Convert an input to its camelCase API document (unset optionals omitted)."""
    return data.model_dump(by_alias=True, exclude_none=True)


def input_from_dict(document: Dict[str, Any]) -> FireCalculationInput:
    """
    Build an input from a dictionary.

    Accepts either the bare API document or a wrapped document
    ``{"schema_version": ..., "input": {...}}``.
    """
    if "input" in document:
        _check_schema_version(document)
        document = document["input"]
    return FireCalculationInput.model_validate(document)


def save_input(data: FireCalculationInput, path: Path) -> None:
    """
    Save an input to a wrapped JSON document.

    Examples
    --------
    >>> save_input(data, Path("household.json"))
    """
    _write_json({"schema_version": SCHEMA_VERSION, "input": input_to_dict(data)}, Path(path))


def load_input(path: Union[str, Path]) -> FireCalculationInput:
    """Load an input saved by :func:`save_input` (or a bare API document)."""
    return load_document(path)[0]


def load_document(
    path: Union[str, Path],
) -> Tuple[FireCalculationInput, Optional[MonteCarloConfig]]:
    """
    Load an input and the optional ``monteCarlo`` section of a wrapped document.

    Returns
    -------
    tuple
        ``(input, monte_carlo_config or None)``
    """
    with open(path, "r", encoding="utf-8") as f:
        document = json.load(f)

    mc_config = None
    if "input" in document and "monteCarlo" in document:
        mc_config = MonteCarloConfig.model_validate(document["monteCarlo"])
    return input_from_dict(document), mc_config


# ---------------------------------------------------------------------------
# Result Serialization
# ---------------------------------------------------------------------------

def _projection_to_dict(p: YearlyProjection) -> YearlyProjectionDict:
    return {
        "year": p.year,
        "age": p.age,
        "totalAssets": p.total_assets,
        "expenses": p.expenses,
        "realExpenses": p.real_expenses,
        "fireAchieved": p.fire_achieved,
    }


def result_to_dict(result: FireCalculationResult) -> FireResultDict:
    """Convert a deterministic result to its camelCase API document."""
    return {
        "schema_version": SCHEMA_VERSION,
        "yearsToFire": result.years_to_fire,
        "fireAge": result.fire_age,
        "requiredAssets": result.required_assets,
        "projectedAssets": result.projected_assets,
        "isFireAchievable": result.is_fire_achievable,
        "monthlyShortfall": result.monthly_shortfall,
        "searchEvaluations": result.search_evaluations,
        "projections": [_projection_to_dict(p) for p in result.projections],
    }


def save_result(result: FireCalculationResult, path: Path) -> None:
    """Save a deterministic result to JSON."""
    _write_json(dict(result_to_dict(result)), Path(path))


# ---------------------------------------------------------------------------
# Monte Carlo Serialization
# ---------------------------------------------------------------------------

def _trial_year_to_dict(row: TrialYear) -> TrialYearDict:
    return {
        "year": row.year,
        "age": row.age,
        "assets": row.assets,
        "expenses": row.expenses,
        "requiredAssets": row.required_assets,
        "fireAchieved": row.fire_achieved,
    }


def monte_carlo_to_dict(
    summary: MonteCarloSummary,
    config: Optional[MonteCarloConfig] = None,
) -> MonteCarloDocumentDict:
    """Convert a Monte Carlo summary (without the raw trial matrix) to a document."""
    results: List[MonteCarloResultDict] = [
        {
            "percentile": r.percentile,
            "projections": [_trial_year_to_dict(row) for row in r.projections],
            "successProbability": r.success_probability,
        }
        for r in summary.results
    ]
    document: MonteCarloDocumentDict = {
        "schema_version": SCHEMA_VERSION,
        "simulations": summary.simulations,
        "successProbability": summary.success_probability,
        "results": results,
    }
    if config is not None:
        document["config"] = config.model_dump(by_alias=True, mode="json")
    return document


def save_monte_carlo(
    summary: MonteCarloSummary,
    path: Path,
    config: Optional[MonteCarloConfig] = None,
) -> None:
    """Save a Monte Carlo summary to JSON."""
    _write_json(dict(monte_carlo_to_dict(summary, config)), Path(path))
