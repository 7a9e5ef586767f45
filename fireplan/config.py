"""
Configuration management module for fireplan.

Purpose
-------
Centralized run configuration using Pydantic models for type-safe
parameter management, validation, and serialization. Household data lives
in :mod:`fireplan.models`; this module only holds *how* to run it.

Design Principles
-----------------
- Type-safe: Pydantic enforces types and validates ranges
- Immutable: Frozen models prevent accidental mutation
- Wire-compatible: Monte Carlo options accept the camelCase names of the
  calculation API (``returnVolatility``, ``sequenceOfReturnsRisk`` ...)
- Environment-aware: process-level settings read ``FIREPLAN_*`` variables

Example
-------
>>> from fireplan.config import MonteCarloConfig, OptimizerConfig
>>> mc = MonteCarloConfig(simulations=2_000, return_volatility=12.0, seed=7)
>>> opt = OptimizerConfig(max_search_age=65, verbose=True)
>>>
>>> # Serialize to dict/JSON
>>> mc.model_dump(by_alias=True)["returnVolatility"]
12.0
>>> MonteCarloConfig.model_validate({"simulations": 500, "sequenceOfReturnsRisk": False})
"""

from __future__ import annotations

from typing import Literal, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    DEFAULT_INFLATION_VOLATILITY,
    DEFAULT_MAX_EVALUATIONS,
    DEFAULT_RETURN_VOLATILITY,
    DEFAULT_SEED,
    DEFAULT_SIMULATIONS,
    MAX_FIRE_SEARCH_AGE,
    MAX_INFLATION_VOLATILITY,
    MAX_RETURN_VOLATILITY,
    MAX_SIMULATIONS,
    MC_PERCENTILES,
    MIN_FINAL_ASSETS,
    MIN_SIMULATIONS,
)

__all__ = [
    "MonteCarloConfig",
    "OptimizerConfig",
    "ScenarioAdjustment",
    "AppSettings",
]


# ---------------------------------------------------------------------------
# Monte Carlo Configuration
# ---------------------------------------------------------------------------

class MonteCarloConfig(BaseModel):
    """
    Configuration for Monte Carlo trials.

    Attributes
    ----------
    simulations : int
        Number of trials (100-10,000).
    return_volatility : float
        Standard deviation of the annual return draw, in percent (0-50).
    inflation_volatility : float
        Standard deviation of the annual inflation draw, in percent (0-10).
    sequence_of_returns_risk : bool
        Keep return draws in sampled order. When False each trial's draws
        are sorted best-first, a favourable-ordering baseline.
    seed : int, optional
        Root seed. Results depend only on the seed, not on ``n_workers``.
    n_workers : int, optional
        Worker processes. None uses CPU count - 1 (at least 1).
    expected_return : float, optional
        Mean annual return override (percent). Defaults to the
        value-weighted expected return of the holdings.
    retirement_age : int, optional
        Retirement age override. Defaults to the age after the
        highest-income salary plan ends.
    percentiles : tuple of int
        Percentile bands to extract.

    Examples
    --------
    >>> config = MonteCarloConfig(simulations=500, return_volatility=0.0)
    >>> config.simulations
    500
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    simulations: int = Field(
        default=DEFAULT_SIMULATIONS,
        ge=MIN_SIMULATIONS,
        le=MAX_SIMULATIONS,
        description="Number of Monte Carlo trials"
    )
    return_volatility: float = Field(
        default=DEFAULT_RETURN_VOLATILITY,
        ge=0.0,
        le=MAX_RETURN_VOLATILITY,
        description="Annual return standard deviation (percent)"
    )
    inflation_volatility: float = Field(
        default=DEFAULT_INFLATION_VOLATILITY,
        ge=0.0,
        le=MAX_INFLATION_VOLATILITY,
        description="Annual inflation standard deviation (percent)"
    )
    sequence_of_returns_risk: bool = Field(
        default=True,
        description="Apply return draws in sampled order"
    )
    seed: Optional[int] = Field(
        default=DEFAULT_SEED,
        description="Random seed for reproducibility"
    )
    n_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Worker processes (None = CPU count - 1)"
    )
    expected_return: Optional[float] = Field(
        default=None,
        ge=-100.0,
        description="Mean annual return override (percent)"
    )
    retirement_age: Optional[int] = Field(
        default=None,
        ge=0,
        le=150,
        description="Retirement age override"
    )
    percentiles: Tuple[int, ...] = Field(
        default=MC_PERCENTILES,
        description="Percentile bands to extract"
    )

    @field_validator("percentiles")
    @classmethod
    def validate_percentiles(cls, v):
        """Require a non-empty list of percentiles within [0, 100]."""
        if len(v) == 0:
            raise ValueError("percentiles cannot be empty")
        bad = [p for p in v if not 0 <= p <= 100]
        if bad:
            raise ValueError(f"percentiles must be within [0, 100], got {bad}")
        return tuple(v)


# ---------------------------------------------------------------------------
# Optimizer Configuration
# ---------------------------------------------------------------------------

class OptimizerConfig(BaseModel):
    """
    Configuration for the retirement-age search.

    Attributes
    ----------
    max_search_age : int
        Latest retirement age considered (default 60).
    min_final_assets : float
        Final-year total assets a candidate age needs to succeed.
    max_evaluations : int, optional
        Ceiling on full engine re-runs; None disables the ceiling.
    verbose : bool
        Print search progress.

    Examples
    --------
    >>> OptimizerConfig().max_search_age
    60
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    max_search_age: int = Field(
        default=MAX_FIRE_SEARCH_AGE,
        ge=0,
        le=150,
        description="Latest retirement age considered"
    )
    min_final_assets: float = Field(
        default=MIN_FINAL_ASSETS,
        ge=0.0,
        description="Final-year assets required for a sustainable age"
    )
    max_evaluations: Optional[int] = Field(
        default=DEFAULT_MAX_EVALUATIONS,
        ge=1,
        description="Maximum engine re-runs per search"
    )
    verbose: bool = Field(
        default=False,
        description="Print search progress"
    )


# ---------------------------------------------------------------------------
# Scenario Adjustment
# ---------------------------------------------------------------------------

class ScenarioAdjustment(BaseModel):
    """
    One named Monte Carlo scenario.

    Attributes
    ----------
    name : str
        Scenario label (e.g. "楽観的").
    return_adjustment : float
        Percentage points added to the mean expected return.
    volatility_multiplier : float
        Factor applied to the base return volatility.

    Examples
    --------
    >>> ScenarioAdjustment(name="不況", return_adjustment=-4, volatility_multiplier=1.5)
    """

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    name: str = Field(min_length=1, max_length=100)
    return_adjustment: float = Field(default=0.0)
    volatility_multiplier: float = Field(default=1.0, ge=0.0)


# ---------------------------------------------------------------------------
# Application Settings (Environment Variables)
# ---------------------------------------------------------------------------

class AppSettings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Supports .env files for local development. Environment variables
    are prefixed with FIREPLAN_ (e.g., FIREPLAN_LOG_LEVEL=DEBUG).

    Attributes
    ----------
    debug : bool
        Print the traceback before a CLI error message
    log_level : str
        Logging level: "DEBUG", "INFO", "WARNING", "ERROR"
    n_workers : int, optional
        Default Monte Carlo worker count
    seed : int, optional
        Default Monte Carlo seed

    Examples
    --------
    >>> settings = AppSettings()
    >>> settings.log_level
    'WARNING'

    # With .env file:
    # FIREPLAN_LOG_LEVEL=DEBUG
    # FIREPLAN_N_WORKERS=4
    >>> settings = AppSettings(_env_file=".env")
    >>> settings.n_workers
    4
    """

    model_config = SettingsConfigDict(
        env_prefix="FIREPLAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    debug: bool = Field(
        default=False,
        description="Enable debug mode"
    )
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="WARNING",
        description="Logging level"
    )
    n_workers: Optional[int] = Field(
        default=None,
        ge=1,
        description="Default Monte Carlo worker count"
    )
    seed: Optional[int] = Field(
        default=DEFAULT_SEED,
        description="Default Monte Carlo seed"
    )
