"""
Custom exceptions for fireplan.

Purpose
-------
Provides a unified exception hierarchy for consistent error handling
across all fireplan modules. All exceptions inherit from FirePlanError,
enabling catch-all handling when needed.

The engine prefers documented defaults over exceptions (missing expected
return, missing interest rate, missing exchange rate and expense-segment
gaps never raise). Exceptions are reserved for inputs the engine cannot
simulate at all and for caller-imposed ceilings.

Exception Hierarchy
-------------------
FirePlanError (base)
├── ConfigurationError - Invalid run configuration
├── ValidationError - Input data the engine cannot simulate
│   └── HorizonError - Life expectancy before current age
└── SimulationError - Search or trial ceilings exceeded

Usage
-----
>>> from fireplan.exceptions import HorizonError, FirePlanError
>>>
>>> try:
...     result = calculate_fire(data)
... except FirePlanError as e:
...     print(f"fireplan error: {e}")
"""


class FirePlanError(Exception):
    """
    Base exception for all fireplan errors.

    Examples
    --------
    >>> try:
    ...     calculate_fire(data)
    ... except FirePlanError as e:
    ...     logger.error(f"FIRE calculation failed: {e}")
    """
    pass


class ConfigurationError(FirePlanError):
    """
    Invalid run configuration.

    Raised when a configuration combination is inconsistent, such as:
    - A Monte Carlo retirement age outside the simulated horizon
    - A scenario or risk analysis run on an unusable configuration

    Examples
    --------
    >>> raise ConfigurationError(
    ...     "retirement_age 120 is after life_expectancy 90."
    ... )
    """
    pass


class ValidationError(FirePlanError):
    """
    Input data the engine cannot simulate.

    Examples
    --------
    >>> raise ValidationError("exchange_rate must be positive, got -1.0")
    """
    pass


class HorizonError(ValidationError):
    """
    Age and horizon errors.

    Raised when the simulated age range is inverted:
    - life_expectancy < current_age

    Examples
    --------
    >>> raise HorizonError(
    ...     "life_expectancy (40) must be >= current_age (45). "
    ...     "The projection needs at least one simulated year."
    ... )
    """
    pass


class SimulationError(FirePlanError):
    """
    Search or trial ceilings exceeded.

    Raised when a caller-supplied bound on work is hit, e.g. the
    retirement-age search needs more engine re-runs than allowed.

    Examples
    --------
    >>> raise SimulationError(
    ...     "Retirement-age search exceeded max_evaluations=10. "
    ...     "Raise the ceiling or narrow the search range."
    ... )
    """
    pass
