"""General utilities for fireplan

Contents
--------
- Validation helpers
- Rate conversions (percent ↔ fraction, annual → monthly for loans)
- Inflation compounding
- Reporting helpers (format_currency, format_manyen)
"""

from __future__ import annotations

from .constants import MANYEN, MONTHS_PER_YEAR

__all__ = [
    # Validation
    "check_non_negative",
    # Rates
    "pct_to_rate",
    "monthly_rate",
    # Inflation
    "inflation_factor",
    # Reporting
    "format_currency",
    "format_manyen",
]

# ---------------------------------------------------------------------------
# Validation helpers
# ---------------------------------------------------------------------------

def check_non_negative(name: str, value: float) -> None:
    """Raise if *value* is negative (strict)."""
    if value < 0:
        raise ValueError(f"{name} must be non-negative (got {value}).")


# ---------------------------------------------------------------------------
# Rate conversions
# ---------------------------------------------------------------------------

def pct_to_rate(pct: float) -> float:
    """Convert a percent figure (5 = 5%) to a fraction (0.05)."""
    return float(pct) / 100.0


def monthly_rate(annual_pct: float) -> float:
    """Nominal monthly rate for an annual percent figure.

    Loans quote a nominal annual rate, so the monthly rate is a plain
    division (not the compounded ``(1 + r) ** (1/12) - 1`` form).
    """
    return pct_to_rate(annual_pct) / MONTHS_PER_YEAR


# ---------------------------------------------------------------------------
# Inflation
# ---------------------------------------------------------------------------

def inflation_factor(inflation_pct: float, years: int) -> float:
    """Compounded growth factor ``(1 + i) ** years`` for a percent rate."""
    return float((1.0 + pct_to_rate(inflation_pct)) ** years)


# ---------------------------------------------------------------------------
# Reporting helpers
# ---------------------------------------------------------------------------

def format_currency(value, decimals=0, symbol='¥'):
    """
    Format a yen amount with thousands separators.

    Examples
    --------
    >>> format_currency(60_000_000)
    '¥60,000,000'
    >>> format_currency(-2_400_000)
    '-¥2,400,000'
    """
    sign = '-' if value < 0 else ''
    return f'{sign}{symbol}{abs(value):,.{decimals}f}'


def format_manyen(value, decimals=1):
    """
    Format a yen amount in 万円 (units of 10,000 yen).

    This is the display unit of the yearly detail table.

    Examples
    --------
    >>> format_manyen(2_400_000)
    '240.0'
    >>> format_manyen(12_345)
    '1.2'
    """
    return f'{value / MANYEN:.{decimals}f}'
