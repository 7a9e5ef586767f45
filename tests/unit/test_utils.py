"""
Unit tests for utils.py helpers.
"""

import pytest

from fireplan.utils import (
    check_non_negative,
    format_currency,
    format_manyen,
    inflation_factor,
    monthly_rate,
    pct_to_rate,
)


class TestRates:
    def test_pct_to_rate(self):
        assert pct_to_rate(5) == pytest.approx(0.05)

    def test_monthly_rate_is_nominal(self):
        """Test annual/12, not the compounded equivalent."""
        assert monthly_rate(12) == pytest.approx(0.01)

    def test_inflation_factor(self):
        assert inflation_factor(2.0, 0) == 1.0
        assert inflation_factor(2.0, 3) == pytest.approx(1.02 ** 3)


class TestValidation:
    def test_accepts_zero(self):
        check_non_negative("x", 0)

    def test_rejects_negative(self):
        with pytest.raises(ValueError, match="x must be non-negative"):
            check_non_negative("x", -0.01)


class TestFormatting:
    def test_format_currency(self):
        assert format_currency(60_000_000) == "¥60,000,000"
        assert format_currency(-2_400_000) == "-¥2,400,000"

    def test_format_manyen(self):
        assert format_manyen(2_400_000) == "240.0"
        assert format_manyen(12_345, decimals=2) == "1.23"
