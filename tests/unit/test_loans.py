"""
Unit tests for loans.py amortization.
"""

import pytest

from fireplan.loans import amortize_year, payment_schedule
from fireplan.models import Loan


class TestAmortizeYear:
    """Tests for one simulated year of payments."""

    def test_zero_rate_pays_off_in_twelve_months(self):
        """Test 1.2M at 0% with 100k/month is fully repaid in one year."""
        paid, remaining = amortize_year(1_200_000, 100_000, 0.0)

        assert paid == 1_200_000
        assert remaining == 0.0

    def test_last_payment_capped_at_balance(self):
        """Test the final payment never exceeds the remaining balance."""
        paid, remaining = amortize_year(250_000, 100_000, 0.0)

        assert paid == 250_000
        assert remaining == 0.0

    def test_paid_off_loan_pays_nothing(self):
        assert amortize_year(0.0, 100_000, 1.5) == (0.0, 0.0)

    def test_interest_accrues_monthly(self):
        """Test a 12% nominal rate compounds at 1% per month."""
        paid, remaining = amortize_year(1_000_000, 0.0, 12.0)

        assert paid == 0.0
        assert remaining == pytest.approx(1_000_000 * 1.01 ** 12)

    def test_interest_with_payments(self):
        """Test balance after one month of interest then payment."""
        paid, remaining = amortize_year(1_000_000, 100_000, 12.0, months=1)

        assert paid == 100_000
        assert remaining == pytest.approx(910_000)

    def test_negative_balance_raises(self):
        with pytest.raises(ValueError):
            amortize_year(-1, 100_000)


class TestPaymentSchedule:
    """Tests for multi-year schedules."""

    def test_schedule(self):
        """Test payments stop once the loan is repaid."""
        loan = Loan(id="l1", name="car", balance=1_500_000, monthly_payment=100_000)
        schedule = payment_schedule(loan, 3)

        assert schedule["payment"].tolist() == [1_200_000, 300_000, 0.0]
        assert schedule["balance"].tolist() == [300_000, 0.0, 0.0]
        assert schedule.index.name == "year"

    def test_empty_schedule(self):
        loan = Loan(id="l1", name="car", balance=1_000, monthly_payment=100)

        assert len(payment_schedule(loan, 0)) == 0

    def test_negative_years_raises(self):
        loan = Loan(id="l1", name="car", balance=1_000, monthly_payment=100)

        with pytest.raises(ValueError):
            payment_schedule(loan, -1)
