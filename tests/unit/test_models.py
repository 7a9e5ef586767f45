"""
Unit tests for models.py input models.

Tests aliases, defaults, horizon validation, and derived helpers.
"""

import pytest
from pydantic import ValidationError as PydanticValidationError

from fireplan.exceptions import FirePlanError, HorizonError
from fireplan.models import (
    AssetHolding,
    ExpenseSegment,
    FireCalculationInput,
    Loan,
    SalaryPlan,
    SpecialExpense,
)


class TestAssetHolding:
    """Tests for AssetHolding defaults and aliases."""

    def test_camel_case_aliases(self):
        """Test wire names are accepted."""
        holding = AssetHolding.model_validate({
            "id": "a1", "name": "VOO", "quantity": 2,
            "pricePerUnit": 500, "currency": "USD", "expectedReturn": 7,
        })

        assert holding.price_per_unit == 500
        assert holding.expected_return == 7
        assert holding.native_value == 1_000

    def test_default_expected_return(self):
        """Test missing expected return falls back to 5%."""
        holding = AssetHolding(id="a1", name="fund", quantity=1, price_per_unit=100)

        assert holding.expected_return is None
        assert holding.return_pct == 5.0
        assert holding.currency == "JPY"

    def test_rejects_unknown_currency(self):
        """Test only JPY and USD are supported."""
        with pytest.raises(PydanticValidationError):
            AssetHolding(id="a1", name="x", quantity=1, price_per_unit=1, currency="EUR")

    def test_rejects_negative_quantity(self):
        """Test quantity must be non-negative."""
        with pytest.raises(PydanticValidationError):
            AssetHolding(id="a1", name="x", quantity=-1, price_per_unit=1)

    def test_rejects_unknown_fields(self):
        """Test extra fields are forbidden."""
        with pytest.raises(PydanticValidationError):
            AssetHolding(id="a1", name="x", quantity=1, price_per_unit=1, ticker="X")

    def test_immutable(self):
        """Test holdings are frozen."""
        holding = AssetHolding(id="a1", name="x", quantity=1, price_per_unit=1)

        with pytest.raises(Exception):
            holding.quantity = 2


class TestLoanAndPlans:
    """Tests for Loan, plans, and one-off items."""

    def test_loan_default_rate(self):
        """Test missing interest rate defaults to 0%."""
        loan = Loan(id="l1", name="car", balance=1_000_000, monthly_payment=50_000)

        assert loan.rate_pct == 0.0

    def test_plan_active_inclusive(self):
        """Test plans are active on both boundary ages."""
        plan = SalaryPlan(id="s1", name="salary", annual_amount=1, start_age=30, end_age=40)

        assert plan.is_active(30)
        assert plan.is_active(40)
        assert not plan.is_active(29)
        assert not plan.is_active(41)

    def test_plan_missing_amount_is_zero(self):
        """Test a plan without annualAmount contributes 0."""
        plan = SalaryPlan(id="s1", name="salary", start_age=30, end_age=40)

        assert plan.amount == 0.0

    def test_special_fires_only_at_target_age(self):
        """Test one-off items fire exactly once."""
        item = SpecialExpense(id="x1", name="car", amount=3_000_000, target_age=45)
        undated = SpecialExpense(id="x2", name="someday", amount=1)

        assert item.fires_at(45)
        assert not item.fires_at(44)
        assert not undated.fires_at(45)


class TestFireCalculationInput:
    """Tests for FireCalculationInput validation and helpers."""

    def test_horizon_years(self, no_asset_input):
        """Test both end ages are simulated."""
        assert no_asset_input.horizon_years == 61

    def test_single_year_horizon(self):
        """Test life_expectancy == current_age is a valid one-year run."""
        data = FireCalculationInput(current_age=90, life_expectancy=90)

        assert data.horizon_years == 1

    def test_inverted_horizon_raises(self):
        """Test life_expectancy < current_age raises HorizonError."""
        with pytest.raises(HorizonError):
            FireCalculationInput(current_age=45, life_expectancy=40)

    def test_horizon_error_is_fireplan_error(self):
        """Test HorizonError is catchable as FirePlanError."""
        with pytest.raises(FirePlanError):
            FireCalculationInput(current_age=45, life_expectancy=40)

    def test_rejects_non_positive_exchange_rate(self):
        """Test exchange rate must be positive when given."""
        with pytest.raises(PydanticValidationError):
            FireCalculationInput(current_age=30, life_expectancy=90, exchange_rate=0)

    def test_monthly_expenses_first_segment_wins(self):
        """Test overlapping segments resolve to the first match."""
        data = FireCalculationInput(
            current_age=30,
            life_expectancy=90,
            expense_segments=[
                ExpenseSegment(id="e1", start_age=30, end_age=50, monthly_expenses=300_000),
                ExpenseSegment(id="e2", start_age=50, end_age=90, monthly_expenses=200_000),
            ],
        )

        assert data.monthly_expenses_for_age(50) == 300_000
        assert data.monthly_expenses_for_age(51) == 200_000

    def test_expense_gap_is_zero(self):
        """Test uncovered ages yield 0 and are reported by expense_gaps."""
        data = FireCalculationInput(
            current_age=30,
            life_expectancy=40,
            expense_segments=[
                ExpenseSegment(id="e1", start_age=30, end_age=35, monthly_expenses=100_000),
                ExpenseSegment(id="e2", start_age=38, end_age=40, monthly_expenses=100_000),
            ],
        )

        assert data.monthly_expenses_for_age(36) == 0.0
        assert data.expense_gaps() == [36, 37]

    def test_no_gaps(self, no_asset_input):
        """Test a fully covered horizon has no gaps."""
        assert no_asset_input.expense_gaps() == []

    def test_with_salary_end_age_copies(self, saver_input):
        """Test the end-age override leaves the original untouched."""
        modified = saver_input.with_salary_end_age("s1", 50)

        assert modified.salary_plans[0].end_age == 50
        assert saver_input.salary_plans[0].end_age == 60

    def test_with_salary_end_age_unknown_id(self, saver_input):
        """Test an unknown plan id changes nothing."""
        modified = saver_input.with_salary_end_age("missing", 50)

        assert modified.salary_plans == saver_input.salary_plans

    def test_alias_round_trip(self, household_input):
        """Test dumping by alias and validating restores the input."""
        payload = household_input.model_dump(by_alias=True)
        restored = FireCalculationInput.model_validate(payload)

        assert restored == household_input
        assert "assetHoldings" in payload
