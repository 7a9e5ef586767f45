"""
Unit tests for education.py.

A child born in 2024 with a 35-year-old parent in 2025 gives a 34-year
age gap: kindergarten starts at parent age 37, university at 52.
"""

import pytest

from fireplan.education import (
    EDUCATION_STAGES,
    UNIVERSITY_ENTRANCE_FEE,
    Child,
    education_stages,
    expand_children,
    expand_education_expenses,
    with_education,
)
from fireplan.engine import simulate_years


@pytest.fixture
def newborn() -> Child:
    return Child(id="c1", name="Hana", birth_year=2024, university_private=True)


@pytest.fixture
def teenager() -> Child:
    return Child(id="c2", name="Ken", birth_year=2010)


class TestChild:
    def test_stage_costs(self, newborn):
        university = EDUCATION_STAGES[-1]
        kindergarten = EDUCATION_STAGES[0]

        assert newborn.is_private(university)
        assert newborn.annual_cost(university) == 1_000_000
        assert newborn.annual_cost(kindergarten) == 200_000

    def test_camel_case_flags(self):
        child = Child.model_validate({"id": "c1", "birthYear": 2020, "highSchoolPrivate": True})

        assert child.high_school_private


class TestExpansion:
    """Tests for per-year expense expansion."""

    def test_newborn_full_schedule(self, newborn):
        expenses = expand_education_expenses(newborn, current_year=2025, current_age=35)

        # 3 + 6 + 3 + 3 + 4 stage years plus the entrance fee
        assert len(expenses) == 20
        assert expenses[0].target_age == 37
        assert expenses[0].amount == 200_000
        assert expenses[0].id == "c1-kindergarten-year-0"

    def test_university_years(self, newborn):
        expenses = expand_education_expenses(newborn, current_year=2025, current_age=35)
        university = [e for e in expenses if e.id.startswith("c1-university-year")]
        entrance = [e for e in expenses if e.id == "c1-university-entrance"]

        assert [e.target_age for e in university] == [52, 53, 54, 55]
        assert all(e.amount == 1_000_000 for e in university)
        assert entrance[0].target_age == 52
        assert entrance[0].amount == UNIVERSITY_ENTRANCE_FEE

    def test_past_years_skipped(self, teenager):
        """Test a 15-year-old only contributes high school onwards."""
        expenses = expand_education_expenses(teenager, current_year=2025, current_age=45)

        assert [s.key for s in education_stages(teenager, 2025, 45)] == ["high_school", "university"]
        assert len(expenses) == 3 + 4 + 1
        assert min(e.target_age for e in expenses) == 45

    def test_expand_children(self, newborn, teenager):
        combined = expand_children([newborn, teenager], current_year=2025, current_age=35)

        # the teenager still has high school and university ahead
        assert len(combined) == 20 + 8
        assert len({e.id for e in combined}) == len(combined)


class TestWithEducation:
    def test_engine_sees_education(self, no_asset_input):
        child = Child(id="c1", birth_year=2025)
        data = with_education(no_asset_input, [child], current_year=2025)
        details = simulate_years(data)

        assert len(data.special_expenses) == 20
        assert len(no_asset_input.special_expenses) == 0
        # kindergarten at parent age 33
        assert details[3].special_expenses == {"幼稚園": -200_000.0}
