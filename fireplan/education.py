"""Children's education costs for fireplan

Expands a child's schooling plan (public or private per stage) into
single-year ``SpecialExpense`` entries keyed by the *parent's* age, ready
to be appended to a ``FireCalculationInput``.

Annual costs (JPY, present value)
---------------------------------
=============  ==========  ======  ========  =========
stage          child age   years   public    private
=============  ==========  ======  ========  =========
幼稚園          3           3       200,000   350,000
小学校          6           6       350,000   1,800,000
中学            12          3       550,000   1,600,000
高校            15          3       600,000   1,000,000
大学            18          4       550,000   1,000,000
=============  ==========  ======  ========  =========

plus a 300,000 university entrance fee (大学入学金) at child age 18.
Years that fall before the parent's current age are skipped.

>>> child = Child(id="c1", name="Hana", birth_year=2024, university_private=True)
>>> expenses = expand_education_expenses(child, current_year=2025, current_age=35)
>>> expenses[0].target_age, expenses[0].amount
(37, 200000.0)
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from .models import FireCalculationInput, SpecialExpense

__all__ = [
    "Child",
    "EducationStage",
    "EDUCATION_STAGES",
    "UNIVERSITY_ENTRANCE_FEE",
    "education_stages",
    "expand_education_expenses",
    "expand_children",
    "with_education",
]


@dataclass(frozen=True)
class EducationStage:
    key: str
    name: str
    child_age: int
    years: int
    public_cost: float
    private_cost: float


EDUCATION_STAGES = (
    EducationStage("kindergarten", "幼稚園", 3, 3, 200_000, 350_000),
    EducationStage("elementary", "小学校", 6, 6, 350_000, 1_800_000),
    EducationStage("junior_high", "中学", 12, 3, 550_000, 1_600_000),
    EducationStage("high_school", "高校", 15, 3, 600_000, 1_000_000),
    EducationStage("university", "大学", 18, 4, 550_000, 1_000_000),
)

UNIVERSITY_ENTRANCE_FEE = 300_000.0
UNIVERSITY_ENTRANCE_AGE = 18


class Child(BaseModel):
    """A child and whether each school stage is private."""

    model_config = ConfigDict(
        frozen=True,
        extra="forbid",
        alias_generator=to_camel,
        populate_by_name=True,
    )

    id: str
    name: str = ""
    birth_year: int = Field(ge=1900, le=2200)
    kindergarten_private: bool = False
    elementary_private: bool = False
    junior_high_private: bool = False
    high_school_private: bool = False
    university_private: bool = False

    def is_private(self, stage: EducationStage) -> bool:
        return bool(getattr(self, f"{stage.key}_private"))

    def annual_cost(self, stage: EducationStage) -> float:
        return float(stage.private_cost if self.is_private(stage) else stage.public_cost)


def _age_gap(child: Child, current_year: int, current_age: int) -> int:
    """Parent age when the child is born."""
    return child.birth_year - (current_year - current_age)


def education_stages(child: Child, current_year: int, current_age: int) -> List[EducationStage]:
    """Stages with at least one year at or after the parent's current age."""
    gap = _age_gap(child, current_year, current_age)
    return [
        stage
        for stage in EDUCATION_STAGES
        if gap + stage.child_age + stage.years - 1 >= current_age
    ]


def expand_education_expenses(
    child: Child,
    current_year: int,
    current_age: int,
) -> List[SpecialExpense]:
    """
    Per-year education expenses of *child*, in parent-age order per stage.

    Parameters
    ----------
    child : Child
    current_year : int
        Calendar year of the calculation (e.g. 2025).
    current_age : int
        Parent's age in ``current_year``.
    """
    gap = _age_gap(child, current_year, current_age)
    out: List[SpecialExpense] = []
    for stage in education_stages(child, current_year, current_age):
        cost = child.annual_cost(stage)
        for i in range(stage.years):
            parent_age = gap + stage.child_age + i
            if parent_age < current_age:
                continue
            out.append(
                SpecialExpense(
                    id=f"{child.id}-{stage.key}-year-{i}",
                    name=stage.name,
                    amount=cost,
                    target_age=parent_age,
                )
            )

    entrance_age = gap + UNIVERSITY_ENTRANCE_AGE
    if entrance_age >= current_age:
        out.append(
            SpecialExpense(
                id=f"{child.id}-university-entrance",
                name="大学入学金",
                amount=UNIVERSITY_ENTRANCE_FEE,
                target_age=entrance_age,
            )
        )
    return out


def expand_children(
    children: Iterable[Child],
    current_year: int,
    current_age: int,
) -> List[SpecialExpense]:
    return [
        expense
        for child in children
        for expense in expand_education_expenses(child, current_year, current_age)
    ]


def with_education(
    data: FireCalculationInput,
    children: Iterable[Child],
    current_year: int,
) -> FireCalculationInput:
    """Copy of *data* with every child's education expenses appended."""
    extra = expand_children(children, current_year, data.current_age)
    return data.model_copy(update={"special_expenses": list(data.special_expenses) + extra})
