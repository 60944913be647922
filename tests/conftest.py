"""
Shared fixtures: a clean intermediate week and the constraints it was built for.

The fixture plan scores 100 against the fixture constraints, so each test can
break exactly one thing and assert on the issue that appears.
"""

import json
from pathlib import Path

import pytest

from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.schemas import ConflictConstraints, ValidationConstraints


FIXTURES_DIR = Path(__file__).parent / "fixtures"


def load_fixture(name: str) -> dict:
    with open(FIXTURES_DIR / name) as f:
        return json.load(f)


@pytest.fixture
def plan_data():
    """Raw JSON of the valid plan."""
    return load_fixture("valid_plan.json")


@pytest.fixture
def valid_plan(plan_data):
    """Plan that passes every check."""
    return GeneratedPlan(**plan_data)


@pytest.fixture
def constraints():
    """Intermediate athlete, five training days, no history."""
    return ValidationConstraints(**load_fixture("valid_constraints.json"))


@pytest.fixture
def acl_constraints():
    """Athlete reporting an ACL injury."""
    return ConflictConstraints(**load_fixture("conflict_constraints_acl.json"))


def exercise_named(plan: GeneratedPlan, name: str):
    """First exercise in the plan with the given name."""
    return next(e for e in plan.all_exercises() if e.name == name)


def without_exercises(plan: GeneratedPlan, *names: str) -> GeneratedPlan:
    """Deep copy of the plan with the named exercises removed."""
    copy = plan.model_copy(deep=True)
    for day in copy.days:
        day.exercises = [e for e in day.exercises if e.name not in names]
    return copy
