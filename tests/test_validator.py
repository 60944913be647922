"""
Tests for the combined PlanValidator.

Test scenarios:
1. Valid plan scores 100
2. Scoring and issue ordering
3. Multiple violations are all reported in one pass
4. Loading constraints from file
5. Human-readable summary
"""

import json

import pytest

from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.schemas import (
    IssueCategory,
    IssueType,
    PreviousWeekVolumes,
    ValidationIssue,
)
from hyrox_guard.validator import (
    PlanValidator,
    calculate_score,
    display_validation_summary,
    validate_plan,
)

from conftest import FIXTURES_DIR, exercise_named, without_exercises


def make_issue(issue_type: IssueType) -> ValidationIssue:
    return ValidationIssue(
        type=issue_type,
        category=IssueCategory.RUNNING_VOLUME,
        message="test",
    )


def test_valid_plan_passes(valid_plan, constraints):
    """
    TEST_CASE_001: Valid Plan Acceptance

    A week that meets every target and cap should pass cleanly.
    Expected: valid, score 100, no issues
    """
    result = PlanValidator(constraints).validate(valid_plan)

    assert result.valid
    assert result.score == 100
    assert result.issues == []
    assert result.calculated_volumes.running_km == pytest.approx(33.0)


def test_score_formula():
    """
    TEST_CASE_002: Scoring

    Expected: 100 - 15 per error - 5 per warning, floored at 0
    """
    error = make_issue(IssueType.ERROR)
    warning = make_issue(IssueType.WARNING)

    assert calculate_score([]) == 100
    assert calculate_score([error, warning, warning]) == 75
    assert calculate_score([error] * 7) == 0


def test_errors_listed_before_warnings(valid_plan, constraints):
    """
    TEST_CASE_003: Issue Ordering

    Missing the rowing station gives a rowing warning (checked first) and a
    coverage error.
    Expected: Error first, warnings after, still invalid
    """
    plan = without_exercises(valid_plan, "Rowing")

    result = validate_plan(plan, constraints)

    assert not result.valid
    assert [i.type for i in result.issues] == [IssueType.ERROR, IssueType.WARNING]
    assert result.issues[0].category == IssueCategory.STATION_COVERAGE
    assert result.score == 80


def test_multiple_violations_reported_together(valid_plan, constraints):
    """
    TEST_CASE_004: No Fail-fast

    A week with a big running jump, too many wall balls and a missing weight
    should report all three at once.
    Expected: Every problem present in one result
    """
    constraints.previous_week_volumes = PreviousWeekVolumes(running_km=25)
    exercise_named(valid_plan, "Wall Balls").reps = 100
    exercise_named(valid_plan, "Back Squat").weight_kg = None

    result = validate_plan(valid_plan, constraints)
    found = {i.category for i in result.issues}

    assert not result.valid
    assert found == {
        IssueCategory.SAFETY_RUNNING_PROGRESSION,
        IssueCategory.SAFETY_STATION_VOLUME,
        IssueCategory.MISSING_WEIGHT,
    }
    assert len(result.errors) == 2
    assert len(result.warnings) == 1
    assert result.score == 65
    assert result.has_auto_fixable


def test_validator_does_not_mutate_plan(plan_data, constraints):
    """
    TEST_CASE_005: Read-only Validation

    Expected: The plan dumps identically before and after validation
    """
    plan = GeneratedPlan(**plan_data)
    before = plan.model_dump()

    validate_plan(plan, constraints)

    assert plan.model_dump() == before


def test_from_file():
    """
    TEST_CASE_006: Constraints From File

    Expected: Validator built from the fixture JSON
    """
    validator = PlanValidator.from_file(FIXTURES_DIR / "valid_constraints.json")
    assert validator.constraints.training_days == 5


def test_from_file_errors(tmp_path):
    """
    TEST_CASE_007: Bad Constraints Files

    Expected: FileNotFoundError for a missing file, ValueError for bad content
    """
    with pytest.raises(FileNotFoundError):
        PlanValidator.from_file(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text(json.dumps({"training_days": 9}))
    with pytest.raises(ValueError):
        PlanValidator.from_file(bad)


def test_summary_text(valid_plan, constraints):
    """
    TEST_CASE_008: Summary Display

    Expected: Status line, volumes and score in the text
    """
    result = validate_plan(valid_plan, constraints)
    summary = display_validation_summary(result, valid_plan)

    assert "PLAN VALIDATION: Week 1 (BASE)" in summary
    assert "✅ STATUS: VALID" in summary
    assert "Running: 33.0 km" in summary
    assert "Score: 100/100" in summary

    invalid = validate_plan(without_exercises(valid_plan, "Rowing"), constraints)
    summary = PlanValidator(constraints).display_validation_summary(invalid)
    assert "⛔ STATUS: INVALID" in summary
    assert "[station_coverage] Missing stations: rowing (auto-fixable)" in summary
    assert "Missing: rowing" in summary
