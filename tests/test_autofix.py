"""
Tests for the auto-fix engine.

Test scenarios:
1. Fixes work on a copy, never on the caller's plan
2. Safety fixes bring volumes back under their caps
3. Coverage fixes insert race-realistic templates
4. Recovery fixes convert hard days to easy ones
5. Non-fixable issues are skipped
"""

import pytest

from hyrox_guard.autofix import (
    applicable_fixes,
    auto_fix_plan,
    fix_high_intensity_frequency,
    fix_session_duration,
    fix_single_run_distance,
    fix_station_volume,
    fix_weak_station_frequency,
)
from hyrox_guard.safety import high_intensity_days, is_easy_day
from hyrox_guard.schemas import (
    IssueCategory,
    IssueType,
    PreviousWeekVolumes,
    StationId,
    ValidationIssue,
)
from hyrox_guard.validator import validate_plan
from hyrox_guard.volume import (
    calculate_volumes,
    count_station_occurrences,
    weekly_running_km,
    weekly_station_load,
)

from conftest import exercise_named, without_exercises


def fix_and_revalidate(plan, constraints):
    issues = validate_plan(plan, constraints).issues
    fixed = auto_fix_plan(plan, issues)
    return fixed, validate_plan(fixed, constraints)


def test_running_progression_fix(valid_plan, constraints):
    """
    TEST_CASE_001: Progression Repair

    33 km after a 25 km week must come down to at most 27.5 km.
    Expected: Runs scaled and annotated; original plan untouched
    """
    constraints.previous_week_volumes = PreviousWeekVolumes(running_km=25)

    fixed, result = fix_and_revalidate(valid_plan, constraints)

    assert weekly_running_km(fixed) <= 27.5
    assert result.valid
    assert "[Reduced for safe progression]" in exercise_named(fixed, "Long Run").notes
    assert exercise_named(valid_plan, "Long Run").distance_km == 12
    assert weekly_running_km(valid_plan) == pytest.approx(33.0)


def test_station_volume_fix(valid_plan, constraints):
    """
    TEST_CASE_002: Station Volume Repair

    Expected: 300 wall balls reduced to the 250 cap or below
    """
    exercise_named(valid_plan, "Wall Balls").reps = 100

    fixed, result = fix_and_revalidate(valid_plan, constraints)

    assert weekly_station_load(fixed, StationId.WALL_BALLS) <= 250
    assert exercise_named(fixed, "Wall Balls").reps == 83
    assert result.valid


def test_missing_stations_inserted(valid_plan, constraints):
    """
    TEST_CASE_003: Coverage Repair

    Expected: Missing stations added round-robin over days with extra minutes
    """
    plan = without_exercises(valid_plan, "Burpee Broad Jumps", "Rowing")

    fixed, result = fix_and_revalidate(plan, constraints)

    assert calculate_volumes(fixed).stations_missing == []
    assert result.valid
    assert fixed.days[0].exercises[-1].name == "Burpee Broad Jumps"
    assert fixed.days[0].duration_minutes == plan.days[0].duration_minutes + 10
    assert calculate_volumes(plan).stations_missing == [StationId.BURPEE_BROAD_JUMP, StationId.ROWING]


def test_machine_top_up_goes_to_conditioning_day(valid_plan, constraints):
    """
    TEST_CASE_004: Machine Volume Repair

    Expected: SkiErg top-up lands on the conditioning day
    """
    exercise_named(valid_plan, "SkiErg").sets = 2

    fixed, result = fix_and_revalidate(valid_plan, constraints)

    conditioning = fixed.find_day(5)
    assert conditioning.exercises[-1].name == "SkiErg"
    assert conditioning.duration_minutes == 82
    assert calculate_volumes(fixed).skierg_m == pytest.approx(2500)
    assert result.valid


def test_consecutive_hard_days_fix(valid_plan, constraints):
    """
    TEST_CASE_005: Back-to-back Repair

    Expected: The second hard day becomes a recovery day
    """
    valid_plan.days[0].session_type = "Threshold Intervals"

    fixed, result = fix_and_revalidate(valid_plan, constraints)

    assert high_intensity_days(fixed) == [1]
    assert fixed.find_day(2).session_type.startswith("Recovery/Easy")
    assert result.valid


def test_easy_day_fix(valid_plan, constraints):
    """
    TEST_CASE_006: Easy Day Repair

    Days 4 to 6 marked hard leave one easy day.
    Expected: The latest hard day is converted until two easy days exist
    """
    for day in valid_plan.days[2:]:
        day.exercises[0].notes = "Hard effort"

    fixed, _ = fix_and_revalidate(valid_plan, constraints)

    assert sum(1 for day in fixed.days if is_easy_day(day)) >= 2
    assert is_easy_day(fixed.find_day(6))


def test_session_duration_fix_drops_least_valuable(valid_plan, constraints):
    """
    TEST_CASE_007: Long Session Repair

    Expected: Strength work goes before stations; day ends under 120 minutes
    """
    valid_plan.find_day(4).duration_minutes = 125

    fixed, result = fix_and_revalidate(valid_plan, constraints)
    day = fixed.find_day(4)

    assert [e.name for e in day.exercises] == ["Sled Push", "Sled Pull", "Farmers Carry"]
    assert day.duration_minutes == 119
    assert not any(i.category == IssueCategory.SAFETY_SESSION_DURATION for i in result.issues)


def test_injury_violation_removes_exercise(valid_plan, constraints):
    """
    TEST_CASE_008: Injury Repair

    Removing the lunges fixes the violation but uncovers a missing station.
    Expected: Exercise gone, coverage error remains for regeneration
    """
    constraints.injury_exercises_to_avoid = ["lunge"]

    fixed, result = fix_and_revalidate(valid_plan, constraints)

    assert all("Lunges" not in e.name for e in fixed.all_exercises())
    assert fixed.find_day(5).duration_minutes == 65
    assert not result.valid
    assert [i.category for i in result.errors] == [IssueCategory.STATION_COVERAGE]


def test_weak_station_practice_added(valid_plan):
    """
    TEST_CASE_009: Weak Station Repair

    Expected: Practice block on the first day without the station
    """
    issue = ValidationIssue(
        type=IssueType.WARNING,
        category=IssueCategory.WEAK_STATION_FREQUENCY,
        message="weak",
        details={"station": "sled_pull", "count": 1, "required": 2},
        auto_fixable=True,
    )

    fix_weak_station_frequency(valid_plan, issue)

    assert valid_plan.days[0].exercises[-1].name == "Sled Pull Practice"
    assert count_station_occurrences(valid_plan, StationId.SLED_PULL) == 2


def test_single_run_capped(valid_plan):
    """
    TEST_CASE_010: Single Run Repair

    Expected: Run capped and annotated
    """
    exercise_named(valid_plan, "Long Run").distance_km = 18
    issue = ValidationIssue(
        type=IssueType.ERROR,
        category=IssueCategory.SAFETY_SINGLE_RUN_DISTANCE,
        message="too long",
        details={"day_number": 6, "max_allowed_km": 16},
        auto_fixable=True,
    )

    fix_single_run_distance(valid_plan, issue)

    long_run = exercise_named(valid_plan, "Long Run")
    assert long_run.distance_km == 16
    assert "[Capped at 16km for safety]" in long_run.notes


def test_non_fixable_issues_skipped(valid_plan, constraints):
    """
    TEST_CASE_011: Non-fixable Issues

    Expected: Training-day errors are left for regeneration
    """
    constraints.training_days = 4
    issues = validate_plan(valid_plan, constraints).issues

    assert applicable_fixes(issues) == []
    fixed = auto_fix_plan(valid_plan, issues)
    assert fixed.model_dump() == valid_plan.model_dump()
    assert fixed is not valid_plan


def test_high_intensity_fix_keeps_first_two_hard_days(valid_plan):
    """
    TEST_CASE_012: High Intensity Repair

    Days 2, 4, 5 and 6 are hard with at most two allowed.
    Expected: Days 2 and 4 stay hard; days 5 and 6 are converted to easy
    """
    valid_plan.find_day(4).session_type = "Threshold Stations"
    valid_plan.find_day(5).session_type = "Interval Conditioning"
    valid_plan.find_day(6).session_type = "Tempo Long Run"
    exercise_named(valid_plan, "Long Run").notes = "Finish at race pace"
    issue = ValidationIssue(
        type=IssueType.ERROR,
        category=IssueCategory.SAFETY_HIGH_INTENSITY_FREQUENCY,
        message="too many hard days",
        details={"count": 4, "max_allowed": 2},
        auto_fixable=True,
    )

    fix_high_intensity_frequency(valid_plan, issue)

    assert high_intensity_days(valid_plan) == [2, 4]
    assert valid_plan.find_day(4).session_type == "Threshold Stations"
    assert valid_plan.find_day(5).session_type == "Easy Conditioning"
    assert valid_plan.find_day(6).session_type == "Easy Long Run"
    assert "[Converted from high intensity for safety]" in exercise_named(valid_plan, "Long Run").notes
    assert exercise_named(valid_plan, "Plank").notes == "Core"


def test_station_volume_fix_keeps_five_reps(valid_plan):
    """
    TEST_CASE_013: Rep Floor

    A cap of 10 wall balls would scale 20 reps down to 3.
    Expected: Reps stop at 5 per set
    """
    issue = ValidationIssue(
        type=IssueType.ERROR,
        category=IssueCategory.SAFETY_STATION_VOLUME,
        message="too many wall balls",
        details={"station": "wall_balls", "count": 60, "max_allowed": 10},
        auto_fixable=True,
    )

    fix_station_volume(valid_plan, issue)

    wall_balls = exercise_named(valid_plan, "Wall Balls")
    assert wall_balls.reps == 5
    assert wall_balls.sets == 3
    assert "[Reduced for safe volume]" in wall_balls.notes


def test_session_duration_fix_keeps_thirty_minutes(valid_plan):
    """
    TEST_CASE_014: Duration Floor

    Dropping a 60 minute run from a 70 minute day would leave 9 minutes.
    Expected: The session is recorded at the 30 minute minimum
    """
    day = valid_plan.find_day(6)
    day.duration_minutes = 70
    exercise_named(valid_plan, "Long Run").duration_minutes = 60
    issue = ValidationIssue(
        type=IssueType.ERROR,
        category=IssueCategory.SAFETY_SESSION_DURATION,
        message="session too long",
        details={"day_number": 6, "duration": 70, "max_allowed": 25},
        auto_fixable=True,
    )

    fix_session_duration(valid_plan, issue)

    assert day.exercises == []
    assert day.duration_minutes == 30
