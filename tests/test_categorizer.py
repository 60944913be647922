"""
Tests for exercise categorization.

Test scenarios:
1. Station names (and their aliases) resolve to the right station
2. Rule priority: stations beat running and strength
3. Running subtypes are detected
4. Strength, core, cardio and fallback categories
"""

import pytest

from hyrox_guard.categorizer import (
    categorize_exercise,
    get_station_id,
    is_running_exercise,
    is_station_exercise,
)
from hyrox_guard.volume import missing_stations
from hyrox_guard.schemas import (
    CardioModality,
    ExerciseKind,
    RunningSubtype,
    StationId,
    StrengthCategory,
)


@pytest.mark.parametrize("name,station", [
    ("SkiErg 1000m", StationId.SKIERG),
    ("Prowler Push", StationId.SLED_PUSH),
    ("Hand-over-hand sled pull", StationId.SLED_PULL),
    ("Burpee Broad Jumps", StationId.BURPEE_BROAD_JUMP),
    ("C2 Row 2000m", StationId.ROWING),
    ("Farmers Walk", StationId.FARMERS_CARRY),
    ("Sandbag Lunges", StationId.SANDBAG_LUNGES),
    ("Wall Balls", StationId.WALL_BALLS),
])
def test_station_names(name, station):
    """
    TEST_CASE_001: Station Detection

    Expected: Every race station is recognised under a common name
    """
    category = categorize_exercise(name)
    assert category.kind == ExerciseKind.STATION
    assert category.station == station
    assert get_station_id(name) == station


def test_station_wins_over_strength_and_running():
    """
    TEST_CASE_002: Rule Priority

    "Sandbag Lunges" is a lunge and "Burpee Broad Jumps" mentions neither
    running nor strength, but both are stations first.
    Expected: Station categories, not lunge or running
    """
    assert categorize_exercise("Sandbag Lunges").label == "station:sandbag_lunges"
    assert not is_running_exercise("Burpee Broad Jumps")
    assert is_station_exercise("Burpee Broad Jumps")


def test_strength_rows_are_not_the_rowing_station():
    """
    TEST_CASE_003: Exclusions

    Expected: Bent over and dumbbell rows are horizontal pulls
    """
    for name in ("Bent Over Row", "DB Row", "Seated Row"):
        category = categorize_exercise(name)
        assert category.kind == ExerciseKind.STRENGTH, name
        assert category.strength_category == StrengthCategory.HORIZONTAL_PULL, name


@pytest.mark.parametrize("name,kind", [
    ("Narrow Grip Push-up", ExerciseKind.STRENGTH),
    ("Crow Pose", ExerciseKind.OTHER),
    ("Arrow Drill", ExerciseKind.OTHER),
])
def test_row_inside_other_words_is_not_rowing(name, kind):
    """
    TEST_CASE_004: Whole-Word Row

    Expected: "row" buried in another word never counts as the rowing station
    """
    category = categorize_exercise(name)
    assert category.kind == kind, name
    assert get_station_id(name) is None


def test_narrow_grip_does_not_cover_rowing(valid_plan):
    """A narrow-grip push-up in place of rowing leaves rowing missing."""
    for day in valid_plan.days:
        for exercise in day.exercises:
            if exercise.name == "Rowing":
                exercise.name = "Narrow Grip Push-up"

    assert StationId.ROWING in missing_stations(valid_plan)


@pytest.mark.parametrize("name", ["Row 500m", "Rows", "Concept2 Row 2000m"])
def test_plain_row_is_rowing(name):
    assert get_station_id(name) == StationId.ROWING


@pytest.mark.parametrize("name,subtype", [
    ("Easy Run", RunningSubtype.EASY),
    ("Tempo Run", RunningSubtype.TEMPO),
    ("Threshold Run", RunningSubtype.TEMPO),
    ("Interval Run", RunningSubtype.INTERVAL),
    ("Long Run", RunningSubtype.LONG),
    ("Run", None),
])
def test_running_subtypes(name, subtype):
    """
    TEST_CASE_005: Running Subtypes

    Expected: Subtype taken from the name, None when nothing hints at one
    """
    category = categorize_exercise(name)
    assert category.kind == ExerciseKind.RUNNING
    assert category.running_subtype == subtype


def test_other_kinds():
    """
    TEST_CASE_006: Non-station Work

    Expected: Core, strength, cardio and warm-up are told apart
    """
    assert categorize_exercise("Plank").kind == ExerciseKind.CORE
    assert categorize_exercise("Walking Lunges").strength_category == StrengthCategory.LUNGE
    assert categorize_exercise("Romanian Deadlift").strength_category == StrengthCategory.HINGE
    assert categorize_exercise("Assault Bike").cardio_modality == CardioModality.BIKE
    assert categorize_exercise("Warm-up Jog").kind == ExerciseKind.WARMUP
    assert categorize_exercise("Couch Stretch").kind == ExerciseKind.MOBILITY


def test_unknown_exercise_is_other():
    """
    TEST_CASE_007: Fallback

    Expected: Unrecognised names are `other`, with no variant
    """
    category = categorize_exercise("Juggling")
    assert category.kind == ExerciseKind.OTHER
    assert category.label == "other"
