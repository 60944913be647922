"""
Tests for pre-generation conflict detection.

Test scenarios:
1. Injury areas map to affected stations with the right severity
2. Missing equipment and home gyms
3. Time and experience conflicts
4. Gate and summary
"""

from hyrox_guard.conflicts import (
    can_proceed_with_generation,
    detect_conflicts,
    detect_equipment_conflicts,
    detect_injury_conflicts,
    normalize_equipment_name,
    summarize_conflicts,
)
from hyrox_guard.schemas import (
    ConflictCategory,
    ConflictConstraints,
    ConflictSeverity,
    ExperienceLevel,
    GymType,
    ResolutionAction,
    StationId,
)


def test_acl_is_blocking(acl_constraints):
    """
    TEST_CASE_001: Blocking Injury

    Expected: One blocking ACL conflict; generation cannot proceed
    """
    conflicts = detect_conflicts(acl_constraints)

    assert [c.id for c in conflicts] == ["injury_acl"]
    conflict = conflicts[0]
    assert conflict.severity == ConflictSeverity.BLOCKING
    assert conflict.affected_stations == [StationId.BURPEE_BROAD_JUMP, StationId.SANDBAG_LUNGES]
    assert conflict.title == "ACL may affect Hyrox performance"
    assert not can_proceed_with_generation(conflicts)


def test_injury_resolution_options():
    """
    TEST_CASE_002: Resolution Options

    Expected: A halve-volume option per affected station plus a prep protocol
    """
    conflicts = detect_injury_conflicts(ConflictConstraints(injury_areas=["Left shoulder"]))

    options = conflicts[0].resolution_options
    assert [o.id for o in options] == [
        "reduce_wall_balls", "reduce_skierg", "reduce_sled_push", "reduce_sled_pull",
        "prep_shoulder",
    ]
    assert options[0].action == ResolutionAction.REDUCE_VOLUME
    assert options[0].details == {"station": "wall_balls", "volume_reduction": 0.5}
    assert options[-1].action == ResolutionAction.ADD_PREP
    assert conflicts[0].severity == ConflictSeverity.WARNING


def test_most_specific_injury_wins():
    """
    TEST_CASE_003: Specific Areas

    Expected: "lower back" is matched before "back"; repeats and unknown areas are skipped
    """
    conflicts = detect_injury_conflicts(ConflictConstraints(
        pain_points=["Lower back", "rotator cuff strain"],
        injury_areas=["lower back", "something unknown"],
    ))

    assert [c.id for c in conflicts] == ["injury_lower_back", "injury_rotator_cuff"]
    assert conflicts[1].severity == ConflictSeverity.BLOCKING


def test_missing_equipment():
    """
    TEST_CASE_004: Equipment Gaps

    Aliases resolve to one requirement; multi-station kit is a warning.
    Expected: Sled warning, rower info, unknown items ignored, no duplicates
    """
    conflicts = detect_equipment_conflicts(ConflictConstraints(
        missing_equipment=["Prowler", "push sled", "Rowing Machine", "trampoline"],
    ))

    assert [c.id for c in conflicts] == ["missing_sled", "missing_rower"]
    sled, rower = conflicts
    assert sled.severity == ConflictSeverity.WARNING
    assert sled.affected_stations == [StationId.SLED_PUSH, StationId.SLED_PULL]
    assert rower.severity == ConflictSeverity.INFO
    assert rower.resolution_options[0].action == ResolutionAction.SUBSTITUTE


def test_home_gym_warning():
    conflicts = detect_equipment_conflicts(ConflictConstraints(gym_type=GymType.HOME))

    assert conflicts[0].id == "home_gym_warning"
    assert conflicts[0].category == ConflictCategory.EQUIPMENT
    assert can_proceed_with_generation(conflicts)


def test_equipment_name_normalization():
    assert normalize_equipment_name("  Concept2   Row ") == "rower"
    assert normalize_equipment_name("Med Ball") == "wall ball"
    assert normalize_equipment_name("Kettlebell") == "kettlebell"


def test_time_conflicts():
    """
    TEST_CASE_005: Time Pressure

    Expected: Short sessions, few days and a close race all warn, never block
    """
    conflicts = detect_conflicts(ConflictConstraints(
        session_length_minutes=30,
        training_days_per_week=2,
        weeks_until_race=3,
    ))

    assert [c.id for c in conflicts] == ["short_sessions", "few_training_days", "short_prep_time"]
    assert all(c.severity == ConflictSeverity.WARNING for c in conflicts)
    assert conflicts[2].title == "Only 3 weeks until race"
    assert "Very limited time" in conflicts[2].description


def test_time_thresholds_are_exclusive():
    conflicts = detect_conflicts(ConflictConstraints(
        session_length_minutes=45,
        training_days_per_week=3,
        weeks_until_race=6,
    ))
    assert conflicts == []


def test_first_race_notes():
    """
    TEST_CASE_006: First Race

    Expected: Beginner note plus the all-stations familiarization note
    """
    conflicts = detect_conflicts(ConflictConstraints(
        is_first_race=True,
        experience_level=ExperienceLevel.BEGINNER,
    ))

    assert [c.id for c in conflicts] == ["first_race_beginner", "first_race_station_familiarity"]
    assert all(c.severity == ConflictSeverity.INFO for c in conflicts)
    assert len(conflicts[1].affected_stations) == 8


def test_summary():
    """
    TEST_CASE_007: Summary

    Expected: Counts per severity and stations in race order
    """
    conflicts = detect_conflicts(ConflictConstraints(
        injury_areas=["knee", "Achilles"],
        missing_equipment=["skierg"],
    ))

    summary = summarize_conflicts(conflicts)

    assert summary.has_blocking
    assert summary.blocking_count == 1
    assert summary.warning_count == 1
    assert summary.info_count == 1
    assert summary.affected_stations == [
        StationId.SKIERG,
        StationId.SLED_PUSH,
        StationId.BURPEE_BROAD_JUMP,
        StationId.SANDBAG_LUNGES,
        StationId.WALL_BALLS,
    ]
    assert summary.summary == (
        "1 issue(s) require attention before proceeding. "
        "1 warning(s) may affect your training."
    )


def test_summary_info_only():
    summary = summarize_conflicts(detect_conflicts(ConflictConstraints(is_first_race=True)))

    assert not summary.has_blocking
    assert summary.summary == "1 note(s) about your training plan."


def test_no_constraints_no_conflicts():
    conflicts = detect_conflicts(ConflictConstraints())

    assert conflicts == []
    assert can_proceed_with_generation(conflicts)
    assert summarize_conflicts(conflicts).summary == ""


def test_same_injury_in_different_words():
    """
    TEST_CASE_008: One Conflict Per Injury

    Expected: "knee" and "Knee pain" raise a single knee conflict
    """
    conflicts = detect_injury_conflicts(ConflictConstraints(
        pain_points=["knee"],
        injury_areas=["Knee pain"],
    ))

    assert [c.id for c in conflicts] == ["injury_knee"]
    assert conflicts[0].title == "knee may affect Hyrox performance"
    assert conflicts[0].resolution_options[-1].id == "prep_knee"
