"""
Tests for volume extraction.

Test scenarios:
1. Weekly totals for a full plan
2. Duration-only estimators
3. Station loads in cap units
4. Station coverage across weeks
5. Weight and pace annotation checks
"""

import pytest

from hyrox_guard.plan_schemas import GeneratedExercise, GeneratedPlan
from hyrox_guard.schemas import ALL_STATIONS, StationId
from hyrox_guard.volume import (
    calculate_volumes,
    extract_rowing_volume_m,
    extract_running_volume_km,
    extract_skierg_volume_m,
    extract_stations_covered,
    has_proper_pace_guidance,
    has_proper_weight_spec,
    station_load,
)

from conftest import without_exercises


def test_plan_volumes(valid_plan):
    """
    TEST_CASE_001: Weekly Totals

    Expected: 8 + 6 + 7 + 12 km of running, 2000 m on each machine, all stations
    """
    volumes = calculate_volumes(valid_plan)

    assert volumes.running_km == pytest.approx(33.0)
    assert volumes.skierg_m == pytest.approx(2000.0)
    assert volumes.rowing_m == pytest.approx(2000.0)
    assert volumes.stations_present == ALL_STATIONS
    assert volumes.stations_missing == []


def test_direct_distance_times_sets():
    """
    TEST_CASE_002: Direct Distances

    Expected: distance x sets; km and m are interchangeable
    """
    assert extract_running_volume_km(GeneratedExercise(name="Interval Run", distance_m=800, sets=6)) == pytest.approx(4.8)
    assert extract_skierg_volume_m(GeneratedExercise(name="SkiErg", distance_km=1, sets=2)) == pytest.approx(2000)
    assert extract_rowing_volume_m(GeneratedExercise(name="Row", distance_m=500, sets=4)) == pytest.approx(2000)


def test_duration_estimates():
    """
    TEST_CASE_003: Duration-only Prescriptions

    Paces come from the subtype, then from note hints, then 6.0 min/km.
    Machines assume 250 m per minute.
    Expected: Estimated distances
    """
    assert extract_running_volume_km(GeneratedExercise(name="Easy Run", duration_minutes=65)) == pytest.approx(10.0)
    assert extract_running_volume_km(GeneratedExercise(name="Tempo Run", duration_minutes=55)) == pytest.approx(10.0)
    assert extract_running_volume_km(
        GeneratedExercise(name="Run", duration_minutes=65, notes="Zone 2")
    ) == pytest.approx(10.0)
    assert extract_running_volume_km(GeneratedExercise(name="Run", duration_minutes=30)) == pytest.approx(5.0)
    assert extract_skierg_volume_m(GeneratedExercise(name="SkiErg", duration_minutes=4, sets=2)) == pytest.approx(2000)


def test_other_modalities_contribute_zero():
    """
    TEST_CASE_004: Modality Isolation

    Expected: A squat adds no running, a run adds no SkiErg meters
    """
    squat = GeneratedExercise(name="Back Squat", sets=4, reps=6, weight_kg=80)
    run = GeneratedExercise(name="Easy Run", distance_km=10)

    assert extract_running_volume_km(squat) == 0.0
    assert extract_skierg_volume_m(run) == 0.0
    assert extract_rowing_volume_m(GeneratedExercise(name="Bent Over Row", sets=3, reps=10)) == 0.0


def test_station_loads():
    """
    TEST_CASE_005: Station Loads

    Wall balls count reps, sleds count meters, burpee broad jumps given as
    distance convert at 2 m per rep, rounded up.
    Expected: Loads in cap units
    """
    wall_balls = GeneratedExercise(name="Wall Balls", reps=20, sets=3)
    sled = GeneratedExercise(name="Sled Push", distance_m=50, sets=4)
    bbj = GeneratedExercise(name="Burpee Broad Jumps", distance_m=41)
    bbj_reps = GeneratedExercise(name="BBJ", reps=15, sets=2)

    assert station_load(wall_balls, StationId.WALL_BALLS) == 60
    assert station_load(sled, StationId.SLED_PUSH) == 200
    assert station_load(sled, StationId.SLED_PULL) == 0
    assert station_load(bbj, StationId.BURPEE_BROAD_JUMP) == 21
    assert station_load(bbj_reps, StationId.BURPEE_BROAD_JUMP) == 30


def test_stations_covered_across_weeks(valid_plan):
    """
    TEST_CASE_006: Coverage Across Weeks

    Expected: Union of stations over several plans, in race order
    """
    week_1 = without_exercises(valid_plan, "Sandbag Lunges", "Burpee Broad Jumps", "Rowing")
    week_2 = GeneratedPlan(week_number=2, phase="base", days=[{
        "day_number": 1,
        "exercises": [{"name": "Sandbag Lunges", "distance_m": 50}],
    }])

    assert StationId.ROWING not in extract_stations_covered([week_1])
    covered = extract_stations_covered([week_1, week_2])
    assert covered == [s for s in ALL_STATIONS if s not in (StationId.ROWING, StationId.BURPEE_BROAD_JUMP)]


def test_weak_station_counts(valid_plan):
    """
    TEST_CASE_007: Weak Station Frequency

    Expected: Occurrences counted per weak station
    """
    volumes = calculate_volumes(valid_plan, [StationId.WALL_BALLS, StationId.SLED_PUSH])
    assert volumes.weak_station_counts == {"wall_balls": 1, "sled_push": 1}


def test_annotation_checks():
    """
    TEST_CASE_008: Weight and Pace Annotations

    Expected: Loaded strength needs a weight, bodyweight work does not;
    runs need a pace or effort cue
    """
    assert not has_proper_weight_spec(GeneratedExercise(name="Back Squat", sets=4, reps=6))
    assert has_proper_weight_spec(GeneratedExercise(name="Back Squat", sets=4, reps=6, weight_kg=80))
    assert has_proper_weight_spec(GeneratedExercise(name="Push-ups", sets=3, reps=15))
    assert has_proper_weight_spec(GeneratedExercise(name="SkiErg", distance_m=500))

    assert not has_proper_pace_guidance(GeneratedExercise(name="Run", distance_km=5))
    assert has_proper_pace_guidance(GeneratedExercise(name="Run", distance_km=5, target_pace="5:30/km"))
    assert has_proper_pace_guidance(GeneratedExercise(name="Run", distance_km=5, notes="RPE 6"))
