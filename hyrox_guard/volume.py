"""
Volume extraction from generated exercises.

Each extractor returns the load an exercise contributes to one tracked
modality and a defined zero when the exercise belongs to another modality.
Direct distances are always preferred. Duration-only prescriptions go through
the clearly separated estimators at the top of this module, which are
approximations calibrated together with the safety caps.
"""

import math
from typing import Dict, Iterable, List, Optional

from hyrox_guard.categorizer import categorize_exercise
from hyrox_guard.plan_schemas import GeneratedExercise, GeneratedPlan
from hyrox_guard.schemas import (
    ALL_STATIONS,
    CalculatedVolumes,
    ExerciseKind,
    RunningSubtype,
    StationId,
)


# ============================================================================
# Duration-based estimators (approximations)
# ============================================================================

# Minutes per kilometer by running subtype. Safety caps are calibrated
# against these values; do not tune them without new data.
RUNNING_PACE_MIN_PER_KM: Dict[Optional[RunningSubtype], float] = {
    RunningSubtype.EASY: 6.5,
    RunningSubtype.TEMPO: 5.5,
    RunningSubtype.INTERVAL: 5.0,
    RunningSubtype.LONG: 6.5,
    None: 6.0,
}

# Pace hints found in notes when the name carries no subtype
_NOTE_PACE_HINTS = (
    (("easy", "zone 2", "z2", "recovery", "conversational"), RunningSubtype.EASY),
    (("tempo", "threshold"), RunningSubtype.TEMPO),
    (("interval", "repeat"), RunningSubtype.INTERVAL),
    (("long",), RunningSubtype.LONG),
)

# 500 m per 2 minutes on SkiErg and rower
MACHINE_METERS_PER_MINUTE = 250.0

# Burpee broad jumps cover roughly 2 m per repetition
BURPEE_BROAD_JUMP_METERS_PER_REP = 2.0


def estimate_running_km_from_duration(
    minutes: float,
    subtype: Optional[RunningSubtype] = None,
    notes: Optional[str] = None,
) -> float:
    """
    Estimate running distance from a duration-only prescription.

    This is a heuristic, not a measurement: the pace comes from the running
    subtype, falling back to hints in the notes and then to 6.0 min/km.

    Args:
        minutes: Running time in minutes
        subtype: Subtype detected from the exercise name
        notes: Free-text notes that may hint at the pace

    Returns:
        Estimated distance in kilometers
    """
    if minutes <= 0:
        return 0.0

    if subtype is None and notes:
        lowered = notes.lower()
        for keywords, hinted in _NOTE_PACE_HINTS:
            if any(k in lowered for k in keywords):
                subtype = hinted
                break

    return minutes / RUNNING_PACE_MIN_PER_KM[subtype]


def estimate_machine_meters_from_duration(minutes: float) -> float:
    """Estimate SkiErg or rowing meters from minutes of work."""
    return max(minutes, 0.0) * MACHINE_METERS_PER_MINUTE


# ============================================================================
# Per-exercise extractors
# ============================================================================

def direct_distance_km(exercise: GeneratedExercise) -> Optional[float]:
    """Distance of one set in kilometers, or None when no distance is given."""
    if exercise.distance_km:
        return exercise.distance_km
    if exercise.distance_m:
        return exercise.distance_m / 1000
    return None


def extract_running_volume_km(exercise: GeneratedExercise) -> float:
    """
    Weekly running kilometers contributed by one exercise.

    Args:
        exercise: Exercise from a generated plan

    Returns:
        Distance x sets for runs with a distance, an estimate for duration-only
        runs, and 0 for anything that is not running
    """
    category = categorize_exercise(exercise.name)
    if category.kind != ExerciseKind.RUNNING:
        return 0.0

    distance = direct_distance_km(exercise)
    if distance is not None:
        return distance * exercise.set_count

    if exercise.duration_minutes:
        return estimate_running_km_from_duration(
            exercise.duration_minutes * exercise.set_count,
            category.running_subtype,
            exercise.notes,
        )
    return 0.0


def _machine_meters(exercise: GeneratedExercise, station: StationId) -> float:
    if not categorize_exercise(exercise.name).is_station(station):
        return 0.0

    if exercise.distance_m:
        return exercise.distance_m * exercise.set_count
    if exercise.distance_km:
        return exercise.distance_km * 1000 * exercise.set_count
    if exercise.duration_minutes:
        return estimate_machine_meters_from_duration(exercise.duration_minutes) * exercise.set_count
    return 0.0


def extract_skierg_volume_m(exercise: GeneratedExercise) -> float:
    """SkiErg meters contributed by one exercise (0 for anything else)."""
    return _machine_meters(exercise, StationId.SKIERG)


def extract_rowing_volume_m(exercise: GeneratedExercise) -> float:
    """Rowing meters contributed by one exercise (0 for anything else)."""
    return _machine_meters(exercise, StationId.ROWING)


def station_load(exercise: GeneratedExercise, station: StationId) -> float:
    """
    Load an exercise puts on a capped station, in the cap's unit.

    Wall balls and burpee broad jumps count repetitions (jumps given as
    distance convert at 2 m per rep, rounded up); sleds count meters.
    Stations without a weekly cap return 0.
    """
    if not categorize_exercise(exercise.name).is_station(station):
        return 0.0

    sets = exercise.set_count
    if station == StationId.WALL_BALLS:
        return float((exercise.reps or 0) * sets)

    if station == StationId.BURPEE_BROAD_JUMP:
        meters = exercise.distance_m or (exercise.distance_km or 0) * 1000
        if meters:
            return float(math.ceil(meters * sets / BURPEE_BROAD_JUMP_METERS_PER_REP))
        return float((exercise.reps or 0) * sets)

    if station in (StationId.SLED_PUSH, StationId.SLED_PULL):
        meters = exercise.distance_m or (exercise.distance_km or 0) * 1000
        return float(meters * sets)

    return 0.0


# ============================================================================
# Plan-level helpers
# ============================================================================

def weekly_running_km(plan: GeneratedPlan) -> float:
    return sum(extract_running_volume_km(e) for e in plan.all_exercises())


def weekly_skierg_m(plan: GeneratedPlan) -> float:
    return sum(extract_skierg_volume_m(e) for e in plan.all_exercises())


def weekly_rowing_m(plan: GeneratedPlan) -> float:
    return sum(extract_rowing_volume_m(e) for e in plan.all_exercises())


def weekly_station_load(plan: GeneratedPlan, station: StationId) -> float:
    return sum(station_load(e, station) for e in plan.all_exercises())


def stations_present(plan: GeneratedPlan) -> List[StationId]:
    """Stations trained at least once this week, in race order."""
    seen = {categorize_exercise(e.name).station for e in plan.all_exercises()}
    return [s for s in ALL_STATIONS if s in seen]


def missing_stations(plan: GeneratedPlan) -> List[StationId]:
    """Stations not trained this week, in race order."""
    present = set(stations_present(plan))
    return [s for s in ALL_STATIONS if s not in present]


def count_station_occurrences(plan: GeneratedPlan, station: StationId) -> int:
    """Number of exercises in the week that train the station."""
    return sum(1 for e in plan.all_exercises() if categorize_exercise(e.name).station == station)


def extract_stations_covered(plans: Iterable[GeneratedPlan]) -> List[StationId]:
    """
    Stations practiced across earlier weekly plans.

    The result feeds `previous_weeks_stations_covered` of the next week's
    validation constraints.
    """
    covered = set()
    for plan in plans:
        covered.update(stations_present(plan))
    return [s for s in ALL_STATIONS if s in covered]


def calculate_volumes(plan: GeneratedPlan, weak_stations: Iterable[StationId] = ()) -> CalculatedVolumes:
    """Collect every volume the validators report on."""
    return CalculatedVolumes(
        running_km=round(weekly_running_km(plan), 2),
        skierg_m=round(weekly_skierg_m(plan), 1),
        rowing_m=round(weekly_rowing_m(plan), 1),
        stations_present=stations_present(plan),
        stations_missing=missing_stations(plan),
        weak_station_counts={
            StationId(s).value: count_station_occurrences(plan, StationId(s))
            for s in weak_stations
        },
    )


# ============================================================================
# Annotation checks
# ============================================================================

BODYWEIGHT_TERMS = (
    "push-up", "pushup", "pull-up", "pullup", "chin-up", "chinup", "dip",
    "inverted row", "plank", "hollow", "dead bug", "deadbug", "bird dog",
    "birddog", "glute bridge", "hip circle", "lunge", "air squat",
)

PACE_GUIDANCE_TERMS = (
    "zone", "z1", "z2", "z3", "z4", "z5", "/km", "per km", "min/km", "easy",
    "tempo", "threshold", "race pace", "interval", "conversational",
    "recovery", "hard", "moderate", "rpe", "effort",
)


def has_proper_weight_spec(exercise: GeneratedExercise) -> bool:
    """
    Whether a strength exercise says how heavy it is.

    Non-strength work always passes. Bodyweight movements pass without a load.
    """
    if categorize_exercise(exercise.name).kind != ExerciseKind.STRENGTH:
        return True
    if exercise.weight_kg and exercise.weight_kg > 0:
        return True
    name = exercise.name.lower()
    return any(term in name for term in BODYWEIGHT_TERMS)


def has_proper_pace_guidance(exercise: GeneratedExercise) -> bool:
    """Whether a run carries a pace, zone or effort cue. Non-runs always pass."""
    if categorize_exercise(exercise.name).kind != ExerciseKind.RUNNING:
        return True
    text = " ".join(
        part for part in (exercise.name, exercise.notes, exercise.target_pace) if part
    ).lower()
    return any(term in text for term in PACE_GUIDANCE_TERMS)
