"""
Deterministic plan repair.

This module fixes auto-fixable validation issues without asking the
generator for a new plan. Each issue category maps to one fixer; fixers
mutate a deep copy of the plan, never the caller's instance.

Fixing does not guarantee a valid plan: a fix can introduce a new, usually
smaller, violation (e.g. adding a station lengthens a session), so the
result must always be validated again.
"""

import math
import re
from typing import Callable, Dict, Iterable, List

from loguru import logger

from hyrox_guard.categorizer import categorize_exercise
from hyrox_guard.plan_schemas import GeneratedDay, GeneratedExercise, GeneratedPlan
from hyrox_guard.safety import (
    HARD_SESSION_TYPE_KEYWORDS,
    HIGH_INTENSITY_NOTE_KEYWORDS,
    NOT_EASY_NOTE_KEYWORDS,
    is_easy_day,
    is_high_intensity_day,
)
from hyrox_guard.safety_caps import HARD_SAFETY_CAPS
from hyrox_guard.schemas import (
    ExerciseKind,
    IssueCategory,
    StationId,
    ValidationIssue,
)
from hyrox_guard.volume import stations_present, weekly_running_km, weekly_station_load


Fixer = Callable[[GeneratedPlan, ValidationIssue], None]


# ============================================================================
# Exercise templates
# ============================================================================

MISSING_STATION_TEMPLATES: Dict[StationId, GeneratedExercise] = {
    StationId.SKIERG: GeneratedExercise(
        name="SkiErg", distance_m=500, sets=3, rest_seconds=60, notes="Race pace"),
    StationId.SLED_PUSH: GeneratedExercise(
        name="Sled Push", distance_m=50, sets=2, rest_seconds=90, notes="Race weight"),
    StationId.SLED_PULL: GeneratedExercise(
        name="Sled Pull", distance_m=50, sets=2, rest_seconds=90, notes="Race weight"),
    StationId.BURPEE_BROAD_JUMP: GeneratedExercise(
        name="Burpee Broad Jumps", distance_m=40, sets=2, rest_seconds=60, notes="Focus on distance"),
    StationId.ROWING: GeneratedExercise(
        name="Rowing", distance_m=500, sets=3, rest_seconds=60, notes="Steady pace"),
    StationId.FARMERS_CARRY: GeneratedExercise(
        name="Farmers Carry", distance_m=100, sets=2, rest_seconds=90, notes="Race weight"),
    StationId.SANDBAG_LUNGES: GeneratedExercise(
        name="Sandbag Lunges", distance_m=50, sets=2, rest_seconds=60, notes="Race weight"),
    StationId.WALL_BALLS: GeneratedExercise(
        name="Wall Balls", reps=25, sets=3, rest_seconds=60, notes="Find rhythm"),
}

WEAK_STATION_TEMPLATES: Dict[StationId, GeneratedExercise] = {
    StationId.SLED_PUSH: GeneratedExercise(
        name="Sled Push Practice", distance_m=25, sets=3, rest_seconds=60, notes="Technique focus"),
    StationId.SLED_PULL: GeneratedExercise(
        name="Sled Pull Practice", distance_m=25, sets=3, rest_seconds=60, notes="Hand-over-hand rhythm"),
    StationId.WALL_BALLS: GeneratedExercise(
        name="Wall Balls", reps=20, sets=2, rest_seconds=45, notes="Extra practice"),
    StationId.BURPEE_BROAD_JUMP: GeneratedExercise(
        name="Burpee Broad Jump Practice", distance_m=20, sets=2, rest_seconds=45, notes="Landing mechanics"),
    StationId.SKIERG: GeneratedExercise(
        name="SkiErg Technique", distance_m=250, sets=3, rest_seconds=45, notes="Focus on hip hinge"),
    StationId.ROWING: GeneratedExercise(
        name="Rowing Technique", distance_m=250, sets=3, rest_seconds=45, notes="Drive sequence"),
    StationId.FARMERS_CARRY: GeneratedExercise(
        name="Farmers Carry Practice", distance_m=50, sets=2, rest_seconds=60, notes="Posture focus"),
    StationId.SANDBAG_LUNGES: GeneratedExercise(
        name="Sandbag Lunge Practice", distance_m=25, sets=2, rest_seconds=60, notes="Stability focus"),
}

MACHINE_TOP_UP_TEMPLATES: Dict[StationId, GeneratedExercise] = {
    StationId.SKIERG: GeneratedExercise(
        name="SkiErg", distance_m=500, sets=3, rest_seconds=60, notes="Added for volume"),
    StationId.ROWING: GeneratedExercise(
        name="Rowing", distance_m=500, sets=3, rest_seconds=60, notes="Added for volume"),
}

# Minutes added to a day per inserted exercise
MISSING_STATION_MINUTES = 10
WEAK_STATION_MINUTES = 8
MACHINE_TOP_UP_MINUTES = 12

# Minutes assumed freed by removing an exercise that violates an injury constraint
INJURY_REMOVAL_MINUTES = 5

MACHINE_DAY_KEYWORDS = ("conditioning", "cardio", "machine")

ACCESSORY_NAME_KEYWORDS = ("curl", "extension", "raise", "calf")

MIN_REPS_AFTER_REDUCTION = 5

PROGRESSION_NOTE = "[Reduced for safe progression]"
STATION_VOLUME_NOTE = "[Reduced for safe volume]"
HIGH_INTENSITY_CONVERTED_NOTE = "Easy/recovery pace [Converted from high intensity for safety]"
CONSECUTIVE_CONVERTED_NOTE = "Easy pace [Converted to avoid back-to-back intensity]"
EASY_DAY_CONVERTED_NOTE = "Easy/recovery pace [Converted to restore an easy day]"

_HARD_SESSION_WORDS = re.compile(
    r"\w*(?:" + "|".join(HARD_SESSION_TYPE_KEYWORDS) + r")\w*", re.IGNORECASE
)


# ============================================================================
# Helpers
# ============================================================================

def _append_note(exercise: GeneratedExercise, note: str) -> None:
    exercise.notes = f"{exercise.notes or ''} {note}".strip()


def _floor_to(value: float, step: float) -> float:
    """Round down to a multiple of step, tolerant of float noise."""
    return math.floor(value / step + 1e-9) * step


def _soften_session_type(session_type: str) -> str:
    return _HARD_SESSION_WORDS.sub("Easy", session_type)


def _station_of(exercise: GeneratedExercise):
    return categorize_exercise(exercise.name).station


def _day_has_station(day: GeneratedDay, station: StationId) -> bool:
    return any(_station_of(ex) == station for ex in day.exercises)


def _convert_notes(day: GeneratedDay, keywords: Iterable[str], replacement: str) -> None:
    keywords = tuple(keywords)
    for exercise in day.exercises:
        notes = (exercise.notes or "").lower()
        if any(k in notes for k in keywords):
            exercise.notes = replacement


# ============================================================================
# Station fixers
# ============================================================================

def fix_missing_stations(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Insert race-realistic templates for missing stations, round-robin over days."""
    if not plan.days:
        return

    present = set(stations_present(plan))
    missing = [StationId(s) for s in issue.details.get("missing", []) if StationId(s) not in present]

    for i, station in enumerate(missing):
        day = plan.days[i % len(plan.days)]
        day.exercises.append(MISSING_STATION_TEMPLATES[station].model_copy(deep=True))
        day.duration_minutes += MISSING_STATION_MINUTES
        logger.debug("Inserted missing station", station=station.value, day=day.day_number)


def fix_weak_station_frequency(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Add a practice block on the first day that does not train the station yet."""
    station = StationId(issue.details["station"])
    template = WEAK_STATION_TEMPLATES[station]

    for day in plan.days:
        if not _day_has_station(day, station):
            day.exercises.append(template.model_copy(deep=True))
            day.duration_minutes += WEAK_STATION_MINUTES
            return


def _fix_machine_volume(plan: GeneratedPlan, station: StationId) -> None:
    if not plan.days:
        return

    day = next(
        (d for d in plan.days if any(k in d.session_type.lower() for k in MACHINE_DAY_KEYWORDS)),
        None,
    )
    if day is None:
        day = min(plan.days, key=lambda d: d.duration_minutes)

    day.exercises.append(MACHINE_TOP_UP_TEMPLATES[station].model_copy(deep=True))
    day.duration_minutes += MACHINE_TOP_UP_MINUTES


def fix_skierg_volume(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    _fix_machine_volume(plan, StationId.SKIERG)


def fix_rowing_volume(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    _fix_machine_volume(plan, StationId.ROWING)


def fix_injury_violation(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Remove every exercise whose name matches the offending one (case-insensitive)."""
    target = issue.details["exercise"].lower()
    for day in plan.days:
        kept = [ex for ex in day.exercises if ex.name.lower() != target]
        removed = len(day.exercises) - len(kept)
        if removed:
            day.exercises = kept
            day.duration_minutes = max(0, day.duration_minutes - removed * INJURY_REMOVAL_MINUTES)


# ============================================================================
# Safety fixers
# ============================================================================

def fix_running_progression(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """
    Scale every run down so the weekly total fits the progression ceiling.

    Distances and durations are rounded down, so the new total never exceeds
    the ceiling.
    """
    max_allowed_km = issue.details["max_allowed_km"]
    current_km = weekly_running_km(plan)
    if current_km <= max_allowed_km or current_km <= 0:
        return

    scale = max_allowed_km / current_km
    for exercise in plan.all_exercises():
        if categorize_exercise(exercise.name).kind != ExerciseKind.RUNNING:
            continue
        if exercise.distance_km:
            exercise.distance_km = round(_floor_to(exercise.distance_km * scale, 0.1), 1)
        elif exercise.distance_m:
            exercise.distance_m = float(math.floor(exercise.distance_m * scale + 1e-9))
        elif exercise.duration_minutes:
            exercise.duration_minutes = round(_floor_to(exercise.duration_minutes * scale, 0.1), 1)
        else:
            continue
        _append_note(exercise, PROGRESSION_NOTE)

    plan.weekly_totals.running_km = round(weekly_running_km(plan), 1)
    logger.info(
        "Running volume scaled for progression",
        original_km=round(current_km, 2),
        max_allowed_km=max_allowed_km,
        repaired_km=plan.weekly_totals.running_km,
    )


def fix_single_run_distance(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Cap runs on the offending day at the level ceiling."""
    day = plan.find_day(issue.details["day_number"])
    max_km = issue.details["max_allowed_km"]
    if day is None:
        return

    for exercise in day.exercises:
        if categorize_exercise(exercise.name).kind != ExerciseKind.RUNNING:
            continue
        current_km = exercise.distance_km or (exercise.distance_m or 0) / 1000
        if current_km <= max_km:
            continue
        if exercise.distance_km:
            exercise.distance_km = max_km
        else:
            exercise.distance_m = max_km * 1000
        _append_note(exercise, f"[Capped at {max_km:g}km for safety]")


def fix_high_intensity_frequency(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Keep the first allowed hard days and turn the later ones easy."""
    max_allowed = issue.details["max_allowed"]
    hard_seen = 0

    for day in sorted(plan.days, key=lambda d: d.day_number):
        if not is_high_intensity_day(day):
            continue
        hard_seen += 1
        if hard_seen <= max_allowed:
            continue
        day.session_type = _soften_session_type(day.session_type)
        _convert_notes(day, HIGH_INTENSITY_NOTE_KEYWORDS, HIGH_INTENSITY_CONVERTED_NOTE)
        logger.debug("Converted hard day to easy", day=day.day_number)


def fix_consecutive_hard_days(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Turn the second of two back-to-back hard days into recovery."""
    days = issue.details.get("consecutive_days") or []
    if len(days) < 2:
        return
    day = plan.find_day(days[1])
    if day is None:
        return

    day.session_type = f"Recovery/Easy {_soften_session_type(day.session_type)}".strip()
    _convert_notes(day, HIGH_INTENSITY_NOTE_KEYWORDS, CONSECUTIVE_CONVERTED_NOTE)


def fix_station_volume(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """
    Scale a station's weekly volume down to its cap.

    Reps never drop below 5. Sleds lose sets first and distance only when a
    single set is left.
    """
    station = StationId(issue.details["station"])
    max_allowed = issue.details["max_allowed"]
    current = weekly_station_load(plan, station)
    if current <= max_allowed or current <= 0:
        return

    scale = max_allowed / current
    is_sled = station in (StationId.SLED_PUSH, StationId.SLED_PULL)

    for exercise in plan.all_exercises():
        if _station_of(exercise) != station:
            continue
        if exercise.reps:
            exercise.reps = max(MIN_REPS_AFTER_REDUCTION, math.floor(exercise.reps * scale + 1e-9))
        if is_sled and exercise.sets and exercise.sets > 1:
            exercise.sets = max(1, math.floor(exercise.sets * scale + 1e-9))
        elif exercise.distance_m:
            exercise.distance_m = float(math.floor(exercise.distance_m * scale + 1e-9))
        elif exercise.distance_km:
            exercise.distance_km = round(_floor_to(exercise.distance_km * scale, 0.01), 2)
        _append_note(exercise, STATION_VOLUME_NOTE)

    logger.info(
        "Station volume reduced",
        station=station.value,
        original=current,
        max_allowed=max_allowed,
        repaired=weekly_station_load(plan, station),
    )


def _removal_priority(exercise: GeneratedExercise) -> int:
    """3 = keep longest (running, stations), 1 = drop first (isolation accessories)."""
    category = categorize_exercise(exercise.name)
    if category.kind in (ExerciseKind.RUNNING, ExerciseKind.STATION):
        return 3
    if category.kind == ExerciseKind.STRENGTH:
        name = exercise.name.lower()
        if any(k in name for k in ACCESSORY_NAME_KEYWORDS):
            return 1
    return 2


def _estimated_minutes(exercise: GeneratedExercise) -> float:
    if exercise.duration_minutes:
        return exercise.duration_minutes
    if exercise.sets:
        return exercise.sets * 2
    return 5


def fix_session_duration(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Drop the least valuable exercises from an over-long session."""
    day = plan.find_day(issue.details["day_number"])
    max_minutes = issue.details.get("max_allowed")
    if day is None or max_minutes is None or day.duration_minutes <= max_minutes:
        return

    excess = day.duration_minutes - max_minutes
    removed_minutes = 0.0
    # sorted() is stable, so equal priorities go in plan order
    for exercise in sorted(day.exercises, key=_removal_priority):
        if removed_minutes >= excess:
            break
        day.exercises.remove(exercise)
        removed_minutes += _estimated_minutes(exercise)

    day.duration_minutes = max(
        HARD_SAFETY_CAPS.min_session_duration_minutes,
        int(day.duration_minutes - removed_minutes),
    )


def fix_easy_days(plan: GeneratedPlan, issue: ValidationIssue) -> None:
    """Turn the latest non-easy days into easy days until the minimum is met."""
    if issue.details.get("check") != "easy_days":
        return

    needed = issue.details["min_required"] - issue.details["easy_days"]
    for day in sorted(plan.days, key=lambda d: d.day_number, reverse=True):
        if needed <= 0:
            break
        if is_easy_day(day):
            continue
        day.session_type = _soften_session_type(day.session_type)
        _convert_notes(day, NOT_EASY_NOTE_KEYWORDS, EASY_DAY_CONVERTED_NOTE)
        needed -= 1


# ============================================================================
# Dispatch
# ============================================================================

FIXERS: Dict[IssueCategory, Fixer] = {
    IssueCategory.STATION_COVERAGE: fix_missing_stations,
    IssueCategory.FIRST_TIMER_STATION_COVERAGE: fix_missing_stations,
    IssueCategory.WEAK_STATION_FREQUENCY: fix_weak_station_frequency,
    IssueCategory.SKIERG_VOLUME: fix_skierg_volume,
    IssueCategory.ROWING_VOLUME: fix_rowing_volume,
    IssueCategory.INJURY_VIOLATION: fix_injury_violation,
    IssueCategory.SAFETY_RUNNING_PROGRESSION: fix_running_progression,
    IssueCategory.SAFETY_SINGLE_RUN_DISTANCE: fix_single_run_distance,
    IssueCategory.SAFETY_HIGH_INTENSITY_FREQUENCY: fix_high_intensity_frequency,
    IssueCategory.SAFETY_CONSECUTIVE_HARD_DAYS: fix_consecutive_hard_days,
    IssueCategory.SAFETY_STATION_VOLUME: fix_station_volume,
    IssueCategory.SAFETY_SESSION_DURATION: fix_session_duration,
    IssueCategory.SAFETY_RECOVERY: fix_easy_days,
}


def applicable_fixes(issues: Iterable[ValidationIssue]) -> List[ValidationIssue]:
    """Issues the engine will act on: auto-fixable and with a registered fixer."""
    return [i for i in issues if i.auto_fixable and i.category in FIXERS]


def auto_fix_plan(plan: GeneratedPlan, issues: Iterable[ValidationIssue]) -> GeneratedPlan:
    """
    Apply every applicable fixer to a deep copy of the plan.

    Fixers act on the issue details captured before any fix ran, so one pass
    can over-correct where two issues touch the same exercise or day.

    Args:
        plan: Plan to repair (left untouched)
        issues: Issues from a validation pass; non-fixable ones are ignored

    Returns:
        The repaired copy. Validate it again before accepting it.
    """
    fixed = plan.model_copy(deep=True)
    to_fix = applicable_fixes(issues)

    for issue in to_fix:
        FIXERS[issue.category](fixed, issue)

    logger.info(
        "Auto-fix applied",
        week=plan.week_number,
        fixes=len(to_fix),
        categories=sorted({i.category.value for i in to_fix}),
    )
    return fixed
