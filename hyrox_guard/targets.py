"""
Soft target and station-coverage validation.

Checks a plan against the athlete's own targets: weekly volumes, station
coverage, weak-station frequency, day count, session length, injury
avoid-lists and annotation quality. Under-target running and structural
problems are errors; the rest are warnings.

The first-timer rule is the only check that spans weeks. Prior coverage is
passed in through `previous_weeks_stations_covered`; nothing is remembered
between calls.
"""

from typing import List, Optional

from loguru import logger

from hyrox_guard.categorizer import categorize_exercise
from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.schemas import (
    ALL_STATIONS,
    CalculatedVolumes,
    ExerciseKind,
    IssueCategory,
    IssueType,
    ValidationConstraints,
    ValidationIssue,
)
from hyrox_guard.volume import (
    calculate_volumes,
    has_proper_pace_guidance,
    has_proper_weight_spec,
)


# Weak stations should show up at least this many times a week
WEAK_STATION_MIN_OCCURRENCES = 2

# Stations missing from a single week beyond this are not patched automatically
MAX_FIXABLE_MISSING_STATIONS = 2

# First-timer week-2 gaps beyond this are not patched automatically
MAX_FIXABLE_FIRST_TIMER_MISSING = 3

# Days may run this much over the preferred session length
SESSION_LENGTH_TOLERANCE = 1.1


def _join(stations) -> str:
    return ", ".join(s.value for s in stations)


def _fmt(value: float) -> str:
    return f"{value:g}"


class TargetValidator:
    """Soft target and coverage checks for one plan week."""

    def __init__(self, constraints: ValidationConstraints):
        self.constraints = constraints

    def validate(self, plan: GeneratedPlan, volumes: Optional[CalculatedVolumes] = None) -> List[ValidationIssue]:
        """
        Run every soft check.

        Args:
            plan: Candidate plan
            volumes: Precomputed volumes, calculated here when omitted

        Returns:
            All issues found, in check order
        """
        if volumes is None:
            volumes = calculate_volumes(plan, self.constraints.weak_stations)

        issues: List[ValidationIssue] = []
        issues.extend(self._check_running_volume(volumes))
        issues.extend(self._check_machine_volumes(volumes))
        issues.extend(self._check_station_coverage(volumes))
        issues.extend(self._check_weak_stations(volumes))
        issues.extend(self._check_training_days(plan))
        issues.extend(self._check_session_lengths(plan))
        issues.extend(self._check_injury_constraints(plan))
        issues.extend(self._check_annotations(plan))

        logger.debug(
            "Soft targets checked",
            week=plan.week_number,
            running_km=volumes.running_km,
            stations_missing=len(volumes.stations_missing),
            issues=len(issues),
        )
        return issues

    def _check_running_volume(self, volumes: CalculatedVolumes) -> List[ValidationIssue]:
        target = self.constraints.volume_targets.weekly_running_km
        actual = volumes.running_km
        details = {"actual": actual, "min": target.min, "max": target.max}

        if actual < target.min:
            return [ValidationIssue(
                type=IssueType.ERROR,
                category=IssueCategory.RUNNING_VOLUME,
                message=f"Running volume too low: {actual:.1f}km (minimum: {_fmt(target.min)}km)",
                details=details,
                auto_fixable=False,
            )]
        if actual > target.max:
            return [ValidationIssue(
                type=IssueType.WARNING,
                category=IssueCategory.RUNNING_VOLUME,
                message=f"Running volume high: {actual:.1f}km (maximum: {_fmt(target.max)}km)",
                details=details,
                auto_fixable=False,
            )]
        return []

    def _check_machine_volumes(self, volumes: CalculatedVolumes) -> List[ValidationIssue]:
        targets = self.constraints.volume_targets
        checks = (
            (IssueCategory.SKIERG_VOLUME, "SkiErg", volumes.skierg_m, targets.weekly_skierg_meters),
            (IssueCategory.ROWING_VOLUME, "Rowing", volumes.rowing_m, targets.weekly_rowing_meters),
        )
        issues = []
        for category, label, actual, target in checks:
            if actual < target.min:
                issues.append(ValidationIssue(
                    type=IssueType.WARNING,
                    category=category,
                    message=f"{label} volume low: {_fmt(actual)}m (minimum: {_fmt(target.min)}m)",
                    details={"actual": actual, "min": target.min, "max": target.max},
                    auto_fixable=True,
                ))
        return issues

    def _check_station_coverage(self, volumes: CalculatedVolumes) -> List[ValidationIssue]:
        missing = volumes.stations_missing
        if not missing:
            return []
        return [ValidationIssue(
            type=IssueType.ERROR,
            category=IssueCategory.STATION_COVERAGE,
            message=f"Missing stations: {_join(missing)}",
            details={
                "missing": [s.value for s in missing],
                "present": [s.value for s in volumes.stations_present],
            },
            auto_fixable=len(missing) <= MAX_FIXABLE_MISSING_STATIONS,
        )]

    def _check_weak_stations(self, volumes: CalculatedVolumes) -> List[ValidationIssue]:
        issues = []
        for station, count in volumes.weak_station_counts.items():
            if count < WEAK_STATION_MIN_OCCURRENCES:
                issues.append(ValidationIssue(
                    type=IssueType.WARNING,
                    category=IssueCategory.WEAK_STATION_FREQUENCY,
                    message=(
                        f'Weak station "{station}" only appears {count}x '
                        f"(should be {WEAK_STATION_MIN_OCCURRENCES}x)"
                    ),
                    details={
                        "station": station,
                        "count": count,
                        "required": WEAK_STATION_MIN_OCCURRENCES,
                    },
                    auto_fixable=True,
                ))
        return issues

    def _check_training_days(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        expected = self.constraints.training_days
        actual = len(plan.days)
        if actual == expected:
            return []
        return [ValidationIssue(
            type=IssueType.ERROR,
            category=IssueCategory.TRAINING_DAYS,
            message=f"Wrong number of training days: {actual} (expected: {expected})",
            details={"actual": actual, "expected": expected},
            auto_fixable=False,
        )]

    def _check_session_lengths(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        preferred = self.constraints.session_length_minutes
        issues = []
        for day in plan.days:
            if day.duration_minutes > preferred * SESSION_LENGTH_TOLERANCE:
                issues.append(ValidationIssue(
                    type=IssueType.WARNING,
                    category=IssueCategory.SESSION_DURATION,
                    message=f"Day {day.day_number} too long: {day.duration_minutes}min (max: {preferred}min)",
                    details={
                        "day_number": day.day_number,
                        "actual": day.duration_minutes,
                        "max": preferred,
                    },
                    auto_fixable=False,
                ))
        return issues

    def _check_injury_constraints(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        avoid_list = [a for a in self.constraints.injury_exercises_to_avoid if a.strip()]
        issues = []
        for exercise in plan.all_exercises():
            name = exercise.name.lower()
            for avoid in avoid_list:
                if avoid.lower() in name:
                    issues.append(ValidationIssue(
                        type=IssueType.ERROR,
                        category=IssueCategory.INJURY_VIOLATION,
                        message=f'Exercise "{exercise.name}" violates injury constraints (avoid: {avoid})',
                        details={"exercise": exercise.name, "constraint": avoid},
                        auto_fixable=True,
                    ))
        return issues

    def _check_annotations(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        exercises = plan.all_exercises()
        missing_weight = sum(1 for e in exercises if not has_proper_weight_spec(e))
        missing_pace = sum(
            1 for e in exercises
            if categorize_exercise(e.name).kind == ExerciseKind.RUNNING
            and not has_proper_pace_guidance(e)
        )

        issues = []
        if missing_weight:
            issues.append(ValidationIssue(
                type=IssueType.WARNING,
                category=IssueCategory.MISSING_WEIGHT,
                message=f"{missing_weight} strength exercise(s) missing specific weight",
                details={"count": missing_weight},
                auto_fixable=False,
            ))
        if missing_pace:
            issues.append(ValidationIssue(
                type=IssueType.WARNING,
                category=IssueCategory.MISSING_PACE,
                message=f"{missing_pace} running exercise(s) missing pace/zone guidance",
                details={"count": missing_pace},
                auto_fixable=False,
            ))
        return issues


def check_first_timer_coverage(
    constraints: ValidationConstraints,
    volumes: CalculatedVolumes,
) -> List[ValidationIssue]:
    """
    Two-week station coverage rule for first-time racers.

    Coverage is the union of this week's stations and the stations the caller
    reports for earlier weeks. Week 1 gaps are a warning, week 2 gaps are an
    error, and from week 3 the rule is inert.

    Args:
        constraints: Must carry is_first_race, week_number and
            previous_weeks_stations_covered
        volumes: Volumes of the week being validated

    Returns:
        Zero or one issue
    """
    if not constraints.is_first_race:
        return []

    week = constraints.week_number
    previous = set(constraints.previous_weeks_stations_covered)
    covered = previous | set(volumes.stations_present)
    still_missing = [s for s in ALL_STATIONS if s not in covered]

    if week > 2 or not still_missing:
        return []

    if week == 2:
        return [ValidationIssue(
            type=IssueType.ERROR,
            category=IssueCategory.FIRST_TIMER_STATION_COVERAGE,
            message=(
                "First-timer: By end of week 2, all stations must be practiced. "
                f"Still missing: {_join(still_missing)}"
            ),
            details={
                "missing": [s.value for s in still_missing],
                "covered_this_week": [s.value for s in volumes.stations_present],
                "covered_previous_weeks": [s.value for s in ALL_STATIONS if s in previous],
                "total_covered": [s.value for s in ALL_STATIONS if s in covered],
                "week_number": week,
                "reason": "First-time racers must practice every station in the first 2 weeks",
            },
            auto_fixable=len(still_missing) <= MAX_FIXABLE_FIRST_TIMER_MISSING,
        )]

    return [ValidationIssue(
        type=IssueType.WARNING,
        category=IssueCategory.FIRST_TIMER_STATION_COVERAGE,
        message=(
            f"First-timer: {len(still_missing)} stations not yet practiced. "
            f"Ensure they're covered in week 2: {_join(still_missing)}"
        ),
        details={
            "missing": [s.value for s in still_missing],
            "covered_this_week": [s.value for s in volumes.stations_present],
            "week_number": week,
            "reason": "First-time racers should practice all 8 stations in weeks 1-2",
        },
        auto_fixable=False,
    )]


def check_targets(plan: GeneratedPlan, constraints: ValidationConstraints) -> List[ValidationIssue]:
    """
    Check a plan against soft targets, station coverage and the first-timer rule.

    Args:
        plan: Candidate plan
        constraints: Athlete targets and prior-week context

    Returns:
        Errors and warnings, possibly empty
    """
    volumes = calculate_volumes(plan, constraints.weak_stations)
    issues = TargetValidator(constraints).validate(plan, volumes)
    issues.extend(check_first_timer_coverage(constraints, volumes))
    return issues
