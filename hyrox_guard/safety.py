"""
Hard safety validation.

Every finding here is an error: the caps encode injury-prevention limits and
are never downgraded to warnings. Each check runs independently so a single
pass reports everything at once, and every issue carries the actual value,
the cap, the level and the rule behind it for messaging and auto-fix.
"""

from typing import List, Optional

from loguru import logger

from hyrox_guard.categorizer import categorize_exercise
from hyrox_guard.plan_schemas import GeneratedDay, GeneratedExercise, GeneratedPlan
from hyrox_guard.safety_caps import (
    CAPPED_STATIONS,
    HARD_SAFETY_CAPS,
    STATION_VOLUME_RISKS,
    SafetyCaps,
)
from hyrox_guard.schemas import (
    ExerciseKind,
    IssueCategory,
    IssueType,
    StationId,
    ValidationConstraints,
    ValidationIssue,
)
from hyrox_guard.volume import direct_distance_km, weekly_running_km, weekly_station_load


# Note keywords that make a whole day high intensity
HIGH_INTENSITY_NOTE_KEYWORDS = (
    "tempo", "threshold", "interval", "race pace", "hard", "max effort", "vo2", "sprint",
)

# Note keywords that make a run count as a high-intensity running session
HIGH_INTENSITY_RUN_KEYWORDS = ("tempo", "threshold", "interval", "race pace", "vo2", "sprint")

# Note keywords that disqualify a day from being easy
NOT_EASY_NOTE_KEYWORDS = ("tempo", "threshold", "interval", "hard", "max", "race pace", "sprint")

HARD_SESSION_TYPE_KEYWORDS = ("interval", "tempo", "threshold")


def _notes(exercise: GeneratedExercise) -> str:
    return (exercise.notes or "").lower()


def _hard_session_type(day: GeneratedDay) -> bool:
    session_type = day.session_type.lower()
    return any(k in session_type for k in HARD_SESSION_TYPE_KEYWORDS)


def is_high_intensity_day(day: GeneratedDay) -> bool:
    """A day is hard when its session type or any exercise note says so."""
    if _hard_session_type(day):
        return True
    return any(
        any(k in _notes(ex) for k in HIGH_INTENSITY_NOTE_KEYWORDS)
        for ex in day.exercises
    )


def is_high_intensity_run(exercise: GeneratedExercise) -> bool:
    if categorize_exercise(exercise.name).kind != ExerciseKind.RUNNING:
        return False
    return any(k in _notes(exercise) for k in HIGH_INTENSITY_RUN_KEYWORDS)


def is_easy_day(day: GeneratedDay) -> bool:
    """No hard session type and no exercise note hinting at intensity."""
    if _hard_session_type(day):
        return False
    return not any(
        any(k in _notes(ex) for k in NOT_EASY_NOTE_KEYWORDS)
        for ex in day.exercises
    )


def high_intensity_days(plan: GeneratedPlan) -> List[int]:
    """Day numbers of hard days, sorted."""
    return sorted(day.day_number for day in plan.days if is_high_intensity_day(day))


def high_intensity_running_days(plan: GeneratedPlan) -> List[int]:
    """Day numbers that contain at least one high-intensity run, sorted."""
    return sorted(
        day.day_number for day in plan.days
        if any(is_high_intensity_run(ex) for ex in day.exercises)
    )


def longest_consecutive_streak(day_numbers: List[int]) -> int:
    """Longest run of day numbers increasing by exactly one."""
    ordered = sorted(set(day_numbers))
    if not ordered:
        return 0
    longest = current = 1
    for previous, following in zip(ordered, ordered[1:]):
        current = current + 1 if following - previous == 1 else 1
        longest = max(longest, current)
    return longest


def _error(category: IssueCategory, message: str, details: dict, auto_fixable: bool) -> ValidationIssue:
    return ValidationIssue(
        type=IssueType.ERROR,
        category=category,
        message=message,
        details=details,
        auto_fixable=auto_fixable,
    )


def _fmt(value: float) -> str:
    return f"{value:g}"


class SafetyValidator:
    """
    Checks a plan against the hard safety caps.

    Each `_check_*` method covers one rule family and returns its issues;
    `validate()` runs them all without stopping at the first finding.
    """

    def __init__(self, constraints: ValidationConstraints, caps: SafetyCaps = HARD_SAFETY_CAPS):
        self.constraints = constraints
        self.caps = caps
        self.level = constraints.experience_level

    def validate(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        issues: List[ValidationIssue] = []
        issues.extend(self._check_running_progression(plan))
        issues.extend(self._check_single_run_distance(plan))
        issues.extend(self._check_high_intensity_frequency(plan))
        issues.extend(self._check_consecutive_hard_days(plan))
        issues.extend(self._check_station_volumes(plan))
        issues.extend(self._check_recovery(plan))
        issues.extend(self._check_session_duration(plan))

        logger.debug(
            "Safety caps checked",
            week=plan.week_number,
            level=self.level.value,
            caps_version=self.caps.version,
            errors=len(issues),
        )
        return issues

    # ------------------------------------------------------------------ running

    def _check_running_progression(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        previous = self.constraints.previous_week_volumes
        if not previous or not previous.running_km:
            return []

        previous_km = previous.running_km
        limit_percent = self.caps.max_weekly_running_increase_percent
        max_allowed_km = previous_km * (1 + limit_percent / 100)
        current_km = weekly_running_km(plan)

        if current_km <= max_allowed_km:
            return []

        increase_percent = round((current_km - previous_km) / previous_km * 100, 1)
        return [_error(
            IssueCategory.SAFETY_RUNNING_PROGRESSION,
            f"Running volume increase too aggressive: {increase_percent:.1f}% "
            f"(max: {_fmt(limit_percent)}%)",
            {
                "previous_week_km": previous_km,
                "current_week_km": round(current_km, 2),
                "max_allowed_km": max_allowed_km,
                "increase_percent": increase_percent,
                "rule": "10% rule - weekly running volume may grow at most 10% to limit injury risk",
            },
            auto_fixable=True,
        )]

    def _check_single_run_distance(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        max_km = self.caps.max_single_run_km.for_level(self.level)
        issues = []
        for day in plan.days:
            for exercise in day.exercises:
                if categorize_exercise(exercise.name).kind != ExerciseKind.RUNNING:
                    continue
                run_km = direct_distance_km(exercise) or 0.0
                if run_km > max_km:
                    issues.append(_error(
                        IssueCategory.SAFETY_SINGLE_RUN_DISTANCE,
                        f"Single run too long: {run_km:.1f}km on Day {day.day_number} "
                        f"(max for {self.level.value}: {_fmt(max_km)}km)",
                        {
                            "exercise": exercise.name,
                            "day_number": day.day_number,
                            "distance_km": run_km,
                            "max_allowed_km": max_km,
                            "level": self.level.value,
                        },
                        auto_fixable=True,
                    ))
        return issues

    def _check_high_intensity_frequency(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        max_allowed = self.caps.max_high_intensity_runs_per_week
        running_days = high_intensity_running_days(plan)
        if len(running_days) <= max_allowed:
            return []

        return [_error(
            IssueCategory.SAFETY_HIGH_INTENSITY_FREQUENCY,
            f"Too many high intensity running sessions: {len(running_days)} (max: {max_allowed})",
            {
                "count": len(running_days),
                "max_allowed": max_allowed,
                "high_intensity_days": high_intensity_days(plan),
                "rule": "More than 2 high intensity sessions per week sharply increases injury risk",
            },
            auto_fixable=True,
        )]

    def _check_consecutive_hard_days(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        hard_days = high_intensity_days(plan)
        for first, second in zip(hard_days, hard_days[1:]):
            if second - first == 1:
                # First pair only
                return [_error(
                    IssueCategory.SAFETY_CONSECUTIVE_HARD_DAYS,
                    f"Back-to-back high intensity days: Day {first} and Day {second}",
                    {
                        "consecutive_days": [first, second],
                        "rule": "Never schedule hard days back to back - recovery drives adaptation",
                    },
                    auto_fixable=True,
                )]
        return []

    # ----------------------------------------------------------------- stations

    def _check_station_volumes(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        issues = []
        for station in CAPPED_STATIONS:
            cap = self.caps.station_volume_cap(station, self.level)
            total = weekly_station_load(plan, station)
            if cap is None or total <= cap:
                continue
            issues.append(_error(
                IssueCategory.SAFETY_STATION_VOLUME,
                self._station_volume_message(station, total, cap),
                {
                    "station": station.value,
                    "total": total,
                    "max_allowed": cap,
                    "level": self.level.value,
                    "risk": STATION_VOLUME_RISKS[station],
                },
                auto_fixable=True,
            ))
        return issues

    def _station_volume_message(self, station: StationId, total: float, cap: float) -> str:
        level = self.level.value
        if station == StationId.WALL_BALLS:
            return f"Wall balls volume too high: {_fmt(total)} reps (max for {level}: {_fmt(cap)})"
        if station == StationId.BURPEE_BROAD_JUMP:
            return f"Burpee broad jumps too high: ~{_fmt(total)} (max for {level}: {_fmt(cap)})"
        label = "Sled push" if station == StationId.SLED_PUSH else "Sled pull"
        return f"{label} volume too high: {_fmt(total)}m (max for {level}: {_fmt(cap)}m)"

    # ----------------------------------------------------------------- recovery

    def _check_recovery(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        issues = []
        caps = self.caps
        day_numbers = sorted(day.day_number for day in plan.days)
        training_days = len(plan.days)
        rest_days = 7 - training_days

        if rest_days < caps.min_rest_days_per_week:
            issues.append(_error(
                IssueCategory.SAFETY_RECOVERY,
                f"Not enough rest days: {rest_days} (minimum: {caps.min_rest_days_per_week})",
                {
                    "check": "rest_days",
                    "rest_days": rest_days,
                    "training_days": training_days,
                    "min_required": caps.min_rest_days_per_week,
                    "rule": "At least 1 complete rest day per week",
                },
                auto_fixable=False,
            ))

        if training_days > caps.max_consecutive_training_days:
            streak = longest_consecutive_streak(day_numbers)
            if streak > caps.max_consecutive_training_days:
                issues.append(_error(
                    IssueCategory.SAFETY_RECOVERY,
                    f"Too many consecutive training days: {streak} "
                    f"(max: {caps.max_consecutive_training_days})",
                    {
                        "check": "consecutive_days",
                        "consecutive_days": streak,
                        "max_allowed": caps.max_consecutive_training_days,
                        "day_numbers": day_numbers,
                        "rule": "At most 5 training days in a row",
                    },
                    auto_fixable=False,
                ))

        easy_days = sum(1 for day in plan.days if is_easy_day(day))
        if (
            easy_days < caps.min_easy_days_per_week
            and training_days >= caps.easy_day_rule_min_training_days
        ):
            issues.append(_error(
                IssueCategory.SAFETY_RECOVERY,
                f"Not enough easy/recovery days: {easy_days} (minimum: {caps.min_easy_days_per_week})",
                {
                    "check": "easy_days",
                    "easy_days": easy_days,
                    "min_required": caps.min_easy_days_per_week,
                    "rule": "At least 2 easy days per week once training 4 or more days",
                },
                auto_fixable=True,
            ))
        return issues

    # ------------------------------------------------------------------ session

    def _check_session_duration(self, plan: GeneratedPlan) -> List[ValidationIssue]:
        issues = []
        max_minutes = self.caps.max_session_duration_minutes
        min_minutes = self.caps.min_session_duration_minutes

        for day in plan.days:
            if day.duration_minutes > max_minutes:
                issues.append(_error(
                    IssueCategory.SAFETY_SESSION_DURATION,
                    f"Session too long: Day {day.day_number} is {day.duration_minutes}min "
                    f"(max: {max_minutes}min)",
                    {
                        "day_number": day.day_number,
                        "duration_minutes": day.duration_minutes,
                        "max_allowed": max_minutes,
                        "risk": "Sessions over 2 hours raise cortisol and lower training quality",
                    },
                    auto_fixable=True,
                ))
            if day.duration_minutes < min_minutes:
                issues.append(_error(
                    IssueCategory.SAFETY_SESSION_DURATION,
                    f"Session too short: Day {day.day_number} is {day.duration_minutes}min "
                    f"(min: {min_minutes}min)",
                    {
                        "day_number": day.day_number,
                        "duration_minutes": day.duration_minutes,
                        "min_required": min_minutes,
                    },
                    auto_fixable=False,
                ))
        return issues


def check_safety_caps(
    plan: GeneratedPlan,
    constraints: ValidationConstraints,
    caps: Optional[SafetyCaps] = None,
) -> List[ValidationIssue]:
    """
    Check a plan against the hard safety caps.

    Args:
        plan: Candidate plan
        constraints: Athlete constraints (experience level, previous week)
        caps: Cap table, HARD_SAFETY_CAPS by default

    Returns:
        Error-type issues, possibly empty
    """
    return SafetyValidator(constraints, caps or HARD_SAFETY_CAPS).validate(plan)
