"""
Pydantic models for plan validation and pre-generation conflict detection.

This module defines the core data structures for:
- Race stations and exercise categories: the closed taxonomy every exercise maps to
- Validation constraints: athlete targets and prior-week context fed to the validators
- Validation issues and results: typed, immutable findings and the scored outcome
- Generation results: outcome of the generate/validate/fix/regenerate loop
- Conflicts: pre-generation findings over user constraints
- Validation reports: serializable audit of every validation pass
"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator

from hyrox_guard.plan_schemas import GeneratedPlan


# ============================================================================
# Enumerations
# ============================================================================

class StationId(str, Enum):
    """The eight race stations, in race order."""
    SKIERG = "skierg"
    SLED_PUSH = "sled_push"
    SLED_PULL = "sled_pull"
    BURPEE_BROAD_JUMP = "burpee_broad_jump"
    ROWING = "rowing"
    FARMERS_CARRY = "farmers_carry"
    SANDBAG_LUNGES = "sandbag_lunges"
    WALL_BALLS = "wall_balls"

    @property
    def display_name(self) -> str:
        return STATION_DISPLAY_NAMES[self]


STATION_DISPLAY_NAMES: Dict[StationId, str] = {
    StationId.SKIERG: "SkiErg",
    StationId.SLED_PUSH: "Sled Push",
    StationId.SLED_PULL: "Sled Pull",
    StationId.BURPEE_BROAD_JUMP: "Burpee Broad Jumps",
    StationId.ROWING: "Rowing",
    StationId.FARMERS_CARRY: "Farmers Carry",
    StationId.SANDBAG_LUNGES: "Sandbag Lunges",
    StationId.WALL_BALLS: "Wall Balls",
}

ALL_STATIONS: List[StationId] = list(StationId)


class ExperienceLevel(str, Enum):
    """Athlete experience level used for safety cap lookup."""
    BEGINNER = "beginner"
    INTERMEDIATE = "intermediate"
    ADVANCED = "advanced"


class ExerciseKind(str, Enum):
    """Top-level exercise category."""
    STATION = "station"
    RUNNING = "running"
    STRENGTH = "strength"
    CARDIO = "cardio"
    CORE = "core"
    MOBILITY = "mobility"
    WARMUP = "warmup"
    OTHER = "other"


class RunningSubtype(str, Enum):
    """Running session flavour, detected from the name."""
    EASY = "easy"
    TEMPO = "tempo"
    INTERVAL = "interval"
    LONG = "long"


class StrengthCategory(str, Enum):
    """Movement pattern of a strength exercise."""
    SQUAT = "squat"
    HINGE = "hinge"
    HORIZONTAL_PUSH = "horizontal_push"
    HORIZONTAL_PULL = "horizontal_pull"
    VERTICAL_PUSH = "vertical_push"
    VERTICAL_PULL = "vertical_pull"
    LUNGE = "lunge"
    CARRY = "carry"
    ACCESSORY = "accessory"


class CardioModality(str, Enum):
    """Non-running, non-station cardio equipment."""
    BIKE = "bike"
    SWIM = "swim"
    ELLIPTICAL = "elliptical"
    STAIR_CLIMBER = "stair_climber"
    JUMP_ROPE = "jump_rope"


class IssueType(str, Enum):
    """Errors block acceptance, warnings never do."""
    ERROR = "error"
    WARNING = "warning"


class IssueCategory(str, Enum):
    """Closed set of validation issue tags. Auto-fix dispatch is keyed on these."""
    RUNNING_VOLUME = "running_volume"
    SKIERG_VOLUME = "skierg_volume"
    ROWING_VOLUME = "rowing_volume"
    STATION_COVERAGE = "station_coverage"
    WEAK_STATION_FREQUENCY = "weak_station_frequency"
    TRAINING_DAYS = "training_days"
    SESSION_DURATION = "session_duration"
    INJURY_VIOLATION = "injury_violation"
    MISSING_WEIGHT = "missing_weight"
    MISSING_PACE = "missing_pace"
    INTENSITY_DISTRIBUTION = "intensity_distribution"
    SAFETY_RUNNING_PROGRESSION = "safety_running_progression"
    SAFETY_SINGLE_RUN_DISTANCE = "safety_single_run_distance"
    SAFETY_HIGH_INTENSITY_FREQUENCY = "safety_high_intensity_frequency"
    SAFETY_CONSECUTIVE_HARD_DAYS = "safety_consecutive_hard_days"
    SAFETY_STATION_VOLUME = "safety_station_volume"
    SAFETY_RECOVERY = "safety_recovery"
    SAFETY_SESSION_DURATION = "safety_session_duration"
    FIRST_TIMER_STATION_COVERAGE = "first_timer_station_coverage"


class GenerationErrorType(str, Enum):
    """Why a generation run ended without an accepted plan."""
    VALIDATION_FAILED = "validation_failed"
    AUTO_FIX_FAILED = "auto_fix_failed"
    PARSE_ERROR = "parse_error"
    GENERATOR_ERROR = "generator_error"
    BLOCKED_BY_CONFLICTS = "blocked_by_conflicts"


class AttemptOutcome(str, Enum):
    """What happened in a single orchestrator attempt."""
    ACCEPTED = "accepted"
    ACCEPTED_AFTER_FIX = "accepted_after_fix"
    VALIDATION_FAILED = "validation_failed"
    AUTO_FIX_FAILED = "auto_fix_failed"
    PARSE_ERROR = "parse_error"
    GENERATOR_ERROR = "generator_error"


class ConflictSeverity(str, Enum):
    """Blocking conflicts stop generation; the others are shown to the user."""
    BLOCKING = "blocking"
    WARNING = "warning"
    INFO = "info"


class ConflictCategory(str, Enum):
    """Source of a pre-generation conflict."""
    INJURY = "injury"
    EQUIPMENT = "equipment"
    TIME = "time"
    EXPERIENCE = "experience"
    SCHEDULE = "schedule"


class ResolutionAction(str, Enum):
    """What a resolution option would do if the user picked it."""
    SUBSTITUTE = "substitute"
    MODIFY = "modify"
    SKIP = "skip"
    REDUCE_VOLUME = "reduce_volume"
    ADD_PREP = "add_prep"


class GymType(str, Enum):
    """Where the athlete trains."""
    COMMERCIAL = "commercial"
    CROSSFIT_BOX = "crossfit_box"
    HYROX_AFFILIATE = "hyrox_affiliate"
    HOME = "home"


# ============================================================================
# Exercise Category
# ============================================================================

class ExerciseCategory(BaseModel):
    """
    Tagged category of a single exercise.

    Exactly one variant field may be set and only for the matching kind:
    `station` for stations, `running_subtype` for running (optional),
    `strength_category` for strength and `cardio_modality` for cardio.
    """

    model_config = ConfigDict(frozen=True)

    kind: ExerciseKind
    station: Optional[StationId] = None
    running_subtype: Optional[RunningSubtype] = None
    strength_category: Optional[StrengthCategory] = None
    cardio_modality: Optional[CardioModality] = None

    @model_validator(mode='after')
    def validate_variant(self):
        """Ensure the variant field agrees with the kind."""
        allowed = {
            ExerciseKind.STATION: "station",
            ExerciseKind.RUNNING: "running_subtype",
            ExerciseKind.STRENGTH: "strength_category",
            ExerciseKind.CARDIO: "cardio_modality",
        }.get(self.kind)

        for field_name in ("station", "running_subtype", "strength_category", "cardio_modality"):
            if getattr(self, field_name) is not None and field_name != allowed:
                raise ValueError(f"{field_name} is not valid for kind '{self.kind.value}'")

        required = {
            ExerciseKind.STATION: self.station,
            ExerciseKind.STRENGTH: self.strength_category,
            ExerciseKind.CARDIO: self.cardio_modality,
        }
        if self.kind in required and required[self.kind] is None:
            raise ValueError(f"kind '{self.kind.value}' requires its variant")
        return self

    @property
    def variant(self) -> Optional[str]:
        value = self.station or self.running_subtype or self.strength_category or self.cardio_modality
        return value.value if value is not None else None

    @property
    def label(self) -> str:
        """Display label such as 'station:rowing' or 'core'."""
        if self.variant:
            return f"{self.kind.value}:{self.variant}"
        return self.kind.value

    def is_station(self, station: Optional[StationId] = None) -> bool:
        if self.kind != ExerciseKind.STATION:
            return False
        return station is None or self.station == station


# ============================================================================
# Validation Constraints
# ============================================================================

class VolumeRange(BaseModel):
    """Inclusive min/max target range."""

    min: float = Field(..., ge=0)
    max: float = Field(..., ge=0)

    @model_validator(mode='after')
    def validate_bounds(self):
        if self.min > self.max:
            raise ValueError(f"min ({self.min}) must not exceed max ({self.max})")
        return self


class VolumeTargets(BaseModel):
    """Weekly soft volume targets computed upstream for the athlete."""

    weekly_running_km: VolumeRange = Field(
        ...,
        description="Weekly running distance target in kilometers"
    )

    weekly_skierg_meters: VolumeRange = Field(
        ...,
        description="Weekly SkiErg distance target in meters"
    )

    weekly_rowing_meters: VolumeRange = Field(
        ...,
        description="Weekly rowing distance target in meters"
    )

    strength_sessions: VolumeRange = Field(
        ...,
        description="Strength sessions per week"
    )

    total_training_hours: VolumeRange = Field(
        ...,
        description="Total training hours per week"
    )


class PreviousWeekVolumes(BaseModel):
    """Actual volumes of the previous week, used for progression limits."""

    running_km: float = Field(0.0, ge=0)
    skierg_m: Optional[float] = Field(None, ge=0)
    rowing_m: Optional[float] = Field(None, ge=0)


class ValidationConstraints(BaseModel):
    """
    Everything the validators know about the athlete and the week.

    Prior-week station coverage is passed in explicitly; the validators keep
    no memory between calls.
    """

    volume_targets: VolumeTargets = Field(
        ...,
        description="Soft weekly targets"
    )

    training_days: int = Field(
        ...,
        ge=1,
        le=7,
        description="Expected number of training days in the week"
    )

    session_length_minutes: int = Field(
        ...,
        gt=0,
        description="Preferred session length; days over 110% of it are flagged"
    )

    weak_stations: List[StationId] = Field(
        default_factory=list,
        description="Stations the athlete wants to practice at least twice a week"
    )

    strong_stations: List[StationId] = Field(
        default_factory=list,
        description="Stations the athlete is already confident on"
    )

    injury_areas: List[str] = Field(
        default_factory=list,
        description="Free-text injury areas (informational for validation)"
    )

    injury_exercises_to_avoid: List[str] = Field(
        default_factory=list,
        description="Exercise name fragments that must not appear in the plan"
    )

    experience_level: ExperienceLevel = Field(
        default=ExperienceLevel.INTERMEDIATE,
        description="Experience level for safety cap lookup"
    )

    previous_week_volumes: Optional[PreviousWeekVolumes] = Field(
        default=None,
        description="Last week's actual volumes, if known"
    )

    is_first_race: bool = Field(
        default=False,
        description="Enables the two-week first-timer station coverage rule"
    )

    week_number: int = Field(
        default=1,
        ge=1,
        description="Week of the plan being validated"
    )

    previous_weeks_stations_covered: List[StationId] = Field(
        default_factory=list,
        description="Stations practiced in earlier weeks of the plan"
    )


# ============================================================================
# Validation Issues & Results
# ============================================================================

class ValidationIssue(BaseModel):
    """A single finding. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    type: IssueType = Field(
        ...,
        description="error blocks acceptance, warning does not"
    )

    category: IssueCategory = Field(
        ...,
        description="Issue tag used for feedback and auto-fix dispatch"
    )

    message: str = Field(
        ...,
        description="Human-readable description"
    )

    details: Dict[str, Any] = Field(
        default_factory=dict,
        description="Structured values (actual, cap, level, rule) for fixers and UIs"
    )

    auto_fixable: bool = Field(
        default=False,
        description="Whether a deterministic repair routine exists"
    )

    @property
    def is_error(self) -> bool:
        return self.type == IssueType.ERROR


class CalculatedVolumes(BaseModel):
    """Volumes derived from the plan during validation."""

    running_km: float = 0.0
    skierg_m: float = 0.0
    rowing_m: float = 0.0
    stations_present: List[StationId] = Field(default_factory=list)
    stations_missing: List[StationId] = Field(default_factory=list)
    weak_station_counts: Dict[str, int] = Field(default_factory=dict)


class ValidationResult(BaseModel):
    """
    Outcome of one validation pass.

    `valid` is true exactly when no error-type issue was found; warnings
    alone never block acceptance.
    """

    valid: bool = Field(
        ...,
        description="True when there are no errors"
    )

    score: int = Field(
        ...,
        ge=0,
        le=100,
        description="100 - 15 per error - 5 per warning, floored at 0"
    )

    issues: List[ValidationIssue] = Field(
        default_factory=list,
        description="All issues found, errors first"
    )

    calculated_volumes: CalculatedVolumes = Field(
        default_factory=CalculatedVolumes,
        description="Volumes computed from the plan"
    )

    @property
    def errors(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.type == IssueType.ERROR]

    @property
    def warnings(self) -> List[ValidationIssue]:
        return [i for i in self.issues if i.type == IssueType.WARNING]

    @property
    def has_auto_fixable(self) -> bool:
        return any(i.auto_fixable for i in self.issues)


# ============================================================================
# Generation Results
# ============================================================================

class GenerationError(BaseModel):
    """Failure description returned when no plan was accepted."""

    type: GenerationErrorType
    message: str
    regeneration_feedback: Optional[str] = None


class AttemptRecord(BaseModel):
    """One pass through generate -> parse -> validate (-> fix)."""

    attempt: int = Field(..., ge=1)
    outcome: AttemptOutcome
    score: Optional[int] = None
    error_count: int = 0
    warning_count: int = 0
    message: Optional[str] = None


class GenerationResult(BaseModel):
    """
    Result handed back to the caller.

    On failure `plan` and `validation_result` hold the best candidate seen,
    when any candidate parsed at all.
    """

    success: bool
    plan: Optional[GeneratedPlan] = None
    validation_result: Optional[ValidationResult] = None
    error: Optional[GenerationError] = None
    auto_fixed: bool = False
    attempts: List[AttemptRecord] = Field(default_factory=list)


# ============================================================================
# Conflicts
# ============================================================================

class ResolutionOption(BaseModel):
    """One way the user can resolve a conflict."""

    id: str
    label: str
    description: str
    action: ResolutionAction
    details: Dict[str, Any] = Field(default_factory=dict)


class Conflict(BaseModel):
    """A pre-generation finding. Computed once, never mutated."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(
        ...,
        description="Deterministic id derived from the rule key"
    )

    severity: ConflictSeverity
    category: ConflictCategory
    title: str
    description: str

    affected_stations: List[StationId] = Field(
        default_factory=list,
        description="Stations impacted by the conflict"
    )

    resolution_options: List[ResolutionOption] = Field(
        default_factory=list,
        description="Choices offered to the user"
    )


class ConflictConstraints(BaseModel):
    """User constraints checked before any plan exists."""

    pain_points: List[str] = Field(default_factory=list)
    injury_areas: List[str] = Field(default_factory=list)
    gym_type: Optional[GymType] = None
    missing_equipment: List[str] = Field(default_factory=list)
    session_length_minutes: Optional[int] = Field(None, gt=0)
    training_days_per_week: Optional[int] = Field(None, ge=1, le=7)
    is_first_race: bool = False
    experience_level: Optional[ExperienceLevel] = None
    weeks_until_race: Optional[int] = Field(None, ge=0)


class ConflictSummary(BaseModel):
    """Digest of a conflict list for display."""

    has_blocking: bool
    blocking_count: int
    warning_count: int
    info_count: int
    affected_stations: List[StationId] = Field(default_factory=list)
    summary: str


# ============================================================================
# Validation Report
# ============================================================================

class ValidationPass(BaseModel):
    """Snapshot of one validation pass inside a report."""

    stage: str = Field(
        ...,
        description="Where the pass happened (e.g. 'initial', 'after_auto_fix')"
    )

    valid: bool
    score: int
    issues: List[ValidationIssue] = Field(default_factory=list)


class ValidationReport(BaseModel):
    """
    Complete audit of how a plan was validated, fixed and regenerated.

    Built by ValidationReportBuilder and exported to JSON or Markdown.
    """

    timestamp: datetime = Field(
        default_factory=datetime.now,
        description="When this report was generated"
    )

    athlete_id: str = Field(
        ...,
        description="ID of the athlete the plan is for"
    )

    week_number: int = Field(..., ge=1)
    experience_level: ExperienceLevel

    constraints_digest: Dict[str, Any] = Field(
        default_factory=dict,
        description="Key constraint values the plan was checked against"
    )

    passes: List[ValidationPass] = Field(default_factory=list)

    fixes_applied: List[str] = Field(
        default_factory=list,
        description="Issue categories the auto-fix engine acted on"
    )

    attempts: List[AttemptRecord] = Field(default_factory=list)

    result: Literal["accepted", "accepted_with_warnings", "rejected", "pending"] = Field(
        default="pending",
        description="Final decision"
    )
