"""
Data schemas for generated weekly training plans.

This module contains Pydantic models for the candidate plan document returned
by the external plan generator: a single training week made of days, each day
holding a list of prescribed exercises. The field names follow the snake_case
JSON the generator is instructed to emit.
"""

import re
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


_FIRST_INTEGER = re.compile(r"\d+")


class TrainingPhase(str, Enum):
    """Periodization phases of a race preparation block."""

    BASE = "BASE"  # Aerobic foundation and movement quality
    BUILD = "BUILD"  # Increasing volume and race-specific work
    PEAK = "PEAK"  # Highest specificity and intensity
    TAPER = "TAPER"  # Reduced volume before race day


def calculate_phase(weeks_out: int) -> TrainingPhase:
    """
    Map the number of weeks until race day to a training phase.

    Args:
        weeks_out: Whole weeks remaining until the race

    Returns:
        TrainingPhase for the current week
    """
    if weeks_out > 12:
        return TrainingPhase.BASE
    if weeks_out > 6:
        return TrainingPhase.BUILD
    if weeks_out > 2:
        return TrainingPhase.PEAK
    return TrainingPhase.TAPER


def _coerce_count(value):
    """Accept counts written as text by the generator ("8-10", "12 each")."""
    if value is None or isinstance(value, bool):
        return value
    if isinstance(value, str):
        match = _FIRST_INTEGER.search(value)
        return int(match.group()) if match else None
    if isinstance(value, float):
        return int(round(value))
    return value


class GeneratedExercise(BaseModel):
    """
    Single prescribed exercise inside a generated day.

    Only the name is required. Every metric is optional because the generator
    prescribes work in heterogeneous units (sets x reps, meters, kilometers,
    minutes) depending on the movement.
    """

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1, description="Free-text exercise name")
    sets: Optional[int] = Field(None, ge=0, description="Number of sets or rounds")
    reps: Optional[int] = Field(None, ge=0, description="Repetitions per set")
    weight_kg: Optional[float] = Field(None, ge=0, description="Load in kilograms")
    distance_m: Optional[float] = Field(None, ge=0, description="Distance per set in meters")
    distance_km: Optional[float] = Field(None, ge=0, description="Distance per set in kilometers")
    duration_minutes: Optional[float] = Field(
        None, ge=0, description="Work duration per set in minutes"
    )
    rest_seconds: Optional[int] = Field(None, ge=0, description="Rest between sets")
    target_pace: Optional[str] = Field(None, description="Pace or zone prescription")
    notes: Optional[str] = Field(None, description="Intensity cues and coaching notes")

    @field_validator("sets", "reps", "rest_seconds", mode="before")
    @classmethod
    def coerce_counts(cls, v):
        """Generators sometimes write counts as ranges or prose."""
        return _coerce_count(v)

    @property
    def set_count(self) -> int:
        """Number of times the prescription repeats (at least once)."""
        return self.sets or 1


class SessionBlock(BaseModel):
    """Warm-up or cool-down block attached to a day."""

    model_config = ConfigDict(extra="ignore")

    description: str = Field("", description="What the block contains")
    duration_minutes: int = Field(0, ge=0, description="Block duration in minutes")

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def round_minutes(cls, v):
        return _coerce_count(v) or 0


class GeneratedDay(BaseModel):
    """
    One training day of the generated week.

    Day numbers are 1-based positions inside the week (1 = Monday). They are
    used for spacing checks (consecutive days, back-to-back hard days), so the
    generator must leave gaps for rest days rather than renumbering.
    """

    model_config = ConfigDict(extra="ignore")

    day_number: int = Field(..., ge=1, description="Day of the week (1-7)")
    day_name: str = Field("", description="Human-readable day name")
    session_type: str = Field("", description="Session label (e.g. 'Tempo Run + Stations')")
    duration_minutes: int = Field(0, ge=0, description="Planned session length in minutes")
    warmup: Optional[SessionBlock] = None
    exercises: List[GeneratedExercise] = Field(default_factory=list)
    cooldown: Optional[SessionBlock] = None

    @field_validator("duration_minutes", mode="before")
    @classmethod
    def round_minutes(cls, v):
        return _coerce_count(v) or 0


class WeeklyTotals(BaseModel):
    """Totals the generator reports for the week (informational, never trusted)."""

    model_config = ConfigDict(extra="ignore")

    running_km: float = Field(0.0, ge=0)
    skierg_m: float = Field(0.0, ge=0)
    rowing_m: float = Field(0.0, ge=0)
    strength_sessions: int = Field(0, ge=0)
    total_hours: float = Field(0.0, ge=0)


class GeneratedPlan(BaseModel):
    """
    Candidate training week produced by the external generator.

    This is the mutable subject of validation. The Auto-Fix Engine always
    works on a deep copy, so an instance handed to the validator is never
    modified in place.
    """

    model_config = ConfigDict(extra="ignore")

    week_number: int = Field(..., ge=1, description="Week number in the plan (1-based)")
    phase: TrainingPhase = Field(..., description="Training phase for this week")
    focus: str = Field("", description="Main focus of the week")
    days: List[GeneratedDay] = Field(default_factory=list, description="Training days")
    weekly_totals: WeeklyTotals = Field(default_factory=WeeklyTotals)
    notes: Optional[str] = Field(None, description="Coach notes for the week")

    @field_validator("phase", mode="before")
    @classmethod
    def normalize_phase(cls, v):
        """Accept 'base', 'Build', etc."""
        if isinstance(v, str):
            return v.strip().upper()
        return v

    def all_exercises(self) -> List[GeneratedExercise]:
        """Flatten every exercise of the week, in day order."""
        return [exercise for day in self.days for exercise in day.exercises]

    def find_day(self, day_number: int) -> Optional[GeneratedDay]:
        """Return the day with the given number, if present."""
        return next((d for d in self.days if d.day_number == day_number), None)

    def total_minutes(self) -> int:
        """Sum of planned session durations."""
        return sum(day.duration_minutes for day in self.days)
