"""
API Response Models

Pydantic models for API responses.
"""

from typing import List, Optional

from pydantic import BaseModel, Field

from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.safety_caps import SafetyCaps
from hyrox_guard.schemas import (
    Conflict,
    ConflictSummary,
    ExerciseCategory,
    GenerationError,
    StationId,
    ValidationResult,
)
from hyrox_guard.substitutions import EquipmentSubstitution, RacePrepWarning


class ValidationResponse(BaseModel):
    """Response for POST /api/validate."""

    valid: bool = Field(..., description="True when no errors were found")
    score: int = Field(..., description="Validation score (0-100)")
    summary: str = Field(..., description="Human-readable summary")
    validation_result: ValidationResult = Field(..., description="Full validation result")
    report_path: Optional[str] = Field(None, description="Saved report file, if any")


class FixResponse(BaseModel):
    """Response for POST /api/validate/fix and POST /api/parse."""

    success: bool = Field(..., description="Whether the (fixed) plan is valid")
    auto_fixed: bool = Field(False, description="Whether the auto-fix engine changed the plan")
    plan: Optional[GeneratedPlan] = Field(None, description="Original or repaired plan")
    validation_result: Optional[ValidationResult] = Field(None, description="Final validation result")
    error: Optional[GenerationError] = Field(None, description="Failure details with regeneration feedback")


class ConflictsResponse(BaseModel):
    """Response for POST /api/conflicts."""

    conflicts: List[Conflict] = Field(..., description="Detected conflicts in detector order")
    summary: ConflictSummary = Field(..., description="Counts and digest")
    can_proceed: bool = Field(..., description="False when any conflict is blocking")


class CategorizedExercise(BaseModel):
    name: str
    normalized: str
    category: ExerciseCategory
    label: str


class CategorizeResponse(BaseModel):
    """Response for POST /api/categorize."""

    exercises: List[CategorizedExercise]


class CapsResponse(BaseModel):
    """Response for GET /api/caps."""

    caps: SafetyCaps


class SubstitutionsResponse(BaseModel):
    """Response for GET /api/substitutions/{station}."""

    station: StationId
    substitutions: List[EquipmentSubstitution]
    can_train_with_substitutes: bool
    min_weeks_on_actual_equipment: int
    race_prep_warnings: List[RacePrepWarning] = Field(default_factory=list)
