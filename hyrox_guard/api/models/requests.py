"""
API Request Models

Pydantic models for API request validation.
"""

from typing import List, Optional

from pydantic import BaseModel, Field, model_validator

from hyrox_guard.config import with_default_volume_targets
from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.schemas import ValidationConstraints


class ConstraintsRequest(BaseModel):
    """Base for requests carrying constraints; missing volume ranges use the configured defaults."""

    constraints: ValidationConstraints = Field(..., description="Athlete constraints for the week")

    @model_validator(mode="before")
    @classmethod
    def fill_volume_targets(cls, data):
        if isinstance(data, dict) and isinstance(data.get("constraints"), dict):
            data = {**data, "constraints": with_default_volume_targets(data["constraints"])}
        return data


class ValidationRequest(ConstraintsRequest):
    """Request model for plan validation (with or without auto-fix)."""

    plan: GeneratedPlan = Field(..., description="Generated plan week to validate")
    athlete_id: Optional[str] = Field(
        None, description="When set, a validation report is saved for this athlete"
    )


class ParseRequest(ConstraintsRequest):
    """Request model for validating raw generator output."""

    output: str = Field(..., description="Raw generator text, optionally fenced as ```json")


class CategorizeRequest(BaseModel):
    """Request model for exercise categorization."""

    names: List[str] = Field(..., min_length=1, description="Exercise names as written in a plan")
