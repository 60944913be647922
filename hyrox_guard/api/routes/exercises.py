"""
Exercise Reference API Routes

Categorization, safety caps and equipment substitutions.
"""

from typing import Optional

from fastapi import APIRouter, HTTPException, Query, status

from hyrox_guard.api.models.requests import CategorizeRequest
from hyrox_guard.api.models.responses import (
    CapsResponse,
    CategorizedExercise,
    CategorizeResponse,
    SubstitutionsResponse,
)
from hyrox_guard.categorizer import categorize_exercise
from hyrox_guard.normalizer import normalize_exercise_name
from hyrox_guard.safety_caps import HARD_SAFETY_CAPS
from hyrox_guard.schemas import StationId
from hyrox_guard.substitutions import (
    MIN_WEEKS_FOR_ACTUAL_EQUIPMENT,
    can_train_with_substitutes,
    generate_race_prep_warnings,
    get_all_substitutions,
)

router = APIRouter()


@router.post("/categorize", response_model=CategorizeResponse)
async def categorize_endpoint(request: CategorizeRequest) -> CategorizeResponse:
    """Normalize and categorize exercise names."""
    exercises = []
    for name in request.names:
        category = categorize_exercise(name)
        exercises.append(CategorizedExercise(
            name=name,
            normalized=normalize_exercise_name(name),
            category=category,
            label=category.label,
        ))
    return CategorizeResponse(exercises=exercises)


@router.get("/caps", response_model=CapsResponse)
async def get_caps() -> CapsResponse:
    """Return the hard safety cap table."""
    return CapsResponse(caps=HARD_SAFETY_CAPS)


@router.get("/substitutions/{station}", response_model=SubstitutionsResponse)
async def get_substitutions(
    station: str,
    weeks_until_race: Optional[int] = Query(None, ge=0, description="Weeks until race"),
) -> SubstitutionsResponse:
    """
    List substitutes for a station and, optionally, race-prep warnings.

    Raises:
        HTTPException: 404 if the station is unknown
    """
    try:
        station_id = StationId(station)
    except ValueError:
        valid = ", ".join(s.value for s in StationId)
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Unknown station: {station}. Valid stations: {valid}",
        )

    warnings = []
    if weeks_until_race is not None:
        warnings = generate_race_prep_warnings([station_id], weeks_until_race)

    return SubstitutionsResponse(
        station=station_id,
        substitutions=get_all_substitutions(station_id),
        can_train_with_substitutes=can_train_with_substitutes(station_id),
        min_weeks_on_actual_equipment=MIN_WEEKS_FOR_ACTUAL_EQUIPMENT[station_id],
        race_prep_warnings=warnings,
    )
