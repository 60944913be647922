"""
Conflict API Routes

Pre-generation conflict detection.
"""

from fastapi import APIRouter

from hyrox_guard.api.models.responses import ConflictsResponse
from hyrox_guard.conflicts import (
    can_proceed_with_generation,
    detect_conflicts,
    summarize_conflicts,
)
from hyrox_guard.schemas import ConflictConstraints

router = APIRouter()


@router.post("/conflicts", response_model=ConflictsResponse)
async def detect_conflicts_endpoint(constraints: ConflictConstraints) -> ConflictsResponse:
    """
    Detect conflicts between athlete constraints and race requirements.

    Args:
        constraints: Pain points, equipment gaps, time and experience flags

    Returns:
        ConflictsResponse with conflicts, summary and the proceed flag
    """
    conflicts = detect_conflicts(constraints)
    return ConflictsResponse(
        conflicts=conflicts,
        summary=summarize_conflicts(conflicts),
        can_proceed=can_proceed_with_generation(conflicts),
    )
