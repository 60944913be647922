"""
Validation API Routes

Endpoints for plan validation, auto-fix and raw generator output checks.
"""

from fastapi import APIRouter, HTTPException, status
from loguru import logger

from hyrox_guard.api.models.requests import ParseRequest, ValidationRequest
from hyrox_guard.api.models.responses import FixResponse, ValidationResponse
from hyrox_guard.config import get_settings
from hyrox_guard.orchestrator import parse_and_validate, validate_and_fix
from hyrox_guard.schemas import GenerationErrorType, GenerationResult
from hyrox_guard.trace import ValidationReportBuilder
from hyrox_guard.validator import PlanValidator, display_validation_summary

router = APIRouter()


def _fix_response(result: GenerationResult) -> FixResponse:
    return FixResponse(
        success=result.success,
        auto_fixed=result.auto_fixed,
        plan=result.plan,
        validation_result=result.validation_result,
        error=result.error,
    )


@router.post("/validate", response_model=ValidationResponse)
async def validate_plan_endpoint(request: ValidationRequest) -> ValidationResponse:
    """
    Validate a plan week against constraints and hard safety caps.

    Args:
        request: ValidationRequest with plan, constraints and optional athlete ID

    Returns:
        ValidationResponse with score, summary and every issue found

    Raises:
        HTTPException: If the report cannot be written
    """
    validator = PlanValidator(request.constraints)
    result = validator.validate(request.plan)

    report_path = None
    if request.athlete_id:
        builder = ValidationReportBuilder(request.athlete_id, request.constraints)
        builder.add_validation("initial", result)
        if not result.valid:
            builder.set_result("rejected")
        else:
            builder.set_result("accepted_with_warnings" if result.warnings else "accepted")
        try:
            report_path = str(builder.save_to_file(get_settings().reports_dir))
        except OSError as e:
            logger.error("Report could not be saved", error=str(e))
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail=f"Report could not be saved: {e}",
            )

    return ValidationResponse(
        valid=result.valid,
        score=result.score,
        summary=display_validation_summary(result, request.plan),
        validation_result=result,
        report_path=report_path,
    )


@router.post("/validate/fix", response_model=FixResponse)
async def validate_and_fix_endpoint(request: ValidationRequest) -> FixResponse:
    """
    Validate a plan and apply the auto-fix engine once if it could help.

    A failed fix is not an HTTP error: the response carries the repaired
    plan, the remaining issues and regeneration feedback.
    """
    return _fix_response(validate_and_fix(request.plan, request.constraints))


@router.post("/parse", response_model=FixResponse)
async def parse_endpoint(request: ParseRequest) -> FixResponse:
    """
    Parse raw generator output, then validate and fix it.

    Raises:
        HTTPException: 400 if the output is not a plan document
    """
    result = parse_and_validate(request.output, request.constraints)
    if result.error is not None and result.error.type == GenerationErrorType.PARSE_ERROR:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=result.error.message)
    return _fix_response(result)
