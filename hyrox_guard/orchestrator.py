"""
Validation and regeneration orchestration.

Wraps a plan generator (anything that turns a prompt into text) in a bounded
loop: generate, parse, validate, auto-fix once, and on failure retry with the
problems appended to the prompt. Generator calls are awaited one at a time;
the loop never runs them concurrently.
"""

import asyncio
import json
from typing import Awaitable, Callable, List, Optional

from loguru import logger
from pydantic import ValidationError

from hyrox_guard.autofix import applicable_fixes, auto_fix_plan
from hyrox_guard.config import get_settings
from hyrox_guard.conflicts import (
    can_proceed_with_generation,
    detect_conflicts,
    summarize_conflicts,
)
from hyrox_guard.feedback import generate_regeneration_feedback
from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.schemas import (
    AttemptOutcome,
    AttemptRecord,
    ConflictConstraints,
    GenerationError,
    GenerationErrorType,
    GenerationResult,
    ValidationConstraints,
    ValidationResult,
)
from hyrox_guard.trace import ValidationReportBuilder
from hyrox_guard.validator import validate_plan


PlanGenerator = Callable[[str], Awaitable[str]]

PROMPT_SEPARATOR = "\n\n---\n\n"

PARSE_RETRY_INSTRUCTION = (
    "PREVIOUS ATTEMPT FAILED: Response was not valid JSON. "
    "You MUST respond with ONLY valid JSON matching the schema. "
    "No markdown, no explanations."
)


class PlanParseError(ValueError):
    """Generator output could not be read as a plan document."""


class GeneratorError(RuntimeError):
    """Raised by a generator to report that it could not produce output."""


# ============================================================================
# Parsing
# ============================================================================

def strip_code_fences(text: str) -> str:
    """Remove a surrounding ```json / ``` Markdown fence, if any."""
    cleaned = text.strip()
    if cleaned.startswith("```json"):
        cleaned = cleaned[len("```json"):]
    elif cleaned.startswith("```"):
        cleaned = cleaned[3:]
    if cleaned.endswith("```"):
        cleaned = cleaned[:-3]
    return cleaned.strip()


def parse_plan_output(text: str) -> GeneratedPlan:
    """
    Parse raw generator output into a plan.

    Args:
        text: JSON document, optionally wrapped in a Markdown code fence

    Returns:
        Parsed GeneratedPlan

    Raises:
        PlanParseError: If the text is not JSON or does not describe a plan
    """
    try:
        data = json.loads(strip_code_fences(text))
    except json.JSONDecodeError as e:
        raise PlanParseError(f"Failed to parse generator output as JSON: {e}") from e

    if not isinstance(data, dict):
        raise PlanParseError("Failed to parse generator output as JSON: expected an object")

    try:
        return GeneratedPlan(**data)
    except ValidationError as e:
        raise PlanParseError(f"Generator output is not a valid plan: {e.error_count()} field error(s)") from e


# ============================================================================
# Single-candidate workflow
# ============================================================================

def validate_and_fix(
    plan: GeneratedPlan,
    constraints: ValidationConstraints,
    report: Optional[ValidationReportBuilder] = None,
) -> GenerationResult:
    """
    Validate a plan, auto-fixing it once if that could help.

    Args:
        plan: Candidate plan (not modified)
        constraints: Athlete constraints
        report: Optional report builder that records every pass

    Returns:
        Success with the original or repaired plan, or an auto_fix_failed /
        validation_failed result carrying regeneration feedback
    """
    first = validate_plan(plan, constraints)
    if report is not None:
        report.add_validation("initial", first)

    if first.valid:
        return GenerationResult(success=True, plan=plan, validation_result=first)

    to_fix = applicable_fixes(first.issues)
    if to_fix:
        fixed_plan = auto_fix_plan(plan, to_fix)
        second = validate_plan(fixed_plan, constraints)
        if report is not None:
            report.add_fixes(to_fix)
            report.add_validation("after_auto_fix", second)

        if second.valid:
            logger.info("Auto-fix resolved all errors", week=plan.week_number, score=second.score)
            return GenerationResult(
                success=True,
                plan=fixed_plan,
                validation_result=second,
                auto_fixed=True,
            )

        logger.info("Auto-fix left errors", week=plan.week_number, errors=len(second.errors))
        return GenerationResult(
            success=False,
            plan=fixed_plan,
            validation_result=second,
            auto_fixed=True,
            error=GenerationError(
                type=GenerationErrorType.AUTO_FIX_FAILED,
                message="Auto-fix could not resolve all issues",
                regeneration_feedback=generate_regeneration_feedback(second),
            ),
        )

    return GenerationResult(
        success=False,
        plan=plan,
        validation_result=first,
        error=GenerationError(
            type=GenerationErrorType.VALIDATION_FAILED,
            message="Plan failed validation",
            regeneration_feedback=generate_regeneration_feedback(first),
        ),
    )


def parse_and_validate(
    text: str,
    constraints: ValidationConstraints,
    report: Optional[ValidationReportBuilder] = None,
) -> GenerationResult:
    """
    Parse generator output, then validate and fix it.

    Parse failures come back as a parse_error result without a plan.
    """
    try:
        plan = parse_plan_output(text)
    except PlanParseError as e:
        return GenerationResult(
            success=False,
            error=GenerationError(type=GenerationErrorType.PARSE_ERROR, message=str(e)),
        )
    return validate_and_fix(plan, constraints, report)


# ============================================================================
# Regeneration loop
# ============================================================================

def _attempt_record(attempt: int, result: GenerationResult) -> AttemptRecord:
    validation: Optional[ValidationResult] = result.validation_result
    if result.success:
        outcome = AttemptOutcome.ACCEPTED_AFTER_FIX if result.auto_fixed else AttemptOutcome.ACCEPTED
    elif result.error.type == GenerationErrorType.AUTO_FIX_FAILED:
        outcome = AttemptOutcome.AUTO_FIX_FAILED
    else:
        outcome = AttemptOutcome.VALIDATION_FAILED

    return AttemptRecord(
        attempt=attempt,
        outcome=outcome,
        score=validation.score if validation else None,
        error_count=len(validation.errors) if validation else 0,
        warning_count=len(validation.warnings) if validation else 0,
        message=result.error.message if result.error else None,
    )


def _is_better(candidate: GenerationResult, best: Optional[GenerationResult]) -> bool:
    """Higher score wins, then fewer errors. Ties keep the earlier candidate."""
    if best is None:
        return True
    new, old = candidate.validation_result, best.validation_result
    return (new.score, -len(new.errors)) > (old.score, -len(old.errors))


class PlanOrchestrator:
    """
    Bounded generate-validate-regenerate loop for one plan week.

    The generator is injected: an async callable taking the prompt and
    returning raw text. It may raise GeneratorError to report a failed call;
    that attempt is counted and the loop moves on. Any other exception
    propagates to the caller.
    """

    def __init__(
        self,
        generator: PlanGenerator,
        max_attempts: Optional[int] = None,
        retry_delay_seconds: Optional[float] = None,
        report: Optional[ValidationReportBuilder] = None,
    ):
        """
        Initialize orchestrator.

        Args:
            generator: Async callable producing plan JSON from a prompt
            max_attempts: Maximum number of generator calls (defaults to settings)
            retry_delay_seconds: Pause between attempts (defaults to settings)
            report: Optional report builder that records the run
        """
        settings = get_settings()
        self.generator = generator
        self.max_attempts = max_attempts if max_attempts is not None else settings.max_generation_attempts
        self.retry_delay_seconds = (
            retry_delay_seconds if retry_delay_seconds is not None else settings.retry_delay_seconds
        )
        self.report = report

        if self.max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")

    async def run(
        self,
        base_prompt: str,
        constraints: ValidationConstraints,
        conflict_constraints: Optional[ConflictConstraints] = None,
    ) -> GenerationResult:
        """
        Produce an accepted plan or the best rejected candidate.

        Args:
            base_prompt: Prompt for the first attempt; retries append to it
            constraints: Validation constraints for the requested week
            conflict_constraints: When given, blocking conflicts stop the run
                before the generator is called

        Returns:
            GenerationResult with the attempt log attached
        """
        if conflict_constraints is not None:
            conflicts = detect_conflicts(conflict_constraints)
            if not can_proceed_with_generation(conflicts):
                summary = summarize_conflicts(conflicts)
                logger.warning("Generation blocked by conflicts", blocking=summary.blocking_count)
                if self.report is not None:
                    self.report.set_result("rejected")
                return GenerationResult(
                    success=False,
                    error=GenerationError(
                        type=GenerationErrorType.BLOCKED_BY_CONFLICTS,
                        message=summary.summary,
                    ),
                )

        prompt = base_prompt
        attempts: List[AttemptRecord] = []
        best: Optional[GenerationResult] = None
        last_error: Optional[GenerationError] = None

        for attempt in range(1, self.max_attempts + 1):
            if attempt > 1 and self.retry_delay_seconds > 0:
                await asyncio.sleep(self.retry_delay_seconds)

            logger.info("Generation attempt", attempt=attempt, max_attempts=self.max_attempts)

            try:
                output = await self.generator(prompt)
            except GeneratorError as e:
                last_error = GenerationError(type=GenerationErrorType.GENERATOR_ERROR, message=str(e))
                self._record(attempts, AttemptRecord(
                    attempt=attempt,
                    outcome=AttemptOutcome.GENERATOR_ERROR,
                    message=str(e),
                ))
                logger.warning("Generator failed", attempt=attempt, error=str(e))
                continue

            try:
                plan = parse_plan_output(output)
            except PlanParseError as e:
                last_error = GenerationError(type=GenerationErrorType.PARSE_ERROR, message=str(e))
                self._record(attempts, AttemptRecord(
                    attempt=attempt,
                    outcome=AttemptOutcome.PARSE_ERROR,
                    message=str(e),
                ))
                logger.warning("Unparseable generator output", attempt=attempt)
                prompt = base_prompt + PROMPT_SEPARATOR + PARSE_RETRY_INSTRUCTION
                continue

            if plan.week_number != constraints.week_number:
                plan = plan.model_copy(update={"week_number": constraints.week_number})

            result = validate_and_fix(plan, constraints, self.report)
            self._record(attempts, _attempt_record(attempt, result))

            if result.success:
                logger.info(
                    "Plan accepted",
                    attempt=attempt,
                    score=result.validation_result.score,
                    auto_fixed=result.auto_fixed,
                )
                if self.report is not None:
                    self.report.set_result(
                        "accepted_with_warnings" if result.validation_result.warnings else "accepted"
                    )
                return result.model_copy(update={"attempts": attempts})

            if _is_better(result, best):
                best = result
            last_error = result.error
            prompt = base_prompt + PROMPT_SEPARATOR + result.error.regeneration_feedback

        logger.warning("Generation failed", attempts=self.max_attempts)
        if self.report is not None:
            self.report.set_result("rejected")

        if best is None:
            return GenerationResult(
                success=False,
                error=GenerationError(
                    type=last_error.type,
                    message=f"Failed after {self.max_attempts} attempt(s): {last_error.message}",
                ),
                attempts=attempts,
            )

        return GenerationResult(
            success=False,
            plan=best.plan,
            validation_result=best.validation_result,
            auto_fixed=best.auto_fixed,
            error=GenerationError(
                type=best.error.type,
                message=f"Failed to produce a valid plan after {self.max_attempts} attempt(s)",
                regeneration_feedback=best.error.regeneration_feedback,
            ),
            attempts=attempts,
        )

    def _record(self, attempts: List[AttemptRecord], record: AttemptRecord) -> None:
        attempts.append(record)
        if self.report is not None:
            self.report.add_attempt(record)
