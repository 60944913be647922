"""
Plan validation.

This module is the single entry point for checking a generated week. It runs
the soft target checks, the hard safety caps and the first-timer coverage
rule in one pass, collects every issue (never failing fast) and scores the
result. A plan is valid exactly when no error-type issue was found.
"""

import json
from pathlib import Path
from typing import List, Optional

from loguru import logger

from hyrox_guard.config import with_default_volume_targets
from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.safety import SafetyValidator
from hyrox_guard.safety_caps import HARD_SAFETY_CAPS, SafetyCaps
from hyrox_guard.schemas import (
    IssueType,
    ValidationConstraints,
    ValidationIssue,
    ValidationResult,
)
from hyrox_guard.targets import TargetValidator, check_first_timer_coverage
from hyrox_guard.volume import calculate_volumes


ERROR_PENALTY = 15
WARNING_PENALTY = 5


def calculate_score(issues: List[ValidationIssue]) -> int:
    """100 minus 15 per error and 5 per warning, never below 0."""
    errors = sum(1 for i in issues if i.type == IssueType.ERROR)
    warnings = sum(1 for i in issues if i.type == IssueType.WARNING)
    return max(0, 100 - errors * ERROR_PENALTY - warnings * WARNING_PENALTY)


class PlanValidator:
    """
    Validates generated plans against athlete constraints and safety caps.

    All checks run even when an earlier one fails, so the caller (and the
    regeneration feedback) sees the complete list of problems at once.
    Errors are listed before warnings; order within each type follows check
    order.
    """

    def __init__(self, constraints: ValidationConstraints, caps: SafetyCaps = HARD_SAFETY_CAPS):
        """
        Initialize validator with athlete constraints.

        Args:
            constraints: Targets and prior-week context for the week
            caps: Hard safety cap table
        """
        self.constraints = constraints
        self.caps = caps

    @classmethod
    def from_file(cls, constraints_path: Path) -> "PlanValidator":
        """
        Load constraints from a JSON file and create a validator.

        Volume ranges missing from the file come from the configured defaults.

        Args:
            constraints_path: Path to constraints JSON file

        Returns:
            PlanValidator instance

        Raises:
            FileNotFoundError: If the constraints file doesn't exist
            ValueError: If the constraints JSON is invalid
        """
        if not constraints_path.exists():
            raise FileNotFoundError(f"Constraints file not found: {constraints_path}")

        with open(constraints_path, "r") as f:
            constraints_data = json.load(f)

        try:
            constraints = ValidationConstraints(**with_default_volume_targets(constraints_data))
        except Exception as e:
            raise ValueError(f"Invalid constraints file: {e}")

        return cls(constraints)

    def validate(self, plan: GeneratedPlan) -> ValidationResult:
        """
        Validate a plan.

        Args:
            plan: Candidate plan (not modified)

        Returns:
            ValidationResult with score, issues and calculated volumes
        """
        volumes = calculate_volumes(plan, self.constraints.weak_stations)

        issues: List[ValidationIssue] = []
        issues.extend(TargetValidator(self.constraints).validate(plan, volumes))
        issues.extend(SafetyValidator(self.constraints, self.caps).validate(plan))
        issues.extend(check_first_timer_coverage(self.constraints, volumes))

        # Stable sort: errors first
        issues.sort(key=lambda i: 0 if i.type == IssueType.ERROR else 1)

        score = calculate_score(issues)
        valid = not any(i.type == IssueType.ERROR for i in issues)

        logger.info(
            "Plan validated",
            week=plan.week_number,
            valid=valid,
            score=score,
            errors=sum(1 for i in issues if i.type == IssueType.ERROR),
            warnings=sum(1 for i in issues if i.type == IssueType.WARNING),
        )

        return ValidationResult(
            valid=valid,
            score=score,
            issues=issues,
            calculated_volumes=volumes,
        )

    def display_validation_summary(self, result: ValidationResult, plan: Optional[GeneratedPlan] = None) -> str:
        """
        Generate human-readable validation summary.

        Args:
            result: The validation result
            plan: The validated plan, for the header

        Returns:
            Formatted summary string
        """
        return display_validation_summary(result, plan)


def display_validation_summary(result: ValidationResult, plan: Optional[GeneratedPlan] = None) -> str:
    """
    Generate human-readable validation summary.

    Args:
        result: The validation result
        plan: The validated plan, for the header

    Returns:
        Formatted summary string
    """
    lines = []
    lines.append("=" * 70)
    if plan is not None:
        lines.append(f"PLAN VALIDATION: Week {plan.week_number} ({plan.phase.value})")
    else:
        lines.append("PLAN VALIDATION")
    lines.append("=" * 70)
    lines.append("")

    if result.valid and not result.warnings:
        lines.append("✅ STATUS: VALID")
        lines.append("")
        lines.append("All safety caps and training targets are met.")
    elif result.valid:
        lines.append("⚠️  STATUS: VALID WITH WARNINGS")
        lines.append("")
        lines.append("Plan can be used, but consider these warnings:")
        for warning in result.warnings:
            lines.append(f"  • {warning.message}")
    else:
        lines.append("⛔ STATUS: INVALID")
        lines.append("")
        for i, error in enumerate(result.errors, 1):
            fixable = " (auto-fixable)" if error.auto_fixable else ""
            lines.append(f"  {i}. [{error.category.value}] {error.message}{fixable}")
        if result.warnings:
            lines.append("")
            lines.append("Warnings:")
            for warning in result.warnings:
                lines.append(f"  • {warning.message}")

    volumes = result.calculated_volumes
    lines.append("")
    lines.append(f"{'─' * 70}")
    lines.append(f"Running: {volumes.running_km:.1f} km")
    lines.append(f"SkiErg: {volumes.skierg_m:g} m | Rowing: {volumes.rowing_m:g} m")
    lines.append(f"Stations: {len(volumes.stations_present)}/8")
    if volumes.stations_missing:
        lines.append(f"Missing: {', '.join(s.value for s in volumes.stations_missing)}")

    lines.append("")
    lines.append("=" * 70)
    lines.append(f"Score: {result.score}/100")
    lines.append("=" * 70)

    return "\n".join(lines)


def validate_plan(
    plan: GeneratedPlan,
    constraints: ValidationConstraints,
    caps: Optional[SafetyCaps] = None,
) -> ValidationResult:
    """Validate a plan with a one-off PlanValidator."""
    return PlanValidator(constraints, caps or HARD_SAFETY_CAPS).validate(plan)
