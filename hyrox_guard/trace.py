"""
Validation report generation and export.

This module records what happened while a plan week was checked: every
validation pass, the fixes the auto-fix engine applied and every generation
attempt. Reports are exported to JSON and Markdown for human review and
auditability.
"""

import json
from pathlib import Path
from typing import Iterable, Optional

from hyrox_guard.schemas import (
    AttemptRecord,
    GenerationResult,
    IssueType,
    ValidationConstraints,
    ValidationIssue,
    ValidationPass,
    ValidationReport,
    ValidationResult,
)


def _constraints_digest(constraints: ValidationConstraints) -> dict:
    targets = constraints.volume_targets
    digest = {
        "training_days": constraints.training_days,
        "session_length_minutes": constraints.session_length_minutes,
        "running_km": [targets.weekly_running_km.min, targets.weekly_running_km.max],
        "skierg_m": [targets.weekly_skierg_meters.min, targets.weekly_skierg_meters.max],
        "rowing_m": [targets.weekly_rowing_meters.min, targets.weekly_rowing_meters.max],
        "weak_stations": [s.value for s in constraints.weak_stations],
        "injury_exercises_to_avoid": list(constraints.injury_exercises_to_avoid),
        "is_first_race": constraints.is_first_race,
    }
    if constraints.previous_week_volumes is not None:
        digest["previous_week_running_km"] = constraints.previous_week_volumes.running_km
    if constraints.previous_weeks_stations_covered:
        digest["previous_weeks_stations_covered"] = [
            s.value for s in constraints.previous_weeks_stations_covered
        ]
    return digest


class ValidationReportBuilder:
    """
    Builds and exports validation reports for one plan week.

    The report is the audit trail showing:
    - Which constraints the week was checked against
    - Every validation pass and the issues it found
    - Which issues the auto-fix engine acted on
    - How each generation attempt ended

    It is filled in as the orchestrator runs and never influences decisions.
    """

    def __init__(self, athlete_id: str, constraints: ValidationConstraints):
        """
        Initialize report builder.

        Args:
            athlete_id: ID of the athlete the plan is for
            constraints: Constraints the plan is validated against
        """
        self.report = ValidationReport(
            athlete_id=athlete_id,
            week_number=constraints.week_number,
            experience_level=constraints.experience_level,
            constraints_digest=_constraints_digest(constraints),
        )

    def add_validation(self, stage: str, result: ValidationResult) -> None:
        """
        Record a validation pass.

        Args:
            stage: Label such as "initial" or "after_auto_fix"
            result: Outcome of the pass
        """
        self.report.passes.append(ValidationPass(
            stage=stage,
            valid=result.valid,
            score=result.score,
            issues=list(result.issues),
        ))

    def add_fixes(self, issues: Iterable[ValidationIssue]) -> None:
        """Record the issues the auto-fix engine acted on."""
        for issue in issues:
            self.report.fixes_applied.append(f"{issue.category.value}: {issue.message}")

    def add_attempt(self, record: AttemptRecord) -> None:
        self.report.attempts.append(record)

    def set_result(self, result: str) -> None:
        """
        Set the final outcome.

        Args:
            result: One of "accepted", "accepted_with_warnings", "rejected"
        """
        self.report.result = result

    def export_to_json(self) -> dict:
        """
        Export report to JSON-serializable dictionary.

        Returns:
            Dictionary representation of the report
        """
        return self.report.model_dump(mode="json")

    def export_to_markdown(self) -> str:
        """
        Export report to human-readable Markdown format.

        Returns:
            Markdown-formatted report
        """
        report = self.report
        lines = []

        # Header
        lines.append("# Plan Validation Report")
        lines.append("")
        lines.append(f"**Timestamp:** {report.timestamp.strftime('%Y-%m-%d %H:%M:%S')}")
        lines.append(f"**Athlete:** `{report.athlete_id}`")
        lines.append(f"**Week:** {report.week_number}")
        lines.append(f"**Experience Level:** {report.experience_level.value}")
        lines.append(f"**Result:** **{report.result.upper()}**")
        lines.append("")
        lines.append("---")
        lines.append("")

        # Constraints
        lines.append("## Constraints")
        lines.append("")
        for key, value in report.constraints_digest.items():
            lines.append(f"- **{key.replace('_', ' ').title()}:** `{value}`")
        lines.append("")
        lines.append("---")
        lines.append("")

        # Attempts
        if report.attempts:
            lines.append("## Generation Attempts")
            lines.append("")
            lines.append("| Attempt | Outcome | Score | Errors | Warnings |")
            lines.append("|---------|---------|-------|--------|----------|")
            for a in report.attempts:
                score = "-" if a.score is None else str(a.score)
                lines.append(
                    f"| {a.attempt} | {a.outcome.value} | {score} | {a.error_count} | {a.warning_count} |"
                )
            lines.append("")
            lines.append("---")
            lines.append("")

        # Validation passes
        lines.append("## Validation Passes")
        lines.append("")

        if not report.passes:
            lines.append("*No validation passes recorded*")
            lines.append("")
        else:
            for i, vpass in enumerate(report.passes, 1):
                status = "✅ VALID" if vpass.valid else "⛔ INVALID"
                lines.append(f"### {i}. {vpass.stage} ({status}, score {vpass.score}/100)")
                lines.append("")

                errors = [x for x in vpass.issues if x.type == IssueType.ERROR]
                warnings = [x for x in vpass.issues if x.type == IssueType.WARNING]

                if not vpass.issues:
                    lines.append("No issues found.")
                    lines.append("")
                    continue

                if errors:
                    lines.append("**Errors:**")
                    for issue in errors:
                        fixable = " *(auto-fixable)*" if issue.auto_fixable else ""
                        lines.append(f"- `{issue.category.value}` {issue.message}{fixable}")
                    lines.append("")

                if warnings:
                    lines.append("**Warnings:**")
                    for issue in warnings:
                        lines.append(f"- `{issue.category.value}` {issue.message}")
                    lines.append("")

        lines.append("---")
        lines.append("")

        # Fixes
        if report.fixes_applied:
            lines.append("## Auto-Fixes Applied")
            lines.append("")
            for fix in report.fixes_applied:
                lines.append(f"- {fix}")
            lines.append("")
            lines.append("---")
            lines.append("")

        # Final Decision
        lines.append("## Final Decision")
        lines.append("")

        if report.result == "accepted":
            lines.append("✅ **ACCEPTED**")
            lines.append("")
            lines.append("All safety caps and training targets are met.")
        elif report.result == "accepted_with_warnings":
            lines.append("⚠️ **ACCEPTED WITH WARNINGS**")
            lines.append("")
            lines.append("No errors remain. Review the warnings above.")
        elif report.result == "rejected":
            lines.append("⛔ **REJECTED**")
            lines.append("")
            lines.append("No candidate passed validation. The plan must be regenerated.")
        else:
            lines.append("⏳ **PENDING**")

        lines.append("")
        return "\n".join(lines)

    def save_to_file(self, output_dir: Path, format: str = "json") -> Path:
        """
        Save report to file in specified format.

        Args:
            output_dir: Directory to save report file
            format: Output format ("json" or "markdown")

        Returns:
            Path to saved file

        Raises:
            ValueError: If format is not supported
        """
        if format not in ("json", "markdown"):
            raise ValueError(f"Unsupported format: {format}. Use 'json' or 'markdown'")

        output_dir.mkdir(parents=True, exist_ok=True)

        timestamp_str = self.report.timestamp.strftime("%Y%m%d_%H%M%S")
        athlete_id = self.report.athlete_id.replace(" ", "_")
        stem = f"report_{athlete_id}_week{self.report.week_number}_{timestamp_str}"

        if format == "json":
            filepath = output_dir / f"{stem}.json"
            with open(filepath, "w") as f:
                json.dump(self.export_to_json(), f, indent=2, default=str)
        else:
            filepath = output_dir / f"{stem}.md"
            with open(filepath, "w") as f:
                f.write(self.export_to_markdown())

        return filepath

    @classmethod
    def from_generation_result(
        cls,
        result: GenerationResult,
        athlete_id: str,
        constraints: ValidationConstraints,
    ) -> "ValidationReportBuilder":
        """
        Create a report from a finished GenerationResult.

        Only the final validation and the attempt log are available this way;
        intermediate passes are recorded when the builder is handed to the
        orchestrator instead.

        Args:
            result: Result from validate_and_fix or PlanOrchestrator.run
            athlete_id: Athlete ID
            constraints: Constraints used for validation

        Returns:
            ValidationReportBuilder with report populated
        """
        builder = cls(athlete_id, constraints)
        if result.validation_result is not None:
            builder.add_validation("final", result.validation_result)
        for record in result.attempts:
            builder.add_attempt(record)

        if not result.success:
            builder.set_result("rejected")
        elif result.validation_result is not None and result.validation_result.warnings:
            builder.set_result("accepted_with_warnings")
        else:
            builder.set_result("accepted")
        return builder


def save_report_from_result(
    result: GenerationResult,
    athlete_id: str,
    constraints: ValidationConstraints,
    output_dir: Path,
    format: str = "json",
) -> Path:
    """
    Convenience function to save a report for a GenerationResult.

    Returns:
        Path to saved file
    """
    builder = ValidationReportBuilder.from_generation_result(result, athlete_id, constraints)
    return builder.save_to_file(output_dir, format)


def load_report_from_file(filepath: Path) -> ValidationReport:
    """
    Load a validation report from JSON file.

    Args:
        filepath: Path to report JSON file

    Returns:
        ValidationReport object

    Raises:
        FileNotFoundError: If file doesn't exist
        ValueError: If JSON is invalid
    """
    if not filepath.exists():
        raise FileNotFoundError(f"Report file not found: {filepath}")

    with open(filepath, "r") as f:
        data = json.load(f)

    try:
        report = ValidationReport(**data)
    except Exception as e:
        raise ValueError(f"Invalid report file: {e}")

    return report
