"""
Regeneration feedback.

Turns a failed validation result into the plain-text instructions appended
to the next generation prompt.
"""

from hyrox_guard.schemas import IssueType, ValidationResult


FEEDBACK_HEADER = "The previous plan had the following issues that must be fixed:"
FEEDBACK_FOOTER = "Please regenerate the plan addressing ALL of these issues."

# Below this weekly distance the generator gets an explicit nudge towards running
LOW_RUNNING_GUIDANCE_KM = 10


def generate_regeneration_feedback(result: ValidationResult) -> str:
    """
    Build feedback text for the generator.

    Args:
        result: Validation result of the rejected candidate

    Returns:
        Multi-line feedback: one line per issue, then targeted guidance
    """
    lines = [FEEDBACK_HEADER, ""]

    for issue in result.issues:
        prefix = "❌ ERROR" if issue.type == IssueType.ERROR else "⚠️ WARNING"
        lines.append(f"{prefix}: {issue.message}")

    lines.append("")
    lines.append(FEEDBACK_FOOTER)
    lines.append("")

    volumes = result.calculated_volumes
    if volumes.running_km < LOW_RUNNING_GUIDANCE_KM:
        lines.append("Specific guidance: Add more running sessions. Running should be 60% of training focus.")

    if volumes.stations_missing:
        missing = ", ".join(s.value for s in volumes.stations_missing)
        lines.append(f"Specific guidance: Make sure to include: {missing}")

    return "\n".join(lines)
