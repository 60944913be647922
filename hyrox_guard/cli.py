"""
Command-line interface for the plan guard.

Provides commands for:
- Plan validation (with optional auto-fix and report export)
- Pre-generation conflict detection
- Exercise categorization
- Equipment substitutions
- Hard safety cap lookup
"""

import json
from pathlib import Path
from typing import List, Optional

import typer
from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hyrox_guard.categorizer import categorize_exercise
from hyrox_guard.config import get_settings
from hyrox_guard.conflicts import detect_conflicts, summarize_conflicts
from hyrox_guard.logging_config import setup_logger
from hyrox_guard.normalizer import normalize_exercise_name
from hyrox_guard.orchestrator import PlanParseError, parse_plan_output, validate_and_fix
from hyrox_guard.plan_schemas import GeneratedPlan
from hyrox_guard.safety_caps import CAPPED_STATIONS, HARD_SAFETY_CAPS
from hyrox_guard.schemas import (
    ConflictConstraints,
    ConflictSeverity,
    ExperienceLevel,
    StationId,
    ValidationResult,
)
from hyrox_guard.substitutions import (
    MIN_WEEKS_FOR_ACTUAL_EQUIPMENT,
    can_train_with_substitutes,
    generate_race_prep_warnings,
    get_all_substitutions,
)
from hyrox_guard.trace import ValidationReportBuilder
from hyrox_guard.validator import PlanValidator

# Initialize Typer app and Rich console
app = typer.Typer(
    help="HYROX plan guard - safety caps, coverage checks and auto-fix for generated training weeks"
)
console = Console()


@app.callback()
def main(
    verbose: bool = typer.Option(False, "--verbose", "-v", help="Show debug logging"),
):
    """Configure logging before any command runs."""
    settings = get_settings()
    setup_logger(level="DEBUG" if verbose else settings.log_level, log_file=settings.log_file)


# ===== DISPLAY HELPER FUNCTIONS =====


def _load_json(path: Path, label: str) -> dict:
    try:
        with open(path, "r") as f:
            return json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        console.print(f"[red]✗ Failed to load {label}: {e}[/red]")
        raise typer.Exit(1)


def _display_validation_result(result: ValidationResult, title: str = "Validation Result"):
    """Display validation status panel, issue table and volumes."""
    if result.valid and not result.warnings:
        status = "[bold green]✅ VALID[/bold green]"
        detail = "All safety caps and training targets are met."
        border_color = "green"
    elif result.valid:
        status = "[bold yellow]⚠️  VALID WITH WARNINGS[/bold yellow]"
        detail = f"{len(result.warnings)} warning(s) identified."
        border_color = "yellow"
    else:
        status = "[bold red]⛔ INVALID[/bold red]"
        detail = f"{len(result.errors)} error(s) must be resolved."
        border_color = "red"

    console.print(
        Panel(
            f"{status}\n\n{detail}\n\nScore: [bold]{result.score}/100[/bold]",
            title=title,
            border_style=border_color,
        )
    )

    if result.issues:
        table = Table(show_header=True, header_style="bold cyan", box=box.ROUNDED)
        table.add_column("Type", justify="center")
        table.add_column("Category", style="cyan")
        table.add_column("Message")
        table.add_column("Fixable", justify="center")

        for issue in result.issues:
            type_cell = "[red]ERROR[/red]" if issue.is_error else "[yellow]WARNING[/yellow]"
            table.add_row(
                type_cell,
                issue.category.value,
                issue.message,
                "✓" if issue.auto_fixable else "",
            )
        console.print(table)

    volumes = result.calculated_volumes
    console.print("\n[bold]Calculated Volumes:[/bold]")
    console.print(f"  Running: {volumes.running_km:.1f} km")
    console.print(f"  SkiErg:  {volumes.skierg_m:g} m")
    console.print(f"  Rowing:  {volumes.rowing_m:g} m")
    console.print(f"  Stations: {len(volumes.stations_present)}/8")
    if volumes.stations_missing:
        missing = ", ".join(s.display_name for s in volumes.stations_missing)
        console.print(f"  Missing: [red]{missing}[/red]")


# ===== CLI COMMANDS =====


@app.command()
def validate(
    plan: Path = typer.Option(
        ...,
        "--plan",
        "-p",
        help="Path to generated plan JSON file",
        exists=True,
    ),
    constraints: Path = typer.Option(
        ...,
        "--constraints",
        "-c",
        help="Path to validation constraints JSON file",
        exists=True,
    ),
    fix: bool = typer.Option(
        False,
        "--fix",
        help="Apply auto-fixes and re-validate when errors are found",
    ),
    output: Optional[Path] = typer.Option(
        None,
        "--output",
        "-o",
        help="Write the (possibly fixed) plan to this JSON file",
    ),
    save_report: bool = typer.Option(
        False,
        "--save-report/--no-report",
        help="Save validation report to file",
    ),
    report_format: str = typer.Option(
        "json",
        "--report-format",
        "-f",
        help="Report output format (json or markdown)",
    ),
    athlete_id: str = typer.Option(
        "athlete",
        "--athlete-id",
        help="Athlete ID recorded in the report",
    ),
):
    """
    Validate a generated plan week against constraints and safety caps.
    """
    console.print("\n[bold cyan]🏃 HYROX Plan Guard[/bold cyan]\n")

    try:
        validator = PlanValidator.from_file(constraints)
        console.print(f"✓ Loaded constraints: [green]{validator.constraints.training_days} training days, "
                      f"{validator.constraints.experience_level.value}[/green]")
    except (FileNotFoundError, ValueError) as e:
        console.print(f"[red]✗ Failed to load constraints: {e}[/red]")
        raise typer.Exit(1)

    try:
        generated = parse_plan_output(plan.read_text())
        console.print(f"✓ Loaded plan: [green]Week {generated.week_number} ({generated.phase.value}), "
                      f"{len(generated.days)} days[/green]\n")
    except PlanParseError as e:
        console.print(f"[red]✗ Failed to load plan: {e}[/red]")
        raise typer.Exit(1)

    report = ValidationReportBuilder(athlete_id, validator.constraints)
    final_plan: GeneratedPlan = generated

    if fix:
        result = validate_and_fix(generated, validator.constraints, report)
        final_plan = result.plan
        if report.report.fixes_applied:
            console.print(f"[bold]Auto-fix applied {len(report.report.fixes_applied)} fix(es)[/bold]\n")
        _display_validation_result(result.validation_result)
        valid = result.success
    else:
        validation = validator.validate(generated)
        report.add_validation("initial", validation)
        _display_validation_result(validation)
        valid = validation.valid
        result = None

    if valid:
        warnings = report.report.passes[-1].issues
        report.set_result("accepted_with_warnings" if warnings else "accepted")
    else:
        report.set_result("rejected")
        if result is not None and result.error and result.error.regeneration_feedback:
            console.print(Panel(result.error.regeneration_feedback, title="Regeneration Feedback", border_style="red"))

    if output:
        with open(output, "w") as f:
            json.dump(final_plan.model_dump(mode="json", exclude_none=True), f, indent=2)
        console.print(f"\n✓ Plan saved: [cyan]{output}[/cyan]")

    if save_report:
        try:
            report_path = report.save_to_file(get_settings().reports_dir, format=report_format)
        except ValueError as e:
            console.print(f"[red]✗ {e}[/red]")
            raise typer.Exit(1)
        console.print(f"✓ Validation report saved: [cyan]{report_path}[/cyan]")

    console.print()
    if not valid:
        raise typer.Exit(1)


@app.command()
def conflicts(
    constraints: Path = typer.Option(
        ...,
        "--constraints",
        "-c",
        help="Path to conflict constraints JSON file",
        exists=True,
    ),
):
    """
    Detect conflicts between athlete constraints and race requirements.
    """
    data = _load_json(constraints, "constraints")
    try:
        conflict_constraints = ConflictConstraints(**data)
    except ValueError as e:
        console.print(f"[red]✗ Invalid constraints: {e}[/red]")
        raise typer.Exit(1)

    found = detect_conflicts(conflict_constraints)
    summary = summarize_conflicts(found)

    if not found:
        console.print("\n[green]✓ No conflicts detected[/green]\n")
        return

    colors = {
        ConflictSeverity.BLOCKING: "red",
        ConflictSeverity.WARNING: "yellow",
        ConflictSeverity.INFO: "blue",
    }
    console.print()
    for conflict in found:
        color = colors[conflict.severity]
        content = [conflict.description]
        if conflict.affected_stations:
            content.append(
                "\n[bold]Affected:[/bold] " + ", ".join(s.display_name for s in conflict.affected_stations)
            )
        if conflict.resolution_options:
            content.append("\n[bold]Options:[/bold]")
            for option in conflict.resolution_options:
                content.append(f"  • {option.label} - {option.description}")
        console.print(Panel(
            "\n".join(content),
            title=f"[{color}]{conflict.severity.value.upper()}[/{color}] {conflict.title}",
            border_style=color,
        ))

    console.print(f"\n[bold]{summary.summary}[/bold]")
    if summary.has_blocking:
        console.print("[red]⛔ Plan generation blocked until these are resolved.[/red]\n")
        raise typer.Exit(1)
    console.print()


@app.command()
def categorize(
    names: List[str] = typer.Argument(..., help="Exercise names to categorize"),
):
    """
    Show normalized names and categories for exercise names.
    """
    table = Table(title="Exercise Categories", box=box.ROUNDED)
    table.add_column("Input", style="cyan")
    table.add_column("Normalized")
    table.add_column("Category", style="green")

    for name in names:
        table.add_row(name, normalize_exercise_name(name), categorize_exercise(name).label)

    console.print(table)


@app.command()
def substitutions(
    station: StationId = typer.Argument(..., help="Station to show substitutes for"),
    weeks_until_race: Optional[int] = typer.Option(
        None,
        "--weeks",
        "-w",
        help="Weeks until race, for race-prep warnings",
    ),
):
    """
    List equipment substitutes for a station.
    """
    table = Table(title=f"{station.display_name} Substitutes", box=box.ROUNDED)
    table.add_column("Substitute", style="cyan")
    table.add_column("Effectiveness", justify="right")
    table.add_column("Race Impact", justify="center")
    table.add_column("Notes")

    for sub in get_all_substitutions(station):
        table.add_row(
            sub.substitute,
            f"{sub.effectiveness:.0%}",
            sub.race_readiness_impact.value,
            sub.notes,
        )
    console.print(table)

    trainable = "[green]yes[/green]" if can_train_with_substitutes(station) else "[red]no[/red]"
    console.print(f"\nTrainable with substitutes: {trainable}")
    console.print(f"Minimum weeks on real equipment: {MIN_WEEKS_FOR_ACTUAL_EQUIPMENT[station]}")

    if weeks_until_race is not None:
        for warning in generate_race_prep_warnings([station], weeks_until_race):
            console.print(f"\n[bold]{warning.severity.value.upper()}:[/bold] {warning.message}")
            console.print(f"  {warning.recommendation}")
    console.print()


@app.command()
def caps(
    level: Optional[ExperienceLevel] = typer.Option(
        None,
        "--level",
        "-l",
        help="Only show caps for this experience level",
    ),
):
    """
    Print the hard safety cap table.
    """
    levels = [level] if level else list(ExperienceLevel)
    c = HARD_SAFETY_CAPS

    table = Table(title=f"Hard Safety Caps (v{c.version})", box=box.ROUNDED)
    table.add_column("Cap", style="cyan")
    for lvl in levels:
        table.add_column(lvl.value.title(), justify="right")

    table.add_row("Single run (km)", *[f"{c.max_single_run_km.for_level(lvl):g}" for lvl in levels])
    for station in CAPPED_STATIONS:
        unit = "reps" if station in (StationId.WALL_BALLS, StationId.BURPEE_BROAD_JUMP) else "m"
        table.add_row(
            f"{station.display_name} per week ({unit})",
            *[f"{c.station_volume_cap(station, lvl):g}" for lvl in levels],
        )
    console.print(table)

    console.print(f"\nWeekly running increase: ≤ {c.max_weekly_running_increase_percent:g}%")
    console.print(f"High-intensity runs per week: ≤ {c.max_high_intensity_runs_per_week}")
    console.print(f"Consecutive hard days: ≤ {c.max_high_intensity_days_consecutive}")
    console.print(f"Rest days per week: ≥ {c.min_rest_days_per_week}")
    console.print(f"Easy days per week: ≥ {c.min_easy_days_per_week} "
                  f"(with {c.easy_day_rule_min_training_days}+ training days)")
    console.print(f"Consecutive training days: ≤ {c.max_consecutive_training_days}")
    console.print(f"Session duration: {c.min_session_duration_minutes}-{c.max_session_duration_minutes} min\n")


if __name__ == "__main__":
    app()
