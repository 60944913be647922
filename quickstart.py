#!/usr/bin/env python3
"""
Quick start script to demonstrate the HYROX plan guard.

This script shows the complete workflow:
1. Detect conflicts in the athlete's constraints
2. Run the generate/validate/fix loop against a scripted generator
3. Review equipment substitutions for missing kit
4. Save a validation report
"""

import asyncio
import json
from pathlib import Path

from rich import box
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from hyrox_guard.config import with_default_volume_targets
from hyrox_guard.conflicts import detect_conflicts, summarize_conflicts
from hyrox_guard.logging_config import setup_logger
from hyrox_guard.orchestrator import PlanOrchestrator
from hyrox_guard.schemas import ConflictConstraints, StationId, ValidationConstraints
from hyrox_guard.substitutions import get_best_substitution, summarize_race_prep
from hyrox_guard.trace import ValidationReportBuilder

console = Console()

SAMPLES = Path("samples")


def print_header(title: str):
    """Print a formatted header."""
    console.print(f"\n[bold cyan]{title}[/bold cyan]")
    console.print("=" * len(title))


class ScriptedGenerator:
    """Stands in for a language model: chatty prose first, then the sample plan."""

    def __init__(self, plan_text: str):
        self.outputs = ["Sure! Here is a great week of training for you.", f"```json\n{plan_text}\n```"]
        self.calls = 0

    async def __call__(self, prompt: str) -> str:
        self.calls += 1
        console.print(f"  [dim]generator call {self.calls} ({len(prompt)} prompt chars)[/dim]")
        return self.outputs.pop(0)


def main():
    """Run the complete demonstration workflow."""
    setup_logger(level="WARNING")

    console.print("\n[bold magenta]🏃 HYROX Plan Guard[/bold magenta]")
    console.print("[dim]Demonstration of complete workflow[/dim]\n")

    # ===== STEP 1: Conflict Detection =====
    print_header("Step 1: Detect Conflicts")

    with open(SAMPLES / "sample_conflicts.json") as f:
        conflict_constraints = ConflictConstraints(**json.load(f))

    conflicts = detect_conflicts(conflict_constraints)
    table = Table(title="Conflicts", box=box.ROUNDED)
    table.add_column("Severity", style="cyan")
    table.add_column("Title")
    table.add_column("Stations")
    for conflict in conflicts:
        table.add_row(
            conflict.severity.value,
            conflict.title,
            ", ".join(s.display_name for s in conflict.affected_stations),
        )
    console.print(table)
    console.print(f"[bold]{summarize_conflicts(conflicts).summary}[/bold]")

    # ===== STEP 2: Generate, Validate, Fix =====
    print_header("Step 2: Generate and Validate")

    with open(SAMPLES / "sample_constraints.json") as f:
        constraints = ValidationConstraints(**with_default_volume_targets(json.load(f)))

    report = ValidationReportBuilder("demo_athlete", constraints)
    generator = ScriptedGenerator((SAMPLES / "sample_plan.json").read_text())
    orchestrator = PlanOrchestrator(generator, retry_delay_seconds=0, report=report)

    result = asyncio.run(orchestrator.run(
        "Generate week 1 of a 12-week HYROX plan as JSON.",
        constraints,
        conflict_constraints,
    ))

    for attempt in result.attempts:
        score = f"score {attempt.score}" if attempt.score is not None else attempt.message or ""
        console.print(f"  Attempt {attempt.attempt}: [yellow]{attempt.outcome.value}[/yellow] {score}")

    if result.success:
        console.print(f"\n[green]✓ Plan accepted[/green] (auto-fixed: {result.auto_fixed})")
        for fix in report.report.fixes_applied:
            console.print(f"  • {fix}")
    else:
        console.print(f"\n[red]✗ {result.error.message}[/red]")

    # ===== STEP 3: Equipment Substitutions =====
    print_header("Step 3: Equipment Substitutions")

    missing = [StationId.SLED_PUSH, StationId.SLED_PULL, StationId.ROWING]
    for station in missing:
        sub = get_best_substitution(station, ["dumbbells", "bike erg"])
        console.print(f"  {station.display_name}: [green]{sub.substitute}[/green] ({sub.effectiveness:.0%})")

    prep = summarize_race_prep(missing, conflict_constraints.weeks_until_race or 12)
    console.print(f"\n[bold]{prep.summary}[/bold]")

    # ===== STEP 4: Save Report =====
    print_header("Step 4: Save Report")

    report_path = report.save_to_file(Path("reports"), format="markdown")
    console.print(f"✓ Report saved to: [cyan]{report_path}[/cyan]")

    # ===== COMPLETION =====
    console.print("\n")
    panel = Panel(
        "[green]✓[/green] Demonstration complete!\n\n"
        "The guard:\n"
        "  1. Flagged constraint conflicts before generation\n"
        "  2. Retried unparseable output and auto-fixed the plan\n"
        "  3. Suggested substitutes for missing equipment\n\n"
        "Check the reports/ directory for the validation report.",
        title="Summary",
        border_style="green",
    )
    console.print(panel)


if __name__ == "__main__":
    main()
