"""
Tests for the command-line interface.
"""

import json

import pytest
from loguru import logger
from typer.testing import CliRunner

from hyrox_guard.cli import app
from hyrox_guard.config import get_settings

from conftest import FIXTURES_DIR, load_fixture


runner = CliRunner()

PLAN = str(FIXTURES_DIR / "valid_plan.json")
CONSTRAINTS = str(FIXTURES_DIR / "valid_constraints.json")


@pytest.fixture(autouse=True)
def reset_logging():
    yield
    logger.remove()


@pytest.fixture
def heavy_wall_balls_plan(tmp_path):
    """Plan file whose wall-ball volume breaks the intermediate cap."""
    data = load_fixture("valid_plan.json")
    for day in data["days"]:
        for exercise in day["exercises"]:
            if exercise["name"] == "Wall Balls":
                exercise["reps"] = 100
    path = tmp_path / "plan.json"
    path.write_text(json.dumps(data))
    return path


def test_validate_valid_plan():
    """
    TEST_CASE_001: Validate Command

    Expected: Exit code 0 and a valid status
    """
    result = runner.invoke(app, ["validate", "--plan", PLAN, "--constraints", CONSTRAINTS])

    assert result.exit_code == 0
    assert "VALID" in result.output
    assert "Score: 100/100" in result.output


def test_validate_invalid_plan_exits_nonzero(heavy_wall_balls_plan):
    result = runner.invoke(
        app, ["validate", "--plan", str(heavy_wall_balls_plan), "--constraints", CONSTRAINTS]
    )

    assert result.exit_code == 1
    assert "INVALID" in result.output


def test_validate_fix_writes_plan(heavy_wall_balls_plan, tmp_path):
    """
    TEST_CASE_002: Auto-Fix From The CLI

    Expected: Fixed plan written to --output with reduced wall-ball reps
    """
    output = tmp_path / "fixed.json"

    result = runner.invoke(app, [
        "validate",
        "--plan", str(heavy_wall_balls_plan),
        "--constraints", CONSTRAINTS,
        "--fix",
        "--output", str(output),
    ])

    assert result.exit_code == 0
    assert "Auto-fix applied 1 fix(es)" in result.output
    fixed = json.loads(output.read_text())
    reps = [
        e["reps"] for d in fixed["days"] for e in d["exercises"] if e["name"] == "Wall Balls"
    ]
    assert reps and reps[0] < 100


def test_validate_saves_markdown_report(tmp_path, monkeypatch):
    monkeypatch.setenv("HYROX_GUARD_REPORTS_DIR", str(tmp_path))
    get_settings.cache_clear()
    try:
        result = runner.invoke(app, [
            "validate", "--plan", PLAN, "--constraints", CONSTRAINTS,
            "--save-report", "--report-format", "markdown",
        ])
    finally:
        get_settings.cache_clear()

    assert result.exit_code == 0
    reports = list(tmp_path.glob("*.md"))
    assert len(reports) == 1


def test_validate_unparseable_plan(tmp_path):
    plan = tmp_path / "plan.txt"
    plan.write_text("no plan here")

    result = runner.invoke(app, ["validate", "--plan", str(plan), "--constraints", CONSTRAINTS])

    assert result.exit_code == 1
    assert "Failed to load plan" in result.output


def test_conflicts_blocking():
    """
    TEST_CASE_003: Conflicts Command

    Expected: Blocking ACL conflict exits with code 1
    """
    result = runner.invoke(
        app, ["conflicts", "--constraints", str(FIXTURES_DIR / "conflict_constraints_acl.json")]
    )

    assert result.exit_code == 1
    assert "BLOCKING" in result.output
    assert "blocked" in result.output


def test_conflicts_none(tmp_path):
    path = tmp_path / "constraints.json"
    path.write_text("{}")

    result = runner.invoke(app, ["conflicts", "--constraints", str(path)])

    assert result.exit_code == 0
    assert "No conflicts detected" in result.output


def test_categorize():
    result = runner.invoke(app, ["categorize", "Wallball Shots"])

    assert result.exit_code == 0
    assert "station:wall_balls" in result.output


def test_substitutions_with_warning():
    result = runner.invoke(app, ["substitutions", "skierg", "--weeks", "4"])

    assert result.exit_code == 0
    assert "CRITICAL" in result.output
    assert "Minimum weeks on real equipment: 4" in result.output


def test_caps_single_level():
    result = runner.invoke(app, ["caps", "--level", "beginner"])

    assert result.exit_code == 0
    assert "Hard Safety Caps" in result.output
    assert "Advanced" not in result.output


def test_validate_without_volume_targets(tmp_path):
    """
    TEST_CASE_004: Default Volume Targets

    Expected: A constraints file with no volume targets still validates
    """
    data = load_fixture("valid_constraints.json")
    del data["volume_targets"]
    path = tmp_path / "constraints.json"
    path.write_text(json.dumps(data))

    result = runner.invoke(app, ["validate", "--plan", PLAN, "--constraints", str(path)])

    assert result.exit_code == 0
    assert "Score: 100/100" in result.output
