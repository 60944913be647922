"""
Tests for the web API.

Every endpoint is exercised through FastAPI's TestClient with the shared
plan and constraint fixtures.
"""

import copy
import json
from pathlib import Path

import pytest
from fastapi.testclient import TestClient

from hyrox_guard.api.main import app
from hyrox_guard.config import get_settings

from conftest import load_fixture


@pytest.fixture
def client():
    return TestClient(app)


@pytest.fixture
def payload(plan_data):
    return {
        "plan": plan_data,
        "constraints": load_fixture("valid_constraints.json"),
    }


@pytest.fixture
def reports_dir(tmp_path, monkeypatch):
    """Point report output at a temporary directory."""
    monkeypatch.setenv("HYROX_GUARD_REPORTS_DIR", str(tmp_path))
    get_settings.cache_clear()
    yield tmp_path
    get_settings.cache_clear()


def set_wall_ball_reps(payload: dict, reps: int) -> dict:
    data = copy.deepcopy(payload)
    for day in data["plan"]["days"]:
        for exercise in day["exercises"]:
            if exercise["name"] == "Wall Balls":
                exercise["reps"] = reps
    return data


def test_root_and_health(client):
    assert client.get("/").json()["name"] == "HYROX Plan Guard API"
    assert client.get("/health").json() == {"status": "healthy", "service": "hyrox-plan-guard-api"}


def test_validate_valid_plan(client, payload):
    """
    TEST_CASE_001: Validate Endpoint

    Expected: Valid, score 100, summary text, no report
    """
    response = client.post("/api/validate", json=payload)

    assert response.status_code == 200
    body = response.json()
    assert body["valid"] is True
    assert body["score"] == 100
    assert "✅ STATUS: VALID" in body["summary"]
    assert body["report_path"] is None
    assert body["validation_result"]["issues"] == []


def test_validate_saves_report(client, payload, reports_dir):
    """
    TEST_CASE_002: Report Saving

    Expected: A JSON report is written when an athlete ID is given
    """
    response = client.post("/api/validate", json={**payload, "athlete_id": "api_athlete"})

    report_path = Path(response.json()["report_path"])
    assert report_path.parent == reports_dir
    assert report_path.name.startswith("report_api_athlete_week1_")
    assert report_path.exists()


def test_validate_invalid_plan(client, payload):
    data = set_wall_ball_reps(payload, 100)

    body = client.post("/api/validate", json=data).json()

    assert body["valid"] is False
    assert body["score"] == 85
    categories = [i["category"] for i in body["validation_result"]["issues"]]
    assert categories == ["safety_station_volume"]


def test_validate_fix(client, payload):
    """
    TEST_CASE_003: Fix Endpoint

    Expected: Repaired plan returned with success and auto_fixed set
    """
    data = set_wall_ball_reps(payload, 100)

    body = client.post("/api/validate/fix", json=data).json()

    assert body["success"] is True
    assert body["auto_fixed"] is True
    assert body["error"] is None
    assert body["validation_result"]["valid"] is True


def test_validate_fix_failure_is_not_http_error(client, payload):
    data = copy.deepcopy(payload)
    data["constraints"]["training_days"] = 4

    response = client.post("/api/validate/fix", json=data)

    assert response.status_code == 200
    body = response.json()
    assert body["success"] is False
    assert body["error"]["type"] == "validation_failed"
    assert "expected: 4" in body["error"]["regeneration_feedback"]


def test_parse_fenced_output(client, payload):
    """
    TEST_CASE_004: Raw Generator Output

    Expected: Fenced JSON is parsed and validated
    """
    output = "```json\n" + json.dumps(payload["plan"]) + "\n```"

    body = client.post(
        "/api/parse", json={"output": output, "constraints": payload["constraints"]}
    ).json()

    assert body["success"] is True
    assert body["plan"]["week_number"] == 1


def test_parse_error_is_bad_request(client, payload):
    response = client.post(
        "/api/parse", json={"output": "I could not build a plan.", "constraints": payload["constraints"]}
    )

    assert response.status_code == 400
    assert response.json()["error"]


def test_malformed_request(client, payload):
    """
    TEST_CASE_005: Request Validation

    Expected: 422 with the consistent error format
    """
    data = copy.deepcopy(payload)
    data["plan"]["phase"] = "offseason"

    response = client.post("/api/validate", json=data)

    assert response.status_code == 422
    body = response.json()
    assert body["error"] == "Invalid request"
    assert any("phase" in d["loc"] for d in body["details"])


def test_conflicts(client):
    """
    TEST_CASE_006: Conflict Endpoint

    Expected: ACL is blocking and generation cannot proceed
    """
    body = client.post("/api/conflicts", json=load_fixture("conflict_constraints_acl.json")).json()

    assert body["can_proceed"] is False
    assert [c["id"] for c in body["conflicts"]] == ["injury_acl"]
    assert body["summary"]["blocking_count"] == 1


def test_conflicts_empty(client):
    body = client.post("/api/conflicts", json={}).json()

    assert body["can_proceed"] is True
    assert body["conflicts"] == []


def test_categorize(client):
    body = client.post("/api/categorize", json={"names": ["Wallball Shots", "Plank"]}).json()

    wall_balls, plank = body["exercises"]
    assert wall_balls["normalized"] == "wall balls"
    assert wall_balls["label"] == "station:wall_balls"
    assert plank["label"] == "core"


def test_categorize_requires_names(client):
    assert client.post("/api/categorize", json={"names": []}).status_code == 422


def test_caps(client):
    caps = client.get("/api/caps").json()["caps"]

    assert caps["version"] == "2024.1"
    assert caps["max_wall_balls_per_week"]["intermediate"] == 250


def test_substitutions(client):
    """
    TEST_CASE_007: Substitutions Endpoint

    Expected: Substitutes plus a critical warning four weeks out
    """
    body = client.get("/api/substitutions/skierg", params={"weeks_until_race": 4}).json()

    assert body["station"] == "skierg"
    assert body["substitutions"]
    assert body["can_train_with_substitutes"] is True
    assert body["min_weeks_on_actual_equipment"] == 4
    assert [w["severity"] for w in body["race_prep_warnings"]] == ["critical"]


def test_unknown_station(client):
    response = client.get("/api/substitutions/tyre_flip")

    assert response.status_code == 404
    assert "Unknown station" in response.json()["error"]


def test_missing_volume_targets_use_defaults(client, payload):
    """
    TEST_CASE_008: Default Volume Targets

    Expected: Constraints without volume targets validate against the configured ranges
    """
    data = copy.deepcopy(payload)
    del data["constraints"]["volume_targets"]

    body = client.post("/api/validate", json=data).json()

    assert body["valid"] is True
    assert body["score"] == 100


def test_default_volume_targets_follow_settings(client, payload, monkeypatch):
    data = copy.deepcopy(payload)
    del data["constraints"]["volume_targets"]
    monkeypatch.setenv("HYROX_GUARD_DEFAULT_RUNNING_KM_MIN", "40")
    get_settings.cache_clear()
    try:
        body = client.post("/api/validate", json=data).json()
    finally:
        get_settings.cache_clear()

    assert body["valid"] is False
    categories = [i["category"] for i in body["validation_result"]["issues"]]
    assert "running_volume" in categories
