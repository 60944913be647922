"""
Tests for exercise name normalization.

Test scenarios:
1. Inline metrics are stripped
2. Aliases map to canonical names
3. Canonical names containing an alias are left alone
4. Normalization is idempotent and total
"""

import pytest

from hyrox_guard.normalizer import normalize_exercise_name, strip_inline_metrics


def test_strip_inline_metrics():
    """
    TEST_CASE_001: Metric Stripping

    Sets x reps, distances, loads and durations are not part of the name.
    Expected: Only the movement words remain
    """
    assert strip_inline_metrics("back squat 4x6 80kg") == "back squat"
    assert strip_inline_metrics("skierg 500m") == "skierg"
    assert strip_inline_metrics("easy run 30 min") == "easy run"
    assert strip_inline_metrics("wall balls 3 x 20") == "wall balls"


@pytest.mark.parametrize("raw,expected", [
    ("C2 Row 2000m", "rowing"),
    ("Concept2 Rower", "rowing"),
    ("Rudern", "rowing"),
    ("Farmers Walk", "farmers carry"),
    ("BBJ", "burpee broad jump"),
    ("Prowler Push", "sled push"),
    ("Wallball Shots", "wall balls"),
    ("Run 5km", "running"),
    ("Back Squat 4x6", "squat"),
])
def test_aliases_map_to_canonical(raw, expected):
    """
    TEST_CASE_002: Alias Mapping

    Brands, abbreviations and other languages resolve to one canonical name.
    Expected: Canonical name returned
    """
    assert normalize_exercise_name(raw) == expected


def test_canonical_name_keeps_embedded_alias():
    """
    TEST_CASE_003: Protected Canonical Names

    "row" is an alias for rowing, but "bent over row" is already canonical.
    Expected: Name left unchanged
    """
    assert normalize_exercise_name("Bent Over Row 3x10") == "bent over row"
    assert normalize_exercise_name("Easy Run") == "easy run"


@pytest.mark.parametrize("raw", [
    "C2 Row 2000m",
    "Sandbag Walking Lunges",
    "Tempo Running",
    "Bent-Over Rows",
    "Hand Over Hand Sled Pull",
    "Turkish Get-Up",
])
def test_normalization_is_idempotent(raw):
    """
    TEST_CASE_004: Idempotence

    Expected: Normalizing a normalized name changes nothing
    """
    once = normalize_exercise_name(raw)
    assert normalize_exercise_name(once) == once


def test_unknown_and_empty_names():
    """
    TEST_CASE_005: Total Function

    Expected: Unknown names are lowercased and trimmed; empty input gives ""
    """
    assert normalize_exercise_name("  Turkish Get-Up ") == "turkish get-up"
    assert normalize_exercise_name("") == ""
