"""
Exercise categorization.

Every exercise is classified by ordered, first-match-wins rules over its
normalized name. Each rule has an inclusion list and an exclusion list of
substrings, plus short keywords that must appear as whole words; a rule fires
when any inclusion matches and no exclusion does.
Rules are evaluated in priority order:

    warm-up -> stations -> running -> core -> mobility -> strength -> cardio -> other

Earlier rules take precedence, so "Sandbag Lunges" is a station before it can
be a lunge and "Bent Over Row" is excluded from the rowing station before the
strength rules see it.
"""

import re
from typing import Optional, Tuple

from pydantic import BaseModel, ConfigDict

from hyrox_guard.normalizer import normalize_exercise_name
from hyrox_guard.schemas import (
    CardioModality,
    ExerciseCategory,
    ExerciseKind,
    RunningSubtype,
    StationId,
    StrengthCategory,
)


class CategoryRule(BaseModel):
    """Inclusion-minus-exclusion rule producing one category."""

    model_config = ConfigDict(frozen=True)

    category: ExerciseCategory
    patterns: Tuple[str, ...]
    exclude: Tuple[str, ...] = ()
    # Short keywords that only count as whole words ("row" but not "narrow")
    words: Tuple[str, ...] = ()

    def matches(self, name: str) -> bool:
        included = any(p in name for p in self.patterns) or any(
            re.search(rf"\b{re.escape(w)}\b", name) for w in self.words
        )
        if not included:
            return False
        return not any(e in name for e in self.exclude)


def _station(station: StationId, patterns, exclude=(), words=()) -> CategoryRule:
    return CategoryRule(
        category=ExerciseCategory(kind=ExerciseKind.STATION, station=station),
        patterns=tuple(patterns),
        exclude=tuple(exclude),
        words=tuple(words),
    )


def _strength(category: StrengthCategory, patterns, exclude=()) -> CategoryRule:
    return CategoryRule(
        category=ExerciseCategory(kind=ExerciseKind.STRENGTH, strength_category=category),
        patterns=tuple(patterns),
        exclude=tuple(exclude),
    )


def _cardio(modality: CardioModality, patterns) -> CategoryRule:
    return CategoryRule(
        category=ExerciseCategory(kind=ExerciseKind.CARDIO, cardio_modality=modality),
        patterns=tuple(patterns),
    )


def _plain(kind: ExerciseKind, patterns) -> CategoryRule:
    return CategoryRule(category=ExerciseCategory(kind=kind), patterns=tuple(patterns))


# ============================================================================
# Rule tables
# ============================================================================

WARMUP_RULE = _plain(ExerciseKind.WARMUP, ["warm-up", "warmup", "warm up", "activation", "prep"])

STATION_RULES: Tuple[CategoryRule, ...] = (
    _station(
        StationId.SKIERG,
        ["skierg", "ski erg", "ski-erg", "ski machine"],
        exclude=["cross country ski"],
    ),
    _station(
        StationId.SLED_PUSH,
        ["sled push", "prowler push", "pushing sled"],
        exclude=["sled pull"],
    ),
    _station(
        StationId.SLED_PULL,
        ["sled pull", "rope pull", "hand-over-hand", "hand over hand", "pulling sled"],
        exclude=["sled push"],
    ),
    _station(
        StationId.BURPEE_BROAD_JUMP,
        ["burpee broad jump", "broad jump burpee", "bbj"],
    ),
    _station(
        StationId.ROWING,
        ["rowing", "rower", "erg row", "concept2", "c2 row"],
        words=["row", "rows"],
        exclude=[
            "bent over row", "barbell row", "dumbbell row", "cable row",
            "upright row", "t-bar row", "seated row", "pendlay row",
            "inverted row", "row variation", "throw",
        ],
    ),
    _station(
        StationId.FARMERS_CARRY,
        ["farmer", "farmers carry", "farmer carry", "farmers walk", "farmer walk"],
    ),
    _station(
        StationId.SANDBAG_LUNGES,
        ["sandbag lunge", "sandbag lunges", "sb lunge", "sb lunges"],
    ),
    _station(
        StationId.WALL_BALLS,
        ["wall ball", "wallball", "wall balls", "wallballs", "wall ball shot"],
        exclude=["medicine ball", "med ball"],
    ),
)

RUNNING_RULE = CategoryRule(
    category=ExerciseCategory(kind=ExerciseKind.RUNNING),
    patterns=("run", "running", "jog", "jogging", "sprint", "sprinting"),
    exclude=("burpee", "jump", "sled", "crunch", "trunk"),
)

# Checked in order; the first subtype with a matching keyword wins
RUNNING_SUBTYPE_PATTERNS: Tuple[Tuple[RunningSubtype, Tuple[str, ...]], ...] = (
    (RunningSubtype.EASY, ("easy run", "recovery run", "zone 2", "z2", "conversational")),
    (RunningSubtype.TEMPO, ("tempo run", "tempo", "threshold")),
    (RunningSubtype.INTERVAL, ("interval", "repeat", "1km", "800m", "400m", "speed work", "fartlek")),
    (RunningSubtype.LONG, ("long run", "lsd", "long slow distance", "endurance run")),
)

CORE_RULE = _plain(
    ExerciseKind.CORE,
    [
        "plank", "dead bug", "deadbug", "bird dog", "birddog", "hollow", "pallof",
        "anti-rotation", "ab wheel", "sit-up", "situp", "crunch", "russian twist",
        "leg raise", "knee raise", "hanging", "v-up", "toes to bar", "t2b", "l-sit",
        "side plank", "woodchop", "cable rotation",
    ],
)

MOBILITY_RULE = _plain(
    ExerciseKind.MOBILITY,
    [
        "stretch", "mobility", "foam roll", "lacrosse ball", "yoga", "hip circle",
        "90/90", "couch stretch", "pigeon", "cat cow", "thoracic", "ankle mobility",
        "hip opener", "dynamic stretch",
    ],
)

STRENGTH_RULES: Tuple[CategoryRule, ...] = (
    _strength(
        StrengthCategory.SQUAT,
        ["squat", "leg press", "hack squat"],
        exclude=["split squat", "pistol"],
    ),
    _strength(
        StrengthCategory.HINGE,
        [
            "deadlift", "rdl", "romanian deadlift", "hip thrust", "good morning",
            "kettlebell swing", "kb swing", "hip hinge", "glute bridge",
        ],
    ),
    _strength(
        StrengthCategory.HORIZONTAL_PUSH,
        [
            "bench press", "bench", "push-up", "pushup", "push up", "dumbbell press",
            "db press", "floor press", "chest press",
        ],
        exclude=["overhead", "shoulder", "incline"],
    ),
    _strength(
        StrengthCategory.HORIZONTAL_PULL,
        [
            "bent over row", "barbell row", "dumbbell row", "db row", "cable row",
            "seated row", "t-bar row", "pendlay row", "inverted row",
        ],
        exclude=["upright row"],
    ),
    _strength(
        StrengthCategory.VERTICAL_PUSH,
        [
            "overhead press", "ohp", "shoulder press", "military press", "push press",
            "jerk", "landmine press", "arnold press",
        ],
    ),
    _strength(
        StrengthCategory.VERTICAL_PULL,
        [
            "pull-up", "pullup", "pull up", "chin-up", "chinup", "chin up",
            "lat pulldown", "lat pull-down", "pulldown",
        ],
    ),
    _strength(
        StrengthCategory.LUNGE,
        ["lunge", "split squat", "bulgarian", "step up", "step-up", "pistol"],
        exclude=["sandbag"],
    ),
    _strength(
        StrengthCategory.CARRY,
        ["carry", "walk", "suitcase"],
        exclude=["farmer", "farmers"],
    ),
    _strength(
        StrengthCategory.ACCESSORY,
        [
            "curl", "tricep", "extension", "fly", "flye", "raise", "shrug", "calf",
            "forearm", "wrist", "face pull", "band pull", "external rotation",
            "internal rotation", "rotator", "prehab", "upright row",
        ],
    ),
)

CARDIO_RULES: Tuple[CategoryRule, ...] = (
    _cardio(
        CardioModality.BIKE,
        ["bike", "cycling", "cycle", "assault bike", "air bike", "echo bike", "spin", "stationary bike"],
    ),
    _cardio(CardioModality.SWIM, ["swim", "swimming", "pool"]),
    _cardio(CardioModality.ELLIPTICAL, ["elliptical", "cross trainer"]),
    _cardio(CardioModality.STAIR_CLIMBER, ["stair", "stairs", "stairmaster", "step mill"]),
    _cardio(
        CardioModality.JUMP_ROPE,
        ["jump rope", "skipping", "skip rope", "double under"],
    ),
)

OTHER_CATEGORY = ExerciseCategory(kind=ExerciseKind.OTHER)


# ============================================================================
# Categorization
# ============================================================================

def running_subtype(normalized_name: str) -> Optional[RunningSubtype]:
    """Detect the running subtype from a normalized name, if any."""
    for subtype, patterns in RUNNING_SUBTYPE_PATTERNS:
        if any(p in normalized_name for p in patterns):
            return subtype
    return None


def categorize_normalized(normalized_name: str) -> ExerciseCategory:
    """
    Categorize an already-normalized name.

    Args:
        normalized_name: Output of normalize_exercise_name

    Returns:
        The category of the first matching rule, or `other`
    """
    if WARMUP_RULE.matches(normalized_name):
        return WARMUP_RULE.category

    for rule in STATION_RULES:
        if rule.matches(normalized_name):
            return rule.category

    if RUNNING_RULE.matches(normalized_name):
        return ExerciseCategory(
            kind=ExerciseKind.RUNNING,
            running_subtype=running_subtype(normalized_name),
        )

    for rule in (CORE_RULE, MOBILITY_RULE, *STRENGTH_RULES, *CARDIO_RULES):
        if rule.matches(normalized_name):
            return rule.category

    return OTHER_CATEGORY


def categorize_exercise(name: str) -> ExerciseCategory:
    """
    Classify a free-text exercise name into the closed category taxonomy.

    Total: unknown names fall through to `other`.

    Args:
        name: Exercise name as written in the plan

    Returns:
        ExerciseCategory for the name
    """
    return categorize_normalized(normalize_exercise_name(name))


def get_station_id(name: str) -> Optional[StationId]:
    """Return the station an exercise trains, or None for non-station work."""
    return categorize_exercise(name).station


def is_station_exercise(name: str) -> bool:
    return categorize_exercise(name).kind == ExerciseKind.STATION


def is_running_exercise(name: str) -> bool:
    return categorize_exercise(name).kind == ExerciseKind.RUNNING


def is_strength_exercise(name: str) -> bool:
    return categorize_exercise(name).kind == ExerciseKind.STRENGTH
