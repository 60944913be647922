"""
Exercise name normalization.

Generated plans name the same movement in many ways ("C2 Row 2000m",
"Concept2 Rower", "Rudern"). This module reduces a free-text name to the
canonical vocabulary the categorizer matches against:

1. lowercase and trim
2. strip inline metrics (sets x reps, distances, loads, rep counts,
   durations, "@ 80%")
3. map aliases (abbreviations, language variants, machine brands) to
   canonical names

Normalization is pure, total and idempotent.
"""

import re
from types import MappingProxyType
from typing import List, Mapping, Pattern, Tuple

from loguru import logger


# Number, optionally decimal and optionally a range ("2.5", "8-10")
_NUM = r"\d+(?:[.,]\d+)?(?:\s*[-–]\s*\d+(?:[.,]\d+)?)?"

INLINE_METRIC_PATTERNS: Tuple[Pattern[str], ...] = (
    re.compile(rf"{_NUM}\s*x\s*{_NUM}[a-z%]*"),  # 3x10, 4 x 8-10, 3x60s
    re.compile(rf"{_NUM}\s*x\b"),  # 3x max
    re.compile(rf"\bx\s*{_NUM}"),  # x100
    re.compile(rf"{_NUM}\s*(?:m|km|mi|meters?|metres?|kilometers?|kilometres?|miles?)\b"),
    re.compile(rf"{_NUM}\s*(?:kg|kgs|lbs?|pounds?)\b"),
    re.compile(rf"{_NUM}\s*(?:reps?|repetitions?)\b"),
    re.compile(rf"{_NUM}\s*(?:min|mins|minutes?|sec|secs|seconds?|s)\b"),
    re.compile(rf"{_NUM}\s*(?:sets?|rounds?)\b"),
    re.compile(rf"@\s*{_NUM}\s*%?"),
)

_WHITESPACE = re.compile(r"\s+")

_MAX_PASSES = 8


EXERCISE_NAME_ALIASES: Mapping[str, str] = MappingProxyType({
    # ----- SkiErg -----
    "ski erg": "skierg",
    "ski-erg": "skierg",
    "ski ergometer": "skierg",
    "ski machine": "skierg",
    "ski ergo": "skierg",
    "skiing erg": "skierg",
    "concept 2 ski": "skierg",
    "concept2 ski": "skierg",
    "concept2 skierg": "skierg",
    "concept 2 skierg": "skierg",
    "c2 ski": "skierg",
    "c2 skierg": "skierg",
    "c2 ski erg": "skierg",
    "nordic ski erg": "skierg",
    "skiergometer": "skierg",
    "ski-ergometer": "skierg",
    "ergomètre de ski": "skierg",
    "esquí erg": "skierg",

    # ----- Sled push -----
    "prowler": "sled push",
    "prowler push": "sled push",
    "sled push sprint": "sled push",
    "heavy sled push": "sled push",
    "pushing the sled": "sled push",
    "push sled": "sled push",
    "sled pushes": "sled push",
    "sled drive": "sled push",
    "schlitten schieben": "sled push",
    "schlittenschieben": "sled push",
    "poussée de traîneau": "sled push",
    "empuje de trineo": "sled push",

    # ----- Sled pull -----
    "prowler pull": "sled pull",
    "prowler drag": "sled pull",
    "sled drag": "sled pull",
    "rope sled pull": "sled pull",
    "hand over hand sled pull": "sled pull",
    "hand-over-hand sled pull": "sled pull",
    "hand-over-hand pull": "sled pull",
    "hand over hand pull": "sled pull",
    "pulling sled": "sled pull",
    "pulling the sled": "sled pull",
    "sled pulls": "sled pull",
    "sled rope pull": "sled pull",
    "schlitten ziehen": "sled pull",
    "schlittenziehen": "sled pull",
    "tirage de traîneau": "sled pull",
    "arrastre de trineo": "sled pull",

    # ----- Burpee broad jump -----
    "broad jump burpee": "burpee broad jump",
    "broad jump burpees": "burpee broad jump",
    "burpee broad jumps": "burpee broad jump",
    "burpee broad-jump": "burpee broad jump",
    "burpee broad-jumps": "burpee broad jump",
    "burpee + broad jump": "burpee broad jump",
    "burpee and broad jump": "burpee broad jump",
    "burpee long jump": "burpee broad jump",
    "burpee long jumps": "burpee broad jump",
    "burpee jump forward": "burpee broad jump",
    "bbj": "burpee broad jump",
    "bbjs": "burpee broad jump",
    "burpee weitsprung": "burpee broad jump",
    "burpee-weitsprung": "burpee broad jump",
    "burpee weitsprünge": "burpee broad jump",
    "burpee saut en longueur": "burpee broad jump",
    "burpee con salto largo": "burpee broad jump",

    # ----- Rowing -----
    "row": "rowing",
    "rower": "rowing",
    "rows": "rowing",
    "erg row": "rowing",
    "erg rowing": "rowing",
    "row erg": "rowing",
    "rowerg": "rowing",
    "concept 2 row": "rowing",
    "concept2 row": "rowing",
    "concept 2 rower": "rowing",
    "concept2 rower": "rowing",
    "concept2 rowerg": "rowing",
    "concept 2 rowerg": "rowing",
    "concept2 rowing": "rowing",
    "c2 row": "rowing",
    "c2 rower": "rowing",
    "c2 rowing": "rowing",
    "c2 rowerg": "rowing",
    "rowing machine": "rowing",
    "row machine": "rowing",
    "rowing ergometer": "rowing",
    "rowing erg": "rowing",
    "indoor rowing": "rowing",
    "indoor row": "rowing",
    "indoor rower": "rowing",
    "waterrower": "rowing",
    "water rower": "rowing",
    "skillrow": "rowing",
    "technogym skillrow": "rowing",
    "rudern": "rowing",
    "ruderergometer": "rowing",
    "rameur": "rowing",
    "remo": "rowing",
    "remo ergómetro": "rowing",

    # ----- Farmers carry -----
    "farmers walk": "farmers carry",
    "farmer walk": "farmers carry",
    "farmer carry": "farmers carry",
    "farmer's carry": "farmers carry",
    "farmer's walk": "farmers carry",
    "farmers' carry": "farmers carry",
    "farmers' walk": "farmers carry",
    "farmers carries": "farmers carry",
    "farmer carries": "farmers carry",
    "farmers walks": "farmers carry",
    "kettlebell farmers carry": "farmers carry",
    "kettlebell farmer carry": "farmers carry",
    "kb farmers carry": "farmers carry",
    "dumbbell farmers carry": "farmers carry",
    "db farmers carry": "farmers carry",
    "farmers handles carry": "farmers carry",
    "bauernlauf": "farmers carry",
    "farmers lauf": "farmers carry",
    "marche du fermier": "farmers carry",
    "paseo del granjero": "farmers carry",

    # ----- Sandbag lunges -----
    "sandbag lunge": "sandbag lunges",
    "sandbag walking lunge": "sandbag lunges",
    "sandbag walking lunges": "sandbag lunges",
    "sandbag lunge walk": "sandbag lunges",
    "sand bag lunges": "sandbag lunges",
    "sand bag lunge": "sandbag lunges",
    "sb lunge": "sandbag lunges",
    "sb lunges": "sandbag lunges",
    "walking sandbag lunges": "sandbag lunges",
    "sandsack ausfallschritte": "sandbag lunges",
    "sandsack-ausfallschritte": "sandbag lunges",
    "fentes avec sac de sable": "sandbag lunges",
    "zancadas con saco": "sandbag lunges",

    # ----- Wall balls -----
    "wall ball": "wall balls",
    "wallball": "wall balls",
    "wallballs": "wall balls",
    "wall-ball": "wall balls",
    "wall-balls": "wall balls",
    "wall ball shot": "wall balls",
    "wall ball shots": "wall balls",
    "wallball shot": "wall balls",
    "wallball shots": "wall balls",
    "wb": "wall balls",
    "wbs": "wall balls",
    "wandball": "wall balls",
    "wandbälle": "wall balls",
    "lancer de wall ball": "wall balls",
    "lanzamiento a la pared": "wall balls",

    # ----- Running -----
    "run": "running",
    "jog": "running",
    "jogging": "running",
    "treadmill run": "running",
    "treadmill running": "running",
    "outdoor run": "running",
    "road run": "running",
    "laufen": "running",
    "lauf": "running",
    "dauerlauf": "running",
    "correr": "running",
    "carrera": "running",
    "course à pied": "running",
    "footing": "running",
    "easy jog": "easy run",
    "steady run": "easy run",
    "base run": "easy run",
    "aerobic run": "easy run",
    "aerobic jog": "easy run",
    "conversational run": "easy run",
    "easy running": "easy run",
    "easy pace run": "easy run",
    "recovery jog": "recovery run",
    "recovery running": "recovery run",
    "shakeout run": "recovery run",
    "shake out run": "recovery run",
    "shakeout jog": "recovery run",
    "z2 run": "zone 2 run",
    "z2 jog": "zone 2 run",
    "zone2 run": "zone 2 run",
    "zone two run": "zone 2 run",
    "zone 2 jog": "zone 2 run",
    "zone 2 running": "zone 2 run",
    "tempo running": "tempo run",
    "threshold run": "tempo run",
    "threshold running": "tempo run",
    "lactate threshold run": "tempo run",
    "lt run": "tempo run",
    "lsd run": "long run",
    "long jog": "long run",
    "long easy run": "long run",
    "long slow run": "long run",
    "sunday long run": "long run",
    "long distance run": "long run",
    "run intervals": "interval run",
    "running intervals": "interval run",
    "interval running": "interval run",
    "track intervals": "interval run",
    "track workout": "interval run",
    "track session": "interval run",

    # ----- Strength: hinge -----
    "dl": "deadlift",
    "dls": "deadlift",
    "deadlifts": "deadlift",
    "conventional deadlift": "deadlift",
    "sumo deadlift": "deadlift",
    "trap bar deadlift": "deadlift",
    "hex bar deadlift": "deadlift",
    "barbell deadlift": "deadlift",
    "kreuzheben": "deadlift",
    "peso muerto": "deadlift",
    "soulevé de terre": "deadlift",
    "romanian deadlift": "rdl",
    "romanian deadlifts": "rdl",
    "stiff leg deadlift": "rdl",
    "stiff-leg deadlift": "rdl",
    "stiff legged deadlift": "rdl",
    "sldl": "rdl",
    "rdls": "rdl",
    "dumbbell rdl": "rdl",
    "db rdl": "rdl",
    "single leg rdl": "rdl",
    "kb swing": "kettlebell swing",
    "kb swings": "kettlebell swing",
    "kbs": "kettlebell swing",
    "kettlebell swings": "kettlebell swing",
    "russian swing": "kettlebell swing",
    "russian kettlebell swing": "kettlebell swing",
    "american swing": "kettlebell swing",
    "american kettlebell swing": "kettlebell swing",
    "hip thrusts": "hip thrust",
    "barbell hip thrust": "hip thrust",
    "glute bridges": "glute bridge",

    # ----- Strength: squat -----
    "back squat": "squat",
    "barbell squat": "squat",
    "bb squat": "squat",
    "air squat": "squat",
    "bodyweight squat": "squat",
    "goblet squat": "squat",
    "front squat": "squat",
    "box squat": "squat",
    "high bar squat": "squat",
    "low bar squat": "squat",
    "squats": "squat",
    "kniebeuge": "squat",
    "kniebeugen": "squat",
    "sentadilla": "squat",
    "sentadillas": "squat",
    "accroupissement": "squat",

    # ----- Strength: push -----
    "flat bench": "bench press",
    "flat bench press": "bench press",
    "barbell bench": "bench press",
    "barbell bench press": "bench press",
    "bb bench": "bench press",
    "bb bench press": "bench press",
    "bankdrücken": "bench press",
    "press de banca": "bench press",
    "db bench": "dumbbell bench press",
    "db bench press": "dumbbell bench press",
    "dumbbell bench": "dumbbell bench press",
    "pushup": "push-up",
    "pushups": "push-up",
    "push up": "push-up",
    "push ups": "push-up",
    "push-ups": "push-up",
    "press up": "push-up",
    "press ups": "push-up",
    "pressup": "push-up",
    "press-up": "push-up",
    "liegestütze": "push-up",
    "liegestütz": "push-up",
    "flexiones": "push-up",
    "pompes": "push-up",
    "ohp": "overhead press",
    "shoulder press": "overhead press",
    "military press": "overhead press",
    "strict press": "overhead press",
    "standing press": "overhead press",
    "barbell overhead press": "overhead press",
    "db shoulder press": "overhead press",
    "dumbbell shoulder press": "overhead press",
    "schulterdrücken": "overhead press",

    # ----- Strength: pull -----
    "pullup": "pull-up",
    "pullups": "pull-up",
    "pull up": "pull-up",
    "pull ups": "pull-up",
    "pull-ups": "pull-up",
    "strict pull-up": "pull-up",
    "strict pullup": "pull-up",
    "strict pull up": "pull-up",
    "klimmzug": "pull-up",
    "klimmzüge": "pull-up",
    "dominadas": "pull-up",
    "tractions": "pull-up",
    "chin up": "chin-up",
    "chinup": "chin-up",
    "chin ups": "chin-up",
    "chinups": "chin-up",
    "chin-ups": "chin-up",
    "lat pull down": "lat pulldown",
    "lat pull-down": "lat pulldown",
    "lat pulldowns": "lat pulldown",
    "bent-over row": "bent over row",
    "bent over rows": "bent over row",
    "bent-over rows": "bent over row",
    "bent over barbell row": "bent over row",
    "bb row": "barbell row",
    "barbell rows": "barbell row",
    "yates row": "barbell row",
    "db row": "dumbbell row",
    "db rows": "dumbbell row",
    "dumbbell rows": "dumbbell row",
    "single arm row": "dumbbell row",
    "single-arm row": "dumbbell row",
    "one arm row": "dumbbell row",
    "one-arm row": "dumbbell row",
    "renegade row": "dumbbell row",
    "renegade rows": "dumbbell row",
    "chest supported row": "dumbbell row",
    "chest-supported row": "dumbbell row",
    "seal row": "dumbbell row",
    "kroc row": "dumbbell row",
    "gorilla row": "dumbbell row",
    "kettlebell row": "dumbbell row",
    "kb row": "dumbbell row",
    "meadows row": "t-bar row",
    "landmine row": "t-bar row",
    "t bar row": "t-bar row",
    "tbar row": "t-bar row",
    "low cable row": "cable row",
    "high cable row": "cable row",
    "cable rows": "cable row",
    "seated cable row": "seated row",
    "seated rows": "seated row",
    "ring row": "inverted row",
    "ring rows": "inverted row",
    "trx row": "inverted row",
    "trx rows": "inverted row",
    "body row": "inverted row",
    "australian pull-up": "inverted row",
    "australian pullup": "inverted row",
    "inverted rows": "inverted row",
    "barbell upright row": "upright row",
    "upright rows": "upright row",
    "dead stop row": "pendlay row",
    "pendlay rows": "pendlay row",

    # ----- Cardio -----
    "assault bike": "air bike",
    "echo bike": "air bike",
    "rogue echo bike": "air bike",
    "airdyne": "air bike",
    "schwinn airdyne": "air bike",
    "fan bike": "air bike",
    "assault airbike": "air bike",
    "airbike": "air bike",
    "bikeerg": "bike erg",
    "c2 bikeerg": "bike erg",
    "concept2 bikeerg": "bike erg",
    "spin bike": "stationary bike",
    "spinning": "stationary bike",
    "indoor cycling": "stationary bike",
    "radfahren": "cycling",
    "ciclismo": "cycling",
    "skipping rope": "jump rope",
    "rope skipping": "jump rope",
    "double unders": "double under",
    "double-unders": "double under",
    "dus": "double under",
    "stair climber": "stairmaster",
    "stair machine": "stairmaster",
    "schwimmen": "swimming",
    "natación": "swimming",

    # ----- Core -----
    "situp": "sit-up",
    "situps": "sit-up",
    "sit up": "sit-up",
    "sit ups": "sit-up",
    "sit-ups": "sit-up",
    "dead bug": "deadbug",
    "dead bugs": "deadbug",
    "deadbugs": "deadbug",
    "bird dog": "birddog",
    "bird dogs": "birddog",
    "birddogs": "birddog",
    "v up": "v-up",
    "v ups": "v-up",
    "v-ups": "v-up",
    "toes to bar": "t2b",
    "toes-to-bar": "t2b",
    "ttb": "t2b",
    "hanging leg raise": "leg raise",
    "hanging leg raises": "leg raise",
    "leg raises": "leg raise",
    "hanging knee raise": "knee raise",
    "hanging knee raises": "knee raise",
    "knee raises": "knee raise",
    "planks": "plank",
    "front plank": "plank",
    "forearm plank": "plank",
    "unterarmstütz": "plank",
    "plancha": "plank",
    "gainage": "plank",
    "ab wheel rollout": "ab wheel",
    "ab rollout": "ab wheel",
    "ab roller": "ab wheel",
    "hollow hold": "hollow",
    "hollow body hold": "hollow",
    "hollow rock": "hollow",
    "pallof": "pallof press",
    "russian twists": "russian twist",
    "crunches": "crunch",
})


def _boundary_pattern(phrase: str) -> Pattern[str]:
    """Match a phrase only when it is not glued to other word characters."""
    return re.compile(rf"(?<![\w-]){re.escape(phrase)}(?![\w-])")


# Longest aliases first so "farmers walk" wins over shorter fragments
_ALIAS_PATTERNS: List[Tuple[str, str, Pattern[str]]] = [
    (alias, canonical, _boundary_pattern(alias))
    for alias, canonical in sorted(
        EXERCISE_NAME_ALIASES.items(), key=lambda item: (-len(item[0]), item[0])
    )
]

_CANONICAL_PATTERNS: List[Pattern[str]] = [
    _boundary_pattern(canonical)
    for canonical in sorted(set(EXERCISE_NAME_ALIASES.values()))
]


def strip_inline_metrics(text: str) -> str:
    """
    Remove numeric prescriptions from a lowercase exercise name.

    Args:
        text: Lowercase exercise name

    Returns:
        Name without sets x reps, distances, loads, durations or percentages,
        with whitespace collapsed
    """
    previous = None
    while previous != text:
        previous = text
        for pattern in INLINE_METRIC_PATTERNS:
            text = pattern.sub(" ", text)
        text = _WHITESPACE.sub(" ", text).strip()
    return text


def _protected_spans(text: str) -> List[Tuple[int, int]]:
    """Spans already spelled as a canonical name."""
    spans = []
    for pattern in _CANONICAL_PATTERNS:
        spans.extend(match.span() for match in pattern.finditer(text))
    return spans


def _replace_first_alias(text: str) -> str:
    """Replace the longest alias found outside canonical spans, once."""
    protected = _protected_spans(text)
    for _alias, canonical, pattern in _ALIAS_PATTERNS:
        for match in pattern.finditer(text):
            start, end = match.span()
            if any(p_start <= start and end <= p_end for p_start, p_end in protected):
                continue
            return text[:start] + canonical + text[end:]
    return text


def normalize_exercise_name(name: str) -> str:
    """
    Reduce a free-text exercise name to its canonical form.

    Exact alias matches win. Otherwise the longest alias occurring as a whole
    phrase is replaced, skipping occurrences that are already part of a
    canonical name (so "bent over row" keeps its "row"). Replacement repeats
    until the name stops changing, which makes the function idempotent.

    Args:
        name: Exercise name as written by the generator

    Returns:
        Canonical name; unknown names pass through lowercased and stripped
    """
    if not name:
        return ""

    text = strip_inline_metrics(name.lower().strip())

    for _ in range(_MAX_PASSES):
        updated = EXERCISE_NAME_ALIASES.get(text) or _replace_first_alias(text)
        if updated == text:
            break
        text = updated
    else:
        logger.warning("Exercise name did not settle during normalization", name=name, result=text)

    return text
