"""
Equipment substitutions and race-prep warnings.

Athletes without race equipment can train most stations with substitutes,
but each station needs a minimum number of weeks on the real thing before
race day. This module holds the substitute table and turns "which stations
are trained on substitutes" plus "weeks until race" into warnings.
"""

from enum import Enum
from types import MappingProxyType
from typing import Dict, Iterable, List, Mapping, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from hyrox_guard.schemas import StationId


class RaceReadinessImpact(str, Enum):
    """How much relying on a substitute hurts race readiness."""
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class RacePrepSeverity(str, Enum):
    CRITICAL = "critical"
    WARNING = "warning"
    INFO = "info"


class EquipmentSubstitution(BaseModel):
    """A substitute exercise for one station."""

    model_config = ConfigDict(frozen=True)

    station: StationId
    original_equipment: str
    substitute: str
    effectiveness: float = Field(..., ge=0, le=1, description="How close to the race experience (0-1)")
    notes: str
    race_readiness_impact: RaceReadinessImpact


class RacePrepWarning(BaseModel):
    """Reminder to get onto real equipment before race day."""

    station: StationId
    severity: RacePrepSeverity
    message: str
    recommendation: str
    weeks_until_required: int


class RacePrepSummary(BaseModel):
    ready_for_race: bool
    critical_warnings: int
    warnings: int
    stations_needing_attention: List[StationId] = Field(default_factory=list)
    summary: str


def _subs(station: StationId, original: str, rows) -> Tuple[EquipmentSubstitution, ...]:
    return tuple(
        EquipmentSubstitution(
            station=station,
            original_equipment=original,
            substitute=substitute,
            effectiveness=effectiveness,
            notes=notes,
            race_readiness_impact=impact,
        )
        for substitute, effectiveness, notes, impact in rows
    )


_HIGH = RaceReadinessImpact.HIGH
_MEDIUM = RaceReadinessImpact.MEDIUM
_LOW = RaceReadinessImpact.LOW

STATION_SUBSTITUTIONS: Mapping[StationId, Tuple[EquipmentSubstitution, ...]] = MappingProxyType({
    StationId.SKIERG: _subs(StationId.SKIERG, "Concept2 SkiErg", [
        ("Battle Ropes (overhead pattern)", 0.6,
         "Focus on hip hinge and arm drive. Does not replicate resistance profile.", _HIGH),
        ("Cable Machine Lat Pulldown Intervals", 0.5,
         "Stand and perform intervals. Replicates pull pattern but not cardiovascular demand.", _HIGH),
        ("Kettlebell Swings + Band Pull-aparts Superset", 0.4,
         "Hip hinge + pulling. Does not replicate the specific SkiErg movement.", _HIGH),
    ]),
    StationId.SLED_PUSH: _subs(StationId.SLED_PUSH, "Hyrox Sled (152kg men / 102kg women)", [
        ("Prowler Push", 0.9,
         "Very similar. May have different friction coefficient than Hyrox track.", _LOW),
        ("Car Push (in neutral)", 0.7,
         "Good for leg drive practice. Weight may vary significantly.", _MEDIUM),
        ("Heavy Lunges", 0.4,
         "Builds leg strength but doesn't replicate pushing posture.", _HIGH),
        ("Wall Push Isometrics", 0.3,
         "Leg drive only. No movement or cardiovascular component.", _HIGH),
    ]),
    StationId.SLED_PULL: _subs(StationId.SLED_PULL, "Hyrox Sled with Rope (same weight as push)", [
        ("Rope Climb (seated on ground)", 0.5,
         "Hand-over-hand pattern but no horizontal resistance.", _MEDIUM),
        ("Cable Face Pulls / Rows", 0.4,
         "Pulling pattern but different body position and no rope.", _HIGH),
        ("Resistance Band Seated Rows", 0.3,
         "Pulling motion only. Resistance profile completely different.", _HIGH),
    ]),
    StationId.BURPEE_BROAD_JUMP: _subs(StationId.BURPEE_BROAD_JUMP, "Open floor space (80m total)", [
        ("Standard Burpee Broad Jumps", 1.0,
         "This requires no special equipment! Just floor space.", _LOW),
        ("Burpees + Standing Long Jumps (separate)", 0.6,
         "If space limited. Does not practice the transition.", _MEDIUM),
    ]),
    StationId.ROWING: _subs(StationId.ROWING, "Concept2 RowErg", [
        ("Other Rowing Machine (WaterRower, etc)", 0.8,
         "Different resistance feel but similar movement pattern.", _LOW),
        ("Bike Erg Intervals", 0.5,
         "Cardiovascular benefit but completely different movement.", _HIGH),
        ("Ring Rows / TRX Rows", 0.3,
         "Pulling pattern only. No leg drive or cardiovascular component.", _HIGH),
    ]),
    StationId.FARMERS_CARRY: _subs(StationId.FARMERS_CARRY, "Farmers Handles (32kg men / 24kg women each hand)", [
        ("Heavy Dumbbells", 0.9,
         "Very similar. May have different grip diameter.", _LOW),
        ("Heavy Kettlebells", 0.8,
         "Good substitute. Weight distribution slightly different.", _LOW),
        ("Trap Bar Carry", 0.7,
         "Good for weight but different grip position.", _MEDIUM),
    ]),
    StationId.SANDBAG_LUNGES: _subs(StationId.SANDBAG_LUNGES, "Sandbag (20kg men / 10kg women)", [
        ("Weighted Vest Lunges", 0.7,
         "Different weight distribution but similar load pattern.", _MEDIUM),
        ("Heavy Dumbbell Lunges (one or two hands)", 0.7,
         "Similar weight, different carry position.", _MEDIUM),
        ("Barbell Front Rack Lunges", 0.6,
         "Heavier load option but rigid vs shifting weight.", _MEDIUM),
        ("Bodyweight Lunges", 0.4,
         "Movement pattern only. No strength stimulus.", _HIGH),
    ]),
    StationId.WALL_BALLS: _subs(StationId.WALL_BALLS, "Wall Ball (9kg men / 6kg women) + 3m target", [
        ("Dumbbell Thruster", 0.7,
         "Similar movement but no catch/throw coordination.", _MEDIUM),
        ("Goblet Squat to Press", 0.6,
         "Movement pattern similar but no ballistic component.", _MEDIUM),
        ("Medicine Ball Slams + Air Squats", 0.4,
         "Separate movements. Does not build wall ball rhythm.", _HIGH),
    ]),
})

# Weeks before race day the athlete should be on real equipment
MIN_WEEKS_FOR_ACTUAL_EQUIPMENT: Mapping[StationId, int] = MappingProxyType({
    StationId.SKIERG: 4,
    StationId.SLED_PUSH: 3,
    StationId.SLED_PULL: 3,
    StationId.BURPEE_BROAD_JUMP: 2,
    StationId.ROWING: 3,
    StationId.FARMERS_CARRY: 2,
    StationId.SANDBAG_LUNGES: 2,
    StationId.WALL_BALLS: 3,
})

RACE_EQUIPMENT_NAMES: Mapping[StationId, str] = MappingProxyType({
    StationId.SKIERG: "Concept2 SkiErg",
    StationId.SLED_PUSH: "weighted sled",
    StationId.SLED_PULL: "sled with rope",
    StationId.BURPEE_BROAD_JUMP: "open floor space",
    StationId.ROWING: "Concept2 RowErg",
    StationId.FARMERS_CARRY: "farmers handles or heavy dumbbells",
    StationId.SANDBAG_LUNGES: "sandbag",
    StationId.WALL_BALLS: "wall ball and target",
})

# Best substitute must reach this effectiveness for substitute-only training
MIN_TRAINABLE_EFFECTIVENESS = 0.5


def get_all_substitutions(station: StationId) -> List[EquipmentSubstitution]:
    """All substitutes for a station, most effective first."""
    return list(STATION_SUBSTITUTIONS.get(StationId(station), ()))


def get_best_substitution(
    station: StationId,
    available_equipment: Optional[Iterable[str]] = None,
) -> Optional[EquipmentSubstitution]:
    """
    Pick a substitute for a station.

    Args:
        station: Station to substitute
        available_equipment: Free-text equipment the athlete has; the first
            substitute that mentions any of it wins

    Returns:
        Matching substitute, else the most effective one, else None
    """
    substitutions = get_all_substitutions(station)
    if not substitutions:
        return None

    available = [e.lower().strip() for e in (available_equipment or []) if e.strip()]
    for sub in substitutions:
        sub_lower = sub.substitute.lower()
        first_word = sub_lower.split(" ")[0]
        if any(item in sub_lower or first_word in item for item in available):
            return sub

    return substitutions[0]


def can_train_with_substitutes(station: StationId) -> bool:
    """Whether the best substitute is effective enough to train the station."""
    substitutions = get_all_substitutions(station)
    return bool(substitutions) and substitutions[0].effectiveness >= MIN_TRAINABLE_EFFECTIVENESS


def generate_race_prep_warnings(
    substitutions_in_use: Iterable[StationId],
    weeks_until_race: int,
) -> List[RacePrepWarning]:
    """
    Warn about stations still trained on substitutes as race day approaches.

    Within the station's minimum weeks the warning is critical, within two
    more weeks it is a warning, within four more it is informational.

    Args:
        substitutions_in_use: Stations trained without race equipment
        weeks_until_race: Weeks left before the race

    Returns:
        One warning per station that is close enough to need one
    """
    warnings: List[RacePrepWarning] = []

    for station in substitutions_in_use:
        station = StationId(station)
        min_weeks = MIN_WEEKS_FOR_ACTUAL_EQUIPMENT[station]
        name = station.display_name
        equipment = RACE_EQUIPMENT_NAMES[station]

        if weeks_until_race <= min_weeks:
            warnings.append(RacePrepWarning(
                station=station,
                severity=RacePrepSeverity.CRITICAL,
                message=f"You need to practice {name} on actual equipment before race day!",
                recommendation=(
                    f"Find a gym with a {equipment} within the next {weeks_until_race} weeks. "
                    "At least 2-3 sessions on real equipment is essential."
                ),
                weeks_until_required=0,
            ))
        elif weeks_until_race <= min_weeks + 2:
            warnings.append(RacePrepWarning(
                station=station,
                severity=RacePrepSeverity.WARNING,
                message=f"Plan to practice {name} on actual equipment soon",
                recommendation=f"Schedule at least 2-3 sessions on a real {equipment} in the next {min_weeks} weeks.",
                weeks_until_required=weeks_until_race - min_weeks,
            ))
        elif weeks_until_race <= min_weeks + 4:
            warnings.append(RacePrepWarning(
                station=station,
                severity=RacePrepSeverity.INFO,
                message=f"You're using a substitute for {name}",
                recommendation=(
                    "Substitutes are fine for now, but plan to practice on actual "
                    f"equipment {min_weeks} weeks before race day."
                ),
                weeks_until_required=weeks_until_race - min_weeks,
            ))

    return warnings


def summarize_race_prep(
    substitutions_in_use: Iterable[StationId],
    weeks_until_race: int,
) -> RacePrepSummary:
    """Count critical and regular warnings and produce a one-line status."""
    all_warnings = generate_race_prep_warnings(substitutions_in_use, weeks_until_race)

    critical = [w for w in all_warnings if w.severity == RacePrepSeverity.CRITICAL]
    warning = [w for w in all_warnings if w.severity == RacePrepSeverity.WARNING]

    if critical:
        summary = f"URGENT: Practice {len(critical)} station(s) on real equipment before race day!"
    elif warning:
        summary = f"Plan to practice {len(warning)} station(s) on real equipment within the next few weeks."
    else:
        summary = "Equipment preparation on track for race day."

    needing: Dict[StationId, None] = {}
    for w in critical + warning:
        needing.setdefault(w.station, None)

    return RacePrepSummary(
        ready_for_race=not critical,
        critical_warnings=len(critical),
        warnings=len(warning),
        stations_needing_attention=list(needing),
        summary=summary,
    )
