"""
Pre-generation conflict detection.

Compares what the athlete told us (injuries, equipment gaps, available time,
experience) with what the race demands, before any plan is generated. The
rules live in the tables below; detection walks them in a fixed order so the
same constraints always produce the same conflicts with the same ids.
"""

import re
from types import MappingProxyType
from typing import Dict, List, Mapping, Optional, Tuple

from loguru import logger
from pydantic import BaseModel, ConfigDict

from hyrox_guard.schemas import (
    ALL_STATIONS,
    Conflict,
    ConflictCategory,
    ConflictConstraints,
    ConflictSeverity,
    ConflictSummary,
    ExperienceLevel,
    GymType,
    ResolutionAction,
    ResolutionOption,
    StationId,
)


# ============================================================================
# Rule Tables
# ============================================================================

class InjuryImpact(BaseModel):
    """Stations loaded by an injured body area."""

    model_config = ConfigDict(frozen=True)

    affected_stations: Tuple[StationId, ...]
    severity: ConflictSeverity
    reason: str


class EquipmentRequirement(BaseModel):
    """Stations that cannot be trained as raced without a piece of kit."""

    model_config = ConfigDict(frozen=True)

    required_for: Tuple[StationId, ...]
    alternatives: Tuple[str, ...] = ()


S = StationId

INJURY_STATION_IMPACT: Mapping[str, InjuryImpact] = MappingProxyType({
    # Upper body
    "shoulder": InjuryImpact(
        affected_stations=(S.WALL_BALLS, S.SKIERG, S.SLED_PUSH, S.SLED_PULL),
        severity=ConflictSeverity.WARNING,
        reason="Shoulder issues affect overhead movements and pushing/pulling",
    ),
    "rotator cuff": InjuryImpact(
        affected_stations=(S.WALL_BALLS, S.SKIERG, S.SLED_PULL),
        severity=ConflictSeverity.BLOCKING,
        reason="Rotator cuff injuries are aggravated by overhead and pulling movements",
    ),
    "elbow": InjuryImpact(
        affected_stations=(S.SLED_PULL, S.SKIERG, S.FARMERS_CARRY),
        severity=ConflictSeverity.WARNING,
        reason="Elbow issues affect grip-intensive pulling movements",
    ),
    "wrist": InjuryImpact(
        affected_stations=(S.WALL_BALLS, S.SLED_PULL, S.FARMERS_CARRY, S.SANDBAG_LUNGES),
        severity=ConflictSeverity.WARNING,
        reason="Wrist issues affect grip and overhead positions",
    ),
    # Core / torso
    "lower back": InjuryImpact(
        affected_stations=(S.SLED_PUSH, S.SLED_PULL, S.SANDBAG_LUNGES, S.FARMERS_CARRY, S.SKIERG, S.ROWING),
        severity=ConflictSeverity.WARNING,
        reason="Lower back issues affect hip hinge and loaded carry movements",
    ),
    "back": InjuryImpact(
        affected_stations=(S.SLED_PUSH, S.SLED_PULL, S.SANDBAG_LUNGES, S.FARMERS_CARRY, S.ROWING),
        severity=ConflictSeverity.WARNING,
        reason="Back issues affect most loaded movements",
    ),
    "hip": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES, S.WALL_BALLS, S.ROWING, S.SKIERG),
        severity=ConflictSeverity.WARNING,
        reason="Hip issues affect squatting, lunging and hinge patterns",
    ),
    "hip flexor": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES, S.SKIERG),
        severity=ConflictSeverity.WARNING,
        reason="Hip flexor tightness or strain affects high-knee movements",
    ),
    # Lower body
    "knee": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES, S.WALL_BALLS, S.SLED_PUSH),
        severity=ConflictSeverity.WARNING,
        reason="Knee issues affect jumping, squatting and lunging",
    ),
    "acl": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES),
        severity=ConflictSeverity.BLOCKING,
        reason="ACL injuries require avoiding explosive jumps and deep lunges",
    ),
    "ankle": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES, S.WALL_BALLS),
        severity=ConflictSeverity.WARNING,
        reason="Ankle issues affect landing and deep squat positions",
    ),
    "achilles": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES),
        severity=ConflictSeverity.BLOCKING,
        reason="Achilles issues are high risk with explosive jumping",
    ),
    "calf": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SLED_PUSH),
        severity=ConflictSeverity.WARNING,
        reason="Calf issues affect push-off and landing",
    ),
    "foot": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES),
        severity=ConflictSeverity.WARNING,
        reason="Foot issues affect running and landing mechanics",
    ),
    "plantar fasciitis": InjuryImpact(
        affected_stations=(S.BURPEE_BROAD_JUMP, S.SANDBAG_LUNGES),
        severity=ConflictSeverity.WARNING,
        reason="Plantar fasciitis is aggravated by impact and repetitive running",
    ),
})

# Most specific area wins: "lower back" before "back", "hip flexor" before "hip"
_INJURY_KEYS_BY_SPECIFICITY = sorted(INJURY_STATION_IMPACT, key=len, reverse=True)

EQUIPMENT_ALIASES: Mapping[str, str] = MappingProxyType({
    # SkiErg
    "ski erg": "skierg",
    "ski-erg": "skierg",
    "ski machine": "skierg",
    "concept2 ski": "skierg",
    "c2 ski": "skierg",
    # Sled
    "prowler": "sled",
    "push sled": "sled",
    "pull sled": "sled",
    # Rower
    "rowing machine": "rower",
    "row machine": "rower",
    "concept2 row": "rower",
    "c2 row": "rower",
    "erg": "rower",
    "rowing erg": "rower",
    # Wall ball
    "wallball": "wall ball",
    "wall balls": "wall ball",
    "med ball": "wall ball",
    "medicine ball": "wall ball",
    # Sandbag
    "sand bag": "sandbag",
    # Farmers handles
    "farmer handles": "farmers handles",
    "farmers carry handles": "farmers handles",
    "farmer carry": "farmers handles",
    # Rope
    "pull rope": "rope",
    "sled rope": "rope",
})

EQUIPMENT_REQUIREMENTS: Mapping[str, EquipmentRequirement] = MappingProxyType({
    "skierg": EquipmentRequirement(
        required_for=(S.SKIERG,),
        alternatives=("battle ropes with overhead motion", "cable machine lat pulldown intervals"),
    ),
    "sled": EquipmentRequirement(
        required_for=(S.SLED_PUSH, S.SLED_PULL),
        alternatives=("weighted prowler", "tire push", "heavy resistance band pulls"),
    ),
    "rower": EquipmentRequirement(
        required_for=(S.ROWING,),
        alternatives=("bike erg intervals", "swim if available"),
    ),
    "wall ball": EquipmentRequirement(
        required_for=(S.WALL_BALLS,),
        alternatives=("dumbbell thruster", "kettlebell goblet squat to press"),
    ),
    "sandbag": EquipmentRequirement(
        required_for=(S.SANDBAG_LUNGES,),
        alternatives=("heavy dumbbell lunges", "barbell front rack lunges", "weighted vest lunges"),
    ),
    "farmers handles": EquipmentRequirement(
        required_for=(S.FARMERS_CARRY,),
        alternatives=("heavy dumbbells", "trap bar carry", "kettlebells"),
    ),
    "rope": EquipmentRequirement(
        required_for=(S.SLED_PULL,),
        alternatives=("cable row machine", "band rows"),
    ),
})

del S

# Time thresholds
MIN_SESSION_MINUTES = 45
MIN_TRAINING_DAYS = 3
SHORT_PREP_WEEKS = 6
VERY_SHORT_PREP_WEEKS = 4


def _slug(text: str) -> str:
    return re.sub(r"[^a-z0-9]+", "_", text.lower()).strip("_")


def normalize_equipment_name(name: str) -> str:
    """Lowercase, collapse whitespace and resolve aliases."""
    normalized = re.sub(r"\s+", " ", name.lower().strip())
    return EQUIPMENT_ALIASES.get(normalized, normalized)


def _station_list(stations) -> str:
    return ", ".join(s.display_name for s in stations)


# ============================================================================
# Detectors
# ============================================================================

def _match_injury(area: str) -> Optional[str]:
    area_lower = area.lower()
    for key in _INJURY_KEYS_BY_SPECIFICITY:
        if key in area_lower:
            return key
    return None


def detect_injury_conflicts(constraints: ConflictConstraints) -> List[Conflict]:
    """
    One conflict per known injury among the reported areas.

    Areas are matched to the most specific injury key they mention, and the
    conflict id comes from that key, so "knee" and "Knee pain" raise a single
    `injury_knee` conflict worded after the first area reported.
    """
    conflicts: List[Conflict] = []
    seen = set()

    for area in [*constraints.pain_points, *constraints.injury_areas]:
        area = area.strip()
        key = _match_injury(area) if area else None
        if key is None or key in seen:
            continue
        seen.add(key)

        impact = INJURY_STATION_IMPACT[key]
        options = [
            ResolutionOption(
                id=f"reduce_{station.value}",
                label=f"Reduce {station.display_name} volume",
                description=(
                    f"Lower volume and intensity for {station.display_name} "
                    f"to manage {area} impact"
                ),
                action=ResolutionAction.REDUCE_VOLUME,
                details={"station": station.value, "volume_reduction": 0.5},
            )
            for station in impact.affected_stations
        ]
        options.append(ResolutionOption(
            id=f"prep_{_slug(key)}",
            label="Add injury prep protocol",
            description=f"Include specific mobility and strengthening work for {area} before each session",
            action=ResolutionAction.ADD_PREP,
            details={"area": area.lower()},
        ))

        conflicts.append(Conflict(
            id=f"injury_{_slug(key)}",
            severity=impact.severity,
            category=ConflictCategory.INJURY,
            title=f"{area} may affect Hyrox performance",
            description=impact.reason,
            affected_stations=list(impact.affected_stations),
            resolution_options=options,
        ))

    return conflicts


def _equipment_conflict(key: str, requirement: EquipmentRequirement) -> Conflict:
    return Conflict(
        id=f"missing_{_slug(key)}",
        severity=ConflictSeverity.WARNING if len(requirement.required_for) > 1 else ConflictSeverity.INFO,
        category=ConflictCategory.EQUIPMENT,
        title=f"Missing {key}",
        description=f"Required for: {_station_list(requirement.required_for)}",
        affected_stations=list(requirement.required_for),
        resolution_options=[ResolutionOption(
            id=f"substitute_{_slug(key)}",
            label="Use substitute exercises",
            description=", ".join(requirement.alternatives) or "Substitute exercises available",
            action=ResolutionAction.SUBSTITUTE,
            details={"original": key, "alternatives": list(requirement.alternatives)},
        )],
    )


def _resolve_equipment(name: str) -> Optional[str]:
    normalized = normalize_equipment_name(name)
    if not normalized:
        return None
    if normalized in EQUIPMENT_REQUIREMENTS:
        return normalized
    for key in EQUIPMENT_REQUIREMENTS:
        if key in normalized or normalized in key:
            return key
    return None


def detect_equipment_conflicts(constraints: ConflictConstraints) -> List[Conflict]:
    """Home-gym warning plus one conflict per recognised missing item."""
    conflicts: List[Conflict] = []

    if constraints.gym_type == GymType.HOME:
        conflicts.append(Conflict(
            id="home_gym_warning",
            severity=ConflictSeverity.WARNING,
            category=ConflictCategory.EQUIPMENT,
            title="Home gym may limit Hyrox-specific training",
            description=(
                "Hyrox requires specialized equipment (SkiErg, sled, rower). "
                "Home training will need substitutions."
            ),
            affected_stations=[StationId.SKIERG, StationId.SLED_PUSH, StationId.SLED_PULL, StationId.ROWING],
            resolution_options=[
                ResolutionOption(
                    id="find_hyrox_gym",
                    label="Find a Hyrox-equipped gym",
                    description="Consider 1-2 sessions per week at a CrossFit box or Hyrox affiliate",
                    action=ResolutionAction.SUBSTITUTE,
                    details={"type": "gym_recommendation"},
                ),
                ResolutionOption(
                    id="home_substitutes",
                    label="Use home workout substitutes",
                    description="We'll provide equipment alternatives for station practice",
                    action=ResolutionAction.SUBSTITUTE,
                    details={"type": "home_alternatives"},
                ),
            ],
        ))

    seen = set()
    for missing in constraints.missing_equipment:
        key = _resolve_equipment(missing)
        if key is None:
            logger.debug("Unrecognised equipment ignored", equipment=missing)
            continue
        if key in seen:
            continue
        seen.add(key)
        conflicts.append(_equipment_conflict(key, EQUIPMENT_REQUIREMENTS[key]))

    return conflicts


def detect_time_conflicts(constraints: ConflictConstraints) -> List[Conflict]:
    """Short sessions, few training days and a close race date."""
    conflicts: List[Conflict] = []

    session = constraints.session_length_minutes
    if session is not None and session < MIN_SESSION_MINUTES:
        conflicts.append(Conflict(
            id="short_sessions",
            severity=ConflictSeverity.WARNING,
            category=ConflictCategory.TIME,
            title="Short session length may limit Hyrox prep",
            description=(
                "Hyrox requires combined running + station work. "
                f"Sessions under {MIN_SESSION_MINUTES} minutes may need to be split."
            ),
            resolution_options=[
                ResolutionOption(
                    id="split_sessions",
                    label="Split into focused sessions",
                    description="Separate running and station work into different sessions",
                    action=ResolutionAction.MODIFY,
                    details={"type": "split_sessions"},
                ),
                ResolutionOption(
                    id="extend_sessions",
                    label="Extend to 60 minutes if possible",
                    description="Combined sessions are most effective for race simulation",
                    action=ResolutionAction.MODIFY,
                    details={"type": "extend"},
                ),
            ],
        ))

    days = constraints.training_days_per_week
    if days is not None and days < MIN_TRAINING_DAYS:
        conflicts.append(Conflict(
            id="few_training_days",
            severity=ConflictSeverity.WARNING,
            category=ConflictCategory.TIME,
            title="Limited training days",
            description=(
                "Hyrox preparation typically requires 4-5 days. "
                "With fewer days, each session must be highly focused."
            ),
            resolution_options=[
                ResolutionOption(
                    id="combined_sessions",
                    label="Use combined training sessions",
                    description="Each session will include running, stations, and strength",
                    action=ResolutionAction.MODIFY,
                    details={"type": "combined"},
                ),
                ResolutionOption(
                    id="priority_focus",
                    label="Prioritize weaknesses only",
                    description="Focus limited time on weak stations and running",
                    action=ResolutionAction.MODIFY,
                    details={"type": "prioritized"},
                ),
            ],
        ))

    weeks = constraints.weeks_until_race
    if weeks is not None and weeks < SHORT_PREP_WEEKS:
        # Never blocking: a maintenance plan still helps
        if weeks < VERY_SHORT_PREP_WEEKS:
            description = (
                "Very limited time remaining. Plan will focus on race simulation and "
                "maintaining current fitness - no time for building new capacity."
            )
        else:
            description = (
                "Limited time means focusing on race-specific preparation "
                "rather than building base fitness."
            )
        conflicts.append(Conflict(
            id="short_prep_time",
            severity=ConflictSeverity.WARNING,
            category=ConflictCategory.TIME,
            title=f"Only {weeks} weeks until race",
            description=description,
            resolution_options=[
                ResolutionOption(
                    id="race_simulation",
                    label="Focus on race simulation",
                    description="Practice race-day pacing and station transitions",
                    action=ResolutionAction.MODIFY,
                    details={"type": "simulation_focus"},
                ),
                ResolutionOption(
                    id="maintain_fitness",
                    label="Maintain current fitness",
                    description="Avoid adding volume that could cause injury before race day",
                    action=ResolutionAction.REDUCE_VOLUME,
                    details={"type": "maintenance"},
                ),
            ],
        ))

    return conflicts


def detect_experience_conflicts(constraints: ConflictConstraints) -> List[Conflict]:
    """Informational notes for first-time racers."""
    if not constraints.is_first_race:
        return []

    conflicts: List[Conflict] = []
    if constraints.experience_level == ExperienceLevel.BEGINNER:
        conflicts.append(Conflict(
            id="first_race_beginner",
            severity=ConflictSeverity.INFO,
            category=ConflictCategory.EXPERIENCE,
            title="First Hyrox race as a beginner",
            description=(
                "Your plan will focus on completing the race safely rather than speed. "
                "All stations will be practiced multiple times before race day."
            ),
            resolution_options=[ResolutionOption(
                id="completion_focus",
                label="Focus on completion",
                description="Build confidence with each station, emphasize proper technique",
                action=ResolutionAction.MODIFY,
                details={"type": "completion_focus"},
            )],
        ))

    conflicts.append(Conflict(
        id="first_race_station_familiarity",
        severity=ConflictSeverity.INFO,
        category=ConflictCategory.EXPERIENCE,
        title="Station familiarization required",
        description=(
            "Since this is your first race, you'll need to practice ALL 8 stations "
            "multiple times before race day."
        ),
        affected_stations=list(ALL_STATIONS),
        resolution_options=[ResolutionOption(
            id="station_rotation",
            label="Weekly station rotation",
            description="Ensure each station is practiced at least once per week",
            action=ResolutionAction.MODIFY,
            details={"type": "station_rotation"},
        )],
    ))
    return conflicts


def detect_conflicts(constraints: ConflictConstraints) -> List[Conflict]:
    """
    Detect every conflict between athlete constraints and race requirements.

    Args:
        constraints: Flat athlete constraints

    Returns:
        Conflicts in detector order: injury, equipment, time, experience
    """
    conflicts: List[Conflict] = []
    conflicts.extend(detect_injury_conflicts(constraints))
    conflicts.extend(detect_equipment_conflicts(constraints))
    conflicts.extend(detect_time_conflicts(constraints))
    conflicts.extend(detect_experience_conflicts(constraints))

    logger.debug(
        "Conflicts detected",
        total=len(conflicts),
        blocking=sum(1 for c in conflicts if c.severity == ConflictSeverity.BLOCKING),
    )
    return conflicts


def can_proceed_with_generation(conflicts: List[Conflict]) -> bool:
    """False when any conflict is blocking."""
    return not any(c.severity == ConflictSeverity.BLOCKING for c in conflicts)


def summarize_conflicts(conflicts: List[Conflict]) -> ConflictSummary:
    """
    Digest conflicts for display.

    Args:
        conflicts: Output of detect_conflicts

    Returns:
        Per-severity counts, affected stations in race order and a summary line
    """
    counts: Dict[ConflictSeverity, int] = {severity: 0 for severity in ConflictSeverity}
    affected = set()
    for conflict in conflicts:
        counts[conflict.severity] += 1
        affected.update(conflict.affected_stations)

    blocking = counts[ConflictSeverity.BLOCKING]
    warnings = counts[ConflictSeverity.WARNING]
    info = counts[ConflictSeverity.INFO]

    summary = ""
    if blocking:
        summary = f"{blocking} issue(s) require attention before proceeding. "
    if warnings:
        summary += f"{warnings} warning(s) may affect your training. "
    if info and not blocking and not warnings:
        summary = f"{info} note(s) about your training plan."

    return ConflictSummary(
        has_blocking=blocking > 0,
        blocking_count=blocking,
        warning_count=warnings,
        info_count=info,
        affected_stations=[s for s in ALL_STATIONS if s in affected],
        summary=summary.strip(),
    )
