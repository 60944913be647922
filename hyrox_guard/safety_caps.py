"""
Hard safety caps.

Non-negotiable injury-prevention limits, keyed by experience level where the
limit depends on it. The table is immutable and versioned; soft targets
always operate underneath these ceilings.
"""

from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from hyrox_guard.schemas import ExperienceLevel, StationId


class LevelCaps(BaseModel):
    """One cap value per experience level."""

    model_config = ConfigDict(frozen=True)

    beginner: float = Field(..., gt=0)
    intermediate: float = Field(..., gt=0)
    advanced: float = Field(..., gt=0)

    def for_level(self, level: ExperienceLevel) -> float:
        return getattr(self, ExperienceLevel(level).value)


class SafetyCaps(BaseModel):
    """Versioned cap table."""

    model_config = ConfigDict(frozen=True)

    version: str

    # Running
    max_weekly_running_increase_percent: float = Field(10.0, gt=0)
    max_single_run_km: LevelCaps
    max_high_intensity_runs_per_week: int = Field(2, ge=0)
    max_high_intensity_days_consecutive: int = Field(0, ge=0)

    # Station weekly volume
    max_wall_balls_per_week: LevelCaps
    max_burpee_broad_jumps_per_week: LevelCaps
    max_sled_push_meters_per_week: LevelCaps
    max_sled_pull_meters_per_week: LevelCaps

    # Recovery
    min_rest_days_per_week: int = Field(1, ge=0)
    min_easy_days_per_week: int = Field(2, ge=0)
    easy_day_rule_min_training_days: int = Field(4, ge=1)
    max_consecutive_training_days: int = Field(5, ge=1)

    # Session duration
    min_session_duration_minutes: int = Field(30, ge=0)
    max_session_duration_minutes: int = Field(120, gt=0)

    def station_volume_cap(self, station: StationId, level: ExperienceLevel) -> Optional[float]:
        """Weekly cap for a station, or None when the station is uncapped."""
        table = {
            StationId.WALL_BALLS: self.max_wall_balls_per_week,
            StationId.BURPEE_BROAD_JUMP: self.max_burpee_broad_jumps_per_week,
            StationId.SLED_PUSH: self.max_sled_push_meters_per_week,
            StationId.SLED_PULL: self.max_sled_pull_meters_per_week,
        }.get(station)
        return table.for_level(level) if table else None


HARD_SAFETY_CAPS = SafetyCaps(
    version="2024.1",
    max_weekly_running_increase_percent=10.0,
    max_single_run_km=LevelCaps(beginner=12, intermediate=16, advanced=21),
    max_high_intensity_runs_per_week=2,
    max_high_intensity_days_consecutive=0,
    max_wall_balls_per_week=LevelCaps(beginner=150, intermediate=250, advanced=400),
    max_burpee_broad_jumps_per_week=LevelCaps(beginner=60, intermediate=100, advanced=150),
    max_sled_push_meters_per_week=LevelCaps(beginner=400, intermediate=600, advanced=800),
    max_sled_pull_meters_per_week=LevelCaps(beginner=400, intermediate=600, advanced=800),
    min_rest_days_per_week=1,
    min_easy_days_per_week=2,
    easy_day_rule_min_training_days=4,
    max_consecutive_training_days=5,
    min_session_duration_minutes=30,
    max_session_duration_minutes=120,
)

# Stations with a weekly volume ceiling, in race order
CAPPED_STATIONS = (
    StationId.SLED_PUSH,
    StationId.SLED_PULL,
    StationId.BURPEE_BROAD_JUMP,
    StationId.WALL_BALLS,
)

# Risk noted on station volume violations
STATION_VOLUME_RISKS = {
    StationId.WALL_BALLS: "Shoulder and knee overuse from high-repetition squat-to-throw",
    StationId.BURPEE_BROAD_JUMP: "Landing impact on knees, ankles and Achilles",
    StationId.SLED_PUSH: "Lower back and calf strain under heavy load",
    StationId.SLED_PULL: "Lower back and elbow strain from repeated heavy pulling",
}
