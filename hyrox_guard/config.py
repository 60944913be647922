"""
Environment-driven settings.

Every value can be overridden with an environment variable prefixed
HYROX_GUARD_ (for example HYROX_GUARD_MAX_GENERATION_ATTEMPTS=5) or from a
local .env file.
"""

from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, List, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from hyrox_guard.schemas import VolumeRange, VolumeTargets


class Settings(BaseSettings):
    """Runtime configuration for the validation core, CLI and API."""

    model_config = SettingsConfigDict(
        env_prefix="HYROX_GUARD_",
        env_file=".env",
        extra="ignore",
    )

    # Orchestrator
    max_generation_attempts: int = Field(3, ge=1)
    retry_delay_seconds: float = Field(1.0, ge=0)

    # Weekly volume targets used for any range the caller leaves out
    default_running_km_min: float = 15
    default_running_km_max: float = 50
    default_skierg_m_min: float = 2000
    default_skierg_m_max: float = 6000
    default_rowing_m_min: float = 2000
    default_rowing_m_max: float = 6000
    default_strength_sessions_min: float = 2
    default_strength_sessions_max: float = 4
    default_training_hours_min: float = 5
    default_training_hours_max: float = 12

    # Reports and logging
    reports_dir: Path = Path("reports")
    log_level: str = "INFO"
    log_file: Optional[str] = None

    # API
    cors_origins: List[str] = Field(
        default_factory=lambda: ["http://localhost:3000", "http://localhost:5173"]
    )

    def default_volume_targets(self) -> VolumeTargets:
        """Volume targets built from the configured defaults."""
        return VolumeTargets(
            weekly_running_km=VolumeRange(min=self.default_running_km_min, max=self.default_running_km_max),
            weekly_skierg_meters=VolumeRange(min=self.default_skierg_m_min, max=self.default_skierg_m_max),
            weekly_rowing_meters=VolumeRange(min=self.default_rowing_m_min, max=self.default_rowing_m_max),
            strength_sessions=VolumeRange(
                min=self.default_strength_sessions_min,
                max=self.default_strength_sessions_max,
            ),
            total_training_hours=VolumeRange(
                min=self.default_training_hours_min,
                max=self.default_training_hours_max,
            ),
        )


@lru_cache
def get_settings() -> Settings:
    """Settings loaded once per process."""
    return Settings()


def with_default_volume_targets(constraints_data: Dict[str, Any]) -> Dict[str, Any]:
    """
    Fill in weekly volume targets the caller left out.

    Each missing range (or the whole `volume_targets` block) is taken from the
    configured defaults; ranges the caller supplied are kept as given.

    Args:
        constraints_data: Raw constraints, as loaded from JSON

    Returns:
        A new dict ready for ValidationConstraints
    """
    given = constraints_data.get("volume_targets")
    if given is not None and not isinstance(given, dict):
        return constraints_data

    defaults = get_settings().default_volume_targets().model_dump()
    return {**constraints_data, "volume_targets": {**defaults, **(given or {})}}
