"""Configuration loading for simulation tuning.

This module provides Pydantic-based configuration loading from environment
variables and .env files. Every constant of the motion controller, beam,
spawn factory and particle lifecycle can be overridden with a ``BEAMSCAN_``
prefixed variable.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import StrEnum
from functools import lru_cache
from typing import Any

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


class TimingProfileName(StrEnum):
    """Named phase timing tables for the selected particle."""

    CLASSIC = "classic"
    EXTENDED = "extended"


class ConveyancePolicy(StrEnum):
    """Which conveying particle drives the visible beam when several are in flight."""

    OLDEST = "oldest"
    LAST = "last"


@dataclass(frozen=True)
class TimingProfile:
    """Phase windows (milliseconds since spawn) and conveyance constants."""

    name: TimingProfileName
    ignition_delay_ms: float
    fall_window_ms: float
    charge_end_ms: float
    convey_gain: float
    arrival_epsilon: float


TIMING_PROFILES: dict[TimingProfileName, TimingProfile] = {
    TimingProfileName.CLASSIC: TimingProfile(
        name=TimingProfileName.CLASSIC,
        ignition_delay_ms=1000.0,
        fall_window_ms=1000.0,
        charge_end_ms=1200.0,
        convey_gain=0.25,
        arrival_epsilon=10.0,
    ),
    TimingProfileName.EXTENDED: TimingProfile(
        name=TimingProfileName.EXTENDED,
        ignition_delay_ms=1000.0,
        fall_window_ms=1000.0,
        charge_end_ms=1500.0,
        convey_gain=0.2,
        arrival_epsilon=20.0,
    ),
}


class SimulationConfig(BaseSettings):
    """Tuning for one simulation session.

    Loads settings from environment variables (``BEAMSCAN_`` prefix) and a
    .env file.

    Environment Variables:
        BEAMSCAN_TIMING_PROFILE: Phase timing table (classic, extended)
        BEAMSCAN_CONVEYANCE_POLICY: Beam arbitration (oldest, last)
        BEAMSCAN_VIEWPORT_WIDTH / BEAMSCAN_VIEWPORT_HEIGHT: Screen size in px
        BEAMSCAN_TICK_RATE: Server tick frequency in Hz (default: 60)
        BEAMSCAN_REJECTION_RATE: Per-particle rejection probability (default: 0.66)

    Example:
        >>> config = SimulationConfig()  # Loads from environment
        >>> config = SimulationConfig(timing_profile="extended")
    """

    model_config = SettingsConfigDict(
        env_prefix="BEAMSCAN_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # Viewport
    viewport_width: float = Field(default=1280.0, gt=0, description="Viewport width in px")
    viewport_height: float = Field(default=800.0, gt=0, description="Viewport height in px")

    # Craft motion
    craft_altitude: float = Field(default=100.0, description="Fixed craft y coordinate")
    easing: float = Field(default=0.08, gt=0.0, le=1.0, description="Craft x low-pass gain")
    tilt_easing: float = Field(default=0.1, gt=0.0, le=1.0, description="Tilt low-pass gain")
    tilt_factor: float = Field(default=-0.4, description="Tilt degrees per px of delta")
    max_tilt: float = Field(default=25.0, ge=0.0, description="Velocity tilt clamp (degrees)")
    wobble_amplitude: float = Field(default=3.0, ge=0.0, description="Idle wobble (degrees)")
    wobble_period_ms: float = Field(default=400.0, gt=0.0, description="Idle wobble divisor")

    # Beam
    beam_spread: float = Field(default=0.6, gt=0.0, description="Cone half-width per px of depth")
    beam_origin_offset: float = Field(default=20.0, description="Beam origin below the craft")

    # Spawn
    batch_size: int = Field(default=12, ge=1, le=200, description="Particles per activation")
    rejection_rate: float = Field(default=0.66, ge=0.0, le=1.0, description="Rejection chance")
    spawn_jitter: float = Field(default=40.0, ge=0.0, description="Horizontal spawn jitter")
    spawn_vx_range: float = Field(default=35.0, ge=0.0, description="Horizontal launch spread")
    initial_life: int = Field(default=800, ge=1, description="Remaining-life frames at spawn")

    # Physics
    gravity: float = Field(default=0.1, description="Per-tick vy increment")
    burning_gravity: float = Field(default=0.05, description="Gravity while igniting")
    air_drag: float = Field(default=0.98, gt=0.0, le=1.0, description="vx multiplier per tick")
    ceiling_margin: float = Field(default=50.0, description="Ceiling below craft altitude")
    offscreen_margin: float = Field(default=200.0, ge=0.0, description="Fail-safe below viewport")

    # Burn
    burn_rate: float = Field(default=0.04, gt=0.0, description="Burn progress per tick")
    burn_threshold: float = Field(default=1.4, gt=0.0, description="Burn progress at despawn")

    # Selected particle
    charge_jitter: float = Field(default=2.0, ge=0.0, description="Charging vibration in px")
    charge_spin: float = Field(default=25.0, description="Charging spin per tick (degrees)")
    rotation_damping: float = Field(default=0.7, ge=0.0, le=1.0, description="Conveying spin decay")
    destination_offset: float = Field(default=100.0, description="Destination above bottom edge")
    timing_profile: TimingProfileName = Field(
        default=TimingProfileName.CLASSIC,
        description="Phase timing table",
    )
    conveyance_policy: ConveyancePolicy = Field(
        default=ConveyancePolicy.OLDEST,
        description="Which conveying particle the beam follows",
    )

    # Loop
    tick_rate: float = Field(default=60.0, gt=0.0, le=240.0, description="Ticks per second")

    @field_validator("timing_profile", "conveyance_policy", mode="before")
    @classmethod
    def normalize_enum(cls, v: Any) -> Any:
        """Accept enum values in any case."""
        if isinstance(v, str):
            return v.lower()
        return v

    @property
    def timing(self) -> TimingProfile:
        """Active timing table."""
        return TIMING_PROFILES[self.timing_profile]

    @property
    def destination(self) -> tuple[float, float]:
        """Conveyance destination: bottom-center of the viewport."""
        return self.viewport_width / 2, self.viewport_height - self.destination_offset

    def __repr__(self) -> str:
        return (
            f"SimulationConfig("
            f"viewport={self.viewport_width:.0f}x{self.viewport_height:.0f}, "
            f"timing={self.timing_profile.value}, "
            f"conveyance={self.conveyance_policy.value}, "
            f"batch_size={self.batch_size}, "
            f"rejection_rate={self.rejection_rate}, "
            f"tick_rate={self.tick_rate}"
            f")"
        )


@lru_cache
def get_simulation_config() -> SimulationConfig:
    """Get cached simulation configuration singleton.

    To reload configuration, call get_simulation_config.cache_clear() first.

    Returns:
        SimulationConfig instance with settings from environment.
    """
    config = SimulationConfig()
    logger.info("Loaded simulation configuration: %s", config)
    return config
