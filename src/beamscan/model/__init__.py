"""Domain model: Position, CraftState, TargetSlot, Particle, Session."""

from beamscan.model.craft import CraftState
from beamscan.model.geometry import Position
from beamscan.model.particle import (
    TERMINAL_PHASES,
    Particle,
    ParticleKind,
    ParticlePhase,
    PolicyRecord,
)
from beamscan.model.session import Session, SessionStats, wall_clock_ms
from beamscan.model.target import TargetSlot

__all__ = [
    "TERMINAL_PHASES",
    "CraftState",
    "Particle",
    "ParticleKind",
    "ParticlePhase",
    "PolicyRecord",
    "Position",
    "Session",
    "SessionStats",
    "TargetSlot",
    "wall_clock_ms",
]
