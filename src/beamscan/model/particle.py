"""Particle dataclass: a short-lived simulated object spawned by the craft."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class ParticleKind(Enum):
    """Classification fixed at spawn.

    A particle is exactly one of these, so a selected particle can never
    also be rejected.
    """

    REJECTED = "rejected"  # ignites and burns out
    SELECTED = "selected"  # one per batch, conveyed into the collection
    RETAINED = "retained"  # kept content that simply falls away


class ParticlePhase(Enum):
    """Lifecycle phase, derived from kind and time since spawn."""

    FALLING = "falling"
    IGNITING = "igniting"
    CHARGING = "charging"
    CONVEYING = "conveying"
    DESPAWNED = "despawned"
    COMPLETED = "completed"


TERMINAL_PHASES = frozenset({ParticlePhase.DESPAWNED, ParticlePhase.COMPLETED})


@dataclass
class PolicyRecord:
    """Mock content carried by non-rejected particles."""

    name: str
    category: str
    target_short: str
    probability: int  # percent match, 70-99
    amount: str
    duration: str
    details: list[str] = field(default_factory=list)


@dataclass
class Particle:
    """A spawned object following one lifecycle until it despawns or is collected.

    All phase transitions key off ``spawn_time_ms`` rather than frame counts,
    so behavior does not depend on tick rate.
    """

    id: str
    kind: ParticleKind
    spawn_time_ms: float
    batch_id: str = ""
    label: str = ""  # label of the target that spawned it

    # Kinematics
    x: float = 0.0
    y: float = 0.0
    vx: float = 0.0
    vy: float = 0.0
    rotation: float = 0.0
    rot_speed: float = 0.0

    # Lifecycle
    phase: ParticlePhase = ParticlePhase.FALLING
    life: int = 800  # frames; frozen while igniting or conveying
    burn_progress: float = 0.0  # non-decreasing, 0 to ~1.4

    # Appearance
    color: str = "#4ECDC4"
    width: float = 30.0
    height: float = 40.0

    # Content
    payload: PolicyRecord | None = None
    viewed: bool = False

    @property
    def rejected(self) -> bool:
        return self.kind is ParticleKind.REJECTED

    @property
    def selected(self) -> bool:
        return self.kind is ParticleKind.SELECTED

    @property
    def alive(self) -> bool:
        """True while the particle belongs in the live collection."""
        return self.phase not in TERMINAL_PHASES and self.life > 0
