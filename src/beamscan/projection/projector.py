"""Frame projector: Session state to visual Frame for rendering.

Converts Session simulation state into Frame dataclasses suitable for frontend rendering.
Each Frame is a snapshot containing all visual elements needed to render one animation frame.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from beamscan.corpora.policies import policy_to_dict
from beamscan.model.particle import ParticlePhase

if TYPE_CHECKING:
    from beamscan.model.particle import Particle
    from beamscan.model.session import Session


@dataclass
class CraftVisual:
    """The emitter, drawn rotated by its tilt."""

    x: float
    y: float
    tilt: float
    drift_speed: float = 0.0


@dataclass
class TargetVisual:
    """A grid cell, highlighted while inside the beam."""

    index: int
    label: str
    x: float | None = None
    y: float | None = None
    highlighted: bool = False


@dataclass
class ParticleVisual:
    """Visual representation of a live particle.

    Opacity and scale are hints derived from the phase: burning particles
    fade out, charging ones swell, conveying ones shrink toward the tray.
    """

    id: str
    kind: str
    phase: str
    x: float
    y: float
    rotation: float
    burn_progress: float = 0.0
    opacity: float = 1.0
    scale: float = 1.0
    color: str = "#4ECDC4"
    width: float = 30.0
    height: float = 40.0


@dataclass
class CardVisual:
    """A collected particle shown in the persistent card tray."""

    id: str
    label: str
    viewed: bool
    payload: dict[str, Any] | None = None


@dataclass
class Frame:
    """A complete visual frame for rendering."""

    tick: int
    craft: CraftVisual
    targets: list[TargetVisual] = field(default_factory=list)
    particles: list[ParticleVisual] = field(default_factory=list)
    conveyance_target: tuple[float, float] | None = None
    cards: list[CardVisual] = field(default_factory=list)
    stats: dict[str, int] = field(default_factory=dict)
    cues: list[str] = field(default_factory=list)


PHASE_SCALES: dict[ParticlePhase, float] = {
    ParticlePhase.CHARGING: 1.15,
    ParticlePhase.CONVEYING: 0.85,
}


def particle_opacity(particle: Particle) -> float:
    """Fade with burn progress; fully hidden from 1.0 on while smoke finishes."""
    if particle.phase is ParticlePhase.IGNITING:
        return max(0.0, 1.0 - particle.burn_progress)
    return 1.0


def project(session: Session, cues: list[str] | None = None) -> Frame:
    """Project the session into a render snapshot.

    Args:
        session: The session to project.
        cues: Cue names emitted since the previous frame.

    Returns:
        Frame with craft, targets, live particles, beam endpoint and cards.
    """
    craft = session.craft
    in_range = session.in_range
    conveyance = session.conveyance_target

    return Frame(
        tick=session.tick,
        craft=CraftVisual(
            x=craft.position.x,
            y=craft.position.y,
            tilt=craft.tilt,
            drift_speed=craft.drift_speed,
        ),
        targets=[_project_target(session, slot.index, slot.label, in_range) for slot in session.targets],
        particles=[_project_particle(p) for p in session.particles],
        conveyance_target=(conveyance.x, conveyance.y) if conveyance is not None else None,
        cards=[_project_card(p) for p in session.collected],
        stats={"explored": session.stats.explored, "filtered": session.stats.filtered},
        cues=list(cues or []),
    )


def _project_target(session: Session, index: int, label: str, in_range: frozenset[int]) -> TargetVisual:
    center = session.layout.get(index)
    return TargetVisual(
        index=index,
        label=label,
        x=center.x if center is not None else None,
        y=center.y if center is not None else None,
        highlighted=index in in_range,
    )


def _project_particle(particle: Particle) -> ParticleVisual:
    return ParticleVisual(
        id=particle.id,
        kind=particle.kind.value,
        phase=particle.phase.value,
        x=particle.x,
        y=particle.y,
        rotation=particle.rotation,
        burn_progress=particle.burn_progress,
        opacity=particle_opacity(particle),
        scale=PHASE_SCALES.get(particle.phase, 1.0),
        color=particle.color,
        width=particle.width,
        height=particle.height,
    )


def _project_card(particle: Particle) -> CardVisual:
    return CardVisual(
        id=particle.id,
        label=particle.label,
        viewed=particle.viewed,
        payload=policy_to_dict(particle.payload) if particle.payload is not None else None,
    )
