"""Frame projection: Session state to visual frame snapshots."""

from beamscan.projection.projector import (
    CardVisual,
    CraftVisual,
    Frame,
    ParticleVisual,
    TargetVisual,
    particle_opacity,
    project,
)

__all__ = [
    "CardVisual",
    "CraftVisual",
    "Frame",
    "ParticleVisual",
    "TargetVisual",
    "particle_opacity",
    "project",
]
