"""CraftState dataclass: the pointer-controlled emitter."""

from __future__ import annotations

from dataclasses import dataclass, field

from beamscan.model.geometry import Position


@dataclass
class CraftState:
    """Position and smoothed tilt of the craft.

    Owned by the session and written once per tick by the motion controller.
    """

    position: Position = field(default_factory=Position)
    tilt: float = 0.0  # degrees, eased toward the target tilt
    drift_speed: float = 0.0  # |pointer.x - craft.x| from the last tick
