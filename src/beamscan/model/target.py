"""TargetSlot dataclass: one scannable cell of the target grid."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class TargetSlot:
    """A grid cell the craft can scan and fire on.

    The slot does not own its screen position; centers are read each tick
    from the layout supplied by the rendering layer.
    """

    index: int
    label: str
    in_range: bool = False  # recomputed every tick by the scanner
