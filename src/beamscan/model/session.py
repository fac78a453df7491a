"""Session and SessionStats dataclasses: the explicitly owned simulation context."""

from __future__ import annotations

import random
import time
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from beamscan.config import SimulationConfig
from beamscan.model.craft import CraftState
from beamscan.model.geometry import Position

if TYPE_CHECKING:
    from beamscan.engine.merge import CollectedSet, MergeBuffer
    from beamscan.engine.scanner import TargetScanner
    from beamscan.engine.signals import SignalRelay
    from beamscan.model.particle import Particle
    from beamscan.model.target import TargetSlot


def wall_clock_ms() -> float:
    """Milliseconds since the epoch."""
    return time.time() * 1000.0


@dataclass
class SessionStats:
    """Presentational counters shown next to the collection."""

    explored: int = 0  # particles spawned
    filtered: int = 0  # non-rejected particles spawned


@dataclass
class Session:
    """Container holding all state of one simulation instance.

    Every tick and activation receives the session explicitly, so several
    independent sessions can run side by side.
    """

    config: SimulationConfig
    scanner: TargetScanner
    collected: CollectedSet
    merge_buffer: MergeBuffer
    signals: SignalRelay

    craft: CraftState = field(default_factory=CraftState)
    pointer: Position = field(default_factory=Position)

    # Targets and their externally supplied centers
    targets: list[TargetSlot] = field(default_factory=list)
    layout: dict[int, Position] = field(default_factory=dict)  # slot index → screen center

    # Live particles, replaced wholesale once per tick
    particles: list[Particle] = field(default_factory=list)
    conveyance_target: Position | None = None

    stats: SessionStats = field(default_factory=SessionStats)

    # Injectable sources of time and randomness
    rng: random.Random = field(default_factory=random.Random)
    clock: Callable[[], float] = wall_clock_ms

    tick: int = 0

    @property
    def in_range(self) -> frozenset[int]:
        """Slot indices currently inside the beam."""
        return self.scanner.in_range
