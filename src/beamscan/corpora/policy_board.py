"""The Policy Board corpus: a 5x4 grid of youth policy categories.

Builds a ready-to-run session with one target per grid cell and a default
layout derived from the viewport, used until a renderer posts its own.
"""

from __future__ import annotations

import random
from collections.abc import Callable

from beamscan.config import SimulationConfig, get_simulation_config
from beamscan.corpora.policies import POLICY_LABELS
from beamscan.engine.merge import CollectedSet, MergeBuffer
from beamscan.engine.scanner import TargetScanner
from beamscan.engine.signals import SignalRelay, SignalSink
from beamscan.model import CraftState, Position, Session, TargetSlot, wall_clock_ms

GRID_COLS = 5
GRID_ROWS = 4


def create_targets(cols: int = GRID_COLS, rows: int = GRID_ROWS) -> list[TargetSlot]:
    """Create one slot per grid cell, cycling through the policy labels."""
    return [
        TargetSlot(index=i, label=POLICY_LABELS[i % len(POLICY_LABELS)]) for i in range(cols * rows)
    ]


def grid_layout(
    config: SimulationConfig,
    cols: int = GRID_COLS,
    rows: int = GRID_ROWS,
) -> dict[int, Position]:
    """Compute slot centers for an evenly spaced grid below the craft.

    Returns:
        dict[int, Position]: Centers keyed by slot index (row-major).
    """
    top = config.craft_altitude + 180.0
    bottom = max(top, config.viewport_height - 220.0)
    row_step = (bottom - top) / (rows - 1) if rows > 1 else 0.0
    col_step = config.viewport_width / (cols + 1)

    layout: dict[int, Position] = {}
    for row in range(rows):
        for col in range(cols):
            layout[row * cols + col] = Position(
                x=col_step * (col + 1),
                y=top + row_step * row,
            )
    return layout


def create_session(
    config: SimulationConfig | None = None,
    *,
    rng: random.Random | None = None,
    clock: Callable[[], float] | None = None,
    sinks: list[SignalSink] | None = None,
) -> Session:
    """Create a policy board session with the craft centered above the grid.

    Args:
        config: Simulation tuning; the cached environment config when omitted.
        rng: Random source; seed it for reproducible runs.
        clock: Millisecond clock; wall clock when omitted.
        sinks: Audio/visual collaborators to notify.

    Returns:
        A fresh Session.
    """
    config = config or get_simulation_config()
    collected = CollectedSet()
    start = Position(config.viewport_width / 2, config.craft_altitude)

    return Session(
        config=config,
        scanner=TargetScanner(),
        collected=collected,
        merge_buffer=MergeBuffer(collected),
        signals=SignalRelay(sinks),
        craft=CraftState(position=Position(start.x, start.y)),
        pointer=Position(start.x, start.y),
        targets=create_targets(),
        layout=grid_layout(config),
        rng=rng or random.Random(),
        clock=clock or wall_clock_ms,
    )
