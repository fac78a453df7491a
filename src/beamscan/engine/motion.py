"""Craft motion controller: eases the craft toward the pointer and derives tilt."""

from __future__ import annotations

import math
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from beamscan.config import SimulationConfig
    from beamscan.model.craft import CraftState
    from beamscan.model.geometry import Position


def compute_target_tilt(delta: float, now_ms: float, config: SimulationConfig) -> float:
    """Velocity tilt clamped to +/- max_tilt, plus the idle wobble."""
    velocity_tilt = max(min(delta * config.tilt_factor, config.max_tilt), -config.max_tilt)
    wobble = math.sin(now_ms / config.wobble_period_ms) * config.wobble_amplitude
    return velocity_tilt + wobble


def step_craft(
    craft: CraftState,
    pointer: Position,
    now_ms: float,
    config: SimulationConfig,
) -> float:
    """Advance the craft by one tick.

    Two cascaded first-order filters: x follows the pointer with ``easing``,
    and the displayed tilt follows the target tilt with ``tilt_easing``.
    The craft only moves horizontally; y stays at ``craft_altitude``.

    Args:
        craft: Craft state to mutate.
        pointer: Latest pointer position (only x is used).
        now_ms: Wall-clock time driving the idle wobble.
        config: Simulation tuning.

    Returns:
        Drift speed ``|pointer.x - craft.x|`` measured before the step.
    """
    delta = pointer.x - craft.position.x
    craft.position.x += delta * config.easing
    craft.position.y = config.craft_altitude

    target_tilt = compute_target_tilt(delta, now_ms, config)
    craft.tilt += (target_tilt - craft.tilt) * config.tilt_easing

    craft.drift_speed = abs(delta)
    return craft.drift_speed
