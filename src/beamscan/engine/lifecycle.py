"""Particle lifecycle engine: advances every live particle by one tick.

Each particle's phase is derived from its kind and the time elapsed since it
spawned, so transitions do not depend on the tick rate:

- REJECTED: FALLING -> IGNITING -> DESPAWNED
- SELECTED: FALLING -> CHARGING -> CONVEYING -> COMPLETED
- RETAINED: FALLING until its life runs out

The pass builds the next live collection in full and reports completions
separately; it never touches the permanent collection.
"""

from __future__ import annotations

import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

from beamscan.config import ConveyancePolicy
from beamscan.engine.signals import Cue
from beamscan.model.geometry import Position
from beamscan.model.particle import TERMINAL_PHASES, ParticleKind, ParticlePhase

if TYPE_CHECKING:
    from beamscan.config import SimulationConfig, TimingProfile
    from beamscan.model.particle import Particle

logger = logging.getLogger(__name__)


@dataclass
class LifecycleResult:
    """Outcome of one lifecycle pass."""

    live: list[Particle] = field(default_factory=list)  # next live collection
    completed: list[Particle] = field(default_factory=list)  # arrived, ready to merge
    despawned: list[Particle] = field(default_factory=list)
    conveyance_target: Position | None = None
    cues: list[Cue] = field(default_factory=list)


@dataclass
class _StepReport:
    cue: Cue | None = None
    conveyance_point: Position | None = None


def selected_phase(age_ms: float, timing: TimingProfile) -> ParticlePhase:
    """Phase of a selected particle at a given age (before arrival)."""
    if age_ms < timing.fall_window_ms:
        return ParticlePhase.FALLING
    if age_ms < timing.charge_end_ms:
        return ParticlePhase.CHARGING
    return ParticlePhase.CONVEYING


def rejected_phase(age_ms: float, timing: TimingProfile) -> ParticlePhase:
    """Phase of a rejected particle at a given age (before burning out)."""
    if age_ms > timing.ignition_delay_ms:
        return ParticlePhase.IGNITING
    return ParticlePhase.FALLING


def advance_particles(
    particles: list[Particle],
    now_ms: float,
    config: SimulationConfig,
    rng: random.Random | None = None,
) -> LifecycleResult:
    """Advance all particles one tick and split them by outcome.

    Args:
        particles: Current live collection (particles are mutated in place).
        now_ms: Wall-clock time of this tick.
        config: Simulation tuning.
        rng: Random source for tumble and charging jitter.

    Returns:
        LifecycleResult with the next live list, arrivals, removals, the
        conveyance beam endpoint and any cues raised during the pass.
    """
    rng = rng or random.Random()
    result = LifecycleResult()
    conveying: list[tuple[Particle, Position]] = []

    for particle in particles:
        if particle.phase in TERMINAL_PHASES:
            continue

        report = step_particle(particle, now_ms, config, rng)
        if report.cue is not None:
            result.cues.append(report.cue)

        if particle.phase is ParticlePhase.COMPLETED:
            result.completed.append(particle)
            continue

        if _should_remove(particle, config):
            particle.phase = ParticlePhase.DESPAWNED
            result.despawned.append(particle)
            continue

        if report.conveyance_point is not None:
            conveying.append((particle, report.conveyance_point))
        result.live.append(particle)

    result.conveyance_target = _pick_conveyance_target(conveying, config.conveyance_policy)
    return result


def step_particle(
    particle: Particle,
    now_ms: float,
    config: SimulationConfig,
    rng: random.Random,
) -> _StepReport:
    """Advance a single particle according to its kind."""
    age = now_ms - particle.spawn_time_ms
    if particle.kind is ParticleKind.SELECTED:
        return _step_selected(particle, age, config, rng)
    if particle.kind is ParticleKind.REJECTED:
        return _step_rejected(particle, age, config, rng)
    particle.life -= 1
    _integrate(particle, config.gravity, config, rng, ceiling=True)
    return _StepReport()


def _step_rejected(
    particle: Particle,
    age: float,
    config: SimulationConfig,
    rng: random.Random,
) -> _StepReport:
    report = _StepReport()
    phase = rejected_phase(age, config.timing)

    if phase is ParticlePhase.IGNITING:
        if particle.phase is not ParticlePhase.IGNITING:
            particle.phase = ParticlePhase.IGNITING
            report.cue = Cue.BURN
        particle.burn_progress += config.burn_rate
        _integrate(particle, config.burning_gravity, config, rng, ceiling=True)
        if particle.burn_progress >= config.burn_threshold:
            particle.phase = ParticlePhase.DESPAWNED
    else:
        particle.life -= 1
        _integrate(particle, config.gravity, config, rng, ceiling=True)
    return report


def _step_selected(
    particle: Particle,
    age: float,
    config: SimulationConfig,
    rng: random.Random,
) -> _StepReport:
    report = _StepReport()
    timing = config.timing
    phase = selected_phase(age, timing)

    if phase is ParticlePhase.FALLING:
        particle.life -= 1
        _integrate(particle, config.gravity, config, rng, ceiling=False)
        return report

    if phase is ParticlePhase.CHARGING:
        if particle.phase is not ParticlePhase.CHARGING:
            particle.phase = ParticlePhase.CHARGING
            report.cue = Cue.TRACTOR
            logger.debug("Particle %s charging", particle.id)
        particle.life -= 1
        particle.vx = 0.0
        particle.vy = 0.0
        particle.x += rng.uniform(-config.charge_jitter, config.charge_jitter)
        particle.y += rng.uniform(-config.charge_jitter, config.charge_jitter)
        particle.rotation += config.charge_spin
        return report

    if particle.phase is not ParticlePhase.CONVEYING:
        particle.phase = ParticlePhase.CONVEYING
        logger.debug("Particle %s conveying", particle.id)

    target_x, target_y = config.destination
    dx = target_x - particle.x
    dy = target_y - particle.y
    particle.vx = 0.0
    particle.vy = 0.0

    if abs(dx) < timing.arrival_epsilon and abs(dy) < timing.arrival_epsilon:
        particle.phase = ParticlePhase.COMPLETED
        logger.debug("Particle %s arrived", particle.id)
        return report

    particle.x += dx * timing.convey_gain
    particle.y += dy * timing.convey_gain
    particle.rotation *= config.rotation_damping
    report.conveyance_point = Position(particle.x, particle.y)
    return report


def _integrate(
    particle: Particle,
    gravity: float,
    config: SimulationConfig,
    rng: random.Random,
    ceiling: bool,
) -> None:
    """Explicit Euler step with air drag on vx and an optional ceiling bounce."""
    particle.vy += gravity
    particle.x += particle.vx
    particle.y += particle.vy
    particle.rotation += particle.rot_speed
    particle.vx *= config.air_drag

    if not ceiling:
        return
    ceiling_y = config.craft_altitude + config.ceiling_margin
    if particle.y < ceiling_y:
        particle.y = ceiling_y
        particle.vy = abs(particle.vy) * 0.5
        particle.rotation += (rng.random() - 0.5) * 10.0


def _should_remove(particle: Particle, config: SimulationConfig) -> bool:
    if not particle.alive:
        return True
    # Fail-safe for runaway trajectories
    return particle.y >= config.viewport_height + config.offscreen_margin


def _pick_conveyance_target(
    conveying: list[tuple[Particle, Position]],
    policy: ConveyancePolicy,
) -> Position | None:
    if not conveying:
        return None
    if policy is ConveyancePolicy.LAST:
        return conveying[-1][1]
    oldest = min(conveying, key=lambda item: item[0].spawn_time_ms)
    return oldest[1]
