"""Session tick driver: executes one simulation tick and handles user actions."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from beamscan.engine.lifecycle import LifecycleResult, advance_particles
from beamscan.engine.motion import step_craft
from beamscan.engine.signals import Cue
from beamscan.engine.spawn import spawn_batch
from beamscan.model.session import SessionStats

if TYPE_CHECKING:
    from beamscan.model.particle import Particle
    from beamscan.model.session import Session

logger = logging.getLogger(__name__)


def tick_session(session: Session, now_ms: float | None = None) -> LifecycleResult:
    """Execute one simulation tick.

    Tick sequence:
    1. Ease the craft toward the pointer, relay drift speed
    2. Rescan targets, cue on new acquisitions
    3. Advance all particles, compute the next live collection
    4. Hand completed particles to the merge buffer
    5. Publish the next live collection and conveyance target
    6. Drain deferred merges into the collected set
    7. Increment session.tick

    Args:
        session: The session to advance.
        now_ms: Tick timestamp; read from ``session.clock`` when omitted.

    Returns:
        The lifecycle result of this tick.
    """
    if now_ms is None:
        now_ms = session.clock()
    config = session.config

    # 1. Craft motion
    drift = step_craft(session.craft, session.pointer, now_ms, config)
    session.signals.drift(drift)

    # 2. Target scan
    origin = session.craft.position.offset(dy=config.beam_origin_offset)
    if session.scanner.update(session.targets, session.layout, origin, config.beam_spread):
        session.signals.cue(Cue.SCAN)

    # 3. Particle lifecycle
    result = advance_particles(session.particles, now_ms, config, session.rng)

    # 4. Completions leave the live list in this same step
    session.merge_buffer.submit(result.completed)

    # 5. Publish
    session.particles = result.live
    session.conveyance_target = result.conveyance_target
    for cue in result.cues:
        session.signals.cue(cue)

    # 6. Deferred fold runs only after the replace above
    session.merge_buffer.flush()

    # 7. Clock
    session.tick += 1

    if session.tick % 100 == 0:
        logger.debug(
            "Session tick %d: live=%d, collected=%d, in_range=%d",
            session.tick,
            len(session.particles),
            len(session.collected),
            len(session.in_range),
        )

    return result


def activate_target(session: Session, index: int, now_ms: float | None = None) -> list[Particle]:
    """Fire on a target.

    Activations on slots outside the current in-range set are a normal miss
    and are ignored.

    Args:
        session: The session to spawn into.
        index: Target slot index.
        now_ms: Spawn timestamp; read from ``session.clock`` when omitted.

    Returns:
        The spawned batch, or an empty list on a miss.
    """
    if index not in session.in_range:
        logger.debug("Activation on target %d ignored: not in range", index)
        return []

    center = session.layout.get(index)
    slot = next((t for t in session.targets if t.index == index), None)
    if center is None or slot is None:
        logger.debug("Activation on target %d ignored: no layout", index)
        return []

    if now_ms is None:
        now_ms = session.clock()

    batch = spawn_batch(
        center,
        slot.label,
        now_ms=now_ms,
        rng=session.rng,
        config=session.config,
    )
    session.particles = [*session.particles, *batch]

    session.stats.explored += len(batch)
    session.stats.filtered += sum(1 for p in batch if not p.rejected)
    session.signals.cue(Cue.POP)

    logger.info("Fired on target %d ('%s'): %d particles", index, slot.label, len(batch))
    return batch


def reset_session(session: Session) -> None:
    """Clear live particles, the collection, pending merges, the in-range set and counters."""
    session.particles = []
    session.merge_buffer.discard()
    session.collected.clear()
    session.scanner.clear(session.targets)
    session.conveyance_target = None
    session.stats = SessionStats()
    logger.info("Session reset")


def mark_viewed(session: Session, particle_id: str) -> bool:
    """Flag a collected particle as opened in the detail view.

    Returns:
        False if the id is not in the collection.
    """
    return session.collected.mark_viewed(particle_id)
