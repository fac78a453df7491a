"""Spawn factory: builds the particle batch fired at a target."""

from __future__ import annotations

import logging
import random
import uuid
from collections.abc import Callable
from typing import TYPE_CHECKING

from beamscan.corpora.policies import generate_policy
from beamscan.model.particle import Particle, ParticleKind, PolicyRecord

if TYPE_CHECKING:
    from beamscan.config import SimulationConfig
    from beamscan.model.geometry import Position

logger = logging.getLogger(__name__)

DOC_COLORS = ["#FF6B6B", "#4ECDC4", "#45B7D1", "#FFA07A", "#98D8C8", "#F7D794"]

PayloadFactory = Callable[[str, random.Random], PolicyRecord]


def classify(index: int, rng: random.Random, rejection_rate: float) -> ParticleKind:
    """Pick the kind of the particle at ``index`` in its batch.

    The rejection draw happens for every particle so the random stream does
    not depend on batch position; index 0 is then forced to SELECTED.
    """
    rejected = rng.random() < rejection_rate
    if index == 0:
        return ParticleKind.SELECTED
    return ParticleKind.REJECTED if rejected else ParticleKind.RETAINED


def spawn_batch(
    origin: Position,
    label: str,
    *,
    now_ms: float,
    rng: random.Random,
    config: SimulationConfig,
    payload_factory: PayloadFactory = generate_policy,
) -> list[Particle]:
    """Create a batch of particles launched from a target.

    Args:
        origin: Screen center of the target that was fired on.
        label: Target label, used to generate payloads.
        now_ms: Spawn timestamp shared by the batch.
        rng: Random source for classification and kinematics.
        config: Simulation tuning.
        payload_factory: Builds the record for non-rejected particles.

    Returns:
        ``config.batch_size`` new particles; exactly one is SELECTED.
    """
    batch_id = str(uuid.uuid4())
    # Never start inside the craft
    start_y = max(origin.y - 20.0, config.craft_altitude + 60.0)

    batch: list[Particle] = []
    for i in range(config.batch_size):
        kind = classify(i, rng, config.rejection_rate)
        particle = Particle(
            id=str(uuid.UUID(int=rng.getrandbits(128), version=4)),
            kind=kind,
            spawn_time_ms=now_ms,
            batch_id=batch_id,
            label=label,
            x=origin.x + (rng.random() - 0.5) * config.spawn_jitter,
            y=start_y,
            vx=(rng.random() - 0.5) * config.spawn_vx_range,
            vy=rng.random() * -6.0 - 2.0,
            rotation=rng.random() * 360.0,
            rot_speed=(rng.random() - 0.5) * 15.0,
            life=config.initial_life,
            color=rng.choice(DOC_COLORS),
            width=30.0 + rng.random() * 10.0,
            height=40.0 + rng.random() * 10.0,
        )
        if kind is not ParticleKind.REJECTED:
            particle.payload = payload_factory(label, rng)
        batch.append(particle)

    logger.debug(
        "Spawned batch %s at (%.1f, %.1f) for '%s': %d rejected",
        batch_id,
        origin.x,
        origin.y,
        label,
        sum(1 for p in batch if p.rejected),
    )
    return batch
