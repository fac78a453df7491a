"""Collection merge: folds conveyed particles into the permanent collection.

Completions are discovered inside the lifecycle pass but folded later, once
the tick has published its new live collection. The fold is queued on a
``DeferredQueue`` that the tick driver drains as its last step.
"""

from __future__ import annotations

import logging
from collections import deque
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from beamscan.model.particle import Particle

logger = logging.getLogger(__name__)


class CollectedSet:
    """Append-only, id-keyed store of particles that completed conveyance."""

    def __init__(self) -> None:
        self._items: dict[str, Particle] = {}

    def __len__(self) -> int:
        return len(self._items)

    def __iter__(self) -> Iterator[Particle]:
        return iter(self._items.values())

    def __contains__(self, particle_id: object) -> bool:
        return particle_id in self._items

    def get(self, particle_id: str) -> Particle | None:
        return self._items.get(particle_id)

    def ids(self) -> set[str]:
        return set(self._items)

    def merge(self, particles: Iterable[Particle]) -> int:
        """Add particles whose id is not present yet.

        Existing entries are left untouched, so merging the same id again
        is a no-op.

        Returns:
            Number of particles actually added.
        """
        added = 0
        for particle in particles:
            if particle.id in self._items:
                continue
            self._items[particle.id] = particle
            added += 1
        return added

    def mark_viewed(self, particle_id: str) -> bool:
        """Flag a collected particle as opened by the user."""
        particle = self._items.get(particle_id)
        if particle is None:
            return False
        particle.viewed = True
        return True

    def clear(self) -> None:
        self._items.clear()


class DeferredQueue:
    """FIFO of callbacks run at the next scheduling opportunity."""

    def __init__(self) -> None:
        self._callbacks: deque[Callable[[], None]] = deque()

    def __len__(self) -> int:
        return len(self._callbacks)

    def call_soon(self, callback: Callable[[], None]) -> None:
        self._callbacks.append(callback)

    def drain(self) -> int:
        """Run every queued callback, including ones queued while draining.

        Returns:
            Number of callbacks run.
        """
        ran = 0
        while self._callbacks:
            callback = self._callbacks.popleft()
            callback()
            ran += 1
        return ran

    def cancel_all(self) -> None:
        self._callbacks.clear()


class MergeBuffer:
    """Schedules deferred folds of completed particles into a CollectedSet."""

    def __init__(self, collected: CollectedSet, queue: DeferredQueue | None = None) -> None:
        self._collected = collected
        self._queue = queue if queue is not None else DeferredQueue()
        self._pending: list[Particle] = []

    @property
    def queue(self) -> DeferredQueue:
        return self._queue

    @property
    def pending(self) -> list[Particle]:
        """Particles handed over but not folded yet."""
        return list(self._pending)

    def submit(self, completed: list[Particle]) -> None:
        """Queue completed particles for the next fold."""
        if not completed:
            return
        self._pending.extend(completed)
        self._queue.call_soon(self._fold)

    def flush(self) -> int:
        """Run the queued folds now.

        Returns:
            Number of particles added to the collection.
        """
        before = len(self._collected)
        self._queue.drain()
        return len(self._collected) - before

    def discard(self) -> None:
        """Drop pending particles without folding them."""
        self._pending.clear()
        self._queue.cancel_all()

    def _fold(self) -> None:
        batch, self._pending = self._pending, []
        if not batch:
            return
        added = self._collected.merge(batch)
        logger.debug("Merged %d of %d completed particles", added, len(batch))
