"""Target scanner: per-tick beam test over every target slot."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING

from beamscan.engine.beam import BEAM_SPREAD, contains

if TYPE_CHECKING:
    from beamscan.model.geometry import Position
    from beamscan.model.target import TargetSlot

logger = logging.getLogger(__name__)


def scan_targets(
    targets: list[TargetSlot],
    layout: Mapping[int, Position],
    origin: Position,
    spread: float = BEAM_SPREAD,
) -> set[int]:
    """Collect the indices of all slots whose center lies in the beam.

    Slots without a center in ``layout`` are not rendered and never in range.
    """
    candidates: set[int] = set()
    for slot in targets:
        center = layout.get(slot.index)
        if center is None:
            continue
        if contains(origin.x, origin.y, center.x, center.y, spread):
            candidates.add(slot.index)
    return candidates


class TargetScanner:
    """Holds the published in-range set and detects new acquisitions."""

    def __init__(self) -> None:
        self._in_range: frozenset[int] = frozenset()

    @property
    def in_range(self) -> frozenset[int]:
        return self._in_range

    def update(
        self,
        targets: list[TargetSlot],
        layout: Mapping[int, Position],
        origin: Position,
        spread: float = BEAM_SPREAD,
    ) -> bool:
        """Recompute the in-range set.

        The published set is only replaced when it actually changed
        (cardinality first, then membership).

        Returns:
            True when the set grew, i.e. a new acquisition happened.
        """
        candidates = scan_targets(targets, layout, origin, spread)
        previous = self._in_range

        if len(candidates) == len(previous) and candidates == previous:
            return False

        self._in_range = frozenset(candidates)
        for slot in targets:
            slot.in_range = slot.index in self._in_range

        grew = len(candidates) > len(previous)
        if grew:
            logger.debug(
                "Acquired targets: %s",
                sorted(self._in_range - previous),
            )
        return grew

    def clear(self, targets: list[TargetSlot]) -> None:
        self._in_range = frozenset()
        for slot in targets:
            slot.in_range = False
