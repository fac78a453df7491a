"""Position dataclass: screen-space coordinate pair."""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Position:
    """A point in screen space (y grows downward)."""

    x: float = 0.0
    y: float = 0.0

    def offset(self, dx: float = 0.0, dy: float = 0.0) -> Position:
        """Return a new position shifted by (dx, dy)."""
        return Position(self.x + dx, self.y + dy)
