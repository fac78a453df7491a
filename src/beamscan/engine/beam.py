"""Beam geometry: downward-opening cone containment test."""

from __future__ import annotations

BEAM_SPREAD = 0.6  # cone half-width per pixel of depth


def contains(
    origin_x: float,
    origin_y: float,
    point_x: float,
    point_y: float,
    spread: float = BEAM_SPREAD,
) -> bool:
    """Check whether a point lies inside the beam cone.

    The cone opens downward from the origin: a point above the origin is
    never contained; below it, the allowed half-width grows linearly with
    depth.

    Args:
        origin_x: Beam origin x.
        origin_y: Beam origin y.
        point_x: Tested point x.
        point_y: Tested point y.
        spread: Half-width coefficient of the cone.

    Returns:
        True iff ``|dx| < dy * spread`` with ``dy >= 0``.
    """
    dy = point_y - origin_y
    if dy < 0:
        return False
    dx = point_x - origin_x
    return abs(dx) < dy * spread
