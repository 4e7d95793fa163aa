"""Planar poses and the rigid-motion algebra used by the filter."""

from __future__ import annotations

import math
from dataclasses import dataclass


def normalize_angle(theta: float) -> float:
    """Wrap an angle into the interval [-pi, pi]."""
    return math.atan2(math.sin(theta), math.cos(theta))


@dataclass(frozen=True)
class OrientedPoint:
    """A position in the plane together with a heading in radians."""

    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0

    def __add__(self, other: OrientedPoint) -> OrientedPoint:
        return OrientedPoint(self.x + other.x, self.y + other.y, self.theta + other.theta)

    def __sub__(self, other: OrientedPoint) -> OrientedPoint:
        return OrientedPoint(self.x - other.x, self.y - other.y, self.theta - other.theta)

    def __mul__(self, factor: float) -> OrientedPoint:
        return OrientedPoint(self.x * factor, self.y * factor, self.theta * factor)

    __rmul__ = __mul__


def absolute_difference(p1: OrientedPoint, p2: OrientedPoint) -> OrientedPoint:
    """Express ``p1`` in the frame of ``p2``."""
    dx = p1.x - p2.x
    dy = p1.y - p2.y
    dtheta = normalize_angle(p1.theta - p2.theta)
    s = math.sin(p2.theta)
    c = math.cos(p2.theta)
    return OrientedPoint(c * dx + s * dy, -s * dx + c * dy, dtheta)


def absolute_sum(p1: OrientedPoint, p2: OrientedPoint) -> OrientedPoint:
    """Compose ``p2``, given in the frame of ``p1``, onto ``p1``."""
    s = math.sin(p1.theta)
    c = math.cos(p1.theta)
    return OrientedPoint(
        p1.x + c * p2.x - s * p2.y,
        p1.y + s * p2.x + c * p2.y,
        p1.theta + p2.theta,
    )