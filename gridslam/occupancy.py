"""Conversion of the best particle's map into an occupancy grid, and pose entropy."""

from __future__ import annotations

import math
from collections.abc import Callable, Iterable, Sequence
from typing import Union

UNKNOWN = -1
FREE = 0
OCCUPIED = 100

CellSource = Union[Callable[[int, int], float], Sequence[Sequence[float]]]


def pose_entropy(weights: Iterable[float]) -> float:
    """Entropy of the normalized particle weights; zero weights contribute nothing."""
    values = [float(w) for w in weights]
    total = sum(values)
    if total == 0:
        return 0.0
    entropy = 0.0
    for w in values:
        p = w / total
        if p > 0.0:
            entropy += p * math.log(p)
    return -entropy


def occupancy_value(occ: float, threshold: float) -> int:
    """Grid value of a cell: -1 when unknown, 100 above the threshold, else 0.

    Raises ValueError for an occupancy above one.
    """
    if occ > 1.0:
        raise ValueError(f"occupancy {occ} exceeds one")
    if occ < 0:
        return UNKNOWN
    if occ > threshold:
        return OCCUPIED
    return FREE


def occupancy_grid(
    cells: CellSource, width: int, height: int, threshold: float
) -> list[int]:
    """Row-major grid data (index ``y * width + x``) from per-cell occupancies.

    ``cells`` is either a function of ``(x, y)`` or a sequence indexed
    ``cells[x][y]``.
    """
    if width < 0 or height < 0:
        raise ValueError("grid dimensions must not be negative")
    if callable(cells):
        lookup = cells
    else:
        def lookup(x: int, y: int) -> float:
            return cells[x][y]
    return [
        occupancy_value(lookup(x, y), threshold)
        for y in range(height)
        for x in range(width)
    ]