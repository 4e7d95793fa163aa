"""Laser scan preparation and the mapper's tunable parameters."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass


@dataclass
class MapperConfig:
    """Parameters of the live mapper, with its default values."""

    throttle_scans: int = 1
    base_frame: str = "base_link"
    map_frame: str = "map"
    odom_frame: str = "odom"
    transform_publish_period: float = 0.05
    map_update_interval: float = 0.5
    max_urange: float = 80.0
    max_range: float = 0.0
    minimum_score: float = 0.0
    sigma: float = 0.05
    kernel_size: int = 1
    lstep: float = 0.05
    astep: float = 0.05
    iterations: int = 5
    lsigma: float = 0.075
    ogain: float = 3.0
    lskip: int = 0
    srr: float = 0.1
    srt: float = 0.2
    str: float = 0.1
    stt: float = 0.2
    linear_update: float = 1.0
    angular_update: float = 0.5
    temporal_update: float = 1.0
    resample_threshold: float = 0.5
    particles: int = 30
    xmin: float = -10.0
    ymin: float = -10.0
    xmax: float = 10.0
    ymax: float = 10.0
    delta: float = 0.05
    occ_thresh: float = 0.25
    llsamplerange: float = 0.01
    llsamplestep: float = 0.01
    lasamplerange: float = 0.005
    lasamplestep: float = 0.005
    tf_delay: float | None = None

    def __post_init__(self) -> None:
        if self.tf_delay is None:
            self.tf_delay = self.transform_publish_period
        if self.throttle_scans < 1:
            raise ValueError("throttle_scans must be at least one")


def centered_laser_angles(
    angle_min: float, angle_max: float, angle_increment: float, count: int
) -> list[float]:
    """Beam angles centred on zero, increasing by the absolute increment."""
    if count < 0:
        raise ValueError("beam count must not be negative")
    step = abs(angle_increment)
    theta = -abs(angle_min - angle_max) / 2
    angles = []
    for _ in range(count):
        angles.append(theta)
        theta += step
    return angles


def needs_reverse(angle_min: float, angle_max: float, upright: bool) -> bool:
    """Whether readings must be reversed to run in increasing angle order."""
    if upright:
        return angle_min > angle_max
    return angle_min < angle_max


def prepare_ranges(
    ranges: Iterable[float], range_min: float, range_max: float, reverse: bool
) -> list[float]:
    """Readings as floats, optionally reversed, with short ones set to ``range_max``."""
    values = [float(r) for r in ranges]
    if reverse:
        values.reverse()
    return [float(range_max) if r < range_min else r for r in values]