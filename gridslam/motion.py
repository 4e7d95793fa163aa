"""Odometry motion model that perturbs particle poses with Gaussian noise."""

from __future__ import annotations

import math
import random
from dataclasses import dataclass, field

from gridslam.geometry import (
    OrientedPoint,
    absolute_difference,
    absolute_sum,
    normalize_angle,
)

CONDITIONING_LINEAR_COVARIANCE = 0.01
CONDITIONING_ANGULAR_COVARIANCE = 0.001


def sample_gaussian(sigma: float, rng: random.Random | None = None) -> float:
    """Draw from a zero-mean normal distribution; a zero sigma gives zero."""
    if sigma == 0:
        return 0.0
    source = rng if rng is not None else random
    return source.gauss(0.0, sigma)


@dataclass
class Covariance3:
    """Symmetric 3x3 covariance of an (x, y, theta) pose."""

    xx: float = 0.0
    yy: float = 0.0
    tt: float = 0.0
    xy: float = 0.0
    xt: float = 0.0
    yt: float = 0.0


@dataclass
class MotionModel:
    """Noise parameters: srr, srt, str and stt relate translation and rotation errors."""

    srr: float
    srt: float
    str: float
    stt: float
    rng: random.Random | None = field(default=None, repr=False, compare=False)

    def _sample(self, sigma: float) -> float:
        return sample_gaussian(sigma, self.rng)

    def draw_from_motion(
        self, p: OrientedPoint, linear_move: float, angular_move: float
    ) -> OrientedPoint:
        """Move ``p`` forward and turn it, with noise scaled by the motion."""
        lin = abs(linear_move)
        ang = abs(angular_move)
        lm = linear_move + lin * self._sample(self.srr) + ang * self._sample(self.str)
        am = angular_move + lin * self._sample(self.srt) + ang * self._sample(self.stt)
        heading = p.theta + 0.5 * am
        return OrientedPoint(
            p.x + lm * math.cos(heading),
            p.y + lm * math.sin(heading),
            normalize_angle(p.theta + am),
        )

    def draw_from_odometry(
        self, p: OrientedPoint, pnew: OrientedPoint, pold: OrientedPoint
    ) -> OrientedPoint:
        """Apply the odometry step from ``pold`` to ``pnew`` to ``p``, with noise."""
        sxy = 0.3 * self.srr
        delta = absolute_difference(pnew, pold)
        dx, dy, dth = abs(delta.x), abs(delta.y), abs(delta.theta)
        x = delta.x + self._sample(self.srr * dx + self.str * dth + sxy * dy)
        y = delta.y + self._sample(self.srr * dy + self.str * dth + sxy * dx)
        theta = delta.theta + self._sample(
            self.stt * dth + self.srt * math.hypot(delta.x, delta.y)
        )
        theta = math.fmod(theta, 2 * math.pi)
        if theta > math.pi:
            theta -= 2 * math.pi
        return absolute_sum(p, OrientedPoint(x, y, theta))

    def gaussian_approximation(self, pnew: OrientedPoint, pold: OrientedPoint) -> Covariance3:
        """Covariance of the step from ``pold`` to ``pnew`` in the world frame."""
        delta = absolute_difference(pnew, pold)
        linear_move = math.hypot(delta.x, delta.y)
        angular_move = abs(delta.x)
        s11 = self.srr * self.srr * linear_move * linear_move
        s22 = self.stt * self.stt * angular_move * angular_move
        s12 = self.str * angular_move * self.srt * linear_move
        s = math.sin(pold.theta)
        c = math.cos(pold.theta)
        return Covariance3(
            xx=c * c * s11 + CONDITIONING_LINEAR_COVARIANCE,
            yy=s * s * s11 + CONDITIONING_LINEAR_COVARIANCE,
            tt=s22 + CONDITIONING_ANGULAR_COVARIANCE,
            xy=s * c * s11,
            xt=c * s12,
            yt=s * s12,
        )