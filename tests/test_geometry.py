import math

import pytest

from gridslam.geometry import (
    OrientedPoint,
    absolute_difference,
    absolute_sum,
    normalize_angle,
)


@pytest.mark.parametrize("theta", [0.0, 1.0, -2.5, 3 * math.pi, -7.0, 100.0])
def test_normalize_angle_in_range_and_equivalent(theta):
    wrapped = normalize_angle(theta)
    assert -math.pi <= wrapped <= math.pi
    assert math.sin(wrapped) == pytest.approx(math.sin(theta))
    assert math.cos(wrapped) == pytest.approx(math.cos(theta))


def test_normalize_angle_keeps_small_angles():
    assert normalize_angle(0.5) == pytest.approx(0.5)


def test_point_arithmetic():
    a = OrientedPoint(1.0, 2.0, 0.5)
    b = OrientedPoint(0.5, -1.0, 0.25)
    assert a + b - b == a
    assert (a * 2.0).x == pytest.approx(a.x + a.x)
    assert 2.0 * a == a * 2.0


def test_difference_of_same_pose_is_zero():
    p = OrientedPoint(3.0, -4.0, 1.2)
    d = absolute_difference(p, p)
    assert d.x == pytest.approx(0.0)
    assert d.y == pytest.approx(0.0)
    assert d.theta == pytest.approx(0.0)


def test_difference_in_rotated_frame():
    d = absolute_difference(OrientedPoint(1.0, 0.0, 0.0), OrientedPoint(0.0, 0.0, math.pi / 2))
    assert d.x == pytest.approx(0.0, abs=1e-12)
    assert d.y == pytest.approx(-1.0)
    assert d.theta == pytest.approx(-math.pi / 2)


@pytest.mark.parametrize(
    "p, q",
    [
        (OrientedPoint(0.0, 0.0, 0.0), OrientedPoint(1.0, 2.0, 0.3)),
        (OrientedPoint(1.5, -2.0, 2.0), OrientedPoint(-3.0, 4.0, -2.5)),
        (OrientedPoint(-1.0, 1.0, -3.0), OrientedPoint(2.0, 2.0, 3.0)),
    ],
)
def test_sum_inverts_difference(p, q):
    back = absolute_sum(p, absolute_difference(q, p))
    assert back.x == pytest.approx(q.x)
    assert back.y == pytest.approx(q.y)
    assert normalize_angle(back.theta) == pytest.approx(normalize_angle(q.theta))


def test_sum_with_identity_is_unchanged():
    p = OrientedPoint(2.0, 3.0, 0.7)
    assert absolute_sum(p, OrientedPoint()) == p