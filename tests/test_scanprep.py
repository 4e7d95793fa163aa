import math

import pytest

from gridslam.scanprep import (
    MapperConfig,
    centered_laser_angles,
    needs_reverse,
    prepare_ranges,
)


def test_config_defaults_match_source():
    cfg = MapperConfig()
    assert cfg.base_frame == "base_link"
    assert cfg.map_frame == "map"
    assert cfg.odom_frame == "odom"
    assert cfg.particles == 30
    assert cfg.max_urange == 80.0
    assert cfg.occ_thresh == 0.25
    assert cfg.srt == 0.2


def test_tf_delay_follows_publish_period():
    assert MapperConfig().tf_delay == 0.05
    assert MapperConfig(transform_publish_period=0.2).tf_delay == 0.2
    assert MapperConfig(tf_delay=1.0).tf_delay == 1.0


def test_config_rejects_zero_throttle():
    with pytest.raises(ValueError):
        MapperConfig(throttle_scans=0)


def test_angles_symmetric_example():
    assert centered_laser_angles(-1.0, 1.0, 0.5, 5) == [-1.0, -0.5, 0.0, 0.5, 1.0]


def test_angles_increment_sign_irrelevant():
    a = centered_laser_angles(-1.0, 1.0, 0.25, 9)
    b = centered_laser_angles(1.0, -1.0, -0.25, 9)
    assert a == b


def test_angles_increasing_and_start():
    angles = centered_laser_angles(-2.0, 1.0, 0.1, 31)
    assert len(angles) == 31
    assert angles[0] == -1.5
    assert all(b > a for a, b in zip(angles, angles[1:]))


def test_angles_empty_and_negative():
    assert centered_laser_angles(-1.0, 1.0, 0.1, 0) == []
    with pytest.raises(ValueError):
        centered_laser_angles(-1.0, 1.0, 0.1, -1)


@pytest.mark.parametrize(
    "amin, amax, upright, expected",
    [
        (-1.0, 1.0, True, False),
        (1.0, -1.0, True, True),
        (-1.0, 1.0, False, True),
        (1.0, -1.0, False, False),
    ],
)
def test_needs_reverse(amin, amax, upright, expected):
    assert needs_reverse(amin, amax, upright) is expected


def test_prepare_ranges_replaces_short_readings():
    assert prepare_ranges([0.05, 1.0, 2.5], 0.1, 30.0, False) == [30.0, 1.0, 2.5]


def test_prepare_ranges_reverse():
    ranges = [1.0, 0.0, 3.0, 4.0]
    forward = prepare_ranges(ranges, 0.5, 10.0, False)
    backward = prepare_ranges(ranges, 0.5, 10.0, True)
    assert backward == list(reversed(forward))
    assert len(backward) == len(ranges)


def test_prepare_ranges_keeps_nan_and_does_not_mutate():
    ranges = [math.nan, 2.0]
    result = prepare_ranges(ranges, 0.5, 10.0, True)
    assert result[0] == 2.0
    assert math.isnan(result[1])
    assert ranges[1] == 2.0