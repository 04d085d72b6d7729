import math

import pytest

from parkbot.lidar import (
    DriverParameters,
    LaserScan,
    LidarPoint,
    ScanConfig,
    scan_to_messages,
)


def _config():
    return ScanConfig(
        min_angle=0.0,
        max_angle=1.0,
        angle_increment=0.25,
        scan_time=0.1,
        time_increment=0.01,
        min_range=0.1,
        max_range=16.0,
    )


def _scan():
    return LaserScan(
        config=_config(),
        points=[
            LidarPoint(angle=0.0, range=2.0, intensity=7.0),
            LidarPoint(angle=0.5, range=0.05, intensity=3.0),
            LidarPoint(angle=math.pi / 2, range=4.0, intensity=1.0),
        ],
        stamp=1_500_000_000,
    )


def test_default_parameters():
    params = DriverParameters.from_mapping({})
    assert params.port == "/dev/ydlidar"
    assert params.baudrate == 230400
    assert params.frame_id == "laser_frame"
    assert params.resolution_fixed is True
    assert params.single_channel is False
    assert params.range_max == 16.0
    assert params.m3_mode == 1


def test_parameters_override_and_rename():
    params = DriverParameters.from_mapping(
        {"port": "/dev/ttyS1", "baudrate": 115200, "isSingleChannel": True, "angle_max": 90, "other": 1}
    )
    assert params.port == "/dev/ttyS1"
    assert params.baudrate == 115200
    assert params.single_channel is True
    assert params.angle_max == 90.0
    assert isinstance(params.angle_max, float)


@pytest.mark.parametrize(
    "params",
    [{"baudrate": "115200"}, {"debug": 1}, {"range_min": True}, {"port": 5}],
)
def test_parameters_wrong_type(params):
    with pytest.raises(TypeError):
        DriverParameters.from_mapping(params)


def test_scan_stamp_split():
    scan_msg, cloud = scan_to_messages(_scan(), frame_id="laser")
    assert (scan_msg.stamp_sec, scan_msg.stamp_nsec) == (1, 500_000_000)
    assert (cloud.stamp_sec, cloud.stamp_nsec) == (1, 500_000_000)
    assert scan_msg.frame_id == cloud.frame_id == "laser"


def test_ranges_binned_and_short_ranges_dropped():
    scan_msg, _ = scan_to_messages(_scan())
    assert len(scan_msg.ranges) == len(scan_msg.intensities) == 5
    assert scan_msg.ranges[0] == 2.0
    assert scan_msg.intensities[0] == 7.0
    assert scan_msg.ranges[2] == 0.0
    assert scan_msg.intensities[2] == 0.0


def test_invalid_range_is_inf_fill():
    scan_msg, _ = scan_to_messages(_scan(), invalid_range_is_inf=True)
    assert scan_msg.ranges[0] == 2.0
    assert all(math.isinf(r) for r in scan_msg.ranges[1:])


def test_point_cloud_filters_by_range():
    _, cloud = scan_to_messages(_scan())
    assert len(cloud.points) == 2
    assert cloud.points[0].x == pytest.approx(2.0)
    assert cloud.points[0].y == pytest.approx(0.0)
    assert cloud.points[1].x == pytest.approx(0.0, abs=1e-9)
    assert cloud.points[1].y == pytest.approx(4.0)
    assert cloud.channels["intensities"] == [7.0, 1.0]
    assert cloud.channels["stamps"] == [0.0, pytest.approx(0.02)]


def test_point_cloud_preservative_keeps_everything():
    scan = _scan()
    _, cloud = scan_to_messages(scan, point_cloud_preservative=True)
    assert len(cloud.points) == len(scan.points)
    assert len(cloud.channels["stamps"]) == len(scan.points)
    for point, raw in zip(cloud.points, scan.points):
        assert math.hypot(point.x, point.y) == pytest.approx(raw.range)
        assert point.z == 0.0


def test_message_copies_config():
    scan_msg, _ = scan_to_messages(_scan())
    config = _config()
    assert scan_msg.angle_min == config.min_angle
    assert scan_msg.angle_max == config.max_angle
    assert scan_msg.range_min == config.min_range
    assert scan_msg.range_max == config.max_range
    assert scan_msg.time_increment == config.time_increment


def test_zero_increment_rejected():
    scan = LaserScan(config=ScanConfig(min_angle=0.0, max_angle=1.0, angle_increment=0.0))
    with pytest.raises(ValueError):
        scan_to_messages(scan)