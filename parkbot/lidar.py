"""Conversion of raw lidar scans into laser scan and point cloud messages."""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any

from .geometry import Point

DRIVER_VERSION = "1.0.2"

TYPE_TRIANGLE = 1
DEVICE_TYPE_SERIAL = 0

_NANOS_PER_SECOND = 1_000_000_000


@dataclass
class LidarPoint:
    """One measured point: angle in radians, range in metres, intensity."""

    angle: float
    range: float
    intensity: float = 0.0


@dataclass
class ScanConfig:
    """Geometry and timing of a scan."""

    min_angle: float
    max_angle: float
    angle_increment: float
    scan_time: float = 0.0
    time_increment: float = 0.0
    min_range: float = 0.0
    max_range: float = 0.0


@dataclass
class LaserScan:
    """A raw scan as delivered by the sensor; ``stamp`` is in nanoseconds."""

    config: ScanConfig
    points: list[LidarPoint] = field(default_factory=list)
    stamp: int = 0


@dataclass
class LaserScanMessage:
    """A scan resampled onto a fixed angular grid."""

    stamp_sec: int
    stamp_nsec: int
    frame_id: str
    angle_min: float
    angle_max: float
    angle_increment: float
    scan_time: float
    time_increment: float
    range_min: float
    range_max: float
    ranges: list[float] = field(default_factory=list)
    intensities: list[float] = field(default_factory=list)


@dataclass
class PointCloud:
    """Cartesian points of a scan with per-point ``intensities`` and ``stamps`` channels."""

    stamp_sec: int
    stamp_nsec: int
    frame_id: str
    points: list[Point] = field(default_factory=list)
    channels: dict[str, list[float]] = field(
        default_factory=lambda: {"intensities": [], "stamps": []}
    )


def _param(default: Any, name: str | None = None) -> Any:
    metadata = {"param": name} if name else {}
    return field(default=default, metadata=metadata)


@dataclass
class DriverParameters:
    """Driver settings with the defaults the node uses when a parameter is unset."""

    port: str = "/dev/ydlidar"
    ignore_array: str = ""
    frame_id: str = "laser_frame"
    baudrate: int = 230400
    lidar_type: int = TYPE_TRIANGLE
    device_type: int = DEVICE_TYPE_SERIAL
    sample_rate: int = 9
    abnormal_check_count: int = 4
    intensity_bit: int = 10
    resolution_fixed: bool = True
    reversion: bool = True
    inverted: bool = True
    auto_reconnect: bool = True
    single_channel: bool = _param(False, "isSingleChannel")
    intensity: bool = False
    support_motor_dtr: bool = False
    debug: bool = False
    angle_max: float = 180.0
    angle_min: float = -180.0
    range_max: float = 16.0
    range_min: float = 0.1
    frequency: float = 10.0
    invalid_range_is_inf: bool = False
    point_cloud_preservative: bool = False
    m1_mode: int = 0
    m2_mode: int = 0
    m3_mode: int = 1

    @classmethod
    def from_mapping(cls, params: Mapping[str, Any]) -> DriverParameters:
        """Build parameters from a name/value mapping; unknown names are ignored."""
        values: dict[str, Any] = {}
        for spec in fields(cls):
            key = spec.metadata.get("param", spec.name)
            if key in params:
                values[spec.name] = _coerce(params[key], type(spec.default), key)
        return cls(**values)


def _coerce(value: Any, kind: type, key: str) -> Any:
    if kind is bool:
        if isinstance(value, bool):
            return value
    elif kind is int:
        if isinstance(value, int) and not isinstance(value, bool):
            return value
    elif kind is float:
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return float(value)
    elif isinstance(value, kind):
        return value
    raise TypeError(f"parameter {key!r} must be of type {kind.__name__}, got {value!r}")


def scan_to_messages(
    scan: LaserScan,
    frame_id: str = "laser_frame",
    invalid_range_is_inf: bool = False,
    point_cloud_preservative: bool = False,
) -> tuple[LaserScanMessage, PointCloud]:
    """Resample a raw scan into a laser scan message and a point cloud."""
    config = scan.config
    if config.angle_increment == 0.0:
        raise ValueError("angle_increment must not be zero")

    sec, nsec = divmod(scan.stamp, _NANOS_PER_SECOND)
    size = int((config.max_angle - config.min_angle) / config.angle_increment + 1)
    size = max(size, 0)
    fill = math.inf if invalid_range_is_inf else 0.0

    scan_msg = LaserScanMessage(
        stamp_sec=sec,
        stamp_nsec=nsec,
        frame_id=frame_id,
        angle_min=config.min_angle,
        angle_max=config.max_angle,
        angle_increment=config.angle_increment,
        scan_time=config.scan_time,
        time_increment=config.time_increment,
        range_min=config.min_range,
        range_max=config.max_range,
        ranges=[fill] * size,
        intensities=[0.0] * size,
    )
    cloud = PointCloud(stamp_sec=sec, stamp_nsec=nsec, frame_id=frame_id)

    for i, point in enumerate(scan.points):
        index = math.ceil((point.angle - config.min_angle) / config.angle_increment)
        if 0 <= index < size and point.range >= config.min_range:
            scan_msg.ranges[index] = point.range
            scan_msg.intensities[index] = point.intensity

        in_range = config.min_range <= point.range <= config.max_range
        if point_cloud_preservative or in_range:
            cloud.points.append(
                Point(point.range * math.cos(point.angle), point.range * math.sin(point.angle), 0.0)
            )
            cloud.channels["intensities"].append(point.intensity)
            cloud.channels["stamps"].append(i * config.time_increment)

    return scan_msg, cloud