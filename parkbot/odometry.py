"""Dead-reckoning odometry for a differential drive robot from wheel ticks."""

from __future__ import annotations

import math
from dataclasses import dataclass, field

from .geometry import Point, Pose, Quaternion, quaternion_from_rpy

INITIAL_X = 0.0
INITIAL_Y = 0.0
INITIAL_THETA = 0.00000000001
PI = 3.141592

TICKS_PER_REVOLUTION = 620
WHEEL_RADIUS = 0.033
WHEEL_BASE = 0.17
TICKS_PER_METER = 3100

_WRAP = 65535
_WRAP_THRESHOLD = 10000


def pose_covariance() -> tuple[float, ...]:
    """Row-major 6x6 pose covariance published with quaternion odometry."""
    values = []
    for i in range(36):
        if i in (0, 7, 14):
            values.append(0.01)
        elif i in (21, 28, 35):
            values.append(0.1)
        else:
            values.append(0.0)
    return tuple(values)


@dataclass
class OdometryState:
    """An odometry message: pose, velocities and frames."""

    stamp: float = 0.0
    frame_id: str = "odom"
    child_frame_id: str = ""
    pose: Pose = field(default_factory=Pose)
    linear: Point = field(default_factory=Point)
    angular: Point = field(default_factory=Point)
    covariance: tuple[float, ...] = (0.0,) * 36


@dataclass
class _Planar:
    x: float = 0.0
    y: float = 0.0
    theta: float = 0.0
    stamp: float = 0.0


def _asin(value: float) -> float:
    return math.asin(value) if -1.0 <= value <= 1.0 else math.nan


def _div(numerator: float, denominator: float) -> float:
    if denominator != 0.0:
        return numerator / denominator
    if numerator == 0.0 or math.isnan(numerator):
        return math.nan
    return math.copysign(math.inf, numerator) * math.copysign(1.0, denominator)


def _wrap_angle(angle: float) -> float:
    if angle > PI:
        return angle - 2 * PI
    if angle < -PI:
        return angle + 2 * PI
    return angle


class DiffDriveOdometry:
    """Integrates wheel tick counts into a planar pose."""

    def __init__(self) -> None:
        self._old = _Planar(INITIAL_X, INITIAL_Y, INITIAL_THETA, 0.0)
        self._new = _Planar()
        self._linear_x = 0.0
        self._angular_z = 0.0
        self.distance_left = 0.0
        self.distance_right = 0.0
        self._last_left = 0
        self._last_right = 0
        self.initial_pose_received = False

    def set_initial_pose(self, x: float, y: float, theta: float) -> None:
        self._old.x = x
        self._old.y = y
        self._old.theta = theta
        self.initial_pose_received = True

    def on_left_ticks(self, count: int) -> None:
        """Record a left encoder count; the distance covers the last interval."""
        if count != 0 and self._last_left != 0:
            ticks = count - self._last_left
            if ticks > _WRAP_THRESHOLD:
                ticks = -(_WRAP - ticks)
            elif ticks < -_WRAP_THRESHOLD:
                ticks = _WRAP - ticks
            self.distance_left = ticks / TICKS_PER_METER
        self._last_left = count

    def on_right_ticks(self, count: int) -> None:
        """Record a right encoder count; forward wrap-around is not corrected."""
        if count != 0 and self._last_right != 0:
            ticks = count - self._last_right
            if ticks < -_WRAP_THRESHOLD:
                ticks = _WRAP - ticks
            self.distance_right = ticks / TICKS_PER_METER
        self._last_right = count

    def update(self, now: float) -> OdometryState:
        """Advance the pose to time ``now`` and return it with yaw in ``orientation.z``."""
        if not self.initial_pose_received:
            raise RuntimeError("no initial pose has been received")

        old, new = self._old, self._new
        cycle_distance = (self.distance_right + self.distance_left) / 2
        cycle_angle = _asin((self.distance_right - self.distance_left) / WHEEL_BASE)
        avg_angle = _wrap_angle(cycle_angle / 2 + old.theta)

        new.x = old.x + math.cos(avg_angle) * cycle_distance
        new.y = old.y + math.sin(avg_angle) * cycle_distance
        new.theta = cycle_angle + old.theta

        if math.isnan(new.x) or math.isnan(new.y):
            new.x, new.y, new.theta = old.x, old.y, old.theta

        new.theta = _wrap_angle(new.theta)

        new.stamp = now
        elapsed = new.stamp - old.stamp
        self._linear_x = _div(cycle_distance, elapsed)
        self._angular_z = _div(cycle_angle, elapsed)

        self._old = _Planar(new.x, new.y, new.theta, new.stamp)
        return self._euler_odometry()

    def _euler_odometry(self) -> OdometryState:
        new = self._new
        return OdometryState(
            stamp=new.stamp,
            frame_id="odom",
            pose=Pose(
                position=Point(new.x, new.y, 0.0),
                orientation=Quaternion(0.0, 0.0, new.theta, 0.0),
            ),
            linear=Point(self._linear_x, 0.0, 0.0),
            angular=Point(0.0, 0.0, self._angular_z),
        )

    def quaternion_odometry(self) -> OdometryState:
        """The latest pose with a proper orientation quaternion."""
        new = self._new
        return OdometryState(
            stamp=new.stamp,
            frame_id="odom",
            child_frame_id="base_link",
            pose=Pose(
                position=Point(new.x, new.y, 0.0),
                orientation=quaternion_from_rpy(0.0, 0.0, new.theta),
            ),
            linear=Point(self._linear_x, 0.0, 0.0),
            angular=Point(0.0, 0.0, self._angular_z),
            covariance=pose_covariance(),
        )