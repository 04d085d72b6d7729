"""Basic pose types and conversions between quaternions and Euler angles."""

from __future__ import annotations

import math
from dataclasses import dataclass, field


@dataclass
class Point:
    """A position in 3D space."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0


@dataclass
class Quaternion:
    """An orientation quaternion (x, y, z, w)."""

    x: float = 0.0
    y: float = 0.0
    z: float = 0.0
    w: float = 1.0

    def norm_squared(self) -> float:
        return self.x * self.x + self.y * self.y + self.z * self.z + self.w * self.w


@dataclass
class Pose:
    """A position together with an orientation."""

    position: Point = field(default_factory=Point)
    orientation: Quaternion = field(default_factory=Quaternion)


@dataclass
class PoseStamped:
    """A pose with a reference frame and a timestamp in seconds."""

    pose: Pose = field(default_factory=Pose)
    frame_id: str = ""
    stamp: float = 0.0


def quaternion_from_rpy(roll: float, pitch: float, yaw: float) -> Quaternion:
    """Build a quaternion from fixed-axis roll, pitch and yaw (radians)."""
    half_yaw = yaw * 0.5
    half_pitch = pitch * 0.5
    half_roll = roll * 0.5
    cos_yaw, sin_yaw = math.cos(half_yaw), math.sin(half_yaw)
    cos_pitch, sin_pitch = math.cos(half_pitch), math.sin(half_pitch)
    cos_roll, sin_roll = math.cos(half_roll), math.sin(half_roll)
    return Quaternion(
        x=sin_roll * cos_pitch * cos_yaw - cos_roll * sin_pitch * sin_yaw,
        y=cos_roll * sin_pitch * cos_yaw + sin_roll * cos_pitch * sin_yaw,
        z=cos_roll * cos_pitch * sin_yaw - sin_roll * sin_pitch * cos_yaw,
        w=cos_roll * cos_pitch * cos_yaw + sin_roll * sin_pitch * sin_yaw,
    )


def _rotation_matrix(q: Quaternion) -> list[list[float]]:
    d = q.norm_squared()
    if d == 0.0:
        raise ValueError("cannot derive a rotation from a zero quaternion")
    s = 2.0 / d
    xs, ys, zs = q.x * s, q.y * s, q.z * s
    wx, wy, wz = q.w * xs, q.w * ys, q.w * zs
    xx, xy, xz = q.x * xs, q.x * ys, q.x * zs
    yy, yz, zz = q.y * ys, q.y * zs, q.z * zs
    return [
        [1.0 - (yy + zz), xy - wz, xz + wy],
        [xy + wz, 1.0 - (xx + zz), yz - wx],
        [xz - wy, yz + wx, 1.0 - (xx + yy)],
    ]


def rpy_from_quaternion(quaternion: Quaternion) -> tuple[float, float, float]:
    """Return (roll, pitch, yaw) of a quaternion, which need not be normalised."""
    m = _rotation_matrix(quaternion)
    if abs(m[2][0]) >= 1.0:
        yaw = 0.0
        if m[2][0] < 0.0:
            pitch = math.pi / 2.0
            roll = math.atan2(m[0][1], m[0][2])
        else:
            pitch = -math.pi / 2.0
            roll = math.atan2(-m[0][1], -m[0][2])
        return roll, pitch, yaw
    pitch = -math.asin(m[2][0])
    cos_pitch = math.cos(pitch)
    roll = math.atan2(m[2][1] / cos_pitch, m[2][2] / cos_pitch)
    yaw = math.atan2(m[1][0] / cos_pitch, m[0][0] / cos_pitch)
    return roll, pitch, yaw


def to_planar_pose(pose_stamped: PoseStamped, frame_id: str = "map") -> PoseStamped:
    """Flatten a pose to 2D, storing the yaw angle in ``orientation.z``.

    Only the z and w components of the incoming orientation are used; the
    resulting orientation has x, y and w set to zero.
    """
    source = pose_stamped.pose
    _, _, yaw = rpy_from_quaternion(
        Quaternion(0.0, 0.0, source.orientation.z, source.orientation.w)
    )
    return PoseStamped(
        pose=Pose(
            position=Point(source.position.x, source.position.y, 0.0),
            orientation=Quaternion(0.0, 0.0, yaw, 0.0),
        ),
        frame_id=frame_id,
        stamp=pose_stamped.stamp,
    )