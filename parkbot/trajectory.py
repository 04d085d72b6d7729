"""Recording of a robot trajectory and recovery paths out of a radius."""

from __future__ import annotations

import bisect
import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from .geometry import PoseStamped

logger = logging.getLogger(__name__)

PoseLookup = Callable[[str, str], PoseStamped]


class TransformError(Exception):
    """Raised when a pose cannot be transformed into the target frame."""


@dataclass
class RecoveryInfo:
    """A path leading from the requested pose back out of a given radius."""

    req_pose: PoseStamped
    radius_entry_pose: PoseStamped
    trajectory: list[PoseStamped] = field(default_factory=list)
    frame_id: str = ""
    stamp: float = 0.0


class TrajectoryServer:
    """Collects poses of the source frame expressed in the target frame.

    ``lookup(target_frame, source_frame)`` must return the latest pose of the
    source frame origin in the target frame, or raise :class:`TransformError`.
    """

    def __init__(
        self,
        lookup: PoseLookup,
        target_frame: str = "map",
        source_frame: str = "base_link",
        update_rate: float = 4.0,
        publish_rate: float = 0.25,
        now: float = 0.0,
    ) -> None:
        self._lookup = lookup
        self.target_frame = target_frame
        self.source_frame = source_frame
        self.update_rate = update_rate
        self.publish_rate = publish_rate
        self.poses: list[PoseStamped] = []
        self.stamp = 0.0
        self.last_reset_time = now

    @property
    def update_period(self) -> float:
        return 1.0 / self.update_rate

    @property
    def publish_period(self) -> float:
        return 1.0 / self.publish_rate

    @property
    def frame_id(self) -> str:
        return self.target_frame

    def handle_syscommand(self, command: str, now: float) -> None:
        """Clear the trajectory when ``command`` is ``"reset"``."""
        if command == "reset":
            self.last_reset_time = now
            self.poses.clear()
            self.stamp = now

    def add_current_pose(self) -> None:
        """Append the current pose unless one with the same stamp is stored."""
        pose_out = self._lookup(self.target_frame, self.source_frame)
        if not self.poses or pose_out.stamp != self.poses[-1].stamp:
            self.poses.append(pose_out)
        self.stamp = pose_out.stamp

    def update(self) -> bool:
        """Periodic update; returns False if the transform failed."""
        try:
            self.add_current_pose()
        except TransformError as error:
            logger.warning(
                "Trajectory Server: Transform from %s to %s failed: %s",
                self.target_frame,
                self.source_frame,
                error,
            )
            return False
        return True

    def recovery_info(self, request_time: float, request_radius: float) -> RecoveryInfo | None:
        """Find the path back from the pose at ``request_time`` to where it
        entered a circle of ``request_radius`` around that pose.

        Returns None when there are no poses or no pose lies outside the radius.
        """
        if not self.poses:
            logger.warning(
                "Failed to find trajectory leading out of radius %f because no poses, "
                "i.e. no inverse trajectory, exists.",
                request_radius,
            )
            return None

        index = bisect.bisect_left([p.stamp for p in self.poses], request_time)
        if index == len(self.poses):
            self.add_current_pose()
            index = len(self.poses) - 1

        start = index
        req_coords = self.poses[start].pose.position
        threshold = request_radius * request_radius
        dist_sqr = 0.0

        while index != 0 and dist_sqr < threshold:
            current = self.poses[index].pose.position
            dist_sqr = (req_coords.x - current.x) ** 2 + (req_coords.y - current.y) ** 2
            index -= 1

        if dist_sqr < threshold:
            logger.info("Failed to find trajectory leading out of radius %f", request_radius)
            return None

        end = index
        req_pose = self.poses[start]
        return RecoveryInfo(
            req_pose=req_pose,
            radius_entry_pose=self.poses[end],
            trajectory=self.poses[end + 1:start + 1][::-1],
            frame_id=req_pose.frame_id,
            stamp=req_pose.stamp,
        )