"""Localization helpers for a small differential-drive robot: poses, odometry, grid tools, trajectories, lidar scans and an IMU client."""

__version__ = "0.1.0"