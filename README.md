# parkbot

Building blocks for a small differential-drive robot that localizes with a
lidar, an IMU and wheel encoders. Everything works on plain Python data
classes, so each part can be used and tested without robot middleware.

## Installation

```
pip install .
```

Install with `pip install .[test]` and run `pytest` to run the test suite.

## Modules

- `parkbot.geometry`: `Point`, `Quaternion`, `Pose` and `PoseStamped`
  (with `frame_id` and a `stamp` in seconds), plus `quaternion_from_rpy`,
  `rpy_from_quaternion` and `to_planar_pose`. `to_planar_pose` flattens a
  pose to 2-D: it uses only the z and w parts of the orientation and returns
  a pose whose `orientation.z` holds the yaw angle, with x, y and w set to 0
  and the frame set to `"map"` by default.
- `parkbot.odometry`: `DiffDriveOdometry` turns left and right encoder tick
  counts (`on_left_ticks`, `on_right_ticks`) into wheel distances, with
  wrap-around handling for 16-bit counters, and `update(now)` integrates them
  into an `OdometryState` whose `pose.orientation.z` holds the heading.
  `update` raises `RuntimeError` until `set_initial_pose` has been called.
  `quaternion_odometry()` returns the latest pose with a proper quaternion,
  child frame `"base_link"` and the covariance from `pose_covariance()`.
- `parkbot.data_points`: `DataPointContainer`, an ordered list of scan end
  points with an `origo`; `set_from(other, factor)` copies another container
  scaled by `factor`. It supports `len()`, indexing and iteration.
- `parkbot.map_tools`: `OccupancyGrid` (row-major cells, -1 unknown,
  100 occupied), `CoordinateTransformer` for scale-and-offset transforms
  between world coordinates and map cells, `DistanceMeasurementProvider`
  which walks a Bresenham line to the first occupied cell (`check_occupancy`
  in cells, `distance` in world units, `None` when nothing is hit or an end
  lies outside the map), and `map_extents`, the bounding box of known cells.
- `parkbot.trajectory`: `TrajectoryServer` records poses obtained from a
  lookup callable you supply. `update()` appends the current pose and
  returns `False` when the lookup raises `TransformError`;
  `handle_syscommand("reset", now)` clears the trajectory; and
  `recovery_info(request_time, request_radius)` returns a `RecoveryInfo`
  with the path leading back out of the given radius, or `None` when there
  are no poses or none lies outside the radius.
- `parkbot.lidar`: `scan_to_messages` resamples a `LaserScan` of
  `LidarPoint`s onto a fixed angular grid as a `LaserScanMessage` and builds a
  `PointCloud` with `intensities` and `stamps` channels.
  `DriverParameters.from_mapping` reads driver settings by name, with
  defaults such as port `/dev/ydlidar`, 230400 baud, ±180°, 0.1–16 m and
  10 Hz, and raises `TypeError` for a value of the wrong type.
- `parkbot.imu`: `ImuClient` speaks a line-based ASCII command protocol over
  a serial port, for example one opened with `open_serial` (defaults
  `/dev/ttyUSB0`, 115200 baud). `read()` polls gyro, accelerometer and Euler
  angles and returns an `ImuReading` in rad/s, m/s² and radians; other
  methods send the reset, zeroing and reboot commands. `parse_response`
  decodes a single reply and raises `ImuProtocolError` when the sensor
  answers with an error. `imu_message` turns a reading into a message
  dictionary with an orientation quaternion and fixed covariances.

## Example

```python
from parkbot.odometry import DiffDriveOdometry

odom = DiffDriveOdometry()
odom.set_initial_pose(0.0, 0.0, 0.0)
odom.on_left_ticks(100)
odom.on_right_ticks(100)
odom.on_left_ticks(410)
odom.on_right_ticks(410)
state = odom.update(now=1.0)
print(state.pose.position.x, state.pose.position.y, state.pose.orientation.z)
```

## What it does not do

This is a library, with no commands or long-running nodes. It does not
publish or subscribe to any message bus, it does not talk to a lidar (scans
must be supplied as `LaserScan` objects), and it does not build maps or
match scans against them; it only provides the pieces around those tasks.