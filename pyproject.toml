[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "parkbot"
version = "0.1.0"
description = "Mobile-robot localization helpers: wheel odometry, planar poses, occupancy-grid tools, trajectory recovery, lidar scan conversion and an IMU serial client."
requires-python = ">=3.10"
dependencies = [
    "pyserial",
]
keywords = ["robotics", "odometry", "lidar", "imu", "occupancy-grid", "trajectory"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["parkbot"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
