"""Client for an AHRS sensor speaking a line-based ASCII serial protocol."""

from __future__ import annotations

import math
import re
import time
from dataclasses import dataclass, replace
from typing import Any, Protocol

from .geometry import Point, Quaternion, quaternion_from_rpy

SERIAL_PORT = "/dev/ttyUSB0"
SERIAL_SPEED = 115200
RECV_TIMEOUT = 0.030
GRAVITY = 9.80665

_BUFFER_SIZE = 1024
_DRAIN_SIZE = 256

_FLOAT_RE = re.compile(
    r"\s*[+-]?(?:\d+\.?\d*(?:[eE][+-]?\d+)?|\.\d+(?:[eE][+-]?\d+)?|infinity|inf|nan)",
    re.IGNORECASE,
)
_HEX_RE = re.compile(r"\s*[+-]?[0-9a-fA-F]+")

_DEG = math.pi / 180.0

LINEAR_ACCELERATION_COVARIANCE = (0.0064, 0.0, 0.0, 0.0, 0.0063, 0.0, 0.0, 0.0, 0.0064)
ANGULAR_VELOCITY_COVARIANCE = (
    0.032 * _DEG, 0.0, 0.0, 0.0, 0.028 * _DEG, 0.0, 0.0, 0.0, 0.006 * _DEG,
)
ORIENTATION_COVARIANCE = (
    0.013 * _DEG, 0.0, 0.0, 0.0, 0.011 * _DEG, 0.0, 0.0, 0.0, 0.006 * _DEG,
)


class ImuProtocolError(Exception):
    """Raised when the sensor answers a command with an error reply."""


class SerialPort(Protocol):
    def read(self, size: int) -> bytes: ...

    def write(self, data: bytes) -> Any: ...


@dataclass(frozen=True)
class ImuReading:
    """Angular velocity (rad/s), linear acceleration (m/s^2) and Euler angles (rad)."""

    angular_velocity: tuple[float, float, float] = (0.0, 0.0, 0.0)
    linear_acceleration: tuple[float, float, float] = (0.0, 0.0, 0.0)
    roll: float = 0.0
    pitch: float = 0.0
    yaw: float = 0.0


def _parse_number(text: str, pos: int) -> tuple[float, int]:
    if text.startswith("0x", pos):
        start = pos + 2
        match = _HEX_RE.match(text, start)
        if match is None:
            return 0.0, start
        return float(int(match.group(), 16)), match.end()
    match = _FLOAT_RE.match(text, pos)
    if match is None:
        return 0.0, pos
    return float(match.group()), match.end()


def parse_response(command: str, response: str | bytes, max_values: int = 10) -> list[float]:
    """Extract the comma separated values of a ``<cmd>=v1,v2,...`` reply.

    Returns an empty list when the reply does not echo the command.
    Raises :class:`ImuProtocolError` for a reply starting with ``!``.
    """
    if not command:
        raise ValueError("command must not be empty")
    if isinstance(response, bytes):
        response = response.decode("ascii", errors="replace")
    if response.startswith("!"):
        raise ImuProtocolError(f"sensor rejected command {command!r}: {response.strip()!r}")

    echo_len = len(command) - 1
    if not response.startswith(command[:echo_len]) or response[echo_len:echo_len + 1] != "=":
        return []

    values: list[float] = []
    pos = len(command)
    for _ in range(max_values):
        value, end = _parse_number(response, pos)
        values.append(value)
        if response[end:end + 1] == ",":
            pos = end + 1
        else:
            break
    return values


def open_serial(path: str = SERIAL_PORT, baudrate: int = SERIAL_SPEED):
    """Open the sensor port raw, 8N1, without flow control and non-blocking."""
    import serial

    return serial.Serial(
        port=path,
        baudrate=baudrate,
        bytesize=serial.EIGHTBITS,
        parity=serial.PARITY_NONE,
        stopbits=serial.STOPBITS_ONE,
        xonxoff=False,
        rtscts=False,
        timeout=0,
    )


class ImuClient:
    """Polls the sensor and keeps the most recent reading."""

    def __init__(self, port: SerialPort, timeout: float = RECV_TIMEOUT) -> None:
        self.port = port
        self.timeout = timeout
        self.reading = ImuReading()

    def send_recv(self, command: str, max_values: int = 10) -> list[float]:
        """Send one command line and return the values of the reply."""
        self.port.read(_DRAIN_SIZE)
        self.port.write(command.encode("ascii"))

        buffer = bytearray()
        start = time.monotonic()
        while len(buffer) < _BUFFER_SIZE:
            chunk = self.port.read(_BUFFER_SIZE - len(buffer))
            if not chunk:
                time.sleep(0.001)
            else:
                buffer.extend(chunk)
                if buffer[-1:] in (b"\r", b"\n"):
                    break
            if time.monotonic() - start >= self.timeout:
                break
        return parse_response(command, bytes(buffer), max_values)

    def _query(self, command: str) -> list[float] | None:
        try:
            values = self.send_recv(command)
        except ImuProtocolError:
            return None
        return values if len(values) >= 3 else None

    def read(self) -> ImuReading:
        """Poll gyro, accelerometer and Euler angles; failed parts keep old values."""
        reading = self.reading
        gyro = self._query("g\n")
        if gyro is not None:
            reading = replace(reading, angular_velocity=tuple(v * _DEG for v in gyro[:3]))
        accel = self._query("a\n")
        if accel is not None:
            reading = replace(reading, linear_acceleration=tuple(v * GRAVITY for v in accel[:3]))
        euler = self._query("e\n")
        if euler is not None:
            reading = replace(
                reading, roll=euler[0] * _DEG, pitch=euler[1] * _DEG, yaw=euler[2] * _DEG
            )
        self.reading = reading
        return reading

    def reset_all(self) -> None:
        self.send_recv("rc\n")

    def init_euler_angles(self) -> None:
        """Set the current Euler angles to zero."""
        self.send_recv("za\n")

    def reset_euler_angles(self) -> None:
        self.send_recv("ra\n")

    def reset_pose_velocity(self) -> None:
        self.send_recv("rp\n")

    def reboot(self) -> None:
        self.send_recv("rd\n")


def imu_message(reading: ImuReading, frame_prefix: str = "", stamp: float = 0.0) -> dict[str, Any]:
    """Build an IMU message with orientation derived from the Euler angles."""
    orientation: Quaternion = quaternion_from_rpy(reading.roll, reading.pitch, reading.yaw)
    return {
        "stamp": stamp,
        "frame_id": f"{frame_prefix}/imu_link",
        "orientation": orientation,
        "orientation_covariance": ORIENTATION_COVARIANCE,
        "angular_velocity": Point(*reading.angular_velocity),
        "angular_velocity_covariance": ANGULAR_VELOCITY_COVARIANCE,
        "linear_acceleration": Point(*reading.linear_acceleration),
        "linear_acceleration_covariance": LINEAR_ACCELERATION_COVARIANCE,
    }