import math

import pytest

from parkbot.imu import (
    ImuClient,
    ImuProtocolError,
    ImuReading,
    imu_message,
    parse_response,
)


class FakePort:
    def __init__(self, replies):
        self.replies = replies
        self.written = []
        self._pending = b""

    def write(self, data):
        self.written.append(data)
        self._pending = self.replies.get(data, b"")
        return len(data)

    def read(self, size):
        chunk, self._pending = self._pending[:size], self._pending[size:]
        return chunk


def test_parse_decimal_values():
    assert parse_response("g\n", "g=1.5,-2.0,3\r\n", 10) == [1.5, -2.0, 3.0]


def test_parse_bytes_and_hex():
    assert parse_response("a\n", b"a=0x1F,2\r\n", 10) == [31.0, 2.0]


def test_parse_limits_count():
    assert parse_response("e\n", "e=1,2,3\r\n", 2) == [1.0, 2.0]


def test_parse_mismatched_echo_is_empty():
    assert parse_response("g\n", "a=1,2,3\r\n") == []
    assert parse_response("g\n", "g 1,2\r\n") == []
    assert parse_response("g\n", "") == []


def test_parse_error_reply_raises():
    with pytest.raises(ImuProtocolError):
        parse_response("g\n", "!error\r\n")


def test_parse_empty_command_rejected():
    with pytest.raises(ValueError):
        parse_response("", "=1")


def test_send_recv_roundtrip():
    port = FakePort({b"g\n": b"g=4,5,6\r\n"})
    client = ImuClient(port)
    assert client.send_recv("g\n") == [4.0, 5.0, 6.0]
    assert port.written == [b"g\n"]


def test_send_recv_times_out_without_reply():
    client = ImuClient(FakePort({}), timeout=0.005)
    assert client.send_recv("g\n") == []


def test_read_converts_units():
    port = FakePort({
        b"g\n": b"g=180,0,-180\r\n",
        b"a\n": b"a=1,0,0\r\n",
        b"e\n": b"e=0,0,90\r\n",
    })
    reading = ImuClient(port).read()
    assert reading.angular_velocity[0] == pytest.approx(math.pi)
    assert reading.angular_velocity[2] == pytest.approx(-math.pi)
    assert reading.linear_acceleration == (pytest.approx(9.80665), 0.0, 0.0)
    assert reading.yaw == pytest.approx(math.pi / 2)
    assert reading.roll == 0.0


def test_read_keeps_previous_on_failure():
    replies = {b"g\n": b"g=180,0,0\r\n", b"a\n": b"a=1,0,0\r\n", b"e\n": b"e=0,0,90\r\n"}
    port = FakePort(replies)
    client = ImuClient(port, timeout=0.005)
    first = client.read()
    replies[b"g\n"] = b"!err\r\n"
    replies[b"a\n"] = b"a=1,2\r\n"
    replies[b"e\n"] = b"e=0,0,0\r\n"
    second = client.read()
    assert second.angular_velocity == first.angular_velocity
    assert second.linear_acceleration == first.linear_acceleration
    assert second.yaw == 0.0
    assert client.reading == second


@pytest.mark.parametrize(
    "method, command",
    [
        ("reset_all", b"rc\n"),
        ("init_euler_angles", b"za\n"),
        ("reset_euler_angles", b"ra\n"),
        ("reset_pose_velocity", b"rp\n"),
        ("reboot", b"rd\n"),
    ],
)
def test_commands_sent(method, command):
    port = FakePort({command: command[:-1] + b"=0\r\n"})
    getattr(ImuClient(port), method)()
    assert port.written == [command]


def test_command_error_propagates():
    port = FakePort({b"rd\n": b"!\r\n"})
    with pytest.raises(ImuProtocolError):
        ImuClient(port).reboot()


def test_imu_message_fields():
    reading = ImuReading(
        angular_velocity=(0.1, 0.2, 0.3),
        linear_acceleration=(1.0, 2.0, 3.0),
        yaw=math.pi / 2,
    )
    message = imu_message(reading, "robot", stamp=12.5)
    assert message["frame_id"] == "robot/imu_link"
    assert message["stamp"] == 12.5
    orientation = message["orientation"]
    assert orientation.norm_squared() == pytest.approx(1.0)
    assert orientation.x == pytest.approx(0.0)
    assert message["angular_velocity"].z == 0.3
    assert message["linear_acceleration"].y == 2.0
    assert message["linear_acceleration_covariance"][0] == 0.0064
    assert message["linear_acceleration_covariance"][4] == 0.0063
    assert message["orientation_covariance"][1] == 0.0


def test_imu_message_default_prefix():
    assert imu_message(ImuReading())["frame_id"] == "/imu_link"