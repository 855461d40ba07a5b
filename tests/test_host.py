from hdcamlink.commands import (
    Command,
    HEARTBEAT_INTERVAL,
    decode_heartbeat_request,
    encode_heartbeat_response,
)
from hdcamlink.host import CameraHost, main
from hdcamlink.protocol import PROTOCOL_SLAVE_ADDR_DEFAULT, encode_frame


class FakePort:
    def __init__(self, chunks=(), on_empty=None):
        self._chunks = [bytes(c) for c in chunks]
        self.written = []
        self.closed = False
        self.on_empty = on_empty

    @property
    def in_waiting(self):
        return len(self._chunks[0]) if self._chunks else 0

    def read(self, size=1):
        if not self._chunks:
            if self.on_empty is not None:
                self.on_empty()
            return b""
        chunk = self._chunks[0]
        data, rest = chunk[:size], chunk[size:]
        if rest:
            self._chunks[0] = rest
        else:
            self._chunks.pop(0)
        return data

    def write(self, data):
        self.written.append(bytes(data))
        return len(data)

    def close(self):
        self.closed = True


def make_host(port=None):
    port = port if port is not None else FakePort()
    sleeps = []
    host = CameraHost(port, sleep=sleeps.append)
    return host, port, sleeps


def test_send_heartbeat_increments_sequence():
    host, port, _ = make_host()
    host.send_heartbeat()
    host.send_heartbeat()
    assert [decode_heartbeat_request(w) for w in port.written] == [
        (PROTOCOL_SLAVE_ADDR_DEFAULT, 1),
        (PROTOCOL_SLAVE_ADDR_DEFAULT, 2),
    ]


def test_sequence_wraps_after_255():
    host, port, _ = make_host()
    for _ in range(256):
        host.send_heartbeat()
    assert decode_heartbeat_request(port.written[254]) == (PROTOCOL_SLAVE_ADDR_DEFAULT, 255)
    assert decode_heartbeat_request(port.written[255]) == (PROTOCOL_SLAVE_ADDR_DEFAULT, 0)


def test_matching_reply_sleeps_and_sends_next():
    host, port, sleeps = make_host()
    host.send_heartbeat()
    frame = host.handle(encode_heartbeat_response(PROTOCOL_SLAVE_ADDR_DEFAULT, 2))
    assert frame.cmd == Command.HEARTBEAT
    assert sleeps == [HEARTBEAT_INTERVAL]
    assert len(port.written) == 2
    assert decode_heartbeat_request(port.written[1]) == (PROTOCOL_SLAVE_ADDR_DEFAULT, 2)


def test_wrong_reply_sends_nothing():
    host, port, sleeps = make_host()
    host.send_heartbeat()
    frame = host.handle(encode_heartbeat_response(PROTOCOL_SLAVE_ADDR_DEFAULT, 7))
    assert frame.payload == bytes([7])
    assert sleeps == []
    assert len(port.written) == 1


def test_bad_heartbeat_payload_is_ignored():
    host, port, sleeps = make_host()
    frame = host.handle(encode_frame(1, Command.HEARTBEAT, b"\x01\x02"))
    assert frame.payload == b"\x01\x02"
    assert sleeps == []
    assert port.written == []


def test_invalid_data_returns_none():
    host, port, _ = make_host()
    assert host.handle(b"\x00\x01\x02") is None
    assert port.written == []


def test_other_commands_send_nothing():
    host, port, _ = make_host()
    frame = host.handle(encode_frame(1, Command.PROPERTY_GET, b"\x01"))
    assert frame.cmd == Command.PROPERTY_GET
    frame = host.handle(encode_frame(1, Command.DOOR_SIGNAL))
    assert frame.cmd == Command.DOOR_SIGNAL
    assert port.written == []


def test_run_exchanges_heartbeats_until_stopped():
    port = FakePort([encode_heartbeat_response(PROTOCOL_SLAVE_ADDR_DEFAULT, 2)])
    host, _, sleeps = make_host(port)
    port.on_empty = host.stop
    host.run()
    assert [decode_heartbeat_request(w) for w in port.written] == [
        (PROTOCOL_SLAVE_ADDR_DEFAULT, 1),
        (PROTOCOL_SLAVE_ADDR_DEFAULT, 2),
    ]
    assert sleeps == [HEARTBEAT_INTERVAL]
    assert port.closed is True


def test_stop_closes_port_and_silences_writes():
    host, port, _ = make_host()
    host.stop()
    host.stop()
    host.send_heartbeat()
    assert port.closed is True
    assert port.written == []


def test_main_fails_on_missing_device(capsys):
    assert main(["/nonexistent/hdcamlink-host"]) == 1
    assert "==========hd_camera_host==========" in capsys.readouterr().out