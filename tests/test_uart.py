import pytest
import serial

from hdcamlink.protocol import PROTOCOL_RATE_DEFAULT
from hdcamlink.uart import SerialSettings, open_port


def test_default_settings_are_9600_8n1():
    kwargs = SerialSettings().to_serial_kwargs()
    assert kwargs["baudrate"] == PROTOCOL_RATE_DEFAULT
    assert kwargs["bytesize"] == serial.EIGHTBITS
    assert kwargs["parity"] == serial.PARITY_NONE
    assert kwargs["stopbits"] == serial.STOPBITS_ONE
    assert kwargs["timeout"] is None


@pytest.mark.parametrize("speed", [2400, 4800, 9600, 115200])
def test_supported_speeds_are_kept(speed):
    assert SerialSettings(speed=speed).to_serial_kwargs()["baudrate"] == speed


@pytest.mark.parametrize("speed", [1200, 19200, 57600])
def test_unsupported_speed_falls_back_to_9600(speed):
    assert SerialSettings(speed=speed).to_serial_kwargs()["baudrate"] == 9600


def test_parity_letters():
    assert SerialSettings(parity="O").to_serial_kwargs()["parity"] == serial.PARITY_ODD
    assert SerialSettings(parity="E").to_serial_kwargs()["parity"] == serial.PARITY_EVEN
    assert SerialSettings(parity="N").to_serial_kwargs()["parity"] == serial.PARITY_NONE
    assert SerialSettings(parity="x").to_serial_kwargs()["parity"] == serial.PARITY_NONE


def test_data_bits_and_stop_bits():
    assert SerialSettings(bits=7).to_serial_kwargs()["bytesize"] == serial.SEVENBITS
    assert SerialSettings(stop_bits=2).to_serial_kwargs()["stopbits"] == serial.STOPBITS_TWO
    assert SerialSettings(stop_bits=3).to_serial_kwargs()["stopbits"] == serial.STOPBITS_ONE


def test_open_loopback_round_trip():
    port = open_port("loop://", 115200, 8, "N", 1)
    try:
        assert port.baudrate == 115200
        port.write(b"\xaa\x5a\x01")
        assert port.read(3) == b"\xaa\x5a\x01"
    finally:
        port.close()


def test_open_loopback_applies_fallback_speed():
    port = open_port("loop://", 12345)
    try:
        assert port.baudrate == 9600
    finally:
        port.close()


def test_open_missing_device_raises():
    with pytest.raises(OSError):
        open_port("/nonexistent/hdcamlink-tty", 9600, 8, "N", 1)