"""Opening and configuring the serial line used by the camera protocol."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any

import serial

from .protocol import PROTOCOL_RATE_DEFAULT

logger = logging.getLogger(__name__)

SUPPORTED_SPEEDS = (2400, 4800, 9600, 115200)
"""Baud rates the line can be set to; anything else falls back to 9600."""

FALLBACK_SPEED = 9600

_BYTESIZES = {7: serial.SEVENBITS, 8: serial.EIGHTBITS}
_PARITIES = {
    "O": serial.PARITY_ODD,
    "E": serial.PARITY_EVEN,
    "N": serial.PARITY_NONE,
}


@dataclass(frozen=True)
class SerialSettings:
    """Line settings: speed, data bits, parity letter and stop bits."""

    speed: int = PROTOCOL_RATE_DEFAULT
    bits: int = 8
    parity: str = "N"
    stop_bits: int = 1

    def to_serial_kwargs(self) -> dict[str, Any]:
        """Return keyword arguments for a blocking pyserial port.

        Unsupported speeds fall back to 9600 baud, data bits other than 7
        or 8 leave the character size at its cleared value (5 bits), an
        unknown parity letter means no parity and any stop-bit count other
        than 2 means one stop bit.
        """
        speed = self.speed if self.speed in SUPPORTED_SPEEDS else FALLBACK_SPEED
        return {
            "baudrate": speed,
            "bytesize": _BYTESIZES.get(self.bits, serial.FIVEBITS),
            "parity": _PARITIES.get(self.parity, serial.PARITY_NONE),
            "stopbits": (
                serial.STOPBITS_TWO if self.stop_bits == 2 else serial.STOPBITS_ONE
            ),
            # Reads block until at least one byte has arrived.
            "timeout": None,
        }


def open_port(
    path: str,
    speed: int = PROTOCOL_RATE_DEFAULT,
    bits: int = 8,
    parity: str = "N",
    stop_bits: int = 1,
) -> serial.SerialBase:
    """Open *path* as a blocking serial port and discard pending input.

    *path* may be a device path or any pyserial URL. Raises
    :class:`serial.SerialException` (an :class:`OSError`) when the port
    cannot be opened or configured.
    """
    settings = SerialSettings(speed, bits, parity, stop_bits)
    port = serial.serial_for_url(path, **settings.to_serial_kwargs())
    try:
        port.reset_input_buffer()
    except Exception:
        port.close()
        raise
    logger.info("[uart]set done!")
    return port