"""Frame layer of the camera serial protocol.

A frame on the wire looks like this (all multi-byte fields little endian)::

    | 0xAA 0x5A | addr (1) | cmd (1) | length (4) | payload (length) | crc16 (2) |

The CRC is the Modbus CRC-16 computed over everything from the header up to
the end of the payload.
"""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass

logger = logging.getLogger(__name__)

PROTOCOL_HEADER = bytes((0xAA, 0x5A))
PROTOCOL_SLAVE_ADDR_DEFAULT = 0x01
PROTOCOL_RATE_DEFAULT = 9600

_PREFIX = struct.Struct("<2sBBI")
HEADER_SIZE = _PREFIX.size
CRC_SIZE = 2
MIN_FRAME_SIZE = HEADER_SIZE + CRC_SIZE
_MAX_PAYLOAD = 0xFFFFFFFF


class ProtocolError(ValueError):
    """A received buffer is not a valid frame."""


class FrameTooShortError(ProtocolError):
    """The buffer is shorter than the smallest possible frame."""


class BadHeaderError(ProtocolError):
    """The buffer does not start with the frame header."""


class LengthError(ProtocolError):
    """The declared payload length exceeds the data received."""


class CrcError(ProtocolError):
    """The checksum carried by the frame does not match its contents."""


@dataclass(frozen=True)
class Frame:
    """A decoded frame: target address, command byte and payload."""

    slave_addr: int
    cmd: int
    payload: bytes = b""


def crc16(data: bytes) -> int:
    """Return the Modbus CRC-16 (poly 0xA001, init 0xFFFF) of *data*."""
    crc = 0xFFFF
    for byte in data:
        crc ^= byte
        for _ in range(8):
            if crc & 0x0001:
                crc = (crc >> 1) ^ 0xA001
            else:
                crc >>= 1
    return crc


def _check_byte(name: str, value: int) -> None:
    if not 0 <= value <= 0xFF:
        raise ValueError(f"{name} must fit in one byte, got {value}")


def encode_frame(slave_addr: int, cmd: int, payload: bytes = b"") -> bytes:
    """Build a complete frame addressed to *slave_addr* carrying *payload*."""
    _check_byte("slave_addr", slave_addr)
    _check_byte("cmd", cmd)
    payload = bytes(payload)
    if len(payload) > _MAX_PAYLOAD:
        raise ValueError("payload too large for a 32-bit length field")

    body = _PREFIX.pack(PROTOCOL_HEADER, slave_addr, cmd, len(payload)) + payload
    crc = crc16(body)
    logger.debug("crc = %04x", crc)
    frame = body + crc.to_bytes(CRC_SIZE, "little")
    logger.debug("%s", format_buffer(frame, "[encode]"))
    return frame


def decode_frame(data: bytes) -> Frame:
    """Parse one frame from the start of *data*.

    Bytes after the frame's CRC are ignored. Raises a :class:`ProtocolError`
    subclass describing the first problem found.
    """
    data = bytes(data)
    logger.debug("%s", format_buffer(data, "[decode]"))

    if len(data) < MIN_FRAME_SIZE:
        raise FrameTooShortError(
            f"frame needs at least {MIN_FRAME_SIZE} bytes, got {len(data)}"
        )

    header, slave_addr, cmd, length = _PREFIX.unpack_from(data)
    if header != PROTOCOL_HEADER:
        raise BadHeaderError(f"bad frame header {header.hex(' ')}")

    if length > len(data) - MIN_FRAME_SIZE:
        raise LengthError(
            f"declared payload length {length} exceeds the "
            f"{len(data) - MIN_FRAME_SIZE} bytes available"
        )

    end = HEADER_SIZE + length
    payload = data[HEADER_SIZE:end]
    received_crc = int.from_bytes(data[end:end + CRC_SIZE], "little")
    calculated_crc = crc16(data[:end])
    if received_crc != calculated_crc:
        raise CrcError(
            f"crc mismatch: received {received_crc:04x}, "
            f"calculated {calculated_crc:04x}"
        )

    logger.debug("->cmd = %u, slave_addr = %u", cmd, slave_addr)
    return Frame(slave_addr=slave_addr, cmd=cmd, payload=payload)


def format_buffer(data: bytes, tag: str) -> str:
    """Render *data* as ``[uart]<tag>`` followed by space-separated hex bytes."""
    return f"[uart]<{tag}>" + bytes(data).hex(" ").upper()