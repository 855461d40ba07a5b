"""Command codes, property identifiers and command payload helpers."""

from __future__ import annotations

import logging
import struct
from dataclasses import dataclass
from enum import IntEnum

from .protocol import ProtocolError, decode_frame, encode_frame, format_buffer

logger = logging.getLogger(__name__)

HEARTBEAT_INTERVAL = 5
"""Seconds between heartbeats sent by the host."""


class Command(IntEnum):
    """Command byte carried in every frame."""

    HEARTBEAT = 0x01
    PROPERTY_GET = 0x02
    PROPERTY_SET = 0x03
    RECOVERY = 0x04
    CAMERA_REBOOT = 0x05
    CAMERA_SNAPSHOT = 0x06
    CAMERA_INFO = 0x07
    CAMERA_DELETE = 0x08
    CAMERA_PULL = 0x09
    CAMERA_PULL_COMPLETED = 0x0A
    OTA = 0x0B
    OTA_PUSH = 0x0C
    DOOR_SIGNAL = 0x0D
    APP_UPGRADE = 0x1B
    APP_UPGRADE_PUSH = 0x1C


class PropertyId(IntEnum):
    """Identifiers of the camera properties that can be read or written."""

    SLAVE_ADDR = 0x01
    FIRMWARE_VERSION = 0x02
    CAMERA_SERIAL = 0x03
    UART_RATE = 0x04
    IMG_SIZE = 0x05
    IMG_COMPRESSION_RATIO = 0x06
    IMG_BRIGHTNESS = 0x07
    IMG_PARAMS = 0x08
    UTC = 0x09
    GYROSCOPE_DEGREE = 0x0A
    GYROSCOPE_DIRECTION = 0x0B
    GYROSCOPE_CONFIG = 0x0C
    GYROSCOPE_STATE = 0x0D
    GYROSCOPE_SAVE_IMG_MAX = 0x0E
    PWM_RATIO = 0x0F
    PITCH_ANGLE = 0x10
    ROLL_ANGLE = 0x11
    YAW_ANGLE = 0x12
    ACCELERATION = 0x13
    OPENING_ANGLE_LATEST = 0x14


_PIC_INFO = struct.Struct("<BBBII16s")


@dataclass(frozen=True)
class PicInfo:
    """Description of one stored picture, 27 bytes on the wire."""

    pic_id: int
    trigger_type: int
    trigger_angle: int
    snapshot_timestamp: int
    size: int
    md5: bytes

    SIZE = _PIC_INFO.size

    def __post_init__(self) -> None:
        for name in ("pic_id", "trigger_type", "trigger_angle"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFF:
                raise ValueError(f"{name} must fit in one byte, got {value}")
        for name in ("snapshot_timestamp", "size"):
            value = getattr(self, name)
            if not 0 <= value <= 0xFFFFFFFF:
                raise ValueError(f"{name} must fit in four bytes, got {value}")
        if len(self.md5) != 16:
            raise ValueError(f"md5 must be 16 bytes, got {len(self.md5)}")
        object.__setattr__(self, "md5", bytes(self.md5))

    def to_bytes(self) -> bytes:
        """Serialise to the 27-byte wire layout."""
        return _PIC_INFO.pack(
            self.pic_id,
            self.trigger_type,
            self.trigger_angle,
            self.snapshot_timestamp,
            self.size,
            self.md5,
        )

    @classmethod
    def from_bytes(cls, data: bytes) -> PicInfo:
        """Parse exactly one 27-byte picture record."""
        data = bytes(data)
        if len(data) != _PIC_INFO.size:
            raise ValueError(
                f"picture info needs {_PIC_INFO.size} bytes, got {len(data)}"
            )
        return cls(*_PIC_INFO.unpack(data))


def encode_heartbeat_request(slave_addr: int, ack_number: int) -> bytes:
    """Build a heartbeat request carrying sequence number *ack_number*."""
    return encode_frame(slave_addr, Command.HEARTBEAT, bytes((ack_number,)))


def encode_heartbeat_response(slave_addr: int, ack_number: int) -> bytes:
    """Build a heartbeat response; *ack_number* is the request number plus one."""
    return encode_frame(slave_addr, Command.HEARTBEAT, bytes((ack_number,)))


def decode_heartbeat_payload(payload: bytes) -> int:
    """Return the sequence number held in a heartbeat payload."""
    payload = bytes(payload)
    if len(payload) != 1:
        raise ProtocolError(
            f"heartbeat payload must be 1 byte, got {len(payload)}"
        )
    return payload[0]


def _decode_heartbeat(data: bytes, tag: str) -> tuple[int, int]:
    frame = decode_frame(data)
    logger.debug("%s", format_buffer(frame.payload, tag))
    return frame.slave_addr, decode_heartbeat_payload(frame.payload)


def decode_heartbeat_request(data: bytes) -> tuple[int, int]:
    """Decode a whole heartbeat request frame into (slave_addr, ack_number)."""
    return _decode_heartbeat(data, "heartbeat_request::result")


def decode_heartbeat_response(data: bytes) -> tuple[int, int]:
    """Decode a whole heartbeat response frame into (slave_addr, ack_number)."""
    return _decode_heartbeat(data, "heartbeat_response::result")