"""Camera side of the serial link: answers heartbeat requests."""

from __future__ import annotations

import argparse
import logging
import threading
from typing import Any

from .commands import Command, decode_heartbeat_payload, encode_heartbeat_response
from .protocol import PROTOCOL_RATE_DEFAULT, PROTOCOL_SLAVE_ADDR_DEFAULT, Frame, ProtocolError, decode_frame
from .uart import open_port

logger = logging.getLogger(__name__)

PATH_SLAVE_DEFAULT = "/dev/ttymxc5"
READ_BUFFER_SIZE = 2048


class CameraSlave:
    """Answers requests arriving on an open port.

    *port* needs ``read``, ``write``, ``close`` and ``in_waiting`` like a
    pyserial port.
    """

    def __init__(self, port: Any, slave_addr: int = PROTOCOL_SLAVE_ADDR_DEFAULT) -> None:
        self._port = port
        self._slave_addr = slave_addr
        self._running = threading.Event()
        self._closed = False
        self._lock = threading.Lock()

    def _write(self, data: bytes) -> None:
        if self._closed:
            return
        written = self._port.write(data)
        logger.info("[uart]opt_write:%s", written)

    def handle(self, data: bytes) -> Frame | None:
        """Process one chunk of received bytes.

        Returns the decoded frame, or ``None`` when *data* is not a valid
        frame. A heartbeat request is answered with its number plus one.
        """
        try:
            frame = decode_frame(data)
        except ProtocolError as exc:
            logger.warning("[uart]Failed to read data or invalid data format: %s", exc)
            return None

        if frame.cmd == Command.HEARTBEAT:
            try:
                ack = decode_heartbeat_payload(frame.payload)
            except ProtocolError as exc:
                logger.warning("[uart]heartbeat decode fail. %s", exc)
                return frame
            reply = encode_heartbeat_response(self._slave_addr, (ack + 1) & 0xFF)
            self._write(reply)
        elif frame.cmd == Command.PROPERTY_GET:
            pass
        else:
            logger.info("[uart]support cmd %u", frame.cmd)
        return frame

    def _read_chunk(self) -> bytes:
        data = self._port.read(1)
        if data:
            waiting = self._port.in_waiting
            if waiting:
                data += self._port.read(min(waiting, READ_BUFFER_SIZE - 1))
        return data

    def run(self) -> None:
        """Process incoming requests until stopped."""
        logger.info("[uart]start!")
        self._running.set()
        logger.info("[uart]notify loop start.")
        while self._running.is_set() and not self._closed:
            try:
                data = self._read_chunk()
            except OSError:
                if not self._running.is_set():
                    break
                raise
            if data:
                self.handle(data)
            else:
                logger.warning("[uart]Failed to read data")
        logger.info("[uart]notify loop end.")

    def stop(self) -> None:
        """Stop the receive loop and close the port."""
        with self._lock:
            if self._closed:
                return
            self._running.clear()
            self._closed = True
            self._port.close()


def main(argv: list[str] | None = None) -> int:
    """Open the serial line and answer requests on it."""
    parser = argparse.ArgumentParser(
        description="Answer camera protocol requests on a serial line."
    )
    parser.add_argument("path", nargs="?", default=PATH_SLAVE_DEFAULT,
                        help="serial device path or pyserial URL")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print("==========hd_camera_slave==========")
    logger.info("[uart]slave init %s!", args.path)
    try:
        port = open_port(args.path, PROTOCOL_RATE_DEFAULT, 8, "N", 1)
    except (OSError, ValueError) as exc:
        logger.error("[uart]uart_open err! %s", exc)
        return 1

    slave = CameraSlave(port)
    try:
        slave.run()
    except KeyboardInterrupt:
        pass
    finally:
        slave.stop()
    return 0