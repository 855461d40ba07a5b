"""Host side of the serial link: sends heartbeats and checks the replies."""

from __future__ import annotations

import argparse
import logging
import threading
import time
from collections.abc import Callable
from typing import Any

from .commands import HEARTBEAT_INTERVAL, Command, decode_heartbeat_payload, encode_heartbeat_request
from .protocol import PROTOCOL_RATE_DEFAULT, PROTOCOL_SLAVE_ADDR_DEFAULT, Frame, ProtocolError, decode_frame
from .uart import open_port

logger = logging.getLogger(__name__)

PATH_HOST_DEFAULT = "/dev/tty.usbserial-2110"
READ_BUFFER_SIZE = 2048


class CameraHost:
    """Drives the heartbeat exchange with a camera over an open port.

    *port* needs ``read``, ``write``, ``close`` and ``in_waiting`` like a
    pyserial port.
    """

    def __init__(
        self,
        port: Any,
        slave_addr: int = PROTOCOL_SLAVE_ADDR_DEFAULT,
        interval: float = HEARTBEAT_INTERVAL,
        sleep: Callable[[float], object] = time.sleep,
    ) -> None:
        self._port = port
        self._slave_addr = slave_addr
        self._interval = interval
        self._sleep = sleep
        self._ack = 0
        self._running = threading.Event()
        self._closed = False
        self._lock = threading.Lock()

    def _write(self, data: bytes) -> None:
        if self._closed:
            return
        written = self._port.write(data)
        logger.info("[uart]opt_write:%s", written)

    def send_heartbeat(self) -> None:
        """Advance the sequence number and send a heartbeat request."""
        self._ack = (self._ack + 1) & 0xFF
        self._write(encode_heartbeat_request(self._slave_addr, self._ack))

    def handle(self, data: bytes) -> Frame | None:
        """Process one chunk of received bytes.

        Returns the decoded frame, or ``None`` when *data* is not a valid
        frame. A heartbeat reply carrying the expected number triggers the
        next heartbeat after the configured interval.
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
            if ack == (self._ack + 1) & 0xFF:
                logger.info("[uart]heartbeat decode success.")
                self._sleep(self._interval)
                self.send_heartbeat()
            else:
                logger.warning("[uart]heartbeat ack fail. %u != %u", ack, self._ack)
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
        """Send the first heartbeat and process replies until stopped."""
        logger.info("[uart]start!")
        self._running.set()
        self.send_heartbeat()
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
    """Open the serial line and run the heartbeat host on it."""
    parser = argparse.ArgumentParser(
        description="Send heartbeats to a camera over a serial line."
    )
    parser.add_argument("path", nargs="?", default=PATH_HOST_DEFAULT,
                        help="serial device path or pyserial URL")
    args = parser.parse_args(argv)
    logging.basicConfig(level=logging.INFO, format="%(message)s")

    print("==========hd_camera_host==========")
    logger.info("[uart]host init %s!", args.path)
    try:
        port = open_port(args.path, PROTOCOL_RATE_DEFAULT, 8, "N", 1)
    except (OSError, ValueError) as exc:
        logger.error("[uart]uart_open err! %s", exc)
        return 1

    host = CameraHost(port)
    try:
        host.run()
    except KeyboardInterrupt:
        pass
    finally:
        host.stop()
    return 0