"""Framed UART protocol for HD cameras: frame codec, heartbeat commands, serial setup and host/slave loops."""

__version__ = "0.1.0"

__all__ = ["commands", "host", "protocol", "slave", "uart"]