# hdcamlink

`hdcamlink` implements the framed serial protocol that HD cameras use on a
UART link. The package contains:

- `hdcamlink.protocol`: a frame encoder and decoder with a CRC-16 check,
- `hdcamlink.commands`: command and property identifiers, the picture-info
  record, and helpers for the heartbeat command,
- `hdcamlink.uart`: opens and configures a serial port through pyserial,
- `hdcamlink.host`: a host loop that sends heartbeats and checks the replies,
- `hdcamlink.slave`: a slave loop that answers heartbeats.

## Frame format

All multi-byte fields are little-endian.

| Field     | Size | Notes                                   |
|-----------|------|-----------------------------------------|
| header    | 2    | `AA 5A`                                 |
| address   | 1    | slave address (default `0x01`)          |
| command   | 1    | see `hdcamlink.commands.Command`        |
| length    | 4    | payload length                          |
| payload   | n    |                                         |
| crc       | 2    | CRC-16 (poly `0xA001`, init `0xFFFF`) over everything before it |

## Installing

```
pip install .
```

Install with the `test` extra to get pytest as well (`pip install .[test]`).

## Library use

```python
from hdcamlink.protocol import encode_frame, decode_frame, ProtocolError
from hdcamlink.commands import (
    Command,
    encode_heartbeat_request,
    decode_heartbeat_request,
)

frame = encode_frame(0x01, Command.HEARTBEAT, b"\x01\x02\x03\x04")
decoded = decode_frame(frame)
print(decoded.slave_addr, decoded.cmd, decoded.payload)

request = encode_heartbeat_request(0x01, 11)
print(decode_heartbeat_request(request))   # (1, 11)
```

`decode_frame` returns a `Frame` with `slave_addr`, `cmd` and `payload`.
Any bytes after the frame's CRC are ignored. A malformed frame raises a
subclass of `ProtocolError`, which is itself a `ValueError`:

- `FrameTooShortError`: fewer than 10 bytes,
- `BadHeaderError`: the buffer does not start with `AA 5A`,
- `LengthError`: the declared length is longer than the data received,
- `CrcError`: the checksum does not match.

`encode_frame` raises `ValueError` if the address or command does not fit in
one byte. `crc16` computes the checksum on its own, and `format_buffer`
renders bytes as `[uart]<tag>` followed by upper-case hex bytes.

In `hdcamlink.commands`:

- `encode_heartbeat_request` and `encode_heartbeat_response` build heartbeat
  frames that carry a one-byte sequence number.
- `decode_heartbeat_request` and `decode_heartbeat_response` decode a whole
  frame and return `(slave_addr, ack_number)`.
- `decode_heartbeat_payload` reads the number from a payload that has already
  been extracted. It raises `ProtocolError` if the payload is not exactly one
  byte.
- `PropertyId` lists the camera property identifiers.
- `PicInfo` is the 27-byte picture-information record. Convert it with
  `to_bytes()` and parse one with `PicInfo.from_bytes()`.

## Running over a serial port

`hdcamlink.uart.open_port(path, speed, bits, parity, stop_bits)` opens a
blocking port and discards any pending input. The defaults are 9600 baud,
8 data bits, parity `"N"` and 1 stop bit. `path` can be a device path or any
pyserial URL, for example `loop://`. Speeds other than 2400, 4800, 9600 and
115200 fall back to 9600. `SerialSettings.to_serial_kwargs()` shows the exact
pyserial arguments that will be used.

Two commands run the heartbeat loops:

```
hdcamlink-host /dev/ttyUSB0
hdcamlink-slave /dev/ttyUSB0
```

Without an argument, the host uses `/dev/tty.usbserial-2110` and the slave
uses `/dev/ttymxc5`. Both exit with status 1 if the port cannot be opened.

The host sends a heartbeat with a rolling one-byte sequence number and
expects the reply to carry that number plus one. When a valid reply arrives,
it waits 5 seconds and sends the next heartbeat. The slave answers each
heartbeat request with the sequence number plus one.

You can also drive the loops from your own code with `CameraHost` and
`CameraSlave`:

- `run()` starts the receive loop. `CameraHost.run()` sends the first
  heartbeat before it starts reading.
- `stop()` ends the loop and closes the port.
- `handle(data)` processes one block of received bytes. It returns the decoded
  `Frame`, or `None` if the bytes are not a valid frame.

`CameraHost` takes an optional `sleep` callable and an `interval`, so you can
replace the wait between heartbeats. Progress is reported through the
`logging` module.

## What it does not do

Only the heartbeat exchange is implemented. `Command` defines the codes for
the other commands, but the package has no payload helpers for them and the
loops do not act on them:

- property get/set,
- factory reset and reboot,
- snapshot,
- picture listing, deletion and download,
- firmware and app upgrade,
- door signal.

Frames carrying these commands are decoded, logged and otherwise ignored.