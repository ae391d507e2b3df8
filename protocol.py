import struct
from typing import BinaryIO, Optional

from config import PUBLIC_KEY_BYTES
from messages import Frame

# Handshake: one public value as a fixed 8-byte big-endian block, no length prefix.
# Chat: one Frame per line.

_PUBLIC_KEY = struct.Struct('>Q')


class TransportError(Exception):
    """Bind/accept/connect/read/write failure. Fatal for the session."""


class HandshakeError(TransportError):
    """Peer public value could not be read in full."""


def send_public(stream: BinaryIO, value: int):
    try:
        stream.write(_PUBLIC_KEY.pack(value))
        stream.flush()
    except OSError as e:
        raise TransportError(f"Failed to send public key: {e}") from e


def recv_public(stream: BinaryIO) -> int:
    try:
        data = _recv_exact(stream, PUBLIC_KEY_BYTES)
    except OSError as e:
        raise HandshakeError(f"Failed to receive public key: {e}") from e
    if data is None:
        raise HandshakeError("Connection closed during key exchange")
    (value,) = _PUBLIC_KEY.unpack(data)
    return value


def send_frame(stream: BinaryIO, frame: Frame):
    try:
        stream.write(frame.to_line())
        stream.flush()
    except OSError as e:
        raise TransportError(f"Failed to send frame: {e}") from e


def recv_line(stream: BinaryIO) -> Optional[bytes]:
    """One raw line from the peer, or None once the peer has closed."""
    try:
        line = stream.readline()
    except OSError as e:
        raise TransportError(f"Failed to receive frame: {e}") from e
    return line or None


def _recv_exact(stream: BinaryIO, n: int) -> Optional[bytes]:
    buf = bytearray()
    while len(buf) < n:
        chunk = stream.read(n - len(buf))
        if not chunk:
            return None
        buf.extend(chunk)
    return bytes(buf)
