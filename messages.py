import binascii
import logging
from dataclasses import dataclass

logger = logging.getLogger("streamchat.messages")


@dataclass(frozen=True)
class Frame:
    """One chat message on the wire: lowercase hex ciphertext, newline-terminated."""
    ciphertext: bytes = b""

    def __bool__(self) -> bool:
        return bool(self.ciphertext)

    def __len__(self) -> int:
        return len(self.ciphertext)

    def to_line(self) -> bytes:
        return binascii.hexlify(self.ciphertext) + b"\n"

    @staticmethod
    def from_line(line: bytes) -> "Frame":
        text = line.strip()
        if not text:
            return Frame()
        try:
            return Frame(binascii.unhexlify(text))
        except (binascii.Error, ValueError):
            # Known weak point: malformed frames are dropped without telling the
            # operator. The sender's keystream has still advanced, so every later
            # frame decrypts to garbage. Reject/resync behaviour is undecided.
            logger.debug(f"Dropping malformed frame: {text!r}")
            return Frame()
