"""
Shared utilities to keep listener/connector consistent.
"""
from typing import Iterable, Optional, Union

from keystream import KeystreamGenerator


def xor_stream(data: Union[str, bytes], keystream: KeystreamGenerator) -> bytes:
    """XOR each byte against the next keystream byte. Same call encrypts and decrypts."""
    if isinstance(data, str):
        data = data.encode()
    return bytes(b ^ keystream.next_byte() for b in data)


def hex_bytes(data: Iterable[int], limit: Optional[int] = None, upper: bool = False) -> str:
    values = list(data)
    if limit is not None:
        values = values[:limit]
    fmt = "{:02X}" if upper else "{:02x}"
    return " ".join(fmt.format(b) for b in values)


def keystream_preview(keystream: KeystreamGenerator, count: int, shown: int) -> str:
    preview = keystream.peek(count)
    text = hex_bytes(preview, limit=shown, upper=True)
    if len(preview) > shown:
        text += " ..."
    return text
