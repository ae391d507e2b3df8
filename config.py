"""
Central configuration for streamchat.
Avoids hardcoded literals spread across files.
"""
from dataclasses import dataclass, field

# Networking
HOST = "localhost"
LISTEN_HOST = "0.0.0.0"
PORT = 8080
BACKLOG = 1

# Security parameters (demo only; a 64-bit group and an LCG keystream are NOT secure)
P_MODULUS = 0xD87FA3E291B4C7F3
G_GENERATOR = 2

LCG_A = 1103515245
LCG_C = 12345
LCG_M = 1 << 32

# Wire format
PUBLIC_KEY_BYTES = 8

# Encoding
DECODE_ERRORS = "replace"  # errors handling when decoding decrypted bytes

# Diagnostics
KEYSTREAM_PREVIEW_BYTES = 20
KEYSTREAM_PREVIEW_SHOWN = 12


@dataclass(frozen=True)
class DHParameters:
    modulus: int = P_MODULUS
    generator: int = G_GENERATOR


@dataclass(frozen=True)
class LCGParameters:
    multiplier: int = LCG_A
    increment: int = LCG_C
    modulus: int = LCG_M


@dataclass(frozen=True)
class ProtocolParameters:
    dh: DHParameters = field(default_factory=DHParameters)
    lcg: LCGParameters = field(default_factory=LCGParameters)


DEFAULT_PARAMETERS = ProtocolParameters()
