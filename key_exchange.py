import time
from dataclasses import dataclass
from typing import Callable

from config import DHParameters

U64_MASK = 0xFFFFFFFFFFFFFFFF

EntropySource = Callable[[], int]


def mod_exp(base: int, exponent: int, modulus: int) -> int:
    """Square-and-multiply exponentiation: (base ** exponent) % modulus."""
    result = 1 % modulus
    base %= modulus
    while exponent > 0:
        if exponent & 1:
            result = (result * base) % modulus
        exponent >>= 1
        base = (base * base) % modulus
    return result


def time_entropy() -> int:
    """Fold a nanosecond clock reading into 64 bits. Not a cryptographic RNG."""
    nanos = time.time_ns()
    return (nanos ^ (nanos >> 64)) & U64_MASK


@dataclass(frozen=True)
class KeyPair:
    private: int
    public: int

    def __repr__(self) -> str:
        return f"KeyPair(public={self.public:016X})"


def generate_keypair(params: DHParameters = DHParameters(),
                     entropy: EntropySource = time_entropy) -> KeyPair:
    private = entropy() & U64_MASK
    return KeyPair(private=private, public=mod_exp(params.generator, private, params.modulus))


def derive_shared(peer_public: int, keypair: KeyPair,
                  params: DHParameters = DHParameters()) -> int:
    return mod_exp(peer_public, keypair.private, params.modulus)
