"""LCG keystream seeded from the shared secret."""
import logging
from typing import List

from config import LCGParameters

logger = logging.getLogger("streamchat.keystream")


class KeystreamGenerator:
    """
    state' = (state * a + c) mod m, output = low byte of state'.

    The seed is the full 64-bit shared secret; the first step reduces it
    into the LCG modulus. next_byte() is the only call that moves the state.
    """

    def __init__(self, seed: int, params: LCGParameters = LCGParameters()):
        self.params = params
        self._state = seed

    @property
    def state(self) -> int:
        return self._state

    @property
    def position(self) -> int:
        return self._state % self.params.modulus

    def _step(self, state: int) -> int:
        p = self.params
        return (state * p.multiplier + p.increment) % p.modulus

    def next_byte(self) -> int:
        self._state = self._step(self._state)
        return self._state & 0xFF

    def peek(self, count: int) -> List[int]:
        state = self._state
        out = []
        for _ in range(count):
            state = self._step(state)
            out.append(state & 0xFF)
        return out

    def describe(self) -> None:
        p = self.params
        logger.info("[STREAM] Generating keystream from secret...")
        logger.info(f"Algorithm: LCG (a={p.multiplier}, c={p.increment}, m=2^{p.modulus.bit_length() - 1})")
        logger.info(f"Seed: secret = {self._state:016X}")
