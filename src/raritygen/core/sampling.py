import random
from collections.abc import Sequence
from typing import TypeVar

T = TypeVar("T")

DEFAULT_SEED = 42

LCG_MULTIPLIER = 9301
LCG_INCREMENT = 49297
LCG_MODULUS = 233280

# Bits taken per LCG step; the modulus exceeds 2**16.
_CHUNK_BITS = 16


class LcgRandom(random.Random):
    """Linear congruential generator with the reference constants.

    Reproducible, not secure. ``random()`` and ``getrandbits()`` are both
    driven by the LCG, so every ``random.Random`` helper derived from them
    (``randint``, ``choice``, ``randbytes`` ...) follows the seed.
    """

    def __init__(self, x: int | None = DEFAULT_SEED):
        self._state = DEFAULT_SEED
        super().__init__(x)

    def seed(self, a=None, version=2) -> None:  # noqa: ARG002
        if a is None:
            a = DEFAULT_SEED
        if isinstance(a, bool) or not isinstance(a, int):
            raise TypeError(f"LcgRandom seed must be an int, got {a!r}")
        self._state = a % LCG_MODULUS
        self.gauss_next = None

    def random(self) -> float:
        self._state = (self._state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
        return self._state / LCG_MODULUS

    def getrandbits(self, k: int) -> int:
        if k < 0:
            raise ValueError("number of bits must be non-negative")
        n_chunks = -(-k // _CHUNK_BITS)
        bits = 0
        for _ in range(n_chunks):
            chunk = int(self.random() * (1 << _CHUNK_BITS))
            bits = (bits << _CHUNK_BITS) | chunk
        return bits >> (n_chunks * _CHUNK_BITS - k)

    def getstate(self) -> tuple[str, int]:
        return ("lcg", self._state)

    def setstate(self, state) -> None:
        kind, value = state
        if kind != "lcg":
            raise ValueError(f"Not an LcgRandom state: {state!r}")
        self._state = value


def make_rng(kind: str = "lcg", seed: int | None = DEFAULT_SEED) -> random.Random:
    """Build the generator named by ``kind`` ('lcg' or 'mt')."""
    if kind == "lcg":
        return LcgRandom(seed)
    if kind == "mt":
        return random.Random(seed)
    raise ValueError(f"Unknown rng kind: {kind!r} (expected 'lcg' or 'mt')")


def pick_weighted(
    candidates: Sequence[T],
    weights: Sequence[float],
    rng: random.Random,
) -> T:
    """Cumulative-weight draw.

    Draws ``u`` uniformly in [0, total) and subtracts each weight in order
    until the remainder is <= 0. Falls back to the first candidate if float
    rounding leaves a positive remainder.
    """
    if not candidates:
        raise ValueError("candidates must contain at least one item")
    if len(candidates) != len(weights):
        raise ValueError(
            f"got {len(candidates)} candidates but {len(weights)} weights"
        )
    if any(weight < 0 for weight in weights):
        raise ValueError("weights must be non-negative")

    remainder = rng.random() * sum(weights)
    for candidate, weight in zip(candidates, weights, strict=True):
        remainder -= weight
        if remainder <= 0:
            return candidate
    return candidates[0]
