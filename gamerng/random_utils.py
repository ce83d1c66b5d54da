from __future__ import annotations

import logging
import math
import time
from functools import lru_cache
from typing import Union


logger = logging.getLogger(__name__)

Seed = Union[int, float, str]

GOLDEN_GAMMA = 0x9E3779B9
MIX_MULT_1 = 0x21F0AAAD
MIX_MULT_2 = 0x735A2D97
TWO_POW_32 = 4294967296.0
MASK_32 = 0xFFFFFFFF

MAX_SAFE_INTEGER = 2**53 - 1
EPSILON = 2.0**-52

SEED_CACHE_SIZE = 4096


def to_int32(value: Union[int, float]) -> int:
    """Fold a number to a signed 32-bit integer the way ``x | 0`` does in JS.

    Non-finite input folds to 0, fractions are truncated toward zero.
    """
    if isinstance(value, float):
        if not math.isfinite(value):
            return 0
        value = math.trunc(value)
    value &= MASK_32
    return value - 0x100000000 if value & 0x80000000 else value


@lru_cache(maxsize=SEED_CACHE_SIZE)
def hash_string(seed_str: str) -> int:
    """Rolling polynomial string hash folded to signed 32 bits.

    ``hash = ((hash << 5) - hash) + c`` over UTF-16 code units, so astral
    characters hash as their surrogate pair. The empty string hashes to 0.
    """
    h = 0
    data = seed_str.encode("utf-16-le")
    for i in range(0, len(data), 2):
        char = data[i] | (data[i + 1] << 8)
        h = to_int32((h << 5) - h + char)
    logger.debug("Hashed string seed %r to %d", seed_str, h)
    return h


def to_seed(seed: Seed) -> Union[int, float]:
    if isinstance(seed, str):
        return hash_string(seed)
    return seed


def mix32(seed: Union[int, float]) -> tuple[int, float]:
    """One step of the uniform generator.

    Advances the state by the golden-ratio increment and runs the three-stage
    avalanche on it. Returns ``(new_state, draw)`` with ``draw`` in [0, 1).
    """
    state = to_int32(float(seed) + GOLDEN_GAMMA)
    z = state & MASK_32
    z ^= z >> 16
    z = (z * MIX_MULT_1) & MASK_32
    z ^= z >> 15
    z = (z * MIX_MULT_2) & MASK_32
    z ^= z >> 15
    return state, z / TWO_POW_32


def apply_skew(value: float, skew: float = 0) -> float:
    """Power-law reshaping of a value in [0, 1].

    Positive skew biases toward 1, negative toward 0, zero is the identity.
    """
    if not skew:
        return value
    if skew < 0:
        return 1 - math.pow(value, math.pow(2, skew))
    return math.pow(value, math.pow(2, -skew))


def round_half_up(value: float) -> Union[int, float]:
    """Round to the nearest integer with halves going toward +infinity.

    Infinities pass through unchanged.
    """
    if not math.isfinite(value):
        return value
    return math.floor(value + 0.5)


def safe_log(value: float) -> float:
    return math.log(value) if value > 0 else -math.inf


_last_seed_us = 0
_seed_mono = 0


def generate_seed() -> int:
    """Time-based seed for generators constructed without one.

    Calls within the same microsecond still get distinct seeds.
    """
    global _last_seed_us, _seed_mono
    now = time.time_ns() // 1000
    if now == _last_seed_us:
        _seed_mono += 1297357 % 1000000
    else:
        _seed_mono = 0
    _last_seed_us = now
    return now * 1000 + _seed_mono


_last_uniqid = 0


def uniqid(prefix: str = "") -> str:
    """Strictly increasing 14 hex character id, with an optional prefix."""
    global _last_uniqid
    now = time.time_ns() // 1000
    _last_uniqid = now if now > _last_uniqid else _last_uniqid + 1
    return f"{prefix}{format(_last_uniqid, 'x').ljust(14, '0')}"
