"""
Dice notation: parsing, rolling and bound prediction.

Accepted notation is ``[count] d|D sides [offset]``, e.g. ``3d6``, ``d20``,
``-2d8+1.5`` or ``1_000d6``. A bare numeral such as ``4`` or ``-1.5`` is a
constant roll with no dice.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Callable, List, Mapping, Sequence, Union

from .errors import InvalidInputError, ValidationError
from .validation import require_int


logger = logging.getLogger(__name__)

DICE_RE = re.compile(r"^\s*([+-]?\s*[0-9_]*)\s*[dD]\s*([0-9_]+)\s*([+-]?\s*[0-9_.]*)\s*$")
CONSTANT_RE = re.compile(r"^[+-]*[\d.]+$")
_PLUS_PREFIX_RE = re.compile(r"^[+-]?(\d+\.?\d*|\.\d+)")

DICE_CACHE_SIZE = 4096

Number = Union[int, float]


@dataclass(frozen=True)
class DiceSpec:
    n: int = 1
    d: int = 6
    plus: Number = 0


@dataclass(frozen=True)
class DiceRoll:
    dice: List[int] = field(default_factory=list)
    plus: Number = 0
    total: Number = 0


DiceArg = Union[str, Mapping[str, Number], Sequence[Number], int, DiceSpec]


def _clean(text: str) -> str:
    return re.sub(r"[\s_]+", "", text)


def _parse_count(text: str, default: int) -> int:
    text = _clean(text)
    if not any(ch.isdigit() for ch in text):
        return -default if text.startswith("-") else default
    return int(text)


def _parse_offset(text: str) -> Number:
    match = _PLUS_PREFIX_RE.match(_clean(text))
    if match is None:
        return 0
    raw = match.group(0)
    return float(raw) if "." in raw else int(raw)


@lru_cache(maxsize=DICE_CACHE_SIZE)
def parse_dice_string(text: str) -> DiceSpec:
    """Parse dice notation into a ``DiceSpec``; results are memoized by ``text``."""
    logger.debug("Parsing dice string %r", text)
    trimmed = _clean(text)
    if CONSTANT_RE.match(trimmed):
        try:
            value = float(trimmed)
        except ValueError as exc:
            raise InvalidInputError(f"Could not parse dice string {text!r}") from exc
        return DiceSpec(n=0, d=0, plus=int(value) if value.is_integer() and "." not in trimmed else value)

    match = DICE_RE.match(text)
    if match is None:
        raise InvalidInputError(f"Could not parse dice string {text!r}")
    count, sides, offset = match.groups()
    return DiceSpec(
        n=_parse_count(count, 1),
        d=_parse_count(sides, 6),
        plus=_parse_offset(offset),
    )


def parse_dice_args(n: DiceArg = 1, d: int = 6, plus: Number = 0) -> DiceSpec:
    """Normalize any accepted dice input into a ``DiceSpec``.

    ``n`` may be a dice string, a mapping with any of ``n``/``d``/``plus``,
    a ``[n, d, plus]`` sequence, a ``DiceSpec`` or a plain die count used
    together with ``d`` and ``plus``.
    """
    if n is None:
        raise InvalidInputError("Dice expects at least one argument")
    if isinstance(n, DiceSpec):
        return n
    if isinstance(n, str):
        return parse_dice_string(n)
    if isinstance(n, Mapping):
        if not any(key in n for key in ("n", "d", "plus")):
            raise InvalidInputError(
                "Invalid input given to dice related function - dice object must have at least one of n, d or plus properties."
            )
        n, d, plus = n.get("n", 1), n.get("d", 6), n.get("plus", 0)
    elif isinstance(n, (list, tuple)):
        if not 1 <= len(n) <= 3:
            raise InvalidInputError(f"Dice sequence must be [n, d, plus], got {list(n)}")
        n, d, plus = (list(n) + [6, 0][len(n) - 1:])[:3]
    elif isinstance(n, bool) or not isinstance(n, (int, float)):
        raise InvalidInputError(f"Invalid arguments given to dice: {n!r}")

    n = require_int("n", n, f"Expected n to be an integer, got {n}")
    d = require_int("d", d, f"Expected d to be an integer, got {d}")
    if d < 0:
        raise ValidationError(f"Expected d to be greater than or equal to 0, got {d}")
    if isinstance(plus, bool) or not isinstance(plus, (int, float)):
        raise ValidationError(f"Expected plus to be a number, got {plus!r}")
    return DiceSpec(n=n, d=d, plus=plus)


def _extremes(spec: DiceSpec) -> tuple:
    if spec.n == 0 or spec.d == 0:
        return spec.plus, spec.plus
    # A negative count flips which end is lowest
    ends = (spec.n + spec.plus, spec.n * spec.d + spec.plus)
    return min(ends), max(ends)


def dice_min(n: DiceArg = 1, d: int = 6, plus: Number = 0) -> Number:
    """Lowest possible total, without rolling."""
    return _extremes(parse_dice_args(n, d, plus))[0]


def dice_max(n: DiceArg = 1, d: int = 6, plus: Number = 0) -> Number:
    """Highest possible total, without rolling."""
    return _extremes(parse_dice_args(n, d, plus))[1]


def roll(spec: DiceSpec, rand_int: Callable[[int, int], int]) -> DiceRoll:
    """Roll ``|n|`` dice with ``rand_int(1, d)``.

    A negative count negates every die rather than the total. One-sided
    dice and empty rolls never touch ``rand_int``.
    """
    n, d, plus = spec.n, spec.d, spec.plus
    sign = -1 if n < 0 else 1
    if n == 0 or d == 0:
        return DiceRoll(dice=[], plus=plus, total=plus)
    if d == 1:
        faces = [sign] * abs(n)
    else:
        faces = [sign * rand_int(1, d) for _ in range(abs(n))]
    return DiceRoll(dice=faces, plus=plus, total=sum(faces) + plus)


