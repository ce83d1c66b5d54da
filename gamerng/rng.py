"""
Seeded generators.

``RngBase`` implements everything on top of an abstract ``_next()`` uniform
step: range helpers, choice, dice, chancy and the distribution library.
``Rng`` is the seeded avalanche generator; ``PredictableRng`` cycles through
a fixed list of results for tests and worked examples.
"""

from __future__ import annotations

import logging
import math
import re
from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple, Type, TypeVar

from . import chancy as _chancy
from . import dice as _dice
from .config import Settings, get_settings
from .distributions import DistributionsMixin, support
from .errors import IncompatibleStateError, InvalidInputError, ValidationError
from .pool import Pool
from .random_utils import (
    EPSILON,
    Seed,
    apply_skew,
    generate_seed,
    mix32,
    round_half_up,
    to_seed,
    uniqid,
)
from .validation import (
    require_between_eq,
    require_gt,
    require_gteq,
    require_int,
    require_lt,
    require_lteq,
    require_positive,
)


logger = logging.getLogger(__name__)

VERSION = "0.2.1"
MIN_STATE_VERSION = "0.2.0"
LEGACY_STATE_VERSION = "0.1.0"

ALPHABET = "abcdefghijklmnopqrstuvwxyzABCDEFGHIJKLMNOPQRSTUVWXYZ0123456789"

_VERSION_RE = re.compile(r"^v?(\d+)(?:\.(\d+))?(?:\.(\d+))?(?:-([0-9A-Za-z.-]+))?(?:\+[0-9A-Za-z.-]+)?$")

RandomSource = Callable[[], float]
R = TypeVar("R", bound="RngBase")


def version_key(version: str) -> Tuple[int, int, int, int]:
    """Sortable key for ``major.minor.patch[-pre]``; pre-releases sort first."""
    match = _VERSION_RE.match(str(version).strip())
    if match is None:
        raise InvalidInputError(f"Could not parse version {version!r}")
    major, minor, patch, pre = match.groups()
    return int(major), int(minor or 0), int(patch or 0), 0 if pre else 1


class RngBase(DistributionsMixin, ABC):
    """Shared behaviour for all generators; subclasses supply ``_next()``."""

    def __init__(self, seed: Optional[Seed] = None, settings: Optional[Settings] = None) -> None:
        self.settings = settings or get_settings()
        self._seed: Any = 0
        self._source: Optional[RandomSource] = None
        self._throw_on_max_recursions: Optional[bool] = None
        self.seed(seed)

    @abstractmethod
    def _next(self) -> float:
        """Internal uniform draw in [0, 1)."""

    # Seeding and source

    def seed(self: R, value: Optional[Seed] = None) -> R:
        """Reseed; ``None`` picks a time-based seed, strings are hashed."""
        if value is None:
            value = generate_seed()
        elif isinstance(value, bool) or not isinstance(value, (int, float, str)):
            raise ValidationError(f"Expected seed to be a number or string, got {value!r}")
        self._seed = to_seed(value)
        return self

    def get_seed(self) -> Any:
        return self._seed

    def next(self) -> float:
        return self._next()

    def draw(self) -> float:
        """Uniform draw in [0, 1), from the injected source when one is set."""
        if self._source is not None:
            return self._source()
        return self._next()

    def random_source(self: R, source: Optional[RandomSource] = None) -> R:
        self._source = source
        return self

    def get_random_source(self) -> Optional[RandomSource]:
        return self._source

    def same_as(self, other: Any) -> bool:
        return (
            type(other) is type(self)
            and self.get_seed() == other.get_seed()
            and self.get_random_source() is other.get_random_source()
        )

    @classmethod
    def predictable(cls: Type[R], seed: Optional[Seed] = None, settings: Optional[Settings] = None) -> R:
        """New generator of the same type with a fixed default seed."""
        settings = settings or get_settings()
        return cls(seed if seed is not None else settings.predictable_seed, settings=settings)

    @property
    def throw_on_max_recursions(self) -> bool:
        if self._throw_on_max_recursions is not None:
            return self._throw_on_max_recursions
        return self.settings.throw_on_max_recursions

    @throw_on_max_recursions.setter
    def throw_on_max_recursions(self, value: bool) -> None:
        self._throw_on_max_recursions = bool(value)

    # Serialization

    def serialize(self) -> Dict[str, Any]:
        return {"seed": self._seed, "version": VERSION}

    @classmethod
    def unserialize(
        cls: Type[R],
        data: Mapping,
        force: bool = False,
        settings: Optional[Settings] = None,
    ) -> R:
        """Rebuild a generator from ``serialize()`` output.

        States without a version count as 0.1.0. Anything older than 0.2.0
        raises ``IncompatibleStateError`` unless ``force`` is set.
        """
        if "seed" not in data:
            raise InvalidInputError(f"Serialized state has no seed: {dict(data)!r}")
        version = data.get("version") or LEGACY_STATE_VERSION
        if version_key(version) < version_key(MIN_STATE_VERSION):
            if not force:
                raise IncompatibleStateError(
                    f"Trying to unserialize old RNG (v{version}) can lead to unexpected behaviour - minimum "
                    f"supported version is {MIN_STATE_VERSION}. Pass force=True to unserialize anyway."
                )
            logger.warning("Forcing unserialize of RNG state v%s (minimum %s)", version, MIN_STATE_VERSION)
        return cls(data["seed"], settings=settings)

    # Range helpers

    def _skewed_draw(self, skew: float) -> float:
        # Negative skew maps a draw of 0 to exactly 1; keep the range half-open
        return min(apply_skew(self.draw(), skew), 1 - EPSILON)

    def random(self, low: float = 0, high: Optional[float] = None, skew: float = 0) -> float:
        return self.rand_between(low, high, skew)

    def rand_between(self, low: float = 0, high: Optional[float] = None, skew: float = 0) -> float:
        """Uniform value in ``[low, high)``; ``high`` defaults to ``low + 1``."""
        if high is None:
            high = low + 1
        low, high = min(low, high), max(low, high)
        return self.scale_norm(self._skewed_draw(skew), low, high)

    def rand_int(self, low: int = 0, high: int = 1, skew: float = 0) -> int:
        """Uniform integer in ``[low, high]``, bounds in either order."""
        low = require_int("low", low)
        high = require_int("high", high)
        if low == high:
            return low
        low, high = min(low, high), max(low, high)
        r = self._skewed_draw(skew)
        return min(math.floor(r * ((high + 1) - low)) + low, high)

    def percentage(self) -> float:
        return self.rand_between(0, 100)

    def probability(self) -> float:
        return self.rand_between(0, 1)

    def chance(self, n: float, chance_in: float = 1) -> bool:
        """True with probability ``n / chance_in``."""
        require_positive("chance_in", chance_in)
        require_positive("n", n)
        return self.draw() <= n / chance_in

    def chance_to(self, n: float, against: float) -> bool:
        """``n`` to ``against`` odds, e.g. ``chance_to(1, 500)``."""
        return self.chance(n, n + against)

    def scale(self, value: float, low: float, high: float, minimum: float = 0, maximum: float = 1) -> float:
        require_lteq("value", value, maximum)
        require_gteq("value", value, minimum)
        return self.scale_norm((value - minimum) / (maximum - minimum), low, high)

    def scale_norm(self, value: float, low: float, high: float) -> float:
        require_between_eq("value", value, 0, 1)
        return value * (high - low) + low

    @staticmethod
    def clamp(value: float, lower: Optional[float] = None, upper: Optional[float] = None) -> float:
        if upper is not None and value > upper:
            value = upper
        if lower is not None and value < lower:
            value = lower
        return value

    @staticmethod
    def bin(value: float, bins: int, minimum: float, maximum: float) -> float:
        """Snap ``value`` to the nearest of ``bins`` evenly spaced points in [minimum, maximum]."""
        require_gt("value", value, minimum)
        require_lt("value", value, maximum)
        spread = maximum - minimum
        return round_half_up(((value - minimum) / spread) * (bins - 1)) / (bins - 1) * spread + minimum

    def random_string(self, length: int = 6) -> str:
        require_gt("length", length, 0)
        return "".join(ALPHABET[self.rand_int(0, len(ALPHABET) - 1)] for _ in range(int(length)))

    uniqid = staticmethod(uniqid)

    # Choice

    @staticmethod
    def weights(data: Iterable[Any]) -> Dict[Any, int]:
        """Occurrence count of each value, in first-seen order."""
        counts: Dict[Any, int] = {}
        for value in data:
            counts[value] = counts.get(value, 0) + 1
        return counts

    def choice(self, data: Sequence[Any]) -> Any:
        return self.weighted_choice(list(data))

    def weighted_choice(self, data: Any) -> Any:
        """Pick one entry using a single draw scaled by the total weight.

        ``data`` may be a list (weighted by occurrence count), a mapping of
        value to weight or any other iterable of ``(value, weight)`` pairs.
        Empty input raises ``InvalidInputError``; a single entry is returned
        without drawing.
        """
        if isinstance(data, Mapping):
            pairs = list(data.items())
        elif isinstance(data, (list, tuple)):
            pairs = _tally(data)
        else:
            pairs = [tuple(pair) for pair in data]

        if not pairs:
            raise InvalidInputError(f"Cannot choose from an empty collection: {data!r}")
        total = 0
        for value, weight in pairs:
            if weight < 0:
                raise ValidationError(f"Probability cannot be negative, got {weight} for {value!r}")
            total += weight
        if len(pairs) == 1:
            return pairs[0][0]

        target = self.draw() * total
        part = 0
        for value, weight in pairs:
            part += weight
            if target < part:
                return value
        return pairs[-1][0]

    def pool(self, entries: Iterable[Any] = ()) -> Pool:
        return Pool(entries, self)

    # Dice

    parse_dice_args = staticmethod(_dice.parse_dice_args)
    parse_dice_string = staticmethod(_dice.parse_dice_string)
    dice_min = staticmethod(_dice.dice_min)
    dice_max = staticmethod(_dice.dice_max)

    def dice_expanded(self, n: _dice.DiceArg = 1, d: int = 6, plus: float = 0) -> _dice.DiceRoll:
        return _dice.roll(_dice.parse_dice_args(n, d, plus), self.rand_int)

    def dice(self, n: _dice.DiceArg = 1, d: int = 6, plus: float = 0) -> float:
        return self.dice_expanded(n, d, plus).total

    # Chancy

    def chancy(self, spec: _chancy.ChancyInput, depth: int = 0) -> Any:
        return _chancy.chancy(self, spec, depth)

    def chancy_int(self, spec: _chancy.ChancyInput) -> int:
        return _chancy.chancy_int(self, spec)

    chancy_min = staticmethod(_chancy.chancy_min)
    chancy_max = staticmethod(_chancy.chancy_max)
    support = staticmethod(support)


def _tally(values: Sequence[Any]) -> List[Tuple[Any, int]]:
    # Unhashable values are counted by identity
    counts: List[List[Any]] = []
    index: Dict[Any, int] = {}
    for value in values:
        try:
            key = ("v", value)
            hash(key)
        except TypeError:
            key = ("id", id(value))
        if key in index:
            counts[index[key]][1] += 1
        else:
            index[key] = len(counts)
            counts.append([value, 1])
    return [(value, count) for value, count in counts]


class Rng(RngBase):
    """Seeded generator: golden-ratio increment plus a 32-bit avalanche mix."""

    def _next(self) -> float:
        self._seed, value = mix32(self._seed)
        return value

    def from_rng(self, other: "Rng") -> "Rng":
        """Continue from ``other``'s current position."""
        self.seed(other.get_seed())
        return self


class PredictableRng(RngBase):
    """Generator that cycles through a fixed list of results in [0, 1).

    >>> prng = PredictableRng(results=[0.0, 0.5])
    >>> prng.random(), prng.random(), prng.random()
    (0.0, 0.5, 0.0)
    """

    def __init__(
        self,
        seed: Optional[Seed] = None,
        results: Optional[Sequence[float]] = None,
        settings: Optional[Settings] = None,
    ) -> None:
        super().__init__(seed, settings=settings)
        self.counter = 0
        self._results: List[float] = self.even_spread(11)
        if results is not None:
            self.results = results

    @property
    def results(self) -> List[float]:
        return self._results

    @results.setter
    def results(self, results: Sequence[float]) -> None:
        results = list(results)
        if not results:
            raise ValidationError("Must provide some fake results.")
        for r in results:
            if r < 0:
                raise ValidationError(f"Results must be greater than or equal to 0, got {r}")
            if r >= 1:
                raise ValidationError(f"Results must be less than 1, got {r}")
        self._results = results
        self.reset()

    @staticmethod
    def even_spread(n: int) -> List[float]:
        """``n - 1`` evenly spaced values from 0, then ``1 - EPSILON``."""
        n = require_int("n", n)
        require_gt("n", n, 1)
        return [i / (n - 1) for i in range(n - 1)] + [1 - EPSILON]

    def set_even_spread(self, n: int) -> "PredictableRng":
        self.results = self.even_spread(n)
        return self

    def reset(self) -> "PredictableRng":
        self.counter = 0
        return self

    def same_as(self, other: Any) -> bool:
        return (
            isinstance(other, PredictableRng)
            and self.results == other.results
            and self.counter == other.counter
            and self.get_random_source() is other.get_random_source()
        )

    def _next(self) -> float:
        value = self._results[self.counter % len(self._results)]
        self.counter += 1
        return value
