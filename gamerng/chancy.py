"""
Declarative random draws.

A chancy spec describes a draw as data: a literal number, a list of options,
a dice string or a config mapping such as
``{"type": "poisson", "lambda": 3, "max": 10}``. ``chancy`` samples a spec,
redrawing while the result falls outside the config's ``min``/``max``;
``chancy_min`` and ``chancy_max`` predict its bounds without drawing.
"""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any, Callable, Dict, Mapping, Optional, Sequence, Tuple, Union

from .dice import dice_max, dice_min
from .errors import InvalidInputError, MaxRecursionsError
from .random_utils import MAX_SAFE_INTEGER, round_half_up
from .validation import is_numeric

if TYPE_CHECKING:
    from .rng import RngBase


logger = logging.getLogger(__name__)

Number = Union[int, float]
INF = math.inf


@dataclass(frozen=True)
class NumberSpec:
    value: Number


@dataclass(frozen=True)
class ChoiceSpec:
    options: Tuple[Any, ...]


@dataclass(frozen=True)
class DiceNotation:
    notation: str


@dataclass(frozen=True)
class ConfigSpec:
    type: str = "random"
    params: Dict[str, Any] = field(default_factory=dict)

    @property
    def min(self) -> Optional[Number]:
        return self.params.get("min")

    @property
    def max(self) -> Optional[Number]:
        return self.params.get("max")


ChancySpec = Union[NumberSpec, ChoiceSpec, DiceNotation, ConfigSpec]
ChancyInput = Union[Number, str, Sequence[Any], Mapping[str, Any], ChancySpec]


def parse_chancy(spec: ChancyInput) -> ChancySpec:
    """Normalize raw chancy input into one of the tagged spec types.

    Config mappings are copied, ``None`` values dropped and ``type`` defaulted
    to ``"random"``. For ``random`` and integer types a ``min`` without a
    ``max`` gets ``MAX_SAFE_INTEGER`` as its upper bound.
    """
    if isinstance(spec, (NumberSpec, ChoiceSpec, DiceNotation, ConfigSpec)):
        return spec
    if isinstance(spec, bool):
        raise InvalidInputError(f"Invalid input given to chancy: {spec!r}")
    if isinstance(spec, (int, float)):
        return NumberSpec(spec)
    if isinstance(spec, str):
        return DiceNotation(spec)
    if isinstance(spec, Mapping):
        params = {key: value for key, value in spec.items() if value is not None}
        kind = params.pop("type", "random")
        if kind in ("random", "int", "integer") and "min" in params and "max" not in params:
            params["max"] = MAX_SAFE_INTEGER
        return ConfigSpec(type=kind, params=params)
    if isinstance(spec, (list, tuple)):
        return ChoiceSpec(tuple(spec))
    raise InvalidInputError(f"Invalid input given to chancy: {spec!r}")


Sampler = Callable[["RngBase", Dict[str, Any]], Number]
Bound = Callable[[Dict[str, Any]], Number]


@dataclass(frozen=True)
class Distribution:
    """One chancy ``type``: how to sample it and what it can return.

    ``checked`` types are redrawn while outside the config's ``min``/``max``;
    the others enforce their own bounds.
    """

    sample: Sampler
    lower: Bound
    upper: Bound
    checked: bool = True


def _method(name: str, *keys: str, rename: Optional[Dict[str, str]] = None) -> Sampler:
    mapping = {key: key for key in keys}
    mapping.update(rename or {})

    def sample(rng: "RngBase", params: Dict[str, Any]) -> Number:
        kwargs = {arg: params[key] for key, arg in mapping.items() if key in params}
        return getattr(rng, name)(**kwargs)

    return sample


_NORMAL_KEYS = ("mean", "stddev", "skew")
_NORMAL_RENAME = {"min": "minimum", "max": "maximum"}


def _random(rng: "RngBase", params: Dict[str, Any]) -> Number:
    return rng.random(params.get("min", 0), params.get("max", 1), params.get("skew", 0))


def _integer(rng: "RngBase", params: Dict[str, Any]) -> Number:
    return rng.rand_int(params.get("min", 0), params.get("max", 1), params.get("skew", 0))


def _int_bound(value: Optional[Number], rounder: Callable[[float], int]) -> Optional[Number]:
    if value is None or not math.isfinite(value):
        return value
    return rounder(value)


def _integer_range(params: Dict[str, Any]) -> Tuple[Optional[Number], Optional[Number]]:
    """Smallest and largest integers inside the config's ``min``/``max``."""
    low = _int_bound(params.get("min"), math.ceil)
    high = _int_bound(params.get("max"), math.floor)
    if low is not None and high is not None and low > high:
        raise InvalidInputError(
            f"No integer lies between min = {params.get('min')} and max = {params.get('max')}"
        )
    return low, high


def _normal_integer(rng: "RngBase", params: Dict[str, Any]) -> Number:
    low, high = _integer_range(params)
    value = round_half_up(_method("normal", *_NORMAL_KEYS, rename=_NORMAL_RENAME)(rng, params))
    return _clamp(value, low, high)


def _dice_source(params: Dict[str, Any]) -> Any:
    return params["dice"] if "dice" in params else params


def _dice(rng: "RngBase", params: Dict[str, Any]) -> Number:
    return rng.dice(_dice_source(params))


def _default(value: Optional[Number], fallback: Number) -> Number:
    return fallback if value is None else value


def _const(value: Number) -> Bound:
    return lambda _params: value


def _param(key: str, default: Number, negate: bool = False) -> Bound:
    if negate:
        return lambda params: -params.get(key, default)
    return lambda params: params.get(key, default)


_uniform_bounds = dict(lower=_param("min", 0), upper=_param("max", 1))
_normal_bounds = dict(lower=_param("min", -INF), upper=_param("max", INF))
_normal_integer_bounds = dict(
    lower=lambda params: _default(_integer_range(params)[0], -INF),
    upper=lambda params: _default(_integer_range(params)[1], INF),
)
_unbounded = dict(lower=_const(-INF), upper=_const(INF))

DISTRIBUTIONS: Dict[str, Distribution] = {
    "random": Distribution(_random, checked=False, **_uniform_bounds),
    "int": Distribution(_integer, checked=False, **_uniform_bounds),
    "integer": Distribution(_integer, checked=False, **_uniform_bounds),
    "normal_int": Distribution(_normal_integer, checked=False, **_normal_integer_bounds),
    "normal_integer": Distribution(_normal_integer, checked=False, **_normal_integer_bounds),
    "dice": Distribution(
        _dice,
        lower=lambda params: dice_min(_dice_source(params)),
        upper=lambda params: dice_max(_dice_source(params)),
    ),
    "normal": Distribution(_method("normal", *_NORMAL_KEYS, rename=_NORMAL_RENAME), **_normal_bounds),
    "gaussian": Distribution(_method("gaussian", *_NORMAL_KEYS), **_unbounded),
    "boxMuller": Distribution(_method("box_muller", "mean", "stddev"), **_unbounded),
    "irwinHall": Distribution(_method("irwin_hall", "n"), lower=_const(0), upper=_param("n", 6)),
    "bates": Distribution(_method("bates", "n"), lower=_const(0), upper=_const(1)),
    "batesgaussian": Distribution(_method("bates_gaussian", "n"), **_unbounded),
    "bernoulli": Distribution(_method("bernoulli", "p"), lower=_const(0), upper=_const(1)),
    "exponential": Distribution(_method("exponential", "rate"), lower=_const(0), upper=_const(INF)),
    "pareto": Distribution(
        _method("pareto", "shape", "scale", "location"), lower=_param("location", 0), upper=_const(INF)
    ),
    "poisson": Distribution(
        _method("poisson", rename={"lambda": "lam"}), lower=_const(0), upper=_const(MAX_SAFE_INTEGER)
    ),
    # Returns a probability mass, not a count
    "hypergeometric": Distribution(_method("hypergeometric", "N", "K", "n", "k"), lower=_const(0), upper=_const(1)),
    "rademacher": Distribution(_method("rademacher"), lower=_const(-1), upper=_const(1)),
    "binomial": Distribution(_method("binomial", "n", "p"), lower=_const(0), upper=_param("n", 1)),
    "betaBinomial": Distribution(
        _method("beta_binomial", "alpha", "beta", "n"), lower=_const(0), upper=_param("n", 1)
    ),
    "beta": Distribution(_method("beta", "alpha", "beta"), lower=_const(0), upper=_const(1)),
    "gamma": Distribution(_method("gamma", "shape", "rate", "scale"), lower=_const(0), upper=_const(INF)),
    "studentsT": Distribution(_method("students_t", "nu"), **_unbounded),
    "wignerSemicircle": Distribution(
        _method("wigner_semicircle", "R"), lower=_param("R", 1, negate=True), upper=_param("R", 1)
    ),
    "kumaraswamy": Distribution(_method("kumaraswamy", "alpha", "beta"), lower=_const(0), upper=_const(1)),
    "hermite": Distribution(
        _method("hermite", "lambda1", "lambda2"), lower=_const(0), upper=_const(MAX_SAFE_INTEGER)
    ),
    "chiSquared": Distribution(_method("chi_squared", "k"), lower=_const(0), upper=_const(INF)),
    "rayleigh": Distribution(_method("rayleigh", "scale"), lower=_const(0), upper=_const(INF)),
    "logNormal": Distribution(_method("log_normal", "mean", "stddev"), lower=_const(0), upper=_const(INF)),
    "cauchy": Distribution(_method("cauchy", "median", "scale"), **_unbounded),
    "laplace": Distribution(_method("laplace", "mean", "scale"), **_unbounded),
    "logistic": Distribution(_method("logistic", "mean", "scale"), **_unbounded),
}


def distribution_for(kind: str) -> Distribution:
    try:
        return DISTRIBUTIONS[kind]
    except KeyError:
        raise InvalidInputError(f'Invalid input type given to chancy: "{kind}".') from None


def _clamp(value: Number, low: Optional[Number], high: Optional[Number]) -> Number:
    if low is not None:
        value = max(low, value)
    if high is not None:
        value = min(high, value)
    return value


def chancy(rng: "RngBase", spec: ChancyInput, depth: int = 0) -> Any:
    """Draw one value described by ``spec``.

    Out-of-bounds results of checked types are redrawn. Once ``depth``
    reaches ``max_recursions`` this raises ``MaxRecursionsError`` when the
    generator's throw policy is on, and clamps into ``[min, max]`` otherwise.
    """
    parsed = parse_chancy(spec)
    if isinstance(parsed, NumberSpec):
        return parsed.value
    if isinstance(parsed, ChoiceSpec):
        return rng.choice(parsed.options)
    if isinstance(parsed, DiceNotation):
        return rng.dice(parsed.notation)

    dist = distribution_for(parsed.type)
    low, high = parsed.min, parsed.max
    cap = rng.settings.max_recursions
    throw = rng.throw_on_max_recursions

    while True:
        if depth >= cap and throw:
            raise MaxRecursionsError(
                "Max recursions reached in chancy. Usually a case of badly chosen min/max values. "
                f"type = {parsed.type}, params = {parsed.params}"
            )
        result = dist.sample(rng, parsed.params)
        if not dist.checked:
            return result

        in_bounds = (low is None or result >= low) and (high is None or result <= high)
        if depth + 1 >= cap and not throw:
            if not in_bounds:
                logger.warning(
                    "chancy hit %d redraws for type %s, clamping %s into [%s, %s]",
                    cap, parsed.type, result, low, high,
                )
            return _clamp(result, low, high)
        if in_bounds:
            return result
        logger.debug("chancy redraw %d for type %s: %s outside [%s, %s]", depth + 1, parsed.type, result, low, high)
        depth += 1


def _require_numeric_options(options: Sequence[Any], caller: str) -> list:
    for option in options:
        if not is_numeric(option):
            raise InvalidInputError(f"Cannot pass non-numbers to {caller}, got {option!r}")
    return [float(option) if isinstance(option, str) else option for option in options]


def chancy_int(rng: "RngBase", spec: ChancyInput) -> Number:
    """Like ``chancy`` but always rounds the result to an integer.

    ``random`` configs are sampled as ``integer`` and ``normal`` as
    ``normal_integer``, so the upper bound becomes inclusive.
    """
    parsed = parse_chancy(spec)
    if isinstance(parsed, NumberSpec):
        return round_half_up(parsed.value)
    if isinstance(parsed, ChoiceSpec):
        _require_numeric_options(parsed.options, "chancy_int")
        picked = rng.choice(parsed.options)
        return round_half_up(float(picked) if isinstance(picked, str) else picked)
    if isinstance(parsed, ConfigSpec):
        remapped = {"random": "integer", "normal": "normal_integer"}.get(parsed.type, parsed.type)
        parsed = ConfigSpec(type=remapped, params=parsed.params)
    return round_half_up(chancy(rng, parsed))


def _bound(spec: ChancyInput, which: str) -> Number:
    parsed = parse_chancy(spec)
    if isinstance(parsed, NumberSpec):
        return parsed.value
    if isinstance(parsed, ChoiceSpec):
        options = _require_numeric_options(parsed.options, f"chancy_{which}")
        if not options:
            raise InvalidInputError(f"Cannot take chancy_{which} of an empty list")
        return min(options) if which == "min" else max(options)
    if isinstance(parsed, DiceNotation):
        return dice_min(parsed.notation) if which == "min" else dice_max(parsed.notation)

    dist = distribution_for(parsed.type)
    if which == "min":
        value = dist.lower(parsed.params)
        if dist.checked and parsed.min is not None:
            value = max(value, parsed.min)
        return value
    value = dist.upper(parsed.params)
    if dist.checked and parsed.max is not None:
        value = min(value, parsed.max)
    return value


def chancy_min(spec: ChancyInput) -> Number:
    """Smallest value ``chancy(spec)`` can return, computed without drawing."""
    return _bound(spec, "min")


def chancy_max(spec: ChancyInput) -> Number:
    """Largest value ``chancy(spec)`` can return, computed without drawing."""
    return _bound(spec, "max")
