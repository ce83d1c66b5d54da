"""Seeded, reproducible randomness for games: distributions, dice and declarative draws."""

from .chancy import chancy_max, chancy_min, parse_chancy
from .config import Settings, get_settings, reset_settings
from .dice import DiceRoll, DiceSpec, dice_max, dice_min, parse_dice_args, parse_dice_string
from .distributions import support
from .errors import (
    GameRngError,
    IncompatibleStateError,
    InvalidInputError,
    IterationLimitError,
    LoopDetected,
    LoopDetectedError,
    MaxRecursionsError,
    PoolEmptyError,
    PoolNotEnoughElementsError,
    ValidationError,
)
from .loop_guard import LoopGuard
from .pool import Pool
from .random_utils import hash_string
from .rng import VERSION, PredictableRng, Rng, RngBase
from .sampler import SampleSummary, export_to_csv, generate_samples, histogram_figure, summarize_samples

__version__ = VERSION


def clear_caches() -> None:
    """Empty the string-seed and dice-notation memo caches."""
    hash_string.cache_clear()
    parse_dice_string.cache_clear()
