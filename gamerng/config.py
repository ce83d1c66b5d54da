"""
Engine settings: safety caps and default policies.

Values come from ``GAMERNG_*`` environment variables the first time
``get_settings()`` is called; ``reset_settings()`` re-reads them.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Any, Optional


DEFAULT_DB = Path(__file__).resolve().parent.parent / "gamerng.db"

LOOP_GUARD_CAPACITY_LIMIT = 10_000


@dataclass(frozen=True)
class Settings:
    # Hard cap on iterations inside a single sampling loop
    loop_max: int = 10_000_000
    # Cap on resampling attempts in chancy and bounded normal
    max_recursions: int = 500
    throw_on_max_recursions: bool = True
    predictable_seed: int = 5789938451
    # Window size of the loop guard used inside rejection loops
    loop_guard_size: int = 10
    db_path: Path = DEFAULT_DB

    def with_overrides(self, **updates: Any) -> "Settings":
        for key in updates:
            if not hasattr(self, key):
                raise AttributeError(f"Settings has no attribute '{key}'")
        return replace(self, **updates)


_SETTINGS_INSTANCE: Optional[Settings] = None


def _get_int(var: str, default: int) -> int:
    raw = os.getenv(var)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw.replace("_", ""))
    except ValueError as exc:
        raise ValueError(f"{var} must be an integer, got {raw!r}") from exc


def _get_bool(var: str, default: bool) -> bool:
    raw = os.getenv(var)
    if raw is None or raw.strip() == "":
        return default
    return raw.strip().lower() in ("1", "true", "yes", "on")


def _build_settings() -> Settings:
    loop_guard_size = _get_int("GAMERNG_LOOP_GUARD_SIZE", 10)
    if not (0 < loop_guard_size <= LOOP_GUARD_CAPACITY_LIMIT):
        raise ValueError(
            f"GAMERNG_LOOP_GUARD_SIZE must be between 1 and {LOOP_GUARD_CAPACITY_LIMIT}, got {loop_guard_size}"
        )

    return Settings(
        loop_max=_get_int("GAMERNG_LOOP_MAX", 10_000_000),
        max_recursions=_get_int("GAMERNG_MAX_RECURSIONS", 500),
        throw_on_max_recursions=_get_bool("GAMERNG_THROW_ON_MAX_RECURSIONS", True),
        predictable_seed=_get_int("GAMERNG_PREDICTABLE_SEED", 5789938451),
        loop_guard_size=loop_guard_size,
        db_path=Path(os.getenv("GAMERNG_DB_PATH", str(DEFAULT_DB))),
    )


def get_settings() -> Settings:
    """Return the shared settings object."""

    global _SETTINGS_INSTANCE
    if _SETTINGS_INSTANCE is None:
        _SETTINGS_INSTANCE = _build_settings()
    return _SETTINGS_INSTANCE


def reset_settings() -> Settings:
    """Reload settings from the environment."""

    global _SETTINGS_INSTANCE
    _SETTINGS_INSTANCE = _build_settings()
    return _SETTINGS_INSTANCE
