"""Shared fixtures: explicit settings so tests never depend on GAMERNG_* env vars."""

from __future__ import annotations

import pytest

from gamerng import PredictableRng, Rng, Settings, clear_caches


@pytest.fixture
def settings() -> Settings:
    return Settings()


@pytest.fixture
def low_cap_settings() -> Settings:
    return Settings(loop_max=1_000, max_recursions=20)


@pytest.fixture
def rng(settings: Settings) -> Rng:
    return Rng(1234, settings=settings)


@pytest.fixture
def prng(settings: Settings) -> PredictableRng:
    return PredictableRng(settings=settings)


@pytest.fixture(autouse=True)
def _fresh_caches():
    clear_caches()
    yield
    clear_caches()
