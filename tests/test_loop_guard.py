"""Loop guard windows and their use inside rejection samplers."""

from __future__ import annotations

import pytest

from gamerng import IterationLimitError, LoopDetected, LoopDetectedError, Rng, Settings, ValidationError
from gamerng.loop_guard import LoopGuard, has_repeating_sequence
from gamerng.random_utils import EPSILON


def test_capacity_limits():
    with pytest.raises(ValidationError):
        LoopGuard(10_001)
    with pytest.raises(ValidationError):
        LoopGuard(0)
    assert LoopGuard(10_000).capacity == 10_000


def test_push_returns_evicted_value():
    guard = LoopGuard(3)
    assert guard.push(1) is None
    assert guard.push(2) is None
    assert guard.push(3) is None
    assert guard.push(4) == 1
    assert guard.values == [2, 3, 4]
    assert len(guard) == 3


def test_constant_values_trip_when_window_fills():
    guard = LoopGuard(10)
    for _ in range(9):
        guard.push(0.5)
    with pytest.raises(LoopDetectedError):
        guard.push(0.5)


def test_repeating_run_trips():
    guard = LoopGuard(10, 2, message="cycle")
    pattern = [0.1, 0.2, 0.3] * 4
    with pytest.raises(LoopDetected, match="cycle"):
        for value in pattern:
            guard.push(value)


def test_distinct_values_pass():
    guard = LoopGuard(10)
    for i in range(50):
        guard.push(i / 50)
    assert guard.full()


def test_has_repeating_sequence():
    assert has_repeating_sequence([1, 2, 3, 1, 2, 3], 2)
    assert not has_repeating_sequence([1, 2, 1, 2], 2)
    assert has_repeating_sequence([1, 2, 1, 2], 1)
    assert not has_repeating_sequence([1, 2, 3, 4, 5], 1)


def test_all_same():
    guard = LoopGuard(3)
    assert guard.all_same()
    guard.push(1)
    guard.push(1)
    assert guard.all_same()
    guard.push(2)
    assert not guard.all_same()


def test_detect_loop_is_noop_until_full():
    guard = LoopGuard(5)
    guard.push(1)
    guard.push(1)
    guard.detect_loop()


def test_poisson_with_constant_source_fails_fast(settings: Settings):
    rng = Rng(1, settings=settings).random_source(lambda: 1 - EPSILON)
    with pytest.raises(LoopDetectedError):
        rng.poisson(100)


def test_gamma_with_constant_source_fails_fast(settings: Settings):
    rng = Rng(1, settings=settings).random_source(lambda: 0.5)
    with pytest.raises(LoopDetectedError):
        rng.gamma(shape=0.5, rate=2)


def test_students_t_with_constant_source_fails_fast(settings: Settings):
    rng = Rng(1, settings=settings).random_source(lambda: 0.5)
    with pytest.raises(LoopDetectedError):
        rng.students_t()


def test_beta_with_huge_shape_hits_iteration_cap(low_cap_settings: Settings):
    rng = Rng(1, settings=low_cap_settings).random_source(lambda: 1 - EPSILON)
    with pytest.raises(IterationLimitError):
        rng.beta(alpha=1e8 + 1)


def test_poisson_with_varying_source_hits_iteration_cap():
    rng = Rng(1, settings=Settings(loop_max=50))
    with pytest.raises(IterationLimitError):
        rng.poisson(1000)


def test_guard_size_comes_from_settings():
    rng = Rng(1, settings=Settings(loop_guard_size=3)).random_source(lambda: 1 - EPSILON)
    calls = []
    original = rng.draw

    def counting_draw():
        calls.append(1)
        return original()

    rng.draw = counting_draw
    with pytest.raises(LoopDetectedError):
        rng.poisson(100)
    assert len(calls) == 3
