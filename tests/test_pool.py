from __future__ import annotations

import pytest

from gamerng import Pool, PoolEmptyError, PoolNotEnoughElementsError, PredictableRng, Rng, ValidationError


def test_draw_empties_pool_as_a_permutation(rng: Rng):
    entries = list(range(20))
    pool = Pool(entries, rng)
    drawn = [pool.draw() for _ in range(20)]
    assert sorted(drawn) == entries
    assert pool.is_empty()
    with pytest.raises(PoolEmptyError):
        pool.draw()


def test_entries_are_copied(rng: Rng):
    entries = ["a", "b"]
    pool = Pool(entries, rng)
    pool.draw()
    assert entries == ["a", "b"]

    pool.entries = entries
    pool.add("c")
    assert entries == ["a", "b"]
    assert len(pool) == 3


def test_draw_many(prng: PredictableRng):
    prng.results = [0]
    pool = prng.pool(["a", "b", "c", "d"])
    assert pool.draw_many(3) == ["a", "b", "c"]
    assert pool.entries == ["d"]
    assert pool.draw_many(0) == []


def test_draw_many_errors(rng: Rng):
    pool = rng.pool([1, 2])
    with pytest.raises(ValidationError):
        pool.draw_many(-1)
    with pytest.raises(PoolNotEnoughElementsError):
        pool.draw_many(3)
    assert len(pool) == 2

    pool.empty()
    with pytest.raises(PoolEmptyError):
        pool.draw_many(1)


def test_last_entry_is_drawn_without_a_draw(prng: PredictableRng):
    pool = prng.pool(["only"])
    assert pool.draw() == "only"
    assert prng.counter == 0


def test_pool_defaults_to_unseeded_rng():
    pool = Pool([1, 2, 3])
    assert isinstance(pool.rng, Rng)
    assert sorted(pool.draw_many(3)) == [1, 2, 3]
