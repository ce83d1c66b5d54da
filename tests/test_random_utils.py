"""32-bit helpers, string hashing and the uniform step."""

from __future__ import annotations

import math

import pytest

from gamerng.random_utils import (
    apply_skew,
    generate_seed,
    hash_string,
    mix32,
    round_half_up,
    safe_log,
    to_int32,
    to_seed,
    uniqid,
)


@pytest.mark.parametrize(
    "value, expected",
    [
        (0, 0),
        (-1, -1),
        (2**31, -(2**31)),
        (2**32 + 5, 5),
        (3.9, 3),
        (-3.9, -3),
        (math.inf, 0),
        (math.nan, 0),
    ],
)
def test_to_int32_folds_like_bitwise_or(value, expected):
    assert to_int32(value) == expected


def test_hash_string_known_values():
    assert hash_string("") == 0
    assert hash_string("a") == 97
    assert hash_string("abc") == 96354


def test_hash_string_uses_utf16_code_units():
    # U+1F600 is the surrogate pair D83D DE00
    assert hash_string("\U0001F600") == 55357 * 31 + 56832


def test_hash_string_is_memoized():
    hash_string.cache_clear()
    hash_string("memo")
    hash_string("memo")
    info = hash_string.cache_info()
    assert info.hits == 1
    assert info.misses == 1


def test_to_seed_passes_numbers_through():
    assert to_seed(42) == 42
    assert to_seed(1.5) == 1.5
    assert to_seed("abc") == 96354


def test_mix32_first_step_matches_reference():
    state, value = mix32(1234)
    assert value == 0.7246124052908272
    assert -(2**31) <= state < 2**31


def test_mix32_stays_in_unit_interval():
    state = 0
    for _ in range(1000):
        state, value = mix32(state)
        assert 0 <= value < 1


def test_apply_skew_direction():
    assert apply_skew(0.5, 0) == 0.5
    assert apply_skew(0.5, 1) > 0.5
    assert apply_skew(0.5, -1) < 0.5
    assert apply_skew(0.5, 2) > apply_skew(0.5, 1)
    assert apply_skew(0.5, -2) < apply_skew(0.5, -1)


def test_round_half_up():
    assert round_half_up(2.5) == 3
    assert round_half_up(-2.5) == -2
    assert round_half_up(0.49) == 0
    assert round_half_up(math.inf) == math.inf
    assert round_half_up(-math.inf) == -math.inf


def test_safe_log_of_zero_is_negative_infinity():
    assert safe_log(0) == -math.inf
    assert safe_log(1) == 0


def test_generate_seed_differs_between_calls():
    assert generate_seed() != generate_seed()


def test_uniqid_is_unique_and_prefixed():
    ids = [uniqid("item-") for _ in range(50)]
    assert len(set(ids)) == 50
    assert all(i.startswith("item-") for i in ids)
    assert all(len(i) >= len("item-") + 14 for i in ids)
