import random

import pytest

from helpers import ScriptedRandom
from raritygen.core.sampling import (
    DEFAULT_SEED,
    LCG_INCREMENT,
    LCG_MODULUS,
    LCG_MULTIPLIER,
    LcgRandom,
    make_rng,
    pick_weighted,
)


class TestLcgRandom:
    def test_reproduces_reference_sequence(self) -> None:
        rng = LcgRandom(42)
        state = 42
        for _ in range(10):
            state = (state * LCG_MULTIPLIER + LCG_INCREMENT) % LCG_MODULUS
            assert rng.random() == state / LCG_MODULUS

    def test_first_value_for_default_seed(self) -> None:
        assert LcgRandom().random() == 206659 / 233280

    def test_default_seed_matches_explicit(self) -> None:
        assert DEFAULT_SEED == 42
        a = LcgRandom()
        b = LcgRandom(42)
        assert [a.random() for _ in range(5)] == [b.random() for _ in range(5)]

    def test_seed_resets_sequence(self) -> None:
        rng = LcgRandom(7)
        first = [rng.random() for _ in range(5)]
        rng.seed(7)
        assert [rng.random() for _ in range(5)] == first

    def test_different_seeds_differ(self) -> None:
        a = LcgRandom(1)
        b = LcgRandom(2)
        assert [a.random() for _ in range(5)] != [b.random() for _ in range(5)]

    def test_values_in_unit_interval(self) -> None:
        rng = LcgRandom(123)
        for _ in range(1000):
            value = rng.random()
            assert 0.0 <= value < 1.0

    def test_state_round_trip(self) -> None:
        rng = LcgRandom(99)
        rng.random()
        state = rng.getstate()
        expected = [rng.random() for _ in range(4)]
        rng.setstate(state)
        assert [rng.random() for _ in range(4)] == expected

    def test_rejects_foreign_state(self) -> None:
        with pytest.raises(ValueError, match="Not an LcgRandom state"):
            LcgRandom().setstate(("mt", 3))

    def test_rejects_non_int_seed(self) -> None:
        with pytest.raises(TypeError):
            LcgRandom().seed("abc")

    def test_derived_helpers_stay_in_bounds(self) -> None:
        rng = LcgRandom(5)
        for _ in range(200):
            assert 1 <= rng.randint(1, 6) <= 6

    def test_randbytes_follow_seed(self) -> None:
        a = LcgRandom(11)
        b = LcgRandom(11)
        assert a.randbytes(16) == b.randbytes(16)
        a.seed(11)
        first = a.randbytes(16)
        a.seed(11)
        assert a.randbytes(16) == first
        assert LcgRandom(12).randbytes(16) != first

    def test_getrandbits_driven_by_lcg(self) -> None:
        rng = LcgRandom(42)
        expected = int(206659 / 233280 * 65536)
        assert rng.getrandbits(16) == expected
        rng.seed(42)
        assert rng.getrandbits(8) == expected >> 8

    def test_getrandbits_width(self) -> None:
        rng = LcgRandom(3)
        assert rng.getrandbits(0) == 0
        for k in (1, 7, 16, 17, 40):
            assert 0 <= rng.getrandbits(k) < 2**k
        with pytest.raises(ValueError):
            rng.getrandbits(-1)


class TestMakeRng:
    def test_lcg(self) -> None:
        assert isinstance(make_rng("lcg", 3), LcgRandom)

    def test_mersenne_twister(self) -> None:
        rng = make_rng("mt", 3)
        assert type(rng) is random.Random
        assert rng.random() == random.Random(3).random()

    def test_unknown_kind(self) -> None:
        with pytest.raises(ValueError, match="Unknown rng kind"):
            make_rng("xorshift")


class TestPickWeighted:
    def test_zero_draw_picks_first(self) -> None:
        assert pick_weighted(["a", "b"], [1, 3], ScriptedRandom([0.0])) == "a"

    def test_remainder_reaching_zero_stops(self) -> None:
        # 0.25 * 4 = 1.0; 1.0 - 1 = 0 -> first candidate
        assert pick_weighted(["a", "b"], [1, 3], ScriptedRandom([0.25])) == "a"

    def test_cumulative_order(self) -> None:
        assert pick_weighted(["a", "b"], [1, 3], ScriptedRandom([0.5])) == "b"

    def test_zero_weight_candidate_skipped(self) -> None:
        assert pick_weighted(["a", "b"], [0, 2], ScriptedRandom([0.5])) == "b"

    def test_float_weights(self) -> None:
        choice = pick_weighted(
            ["a", "b", "c"], [0.5, 0.7, 2.5], ScriptedRandom([0.9])
        )
        assert choice == "c"

    def test_empty_candidates(self) -> None:
        with pytest.raises(ValueError, match="at least one"):
            pick_weighted([], [], ScriptedRandom([0.1]))

    def test_length_mismatch(self) -> None:
        with pytest.raises(ValueError, match="weights"):
            pick_weighted(["a"], [1, 2], ScriptedRandom([0.1]))

    def test_negative_weight(self) -> None:
        with pytest.raises(ValueError, match="non-negative"):
            pick_weighted(["a", "b"], [1, -2], ScriptedRandom([0.1]))

    def test_distribution_follows_weights(self) -> None:
        rng = random.Random(0)
        counts = {"a": 0, "b": 0}
        for _ in range(4000):
            counts[pick_weighted(["a", "b"], [1, 3], rng)] += 1
        assert 0.7 < counts["b"] / 4000 < 0.8
