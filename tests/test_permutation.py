"""
Tests for seeded permutations.
"""

import pytest
from esgen.permutation import MASK64, SplitMix64, Xoshiro256StarStar, shuffle, shuffled_indices


class TestGenerators:
    """Test the raw PRNGs."""

    def test_splitmix_reference_value(self):
        """First SplitMix64 output for seed 0 matches the reference implementation."""
        assert SplitMix64(0).step() == 0xE220A8397B1DCDAF

    def test_outputs_are_64_bit(self):
        rng = Xoshiro256StarStar(12345)
        for _ in range(100):
            assert 0 <= rng.step() <= MASK64

    def test_same_seed_same_sequence(self):
        a = Xoshiro256StarStar(7)
        b = Xoshiro256StarStar(7)
        assert [a.step() for _ in range(10)] == [b.step() for _ in range(10)]

    def test_rand_range_bounds(self):
        rng = Xoshiro256StarStar(99)
        values = [rng.rand_range(3, 10) for _ in range(500)]
        assert min(values) >= 3
        assert max(values) < 10
        assert set(values) == set(range(3, 10))

    def test_rand_range_empty(self):
        rng = Xoshiro256StarStar(1)
        assert rng.rand_range(5, 5) == 5


class TestShuffle:
    """Test permutations built on the PRNG."""

    @pytest.mark.parametrize("length", [0, 1, 2, 17, 100])
    def test_is_permutation(self, length):
        indices = shuffled_indices(length, 42)
        assert sorted(indices) == list(range(length))

    def test_deterministic(self):
        names = [f"System {i}" for i in range(50)]
        assert shuffle(names, 1234) == shuffle(names, 1234)

    def test_seed_changes_order(self):
        names = [f"System {i}" for i in range(50)]
        assert shuffle(names, 1) != shuffle(names, 2)

    def test_input_untouched(self):
        names = ["Alpha", "Rutilicus", "Sol"]
        shuffle(names, 3)
        assert names == ["Alpha", "Rutilicus", "Sol"]

    def test_large_seed(self):
        """Seeds wrap at 64 bits."""
        assert shuffled_indices(10, MASK64 + 5) == shuffled_indices(10, 4)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
