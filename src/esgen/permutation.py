"""
Seeded Permutations

A small, fully specified PRNG (xoshiro256** seeded through SplitMix64) and a
Fisher-Yates shuffle on top of it. A given seed always produces the same order on every
platform and interpreter version.

Usage:
    order = shuffled_indices(len(names), seed)
    shuffled = shuffle(names, seed)
"""

from typing import List, Sequence, TypeVar

T = TypeVar("T")

MASK64 = (1 << 64) - 1


def _rotl(value: int, shift: int) -> int:
    return ((value << shift) | (value >> (64 - shift))) & MASK64


class SplitMix64:
    """Seed expander used to fill the xoshiro state."""

    def __init__(self, seed: int):
        self.state = seed & MASK64

    def step(self) -> int:
        self.state = (self.state + 0x9E3779B97F4A7C15) & MASK64
        value = ((self.state ^ (self.state >> 30)) * 0xBF58476D1CE4E5B9) & MASK64
        value = ((value ^ (value >> 27)) * 0x94D049BB133111EB) & MASK64
        return value ^ (value >> 31)


class Xoshiro256StarStar:
    """xoshiro256** generator producing unsigned 64-bit integers."""

    def __init__(self, seed: int):
        splitmix = SplitMix64(seed)
        self.state = [splitmix.step() for _ in range(4)]

    def step(self) -> int:
        s = self.state
        value = (_rotl((s[1] * 5) & MASK64, 7) * 9) & MASK64
        t = (s[1] << 17) & MASK64

        s[2] ^= s[0]
        s[3] ^= s[1]
        s[1] ^= s[2]
        s[0] ^= s[3]

        s[2] ^= t
        s[3] = _rotl(s[3], 45)

        return value

    def rand_range(self, minimum: int, maximum: int) -> int:
        """Uniform integer in [minimum, maximum) by rejection sampling."""
        if minimum + maximum > MASK64:
            return self.step()
        if maximum <= minimum:
            return minimum

        num_range = maximum - minimum
        bits = num_range.bit_length()

        if bits >= 64:
            return self.step()

        modulus = 1 << bits
        num = self.step() % modulus
        while num >= num_range:
            num = self.step() % modulus

        return num + minimum


def shuffled_indices(length: int, seed: int) -> List[int]:
    """Return a permutation of range(length) determined entirely by seed."""
    rng = Xoshiro256StarStar(seed)
    indices = list(range(length))

    for i in range(length - 1, 0, -1):
        j = rng.rand_range(0, i + 1)
        indices[i], indices[j] = indices[j], indices[i]

    return indices


def shuffle(items: Sequence[T], seed: int) -> List[T]:
    """Return a shuffled copy of items."""
    return [items[i] for i in shuffled_indices(len(items), seed)]
