"""
Seeded random source for dungeon generation.

Every generation stage draws from a RandomProvider instead of the
module-level ``random`` functions, so a dungeon is a pure function of
(dungeon id, difficulty, seed). Provides:
- Inclusive integer ranges and uniform floats
- Jitter multipliers for stat rolls
- Unique sampling without replacement
- Weighted choice over labeled buckets
- Independent sub-streams for parallel generation
"""
import hashlib
import random
from typing import Any, Dict, List, Optional, Sequence, Tuple, TypeVar

from .errors import WeightedTableError

T = TypeVar("T")


class RandomProvider:
    """
    A seeded pseudo-random stream.

    Draws must be consumed in a fixed order for a run to be reproducible.
    Never share one provider between threads; use spawn() to hand each
    worker its own stream instead.
    """

    def __init__(self, seed: Optional[int] = None):
        """
        Initialize the provider.

        Args:
            seed: Stream seed. None draws a fresh seed from the OS so the
                  stream can still be replayed via ``provider.seed``.
        """
        if seed is None:
            seed = random.SystemRandom().randrange(2 ** 32)
        self.seed = seed
        self._rng = random.Random(seed)

    def between(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends included."""
        if high < low:
            raise ValueError(f"Invalid range: {low}..{high}")
        return self._rng.randint(low, high)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return self._rng.random()

    def jitter(self, low: float, high: float) -> float:
        """Uniform multiplier in [low, high)."""
        return low + self._rng.random() * (high - low)

    def chance(self, probability: float) -> bool:
        """True with the given probability."""
        return self._rng.random() < probability

    def choice(self, options: Sequence[T]) -> T:
        """Pick one element uniformly."""
        if not options:
            raise ValueError("Cannot choose from an empty sequence")
        return options[self._rng.randrange(len(options))]

    def sample_unique(self, options: Sequence[T], count: int) -> List[T]:
        """
        Pick up to ``count`` distinct elements, preserving draw order.

        Args:
            options: Candidate pool (not modified)
            count: Number of elements wanted; clamped to the pool size

        Returns:
            List of selected elements
        """
        pool = list(options)
        count = max(0, min(count, len(pool)))
        selected = []
        for _ in range(count):
            index = self._rng.randrange(len(pool))
            selected.append(pool.pop(index))
        return selected

    def weighted_choice(self, buckets: Sequence[Tuple[T, float]]) -> T:
        """
        Roll against a cumulative table of (label, weight) buckets.

        Weights are summed in table order and compared against a single
        uniform draw scaled to the total. Zero-weight buckets can never be
        selected.

        Args:
            buckets: Ordered (label, weight) pairs

        Returns:
            The selected label

        Raises:
            WeightedTableError: If the table is empty, has a negative
                weight, or sums to zero
        """
        if not buckets:
            raise WeightedTableError("Weighted table is empty")

        total = 0.0
        for label, weight in buckets:
            if weight < 0:
                raise WeightedTableError(
                    f"Negative weight {weight} for {label!r}",
                    table=_describe(buckets),
                )
            total += weight

        if total <= 0:
            raise WeightedTableError("Weighted table sums to zero", table=_describe(buckets))

        roll = self._rng.random() * total
        cumulative = 0.0
        for label, weight in buckets:
            cumulative += weight
            if roll < cumulative:
                return label

        # Float rounding can leave roll == total; fall back to the last live bucket
        for label, weight in reversed(buckets):
            if weight > 0:
                return label
        raise WeightedTableError("Weighted table sums to zero", table=_describe(buckets))

    def spawn(self, label: str) -> "RandomProvider":
        """
        Derive an independent sub-stream.

        The child seed depends only on this provider's seed and the label,
        not on how many draws have been made, so sibling streams can be
        consumed in any order.
        """
        digest = hashlib.sha256(f"{self.seed}:{label}".encode("utf-8")).hexdigest()
        return RandomProvider(int(digest[:16], 16))


def _describe(buckets: Sequence[Tuple[Any, float]]) -> Dict[str, float]:
    return {str(label): weight for label, weight in buckets}
