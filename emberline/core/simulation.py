"""
Emberline - Simulation Source
Seedable random source behind every simulated ("enhanced_simulation") data
path. Scoring code never draws random numbers.
"""

import zlib
from typing import Any, List, Optional, Sequence

import numpy as np

DATA_SOURCE_REAL = "real"
DATA_SOURCE_SIMULATED = "enhanced_simulation"


class SimulationSource:
    """
    Wrapper around a numpy Generator.

    The same seed always yields the same sequence. for_key() derives an
    independent child stream, so concurrent analyses keyed by alert or
    location never share generator state.
    """

    def __init__(self, seed: Optional[int] = None):
        sequence = np.random.SeedSequence(seed)
        self.seed = seed
        self._entropy: List[int] = [int(sequence.entropy)]
        self._rng = np.random.default_rng(sequence)

    @classmethod
    def _from_entropy(cls, entropy: List[int]) -> "SimulationSource":
        source = cls.__new__(cls)
        source.seed = None
        source._entropy = list(entropy)
        source._rng = np.random.default_rng(np.random.SeedSequence(entropy))
        return source

    def for_key(self, *parts: Any) -> "SimulationSource":
        """Child source whose stream depends only on this seed and the key."""
        key = ":".join(str(part) for part in parts)
        return SimulationSource._from_entropy(
            self._entropy + [zlib.crc32(key.encode("utf-8"))]
        )

    def uniform(self, low: float = 0.0, high: float = 1.0) -> float:
        return float(self._rng.uniform(low, high))

    def randint(self, low: int, high: int) -> int:
        """Random integer in [low, high] (inclusive)."""
        return int(self._rng.integers(low, high + 1))

    def normal(self, mean: float = 0.0, std: float = 1.0) -> float:
        return float(self._rng.normal(mean, std))

    def chance(self, probability: float) -> bool:
        return bool(self._rng.random() < probability)

    def choice(self, options: Sequence[Any]) -> Any:
        return options[int(self._rng.integers(0, len(options)))]
