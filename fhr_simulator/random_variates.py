import numpy as np
from typing import Optional


class RandomVariate:
    """
    Uniform random helpers over a numpy Generator.

    Every stochastic decision in strip generation goes through one of these
    three methods, so a test can swap in a scripted source and drive the
    generators down an exact path.
    """

    def __init__(self, rng: Optional[np.random.Generator] = None, seed: Optional[int] = None):
        self.rng = rng if rng is not None else np.random.default_rng(seed)

    def random(self) -> float:
        """Uniform float in [0, 1)."""
        return float(self.rng.random())

    def randint(self, low: int, high: int) -> int:
        """Uniform integer in [low, high], both ends inclusive."""
        return int(np.floor(self.random() * (high - low + 1))) + low

    def uniform(self, low: float, high: float) -> float:
        """Uniform float in [low, high)."""
        return self.random() * (high - low) + low
