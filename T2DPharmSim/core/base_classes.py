# T2DPharmSim Base Classes
# Defines abstract base classes (ABCs) for swappable components
# so the simulation can run reproducibly under test.

from abc import ABC, abstractmethod
from typing import Optional

import numpy as np


class BaseRandomSource(ABC):
    """Abstract base class for the single random source of a session.

    Every stochastic roll in the simulation (GI distress, hypoglycemia
    triggers) draws from one instance of this class, so a session can be
    replayed exactly by seeding it or by substituting a scripted source.
    """

    @abstractmethod
    def random(self) -> float:
        """Returns a float uniformly drawn from [0.0, 1.0)."""
        pass

    def roll(self, probability: float) -> bool:
        """Returns True with the given probability.

        Args:
            probability (float): Chance of success. Values <= 0 never
                succeed and never consume a draw.

        Returns:
            bool: Whether the roll succeeded.
        """
        if probability <= 0.0:
            return False
        return self.random() < probability


class NumpyRandomSource(BaseRandomSource):
    """Random source backed by a `numpy.random.Generator`.

    Attributes:
        seed (Optional[int]): Seed the generator was created with.
    """

    def __init__(self, seed: Optional[int] = None):
        self.seed = seed
        self._rng = np.random.default_rng(seed)

    def random(self) -> float:
        return float(self._rng.random())
