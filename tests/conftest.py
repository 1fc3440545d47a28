# Shared fixtures for the T2DPharmSim test suite

import pytest

from T2DPharmSim.core.base_classes import BaseRandomSource


class ScriptedRandom(BaseRandomSource):
    """Random source that replays fixed draws, then repeats a default.

    A default of 0.0 makes every roll with positive probability succeed;
    a default just below 1.0 makes every realistic roll fail.
    """
    def __init__(self, values=None, default: float = 0.999999):
        self.values = list(values or [])
        self.default = default
        self.draws = 0

    def random(self) -> float:
        self.draws += 1
        if self.values:
            return self.values.pop(0)
        return self.default


@pytest.fixture
def never_rng():
    """Every roll fails."""
    return ScriptedRandom(default=0.999999)


@pytest.fixture
def always_rng():
    """Every roll with positive probability succeeds."""
    return ScriptedRandom(default=0.0)
