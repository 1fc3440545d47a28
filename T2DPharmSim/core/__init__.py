"""Core components for the T2DPharmSim simulation.

This module provides the central mechanisms for running a level attempt:
the simulation engine, the timer scheduler that drives event spawning, and
the abstract random source every stochastic roll draws from.

Key Contents:
    - `SimulationEngine`: Orchestrates one level attempt, update by update.
    - `Scheduler`: One-shot and periodic timers advanced in simulated time.
    - `BaseRandomSource`: ABC for the session's single random source.
    - `NumpyRandomSource`: Seedable implementation on `numpy.random`.
"""

# Make key classes from this module available when `core` is imported.
from .simulation_engine import SimulationEngine
from .scheduler import Scheduler, TimerHandle
from .base_classes import BaseRandomSource, NumpyRandomSource

__all__ = [
    "SimulationEngine",
    "Scheduler",
    "TimerHandle",
    "BaseRandomSource",
    "NumpyRandomSource",
]
