"""
T2DPharmSim: Type 2 Diabetes Pharmacology Simulation

A headless, engine-independent model of the patient physiology behind a
teaching game on pharmacological management of type 2 diabetes. Players
prescribe and stop drugs while timed events push HbA1c up, erode kidney
function and raise hypoglycemia risk; each level is won by holding the
patient stable long enough.

Example usage:
    >>> from T2DPharmSim import SimulationEngine
    >>>
    >>> engine = SimulationEngine(level=1, seed=7)
    >>> result = engine.toggle_drug("metformin", True)
    >>> while engine.result is None:
    ...     engine.update(0.1)
    >>> engine.result.outcome
    <OutcomeKind.STABILIZED: 'Patient stabilized'>
"""

__version__ = "1.0.0"
__author__ = "T2DPharmSim Team"
__license__ = "MIT"

# Core imports for easy access
from .core.simulation_engine import SimulationEngine
from .core.base_classes import BaseRandomSource, NumpyRandomSource
from .game.levels import LEVELS, LevelConfig, get_level
from .physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants
from .physiology.drug_catalog import DRUG_CATALOG, DrugSpec
from .physiology.patient_state import PatientState
from .sdk.data_types import OutcomeKind, SessionResult, ToggleResult
from .sdk.debrief import DebriefClient

__all__ = [
    "SimulationEngine",
    "BaseRandomSource",
    "NumpyRandomSource",
    "LEVELS",
    "LevelConfig",
    "get_level",
    "DEFAULT_CONSTANTS",
    "PhysiologyConstants",
    "DRUG_CATALOG",
    "DrugSpec",
    "PatientState",
    "OutcomeKind",
    "SessionResult",
    "ToggleResult",
    "DebriefClient",
]
