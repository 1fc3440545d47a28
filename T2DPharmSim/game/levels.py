# T2DPharmSim Levels
# Scenario definitions: starting patient, drugs on offer, spawn timing
# and win duration for each of the four levels.

import logging
from dataclasses import dataclass, field, fields, replace
from typing import Any, Dict, Optional, Tuple

from T2DPharmSim.physiology.drug_catalog import (
    DPP4, GLP1, INSULIN, METFORMIN, SGLT2, SULFONYLUREA
)
from T2DPharmSim.physiology.patient_state import PatientState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LevelConfig:
    """Static description of one level.

    Attributes:
        level (int): Level number, 1 - 4.
        title (str): Display title.
        patient_name (str): Patient shown in the chart and the debrief.
        history (str): One-line clinical history.
        weight_kg (float): Patient weight, display only.
        initial_hba1c (float): Starting HbA1c, %.
        initial_egfr (float): Starting eGFR.
        initial_hypo_risk (float): Starting hypoglycemia risk, %.
        available_drugs (Tuple[str, ...]): Drug ids offered on this level.
        coverage_denied (Dict[str, str]): Drug id to denial reason for drugs
            offered but not covered by the patient's insurance.
        glucose_period_sec (float): Seconds between glucose events.
        kidney_period_sec (Optional[float]): Seconds between kidney events,
            None when the level does not model CKD.
        win_seconds (float): Stable time needed to win.
        models_adherence (bool): Whether adherence drifts with pill burden.
        food_insecurity (bool): Whether sulfonylurea hypoglycemia is amplified.
    """
    level: int
    title: str
    patient_name: str
    history: str
    weight_kg: float
    initial_hba1c: float
    initial_egfr: float
    initial_hypo_risk: float
    available_drugs: Tuple[str, ...]
    coverage_denied: Dict[str, str] = field(default_factory=dict)
    glucose_period_sec: float = 3.0
    kidney_period_sec: Optional[float] = None
    win_seconds: float = 20.0
    models_adherence: bool = False
    food_insecurity: bool = False

    @property
    def models_kidney(self) -> bool:
        return self.level >= 2

    def new_patient(self) -> PatientState:
        """Creates a fresh patient at this level's starting vitals."""
        return PatientState(
            hba1c=self.initial_hba1c,
            egfr=self.initial_egfr,
            hypo_risk=self.initial_hypo_risk,
            adherence=100.0,
            weight_kg=self.weight_kg,
        )

    def profile(self) -> Dict[str, Any]:
        return {"name": self.patient_name, "history": self.history,
                "weight": self.weight_kg}


LEVELS: Dict[int, LevelConfig] = {
    1: LevelConfig(
        level=1,
        title="Glycemic Basics - New-Onset T2DM",
        patient_name="Marcus Bell",
        history="New-onset T2DM, obesity, no prior therapy",
        weight_kg=102.0,
        initial_hba1c=8.5,
        initial_egfr=90.0,
        initial_hypo_risk=5.0,
        available_drugs=(METFORMIN, INSULIN, SULFONYLUREA),
        glucose_period_sec=4.0,
        win_seconds=20.0,
    ),
    2: LevelConfig(
        level=2,
        title="The Kidney Gate - T2DM + CKD",
        patient_name="Linda Okafor",
        history="T2DM for 9 years with stage 3a CKD",
        weight_kg=88.0,
        initial_hba1c=8.8,
        initial_egfr=52.0,
        initial_hypo_risk=5.0,
        available_drugs=(METFORMIN, SGLT2, INSULIN),
        glucose_period_sec=3.5,
        kidney_period_sec=7.5,
        win_seconds=20.0,
    ),
    3: LevelConfig(
        level=3,
        title="Full Pharmacy - Contraindication Traps",
        patient_name="Harold Nguyen",
        history="Long-standing T2DM, CKD stage 3a, hypertension",
        weight_kg=95.0,
        initial_hba1c=9.0,
        initial_egfr=48.0,
        initial_hypo_risk=8.0,
        available_drugs=(METFORMIN, SGLT2, GLP1, DPP4, SULFONYLUREA, INSULIN),
        glucose_period_sec=3.0,
        kidney_period_sec=7.5,
        win_seconds=20.0,
    ),
    4: LevelConfig(
        level=4,
        title="The Real Patient - Social Determinants of Health",
        patient_name="Amina Haddad",
        history="T2DM, recent immigrant, no drug coverage, food insecurity, "
                "limited English",
        weight_kg=79.0,
        initial_hba1c=8.9,
        initial_egfr=60.0,
        initial_hypo_risk=5.0,
        available_drugs=(METFORMIN, SGLT2, GLP1, DPP4, SULFONYLUREA, INSULIN),
        coverage_denied={GLP1: "Insurance denied GLP-1 RA coverage (cost barrier)."},
        glucose_period_sec=3.0,
        kidney_period_sec=7.5,
        win_seconds=25.0,
        models_adherence=True,
        food_insecurity=True,
    ),
}


def get_level(level: int, overrides: Optional[Dict[str, Any]] = None) -> LevelConfig:
    """Returns the configuration for a level, optionally with field overrides.

    Args:
        level (int): Level number.
        overrides (Optional[Dict[str, Any]]): Field name to value, usually
            the `levels.<n>` section of a config file. Unknown fields are
            skipped with a warning; numeric and text values are
            coerced to the type of the field they replace.

    Returns:
        LevelConfig: The (possibly overridden) level.

    Raises:
        ValueError: If the level does not exist.
    """
    if level not in LEVELS:
        raise ValueError(f"Unknown level {level}. Available: {sorted(LEVELS)}")
    config = LEVELS[level]
    if not overrides:
        return config
    known = {f.name: f.type for f in fields(LevelConfig) if f.name != "level"}
    changes: Dict[str, Any] = {}
    for key, value in overrides.items():
        if key not in known:
            logger.warning(f"Ignoring unknown override '{key}' for level {level}")
            continue
        if key == "available_drugs":
            value = tuple(value)
        elif key == "kidney_period_sec":
            value = None if value is None else float(value)
        elif known[key] is float:
            value = float(value)
        elif known[key] is str:
            value = str(value)
        changes[key] = value
    return replace(config, **changes)
