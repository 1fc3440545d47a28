# T2DPharmSim Patient State
# Mutable record of the clinical variables of the simulated patient.

from dataclasses import dataclass, field
from typing import Dict, Set

from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants


def _clamp(value: float, low: float, high: float) -> float:
    return max(low, min(high, value))


@dataclass
class PatientState:
    """Clinical state of the patient for one level attempt.

    Created at level start and discarded at level end or restart. The
    simulation engine owns the instance; the tick updater, spawner arrivals
    and drug toggles mutate it in place and re-clamp before returning.

    Attributes:
        hba1c (float): Glycated hemoglobin, % (4.0 - 15.0).
        egfr (float): Estimated glomerular filtration rate (0 - 120).
        hypo_risk (float): Hypoglycemia risk, % (0 - 100).
        adherence (float): Medication adherence, % (0 - 100). Only evolves
            on levels that model adherence.
        active_drugs (Set[str]): Ids of drugs currently prescribed.
        stable_seconds (float): Consecutive seconds the stabilization
            condition has held.
        weight_kg (float): Body weight, display only.
        gi_distress_seconds (float): Remaining seconds of GLP-1 GI distress.
    """
    hba1c: float
    egfr: float
    hypo_risk: float = 5.0
    adherence: float = 100.0
    active_drugs: Set[str] = field(default_factory=set)
    stable_seconds: float = 0.0
    weight_kg: float = 100.0
    gi_distress_seconds: float = 0.0

    def clamp(self, constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> None:
        """Restores every bounded field to its documented range."""
        c = constants
        self.hba1c = _clamp(self.hba1c, c.hba1c_min, c.hba1c_max)
        self.egfr = _clamp(self.egfr, c.egfr_min, c.egfr_max)
        self.hypo_risk = _clamp(self.hypo_risk, c.hypo_risk_min, c.hypo_risk_max)
        self.adherence = _clamp(self.adherence, c.adherence_min, c.adherence_max)
        self.gi_distress_seconds = max(0.0, self.gi_distress_seconds)
        self.stable_seconds = max(0.0, self.stable_seconds)

    def is_active(self, drug_id: str) -> bool:
        return drug_id in self.active_drugs

    @property
    def gi_distress(self) -> bool:
        return self.gi_distress_seconds > 0.0

    def vitals(self) -> Dict[str, float]:
        """Snapshot of the key vitals, rounded for display and logging."""
        return {
            "hba1c": round(self.hba1c, 2),
            "egfr": round(self.egfr, 1),
            "hypo_risk": round(self.hypo_risk, 1),
            "adherence": round(self.adherence, 1),
        }

    def copy(self) -> "PatientState":
        return PatientState(
            hba1c=self.hba1c,
            egfr=self.egfr,
            hypo_risk=self.hypo_risk,
            adherence=self.adherence,
            active_drugs=set(self.active_drugs),
            stable_seconds=self.stable_seconds,
            weight_kg=self.weight_kg,
            gi_distress_seconds=self.gi_distress_seconds,
        )
