"""
T2DPharmSim SDK Data Types
Records exchanged between the simulation, its callers and the debrief service
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, Any, List
from enum import Enum


class EnemyKind(Enum):
    """Timed events that perturb the patient on arrival."""
    GLUCOSE = "glucose"
    CKD = "ckd"
    HYPO = "hypo"


class ToggleAction(Enum):
    """Direction of a drug toggle."""
    ON = "on"
    OFF = "off"


class AdvisoryLevel(Enum):
    """Severity of a message surfaced to the player."""
    INFO = "info"
    CAUTION = "caution"
    WARNING = "warning"
    BLOCKED = "blocked"


class OutcomeKind(Enum):
    """Terminal result of a level attempt."""
    STABILIZED = "Patient stabilized"
    HYPOGLYCEMIC_COMA = "Hypoglycemic coma"
    HYPERGLYCEMIC_CRISIS = "Hyperglycemic crisis"
    KIDNEY_FAILURE = "Kidney failure"

    @property
    def is_win(self) -> bool:
        return self is OutcomeKind.STABILIZED


@dataclass
class Advisory:
    """A message surfaced to the player (warning, denial, forced stop)."""
    level: AdvisoryLevel
    title: str
    message: str
    time_seconds: float = 0.0
    drug_id: Optional[str] = None


@dataclass
class DecisionLogEntry:
    """One accepted drug toggle, with the vitals at that moment."""
    time_seconds: float
    drug_id: str
    drug_name: str
    action: ToggleAction
    hba1c: float
    egfr: float
    hypo_risk: float
    adherence: Optional[float] = None
    forced: bool = False

    def to_payload(self) -> Dict[str, Any]:
        """Serializes the entry in the debrief wire format."""
        entry = {
            "time": round(self.time_seconds, 1),
            "drug": self.drug_name,
            "drugId": self.drug_id,
            "action": self.action.value,
            "forced": self.forced,
            "HbA1c_at_time": round(self.hba1c, 1),
            "eGFR_at_time": round(self.egfr),
            "hypoRisk_at_time": round(self.hypo_risk),
        }
        if self.adherence is not None:
            entry["adherence_at_time"] = round(self.adherence)
        return entry


@dataclass
class ToggleResult:
    """Result of a drug toggle request."""
    drug_id: str
    requested: ToggleAction
    changed: bool
    advisories: List[Advisory] = field(default_factory=list)

    @property
    def blocked(self) -> bool:
        return any(a.level is AdvisoryLevel.BLOCKED for a in self.advisories)


@dataclass
class SessionResult:
    """Snapshot emitted once a level attempt reaches a terminal state."""
    level: int
    outcome: OutcomeKind
    elapsed_seconds: float
    starting_vitals: Dict[str, float]
    final_vitals: Dict[str, float]
    active_drugs: List[str]
    decision_log: List[DecisionLogEntry]
    patient_profile: Dict[str, Any]
    hypo_events: int = 0
    adherence: Optional[float] = None

    @property
    def win(self) -> bool:
        return self.outcome.is_win
