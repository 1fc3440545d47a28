"""
T2DPharmSim - Drug Toggle Handler
Guards, applies and logs player prescribing decisions
"""

from typing import Callable, List
import logging

from T2DPharmSim.game.levels import LevelConfig
from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants
from T2DPharmSim.physiology.drug_catalog import (
    DRUG_CATALOG, SGLT2, SULFONYLUREA,
    combination_warnings, get_drug, is_contraindicated, ordered_drugs,
)
from T2DPharmSim.physiology.patient_state import PatientState
from T2DPharmSim.sdk.data_types import (
    Advisory, AdvisoryLevel, DecisionLogEntry, ToggleAction, ToggleResult
)


class DrugToggleHandler:
    """
    Applies drug on/off requests to the patient.

    Activation passes through, in order:
    - level coverage denial
    - eGFR contraindication
    and is rejected with a BLOCKED advisory if either fails. Accepted
    activations apply initiation effects and carry non-blocking
    combination advisories. Deactivation always succeeds. Every accepted
    change is appended to the decision log.
    """

    def __init__(
        self,
        level: LevelConfig,
        patient_getter: Callable[[], PatientState],
        clock: Callable[[], float],
        constants: PhysiologyConstants = DEFAULT_CONSTANTS
    ):
        """
        Initialize the handler.

        Args:
            level: Current level configuration
            patient_getter: Returns the live patient state
            clock: Returns elapsed session seconds
            constants: Model parameters
        """
        self.level = level
        self.constants = constants
        self._patient = patient_getter
        self._clock = clock
        self.decision_log: List[DecisionLogEntry] = []
        self.logger = logging.getLogger(__name__)

    def toggle(self, drug_id: str, activate: bool) -> ToggleResult:
        """
        Request a drug be switched on or off.

        Args:
            drug_id: Catalog id of the drug
            activate: True to start the drug, False to stop it

        Returns:
            ToggleResult: Whether the state changed, plus any advisories

        Raises:
            ValueError: If the drug is unknown or not offered on this level
        """
        spec = get_drug(drug_id)
        if drug_id not in self.level.available_drugs:
            raise ValueError(
                f"{spec.display_name} is not available on level {self.level.level}"
            )

        patient = self._patient()
        requested = ToggleAction.ON if activate else ToggleAction.OFF
        if activate == patient.is_active(drug_id):
            return ToggleResult(drug_id, requested, changed=False)

        if not activate:
            patient.active_drugs.discard(drug_id)
            self._record(drug_id, ToggleAction.OFF)
            self.logger.info(f"Stopped {spec.display_name} at t={self._clock():.1f}s")
            return ToggleResult(drug_id, requested, changed=True)

        blocked = self._activation_block(drug_id, patient)
        if blocked is not None:
            self.logger.warning(f"{blocked.title}: {blocked.message}")
            return ToggleResult(drug_id, requested, changed=False, advisories=[blocked])

        advisories = self._activation_advisories(drug_id, patient)
        patient.active_drugs.add(drug_id)
        if drug_id == SGLT2:
            patient.egfr -= self.constants.sglt2_initiation_egfr_penalty
            patient.clamp(self.constants)
        self._record(drug_id, ToggleAction.ON)

        self.logger.info(f"Started {spec.display_name} at t={self._clock():.1f}s")
        for advisory in advisories:
            self.logger.warning(f"{advisory.title}: {advisory.message}")
        return ToggleResult(drug_id, requested, changed=True, advisories=advisories)

    def enforce_contraindications(self) -> List[Advisory]:
        """
        Force-stop active drugs that must not continue at the current eGFR.

        Called once per tick; Metformin is removed the first tick eGFR
        falls below 30.

        Returns:
            List[Advisory]: One forced-stop notice per drug removed
        """
        patient = self._patient()
        notices = []
        for drug_id in ordered_drugs(patient.active_drugs):
            spec = DRUG_CATALOG[drug_id]
            if not spec.stop_below_min_egfr or not is_contraindicated(drug_id, patient.egfr):
                continue
            patient.active_drugs.discard(drug_id)
            self._record(drug_id, ToggleAction.OFF, forced=True)
            notice = Advisory(
                level=AdvisoryLevel.WARNING,
                title=f"{spec.display_name} stopped",
                message=(
                    f"eGFR {patient.egfr:.0f} < {spec.min_egfr:.0f}: "
                    f"{spec.display_name} is contraindicated and was discontinued."
                ),
                time_seconds=self._clock(),
                drug_id=drug_id,
            )
            self.logger.warning(f"Forced stop: {notice.message}")
            notices.append(notice)
        return notices

    def _activation_block(self, drug_id: str, patient: PatientState):
        spec = DRUG_CATALOG[drug_id]
        if drug_id in self.level.coverage_denied:
            return Advisory(
                level=AdvisoryLevel.BLOCKED,
                title="Coverage denied",
                message=self.level.coverage_denied[drug_id],
                time_seconds=self._clock(),
                drug_id=drug_id,
            )
        if is_contraindicated(drug_id, patient.egfr):
            return Advisory(
                level=AdvisoryLevel.BLOCKED,
                title="Contraindicated",
                message=(
                    f"{spec.display_name} requires eGFR >= {spec.min_egfr:.0f} "
                    f"(current {patient.egfr:.0f})."
                ),
                time_seconds=self._clock(),
                drug_id=drug_id,
            )
        return None

    def _activation_advisories(self, drug_id: str, patient: PatientState) -> List[Advisory]:
        now = self._clock()
        advisories = [
            Advisory(AdvisoryLevel.CAUTION, "Interaction", message, now, drug_id)
            for message in combination_warnings(
                drug_id, patient.active_drugs, patient.egfr, self.constants
            )
        ]
        if drug_id == SULFONYLUREA and self.level.food_insecurity:
            advisories.append(Advisory(
                AdvisoryLevel.WARNING, "Food insecurity",
                "Irregular meals triple the hypoglycemia risk of sulfonylureas.",
                now, drug_id,
            ))
        if (self.level.models_adherence and
                len(patient.active_drugs) + 1 > self.constants.polypharmacy_drug_count):
            advisories.append(Advisory(
                AdvisoryLevel.CAUTION, "Pill burden",
                "More than two drugs will erode adherence.",
                now, drug_id,
            ))
        if drug_id == SGLT2:
            advisories.append(Advisory(
                AdvisoryLevel.INFO, "Expected eGFR dip",
                f"Initial hemodynamic eGFR drop of "
                f"{self.constants.sglt2_initiation_egfr_penalty:.0f}; "
                "long-term kidney protection.",
                now, drug_id,
            ))
        return advisories

    def _record(self, drug_id: str, action: ToggleAction, forced: bool = False) -> None:
        patient = self._patient()
        self.decision_log.append(DecisionLogEntry(
            time_seconds=self._clock(),
            drug_id=drug_id,
            drug_name=DRUG_CATALOG[drug_id].display_name,
            action=action,
            hba1c=patient.hba1c,
            egfr=patient.egfr,
            hypo_risk=patient.hypo_risk,
            adherence=patient.adherence if self.level.models_adherence else None,
            forced=forced,
        ))
