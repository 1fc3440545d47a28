# T2DPharmSim Outcome Evaluator
# Checks the patient against loss thresholds and the level's
# stabilization condition after every tick.

import logging
from typing import Optional

from T2DPharmSim.game.levels import LevelConfig
from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants
from T2DPharmSim.physiology.patient_state import PatientState
from T2DPharmSim.sdk.data_types import OutcomeKind

logger = logging.getLogger(__name__)


class OutcomeEvaluator:
    """Decides whether a level attempt has ended.

    Loss conditions are checked in priority order (coma, hyperglycemic
    crisis, kidney failure) before the win condition. The win condition is
    tracked in `patient.stable_seconds`, which resets to zero on any tick
    the stabilization condition does not hold.
    """

    def __init__(self, level: LevelConfig,
                 constants: PhysiologyConstants = DEFAULT_CONSTANTS):
        self.level = level
        self.constants = constants

    def is_stable(self, patient: PatientState) -> bool:
        """The level-specific stabilization condition.

        Level 1 gates on HbA1c alone; later levels also require eGFR above
        the stable threshold; adherence-modelling levels also require
        adherence at or above the stable threshold.
        """
        c = self.constants
        if patient.hba1c >= c.stable_hba1c:
            return False
        if self.level.level > 1 and patient.egfr <= c.stable_egfr:
            return False
        if self.level.models_adherence and patient.adherence < c.stable_adherence:
            return False
        return True

    def check_loss(self, patient: PatientState) -> Optional[OutcomeKind]:
        c = self.constants
        if patient.hypo_risk >= c.coma_hypo_risk:
            return OutcomeKind.HYPOGLYCEMIC_COMA
        if patient.hba1c >= c.crisis_hba1c:
            return OutcomeKind.HYPERGLYCEMIC_CRISIS
        if self.level.models_kidney and patient.egfr <= c.kidney_failure_egfr:
            return OutcomeKind.KIDNEY_FAILURE
        return None

    def evaluate(self, patient: PatientState, dt: float) -> Optional[OutcomeKind]:
        """Evaluates the patient after a tick of length `dt`.

        Args:
            patient (PatientState): State after the tick's mutations.
            dt (float): Length of the tick, added to the stable time when
                the stabilization condition holds.

        Returns:
            Optional[OutcomeKind]: The terminal outcome, or None to continue.
        """
        loss = self.check_loss(patient)
        if loss is not None:
            logger.info(f"Level {self.level.level} lost: {loss.value}")
            return loss

        if self.is_stable(patient):
            patient.stable_seconds += dt
        else:
            patient.stable_seconds = 0.0

        if patient.stable_seconds >= self.level.win_seconds:
            logger.info(
                f"Level {self.level.level} won after "
                f"{patient.stable_seconds:.1f}s of stability"
            )
            return OutcomeKind.STABILIZED
        return None
