# T2DPharmSim Tick Updater
# Advances the patient by one time slice: drift, renal decline,
# adherence, GI side effects, drug effects, hypoglycemia rolls, recovery.

from dataclasses import dataclass, field
from typing import List, TYPE_CHECKING

from T2DPharmSim.core.base_classes import BaseRandomSource
from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants
from T2DPharmSim.physiology.drug_catalog import (
    GLP1, HYPOGLYCEMIC_DRUGS, SGLT2,
    effective_efficacy, effective_hypo_chance, ordered_drugs,
)
from T2DPharmSim.physiology.patient_state import PatientState

if TYPE_CHECKING:
    from T2DPharmSim.game.levels import LevelConfig


@dataclass
class TickReport:
    """What happened during one tick, beyond the state mutation itself.

    Attributes:
        hypo_triggers (List[str]): Drug ids whose hypoglycemia roll
            succeeded; each one schedules a hypoglycemia event.
        gi_triggered (bool): Whether GI distress started this tick.
        efficacy_multiplier (float): Combined adherence/GI multiplier used.
        hba1c_lowered (float): Total HbA1c removed by drugs this tick.
    """
    hypo_triggers: List[str] = field(default_factory=list)
    gi_triggered: bool = False
    efficacy_multiplier: float = 1.0
    hba1c_lowered: float = 0.0


def adherence_multiplier(adherence: float,
                         constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> float:
    """Efficacy multiplier for a given adherence percentage."""
    if adherence < constants.adherence_low_threshold:
        return constants.adherence_low_multiplier
    if adherence < constants.adherence_mid_threshold:
        return constants.adherence_mid_multiplier
    return 1.0


def egfr_decay(patient: PatientState, dt: float,
               constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> float:
    """eGFR lost over `dt` from uncontrolled glycemia.

    Decline only runs while HbA1c is above the decay threshold. An active
    SGLT2 inhibitor scales it down, and removes it entirely while HbA1c is
    below the shielding threshold.
    """
    if patient.hba1c <= constants.egfr_decay_hba1c_threshold:
        return 0.0
    decay = constants.egfr_decay_per_sec * dt
    if patient.is_active(SGLT2):
        if patient.hba1c < constants.sglt2_shield_hba1c:
            return 0.0
        decay *= constants.sglt2_decay_multiplier
    return decay


def apply_tick(patient: PatientState, dt: float, level: "LevelConfig",
               rng: BaseRandomSource,
               constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> TickReport:
    """Applies one simulation tick to `patient` in place.

    Rules run in a fixed order; all bounded fields are clamped at the end.

    Args:
        patient (PatientState): State to mutate.
        dt (float): Elapsed time slice in seconds.
        level (LevelConfig): Current level.
        rng (BaseRandomSource): Source for the GI and hypoglycemia rolls.
        constants (PhysiologyConstants): Model parameters.

    Returns:
        TickReport: Triggered events and the multiplier applied.
    """
    if dt < 0:
        raise ValueError(f"Tick duration must be non-negative, got {dt}")
    report = TickReport()

    # 1. background drift
    patient.hba1c += constants.hba1c_drift_per_sec * dt

    # 2. renal decline
    if level.models_kidney:
        patient.egfr -= egfr_decay(patient, dt, constants)

    # 3. adherence
    multiplier = 1.0
    if level.models_adherence:
        if len(patient.active_drugs) > constants.polypharmacy_drug_count:
            patient.adherence -= constants.adherence_decay_per_sec * dt
        else:
            patient.adherence += constants.adherence_recovery_per_sec * dt
        patient.adherence = max(constants.adherence_min,
                                min(constants.adherence_max, patient.adherence))
        multiplier *= adherence_multiplier(patient.adherence, constants)

    # 4. GI distress
    if patient.is_active(GLP1) and rng.roll(constants.gi_chance_per_sec * dt):
        patient.gi_distress_seconds = constants.gi_duration_sec
        report.gi_triggered = True
    if patient.gi_distress_seconds > 0.0:
        multiplier *= constants.gi_efficacy_multiplier
        patient.gi_distress_seconds = max(0.0, patient.gi_distress_seconds - dt)
    report.efficacy_multiplier = multiplier

    # 5. drug effects and hypoglycemia rolls
    active = ordered_drugs(patient.active_drugs)
    for drug_id in active:
        efficacy = effective_efficacy(drug_id, active, patient.egfr, constants)
        lowered = efficacy * multiplier * dt
        patient.hba1c -= lowered
        report.hba1c_lowered += lowered
        chance = effective_hypo_chance(drug_id, active, level.food_insecurity, constants)
        if rng.roll(chance * dt):
            report.hypo_triggers.append(drug_id)

    # 6. hypoglycemia risk recovery
    if not HYPOGLYCEMIC_DRUGS & patient.active_drugs:
        patient.hypo_risk -= constants.hypo_recovery_per_sec * dt

    # 7. clamp
    patient.clamp(constants)
    return report
