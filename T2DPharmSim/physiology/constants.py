# T2DPharmSim Physiology Constants
# Tunable rates, bounds and thresholds of the patient model.
# Rates are per simulated second; HbA1c in %, eGFR in mL/min/1.73m2.

import logging
from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class PhysiologyConstants:
    """All numeric parameters of the patient model.

    Instances are immutable; use `with_overrides` to derive a variant,
    e.g. from the `physiology` section of a config file.
    """
    # Clamp ranges
    hba1c_min: float = 4.0
    hba1c_max: float = 15.0
    egfr_min: float = 0.0
    egfr_max: float = 120.0
    hypo_risk_min: float = 0.0
    hypo_risk_max: float = 100.0
    adherence_min: float = 0.0
    adherence_max: float = 100.0

    # Background glycemic drift
    hba1c_drift_per_sec: float = 0.01

    # Renal decline (level >= 2)
    egfr_decay_per_sec: float = 0.08
    egfr_decay_hba1c_threshold: float = 7.5
    sglt2_decay_multiplier: float = 0.15
    sglt2_shield_hba1c: float = 7.0

    # Adherence (level 4)
    adherence_decay_per_sec: float = 2.0
    adherence_recovery_per_sec: float = 1.0
    polypharmacy_drug_count: int = 2
    adherence_low_threshold: float = 30.0
    adherence_low_multiplier: float = 0.2
    adherence_mid_threshold: float = 60.0
    adherence_mid_multiplier: float = 0.5

    # GLP-1 gastrointestinal side effect
    gi_chance_per_sec: float = 0.02
    gi_efficacy_multiplier: float = 0.7
    gi_duration_sec: float = 5.0

    # Drug interactions
    renal_efficacy_egfr: float = 45.0
    renal_efficacy_multiplier: float = 0.5
    su_insulin_hypo_multiplier: float = 2.0
    food_insecurity_su_hypo_multiplier: float = 3.0

    # Hypoglycemia risk recovery when no insulin secretagogue/insulin is on board
    hypo_recovery_per_sec: float = 1.0

    # One-time penalty on SGLT2 inhibitor initiation (hemodynamic dip)
    sglt2_initiation_egfr_penalty: float = 3.0

    # Enemy arrival effects
    glucose_hit_hba1c: float = 0.5
    kidney_hit_egfr: float = 7.0
    kidney_hit_egfr_shielded: float = 2.0
    sglt2_shield_min_egfr: float = 20.0
    hypo_hit_risk: float = 25.0

    # Enemy travel time from spawn to delivery
    glucose_travel_sec: float = 1.6
    kidney_travel_sec: float = 1.6
    hypo_travel_sec: float = 1.0

    # Outcome thresholds
    coma_hypo_risk: float = 100.0
    crisis_hba1c: float = 10.0
    kidney_failure_egfr: float = 14.0
    stable_hba1c: float = 7.0
    stable_egfr: float = 30.0
    stable_adherence: float = 50.0

    def with_overrides(self, overrides: Optional[Dict[str, Any]]) -> "PhysiologyConstants":
        """Returns a copy with the given fields replaced.

        Unknown keys are skipped with a warning; values are coerced to the
        type of the field they replace.

        Args:
            overrides (Optional[Dict[str, Any]]): Field name to new value.

        Returns:
            PhysiologyConstants: The derived constants.
        """
        if not overrides:
            return self
        known = {f.name: f.type for f in fields(self)}
        changes: Dict[str, Any] = {}
        for key, value in overrides.items():
            if key not in known:
                logger.warning(f"Ignoring unknown physiology constant '{key}'")
                continue
            current = getattr(self, key)
            changes[key] = int(value) if isinstance(current, int) else float(value)
        return replace(self, **changes)


DEFAULT_CONSTANTS = PhysiologyConstants()
