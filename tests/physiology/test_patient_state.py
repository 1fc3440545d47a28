# Tests for T2DPharmSim.physiology.patient_state

import pytest

from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS
from T2DPharmSim.physiology.patient_state import PatientState


def test_clamp_restores_bounds():
    """Every bounded field is pulled back into its documented range."""
    patient = PatientState(hba1c=16.2, egfr=-3.0, hypo_risk=140.0, adherence=-5.0,
                           gi_distress_seconds=-1.0, stable_seconds=-2.0)
    patient.clamp()
    assert patient.hba1c == DEFAULT_CONSTANTS.hba1c_max
    assert patient.egfr == DEFAULT_CONSTANTS.egfr_min
    assert patient.hypo_risk == DEFAULT_CONSTANTS.hypo_risk_max
    assert patient.adherence == DEFAULT_CONSTANTS.adherence_min
    assert patient.gi_distress_seconds == 0.0
    assert patient.stable_seconds == 0.0

    patient = PatientState(hba1c=2.0, egfr=150.0, hypo_risk=-1.0, adherence=120.0)
    patient.clamp()
    assert (patient.hba1c, patient.egfr, patient.hypo_risk, patient.adherence) == \
        (4.0, 120.0, 0.0, 100.0)
    print("test_clamp_restores_bounds: PASSED")


def test_clamp_leaves_in_range_values_alone():
    patient = PatientState(hba1c=7.3, egfr=55.5, hypo_risk=12.0, adherence=80.0)
    patient.clamp()
    assert patient.hba1c == 7.3
    assert patient.egfr == 55.5


def test_vitals_are_rounded():
    patient = PatientState(hba1c=7.12345, egfr=55.55, hypo_risk=12.04, adherence=99.99)
    assert patient.vitals() == {
        "hba1c": pytest.approx(7.12),
        "egfr": pytest.approx(55.5, abs=0.06),
        "hypo_risk": pytest.approx(12.0),
        "adherence": pytest.approx(100.0),
    }


def test_copy_is_independent():
    patient = PatientState(hba1c=8.0, egfr=60.0, active_drugs={"metformin"})
    clone = patient.copy()
    clone.active_drugs.add("insulin")
    clone.hba1c = 5.0
    assert patient.active_drugs == {"metformin"}
    assert patient.hba1c == 8.0


def test_is_active_and_gi_distress():
    patient = PatientState(hba1c=8.0, egfr=60.0, active_drugs={"glp1"})
    assert patient.is_active("glp1")
    assert not patient.is_active("dpp4")
    assert not patient.gi_distress
    patient.gi_distress_seconds = 2.0
    assert patient.gi_distress
