# Tests for T2DPharmSim.game.drug_toggle

import pytest

from T2DPharmSim.game.drug_toggle import DrugToggleHandler
from T2DPharmSim.game.levels import get_level
from T2DPharmSim.physiology.drug_catalog import (
    DPP4, GLP1, INSULIN, METFORMIN, SGLT2, SULFONYLUREA
)
from T2DPharmSim.sdk.data_types import AdvisoryLevel, ToggleAction


def make_handler(level_number: int, clock_value: float = 12.5):
    level = get_level(level_number)
    patient = level.new_patient()
    handler = DrugToggleHandler(level, lambda: patient, lambda: clock_value)
    return handler, patient


def test_sglt2_initiation_dips_egfr_by_three():
    handler, patient = make_handler(2)
    result = handler.toggle(SGLT2, True)

    assert result.changed
    assert not result.blocked
    assert SGLT2 in patient.active_drugs
    assert patient.egfr == pytest.approx(49.0)
    assert any(a.title == "Expected eGFR dip" for a in result.advisories)
    entry = handler.decision_log[0]
    assert entry.time_seconds == 12.5
    assert entry.action is ToggleAction.ON
    print("test_sglt2_initiation_dips_egfr_by_three: PASSED")


def test_metformin_blocked_below_egfr_30():
    handler, patient = make_handler(2)
    patient.egfr = 25.0
    result = handler.toggle(METFORMIN, True)

    assert not result.changed
    assert result.blocked
    assert result.advisories[0].title == "Contraindicated"
    assert METFORMIN not in patient.active_drugs
    assert handler.decision_log == []


def test_coverage_denial_blocks_glp1_on_level4():
    handler, patient = make_handler(4)
    result = handler.toggle(GLP1, True)
    assert result.blocked
    assert result.advisories[0].title == "Coverage denied"
    assert GLP1 not in patient.active_drugs


def test_drug_not_offered_or_unknown_raises():
    handler, _ = make_handler(1)
    with pytest.raises(ValueError):
        handler.toggle(SGLT2, True)
    with pytest.raises(ValueError):
        handler.toggle("aspirin", True)


def test_repeated_request_is_a_no_op():
    handler, _ = make_handler(1)
    assert handler.toggle(METFORMIN, True).changed
    assert not handler.toggle(METFORMIN, True).changed
    assert not handler.toggle(INSULIN, False).changed
    assert len(handler.decision_log) == 1


def test_deactivation_is_logged():
    handler, patient = make_handler(1)
    handler.toggle(METFORMIN, True)
    result = handler.toggle(METFORMIN, False)
    assert result.changed
    assert METFORMIN not in patient.active_drugs
    assert [e.action for e in handler.decision_log] == [ToggleAction.ON, ToggleAction.OFF]


def test_su_with_insulin_warns_but_allows():
    handler, patient = make_handler(1)
    handler.toggle(INSULIN, True)
    result = handler.toggle(SULFONYLUREA, True)
    assert result.changed
    assert not result.blocked
    assert any("doubles" in a.message for a in result.advisories)
    assert patient.active_drugs == {INSULIN, SULFONYLUREA}


def test_glp1_dpp4_redundancy_warning():
    handler, _ = make_handler(3)
    handler.toggle(GLP1, True)
    result = handler.toggle(DPP4, True)
    assert result.changed
    assert any("incretin" in a.message for a in result.advisories)


def test_level4_food_insecurity_and_pill_burden_advisories():
    handler, _ = make_handler(4)
    result = handler.toggle(SULFONYLUREA, True)
    assert any(a.title == "Food insecurity" and a.level is AdvisoryLevel.WARNING
               for a in result.advisories)

    handler.toggle(METFORMIN, True)
    result = handler.toggle(DPP4, True)
    assert any(a.title == "Pill burden" for a in result.advisories)


def test_level4_log_records_adherence():
    handler, patient = make_handler(4)
    patient.adherence = 73.4
    handler.toggle(METFORMIN, True)
    assert handler.decision_log[0].to_payload()["adherence_at_time"] == 73

    handler2, _ = make_handler(1)
    handler2.toggle(METFORMIN, True)
    assert "adherence_at_time" not in handler2.decision_log[0].to_payload()


def test_enforce_contraindications_force_stops_metformin_once():
    handler, patient = make_handler(2)
    handler.toggle(METFORMIN, True)
    handler.toggle(SGLT2, True)
    patient.egfr = 18.0

    notices = handler.enforce_contraindications()
    assert len(notices) == 1
    assert notices[0].level is AdvisoryLevel.WARNING
    assert notices[0].drug_id == METFORMIN
    assert METFORMIN not in patient.active_drugs
    assert SGLT2 in patient.active_drugs

    last = handler.decision_log[-1]
    assert last.forced and last.action is ToggleAction.OFF
    assert handler.enforce_contraindications() == []
