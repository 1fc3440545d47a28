# Tests for T2DPharmSim.physiology.drug_catalog

import pytest

from T2DPharmSim.physiology.drug_catalog import (
    DPP4, DRUG_CATALOG, GLP1, INSULIN, METFORMIN, SGLT2, SULFONYLUREA,
    combination_warnings, effective_efficacy, effective_hypo_chance, get_drug,
    is_contraindicated, ordered_drugs,
)


def test_catalog_contents():
    assert set(DRUG_CATALOG) == {METFORMIN, INSULIN, SULFONYLUREA, SGLT2, GLP1, DPP4}
    assert get_drug(METFORMIN).min_egfr == 30.0
    assert get_drug(METFORMIN).stop_below_min_egfr
    assert not get_drug(SGLT2).stop_below_min_egfr
    assert get_drug(INSULIN).base_hypo_chance > 0
    assert get_drug(METFORMIN).base_hypo_chance == 0


def test_get_drug_unknown_raises():
    with pytest.raises(ValueError):
        get_drug("aspirin")


def test_ordered_drugs_follows_catalog_order():
    assert ordered_drugs({DPP4, METFORMIN, INSULIN}) == [METFORMIN, INSULIN, DPP4]
    assert ordered_drugs([]) == []


def test_dpp4_has_no_effect_alongside_glp1():
    assert effective_efficacy(DPP4, {DPP4, GLP1}, egfr=90.0) == 0.0
    assert effective_efficacy(DPP4, {DPP4}, egfr=90.0) == get_drug(DPP4).base_efficacy


def test_renal_reduction_of_dpp4_and_sglt2():
    """DPP-4 and SGLT2 lose half their effect below eGFR 45."""
    assert effective_efficacy(SGLT2, {SGLT2}, egfr=44.0) == \
        pytest.approx(get_drug(SGLT2).base_efficacy * 0.5)
    assert effective_efficacy(DPP4, {DPP4}, egfr=30.0) == \
        pytest.approx(get_drug(DPP4).base_efficacy * 0.5)
    assert effective_efficacy(SGLT2, {SGLT2}, egfr=45.0) == get_drug(SGLT2).base_efficacy
    assert effective_efficacy(METFORMIN, {METFORMIN}, egfr=35.0) == \
        get_drug(METFORMIN).base_efficacy


def test_hypo_chance_doubles_with_su_and_insulin():
    su = get_drug(SULFONYLUREA).base_hypo_chance
    ins = get_drug(INSULIN).base_hypo_chance
    both = {SULFONYLUREA, INSULIN}
    assert effective_hypo_chance(SULFONYLUREA, {SULFONYLUREA}) == pytest.approx(su)
    assert effective_hypo_chance(SULFONYLUREA, both) == pytest.approx(2 * su)
    assert effective_hypo_chance(INSULIN, both) == pytest.approx(2 * ins)


def test_hypo_chance_triples_for_su_with_food_insecurity():
    su = get_drug(SULFONYLUREA).base_hypo_chance
    ins = get_drug(INSULIN).base_hypo_chance
    assert effective_hypo_chance(SULFONYLUREA, {SULFONYLUREA}, food_insecurity=True) == \
        pytest.approx(3 * su)
    assert effective_hypo_chance(SULFONYLUREA, {SULFONYLUREA, INSULIN},
                                 food_insecurity=True) == pytest.approx(6 * su)
    assert effective_hypo_chance(INSULIN, {INSULIN}, food_insecurity=True) == \
        pytest.approx(ins)


def test_contraindication_thresholds():
    assert is_contraindicated(METFORMIN, 29.9)
    assert not is_contraindicated(METFORMIN, 30.0)
    assert is_contraindicated(SGLT2, 19.0)
    assert not is_contraindicated(SGLT2, 20.0)
    assert not is_contraindicated(INSULIN, 5.0)


def test_combination_warnings():
    assert any("incretin" in w for w in combination_warnings(DPP4, {GLP1}, 90.0))
    assert any("incretin" in w for w in combination_warnings(GLP1, {DPP4}, 90.0))
    assert any("doubles" in w for w in combination_warnings(SULFONYLUREA, {INSULIN}, 90.0))
    assert any("dose reduction" in w for w in combination_warnings(METFORMIN, set(), 40.0))
    assert any("reduced" in w for w in combination_warnings(SGLT2, set(), 40.0))
    assert combination_warnings(METFORMIN, {SGLT2}, 90.0) == []
