# T2DPharmSim Drug Catalog
# Static drug table and the interaction rules that adjust it at runtime.

from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional

from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants

METFORMIN = "metformin"
INSULIN = "insulin"
SULFONYLUREA = "sulfonylurea"
SGLT2 = "sglt2"
GLP1 = "glp1"
DPP4 = "dpp4"


@dataclass(frozen=True)
class DrugSpec:
    """Immutable reference data for one drug class.

    Attributes:
        drug_id (str): Catalog key.
        display_name (str): Name shown to the player and in the debrief.
        base_efficacy (float): HbA1c lowered per second at full adherence.
        base_hypo_chance (float): Per-second probability of triggering a
            hypoglycemia event.
        min_egfr (Optional[float]): eGFR required to start the drug.
        stop_below_min_egfr (bool): Whether the drug is force-stopped once
            eGFR falls below `min_egfr` while it is active.
    """
    drug_id: str
    display_name: str
    base_efficacy: float
    base_hypo_chance: float = 0.0
    min_egfr: Optional[float] = None
    stop_below_min_egfr: bool = False


DRUG_CATALOG: Dict[str, DrugSpec] = {
    METFORMIN: DrugSpec(METFORMIN, "Metformin", 0.25, 0.0,
                        min_egfr=30.0, stop_below_min_egfr=True),
    INSULIN: DrugSpec(INSULIN, "Insulin", 0.40, 0.04),
    SULFONYLUREA: DrugSpec(SULFONYLUREA, "Sulfonylurea", 0.30, 0.03),
    SGLT2: DrugSpec(SGLT2, "SGLT2 Inhibitor", 0.18, 0.0, min_egfr=20.0),
    GLP1: DrugSpec(GLP1, "GLP-1 RA", 0.30, 0.0),
    DPP4: DrugSpec(DPP4, "DPP-4 Inhibitor", 0.12, 0.0),
}

HYPOGLYCEMIC_DRUGS = frozenset({INSULIN, SULFONYLUREA})


def get_drug(drug_id: str) -> DrugSpec:
    """Looks up a drug by id.

    Raises:
        ValueError: If the id is not in the catalog.
    """
    try:
        return DRUG_CATALOG[drug_id]
    except KeyError:
        raise ValueError(
            f"Unknown drug '{drug_id}'. Known: {', '.join(DRUG_CATALOG)}"
        ) from None


def ordered_drugs(drug_ids: Iterable[str]) -> List[str]:
    """Returns the given ids in catalog order, for deterministic iteration."""
    wanted = set(drug_ids)
    return [drug_id for drug_id in DRUG_CATALOG if drug_id in wanted]


def effective_efficacy(drug_id: str, active_drugs: Iterable[str], egfr: float,
                       constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> float:
    """Per-second HbA1c reduction of a drug after interaction adjustments.

    Adherence and GI multipliers are applied by the tick updater, not here.

    - DPP-4 is zeroed when GLP-1 is also active (same incretin pathway).
    - DPP-4 and SGLT2 lose efficacy when eGFR is below the renal threshold.
    """
    active = set(active_drugs)
    efficacy = get_drug(drug_id).base_efficacy
    if drug_id == DPP4 and GLP1 in active:
        return 0.0
    if drug_id in (DPP4, SGLT2) and egfr < constants.renal_efficacy_egfr:
        efficacy *= constants.renal_efficacy_multiplier
    return efficacy


def effective_hypo_chance(drug_id: str, active_drugs: Iterable[str],
                          food_insecurity: bool = False,
                          constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> float:
    """Per-second hypoglycemia probability of a drug after interactions.

    - Doubled for insulin and sulfonylurea when both are active.
    - Tripled for sulfonylurea when the patient is food insecure.
    """
    active = set(active_drugs)
    chance = get_drug(drug_id).base_hypo_chance
    if drug_id in HYPOGLYCEMIC_DRUGS and HYPOGLYCEMIC_DRUGS <= active:
        chance *= constants.su_insulin_hypo_multiplier
    if drug_id == SULFONYLUREA and food_insecurity:
        chance *= constants.food_insecurity_su_hypo_multiplier
    return chance


def is_contraindicated(drug_id: str, egfr: float) -> bool:
    """True when eGFR is below the drug's initiation threshold."""
    spec = get_drug(drug_id)
    return spec.min_egfr is not None and egfr < spec.min_egfr


def combination_warnings(drug_id: str, active_drugs: Iterable[str], egfr: float,
                         constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> List[str]:
    """Advisory messages for starting `drug_id` alongside `active_drugs`.

    These never block activation.
    """
    others = set(active_drugs) - {drug_id}
    warnings: List[str] = []
    if drug_id in (GLP1, DPP4) and ({GLP1, DPP4} - {drug_id}) <= others:
        warnings.append(
            "GLP-1 RA + DPP-4 inhibitor act on the same incretin pathway: "
            "no additive benefit."
        )
    if drug_id in HYPOGLYCEMIC_DRUGS and (HYPOGLYCEMIC_DRUGS - {drug_id}) <= others:
        warnings.append(
            "Sulfonylurea + insulin doubles the risk of hypoglycemia."
        )
    if drug_id == METFORMIN and egfr < constants.renal_efficacy_egfr:
        warnings.append(
            f"eGFR {egfr:.0f} < {constants.renal_efficacy_egfr:.0f}: "
            "metformin dose reduction is advised."
        )
    if drug_id in (DPP4, SGLT2) and egfr < constants.renal_efficacy_egfr:
        warnings.append(
            f"eGFR {egfr:.0f} < {constants.renal_efficacy_egfr:.0f}: "
            f"{get_drug(drug_id).display_name} "
            "glucose-lowering effect is reduced."
        )
    return warnings
