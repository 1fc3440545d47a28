"""Patient physiology for T2DPharmSim.

Key Contents:
    - `constants.py`: Tunable model parameters (`PhysiologyConstants`).
    - `patient_state.py`: The mutable patient record and its bounds.
    - `drug_catalog.py`: Drug table and runtime interaction rules.
    - `tick_updater.py`: The per-tick update applying drift, renal decline,
      adherence, side effects, drug effects and hypoglycemia rolls.
"""
