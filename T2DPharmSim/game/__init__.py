"""Game rules for T2DPharmSim.

Key Contents:
    - `levels.py`: The four scenarios and their per-level rules.
    - `spawner.py`: Timed glucose, kidney and hypoglycemia events.
    - `drug_toggle.py`: Guarded drug activation and the decision log.
    - `outcome.py`: Loss conditions and the stabilization win condition.
"""
