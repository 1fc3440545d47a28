"""Utility module for the T2DPharmSim library.

Key Contents:
    - `config.py`: Loading and accessing configuration parameters from
      YAML or JSON files, and building model constants and level
      overrides from them.
    - `metrics.py`: Session summaries such as time on HbA1c target, eGFR
      decline and peak hypoglycemia risk.
    - `plotting.py`: Vitals trace figure with matplotlib.
"""

# from .config import ConfigManager, load_config, get_config_value
# from . import metrics # Or specific functions like from .metrics import summarize_session
