# T2DPharmSim Plotting
# Vitals trace figure for a recorded session.

import logging
from typing import Any, Dict, List, Optional

import matplotlib.pyplot as plt
import numpy as np

from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants
from T2DPharmSim.sdk.data_types import SessionResult

logger = logging.getLogger(__name__)


def plot_vitals_trace(simulation_data: Dict[str, List[Any]], level: Optional[int] = None,
                      result: Optional[SessionResult] = None,
                      save_path: Optional[str] = None,
                      constants: PhysiologyConstants = DEFAULT_CONSTANTS):
    """Plots HbA1c, eGFR, hypoglycemia risk and adherence against time.

    Threshold lines mark the stabilization target and the loss limits.

    Args:
        simulation_data (Dict[str, List[Any]]): Trace recorded by the engine.
        level (Optional[int]): Level number, used in the title.
        result (Optional[SessionResult]): Terminal snapshot, used in the title.
        save_path (Optional[str]): Write the figure here and close it.
            Otherwise the open figure is returned.

    Returns:
        matplotlib.figure.Figure: The figure, or None when there is no data.
    """
    if not simulation_data or not simulation_data.get("time_seconds"):
        logger.warning("No trace data to plot.")
        return None

    t = np.asarray(simulation_data["time_seconds"], dtype=float)
    c = constants
    fig, axs = plt.subplots(4, 1, figsize=(10, 12), sharex=True)

    axs[0].plot(t, simulation_data["hba1c"], label="HbA1c (%)", color="crimson", linewidth=2)
    axs[0].axhline(c.stable_hba1c, color="green", linestyle="--", label="Target")
    axs[0].axhline(c.crisis_hba1c, color="darkred", linestyle=":", label="Crisis")
    axs[0].set_ylabel("HbA1c (%)")

    axs[1].plot(t, simulation_data["egfr"], label="eGFR", color="dodgerblue", linewidth=2)
    axs[1].axhline(c.stable_egfr, color="orange", linestyle="--", label="Stable floor")
    axs[1].axhline(c.kidney_failure_egfr, color="darkred", linestyle=":", label="Failure")
    axs[1].set_ylabel("eGFR")

    axs[2].plot(t, simulation_data["hypo_risk"], label="Hypo risk (%)", color="darkorchid",
                linewidth=2)
    axs[2].axhline(c.coma_hypo_risk, color="darkred", linestyle=":", label="Coma")
    axs[2].set_ylabel("Hypo risk (%)")

    axs[3].plot(t, simulation_data["adherence"], label="Adherence (%)", color="goldenrod",
                linewidth=2)
    axs[3].axhline(c.stable_adherence, color="orange", linestyle="--", label="Stable floor")
    axs[3].set_ylabel("Adherence (%)")
    axs[3].set_ylim(0, 105)

    for ax in axs:
        ax.legend(loc="upper right")
        ax.grid(True, linestyle=':', alpha=0.7)
    axs[-1].set_xlabel("Time (s)")

    title = "T2DPharmSim session"
    if level is not None:
        title += f" - Level {level}"
    if result is not None:
        title += f" - {result.outcome.value} at {result.elapsed_seconds:.1f}s"
    fig.suptitle(title, fontsize=14)
    fig.tight_layout(rect=(0, 0, 1, 0.96))

    if save_path:
        fig.savefig(save_path)
        plt.close(fig)
        logger.info(f"Vitals trace saved to '{save_path}'")
    return fig
