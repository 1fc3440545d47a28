# T2DPharmSim Metrics
# Functions for summarizing a recorded session trace.

import numpy as np
from typing import Any, Dict, List, Optional


# General helper for safe division
def _safe_divide(numerator: float, denominator: float,
                 default_val: float = 0.0) -> float:
    """Safely divides two numbers. Returns `default_val` if denominator is zero."""
    return numerator / denominator if denominator != 0 else default_val


def calculate_time_in_target(hba1c: np.ndarray, target: float = 7.0) -> float:
    """Calculates the percentage of samples with HbA1c below `target`.

    Args:
        hba1c (np.ndarray): HbA1c samples, %.
        target (float): Target HbA1c (exclusive, i.e., values < target).
            Defaults to 7.0 %.

    Returns:
        float: Percentage of samples on target. Returns 0.0 if empty.
    """
    if len(hba1c) == 0:
        return 0.0
    hba1c = np.asarray(hba1c, dtype=float)
    on_target = np.sum(hba1c < target)
    return float(_safe_divide(float(on_target), float(len(hba1c))) * 100)


def calculate_egfr_decline(egfr: np.ndarray) -> float:
    """Calculates the eGFR lost between the first and last sample.

    SGLT2 initiation dips and kidney events both count. A rising eGFR
    yields a negative decline.

    Args:
        egfr (np.ndarray): eGFR samples in time order.

    Returns:
        float: First minus last sample. Returns 0.0 if empty.
    """
    if len(egfr) == 0:
        return 0.0
    egfr = np.asarray(egfr, dtype=float)
    return float(egfr[0] - egfr[-1])


def calculate_peak_hypo_risk(hypo_risk: np.ndarray) -> float:
    """Returns the highest hypoglycemia risk reached, or 0.0 if empty."""
    if len(hypo_risk) == 0:
        return 0.0
    return float(np.max(np.asarray(hypo_risk, dtype=float)))


def calculate_time_weighted_mean(values: np.ndarray, times: np.ndarray) -> float:
    """Calculates the time-weighted mean of a sampled signal.

    Each sample is held until the next one (zero-order hold), so uneven
    update intervals are weighted correctly. The last sample carries no
    weight.

    Args:
        values (np.ndarray): Signal samples.
        times (np.ndarray): Sample times in seconds, same length as `values`.

    Returns:
        float: Time-weighted mean. Falls back to the plain mean when the
            samples span no time, and 0.0 when empty.

    Raises:
        ValueError: If `values` and `times` have different lengths.
    """
    if len(values) != len(times):
        raise ValueError("Input arrays values and times must have the same length.")
    if len(values) == 0:
        return 0.0
    values = np.asarray(values, dtype=float)
    times = np.asarray(times, dtype=float)
    widths = np.diff(times)
    total = float(np.sum(widths))
    if total <= 0:
        return float(np.mean(values))
    return float(np.sum(values[:-1] * widths) / total)


def summarize_session(simulation_data: Dict[str, List[Any]],
                      hba1c_target: float = 7.0,
                      adherence: Optional[bool] = None) -> Dict[str, float]:
    """Summarizes a session trace recorded by the simulation engine.

    Args:
        simulation_data (Dict[str, List[Any]]): Trace with `time_seconds`,
            `hba1c`, `egfr`, `hypo_risk` and `adherence` columns.
        hba1c_target (float): Target used for time-in-target.
        adherence (Optional[bool]): Include adherence statistics. Defaults
            to including them only if adherence ever left 100 %.

    Returns:
        Dict[str, float]: Summary metrics.
    """
    times = np.asarray(simulation_data.get("time_seconds", []), dtype=float)
    hba1c = np.asarray(simulation_data.get("hba1c", []), dtype=float)
    egfr = np.asarray(simulation_data.get("egfr", []), dtype=float)
    hypo = np.asarray(simulation_data.get("hypo_risk", []), dtype=float)

    summary = {
        "duration_seconds": float(times[-1] - times[0]) if len(times) else 0.0,
        "final_hba1c": float(hba1c[-1]) if len(hba1c) else 0.0,
        "mean_hba1c": calculate_time_weighted_mean(hba1c, times),
        "time_in_target_pct": calculate_time_in_target(hba1c, hba1c_target),
        "egfr_decline": calculate_egfr_decline(egfr),
        "peak_hypo_risk": calculate_peak_hypo_risk(hypo),
    }

    adh = np.asarray(simulation_data.get("adherence", []), dtype=float)
    if adherence is None:
        adherence = bool(len(adh)) and bool(np.any(adh < 100.0))
    if adherence and len(adh):
        summary["min_adherence"] = float(np.min(adh))
        summary["mean_adherence"] = calculate_time_weighted_mean(adh, times)
    return summary
