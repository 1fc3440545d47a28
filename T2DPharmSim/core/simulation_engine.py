# T2DPharmSim Simulation Engine
# Owns one level attempt: the patient, the scheduler, the spawner and the
# rule components, stepped by explicit `update(dt)` calls.

import logging
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

import pandas as pd

from T2DPharmSim.core.base_classes import BaseRandomSource, NumpyRandomSource
from T2DPharmSim.core.scheduler import Scheduler
from T2DPharmSim.game.drug_toggle import DrugToggleHandler
from T2DPharmSim.game.levels import LevelConfig, get_level
from T2DPharmSim.game.outcome import OutcomeEvaluator
from T2DPharmSim.game.spawner import Spawner
from T2DPharmSim.physiology.constants import PhysiologyConstants
from T2DPharmSim.physiology.drug_catalog import get_drug, ordered_drugs
from T2DPharmSim.physiology.patient_state import PatientState
from T2DPharmSim.physiology.tick_updater import apply_tick
from T2DPharmSim.sdk.data_types import (
    Advisory, AdvisoryLevel, EnemyKind, OutcomeKind, SessionResult, ToggleAction,
    ToggleResult,
)
from T2DPharmSim.sdk import debrief
from T2DPharmSim.utils.config import get_config_value, level_overrides, physiology_constants

logger = logging.getLogger(__name__)

ScriptedToggle = Tuple[float, str, bool]


class SimulationEngine:
    """Orchestrates one level attempt of the pharmacology simulation.

    Each `update(dt)` runs, in order: the scheduler (event spawns and
    arrivals), the tick updater, reactive hypoglycemia spawns, forced
    contraindication stops, trace recording and the outcome evaluator. On
    a terminal outcome the engine freezes, stops the spawner and emits a
    `SessionResult` to every registered listener.

    Pausing freezes the scheduler as well as the tick, so events already
    in flight resume where they were.

    Attributes:
        level (LevelConfig): Current level.
        patient (PatientState): Live patient state.
        scheduler (Scheduler): Timer source for the spawner.
        rng (BaseRandomSource): The session's single random source.
        constants (PhysiologyConstants): Model parameters.
        advisories (List[Advisory]): Every advisory raised this attempt.
        simulation_data (Dict[str, List[Any]]): Per-update vitals trace.
        result (Optional[SessionResult]): Terminal snapshot, once ended.
    """

    def __init__(self, level: int = 1, config: Optional[Dict[str, Any]] = None,
                 seed: Optional[int] = None, rng: Optional[BaseRandomSource] = None,
                 constants: Optional[PhysiologyConstants] = None):
        """Initializes the engine and starts `level`.

        Args:
            level (int): Level to start.
            config (Optional[Dict[str, Any]]): Loaded configuration; the
                `physiology`, `levels` and `simulation.seed` sections apply.
            seed (Optional[int]): Seed for the default random source.
                Overrides `simulation.seed`.
            rng (Optional[BaseRandomSource]): Random source to use instead
                of a seeded numpy generator.
            constants (Optional[PhysiologyConstants]): Model parameters.
                Overrides the `physiology` config section.
        """
        self.config = config or {}
        self.constants = constants or physiology_constants(self.config)
        if rng is None:
            if seed is None:
                seed = get_config_value(self.config, "simulation.seed")
            rng = NumpyRandomSource(seed)
        self.rng = rng
        self.scheduler = Scheduler()
        self._listeners: List[Callable[[SessionResult], None]] = []
        self.start_level(level)

    # ----- lifecycle -----

    def start_level(self, level: int) -> None:
        """Discards the current attempt and starts `level` from its initial state.

        Raises:
            ValueError: If the level does not exist.
        """
        config = get_level(level, level_overrides(self.config, level))
        self.scheduler.clear()
        self.level: LevelConfig = config
        self.patient: PatientState = config.new_patient()
        self.starting_vitals = self.patient.vitals()
        self.paused = False
        self.ended = False
        self.result: Optional[SessionResult] = None
        self.advisories: List[Advisory] = []
        self.hypo_events = 0
        self.simulation_data: Dict[str, List[Any]] = {
            "time_seconds": [],
            "hba1c": [],
            "egfr": [],
            "hypo_risk": [],
            "adherence": [],
            "stable_seconds": [],
            "active_drugs": [],
            "gi_distress": [],
        }

        self.toggles = DrugToggleHandler(
            config, lambda: self.patient, lambda: self.scheduler.now, self.constants
        )
        self.evaluator = OutcomeEvaluator(config, self.constants)
        self.spawner = Spawner(
            self.scheduler, config, lambda: self.patient, self.is_active, self.constants
        )
        self.spawner.start()
        self._record()
        logger.info(
            f"Level {config.level} started: {config.title} "
            f"(patient {config.patient_name}, HbA1c {self.patient.hba1c}, "
            f"eGFR {self.patient.egfr})"
        )

    def restart(self) -> None:
        """Restarts the current level. The random stream is not rewound."""
        logger.info(f"Restarting level {self.level.level}")
        self.start_level(self.level.level)

    def pause(self) -> None:
        if self.ended or self.paused:
            return
        self.paused = True
        logger.info(f"Paused at t={self.elapsed_seconds:.1f}s")

    def resume(self) -> None:
        if self.ended or not self.paused:
            return
        self.paused = False
        logger.info(f"Resumed at t={self.elapsed_seconds:.1f}s")

    def is_active(self) -> bool:
        """True while the attempt is neither paused nor over."""
        return not self.paused and not self.ended

    @property
    def elapsed_seconds(self) -> float:
        return self.scheduler.now

    def add_session_end_listener(self, listener: Callable[[SessionResult], None]) -> None:
        """Registers a callback invoked with the `SessionResult` when an attempt ends."""
        self._listeners.append(listener)

    # ----- stepping -----

    def update(self, dt: float) -> Optional[SessionResult]:
        """Advances the attempt by `dt` seconds.

        Does nothing while paused or after the attempt has ended.

        Args:
            dt (float): Seconds to advance.

        Returns:
            Optional[SessionResult]: The terminal snapshot on the update
                that ends the attempt, otherwise None.

        Raises:
            ValueError: If `dt` is negative.
        """
        if dt < 0:
            raise ValueError(f"Update interval must be non-negative, got {dt}")
        if not self.is_active():
            return None

        self.scheduler.advance(dt)
        report = apply_tick(self.patient, dt, self.level, self.rng, self.constants)

        for drug_id in report.hypo_triggers:
            self.hypo_events += 1
            self.spawner.spawn(EnemyKind.HYPO)
            logger.info(
                f"Hypoglycemia triggered by {get_drug(drug_id).display_name} "
                f"at t={self.elapsed_seconds:.1f}s"
            )
        if report.gi_triggered:
            self.advisories.append(Advisory(
                AdvisoryLevel.INFO, "GI distress",
                "GLP-1 RA side effects: efficacy reduced temporarily.",
                self.elapsed_seconds, None,
            ))
            logger.info(f"GI distress started at t={self.elapsed_seconds:.1f}s")

        self.advisories.extend(self.toggles.enforce_contraindications())
        self._record()

        outcome = self.evaluator.evaluate(self.patient, dt)
        if outcome is not None:
            return self._finish(outcome)
        return None

    def toggle_drug(self, drug_id: str, activate: bool) -> ToggleResult:
        """Switches a drug on or off for the current patient.

        Requests made while paused or after the attempt has ended are
        ignored and reported as unchanged.

        Raises:
            ValueError: If the drug is unknown or not offered on this level.
        """
        get_drug(drug_id)
        if not self.is_active():
            action = ToggleAction.ON if activate else ToggleAction.OFF
            return ToggleResult(drug_id, action, changed=False)
        result = self.toggles.toggle(drug_id, activate)
        self.advisories.extend(result.advisories)
        return result

    def run(self, duration_seconds: float, dt: float = 0.1,
            toggles: Optional[Iterable[ScriptedToggle]] = None) -> Dict[str, List[Any]]:
        """Runs the attempt headlessly with a scripted regimen.

        Args:
            duration_seconds (float): Simulated time to run for, unless the
                attempt ends first.
            dt (float): Fixed update interval in seconds.
            toggles (Optional[Iterable[ScriptedToggle]]): `(time, drug_id,
                activate)` requests, applied before the first update at or
                after `time`.

        Returns:
            Dict[str, List[Any]]: The recorded vitals trace.
        """
        if dt <= 0:
            raise ValueError(f"Run interval must be positive, got {dt}")
        pending = sorted(toggles or [], key=lambda t: t[0])
        steps = int(round(duration_seconds / dt))
        start = self.elapsed_seconds
        logger.info(f"Running level {self.level.level} for {duration_seconds}s at dt={dt}")

        for step in range(steps):
            if self.ended:
                break
            now = start + step * dt
            while pending and pending[0][0] <= now + 1e-9:
                _, drug_id, activate = pending.pop(0)
                self.toggle_drug(drug_id, activate)
            self.update(dt)

        if not self.ended:
            logger.info(f"Run finished without an outcome at t={self.elapsed_seconds:.1f}s")
        return self.simulation_data

    # ----- results -----

    def _record(self) -> None:
        data = self.simulation_data
        data["time_seconds"].append(self.elapsed_seconds)
        data["hba1c"].append(self.patient.hba1c)
        data["egfr"].append(self.patient.egfr)
        data["hypo_risk"].append(self.patient.hypo_risk)
        data["adherence"].append(self.patient.adherence)
        data["stable_seconds"].append(self.patient.stable_seconds)
        data["active_drugs"].append(",".join(ordered_drugs(self.patient.active_drugs)))
        data["gi_distress"].append(self.patient.gi_distress)

    def _finish(self, outcome: OutcomeKind) -> SessionResult:
        self.ended = True
        self.spawner.stop()
        result = SessionResult(
            level=self.level.level,
            outcome=outcome,
            elapsed_seconds=self.elapsed_seconds,
            starting_vitals=self.starting_vitals,
            final_vitals=self.patient.vitals(),
            active_drugs=[get_drug(d).display_name
                          for d in ordered_drugs(self.patient.active_drugs)],
            decision_log=list(self.toggles.decision_log),
            patient_profile=self.level.profile(),
            hypo_events=self.hypo_events,
            adherence=self.patient.adherence if self.level.models_adherence else None,
        )
        self.result = result
        logger.info(
            f"Level {self.level.level} ended at t={self.elapsed_seconds:.1f}s: "
            f"{outcome.value}"
        )
        for listener in self._listeners:
            listener(result)
        return result

    def build_debrief_payload(self) -> Dict[str, Any]:
        """Debrief request body for the finished attempt.

        Raises:
            ValueError: If the attempt has not ended.
        """
        if self.result is None:
            raise ValueError("The session has not ended; no debrief is available yet")
        return debrief.build_debrief_payload(self.result)

    def to_dataframe(self) -> pd.DataFrame:
        """Returns the recorded trace as a DataFrame, one row per update."""
        return pd.DataFrame(self.simulation_data)

    def plot_vitals_trace(self, save_path: Optional[str] = None):
        """Plots the recorded vitals; see `T2DPharmSim.utils.plotting`."""
        from T2DPharmSim.utils.plotting import plot_vitals_trace
        return plot_vitals_trace(self.simulation_data, level=self.level.level,
                                 result=self.result, save_path=save_path,
                                 constants=self.constants)
