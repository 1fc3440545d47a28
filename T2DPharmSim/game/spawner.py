# T2DPharmSim Spawner
# Timer-driven generator of glucose, kidney and hypoglycemia events.

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional

from T2DPharmSim.core.scheduler import Scheduler, TimerHandle
from T2DPharmSim.game.levels import LevelConfig
from T2DPharmSim.physiology.constants import DEFAULT_CONSTANTS, PhysiologyConstants
from T2DPharmSim.physiology.drug_catalog import SGLT2
from T2DPharmSim.physiology.patient_state import PatientState
from T2DPharmSim.sdk.data_types import EnemyKind

logger = logging.getLogger(__name__)


@dataclass
class Enemy:
    """A timed-delivery vehicle for one state perturbation."""
    kind: EnemyKind
    spawned_at: float
    arrives_at: float


def kidney_shielded(patient: PatientState,
                    constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> bool:
    """True when an active SGLT2 inhibitor still has enough kidney to work with."""
    return patient.is_active(SGLT2) and patient.egfr >= constants.sglt2_shield_min_egfr


def apply_arrival(patient: PatientState, kind: EnemyKind,
                  constants: PhysiologyConstants = DEFAULT_CONSTANTS) -> None:
    """Applies the one-shot effect of an arriving event to `patient`."""
    if kind is EnemyKind.GLUCOSE:
        patient.hba1c += constants.glucose_hit_hba1c
    elif kind is EnemyKind.CKD:
        if kidney_shielded(patient, constants):
            patient.egfr -= constants.kidney_hit_egfr_shielded
        else:
            patient.egfr -= constants.kidney_hit_egfr
    elif kind is EnemyKind.HYPO:
        patient.hypo_risk += constants.hypo_hit_risk
    patient.clamp(constants)


class Spawner:
    """Spawns events on the scheduler and delivers them on arrival.

    Glucose and kidney events recur on the level's periods; hypoglycemia
    events are spawned reactively by the engine. Every callback checks
    `is_active` first, so nothing spawns or lands while the session is
    paused or over.

    Attributes:
        in_flight (List[Enemy]): Events spawned but not yet delivered.
        delivered (dict): Count of delivered events per kind.
    """

    def __init__(self, scheduler: Scheduler, level: LevelConfig,
                 patient_getter: Callable[[], PatientState],
                 is_active: Callable[[], bool],
                 constants: PhysiologyConstants = DEFAULT_CONSTANTS,
                 on_arrival: Optional[Callable[[Enemy], None]] = None):
        self.scheduler = scheduler
        self.level = level
        self.constants = constants
        self._patient = patient_getter
        self._is_active = is_active
        self._on_arrival = on_arrival
        self._timers: List[TimerHandle] = []
        self.in_flight: List[Enemy] = []
        self.delivered = {kind: 0 for kind in EnemyKind}

    def start(self) -> None:
        """Registers the recurring streams for the level.

        The first glucose event spawns immediately; the kidney stream waits
        one full period.
        """
        self._timers.append(self.scheduler.register_periodic(
            self.level.glucose_period_sec,
            lambda: self.spawn(EnemyKind.GLUCOSE),
            first_delay=0.0,
        ))
        if self.level.models_kidney and self.level.kidney_period_sec:
            self._timers.append(self.scheduler.register_periodic(
                self.level.kidney_period_sec,
                lambda: self.spawn(EnemyKind.CKD),
            ))
        logger.debug(f"Spawner started for level {self.level.level}")

    def stop(self) -> None:
        """Cancels the recurring streams and drops events still in flight."""
        for handle in self._timers:
            self.scheduler.cancel(handle)
        self._timers.clear()
        self.in_flight.clear()

    def _travel_time(self, kind: EnemyKind) -> float:
        return {
            EnemyKind.GLUCOSE: self.constants.glucose_travel_sec,
            EnemyKind.CKD: self.constants.kidney_travel_sec,
            EnemyKind.HYPO: self.constants.hypo_travel_sec,
        }[kind]

    def spawn(self, kind: EnemyKind) -> Optional[Enemy]:
        """Spawns one event that lands after its travel time.

        Returns:
            Optional[Enemy]: The spawned event, or None while inactive.
        """
        if not self._is_active():
            return None
        travel = self._travel_time(kind)
        enemy = Enemy(kind, self.scheduler.now, self.scheduler.now + travel)
        self.in_flight.append(enemy)
        self.scheduler.schedule_once(travel, lambda: self._arrive(enemy))
        return enemy

    def _arrive(self, enemy: Enemy) -> None:
        if enemy not in self.in_flight:
            return
        self.in_flight.remove(enemy)
        if not self._is_active():
            return
        apply_arrival(self._patient(), enemy.kind, self.constants)
        self.delivered[enemy.kind] += 1
        if enemy.kind is not EnemyKind.GLUCOSE:
            logger.info(f"{enemy.kind.value} event landed at t={self.scheduler.now:.1f}s")
        if self._on_arrival is not None:
            self._on_arrival(enemy)
