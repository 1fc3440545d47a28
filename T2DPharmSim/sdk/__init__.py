"""
T2DPharmSim SDK - Results and Debrief

Records a finished session exposes to its callers, and the client that
sends them to the AI preceptor debrief service.

Quick Start:
    from T2DPharmSim import SimulationEngine
    from T2DPharmSim.sdk import DebriefClient

    engine = SimulationEngine(level=2, seed=1)
    ...
    client = DebriefClient("http://localhost:3000/api/debrief")
    print(client.request(engine.build_debrief_payload()))
"""

from .debrief import (
    DebriefClient,
    LEVEL_CONTEXT,
    build_debrief_payload,
    build_debrief_prompt,
)
from .data_types import (
    Advisory,
    AdvisoryLevel,
    DecisionLogEntry,
    EnemyKind,
    OutcomeKind,
    SessionResult,
    ToggleAction,
    ToggleResult,
)
