"""
T2DPharmSim SDK - Debrief
Packages a finished session for the AI preceptor and requests its narrative
"""

from typing import Any, Dict, List, Optional
import logging

import httpx

from .data_types import SessionResult

DEFAULT_DEBRIEF_URL = "http://localhost:3000/api/debrief"

SERVER_ERROR_TEXT = "Medical server error."
EMPTY_RESPONSE_TEXT = "Analysis complete."
CONNECTION_LOST_TEXT = "Connection lost. Reviewing local logs."

GUIDELINE_SOURCE = (
    'ADA/EASD 2022 Consensus Report, "Management of Hyperglycemia in Type 2 '
    'Diabetes, 2022" (Davies MJ, Aroda VR, Collins BS, et al. Diabetes Care '
    "2022;45:2753-2786. DOI: 10.2337/dci22-0034)"
)

# Teaching content per level: guideline summary, optimal path and the
# mistakes the preceptor should look for in the decision log.
LEVEL_CONTEXT: Dict[int, Dict[str, Any]] = {
    1: {
        "title": "Glycemic Basics - New-Onset T2DM",
        "guideline": (
            "Metformin is the preferred first-line agent for most people with "
            "T2DM: high efficacy, minimal hypoglycemia as monotherapy, weight "
            "neutral, low cost. Insulin lowers glucose in a dose-dependent way "
            "but carries significant hypoglycemia risk. Sulfonylureas are "
            "effective but cause glucose-independent insulin secretion and "
            "hypoglycemia. Target HbA1c < 7% for many adults."
        ),
        "optimal_path": (
            "Start Metformin first. Add Insulin only if HbA1c stays "
            "uncontrolled, and de-intensify once HbA1c approaches target."
        ),
        "common_errors": [
            "Starting Insulin before Metformin (skipping first-line therapy)",
            "Running Insulin and Metformin together from diagnosis",
            "Leaving Insulin on once HbA1c approaches target",
        ],
    },
    2: {
        "title": "The Kidney Gate - T2DM + CKD",
        "guideline": (
            "In T2DM with CKD, an SGLT2 inhibitor with proven kidney benefit "
            "should be started for organ protection regardless of HbA1c, if "
            "eGFR >= 20. Glucose lowering is reduced below eGFR 45 but kidney "
            "protection continues. The initial hemodynamic eGFR dip is expected "
            "and is not a reason to stop. Metformin must not be used below "
            "eGFR 30 and needs dose reduction below 45."
        ),
        "optimal_path": (
            "Start Metformin + SGLT2 inhibitor early. Accept the initial eGFR "
            "dip. Stop Metformin if eGFR falls below 30; keep the SGLT2 "
            "inhibitor for kidney protection."
        ),
        "common_errors": [
            "Never activating the SGLT2 inhibitor",
            "Removing the SGLT2 inhibitor after its expected eGFR dip",
            "Keeping Metformin active below eGFR 30",
            "Using Insulin as primary therapy when SGLT2i covers glucose and kidney",
        ],
    },
    3: {
        "title": "Full Pharmacy - Contraindication Traps",
        "guideline": (
            "GLP-1 RA: high efficacy, low hypoglycemia risk, common GI side "
            "effects at initiation. DPP-4 inhibitors: modest efficacy and must "
            "not be combined with GLP-1 RA (same incretin pathway, no additive "
            "benefit). Sulfonylurea + Insulin amplifies hypoglycemia. Metformin "
            "below eGFR 30 risks lactic acidosis. Polypharmacy reduces "
            "adherence."
        ),
        "optimal_path": (
            "Metformin + SGLT2 inhibitor as foundation, add GLP-1 RA for more "
            "HbA1c reduction. Avoid DPP-4i with GLP-1 RA, never combine SU + "
            "Insulin, keep Insulin as last resort and watch eGFR."
        ),
        "common_errors": [
            "GLP-1 RA + DPP-4i together (redundant incretin pathway)",
            "Sulfonylurea + Insulin (doubled hypoglycemia risk)",
            "Keeping Metformin after eGFR < 30",
            "Ignoring the SGLT2 inhibitor in a patient with CKD",
            "Activating too many drugs at once",
        ],
    },
    4: {
        "title": "The Real Patient - Social Determinants of Health",
        "guideline": (
            "Person-centred care must weigh social determinants: cost, access, "
            "language and food security. Suboptimal medication-taking affects "
            "almost half of people with T2DM and worsens with pill burden. "
            "GLP-1 RA is clinically ideal but denied by insurance here. "
            "Sulfonylurea hypoglycemia is amplified by irregular meals. "
            "Adherence collapses above two drugs."
        ),
        "optimal_path": (
            "Metformin + SGLT2 inhibitor (two drugs, affordable, no "
            "hypoglycemia). Avoid sulfonylurea, accept that GLP-1 RA is "
            "unavailable and keep the regimen at two drugs or fewer."
        ),
        "common_errors": [
            "Attempting GLP-1 RA despite the coverage denial",
            "Using Sulfonylurea despite food insecurity (3x hypoglycemia risk)",
            "More than two drugs, driving adherence below 30%",
            "Treating adherence as irrelevant to the outcome",
        ],
    },
}


def _stats(vitals: Dict[str, float]) -> Dict[str, float]:
    return {
        "HbA1c": round(vitals["hba1c"], 1),
        "eGFR": round(vitals["egfr"]),
        "hypoRisk": round(vitals["hypo_risk"]),
    }


def build_debrief_payload(result: SessionResult) -> Dict[str, Any]:
    """Serializes a terminal session snapshot into the debrief request body.

    Args:
        result: Snapshot emitted when the session ended

    Returns:
        Dict[str, Any]: JSON-ready request body
    """
    payload = {
        "level": result.level,
        "win": result.win,
        "outcome": result.outcome.value,
        "elapsedSeconds": round(result.elapsed_seconds, 1),
        "startingStats": _stats(result.starting_vitals),
        "finalStats": _stats(result.final_vitals),
        "activeDrugsAtEnd": list(result.active_drugs),
        "decisionHistory": [entry.to_payload() for entry in result.decision_log],
        "patientProfile": dict(result.patient_profile),
        "hypoEvents": result.hypo_events,
    }
    if result.adherence is not None:
        payload["adherence"] = round(result.adherence)
    return payload


def _format_timeline(decisions: List[Dict[str, Any]]) -> str:
    lines = []
    for i, d in enumerate(decisions, start=1):
        line = (
            f"  {i}. t={d.get('time', '?')}s {d.get('drug', '?')} "
            f"{str(d.get('action', 'on')).upper()}"
            f"{' (forced)' if d.get('forced') else ''} | "
            f"HbA1c: {d.get('HbA1c_at_time')}% | eGFR: {d.get('eGFR_at_time')} | "
            f"HypoRisk: {d.get('hypoRisk_at_time', 'N/A')}"
        )
        if "adherence_at_time" in d:
            line += f" | Adherence: {d['adherence_at_time']}%"
        lines.append(line)
    return "\n".join(lines) or "  (No drugs were activated)"


def build_debrief_prompt(payload: Dict[str, Any]) -> str:
    """
    Builds the preceptor prompt the debrief service sends to its model.

    The prompt pairs the session payload with the level's guideline
    summary, optimal path and common errors, and asks for a short Socratic
    debrief that differs for wins and losses.

    Args:
        payload: Request body from `build_debrief_payload`

    Returns:
        str: Prompt text
    """
    level = payload.get("level", 1)
    ctx = LEVEL_CONTEXT.get(level, LEVEL_CONTEXT[1])
    win = bool(payload.get("win"))
    start = payload.get("startingStats", {})
    final = payload.get("finalStats", {})
    patient = payload.get("patientProfile", {})

    if win:
        result_line = "PATIENT STABILIZED (Win)"
        task = (
            "1. Acknowledge the win and name the drugs and timing that worked.\n"
            "2. Note how the approach aligns with the ADA/EASD 2022 Consensus "
            "Report, citing the relevant section.\n"
            "3. Identify one optimization for next time.\n"
            "4. Ask 2 targeted 'why' questions about the reasoning behind the "
            "successful choices."
        )
        tone = "Warm, encouraging, collegial."
    else:
        result_line = f"PATIENT LOST - {payload.get('outcome', 'unknown')}"
        task = (
            "1. Summarize what happened in one sentence, framed as a critical "
            "decision point.\n"
            "2. Identify the drug-vital interaction that caused the loss, citing "
            "values from the decision log.\n"
            "3. State what the ADA/EASD 2022 Consensus Report recommends instead.\n"
            "4. Describe the better path in 1-2 sentences.\n"
            "5. Ask 2 targeted 'why' questions about the mechanism."
        )
        tone = "Supportive but direct."

    sections = [
        "You are a clinical preceptor debriefing a medical student after a "
        "Type 2 Diabetes management simulation. Be a Socratic coach, not a "
        "grader.",
        f"=== LEVEL: {level} - {ctx['title']} ===",
        "=== PATIENT PROFILE ===\n"
        f"Name: {patient.get('name', 'Unknown')}\n"
        f"History: {patient.get('history', 'T2DM')}\n"
        f"Starting HbA1c: {start.get('HbA1c', '?')}%\n"
        f"Starting eGFR: {start.get('eGFR', '?')}",
        "=== OUTCOME ===\n"
        f"Result: {result_line}\n"
        f"Final HbA1c: {final.get('HbA1c', '?')}%\n"
        f"Final eGFR: {final.get('eGFR', '?')}\n"
        f"Final Hypo Risk: {final.get('hypoRisk', '?')}%"
        + (f"\nFinal Adherence: {payload['adherence']}%" if "adherence" in payload else "")
        + f"\nActive drugs at end: [{', '.join(payload.get('activeDrugsAtEnd', []))}]",
        "=== PLAYER DECISION LOG (chronological) ===\n"
        + _format_timeline(payload.get("decisionHistory", [])),
        f"=== GUIDELINE REFERENCE ===\nSource: {GUIDELINE_SOURCE}\n{ctx['guideline']}",
        f"=== OPTIMAL PATH FOR THIS LEVEL ===\n{ctx['optimal_path']}",
        "=== COMMON ERRORS TO CHECK FOR ===\n"
        + "\n".join(f"{i}. {e}" for i, e in enumerate(ctx["common_errors"], start=1)),
        f"=== YOUR TASK ===\n{task}",
        "=== FORMAT RULES ===\n"
        "Plain text only, no markdown. Under 200 words. "
        f"Tone: {tone} Reference specific drug names and values from the "
        "session. End with the 2 questions labelled \"REFLECTION QUESTIONS:\".",
    ]
    return "\n\n".join(sections)


class DebriefClient:
    """
    Client for the debrief endpoint.

    Sends one JSON POST per finished session and always returns a
    displayable string: the service's `text`, its error `text`, or a fixed
    fallback when the transport fails. No retries.
    """

    def __init__(
        self,
        url: str = DEFAULT_DEBRIEF_URL,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
        async_transport: Optional[httpx.AsyncBaseTransport] = None
    ):
        """
        Initialize the client.

        Args:
            url: Debrief endpoint
            timeout: Request timeout in seconds, None to wait indefinitely
            transport: Optional httpx transport (e.g. for tests)
            async_transport: Optional httpx async transport
        """
        self.url = url
        self.timeout = timeout
        self._transport = transport
        self._async_transport = async_transport
        self.logger = logging.getLogger(__name__)

    def request(self, payload: Dict[str, Any]) -> str:
        """
        Request a debrief narrative.

        Args:
            payload: Request body from `build_debrief_payload`

        Returns:
            str: Narrative or fallback text
        """
        try:
            with httpx.Client(transport=self._transport, timeout=self.timeout) as client:
                response = client.post(self.url, json=payload)
            return self._interpret(response)
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Debrief request to {self.url} failed: {e}")
            return CONNECTION_LOST_TEXT

    async def request_async(self, payload: Dict[str, Any]) -> str:
        """Awaitable variant of `request` for callers running an event loop."""
        try:
            async with httpx.AsyncClient(
                transport=self._async_transport, timeout=self.timeout
            ) as client:
                response = await client.post(self.url, json=payload)
            return self._interpret(response)
        except (httpx.HTTPError, ValueError) as e:
            self.logger.error(f"Debrief request to {self.url} failed: {e}")
            return CONNECTION_LOST_TEXT

    def _interpret(self, response: httpx.Response) -> str:
        data = response.json()
        text = data.get("text") if isinstance(data, dict) else None
        if not response.is_success:
            self.logger.warning(
                f"Debrief service returned HTTP {response.status_code}"
            )
            return text or SERVER_ERROR_TEXT
        return text or EMPTY_RESPONSE_TEXT
