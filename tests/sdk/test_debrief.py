# Tests for T2DPharmSim.sdk.debrief

import asyncio
import json

import httpx
import pytest

from T2DPharmSim.sdk.data_types import (
    DecisionLogEntry, OutcomeKind, SessionResult, ToggleAction
)
from T2DPharmSim.sdk.debrief import (
    CONNECTION_LOST_TEXT, EMPTY_RESPONSE_TEXT, LEVEL_CONTEXT, SERVER_ERROR_TEXT,
    DebriefClient, build_debrief_payload, build_debrief_prompt,
)

URL = "http://debrief.test/api/debrief"


@pytest.fixture
def level4_loss():
    return SessionResult(
        level=4,
        outcome=OutcomeKind.HYPOGLYCEMIC_COMA,
        elapsed_seconds=31.27,
        starting_vitals={"hba1c": 8.9, "egfr": 60.0, "hypo_risk": 5.0, "adherence": 100.0},
        final_vitals={"hba1c": 7.42, "egfr": 58.4, "hypo_risk": 100.0, "adherence": 61.0},
        active_drugs=["Metformin", "Sulfonylurea"],
        decision_log=[
            DecisionLogEntry(0.0, "metformin", "Metformin", ToggleAction.ON,
                             8.9, 60.0, 5.0, adherence=100.0),
            DecisionLogEntry(4.5, "sulfonylurea", "Sulfonylurea", ToggleAction.ON,
                             9.1, 59.7, 5.0, adherence=100.0),
        ],
        patient_profile={"name": "Amina Haddad", "history": "T2DM", "weight": 79.0},
        hypo_events=4,
        adherence=61.0,
    )


def test_build_debrief_payload(level4_loss):
    payload = build_debrief_payload(level4_loss)
    assert payload["level"] == 4
    assert payload["win"] is False
    assert payload["outcome"] == "Hypoglycemic coma"
    assert payload["elapsedSeconds"] == 31.3
    assert payload["startingStats"] == {"HbA1c": 8.9, "eGFR": 60, "hypoRisk": 5}
    assert payload["finalStats"] == {"HbA1c": 7.4, "eGFR": 58, "hypoRisk": 100}
    assert payload["activeDrugsAtEnd"] == ["Metformin", "Sulfonylurea"]
    assert payload["adherence"] == 61
    assert payload["patientProfile"]["name"] == "Amina Haddad"
    assert [d["drugId"] for d in payload["decisionHistory"]] == ["metformin", "sulfonylurea"]
    assert payload["decisionHistory"][1]["adherence_at_time"] == 100
    json.dumps(payload)


def test_build_debrief_prompt_for_loss(level4_loss):
    prompt = build_debrief_prompt(build_debrief_payload(level4_loss))
    assert LEVEL_CONTEXT[4]["title"] in prompt
    assert "PATIENT LOST" in prompt
    assert "Amina Haddad" in prompt
    assert "t=4.5s Sulfonylurea ON" in prompt
    assert "Final Adherence: 61%" in prompt
    assert "REFLECTION QUESTIONS" in prompt
    for error in LEVEL_CONTEXT[4]["common_errors"]:
        assert error in prompt


def test_build_debrief_prompt_for_win_without_decisions():
    prompt = build_debrief_prompt({"level": 1, "win": True, "decisionHistory": []})
    assert "PATIENT STABILIZED" in prompt
    assert "(No drugs were activated)" in prompt
    assert LEVEL_CONTEXT[1]["optimal_path"] in prompt


def make_client(handler):
    transport = httpx.MockTransport(handler)
    return DebriefClient(URL, transport=transport, async_transport=transport)


def test_request_returns_service_text(level4_loss):
    seen = {}

    def handler(request):
        seen["method"] = request.method
        seen["url"] = str(request.url)
        seen["body"] = json.loads(request.content)
        return httpx.Response(200, json={"text": "Let us review the sulfonylurea."})

    payload = build_debrief_payload(level4_loss)
    assert make_client(handler).request(payload) == "Let us review the sulfonylurea."
    assert seen["method"] == "POST"
    assert seen["url"] == URL
    assert seen["body"] == payload


def test_request_fallbacks(level4_loss):
    payload = build_debrief_payload(level4_loss)

    empty = make_client(lambda request: httpx.Response(200, json={}))
    assert empty.request(payload) == EMPTY_RESPONSE_TEXT

    error_with_text = make_client(
        lambda request: httpx.Response(500, json={"text": "Model quota exceeded."})
    )
    assert error_with_text.request(payload) == "Model quota exceeded."

    error_without_text = make_client(lambda request: httpx.Response(502, json={}))
    assert error_without_text.request(payload) == SERVER_ERROR_TEXT


def test_request_transport_failure(level4_loss):
    def handler(request):
        raise httpx.ConnectError("connection refused", request=request)

    client = make_client(handler)
    assert client.request(build_debrief_payload(level4_loss)) == CONNECTION_LOST_TEXT


def test_request_non_json_body(level4_loss):
    client = make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))
    assert client.request(build_debrief_payload(level4_loss)) == CONNECTION_LOST_TEXT


def test_request_async(level4_loss):
    client = make_client(lambda request: httpx.Response(200, json={"text": "Async debrief."}))
    payload = build_debrief_payload(level4_loss)
    assert asyncio.run(client.request_async(payload)) == "Async debrief."

    def failing(request):
        raise httpx.ConnectError("down", request=request)

    assert asyncio.run(make_client(failing).request_async(payload)) == CONNECTION_LOST_TEXT
