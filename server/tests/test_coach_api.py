"""Tests for workout feedback and route suggestions."""

from __future__ import annotations

import json

import httpx
import pytest

from conftest import gateway_client, gemini_body, make_state, mock_gemini

ZONE2 = {"name": "Zone 2 Ride", "description": "Steady Zone 2"}


def _replying(text: str, seen: list | None = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(json.loads(request.content))
        return httpx.Response(200, json=gemini_body(text))

    return handler


@pytest.mark.asyncio
async def test_feedback_includes_metrics_and_trend_in_prompt(gateway_config):
    seen = []
    state = make_state(gateway_config, gemini=mock_gemini(_replying("  Great work today.  ", seen)))
    metrics = {"date": "2025-08-27", "sleepScore": 88, "hrvStatus": "BALANCED", "restingHeartRate": 39}

    async with gateway_client(state) as client:
        response = await client.post(
            "/api/feedback",
            json={
                "workout": ZONE2,
                "result": "90 minutes, felt easy",
                "healthData": metrics,
                "trends": [dict(metrics, date="2025-08-26", sleepScore=75), metrics],
            },
        )

    assert response.status_code == 200
    assert response.json() == {"feedback": "Great work today."}
    prompt = seen[0]["contents"][0]["parts"][0]["text"]
    assert '"Zone 2 Ride"' in prompt
    assert "Sleep: 88" in prompt
    assert "improving" in prompt
    assert "Coach AI" in seen[0]["systemInstruction"]["parts"][0]["text"]


@pytest.mark.asyncio
async def test_feedback_upstream_failure_is_502(gateway_config):
    state = make_state(gateway_config, gemini=mock_gemini(lambda request: httpx.Response(500, text="boom")))

    async with gateway_client(state) as client:
        response = await client.post("/api/feedback", json={"workout": ZONE2, "result": "done"})

    assert response.status_code == 502
    assert response.json() == {"error": True, "kind": "upstream", "message": "Gemini API request failed: 500 boom"}


@pytest.mark.asyncio
async def test_feedback_without_key_is_503(gateway_config):
    state = make_state(gateway_config, gemini=mock_gemini(api_key=None))

    async with gateway_client(state) as client:
        response = await client.post("/api/feedback", json={"workout": ZONE2, "result": "done"})

    assert response.status_code == 503
    assert response.json()["kind"] == "config"


@pytest.mark.asyncio
async def test_route_suggestion_returns_known_route(gateway_config):
    reply = json.dumps({"routeId": 2, "justification": "Sustained climb suits threshold work."})
    state = make_state(gateway_config, gemini=mock_gemini(_replying(reply)))

    async with gateway_client(state) as client:
        response = await client.post("/api/route-suggestion", json={"workout": ZONE2})

    body = response.json()
    assert response.status_code == 200
    assert body["route"]["name"] == "Lookout Mountain Climb"
    assert body["justification"] == "Sustained climb suits threshold work."


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "handler",
    [
        _replying(json.dumps({"routeId": 99, "justification": "Imaginary route."})),
        _replying("The river path, definitely."),
        lambda request: httpx.Response(503, text="unavailable"),
    ],
)
async def test_route_suggestion_falls_back(gateway_config, handler):
    state = make_state(gateway_config, gemini=mock_gemini(handler))

    async with gateway_client(state) as client:
        response = await client.post("/api/route-suggestion", json={"workout": ZONE2})

    assert response.status_code == 200
    assert response.json() == {"route": None, "justification": "Could not generate a route suggestion."}
