"""Shared fixtures and fakes for gateway tests."""

from __future__ import annotations

import asyncio
import json
from contextlib import asynccontextmanager
from datetime import datetime, timedelta, timezone

import httpx
import pytest

from coach_gateway.app import create_app
from coach_gateway.app_state import AppState
from coach_gateway.config import GatewayConfig
from coach_gateway.models.jobs import JobStatus
from coach_gateway.services.gemini_client import GeminiClient
from coach_gateway.services.job_store import JobStore

SAMPLE_WEEK = [
    {"day": "Monday", "title": "Strength WOD", "type": "Gym",
     "workout": {"name": "Posterior Chain Builder", "description": "5x5 deadlift, 3x10 pull-ups"}},
    {"day": "Tuesday", "title": "Group Road Ride", "type": "Ride",
     "workout": {"name": "Classic 2x20", "description": "2x20 at threshold"}},
    {"day": "Wednesday", "title": "Recovery / Light Day", "type": "Recovery",
     "workout": {"name": "Easy Spin", "description": "Zone 1"}},
    {"day": "Thursday", "title": "Structured Ride", "type": "Ride",
     "workout": {"name": "Zone 2 Ride", "description": "Steady Zone 2"}},
    {"day": "Friday", "title": "Conditioning WOD", "type": "Gym",
     "workout": {"name": "Adroit", "description": "Row, wall balls, chest to bar"}},
    {"day": "Saturday", "title": "Long Ride", "type": "Ride",
     "workout": {"name": "Zone 2 Endurance", "description": "Go long and steady."}},
    {"day": "Sunday", "title": "Flex Day", "type": "Free Day",
     "workout": {"name": "Athlete Choice", "description": "Listen to your body."}},
]


def sample_plan_text(fenced: bool = False) -> str:
    text = json.dumps({"week": SAMPLE_WEEK})
    return f"```json\n{text}\n```" if fenced else text


def gemini_body(text: str) -> dict:
    return {"candidates": [{"content": {"parts": [{"text": text}], "role": "model"}}]}


class FakeClock:
    """Wall clock that only moves when told to."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2025, 8, 27, 7, 0, tzinfo=timezone.utc)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class GatedBackend:
    """Plan backend that blocks until released, then returns or raises."""

    def __init__(self, result=None, exc: Exception | None = None) -> None:
        self.result = result if result is not None else {"season": "Cycling", "week": SAMPLE_WEEK}
        self.exc = exc
        self.calls = 0
        self.contexts = []
        self.started = asyncio.Event()
        self.release = asyncio.Event()

    async def generate_plan(self, context):
        self.calls += 1
        self.contexts.append(context)
        self.started.set()
        await self.release.wait()
        if self.exc is not None:
            raise self.exc
        return self.result


class InMemoryHealthRepo:
    def __init__(self, records: list[dict] | None = None, fail: bool = False) -> None:
        self.records = {r["date"]: r for r in records or []}
        self.fail = fail

    def recent(self, limit: int) -> list[dict]:
        if self.fail:
            raise RuntimeError("firestore unavailable")
        ordered = sorted(self.records.values(), key=lambda r: r["date"], reverse=True)
        return ordered[:limit]

    def upsert(self, record: dict) -> None:
        self.records[record["date"]] = record


def mock_gemini(handler=None, api_key: str | None = "test-key") -> GeminiClient:
    """GeminiClient whose HTTP calls go to ``handler``."""

    def default_handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(200, json=gemini_body(sample_plan_text()))

    return GeminiClient(
        api_key=api_key,
        model="gemini-test",
        base_url="https://gemini.test/v1beta",
        transport=httpx.MockTransport(handler or default_handler),
    )


@pytest.fixture
def gateway_config(monkeypatch) -> GatewayConfig:
    for name in ("GEMINI_API_KEY", "FIREBASE_SERVICE_ACCOUNT", "FIREBASE_SERVICE_ACCOUNT_PATH", "COACH_ENABLE_SEED"):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setenv("GEMINI_API_KEY", "test-key")
    return GatewayConfig()


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store(clock) -> JobStore:
    return JobStore(ttl=timedelta(seconds=600), clock=clock)


def make_state(cfg: GatewayConfig, **overrides) -> AppState:
    overrides.setdefault("gemini", mock_gemini())
    return AppState(cfg, **overrides)


@asynccontextmanager
async def gateway_client(state: AppState):
    """In-process HTTP client bound to an app built around ``state``."""
    app = create_app(state)
    async with httpx.AsyncClient(transport=httpx.ASGITransport(app=app), base_url="http://test") as client:
        yield client


async def wait_for_status(store: JobStore, job_id: str, status: JobStatus, timeout: float = 2.0) -> None:
    async def _poll() -> None:
        while True:
            job = store.get(job_id)
            if job is not None and job.status == status:
                return
            await asyncio.sleep(0.005)

    await asyncio.wait_for(_poll(), timeout)
