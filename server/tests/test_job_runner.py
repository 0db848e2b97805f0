"""Tests for detached plan-generation jobs."""

from __future__ import annotations

import asyncio

import pytest

from coach_gateway.errors import ConfigError, ParseError
from coach_gateway.models.jobs import JobStatus
from coach_gateway.models.plan import PlanContext
from coach_gateway.services.job_runner import JobRunner

from conftest import GatedBackend, wait_for_status


@pytest.mark.asyncio
async def test_start_returns_pending_job_without_waiting(store):
    backend = GatedBackend()
    runner = JobRunner(store, backend)

    job = runner.start(PlanContext())

    # Nothing has yielded to the loop yet
    assert job.status == JobStatus.PENDING
    assert store.get(job.id).status == JobStatus.PENDING
    assert backend.calls == 0
    await runner.shutdown()


@pytest.mark.asyncio
async def test_runs_to_completed_with_result(store):
    backend = GatedBackend()
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext(season="Cycling"))

    await backend.started.wait()
    assert store.get(job.id).status == JobStatus.RUNNING

    backend.release.set()
    await wait_for_status(store, job.id, JobStatus.COMPLETED)

    done = store.get(job.id)
    assert done.result["week"][0]["day"] == "Monday"
    assert done.error is None
    assert backend.calls == 1
    assert backend.contexts[0].season == "Cycling"


@pytest.mark.asyncio
async def test_exception_becomes_failed_transition(store):
    backend = GatedBackend(exc=RuntimeError("Gemini quota exhausted"))
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())
    backend.release.set()

    await wait_for_status(store, job.id, JobStatus.FAILED)
    failed = store.get(job.id)
    assert failed.error.message == "Gemini quota exhausted"
    assert failed.error.kind == "internal"
    assert "RuntimeError" in failed.error.diagnostic
    assert failed.result is None
    assert runner.active == 0


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "exc, kind",
    [
        (ConfigError("API key is not configured"), "config"),
        (ParseError("not json", raw_text="Sure! Here is your plan"), "parse"),
    ],
)
async def test_coach_errors_keep_their_kind(store, exc, kind):
    backend = GatedBackend(exc=exc)
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())
    backend.release.set()

    await wait_for_status(store, job.id, JobStatus.FAILED)
    assert store.get(job.id).error.kind == kind


@pytest.mark.asyncio
async def test_parse_failure_preserves_raw_text(store):
    backend = GatedBackend(exc=ParseError("not json", raw_text="Sure! Here is your plan"))
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())
    backend.release.set()

    await wait_for_status(store, job.id, JobStatus.FAILED)
    assert store.get(job.id).error.diagnostic == "Sure! Here is your plan"


@pytest.mark.asyncio
async def test_backend_returning_nothing_fails_the_job(store):
    backend = GatedBackend()
    backend.result = None
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())
    backend.release.set()

    await wait_for_status(store, job.id, JobStatus.FAILED)
    assert store.get(job.id).error.message == "Job completed without a result"


@pytest.mark.asyncio
async def test_shutdown_marks_running_jobs_failed(store):
    backend = GatedBackend()
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())
    await backend.started.wait()

    await runner.shutdown()

    cancelled = store.get(job.id)
    assert cancelled.status == JobStatus.FAILED
    assert cancelled.error.kind == "cancelled"
    assert runner.active == 0


@pytest.mark.asyncio
async def test_job_swept_mid_run_finishes_quietly(store, clock):
    backend = GatedBackend()
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())
    await backend.started.wait()

    clock.advance(601)
    assert store.sweep() == 1
    backend.release.set()

    for _ in range(50):
        if runner.active == 0:
            break
        await asyncio.sleep(0.005)
    assert runner.active == 0
    assert store.get(job.id) is None


@pytest.mark.asyncio
async def test_shutdown_before_task_starts_fails_the_job(store):
    backend = GatedBackend()
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())

    await runner.shutdown()

    cancelled = store.get(job.id)
    assert cancelled.status == JobStatus.FAILED
    assert cancelled.error.kind == "cancelled"
    assert backend.calls == 0
    assert runner.active == 0


@pytest.mark.asyncio
async def test_shutdown_leaves_finished_jobs_alone(store):
    backend = GatedBackend()
    runner = JobRunner(store, backend)
    job = runner.start(PlanContext())
    backend.release.set()
    await wait_for_status(store, job.id, JobStatus.COMPLETED)

    await runner.shutdown()

    assert store.get(job.id).status == JobStatus.COMPLETED
