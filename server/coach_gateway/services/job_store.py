"""In-memory job store: lifecycle, forward-only transitions and TTL expiry.

All access happens on one event loop, so the mapping needs no lock. The sweep
and a late transition may interleave; whichever runs second finds the entry
gone and does nothing.
"""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Any, Callable

from ..models.jobs import Job, JobError, JobStatus

logger = logging.getLogger(__name__)

_ALLOWED_EDGES: dict[JobStatus, frozenset[JobStatus]] = {
    JobStatus.PENDING: frozenset({JobStatus.RUNNING, JobStatus.COMPLETED, JobStatus.FAILED}),
    JobStatus.RUNNING: frozenset({JobStatus.COMPLETED, JobStatus.FAILED}),
}


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class JobStore:
    """Owns every Job record. Callers only ever receive copies."""

    def __init__(
        self,
        ttl: timedelta = timedelta(hours=1),
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.ttl = ttl
        self._clock = clock
        self._jobs: dict[str, Job] = {}
        self._sweeper_task: asyncio.Task | None = None

    def create(self) -> Job:
        now = self._clock()
        job = Job(id=uuid.uuid4().hex, created_at=now, updated_at=now, ttl=self.ttl)
        self._jobs[job.id] = job
        logger.info("Job %s created", job.id)
        return job.model_copy(deep=True)

    def get(self, job_id: str) -> Job | None:
        job = self._live(job_id)
        return job.model_copy(deep=True) if job else None

    def list_jobs(self) -> list[Job]:
        now = self._clock()
        live = [j for j in self._jobs.values() if not j.is_expired(now)]
        return [j.model_copy(deep=True) for j in sorted(live, key=lambda j: j.created_at, reverse=True)]

    def transition(self, job_id: str, new_status: JobStatus | str, payload: Any = None) -> Job | None:
        """Move a job forward. Returns the updated job, or None if it no longer exists."""
        job = self._live(job_id)
        if job is None:
            logger.debug("Transition of unknown job %s to %s ignored", job_id, new_status)
            return None

        if job.status.is_terminal:
            logger.debug("Job %s already %s; transition to %s ignored", job_id, job.status.value, new_status)
            return job.model_copy(deep=True)

        try:
            target = JobStatus(new_status)
        except ValueError:
            logger.warning("Job %s: invalid target status %r recorded as failure", job_id, new_status)
            target = JobStatus.FAILED
            payload = JobError(
                message="Job received an invalid status update",
                kind="invalid_status",
                diagnostic=f"invalid status value: {new_status!r}",
            )

        if target not in _ALLOWED_EDGES.get(job.status, frozenset()):
            logger.warning("Job %s: illegal transition %s -> %s ignored", job_id, job.status.value, target.value)
            return job.model_copy(deep=True)

        if target == JobStatus.COMPLETED and payload is None:
            target = JobStatus.FAILED
            payload = JobError(message="Job completed without a result", kind="internal")

        job.status = target
        job.updated_at = self._clock()
        if target == JobStatus.COMPLETED:
            job.result = payload if isinstance(payload, dict) else {"content": payload}
            job.error = None
        elif target == JobStatus.FAILED:
            job.error = _coerce_error(payload)
            job.result = None

        logger.info("Job %s -> %s", job_id, target.value)
        return job.model_copy(deep=True)

    def sweep(self) -> int:
        """Remove every job older than its TTL, whatever its status."""
        now = self._clock()
        expired = [job_id for job_id, job in self._jobs.items() if job.is_expired(now)]
        for job_id in expired:
            del self._jobs[job_id]
        if expired:
            logger.info("Swept %d expired job(s)", len(expired))
        return len(expired)

    def __len__(self) -> int:
        """Stored entries, including expired ones not yet swept."""
        return len(self._jobs)

    # ── Background sweep ──────────────────────────────────────────────────

    def start_sweeper(self, interval: float) -> None:
        if self._sweeper_task is None or self._sweeper_task.done():
            self._sweeper_task = asyncio.create_task(self._sweep_loop(interval))
            logger.info("Job sweeper started (every %ss)", interval)

    async def stop_sweeper(self) -> None:
        if self._sweeper_task and not self._sweeper_task.done():
            self._sweeper_task.cancel()
            try:
                await self._sweeper_task
            except asyncio.CancelledError:
                pass
            logger.info("Job sweeper stopped")
        self._sweeper_task = None

    async def _sweep_loop(self, interval: float) -> None:
        while True:
            await asyncio.sleep(interval)
            try:
                self.sweep()
            except Exception as exc:
                logger.error("Sweep error: %s", exc)

    # ── Internal ──────────────────────────────────────────────────────────

    def _live(self, job_id: str) -> Job | None:
        job = self._jobs.get(job_id)
        if job is None:
            return None
        if job.is_expired(self._clock()):
            # Expired entries are indistinguishable from missing ones
            del self._jobs[job_id]
            return None
        return job


def _coerce_error(payload: Any) -> JobError:
    if isinstance(payload, JobError):
        return payload
    if isinstance(payload, BaseException):
        return JobError.from_exception(payload)
    if isinstance(payload, dict) and payload.get("message"):
        diagnostic = payload.get("diagnostic")
        return JobError(
            message=str(payload["message"]),
            kind=str(payload.get("kind") or "internal"),
            diagnostic=str(diagnostic) if diagnostic is not None else None,
        )
    if isinstance(payload, str) and payload:
        return JobError(message=payload)
    return JobError(message="Job failed", kind="internal")
