"""Job runner: executes plan generation detached from the HTTP request."""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from pydantic import BaseModel

from ..models.jobs import Job, JobError, JobStatus
from ..models.plan import PlanContext
from .job_store import JobStore

logger = logging.getLogger(__name__)


class PlanBackend(Protocol):
    async def generate_plan(self, context: PlanContext) -> Any: ...


class JobRunner:
    """Starts one background generation per job and reports back through the store."""

    def __init__(self, store: JobStore, backend: PlanBackend) -> None:
        self.store = store
        self.backend = backend
        # Strong references so the loop does not drop running tasks
        self._tasks: dict[asyncio.Task, str] = {}

    def start(self, context: PlanContext) -> Job:
        """Create a job and schedule its generation. Returns without waiting."""
        job = self.store.create()
        task = asyncio.get_running_loop().create_task(self._execute(job.id, context), name=f"plan-job-{job.id}")
        self._tasks[task] = job.id
        task.add_done_callback(self._forget)
        return job

    @property
    def active(self) -> int:
        return len(self._tasks)

    async def shutdown(self) -> None:
        """Cancel outstanding generations (recorded as failed) and wait for them."""
        owned = dict(self._tasks)
        for task in owned:
            task.cancel()
        if not owned:
            return
        await asyncio.gather(*owned, return_exceptions=True)
        # A task cancelled before its first step never ran its handler
        for job_id in owned.values():
            self.store.transition(job_id, JobStatus.FAILED, _cancelled_error())
        logger.info("Cancelled %d running job(s)", len(owned))

    # ── Internal ──────────────────────────────────────────────────────────

    def _forget(self, task: asyncio.Task) -> None:
        self._tasks.pop(task, None)

    async def _execute(self, job_id: str, context: PlanContext) -> None:
        self.store.transition(job_id, JobStatus.RUNNING)
        try:
            plan = await self.backend.generate_plan(context)
            result = plan.model_dump(mode="json") if isinstance(plan, BaseModel) else plan
        except asyncio.CancelledError:
            self.store.transition(job_id, JobStatus.FAILED, _cancelled_error())
            raise
        except Exception as exc:
            error = JobError.from_exception(exc)
            logger.warning("Job %s failed (%s): %s", job_id, error.kind, error.message)
            self.store.transition(job_id, JobStatus.FAILED, error)
            return

        self.store.transition(job_id, JobStatus.COMPLETED, result)


def _cancelled_error() -> JobError:
    return JobError(message="Job cancelled before completion", kind="cancelled")
