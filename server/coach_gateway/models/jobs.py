"""Plan-generation job models."""

from __future__ import annotations

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, Field

from ..errors import CoachError


class JobStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        return self in (JobStatus.COMPLETED, JobStatus.FAILED)


class JobError(BaseModel):
    message: str
    kind: str = "internal"
    diagnostic: str | None = None

    @classmethod
    def from_exception(cls, exc: BaseException) -> JobError:
        """Normalize any exception into an error descriptor."""
        if isinstance(exc, CoachError):
            return cls(message=exc.message, kind=exc.kind, diagnostic=exc.diagnostic)
        message = str(exc) or type(exc).__name__
        return cls(message=message, kind="internal", diagnostic=f"{type(exc).__name__}: {exc!r}")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class Job(BaseModel):
    id: str
    status: JobStatus = JobStatus.PENDING
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)
    result: dict[str, Any] | None = None
    error: JobError | None = None
    ttl: timedelta = timedelta(hours=1)

    def is_expired(self, now: datetime) -> bool:
        return now - self.created_at > self.ttl


class JobView(BaseModel):
    """Serialized job as returned by the status endpoint."""

    jobId: str
    status: JobStatus
    createdAt: str
    updatedAt: str
    result: dict[str, Any] | None = None
    error: JobError | None = None

    @classmethod
    def from_job(cls, job: Job) -> JobView:
        return cls(
            jobId=job.id,
            status=job.status,
            createdAt=job.created_at.isoformat(),
            updatedAt=job.updated_at.isoformat(),
            result=job.result if job.status == JobStatus.COMPLETED else None,
            error=job.error if job.status == JobStatus.FAILED else None,
        )

    def to_body(self) -> dict:
        # result/error keys only appear in their terminal state
        return self.model_dump(mode="json", exclude_none=True)
