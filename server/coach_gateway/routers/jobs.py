"""Plan-generation job endpoints: start, poll status, list."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..app_state import AppState
from ..deps import get_app_state
from ..errors import ConfigError
from ..models.jobs import JobView
from ..models.plan import PlanContext

router = APIRouter(prefix="/api", tags=["jobs"])

JOB_NOT_FOUND = {"error": True, "message": "Job not found"}


@router.post("/start-generation", status_code=status.HTTP_202_ACCEPTED)
async def start_generation(
    body: PlanContext | None = None,
    state: AppState = Depends(get_app_state),
) -> dict:
    """Start a weekly plan generation job and return its id immediately."""
    if not state.gemini.is_configured:
        raise ConfigError("API key is not configured on the server (GEMINI_API_KEY).")
    job = state.runner.start(body or PlanContext())
    return {"jobId": job.id}


@router.get("/job-status/{job_id}")
async def get_job_status(job_id: str, state: AppState = Depends(get_app_state)) -> JSONResponse:
    """Current job state. 202 while in progress, 200 once terminal; the body status is authoritative."""
    job = state.store.get(job_id)
    if job is None:
        return JSONResponse(status_code=status.HTTP_404_NOT_FOUND, content=JOB_NOT_FOUND)
    code = status.HTTP_200_OK if job.status.is_terminal else status.HTTP_202_ACCEPTED
    return JSONResponse(status_code=code, content=JobView.from_job(job).to_body())


@router.get("/jobs")
async def list_jobs(state: AppState = Depends(get_app_state)) -> dict:
    """List live jobs, newest first."""
    return {"jobs": [JobView.from_job(j).to_body() for j in state.store.list_jobs()]}
