"""Liveness, health snapshot and seeding endpoints."""

from __future__ import annotations

from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse

from ..app_state import AppState
from ..deps import get_app_state
from ..services.health_provider import SAMPLE_EXPORTS

router = APIRouter(prefix="/api", tags=["health"])

VERSION = "0.1.0"


@router.get("/health")
async def health_check(state: AppState = Depends(get_app_state)) -> dict:
    """Gateway liveness and collaborator configuration."""
    return {
        "status": "ok" if state.gemini.is_configured else "degraded",
        "version": VERSION,
        "jobs": {"live": len(state.store.list_jobs()), "running": state.runner.active},
        "gemini": state.gemini.is_configured,
        "firestore": state.health.is_configured,
    }


@router.get("/health-snapshot")
async def health_snapshot(state: AppState = Depends(get_app_state)):
    """Latest metrics, recent trends and readiness (stub data when the store is unavailable)."""
    snapshot = await state.health.snapshot()
    if snapshot is None:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"error": True, "message": "No health data found."},
        )
    return snapshot.model_dump(mode="json")


@router.post("/seed-database")
async def seed_database(state: AppState = Depends(get_app_state)):
    """Store the bundled sample exports. Disabled unless COACH_ENABLE_SEED is set."""
    if not state.config.enable_seed:
        return JSONResponse(
            status_code=status.HTTP_403_FORBIDDEN,
            content={"error": True, "message": "Seeding is disabled (set COACH_ENABLE_SEED=1)."},
        )
    seeded = await state.health.seed(SAMPLE_EXPORTS)
    return {"seeded": len(seeded), "dates": seeded}
