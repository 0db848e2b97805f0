"""AI coach feedback and ride route suggestions."""

from __future__ import annotations

from fastapi import APIRouter, Depends

from ..app_state import AppState
from ..deps import get_app_state
from ..models.plan import FeedbackRequest, RouteRequest

router = APIRouter(prefix="/api", tags=["coach"])


@router.post("/feedback")
async def workout_feedback(body: FeedbackRequest, state: AppState = Depends(get_app_state)) -> dict:
    """Feedback on a logged workout in the context of today's metrics."""
    text = await state.coach.feedback(body.workout, body.result, body.healthData, body.trends)
    return {"feedback": text}


@router.post("/route-suggestion")
async def route_suggestion(body: RouteRequest, state: AppState = Depends(get_app_state)) -> dict:
    """Best matching route for a ride workout."""
    return await state.coach.suggest_route(body.workout)
