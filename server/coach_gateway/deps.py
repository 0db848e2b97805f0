"""FastAPI dependencies resolving the shared application state."""

from __future__ import annotations

from fastapi import Request

from .app_state import AppState


async def get_app_state(request: Request) -> AppState:
    return request.app.state.coach
