"""FastAPI application for the Coach Gateway."""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .app_state import AppState
from .config import config
from .errors import CoachError

logging.basicConfig(level=logging.INFO, format="%(asctime)s [%(name)s] %(levelname)s: %(message)s")
logger = logging.getLogger(__name__)


async def coach_error_handler(request: Request, exc: CoachError) -> JSONResponse:
    logger.warning("%s %s failed (%s): %s", request.method, request.url.path, exc.kind, exc.message)
    return JSONResponse(status_code=exc.http_status, content=exc.to_dict())


def create_app(state: AppState | None = None) -> FastAPI:
    """Build the app. Without an explicit state, production state is built at startup."""

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "coach", None) is None:
            app.state.coach = AppState.from_config(config)
        coach: AppState = app.state.coach
        logger.info("Coach Gateway starting on %s:%d", config.host, config.port)
        await coach.startup()

        yield

        await coach.shutdown()
        logger.info("Coach Gateway stopped")

    app = FastAPI(
        title="Uphill Coach Gateway",
        description="Health snapshot and AI training-plan API for the coach dashboard",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.coach = state

    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(CoachError, coach_error_handler)

    from .routers.coach import router as coach_router
    from .routers.health import router as health_router
    from .routers.jobs import router as jobs_router

    app.include_router(health_router)
    app.include_router(jobs_router)
    app.include_router(coach_router)
    return app


app = create_app()
