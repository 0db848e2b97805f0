"""Application state: the service objects shared by all requests."""

from __future__ import annotations

import logging
from datetime import timedelta

from .config import GatewayConfig
from .services.coach import CoachService
from .services.gemini_client import GeminiClient
from .services.health_provider import HealthRepository, HealthSnapshotProvider
from .services.job_runner import JobRunner, PlanBackend
from .services.job_store import JobStore
from .services.plan_generator import PlanGenerator

logger = logging.getLogger(__name__)


class AppState:
    """Holds service instances for one gateway process."""

    def __init__(
        self,
        cfg: GatewayConfig,
        store: JobStore | None = None,
        gemini: GeminiClient | None = None,
        backend: PlanBackend | None = None,
        health_repo: HealthRepository | None = None,
    ) -> None:
        self.config = cfg
        self.store = store or JobStore(ttl=timedelta(seconds=cfg.job_ttl_seconds))
        self.gemini = gemini or GeminiClient(
            api_key=cfg.gemini_api_key,
            model=cfg.gemini_model,
            base_url=cfg.gemini_base_url,
            timeout=cfg.gemini_timeout,
        )
        self.runner = JobRunner(self.store, backend or PlanGenerator(self.gemini))
        self.health = HealthSnapshotProvider(health_repo)
        self.coach = CoachService(self.gemini)

    @classmethod
    def from_config(cls, cfg: GatewayConfig) -> AppState:
        """Build production state, connecting Firestore when credentials exist."""
        repo = None
        if cfg.firestore_configured:
            from .services.firestore import FirestoreHealthRepository, get_firestore_client

            client = get_firestore_client(cfg)
            if client is not None:
                repo = FirestoreHealthRepository(client, cfg.user_id)
        if repo is None:
            logger.warning("Firestore unavailable; /api/health-snapshot will serve stub data")
        if not cfg.gemini_configured:
            logger.warning("GEMINI_API_KEY not set; plan generation will be refused")
        return cls(cfg, health_repo=repo)

    async def startup(self) -> None:
        self.store.start_sweeper(self.config.sweep_interval_seconds)

    async def shutdown(self) -> None:
        await self.runner.shutdown()
        await self.store.stop_sweeper()
        await self.gemini.aclose()
