"""Environment-based configuration for the Coach Gateway."""

from __future__ import annotations

import os

DEFAULT_GEMINI_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"


def _env_flag(name: str, default: str = "0") -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class GatewayConfig:
    """Gateway configuration loaded from environment variables."""

    def __init__(self) -> None:
        self.host = os.environ.get("COACH_GATEWAY_HOST", "0.0.0.0")
        self.port = int(os.environ.get("PORT", "3001"))

        # Upstream generation service
        self.gemini_api_key = os.environ.get("GEMINI_API_KEY") or None
        self.gemini_model = os.environ.get("GEMINI_MODEL", "gemini-2.5-flash")
        self.gemini_base_url = os.environ.get("GEMINI_BASE_URL", DEFAULT_GEMINI_BASE_URL).rstrip("/")
        self.gemini_timeout = float(os.environ.get("GEMINI_TIMEOUT_SECONDS", "90"))

        # Firestore credentials: inline JSON wins over a file path
        self.firebase_service_account = os.environ.get("FIREBASE_SERVICE_ACCOUNT") or None
        self.firebase_service_account_path = os.environ.get("FIREBASE_SERVICE_ACCOUNT_PATH") or None
        self.user_id = os.environ.get("COACH_USER_ID", "default-user")

        # Job lifecycle
        self.job_ttl_seconds = float(os.environ.get("COACH_JOB_TTL_SECONDS", "3600"))
        self.sweep_interval_seconds = float(os.environ.get("COACH_SWEEP_INTERVAL_SECONDS", "60"))

        self.enable_seed = _env_flag("COACH_ENABLE_SEED")

        # CORS origins (comma-separated)
        origins = os.environ.get("COACH_CORS_ORIGINS", "")
        self.cors_origins: list[str] = [o.strip() for o in origins.split(",") if o.strip()] if origins else ["*"]

    @property
    def gemini_configured(self) -> bool:
        return bool(self.gemini_api_key)

    @property
    def firestore_configured(self) -> bool:
        return bool(self.firebase_service_account or self.firebase_service_account_path)


# Singleton
config = GatewayConfig()
