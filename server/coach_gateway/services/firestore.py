"""Firestore access for the per-user health_data collection."""

from __future__ import annotations

import json
import logging

import firebase_admin
from firebase_admin import credentials, firestore
from google.cloud.firestore import Client as FirestoreClient
from google.cloud.firestore import Query

from ..config import GatewayConfig

logger = logging.getLogger(__name__)


def initialize_firebase(cfg: GatewayConfig) -> bool:
    """Initialize the default Firebase app from the configured service account."""
    try:
        firebase_admin.get_app()
        return True
    except ValueError:
        pass

    if cfg.firebase_service_account:
        cred = credentials.Certificate(json.loads(cfg.firebase_service_account))
    elif cfg.firebase_service_account_path:
        cred = credentials.Certificate(cfg.firebase_service_account_path)
    else:
        logger.warning("Firebase service account not set; Firestore disabled")
        return False

    firebase_admin.initialize_app(cred)
    logger.info("Firebase Admin SDK initialized")
    return True


def get_firestore_client(cfg: GatewayConfig) -> FirestoreClient | None:
    """Return a Firestore client, or None when credentials are missing or invalid."""
    try:
        if not initialize_firebase(cfg):
            return None
        return firestore.client()
    except Exception as exc:
        logger.error("Failed to get Firestore client: %s", exc)
        return None


class FirestoreHealthRepository:
    """users/{user_id}/health_data documents keyed by date."""

    def __init__(self, client: FirestoreClient, user_id: str) -> None:
        self._collection = client.collection("users").document(user_id).collection("health_data")

    def recent(self, limit: int) -> list[dict]:
        """Newest first."""
        query = self._collection.order_by("date", direction=Query.DESCENDING).limit(limit)
        return [doc.to_dict() for doc in query.stream()]

    def upsert(self, record: dict) -> None:
        self._collection.document(record["date"]).set(record)
