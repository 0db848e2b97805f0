"""Health snapshot provider: latest metrics, recent trends and readiness.

Reads go through a repository (Firestore in production). A missing or failing
store degrades to a stub snapshot instead of an error.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Protocol

from pydantic import ValidationError

from ..errors import ConfigError, ParseError
from ..models.health import HealthMetrics, HealthSnapshot
from .readiness import readiness_for

logger = logging.getLogger(__name__)

TREND_WINDOW = 4


class HealthRepository(Protocol):
    def recent(self, limit: int) -> list[dict]: ...

    def upsert(self, record: dict) -> None: ...


class HealthSnapshotProvider:
    def __init__(self, repo: HealthRepository | None) -> None:
        self.repo = repo

    @property
    def is_configured(self) -> bool:
        return self.repo is not None

    async def snapshot(self) -> HealthSnapshot | None:
        """Return the current snapshot, a stub when the store is unusable, or None when it is empty."""
        if self.repo is None:
            return stub_snapshot("Health data store is not configured.")

        loop = asyncio.get_running_loop()
        try:
            docs = await loop.run_in_executor(None, self.repo.recent, TREND_WINDOW)
        except Exception as exc:
            logger.error("Error fetching health data: %s", exc)
            return stub_snapshot("Health data is temporarily unavailable.")

        records: list[HealthMetrics] = []
        for doc in docs:
            try:
                records.append(HealthMetrics.model_validate(doc))
            except ValidationError as exc:
                logger.warning("Skipping malformed health record %s: %s", doc.get("date") if isinstance(doc, dict) else doc, exc)
        if not records:
            return None

        latest = records[0]
        return HealthSnapshot(
            latestMetrics=latest,
            trends=list(reversed(records)),
            readiness=readiness_for(latest),
        )

    async def seed(self, exports: dict[str, dict]) -> list[str]:
        """Normalize and store raw device exports. Returns the seeded dates."""
        if self.repo is None:
            raise ConfigError("Health data store is not configured (FIREBASE_SERVICE_ACCOUNT).")

        loop = asyncio.get_running_loop()
        seeded = []
        for file_name, raw in exports.items():
            metrics = normalize_garmin_export(raw)
            await loop.run_in_executor(None, self.repo.upsert, metrics.model_dump())
            logger.info("Seeded health data for %s from %s", metrics.date, file_name)
            seeded.append(metrics.date)
        return seeded


def stub_snapshot(message: str) -> HealthSnapshot:
    return HealthSnapshot(source="stub", message=message)


def normalize_garmin_export(raw: dict[str, Any]) -> HealthMetrics:
    """Flatten a Garmin daily export into HealthMetrics.

    Sleep, HRV and resting heart rate are required; body battery defaults to 0
    when the second reading is missing.
    """
    data = raw.get("metrics", raw)
    try:
        battery = data.get("body_battery") or []
        reading = battery[1] if len(battery) > 1 and isinstance(battery[1], dict) else {}
        return HealthMetrics(
            date=data["date"],
            sleepScore=data["sleep"]["dailySleepDTO"]["sleepScores"]["overall"]["value"],
            hrvStatus=data["hrv"]["hrvSummary"]["status"],
            restingHeartRate=data["resting_hr"]["allMetrics"]["metricsMap"]["WELLNESS_RESTING_HEART_RATE"][0]["value"],
            bodyBatteryCharged=reading.get("charged") or 0,
            bodyBatteryDrained=reading.get("drained") or 0,
        )
    except (KeyError, IndexError, TypeError, AttributeError, ValidationError) as exc:
        raise ParseError(f"Malformed health export: {type(exc).__name__}: {exc}") from exc


def _export(day: str, sleep: int, hrv: str, rhr: int, charged: int, drained: int) -> dict:
    return {
        "metrics": {
            "date": day,
            "sleep": {"dailySleepDTO": {"sleepScores": {"overall": {"value": sleep}}}},
            "hrv": {"hrvSummary": {"status": hrv}},
            "resting_hr": {"allMetrics": {"metricsMap": {"WELLNESS_RESTING_HEART_RATE": [{"value": rhr}]}}},
            "body_battery": [{}, {"charged": charged, "drained": drained}],
        }
    }


SAMPLE_EXPORTS: dict[str, dict] = {
    "2025-08-26_AM.json": _export("2025-08-26", 75, "BALANCED", 41, 51, 67),
    "2025-08-27_AM.json": _export("2025-08-27", 88, "BALANCED", 39, 60, 55),
    "2025-08-28_PM.json": _export("2025-08-28", 93, "UNBALANCED", 37, 40, 63),
}
