"""Health metric and readiness models matching the dashboard's JSON shapes."""

from __future__ import annotations

from pydantic import BaseModel


class HealthMetrics(BaseModel):
    date: str
    sleepScore: int
    hrvStatus: str
    restingHeartRate: int
    bodyBatteryCharged: int = 0
    bodyBatteryDrained: int = 0


class Readiness(BaseModel):
    score: int
    status: str  # "Optimal" | "Good" | "Low"


class HealthSnapshot(BaseModel):
    latestMetrics: HealthMetrics | None = None
    trends: list[HealthMetrics] = []
    readiness: Readiness | None = None
    source: str = "firestore"  # "firestore" | "stub"
    message: str | None = None
