"""Readiness scoring and season detection."""

from __future__ import annotations

import math
from datetime import date

from ..models.health import HealthMetrics, Readiness

_HRV_CONTRIBUTION = {"BALANCED": 25, "UNBALANCED": 10}


def compute_readiness(sleep_score: float, hrv_status: str, resting_heart_rate: float) -> Readiness:
    """Fixed linear readiness formula: half the sleep score plus HRV and RHR bonuses."""
    sleep_contribution = sleep_score * 0.5
    hrv_contribution = _HRV_CONTRIBUTION.get(hrv_status, 0)
    rhr_contribution = 25 if resting_heart_rate < 45 else 10

    # Half-up rounding, not banker's rounding
    score = math.floor(sleep_contribution + hrv_contribution + rhr_contribution + 0.5)
    if score > 75:
        status = "Optimal"
    elif score > 50:
        status = "Good"
    else:
        status = "Low"
    return Readiness(score=score, status=status)


def readiness_for(metrics: HealthMetrics) -> Readiness:
    return compute_readiness(metrics.sleepScore, metrics.hrvStatus, metrics.restingHeartRate)


def season_for(day: date) -> str:
    """April through October is cycling season; the rest of the year is ski season."""
    return "Cycling" if 4 <= day.month <= 10 else "Ski"
