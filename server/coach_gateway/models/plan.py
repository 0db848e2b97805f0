"""Weekly plan models and the start-generation request body."""

from __future__ import annotations

from pydantic import BaseModel, field_validator, model_validator

from .health import HealthMetrics, Readiness

WEEKDAYS = ("Monday", "Tuesday", "Wednesday", "Thursday", "Friday", "Saturday", "Sunday")
SEASONS = ("Cycling", "Ski")
DEFAULT_WEEKLY_SCHEDULE = "High-intensity ride on Tuesday, long ride on Saturday."


class Workout(BaseModel):
    name: str
    description: str = ""


class PlanDay(BaseModel):
    day: str
    title: str
    type: str  # "Ride" | "Gym" | "Recovery" | "Ski" | "Free Day"
    workout: Workout
    notes: str | None = None
    mobility: list[str] = []

    @field_validator("day")
    @classmethod
    def _known_weekday(cls, value: str) -> str:
        day = value.strip().capitalize()
        if day not in WEEKDAYS:
            raise ValueError(f"unknown weekday {value!r}")
        return day


class WeeklyPlan(BaseModel):
    season: str
    week: list[PlanDay]
    modificationNote: str | None = None

    @model_validator(mode="after")
    def _full_week(self) -> WeeklyPlan:
        days = [d.day for d in self.week]
        if sorted(days, key=WEEKDAYS.index) != list(WEEKDAYS):
            raise ValueError(f"plan must cover each weekday exactly once, got {days}")
        # Keep Monday..Sunday order regardless of upstream ordering
        self.week.sort(key=lambda d: WEEKDAYS.index(d.day))
        return self

    def get_day(self, day: str) -> PlanDay | None:
        for entry in self.week:
            if entry.day == day:
                return entry
        return None


class PlanContext(BaseModel):
    season: str | None = None
    readiness: Readiness | None = None
    weeklySchedule: str = DEFAULT_WEEKLY_SCHEDULE
    today: str | None = None

    @field_validator("season")
    @classmethod
    def _known_season(cls, value: str | None) -> str | None:
        if value is not None and value not in SEASONS:
            raise ValueError(f"season must be one of {SEASONS}")
        return value

    @field_validator("today")
    @classmethod
    def _known_today(cls, value: str | None) -> str | None:
        if value is None:
            return None
        day = value.strip().capitalize()
        if day not in WEEKDAYS:
            raise ValueError(f"unknown weekday {value!r}")
        return day


class FeedbackRequest(BaseModel):
    workout: Workout
    result: str
    healthData: HealthMetrics | None = None
    trends: list[HealthMetrics] = []


class RouteRequest(BaseModel):
    workout: Workout
