"""Weekly plan generation backed by Gemini."""

from __future__ import annotations

import logging
from datetime import date
from typing import Callable

from ..models.plan import PlanContext, WeeklyPlan, WEEKDAYS
from .gemini_client import GeminiClient
from .library import MOBILITY_ROUTINE, PAST_WOD_EXAMPLES, library_summary, recovery_day
from .plan_parser import parse_plan
from .readiness import season_for

logger = logging.getLogger(__name__)

LOW_READINESS_THRESHOLD = 50
_INTENSE_TYPES = ("Ride", "Gym")

SYSTEM_INSTRUCTION = (
    "You are an expert CrossFit and endurance sports programmer coaching an uphill athlete. "
    "Return only a valid JSON object."
)


def build_plan_prompt(season: str, weekly_schedule: str) -> str:
    focus = (
        "Monday: posterior chain and upper body strength, avoiding excessive leg fatigue before Tuesday's ride. "
        "Friday: metabolic conditioning with a balanced mix of movements."
        if season == "Cycling"
        else "Monday: full-body strength. Friday: muscular endurance and core stability."
    )
    return (
        f"Build a seven-day training plan. Season: {season}. Schedule: {weekly_schedule}\n"
        f"Gym-day focus: {focus}\n"
        f"Workout library (prefer these for rides and recovery):\n{library_summary(season)}\n"
        f"Past WOD examples for the gym days:\n{PAST_WOD_EXAMPLES}\n"
        f"Mobility routine to attach to every day: {', '.join(MOBILITY_ROUTINE)}\n"
        'Return ONLY a JSON object of the form {"week": [{"day", "title", "type", "workout": {"name", '
        '"description"}, "notes", "mobility"}]} with exactly one entry for each of '
        f"{', '.join(WEEKDAYS)}. "
        'Use "type" values from: Ride, Gym, Recovery, Ski, Free Day.'
    )


class PlanGenerator:
    """Builds the prompt, calls Gemini once, validates, then applies readiness rules."""

    def __init__(self, gemini: GeminiClient, today: Callable[[], date] = date.today) -> None:
        self.gemini = gemini
        self._today = today

    async def generate_plan(self, context: PlanContext) -> WeeklyPlan:
        today = self._today()
        season = context.season or season_for(today)

        text = await self.gemini.generate_text(
            build_plan_prompt(season, context.weeklySchedule),
            system_instruction=SYSTEM_INSTRUCTION,
            json_output=True,
        )
        plan = parse_plan(text, season).unwrap()

        weekday = context.today or WEEKDAYS[today.weekday()]
        return apply_readiness(plan, context, weekday)


def apply_readiness(plan: WeeklyPlan, context: PlanContext, weekday: str) -> WeeklyPlan:
    """Swap today's intense session for recovery when readiness is low."""
    readiness = context.readiness
    if readiness is None or readiness.score >= LOW_READINESS_THRESHOLD:
        return plan

    today = plan.get_day(weekday)
    if today is None or today.type not in _INTENSE_TYPES:
        return plan

    logger.info("Readiness %d below %d; swapping %s for recovery", readiness.score, LOW_READINESS_THRESHOLD, weekday)
    week = [recovery_day(weekday) if d.day == weekday else d for d in plan.week]
    note = (
        f"Your readiness score is low ({readiness.score}/100). "
        "Today's intense workout has been swapped for a recovery session."
    )
    return plan.model_copy(update={"week": week, "modificationNote": note})
