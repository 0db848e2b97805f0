"""Coach feedback and route suggestions (short, synchronous Gemini calls)."""

from __future__ import annotations

import logging

from ..errors import CoachError
from ..models.health import HealthMetrics
from ..models.plan import Workout
from .gemini_client import GeminiClient
from .library import ROUTES, find_route
from .plan_parser import parse_json_object

logger = logging.getLogger(__name__)

FEEDBACK_INSTRUCTION = 'You are an elite-level health coach named "Coach AI". Your tone is encouraging and knowledgeable.'
ROUTE_INSTRUCTION = "You are an expert cycling coach. Recommend the single best route. Return only valid JSON."
ROUTE_FALLBACK = "Could not generate a route suggestion."


class CoachService:
    def __init__(self, gemini: GeminiClient) -> None:
        self.gemini = gemini

    async def feedback(
        self,
        workout: Workout,
        result: str,
        health: HealthMetrics | None = None,
        trends: list[HealthMetrics] | None = None,
    ) -> str:
        """Four-to-five sentence feedback on a logged workout."""
        if health:
            health_summary = (
                f"Today's metrics: Sleep: {health.sleepScore}, HRV: {health.hrvStatus}, "
                f"RHR: {health.restingHeartRate}."
            )
        else:
            health_summary = "Health metrics unavailable."

        trends_summary = ""
        if trends and len(trends) > 1:
            direction = "improving" if trends[-1].sleepScore > trends[-2].sleepScore else "declining"
            trends_summary = f"Recent sleep trend is {direction}."

        prompt = (
            f'My user completed "{workout.name}" with this result: "{result}". {health_summary} {trends_summary} '
            "Provide CONCISE (4-5 sentences) data-driven feedback connecting their performance, recovery, "
            "and long-term goals."
        )
        text = await self.gemini.generate_text(prompt, system_instruction=FEEDBACK_INSTRUCTION)
        return text.strip()

    async def suggest_route(self, workout: Workout) -> dict:
        """Pick one of the known routes for a ride; never raises."""
        routes = "\n".join(f'- Id: {r["id"]}, Name: "{r["name"]}", Profile: "{r["profile"]}"' for r in ROUTES)
        prompt = (
            f'Workout: "{workout.name}" - {workout.description}. Available Routes:\n{routes}\n'
            'Which single route is most suitable? Return ONLY a valid JSON object with "routeId" and '
            '"justification" keys.'
        )
        try:
            text = await self.gemini.generate_text(prompt, system_instruction=ROUTE_INSTRUCTION, json_output=True)
            suggestion = parse_json_object(text)
        except CoachError as exc:
            logger.warning("Failed to get route suggestion (%s): %s", exc.kind, exc.message)
            return {"route": None, "justification": ROUTE_FALLBACK}

        route = find_route(suggestion.get("routeId"))
        justification = suggestion.get("justification")
        if route is None or not isinstance(justification, str):
            logger.warning("Route suggestion referenced unknown route %r", suggestion.get("routeId"))
            return {"route": None, "justification": ROUTE_FALLBACK}
        return {"route": route, "justification": justification}
