"""Static coaching content fed into prompts and used for plan adjustments."""

from __future__ import annotations

from ..models.plan import PlanDay, Workout

WORKOUT_LIBRARY: dict[str, dict[str, list[Workout]] | list[Workout]] = {
    "cycling": {
        "endurance": [
            Workout(
                name="Zone 2 Ride",
                description="Sustain a Zone 2 power/heart rate for the prescribed duration. This is your foundation.",
            )
        ],
        "threshold": [
            Workout(
                name="Classic 2x20",
                description="2x20 minute intervals at 91-105% of your FTP with 5 minutes of easy spinning in between. Hard but effective.",
            )
        ],
    },
    "ski": {
        "strength": [
            Workout(
                name="Uphill Athlete Leg Blaster",
                description="3-5 rounds: 10 Goblet Squats, 10 Walking Lunges (per leg), 10 Box Jumps, 10 Kettlebell Swings. Minimal rest.",
            )
        ],
        "muscularEndurance": [
            Workout(
                name="Box Step-Up Challenge",
                description="Accumulate 500-1000 weighted box step-ups over a 60-90 minute session. Go slow and steady.",
            )
        ],
    },
    "recovery": [
        Workout(
            name="Easy Spin",
            description="30-60 minutes of very light cycling (Zone 1). Focus on high cadence to flush out the legs.",
        )
    ],
}

MOBILITY_ROUTINE = [
    "10-Minute Squat Test",
    "Couch Stretch (2 min/side)",
    "Thoracic Spine Windmills (10/side)",
]

ROUTES = [
    {
        "id": 1,
        "name": "River Path Loop",
        "distance": "25 miles",
        "elevation": "300 ft",
        "profile": "Mostly flat with a few gentle rollers. Good for steady-state efforts.",
    },
    {
        "id": 2,
        "name": "Lookout Mountain Climb",
        "distance": "12 miles",
        "elevation": "1,500 ft",
        "profile": "A sustained 5-mile climb averaging 5-6% grade. Ideal for threshold and VO2 max intervals.",
    },
    {
        "id": 3,
        "name": "Three Sisters",
        "distance": "45 miles",
        "elevation": "3,200 ft",
        "profile": "Three distinct climbs of varying length and steepness. A challenging, hilly route.",
    },
]

PAST_WOD_EXAMPLES = (
    '- "Title: Team Murph, WOD: [TEAMS OF 2] For Time: 1 Mile Run, 100 Pull-ups, 200 Push-ups, 300 Air Squats, 1 Mile Run"\n'
    '- "Title: Adroit, WOD: For Time: 1,000/800 Meter Row, 50 Wall Balls (20/14), 25 Chest to Bar Pull-ups"'
)


def recovery_day(day: str) -> PlanDay:
    """The day that replaces an intense session when readiness is low."""
    return PlanDay(
        day=day,
        title="Readiness-Based Recovery",
        type="Recovery",
        workout=WORKOUT_LIBRARY["recovery"][0],
        notes="Listen to your body. Today is about active recovery.",
        mobility=list(MOBILITY_ROUTINE),
    )


def find_route(route_id: object) -> dict | None:
    for route in ROUTES:
        if route["id"] == route_id:
            return route
    return None


def library_summary(season: str) -> str:
    """Render the season's library as prompt text."""
    section = WORKOUT_LIBRARY["cycling" if season == "Cycling" else "ski"]
    lines = []
    for category, workouts in section.items():
        for w in workouts:
            lines.append(f"- [{category}] {w.name}: {w.description}")
    for w in WORKOUT_LIBRARY["recovery"]:
        lines.append(f"- [recovery] {w.name}: {w.description}")
    return "\n".join(lines)
