"""Terminal client: fetch today's readiness, generate the week's plan, print it."""

from __future__ import annotations

import argparse
import asyncio
import json
import sys

import httpx

from ..errors import CoachError
from .api import CoachApiClient
from .poller import DEFAULT_INTERVAL, DEFAULT_MAX_DURATION, ClientPoller, PollState


def _print_plan(plan: dict) -> None:
    print(f"{plan.get('season', '?')} season")
    if plan.get("modificationNote"):
        print(f"Plan adjusted: {plan['modificationNote']}")
    for day in plan.get("week", []):
        workout = day.get("workout", {})
        print(f"  {day.get('day'):<10} {day.get('type', ''):<9} {day.get('title', '')} - {workout.get('name', '')}")


async def generate(args: argparse.Namespace) -> int:
    async with CoachApiClient(args.base_url) as api:
        context: dict = {}
        try:
            snapshot = await api.health_snapshot()
        except (CoachError, httpx.HTTPError) as exc:
            print(f"Health data unavailable: {exc}", file=sys.stderr)
            snapshot = None
        if snapshot and snapshot.get("readiness"):
            readiness = snapshot["readiness"]
            context["readiness"] = readiness
            print(f"Readiness: {readiness['score']}/100 ({readiness['status']})")

        try:
            job_id = await api.start_generation(context)
        except httpx.HTTPError as exc:
            print(f"Gateway unreachable: {exc}", file=sys.stderr)
            return 1
        except CoachError as exc:
            print(f"Could not start generation ({exc.kind}): {exc.message}", file=sys.stderr)
            return 1
        print(f"Generating plan (job {job_id})...")

        poller = ClientPoller(api.job_status, interval=args.interval, max_duration=args.timeout)
        outcome = await poller.run(job_id)

    if outcome.state is PollState.SUCCEEDED:
        if args.json:
            print(json.dumps(outcome.result, indent=2))
        else:
            _print_plan(outcome.result or {})
        return 0

    error = outcome.error
    print(f"Plan generation {outcome.state.value} ({error.kind if error else '?'}): {error.message if error else ''}", file=sys.stderr)
    if error and error.diagnostic:
        print(error.diagnostic, file=sys.stderr)
    return 1


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate this week's training plan")
    parser.add_argument("--base-url", default="http://localhost:3001", help="Gateway base URL")
    parser.add_argument("--interval", type=float, default=DEFAULT_INTERVAL, help="Seconds between polls")
    parser.add_argument("--timeout", type=float, default=DEFAULT_MAX_DURATION, help="Give up after this many seconds")
    parser.add_argument("--json", action="store_true", help="Print the raw plan JSON")
    args = parser.parse_args(argv)
    try:
        return asyncio.run(generate(args))
    except KeyboardInterrupt:
        return 130


if __name__ == "__main__":
    sys.exit(main())
