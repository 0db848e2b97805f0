"""Client-side job poller.

Polls the status endpoint at a fixed interval until the job is terminal, the
wall-clock ceiling passes, an error occurs, or the consumer cancels. Every
failure stops the loop; nothing is retried.
"""

from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, Awaitable, Callable

from ..errors import (
    CoachError,
    JobFailedError,
    ParseError,
    PollTimeoutError,
    UnexpectedStatusError,
    UpstreamError,
)

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL = 3.0
DEFAULT_MAX_DURATION = 120.0

_IN_PROGRESS = ("pending", "running")


class PollState(str, Enum):
    IDLE = "idle"
    POLLING = "polling"
    SUCCEEDED = "succeeded"
    FAILED = "failed"
    TIMED_OUT = "timed_out"
    CANCELLED = "cancelled"

    @property
    def is_terminal(self) -> bool:
        return self not in (PollState.IDLE, PollState.POLLING)


@dataclass
class PollOutcome:
    state: PollState
    result: dict[str, Any] | None = None
    error: CoachError | None = None
    polls: int = 0
    last_status: str | None = None


FetchStatus = Callable[[str], Awaitable[dict]]


class ClientPoller:
    """Drives one job id to a terminal client state.

    ``fetch_status`` returns the status body for a job id. ``clock`` and
    ``sleep`` are injectable so tests can run the loop on simulated time.
    ``on_update`` is called with the outcome after each state change, and
    never after ``cancel()``. ``cancel()`` aborts the task running the loop,
    whether it came from ``start()`` or awaits ``run()`` directly.
    """

    def __init__(
        self,
        fetch_status: FetchStatus,
        interval: float = DEFAULT_INTERVAL,
        max_duration: float = DEFAULT_MAX_DURATION,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        on_update: Callable[[PollOutcome], None] | None = None,
    ) -> None:
        self._fetch_status = fetch_status
        self.interval = interval
        self.max_duration = max_duration
        self._clock = clock
        self._sleep = sleep
        self._on_update = on_update
        self._task: asyncio.Task | None = None
        self._torn_down = False
        self.outcome = PollOutcome(state=PollState.IDLE)

    @property
    def state(self) -> PollState:
        return self.outcome.state

    def start(self, job_id: str) -> asyncio.Task:
        """Run the poll loop as a task the owner can cancel."""
        self._task = asyncio.get_running_loop().create_task(self.run(job_id))
        return self._task

    def cancel(self) -> None:
        """Tear down: abort the pending sleep or request and silence further updates."""
        if self.state.is_terminal:
            return
        self._torn_down = True
        self.outcome.state = PollState.CANCELLED
        if self._task is not None and not self._task.done():
            self._task.cancel()
        logger.info("Polling cancelled after %d poll(s)", self.outcome.polls)

    async def run(self, job_id: str) -> PollOutcome:
        if self.state is not PollState.IDLE:
            raise RuntimeError(f"poller already used (state {self.state.value})")
        if self._task is None:
            self._task = asyncio.current_task()
        self._update(PollState.POLLING)
        started = self._clock()

        try:
            while True:
                if self._torn_down:
                    return self.outcome
                elapsed = self._clock() - started
                if elapsed > self.max_duration:
                    return self._finish(
                        PollState.TIMED_OUT,
                        error=PollTimeoutError(
                            f"Plan generation did not finish within {self.max_duration:g}s "
                            f"(last status: {self.outcome.last_status})"
                        ),
                    )

                try:
                    body = await self._fetch_status(job_id)
                except CoachError as exc:
                    return self._finish(PollState.FAILED, error=exc)
                except Exception as exc:
                    return self._finish(PollState.FAILED, error=UpstreamError(f"Status request failed: {exc}"))

                if self._torn_down:
                    return self.outcome
                self.outcome.polls += 1
                status = body.get("status") if isinstance(body, dict) else None
                self.outcome.last_status = status if isinstance(status, str) else repr(status)

                if status == "completed":
                    result = body.get("result")
                    if not isinstance(result, dict):
                        return self._finish(
                            PollState.FAILED,
                            error=ParseError("Completed job carried no result", raw_text=repr(body)),
                        )
                    return self._finish(PollState.SUCCEEDED, result=result)
                if status == "failed":
                    error = body.get("error")
                    if not isinstance(error, dict):
                        error = {}
                    return self._finish(
                        PollState.FAILED,
                        error=JobFailedError(
                            error.get("message") or "Plan generation failed",
                            kind=error.get("kind"),
                            diagnostic=error.get("diagnostic"),
                        ),
                    )
                if status not in _IN_PROGRESS:
                    return self._finish(PollState.FAILED, error=UnexpectedStatusError(status))

                self._notify()
                await self._sleep(self.interval)
        except asyncio.CancelledError:
            self._torn_down = True
            self.outcome.state = PollState.CANCELLED
            raise

    # ── Internal ──────────────────────────────────────────────────────────

    def _finish(
        self,
        state: PollState,
        result: dict[str, Any] | None = None,
        error: CoachError | None = None,
    ) -> PollOutcome:
        self.outcome.result = result
        self.outcome.error = error
        if error is not None:
            logger.warning("Polling stopped (%s): %s", state.value, error.message)
        self._update(state)
        return self.outcome

    def _update(self, state: PollState) -> None:
        if self._torn_down:
            return
        self.outcome.state = state
        self._notify()

    def _notify(self) -> None:
        if self._on_update is not None and not self._torn_down:
            self._on_update(self.outcome)
