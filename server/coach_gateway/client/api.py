"""HTTP client for the gateway, used by the poller and the CLI."""

from __future__ import annotations

from typing import Any

import httpx

from ..errors import CoachError, ConfigError, NotFoundError, ParseError, UpstreamError

_ERRORS_BY_KIND: dict[str, type[CoachError]] = {
    ConfigError.kind: ConfigError,
    ParseError.kind: ParseError,
    NotFoundError.kind: NotFoundError,
}


class CoachApiClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._client = httpx.AsyncClient(base_url=base_url.rstrip("/"), timeout=timeout, transport=transport)

    async def __aenter__(self) -> CoachApiClient:
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        await self._client.aclose()

    async def health_snapshot(self) -> dict | None:
        """Snapshot body, or None when the server has no health data."""
        response = await self._client.get("/api/health-snapshot")
        if response.status_code == 404:
            return None
        return _json_or_raise(response)

    async def start_generation(self, context: dict[str, Any] | None = None) -> str:
        response = await self._client.post("/api/start-generation", json=context or {})
        body = _json_or_raise(response)
        job_id = body.get("jobId")
        if not isinstance(job_id, str) or not job_id:
            raise ParseError("start-generation response carried no jobId", raw_text=response.text)
        return job_id

    async def job_status(self, job_id: str) -> dict:
        response = await self._client.get(f"/api/job-status/{job_id}")
        if response.status_code == 404:
            raise NotFoundError(_message(response) or "Job not found")
        return _json_or_raise(response)

    async def feedback(self, workout: dict, result: str, health: dict | None = None, trends: list | None = None) -> str:
        body = {"workout": workout, "result": result, "healthData": health, "trends": trends or []}
        response = await self._client.post("/api/feedback", json=body)
        return _json_or_raise(response)["feedback"]


def _message(response: httpx.Response) -> str | None:
    try:
        body = response.json()
    except ValueError:
        return None
    return body.get("message") if isinstance(body, dict) else None


def _json_or_raise(response: httpx.Response) -> dict:
    if response.is_success:
        try:
            body = response.json()
        except ValueError as exc:
            raise ParseError("Gateway response is not JSON", raw_text=response.text) from exc
        if not isinstance(body, dict):
            raise ParseError("Gateway response is not a JSON object", raw_text=response.text)
        return body

    try:
        body = response.json()
    except ValueError:
        body = {}
    kind = body.get("kind") if isinstance(body, dict) else None
    message = (body.get("message") if isinstance(body, dict) else None) or f"Gateway returned {response.status_code}"
    error_cls = _ERRORS_BY_KIND.get(kind or "")
    if error_cls is not None:
        raise error_cls(message)
    raise UpstreamError(message, status_code=response.status_code, body=response.text)
