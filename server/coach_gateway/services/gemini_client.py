"""Gemini REST client. Sends one prompt, returns the first candidate's text."""

from __future__ import annotations

import json
import logging

import httpx

from ..errors import ConfigError, ParseError, UpstreamError

logger = logging.getLogger(__name__)


class GeminiClient:
    """Thin async wrapper around ``models/{model}:generateContent``.

    No retries: a failed call surfaces as an error and the caller decides.
    """

    def __init__(
        self,
        api_key: str | None,
        model: str,
        base_url: str,
        timeout: float = 90.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(timeout=timeout, transport=transport)

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key)

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def generate_text(
        self,
        prompt: str,
        system_instruction: str | None = None,
        json_output: bool = False,
    ) -> str:
        if not self.api_key:
            raise ConfigError("API key is not configured on the server (GEMINI_API_KEY).")

        payload: dict = {"contents": [{"parts": [{"text": prompt}]}]}
        if system_instruction:
            payload["systemInstruction"] = {"parts": [{"text": system_instruction}]}
        if json_output:
            payload["generationConfig"] = {"responseMimeType": "application/json"}

        try:
            response = await self._client.post(
                self.endpoint,
                json=payload,
                headers={"x-goog-api-key": self.api_key},
            )
        except httpx.HTTPError as exc:
            logger.error("Gemini request failed: %s", exc)
            raise UpstreamError(f"Gemini API request failed: {type(exc).__name__}: {exc}") from exc

        if not response.is_success:
            logger.error("Gemini returned %d", response.status_code)
            raise UpstreamError.from_response(response.status_code, response.text)

        try:
            data = response.json()
        except json.JSONDecodeError as exc:
            raise ParseError("Gemini response body is not JSON", raw_text=response.text) from exc

        return extract_candidate_text(data)

    async def aclose(self) -> None:
        await self._client.aclose()


def extract_candidate_text(data: dict) -> str:
    """Return ``candidates[0].content.parts[0].text`` or raise ParseError."""
    try:
        text = data["candidates"][0]["content"]["parts"][0]["text"]
    except (KeyError, IndexError, TypeError) as exc:
        raise ParseError("Gemini response contained no candidate text", raw_text=json.dumps(data)) from exc
    if not isinstance(text, str) or not text.strip():
        raise ParseError("Gemini response contained empty candidate text", raw_text=json.dumps(data))
    return text
