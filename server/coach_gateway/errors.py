"""Error taxonomy shared by the gateway and the polling client."""

from __future__ import annotations

_BODY_PREVIEW_CHARS = 500


class CoachError(Exception):
    """Base class for every error the gateway records or reports.

    ``kind`` is the stable machine-readable tag written into job error
    descriptors and JSON error bodies; ``diagnostic`` carries detail that is
    useful for debugging but not meant as the headline message.
    """

    kind = "internal"
    http_status = 500

    def __init__(self, message: str, diagnostic: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.diagnostic = diagnostic

    def to_dict(self) -> dict:
        return {"error": True, "kind": self.kind, "message": self.message}


class ConfigError(CoachError):
    """A required external dependency is not configured."""

    kind = "config"
    http_status = 503


class UpstreamError(CoachError):
    """The generation service answered with a failure or could not be reached."""

    kind = "upstream"
    http_status = 502

    def __init__(self, message: str, status_code: int | None = None, body: str | None = None) -> None:
        self.status_code = status_code
        self.body = truncate(body) if body else None
        super().__init__(message, diagnostic=self.body)

    @classmethod
    def from_response(cls, status_code: int, body: str) -> UpstreamError:
        return cls(
            f"Gemini API request failed: {status_code} {truncate(body)}",
            status_code=status_code,
            body=body,
        )


class ParseError(CoachError):
    """Upstream text did not parse into the expected structure."""

    kind = "parse"
    http_status = 502

    def __init__(self, message: str, raw_text: str | None = None) -> None:
        self.raw_text = raw_text
        super().__init__(message, diagnostic=truncate(raw_text) if raw_text else None)


class NotFoundError(CoachError):
    """Job id unknown or expired."""

    kind = "not_found"
    http_status = 404


# -- Client-side errors --


class PollTimeoutError(CoachError):
    """Polling exceeded the maximum wall-clock duration."""

    kind = "timeout"


class UnexpectedStatusError(CoachError):
    """The status endpoint reported a value outside the known enum."""

    kind = "unexpected_status"

    def __init__(self, status: object) -> None:
        self.status = status
        super().__init__(f"Unexpected job status: {status!r}")


class JobFailedError(CoachError):
    """The job reached ``failed``; carries the server's error descriptor."""

    def __init__(self, message: str, kind: str | None = None, diagnostic: str | None = None) -> None:
        super().__init__(message, diagnostic=diagnostic)
        self.kind = kind or "internal"


def truncate(text: str, limit: int = _BODY_PREVIEW_CHARS) -> str:
    if len(text) <= limit:
        return text
    return text[:limit] + "..."
