"""Translation of httpx failures into source errors."""

import httpx

from ..domain.errors import (
    AuthenticationError,
    QuotaExceededError,
    SourceError,
    TransientSourceError,
)

# Markers Google APIs put in 429 bodies when the daily quota is spent
_DAILY_QUOTA_MARKERS = ("PerDay", "per day", "daily limit", "RESOURCE_EXHAUSTED: Quota exceeded for quota metric")


def error_for_response(response: httpx.Response, source: str) -> SourceError:
    """Map an unsuccessful HTTP response to the error taxonomy."""
    status = response.status_code
    body = response.text[:500]

    if status in (401, 403) or "API_KEY_INVALID" in body:
        return AuthenticationError(f"HTTP {status}: credentials rejected", source, status)
    if status == 429:
        if any(marker in body for marker in _DAILY_QUOTA_MARKERS):
            return QuotaExceededError("HTTP 429: daily quota exhausted", source, status)
        return TransientSourceError("HTTP 429: rate limited", source, status)
    if status >= 500:
        return TransientSourceError(f"HTTP {status}: server error", source, status)
    return TransientSourceError(f"HTTP {status}: {body[:200]}", source, status)


def error_for_exception(exc: httpx.HTTPError, source: str) -> SourceError:
    """Map a transport-level httpx exception to a transient error."""
    if isinstance(exc, httpx.TimeoutException):
        return TransientSourceError(f"timeout: {exc}", source)
    return TransientSourceError(f"{type(exc).__name__}: {exc}", source)
