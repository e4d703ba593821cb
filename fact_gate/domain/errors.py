"""Error taxonomy for fact verification and publish gating."""

from typing import Optional


class FactGateError(Exception):
    """Base class for all fact-gate errors."""


class ConfigurationError(FactGateError):
    """Raised when configuration or credentials are invalid.

    Raised at load/startup time, before any claim is processed.
    """


class SourceError(FactGateError):
    """Failure while talking to a verification source."""

    retryable: bool = True

    def __init__(
        self,
        message: str,
        source: Optional[str] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.source = source
        self.status_code = status_code

    def __str__(self) -> str:
        prefix = f"[{self.source}] " if self.source else ""
        return f"{prefix}{self.message}"


class TransientSourceError(SourceError):
    """Network, timeout, rate-limit or 5xx failure. Retried with backoff."""

    retryable = True


class TerminalSourceError(SourceError):
    """Failure that will repeat on every call in this run. Never retried."""

    retryable = False


class AuthenticationError(TerminalSourceError):
    """Credentials rejected by the source."""


class QuotaExceededError(TerminalSourceError):
    """Source quota exhausted for the current period."""


class ReviewCaseNotFoundError(FactGateError):
    """No review case exists with the given id."""

    def __init__(self, case_id: str):
        super().__init__(f"Review case not found: {case_id}")
        self.case_id = case_id


class InvalidTransitionError(FactGateError):
    """A lifecycle or review-status transition that is not allowed."""
