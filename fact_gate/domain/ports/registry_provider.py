"""Registry provider interface for authoritative structured lookups."""

from datetime import datetime
from typing import Any, Dict, Optional, Protocol, Set

from pydantic import BaseModel, Field

from ..models.claim import ClaimType


class RegistryLookupResult(BaseModel):
    """Answer from an official registry.

    ``found`` is False when the registry has no matching record; absence is
    never an error. When the registry returns a structured value that
    contradicts the claim, ``matches`` is False and ``correct_value`` holds
    the registry's value.
    """

    found: bool = Field(..., description="Whether a matching record exists")
    data: Optional[Dict[str, Any]] = Field(None, description="Structured record data")
    source: str = Field(..., description="Registry identifier")
    checked_at: datetime = Field(default_factory=datetime.utcnow)
    matches: Optional[bool] = Field(None, description="Whether the record agrees with the claimed value")
    correct_value: Optional[str] = Field(None, description="Registry value when it disagrees")


class RegistryProvider(Protocol):
    """Protocol for official-registry verification sources."""

    async def initialize(self) -> None:
        """Initialize the provider and its HTTP client."""
        ...

    def supports(self, claim_type: ClaimType) -> bool:
        """Whether this registry can answer claims of ``claim_type``."""
        ...

    async def lookup(self, claim_type: ClaimType, value: str) -> Optional[RegistryLookupResult]:
        """Look up ``value`` scoped to ``claim_type``.

        Returns None when the registry cannot make a determination.
        Must be idempotent and side-effect free.
        """
        ...

    async def shutdown(self) -> None:
        """Shutdown the provider and clean up resources."""
        ...

    @property
    def provider_name(self) -> str:
        """Get the provider name."""
        ...

    @property
    def is_available(self) -> bool:
        """Check if the provider is available and ready."""
        ...

    @property
    def supported_claim_types(self) -> Set[ClaimType]:
        """Claim types this registry can answer."""
        ...
