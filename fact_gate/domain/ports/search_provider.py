"""Grounded search provider interface."""

from typing import Dict, List, Optional, Protocol

from pydantic import BaseModel, Field


class GroundingEvidence(BaseModel):
    """A web source the model grounded its answer on."""

    url: Optional[str] = Field(None, description="Source URL")
    title: Optional[str] = Field(None, description="Source title")


class GroundedSearchResponse(BaseModel):
    """Raw reply from a grounded language model."""

    text: str = Field("", description="Model reply text")
    evidence: List[GroundingEvidence] = Field(default_factory=list, description="Grounding chunks, in order")
    confidence_scores: List[float] = Field(
        default_factory=list,
        description="Per-chunk support confidence scores (0-1)",
    )
    search_queries: List[str] = Field(default_factory=list, description="Queries the model issued")

    @property
    def first_evidence_url(self) -> Optional[str]:
        for item in self.evidence:
            if item.url:
                return item.url
        return None


class SearchProvider(Protocol):
    """Protocol for grounded-web-search verification sources."""

    async def initialize(self) -> None:
        """Initialize the provider. Raises ConfigurationError without credentials."""
        ...

    async def ask(self, prompt: str) -> GroundedSearchResponse:
        """Send a verification prompt and return the grounded reply."""
        ...

    async def shutdown(self) -> None:
        """Clean up resources."""
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
    def capabilities(self) -> Dict[str, bool]:
        """Get the provider's capabilities."""
        ...
