"""Gemini with Google Search grounding as a grounded search provider."""

import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import BaseModel, Field

from ...domain.errors import ConfigurationError, TransientSourceError
from ...domain.ports.search_provider import (
    GroundedSearchResponse,
    GroundingEvidence,
    SearchProvider,
)
from ..http_errors import error_for_exception, error_for_response

logger = logging.getLogger(__name__)

SOURCE = "gemini_grounding"


class GeminiConfig(BaseModel):
    """Configuration for the Gemini grounding adapter."""

    api_key: str = Field(..., description="Gemini API key")
    model: str = Field(default="gemini-2.0-flash", description="Model to use")
    base_url: str = Field(default="https://generativelanguage.googleapis.com/v1beta")
    temperature: float = Field(default=0.1, description="Temperature for responses")
    max_output_tokens: int = Field(default=1024, description="Maximum tokens per response")
    timeout: float = Field(default=30.0, description="API timeout in seconds")


def parse_generate_content(payload: Dict[str, Any]) -> GroundedSearchResponse:
    """Pull reply text and grounding metadata out of a generateContent body.

    Tolerates missing candidates, parts and metadata.
    """
    candidates = payload.get("candidates") or []
    if not candidates:
        return GroundedSearchResponse()
    candidate = candidates[0] or {}

    parts = (candidate.get("content") or {}).get("parts") or []
    text = "".join(p.get("text", "") for p in parts if isinstance(p, dict))

    metadata = candidate.get("groundingMetadata") or {}
    evidence: List[GroundingEvidence] = []
    for chunk in metadata.get("groundingChunks") or []:
        web = (chunk or {}).get("web") or {}
        evidence.append(GroundingEvidence(url=web.get("uri"), title=web.get("title")))

    scores: List[float] = []
    for support in metadata.get("groundingSupports") or []:
        for score in (support or {}).get("confidenceScores") or []:
            if isinstance(score, (int, float)):
                scores.append(float(score))

    return GroundedSearchResponse(
        text=text,
        evidence=evidence,
        confidence_scores=scores,
        search_queries=list(metadata.get("webSearchQueries") or []),
    )


class GeminiGroundingAdapter(SearchProvider):
    """Grounded search via the Gemini REST API and its ``google_search`` tool."""

    def __init__(
        self,
        config: Optional[GeminiConfig] = None,
        client: Optional[httpx.AsyncClient] = None,
    ):
        """Initialize the adapter.

        Args:
            config: Adapter configuration
            client: Preconfigured HTTP client, mainly for tests
        """
        self._config = config or GeminiConfig(api_key="")
        self._client = client
        self._owns_client = client is None
        self._initialized = False

    async def initialize(self) -> None:
        """Create the HTTP client.

        Raises:
            ConfigurationError: If no API key is configured
        """
        if not self._config.api_key:
            raise ConfigurationError("Gemini API key is not configured")
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=self._config.base_url,
                timeout=self._config.timeout,
                headers={"Content-Type": "application/json"},
            )
        self._initialized = True
        logger.info(f"🔎 Gemini grounding ready (model={self._config.model})")

    async def ask(self, prompt: str) -> GroundedSearchResponse:
        """Send ``prompt`` with Google Search grounding enabled."""
        if not self._client:
            raise RuntimeError("Provider not initialized")

        url = f"{self._config.base_url}/models/{self._config.model}:generateContent"
        body = {
            "contents": [{"role": "user", "parts": [{"text": prompt}]}],
            "tools": [{"google_search": {}}],
            "generationConfig": {
                "temperature": self._config.temperature,
                "maxOutputTokens": self._config.max_output_tokens,
            },
        }
        try:
            response = await self._client.post(
                url,
                json=body,
                headers={"x-goog-api-key": self._config.api_key},
            )
        except httpx.HTTPError as e:
            raise error_for_exception(e, SOURCE)

        if response.status_code != 200:
            raise error_for_response(response, SOURCE)

        try:
            payload = response.json()
        except ValueError:
            raise TransientSourceError("malformed JSON from generateContent", SOURCE)

        result = parse_generate_content(payload)
        logger.debug(
            f"🌐 Grounded reply: {len(result.text)} chars, {len(result.evidence)} sources, "
            f"queries={result.search_queries}"
        )
        return result

    async def shutdown(self) -> None:
        """Clean up resources."""
        if self._client is not None and self._owns_client:
            await self._client.aclose()
        self._client = None
        self._initialized = False

    @property
    def provider_name(self) -> str:
        return SOURCE

    @property
    def is_available(self) -> bool:
        return self._initialized

    @property
    def capabilities(self) -> Dict[str, bool]:
        return {
            "web_search": True,
            "grounding_metadata": True,
            "confidence_scores": True,
        }
