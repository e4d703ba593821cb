"""Test configuration and common fixtures."""

from typing import Callable, Dict, List, Optional, Set, Union

import pytest

from fact_gate.domain.models.claim import Claim, ClaimSeverity, ClaimType
from fact_gate.domain.models.config import FactCheckConfig
from fact_gate.domain.ports.registry_provider import RegistryLookupResult, RegistryProvider
from fact_gate.domain.ports.search_provider import (
    GroundedSearchResponse,
    GroundingEvidence,
    SearchProvider,
)
from fact_gate.domain.services.verification_cache import VerificationCache
from fact_gate.domain.services.verification_engine import VerificationEngine

Reply = Union[GroundedSearchResponse, Exception]


class FakeSearchProvider(SearchProvider):
    """Grounded search provider answering from a script."""

    def __init__(self, replies: Optional[List[Reply]] = None,
                 default: Optional[Reply] = None):
        self.replies = list(replies or [])
        self.default = default or verified_reply()
        self.prompts: List[str] = []

    async def initialize(self) -> None:
        pass

    async def ask(self, prompt: str) -> GroundedSearchResponse:
        self.prompts.append(prompt)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def shutdown(self) -> None:
        pass

    @property
    def provider_name(self) -> str:
        return "fake_search"

    @property
    def is_available(self) -> bool:
        return True

    @property
    def capabilities(self) -> Dict[str, bool]:
        return {"web_search": True}

    @property
    def calls(self) -> int:
        return len(self.prompts)


class FakeRegistryProvider(RegistryProvider):
    """Registry answering from a script of results and errors."""

    def __init__(self, types: Set[ClaimType],
                 replies: Optional[List[Union[Optional[RegistryLookupResult], Exception]]] = None,
                 default: Optional[RegistryLookupResult] = None):
        self.types = set(types)
        self.replies = list(replies or [])
        self.default = default
        self.lookups: List[str] = []

    async def initialize(self) -> None:
        pass

    def supports(self, claim_type: ClaimType) -> bool:
        return claim_type in self.types

    async def lookup(self, claim_type: ClaimType, value: str) -> Optional[RegistryLookupResult]:
        self.lookups.append(value)
        reply = self.replies.pop(0) if self.replies else self.default
        if isinstance(reply, Exception):
            raise reply
        return reply

    async def shutdown(self) -> None:
        pass

    @property
    def provider_name(self) -> str:
        return "fake_registry"

    @property
    def is_available(self) -> bool:
        return True

    @property
    def supported_claim_types(self) -> Set[ClaimType]:
        return self.types


class RecordingSleep:
    """Awaitable sleep that records delays instead of waiting."""

    def __init__(self):
        self.delays: List[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def reply(status: str = "VERIFIED", confidence: int = 90, correct: str = "",
          details: str = "확인됨", scores: Optional[List[float]] = None,
          urls: Optional[List[str]] = None) -> GroundedSearchResponse:
    text = (
        f"VERIFICATION_STATUS: {status}\n"
        f"CONFIDENCE: {confidence}\n"
        f"CORRECT_VALUE: {correct}\n"
        f"DETAILS: {details}"
    )
    return GroundedSearchResponse(
        text=text,
        evidence=[GroundingEvidence(url=u, title=None) for u in (urls or [])],
        confidence_scores=scores or [],
    )


def verified_reply() -> GroundedSearchResponse:
    return reply()


@pytest.fixture
def make_claim() -> Callable[..., Claim]:
    """Build claims with sensible defaults."""
    counter = {"n": 0}

    def factory(value: str = "국립중앙박물관", type: str = "venue_exists",
                severity: str = "minor", id: Optional[str] = None,
                text: Optional[str] = None, context: Optional[str] = None) -> Claim:
        counter["n"] += 1
        return Claim(
            id=id or f"claim-{counter['n']}",
            type=ClaimType(type),
            value=value,
            text=text,
            context=context,
            severity=ClaimSeverity(severity),
        )

    return factory


@pytest.fixture
def make_reply() -> Callable[..., GroundedSearchResponse]:
    """Build tagged grounded-search replies."""
    return reply


@pytest.fixture
def fake_search() -> FakeSearchProvider:
    return FakeSearchProvider()


@pytest.fixture
def search_factory() -> Callable[..., FakeSearchProvider]:
    return FakeSearchProvider


@pytest.fixture
def registry_factory() -> Callable[..., FakeRegistryProvider]:
    return FakeRegistryProvider


@pytest.fixture
def recording_sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def fast_config() -> FactCheckConfig:
    """Default engine settings; delays are recorded, never slept."""
    return FactCheckConfig()


@pytest.fixture
def engine_factory(recording_sleep, fast_config) -> Callable[..., VerificationEngine]:
    """Build engines sharing the recording sleep and a fresh cache."""

    def factory(search=None, registry=None, config=None, cache=None, rate_limiter=None):
        config = config or fast_config
        return VerificationEngine(
            search=search,
            registry=registry,
            cache=cache or VerificationCache(),
            config=config,
            rate_limiter=rate_limiter,
            sleep=recording_sleep,
        )

    return factory
