"""Verification engine: cache, registry lookup, grounded search, retry."""

import asyncio
import logging
from typing import Awaitable, Callable, List, Optional, Sequence, Tuple, TypeVar

from ..errors import (
    ConfigurationError,
    TerminalSourceError,
    TransientSourceError,
)
from ..models.claim import Claim, ClaimSeverity
from ..models.config import FactCheckConfig
from ..models.verification import (
    VerificationResult,
    VerificationSource,
    VerificationStatus,
)
from ..ports.registry_provider import RegistryLookupResult, RegistryProvider
from ..ports.search_provider import SearchProvider
from .rate_limiter import TokenBucket
from .verification_cache import VerificationCache
from .verification_prompt import build_verification_prompt, parse_verification_response

logger = logging.getLogger(__name__)

T = TypeVar("T")

REGISTRY_FOUND_CONFIDENCE = 95
REGISTRY_NOT_FOUND_CONFIDENCE = 30

ProgressCallback = Callable[[int, int, Claim], None]
SleepFunc = Callable[[float], Awaitable[None]]


class VerificationEngine:
    """Resolves claims to verification results.

    For each claim the cache is consulted first, then the registry (when it
    covers the claim type), then grounded search. Transient source failures
    are retried with exponential backoff; terminal failures propagate.
    """

    def __init__(
        self,
        search: Optional[SearchProvider] = None,
        registry: Optional[RegistryProvider] = None,
        cache: Optional[VerificationCache] = None,
        config: Optional[FactCheckConfig] = None,
        rate_limiter: Optional[TokenBucket] = None,
        sleep: Optional[SleepFunc] = None,
    ):
        """Initialize the engine.

        Args:
            search: Grounded search provider
            registry: Official registry provider
            cache: Shared verification cache
            config: Retry, timeout and throttling settings
            rate_limiter: Token bucket acquired before every search call
            sleep: Awaitable sleep, injectable for tests
        """
        self.search = search
        self.registry = registry
        self.config = config or FactCheckConfig()
        self.cache = cache
        if self.cache is None and self.config.cache_results:
            self.cache = VerificationCache(
                ttl_seconds=self.config.cache_ttl_hours * 3600,
                maxsize=self.config.cache_maxsize,
            )
        self.rate_limiter = rate_limiter
        if self.rate_limiter is None and self.config.rate_limit_per_second:
            self.rate_limiter = TokenBucket(
                rate=self.config.rate_limit_per_second,
                capacity=self.config.rate_limit_burst,
            )
        self._sleep = sleep or asyncio.sleep

    @property
    def has_search(self) -> bool:
        return self.search is not None

    async def verify(self, claim: Claim) -> VerificationResult:
        """Verify a single claim."""
        if self.config.cache_results and self.cache is not None:
            cached = self.cache.get(claim)
            if cached is not None:
                return cached

        result = await self._verify_with_retry(claim)

        if self.config.cache_results and self.cache is not None:
            self.cache.put(claim, result)

        if claim.severity == ClaimSeverity.CRITICAL and result.status == VerificationStatus.FALSE:
            logger.warning(f"🚨 Critical claim is false: {claim.value} -> {result.correct_value}")
        return result

    async def verify_batch(
        self,
        claims: Sequence[Claim],
        on_progress: Optional[ProgressCallback] = None,
    ) -> List[VerificationResult]:
        """Verify many claims, most severe first.

        Severity groups run strictly in order. Results are returned in the
        order of ``claims``.
        """
        total = len(claims)
        results: List[Optional[VerificationResult]] = [None] * total
        ordered = sorted(enumerate(claims), key=lambda item: item[1].severity.priority)
        progress = _Progress(total, on_progress)

        logger.info(f"🔍 Verifying {total} claims (concurrency={self.config.concurrency})")
        for severity in ClaimSeverity:
            group = [(i, c) for i, c in ordered if c.severity == severity]
            if not group:
                continue
            logger.info(f"📋 {severity.value}: {len(group)} claims")
            if self.config.concurrency <= 1:
                await self._run_sequential(group, results, progress)
            else:
                await self._run_pool(group, results, progress)

        return [r for r in results if r is not None]

    async def _run_sequential(
        self,
        group: List[Tuple[int, Claim]],
        results: List[Optional[VerificationResult]],
        progress: "_Progress",
    ) -> None:
        for index, claim in group:
            if progress.started and progress.last_hit_source:
                await self._throttle()
            progress.tick(claim)
            result = await self.verify(claim)
            results[index] = result
            progress.last_hit_source = result.source != VerificationSource.CACHED

    async def _run_pool(
        self,
        group: List[Tuple[int, Claim]],
        results: List[Optional[VerificationResult]],
        progress: "_Progress",
    ) -> None:
        semaphore = asyncio.Semaphore(self.config.concurrency)

        async def worker(index: int, claim: Claim) -> None:
            async with semaphore:
                progress.tick(claim)
                result = await self.verify(claim)
                results[index] = result
                if result.source != VerificationSource.CACHED:
                    await self._throttle()

        tasks = [asyncio.ensure_future(worker(i, c)) for i, c in group]
        try:
            await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            await asyncio.gather(*tasks, return_exceptions=True)
            raise

    async def _throttle(self) -> None:
        if self.config.inter_call_delay_ms > 0:
            await self._sleep(self.config.inter_call_delay_ms / 1000)

    async def _verify_with_retry(self, claim: Claim) -> VerificationResult:
        max_retries = self.config.max_retries
        last_error: Optional[BaseException] = None

        for attempt in range(max_retries):
            try:
                return await self._verify_once(claim)
            except (TerminalSourceError, ConfigurationError) as e:
                logger.error(f"❌ Terminal error verifying {claim.id}: {e}")
                raise
            except Exception as e:
                last_error = e
                logger.warning(
                    f"⚠️ Verification attempt {attempt + 1}/{max_retries} failed for {claim.id}: {e}"
                )
                if attempt < max_retries - 1:
                    delay_ms = self.config.retry_delay_ms * (2 ** attempt)
                    await self._sleep(delay_ms / 1000)

        return VerificationResult(
            claim_id=claim.id,
            status=VerificationStatus.UNKNOWN,
            confidence=0,
            source=VerificationSource.UNKNOWN,
            details=f"모든 검증 시도 실패: {last_error}",
        )

    async def _verify_once(self, claim: Claim) -> VerificationResult:
        registry = self.registry
        if registry is not None and registry.is_available and registry.supports(claim.type):
            lookup = await self._call(
                registry.lookup(claim.type, claim.value), registry.provider_name
            )
            if lookup is not None:
                return self._from_registry(claim, lookup)

        if self.search is None:
            raise ConfigurationError("No grounded search provider configured")

        if self.rate_limiter is not None:
            await self.rate_limiter.acquire()
        response = await self._call(
            self.search.ask(build_verification_prompt(claim)), self.search.provider_name
        )
        return parse_verification_response(claim, response)

    async def _call(self, call: Awaitable[T], source: str) -> T:
        try:
            return await asyncio.wait_for(call, timeout=self.config.request_timeout)
        except asyncio.TimeoutError:
            raise TransientSourceError(
                f"timed out after {self.config.request_timeout}s", source=source
            )

    @staticmethod
    def _from_registry(claim: Claim, lookup: RegistryLookupResult) -> VerificationResult:
        if not lookup.found:
            return VerificationResult(
                claim_id=claim.id,
                status=VerificationStatus.UNKNOWN,
                confidence=REGISTRY_NOT_FOUND_CONFIDENCE,
                source=VerificationSource.OFFICIAL_API,
                checked_at=lookup.checked_at,
                details=f"공식 API ({lookup.source})에서 검색 결과 없음",
            )
        if lookup.matches is False and lookup.correct_value:
            return VerificationResult(
                claim_id=claim.id,
                status=VerificationStatus.FALSE,
                confidence=REGISTRY_FOUND_CONFIDENCE,
                source=VerificationSource.OFFICIAL_API,
                correct_value=lookup.correct_value,
                checked_at=lookup.checked_at,
                details=f"공식 API ({lookup.source})에서 불일치 확인: {lookup.correct_value}",
            )
        return VerificationResult(
            claim_id=claim.id,
            status=VerificationStatus.VERIFIED,
            confidence=REGISTRY_FOUND_CONFIDENCE,
            source=VerificationSource.OFFICIAL_API,
            checked_at=lookup.checked_at,
            details=f"공식 API ({lookup.source})에서 확인됨",
        )


class _Progress:
    """Progress bookkeeping shared by the batch runners."""

    def __init__(self, total: int, callback: Optional[ProgressCallback]):
        self.total = total
        self.current = 0
        self.last_hit_source = False
        self._callback = callback

    @property
    def started(self) -> bool:
        return self.current > 0

    def tick(self, claim: Claim) -> None:
        self.current += 1
        if self._callback is not None:
            self._callback(self.current, self.total, claim)
