"""TTL cache for verification results, keyed by claim type and value."""

import logging
import threading
from typing import Callable, Dict, Optional

from cachetools import TTLCache

from ..models.claim import Claim
from ..models.verification import VerificationResult, VerificationStatus

logger = logging.getLogger(__name__)

CACHEABLE_STATUSES = frozenset({VerificationStatus.VERIFIED, VerificationStatus.FALSE})


class VerificationCache:
    """Process-local verification cache.

    Only determined results (verified / false) are stored; an ``unknown``
    result is always re-queried on the next run. A hit is returned
    remapped to the asking claim with ``source=cached``.
    """

    def __init__(
        self,
        ttl_seconds: float = 24 * 3600,
        maxsize: int = 10000,
        timer: Optional[Callable[[], float]] = None,
    ):
        """Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime
            maxsize: Maximum number of entries
            timer: Clock used for expiry, mainly for tests
        """
        if timer is None:
            self._cache: TTLCache = TTLCache(maxsize=maxsize, ttl=ttl_seconds)
        else:
            self._cache = TTLCache(maxsize=maxsize, ttl=ttl_seconds, timer=timer)
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0

    def get(self, claim: Claim) -> Optional[VerificationResult]:
        """Return a cached result for ``claim``, attributed to it, or None."""
        with self._lock:
            cached = self._cache.get(claim.cache_key)
            if cached is None:
                self._misses += 1
                return None
            self._hits += 1
        logger.debug(f"💾 Cache hit for {claim.cache_key}")
        return cached.for_claim(claim.id)

    def put(self, claim: Claim, result: VerificationResult) -> bool:
        """Store ``result`` under the claim's key. Returns whether it was cached."""
        if result.status not in CACHEABLE_STATUSES:
            return False
        with self._lock:
            self._cache[claim.cache_key] = result
        return True

    def clear(self) -> None:
        with self._lock:
            self._cache.clear()
            self._hits = 0
            self._misses = 0

    def __len__(self) -> int:
        with self._lock:
            return len(self._cache)

    def __contains__(self, claim: Claim) -> bool:
        with self._lock:
            return claim.cache_key in self._cache

    @property
    def stats(self) -> Dict[str, int]:
        with self._lock:
            return {
                "size": len(self._cache),
                "maxsize": int(self._cache.maxsize),
                "hits": self._hits,
                "misses": self._misses,
            }
