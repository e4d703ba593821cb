"""Tests for the verification cache."""

from fact_gate.domain.models.verification import (
    VerificationResult,
    VerificationSource,
    VerificationStatus,
)
from fact_gate.domain.services.verification_cache import VerificationCache


class FakeTimer:
    def __init__(self):
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


def verified(claim_id: str) -> VerificationResult:
    return VerificationResult(
        claim_id=claim_id,
        status=VerificationStatus.VERIFIED,
        confidence=92,
        source=VerificationSource.WEB_SEARCH,
    )


def test_hit_is_attributed_to_asking_claim(make_claim):
    cache = VerificationCache()
    first = make_claim("경복궁", id="a")
    cache.put(first, verified("a"))

    hit = cache.get(make_claim("경복궁", id="b"))

    assert hit.claim_id == "b"
    assert hit.source == VerificationSource.CACHED
    assert hit.confidence == 92


def test_key_includes_claim_type(make_claim):
    cache = VerificationCache()
    cache.put(make_claim("서울", type="location"), verified("x"))

    assert cache.get(make_claim("서울", type="venue_exists")) is None
    assert make_claim("서울", type="location") in cache


def test_unknown_is_never_cached(make_claim):
    cache = VerificationCache()
    claim = make_claim()
    unknown = VerificationResult(
        claim_id=claim.id,
        status=VerificationStatus.UNKNOWN,
        confidence=0,
        source=VerificationSource.UNKNOWN,
    )

    assert cache.put(claim, unknown) is False
    assert len(cache) == 0


def test_repeated_lookups_are_identical(make_claim):
    cache = VerificationCache()
    cache.put(make_claim("경복궁"), verified("a"))
    asking = make_claim("경복궁", id="b")

    assert cache.get(asking) == cache.get(asking)


def test_entries_expire(make_claim):
    timer = FakeTimer()
    cache = VerificationCache(ttl_seconds=60, timer=timer)
    claim = make_claim("09:00-18:00", type="hours", id="a")
    cache.put(claim, verified("a"))
    timer.now = 61

    assert cache.get(claim) is None


def test_stats_and_clear(make_claim):
    cache = VerificationCache(maxsize=5)
    claim = make_claim()
    cache.get(claim)
    cache.put(claim, verified(claim.id))
    cache.get(claim)

    assert cache.stats == {"size": 1, "maxsize": 5, "hits": 1, "misses": 1}

    cache.clear()
    assert len(cache) == 0
    assert cache.stats["hits"] == 0
