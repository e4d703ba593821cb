"""Domain model for aggregated fact-check reports."""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import Field

from .base import DomainModel
from .claim import Claim, ClaimSeverity
from .review_case import ReviewTrigger
from .verification import VerificationResult, VerificationStatus


class ClaimCounts(DomainModel):
    """Claim tallies by verification status."""

    total: int = 0
    verified: int = 0
    false: int = 0
    unknown: int = 0

    def add(self, status: Optional[VerificationStatus]) -> None:
        self.total += 1
        if status == VerificationStatus.VERIFIED:
            self.verified += 1
        elif status == VerificationStatus.FALSE:
            self.false += 1
        else:
            self.unknown += 1


class SeverityBreakdown(DomainModel):
    """Claim tallies per severity."""

    critical: ClaimCounts = Field(default_factory=ClaimCounts)
    major: ClaimCounts = Field(default_factory=ClaimCounts)
    minor: ClaimCounts = Field(default_factory=ClaimCounts)

    def for_severity(self, severity: ClaimSeverity) -> ClaimCounts:
        return getattr(self, severity.value)


class CategoryScores(DomainModel):
    """Per-severity scores, 0-100."""

    critical: int = Field(100, ge=0, le=100)
    major: int = Field(100, ge=0, le=100)
    minor: int = Field(100, ge=0, le=100)

    def for_severity(self, severity: ClaimSeverity) -> int:
        return getattr(self, severity.value)


class Correction(DomainModel):
    """Suggested fix for a claim that resolved false."""

    claim_id: str
    original_text: str
    suggested_text: str
    reason: str
    auto_applicable: bool


class FailingClaim(DomainModel):
    """A false claim with its expected-vs-actual values, for block reports."""

    claim_id: str
    severity: ClaimSeverity
    claimed_value: str
    correct_value: Optional[str] = None
    details: Optional[str] = None


class FactCheckReport(DomainModel):
    """Result of fact checking one document."""

    file_path: Optional[str] = None
    title: Optional[str] = None
    checked_at: datetime = Field(default_factory=datetime.utcnow)

    overall_score: int = Field(..., ge=0, le=100)
    category_scores: CategoryScores
    claims: ClaimCounts
    by_severity: SeverityBreakdown

    results: List[VerificationResult] = Field(default_factory=list)
    extracted_claims: List[Claim] = Field(default_factory=list)
    corrections: List[Correction] = Field(default_factory=list)

    passes_gate: bool
    needs_human_review: bool
    block_publish: bool
    review_trigger: Optional[ReviewTrigger] = None

    version: str = "1.0.0"

    def failing_claims(self) -> List[FailingClaim]:
        """Claims that resolved false, most severe first."""
        claims_by_id: Dict[str, Claim] = {c.id: c for c in self.extracted_claims}
        failing = []
        for result in self.results:
            if result.status != VerificationStatus.FALSE:
                continue
            claim = claims_by_id.get(result.claim_id)
            if claim is None:
                continue
            failing.append(
                FailingClaim(
                    claim_id=claim.id,
                    severity=claim.severity,
                    claimed_value=claim.value,
                    correct_value=result.correct_value,
                    details=result.details,
                )
            )
        failing.sort(key=lambda f: f.severity.priority)
        return failing

    @property
    def unknown_ratio(self) -> float:
        """Percentage of claims left unresolved."""
        if self.claims.total == 0:
            return 0.0
        return self.claims.unknown / self.claims.total * 100

    def to_gate(self, threshold: int, block_on_failure: bool = True):
        """Convert the report into the ``factcheck`` gate.

        ``passed`` follows ``passes_gate``, which already folds in the
        per-severity thresholds and the critical override.
        """
        from .gate import Gate, GateName

        details = (
            f"{self.claims.verified}/{self.claims.total} verified, "
            f"{self.claims.false} false, {self.claims.unknown} unknown"
        )
        warnings = [
            f"[{f.severity.value}] {f.claimed_value} -> {f.correct_value or '?'}"
            for f in self.failing_claims()
        ]
        return Gate(
            name=GateName.FACTCHECK,
            score=self.overall_score,
            passed=self.passes_gate,
            threshold=threshold,
            block_on_failure=block_on_failure or self.block_publish,
            details=details,
            warnings=warnings,
            needs_human_review=self.needs_human_review,
            review_trigger=self.review_trigger,
        )
