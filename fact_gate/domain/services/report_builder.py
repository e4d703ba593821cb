"""Aggregation of verification results into a fact-check report."""

import logging
from decimal import ROUND_HALF_UP, Decimal
from typing import Dict, List, Optional, Sequence

from ..models.claim import Claim, ClaimSeverity
from ..models.config import FactCheckConfig, HumanReviewConfig
from ..models.fact_check_report import (
    CategoryScores,
    ClaimCounts,
    Correction,
    FactCheckReport,
    SeverityBreakdown,
)
from ..models.review_case import ReviewTrigger
from ..models.verification import VerificationResult, VerificationStatus

logger = logging.getLogger(__name__)

DEFAULT_CORRECTION_REASON = "검증 결과 정확하지 않음"


def round_half_up(value: float) -> int:
    """Round to the nearest integer with halves going up, so 12.5 gives 13."""
    return int(Decimal(str(value)).quantize(Decimal("1"), rounding=ROUND_HALF_UP))


def category_score(claims: Sequence[Claim], results_by_id: Dict[str, VerificationResult],
                   severity: ClaimSeverity) -> int:
    """Percentage of ``severity`` claims that verified; 100 when there are none."""
    selected = [c for c in claims if c.severity == severity]
    if not selected:
        return 100
    verified = sum(
        1 for c in selected
        if c.id in results_by_id and results_by_id[c.id].status == VerificationStatus.VERIFIED
    )
    return round_half_up(verified / len(selected) * 100)


def overall_score(scores: CategoryScores, config: FactCheckConfig) -> int:
    """Weighted sum of the category scores."""
    weights = config.weights
    return round_half_up(
        scores.critical * weights.critical
        + scores.major * weights.major
        + scores.minor * weights.minor
    )


def severity_breakdown(claims: Sequence[Claim],
                       results_by_id: Dict[str, VerificationResult]) -> SeverityBreakdown:
    """Tally statuses per severity. Claims without a result count as unknown."""
    breakdown = SeverityBreakdown()
    for claim in claims:
        result = results_by_id.get(claim.id)
        breakdown.for_severity(claim.severity).add(result.status if result else None)
    return breakdown


def build_corrections(claims: Sequence[Claim],
                      results: Sequence[VerificationResult]) -> List[Correction]:
    """Suggested fixes for every false result that names a correct value."""
    claims_by_id = {c.id: c for c in claims}
    corrections = []
    for result in results:
        if result.status != VerificationStatus.FALSE or not result.correct_value:
            continue
        claim = claims_by_id.get(result.claim_id)
        if claim is None:
            continue
        original = claim.source_text
        corrections.append(
            Correction(
                claim_id=claim.id,
                original_text=original,
                suggested_text=original.replace(claim.value, result.correct_value, 1),
                reason=result.details or DEFAULT_CORRECTION_REASON,
                # critical fixes always go through manual review
                auto_applicable=claim.severity != ClaimSeverity.CRITICAL,
            )
        )
    return corrections


class ReportBuilder:
    """Builds fact-check reports and applies the fact-check gate rules."""

    def __init__(
        self,
        config: Optional[FactCheckConfig] = None,
        review: Optional[HumanReviewConfig] = None,
    ):
        self.config = config or FactCheckConfig()
        self.review = review or HumanReviewConfig()

    def build(
        self,
        claims: Sequence[Claim],
        results: Sequence[VerificationResult],
        file_path: Optional[str] = None,
        title: Optional[str] = None,
    ) -> FactCheckReport:
        """Aggregate ``results`` for ``claims`` into a report."""
        if not claims:
            return self.empty_report(file_path=file_path, title=title)

        results_by_id = {r.claim_id: r for r in results}
        scores = CategoryScores(
            critical=category_score(claims, results_by_id, ClaimSeverity.CRITICAL),
            major=category_score(claims, results_by_id, ClaimSeverity.MAJOR),
            minor=category_score(claims, results_by_id, ClaimSeverity.MINOR),
        )
        overall = overall_score(scores, self.config)
        by_severity = severity_breakdown(claims, results_by_id)

        counts = ClaimCounts()
        for claim in claims:
            result = results_by_id.get(claim.id)
            counts.add(result.status if result else None)

        thresholds = self.config.thresholds
        passes_gate = (
            all(scores.for_severity(s) >= thresholds.for_severity(s) for s in ClaimSeverity)
            and overall >= thresholds.overall
        )
        needs_review = self.review.score_range.contains(overall)
        block_publish = overall < thresholds.overall
        trigger: Optional[ReviewTrigger] = None
        if needs_review:
            trigger = ReviewTrigger.SCORE_50_70
        elif counts.total and counts.unknown / counts.total * 100 >= self.review.high_unknown_ratio:
            trigger = ReviewTrigger.HIGH_UNKNOWN

        critical_false = by_severity.critical.false > 0
        if critical_false and self.config.block_on_critical_failure:
            logger.warning(f"🚫 {by_severity.critical.false} critical claim(s) false, blocking publish")
            passes_gate = False
            needs_review = True
            block_publish = True
            trigger = ReviewTrigger.CRITICAL_FALSE

        report = FactCheckReport(
            file_path=file_path,
            title=title,
            overall_score=overall,
            category_scores=scores,
            claims=counts,
            by_severity=by_severity,
            results=list(results),
            extracted_claims=list(claims),
            corrections=build_corrections(claims, results),
            passes_gate=passes_gate,
            needs_human_review=needs_review,
            block_publish=block_publish,
            review_trigger=trigger,
        )
        logger.info(
            f"📊 Fact check {file_path or ''}: score={overall} "
            f"(critical={scores.critical}, major={scores.major}, minor={scores.minor}) "
            f"pass={passes_gate} block={block_publish} review={needs_review}"
        )
        return report

    def empty_report(self, file_path: Optional[str] = None,
                     title: Optional[str] = None) -> FactCheckReport:
        """Report for a document with nothing to check."""
        return FactCheckReport(
            file_path=file_path,
            title=title,
            overall_score=100,
            category_scores=CategoryScores(),
            claims=ClaimCounts(),
            by_severity=SeverityBreakdown(),
            passes_gate=True,
            needs_human_review=False,
            block_publish=False,
        )
