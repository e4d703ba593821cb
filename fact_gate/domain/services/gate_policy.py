"""Publish decision over the full set of quality gates."""

import logging
from typing import TYPE_CHECKING, List, Optional, Sequence, Tuple

from ..models.claim import ClaimType
from ..models.config import QualityGatesConfig
from ..models.fact_check_report import FactCheckReport
from ..models.gate import Gate, GateName, ValidationResult
from ..models.lifecycle import DocumentState
from ..models.review_case import ReviewTrigger
from ..models.verification import VerificationSource, VerificationStatus

if TYPE_CHECKING:
    from .review_queue import HumanReviewQueue

logger = logging.getLogger(__name__)

# Tuned for a travel/culture blog: specific phrases only
SENSITIVE_KEYWORDS = (
    "정치적 논란", "정부 비판", "정치 갈등",
    "종교 갈등", "종교 분쟁",
    "심각한 사고", "재난 발생", "폐쇄 조치",
)


def is_sensitive_topic(content: Optional[str]) -> bool:
    if not content:
        return False
    normalized = content.lower()
    return any(keyword in normalized for keyword in SENSITIVE_KEYWORDS)


def has_new_venue(report: Optional[FactCheckReport]) -> bool:
    """A venue the registry answered for but has no record of."""
    if report is None:
        return False
    venue_ids = {c.id for c in report.extracted_claims if c.type == ClaimType.VENUE_EXISTS}
    return any(
        r.claim_id in venue_ids
        and r.status == VerificationStatus.UNKNOWN
        and r.source == VerificationSource.OFFICIAL_API
        for r in report.results
    )


class GateDecisionPolicy:
    """Combines gate results into a publish decision.

    ``evaluate`` is pure. ``decide`` additionally files a review case when
    the document needs a human decision.
    """

    def __init__(
        self,
        config: Optional[QualityGatesConfig] = None,
        review_queue: Optional["HumanReviewQueue"] = None,
    ):
        self.config = config or QualityGatesConfig()
        self.review_queue = review_queue

    def _active_gates(self, gates: Sequence[Gate]) -> List[Gate]:
        active = []
        for gate in gates:
            if gate.name != GateName.FACTCHECK and not self.config.gate_config(gate.name).enabled:
                logger.debug(f"⏭️ Gate {gate.name.value} disabled, ignoring")
                continue
            active.append(gate)
        return active

    def review_signal(
        self,
        gates: Sequence[Gate],
        mean_score: float,
        fact_check_report: Optional[FactCheckReport] = None,
        content: Optional[str] = None,
        is_new_venue: Optional[bool] = None,
    ) -> Tuple[bool, Optional[ReviewTrigger]]:
        """Whether a human must look at the document, and why.

        When several conditions hold, the highest-priority trigger wins.
        """
        review = self.config.human_review
        candidates: List[ReviewTrigger] = []

        if fact_check_report is not None and fact_check_report.by_severity.critical.false > 0:
            candidates.append(ReviewTrigger.CRITICAL_FALSE)
        if review.score_range.contains(mean_score):
            candidates.append(ReviewTrigger.SCORE_50_70)
        if fact_check_report is not None and fact_check_report.claims.total:
            if fact_check_report.unknown_ratio >= review.high_unknown_ratio:
                candidates.append(ReviewTrigger.HIGH_UNKNOWN)
        if is_sensitive_topic(content):
            candidates.append(ReviewTrigger.SENSITIVE_TOPIC)
        new_venue = has_new_venue(fact_check_report) if is_new_venue is None else is_new_venue
        if new_venue:
            candidates.append(ReviewTrigger.NEW_VENUE)
        for gate in gates:
            if gate.needs_human_review:
                candidates.append(gate.review_trigger or ReviewTrigger.MANUAL_FLAG)

        if not candidates:
            return False, None
        return True, min(candidates, key=lambda t: t.priority)

    def evaluate(
        self,
        gates: Sequence[Gate],
        file_path: Optional[str] = None,
        title: Optional[str] = None,
        fact_check_report: Optional[FactCheckReport] = None,
        content: Optional[str] = None,
        is_new_venue: Optional[bool] = None,
    ) -> ValidationResult:
        """Decide publish / review / block for a set of gate results."""
        active = self._active_gates(gates)
        requirements = self.config.publish_requirements

        required = [g for g in active if g.name in requirements.required_gates]
        required_passed = all(g.passed for g in required)
        blocking = [g for g in active if g.is_blocking_failure]
        block_publish = bool(blocking)
        overall_passed = required_passed and not block_publish

        warnings: List[str] = []
        for gate in active:
            if gate.name in requirements.warning_gates and not gate.passed:
                warnings.extend(gate.warnings)

        mean = sum(g.score for g in active) / len(active) if active else 100.0
        needs_review, trigger = self.review_signal(
            active, mean,
            fact_check_report=fact_check_report,
            content=content,
            is_new_venue=is_new_venue,
        )

        if block_publish:
            state = DocumentState.BLOCKED
        elif needs_review:
            state = DocumentState.QUEUED_FOR_REVIEW
        else:
            state = DocumentState.PUBLISHED

        result = ValidationResult(
            file_path=file_path,
            title=title,
            gates=list(active),
            overall_passed=overall_passed,
            block_publish=block_publish,
            needs_human_review=needs_review,
            review_trigger=trigger,
            blocking_gates=[g.name for g in blocking],
            state=state,
            fact_check_report=fact_check_report,
            warnings=warnings,
        )
        if block_publish:
            logger.warning(
                f"🚫 {file_path or 'document'} blocked by: "
                f"{', '.join(g.name.value for g in blocking)}"
            )
        else:
            logger.info(
                f"✅ {file_path or 'document'}: passed={overall_passed} "
                f"review={needs_review} ({trigger.value if trigger else '-'})"
            )
        return result

    async def decide(
        self,
        gates: Sequence[Gate],
        file_path: Optional[str] = None,
        title: Optional[str] = None,
        fact_check_report: Optional[FactCheckReport] = None,
        content: Optional[str] = None,
        is_new_venue: Optional[bool] = None,
    ) -> ValidationResult:
        """Evaluate and, when review is needed, append a review case."""
        result = self.evaluate(
            gates,
            file_path=file_path,
            title=title,
            fact_check_report=fact_check_report,
            content=content,
            is_new_venue=is_new_venue,
        )
        if not result.needs_human_review or result.review_trigger is None:
            return result
        if self.review_queue is None:
            logger.warning("⚠️ Review needed but no review queue configured")
            return result

        details = ", ".join(f"{g.name.value}: {g.score}%" for g in result.gates if not g.passed)
        case = await self.review_queue.add_case(
            file_path=file_path or "<memory>",
            title=title or "Untitled",
            trigger=result.review_trigger,
            score=result.mean_score,
            details=details,
        )
        return result.model_copy(update={"review_case_id": case.id})
