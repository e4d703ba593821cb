"""Service coordinating verification, reporting and the publish decision."""

import logging
from typing import List, Optional, Sequence

from ..errors import ConfigurationError, TerminalSourceError
from ..models.claim import Claim
from ..models.config import QualityGatesConfig
from ..models.document import ValidationDocument
from ..models.fact_check_report import FactCheckReport
from ..models.gate import GateName, ValidationResult
from ..models.lifecycle import DocumentLifecycle, DocumentState
from ..models.review_case import ReviewStatus
from .gate_policy import GateDecisionPolicy
from .report_builder import ReportBuilder
from .review_queue import HumanReviewQueue
from .verification_engine import ProgressCallback, VerificationEngine

logger = logging.getLogger(__name__)


class FactCheckingService:
    """Service for fact checking documents and gating their publication."""

    def __init__(
        self,
        engine: VerificationEngine,
        config: Optional[QualityGatesConfig] = None,
        review_queue: Optional[HumanReviewQueue] = None,
    ):
        """Initialize the service.

        Args:
            engine: Verification engine with its sources and cache
            config: Quality gate configuration
            review_queue: Queue receiving documents that need a human decision
        """
        self.engine = engine
        self.config = config or QualityGatesConfig()
        self.review_queue = review_queue
        self.report_builder = ReportBuilder(self.config.factcheck, self.config.human_review)
        self.policy = GateDecisionPolicy(self.config, review_queue)
        logger.info("🔧 FactCheckingService initialized")

    async def fact_check(
        self,
        claims: Sequence[Claim],
        file_path: Optional[str] = None,
        title: Optional[str] = None,
        on_progress: Optional[ProgressCallback] = None,
    ) -> FactCheckReport:
        """Verify ``claims`` and aggregate them into a report.

        Raises:
            ConfigurationError: If claims need checking but no grounded
                search provider is configured
            TerminalSourceError: If a source fails in a way retrying cannot fix
        """
        if not claims:
            logger.info(f"📭 No claims in {file_path or 'document'}, nothing to verify")
            return self.report_builder.empty_report(file_path=file_path, title=title)

        if not self.engine.has_search:
            raise ConfigurationError(
                "GEMINI_API_KEY is not set; grounded search is required to fact check claims"
            )

        logger.info(f"🔍 Fact checking {len(claims)} claims in {file_path or 'document'}")
        results = await self.engine.verify_batch(claims, on_progress=on_progress)
        return self.report_builder.build(claims, results, file_path=file_path, title=title)

    async def fact_check_documents(
        self,
        documents: Sequence[ValidationDocument],
        stop_on_block: bool = False,
    ) -> List[FactCheckReport]:
        """Fact check several documents in order.

        With ``stop_on_block`` the run halts after the first report that
        blocks publishing. Terminal errors propagate; any other failure is
        logged and the document skipped.
        """
        reports: List[FactCheckReport] = []
        for document in documents:
            try:
                report = await self.fact_check(
                    document.claims, file_path=document.file_path, title=document.title
                )
            except (TerminalSourceError, ConfigurationError):
                raise
            except Exception as e:
                logger.error(f"❌ Fact check failed for {document.file_path}: {e}", exc_info=True)
                continue

            reports.append(report)
            if stop_on_block and report.block_publish:
                logger.warning(f"🛑 Stopping after blocked document {document.file_path}")
                break
        return reports

    async def validate(self, document: ValidationDocument) -> ValidationResult:
        """Run the full pipeline for one document and decide its fate."""
        lifecycle = DocumentLifecycle(document.file_path)
        # claims arrive pre-extracted
        lifecycle.transition(DocumentState.EXTRACTING)
        lifecycle.transition(DocumentState.VERIFYING)

        report = await self.fact_check(
            document.claims, file_path=document.file_path, title=document.title
        )
        lifecycle.transition(DocumentState.AGGREGATING)

        fact_check_gate = report.to_gate(
            threshold=self.config.factcheck.thresholds.overall,
            block_on_failure=self.config.factcheck.block_on_failure,
        )
        gates = [fact_check_gate] + [g for g in document.gates if g.name != GateName.FACTCHECK]
        lifecycle.transition(DocumentState.DECIDING)

        result = await self.policy.decide(
            gates,
            file_path=document.file_path,
            title=document.title,
            fact_check_report=report,
            content=document.content,
        )
        lifecycle.transition(result.state)

        for correction in report.corrections:
            if not correction.auto_applicable:
                result.warnings.append(
                    f"[manual fix] {correction.original_text} -> {correction.suggested_text}"
                )
        return result

    async def validate_documents(
        self,
        documents: Sequence[ValidationDocument],
        stop_on_block: bool = False,
    ) -> List[ValidationResult]:
        """Validate several documents in order.

        A document that fails for a non-terminal reason is reported as
        blocked with the error attached.
        """
        results: List[ValidationResult] = []
        for document in documents:
            try:
                result = await self.validate(document)
            except (TerminalSourceError, ConfigurationError):
                raise
            except Exception as e:
                logger.error(f"❌ Validation failed for {document.file_path}: {e}", exc_info=True)
                result = ValidationResult(
                    file_path=document.file_path,
                    title=document.title,
                    overall_passed=False,
                    block_publish=True,
                    needs_human_review=False,
                    state=DocumentState.BLOCKED,
                    errors=[f"검증 오류: {e}"],
                )

            results.append(result)
            if stop_on_block and result.block_publish:
                logger.warning(f"🛑 Stopping after blocked document {document.file_path}")
                break
        return results

    async def resolve_review(
        self,
        case_id: str,
        approve: bool,
        note: Optional[str] = None,
    ) -> DocumentState:
        """Record a reviewer's verdict and return the document's final state.

        Raises:
            ConfigurationError: If no review queue is configured
            ReviewCaseNotFoundError: If there is no such case
            InvalidTransitionError: If the case was already resolved
        """
        if self.review_queue is None:
            raise ConfigurationError("No review queue configured")

        status = ReviewStatus.APPROVED if approve else ReviewStatus.REJECTED
        case = await self.review_queue.update_case(case_id, status, note)

        lifecycle = DocumentLifecycle(case.file_path, DocumentState.QUEUED_FOR_REVIEW)
        return lifecycle.transition(
            DocumentState.PUBLISHED if approve else DocumentState.BLOCKED
        )
