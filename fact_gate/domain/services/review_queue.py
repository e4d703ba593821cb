"""Human-review queue service."""

import logging
import secrets
import string
import time
from datetime import datetime, timedelta
from typing import List, Optional

from ..errors import InvalidTransitionError, ReviewCaseNotFoundError
from ..models.review_case import ReviewCase, ReviewStatus, ReviewTrigger
from ..ports.review_store import ReviewQueueStore

logger = logging.getLogger(__name__)

_ID_ALPHABET = string.ascii_lowercase + string.digits


def generate_case_id() -> str:
    """``review-<epoch ms>-<6 random chars>``."""
    suffix = "".join(secrets.choice(_ID_ALPHABET) for _ in range(6))
    return f"review-{int(time.time() * 1000)}-{suffix}"


class HumanReviewQueue:
    """Queue of documents waiting for a human decision.

    A file has at most one pending case; filing again replaces it in place
    and keeps its id.
    """

    def __init__(self, store: ReviewQueueStore, retention_days: int = 30):
        """Initialize the queue.

        Args:
            store: Case persistence
            retention_days: Age after which resolved cases are dropped
        """
        self.store = store
        self.retention_days = retention_days

    async def add_case(
        self,
        file_path: str,
        title: str,
        trigger: ReviewTrigger,
        score: float,
        details: str = "",
    ) -> ReviewCase:
        """File (or refresh) the pending case for ``file_path``."""

        def mutate(cases: List[ReviewCase]) -> ReviewCase:
            existing = next(
                (i for i, c in enumerate(cases) if c.file_path == file_path and c.is_pending),
                None,
            )
            case = ReviewCase(
                id=cases[existing].id if existing is not None else generate_case_id(),
                file_path=file_path,
                title=title,
                trigger=trigger,
                action=trigger.action,
                score=max(0.0, min(100.0, score)),
                details=details,
            )
            if existing is not None:
                cases[existing] = case
            else:
                cases.append(case)
            return case

        case = await self.store.update(mutate)
        logger.info(f"📝 Review case {case.id} for {file_path}: {trigger.value} ({case.action.value})")
        return case

    async def list_pending(self) -> List[ReviewCase]:
        return [c for c in await self.store.load() if c.is_pending]

    async def list_cases(self) -> List[ReviewCase]:
        return await self.store.load()

    async def get_case(self, case_id: str) -> ReviewCase:
        """Return the case with ``case_id``.

        Raises:
            ReviewCaseNotFoundError: If there is no such case
        """
        for case in await self.store.load():
            if case.id == case_id:
                return case
        raise ReviewCaseNotFoundError(case_id)

    async def get_case_by_file(self, file_path: str) -> Optional[ReviewCase]:
        """Pending case for ``file_path`` if any, otherwise the latest one."""
        matches = [c for c in await self.store.load() if c.file_path == file_path]
        if not matches:
            return None
        pending = [c for c in matches if c.is_pending]
        return pending[0] if pending else matches[-1]

    async def update_case(
        self,
        case_id: str,
        status: ReviewStatus,
        note: Optional[str] = None,
    ) -> ReviewCase:
        """Resolve a pending case.

        Raises:
            ReviewCaseNotFoundError: If there is no such case
            InvalidTransitionError: If the case is no longer pending
        """
        if status == ReviewStatus.PENDING:
            raise InvalidTransitionError("cannot move a review case back to pending")

        def mutate(cases: List[ReviewCase]) -> ReviewCase:
            for i, case in enumerate(cases):
                if case.id != case_id:
                    continue
                if not case.is_pending:
                    raise InvalidTransitionError(
                        f"review case {case_id} is already {case.status.value}"
                    )
                update = {"status": status, "reviewed_at": datetime.utcnow()}
                if note:
                    update["reviewer_note"] = note
                cases[i] = case.model_copy(update=update)
                return cases[i]
            raise ReviewCaseNotFoundError(case_id)

        case = await self.store.update(mutate)
        logger.info(f"👤 Review case {case_id} -> {status.value}")
        return case

    async def approve(self, case_id: str, note: Optional[str] = None) -> ReviewCase:
        return await self.update_case(case_id, ReviewStatus.APPROVED, note)

    async def reject(self, case_id: str, note: Optional[str] = None) -> ReviewCase:
        return await self.update_case(case_id, ReviewStatus.REJECTED, note)

    async def cleanup(self, now: Optional[datetime] = None) -> int:
        """Drop resolved cases older than the retention period.

        Pending cases are kept regardless of age.

        Returns:
            Number of cases removed
        """
        cutoff = (now or datetime.utcnow()) - timedelta(days=self.retention_days)

        def mutate(cases: List[ReviewCase]) -> int:
            keep = [c for c in cases if c.is_pending or c.created_at > cutoff]
            removed = len(cases) - len(keep)
            cases[:] = keep
            return removed

        removed = await self.store.update(mutate)
        if removed:
            logger.info(f"🧹 Removed {removed} resolved review cases older than {self.retention_days} days")
        return removed
