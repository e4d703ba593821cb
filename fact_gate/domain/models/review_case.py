"""Domain models for human-review cases."""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import Field, field_validator

from .base import DomainModel


class ReviewTrigger(str, Enum):
    """Why a document was routed to manual review.

    Declaration order is priority order, highest first.
    """

    CRITICAL_FALSE = "critical_false"  # Critical claim resolved false
    SCORE_50_70 = "score_50_70"  # Score inside the review band
    HIGH_UNKNOWN = "high_unknown"  # Too many unresolved claims
    SENSITIVE_TOPIC = "sensitive_topic"
    NEW_VENUE = "new_venue"  # Venue the registry does not know yet
    NEGATIVE_FEEDBACK = "negative_feedback"
    MANUAL_FLAG = "manual_flag"

    @property
    def priority(self) -> int:
        return list(ReviewTrigger).index(self)

    @property
    def action(self) -> "ReviewAction":
        if self == ReviewTrigger.CRITICAL_FALSE:
            return ReviewAction.BLOCK
        if self in (ReviewTrigger.SCORE_50_70, ReviewTrigger.HIGH_UNKNOWN):
            return ReviewAction.QUEUE
        return ReviewAction.FLAG


class ReviewAction(str, Enum):
    """What the queue does with a case."""

    FLAG = "flag"
    QUEUE = "queue"
    NOTIFY = "notify"
    BLOCK = "block"


class ReviewStatus(str, Enum):
    """Lifecycle status of a review case."""

    PENDING = "pending"
    APPROVED = "approved"
    REJECTED = "rejected"


class ReviewCase(DomainModel):
    """A document waiting for (or resolved by) manual adjudication."""

    id: str
    file_path: str
    title: str = "Untitled"
    trigger: ReviewTrigger
    action: ReviewAction
    score: float = Field(..., ge=0, le=100)
    details: str = ""
    status: ReviewStatus = ReviewStatus.PENDING
    created_at: datetime = Field(default_factory=datetime.utcnow)
    reviewed_at: Optional[datetime] = None
    reviewer_note: Optional[str] = None

    @property
    def is_pending(self) -> bool:
        return self.status == ReviewStatus.PENDING

    @field_validator("created_at", "reviewed_at", mode="after")
    @classmethod
    def _naive_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # queue files written elsewhere carry a trailing "Z"
        if value is not None and value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
