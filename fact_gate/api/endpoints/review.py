"""Human-review queue endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel

from ...domain.errors import InvalidTransitionError, ReviewCaseNotFoundError
from ...domain.models.review_case import ReviewCase
from ...domain.services.review_queue import HumanReviewQueue
from ...infrastructure.dependencies import get_review_queue

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/review", tags=["review"])


class ReviewDecision(BaseModel):
    """Reviewer verdict payload."""

    note: Optional[str] = None


class CleanupResponse(BaseModel):
    removed: int


@router.get("/pending", response_model=List[ReviewCase])
async def list_pending(queue: HumanReviewQueue = Depends(get_review_queue)) -> List[ReviewCase]:
    """Cases waiting for a decision."""
    return await queue.list_pending()


@router.get("/cases", response_model=List[ReviewCase])
async def list_cases(queue: HumanReviewQueue = Depends(get_review_queue)) -> List[ReviewCase]:
    return await queue.list_cases()


async def _resolve(queue: HumanReviewQueue, case_id: str, approve: bool,
                   note: Optional[str]) -> ReviewCase:
    try:
        if approve:
            return await queue.approve(case_id, note)
        return await queue.reject(case_id, note)
    except ReviewCaseNotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except InvalidTransitionError as e:
        raise HTTPException(status_code=409, detail=str(e))


@router.post("/{case_id}/approve", response_model=ReviewCase)
async def approve_case(
    case_id: str,
    decision: Optional[ReviewDecision] = None,
    queue: HumanReviewQueue = Depends(get_review_queue),
) -> ReviewCase:
    """Approve a pending case; the document may be published."""
    return await _resolve(queue, case_id, True, decision.note if decision else None)


@router.post("/{case_id}/reject", response_model=ReviewCase)
async def reject_case(
    case_id: str,
    decision: Optional[ReviewDecision] = None,
    queue: HumanReviewQueue = Depends(get_review_queue),
) -> ReviewCase:
    """Reject a pending case; the document stays blocked."""
    return await _resolve(queue, case_id, False, decision.note if decision else None)


@router.post("/cleanup", response_model=CleanupResponse)
async def cleanup(queue: HumanReviewQueue = Depends(get_review_queue)) -> CleanupResponse:
    """Drop resolved cases past the retention period."""
    return CleanupResponse(removed=await queue.cleanup())
