"""Publish validation endpoints."""

import logging
from typing import List

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...domain.errors import ConfigurationError, TerminalSourceError
from ...domain.models.document import ValidationDocument
from ...domain.models.gate import ValidationResult
from ...domain.services.fact_checking_service import FactCheckingService
from ...infrastructure.dependencies import get_fact_checking_service

logger = logging.getLogger(__name__)

router = APIRouter(tags=["validation"])


class ValidateRequest(BaseModel):
    """Request model for validating one or more documents."""

    documents: List[ValidationDocument] = Field(..., description="Documents to validate, in order")
    stop_on_block: bool = Field(False, description="Stop after the first blocked document")


class ValidateResponse(BaseModel):
    """Response model for validation."""

    results: List[ValidationResult]
    blocked: int
    needs_review: int


@router.post("/validate", response_model=ValidateResponse)
async def validate(
    request: ValidateRequest,
    service: FactCheckingService = Depends(get_fact_checking_service),
) -> ValidateResponse:
    """Fact check and gate documents for publishing."""
    try:
        results = await service.validate_documents(
            request.documents, stop_on_block=request.stop_on_block
        )
    except TerminalSourceError as e:
        logger.error(f"❌ Source unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    return ValidateResponse(
        results=results,
        blocked=sum(1 for r in results if r.block_publish),
        needs_review=sum(1 for r in results if r.needs_human_review),
    )
