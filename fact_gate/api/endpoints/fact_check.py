"""Fact-checking API endpoints."""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, Field

from ...domain.errors import ConfigurationError, TerminalSourceError
from ...domain.models.claim import Claim
from ...domain.models.fact_check_report import FactCheckReport
from ...domain.services.fact_checking_service import FactCheckingService
from ...infrastructure.dependencies import get_fact_checking_service

# Configure logging
logger = logging.getLogger(__name__)

router = APIRouter(tags=["fact-check"])


class FactCheckRequest(BaseModel):
    """Request model for fact checking pre-extracted claims."""

    claims: List[Claim] = Field(..., description="Claims to verify")
    file_path: Optional[str] = Field(None, description="Document path, for the report")
    title: Optional[str] = Field(None, description="Document title, for the report")


@router.post("/fact-check", response_model=FactCheckReport)
async def fact_check(
    request: FactCheckRequest,
    service: FactCheckingService = Depends(get_fact_checking_service),
) -> FactCheckReport:
    """Verify claims and return the aggregated report.

    Raises:
        HTTPException: 503 when a source fails terminally, 500 on
            configuration errors
    """
    logger.info(f"🔍 Fact-check request with {len(request.claims)} claims")
    try:
        return await service.fact_check(
            request.claims, file_path=request.file_path, title=request.title
        )
    except TerminalSourceError as e:
        logger.error(f"❌ Source unavailable: {e}")
        raise HTTPException(status_code=503, detail=str(e))
    except ConfigurationError as e:
        logger.error(f"❌ Configuration error: {e}")
        raise HTTPException(status_code=500, detail=str(e))
