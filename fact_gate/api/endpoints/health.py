"""Health check endpoints."""

from typing import Dict

from fastapi import APIRouter, Depends
from pydantic import BaseModel

from ...infrastructure.dependencies import ServiceContainer, get_service_container

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response model."""

    status: str
    version: str
    providers: Dict[str, bool]


@router.get("/health", response_model=HealthResponse)
async def health_check(
    container: ServiceContainer = Depends(get_service_container),
) -> HealthResponse:
    """Check service health and which verification sources are available."""
    providers = container.provider_status()
    return HealthResponse(
        status="healthy" if providers.get("grounded_search") else "degraded",
        version="1.0.0",
        providers=providers,
    )
