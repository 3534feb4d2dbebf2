"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from variations.catalog.repository import get_catalog_store
from variations.infrastructure.config import settings

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


class ReadinessResponse(BaseModel):
    """Readiness check response schema."""

    status: str
    products: int
    variations: int


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="variations-api",
        version=settings.api_version,
    )


@router.get("/ready", response_model=ReadinessResponse)
async def readiness_check() -> ReadinessResponse:
    """Check if service is ready to accept requests.

    Returns:
        Readiness status with catalog store counts.
    """
    store = get_catalog_store()
    return ReadinessResponse(
        status="ready",
        products=store.product_count,
        variations=store.variation_count,
    )
