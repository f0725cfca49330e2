"""Health check endpoints.

Provides endpoints for monitoring service health and readiness.
"""

from typing import Annotated

import structlog
from fastapi import APIRouter, Depends, status
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from catalogadmin.api.dependencies import get_service
from catalogadmin.catalog.service import CatalogService
from catalogadmin.domain.exceptions import FetchError
from catalogadmin.infrastructure.config import settings

logger = structlog.get_logger()

router = APIRouter()


class HealthResponse(BaseModel):
    """Health check response schema."""

    status: str
    service: str
    version: str


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Check service health.

    Returns:
        Health status with service name and version.
    """
    return HealthResponse(
        status="healthy",
        service="catalog-admin",
        version=settings.api_version,
    )


@router.get("/ready", response_model=None)
async def readiness_check(
    service: Annotated[CatalogService, Depends(get_service)],
) -> dict[str, str] | JSONResponse:
    """Check if the document store answers queries.

    Returns:
        Readiness status, 503 when the store is unreachable.
    """
    try:
        await service.products.count()
    except FetchError as e:
        logger.warning("Readiness check failed", error=e.message)
        return JSONResponse(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            content={"status": "unavailable"},
        )
    return {"status": "ready"}
